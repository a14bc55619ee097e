# sleepquest/main.py
# -*- coding: utf-8 -*-
# --- bootstrap import path (run as script via streamlit) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# -----------------------------------------------------------
import datetime as dt
import streamlit as st

from sleepquest.config import configure_logging, load_settings
from sleepquest.persistence.db import init_db
from sleepquest.persistence.errors import StoreError
from sleepquest.persistence.models import Base
from sleepquest.services.badge_engine import get_definition
from sleepquest.services.score_engine import Feeling, ValidationError, interpret_score
from sleepquest.services.sleep_service import SleepService

# ---------------------------------------------------------------------
# Bootstrapping
# ---------------------------------------------------------------------
configure_logging()
settings = load_settings()
init_db(Base, drop_and_recreate=False)
service = SleepService()

st.set_page_config(page_title="SleepQuest", page_icon="🌙", layout="centered")

# ---------------------------------------------------------------------
# Sidebar – Sélection / création utilisateur
# ---------------------------------------------------------------------
st.sidebar.title("👤 Utilisateur")
email = st.sidebar.text_input("Email", value=settings.default_email, help="Créé s'il n'existe pas")

if st.sidebar.button("Charger/Créer l'utilisateur"):
    u = service.users.get_or_create(email)
    st.session_state["user_id"] = u.id
    st.session_state["user_email"] = u.email
    st.sidebar.success(f"OK : {u.email} (id={u.id})")

# état par défaut au premier chargement
if "user_id" not in st.session_state:
    u = service.users.get_or_create(settings.default_email)
    st.session_state["user_id"] = u.id
    st.session_state["user_email"] = u.email

user_id = st.session_state["user_id"]
st.caption(f"Connecté en tant que **{st.session_state['user_email']}** (id={user_id})")

# ---------------------------------------------------------------------
# KPIs
# ---------------------------------------------------------------------
st.title("🌙 SleepQuest — Journal de sommeil")

stats = service.stats(user_id)
col1, col2, col3, col4 = st.columns(4)
col1.metric("Nuits", stats.total_nights)
col2.metric("Score moyen", f"{stats.average_score:.1f}")
col3.metric("Série en cours", stats.current_streak)
col4.metric("Meilleure série", stats.best_streak)

# ---------------------------------------------------------------------
# Formulaire de saisie
# ---------------------------------------------------------------------
with st.form("night_form", clear_on_submit=False):
    col1, col2 = st.columns(2)
    with col1:
        date = st.date_input("Nuit du", value=dt.date.today())
        bedtime = st.text_input("Coucher (HH:MM)", value="23:00")
        waketime = st.text_input("Réveil (HH:MM)", value="07:00")
    with col2:
        quality = st.slider("Qualité ressentie", min_value=1, max_value=10, value=5, step=1)
        feeling = st.selectbox("Au réveil", options=[f.value for f in Feeling], index=2)
    submitted = st.form_submit_button("Enregistrer la nuit")

if submitted:
    try:
        entry = service.log_night(user_id, date, bedtime, waketime, quality, feeling)
    except ValidationError as e:
        st.warning(f"Saisie à corriger : {e}")
    except StoreError as e:
        st.error(f"Enregistrement impossible, réessaie plus tard ({e})")
    else:
        st.success(f"✅ Enregistré pour {entry.date.isoformat()} — {entry.duration:.1f} h, score = {entry.score}")
        st.info(interpret_score(entry.score))

        report = service.refresh_badges(user_id)
        for badge_id in report.newly_earned:
            badge = get_definition(badge_id)
            st.balloons()
            st.success(f"{badge.icon} Nouveau badge : **{badge.name}** — {badge.description}")
