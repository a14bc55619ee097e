# sleepquest/pages/leaderboard.py
# -*- coding: utf-8 -*-

# --- bootstrap import path (page streamlit dans sleepquest/pages) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# -------------------------------------------------------------

import pandas as pd
import streamlit as st

from sleepquest.config import load_settings
from sleepquest.persistence.db import init_db
from sleepquest.persistence.errors import StoreError
from sleepquest.persistence.models import Base
from sleepquest.services.leaderboard import rank_of
from sleepquest.services.score_engine import ValidationError
from sleepquest.services.sleep_service import SleepService

init_db(Base, drop_and_recreate=False)
service = SleepService()

st.set_page_config(page_title="Classement — SleepQuest", page_icon="🏆", layout="centered")
st.title("🏆 Classement entre amis")

if "user_id" not in st.session_state:
    u = service.users.get_or_create(load_settings().default_email)
    st.session_state["user_id"] = u.id
    st.session_state["user_email"] = u.email
user_id = st.session_state["user_id"]

# --- Amis ---
with st.sidebar:
    st.subheader("👥 Amis")
    with st.form("add_friend", clear_on_submit=True):
        email = st.text_input("Email d'un ami")
        if st.form_submit_button("Ajouter") and email.strip():
            friend = service.users.get_by_email(email)
            if friend is None:
                st.warning(f"Utilisateur inconnu : {email}")
            else:
                try:
                    service.friends.add(user_id, friend.id)
                    st.success(f"{friend.display_name} ajouté(e)")
                except ValidationError as e:
                    st.warning(str(e))
                except StoreError as e:
                    st.error(f"Erreur base de données : {e}")

    friend_ids = service.friends.list_friend_ids(user_id)
    names = service.users.display_names(friend_ids)
    for fid in friend_ids:
        c1, c2 = st.columns([3, 1])
        c1.write(names.get(fid, f"#{fid}"))
        if c2.button("✖", key=f"rm_{fid}", help="Retirer"):
            service.friends.remove(user_id, fid)
            st.rerun()

rows = service.leaderboard_for(user_id)
if len(rows) == 1:
    st.info("Ajoute des amis (barre latérale) pour te comparer à eux.")

rank = rank_of(rows, user_id)
st.metric("Ton rang", f"#{rank}", help=f"sur {len(rows)} participant(s)")

df = pd.DataFrame([{
    "rang": i,
    "nom": r.name,
    "score": r.score,
    "série": r.current_streak,
    "dernière nuit (h)": r.last_duration,
} for i, r in enumerate(rows, start=1)])
st.dataframe(df, use_container_width=True, hide_index=True)
