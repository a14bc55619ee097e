# sleepquest/pages/history.py
# -*- coding: utf-8 -*-

# --- bootstrap import path (page streamlit dans sleepquest/pages) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# -------------------------------------------------------------

import pandas as pd
import streamlit as st
import altair as alt

from sleepquest.config import load_settings
from sleepquest.persistence.db import init_db
from sleepquest.persistence.errors import NotFoundError, StoreError
from sleepquest.persistence.models import Base
from sleepquest.services.score_engine import Feeling, ValidationError
from sleepquest.services.sleep_service import SleepService
from sleepquest.services.trends import compute_trend, group_by_month, monthly_series, weekly_series

# Boot DB
init_db(Base, drop_and_recreate=False)
service = SleepService()

st.set_page_config(page_title="Historique — SleepQuest", page_icon="📜", layout="wide")
st.title("📜 Historique & progression")

# User courant ou fallback
if "user_id" not in st.session_state:
    u = service.users.get_or_create(load_settings().default_email)
    st.session_state["user_id"] = u.id
    st.session_state["user_email"] = u.email
user_id = st.session_state["user_id"]

entries = service.history(user_id)
if not entries:
    st.info("Aucune nuit enregistrée pour l'instant.")
    st.stop()

# --- Graphique de progression ---
col1, col2 = st.columns(2)
with col1:
    view = st.radio("Vue", options=["Semaine", "Mois"], horizontal=True)
with col2:
    metric = st.radio("Donnée", options=["score", "hours", "quality"], horizontal=True,
                      format_func=lambda m: {"score": "Score", "hours": "Heures", "quality": "Qualité"}[m])

series = weekly_series(entries, metric) if view == "Semaine" else monthly_series(entries, metric)
df_chart = pd.DataFrame(series, columns=["label", "valeur"]).reset_index()

chart = (
    alt.Chart(df_chart)
    .mark_line(point=True)
    .encode(
        x=alt.X("label:N", title="", sort=alt.SortField("index")),
        y=alt.Y("valeur:Q", title=metric),
        tooltip=["label:N", alt.Tooltip("valeur:Q", format=".1f")],
    )
    .properties(height=280)
)
st.altair_chart(chart, use_container_width=True)

trend = compute_trend([v for _, v in series])
arrow = {"up": "📈", "down": "📉", "neutral": "➡️"}[trend.direction]
st.metric("Tendance", f"{arrow} {trend.percentage:.1f} %", help="3 derniers points vs les 3 précédents")

# --- Historique par mois ---
for month, month_entries in group_by_month(entries).items():
    st.subheader(month)
    df = pd.DataFrame([{
        "id": e.id,
        "date": e.date,
        "coucher": e.bedtime,
        "réveil": e.waketime,
        "durée (h)": round(e.duration, 1),
        "qualité": e.quality_rating,
        "ressenti": e.feeling,
        "score": e.score,
    } for e in month_entries])
    st.dataframe(df, use_container_width=True, hide_index=True)

def _label(entry_id: int) -> str:
    return next(e.date.isoformat() for e in entries if e.id == entry_id)


# --- Modification ---
with st.expander("Modifier une nuit"):
    edit_id = st.selectbox("Nuit à modifier", options=[e.id for e in entries], format_func=_label, key="edit_id")
    current = next(e for e in entries if e.id == edit_id)
    feelings = [f.value for f in Feeling]
    with st.form(f"edit_form_{edit_id}"):
        c1, c2 = st.columns(2)
        with c1:
            new_date = st.date_input("Nuit du", value=current.date)
            new_bed = st.text_input("Coucher (HH:MM)", value=current.bedtime)
            new_wake = st.text_input("Réveil (HH:MM)", value=current.waketime)
        with c2:
            new_quality = st.slider("Qualité ressentie", min_value=1, max_value=10, value=current.quality_rating)
            new_feeling = st.selectbox("Au réveil", options=feelings,
                                       index=feelings.index(current.feeling) if current.feeling in feelings else 2)
        if st.form_submit_button("Enregistrer les modifications"):
            try:
                service.edit_night(user_id, edit_id, date=new_date, bedtime=new_bed, waketime=new_wake,
                                   quality_rating=new_quality, feeling=new_feeling)
                service.refresh_badges(user_id)
                st.rerun()
            except ValidationError as e:
                st.warning(f"Saisie à corriger : {e}")
            except (NotFoundError, StoreError) as e:
                st.error(str(e))

# --- Suppression ---
with st.expander("Supprimer une nuit"):
    entry_id = st.selectbox("Nuit", options=[e.id for e in entries], format_func=_label, key="delete_id")
    if st.button("Supprimer"):
        try:
            service.delete_night(user_id, entry_id)
            service.refresh_badges(user_id)
            st.rerun()
        except NotFoundError as e:
            st.error(str(e))
