# sleepquest/pages/badges.py
# -*- coding: utf-8 -*-

# --- bootstrap import path (page streamlit dans sleepquest/pages) ---
import os, sys
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# -------------------------------------------------------------

import streamlit as st

from sleepquest.config import load_settings
from sleepquest.persistence.db import init_db
from sleepquest.persistence.models import Base
from sleepquest.services.badge_engine import CATEGORIES, completion_percentage, get_definition, partition_badges
from sleepquest.services.sleep_service import SleepService

init_db(Base, drop_and_recreate=False)
service = SleepService()

st.set_page_config(page_title="Badges — SleepQuest", page_icon="🏅", layout="centered")
st.title("🏅 Collection de badges")

if "user_id" not in st.session_state:
    u = service.users.get_or_create(load_settings().default_email)
    st.session_state["user_id"] = u.id
    st.session_state["user_email"] = u.email
user_id = st.session_state["user_id"]

states = service.refresh_badges(user_id).states
st.progress(completion_percentage(states) / 100, text=f"{completion_percentage(states)} % complété")

category = st.radio("Catégorie", options=["all", *CATEGORIES], horizontal=True)
earned, in_progress = partition_badges(states, None if category == "all" else category)

st.subheader(f"🏆 Obtenus ({len(earned)})")
for s in earned:
    b = get_definition(s.badge_id)
    since = f" — depuis le {s.earned_date.isoformat()}" if s.earned_date else ""
    st.write(f"{b.icon} **{b.name}** ({b.tier.upper()}) : {b.description}{since}")

st.subheader(f"🎯 En cours ({len(in_progress)})")
for s in in_progress:
    b = get_definition(s.badge_id)
    st.write(f"{b.icon} **{b.name}** ({b.tier.upper()}) : {b.description}")
    st.progress(s.progress / 100, text=f"{round(s.progress)} %")
