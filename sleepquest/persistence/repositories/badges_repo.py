# sleepquest/persistence/repositories/badges_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select
from sleepquest.persistence.db import get_session
from sleepquest.persistence.models import BadgeStateRecord
from sleepquest.services.badge_engine import BadgeState

class BadgeStateRepository:
    """État des badges par utilisateur (l'engine, lui, ne garde rien entre deux appels)."""

    def load(self, user_id: int) -> list[BadgeState]:
        with get_session() as s:
            rows = s.scalars(select(BadgeStateRecord).where(BadgeStateRecord.user_id == user_id))
            return [
                BadgeState(badge_id=r.badge_id, is_earned=r.is_earned, progress=r.progress, earned_date=r.earned_date)
                for r in rows
            ]

    def save(self, user_id: int, states) -> None:
        """Upsert par (user_id, badge_id)."""
        with get_session() as s:
            existing = {
                r.badge_id: r
                for r in s.scalars(select(BadgeStateRecord).where(BadgeStateRecord.user_id == user_id))
            }
            for st in states:
                rec = existing.get(st.badge_id) or BadgeStateRecord(user_id=user_id, badge_id=st.badge_id)
                rec.is_earned = st.is_earned
                rec.progress = st.progress
                rec.earned_date = st.earned_date
                s.add(rec)
