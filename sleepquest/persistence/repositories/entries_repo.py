# sleepquest/persistence/repositories/entries_repo.py
# -*- coding: utf-8 -*-
from sqlalchemy import select, and_
from sqlalchemy.orm import Session
from sleepquest.persistence.db import get_session
from sleepquest.persistence.errors import DuplicateEntryError, NotFoundError
from sleepquest.persistence.models import SleepEntry
from sleepquest.services.score_engine import Feeling, compute_entry
from sleepquest.services.streaks import normalize_date
import logging

logger = logging.getLogger(__name__)


def _feeling_value(feeling) -> str:
    """Ressenti absent -> "" (compté comme valeur hors énumération)."""
    if feeling is None:
        return ""
    return feeling.value if isinstance(feeling, Feeling) else str(feeling)


class EntryRepository:
    """
    Stockage des nuits. `duration` et `score` ne sont jamais fournis par l'appelant :
    ils sont recalculés depuis bedtime/waketime/quality_rating/feeling à chaque écriture.
    """

    def _get_owned(self, s: Session, user_id: int, entry_id: int) -> SleepEntry:
        rec = s.scalar(select(SleepEntry).where(and_(SleepEntry.id == entry_id, SleepEntry.user_id == user_id)))
        if rec is None:
            raise NotFoundError(f"Nuit introuvable: id={entry_id} (user={user_id})")
        return rec

    def _ensure_free_day(self, s: Session, user_id: int, day, exclude_id=None) -> None:
        stmt = select(SleepEntry.id).where(and_(SleepEntry.user_id == user_id, SleepEntry.date == day))
        if exclude_id is not None:
            stmt = stmt.where(SleepEntry.id != exclude_id)
        if s.scalar(stmt.limit(1)):
            raise DuplicateEntryError(f"Une nuit est déjà enregistrée pour le {day.isoformat()}")

    def create(self, user_id: int, date, bedtime: str, waketime: str, quality_rating: int, feeling) -> SleepEntry:
        day = normalize_date(date)
        result = compute_entry(bedtime, waketime, quality_rating, feeling)
        with get_session() as s:
            self._ensure_free_day(s, user_id, day)
            r = SleepEntry(
                user_id=user_id, date=day,
                bedtime=bedtime, waketime=waketime,
                quality_rating=quality_rating, feeling=_feeling_value(feeling),
                duration=result.duration, score=result.score,
            )
            s.add(r); s.flush(); s.refresh(r); s.expunge(r)
        logger.info("Nuit créée id=%s user=%s date=%s score=%s", r.id, user_id, day, r.score)
        return r

    def update(
        self,
        user_id: int,
        entry_id: int,
        *,
        date=None,
        bedtime=None,
        waketime=None,
        quality_rating=None,
        feeling=None,
    ) -> SleepEntry:
        with get_session() as s:
            rec = self._get_owned(s, user_id, entry_id)
            day = normalize_date(date) if date is not None else rec.date
            bedtime = bedtime if bedtime is not None else rec.bedtime
            waketime = waketime if waketime is not None else rec.waketime
            quality_rating = quality_rating if quality_rating is not None else rec.quality_rating
            feeling = _feeling_value(feeling) if feeling is not None else rec.feeling

            result = compute_entry(bedtime, waketime, quality_rating, feeling)
            if day != rec.date:
                self._ensure_free_day(s, user_id, day, exclude_id=rec.id)

            rec.date = day
            rec.bedtime, rec.waketime = bedtime, waketime
            rec.quality_rating, rec.feeling = quality_rating, feeling
            rec.duration, rec.score = result.duration, result.score
            s.add(rec); s.flush(); s.refresh(rec); s.expunge(rec)
        logger.info("Nuit mise à jour id=%s user=%s score=%s", entry_id, user_id, rec.score)
        return rec

    def delete(self, user_id: int, entry_id: int) -> None:
        with get_session() as s:
            s.delete(self._get_owned(s, user_id, entry_id))
        logger.info("Nuit supprimée id=%s user=%s", entry_id, user_id)

    def get(self, user_id: int, entry_id: int) -> SleepEntry:
        with get_session() as s:
            rec = self._get_owned(s, user_id, entry_id)
            s.expunge(rec)
            return rec

    def list_by_owner(self, user_id: int, start=None, end=None, asc=False):
        """Nuits d'un utilisateur, plus récente d'abord par défaut."""
        with get_session() as s:
            stmt = select(SleepEntry).where(SleepEntry.user_id == user_id)
            if start is not None:
                stmt = stmt.where(SleepEntry.date >= normalize_date(start))
            if end is not None:
                stmt = stmt.where(SleepEntry.date <= normalize_date(end))
            stmt = stmt.order_by(SleepEntry.date.asc() if asc else SleepEntry.date.desc())
            rows = list(s.scalars(stmt))
            for r in rows:
                s.expunge(r)
            return rows

    def list_by_owners(self, user_ids):
        """Nuits de plusieurs utilisateurs (classement entre amis), plus récentes d'abord."""
        ids = list(user_ids)
        if not ids:
            return []
        with get_session() as s:
            stmt = select(SleepEntry).where(SleepEntry.user_id.in_(ids)).order_by(SleepEntry.date.desc())
            rows = list(s.scalars(stmt))
            for r in rows:
                s.expunge(r)
            return rows
