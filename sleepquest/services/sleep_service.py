# sleepquest/services/sleep_service.py
# -*- coding: utf-8 -*-
"""
Façade applicative utilisée par l'UI et les scripts.

Elle enchaîne : saisie -> calcul du score -> stockage, puis recalcule statistiques
et badges à partir de l'historique complet (aucun état incrémental).

Usage:
    svc = SleepService()
    entry = svc.log_night(user_id, dt.date.today(), "23:00", "07:00", 8, "good")
    stats = svc.stats(user_id)
    report = svc.refresh_badges(user_id)
    report.newly_earned   # -> ["first_entry", ...]
    rows = svc.leaderboard_for(user_id)
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sleepquest.persistence.repositories.badges_repo import BadgeStateRepository
from sleepquest.persistence.repositories.entries_repo import EntryRepository
from sleepquest.persistence.repositories.friends_repo import FriendRepository
from sleepquest.persistence.repositories.users_repo import UserRepository
from sleepquest.services.badge_engine import BadgeState, evaluate_badges, newly_earned
from sleepquest.services.leaderboard import LeaderboardRow, build_leaderboard, group_by_user
from sleepquest.services.stats_engine import SleepStats, compute_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BadgeReport:
    states: List[BadgeState]
    newly_earned: List[str]


class SleepService:
    def __init__(
        self,
        entries: Optional[EntryRepository] = None,
        badges: Optional[BadgeStateRepository] = None,
        users: Optional[UserRepository] = None,
        friends: Optional[FriendRepository] = None,
    ) -> None:
        self.entries = entries or EntryRepository()
        self.badges = badges or BadgeStateRepository()
        self.users = users or UserRepository()
        self.friends = friends or FriendRepository()

    # --- nuits -------------------------------------------------------------

    def log_night(self, user_id: int, date, bedtime: str, waketime: str, quality_rating: int, feeling):
        return self.entries.create(user_id, date, bedtime, waketime, quality_rating, feeling)

    def edit_night(self, user_id: int, entry_id: int, **changes):
        return self.entries.update(user_id, entry_id, **changes)

    def delete_night(self, user_id: int, entry_id: int) -> None:
        self.entries.delete(user_id, entry_id)

    def history(self, user_id: int):
        return self.entries.list_by_owner(user_id)

    # --- agrégats ----------------------------------------------------------

    def stats(self, user_id: int) -> SleepStats:
        return compute_stats(self.entries.list_by_owner(user_id))

    def refresh_badges(self, user_id: int, today: Optional[dt.date] = None) -> BadgeReport:
        """
        Réévalue les badges sur l'historique complet, en repartant de l'état persisté
        (pour conserver les dates d'obtention), puis sauvegarde le nouvel état.
        """
        previous = self.badges.load(user_id)
        states = evaluate_badges(self.entries.list_by_owner(user_id), previous, today=today)
        fresh = newly_earned(previous, states)
        self.badges.save(user_id, states)

        for badge_id in fresh:
            logger.info("Badge obtenu user=%s badge=%s", user_id, badge_id)
        return BadgeReport(states=states, newly_earned=fresh)

    def leaderboard(self, user_ids: Iterable[int]) -> List[LeaderboardRow]:
        ids = list(dict.fromkeys(user_ids))
        by_user = {uid: [] for uid in ids}
        by_user.update(group_by_user(self.entries.list_by_owners(ids)))
        return build_leaderboard(by_user, self.users.display_names(ids))

    def leaderboard_for(self, user_id: int) -> List[LeaderboardRow]:
        """Classement de l'utilisateur face à sa liste d'amis enregistrée."""
        return self.leaderboard([user_id, *self.friends.list_friend_ids(user_id)])
