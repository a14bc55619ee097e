# sleepquest/services/leaderboard.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sleepquest.services.stats_engine import compute_stats
from sleepquest.services.streaks import sort_newest_first


@dataclass(frozen=True)
class LeaderboardRow:
    user_id: int
    name: str
    score: int              # score de la dernière nuit (0 si aucune)
    current_streak: int
    last_duration: float    # heures, 0.0 si aucune nuit


def build_leaderboard(
    entries_by_user: Mapping[int, Sequence[Any]],
    names: Optional[Mapping[int, str]] = None,
) -> List[LeaderboardRow]:
    """
    Classement des amis sur le score de leur dernière nuit.
    Égalité de score -> ordre alphabétique du nom.
    """
    names = names or {}
    rows = []
    for user_id, entries in entries_by_user.items():
        latest = sort_newest_first(entries)[:1]
        rows.append(LeaderboardRow(
            user_id=user_id,
            name=names.get(user_id, str(user_id)),
            score=int(latest[0].score) if latest else 0,
            current_streak=compute_stats(entries).current_streak,
            last_duration=round(float(latest[0].duration), 1) if latest else 0.0,
        ))
    return sorted(rows, key=lambda r: (-r.score, r.name))


def rank_of(rows: Sequence[LeaderboardRow], user_id: int) -> Optional[int]:
    """Rang (à partir de 1) d'un utilisateur, None s'il n'est pas classé."""
    for i, row in enumerate(rows, start=1):
        if row.user_id == user_id:
            return i
    return None


def group_by_user(entries: Sequence[Any]) -> Dict[int, List[Any]]:
    """Regroupe une liste multi-utilisateurs (cf. EntryRepository.list_by_owners)."""
    grouped: Dict[int, List[Any]] = {}
    for e in entries:
        grouped.setdefault(e.user_id, []).append(e)
    return grouped
