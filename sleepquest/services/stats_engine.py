# sleepquest/services/stats_engine.py
# -*- coding: utf-8 -*-
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

from sleepquest.services.streaks import consecutive_days_from_latest, longest_consecutive_run


@dataclass(frozen=True)
class SleepStats:
    """Statistiques agrégées d'un utilisateur (toujours recalculées, jamais stockées)."""
    total_nights: int
    average_score: float
    current_streak: int
    best_streak: int


EMPTY_STATS = SleepStats(total_nights=0, average_score=0, current_streak=0, best_streak=0)


def _round_half_up(value: float) -> float:
    """Arrondi à 1 décimale, demi vers le haut (82.25 -> 82.3, pas l'arrondi bancaire de round())."""
    return math.floor(value * 10 + 0.5) / 10


def compute_stats(entries: Sequence[Any]) -> SleepStats:
    """
    Agrège l'historique complet d'un utilisateur (ordre quelconque).

    - average_score : moyenne des scores, arrondie à 1 décimale
    - current_streak : jours consécutifs se terminant à la nuit la plus récente
    - best_streak : plus longue série de jours consécutifs (inclut la série courante)
    """
    entries = list(entries)
    if not entries:
        return EMPTY_STATS

    average = sum(e.score for e in entries) / len(entries)
    current = consecutive_days_from_latest(entries)
    best = max(current, longest_consecutive_run(entries))

    return SleepStats(
        total_nights=len(entries),
        average_score=_round_half_up(average),
        current_streak=current,
        best_streak=best,
    )
