# sleepquest/services/streaks.py
# -*- coding: utf-8 -*-
"""
Outils calendaires partagés par les statistiques et les badges.

Toutes les fonctions reçoivent des "nuits" : n'importe quel objet exposant
un attribut `date` (date, datetime ou chaîne ISO "YYYY-MM-DD").
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Iterable, List, Sequence

ONE_DAY = dt.timedelta(days=1)


def normalize_date(d) -> dt.date:
    if isinstance(d, dt.datetime):
        return d.date()
    if isinstance(d, dt.date):
        return d
    if isinstance(d, str):
        return dt.date.fromisoformat(d[:10])
    raise TypeError(f"Invalid date type: {type(d).__name__}")


def sort_newest_first(entries: Iterable[Any]) -> List[Any]:
    """Copie triée par date décroissante (la liste d'origine n'est pas modifiée)."""
    return sorted(entries, key=lambda e: normalize_date(e.date), reverse=True)


def consecutive_days_from_latest(entries: Sequence[Any]) -> int:
    """
    Longueur de la série de jours consécutifs qui se termine à la nuit la plus récente.

    On parcourt les nuits de la plus récente à la plus ancienne : la nuit d'indice i
    doit tomber exactement `i` jours avant la plus récente. La série s'arrête au
    premier écart. Les doublons sur une même date ne sont pas fusionnés (ils cassent la série).
    """
    ordered = sort_newest_first(entries)
    if not ordered:
        return 0

    latest = normalize_date(ordered[0].date)
    streak = 0
    for i, entry in enumerate(ordered):
        if normalize_date(entry.date) != latest - dt.timedelta(days=i):
            break
        streak += 1
    return streak


def longest_consecutive_run(entries: Sequence[Any]) -> int:
    """Plus longue série de jours calendaires consécutifs, n'importe où dans l'historique."""
    ordered = sort_newest_first(entries)
    if not ordered:
        return 0

    best = run = 1
    previous = normalize_date(ordered[0].date)
    for entry in ordered[1:]:
        current = normalize_date(entry.date)
        run = run + 1 if previous - current == ONE_DAY else 1
        best = max(best, run)
        previous = current
    return best


def week_start(d) -> dt.date:
    """Dimanche qui ouvre la semaine (semaine dimanche -> samedi)."""
    day = normalize_date(d)
    return day - dt.timedelta(days=(day.weekday() + 1) % 7)


def is_weekend(d) -> bool:
    return normalize_date(d).weekday() >= 5
