# sleepquest/services/badge_engine.py
# -*- coding: utf-8 -*-
"""
Moteur de badges.

- Le catalogue (BADGE_CATALOG) est figé : chaque badge porte une règle pure
  `rule(entries) -> RuleResult(earned, progress)`.
- L'état par utilisateur (BadgeState) appartient à l'appelant : le moteur ne garde
  aucune mémoire entre deux appels. Pour conserver les dates d'obtention, il faut
  lui repasser l'état précédent.

Les "entries" sont des objets exposant `date`, `bedtime`, `duration`, `score`
et `quality_rating` (lignes ORM ou simples dataclasses).

Usage:
    previous = badge_repo.load(user_id)
    states = evaluate_badges(entries, previous, today=dt.date.today())
    for badge_id in newly_earned(previous, states):
        ...
"""
from __future__ import annotations

import datetime as dt
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from sleepquest.services.score_engine import to_minutes
from sleepquest.services.streaks import (
    consecutive_days_from_latest,
    is_weekend,
    sort_newest_first,
    week_start,
)

CATEGORIES = ("timing", "consistency", "quality", "special")
TIERS = ("bronze", "silver", "gold", "platinum")

EARLY_BEDTIME_MINUTES = 22 * 60


@dataclass(frozen=True)
class RuleResult:
    earned: bool
    progress: float         # 0..100


@dataclass(frozen=True)
class BadgeDefinition:
    """Ligne du catalogue (identique pour tous les utilisateurs)."""
    id: str
    name: str
    description: str
    icon: str
    category: str
    tier: str               # cosmétique, jamais utilisé dans le calcul
    rule: Callable[[Sequence[Any]], RuleResult]


@dataclass(frozen=True)
class BadgeState:
    """État d'un badge pour un utilisateur, tel que persisté par l'appelant."""
    badge_id: str
    is_earned: bool = False
    progress: float = 0.0
    earned_date: Optional[dt.date] = None


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _progress(value: float, threshold: float) -> float:
    return round(min(100.0, value / threshold * 100), 2)


def _result(value: float, threshold: float) -> RuleResult:
    return RuleResult(earned=value >= threshold, progress=_progress(value, threshold))


def _longest_run(flags: Iterable[bool]) -> int:
    """Plus longue suite de True consécutifs, dans l'ordre fourni."""
    run = best = 0
    for ok in flags:
        run = run + 1 if ok else 0
        best = max(best, run)
    return best


def _recent(entries: Sequence[Any], n: int) -> List[Any]:
    return sort_newest_first(entries)[:n]


# -----------------------------------------------------------------------------
# Règles
# -----------------------------------------------------------------------------

def _early_bird(entries: Sequence[Any]) -> RuleResult:
    run = _longest_run(to_minutes(e.bedtime) <= EARLY_BEDTIME_MINUTES for e in _recent(entries, 7))
    return _result(run, 7)


def _night_owl(entries: Sequence[Any]) -> RuleResult:
    # coucher entre minuit et 6h
    late = sum(1 for e in entries if to_minutes(e.bedtime) < 6 * 60)
    return _result(late, 10)


def _optimal_sleeper(entries: Sequence[Any]) -> RuleResult:
    run = _longest_run(7.5 <= e.duration <= 8.5 for e in _recent(entries, 3))
    return _result(run, 3)


def _weekend_warrior(entries: Sequence[Any]) -> RuleResult:
    weeks: Dict[dt.date, List[Any]] = defaultdict(list)
    for e in entries:
        if is_weekend(e.date):
            weeks[week_start(e.date)].append(e)

    qualifying = (
        len(week_entries) >= 2 and all(e.score >= 80 for e in week_entries)
        for _, week_entries in sorted(weeks.items(), reverse=True)
    )
    return _result(_longest_run(qualifying), 4)


def _consistent_sleeper(entries: Sequence[Any]) -> RuleResult:
    return _result(consecutive_days_from_latest(entries), 7)


def _habit_master(entries: Sequence[Any]) -> RuleResult:
    return _result(consecutive_days_from_latest(entries), 30)


def _sleep_champion(entries: Sequence[Any]) -> RuleResult:
    best = max((e.score for e in entries), default=0)
    return _result(best, 90)


def _quality_sleeper(entries: Sequence[Any]) -> RuleResult:
    run = _longest_run(e.quality_rating >= 9 for e in _recent(entries, 5))
    return _result(run, 5)


def _perfect_sleeper(entries: Sequence[Any]) -> RuleResult:
    return _result(sum(1 for e in entries if e.score == 100), 3)


def _first_entry(entries: Sequence[Any]) -> RuleResult:
    return _result(min(len(entries), 1), 1)


BADGE_CATALOG: Tuple[BadgeDefinition, ...] = (
    BadgeDefinition("early_bird", "Early Bird", "Se coucher avant 22h pendant 7 nuits consécutives",
                    "🐦", "timing", "bronze", _early_bird),
    BadgeDefinition("night_owl", "Night Owl", "Se coucher après minuit pendant 10 nuits",
                    "🦉", "timing", "bronze", _night_owl),
    BadgeDefinition("weekend_warrior", "Weekend Warrior", "Score 80+ les deux jours du week-end, 4 week-ends de suite",
                    "🏆", "special", "silver", _weekend_warrior),
    BadgeDefinition("consistent_sleeper", "Consistent Sleeper", "Enregistrer 7 jours consécutifs",
                    "📅", "consistency", "bronze", _consistent_sleeper),
    BadgeDefinition("habit_master", "Habit Master", "Enregistrer 30 jours consécutifs",
                    "🎯", "consistency", "gold", _habit_master),
    BadgeDefinition("sleep_champion", "Sleep Champion", "Atteindre un score de 90+",
                    "👑", "quality", "gold", _sleep_champion),
    BadgeDefinition("quality_sleeper", "Quality Sleeper", "Qualité 9+ pendant 5 nuits consécutives",
                    "⭐", "quality", "silver", _quality_sleeper),
    BadgeDefinition("perfect_sleeper", "Perfect Sleeper", "Obtenir trois scores de 100",
                    "💎", "quality", "platinum", _perfect_sleeper),
    BadgeDefinition("first_entry", "Sleep Tracker", "Enregistrer sa première nuit",
                    "🌙", "special", "bronze", _first_entry),
    BadgeDefinition("optimal_sleeper", "Optimal Sleeper", "Dormir ~8h (7,5 à 8,5h) 3 nuits de suite",
                    "🎪", "timing", "silver", _optimal_sleeper),
)

_BY_ID: Dict[str, BadgeDefinition] = {b.id: b for b in BADGE_CATALOG}


def get_definition(badge_id: str) -> BadgeDefinition:
    """Définition du catalogue. Lève KeyError si l'id est inconnu."""
    return _BY_ID[badge_id]


# -----------------------------------------------------------------------------
# Évaluation
# -----------------------------------------------------------------------------

def evaluate_rules(entries: Sequence[Any]) -> Dict[str, RuleResult]:
    """Applique chaque règle du catalogue au même historique."""
    entries = list(entries)
    return {b.id: b.rule(entries) for b in BADGE_CATALOG}


def evaluate_badges(
    entries: Sequence[Any],
    previous: Optional[Iterable[BadgeState]] = None,
    today: Optional[dt.date] = None,
) -> List[BadgeState]:
    """
    Recalcule l'état de tous les badges et fusionne avec l'état précédent.

    - is_earned / progress : toujours issus de la règle (recalcul complet)
    - earned_date : posée à `today` quand le badge passe de "non obtenu" à "obtenu",
      sinon reprise de l'état précédent (jamais effacée quand le badge est perdu)

    Args:
        entries: historique complet de l'utilisateur
        previous: état précédent (tel que renvoyé par un appel antérieur)
        today: date "courante" fournie par l'appelant (défaut : date du jour)

    Returns:
        une BadgeState par badge, dans l'ordre du catalogue
    """
    today = today or dt.date.today()
    before = {s.badge_id: s for s in (previous or ())}
    results = evaluate_rules(entries)

    states = []
    for badge in BADGE_CATALOG:
        res = results[badge.id]
        prev = before.get(badge.id)
        was_earned = prev is not None and prev.is_earned
        if res.earned and not was_earned:
            earned_date = today
        else:
            earned_date = prev.earned_date if prev else None
        states.append(BadgeState(
            badge_id=badge.id,
            is_earned=res.earned,
            progress=res.progress,
            earned_date=earned_date,
        ))
    return states


def newly_earned(previous: Iterable[BadgeState], current: Iterable[BadgeState]) -> List[str]:
    """Ids des badges passés de "non obtenu" à "obtenu" (badge absent avant = non obtenu)."""
    was_earned = {s.badge_id for s in previous if s.is_earned}
    return [s.badge_id for s in current if s.is_earned and s.badge_id not in was_earned]


def partition_badges(
    states: Iterable[BadgeState],
    category: Optional[str] = None,
) -> Tuple[List[BadgeState], List[BadgeState]]:
    """Sépare (obtenus, en cours), éventuellement filtrés par catégorie."""
    selected = [s for s in states if category is None or get_definition(s.badge_id).category == category]
    return [s for s in selected if s.is_earned], [s for s in selected if not s.is_earned]


def completion_percentage(states: Sequence[BadgeState]) -> int:
    if not states:
        return 0
    earned = sum(1 for s in states if s.is_earned)
    return round(earned / len(states) * 100)
