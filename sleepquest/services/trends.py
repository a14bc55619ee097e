# sleepquest/services/trends.py
# -*- coding: utf-8 -*-
"""
Données des graphiques de progression et de l'historique.

- weekly_series  : les 7 dernières nuits, valeur brute de la métrique
- monthly_series : nuits regroupées par paquets de 7 (Semaine 1, 2, ...), moyenne arrondie à 0.1
- compute_trend  : moyenne des 3 derniers points vs les 3 précédents (±5 % => up/down)
- group_by_month : historique regroupé par mois "YYYY-MM", plus récent d'abord
"""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

import pandas as pd

from sleepquest.services.streaks import normalize_date, sort_newest_first

METRICS = ("score", "hours", "quality")
TREND_THRESHOLD_PCT = 5.0
FRAME_COLUMNS = ["date", "score", "hours", "quality"]


@dataclass(frozen=True)
class Trend:
    direction: str          # "up" | "down" | "neutral"
    percentage: float       # variation absolue en %


def _check_metric(metric: str) -> None:
    if metric not in METRICS:
        raise ValueError(f"Métrique inconnue: {metric!r} (attendu {', '.join(METRICS)})")


def entries_frame(entries: Sequence[Any]) -> pd.DataFrame:
    """DataFrame (date, score, hours, quality) trié chronologiquement."""
    if not entries:
        return pd.DataFrame(columns=FRAME_COLUMNS)

    df = pd.DataFrame([{
        "date": pd.Timestamp(normalize_date(e.date)),
        "score": e.score,
        "hours": e.duration,
        "quality": e.quality_rating,
    } for e in entries])
    return df.sort_values("date", kind="stable").reset_index(drop=True)


def weekly_series(entries: Sequence[Any], metric: str = "score") -> List[Tuple[str, float]]:
    """(libellé jour court, valeur) pour les 7 dernières nuits, ordre chronologique."""
    _check_metric(metric)
    df = entries_frame(entries).tail(7)
    return [(row.date.strftime("%a"), float(getattr(row, metric))) for row in df.itertuples(index=False)]


def monthly_series(entries: Sequence[Any], metric: str = "score") -> List[Tuple[str, float]]:
    """("Semaine N", moyenne) pour chaque paquet de 7 nuits, ordre chronologique."""
    _check_metric(metric)
    df = entries_frame(entries)
    if df.empty:
        return []

    chunk = df.index // 7
    means = df[metric].astype(float).groupby(chunk).mean()
    return [(f"Semaine {int(i) + 1}", round(float(v), 1)) for i, v in means.items()]


def compute_trend(values: Sequence[float]) -> Trend:
    """Compare la moyenne des 3 dernières valeurs à celle des 3 précédentes."""
    if len(values) < 6:
        return Trend("neutral", 0.0)

    s = pd.Series(list(values), dtype=float)
    recent = s.iloc[-3:].mean()
    previous = s.iloc[-6:-3].mean()
    if previous == 0:
        return Trend("neutral", 0.0)

    change = (recent - previous) / previous * 100
    if change > TREND_THRESHOLD_PCT:
        direction = "up"
    elif change < -TREND_THRESHOLD_PCT:
        direction = "down"
    else:
        direction = "neutral"
    return Trend(direction, round(abs(float(change)), 1))


def group_by_month(entries: Sequence[Any]) -> Dict[str, List[Any]]:
    """{"YYYY-MM": [nuits]} ; mois et nuits du plus récent au plus ancien."""
    grouped: Dict[str, List[Any]] = OrderedDict()
    for e in sort_newest_first(entries):
        grouped.setdefault(normalize_date(e.date).strftime("%Y-%m"), []).append(e)
    return grouped
