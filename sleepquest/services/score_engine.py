# sleepquest/services/score_engine.py
# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

# Échelles
MIN_SCORE = 0
MAX_SCORE = 100
MIN_QUALITY = 1
MAX_QUALITY = 10

# Tranche "qualité" : note 1 -> 0 pt, note 10 -> ~40 pts
QUALITY_MULTIPLIER = 4.44

# Tranches de durée (heures, bornes incluses) -> points, de la plus stricte à la plus large
DURATION_BANDS: Tuple[Tuple[float, float, int], ...] = (
    (7.0, 9.0, 40),
    (6.0, 10.0, 30),
    (5.0, 11.0, 20),
)
DURATION_FALLBACK_POINTS = 10


class Feeling(str, Enum):
    """Ressenti au réveil (énumération fermée)."""
    TERRIBLE = "terrible"
    TIRED = "tired"
    OKAY = "okay"
    GOOD = "good"
    AMAZING = "amazing"


FEELING_POINTS: Dict[Feeling, int] = {
    Feeling.TERRIBLE: 0,
    Feeling.TIRED: 5,
    Feeling.OKAY: 10,
    Feeling.GOOD: 15,
    Feeling.AMAZING: 20,
}
DEFAULT_FEELING_POINTS = 10  # valeur hors énumération


@dataclass(frozen=True)
class EntryScore:
    """Résultat du calcul pour une nuit."""
    duration: float         # heures
    score: int              # 0..100
    raw: float              # somme des tranches avant arrondi


class ValidationError(ValueError):
    """Entrée invalide (message lisible, corrigeable par l'utilisateur)."""


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def parse_time(value: str, field: str = "heure") -> Tuple[int, int]:
    """Découpe "HH:MM" en (heure, minute). Lève ValidationError si le format est invalide."""
    parts = str(value).strip().split(":")
    if len(parts) != 2 or not all(p.strip().isdigit() for p in parts):
        raise ValidationError(f"{field} invalide: {value!r} (utilise HH:MM, ex. 22:30)")

    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValidationError(f"{field} hors bornes: {value!r} (attendu 00:00..23:59, format HH:MM)")
    return hour, minute


def to_minutes(value: str) -> int:
    """Minutes écoulées depuis minuit pour une heure "HH:MM"."""
    hour, minute = parse_time(value)
    return hour * 60 + minute


def compute_duration(bedtime: str, waketime: str) -> float:
    """
    Durée de sommeil en heures. Si le réveil est "avant" le coucher,
    la nuit a traversé minuit : on ajoute 24h.
    """
    bed_h, bed_m = parse_time(bedtime, "bedtime")
    wake_h, wake_m = parse_time(waketime, "waketime")

    duration = (wake_h + wake_m / 60) - (bed_h + bed_m / 60)
    if duration < 0:
        duration += 24
    return duration


def duration_points(duration: float) -> int:
    for low, high, points in DURATION_BANDS:
        if low <= duration <= high:
            return points
    return DURATION_FALLBACK_POINTS


def quality_points(quality_rating: int) -> float:
    return (quality_rating - 1) * QUALITY_MULTIPLIER


def feeling_points(feeling: Union[Feeling, str, None]) -> int:
    """Points de ressenti ; toute valeur hors énumération vaut DEFAULT_FEELING_POINTS."""
    try:
        return FEELING_POINTS[Feeling(feeling)]
    except ValueError:
        return DEFAULT_FEELING_POINTS


def validate_entry_input(
    bedtime: Optional[str],
    waketime: Optional[str],
    quality_rating: int,
) -> None:
    """Valide les champs saisis. Lève ValidationError (tous les problèmes à la fois)."""
    if not bedtime or not waketime:
        raise ValidationError("bedtime et waketime sont requis (les deux heures, format HH:MM)")

    errors = []
    for name, value in (("bedtime", bedtime), ("waketime", waketime)):
        try:
            parse_time(value, name)
        except ValidationError as exc:
            errors.append(str(exc))

    if isinstance(quality_rating, bool) or not isinstance(quality_rating, int):
        errors.append(f"quality_rating doit être un entier: {quality_rating!r}")
    elif not (MIN_QUALITY <= quality_rating <= MAX_QUALITY):
        errors.append(f"quality_rating hors bornes: {quality_rating} (attendu {MIN_QUALITY}..{MAX_QUALITY})")

    if errors:
        raise ValidationError("; ".join(errors))


def compute_entry(
    bedtime: Optional[str],
    waketime: Optional[str],
    quality_rating: int,
    feeling: Union[Feeling, str, None],
    clamp_output: bool = True,
) -> EntryScore:
    """
    Calcule la durée et le score (0..100) d'une nuit.

    Score = tranche durée (max 40) + tranche qualité (max ~40) + tranche ressenti (max 20)

    - durée : 7–9h -> 40 ; 6–10h -> 30 ; 5–11h -> 20 ; sinon 10
    - qualité : (note - 1) * 4.44
    - ressenti : terrible 0, tired 5, okay 10, good 15, amazing 20 (inconnu -> 10)

    Args:
        bedtime, waketime: "HH:MM" (24h)
        quality_rating: entier 1..10
        feeling: membre de Feeling ou sa valeur texte
        clamp_output: si True, borne le score final à [0, 100]

    Returns:
        EntryScore(duration, score, raw)
    """
    validate_entry_input(bedtime, waketime, quality_rating)

    duration = compute_duration(bedtime, waketime)
    raw_score = duration_points(duration) + quality_points(quality_rating) + feeling_points(feeling)

    final = _clamp(raw_score, MIN_SCORE, MAX_SCORE) if clamp_output else raw_score
    return EntryScore(duration=duration, score=int(round(final)), raw=raw_score)


def interpret_score(score: float) -> str:
    """Libellé court pour un score (mêmes seuils que la coloration de l'historique)."""
    s = _clamp(score, MIN_SCORE, MAX_SCORE)
    if s >= 80:
        return "Excellente nuit. Garde ce rythme."
    if s >= 60:
        return "Nuit correcte. Un coucher plus régulier peut encore aider."
    return "Nuit difficile. Vise 7 à 9h et un coucher plus tôt."
