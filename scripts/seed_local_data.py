# scripts/seed_local_data.py
# -*- coding: utf-8 -*-
"""
Seed local pour SleepQuest : crée des utilisateurs et des nuits réalistes.

Caractéristiques :
- Idempotent : réexécutable sans doublons (une nuit par date + user, les dates déjà prises sont sautées)
- Paramétrable via CLI : nb d'utilisateurs, nb de jours, date de fin, trous aléatoires
- Durée et score calculés par score_engine (via EntryRepository)
- Badges réévalués à la fin pour chaque utilisateur
- Tous les utilisateurs seedés deviennent amis (classement prêt à l'emploi)
- Option (--wipe) pour drop+recreate le schéma (utile en dev)

Exemples :
    # 3 users, 14 nuits jusqu'à aujourd'hui
    python scripts/seed_local_data.py

    # 5 users, 30 nuits, quelques trous
    python scripts/seed_local_data.py --users 5 --days 30 --gap-rate 0.15

    # Définir une date de fin (YYYY-MM-DD) et repartir de zéro
    python scripts/seed_local_data.py --end 2025-10-01 --wipe
"""

from __future__ import annotations

import argparse
import datetime as dt
import logging
import os
import random
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from sleepquest.config import configure_logging
from sleepquest.persistence.db import init_db
from sleepquest.persistence.errors import DuplicateEntryError
from sleepquest.persistence.models import Base
from sleepquest.services.score_engine import Feeling
from sleepquest.services.sleep_service import SleepService

logger = logging.getLogger("seed_local_data")


# -------------------------------------------------------------------
# Utils
# -------------------------------------------------------------------

def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def fmt_minutes(total: int) -> str:
    total %= 24 * 60
    return f"{total // 60:02d}:{total % 60:02d}"


def sample_night() -> dict:
    """
    Génère une nuit "réaliste" :
    - coucher autour de 23h15 (±1h), réveil après 5 à 9h30 de sommeil
    - qualité 1..10 corrélée à la durée, ressenti tiré autour de la qualité
    """
    bed = int(random.gauss(23 * 60 + 15, 60))
    hours = clamp(random.gauss(7.4, 1.0), 5.0, 9.5)
    wake = bed + int(hours * 60)

    quality = int(round(clamp(random.gauss(hours - 1.0, 1.5), 1, 10)))
    feelings = list(Feeling)
    feeling = feelings[int(clamp(round((quality - 1) / 2.25 + random.choice((-1, 0, 0, 1))), 0, 4))]

    return dict(bedtime=fmt_minutes(bed), waketime=fmt_minutes(wake), quality_rating=quality, feeling=feeling)


def daterange(end: dt.date, days: int):
    """Génère des dates [end - (days-1) .. end] incluses, en ordre croissant."""
    for i in range(days):
        yield end - dt.timedelta(days=(days - 1 - i))


# -------------------------------------------------------------------
# Seeding
# -------------------------------------------------------------------

def seed(
    *,
    users: int,
    days: int,
    end_date: dt.date,
    email_prefix: str,
    domain: str,
    gap_rate: float,
) -> None:
    """
    Remplit la base avec `users` utilisateurs, chacun ayant jusqu'à `days` nuits,
    avec des trous éventuels (gap_rate).
    """
    service = SleepService()

    logger.info("Seeding %s user(s), %s jour(s), fin au %s | gaps ~%s%%",
                users, days, end_date.isoformat(), int(gap_rate * 100))

    total = 0
    seeded_ids = []
    for i in range(1, users + 1):
        email = f"{email_prefix}{i}@{domain}".lower()
        u = service.users.get_or_create(email, display_name=f"{email_prefix.title()} {i}")
        seeded_ids.append(u.id)

        for day in daterange(end=end_date, days=days):
            # Probabilité de "nuit manquante" pour simuler des trous dans les séries
            if random.random() < gap_rate:
                continue
            try:
                service.log_night(u.id, day, **sample_night())
            except DuplicateEntryError:
                continue
            total += 1

        report = service.refresh_badges(u.id, today=end_date)
        stats = service.stats(u.id)
        logger.info("User %s %s : %s nuits, moyenne %.1f, série %s, badges %s",
                    u.id, u.email, stats.total_nights, stats.average_score,
                    stats.current_streak, sum(1 for s in report.states if s.is_earned))

    for i, uid in enumerate(seeded_ids):
        for other in seeded_ids[i + 1:]:
            service.friends.add(uid, other)

    logger.info("Terminé : %s user(s), %s nuit(s) créées.", users, total)


# -------------------------------------------------------------------
# CLI
# -------------------------------------------------------------------

def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Seed local data for SleepQuest")
    p.add_argument("--users", type=int, default=3, help="Nombre d'utilisateurs (défaut: 3)")
    p.add_argument("--days", type=int, default=14, help="Nombre de jours (défaut: 14)")
    p.add_argument("--end", type=str, default=None, help="Date de fin (YYYY-MM-DD). Défaut: aujourd'hui")
    p.add_argument("--email-prefix", type=str, default="user", help="Préfixe email (défaut: 'user')")
    p.add_argument("--domain", type=str, default="example.com", help="Domaine email (défaut: example.com)")
    p.add_argument("--gap-rate", type=float, default=0.1, help="Probabilité de sauter un jour (0..1, défaut: 0.1)")
    p.add_argument("--seed", type=int, default=None, help="Seed du générateur aléatoire pour reproductibilité")
    p.add_argument("--wipe", action="store_true", help="Drop + recreate la base avant seeding")
    return p.parse_args()


def main():
    args = parse_args()
    configure_logging()

    # Seed random si demandé
    if args.seed is not None:
        random.seed(args.seed)

    # Date de fin
    end_date = dt.date.fromisoformat(args.end) if args.end else dt.date.today()

    if args.wipe:
        logger.warning("Wipe : drop & recreate le schéma…")

    # Init DB schema
    init_db(Base, drop_and_recreate=bool(args.wipe))

    seed(
        users=max(1, args.users),
        days=max(1, args.days),
        end_date=end_date,
        email_prefix=args.email_prefix,
        domain=args.domain,
        gap_rate=clamp(args.gap_rate, 0.0, 0.9),
    )


if __name__ == "__main__":
    main()
