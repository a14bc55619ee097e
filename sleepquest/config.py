# sleepquest/config.py
# -*- coding: utf-8 -*-
"""
Configuration par variables d'environnement.

Variables supportées:
    DB_URL                    : URL SQLAlchemy (défaut: sqlite:///sleepquest.db)
    SLEEPQUEST_DEFAULT_EMAIL  : utilisateur chargé par défaut dans l'UI
    SLEEPQUEST_LOG_LEVEL      : DEBUG, INFO, WARNING... (défaut: INFO)
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    db_url: str
    default_email: str
    log_level: str


def load_settings() -> Settings:
    return Settings(
        db_url=os.getenv("DB_URL", "sqlite:///sleepquest.db").strip(),
        default_email=os.getenv("SLEEPQUEST_DEFAULT_EMAIL", "demo@example.com").strip().lower(),
        log_level=os.getenv("SLEEPQUEST_LOG_LEVEL", "INFO").strip().upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure le logging racine (une seule fois : basicConfig ignore les appels suivants)."""
    level_name = (level or load_settings().log_level).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)
