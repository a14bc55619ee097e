# sleepquest/persistence/db.py
# -*- coding: utf-8 -*-
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from contextlib import contextmanager
import logging

from sleepquest.config import load_settings
from sleepquest.persistence.errors import StoreError

logger = logging.getLogger(__name__)

DB_URL = load_settings().db_url

engine = create_engine(DB_URL, echo=False, future=True)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,  # important pour éviter DetachedInstanceError
    future=True,
)

@contextmanager
def get_session():
    """
    Contexte gérant automatiquement commit/rollback.
    Toute erreur SQLAlchemy remonte sous forme de StoreError ; les autres erreurs
    (NotFoundError, DuplicateEntryError...) remontent telles quelles après rollback.
    """
    s = SessionLocal()
    try:
        yield s
        s.commit()
    except SQLAlchemyError as exc:
        s.rollback()
        logger.exception("Échec de l'opération de persistance")
        raise StoreError(f"Échec de l'opération de persistance: {exc.__class__.__name__}") from exc
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()

def init_db(Base, drop_and_recreate=False):
    """Crée les tables (et les recrée si demandé)."""
    if drop_and_recreate:
        Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
