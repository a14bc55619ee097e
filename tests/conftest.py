# tests/conftest.py
# -*- coding: utf-8 -*-
import datetime as dt
from dataclasses import dataclass

import pytest


@dataclass
class Night:
    """Nuit minimale, comme celles que renvoie le store (mêmes attributs)."""
    date: dt.date
    bedtime: str = "23:00"
    waketime: str = "07:00"
    quality_rating: int = 7
    feeling: str = "good"
    duration: float = 8.0
    score: int = 75
    user_id: int = 1


@pytest.fixture
def today() -> dt.date:
    return dt.date(2025, 3, 15)  # un samedi


@pytest.fixture
def night(today):
    """Fabrique : night(offset) -> nuit `offset` jours avant `today`."""
    def _make(offset: int = 0, **fields) -> Night:
        return Night(date=today - dt.timedelta(days=offset), **fields)
    return _make


@pytest.fixture
def streak(night):
    """Fabrique : streak(n) -> n nuits consécutives se terminant à `today`."""
    def _make(n: int, **fields):
        return [night(i, **fields) for i in range(n)]
    return _make
