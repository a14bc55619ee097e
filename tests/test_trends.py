# tests/test_trends.py
# -*- coding: utf-8 -*-
"""
Tests unitaires pour sleepquest/services/trends.py (données des graphiques et de l'historique).
"""

import pytest

from sleepquest.services.trends import (
    Trend,
    compute_trend,
    entries_frame,
    group_by_month,
    monthly_series,
    weekly_series,
)


def test_entries_frame_sorted_chronologically(night):
    df = entries_frame([night(0, score=80), night(2, score=60), night(1, score=70)])
    assert list(df["score"]) == [60, 70, 80]
    assert list(df.columns) == ["date", "score", "hours", "quality"]


def test_entries_frame_empty():
    df = entries_frame([])
    assert df.empty
    assert list(df.columns) == ["date", "score", "hours", "quality"]


def test_weekly_series_last_seven_in_order(night):
    entries = [night(i, score=50 + i) for i in range(10)]
    series = weekly_series(entries, "score")
    assert len(series) == 7
    assert [v for _, v in series] == [56, 55, 54, 53, 52, 51, 50]
    assert series[-1][0] == "Sat"   # `today` est un samedi


def test_weekly_series_metrics(night):
    entries = [night(0, duration=7.25, quality_rating=8)]
    assert weekly_series(entries, "hours") == [("Sat", 7.25)]
    assert weekly_series(entries, "quality") == [("Sat", 8.0)]


def test_unknown_metric_rejected(night):
    with pytest.raises(ValueError):
        weekly_series([night(0)], "mood")
    with pytest.raises(ValueError):
        monthly_series([night(0)], "mood")


def test_monthly_series_chunks_of_seven(night):
    # 10 nuits, de la plus ancienne (score 10) à la plus récente (score 100)
    entries = [night(9 - i, score=10 * (i + 1)) for i in range(10)]
    series = monthly_series(entries, "score")
    assert series == [("Semaine 1", 40.0), ("Semaine 2", 90.0)]


def test_monthly_series_rounds_to_one_decimal(night):
    entries = [night(0, duration=7.0), night(1, duration=7.0), night(2, duration=8.0)]
    assert monthly_series(entries, "hours") == [("Semaine 1", 7.3)]


def test_monthly_series_empty():
    assert monthly_series([], "score") == []


@pytest.mark.parametrize(
    "values,expected",
    [
        ([60, 60, 60, 70, 70, 70], Trend("up", 16.7)),
        ([80, 80, 80, 60, 60, 60], Trend("down", 25.0)),
        ([70, 70, 70, 72, 71, 70], Trend("neutral", 1.4)),
        ([1, 2, 3, 4, 5, 60, 60, 60, 66, 66, 66], Trend("up", 10.0)),
    ],
)
def test_compute_trend(values, expected):
    assert compute_trend(values) == expected


@pytest.mark.parametrize("values", [[], [50], [50, 60, 70, 80, 90], [0, 0, 0, 10, 10, 10]])
def test_compute_trend_neutral_when_not_comparable(values):
    assert compute_trend(values) == Trend("neutral", 0.0)


def test_group_by_month_newest_first(today, night):
    # today = 2025-03-15
    entries = [night(0), night(20), night(14), night(50)]
    grouped = group_by_month(entries)
    assert list(grouped) == ["2025-03", "2025-02", "2025-01"]
    assert [e.date.day for e in grouped["2025-03"]] == [15, 1]
    assert [e.date.day for e in grouped["2025-02"]] == [23]
