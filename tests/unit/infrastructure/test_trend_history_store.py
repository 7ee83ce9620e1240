# tests/unit/infrastructure/test_trend_history_store.py
from __future__ import annotations

import math
from datetime import date

import pytest

from netwatch_api.domain.exceptions.monitoring import InvalidTrendData
from netwatch_api.infrastructure.persistence.trend_history_store import TrendHistoryStore


def test_record_keeps_date_order_and_replaces_same_period() -> None:
    store = TrendHistoryStore()
    store.record("link:a", date(2025, 2, 1), 50.0)
    store.record("link:a", date(2025, 1, 1), 40.0)
    store.record("link:a", date(2025, 2, 1), 55.0)

    history = store.history("link:a")
    assert [(s.period_start, s.value) for s in history] == [
        (date(2025, 1, 1), 40.0),
        (date(2025, 2, 1), 55.0),
    ]
    assert store.history("unknown") == []


def test_bound_evicts_oldest() -> None:
    store = TrendHistoryStore(max_periods=3)
    for month in range(1, 6):
        store.record("s", date(2025, month, 1), float(month))
    assert [s.value for s in store.history("s")] == [3.0, 4.0, 5.0]

    store.record("daily", date(2025, 1, 1), 1.0, max_periods=90)
    assert len(store.history("daily")) == 1


def test_import_keeps_daily_series_bound() -> None:
    store = TrendHistoryStore()
    for day in range(1, 31):
        store.record("plaza:Saltillo", date(2025, 5, day), float(day), max_periods=90)

    store.import_(
        {"version": 1, "series": {"plaza:Saltillo": [{"period_start": "2025-05-31", "value": 31}]}}
    )

    history = store.history("plaza:Saltillo")
    assert len(history) == 31
    assert history[0].period_start == date(2025, 5, 1)

    store.record("plaza:Saltillo", date(2025, 6, 1), 32.0)
    assert len(store.history("plaza:Saltillo")) == 32


@pytest.mark.parametrize("value", [math.nan, math.inf, True, "12"])
def test_record_rejects_bad_values(value: object) -> None:
    with pytest.raises(InvalidTrendData):
        TrendHistoryStore().record("s", date(2025, 1, 1), value)  # type: ignore[arg-type]


def test_record_rejects_blank_series() -> None:
    with pytest.raises(InvalidTrendData):
        TrendHistoryStore().record("  ", date(2025, 1, 1), 1.0)


def test_export_import_merges_and_reports_stats() -> None:
    source = TrendHistoryStore()
    source.record("link:a", date(2025, 1, 1), 40.0)
    source.record("link:b", date(2025, 1, 16), 20.0)
    document = source.export()
    assert document == {
        "version": 1,
        "series": {
            "link:a": [{"period_start": "2025-01-01", "value": 40.0}],
            "link:b": [{"period_start": "2025-01-16", "value": 20.0}],
        },
    }

    target = TrendHistoryStore()
    target.record("link:a", date(2025, 2, 1), 60.0)
    assert target.import_(document) == 2
    assert [s.value for s in target.history("link:a")] == [40.0, 60.0]
    assert target.stats() == {
        "series_count": 2,
        "total_samples": 3,
        "oldest_period": "2025-01-01",
        "newest_period": "2025-02-01",
    }


@pytest.mark.parametrize(
    "document",
    [
        {"version": 2, "series": {}},
        {"series": []},
        {"series": {"a": "x"}},
        {"series": {"a": [{"period_start": "not-a-date", "value": 1}]}},
        {"series": {"a": [{"period_start": "2025-01-01", "value": None}]}},
        {"series": {"a": [{"period_start": "2025-01-01", "value": 1}], "b": [42]}},
    ],
)
def test_malformed_import_leaves_store_untouched(document: dict) -> None:
    store = TrendHistoryStore()
    store.record("a", date(2024, 12, 1), 10.0)
    with pytest.raises(InvalidTrendData):
        store.import_(document)
    assert [s.value for s in store.history("a")] == [10.0]
    assert store.series_ids() == ["a"]


def test_clear() -> None:
    store = TrendHistoryStore()
    store.record("a", date(2025, 1, 1), 1.0)
    store.record("b", date(2025, 1, 1), 1.0)
    store.clear("a")
    assert store.series_ids() == ["b"]
    store.clear()
    assert store.stats()["series_count"] == 0
