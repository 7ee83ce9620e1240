# tests/unit/domain/test_growth_and_trends.py
from __future__ import annotations

from datetime import date, timedelta

import pytest

from netwatch_api.domain.enums.monitoring import TrendDirection
from netwatch_api.domain.services.growth import (
    GrowthMetric,
    GrowthPeriod,
    build_growth_series,
    growth_analysis,
    growth_projections,
    trend_direction,
)
from netwatch_api.domain.services.trend_analysis import (
    TrendSample,
    analyze_history,
    biweekly_periods,
    capacity_exhaustion,
    forecast_next_period,
    has_seasonality,
    history_direction,
    history_growth_rate,
    period_bounds,
    period_label,
)

TODAY = date(2025, 6, 10)


def test_monthly_series_is_oldest_first_with_labels() -> None:
    points = build_growth_series(100.0, GrowthMetric.DEVICES, GrowthPeriod.SIX_MONTHS, TODAY)
    assert [p.period for p in points] == [
        "2025-01", "2025-02", "2025-03", "2025-04", "2025-05", "2025-06",
    ]
    # First period is compared against 95% of itself.
    assert points[0].growth == 5.3
    assert points[0].trend is TrendDirection.INCREASING
    assert points[-1].value == 105.0


def test_weekly_series_for_one_month() -> None:
    points = build_growth_series(10.0, GrowthMetric.TRAFFIC, GrowthPeriod.ONE_MONTH, TODAY)
    assert len(points) == 4
    assert all("-W" in p.period for p in points)


def test_zero_baseline_never_divides_by_zero() -> None:
    points = build_growth_series(0.0, GrowthMetric.CUSTOMERS, GrowthPeriod.THREE_MONTHS, TODAY)
    assert all(p.growth == 0.0 for p in points)
    assert all(p.trend is TrendDirection.STABLE for p in points)
    analysis = growth_analysis(points)
    assert analysis.total_growth == 0.0


def test_short_series_analysis_and_projection() -> None:
    points = build_growth_series(50.0, GrowthMetric.DEVICES, GrowthPeriod.SIX_MONTHS, TODAY)
    assert growth_analysis(points[:1]).trend is TrendDirection.STABLE
    assert growth_projections(points[:2]) is None
    projection = growth_projections(points)
    assert projection is not None
    assert projection.next_quarter >= projection.next_month >= points[-1].value


@pytest.mark.parametrize(
    ("growth", "expected"),
    [(1.1, TrendDirection.INCREASING), (1.0, TrendDirection.STABLE),
     (-1.1, TrendDirection.DECREASING)],
)
def test_trend_direction_band(growth: float, expected: TrendDirection) -> None:
    assert trend_direction(growth) is expected


def test_history_growth_rate_and_direction() -> None:
    assert history_growth_rate([50.0, 60.0]) == pytest.approx(20.0)
    assert history_growth_rate([0.0, 10.0]) == 0.0
    assert history_growth_rate([42.0]) == 0.0
    assert history_direction(2.5) is TrendDirection.INCREASING
    assert history_direction(-2.0) is TrendDirection.STABLE


def test_forecast_and_exhaustion() -> None:
    values = [40.0, 50.0, 60.0]
    assert forecast_next_period(values) == pytest.approx(62.5)
    assert forecast_next_period([95.0, 99.0]) == 100.0
    # 25% per period from 60 -> two periods of 15 days to reach 90.
    assert capacity_exhaustion(values, TODAY) == TODAY + timedelta(days=30)
    assert capacity_exhaustion([60.0, 50.0, 40.0], TODAY) is None
    assert capacity_exhaustion([1.0, 1.01, 1.02], TODAY) is None


def test_seasonality_needs_six_volatile_samples() -> None:
    assert has_seasonality([10.0, 90.0] * 3)
    assert not has_seasonality([50.0] * 6)
    assert not has_seasonality([10.0, 90.0])


def test_biweekly_calendar() -> None:
    assert period_bounds(date(2025, 2, 20)) == (date(2025, 2, 16), date(2025, 2, 28))
    assert period_bounds(date(2025, 2, 15)) == (date(2025, 2, 1), date(2025, 2, 15))
    assert period_label(date(2025, 1, 1)) == "1-15 Ene 2025"
    assert biweekly_periods(3, date(2025, 3, 20)) == [
        (date(2025, 2, 16), date(2025, 2, 28)),
        (date(2025, 3, 1), date(2025, 3, 15)),
        (date(2025, 3, 16), date(2025, 3, 31)),
    ]


def test_analyze_history_bundles_heuristics() -> None:
    samples = [
        TrendSample(date(2025, 1, 1), 40.0),
        TrendSample(date(2025, 1, 16), 50.0),
        TrendSample(date(2025, 2, 1), 60.0),
    ]
    trend = analyze_history("link:a", samples, TODAY)
    assert trend.direction is TrendDirection.INCREASING
    assert trend.growth_rate == pytest.approx(25.0)
    assert trend.seasonality is False
    assert trend.capacity_exhaustion == TODAY + timedelta(days=30)
