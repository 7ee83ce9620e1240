# src/netwatch_api/domain/services/trend_analysis.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Biweekly trend analysis.

Purpose:
    Heuristics over a per-link utilization history sampled every half month:
    linear growth rate, direction, a coarse seasonality flag, next-period
    forecast and a capacity-exhaustion estimate. Also the calendar helpers
    that define biweekly periods (1st-15th, 16th-end of month).

Layer:
    domain

Notes:
    Pure functions. "Today" is always passed in by the caller.
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from netwatch_api.domain.enums.monitoring import TrendDirection
from netwatch_api.domain.services.aggregation import clamp_pct, mean

DAYS_PER_PERIOD = 15
EXHAUSTION_PCT = 90.0
EXHAUSTION_HORIZON_PERIODS = 24
EXHAUSTION_WINDOW = 6
SEASONALITY_MIN_SAMPLES = 6

_MONTHS_ES = ("Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic")


@dataclass(frozen=True, slots=True)
class TrendSample:
    """Utilization (percent) observed during the period starting on ``period_start``."""

    period_start: date
    value: float


@dataclass(frozen=True, slots=True)
class HistoricalTrend:
    """Analysis of one series."""

    series_id: str
    samples: tuple[TrendSample, ...]
    direction: TrendDirection
    growth_rate: float
    seasonality: bool
    forecast_next: float
    capacity_exhaustion: date | None


def history_growth_rate(values: Sequence[float]) -> float:
    """Average per-period growth from first to last value, in percent.

    ``((last - first) / first) / (n - 1) * 100``; ``0.0`` when fewer than two
    values or the first is zero.
    """
    if len(values) < 2 or values[0] == 0:
        return 0.0
    first, last = values[0], values[-1]
    return (last - first) / first / (len(values) - 1) * 100


def history_direction(growth: float) -> TrendDirection:
    """> 2 increasing, < -2 decreasing, else stable."""
    if growth > 2:
        return TrendDirection.INCREASING
    if growth < -2:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def variance(values: Sequence[float]) -> float:
    """Population variance (``0.0`` for an empty input)."""
    if not values:
        return 0.0
    avg = mean(values)
    return sum((v - avg) ** 2 for v in values) / len(values)


def has_seasonality(values: Sequence[float]) -> bool:
    """Coarse flag: at least six samples whose variance exceeds 30% of the mean."""
    if len(values) < SEASONALITY_MIN_SAMPLES:
        return False
    return variance(values) > mean(values) * 0.3


def forecast_next_period(values: Sequence[float]) -> float:
    """Mean of the last three values grown by the series growth rate, clamped to [0, 100]."""
    if not values:
        return 0.0
    if len(values) < 2:
        return values[0]
    forecast = mean(values[-3:]) * (1 + history_growth_rate(values) / 100)
    return clamp_pct(forecast)


def capacity_exhaustion(values: Sequence[float], today: date) -> date | None:
    """Estimate when utilization reaches 90% at the recent growth rate.

    Uses the last six values; only positive growth counts and estimates further
    than 24 periods (about a year) out are discarded.
    """
    if len(values) < 3:
        return None
    recent = list(values[-EXHAUSTION_WINDOW:])
    growth = history_growth_rate(recent)
    current = recent[-1]
    if growth <= 0 or current <= 0:
        return None
    periods = (EXHAUSTION_PCT - current) / (growth / 100 * current)
    if periods <= 0 or periods > EXHAUSTION_HORIZON_PERIODS:
        return None
    return today + timedelta(days=periods * DAYS_PER_PERIOD)


def analyze_history(series_id: str, samples: Sequence[TrendSample], today: date) -> HistoricalTrend:
    """Run every heuristic over a date-ordered series."""
    values = [s.value for s in samples]
    growth = history_growth_rate(values)
    return HistoricalTrend(
        series_id=series_id,
        samples=tuple(samples),
        direction=history_direction(growth),
        growth_rate=growth,
        seasonality=has_seasonality(values),
        forecast_next=forecast_next_period(values),
        capacity_exhaustion=capacity_exhaustion(values, today),
    )


def period_bounds(day: date) -> tuple[date, date]:
    """Return the biweekly period (start, end) containing ``day``."""
    if day.day <= DAYS_PER_PERIOD:
        return date(day.year, day.month, 1), date(day.year, day.month, DAYS_PER_PERIOD)
    last = calendar.monthrange(day.year, day.month)[1]
    return date(day.year, day.month, DAYS_PER_PERIOD + 1), date(day.year, day.month, last)


def biweekly_periods(count: int, today: date) -> list[tuple[date, date]]:
    """The ``count`` most recent biweekly periods, oldest first, without duplicates."""
    seen: list[tuple[date, date]] = []
    for i in range(count - 1, -1, -1):
        bounds = period_bounds(today - timedelta(days=i * DAYS_PER_PERIOD))
        if bounds not in seen:
            seen.append(bounds)
    return seen


def period_label(period_start: date) -> str:
    """Spanish display label, e.g. ``"1-15 Ene 2025"`` or ``"16-28 Feb 2025"``."""
    start, end = period_bounds(period_start)
    return f"{start.day}-{end.day} {_MONTHS_ES[start.month - 1]} {start.year}"
