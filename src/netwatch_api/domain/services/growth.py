# src/netwatch_api/domain/services/growth.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Growth series, analysis and projections.

Purpose:
    Build the period-by-period growth series shown by the executive growth
    view from a single baseline, and summarize any such series (total growth,
    average growth, direction, next-period and next-quarter projections).

Layer:
    domain

Notes:
    - Deterministic: the series is a function of (baseline, metric, period,
      reference date) only.
    - Values and growth figures are rounded with :func:`round1`.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from netwatch_api.domain.enums.monitoring import TrendDirection
from netwatch_api.domain.services.aggregation import (
    forecast_next,
    forecast_quarter,
    growth_rate,
    mean,
    round1,
)

FIRST_PERIOD_PREVIOUS_FACTOR = 0.95


class GrowthMetric(str, Enum):
    """Series the executive growth view can chart."""

    DEVICES = "devices"
    CUSTOMERS = "customers"
    TRAFFIC = "traffic"
    UTILIZATION = "utilization"


class GrowthPeriod(str, Enum):
    """Lookback windows: 1m is weekly, the rest monthly."""

    ONE_MONTH = "1m"
    THREE_MONTHS = "3m"
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"

    @property
    def count(self) -> int:
        return {"1m": 4, "3m": 3, "6m": 6, "1y": 12}[self.value]

    @property
    def weekly(self) -> bool:
        return self is GrowthPeriod.ONE_MONTH


@dataclass(frozen=True, slots=True)
class GrowthPoint:
    """One period of a growth series."""

    period: str
    value: float
    growth: float
    trend: TrendDirection


@dataclass(frozen=True, slots=True)
class GrowthAnalysis:
    """Summary of a growth series."""

    current_value: float
    previous_value: float
    total_growth: float
    average_growth: float
    trend: TrendDirection


@dataclass(frozen=True, slots=True)
class GrowthProjection:
    """Forward projections derived from the last three periods."""

    next_month: float
    next_quarter: float


def trend_direction(growth: float) -> TrendDirection:
    """> 1 increasing, < -1 decreasing, else stable."""
    if growth > 1:
        return TrendDirection.INCREASING
    if growth < -1:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def growth_factor(metric: GrowthMetric, position: int, total: int) -> float:
    """Multiplier applied to the baseline for the period ``position`` steps back.

    ``position == 0`` is the current period. Older periods shrink linearly
    toward the metric's floor; utilization also carries a small seasonal swing.
    """
    ratio = (total - position) / total
    if metric is GrowthMetric.DEVICES:
        return 0.85 + ratio * 0.20
    if metric is GrowthMetric.CUSTOMERS:
        return 0.88 + ratio * 0.17
    if metric is GrowthMetric.TRAFFIC:
        return 0.75 + ratio * 0.30
    return 0.88 + ratio * 0.15 + math.sin(position * 0.5) * 0.05


def _shift_months(day: date, months: int) -> date:
    month_index = day.year * 12 + day.month - 1 - months
    return date(month_index // 12, month_index % 12 + 1, 1)


def period_label(day: date, *, weekly: bool) -> str:
    """``YYYY-MM`` for monthly periods, ``YYYY-Ww`` (week of month) for weekly ones."""
    if weekly:
        week_start = day - timedelta(days=(day.weekday() + 1) % 7)
        return f"{week_start.year}-W{math.ceil(week_start.day / 7)}"
    return f"{day.year}-{day.month:02d}"


def build_growth_series(
    baseline: float,
    metric: GrowthMetric,
    period: GrowthPeriod,
    today: date,
) -> list[GrowthPoint]:
    """Generate the oldest-first series for ``period`` ending at ``today``.

    The first period is compared against ``value * 0.95``; every later period
    against the previous (unrounded) value.
    """
    total = period.count
    points: list[GrowthPoint] = []
    previous_raw: float | None = None
    for position in range(total - 1, -1, -1):
        if period.weekly:
            day = today - timedelta(days=position * 7)
        else:
            day = _shift_months(today, position)
        value = baseline * growth_factor(metric, position, total)
        previous = value * FIRST_PERIOD_PREVIOUS_FACTOR if previous_raw is None else previous_raw
        growth = growth_rate(value, previous) if previous > 0 else 0.0
        points.append(
            GrowthPoint(
                period=period_label(day, weekly=period.weekly),
                value=round1(value),
                growth=round1(growth),
                trend=trend_direction(growth),
            )
        )
        previous_raw = value
    return points


def average_growth(growths: Sequence[float]) -> float:
    """Mean of a sequence of growth percentages (``0.0`` when empty)."""
    return mean(growths)


def growth_analysis(points: Sequence[GrowthPoint]) -> GrowthAnalysis:
    """Summarize a series; fewer than two points yields a flat, zero analysis."""
    if len(points) < 2:
        return GrowthAnalysis(0.0, 0.0, 0.0, 0.0, TrendDirection.STABLE)
    current = points[-1].value
    first = points[0].value
    total = growth_rate(current, first) if first > 0 else 0.0
    recent = average_growth([p.growth for p in points[-3:]])
    return GrowthAnalysis(
        current_value=round1(current),
        previous_value=round1(first),
        total_growth=round1(total),
        average_growth=round1(average_growth([p.growth for p in points[1:]])),
        trend=trend_direction(recent),
    )


def growth_projections(points: Sequence[GrowthPoint]) -> GrowthProjection | None:
    """Project one and three periods ahead from the last three growth rates.

    Returns:
        ``None`` when fewer than three points are available.
    """
    if len(points) < 3:
        return None
    current = points[-1].value
    avg = average_growth([p.growth for p in points[-3:]])
    return GrowthProjection(
        next_month=round1(forecast_next(current, avg)),
        next_quarter=round1(forecast_quarter(current, avg / 100)),
    )
