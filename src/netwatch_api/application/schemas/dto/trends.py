# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Application DTOs for historical link trends."""

from __future__ import annotations

from pydantic import Field

from netwatch_api.application.schemas.dto.base import BaseDTO
from netwatch_api.domain.enums.monitoring import TrendDirection
from netwatch_api.domain.services.aggregation import round1, round_to
from netwatch_api.domain.services.trend_analysis import HistoricalTrend, period_label


class TrendSampleDTO(BaseDTO):
    period_start: str
    label: str
    value: float


class LinkTrendDTO(BaseDTO):
    """Stored history of one link and the heuristics computed over it."""

    link_id: str
    samples: list[TrendSampleDTO] = Field(default_factory=list)
    direction: TrendDirection
    growth_rate: float
    seasonality: bool
    forecast_next: float
    capacity_exhaustion: str | None = None

    @classmethod
    def from_trend(cls, trend: HistoricalTrend) -> LinkTrendDTO:
        return cls(
            link_id=trend.series_id,
            samples=[
                TrendSampleDTO(
                    period_start=s.period_start.isoformat(),
                    label=period_label(s.period_start),
                    value=s.value,
                )
                for s in trend.samples
            ],
            direction=trend.direction,
            growth_rate=round_to(trend.growth_rate, 2),
            seasonality=trend.seasonality,
            forecast_next=round1(trend.forecast_next),
            capacity_exhaustion=(
                trend.capacity_exhaustion.isoformat() if trend.capacity_exhaustion else None
            ),
        )


class TrendStatsDTO(BaseDTO):
    series_count: int
    total_samples: int
    oldest_period: str | None = None
    newest_period: str | None = None


class TrendImportResultDTO(BaseDTO):
    imported_samples: int
    series_count: int
