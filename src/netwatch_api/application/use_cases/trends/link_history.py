# src/netwatch_api/application/use_cases/trends/link_history.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use cases: biweekly link utilization history.

Each link has one series (``link:<id>``) holding up to twelve biweekly
samples. Recording a sample snaps its date to the start of the biweekly
period that contains it, so a second reading in the same half month
replaces the first.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any, Final

from netwatch_api.application.interfaces.trend_history_port import TrendHistoryPort
from netwatch_api.application.schemas.dto.trends import (
    LinkTrendDTO,
    TrendImportResultDTO,
    TrendStatsDTO,
)
from netwatch_api.application.services.resolution import Clock, utcnow
from netwatch_api.domain.exceptions.monitoring import InvalidTrendData
from netwatch_api.domain.services.trend_analysis import analyze_history, period_bounds
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

LINK_PREFIX: Final[str] = "link:"
LINK_MAX_PERIODS: Final[int] = 12


def link_series_id(link_id: str) -> str:
    cleaned = link_id.strip()
    if not cleaned:
        raise InvalidTrendData("link id must be non-empty")
    return f"{LINK_PREFIX}{cleaned}"


class GetLinkTrendUseCase:
    """Analyze the stored history of one link."""

    def __init__(self, *, history: TrendHistoryPort, clock: Clock = utcnow) -> None:
        self._history = history
        self._clock = clock

    async def execute(self, link_id: str) -> LinkTrendDTO:
        sid = link_series_id(link_id)
        trend = analyze_history(sid, self._history.history(sid), self._clock().date())
        return LinkTrendDTO.from_trend(trend).model_copy(update={"link_id": link_id.strip()})


class RecordLinkSampleUseCase:
    """Store one utilization reading for a link and return the updated analysis."""

    def __init__(self, *, history: TrendHistoryPort, clock: Clock = utcnow) -> None:
        self._history = history
        self._clock = clock

    async def execute(
        self, link_id: str, value: float, *, observed_on: date | None = None
    ) -> LinkTrendDTO:
        sid = link_series_id(link_id)
        today = self._clock().date()
        start, _ = period_bounds(observed_on or today)
        self._history.record(sid, start, value, max_periods=LINK_MAX_PERIODS)
        logger.info(
            "trend_history.link_recorded",
            extra={"series_id": sid, "period_start": start.isoformat(), "value": value},
        )
        trend = analyze_history(sid, self._history.history(sid), today)
        return LinkTrendDTO.from_trend(trend).model_copy(update={"link_id": link_id.strip()})


class ExportTrendHistoryUseCase:
    def __init__(self, *, history: TrendHistoryPort) -> None:
        self._history = history

    async def execute(self) -> dict[str, Any]:
        return self._history.export()


class ImportTrendHistoryUseCase:
    def __init__(self, *, history: TrendHistoryPort) -> None:
        self._history = history

    async def execute(self, document: Mapping[str, Any]) -> TrendImportResultDTO:
        """Merge an exported document.

        Raises:
            InvalidTrendData: The document is malformed; the store is untouched.
        """
        imported = self._history.import_(document)
        series = document.get("series") or {}
        return TrendImportResultDTO(imported_samples=imported, series_count=len(series))


class GetTrendStatsUseCase:
    def __init__(self, *, history: TrendHistoryPort) -> None:
        self._history = history

    async def execute(self) -> TrendStatsDTO:
        return TrendStatsDTO.model_validate(self._history.stats())
