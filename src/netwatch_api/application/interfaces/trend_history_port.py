# src/netwatch_api/application/interfaces/trend_history_port.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Trend history port.

Per-series utilization samples keyed by period start date. Implementations
keep samples sorted, replace same-date samples and bound each series.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any, Protocol

from netwatch_api.domain.services.trend_analysis import TrendSample


class TrendHistoryPort(Protocol):
    """Storage for historical utilization series."""

    def record(
        self, series_id: str, period_start: date, value: float, *, max_periods: int | None = None
    ) -> None: ...

    def history(self, series_id: str) -> Sequence[TrendSample]: ...

    def series_ids(self) -> list[str]: ...

    def clear(self, series_id: str | None = None) -> None: ...

    def export(self) -> dict[str, Any]: ...

    def import_(self, data: Mapping[str, Any]) -> int: ...

    def stats(self) -> dict[str, Any]: ...
