# src/netwatch_api/application/use_cases/plazas/get_plaza_trends.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: daily utilization trend for a plaza.

The live tier samples the plaza's current utilization into the daily
history (series ``plaza:<name>``, one sample per day, 90 kept) and returns
the stored window for the requested period. Without upstream data the
deterministic synthetic series is served, tagged ``fallback``.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta
from typing import Any, Final

from netwatch_api.application.interfaces.trend_history_port import TrendHistoryPort
from netwatch_api.application.schemas.dto.base import MetricDTO
from netwatch_api.application.schemas.dto.plazas import (
    PlazaTrendsDTO,
    TrendPointDTO,
    TrendSummaryDTO,
)
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Clock,
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
    utcnow,
)
from netwatch_api.application.use_cases.monitoring.get_monitoring_snapshot import normalize_plaza
from netwatch_api.domain.enums.monitoring import SourceKind
from netwatch_api.domain.exceptions.monitoring import EmptyResult
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import (
    mean,
    port_capacity_mbps,
    port_usage_mbps,
    round1,
    utilization_pct,
)
from netwatch_api.domain.services.demo_data import TREND_PERIOD_DAYS, synthetic_plaza_trend

SUPPORTED_INTERVALS: Final[tuple[str, ...]] = ("day",)
DAILY_HISTORY_DAYS: Final[int] = 90


def series_id(plaza: str) -> str:
    return f"plaza:{plaza}"


def build_trends(
    plaza: str,
    period: str,
    interval: str,
    points: Sequence[tuple[date, float]],
    source_kind: SourceKind,
) -> PlazaTrendsDTO:
    values = [v for _, v in points]
    return PlazaTrendsDTO(
        plaza=plaza,
        period=period,
        interval=interval,
        source_kind=source_kind,
        points=[TrendPointDTO(date=d.isoformat(), utilization=v) for d, v in points],
        summary=TrendSummaryDTO(
            average=MetricDTO.of(round1(mean(values)), source_kind, "%"),
            maximum=MetricDTO.of(max(values, default=0.0), source_kind, "%"),
            minimum=MetricDTO.of(min(values, default=0.0), source_kind, "%"),
        ),
    )


class GetPlazaTrendsUseCase:
    def __init__(
        self,
        *,
        policy: ResolutionPolicy,
        gateway: MonitoringGatewayProtocol,
        history: TrendHistoryPort,
        config: DashboardConfig,
        clock: Clock = utcnow,
    ) -> None:
        self._policy = policy
        self._gateway = gateway
        self._history = history
        self._config = config
        self._clock = clock

    @staticmethod
    def cache_key(plaza: str, period: str, interval: str) -> str:
        return f"plaza-trends:{plaza}:{period}:{interval}"

    async def execute(
        self, plaza: str, *, period: str = "7d", interval: str = "day", refresh: bool = False
    ) -> Resolution:
        name = normalize_plaza(plaza)
        if name is None:
            raise ValueError("plaza must be non-empty")
        if period not in TREND_PERIOD_DAYS:
            raise ValueError(f"unsupported period {period!r}")
        if interval not in SUPPORTED_INTERVALS:
            raise ValueError(f"unsupported interval {interval!r}")
        today = self._clock().date()

        async def primary() -> dict[str, Any]:
            current = await self._current_utilization(name)
            self._history.record(series_id(name), today, current, max_periods=DAILY_HISTORY_DAYS)
            start = today - timedelta(days=TREND_PERIOD_DAYS[period] - 1)
            window = [
                (s.period_start, s.value)
                for s in self._history.history(series_id(name))
                if start <= s.period_start <= today
            ]
            return build_trends(name, period, interval, window, SourceKind.LIVE).model_dump(
                mode="json"
            )

        def synthetic() -> dict[str, Any]:
            points = synthetic_plaza_trend(name, period, today)
            return build_trends(name, period, interval, points, SourceKind.FALLBACK).model_dump(
                mode="json"
            )

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(name, period, interval),
                fetch_primary=primary,
                ttl_s=self._config.ttl_trends_s,
                fallback=self._config.fallback_or_none(synthetic),
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.FALLBACK,
                skip_cache=refresh,
            )
        )

    async def _current_utilization(self, plaza: str) -> float:
        devices = await self._gateway.devices(location=plaza)
        if not devices:
            raise EmptyResult("no devices matched", details={"plaza": plaza})
        ports = await self._gateway.ports(device_ids=[d.device_id for d in devices], up_only=True)
        capacity = sum(port_capacity_mbps(p) for p in ports)
        if capacity <= 0:
            raise EmptyResult("no measurable capacity", details={"plaza": plaza})
        return utilization_pct(sum(port_usage_mbps(p) for p in ports), capacity)
