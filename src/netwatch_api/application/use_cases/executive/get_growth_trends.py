# src/netwatch_api/application/use_cases/executive/get_growth_trends.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: growth trends for the executive dashboard.

The current network state (device count, bill count, average traffic and
utilization from bills) is the baseline a deterministic series is scaled
from; the series is then analyzed and projected forward.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import date
from typing import Any

from netwatch_api.application.schemas.dto.base import MetricDTO
from netwatch_api.application.schemas.dto.executive import (
    GrowthAnalysisDTO,
    GrowthPointDTO,
    GrowthProjectionDTO,
    GrowthTrendsDTO,
)
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Clock,
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
    utcnow,
)
from netwatch_api.domain.entities.records import Bill, Device
from netwatch_api.domain.enums.monitoring import SourceKind
from netwatch_api.domain.exceptions.monitoring import EmptyResult
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import (
    BYTES_PER_MEBIBYTE,
    bill_rate_mbps,
    clamp_pct,
)
from netwatch_api.domain.services.demo_data import FALLBACK_BASELINE, NetworkBaseline
from netwatch_api.domain.services.growth import (
    GrowthMetric,
    GrowthPeriod,
    build_growth_series,
    growth_analysis,
    growth_projections,
)


def network_baseline(devices: Sequence[Device], bills: Sequence[Bill]) -> NetworkBaseline:
    """Current state from live records.

    Average traffic counts only bills with traffic; utilization is total
    traffic over total contracted quota, capped at 100.
    """
    rates = [r for r in (bill_rate_mbps(b) for b in bills) if r > 0]
    contracted = sum(b.quota_bytes for b in bills if b.quota_bytes > 0) / BYTES_PER_MEBIBYTE
    total_traffic = sum(rates)
    return NetworkBaseline(
        device_count=sum(1 for d in devices if d.is_up),
        bill_count=len(bills),
        average_traffic_mbps=total_traffic / len(rates) if rates else 0.0,
        average_utilization=clamp_pct(total_traffic / contracted * 100) if contracted > 0 else 0.0,
        total_contracted_mbps=contracted,
    )


def baseline_value(baseline: NetworkBaseline, metric: GrowthMetric) -> float:
    return {
        GrowthMetric.DEVICES: baseline.device_count,
        GrowthMetric.CUSTOMERS: baseline.bill_count,
        GrowthMetric.TRAFFIC: baseline.average_traffic_mbps,
        GrowthMetric.UTILIZATION: baseline.average_utilization,
    }[metric]


def build_growth_trends(
    baseline: NetworkBaseline,
    metric: GrowthMetric,
    period: GrowthPeriod,
    *,
    today: date,
    source_kind: SourceKind,
) -> GrowthTrendsDTO:
    points = build_growth_series(baseline_value(baseline, metric), metric, period, today)
    analysis = growth_analysis(points)
    projection = growth_projections(points)
    unit = "%" if metric is GrowthMetric.UTILIZATION else None
    return GrowthTrendsDTO(
        source_kind=source_kind,
        period=period.value,
        metric=metric.value,
        points=[
            GrowthPointDTO(period=p.period, value=p.value, growth=p.growth, trend=p.trend)
            for p in points
        ],
        analysis=GrowthAnalysisDTO(
            current_value=MetricDTO.of(analysis.current_value, source_kind, unit),
            previous_value=analysis.previous_value,
            total_growth=MetricDTO.of(analysis.total_growth, source_kind, "%"),
            average_growth=MetricDTO.of(analysis.average_growth, source_kind, "%"),
            trend=analysis.trend,
        ),
        projections=(
            GrowthProjectionDTO(
                next_month=MetricDTO.of(projection.next_month, source_kind, unit),
                next_quarter=MetricDTO.of(projection.next_quarter, source_kind, unit),
            )
            if projection is not None
            else None
        ),
    )


class GetGrowthTrendsUseCase:
    def __init__(
        self,
        *,
        policy: ResolutionPolicy,
        gateway: MonitoringGatewayProtocol,
        config: DashboardConfig,
        clock: Clock = utcnow,
    ) -> None:
        self._policy = policy
        self._gateway = gateway
        self._config = config
        self._clock = clock

    @staticmethod
    def cache_key(period: GrowthPeriod, metric: GrowthMetric) -> str:
        return f"growth-trends:{period.value}:{metric.value}"

    async def execute(
        self,
        *,
        period: GrowthPeriod = GrowthPeriod.SIX_MONTHS,
        metric: GrowthMetric = GrowthMetric.UTILIZATION,
        refresh: bool = False,
    ) -> Resolution:
        today = self._clock().date()

        async def primary() -> dict[str, Any]:
            devices, bills = await asyncio.gather(self._gateway.devices(), self._gateway.bills())
            if not devices and not bills:
                raise EmptyResult("no devices or bills returned")
            return build_growth_trends(
                network_baseline(devices, bills),
                metric,
                period,
                today=today,
                source_kind=SourceKind.LIVE,
            ).model_dump(mode="json")

        def demo() -> dict[str, Any]:
            return build_growth_trends(
                FALLBACK_BASELINE, metric, period, today=today, source_kind=SourceKind.DEMO
            ).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(period, metric),
                fetch_primary=primary,
                ttl_s=self._config.ttl_trends_s,
                fallback=self._config.fallback_or_none(demo),
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.DEMO,
                skip_cache=refresh,
            )
        )

