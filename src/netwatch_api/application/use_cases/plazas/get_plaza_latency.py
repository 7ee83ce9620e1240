# src/netwatch_api/application/use_cases/plazas/get_plaza_latency.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: latency per network tier of a plaza.

The upstream collects no latency, so the daily series per tier is always
modeled and served from the fallback tier, tagged ``fallback``. The live
tier only answers when the plaza has no devices at all: an empty result
with a warning instead of a modeled series for a plaza that does not exist.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any, Final

from netwatch_api.application.schemas.dto.plazas import (
    LatencyPointDTO,
    LatencySummaryDTO,
    PlazaLatencyDTO,
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
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import mean, round1
from netwatch_api.domain.services.demo_data import (
    LATENCY_BASELINES_MS,
    synthetic_latency,
)

LATENCY_PERIODS: Final[tuple[str, ...]] = ("7d", "30d")
NO_DEVICES_WARNING: Final[str] = "No devices found for this plaza"


def parse_network_types(raw: str | None) -> list[str]:
    """Known tiers from a comma-separated list, in request order; all tiers when empty."""
    if not raw or not raw.strip():
        return list(LATENCY_BASELINES_MS)
    requested = [t.strip().lower() for t in raw.split(",") if t.strip()]
    known = [t for t in dict.fromkeys(requested) if t in LATENCY_BASELINES_MS]
    if not known:
        raise ValueError(f"no supported network type in {raw!r}")
    return known


def summarize_latency(points: Sequence[tuple[date, float]]) -> LatencySummaryDTO:
    values = [v for _, v in points]
    return LatencySummaryDTO(
        avg=round1(mean(values)),
        max=round1(max(values, default=0.0)),
        min=round1(min(values, default=0.0)),
    )


def build_latency(
    plaza: str,
    period: str,
    network_types: Sequence[str],
    today: date,
    *,
    device_count: int | None,
) -> PlazaLatencyDTO:
    series = {t: synthetic_latency(plaza, period, t, today) for t in network_types}
    return PlazaLatencyDTO(
        plaza=plaza,
        period=period,
        source_kind=SourceKind.FALLBACK,
        device_count=device_count,
        series={
            t: [LatencyPointDTO(date=d.isoformat(), latency_ms=v) for d, v in points]
            for t, points in series.items()
        },
        summary={t: summarize_latency(points) for t, points in series.items()},
    )


class GetPlazaLatencyUseCase:
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
    def cache_key(plaza: str, period: str, network_types: Sequence[str]) -> str:
        return f"plaza-latency:{plaza}:{period}:{','.join(network_types)}"

    async def execute(
        self,
        plaza: str,
        *,
        period: str = "7d",
        network_types: str | None = None,
        refresh: bool = False,
    ) -> Resolution:
        name = normalize_plaza(plaza)
        if name is None:
            raise ValueError("plaza must be non-empty")
        if period not in LATENCY_PERIODS:
            raise ValueError(f"unsupported period {period!r}")
        tiers = parse_network_types(network_types)
        today = self._clock().date()
        device_count: int | None = None

        async def primary() -> dict[str, Any] | None:
            nonlocal device_count
            devices = await self._gateway.devices(location=name)
            device_count = len(devices)
            if devices:
                # Reachable plaza: nothing measured upstream, the fallback tier models it.
                return None
            return PlazaLatencyDTO(
                plaza=name,
                period=period,
                source_kind=SourceKind.LIVE,
                device_count=0,
                warning=NO_DEVICES_WARNING,
            ).model_dump(mode="json")

        def modeled() -> dict[str, Any]:
            return build_latency(
                name, period, tiers, today, device_count=device_count
            ).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(name, period, tiers),
                fetch_primary=primary,
                ttl_s=self._config.ttl_plaza_s,
                fallback=modeled,
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.FALLBACK,
                skip_cache=refresh,
            )
        )
