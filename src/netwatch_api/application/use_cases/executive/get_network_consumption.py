# src/netwatch_api/application/use_cases/executive/get_network_consumption.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: network consumption per location, from traffic bills."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping, Sequence
from typing import Any, Final

from netwatch_api.application.schemas.dto.base import MetricDTO
from netwatch_api.application.schemas.dto.executive import (
    LocationConsumptionDTO,
    NetworkConsumptionDTO,
)
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.domain.entities.records import Bill
from netwatch_api.domain.enums.monitoring import SourceKind
from netwatch_api.domain.exceptions.monitoring import EmptyResult
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import bill_location, bill_rate_mbps, mean, round_to
from netwatch_api.domain.services.demo_data import DEMO_CONSUMPTION_MBPS

CACHE_KEY: Final[str] = "network-consumption"


def consumption_by_location(bills: Sequence[Bill]) -> dict[str, list[float]]:
    grouped: dict[str, list[float]] = defaultdict(list)
    for bill in bills:
        grouped[bill_location(bill)].append(bill_rate_mbps(bill))
    return dict(grouped)


def build_consumption(
    rates: Mapping[str, Sequence[float]], source_kind: SourceKind
) -> NetworkConsumptionDTO:
    """Average Mbps per location, busiest first."""
    rows = [
        LocationConsumptionDTO(
            location=location, bill_count=len(values), average_mbps=round_to(mean(values), 2)
        )
        for location, values in rates.items()
    ]
    rows.sort(key=lambda r: (-r.average_mbps, r.location))
    averages = [r.average_mbps for r in rows]
    return NetworkConsumptionDTO(
        source_kind=source_kind,
        locations=rows,
        total_mbps=MetricDTO.of(round_to(sum(averages), 2), source_kind, "Mbps"),
        average_mbps=MetricDTO.of(round_to(mean(averages), 2), source_kind, "Mbps"),
    )


class GetNetworkConsumptionUseCase:
    def __init__(
        self,
        *,
        policy: ResolutionPolicy,
        gateway: MonitoringGatewayProtocol,
        config: DashboardConfig,
    ) -> None:
        self._policy = policy
        self._gateway = gateway
        self._config = config

    @staticmethod
    def cache_key(plazas: Sequence[str] | None = None) -> str:
        if not plazas:
            return CACHE_KEY
        return f"{CACHE_KEY}:{','.join(sorted(plazas))}"

    async def execute(
        self, *, plazas: Sequence[str] | None = None, refresh: bool = False
    ) -> Resolution:
        wanted = [p.strip() for p in plazas or () if p.strip()]

        def keep(rates: Mapping[str, Sequence[float]]) -> dict[str, Sequence[float]]:
            return {k: v for k, v in rates.items() if not wanted or k in wanted}

        async def primary() -> dict[str, Any]:
            bills = await self._gateway.bills()
            if not bills:
                raise EmptyResult("no bills returned")
            rates = keep(consumption_by_location(bills))
            if not rates:
                raise EmptyResult("no location matched", details={"plazas": wanted})
            return build_consumption(rates, SourceKind.LIVE).model_dump(mode="json")

        def demo() -> dict[str, Any]:
            rates = keep({k: [v] for k, v in DEMO_CONSUMPTION_MBPS.items()})
            return build_consumption(rates, SourceKind.DEMO).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(wanted),
                fetch_primary=primary,
                ttl_s=self._config.ttl_executive_s,
                fallback=self._config.fallback_or_none(demo),
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.DEMO,
                skip_cache=refresh,
            )
        )
