# src/netwatch_api/application/use_cases/monitoring/get_saturated_sites.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: most saturated sites.

Active devices are grouped by site, the second comma-separated part of
their location (``"Coahuila, Saltillo, RB Jolla"`` -> ``Saltillo``). A
site's saturation is the larger of its busiest port and its average port
utilization, read from the upstream in/out percentages of up ports.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from typing import Any, Final

from netwatch_api.application.schemas.dto.monitoring import SaturatedSiteDTO, SaturatedSitesDTO
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.domain.entities.records import Device, Port
from netwatch_api.domain.enums.monitoring import SaturationTrend, SourceKind, UtilizationStatus
from netwatch_api.domain.exceptions.monitoring import EmptyResult
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import clamp_pct, mean, round1
from netwatch_api.domain.services.demo_data import DEMO_SATURATED_SITES
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

DEFAULT_LIMIT: Final[int] = 5
DEVICES_PER_SITE: Final[int] = 5
CRITICAL_PORT_PCT: Final[float] = 80.0


def saturation_site(location: str) -> str:
    parts = [p.strip() for p in location.split(",")]
    return parts[1] if len(parts) >= 2 else parts[0]


def saturation_status(saturation: float) -> UtilizationStatus:
    if saturation >= 85:
        return UtilizationStatus.CRITICAL
    if saturation >= 70:
        return UtilizationStatus.WARNING
    return UtilizationStatus.NORMAL


def saturation_trend(saturation: float) -> SaturationTrend:
    if saturation >= 75:
        return SaturationTrend.UP
    if saturation >= 50:
        return SaturationTrend.STABLE
    return SaturationTrend.DOWN


def port_saturation(port: Port) -> float:
    return max(clamp_pct(port.in_perc or 0.0), clamp_pct(port.out_perc or 0.0))


def analyze_saturation(
    name: str, devices: Sequence[Device], ports: Sequence[Port]
) -> SaturatedSiteDTO:
    operational = [p for p in ports if p.is_up and (p.if_high_speed_mbps or 0) > 0]
    loads = [u for u in (port_saturation(p) for p in operational) if u > 0]
    peak, average = max(loads, default=0.0), mean(loads)
    saturation = clamp_pct(max(peak, average))
    critical = sum(1 for u in loads if u >= CRITICAL_PORT_PCT)
    return SaturatedSiteDTO(
        id="-".join(name.lower().split()),
        name=name,
        location=devices[0].location if devices else name,
        saturation=round1(saturation),
        trend=saturation_trend(saturation),
        outages=critical // 2 if critical >= 3 else 0,
        device_count=len(devices),
        critical_ports=critical,
        max_port_utilization=round1(clamp_pct(peak)),
        avg_port_utilization=round1(clamp_pct(average)),
        operational_ports=len(operational),
        status=saturation_status(saturation),
    )


def rank_sites(
    sites: Sequence[SaturatedSiteDTO], limit: int, source_kind: SourceKind
) -> SaturatedSitesDTO:
    ordered = sorted(sites, key=lambda s: (-s.saturation, s.name))
    return SaturatedSitesDTO(source_kind=source_kind, total_sites=len(sites), sites=ordered[:limit])


def group_by_site(devices: Sequence[Device]) -> dict[str, list[Device]]:
    sites: dict[str, list[Device]] = defaultdict(list)
    for device in devices:
        if not device.is_up or not device.location.strip():
            continue
        site = saturation_site(device.location)
        if site:
            sites[site].append(device)
    return dict(sites)


class GetSaturatedSitesUseCase:
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
    def cache_key(limit: int) -> str:
        return f"saturated-sites:{limit}"

    async def execute(self, *, limit: int = DEFAULT_LIMIT, refresh: bool = False) -> Resolution:
        async def primary() -> dict[str, Any]:
            sites = group_by_site(await self._gateway.devices())
            if not sites:
                raise EmptyResult("no active devices with a location")
            sampled = {name: members[:DEVICES_PER_SITE] for name, members in sites.items()}
            ids = [d.device_id for members in sampled.values() for d in members]
            ports_by_device: dict[str, list[Port]] = defaultdict(list)
            for port in await self._gateway.ports(device_ids=ids, up_only=True):
                ports_by_device[port.device_id].append(port)
            analyzed = [
                analyze_saturation(
                    name,
                    sites[name],
                    [p for d in members for p in ports_by_device.get(d.device_id, [])],
                )
                for name, members in sampled.items()
            ]
            logger.info("saturated_sites.analyzed", extra={"sites": len(analyzed)})
            return rank_sites(analyzed, limit, SourceKind.LIVE).model_dump(mode="json")

        def demo() -> dict[str, Any]:
            sites = [SaturatedSiteDTO.model_validate(s) for s in DEMO_SATURATED_SITES]
            return rank_sites(sites, limit, SourceKind.DEMO).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(limit),
                fetch_primary=primary,
                ttl_s=self._config.ttl_executive_s,
                fallback=self._config.fallback_or_none(demo),
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.DEMO,
                skip_cache=refresh,
            )
        )
