# src/netwatch_api/application/use_cases/executive/get_critical_sites.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: sites needing attention.

Devices are grouped into sites by hostname prefix (``AAA-BBB-CCC-...``).
A site is flagged when its average port utilization reaches the threshold,
it has two or more active alerts, or its site health score is 70 or lower.
Flagged sites are ordered worst first (lowest score, then highest
utilization).
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Mapping, Sequence
from typing import Any, Final

from netwatch_api.application.schemas.dto.base import MetricDTO
from netwatch_api.application.schemas.dto.executive import (
    CriticalSiteDTO,
    CriticalSitesDTO,
    CriticalSitesSummaryDTO,
    StatusBreakdownDTO,
)
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.domain.entities.records import Alert, Device, Port
from netwatch_api.domain.enums.monitoring import SiteStatus, SourceKind
from netwatch_api.domain.exceptions.monitoring import EmptyResult
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import (
    DEFAULT_PLAZA,
    mean,
    port_capacity_mbps,
    port_rate_utilization_pct,
    round1,
    site_health_score,
    site_name,
    site_status,
)
from netwatch_api.domain.services.demo_data import DEMO_CRITICAL_SITES
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

DEFAULT_LIMIT: Final[int] = 10


def site_issues(utilization: float, alert_count: int, score: float, threshold: float) -> list[str]:
    issues: list[str] = []
    if utilization >= 90:
        issues.append("Critical port utilization")
    elif utilization >= threshold:
        issues.append("High port utilization")
    if alert_count >= 3:
        issues.append("Multiple device alerts")
    elif alert_count >= 1:
        issues.append("Device alerts present")
    if score <= 60:
        issues.append("Poor health score")
    elif score <= 70:
        issues.append("Health score warning")
    return issues


def analyze_site(
    site: str,
    devices: Sequence[Device],
    ports: Sequence[Port],
    alert_count: int,
    threshold: float,
) -> CriticalSiteDTO | None:
    """Score one site; return None when it does not need attention."""
    measured = [port_rate_utilization_pct(p) for p in ports if port_capacity_mbps(p) > 0]
    utilization = round1(mean(measured))
    score = site_health_score(utilization, alert_count, len(devices))
    if not (utilization >= threshold or alert_count >= 2 or score <= 70):
        return None
    return CriticalSiteDTO(
        site=site,
        plaza=devices[0].location or DEFAULT_PLAZA,
        health_score=score,
        utilization=utilization,
        alert_count=alert_count,
        device_count=len(devices),
        port_count=len(ports),
        status=site_status(utilization, alert_count, score),
        issues=site_issues(utilization, alert_count, score, threshold),
    )


def summarize_sites(
    flagged: Sequence[CriticalSiteDTO],
    *,
    total_sites: int,
    threshold: float,
    limit: int,
    source_kind: SourceKind,
) -> CriticalSitesDTO:
    ordered = sorted(flagged, key=lambda s: (s.health_score, -s.utilization, s.site))
    breakdown = StatusBreakdownDTO(
        critical=sum(1 for s in ordered if s.status is SiteStatus.CRITICAL),
        warning=sum(1 for s in ordered if s.status is SiteStatus.WARNING),
        attention=sum(1 for s in ordered if s.status is SiteStatus.ATTENTION),
    )
    summary = CriticalSitesSummaryDTO(
        total_sites=total_sites,
        total_critical_sites=len(ordered),
        average_health_score=MetricDTO.of(
            round1(mean([s.health_score for s in ordered])), source_kind
        ),
        total_alerts=sum(s.alert_count for s in ordered),
        critical_threshold=threshold,
        status_breakdown=breakdown,
    )
    return CriticalSitesDTO(source_kind=source_kind, sites=ordered[:limit], summary=summary)


def group_sites(devices: Sequence[Device]) -> dict[str, list[Device]]:
    sites: dict[str, list[Device]] = defaultdict(list)
    for device in devices:
        sites[site_name(device.hostname, device.location)].append(device)
    return dict(sites)


class GetCriticalSitesUseCase:
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
    def cache_key(limit: int, threshold: float, include_alerts: bool) -> str:
        return f"critical-sites:{limit}:{threshold:g}:{int(include_alerts)}"

    async def execute(
        self,
        *,
        limit: int = DEFAULT_LIMIT,
        threshold: float | None = None,
        include_alerts: bool = True,
        refresh: bool = False,
    ) -> Resolution:
        level = self._config.critical_site_threshold_pct if threshold is None else threshold

        async def primary() -> dict[str, Any]:
            devices = await self._gateway.devices()
            if not devices:
                raise EmptyResult("no devices returned")
            sites = group_sites(devices)
            ports, alerts = await asyncio.gather(
                self._gateway.ports(up_only=True), self._alerts(include_alerts)
            )
            return self._analyze(sites, ports, alerts, level, limit).model_dump(mode="json")

        def demo() -> dict[str, Any]:
            flagged = [CriticalSiteDTO.model_validate(s) for s in DEMO_CRITICAL_SITES]
            return summarize_sites(
                flagged,
                total_sites=len(flagged),
                threshold=level,
                limit=limit,
                source_kind=SourceKind.DEMO,
            ).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(limit, level, include_alerts),
                fetch_primary=primary,
                ttl_s=self._config.ttl_executive_s,
                fallback=self._config.fallback_or_none(demo),
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.DEMO,
                skip_cache=refresh,
            )
        )

    async def _alerts(self, include: bool) -> list[Alert]:
        if not include:
            return []
        return await self._gateway.alerts()

    @staticmethod
    def _analyze(
        sites: Mapping[str, list[Device]],
        ports: Sequence[Port],
        alerts: Sequence[Alert],
        threshold: float,
        limit: int,
    ) -> CriticalSitesDTO:
        ports_by_device: dict[str, list[Port]] = defaultdict(list)
        for port in ports:
            ports_by_device[port.device_id].append(port)
        alerts_by_device: dict[str, int] = defaultdict(int)
        for alert in alerts:
            alerts_by_device[alert.device_id] += 1

        flagged: list[CriticalSiteDTO] = []
        for site, members in sites.items():
            site_ports = [p for d in members for p in ports_by_device.get(d.device_id, [])]
            alert_count = sum(alerts_by_device.get(d.device_id, 0) for d in members)
            analysis = analyze_site(site, members, site_ports, alert_count, threshold)
            if analysis is not None:
                flagged.append(analysis)
        logger.info(
            "critical_sites.analyzed",
            extra={"sites": len(sites), "flagged": len(flagged), "threshold": threshold},
        )
        return summarize_sites(
            flagged,
            total_sites=len(sites),
            threshold=threshold,
            limit=limit,
            source_kind=SourceKind.LIVE,
        )
