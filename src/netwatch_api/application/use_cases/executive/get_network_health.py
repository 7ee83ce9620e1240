# src/netwatch_api/application/use_cases/executive/get_network_health.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: weighted network health score.

The overall score weighs device availability (40%), the alert mix (35%)
and link performance from bills (25%). Link performance rewards a 95th
percentile utilization near 70% of the contracted quota and penalizes both
idle and saturated links.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Sequence
from typing import Any, Final

from netwatch_api.application.schemas.dto.base import MetricDTO
from netwatch_api.application.schemas.dto.executive import (
    AlertHealthDTO,
    DeviceHealthDTO,
    LocationNetworkHealthDTO,
    NetworkHealthDTO,
    PerformanceHealthDTO,
)
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.domain.entities.records import Alert, Bill, Device
from netwatch_api.domain.enums.monitoring import AlertSeverity, NetworkHealthStatus, SourceKind
from netwatch_api.domain.exceptions.monitoring import EmptyResult
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import extract_plaza, round1
from netwatch_api.domain.services.demo_data import DEMO_NETWORK_HEALTH
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

DEVICE_WEIGHT: Final[float] = 0.4
ALERT_WEIGHT: Final[float] = 0.35
PERFORMANCE_WEIGHT: Final[float] = 0.25


def network_health_status(score: float) -> NetworkHealthStatus:
    if score >= 90:
        return NetworkHealthStatus.EXCELLENT
    if score >= 80:
        return NetworkHealthStatus.GOOD
    if score >= 70:
        return NetworkHealthStatus.FAIR
    if score >= 60:
        return NetworkHealthStatus.POOR
    return NetworkHealthStatus.CRITICAL


def device_health(devices: Sequence[Device]) -> DeviceHealthDTO:
    total = len(devices)
    active = sum(1 for d in devices if d.is_up)
    score = active / total * 100 if total else 100.0
    return DeviceHealthDTO(
        score=round1(score), total_devices=total, active_devices=active, down_devices=total - active
    )


def alert_health(alerts: Sequence[Alert]) -> AlertHealthDTO:
    """Critical alerts cost up to 50 points, warnings up to 20, by share of all alerts."""
    total = len(alerts)
    critical = sum(1 for a in alerts if a.severity is AlertSeverity.CRITICAL)
    warning = sum(1 for a in alerts if a.severity is AlertSeverity.WARNING)
    score = 100.0
    if total:
        score = 100 - critical / total * 50 - warning / total * 20
    return AlertHealthDTO(
        score=round1(max(score, 0.0)),
        total_alerts=total,
        critical_alerts=critical,
        warning_alerts=warning,
        info_alerts=total - critical - warning,
    )


def performance_score(avg_utilization: float) -> float:
    if avg_utilization > 90:
        return 100 - (avg_utilization - 90) * 2
    if avg_utilization < 30:
        return 70 + avg_utilization / 30 * 20
    return 90 + (70 - abs(avg_utilization - 70)) / 70 * 10


def performance_health(bills: Sequence[Bill]) -> PerformanceHealthDTO:
    """Utilization of each bill with a quota; each bill contributes at most 100%."""
    utilizations = [
        max(b.rate_95th_in, b.rate_95th_out) / b.quota_bytes * 100
        for b in bills
        if b.quota_bytes > 0
    ]
    avg = sum(min(u, 100.0) for u in utilizations) / len(utilizations) if utilizations else 0.0
    peak = min(max(utilizations, default=0.0), 100.0)
    return PerformanceHealthDTO(
        score=round1(max(performance_score(avg), 0.0)),
        avg_utilization=round1(avg),
        peak_utilization=round1(peak),
    )


def location_breakdown(
    devices: Sequence[Device], alerts: Sequence[Alert]
) -> list[LocationNetworkHealthDTO]:
    """Availability per plaza with the alerts raised by that plaza's devices, best first."""
    groups: dict[str, list[Device]] = defaultdict(list)
    plaza_of: dict[str, str] = {}
    for device in devices:
        plaza = extract_plaza(device.location)
        groups[plaza].append(device)
        plaza_of[device.device_id] = plaza
    alert_counts: dict[str, int] = defaultdict(int)
    for alert in alerts:
        if alert.device_id in plaza_of:
            alert_counts[plaza_of[alert.device_id]] += 1
    rows = [
        LocationNetworkHealthDTO(
            location=plaza,
            score=device_health(members).score,
            devices=len(members),
            alerts=alert_counts[plaza],
        )
        for plaza, members in groups.items()
    ]
    return sorted(rows, key=lambda r: (-r.score, r.location))


def build_network_health(
    devices: Sequence[Device],
    alerts: Sequence[Alert],
    bills: Sequence[Bill],
    *,
    include_details: bool,
    source_kind: SourceKind = SourceKind.LIVE,
) -> NetworkHealthDTO:
    devices_part = device_health(devices)
    alerts_part = alert_health(alerts)
    performance_part = performance_health(bills)
    overall = round1(
        devices_part.score * DEVICE_WEIGHT
        + alerts_part.score * ALERT_WEIGHT
        + performance_part.score * PERFORMANCE_WEIGHT
    )
    return NetworkHealthDTO(
        source_kind=source_kind,
        overall_score=MetricDTO.of(overall, source_kind),
        status=network_health_status(overall),
        device_health=devices_part,
        alert_health=alerts_part,
        performance_health=performance_part,
        locations=location_breakdown(devices, alerts) if include_details else None,
    )


def demo_network_health(include_details: bool) -> NetworkHealthDTO:
    demo = DEMO_NETWORK_HEALTH
    score = float(demo["overall_score"])
    locations = [LocationNetworkHealthDTO.model_validate(row) for row in demo["locations"]]
    return NetworkHealthDTO(
        source_kind=SourceKind.DEMO,
        overall_score=MetricDTO.of(score, SourceKind.DEMO),
        status=network_health_status(score),
        device_health=DeviceHealthDTO.model_validate(demo["device_health"]),
        alert_health=AlertHealthDTO.model_validate(demo["alert_health"]),
        performance_health=PerformanceHealthDTO.model_validate(demo["performance_health"]),
        locations=locations if include_details else None,
    )


class GetNetworkHealthUseCase:
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
    def cache_key(location: str | None, include_details: bool) -> str:
        return f"network-health:{location or 'all'}:{int(include_details)}"

    async def execute(
        self,
        *,
        location: str | None = None,
        include_details: bool = False,
        refresh: bool = False,
    ) -> Resolution:
        location = (location or "").strip() or None

        async def primary() -> dict[str, Any]:
            devices, alerts, bills = await asyncio.gather(
                self._gateway.devices(location=location),
                self._gateway.alerts(),
                self._gateway.bills(),
            )
            if not devices:
                raise EmptyResult("no devices returned", details={"location": location or "all"})
            report = build_network_health(
                devices, alerts, bills, include_details=include_details
            )
            logger.info(
                "network_health.scored",
                extra={"score": report.overall_score.value, "devices": len(devices)},
            )
            return report.model_dump(mode="json")

        def demo() -> dict[str, Any]:
            return demo_network_health(include_details).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(location, include_details),
                fetch_primary=primary,
                ttl_s=self._config.ttl_executive_s,
                fallback=self._config.fallback_or_none(demo),
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.DEMO,
                skip_cache=refresh,
            )
        )
