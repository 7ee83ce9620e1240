# src/netwatch_api/application/use_cases/plazas/get_plaza_overview.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: Get a plaza overview.

Synopsis:
    Device/port availability, active alerts and the weighted plaza health
    score, plus an optional capacity summary and an optional ranking of the
    busiest devices. A plaza with no matching devices falls back to the demo
    fixtures (there is no broader query for a single plaza view).
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Sequence
from typing import Any

from netwatch_api.application.schemas.dto.base import MetricDTO
from netwatch_api.application.schemas.dto.monitoring import AlertDTO
from netwatch_api.application.schemas.dto.plazas import (
    PlazaCapacityDTO,
    PlazaHealthDTO,
    PlazaOverviewDTO,
    TopDeviceDTO,
)
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.application.use_cases.monitoring.get_monitoring_snapshot import normalize_plaza
from netwatch_api.domain.entities.records import Alert, Device, Port
from netwatch_api.domain.enums.monitoring import SourceKind
from netwatch_api.domain.exceptions.monitoring import EmptyResult
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services import demo_data
from netwatch_api.domain.services.aggregation import (
    capacity_summary_status,
    health_grade,
    mean,
    plaza_health_score,
    port_capacity_mbps,
    port_rate_utilization_pct,
    port_usage_mbps,
    round1,
    round_to,
    utilization_pct,
    utilization_status,
)

DEFAULT_TOP_DEVICES = 10


def plaza_health(
    devices: Sequence[Device],
    ports: Sequence[Port],
    alerts: Sequence[Alert],
    source_kind: SourceKind,
) -> PlazaHealthDTO:
    devices_up = sum(1 for d in devices if d.is_up)
    ports_up = sum(1 for p in ports if p.is_up)
    score = plaza_health_score(devices_up, len(devices), ports_up, len(ports), len(alerts))
    return PlazaHealthDTO(
        score=MetricDTO.of(score, source_kind),
        grade=health_grade(score),
        device_availability=MetricDTO.of(
            utilization_pct(devices_up, len(devices)) if devices else 100.0, source_kind, "%"
        ),
        port_availability=MetricDTO.of(
            utilization_pct(ports_up, len(ports)) if ports else 100.0, source_kind, "%"
        ),
        alert_count=len(alerts),
    )


def plaza_capacity(ports: Sequence[Port], source_kind: SourceKind) -> PlazaCapacityDTO:
    """Rate-based capacity totals; links at >= 90% are critical, >= 75% warning."""
    total = sum(port_capacity_mbps(p) for p in ports)
    used = sum(port_usage_mbps(p) for p in ports)
    critical = warning = 0
    for port in ports:
        if port_capacity_mbps(port) <= 0 or port_usage_mbps(port) <= 0:
            continue
        pct = port_rate_utilization_pct(port)
        if pct >= 90:
            critical += 1
        elif pct >= 75:
            warning += 1
    pct = utilization_pct(used, total)
    return PlazaCapacityDTO(
        total_capacity_mbps=round_to(total, 0),
        used_capacity_mbps=round_to(used, 0),
        utilization=MetricDTO.of(pct, source_kind, "%"),
        status=capacity_summary_status(pct),
        links=len(ports),
        critical_links=critical,
        warning_links=warning,
    )


def top_devices(
    devices: Sequence[Device], ports: Sequence[Port], alerts: Sequence[Alert], limit: int
) -> list[TopDeviceDTO]:
    """Devices ranked by average port utilization (descending)."""
    by_device: dict[str, list[float]] = defaultdict(list)
    for port in ports:
        by_device[port.device_id].append(port_rate_utilization_pct(port))
    alert_counts: dict[str, int] = defaultdict(int)
    for alert in alerts:
        alert_counts[alert.device_id] += 1

    ranked: list[TopDeviceDTO] = []
    for device in devices:
        values = by_device.get(device.device_id, [])
        average = round1(mean(values))
        ranked.append(
            TopDeviceDTO(
                device_id=device.device_id,
                hostname=device.hostname,
                port_count=len(values),
                alert_count=alert_counts[device.device_id],
                average_utilization=average,
                max_utilization=max(values, default=0.0),
                status=utilization_status(average),
            )
        )
    ranked.sort(key=lambda d: (-d.average_utilization, -d.max_utilization, d.hostname))
    return ranked[:limit]


def build_overview(
    plaza: str,
    devices: Sequence[Device],
    ports: Sequence[Port],
    alerts: Sequence[Alert],
    source_kind: SourceKind,
    *,
    include_capacity: bool,
    include_top_devices: bool,
    top_devices_limit: int,
) -> PlazaOverviewDTO:
    return PlazaOverviewDTO(
        plaza=plaza,
        source_kind=source_kind,
        devices_total=len(devices),
        devices_up=sum(1 for d in devices if d.is_up),
        ports_total=len(ports),
        ports_up=sum(1 for p in ports if p.is_up),
        health=plaza_health(devices, ports, alerts, source_kind),
        alerts=[AlertDTO.from_record(a) for a in alerts],
        capacity=plaza_capacity(ports, source_kind) if include_capacity else None,
        top_devices=(
            top_devices(devices, ports, alerts, top_devices_limit) if include_top_devices else None
        ),
    )


class GetPlazaOverviewUseCase:
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
    def cache_key(
        plaza: str, *, include_capacity: bool, include_top_devices: bool, top_devices_limit: int
    ) -> str:
        flags = (
            f"capacity={int(include_capacity)},"
            f"top={int(include_top_devices)}:{top_devices_limit}"
        )
        return f"plaza-monitoring:{plaza}:{flags}"

    async def execute(
        self,
        plaza: str,
        *,
        include_capacity: bool = False,
        include_top_devices: bool = False,
        top_devices_limit: int = DEFAULT_TOP_DEVICES,
        refresh: bool = False,
    ) -> Resolution:
        name = normalize_plaza(plaza)
        if name is None:
            raise ValueError("plaza must be non-empty")
        options = {
            "include_capacity": include_capacity,
            "include_top_devices": include_top_devices,
            "top_devices_limit": top_devices_limit,
        }

        async def primary() -> dict[str, Any]:
            devices = await self._gateway.devices(location=name)
            if not devices:
                raise EmptyResult("no devices matched", details={"plaza": name})
            ids = [d.device_id for d in devices]
            ports, alerts = await asyncio.gather(
                self._gateway.ports(device_ids=ids), self._gateway.alerts()
            )
            wanted = set(ids)
            alerts = [a for a in alerts if a.device_id in wanted]
            return build_overview(
                name, devices, ports, alerts, SourceKind.LIVE, **options
            ).model_dump(mode="json")

        def demo() -> dict[str, Any]:
            return build_overview(
                name,
                demo_data.demo_devices(name),
                demo_data.demo_ports(),
                demo_data.demo_alerts(),
                SourceKind.DEMO,
                **options,
            ).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(name, **options),
                fetch_primary=primary,
                ttl_s=self._config.ttl_plaza_s,
                fallback=self._config.fallback_or_none(demo),
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.DEMO,
                skip_cache=refresh,
            )
        )
