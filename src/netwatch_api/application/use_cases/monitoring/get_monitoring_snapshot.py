# src/netwatch_api/application/use_cases/monitoring/get_monitoring_snapshot.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: Get the monitoring snapshot.

Synopsis:
    Devices, ports and active alerts for one plaza (or the whole network),
    resolved through the tiered policy:

    * primary: devices whose location matches the plaza, their ports and
      the alerts raised on them (no plaza: everything);
    * relaxed: the unfiltered snapshot, tagged ``partial`` (plaza only);
    * fallback: the demo snapshot, tagged ``demo``.

    Client dashboards may also push the snapshot they already hold; it is
    stored under its own key with the ``dashboard`` tag.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from netwatch_api.application.schemas.dto.base import MetricDTO
from netwatch_api.application.schemas.dto.monitoring import (
    AlertDTO,
    DashboardSnapshotDTO,
    DeviceDTO,
    MonitoringSnapshotDTO,
    PortDTO,
    SnapshotStatsDTO,
)
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.domain.entities.records import Alert, Device, Port
from netwatch_api.domain.enums.monitoring import AlertSeverity, SourceKind
from netwatch_api.domain.exceptions.monitoring import EmptyResult
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services import demo_data
from netwatch_api.domain.services.aggregation import (
    mean,
    port_rate_utilization_pct,
    round1,
    utilization_pct,
)
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

ALL_SCOPE = "all"


def normalize_plaza(plaza: str | None) -> str | None:
    """Trimmed plaza name, or None for blank input."""
    if plaza is None:
        return None
    return plaza.strip() or None


def scope_of(plaza: str | None) -> str:
    return plaza or ALL_SCOPE


def snapshot_stats(
    devices: Sequence[Device],
    ports: Sequence[Port],
    alerts: Sequence[Alert],
    source_kind: SourceKind,
) -> SnapshotStatsDTO:
    """Availability, utilization and alert counts over one snapshot.

    Utilization counts up ports only and is computed from the octet rates.
    """
    devices_up = sum(1 for d in devices if d.is_up)
    ports_up = [p for p in ports if p.is_up]
    utilizations = [port_rate_utilization_pct(p) for p in ports_up]
    return SnapshotStatsDTO(
        total_devices=len(devices),
        devices_up=devices_up,
        total_ports=len(ports),
        ports_up=len(ports_up),
        critical_alerts=sum(1 for a in alerts if a.severity is AlertSeverity.CRITICAL),
        warning_alerts=sum(1 for a in alerts if a.severity is AlertSeverity.WARNING),
        device_availability=MetricDTO.of(
            utilization_pct(devices_up, len(devices)), source_kind, "%"
        ),
        port_availability=MetricDTO.of(
            utilization_pct(len(ports_up), len(ports)), source_kind, "%"
        ),
        average_utilization=MetricDTO.of(round1(mean(utilizations)), source_kind, "%"),
        max_utilization=MetricDTO.of(max(utilizations, default=0.0), source_kind, "%"),
    )


def build_snapshot(
    plaza: str | None,
    devices: Sequence[Device],
    ports: Sequence[Port],
    alerts: Sequence[Alert],
    source_kind: SourceKind,
) -> MonitoringSnapshotDTO:
    return MonitoringSnapshotDTO(
        plaza=plaza,
        source_kind=source_kind,
        devices=[DeviceDTO.from_record(d) for d in devices],
        ports=[PortDTO.from_record(p) for p in ports],
        alerts=[AlertDTO.from_record(a) for a in alerts],
        stats=snapshot_stats(devices, ports, alerts, source_kind),
    )


class GetMonitoringSnapshotUseCase:
    """Resolve the monitoring snapshot for a plaza."""

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
    def cache_key(plaza: str | None) -> str:
        return f"monitoring-data:{scope_of(plaza)}"

    @staticmethod
    def dashboard_key(plaza: str | None) -> str:
        return f"dashboard-data:{scope_of(plaza)}"

    async def execute(self, plaza: str | None = None, *, refresh: bool = False) -> Resolution:
        """Resolve the snapshot; ``refresh`` bypasses the cache lookup."""
        plaza = normalize_plaza(plaza)

        async def primary() -> dict[str, Any]:
            return await self._live(plaza, SourceKind.LIVE)

        async def relaxed() -> dict[str, Any]:
            return await self._live(None, SourceKind.PARTIAL, requested=plaza)

        def demo() -> dict[str, Any]:
            return build_snapshot(
                plaza,
                demo_data.demo_devices(plaza),
                demo_data.demo_ports(),
                demo_data.demo_alerts(),
                SourceKind.DEMO,
            ).model_dump(mode="json")

        request = ResolutionRequest(
            cache_key=self.cache_key(plaza),
            fetch_primary=primary,
            fetch_relaxed=relaxed if plaza else None,
            ttl_s=self._config.ttl_monitoring_s,
            fallback=self._config.fallback_or_none(demo),
            fallback_ttl_s=self._config.ttl_fallback_s,
            fallback_source=SourceKind.DEMO,
            skip_cache=refresh,
        )
        return await self._policy.resolve(request)

    async def invalidate(self, plaza: str | None = None) -> list[str]:
        """Drop the cached snapshot (and any pushed dashboard data) for a plaza."""
        plaza = normalize_plaza(plaza)
        keys = [self.cache_key(plaza), self.dashboard_key(plaza)]
        for key in keys:
            await self._policy.invalidate(key)
        return keys

    async def store_dashboard(self, snapshot: DashboardSnapshotDTO) -> Resolution:
        """Cache a client-held snapshot, tagged ``dashboard``."""
        plaza = normalize_plaza(snapshot.plaza)
        devices = [d.to_record() for d in snapshot.devices]
        alerts = [a.to_record() for a in snapshot.alerts]
        value = build_snapshot(plaza, devices, [], alerts, SourceKind.DASHBOARD)
        logger.info(
            "monitoring.dashboard_stored",
            extra={"plaza": scope_of(plaza), "devices": len(devices), "alerts": len(alerts)},
        )
        return await self._policy.store(
            self.dashboard_key(plaza),
            value.model_dump(mode="json"),
            source=SourceKind.DASHBOARD,
            ttl_s=self._config.ttl_monitoring_s,
        )

    async def _live(
        self, plaza: str | None, source_kind: SourceKind, *, requested: str | None = None
    ) -> dict[str, Any]:
        devices = await self._gateway.devices(location=plaza)
        if not devices:
            raise EmptyResult("no devices matched", details={"plaza": scope_of(plaza)})

        if plaza is None:
            ports, alerts = await asyncio.gather(self._gateway.ports(), self._gateway.alerts())
        else:
            ids = [d.device_id for d in devices]
            ports, alerts = await asyncio.gather(
                self._gateway.ports(device_ids=ids), self._gateway.alerts()
            )
            wanted = set(ids)
            alerts = [a for a in alerts if a.device_id in wanted]

        return build_snapshot(
            requested if source_kind is SourceKind.PARTIAL else plaza,
            devices,
            ports,
            alerts,
            source_kind,
        ).model_dump(mode="json")
