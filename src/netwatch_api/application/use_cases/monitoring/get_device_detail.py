# src/netwatch_api/application/use_cases/monitoring/get_device_detail.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: technical detail of a single device.

The device's ports, alerts, processors, memory pools and temperature
sensors are fetched together. System health classifies the device from its
peak readings; the attention analysis lists why an operator should look at
it. An unknown device is a 404; demo data only covers the demo devices.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any, Final

from netwatch_api.application.schemas.dto.monitoring import (
    AlertDTO,
    AttentionDTO,
    DeviceDetailDTO,
    DeviceDetailSummaryDTO,
    DeviceDTO,
    PortDTO,
    ResourceUsageDTO,
    SystemHealthDTO,
)
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.domain.entities.records import Alert, Device, Mempool, Port, Processor, Sensor
from netwatch_api.domain.enums.monitoring import AttentionPriority, SourceKind
from netwatch_api.domain.exceptions.monitoring import EmptyResult, UpstreamUnavailable
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import (
    device_system_health,
    mean,
    port_capacity_mbps,
    port_rate_utilization_pct,
    round_to,
)
from netwatch_api.domain.services.demo_data import demo_alerts, demo_devices, demo_ports
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

PORT_ATTENTION_PCT: Final[float] = 75.0
MEMORY_ATTENTION_PCT: Final[float] = 85.0
CPU_ATTENTION_PCT: Final[float] = 80.0
HEALTH_WARNING: Final[str] = "Failed to fetch system health metrics"


def usage(values: Sequence[float]) -> ResourceUsageDTO:
    return ResourceUsageDTO(
        average=round_to(mean(values), 2),
        max=round_to(max(values, default=0.0), 2),
        count=len(values),
    )


def system_health(
    processors: Sequence[Processor], mempools: Sequence[Mempool], sensors: Sequence[Sensor]
) -> SystemHealthDTO:
    cpu = usage([p.usage_pct for p in processors])
    memory = usage([m.usage_pct for m in mempools])
    temperature = usage([s.value for s in sensors])
    return SystemHealthDTO(
        cpu=cpu,
        memory=memory,
        temperature=temperature,
        status=device_system_health(cpu.max, memory.max, temperature.max),
    )


def attention(
    device: Device,
    ports: Sequence[Port],
    alerts: Sequence[Alert],
    processors: Sequence[Processor],
    mempools: Sequence[Mempool],
) -> AttentionDTO:
    """Reasons the device needs a look; down devices and open alerts are high severity."""
    reasons: list[str] = []
    severity = AttentionPriority.LOW
    if not device.is_up:
        reasons.append("Device is not operational")
        severity = AttentionPriority.HIGH
    if alerts:
        reasons.append(f"{len(alerts)} unacknowledged critical alerts")
        severity = AttentionPriority.HIGH

    busy_ports = sum(
        1
        for p in ports
        if port_capacity_mbps(p) > 0 and port_rate_utilization_pct(p) >= PORT_ATTENTION_PCT
    )
    busy_pools = sum(1 for m in mempools if m.usage_pct >= MEMORY_ATTENTION_PCT)
    busy_cpus = sum(1 for p in processors if p.usage_pct >= CPU_ATTENTION_PCT)
    for count, what, limit in (
        (busy_ports, "ports", PORT_ATTENTION_PCT),
        (busy_pools, "memory pools", MEMORY_ATTENTION_PCT),
        (busy_cpus, "processors", CPU_ATTENTION_PCT),
    ):
        if count:
            reasons.append(f"{count} {what} with high utilization (>{limit:g}%)")
            if severity is AttentionPriority.LOW:
                severity = AttentionPriority.MEDIUM
    return AttentionDTO(requires_attention=bool(reasons), reasons=reasons, severity=severity)


def build_device_detail(
    device: Device,
    ports: Sequence[Port],
    alerts: Sequence[Alert],
    processors: Sequence[Processor],
    mempools: Sequence[Mempool],
    sensors: Sequence[Sensor],
    *,
    include_system_health: bool,
    include_attention: bool,
    source_kind: SourceKind = SourceKind.LIVE,
    health_failed: bool = False,
) -> DeviceDetailDTO:
    """Assemble the detail; a failed health collection leaves ``system_health`` empty."""
    return DeviceDetailDTO(
        source_kind=source_kind,
        device=DeviceDTO.from_record(device),
        ports=[PortDTO.from_record(p) for p in ports],
        alerts=[AlertDTO.from_record(a) for a in alerts],
        summary=DeviceDetailSummaryDTO(
            ports_count=len(ports),
            active_ports_count=sum(1 for p in ports if p.is_up),
            mempools_count=len(mempools),
            processors_count=len(processors),
            sensors_count=len(sensors),
            alerts_count=len(alerts),
        ),
        system_health=(
            system_health(processors, mempools, sensors)
            if include_system_health and not health_failed
            else None
        ),
        attention=(
            attention(device, ports, alerts, processors, mempools) if include_attention else None
        ),
        warnings=[HEALTH_WARNING] if health_failed else [],
    )


class GetDeviceDetailUseCase:
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
    def cache_key(device_id: int, include_system_health: bool, include_attention: bool) -> str:
        return f"device-monitoring:{device_id}:{int(include_system_health)}{int(include_attention)}"

    async def execute(
        self,
        device_id: int,
        *,
        include_system_health: bool = True,
        include_attention: bool = True,
        refresh: bool = False,
    ) -> Resolution:
        wanted = str(device_id)
        missing = False

        async def primary() -> dict[str, Any]:
            nonlocal missing
            devices = await self._gateway.devices()
            device = next((d for d in devices if d.device_id == wanted), None)
            if device is None:
                missing = bool(devices)
                raise EmptyResult("device not found", details={"device_id": device_id})
            return await self._detail(device, include_system_health, include_attention)

        def demo() -> dict[str, Any]:
            if missing:
                raise EmptyResult("device not found", details={"device_id": device_id})
            device = next((d for d in demo_devices() if d.device_id == wanted), None)
            if device is None or not self._config.demo_data_enabled:
                raise UpstreamUnavailable(
                    "device data is unavailable", details={"device_id": device_id}
                )
            return build_device_detail(
                device,
                [p for p in demo_ports() if p.device_id == wanted],
                [a for a in demo_alerts() if a.device_id == wanted],
                [],
                [],
                [],
                include_system_health=include_system_health,
                include_attention=include_attention,
                source_kind=SourceKind.DEMO,
            ).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(device_id, include_system_health, include_attention),
                fetch_primary=primary,
                ttl_s=self._config.ttl_monitoring_s,
                fallback=demo,
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.DEMO,
                skip_cache=refresh,
            )
        )

    async def _detail(
        self, device: Device, include_system_health: bool, include_attention: bool
    ) -> dict[str, Any]:
        ids = [device.device_id]
        ports, alerts = await asyncio.gather(
            self._gateway.ports(device_ids=ids), self._gateway.alerts()
        )
        own_alerts = [a for a in alerts if a.device_id == device.device_id]
        health_failed = False
        processors: list[Processor] = []
        mempools: list[Mempool] = []
        sensors: list[Sensor] = []
        if include_system_health or include_attention:
            try:
                processors, mempools, sensors = await asyncio.gather(
                    self._gateway.processors(device_ids=ids),
                    self._gateway.mempools(device_ids=ids),
                    self._gateway.sensors("temperature", device_ids=ids),
                )
            except Exception as exc:
                logger.warning(
                    "device_detail.health_unavailable",
                    extra={"device_id": device.device_id, "error_type": type(exc).__name__},
                )
                health_failed = True
        return build_device_detail(
            device,
            ports,
            own_alerts,
            processors,
            mempools,
            sensors,
            include_system_health=include_system_health,
            include_attention=include_attention,
            health_failed=health_failed,
        ).model_dump(mode="json")
