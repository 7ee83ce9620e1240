# src/netwatch_api/application/use_cases/executive/get_infrastructure_health.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: infrastructure health (CPU, memory, temperature).

Synopsis:
    Health samples (processors, mempools, temperature sensors) are fetched
    for the first ``health_device_limit`` devices. Each location gets the
    three-part health score; each device is classified from its own averages
    and threshold breaches are reported as health alerts. A failed sample
    collection only narrows the report; an empty device list falls back to
    the demo payload.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Final

from netwatch_api.application.schemas.dto.base import MetricDTO
from netwatch_api.application.schemas.dto.executive import (
    DeviceCountsDTO,
    HealthAlertDTO,
    HealthComponentsDTO,
    InfrastructureHealthDTO,
    LocationHealthDTO,
)
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.domain.entities.records import Device, Mempool, Processor, Sensor
from netwatch_api.domain.enums.monitoring import HealthStatus, SourceKind
from netwatch_api.domain.exceptions.monitoring import EmptyResult
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import (
    cpu_score,
    device_system_health,
    extract_plaza,
    health_score,
    health_status,
    mean,
    memory_score,
    round1,
    temperature_score,
)
from netwatch_api.domain.services.demo_data import DEMO_INFRASTRUCTURE_HEALTH
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

SUMMARY_LOCATIONS: Final[int] = 5
CRITICAL_USAGE_PCT: Final[float] = 90.0
TEMP_WARNING_C: Final[float] = 70.0
TEMP_CRITICAL_C: Final[float] = 80.0


@dataclass
class _Readings:
    cpu: list[float] = field(default_factory=list)
    memory: list[float] = field(default_factory=list)
    temperature: list[float] = field(default_factory=list)

    def extend(self, other: _Readings) -> None:
        self.cpu.extend(other.cpu)
        self.memory.extend(other.memory)
        self.temperature.extend(other.temperature)


def _usage_alert(device: str, metric: str, value: float, threshold: float) -> HealthAlertDTO | None:
    if value < threshold:
        return None
    severity = HealthStatus.CRITICAL if value >= CRITICAL_USAGE_PCT else HealthStatus.WARNING
    return HealthAlertDTO(
        device=device, metric=metric, value=round1(value), threshold=threshold, severity=severity
    )


def _temperature_alert(device: str, value: float) -> HealthAlertDTO | None:
    if value < TEMP_WARNING_C:
        return None
    severity = HealthStatus.CRITICAL if value >= TEMP_CRITICAL_C else HealthStatus.WARNING
    return HealthAlertDTO(
        device=device,
        metric="temperature",
        value=round1(value),
        threshold=TEMP_WARNING_C,
        severity=severity,
    )


def build_health_report(
    devices: Sequence[Device],
    processors: Sequence[Processor],
    mempools: Sequence[Mempool],
    sensors: Sequence[Sensor],
    *,
    threshold: float,
    include_details: bool,
    source_kind: SourceKind = SourceKind.LIVE,
) -> InfrastructureHealthDTO:
    """Aggregate per-device readings into location and overall health."""
    readings: dict[str, _Readings] = defaultdict(_Readings)
    for proc in processors:
        readings[proc.device_id].cpu.append(proc.usage_pct)
    for pool in mempools:
        readings[pool.device_id].memory.append(pool.usage_pct)
    for sensor in sensors:
        readings[sensor.device_id].temperature.append(sensor.value)

    by_location: dict[str, list[Device]] = defaultdict(list)
    for device in devices:
        by_location[extract_plaza(device.location)].append(device)

    counts = {status: 0 for status in HealthStatus}
    alerts: list[HealthAlertDTO] = []
    overall = _Readings()
    locations: list[LocationHealthDTO] = []
    for location, members in by_location.items():
        merged = _Readings()
        for device in members:
            own = readings.get(device.device_id, _Readings())
            merged.extend(own)
            cpu, mem, temp = mean(own.cpu), mean(own.memory), mean(own.temperature)
            counts[device_system_health(cpu, mem, temp)] += 1
            candidates = (
                _usage_alert(device.hostname, "cpu", cpu, threshold),
                _usage_alert(device.hostname, "memory", mem, threshold),
                _temperature_alert(device.hostname, temp),
            )
            alerts.extend(a for a in candidates if a is not None)
        overall.extend(merged)
        avg_cpu, avg_mem, avg_temp = mean(merged.cpu), mean(merged.memory), mean(merged.temperature)
        score = health_score(avg_cpu, avg_mem, avg_temp)
        locations.append(
            LocationHealthDTO(
                location=location,
                device_count=len(members),
                avg_cpu=round1(avg_cpu),
                avg_memory=round1(avg_mem),
                avg_temperature=round1(avg_temp),
                health_score=score,
                status=health_status(score),
            )
        )

    locations.sort(key=lambda loc: (loc.health_score, loc.location))
    alerts.sort(key=lambda a: (a.severity is not HealthStatus.CRITICAL, -a.value))
    components = HealthComponentsDTO(
        cpu=round1(cpu_score(mean(overall.cpu))),
        memory=round1(memory_score(mean(overall.memory))),
        storage=None,
        environmental=round1(temperature_score(mean(overall.temperature))),
    )
    overall_score = health_score(mean(overall.cpu), mean(overall.memory), mean(overall.temperature))
    return InfrastructureHealthDTO(
        source_kind=source_kind,
        overall_score=MetricDTO.of(overall_score, source_kind),
        status=health_status(overall_score),
        components=components,
        device_counts=DeviceCountsDTO(
            critical=counts[HealthStatus.CRITICAL],
            warning=counts[HealthStatus.WARNING],
            healthy=counts[HealthStatus.HEALTHY],
        ),
        locations=locations if include_details else locations[:SUMMARY_LOCATIONS],
        alerts=alerts,
    )


def demo_health_report() -> InfrastructureHealthDTO:
    demo = DEMO_INFRASTRUCTURE_HEALTH
    score = float(demo["overall_score"])
    return InfrastructureHealthDTO(
        source_kind=SourceKind.DEMO,
        overall_score=MetricDTO.of(score, SourceKind.DEMO),
        status=health_status(score),
        components=HealthComponentsDTO.model_validate(demo["components"]),
        device_counts=DeviceCountsDTO.model_validate(demo["device_counts"]),
        locations=[LocationHealthDTO.model_validate(loc) for loc in demo["locations"]],
        alerts=[HealthAlertDTO.model_validate(a) for a in demo["alerts"]],
    )


class GetInfrastructureHealthUseCase:
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
        return f"infrastructure-health:{location or 'all'}:{int(include_details)}"

    async def execute(
        self,
        *,
        location: str | None = None,
        include_details: bool = False,
        refresh: bool = False,
    ) -> Resolution:
        location = (location or "").strip() or None

        async def primary() -> dict[str, Any]:
            devices = await self._gateway.devices(location=location)
            if not devices:
                raise EmptyResult("no devices returned", details={"location": location or "all"})
            sampled = devices[: self._config.health_device_limit]
            ids = [d.device_id for d in sampled]
            processors, mempools, sensors = await self._samples(ids)
            return build_health_report(
                sampled,
                processors,
                mempools,
                sensors,
                threshold=self._config.health_threshold_pct,
                include_details=include_details,
            ).model_dump(mode="json")

        def demo() -> dict[str, Any]:
            return demo_health_report().model_dump(mode="json")

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

    async def _samples(
        self, ids: list[str]
    ) -> tuple[list[Processor], list[Mempool], list[Sensor]]:
        results = await asyncio.gather(
            self._gateway.processors(device_ids=ids),
            self._gateway.mempools(device_ids=ids),
            self._gateway.sensors("temperature", device_ids=ids),
            return_exceptions=True,
        )
        collected: list[list[Any]] = []
        for name, result in zip(("processors", "mempools", "sensors"), results, strict=True):
            if isinstance(result, Exception):
                logger.warning(
                    "infrastructure_health.samples_unavailable",
                    extra={"resource": name, "error_type": type(result).__name__},
                )
                collected.append([])
            elif isinstance(result, BaseException):
                raise result
            else:
                collected.append(list(result))
        processors, mempools, sensors = collected
        return processors, mempools, sensors
