# src/netwatch_api/application/use_cases/executive/get_environmental_monitoring.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: environmental monitoring (temperature, humidity, voltage).

Synopsis:
    Sensors are read for the first ``health_device_limit`` devices of the
    requested location. Temperatures above the alert threshold raise an
    environmental alert (critical five degrees past it). The environmental
    health score is the mean of a temperature, a humidity and an alert
    component; voltage stability is measured against a 12 V nominal.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Final

from netwatch_api.application.schemas.dto.base import MetricDTO
from netwatch_api.application.schemas.dto.executive import (
    EnvironmentalAlertDTO,
    EnvironmentalFiguresDTO,
    EnvironmentalMonitoringDTO,
    LocationEnvironmentDTO,
)
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.domain.entities.records import Device, Sensor
from netwatch_api.domain.enums.monitoring import (
    AlertSeverity,
    ResourceKind,
    SensorType,
    SourceKind,
    UtilizationStatus,
)
from netwatch_api.domain.exceptions.monitoring import EmptyResult
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import extract_plaza, mean, round1
from netwatch_api.domain.services.demo_data import DEMO_ENVIRONMENTAL
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

DEFAULT_ALERT_THRESHOLD_C: Final[float] = 35.0
CRITICAL_MARGIN_C: Final[float] = 5.0
NOMINAL_VOLTAGE: Final[float] = 12.0
REPORT_LIMIT: Final[int] = 10


@dataclass
class _LocationReadings:
    temperature: list[float] = field(default_factory=list)
    humidity: list[float] = field(default_factory=list)
    voltage: list[float] = field(default_factory=list)
    sensors: int = 0
    alerts: int = 0


def sensor_kind(sensor: Sensor) -> SensorType | None:
    """Class a reading counts toward; unknown classes count as temperature by description."""
    cls = sensor.sensor_class.lower()
    for kind in (SensorType.TEMPERATURE, SensorType.HUMIDITY, SensorType.VOLTAGE):
        if cls == kind.value:
            return kind
    if "temp" in sensor.descr.lower():
        return SensorType.TEMPERATURE
    return None


def voltage_stability(voltages: Sequence[float]) -> float:
    if not voltages:
        return 100.0
    return 100.0 - abs(mean(voltages) - NOMINAL_VOLTAGE) * 5


def environmental_health(avg_temp: float, humidity: float, alert_count: int) -> float:
    """Mean of the temperature, humidity and alert components (0-100 each)."""
    temp_health = max(0.0, 100 - (avg_temp - 20) * 2) if avg_temp > 0 else 100.0
    humidity_health = max(0.0, 100 - abs(humidity - 50)) if humidity > 0 else 100.0
    alert_health = max(0.0, 100 - alert_count * 10.0)
    return (temp_health + humidity_health + alert_health) / 3


def build_environmental_report(
    devices: Sequence[Device],
    sensors: Sequence[Sensor],
    *,
    sensor_type: SensorType,
    threshold: float,
    source_kind: SourceKind = SourceKind.LIVE,
) -> EnvironmentalMonitoringDTO:
    by_id = {d.device_id: d for d in devices}
    readings: dict[str, _LocationReadings] = defaultdict(_LocationReadings)
    alerts: list[EnvironmentalAlertDTO] = []
    online = offline = 0

    for sensor in sensors:
        device = by_id.get(sensor.device_id)
        if device is None:
            continue
        location = extract_plaza(device.location)
        bucket = readings[location]
        bucket.sensors += 1
        if sensor.is_ok:
            online += 1
        else:
            offline += 1

        kind = sensor_kind(sensor)
        if kind is SensorType.TEMPERATURE:
            bucket.temperature.append(sensor.value)
            if sensor.value > threshold:
                bucket.alerts += 1
                critical = sensor.value > threshold + CRITICAL_MARGIN_C
                alerts.append(
                    EnvironmentalAlertDTO(
                        location=location,
                        device=device.hostname,
                        sensor_type=SensorType.TEMPERATURE.value,
                        value=round1(sensor.value),
                        threshold=threshold,
                        severity=AlertSeverity.CRITICAL if critical else AlertSeverity.WARNING,
                    )
                )
        elif kind is SensorType.HUMIDITY:
            bucket.humidity.append(sensor.value)
        elif kind is SensorType.VOLTAGE:
            bucket.voltage.append(sensor.value)

    locations = [
        LocationEnvironmentDTO(
            location=location,
            avg_temperature=round1(mean(r.temperature)),
            max_temperature=round1(max(r.temperature, default=0.0)),
            humidity=round1(mean(r.humidity)),
            sensor_count=r.sensors,
            alert_count=r.alerts,
            status=UtilizationStatus.WARNING if r.alerts else UtilizationStatus.NORMAL,
        )
        for location, r in readings.items()
    ]
    temperatures = [t for r in readings.values() for t in r.temperature]
    humidities = [h for r in readings.values() for h in r.humidity]
    voltages = [v for r in readings.values() for v in r.voltage]
    avg_temp = mean(temperatures)
    humidity = mean(humidities)
    total_alerts = sum(r.alerts for r in readings.values())

    figures = EnvironmentalFiguresDTO(
        average_temperature=MetricDTO.of(round1(avg_temp), source_kind, "C"),
        max_temperature=round1(max(temperatures, default=0.0)),
        min_temperature=round1(min(temperatures, default=0.0)),
        temperature_alerts=total_alerts,
        humidity_level=MetricDTO.of(round1(humidity), source_kind, "%"),
        voltage_stability=MetricDTO.of(round1(voltage_stability(voltages)), source_kind, "%"),
        environmental_health=MetricDTO.of(
            round1(environmental_health(avg_temp, humidity, total_alerts)), source_kind
        ),
        sensors_online=online,
        sensors_offline=offline,
    )
    return EnvironmentalMonitoringDTO(
        source_kind=source_kind,
        sensor_type=sensor_type,
        alert_threshold=threshold,
        figures=figures,
        locations=locations[:REPORT_LIMIT],
        alerts=alerts[:REPORT_LIMIT],
    )


def demo_environmental_report(
    sensor_type: SensorType, threshold: float
) -> EnvironmentalMonitoringDTO:
    demo = DEMO_ENVIRONMENTAL
    figures = dict(demo["figures"])
    for name, unit in (
        ("average_temperature", "C"),
        ("humidity_level", "%"),
        ("voltage_stability", "%"),
        ("environmental_health", None),
    ):
        figures[name] = MetricDTO.of(figures[name], SourceKind.DEMO, unit)
    return EnvironmentalMonitoringDTO(
        source_kind=SourceKind.DEMO,
        sensor_type=sensor_type,
        alert_threshold=threshold,
        figures=EnvironmentalFiguresDTO.model_validate(figures),
        locations=[LocationEnvironmentDTO.model_validate(loc) for loc in demo["locations"]],
        alerts=[EnvironmentalAlertDTO.model_validate(a) for a in demo["alerts"]],
    )


class GetEnvironmentalMonitoringUseCase:
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
    def cache_key(location: str | None, sensor_type: SensorType, threshold: float) -> str:
        return f"environmental-monitoring:{location or 'all'}:{sensor_type.value}:{threshold:g}"

    async def execute(
        self,
        *,
        location: str | None = None,
        sensor_type: SensorType = SensorType.ALL,
        alert_threshold: float = DEFAULT_ALERT_THRESHOLD_C,
        refresh: bool = False,
    ) -> Resolution:
        location = (location or "").strip() or None

        async def primary() -> dict[str, Any]:
            devices = await self._gateway.devices(location=location)
            if not devices:
                raise EmptyResult("no devices returned", details={"location": location or "all"})
            sampled = devices[: self._config.health_device_limit]
            sensors = await self._sensors([d.device_id for d in sampled], sensor_type)
            logger.info(
                "environmental.sampled",
                extra={"devices": len(sampled), "sensors": len(sensors)},
            )
            return build_environmental_report(
                sampled, sensors, sensor_type=sensor_type, threshold=alert_threshold
            ).model_dump(mode="json")

        def demo() -> dict[str, Any]:
            return demo_environmental_report(sensor_type, alert_threshold).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(location, sensor_type, alert_threshold),
                fetch_primary=primary,
                ttl_s=self._config.ttl_executive_s,
                fallback=self._config.fallback_or_none(demo),
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.DEMO,
                skip_cache=refresh,
            )
        )

    async def _sensors(self, ids: list[str], sensor_type: SensorType) -> list[Sensor]:
        if sensor_type is not SensorType.ALL:
            return await self._gateway.sensors(sensor_type.value, device_ids=ids)
        records = await self._gateway.fetch(ResourceKind.SENSORS, {"device_id": ids})
        return [r for r in records if isinstance(r, Sensor)]
