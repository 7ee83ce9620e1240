# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Application DTOs for the monitoring snapshot and its LLM summary.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from pydantic import Field

from netwatch_api.application.schemas.dto.base import BaseDTO, MetricDTO
from netwatch_api.domain.entities.records import Alert, Device, Port
from netwatch_api.domain.enums.monitoring import (
    AlertSeverity,
    AttentionPriority,
    HealthStatus,
    SaturationTrend,
    SourceKind,
    UtilizationStatus,
)
from netwatch_api.domain.services.aggregation import port_utilization_pct


class DeviceDTO(BaseDTO):
    """Device row of a snapshot."""

    device_id: str
    hostname: str
    location: str = ""
    is_up: bool = False
    os: str | None = None
    type: str | None = None
    vendor: str | None = None
    hardware: str | None = None
    uptime_s: float | None = None

    @classmethod
    def from_record(cls, device: Device) -> DeviceDTO:
        return cls.model_validate(device.to_dict())

    def to_record(self) -> Device:
        return Device(**self.model_dump())


class PortDTO(BaseDTO):
    """Port row of a snapshot, with its computed utilization."""

    port_id: str
    device_id: str = ""
    name: str = ""
    is_up: bool = False
    if_speed_bps: float = 0.0
    if_high_speed_mbps: float | None = None
    in_octets_rate: float = 0.0
    out_octets_rate: float = 0.0
    in_perc: float | None = None
    out_perc: float | None = None
    alias: str | None = None
    utilization_pct: float = 0.0

    @classmethod
    def from_record(cls, port: Port) -> PortDTO:
        return cls.model_validate({**port.to_dict(), "utilization_pct": port_utilization_pct(port)})

    def to_record(self) -> Port:
        return Port(**self.model_dump(exclude={"utilization_pct"}))


class AlertDTO(BaseDTO):
    """Active alert row of a snapshot."""

    alert_id: str
    device_id: str = ""
    entity_type: str = ""
    entity_id: str = ""
    severity: AlertSeverity = AlertSeverity.INFO
    message: str = ""
    last_changed: int | None = None

    @classmethod
    def from_record(cls, alert: Alert) -> AlertDTO:
        return cls.model_validate(alert.to_dict())

    def to_record(self) -> Alert:
        return Alert(**self.model_dump())


class SnapshotStatsDTO(BaseDTO):
    """Headline figures computed over a snapshot."""

    total_devices: int
    devices_up: int
    total_ports: int
    ports_up: int
    critical_alerts: int
    warning_alerts: int
    device_availability: MetricDTO
    port_availability: MetricDTO
    average_utilization: MetricDTO
    max_utilization: MetricDTO


class MonitoringSnapshotDTO(BaseDTO):
    """Devices, ports and alerts of one plaza (or the whole network)."""

    plaza: str | None = None
    source_kind: SourceKind
    devices: list[DeviceDTO] = Field(default_factory=list)
    ports: list[PortDTO] = Field(default_factory=list)
    alerts: list[AlertDTO] = Field(default_factory=list)
    stats: SnapshotStatsDTO


class SummaryDTO(BaseDTO):
    """A narrative summary and the provenance of the data behind it."""

    summary: str
    generated: bool
    data_source: SourceKind
    plaza: str | None = None
    figures: dict[str, float | int | str | None] = Field(default_factory=dict)


class DashboardSnapshotDTO(BaseDTO):
    """Devices and alerts a client dashboard already holds, pushed for reuse."""

    plaza: str | None = None
    devices: list[DeviceDTO] = Field(min_length=1)
    alerts: list[AlertDTO] = Field(default_factory=list)


class ResourceUsageDTO(BaseDTO):
    average: float
    max: float
    count: int


class SystemHealthDTO(BaseDTO):
    """CPU, memory and temperature of one device; status follows the peaks."""

    cpu: ResourceUsageDTO
    memory: ResourceUsageDTO
    temperature: ResourceUsageDTO
    status: HealthStatus


class AttentionDTO(BaseDTO):
    requires_attention: bool
    reasons: list[str] = Field(default_factory=list)
    severity: AttentionPriority = AttentionPriority.LOW


class DeviceDetailSummaryDTO(BaseDTO):
    ports_count: int
    active_ports_count: int
    mempools_count: int
    processors_count: int
    sensors_count: int
    alerts_count: int


class DeviceDetailDTO(BaseDTO):
    """One device with its ports, active alerts and optional diagnostics."""

    source_kind: SourceKind
    device: DeviceDTO
    ports: list[PortDTO] = Field(default_factory=list)
    alerts: list[AlertDTO] = Field(default_factory=list)
    summary: DeviceDetailSummaryDTO
    system_health: SystemHealthDTO | None = None
    attention: AttentionDTO | None = None
    warnings: list[str] = Field(default_factory=list)


class AlertListDTO(BaseDTO):
    source_kind: SourceKind
    count: int
    alerts: list[AlertDTO] = Field(default_factory=list)


class SaturatedSiteDTO(BaseDTO):
    id: str
    name: str
    location: str
    saturation: float
    trend: SaturationTrend
    outages: int
    device_count: int
    critical_ports: int
    max_port_utilization: float
    avg_port_utilization: float
    operational_ports: int
    status: UtilizationStatus


class SaturatedSitesDTO(BaseDTO):
    source_kind: SourceKind
    total_sites: int
    sites: list[SaturatedSiteDTO] = Field(default_factory=list)
