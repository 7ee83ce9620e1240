# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Application DTOs for the executive dashboard views.

Every figure a consumer could mistake for live data carries a ``source_kind``
either on the enclosing DTO or on a :class:`MetricDTO`.
"""

from __future__ import annotations

from pydantic import Field

from netwatch_api.application.schemas.dto.base import BaseDTO, MetricDTO
from netwatch_api.domain.enums.monitoring import (
    AlertSeverity,
    HealthStatus,
    NetworkHealthStatus,
    SensorType,
    SiteStatus,
    SourceKind,
    TrendDirection,
    UtilizationStatus,
)


# --------------------------------------------------------------------------- #
# Capacity utilization                                                        #
# --------------------------------------------------------------------------- #
class PlazaUtilizationDTO(BaseDTO):
    plaza: str
    utilization: float
    total_capacity_mbps: float
    used_capacity_mbps: float
    device_count: int
    port_count: int
    operational_ports: int
    status: UtilizationStatus


class CapacitySummaryDTO(BaseDTO):
    total_plazas: int
    average_utilization: MetricDTO
    total_devices: int
    total_ports: int
    total_operational_ports: int
    total_capacity_mbps: float
    total_used_capacity_mbps: float
    status: UtilizationStatus


class CapacityUtilizationDTO(BaseDTO):
    source_kind: SourceKind
    plazas: list[PlazaUtilizationDTO] = Field(default_factory=list)
    summary: CapacitySummaryDTO


# --------------------------------------------------------------------------- #
# Infrastructure health                                                       #
# --------------------------------------------------------------------------- #
class HealthComponentsDTO(BaseDTO):
    cpu: float
    memory: float
    storage: float | None = None
    environmental: float


class DeviceCountsDTO(BaseDTO):
    critical: int
    warning: int
    healthy: int


class LocationHealthDTO(BaseDTO):
    location: str
    device_count: int
    avg_cpu: float
    avg_memory: float
    avg_temperature: float
    health_score: float
    status: HealthStatus


class HealthAlertDTO(BaseDTO):
    device: str
    metric: str
    value: float
    threshold: float
    severity: HealthStatus


class InfrastructureHealthDTO(BaseDTO):
    source_kind: SourceKind
    overall_score: MetricDTO
    status: HealthStatus
    components: HealthComponentsDTO
    device_counts: DeviceCountsDTO
    locations: list[LocationHealthDTO] = Field(default_factory=list)
    alerts: list[HealthAlertDTO] = Field(default_factory=list)


# --------------------------------------------------------------------------- #
# Critical sites                                                              #
# --------------------------------------------------------------------------- #
class CriticalSiteDTO(BaseDTO):
    site: str
    plaza: str
    health_score: float
    utilization: float
    alert_count: int
    device_count: int
    port_count: int
    status: SiteStatus
    issues: list[str] = Field(default_factory=list)


class StatusBreakdownDTO(BaseDTO):
    critical: int = 0
    warning: int = 0
    attention: int = 0


class CriticalSitesSummaryDTO(BaseDTO):
    total_sites: int
    total_critical_sites: int
    average_health_score: MetricDTO
    total_alerts: int
    critical_threshold: float
    status_breakdown: StatusBreakdownDTO


class CriticalSitesDTO(BaseDTO):
    source_kind: SourceKind
    sites: list[CriticalSiteDTO] = Field(default_factory=list)
    summary: CriticalSitesSummaryDTO


# --------------------------------------------------------------------------- #
# Growth trends                                                               #
# --------------------------------------------------------------------------- #
class GrowthPointDTO(BaseDTO):
    period: str
    value: float
    growth: float
    trend: TrendDirection


class GrowthAnalysisDTO(BaseDTO):
    current_value: MetricDTO
    previous_value: float
    total_growth: MetricDTO
    average_growth: MetricDTO
    trend: TrendDirection


class GrowthProjectionDTO(BaseDTO):
    next_month: MetricDTO
    next_quarter: MetricDTO


class GrowthTrendsDTO(BaseDTO):
    source_kind: SourceKind
    period: str
    metric: str
    points: list[GrowthPointDTO]
    analysis: GrowthAnalysisDTO
    projections: GrowthProjectionDTO | None = None


# --------------------------------------------------------------------------- #
# Network consumption                                                         #
# --------------------------------------------------------------------------- #
class LocationConsumptionDTO(BaseDTO):
    location: str
    bill_count: int
    average_mbps: float


class NetworkConsumptionDTO(BaseDTO):
    source_kind: SourceKind
    locations: list[LocationConsumptionDTO] = Field(default_factory=list)
    total_mbps: MetricDTO
    average_mbps: MetricDTO


# --------------------------------------------------------------------------- #
# Environmental monitoring                                                    #
# --------------------------------------------------------------------------- #
class EnvironmentalFiguresDTO(BaseDTO):
    average_temperature: MetricDTO
    max_temperature: float
    min_temperature: float
    temperature_alerts: int
    humidity_level: MetricDTO
    voltage_stability: MetricDTO
    environmental_health: MetricDTO
    sensors_online: int
    sensors_offline: int


class LocationEnvironmentDTO(BaseDTO):
    location: str
    avg_temperature: float
    max_temperature: float
    humidity: float
    sensor_count: int
    alert_count: int
    status: UtilizationStatus


class EnvironmentalAlertDTO(BaseDTO):
    location: str
    device: str
    sensor_type: str
    value: float
    threshold: float
    severity: AlertSeverity


class EnvironmentalMonitoringDTO(BaseDTO):
    source_kind: SourceKind
    sensor_type: SensorType
    alert_threshold: float
    figures: EnvironmentalFiguresDTO
    locations: list[LocationEnvironmentDTO] = Field(default_factory=list)
    alerts: list[EnvironmentalAlertDTO] = Field(default_factory=list)


# --------------------------------------------------------------------------- #
# Network health                                                              #
# --------------------------------------------------------------------------- #
class DeviceHealthDTO(BaseDTO):
    score: float
    total_devices: int
    active_devices: int
    down_devices: int


class AlertHealthDTO(BaseDTO):
    score: float
    total_alerts: int
    critical_alerts: int
    warning_alerts: int
    info_alerts: int


class PerformanceHealthDTO(BaseDTO):
    score: float
    avg_utilization: float
    peak_utilization: float


class LocationNetworkHealthDTO(BaseDTO):
    location: str
    score: float
    devices: int
    alerts: int


class NetworkHealthDTO(BaseDTO):
    source_kind: SourceKind
    overall_score: MetricDTO
    status: NetworkHealthStatus
    device_health: DeviceHealthDTO
    alert_health: AlertHealthDTO
    performance_health: PerformanceHealthDTO
    locations: list[LocationNetworkHealthDTO] | None = None
