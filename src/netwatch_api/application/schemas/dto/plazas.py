# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Application DTOs for plaza listings, overviews and utilization trends."""

from __future__ import annotations

from pydantic import Field

from netwatch_api.application.schemas.dto.base import BaseDTO, MetricDTO
from netwatch_api.application.schemas.dto.monitoring import AlertDTO
from netwatch_api.domain.enums.monitoring import SourceKind, UtilizationStatus


class PlazaListDTO(BaseDTO):
    plazas: list[str]
    source_kind: SourceKind


class PlazaHealthDTO(BaseDTO):
    """Weighted plaza score and the inputs it was computed from."""

    score: MetricDTO
    grade: str
    device_availability: MetricDTO
    port_availability: MetricDTO
    alert_count: int


class PlazaCapacityDTO(BaseDTO):
    total_capacity_mbps: float
    used_capacity_mbps: float
    utilization: MetricDTO
    status: UtilizationStatus
    links: int
    critical_links: int
    warning_links: int


class TopDeviceDTO(BaseDTO):
    device_id: str
    hostname: str
    port_count: int
    alert_count: int
    average_utilization: float
    max_utilization: float
    status: UtilizationStatus


class PlazaOverviewDTO(BaseDTO):
    plaza: str
    source_kind: SourceKind
    devices_total: int
    devices_up: int
    ports_total: int
    ports_up: int
    health: PlazaHealthDTO
    alerts: list[AlertDTO] = Field(default_factory=list)
    capacity: PlazaCapacityDTO | None = None
    top_devices: list[TopDeviceDTO] | None = None


class TrendPointDTO(BaseDTO):
    date: str
    utilization: float


class TrendSummaryDTO(BaseDTO):
    average: MetricDTO
    maximum: MetricDTO
    minimum: MetricDTO


class PlazaTrendsDTO(BaseDTO):
    plaza: str
    period: str
    interval: str
    source_kind: SourceKind
    points: list[TrendPointDTO]
    summary: TrendSummaryDTO


class LatencyPointDTO(BaseDTO):
    date: str
    latency_ms: float


class LatencySummaryDTO(BaseDTO):
    avg: float
    max: float
    min: float


class PlazaLatencyDTO(BaseDTO):
    """Daily latency per network tier (backbone, distribucion, acceso).

    Latency is modeled from each tier's baseline, so the series is tagged
    ``fallback`` even when the plaza's devices were reachable.
    """

    plaza: str
    period: str
    source_kind: SourceKind
    device_count: int | None = None
    series: dict[str, list[LatencyPointDTO]] = Field(default_factory=dict)
    summary: dict[str, LatencySummaryDTO] = Field(default_factory=dict)
    warning: str | None = None
