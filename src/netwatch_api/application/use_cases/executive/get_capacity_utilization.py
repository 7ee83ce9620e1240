# src/netwatch_api/application/use_cases/executive/get_capacity_utilization.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Use case: capacity utilization per plaza.

Synopsis:
    Devices are grouped by plaza; for each plaza the ports of its first six
    devices are sampled in a single upstream call. Only operational ports
    with a known ``ifHighSpeed`` count toward capacity, and each port's used
    capacity is its speed times its busiest-direction utilization.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Final

from netwatch_api.application.schemas.dto.base import MetricDTO
from netwatch_api.application.schemas.dto.executive import (
    CapacitySummaryDTO,
    CapacityUtilizationDTO,
    PlazaUtilizationDTO,
)
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import (
    Resolution,
    ResolutionPolicy,
    ResolutionRequest,
)
from netwatch_api.domain.entities.records import Device, Port
from netwatch_api.domain.enums.monitoring import SourceKind
from netwatch_api.domain.exceptions.monitoring import EmptyResult
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol
from netwatch_api.domain.services.aggregation import (
    capacity_summary_status,
    extract_plaza,
    mean,
    port_utilization_pct,
    round1,
    round_to,
    utilization_pct,
    utilization_status,
)

DEVICES_PER_PLAZA: Final[int] = 6
CACHE_KEY: Final[str] = "capacity-utilization"


def _measurable(port: Port) -> bool:
    return port.is_up and port.if_high_speed_mbps is not None and port.if_high_speed_mbps > 0


def plaza_utilization(
    plaza: str, devices: Sequence[Device], ports: Sequence[Port]
) -> PlazaUtilizationDTO:
    """Capacity figures for one plaza from its sampled ports."""
    operational = [p for p in ports if _measurable(p)]
    total = sum(p.if_high_speed_mbps or 0.0 for p in operational)
    used = sum((p.if_high_speed_mbps or 0.0) * port_utilization_pct(p) / 100 for p in operational)
    pct = utilization_pct(used, total)
    return PlazaUtilizationDTO(
        plaza=plaza,
        utilization=pct,
        total_capacity_mbps=round_to(total, 0),
        used_capacity_mbps=round_to(used, 0),
        device_count=len(devices),
        port_count=len(ports),
        operational_ports=len(operational),
        status=utilization_status(pct),
    )


def capacity_report(
    plazas: Iterable[PlazaUtilizationDTO], source_kind: SourceKind
) -> CapacityUtilizationDTO:
    """Sort plazas by utilization (descending) and total them up."""
    rows = sorted(plazas, key=lambda p: (-p.utilization, p.plaza))
    average = round1(mean([p.utilization for p in rows]))
    summary = CapacitySummaryDTO(
        total_plazas=len(rows),
        average_utilization=MetricDTO.of(average, source_kind, "%"),
        total_devices=sum(p.device_count for p in rows),
        total_ports=sum(p.port_count for p in rows),
        total_operational_ports=sum(p.operational_ports for p in rows),
        total_capacity_mbps=sum(p.total_capacity_mbps for p in rows),
        total_used_capacity_mbps=sum(p.used_capacity_mbps for p in rows),
        status=capacity_summary_status(average),
    )
    return CapacityUtilizationDTO(source_kind=source_kind, plazas=rows, summary=summary)


def group_by_plaza(devices: Iterable[Device]) -> dict[str, list[Device]]:
    grouped: dict[str, list[Device]] = defaultdict(list)
    for device in devices:
        grouped[extract_plaza(device.location)].append(device)
    return dict(grouped)


class GetCapacityUtilizationUseCase:
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
    def cache_key(plazas: Sequence[str] | None = None) -> str:
        if not plazas:
            return CACHE_KEY
        return f"{CACHE_KEY}:{','.join(sorted(plazas))}"

    async def execute(
        self, *, plazas: Sequence[str] | None = None, refresh: bool = False
    ) -> Resolution:
        wanted = [p.strip() for p in plazas or () if p.strip()]

        async def primary() -> dict[str, Any]:
            devices = await self._gateway.devices()
            if not devices:
                raise EmptyResult("no devices returned")
            grouped = group_by_plaza(devices)
            if wanted:
                grouped = {k: v for k, v in grouped.items() if k in wanted}
            if not grouped:
                raise EmptyResult("no plaza matched", details={"plazas": wanted})
            sampled = {plaza: devs[:DEVICES_PER_PLAZA] for plaza, devs in grouped.items()}
            ids = [d.device_id for devs in sampled.values() for d in devs]
            ports = await self._gateway.ports(device_ids=ids)
            return self._report(grouped, sampled, ports).model_dump(mode="json")

        def empty() -> dict[str, Any]:
            return capacity_report([], SourceKind.FALLBACK).model_dump(mode="json")

        return await self._policy.resolve(
            ResolutionRequest(
                cache_key=self.cache_key(wanted),
                fetch_primary=primary,
                ttl_s=self._config.ttl_executive_s,
                fallback=self._config.fallback_or_none(empty),
                fallback_ttl_s=self._config.ttl_fallback_s,
                fallback_source=SourceKind.FALLBACK,
                skip_cache=refresh,
            )
        )

    @staticmethod
    def _report(
        grouped: Mapping[str, list[Device]],
        sampled: Mapping[str, list[Device]],
        ports: Sequence[Port],
    ) -> CapacityUtilizationDTO:
        by_device: dict[str, list[Port]] = defaultdict(list)
        for port in ports:
            by_device[port.device_id].append(port)
        rows = [
            plaza_utilization(
                plaza,
                grouped[plaza],
                [p for d in devs for p in by_device.get(d.device_id, [])],
            )
            for plaza, devs in sampled.items()
        ]
        return capacity_report(rows, SourceKind.LIVE)
