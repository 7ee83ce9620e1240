# src/netwatch_api/dependencies/dashboard.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""FastAPI dependency providers for the dashboard use cases.

Overview:
    Routers depend on the narrow ``get_*_uc`` providers; all of them read the
    :class:`DashboardContainer` the lifespan placed on ``app.state``. Tests
    override :func:`get_container` (and :func:`get_probe`) once and every
    route picks up the substitute graph.

Layer:
    dependencies
"""

from __future__ import annotations

from typing import Annotated, Protocol

from fastapi import Depends, Request

from netwatch_api.application.use_cases.executive.get_capacity_utilization import (
    GetCapacityUtilizationUseCase,
)
from netwatch_api.application.use_cases.executive.get_critical_sites import GetCriticalSitesUseCase
from netwatch_api.application.use_cases.executive.get_environmental_monitoring import (
    GetEnvironmentalMonitoringUseCase,
)
from netwatch_api.application.use_cases.executive.get_executive_summary import (
    GetExecutiveSummaryUseCase,
)
from netwatch_api.application.use_cases.executive.get_growth_trends import GetGrowthTrendsUseCase
from netwatch_api.application.use_cases.executive.get_infrastructure_health import (
    GetInfrastructureHealthUseCase,
)
from netwatch_api.application.use_cases.executive.get_network_consumption import (
    GetNetworkConsumptionUseCase,
)
from netwatch_api.application.use_cases.executive.get_network_health import GetNetworkHealthUseCase
from netwatch_api.application.use_cases.monitoring.get_device_detail import GetDeviceDetailUseCase
from netwatch_api.application.use_cases.monitoring.get_monitoring_snapshot import (
    GetMonitoringSnapshotUseCase,
)
from netwatch_api.application.use_cases.monitoring.get_monitoring_summary import (
    GetMonitoringSummaryUseCase,
)
from netwatch_api.application.use_cases.monitoring.get_saturated_sites import (
    GetSaturatedSitesUseCase,
)
from netwatch_api.application.use_cases.monitoring.list_alerts import ListAlertsUseCase
from netwatch_api.application.use_cases.plazas.get_plaza_latency import GetPlazaLatencyUseCase
from netwatch_api.application.use_cases.plazas.get_plaza_overview import GetPlazaOverviewUseCase
from netwatch_api.application.use_cases.plazas.get_plaza_trends import GetPlazaTrendsUseCase
from netwatch_api.application.use_cases.plazas.list_plazas import ListPlazasUseCase
from netwatch_api.dependencies.container import DashboardContainer
from netwatch_api.domain.exceptions.monitoring import ConfigurationError


class HealthProbe(Protocol):
    """Readiness checks; each returns ``(ok, detail)``."""

    async def cache(self) -> tuple[bool, str | None]: ...

    async def upstream(self) -> tuple[bool, str | None]: ...


def get_container(request: Request) -> DashboardContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise ConfigurationError("application container is not initialized")
    return container


def get_probe(request: Request) -> HealthProbe:
    probe = getattr(request.app.state, "probe", None)
    if probe is None:
        raise ConfigurationError("readiness probe is not initialized")
    return probe


ContainerDep = Annotated[DashboardContainer, Depends(get_container)]


def get_monitoring_snapshot_uc(c: ContainerDep) -> GetMonitoringSnapshotUseCase:
    return c.monitoring_snapshot


def get_monitoring_summary_uc(c: ContainerDep) -> GetMonitoringSummaryUseCase:
    return c.monitoring_summary


def get_list_plazas_uc(c: ContainerDep) -> ListPlazasUseCase:
    return c.list_plazas


def get_plaza_overview_uc(c: ContainerDep) -> GetPlazaOverviewUseCase:
    return c.plaza_overview


def get_plaza_trends_uc(c: ContainerDep) -> GetPlazaTrendsUseCase:
    return c.plaza_trends


def get_capacity_utilization_uc(c: ContainerDep) -> GetCapacityUtilizationUseCase:
    return c.capacity_utilization


def get_infrastructure_health_uc(c: ContainerDep) -> GetInfrastructureHealthUseCase:
    return c.infrastructure_health


def get_critical_sites_uc(c: ContainerDep) -> GetCriticalSitesUseCase:
    return c.critical_sites


def get_growth_trends_uc(c: ContainerDep) -> GetGrowthTrendsUseCase:
    return c.growth_trends


def get_network_consumption_uc(c: ContainerDep) -> GetNetworkConsumptionUseCase:
    return c.network_consumption


def get_executive_summary_uc(c: ContainerDep) -> GetExecutiveSummaryUseCase:
    return c.executive_summary


def get_device_detail_uc(c: ContainerDep) -> GetDeviceDetailUseCase:
    return c.device_detail


def get_saturated_sites_uc(c: ContainerDep) -> GetSaturatedSitesUseCase:
    return c.saturated_sites


def get_alerts_uc(c: ContainerDep) -> ListAlertsUseCase:
    return c.alerts


def get_plaza_latency_uc(c: ContainerDep) -> GetPlazaLatencyUseCase:
    return c.plaza_latency


def get_environmental_monitoring_uc(c: ContainerDep) -> GetEnvironmentalMonitoringUseCase:
    return c.environmental_monitoring


def get_network_health_uc(c: ContainerDep) -> GetNetworkHealthUseCase:
    return c.network_health
