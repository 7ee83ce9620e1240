# src/netwatch_api/dependencies/container.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Object graph for the dashboard use cases.

:func:`build_container` wires one resolution policy, one gateway, one trend
history and one summary generator into every use case. The lifespan builds
the production graph from Settings; tests call it directly with a stub
gateway, an in-memory cache and a fixed clock.
"""

from __future__ import annotations

from dataclasses import dataclass

from netwatch_api.application.interfaces.cache_port import CachePort
from netwatch_api.application.interfaces.summary_port import SummaryGeneratorPort
from netwatch_api.application.interfaces.trend_history_port import TrendHistoryPort
from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.application.services.resolution import Clock, ResolutionPolicy, utcnow
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
from netwatch_api.application.use_cases.trends.link_history import (
    ExportTrendHistoryUseCase,
    GetLinkTrendUseCase,
    GetTrendStatsUseCase,
    ImportTrendHistoryUseCase,
    RecordLinkSampleUseCase,
)
from netwatch_api.domain.interfaces.gateways.monitoring_gateway import MonitoringGatewayProtocol


@dataclass(frozen=True, slots=True)
class DashboardContainer:
    """Every use case the routers depend on, sharing one policy and gateway."""

    config: DashboardConfig
    cache: CachePort
    policy: ResolutionPolicy
    gateway: MonitoringGatewayProtocol
    history: TrendHistoryPort
    generator: SummaryGeneratorPort
    monitoring_snapshot: GetMonitoringSnapshotUseCase
    monitoring_summary: GetMonitoringSummaryUseCase
    device_detail: GetDeviceDetailUseCase
    saturated_sites: GetSaturatedSitesUseCase
    alerts: ListAlertsUseCase
    list_plazas: ListPlazasUseCase
    plaza_overview: GetPlazaOverviewUseCase
    plaza_trends: GetPlazaTrendsUseCase
    plaza_latency: GetPlazaLatencyUseCase
    capacity_utilization: GetCapacityUtilizationUseCase
    infrastructure_health: GetInfrastructureHealthUseCase
    critical_sites: GetCriticalSitesUseCase
    growth_trends: GetGrowthTrendsUseCase
    network_consumption: GetNetworkConsumptionUseCase
    environmental_monitoring: GetEnvironmentalMonitoringUseCase
    network_health: GetNetworkHealthUseCase
    executive_summary: GetExecutiveSummaryUseCase
    link_trend: GetLinkTrendUseCase
    record_link_sample: RecordLinkSampleUseCase
    export_trends: ExportTrendHistoryUseCase
    import_trends: ImportTrendHistoryUseCase
    trend_stats: GetTrendStatsUseCase


def build_container(
    *,
    cache: CachePort,
    gateway: MonitoringGatewayProtocol,
    history: TrendHistoryPort,
    generator: SummaryGeneratorPort,
    config: DashboardConfig | None = None,
    single_flight: bool = True,
    clock: Clock = utcnow,
) -> DashboardContainer:
    config = config or DashboardConfig()
    policy = ResolutionPolicy(cache, single_flight=single_flight, clock=clock)
    snapshots = GetMonitoringSnapshotUseCase(policy=policy, gateway=gateway, config=config)
    capacity = GetCapacityUtilizationUseCase(policy=policy, gateway=gateway, config=config)
    critical = GetCriticalSitesUseCase(policy=policy, gateway=gateway, config=config)
    growth = GetGrowthTrendsUseCase(policy=policy, gateway=gateway, config=config, clock=clock)
    return DashboardContainer(
        config=config,
        cache=cache,
        policy=policy,
        gateway=gateway,
        history=history,
        generator=generator,
        monitoring_snapshot=snapshots,
        monitoring_summary=GetMonitoringSummaryUseCase(
            policy=policy, snapshots=snapshots, generator=generator, config=config, clock=clock
        ),
        device_detail=GetDeviceDetailUseCase(policy=policy, gateway=gateway, config=config),
        saturated_sites=GetSaturatedSitesUseCase(policy=policy, gateway=gateway, config=config),
        alerts=ListAlertsUseCase(policy=policy, gateway=gateway, config=config),
        list_plazas=ListPlazasUseCase(policy=policy, gateway=gateway, config=config),
        plaza_overview=GetPlazaOverviewUseCase(policy=policy, gateway=gateway, config=config),
        plaza_trends=GetPlazaTrendsUseCase(
            policy=policy, gateway=gateway, history=history, config=config, clock=clock
        ),
        plaza_latency=GetPlazaLatencyUseCase(
            policy=policy, gateway=gateway, config=config, clock=clock
        ),
        capacity_utilization=capacity,
        infrastructure_health=GetInfrastructureHealthUseCase(
            policy=policy, gateway=gateway, config=config
        ),
        critical_sites=critical,
        growth_trends=growth,
        network_consumption=GetNetworkConsumptionUseCase(
            policy=policy, gateway=gateway, config=config
        ),
        environmental_monitoring=GetEnvironmentalMonitoringUseCase(
            policy=policy, gateway=gateway, config=config
        ),
        network_health=GetNetworkHealthUseCase(policy=policy, gateway=gateway, config=config),
        executive_summary=GetExecutiveSummaryUseCase(
            policy=policy,
            capacity=capacity,
            critical_sites=critical,
            growth=growth,
            generator=generator,
            config=config,
            clock=clock,
        ),
        link_trend=GetLinkTrendUseCase(history=history, clock=clock),
        record_link_sample=RecordLinkSampleUseCase(history=history, clock=clock),
        export_trends=ExportTrendHistoryUseCase(history=history),
        import_trends=ImportTrendHistoryUseCase(history=history),
        trend_stats=GetTrendStatsUseCase(history=history),
    )
