# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Executive Router.

Summary:
    Executive dashboard views: capacity utilization per plaza, infrastructure
    health, critical sites, growth trends, network consumption from bills,
    environmental sensors, the weighted network health score and the LLM
    summary of the whole dashboard.

Layer:
    adapters/routers
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import Body, Depends, Query, Request, Response

from netwatch_api.adapters.presenters.base_presenter import BasePresenter
from netwatch_api.adapters.routers.base_router import BaseRouter
from netwatch_api.adapters.schemas.http.envelopes import ResolvedEnvelope
from netwatch_api.adapters.schemas.http.requests import ExecutiveSummaryRequest
from netwatch_api.application.schemas.dto.executive import (
    CapacityUtilizationDTO,
    CriticalSitesDTO,
    EnvironmentalMonitoringDTO,
    GrowthTrendsDTO,
    InfrastructureHealthDTO,
    NetworkConsumptionDTO,
    NetworkHealthDTO,
)
from netwatch_api.application.schemas.dto.monitoring import SummaryDTO
from netwatch_api.application.use_cases.executive.get_capacity_utilization import (
    GetCapacityUtilizationUseCase,
)
from netwatch_api.application.use_cases.executive.get_critical_sites import GetCriticalSitesUseCase
from netwatch_api.application.use_cases.executive.get_environmental_monitoring import (
    DEFAULT_ALERT_THRESHOLD_C,
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
from netwatch_api.dependencies.dashboard import (
    get_capacity_utilization_uc,
    get_critical_sites_uc,
    get_environmental_monitoring_uc,
    get_executive_summary_uc,
    get_growth_trends_uc,
    get_infrastructure_health_uc,
    get_network_consumption_uc,
    get_network_health_uc,
)
from netwatch_api.domain.enums.monitoring import SensorType
from netwatch_api.domain.services.growth import GrowthMetric, GrowthPeriod

router = BaseRouter(version="v1", resource="executive", tags=["Executive"])
presenter = BasePresenter()

RefreshQuery = Annotated[bool, Query(description="Bypass the cache.")]
PlazasQuery = Annotated[
    str | None, Query(description="Comma-separated plaza filter.", examples=["Saltillo,Laredo"])
]


def _split_csv(raw: str | None) -> list[str]:
    return [p.strip() for p in (raw or "").split(",") if p.strip()]


@router.get(
    "/capacity-utilization",
    response_model=ResolvedEnvelope[CapacityUtilizationDTO],
    summary="Capacity utilization per plaza",
)
async def get_capacity_utilization(
    request: Request,
    response: Response,
    uc: Annotated[GetCapacityUtilizationUseCase, Depends(get_capacity_utilization_uc)],
    plazas: PlazasQuery = None,
    refresh: RefreshQuery = False,
) -> Any:
    resolution = await uc.execute(plazas=_split_csv(plazas), refresh=refresh)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/infrastructure-health",
    response_model=ResolvedEnvelope[InfrastructureHealthDTO],
    summary="CPU, memory and temperature health by location",
)
async def get_infrastructure_health(
    request: Request,
    response: Response,
    uc: Annotated[GetInfrastructureHealthUseCase, Depends(get_infrastructure_health_uc)],
    location: Annotated[str | None, Query(max_length=100)] = None,
    include_details: bool = False,
    refresh: RefreshQuery = False,
) -> Any:
    resolution = await uc.execute(
        location=location, include_details=include_details, refresh=refresh
    )
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/critical-sites",
    response_model=ResolvedEnvelope[CriticalSitesDTO],
    summary="Sites that need attention",
)
async def get_critical_sites(
    request: Request,
    response: Response,
    uc: Annotated[GetCriticalSitesUseCase, Depends(get_critical_sites_uc)],
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
    threshold: Annotated[float | None, Query(ge=0, le=100)] = None,
    include_alerts: bool = True,
    refresh: RefreshQuery = False,
) -> Any:
    resolution = await uc.execute(
        limit=limit, threshold=threshold, include_alerts=include_alerts, refresh=refresh
    )
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/growth-trends",
    response_model=ResolvedEnvelope[GrowthTrendsDTO],
    summary="Growth series, analysis and projections",
)
async def get_growth_trends(
    request: Request,
    response: Response,
    uc: Annotated[GetGrowthTrendsUseCase, Depends(get_growth_trends_uc)],
    period: GrowthPeriod = GrowthPeriod.SIX_MONTHS,
    metric: GrowthMetric = GrowthMetric.UTILIZATION,
    refresh: RefreshQuery = False,
) -> Any:
    resolution = await uc.execute(period=period, metric=metric, refresh=refresh)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/network-consumption",
    response_model=ResolvedEnvelope[NetworkConsumptionDTO],
    summary="Average billed traffic per location",
)
async def get_network_consumption(
    request: Request,
    response: Response,
    uc: Annotated[GetNetworkConsumptionUseCase, Depends(get_network_consumption_uc)],
    plazas: PlazasQuery = None,
    refresh: RefreshQuery = False,
) -> Any:
    resolution = await uc.execute(plazas=_split_csv(plazas), refresh=refresh)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/environmental-monitoring",
    response_model=ResolvedEnvelope[EnvironmentalMonitoringDTO],
    summary="Temperature, humidity and voltage by location",
)
async def get_environmental_monitoring(
    request: Request,
    response: Response,
    uc: Annotated[GetEnvironmentalMonitoringUseCase, Depends(get_environmental_monitoring_uc)],
    location: Annotated[str | None, Query(max_length=100)] = None,
    sensor_type: SensorType = SensorType.ALL,
    alert_threshold: Annotated[float, Query(ge=-50, le=150)] = DEFAULT_ALERT_THRESHOLD_C,
    refresh: RefreshQuery = False,
) -> Any:
    resolution = await uc.execute(
        location=location,
        sensor_type=sensor_type,
        alert_threshold=alert_threshold,
        refresh=refresh,
    )
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/network-health",
    response_model=ResolvedEnvelope[NetworkHealthDTO],
    summary="Weighted device, alert and link performance score",
)
async def get_network_health(
    request: Request,
    response: Response,
    uc: Annotated[GetNetworkHealthUseCase, Depends(get_network_health_uc)],
    location: Annotated[str | None, Query(max_length=100)] = None,
    include_details: bool = False,
    refresh: RefreshQuery = False,
) -> Any:
    resolution = await uc.execute(
        location=location, include_details=include_details, refresh=refresh
    )
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/summary",
    response_model=ResolvedEnvelope[SummaryDTO],
    summary="LLM summary of the executive dashboard",
)
async def get_executive_summary(
    request: Request,
    response: Response,
    uc: Annotated[GetExecutiveSummaryUseCase, Depends(get_executive_summary_uc)],
    skip_cache: Annotated[bool, Query(description="Regenerate even when cached.")] = False,
) -> Any:
    resolution = await uc.execute(skip_cache=skip_cache)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.post(
    "/summary",
    response_model=ResolvedEnvelope[SummaryDTO],
    summary="LLM summary of dashboard data supplied by the client",
)
async def post_executive_summary(
    request: Request,
    response: Response,
    uc: Annotated[GetExecutiveSummaryUseCase, Depends(get_executive_summary_uc)],
    body: Annotated[ExecutiveSummaryRequest | None, Body()] = None,
    skip_cache: Annotated[bool, Query(description="Regenerate even when cached.")] = False,
) -> Any:
    data = body.dashboard_data if body is not None else None
    resolution = await uc.execute(dashboard_data=data, skip_cache=skip_cache)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)
