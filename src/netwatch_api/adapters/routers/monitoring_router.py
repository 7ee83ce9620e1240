# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Monitoring Router.

Summary:
    Technical dashboard snapshot (devices, ports, alerts) for one plaza or the
    whole network, its LLM summary, cache invalidation, the endpoint a
    dashboard client uses to push the data it already rendered, single-device
    detail, the most saturated sites and active port alerts.

Layer:
    adapters/routers
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, Path, Query, Request, Response, status

from netwatch_api.adapters.presenters.base_presenter import BasePresenter
from netwatch_api.adapters.routers.base_router import BaseRouter
from netwatch_api.adapters.schemas.http.envelopes import ResolvedEnvelope, SuccessEnvelope
from netwatch_api.adapters.schemas.http.requests import DashboardPushRequest
from netwatch_api.application.schemas.dto.monitoring import (
    AlertListDTO,
    DeviceDetailDTO,
    MonitoringSnapshotDTO,
    SaturatedSitesDTO,
    SummaryDTO,
)
from netwatch_api.application.use_cases.monitoring.get_device_detail import GetDeviceDetailUseCase
from netwatch_api.application.use_cases.monitoring.get_monitoring_snapshot import (
    GetMonitoringSnapshotUseCase,
    normalize_plaza,
    scope_of,
)
from netwatch_api.application.use_cases.monitoring.get_monitoring_summary import (
    GetMonitoringSummaryUseCase,
)
from netwatch_api.application.use_cases.monitoring.get_saturated_sites import (
    GetSaturatedSitesUseCase,
)
from netwatch_api.application.use_cases.monitoring.list_alerts import AlertFilter, ListAlertsUseCase
from netwatch_api.dependencies.dashboard import (
    get_alerts_uc,
    get_device_detail_uc,
    get_monitoring_snapshot_uc,
    get_monitoring_summary_uc,
    get_saturated_sites_uc,
)
from netwatch_api.domain.enums.monitoring import SourceKind

router = BaseRouter(version="v1", resource="monitoring", tags=["Monitoring"])
presenter = BasePresenter()

PlazaQuery = Annotated[
    str | None, Query(description="Plaza name; omit for the whole network.", examples=["Saltillo"])
]


def served_scope(requested: str, origin: SourceKind) -> str:
    """Scope the data covers: a partial answer was fetched without the plaza filter."""
    return "all" if origin is SourceKind.PARTIAL else requested


@router.get(
    "",
    response_model=ResolvedEnvelope[MonitoringSnapshotDTO],
    summary="Monitoring snapshot",
)
async def get_monitoring(
    request: Request,
    response: Response,
    uc: Annotated[GetMonitoringSnapshotUseCase, Depends(get_monitoring_snapshot_uc)],
    plaza: PlazaQuery = None,
    refresh: Annotated[bool, Query(description="Bypass the cache.")] = False,
) -> Any:
    resolution = await uc.execute(plaza, refresh=refresh)
    requested = scope_of(normalize_plaza(plaza))
    result = presenter.present_resolution(
        resolution,
        trace_id=router.trace_id(request),
        requested_scope=requested,
        served_scope=served_scope(requested, resolution.origin),
    )
    return router.send_success(response, result)


@router.delete(
    "/cache",
    response_model=SuccessEnvelope[dict[str, list[str]]],
    summary="Invalidate cached monitoring data",
)
async def invalidate_monitoring(
    request: Request,
    response: Response,
    uc: Annotated[GetMonitoringSnapshotUseCase, Depends(get_monitoring_snapshot_uc)],
    plaza: PlazaQuery = None,
) -> Any:
    keys = await uc.invalidate(plaza)
    result = presenter.present_success(
        data={"invalidated": keys}, trace_id=router.trace_id(request)
    )
    return router.send_success(response, result)


@router.post(
    "/dashboard",
    response_model=ResolvedEnvelope[MonitoringSnapshotDTO],
    status_code=status.HTTP_201_CREATED,
    summary="Store the dashboard's current data for summaries",
)
async def push_dashboard(
    request: Request,
    response: Response,
    body: DashboardPushRequest,
    uc: Annotated[GetMonitoringSnapshotUseCase, Depends(get_monitoring_snapshot_uc)],
) -> Any:
    resolution = await uc.store_dashboard(body.to_dto())
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/summary",
    response_model=ResolvedEnvelope[SummaryDTO],
    summary="LLM summary of the monitoring snapshot",
)
async def get_monitoring_summary(
    request: Request,
    response: Response,
    uc: Annotated[GetMonitoringSummaryUseCase, Depends(get_monitoring_summary_uc)],
    plaza: PlazaQuery = None,
    skip_cache: Annotated[bool, Query(description="Regenerate even when cached.")] = False,
) -> Any:
    resolution = await uc.execute(plaza, skip_cache=skip_cache)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/devices/{device_id}",
    response_model=ResolvedEnvelope[DeviceDetailDTO],
    summary="Technical detail of one device",
)
async def get_device(
    request: Request,
    response: Response,
    device_id: Annotated[int, Path(ge=0)],
    uc: Annotated[GetDeviceDetailUseCase, Depends(get_device_detail_uc)],
    include_system_health: bool = True,
    include_attention: bool = True,
    refresh: Annotated[bool, Query(description="Bypass the cache.")] = False,
) -> Any:
    resolution = await uc.execute(
        device_id,
        include_system_health=include_system_health,
        include_attention=include_attention,
        refresh=refresh,
    )
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/saturated-sites",
    response_model=ResolvedEnvelope[SaturatedSitesDTO],
    summary="Most saturated sites",
)
async def get_saturated_sites(
    request: Request,
    response: Response,
    uc: Annotated[GetSaturatedSitesUseCase, Depends(get_saturated_sites_uc)],
    limit: Annotated[int, Query(ge=1, le=50)] = 5,
    refresh: Annotated[bool, Query(description="Bypass the cache.")] = False,
) -> Any:
    resolution = await uc.execute(limit=limit, refresh=refresh)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/port-alerts",
    response_model=ResolvedEnvelope[AlertListDTO],
    summary="Active alerts raised on ports",
)
async def get_port_alerts(
    request: Request,
    response: Response,
    uc: Annotated[ListAlertsUseCase, Depends(get_alerts_uc)],
    refresh: Annotated[bool, Query(description="Bypass the cache.")] = False,
) -> Any:
    resolution = await uc.execute(AlertFilter(entity_type="port"), refresh=refresh)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)
