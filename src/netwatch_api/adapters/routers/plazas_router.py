# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Plazas Router.

Summary:
    Plaza list, per-plaza overview (health, alerts, optional capacity and top
    devices), the daily utilization trend of a plaza and its modeled latency
    per network tier.

Layer:
    adapters/routers
"""
from __future__ import annotations

from typing import Annotated, Any, Literal

from fastapi import Depends, Path, Query, Request, Response

from netwatch_api.adapters.presenters.base_presenter import BasePresenter
from netwatch_api.adapters.routers.base_router import BaseRouter
from netwatch_api.adapters.schemas.http.envelopes import ResolvedEnvelope
from netwatch_api.application.schemas.dto.plazas import (
    PlazaLatencyDTO,
    PlazaListDTO,
    PlazaOverviewDTO,
    PlazaTrendsDTO,
)
from netwatch_api.application.use_cases.plazas.get_plaza_latency import GetPlazaLatencyUseCase
from netwatch_api.application.use_cases.plazas.get_plaza_overview import GetPlazaOverviewUseCase
from netwatch_api.application.use_cases.plazas.get_plaza_trends import GetPlazaTrendsUseCase
from netwatch_api.application.use_cases.plazas.list_plazas import ListPlazasUseCase
from netwatch_api.dependencies.dashboard import (
    get_list_plazas_uc,
    get_plaza_latency_uc,
    get_plaza_overview_uc,
    get_plaza_trends_uc,
)

router = BaseRouter(version="v1", resource="plazas", tags=["Plazas"])
presenter = BasePresenter()

PlazaPath = Annotated[str, Path(min_length=1, max_length=100, examples=["Saltillo"])]
RefreshQuery = Annotated[bool, Query(description="Bypass the cache.")]


@router.get("", response_model=ResolvedEnvelope[PlazaListDTO], summary="List plazas")
async def list_plazas(
    request: Request,
    response: Response,
    uc: Annotated[ListPlazasUseCase, Depends(get_list_plazas_uc)],
    refresh: RefreshQuery = False,
) -> Any:
    resolution = await uc.execute(refresh=refresh)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get("/{plaza}", response_model=ResolvedEnvelope[PlazaOverviewDTO], summary="Plaza overview")
async def get_plaza(
    request: Request,
    response: Response,
    plaza: PlazaPath,
    uc: Annotated[GetPlazaOverviewUseCase, Depends(get_plaza_overview_uc)],
    include_capacity: bool = False,
    include_top_devices: bool = False,
    top_devices_limit: Annotated[int, Query(ge=1, le=50)] = 10,
    refresh: RefreshQuery = False,
) -> Any:
    resolution = await uc.execute(
        plaza,
        include_capacity=include_capacity,
        include_top_devices=include_top_devices,
        top_devices_limit=top_devices_limit,
        refresh=refresh,
    )
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/{plaza}/trends",
    response_model=ResolvedEnvelope[PlazaTrendsDTO],
    summary="Daily utilization trend of a plaza",
)
async def get_plaza_trends(
    request: Request,
    response: Response,
    plaza: PlazaPath,
    uc: Annotated[GetPlazaTrendsUseCase, Depends(get_plaza_trends_uc)],
    period: Literal["7d", "30d", "90d"] = "7d",
    interval: Literal["day"] = "day",
    refresh: RefreshQuery = False,
) -> Any:
    resolution = await uc.execute(plaza, period=period, interval=interval, refresh=refresh)
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/{plaza}/latency",
    response_model=ResolvedEnvelope[PlazaLatencyDTO],
    summary="Modeled latency per network tier of a plaza",
)
async def get_plaza_latency(
    request: Request,
    response: Response,
    plaza: PlazaPath,
    uc: Annotated[GetPlazaLatencyUseCase, Depends(get_plaza_latency_uc)],
    period: Literal["7d", "30d"] = "7d",
    network_types: Annotated[
        str | None,
        Query(description="Comma-separated tiers.", examples=["backbone,distribucion,acceso"]),
    ] = None,
    refresh: RefreshQuery = False,
) -> Any:
    resolution = await uc.execute(
        plaza, period=period, network_types=network_types, refresh=refresh
    )
    result = presenter.present_resolution(resolution, trace_id=router.trace_id(request))
    return router.send_success(response, result)
