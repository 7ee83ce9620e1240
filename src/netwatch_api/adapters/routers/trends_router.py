# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Trend History Router.

Summary:
    Biweekly utilization history per link: read the analysis, record a
    reading, and export/import/inspect the whole in-process history. These
    endpoints do not go through the cache, so they use the plain
    ``{"data": ...}`` envelope.

Layer:
    adapters/routers
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import Body, Path, Request, Response

from netwatch_api.adapters.presenters.base_presenter import BasePresenter
from netwatch_api.adapters.routers.base_router import BaseRouter
from netwatch_api.adapters.schemas.http.envelopes import SuccessEnvelope
from netwatch_api.adapters.schemas.http.requests import LinkSampleRequest
from netwatch_api.application.schemas.dto.trends import (
    LinkTrendDTO,
    TrendImportResultDTO,
    TrendStatsDTO,
)
from netwatch_api.dependencies.dashboard import ContainerDep

router = BaseRouter(version="v1", resource="trends", tags=["Trend History"])
presenter = BasePresenter()

LinkPath = Annotated[str, Path(min_length=1, max_length=200, examples=["sal-mty-01"])]


@router.get(
    "/links/{link_id}", response_model=SuccessEnvelope[LinkTrendDTO], summary="Link trend"
)
async def get_link_trend(
    request: Request, response: Response, link_id: LinkPath, c: ContainerDep
) -> Any:
    dto = await c.link_trend.execute(link_id)
    result = presenter.present_success(data=dto, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.put(
    "/links/{link_id}",
    response_model=SuccessEnvelope[LinkTrendDTO],
    summary="Record a link utilization reading",
)
async def put_link_sample(
    request: Request,
    response: Response,
    link_id: LinkPath,
    body: LinkSampleRequest,
    c: ContainerDep,
) -> Any:
    dto = await c.record_link_sample.execute(link_id, body.value, observed_on=body.observed_on)
    result = presenter.present_success(data=dto, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get(
    "/export", response_model=SuccessEnvelope[dict[str, Any]], summary="Export trend history"
)
async def export_trends(request: Request, response: Response, c: ContainerDep) -> Any:
    document = await c.export_trends.execute()
    result = presenter.present_success(data=document, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.post(
    "/import",
    response_model=SuccessEnvelope[TrendImportResultDTO],
    summary="Merge an exported trend history",
)
async def import_trends(
    request: Request,
    response: Response,
    document: Annotated[dict[str, Any], Body()],
    c: ContainerDep,
) -> Any:
    dto = await c.import_trends.execute(document)
    result = presenter.present_success(data=dto, trace_id=router.trace_id(request))
    return router.send_success(response, result)


@router.get("/stats", response_model=SuccessEnvelope[TrendStatsDTO], summary="History statistics")
async def trend_stats(request: Request, response: Response, c: ContainerDep) -> Any:
    dto = await c.trend_stats.execute()
    result = presenter.present_success(data=dto, trace_id=router.trace_id(request))
    return router.send_success(response, result)
