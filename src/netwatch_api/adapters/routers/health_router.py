# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Health endpoints (Adapters Layer).

Purpose:
    Liveness and readiness signals for orchestrators and load balancers.

Design:
    * ``/health/z`` does no I/O.
    * ``/health/readiness`` probes the cache backend and the Observium
      upstream concurrently; 200 when both answer, otherwise 503 with
      ``status="degraded"``. The probe is injected through
      :func:`get_probe` so tests can override it.
"""

from __future__ import annotations

import asyncio
import time
import typing as t
from enum import Enum
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import Field

from netwatch_api.adapters.schemas.http.base import BaseHTTPSchema
from netwatch_api.dependencies.dashboard import HealthProbe, get_probe
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)
router = APIRouter()


class HealthState(str, Enum):
    """Overall service health classification."""

    OK = "ok"
    DEGRADED = "degraded"


class CheckResult(BaseHTTPSchema):
    """Result of a single dependency check."""

    name: str = Field(..., examples=["cache", "upstream"])
    status: t.Literal["ok", "down"]
    detail: str | None = None
    duration_ms: float


class ReadinessResponse(BaseHTTPSchema):
    status: HealthState
    checks: list[CheckResult] = Field(default_factory=list)


class LivenessResponse(BaseHTTPSchema):
    status: t.Literal["ok"] = "ok"


@router.get(
    "/z",
    summary="Liveness",
    operation_id="health_liveness",
    response_model=LivenessResponse,
    status_code=status.HTTP_200_OK,
)
async def liveness() -> LivenessResponse:
    """Return a fast liveness signal (no external I/O)."""
    return LivenessResponse()


async def _check(
    name: str, fn: t.Callable[[], t.Awaitable[tuple[bool, str | None]]]
) -> CheckResult:
    start = time.perf_counter()
    ok, detail = await fn()
    return CheckResult(
        name=name,
        status="ok" if ok else "down",
        detail=detail,
        duration_ms=round((time.perf_counter() - start) * 1000.0, 3),
    )


@router.get(
    "/readiness",
    summary="Readiness",
    operation_id="health_readiness",
    response_model=ReadinessResponse,
    responses={503: {"description": "Service degraded", "model": ReadinessResponse}},
)
async def readiness(
    response: Response,
    probe: Annotated[HealthProbe, Depends(get_probe)],
) -> ReadinessResponse:
    results = await asyncio.gather(
        _check("cache", probe.cache),
        _check("upstream", probe.upstream),
    )
    all_ok = all(r.status == "ok" for r in results)
    if not all_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    payload = ReadinessResponse(
        status=HealthState.OK if all_ok else HealthState.DEGRADED,
        checks=list(results),
    )
    logger.info(
        "readiness_probe",
        extra={"overall": payload.status, "checks": [r.model_dump_http() for r in results]},
    )
    return payload
