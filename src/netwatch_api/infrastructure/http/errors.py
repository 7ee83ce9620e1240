# src/netwatch_api/infrastructure/http/errors.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""HTTP error mapping.

Every failure leaving the API uses one envelope::

    {"error": {"code", "http_status", "message", "details"?, "trace_id"?}}

Domain errors map by class; request validation problems (FastAPI's own and
``ValueError`` raised by use cases for bad parameters) map to 422; anything
else becomes a 500 ``INTERNAL_ERROR`` without leaking the exception text.
"""

from __future__ import annotations

from typing import Any, Final

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.responses import Response

from netwatch_api.domain.exceptions.base import DomainError
from netwatch_api.domain.exceptions.monitoring import (
    ConfigurationError,
    EmptyResult,
    InvalidTrendData,
    UpstreamAuthError,
    UpstreamUnavailable,
    UpstreamValidationError,
)
from netwatch_api.infrastructure.logging.logger import get_json_logger, get_trace_id

logger = get_json_logger(__name__)

_DOMAIN_STATUS: Final[dict[type[DomainError], int]] = {
    ConfigurationError: 500,
    UpstreamUnavailable: 503,
    UpstreamValidationError: 502,
    UpstreamAuthError: 502,
    EmptyResult: 404,
    InvalidTrendData: 422,
}


def _trace_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "trace_id", None) or get_trace_id()


def status_for(exc: DomainError) -> int:
    """HTTP status for a domain error (most specific class wins, default 500)."""
    for cls in type(exc).__mro__:
        status = _DOMAIN_STATUS.get(cls)  # type: ignore[arg-type]
        if status is not None:
            return status
    return 500


def error_envelope(
    *,
    code: str,
    http_status: int,
    message: str,
    details: dict[str, Any] | None = None,
    trace_id: str | None = None,
) -> dict[str, Any]:
    err: dict[str, Any] = {
        "code": code,
        "http_status": http_status,
        "message": message,
    }
    if details:
        err["details"] = details
    if trace_id is not None:
        err["trace_id"] = trace_id
    return {"error": err}


async def handle_domain_error(request: Request, exc: DomainError) -> Response:
    status = status_for(exc)
    log = logger.error if status >= 500 else logger.warning
    log(
        "http.domain_error",
        extra={"code": exc.code, "status": status, "path": request.url.path, "error": str(exc)},
    )
    payload = error_envelope(
        code=exc.code,
        http_status=status,
        message=str(exc) or exc.code,
        details=exc.details,
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=status, content=payload)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
    payload = error_envelope(
        code="VALIDATION_ERROR",
        http_status=422,
        message="Request validation failed",
        details={"errors": jsonable_errors(exc.errors())},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=422, content=payload)


async def handle_value_error(request: Request, exc: ValueError) -> Response:
    payload = error_envelope(
        code="VALIDATION_ERROR",
        http_status=422,
        message=str(exc) or "Invalid request",
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=422, content=payload)


async def handle_http_exception(request: Request, exc: HTTPException) -> Response:
    payload = error_envelope(
        code="HTTP_ERROR",
        http_status=exc.status_code,
        message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
        details=None if isinstance(exc.detail, str) else {"detail": exc.detail},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=exc.status_code, content=payload, headers=exc.headers)


async def handle_unhandled_exception(request: Request, exc: Exception) -> Response:
    logger.exception(
        "http.unhandled_error",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
    )
    payload = error_envelope(
        code="INTERNAL_ERROR",
        http_status=500,
        message="Internal server error",
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=500, content=payload)


def jsonable_errors(errors: Any) -> list[dict[str, Any]]:
    """Drop the non-serializable ``ctx``/``input`` parts of pydantic error entries."""
    return [
        {"loc": list(e.get("loc", ())), "msg": str(e.get("msg", "")), "type": e.get("type", "")}
        for e in errors
    ]
