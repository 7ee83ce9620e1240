# src/netwatch_api/main.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Application Entry (Adapters Bootstrap)

Synopsis:
    FastAPI bootstrap that wires middleware, exception handlers and routers.
    Provides the application factory (`create_app`) used by uvicorn and tests.

Design:
    * Bootstrap only (no business logic).
    * Lifespan builds the cache, upstream clients and use-case container and
      tears them down on exit.
    * Root JSON logging configured at import time.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException
from starlette.middleware.gzip import GZipMiddleware
from starlette.requests import Request
from starlette.responses import Response

from netwatch_api.adapters.routers import api_router, metrics
from netwatch_api.config.settings import Settings, get_settings
from netwatch_api.dependencies.core.bootstrap import bootstrap
from netwatch_api.domain.exceptions.base import DomainError
from netwatch_api.infrastructure.http.errors import (
    handle_domain_error,
    handle_http_exception,
    handle_unhandled_exception,
    handle_validation_error,
    handle_value_error,
)
from netwatch_api.infrastructure.logging.logger import configure_root_logging, get_json_logger
from netwatch_api.infrastructure.middleware.access_log import AccessLogMiddleware
from netwatch_api.infrastructure.middleware.request_id import RequestIdMiddleware
from netwatch_api.infrastructure.middleware.request_metrics import RequestLatencyMiddleware

configure_root_logging()
logger = get_json_logger(__name__)


def _stable_operation_id(route: APIRoute) -> str:
    """Deterministic operationId, e.g. ``get__v1_plazas_plaza_trends``."""
    methods = ",".join(sorted(route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "")
    return f"{methods.lower()}_{path.lower()}"


@asynccontextmanager
async def runtime_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Expose the bootstrap state on ``app.state`` for the dependency providers."""
    async with bootstrap(app) as state:
        app.state.settings = state.settings
        app.state.container = state.container
        app.state.probe = state.probe
        yield


def _attach_middlewares(app: FastAPI, settings: Settings) -> None:
    """Attach middleware; the last one added runs first.

    Order of execution:
        1. RequestIdMiddleware (correlation ids for everything below)
        2. AccessLogMiddleware
        3. RequestLatencyMiddleware
        4. GZipMiddleware
    """
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(RequestLatencyMiddleware)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)
    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials="*" not in settings.cors_allow_origins,
            allow_methods=["GET", "POST", "PUT", "DELETE"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Data-Source", "ETag"],
        )


def _patch_exception_handlers(app: FastAPI) -> None:
    """Install the structured error-envelope handlers."""

    async def _domain_error_handler(request: Request, exc: Exception) -> Response:
        if not isinstance(exc, DomainError):
            raise exc
        return await handle_domain_error(request, exc)

    async def _http_error_handler(request: Request, exc: Exception) -> Response:
        if not isinstance(exc, HTTPException):
            raise exc
        return await handle_http_exception(request, exc)

    async def _validation_error_handler(request: Request, exc: Exception) -> Response:
        if not isinstance(exc, RequestValidationError):
            raise exc
        return await handle_validation_error(request, exc)

    async def _value_error_handler(request: Request, exc: Exception) -> Response:
        if not isinstance(exc, ValueError):
            raise exc
        return await handle_value_error(request, exc)

    async def _unhandled_error_handler(request: Request, exc: Exception) -> Response:
        return await handle_unhandled_exception(request, exc)

    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(ValueError, _value_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


def create_app(*, lifespan: bool = True) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        lifespan: Install the bootstrap lifespan. Tests pass False and put
            their own container on ``app.state`` (or override providers).
    """
    settings: Settings = get_settings()
    service_version = settings.service_version or os.getenv("SERVICE_VERSION") or "0.0.0"

    app = FastAPI(
        title="NetWatch API",
        version=service_version,
        description="Data freshness and fallback orchestration for the Observium dashboard.",
        lifespan=runtime_lifespan if lifespan else None,
        generate_unique_id_function=_stable_operation_id,
    )

    _patch_exception_handlers(app)
    _attach_middlewares(app, settings)

    app.include_router(api_router)
    app.include_router(metrics)

    logger.info(
        "service_startup",
        extra={
            "service": settings.service_name,
            "env": settings.environment.value,
            "version": service_version,
        },
    )
    return app


def run() -> None:  # pragma: no cover
    """Serve the app with uvicorn (console entry point)."""
    import uvicorn

    uvicorn.run(
        "netwatch_api.main:create_app",
        factory=True,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8080")),
    )


if __name__ == "__main__":  # pragma: no cover
    run()
