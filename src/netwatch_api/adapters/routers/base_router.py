# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Base Router (Adapters Layer)

Purpose:
    Canonical APIRouter wrapper shared by the NetWatch HTTP endpoints:
      - Versioned routing with stable prefixes (e.g., "/v1/plazas").
      - Standard error responses using ErrorEnvelope.
      - A helper to emit presenter results with their headers.

Layer:
    adapters/routers
"""

from __future__ import annotations

from collections.abc import MutableMapping, Sequence
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from fastapi import APIRouter, Request

from netwatch_api.adapters.presenters.base_presenter import PresentResult
from netwatch_api.adapters.schemas.http.envelopes import ErrorEnvelope
from netwatch_api.infrastructure.logging.logger import get_json_logger

_LOGGER = get_json_logger(__name__)

TagType = str | Enum


@runtime_checkable
class _ResponseLike(Protocol):
    headers: MutableMapping[str, str]
    status_code: int


class BaseRouter(APIRouter):
    """Canonical router wrapper for NetWatch HTTP endpoints.

    Args:
        version: API version segment (e.g., "v1").
        resource: Resource segment (e.g., "monitoring").
        prefix: Optional explicit prefix (overrides version/resource).
        tags: Default tags applied to all routes mounted on this router.
        **kwargs: Additional APIRouter kwargs.
    """

    def __init__(
        self,
        *,
        version: str,
        resource: str,
        prefix: str | None = None,
        tags: Sequence[TagType] | None = None,
        **kwargs: Any,
    ) -> None:
        computed_prefix = prefix or f"/{version}/{resource}"
        super().__init__(
            prefix=computed_prefix,
            tags=list(tags) if tags is not None else None,
            responses=self.std_error_responses(),
            **kwargs,
        )
        _LOGGER.info(
            "router_initialized",
            extra={"service": "netwatch-api", "prefix": computed_prefix, "tags": list(tags or [])},
        )

    @staticmethod
    def trace_id(request: Request) -> str | None:
        return getattr(request.state, "request_id", None)

    @staticmethod
    def send_success(response: _ResponseLike, result: PresentResult[Any]) -> Any:
        """Apply presenter headers/status to ``response`` and return the envelope body."""
        response.headers.update(dict(result.headers))
        if result.status_code is not None:
            response.status_code = result.status_code
        return result.body

    @staticmethod
    def std_error_responses() -> dict[int | str, dict[str, Any]]:
        return {
            422: {"model": ErrorEnvelope, "description": "Unprocessable content."},
            500: {"model": ErrorEnvelope, "description": "No data source could answer."},
            502: {"model": ErrorEnvelope, "description": "Upstream returned malformed data."},
            503: {"model": ErrorEnvelope, "description": "Upstream unavailable."},
        }
