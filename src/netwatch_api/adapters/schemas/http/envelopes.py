# src/netwatch_api/adapters/schemas/http/envelopes.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""HTTP Envelopes (Adapters Layer).

Purpose:
    Canonical transport-facing envelopes:
      - ErrorEnvelope: ``{"error": ErrorObject}``
      - SuccessEnvelope[T]: ``{"data": T}``
      - ResolvedEnvelope[T]: ``{"data": T, "meta": ResolutionMeta}`` for every
        endpoint answered through the resolution policy.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from netwatch_api.adapters.schemas.http.base import BaseHTTPSchema
from netwatch_api.domain.enums.monitoring import ResolutionSource, SourceKind

__all__ = [
    "ErrorEnvelope",
    "ErrorObject",
    "ResolutionMeta",
    "ResolvedEnvelope",
    "SuccessEnvelope",
]


class ErrorObject(BaseModel):
    """Structured error object inside ErrorEnvelope.

    Codes are UPPER_SNAKE_CASE and stable across releases, e.g.
    ``CONFIGURATION_ERROR``, ``UPSTREAM_UNAVAILABLE``, ``INVALID_TREND_DATA``,
    ``VALIDATION_ERROR``, ``INTERNAL_ERROR``.
    """

    model_config = ConfigDict(
        title="ErrorObject",
        extra="forbid",
        json_schema_extra={
            "examples": [
                {
                    "code": "CONFIGURATION_ERROR",
                    "http_status": 500,
                    "message": "All fetch tiers failed and no fallback value is configured.",
                    "details": {"cache_key": "monitoring-data:all"},
                    "trace_id": "req-123",
                }
            ]
        },
    )

    code: str = Field(..., description="Stable machine-readable error code.")
    http_status: int = Field(..., description="Associated HTTP status.")
    message: str = Field(..., description="Human-readable error description.")
    details: dict[str, Any] | None = Field(
        default=None, description="Optional structured details safe for clients."
    )
    trace_id: str | None = Field(default=None, description="Request correlation identifier.")


class ErrorEnvelope(BaseHTTPSchema):
    """Canonical error envelope."""

    model_config = ConfigDict(title="ErrorEnvelope", extra="forbid")

    error: ErrorObject = Field(..., description="Structured error details.")


class ResolutionMeta(BaseHTTPSchema):
    """Provenance and freshness of a resolved payload."""

    model_config = ConfigDict(title="ResolutionMeta", extra="forbid")

    source: ResolutionSource = Field(..., description="Tier that answered this request.")
    origin: SourceKind = Field(..., description="Tier that originally produced the data.")
    timestamp: datetime = Field(..., description="When the data was produced (UTC).")
    cached: bool = Field(..., description="True when served from the cache.")
    cache_ttl_remaining_s: float = Field(..., ge=0, description="Seconds until the entry expires.")
    requested_scope: str | None = Field(default=None, description="Scope the client asked for.")
    served_scope: str | None = Field(default=None, description="Scope the data actually covers.")


class SuccessEnvelope[T](BaseHTTPSchema):
    """Success envelope without provenance: ``{"data": T}``."""

    model_config = ConfigDict(title="SuccessEnvelope", extra="forbid")

    data: T = Field(..., description="Returned resource or value.")


class ResolvedEnvelope[T](BaseHTTPSchema):
    """Success envelope with provenance: ``{"data": T, "meta": ResolutionMeta}``."""

    model_config = ConfigDict(title="ResolvedEnvelope", extra="forbid")

    data: T = Field(..., description="Returned resource or value.")
    meta: ResolutionMeta
