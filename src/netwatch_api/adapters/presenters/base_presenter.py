# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Presenter utilities and canonical envelope helpers.

Purpose:
    Thin, framework-aware helpers used by routers to shape HTTP responses
    and headers consistently.

Responsibilities:
    * Build SuccessEnvelope / ResolvedEnvelope instances.
    * Compute strong, quoted ETags from canonical JSON material.
    * Apply X-Request-ID and the data-source header.

Layer:
    adapters/presenters
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from netwatch_api.adapters.schemas.http.envelopes import (
    ResolutionMeta,
    ResolvedEnvelope,
    SuccessEnvelope,
)
from netwatch_api.application.services.resolution import Resolution

DATA_SOURCE_HEADER = "X-Data-Source"


def _json_default(value: Any) -> str:
    if isinstance(value, datetime | date):
        return value.isoformat()
    raise TypeError(f"unsupported type for JSON hashing: {type(value)!r}")


def _compute_quoted_etag(payload: Mapping[str, Any]) -> str:
    """Return a quoted strong ETag (SHA-256 of canonical JSON for ``payload``)."""
    material = json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        default=_json_default,
    ).encode("utf-8")
    return f'"{hashlib.sha256(material).hexdigest()}"'


@dataclass(slots=True)
class PresentResult[T]:
    """Presentation result.

    Attributes:
        body: A Pydantic envelope instance.
        headers: Extra HTTP headers to apply.
        status_code: Optional HTTP status override.
    """

    body: T | None
    headers: Mapping[str, str]
    status_code: int | None = None


def resolution_meta(
    resolution: Resolution,
    *,
    requested_scope: str | None = None,
    served_scope: str | None = None,
) -> ResolutionMeta:
    return ResolutionMeta(
        source=resolution.source,
        origin=resolution.origin,
        timestamp=resolution.timestamp,
        cached=resolution.cached,
        cache_ttl_remaining_s=max(0.0, round(resolution.cache_ttl_remaining_s, 3)),
        requested_scope=requested_scope,
        served_scope=served_scope,
    )


class BasePresenter:
    """Assembles envelopes and headers; business decisions stay in use cases."""

    def present_success(
        self,
        *,
        data: Any,
        trace_id: str | None = None,
    ) -> PresentResult[SuccessEnvelope[Any]]:
        """Wrap ``data`` in a SuccessEnvelope with X-Request-ID and a strong ETag."""
        body = SuccessEnvelope[Any](data=data)
        headers: dict[str, str] = {}
        if trace_id:
            headers["X-Request-ID"] = trace_id
        headers["ETag"] = _compute_quoted_etag(body.model_dump(mode="json"))
        return PresentResult(body=body, headers=headers)

    def present_resolution(
        self,
        resolution: Resolution,
        *,
        trace_id: str | None = None,
        requested_scope: str | None = None,
        served_scope: str | None = None,
    ) -> PresentResult[ResolvedEnvelope[Any]]:
        """Wrap a resolved value with its provenance.

        The ETag covers the data only, so a cache hit and the live response
        that populated it share a validator.
        """
        body = ResolvedEnvelope[Any](
            data=resolution.value,
            meta=resolution_meta(
                resolution, requested_scope=requested_scope, served_scope=served_scope
            ),
        )
        headers: dict[str, str] = {
            DATA_SOURCE_HEADER: resolution.origin.value,
            "ETag": _compute_quoted_etag({"data": resolution.value}),
        }
        if trace_id:
            headers["X-Request-ID"] = trace_id
        return PresentResult(body=body, headers=headers)
