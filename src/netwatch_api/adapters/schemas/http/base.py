# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Base HTTP Schema (Adapters Layer)

Purpose:
    Canonical Pydantic base for all adapter-layer HTTP schemas. Strict config
    and deterministic JSON encoding.

Layer: adapters/schemas/http

Notes:
    Transport-facing only. Application DTOs must not import from this module.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseHTTPSchema(BaseModel):
    """Base class for all HTTP-facing schemas."""

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
        ser_json_inf_nan="null",
        use_enum_values=True,
    )

    def model_dump_http(self, **kwargs: Any) -> dict[str, Any]:
        """Return a JSON-serializable dict suitable for HTTP responses."""
        return self.model_dump(mode="json", **kwargs)
