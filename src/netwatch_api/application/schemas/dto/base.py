# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Base DTO (Application Layer).

Purpose:
    Canonical Pydantic base for all application-layer DTOs, plus the DTO form
    of a provenance-tagged metric. Transport-agnostic.

Layer: application/schemas/dto
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from netwatch_api.domain.entities.metrics import DerivedMetric
from netwatch_api.domain.enums.monitoring import SourceKind


class BaseDTO(BaseModel):
    """Base class for application-layer DTOs.

    Notes:
        - Must not import HTTP-specific bases.
        - Enforces strict fields (`extra='forbid'`).
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class MetricDTO(BaseDTO):
    """A derived number and the provenance of the data it was computed from."""

    value: float
    source_kind: SourceKind
    unit: str | None = None

    @classmethod
    def of(cls, value: float, source_kind: SourceKind, unit: str | None = None) -> MetricDTO:
        """Wrap ``value`` through :class:`DerivedMetric` so the tag is validated."""
        return cls.from_metric(DerivedMetric(value=value, source_kind=source_kind, unit=unit))

    @classmethod
    def from_metric(cls, metric: DerivedMetric[float]) -> MetricDTO:
        return cls(value=metric.value, source_kind=metric.source_kind, unit=metric.unit)
