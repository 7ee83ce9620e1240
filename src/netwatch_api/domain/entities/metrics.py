# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Derived Metrics

Purpose:
    Value object wrapping every aggregate handed to a consumer together with
    its provenance, so synthetic numbers are never shown as live ones.

Layer: domain/entities
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from netwatch_api.domain.enums.monitoring import SourceKind


@dataclass(frozen=True, slots=True)
class DerivedMetric[T]:
    """A computed value tagged with the kind of data it was computed from.

    Args:
        value: Scalar or structured result (percentage, score, forecast, ...).
        source_kind: Provenance of the inputs.
        unit: Optional display unit (``"%"``, ``"Mbps"``, ...).
    """

    value: T
    source_kind: SourceKind
    unit: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.source_kind, SourceKind):
            raise TypeError("source_kind must be a SourceKind")

    @property
    def is_synthetic(self) -> bool:
        """True when the metric was computed from fallback or demo data."""
        return self.source_kind.is_synthetic

    def with_source(self, source_kind: SourceKind) -> DerivedMetric[T]:
        """Return a copy re-tagged with ``source_kind``."""
        return DerivedMetric(value=self.value, source_kind=source_kind, unit=self.unit)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping (``value``, ``source_kind``, ``unit``)."""
        out: dict[str, Any] = {"value": self.value, "source_kind": self.source_kind.value}
        if self.unit is not None:
            out["unit"] = self.unit
        return out
