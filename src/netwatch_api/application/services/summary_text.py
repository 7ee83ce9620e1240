# src/netwatch_api/application/services/summary_text.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Shared plumbing for the LLM summary use cases.

Static messages shown instead of a generated summary, the data-source note
appended to generated text, and the uncached result wrapper used when
generation is skipped or fails (those results must never be cached so the
next request retries).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Final

from netwatch_api.application.services.resolution import Resolution
from netwatch_api.domain.enums.monitoring import ResolutionSource, SourceKind

NOT_CONFIGURED_MESSAGE: Final[str] = (
    "OpenAI no está configurado. Configure OPENAI_API_KEY para habilitar los resúmenes ejecutivos."
)
FAILED_MESSAGE: Final[str] = "No se pudo generar el resumen ejecutivo en este momento."

_NOTES: Final[dict[SourceKind, str]] = {
    SourceKind.LIVE: "Este resumen fue generado con datos actuales del sistema de monitoreo.",
    SourceKind.PARTIAL: "Este resumen fue generado con datos parciales del sistema de monitoreo.",
    SourceKind.DASHBOARD: "Este resumen fue generado usando datos actuales del dashboard técnico.",
    SourceKind.FALLBACK: (
        "Este resumen fue generado con datos de respaldo debido a problemas de conectividad "
        "con el sistema de monitoreo."
    ),
    SourceKind.DEMO: (
        "Este resumen fue generado con datos de prueba debido a problemas de conectividad "
        "con el sistema de monitoreo."
    ),
}
_CACHED_NOTE: Final[str] = (
    "Este resumen fue generado usando datos en caché del sistema de monitoreo."
)


def data_source_note(data: Resolution) -> str:
    """Italic footnote describing where the summarized data came from."""
    if data.cached and data.origin in (SourceKind.LIVE, SourceKind.PARTIAL):
        note = _CACHED_NOTE
    else:
        note = _NOTES[data.origin]
    return f"\n\n*Nota: {note}*"


def with_note(summary: str, data: Resolution) -> str:
    return summary.rstrip() + data_source_note(data)


def uncached_result(value: Any, *, data: Resolution, now: datetime) -> Resolution:
    """Wrap a static summary payload without touching the cache."""
    return Resolution(
        value=value,
        source=ResolutionSource(data.origin.value),
        origin=data.origin,
        timestamp=now,
        cache_ttl_remaining_s=0.0,
    )
