# src/netwatch_api/infrastructure/external_apis/llm/summary_client.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""OpenAI summary generator (chat completions).

Builds a short prompt from pre-aggregated dashboard figures and asks the
configured chat model for an executive summary. Every failure (SDK error,
timeout, empty completion) is raised as ``SummaryGenerationError`` after
being logged and counted; the application layer turns it into a static
message.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import Any, Final

from openai import AsyncOpenAI

from netwatch_api.application.interfaces.summary_port import SummaryGeneratorPort, SummaryKind
from netwatch_api.config.settings import Settings
from netwatch_api.domain.exceptions.monitoring import SummaryGenerationError
from netwatch_api.infrastructure.logging.logger import get_json_logger
from netwatch_api.infrastructure.observability.metrics import get_summary_generations_total

logger = get_json_logger(__name__)

_SYSTEM_PROMPTS: Final[dict[SummaryKind, str]] = {
    SummaryKind.MONITORING: (
        "Eres un analista de redes experto que proporciona resúmenes ejecutivos "
        "concisos y accionables."
    ),
    SummaryKind.DASHBOARD: (
        "Eres un consultor de infraestructura de red que resume el estado del negocio "
        "para la dirección, con foco en riesgos y decisiones."
    ),
}

_INSTRUCTIONS: Final[dict[SummaryKind, str]] = {
    SummaryKind.MONITORING: (
        "Genera un resumen ejecutivo (máximo 3 párrafos) del estado actual de la red: "
        "evaluación general, áreas que requieren atención y recomendaciones breves."
    ),
    SummaryKind.DASHBOARD: (
        "Genera un resumen ejecutivo (máximo 4 párrafos) del dashboard: estado de la "
        "infraestructura, riesgos prioritarios, impacto en el negocio y próximos pasos."
    ),
}


def build_messages(kind: SummaryKind, payload: Mapping[str, Any]) -> list[dict[str, str]]:
    """Return the chat messages for ``kind`` with ``payload`` embedded as JSON."""
    figures = json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str)
    return [
        {"role": "system", "content": _SYSTEM_PROMPTS[kind]},
        {"role": "user", "content": f"{_INSTRUCTIONS[kind]}\n\nDatos:\n{figures}"},
    ]


class OpenAISummaryGenerator(SummaryGeneratorPort):
    """Summary generator backed by ``AsyncOpenAI``.

    Args:
        client: An ``AsyncOpenAI``-compatible client, or None when no API
            key is configured.
        model: Chat model name.
        temperature: Sampling temperature.
        max_tokens: Completion token limit.
        timeout_s: Overall deadline for one generation.
    """

    def __init__(
        self,
        client: Any | None,
        *,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        max_tokens: int = 500,
        timeout_s: float = 30.0,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout_s = timeout_s

    @classmethod
    def from_settings(cls, settings: Settings) -> OpenAISummaryGenerator:
        """Build the generator; no client is created without an API key."""
        client = None
        if settings.openai_api_key is not None:
            client = AsyncOpenAI(
                api_key=settings.openai_api_key.get_secret_value(),
                timeout=settings.openai_timeout_s,
                max_retries=0,
            )
        return cls(
            client,
            model=settings.openai_model,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
            timeout_s=settings.openai_timeout_s,
        )

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def generate(self, kind: SummaryKind, payload: Mapping[str, Any]) -> str:
        if self._client is None:
            raise SummaryGenerationError("not_configured", details={"kind": kind.value})
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model,
                    messages=build_messages(kind, payload),
                    temperature=self._temperature,
                    max_tokens=self._max_tokens,
                ),
                timeout=self._timeout_s,
            )
            text = (response.choices[0].message.content or "").strip() if response.choices else ""
        except Exception as exc:
            self._count(kind, "error")
            logger.warning(
                "summary.generation_failed",
                extra={"kind": kind.value, "error_type": type(exc).__name__, "error": str(exc)},
            )
            raise SummaryGenerationError(
                "provider_error", details={"kind": kind.value, "error_type": type(exc).__name__}
            ) from exc

        if not text:
            self._count(kind, "empty")
            logger.warning(
                "summary.generation_failed", extra={"kind": kind.value, "error": "empty"}
            )
            raise SummaryGenerationError("empty_completion", details={"kind": kind.value})

        self._count(kind, "success")
        return text

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()

    @staticmethod
    def _count(kind: SummaryKind, outcome: str) -> None:
        get_summary_generations_total().labels(kind=kind.value, outcome=outcome).inc()
