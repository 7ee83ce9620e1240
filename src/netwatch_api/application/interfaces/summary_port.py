# src/netwatch_api/application/interfaces/summary_port.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Summary generator port.

The LLM collaborator: accepts pre-aggregated dashboard figures and returns
free text. Implementations raise ``SummaryGenerationError`` on any failure;
callers decide what to show instead.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Protocol


class SummaryKind(str, Enum):
    """Which dashboard the summary describes."""

    MONITORING = "monitoring"
    DASHBOARD = "dashboard"


class SummaryGeneratorPort(Protocol):
    """Narrative summary generator."""

    @property
    def configured(self) -> bool:
        """False when the generator has no credentials and must not be called."""
        ...

    async def generate(self, kind: SummaryKind, payload: Mapping[str, Any]) -> str:
        """Return a summary of ``payload``.

        Raises:
            SummaryGenerationError: Provider failure, timeout or empty completion.
        """
        ...
