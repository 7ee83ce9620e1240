# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""
Monitoring Domain Exceptions

Purpose:
    Error conditions raised while obtaining or deriving monitoring data.
    Upstream failures are recovered inside the resolution policy; only
    ConfigurationError (and request-level validation problems) are meant to
    reach callers.

Layer: domain/exceptions
"""
from __future__ import annotations

from .base import DomainError


class UpstreamUnavailable(DomainError):
    """Monitoring upstream failed: network error, timeout, 429/5xx, or breaker open."""

    code = "UPSTREAM_UNAVAILABLE"


class UpstreamAuthError(DomainError):
    """Monitoring upstream rejected the configured credentials (401/403)."""

    code = "UPSTREAM_AUTH_ERROR"


class UpstreamValidationError(DomainError):
    """Monitoring upstream returned a payload that is not the expected shape."""

    code = "UPSTREAM_SCHEMA_ERROR"


class EmptyResult(DomainError):
    """Upstream succeeded but produced nothing usable for the request."""

    code = "EMPTY_RESULT"


class ConfigurationError(DomainError):
    """A request could not be resolved because no fallback was configured."""

    code = "CONFIGURATION_ERROR"


class SummaryGenerationError(DomainError):
    """The LLM collaborator failed to produce a summary."""

    code = "SUMMARY_GENERATION_FAILED"


class InvalidTrendData(DomainError):
    """Imported or recorded trend history does not satisfy its invariants."""

    code = "INVALID_TREND_DATA"
