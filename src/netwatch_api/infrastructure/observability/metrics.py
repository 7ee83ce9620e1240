# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Prometheus metrics utilities (registry-aware, hot-reload safe).

Every collector is obtained through an accessor that looks it up on the
*current* ``prometheus_client.REGISTRY`` first and only registers it when
missing. Tests that swap the default registry, module re-imports and
concurrent first use therefore never hit duplicate-registration errors.

Collectors:
    * ``netwatch_upstream_request_latency_seconds`` (resource, outcome)
    * ``netwatch_upstream_errors_total`` (resource, reason)
    * ``netwatch_cache_operation_duration_seconds`` (backend, operation, hit)
    * ``netwatch_cache_operations_total`` (backend, operation, hit)
    * ``netwatch_resolutions_total`` (tier)
    * ``netwatch_summary_generations_total`` (kind, outcome)
    * ``netwatch_readyz_probe_latency_seconds`` (probe)
    * ``http_server_request_duration_seconds`` (method, handler, status)

Example:
    with observe_upstream_request(resource="devices") as obs:
        ...
        obs.mark_error("timeout")
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Generator
from contextlib import contextmanager, suppress
from dataclasses import dataclass, field
from time import perf_counter
from typing import Final

import prometheus_client as prom
from prometheus_client import Counter, Histogram

_log = logging.getLogger(__name__)

_BUCKETS: Final[tuple[float, ...]] = (
    0.005,
    0.010,
    0.025,
    0.050,
    0.100,
    0.250,
    0.500,
    1.000,
    2.500,
    5.000,
    10.000,
    30.000,
)

_lock = threading.RLock()


def _lookup_existing[C: (Histogram, Counter)](name: str, kind: type[C]) -> C | None:
    """Return a collector already registered under ``name`` on the active registry."""
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            col = mapping.get(name)
            if isinstance(col, kind):
                return col
    return None


def _get_or_create_hist(
    name: str,
    help_text: str,
    *,
    buckets: tuple[float, ...] = _BUCKETS,
    labelnames: tuple[str, ...] = (),
) -> Histogram:
    """Get or create a ``Histogram`` bound to ``prom.REGISTRY``.

    Args:
        name: Metric name (snake_case).
        help_text: Human-readable description.
        buckets: Histogram buckets in seconds.
        labelnames: Label names.

    Returns:
        Histogram: Existing or newly registered collector.
    """
    with _lock:
        existing = _lookup_existing(name, Histogram)
        if existing is not None:
            return existing
        try:
            return Histogram(name, help_text, labelnames, buckets=buckets, registry=prom.REGISTRY)
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup_existing(name, Histogram)
                if again is not None:
                    return again
            _log.exception("Failed to register Prometheus histogram %s", name)
            raise


def _get_or_create_counter(
    name: str,
    help_text: str,
    *,
    labelnames: tuple[str, ...] = (),
) -> Counter:
    """Get or create a ``Counter`` bound to ``prom.REGISTRY``.

    Counter names are given without the ``_total`` suffix prometheus_client
    appends; lookups use the registered base name.
    """
    with _lock:
        existing = _lookup_existing(name, Counter)
        if existing is not None:
            return existing
        try:
            return Counter(name, help_text, labelnames, registry=prom.REGISTRY)
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup_existing(name, Counter)
                if again is not None:
                    return again
            _log.exception("Failed to register Prometheus counter %s", name)
            raise


# ---------------------------------------------------------------------------
# Upstream
# ---------------------------------------------------------------------------
def get_upstream_request_latency_seconds() -> Histogram:
    """Latency of monitoring upstream calls, by resource and outcome."""
    return _get_or_create_hist(
        "netwatch_upstream_request_latency_seconds",
        "Latency of monitoring upstream requests (seconds).",
        labelnames=("resource", "outcome"),
    )


def get_upstream_errors_total() -> Counter:
    """Errors from monitoring upstream calls, by resource and reason."""
    return _get_or_create_counter(
        "netwatch_upstream_errors",
        "Errors returned by the monitoring upstream.",
        labelnames=("resource", "reason"),
    )


@dataclass
class UpstreamObservation:
    """Mutable state captured while observing one upstream call."""

    resource: str
    start: float = field(default_factory=perf_counter)
    outcome: str = "success"
    error_reason: str | None = None

    def mark_error(self, reason: str) -> None:
        """Flag the call as failed with a short machine-readable reason."""
        self.outcome = "error"
        self.error_reason = reason


@contextmanager
def observe_upstream_request(*, resource: str) -> Generator[UpstreamObservation, None, None]:
    """Record latency (and errors, if marked or raised) for one upstream call.

    Args:
        resource: Upstream collection name (``devices``, ``ports``, ...).

    Yields:
        UpstreamObservation: Call :meth:`UpstreamObservation.mark_error` to
        record a failure without raising.
    """
    obs = UpstreamObservation(resource=resource)
    try:
        yield obs
    except Exception as exc:
        if obs.error_reason is None:
            obs.mark_error(type(exc).__name__)
        raise
    finally:
        elapsed = perf_counter() - obs.start
        with suppress(Exception):
            get_upstream_request_latency_seconds().labels(
                resource=obs.resource, outcome=obs.outcome
            ).observe(elapsed)
            if obs.error_reason is not None:
                get_upstream_errors_total().labels(
                    resource=obs.resource, reason=obs.error_reason
                ).inc()


# ---------------------------------------------------------------------------
# Cache / resolution / summary
# ---------------------------------------------------------------------------
def get_cache_operation_duration_seconds() -> Histogram:
    """Latency of cache operations, by backend, operation and hit."""
    return _get_or_create_hist(
        "netwatch_cache_operation_duration_seconds",
        "Cache operation latency (seconds).",
        labelnames=("backend", "operation", "hit"),
    )


def get_cache_operations_total() -> Counter:
    """Count of cache operations, by backend, operation and hit."""
    return _get_or_create_counter(
        "netwatch_cache_operations",
        "Cache operations.",
        labelnames=("backend", "operation", "hit"),
    )


def get_resolutions_total() -> Counter:
    """Resolutions by the tier that answered (cache, live, partial, fallback, demo)."""
    return _get_or_create_counter(
        "netwatch_resolutions",
        "Resolution policy outcomes by tier.",
        labelnames=("tier",),
    )


def get_summary_generations_total() -> Counter:
    """LLM summary generations, by kind and outcome."""
    return _get_or_create_counter(
        "netwatch_summary_generations",
        "Executive summary generations.",
        labelnames=("kind", "outcome"),
    )


# ---------------------------------------------------------------------------
# Health / HTTP
# ---------------------------------------------------------------------------
def get_readyz_probe_latency_seconds() -> Histogram:
    """Readiness probe latency, by probe name."""
    return _get_or_create_hist(
        "netwatch_readyz_probe_latency_seconds",
        "Latency of readiness probes (seconds).",
        labelnames=("probe",),
    )


def get_http_server_request_duration_seconds() -> Histogram:
    """Server-side request latency, by method, templated route and status."""
    return _get_or_create_hist(
        "http_server_request_duration_seconds",
        "Request duration (seconds), server-side.",
        labelnames=("method", "handler", "status"),
    )
