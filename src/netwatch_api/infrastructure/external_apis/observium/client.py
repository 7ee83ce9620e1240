# src/netwatch_api/infrastructure/external_apis/observium/client.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Observium Transport Client (API v0): resilient, instrumented, async.

This transport is framework-agnostic and provides:

* Async HTTP (httpx) with HTTP basic auth and a per-request timeout.
* Jittered exponential retries (bounded) for transport errors, 429 and 5xx.
* Circuit breaker (CLOSED -> OPEN -> HALF_OPEN) shared by every resource.
* Deterministic mapping to domain errors:
    401/403 -> UpstreamAuthError, 429/5xx/network -> UpstreamUnavailable,
    other 4xx, non-JSON, non-object or ``status: failed`` bodies ->
    UpstreamValidationError.
* Request-id propagation and Prometheus metrics.

Return shape: the parsed JSON object for ``GET {api_url}/{resource}``.
Normalizing collections into records is the gateway's job.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

import httpx

from netwatch_api.domain.exceptions.monitoring import (
    UpstreamAuthError,
    UpstreamUnavailable,
    UpstreamValidationError,
)
from netwatch_api.infrastructure.external_apis.observium.settings import ObserviumSettings
from netwatch_api.infrastructure.logging.logger import get_json_logger, get_request_id
from netwatch_api.infrastructure.observability.metrics import observe_upstream_request
from netwatch_api.infrastructure.resilience.circuit_breaker import CircuitBreaker, CircuitOpenError
from netwatch_api.infrastructure.resilience.retry import RetryPolicy, retry_async

logger = get_json_logger(__name__)

_DEFAULT_BASE_BACKOFF: Final[float] = 0.25
_DEFAULT_MAX_BACKOFF: Final[float] = 2.5

_DEFAULT_HEADERS: Final[dict[str, str]] = {
    "Accept": "application/json",
    "User-Agent": "netwatch-observium-client/1.0",
}


def _is_retryable(exc: Exception) -> bool:
    """Retry only transient upstream unavailability (never auth/shape errors)."""
    if isinstance(exc, CircuitOpenError):
        return False
    return isinstance(exc, UpstreamUnavailable | httpx.TransportError)


class ObserviumClient:
    """Resilient, instrumented transport client for the Observium REST API."""

    def __init__(
        self,
        settings: ObserviumSettings,
        *,
        http: httpx.AsyncClient | None = None,
        retry_policy: RetryPolicy | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        """Initialize the transport client.

        Args:
            settings: Endpoint, credentials, timeout and retry budget.
            http: Optional shared ``httpx.AsyncClient``; one is created and
                owned by this instance when omitted.
            retry_policy: Retry configuration; defaults to jittered
                exponential backoff with ``settings.max_retries`` retries.
            breaker: Circuit breaker; created when omitted.
        """
        self._settings = settings
        self._api_url = settings.api_url.rstrip("/")
        self._timeout = float(settings.timeout_s)
        self._owns_client = http is None
        self._client = http or httpx.AsyncClient(
            timeout=self._timeout, headers=_DEFAULT_HEADERS.copy()
        )
        if http is not None:
            for key, value in _DEFAULT_HEADERS.items():
                self._client.headers.setdefault(key, value)

        self._retry = retry_policy or RetryPolicy(
            total=settings.max_retries,
            base=_DEFAULT_BASE_BACKOFF,
            cap=_DEFAULT_MAX_BACKOFF,
            jitter=True,
        )
        self._breaker = breaker or CircuitBreaker(
            failure_threshold=5,
            recovery_timeout_s=30.0,
            half_open_max_calls=1,
            ignored=(UpstreamAuthError, UpstreamValidationError),
        )

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def get(
        self, resource: str, params: Mapping[str, Any] | None = None
    ) -> Mapping[str, Any]:
        """GET ``{api_url}/{resource}`` and return the parsed JSON object.

        Args:
            resource: Collection name (``devices``, ``ports``, ``bills``...).
            params: Query parameters; ``None`` values are dropped.

        Raises:
            UpstreamUnavailable: Network failure, timeout, 429/5xx or breaker open
                (after retries).
            UpstreamAuthError: 401/403.
            UpstreamValidationError: Unexpected status or payload shape.
        """
        url = f"{self._api_url}/{resource.strip('/')}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        headers: dict[str, str] = {}
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        async def _call() -> Mapping[str, Any]:
            async with self._breaker.guard(resource):
                try:
                    response = await self._client.get(
                        url,
                        params=query,
                        headers=headers,
                        auth=self._settings.auth or httpx.USE_CLIENT_DEFAULT,
                        timeout=self._timeout,
                    )
                except httpx.TimeoutException as exc:
                    raise UpstreamUnavailable("timeout", details={"resource": resource}) from exc
                except httpx.RequestError as exc:
                    raise UpstreamUnavailable(
                        "network_error", details={"resource": resource, "error": str(exc)}
                    ) from exc
                self._raise_for_status(resource, response.status_code)
                return self._parse(resource, response)

        with observe_upstream_request(resource=resource) as obs:
            try:
                return await retry_async(_call, policy=self._retry, retry_on=_is_retryable)
            except (UpstreamUnavailable, UpstreamAuthError, UpstreamValidationError) as exc:
                obs.mark_error(type(exc).__name__)
                logger.warning(
                    "observium.request_failed",
                    extra={
                        "resource": resource,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                        "details": exc.details,
                    },
                )
                raise

    async def ping(self) -> bool:
        """Readiness probe: a one-row device query succeeds."""
        await self.get("devices", {"pagesize": 1})
        return True

    # --------------------------- Internal helpers ------------------------- #

    @staticmethod
    def _raise_for_status(resource: str, status: int) -> None:
        """Raise domain exceptions for non-2xx statuses."""
        details = {"resource": resource, "status": status}
        if status in (401, 403):
            raise UpstreamAuthError("credentials_rejected", details=details)
        if status == 429 or status >= 500:
            raise UpstreamUnavailable("upstream_status", details=details)
        if status >= 400:
            raise UpstreamValidationError("unexpected_status", details=details)

    @staticmethod
    def _parse(resource: str, response: httpx.Response) -> Mapping[str, Any]:
        """Decode and shape-check an Observium JSON body."""
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamValidationError(
                "non_json", details={"resource": resource, "error": str(exc)}
            ) from exc
        if not isinstance(payload, Mapping):
            raise UpstreamValidationError(
                "bad_shape", details={"resource": resource, "expected": "object"}
            )
        if str(payload.get("status", "ok")).lower() == "failed":
            raise UpstreamValidationError(
                "upstream_failed",
                details={"resource": resource, "message": str(payload.get("message") or "")},
            )
        return payload
