# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Minimal async circuit breaker (in-memory).

State machine:
    - CLOSED    -> count consecutive failures; at the threshold go OPEN.
    - OPEN      -> fail fast until the recovery timeout elapses; then HALF_OPEN.
    - HALF_OPEN -> admit a limited number of trial calls; success closes the
      breaker, failure re-opens it.

This is process-local. The Observium transport keeps one breaker per
client, so a dead upstream costs at most one timeout per recovery window
instead of one per dashboard request.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum

from netwatch_api.domain.exceptions.monitoring import UpstreamUnavailable


class BreakerState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitOpenError(UpstreamUnavailable):
    """Raised instead of calling the upstream while the breaker is open."""


@dataclass
class CircuitBreaker:
    """Consecutive-failure circuit breaker for async calls.

    Args:
        failure_threshold: Consecutive failures that open the breaker.
        recovery_timeout_s: Seconds to stay open before a trial call.
        half_open_max_calls: Concurrent trial calls admitted while half-open.
        ignored: Exception types that pass through without counting as failures.
        clock: Monotonic seconds (injectable for tests).
    """

    failure_threshold: int = 5
    recovery_timeout_s: float = 30.0
    half_open_max_calls: int = 1
    ignored: tuple[type[Exception], ...] = ()
    clock: Callable[[], float] = time.monotonic

    _state: BreakerState = BreakerState.CLOSED
    _failures: int = 0
    _opened_at: float = 0.0
    _half_open_calls: int = 0
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def state(self) -> BreakerState:
        return self._state

    @asynccontextmanager
    async def guard(self, key: str) -> AsyncIterator[None]:
        """Run the wrapped block under the breaker.

        Args:
            key: Label for the protected operation (reported in errors).

        Raises:
            CircuitOpenError: The breaker is open, or half-open with no trial slot.
        """
        async with self._lock:
            if self._state is BreakerState.OPEN:
                if self.clock() - self._opened_at >= self.recovery_timeout_s:
                    self._state = BreakerState.HALF_OPEN
                    self._half_open_calls = 0
                else:
                    raise CircuitOpenError("circuit_open", details={"operation": key})
            if self._state is BreakerState.HALF_OPEN:
                if self._half_open_calls >= self.half_open_max_calls:
                    raise CircuitOpenError("circuit_half_open_limit", details={"operation": key})
                self._half_open_calls += 1

        try:
            yield
        except self.ignored:
            async with self._lock:
                if self._state is BreakerState.HALF_OPEN:
                    self._half_open_calls = max(0, self._half_open_calls - 1)
            raise
        except Exception:
            async with self._lock:
                self._record_failure()
            raise
        else:
            async with self._lock:
                self._state = BreakerState.CLOSED
                self._failures = 0

    def _record_failure(self) -> None:
        if self._state is BreakerState.HALF_OPEN:
            self._trip()
            return
        self._failures += 1
        if self._failures >= self.failure_threshold:
            self._trip()

    def _trip(self) -> None:
        self._state = BreakerState.OPEN
        self._opened_at = self.clock()
        self._half_open_calls = 0
