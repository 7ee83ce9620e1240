# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Retry utilities (async) with jittered exponential backoff."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry attempts."""

    total: int  # retries after the first attempt
    base: float  # base backoff seconds
    cap: float  # max backoff seconds
    jitter: bool = True  # full jitter

    def backoff(self, attempt: int) -> float:
        """Sleep before retry number ``attempt + 1``."""
        delay = min(self.cap, self.base * (2**attempt))
        return random.uniform(0, delay) if self.jitter else delay  # noqa: S311


async def retry_async[T](
    fn: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    retry_on: Callable[[Exception], bool],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Call ``fn`` until it succeeds, a non-retryable error occurs, or the budget is spent.

    Args:
        fn: Zero-arg async function to execute.
        policy: Retry count and backoff.
        retry_on: Predicate selecting exceptions worth retrying.
        sleep: Awaitable sleep (injectable for tests).

    Returns:
        The first successful result of ``fn``.

    Raises:
        Exception: The last error once retries are exhausted, or the first
            error ``retry_on`` rejects.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as exc:
            if attempt >= policy.total or not retry_on(exc):
                raise
        await sleep(policy.backoff(attempt))
        attempt += 1
