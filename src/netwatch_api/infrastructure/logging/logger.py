# src/netwatch_api/infrastructure/logging/logger.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Structured JSON logging utilities.

This module exposes an idempotent root configurator and a per-module logger
factory producing one JSON object per line, suitable for log pipelines.

Features:
    * Stable keys: ``ts``, ``level``, ``logger``, ``message``.
    * Automatic enrichment with ``request_id`` and ``trace_id`` via contextvars.
    * Structured fields passed through ``extra=`` are flattened into the payload,
      either as top-level attributes or nested under an ``extra`` mapping.

Typical usage:
    configure_root_logging()
    log = get_json_logger(__name__)
    log.warning("resolution.tier_failed", extra={"key": key, "tier": "primary"})
"""

from __future__ import annotations

import json
import logging
import os
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any, Final

__all__ = [
    "configure_root_logging",
    "get_json_logger",
    "set_request_context",
    "get_request_id",
    "get_trace_id",
]

_REQUEST_ID_CTX: ContextVar[str | None] = ContextVar("netwatch_request_id", default=None)
_TRACE_ID_CTX: ContextVar[str | None] = ContextVar("netwatch_trace_id", default=None)

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED: Final[frozenset[str]] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
    | {"message", "asctime", "taskName", "extra"}
)


def set_request_context(*, request_id: str | None = None, trace_id: str | None = None) -> None:
    """Set per-request correlation identifiers on the current context.

    Passing only one argument updates that value and leaves the other as is.

    Args:
        request_id: Correlation identifier from ``X-Request-ID``, if any.
        trace_id: Distributed tracing identifier, if any.
    """
    if request_id is not None:
        _REQUEST_ID_CTX.set(request_id)
    if trace_id is not None:
        _TRACE_ID_CTX.set(trace_id)


def get_request_id() -> str | None:
    """Return the current request id from contextvars, if any."""
    return _REQUEST_ID_CTX.get(None)


def get_trace_id() -> str | None:
    """Return the current trace id from contextvars, if any."""
    return _TRACE_ID_CTX.get(None)


def _jsonable(value: Any) -> Any:
    """Coerce values json.dumps cannot encode into strings."""
    if isinstance(value, str | int | float | bool) or value is None:
        return value
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set | frozenset):
        return [_jsonable(v) for v in value]
    return str(value)


class _JsonFormatter(logging.Formatter):
    """JSON log formatter emitting stable keys and structured extras."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a single JSON line.

        Args:
            record: Logging record.

        Returns:
            JSON-encoded log line.
        """
        payload: dict[str, Any] = {
            "ts": datetime.now(tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = getattr(record, "request_id", None) or _REQUEST_ID_CTX.get(None)
        if rid:
            payload["request_id"] = rid
        tid = getattr(record, "trace_id", None) or _TRACE_ID_CTX.get(None)
        if tid:
            payload["trace_id"] = tid

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = str(exc_value)

        for key, value in vars(record).items():
            if key not in _RESERVED and key not in payload:
                payload[key] = _jsonable(value)

        nested = getattr(record, "extra", None)
        if isinstance(nested, dict):
            payload.update(_jsonable(nested))

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def configure_root_logging(level: str | int | None = None) -> None:
    """Initialize the root logger with a JSON stream handler (idempotent).

    Args:
        level: Logging level or level name. If ``None``, use env ``LOG_LEVEL`` or ``INFO``.
    """
    root = logging.getLogger()

    env_level = os.getenv("LOG_LEVEL")
    resolved: int | str = (
        level if level is not None else (env_level.upper() if env_level else "INFO")
    )
    root.setLevel(resolved.upper() if isinstance(resolved, str) else resolved)

    if any(isinstance(h.formatter, _JsonFormatter) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """Return a module logger that defers formatting to the JSON root handler.

    Call :func:`configure_root_logging` once at startup; this factory does not.

    Args:
        name: Logger name, typically ``__name__`` of the caller.

    Returns:
        Logger instance.
    """
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger
