# src/netwatch_api/infrastructure/persistence/trend_history_store.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""In-process historical trend store.

Summary:
    Thread-safe, bounded per-series history of ``(period_start, value)``
    samples. Samples are kept sorted by date; recording an existing date
    replaces its value; beyond ``max_periods`` the oldest samples are evicted.

Export format:
    ``{"version": 1, "series": {"<id>": [{"period_start": "YYYY-MM-DD", "value": 42.0}, ...]}}``

    ``import_`` validates the whole document before touching the store, so a
    bad document leaves existing history intact.
"""

from __future__ import annotations

import bisect
import math
import threading
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any, Final

from netwatch_api.domain.exceptions.monitoring import InvalidTrendData
from netwatch_api.domain.services.trend_analysis import TrendSample
from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

EXPORT_VERSION: Final[int] = 1
DEFAULT_MAX_PERIODS: Final[int] = 12


class TrendHistoryStore:
    """Bounded, date-ordered sample history per series id.

    Args:
        max_periods: Default bound per series; ``record`` may override it
            per call (the daily plaza series keeps more samples than links).
            The override sticks to the series and also bounds later imports.
    """

    def __init__(self, max_periods: int = DEFAULT_MAX_PERIODS) -> None:
        if max_periods < 1:
            raise ValueError("max_periods must be >= 1")
        self._max_periods = max_periods
        self._series: dict[str, list[TrendSample]] = {}
        self._bounds: dict[str, int] = {}
        self._lock = threading.Lock()

    @property
    def max_periods(self) -> int:
        return self._max_periods

    def record(
        self, series_id: str, period_start: date, value: float, *, max_periods: int | None = None
    ) -> None:
        """Insert or replace the sample for ``period_start``.

        Raises:
            InvalidTrendData: Blank series id or non-finite value.
        """
        sample = _validated_sample(series_id, period_start, value)
        with self._lock:
            bound = max_periods or self._bounds.get(series_id, self._max_periods)
            if max_periods:
                self._bounds[series_id] = max_periods
            samples = self._series.setdefault(series_id, [])
            _insert(samples, sample)
            if len(samples) > bound:
                del samples[: len(samples) - bound]

    def history(self, series_id: str) -> list[TrendSample]:
        """Samples for ``series_id``, oldest first (empty when unknown)."""
        with self._lock:
            return list(self._series.get(series_id, ()))

    def series_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._series)

    def clear(self, series_id: str | None = None) -> None:
        """Drop one series, or everything when ``series_id`` is None."""
        with self._lock:
            if series_id is None:
                self._series.clear()
                self._bounds.clear()
            else:
                self._series.pop(series_id, None)
                self._bounds.pop(series_id, None)

    def export(self) -> dict[str, Any]:
        """Return a JSON-ready snapshot of every series."""
        with self._lock:
            series = {
                sid: [
                    {"period_start": s.period_start.isoformat(), "value": s.value}
                    for s in samples
                ]
                for sid, samples in sorted(self._series.items())
            }
        return {"version": EXPORT_VERSION, "series": series}

    def import_(self, data: Mapping[str, Any]) -> int:
        """Merge an exported document into the store.

        Returns:
            Number of samples imported.

        Raises:
            InvalidTrendData: The document is malformed; nothing is imported.
        """
        parsed = _parse_document(data)
        count = 0
        with self._lock:
            for sid, samples in parsed.items():
                target = self._series.setdefault(sid, [])
                for sample in samples:
                    _insert(target, sample)
                    count += 1
                bound = max(self._bounds.get(sid, self._max_periods), len(samples))
                if len(target) > bound:
                    del target[: len(target) - bound]
        logger.info("trend_history.imported", extra={"series": len(parsed), "samples": count})
        return count

    def stats(self) -> dict[str, Any]:
        """Series count, total samples and the oldest/newest period starts."""
        with self._lock:
            starts = [s.period_start for samples in self._series.values() for s in samples]
            return {
                "series_count": len(self._series),
                "total_samples": len(starts),
                "oldest_period": min(starts).isoformat() if starts else None,
                "newest_period": max(starts).isoformat() if starts else None,
            }


def _insert(samples: list[TrendSample], sample: TrendSample) -> None:
    starts = [s.period_start for s in samples]
    idx = bisect.bisect_left(starts, sample.period_start)
    if idx < len(samples) and samples[idx].period_start == sample.period_start:
        samples[idx] = sample
    else:
        samples.insert(idx, sample)


def _validated_sample(series_id: Any, period_start: Any, value: Any) -> TrendSample:
    if not isinstance(series_id, str) or not series_id.strip():
        raise InvalidTrendData("series id must be a non-empty string")
    if not isinstance(period_start, date):
        raise InvalidTrendData("period_start must be a date", details={"series_id": series_id})
    if isinstance(value, bool) or not isinstance(value, int | float) or not math.isfinite(value):
        raise InvalidTrendData(
            "value must be a finite number", details={"series_id": series_id, "value": repr(value)}
        )
    return TrendSample(period_start=period_start, value=float(value))


def _parse_document(data: Mapping[str, Any]) -> dict[str, list[TrendSample]]:
    if not isinstance(data, Mapping):
        raise InvalidTrendData("document must be an object")
    version = data.get("version", EXPORT_VERSION)
    if version != EXPORT_VERSION:
        raise InvalidTrendData("unsupported version", details={"version": version})
    series = data.get("series")
    if not isinstance(series, Mapping):
        raise InvalidTrendData("'series' must be an object")

    parsed: dict[str, list[TrendSample]] = {}
    for sid, rows in series.items():
        if not isinstance(rows, Sequence) or isinstance(rows, str | bytes):
            raise InvalidTrendData("series samples must be a list", details={"series_id": sid})
        samples: list[TrendSample] = []
        for row in rows:
            if not isinstance(row, Mapping):
                raise InvalidTrendData("sample must be an object", details={"series_id": sid})
            try:
                start = date.fromisoformat(str(row.get("period_start")))
            except ValueError as exc:
                raise InvalidTrendData(
                    "period_start must be an ISO date", details={"series_id": sid}
                ) from exc
            samples.append(_validated_sample(sid, start, row.get("value")))
        parsed[sid] = samples
    return parsed
