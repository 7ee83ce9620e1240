# tests/unit/adapters/test_presenter.py
from __future__ import annotations

from datetime import UTC, datetime

from netwatch_api.adapters.presenters.base_presenter import BasePresenter
from netwatch_api.application.services.resolution import Resolution
from netwatch_api.domain.enums.monitoring import ResolutionSource, SourceKind


def _resolution(source: ResolutionSource, ttl: float = 12.34567) -> Resolution:
    return Resolution(
        value={"plazas": ["Saltillo"]},
        source=source,
        origin=SourceKind.LIVE,
        timestamp=datetime(2025, 6, 10, 12, tzinfo=UTC),
        cache_ttl_remaining_s=ttl,
    )


def test_resolution_envelope_carries_provenance() -> None:
    result = BasePresenter().present_resolution(
        _resolution(ResolutionSource.CACHE), trace_id="t-1", requested_scope="all"
    )

    meta = result.body.meta
    assert meta.source is ResolutionSource.CACHE
    assert meta.cached is True
    assert meta.cache_ttl_remaining_s == 12.346
    assert meta.requested_scope == "all"
    assert result.headers["X-Data-Source"] == "live"
    assert result.headers["X-Request-ID"] == "t-1"


def test_etag_depends_on_data_only() -> None:
    presenter = BasePresenter()
    live = presenter.present_resolution(_resolution(ResolutionSource.LIVE, ttl=300))
    hit = presenter.present_resolution(_resolution(ResolutionSource.CACHE, ttl=5))
    assert live.headers["ETag"] == hit.headers["ETag"]
    assert "X-Request-ID" not in live.headers


def test_negative_ttl_is_clamped() -> None:
    result = BasePresenter().present_resolution(_resolution(ResolutionSource.LIVE, ttl=-1))
    assert result.body.meta.cache_ttl_remaining_s == 0.0


def test_success_envelope_has_quoted_etag() -> None:
    result = BasePresenter().present_success(data={"invalidated": ["plazas"]})
    assert result.body.data == {"invalidated": ["plazas"]}
    etag = result.headers["ETag"]
    assert etag.startswith('"') and etag.endswith('"') and len(etag) == 66
