# tests/unit/config/test_settings.py
from __future__ import annotations

import pytest
from pydantic import ValidationError

from netwatch_api.application.services.dashboard_config import DashboardConfig
from netwatch_api.config.settings import Environment, Settings, get_settings
from netwatch_api.domain.enums.monitoring import SourceKind


def test_defaults_keep_fallback_below_live_ttls() -> None:
    s = Settings()
    assert s.cache_backend == "memory"
    assert s.cache_ttl_fallback_s <= min(
        s.cache_ttl_monitoring_s, s.cache_ttl_plaza_s, s.cache_ttl_executive_s
    )
    assert s.observium_api_url == "http://localhost/api/v0"


def test_api_url_strips_trailing_slash() -> None:
    s = Settings(OBSERVIUM_BASE_URL="https://obs.example.net/")
    assert s.observium_api_url == "https://obs.example.net/api/v0"


def test_fallback_ttl_longer_than_live_ttl_is_rejected() -> None:
    with pytest.raises(ValidationError) as info:
        Settings(CACHE_TTL_FALLBACK_S=200, CACHE_TTL_PLAZA_S=120)
    assert "CACHE_TTL_PLAZA_S" in str(info.value)


def test_cors_origins_parsed() -> None:
    s = Settings(ALLOWED_ORIGINS="https://a.example, https://b.example ,")
    assert s.cors_allow_origins == ["https://a.example", "https://b.example"]


def test_wildcard_cors_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(ENVIRONMENT=Environment.PRODUCTION, ALLOWED_ORIGINS="*")


def test_env_vars_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CACHE_BACKEND", "redis")
    monkeypatch.setenv("DEMO_DATA_ENABLED", "false")
    s = Settings()
    assert s.cache_backend == "redis"
    assert s.demo_data_enabled is False


def test_get_settings_is_cached() -> None:
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()


def test_summary_ttl_is_capped_for_synthetic_origins() -> None:
    config = DashboardConfig(ttl_summary_s=86400.0, ttl_fallback_s=60.0)
    assert config.summary_ttl(SourceKind.LIVE) == 86400.0
    assert config.summary_ttl(SourceKind.DASHBOARD) == 86400.0
    assert config.summary_ttl(SourceKind.DEMO) == 60.0
    assert config.summary_ttl(SourceKind.FALLBACK) == 60.0
