# src/netwatch_api/config/settings.py
# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""NetWatch Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated configuration for the NetWatch API: upstream monitoring
    endpoint and credentials, page-size limits, cache TTLs per data kind,
    health thresholds, and the LLM summary collaborator. Only adapters and
    infrastructure read the process environment; other layers receive
    `Settings` (or plain values derived from it) through the composition root.

Design:
    - Pydantic v2 BaseSettings with `extra='forbid'` to catch unknown env.
    - Every TTL lives here; no module hardcodes its own cache lifetime.
    - The fallback TTL must not exceed any live TTL (validated on load).
    - Singleton accessor `get_settings()` with LRU cache; secrets never logged.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from netwatch_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed application configuration for NetWatch."""

    # ---------------------------
    # Core environment
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ENVIRONMENT",
    )
    log_level: str | None = Field(
        default=None,
        description="Override log level (e.g., 'DEBUG', 'INFO').",
        validation_alias="LOG_LEVEL",
    )
    service_name: str = Field(
        default="netwatch-api",
        description="Logical service name for logging.",
        validation_alias="SERVICE_NAME",
    )
    service_version: str | None = Field(
        default=None,
        description="Service version reported by the OpenAPI document.",
        validation_alias="SERVICE_VERSION",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        description="Raw env for allowed CORS origins (comma-separated).",
        validation_alias="ALLOWED_ORIGINS",
    )
    cors_allow_origins: list[str] = Field(
        default_factory=list,
        description="Allowed CORS origins, derived from ALLOWED_ORIGINS.",
    )

    # ---------------------------
    # Observium upstream
    # ---------------------------
    observium_base_url: str = Field(
        default="http://localhost",
        description="Observium base URL; the API lives under /api/v0.",
        validation_alias="OBSERVIUM_BASE_URL",
    )
    observium_username: str | None = Field(
        default=None,
        description="HTTP basic auth user for the Observium API.",
        validation_alias="OBSERVIUM_USERNAME",
    )
    observium_password: SecretStr | None = Field(
        default=None,
        description="HTTP basic auth password for the Observium API.",
        validation_alias="OBSERVIUM_PASSWORD",
    )
    observium_timeout_s: float = Field(
        default=30.0,
        ge=0.1,
        le=120.0,
        description="Per-request timeout in seconds for Observium calls.",
        validation_alias="OBSERVIUM_TIMEOUT_S",
    )
    observium_max_retries: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Retries for retryable Observium failures (429, 5xx, network).",
        validation_alias="OBSERVIUM_MAX_RETRIES",
    )
    observium_devices_page_size: int = Field(
        default=100, ge=1, le=5000, validation_alias="OBSERVIUM_DEVICES_PAGE_SIZE"
    )
    observium_ports_page_size: int = Field(
        default=200, ge=1, le=5000, validation_alias="OBSERVIUM_PORTS_PAGE_SIZE"
    )
    observium_alerts_page_size: int = Field(
        default=100, ge=1, le=5000, validation_alias="OBSERVIUM_ALERTS_PAGE_SIZE"
    )
    observium_bills_page_size: int = Field(
        default=50, ge=1, le=5000, validation_alias="OBSERVIUM_BILLS_PAGE_SIZE"
    )
    observium_health_device_limit: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Devices sampled for processor/mempool/sensor health queries.",
        validation_alias="OBSERVIUM_HEALTH_DEVICE_LIMIT",
    )

    # ---------------------------
    # Cache
    # ---------------------------
    cache_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Cache implementation: in-process TTL store or Redis.",
        validation_alias="CACHE_BACKEND",
    )
    cache_max_entries: int | None = Field(
        default=10_000,
        ge=1,
        description="Upper bound on in-process cache entries (memory backend only).",
        validation_alias="CACHE_MAX_ENTRIES",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (used when CACHE_BACKEND=redis).",
        validation_alias="REDIS_URL",
    )
    cache_ttl_monitoring_s: int = Field(
        default=300, ge=1, validation_alias="CACHE_TTL_MONITORING_S"
    )
    cache_ttl_plaza_s: int = Field(default=120, ge=1, validation_alias="CACHE_TTL_PLAZA_S")
    cache_ttl_trends_s: int = Field(default=3600, ge=1, validation_alias="CACHE_TTL_TRENDS_S")
    cache_ttl_executive_s: int = Field(default=300, ge=1, validation_alias="CACHE_TTL_EXECUTIVE_S")
    cache_ttl_summary_s: int = Field(
        default=86_400,
        ge=1,
        description="Summary lifetime; effectively until invalidated or skip_cache.",
        validation_alias="CACHE_TTL_SUMMARY_S",
    )
    cache_ttl_fallback_s: int = Field(
        default=60,
        ge=1,
        description="Lifetime of fallback/demo entries so live data is retried soon.",
        validation_alias="CACHE_TTL_FALLBACK_S",
    )
    resolution_single_flight: bool = Field(
        default=True,
        description="Share one upstream fetch between concurrent misses on a key.",
        validation_alias="RESOLUTION_SINGLE_FLIGHT",
    )
    demo_data_enabled: bool = Field(
        default=True,
        description="Serve tagged demo data when every live tier fails.",
        validation_alias="DEMO_DATA_ENABLED",
    )

    # ---------------------------
    # Thresholds
    # ---------------------------
    health_threshold_pct: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Usage percentage at which a device resource counts as warning.",
        validation_alias="HEALTH_THRESHOLD_PCT",
    )
    critical_site_threshold_pct: float = Field(
        default=75.0,
        ge=0.0,
        le=100.0,
        description="Default utilization threshold for the critical-sites view.",
        validation_alias="CRITICAL_SITE_THRESHOLD_PCT",
    )

    # ---------------------------
    # LLM summary
    # ---------------------------
    openai_api_key: SecretStr | None = Field(
        default=None,
        description="OpenAI API key; summaries are disabled when unset.",
        validation_alias="OPENAI_API_KEY",
    )
    openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")
    openai_temperature: float = Field(
        default=0.3, ge=0.0, le=2.0, validation_alias="OPENAI_TEMPERATURE"
    )
    openai_max_tokens: int = Field(default=500, ge=1, le=4096, validation_alias="OPENAI_MAX_TOKENS")
    openai_timeout_s: float = Field(
        default=30.0, ge=0.1, le=300.0, validation_alias="OPENAI_TIMEOUT_S"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _compute_cors(self) -> Settings:
        """Parse ALLOWED_ORIGINS and reject wildcards outside development/test.

        Returns:
            Settings: The validated settings instance.

        Raises:
            ValueError: If '*' is configured in a production-like environment.
        """
        raw = (self.cors_allow_origins_raw or "").strip()
        entries = [e.strip() for e in raw.split(",") if e.strip()]
        if "*" in entries and self.environment not in (Environment.DEVELOPMENT, Environment.TEST):
            raise ValueError("'*' CORS origin is only allowed in development/test environments.")
        self.cors_allow_origins = entries
        return self

    @model_validator(mode="after")
    def _validate_ttls(self) -> Settings:
        """Ensure fallback entries never outlive live entries.

        Raises:
            ValueError: If CACHE_TTL_FALLBACK_S exceeds any live TTL.
        """
        live = {
            "CACHE_TTL_MONITORING_S": self.cache_ttl_monitoring_s,
            "CACHE_TTL_PLAZA_S": self.cache_ttl_plaza_s,
            "CACHE_TTL_TRENDS_S": self.cache_ttl_trends_s,
            "CACHE_TTL_EXECUTIVE_S": self.cache_ttl_executive_s,
        }
        too_short = sorted(name for name, ttl in live.items() if ttl < self.cache_ttl_fallback_s)
        if too_short:
            raise ValueError(
                f"CACHE_TTL_FALLBACK_S ({self.cache_ttl_fallback_s}) exceeds "
                f"{', '.join(too_short)}."
            )
        return self

    @property
    def observium_api_url(self) -> str:
        """Return the Observium API root (``{base}/api/v0``)."""
        return f"{self.observium_base_url.rstrip('/')}/api/v0"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated application settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        logger.exception("settings.invalid")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    logger.info(
        "settings.initialized",
        extra={
            "environment": settings.environment.value,
            "observium_api_url": settings.observium_api_url,
            "observium_auth": settings.observium_username is not None,
            "cache_backend": settings.cache_backend,
            "ttl": {
                "monitoring": settings.cache_ttl_monitoring_s,
                "plaza": settings.cache_ttl_plaza_s,
                "trends": settings.cache_ttl_trends_s,
                "executive": settings.cache_ttl_executive_s,
                "summary": settings.cache_ttl_summary_s,
                "fallback": settings.cache_ttl_fallback_s,
            },
            "single_flight": settings.resolution_single_flight,
            "demo_data_enabled": settings.demo_data_enabled,
            "openai_configured": settings.openai_api_key is not None,
            "cors_count": len(settings.cors_allow_origins),
        },
    )
    return settings
