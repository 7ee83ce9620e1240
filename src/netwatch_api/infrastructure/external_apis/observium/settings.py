# Copyright (c) NetWatch.
# SPDX-License-Identifier: MIT
"""Transport settings for the Observium client."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from netwatch_api.config.settings import Settings


class ObserviumSettings(BaseModel):
    """Configuration for :class:`ObserviumClient`.

    Built from the application :class:`Settings` by the composition root so
    the process environment is read in exactly one place.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_url: str = Field(
        "http://localhost/api/v0",
        description="Observium API root (``{base}/api/v0``).",
    )
    username: str | None = Field(None, description="HTTP basic auth user.")
    password: SecretStr | None = Field(None, description="HTTP basic auth password.")
    timeout_s: float = Field(30.0, gt=0, description="Per-request timeout in seconds.")
    max_retries: int = Field(2, ge=0, description="Retries for retryable failures.")

    @classmethod
    def from_settings(cls, settings: Settings) -> ObserviumSettings:
        """Project the Observium fields out of the application settings."""
        return cls(
            api_url=settings.observium_api_url,
            username=settings.observium_username,
            password=settings.observium_password,
            timeout_s=settings.observium_timeout_s,
            max_retries=settings.observium_max_retries,
        )

    @property
    def auth(self) -> tuple[str, str] | None:
        """Basic-auth tuple for httpx, or ``None`` when no user is configured."""
        if not self.username:
            return None
        secret = self.password.get_secret_value() if self.password is not None else ""
        return self.username, secret
