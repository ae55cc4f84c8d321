"""Configuration settings for the Loki tools using Pydantic Settings."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LOKI_URL = "http://localhost:3100"


class LokiSettings(BaseSettings):
    """
    Environment-sourced defaults for Loki tool calls.

    Every field here is only a default: an explicit tool argument always wins.
    """

    model_config = SettingsConfigDict(
        env_prefix="LOKI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Loki Connection ===
    url: str | None = Field(
        default=None,
        description=f"Loki server URL (falls back to {DEFAULT_LOKI_URL})",
    )

    org_id: str | None = Field(
        default=None,
        description="Tenant sent as the X-Scope-OrgID header",
    )

    # === Authentication ===
    username: str | None = Field(
        default=None,
        description="Username for basic authentication",
    )

    password: str | None = Field(
        default=None,
        description="Password for basic authentication",
    )

    token: str | None = Field(
        default=None,
        description="Bearer token (takes precedence over basic authentication)",
    )

    # === Logging Configuration ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Application log level",
    )

    @field_validator("url", "org_id", "username", "password", "token", mode="before")
    @classmethod
    def empty_as_unset(cls, v: str | None) -> str | None:
        """Treat empty environment values as unset."""
        if isinstance(v, str) and v == "":
            return None
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def effective_url(self) -> str:
        """Get the configured Loki URL or the local default."""
        return self.url or DEFAULT_LOKI_URL


# Global settings instance
_settings: LokiSettings | None = None


def get_settings() -> LokiSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = LokiSettings()
    return _settings


def reload_settings() -> LokiSettings:
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = LokiSettings()
    return _settings
