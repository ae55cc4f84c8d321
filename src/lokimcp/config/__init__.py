"""Configuration management for the Loki tools."""

from .settings import DEFAULT_LOKI_URL, LokiSettings, get_settings, reload_settings

__all__ = [
    "DEFAULT_LOKI_URL",
    "LokiSettings",
    "get_settings",
    "reload_settings",
]
