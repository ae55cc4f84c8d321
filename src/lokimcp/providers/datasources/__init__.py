"""Loki data source: URL construction, HTTP client and response models."""

from .base import (
    BackendConnectionError,
    BackendDecodeError,
    BackendHTTPError,
    BackendReportedError,
    BackendTimeoutError,
    DataSourceError,
    InvalidBaseURLError,
)
from .models import LokiEnvelope, SeriesEntry

__all__ = [
    "BackendConnectionError",
    "BackendDecodeError",
    "BackendHTTPError",
    "BackendReportedError",
    "BackendTimeoutError",
    "DataSourceError",
    "InvalidBaseURLError",
    "LokiEnvelope",
    "SeriesEntry",
]
