"""Pytest configuration and shared fixtures."""

import json
import os
from collections.abc import Callable, Generator
from typing import Any

import httpx
import pytest

from lokimcp.config.settings import LokiSettings
from lokimcp.core.tools.registry import ToolRegistry
from lokimcp.providers.datasources.loki import LokiDataSource


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables before and after test."""
    # Save original environment
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("LOKI_"):
            del os.environ[key]

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def settings(clean_env: None) -> LokiSettings:
    """Settings with no environment defaults."""
    return LokiSettings(_env_file=None)


@pytest.fixture
def env_settings(clean_env: None) -> LokiSettings:
    """Settings as if LOKI_* environment variables were set."""
    return LokiSettings(
        _env_file=None,
        url="http://loki.example.com:3100",
        org_id="tenant-env",
        username="env-user",
        password="env-pass",
        token=None,
    )


@pytest.fixture(autouse=True)
def clear_registry() -> Generator[None, None, None]:
    """Keep the class-level tool registry isolated between tests."""
    ToolRegistry.clear()
    yield
    ToolRegistry.clear()


class RecordingBackend:
    """
    Stub Loki backend for httpx.MockTransport.

    Records every request and answers with a fixed status and body.
    """

    def __init__(self, body: Any = None, status_code: int = 200, raw: str | None = None) -> None:
        self.body = body if body is not None else {"status": "success", "data": []}
        self.status_code = status_code
        self.raw = raw
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raw is not None:
            return httpx.Response(self.status_code, text=self.raw)
        return httpx.Response(self.status_code, content=json.dumps(self.body).encode())

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def datasource(self) -> LokiDataSource:
        return LokiDataSource(transport=httpx.MockTransport(self))


@pytest.fixture
def backend_factory() -> Callable[..., RecordingBackend]:
    """Factory for stub backends."""
    return RecordingBackend


def _streams_body(*entries: tuple[dict[str, str], list[list[Any]]]) -> dict[str, Any]:
    """Build a successful 'streams' response body."""
    return {
        "status": "success",
        "data": {
            "resultType": "streams",
            "result": [{"stream": labels, "values": values} for labels, values in entries],
        },
    }


@pytest.fixture
def streams_body() -> Callable[..., dict[str, Any]]:
    """Builder for successful 'streams' response bodies."""
    return _streams_body

