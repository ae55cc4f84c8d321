"""Integration tests for the query pipeline.

These tests drive the registered tools end to end: argument resolution,
URL construction, an HTTP exchange with a stub Loki, and formatting.
"""

import asyncio
import json
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from lokimcp.core.tools.base import ToolExecutionError
from lokimcp.core.tools.loki_tools import register_loki_tools
from lokimcp.core.tools.registry import ToolRegistry
from lokimcp.providers.datasources.loki import LokiDataSource


class TestRangeQueryPipeline:
    """End-to-end range queries."""

    @pytest.mark.asyncio
    async def test_two_streams_raw(self, settings, backend_factory, streams_body):
        """Test a relative-window query rendering two label-annotated groups."""
        backend = backend_factory(
            body=streams_body(
                (
                    {"job": "x", "host": "a"},
                    [["1705312245000000000", "first a"], ["1705312246000000000", "second a"]],
                ),
                ({"job": "x", "host": "b"}, [["1705312247000000000", "only b"]]),
            )
        )
        register_loki_tools(settings, backend.datasource())

        before = datetime.now(UTC)
        output = await ToolRegistry.execute(
            "loki_query", query='{job="x"}', start="-1h", end="now", limit=10
        )
        after = datetime.now(UTC)

        assert output == (
            "2024-01-15T09:50:45Z {host=a,job=x} first a\n"
            "2024-01-15T09:50:46Z {host=a,job=x} second a\n"
            "2024-01-15T09:50:47Z {host=b,job=x} only b\n"
        )

        request = backend.last
        assert request.url.path == "/loki/api/v1/query_range"
        assert request.url.params["query"] == '{job="x"}'
        assert request.url.params["limit"] == "10"

        start = int(request.url.params["start"])
        end = int(request.url.params["end"])
        assert end - start == 3600
        assert int((before - timedelta(seconds=1)).timestamp()) <= end <= int(after.timestamp())

    @pytest.mark.asyncio
    async def test_two_streams_text(self, settings, backend_factory, streams_body):
        """Test the same payload in text format."""
        backend = backend_factory(
            body=streams_body(
                ({"job": "x", "host": "a"}, [["1705312245000000000", "first a"]]),
                ({"job": "x", "host": "b"}, [["1705312247000000000", "only b"]]),
            )
        )
        register_loki_tools(settings, backend.datasource())

        output = await ToolRegistry.execute("loki_query", query='{job="x"}', format="text")

        assert output.startswith("Found 2 streams:\n\n")
        assert "Stream (host=a, job=x) 1:\n[2024-01-15T09:50:45Z] first a\n" in output
        assert "Stream (host=b, job=x) 2:\n[2024-01-15T09:50:47Z] only b\n" in output

    @pytest.mark.asyncio
    async def test_base_url_already_in_api(self, clean_env, backend_factory):
        """Test a base URL pointing into the API is not duplicated."""
        from lokimcp.config import LokiSettings

        settings = LokiSettings(_env_file=None, url="http://loki:3100/loki/api/v1/")
        backend = backend_factory()
        register_loki_tools(settings, backend.datasource())

        await ToolRegistry.execute("loki_query", query='{job="x"}')
        await ToolRegistry.execute("loki_label_names")
        await ToolRegistry.execute("loki_label_values", label="job")

        assert [r.url.path for r in backend.requests] == [
            "/loki/api/v1/query_range",
            "/loki/api/v1/labels",
            "/loki/api/v1/label/job/values",
        ]


class TestConcurrency:
    """Concurrent and cancelled calls."""

    @pytest.mark.asyncio
    async def test_concurrent_calls_are_independent(self, settings, backend_factory):
        """Test concurrent calls with different tenants do not interfere."""
        backend = backend_factory(body={"status": "success", "data": ["job"]})
        register_loki_tools(settings, backend.datasource())

        results = await asyncio.gather(
            *(ToolRegistry.execute("loki_label_names", org=f"tenant-{i}") for i in range(5))
        )

        assert results == ["job\n"] * 5
        assert sorted(r.headers["X-Scope-OrgID"] for r in backend.requests) == [
            f"tenant-{i}" for i in range(5)
        ]

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, settings):
        """Test cancelling a call aborts the in-flight request."""
        started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            await asyncio.sleep(30)
            return httpx.Response(200, json={"status": "success", "data": []})

        register_loki_tools(settings, LokiDataSource(transport=httpx.MockTransport(handler)))

        task = asyncio.create_task(ToolRegistry.execute("loki_label_names"))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_failure_does_not_affect_other_calls(self, settings):
        """Test one failing call leaves concurrent calls untouched."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.headers.get("X-Scope-OrgID") == "broken":
                return httpx.Response(503, text="unavailable")
            return httpx.Response(200, json={"status": "success", "data": ["ok"]})

        register_loki_tools(settings, LokiDataSource(transport=httpx.MockTransport(handler)))

        results = await asyncio.gather(
            ToolRegistry.execute("loki_label_names", org="broken"),
            ToolRegistry.execute("loki_label_names", org="fine", format="json"),
            return_exceptions=True,
        )

        assert isinstance(results[0], ToolExecutionError)
        assert "HTTP error: 503 - unavailable" in results[0].message
        assert json.loads(results[1]) == {"status": "success", "data": ["ok"]}
