"""Loki query, label-name and label-value tools."""

import logging
from abc import abstractmethod
from typing import Any

from lokimcp.config.settings import LokiSettings
from lokimcp.core.formatting import PayloadKind, UnsupportedFormatError, format_result
from lokimcp.core.params import LokiRequest, ParameterResolver, ToolArgumentError
from lokimcp.core.tools.base import BaseTool, ToolExecutionError
from lokimcp.core.tools.registry import ToolRegistry
from lokimcp.providers.datasources.base import DataSourceError
from lokimcp.providers.datasources.loki import LokiDataSource
from lokimcp.providers.datasources.models import LokiEnvelope
from lokimcp.providers.datasources.urls import strip_credentials
from lokimcp.utils.time import TimeParseError

logger = logging.getLogger(__name__)


class LokiTool(BaseTool):
    """
    Shared plumbing of the Loki tools.

    Subclasses resolve their own request type, call one endpoint and name the
    payload kind; argument resolution, error wrapping and formatting live here.
    """

    payload_kind: PayloadKind

    def __init__(self, settings: LokiSettings, datasource: LokiDataSource | None = None) -> None:
        """
        Initialize the tool.

        Args:
            settings: Environment-sourced defaults
            datasource: Loki data source (a default one is created if omitted)
        """
        self.settings = settings
        self.datasource = datasource or LokiDataSource()
        self.resolver = ParameterResolver(settings)

    def _connection_properties(self) -> dict[str, Any]:
        """Schema for the arguments every Loki tool accepts."""
        s = self.settings
        return {
            "url": {
                "type": "string",
                "description": f"Loki server URL (default: {s.effective_url} from LOKI_URL env var)",
            },
            "username": {
                "type": "string",
                "description": (
                    f"Username for basic authentication "
                    f"(default: {s.username or ''} from LOKI_USERNAME env var)"
                ),
            },
            "password": {
                "type": "string",
                "description": "Password for basic authentication (default: LOKI_PASSWORD env var)",
            },
            "token": {
                "type": "string",
                "description": (
                    "Bearer token for authentication, takes precedence over username/password "
                    "(default: LOKI_TOKEN env var)"
                ),
            },
            "start": {
                "type": "string",
                "description": (
                    "Start time: 'now', relative ('-1h', '-30m'), RFC 3339 "
                    "('2024-01-15T10:30:45Z') or '2024-01-15 10:30:45' (default: 1h ago)"
                ),
            },
            "end": {
                "type": "string",
                "description": "End time, same formats as start (default: now)",
            },
            "org": {
                "type": "string",
                "description": (
                    f"Organization ID sent as X-Scope-OrgID "
                    f"(default: {s.org_id or ''} from LOKI_ORG_ID env var)"
                ),
            },
            "format": {
                "type": "string",
                "description": "Output format: raw, json, or text (default: raw)",
                "enum": ["raw", "json", "text"],
            },
        }

    @abstractmethod
    def resolve(self, args: dict[str, Any]) -> LokiRequest:
        """Turn raw arguments into a typed request."""
        pass

    @abstractmethod
    async def fetch(self, request: Any) -> LokiEnvelope:
        """Call the Loki endpoint for a resolved request."""
        pass

    def label_for(self, request: Any) -> str | None:
        """Label name used in empty-result and text headers (label values only)."""
        return None

    async def execute(self, **kwargs: Any) -> str:
        """
        Resolve arguments, call Loki and format the response.

        Raises:
            ToolExecutionError: Wrapping argument, time, backend and format errors
        """
        try:
            request = self.resolve(kwargs)
        except (ToolArgumentError, TimeParseError, UnsupportedFormatError) as e:
            raise ToolExecutionError(
                message=str(e),
                tool_name=self.name,
                details={"error_type": type(e).__name__},
            ) from e

        try:
            envelope = await self.fetch(request)
        except DataSourceError as e:
            logger.warning(f"{self.name} failed: {e}")
            raise ToolExecutionError(
                message=f"query execution failed: {e}",
                tool_name=self.name,
                details={"error_type": type(e).__name__, "url": strip_credentials(request.url)},
            ) from e

        return format_result(
            envelope, self.payload_kind, request.output_format, label=self.label_for(request)
        )


class LokiQueryTool(LokiTool):
    """Tool running a LogQL range query."""

    payload_kind = PayloadKind.SERIES

    @property
    def name(self) -> str:
        """Return tool name."""
        return "loki_query"

    @property
    def description(self) -> str:
        """Return tool description."""
        return "Run a query against Grafana Loki"

    @property
    def parameters(self) -> dict[str, Any]:
        """Return parameter schema."""
        properties = {
            "query": {"type": "string", "description": "LogQL query string"},
            **self._connection_properties(),
            "limit": {
                "type": "number",
                "description": "Maximum number of entries to return (default: 100)",
            },
        }
        return {"type": "object", "properties": properties, "required": ["query"]}

    def resolve(self, args: dict[str, Any]) -> LokiRequest:
        return self.resolver.resolve_query(args)

    async def fetch(self, request: Any) -> LokiEnvelope:
        return await self.datasource.query_range(request)


class LokiLabelNamesTool(LokiTool):
    """Tool listing label names."""

    payload_kind = PayloadKind.LABEL_NAMES

    @property
    def name(self) -> str:
        """Return tool name."""
        return "loki_label_names"

    @property
    def description(self) -> str:
        """Return tool description."""
        return "Get all label names from Grafana Loki"

    @property
    def parameters(self) -> dict[str, Any]:
        """Return parameter schema."""
        return {"type": "object", "properties": self._connection_properties(), "required": []}

    def resolve(self, args: dict[str, Any]) -> LokiRequest:
        return self.resolver.resolve_label_names(args)

    async def fetch(self, request: Any) -> LokiEnvelope:
        return await self.datasource.label_names(request)


class LokiLabelValuesTool(LokiTool):
    """Tool listing the values of one label."""

    payload_kind = PayloadKind.LABEL_VALUES

    @property
    def name(self) -> str:
        """Return tool name."""
        return "loki_label_values"

    @property
    def description(self) -> str:
        """Return tool description."""
        return "Get all values for a specific label from Grafana Loki"

    @property
    def parameters(self) -> dict[str, Any]:
        """Return parameter schema."""
        properties = {
            "label": {"type": "string", "description": "Label name to get values for"},
            **self._connection_properties(),
        }
        return {"type": "object", "properties": properties, "required": ["label"]}

    def resolve(self, args: dict[str, Any]) -> LokiRequest:
        return self.resolver.resolve_label_values(args)

    async def fetch(self, request: Any) -> LokiEnvelope:
        return await self.datasource.label_values(request)

    def label_for(self, request: Any) -> str | None:
        return request.label


def register_loki_tools(
    settings: LokiSettings, datasource: LokiDataSource | None = None
) -> list[BaseTool]:
    """
    Register the three Loki tools in the ToolRegistry.

    Args:
        settings: Environment-sourced defaults
        datasource: Optional shared data source

    Returns:
        The registered tools
    """
    datasource = datasource or LokiDataSource()
    tools: list[BaseTool] = [
        LokiQueryTool(settings, datasource),
        LokiLabelNamesTool(settings, datasource),
        LokiLabelValuesTool(settings, datasource),
    ]
    for tool in tools:
        ToolRegistry.register(tool)
    return tools
