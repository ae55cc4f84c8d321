"""Base classes for Loki tools."""

from abc import ABC, abstractmethod
from typing import Any


class BaseTool(ABC):
    """
    Abstract base class for all tools.

    A tool receives a mapping of loosely typed arguments from the calling
    protocol and returns a single text payload.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the tool name (used by callers to reference it)."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Return the tool description."""
        pass

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """
        Return the tool parameters schema in JSON Schema format.

        Example:
            {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "LogQL query string"
                    },
                    "limit": {
                        "type": "number",
                        "description": "Maximum number of entries to return"
                    }
                },
                "required": ["query"]
            }
        """
        pass

    @abstractmethod
    async def execute(self, **kwargs: Any) -> str:
        """
        Execute the tool with given parameters.

        Args:
            **kwargs: Tool parameters as defined in the schema

        Returns:
            Text result

        Raises:
            ToolExecutionError: If tool execution fails
        """
        pass

    def to_mcp_definition(self) -> dict[str, Any]:
        """
        Describe the tool the way an MCP tools/list response does.

        Returns:
            Dictionary with name, description and inputSchema
        """
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.parameters,
        }


class ToolExecutionError(Exception):
    """Raised when tool execution fails."""

    def __init__(self, message: str, tool_name: str, details: dict[str, Any] | None = None):
        """
        Initialize tool execution error.

        Args:
            message: Error message
            tool_name: Name of the tool that failed
            details: Optional additional error details
        """
        self.message = message
        self.tool_name = tool_name
        self.details = details or {}
        super().__init__(f"Tool '{tool_name}' execution failed: {message}")
