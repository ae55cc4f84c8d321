"""Name-based dispatch of Loki tool calls."""

import logging
from typing import Any

from .base import BaseTool, ToolExecutionError

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Tools available to the calling protocol, keyed by name.

    The Loki tools are registered once at startup; afterwards the registry is
    only read, so concurrent calls need no locking.
    """

    _tools: dict[str, BaseTool] = {}

    @classmethod
    def register(cls, tool: BaseTool) -> None:
        """
        Register a tool under its name.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if tool.name in cls._tools:
            raise ValueError(
                f"Tool '{tool.name}' is already registered. Each tool must have a unique name."
            )
        cls._tools[tool.name] = tool

    @classmethod
    def get(cls, tool_name: str) -> BaseTool | None:
        """Get a tool by name, or None if not found."""
        return cls._tools.get(tool_name)

    @classmethod
    def names(cls) -> list[str]:
        """Get the registered tool names in registration order."""
        return list(cls._tools)

    @classmethod
    def to_mcp_definitions(cls) -> list[dict[str, Any]]:
        """Get the tools/list payload for all registered tools."""
        return [tool.to_mcp_definition() for tool in cls._tools.values()]

    @classmethod
    async def execute(cls, tool_name: str, **kwargs: Any) -> str:
        """
        Execute a tool by name.

        Only argument names are logged; values may hold passwords or tokens.

        Args:
            tool_name: Name of the tool to execute
            **kwargs: Tool arguments

        Returns:
            Text result of the tool

        Raises:
            ToolExecutionError: If tool not found or execution fails
        """
        tool = cls.get(tool_name)
        if tool is None:
            raise ToolExecutionError(
                message=f"Tool '{tool_name}' not found in registry",
                tool_name=tool_name,
                details={"available_tools": cls.names()},
            )

        logger.info(f"Executing tool {tool_name} with arguments {sorted(kwargs)}")
        try:
            return await tool.execute(**kwargs)
        except ToolExecutionError:
            raise
        except Exception as e:
            raise ToolExecutionError(
                message=str(e),
                tool_name=tool_name,
                details={"exception_type": type(e).__name__},
            ) from e

    @classmethod
    def clear(cls) -> None:
        """Drop all registered tools (the CLI and tests start from empty)."""
        cls._tools.clear()
