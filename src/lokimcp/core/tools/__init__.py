"""Tools exposed to the calling protocol."""

from .base import BaseTool, ToolExecutionError
from .registry import ToolRegistry

__all__ = ["BaseTool", "ToolExecutionError", "ToolRegistry"]
