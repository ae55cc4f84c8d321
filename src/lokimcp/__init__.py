"""Loki MCP tools - query Grafana Loki logs, labels and label values."""

__version__ = "0.1.0"
__author__ = "Loki MCP Tools Team"
__description__ = "Query Grafana Loki through MCP-style tool calls"

__all__ = ["__version__", "__author__", "__description__"]
