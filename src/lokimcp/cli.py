"""Command-line interface for the Loki tools."""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from pydantic import ValidationError

from lokimcp import __version__
from lokimcp.config import get_settings
from lokimcp.core.tools.base import ToolExecutionError
from lokimcp.core.tools.loki_tools import register_loki_tools
from lokimcp.core.tools.registry import ToolRegistry

# Subcommand -> tool name
COMMANDS = {
    "query": "loki_query",
    "labels": "loki_label_names",
    "label-values": "loki_label_values",
}

# Options shared by every subcommand, forwarded as tool arguments
SHARED_OPTIONS = ("url", "org", "username", "password", "token", "format", "start", "end")


def _add_shared_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--url", help="Loki server URL (overrides LOKI_URL)")
    parser.add_argument("--org", help="Organization ID (overrides LOKI_ORG_ID)")
    parser.add_argument("--username", help="Basic auth username (overrides LOKI_USERNAME)")
    parser.add_argument("--password", help="Basic auth password (overrides LOKI_PASSWORD)")
    parser.add_argument("--token", help="Bearer token (overrides LOKI_TOKEN)")
    parser.add_argument(
        "--format",
        choices=["raw", "json", "text"],
        default=None,
        help="Output format (default: raw)",
    )
    parser.add_argument("--start", help="Start time, e.g. --start=-1h (default: 1h ago)")
    parser.add_argument("--end", help="End time (default: now)")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="loki-mcp",
        description="Query Grafana Loki logs, labels and label values",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  loki-mcp query '{job="varlogs"}'                  # Last hour, raw output
  loki-mcp query '{job="varlogs"}' --start=-30m --limit 10
  loki-mcp labels --format text                     # Numbered label names
  loki-mcp label-values job                         # Values of the 'job' label
  loki-mcp --list-tools                             # Print tool definitions

Environment Variables:
  LOKI_URL          # Loki server URL (default: http://localhost:3100)
  LOKI_ORG_ID       # Tenant sent as X-Scope-OrgID
  LOKI_USERNAME     # Basic auth username
  LOKI_PASSWORD     # Basic auth password
  LOKI_TOKEN        # Bearer token (takes precedence over basic auth)
  LOKI_LOG_LEVEL    # DEBUG, INFO, WARNING (default) or ERROR

Note: Command-line arguments take precedence over environment variables.
        """,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="Print the MCP tool definitions as JSON and exit",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    query = subparsers.add_parser("query", help="Run a LogQL range query")
    query.add_argument("query", help="LogQL query string")
    query.add_argument("--limit", type=int, help="Maximum number of entries (default: 100)")
    _add_shared_options(query)

    labels = subparsers.add_parser("labels", help="List label names")
    _add_shared_options(labels)

    label_values = subparsers.add_parser("label-values", help="List the values of a label")
    label_values.add_argument("label", help="Label name")
    _add_shared_options(label_values)

    return parser


def tool_arguments(args: argparse.Namespace) -> dict[str, Any]:
    """Translate parsed CLI arguments into tool arguments, dropping unset ones."""
    tool_args: dict[str, Any] = {}
    for option in SHARED_OPTIONS:
        value = getattr(args, option, None)
        if value is not None:
            tool_args[option] = value

    if args.command == "query":
        tool_args["query"] = args.query
        if args.limit is not None:
            tool_args["limit"] = args.limit
    elif args.command == "label-values":
        tool_args["label"] = args.label

    return tool_args


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"❌ Configuration Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ToolRegistry.clear()
    register_loki_tools(settings)

    if args.list_tools:
        print(json.dumps(ToolRegistry.to_mcp_definitions(), indent=2))
        return 0

    if args.command is None:
        parser.print_help(sys.stderr)
        return 1

    try:
        output = asyncio.run(ToolRegistry.execute(COMMANDS[args.command], **tool_arguments(args)))
    except ToolExecutionError as e:
        print(f"❌ Error: {e.message}", file=sys.stderr)
        return 1

    print(output, end="" if output.endswith("\n") else "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
