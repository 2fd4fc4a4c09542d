"""Command-line entry point for the Autotask tools.

Examples:
    autotask-mcp list-tools
    autotask-mcp call search_tickets --args '{"companyID": 123}'
    autotask-mcp call get_ticket_details --args '{"ticketID": 42}' --raw
    autotask-mcp cache-stats
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from autotask_mcp.api_helpers import AutotaskClient
from autotask_mcp.config import Settings, get_settings
from autotask_mcp.handlers import TOOL_DEFINITIONS, EnhancedToolHandler, ToolHandler
from autotask_mcp.mapping import MappingResolver, reset_mapping_resolver

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autotask-mcp",
        description="Run Autotask PSA tools from the command line",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list-tools", help="Print the tool catalog as JSON")

    call = subparsers.add_parser("call", help="Run one tool")
    call.add_argument("tool", help="Tool name, e.g. search_companies")
    call.add_argument(
        "--args",
        dest="tool_args",
        default="{}",
        help="Tool arguments as a JSON object (default: {})",
    )
    call.add_argument(
        "--raw",
        action="store_true",
        help="Skip company/resource name enrichment",
    )

    subparsers.add_parser(
        "cache-stats", help="Load the name mapping caches and print their stats"
    )
    return parser


def _parse_tool_args(raw: str) -> dict[str, Any]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"--args is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise ValueError("--args must be a JSON object")
    return value


def make_handler(
    client: AutotaskClient, settings: Settings, *, raw: bool = False
) -> ToolHandler:
    if raw or not settings.enhance_results:
        return ToolHandler(client)
    return EnhancedToolHandler(client, settings=settings)


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=settings.log_format,
    )

    if args.command == "list-tools":
        print(json.dumps([tool.describe() for tool in TOOL_DEFINITIONS], indent=2))
        return 0

    async with AutotaskClient(settings) as client:
        if args.command == "cache-stats":
            resolver = MappingResolver.from_settings(client, settings)
            await resolver.preload()
            print(json.dumps(resolver.get_cache_stats(), indent=2))
            return 0

        try:
            tool_args = _parse_tool_args(args.tool_args)
        except ValueError as e:
            logger.error("%s", e)
            return 2

        handler = make_handler(client, settings, raw=args.raw)
        try:
            result = await handler.call_tool(args.tool, tool_args)
        finally:
            await reset_mapping_resolver()

    print(result.text)
    return 1 if result.is_error else 0


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
