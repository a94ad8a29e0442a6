"""MCP server exposing wiki page sync over stdio.

Transport: stdio
Protocol: JSON-RPC 2.0 over MCP
"""

import argparse
import asyncio
import logging
import sys

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from .. import __version__
from ..core.client import MediaWikiClient
from ..config_loader import ensure_config
from ..logger import DEFAULT_LOG_FILE, setup_logging
from .lifespan import server_lifespan
from .tools import ALL_SPECS, ToolRegistry, build_error_response

logger = logging.getLogger(__name__)

SERVER_NAME = "wikitext-sync"

server = Server(SERVER_NAME)

# Set in main() once the lifespan has connected
_client: MediaWikiClient | None = None
_registry: ToolRegistry | None = None


# ---------------------------------------------------------------------------
# Global accessors
# ---------------------------------------------------------------------------


def get_client() -> MediaWikiClient:
    """Return the shared MediaWikiClient.

    Raises:
        RuntimeError: If the server lifespan has not started.
    """
    if _client is None:
        raise RuntimeError(
            "MediaWikiClient not initialized. Server lifespan not started."
        )
    return _client


def set_client(client: MediaWikiClient | None) -> None:
    global _client
    _client = client


def get_registry() -> ToolRegistry:
    if _registry is None:
        raise RuntimeError("ToolRegistry not initialized.")
    return _registry


def set_registry(registry: ToolRegistry | None) -> None:
    global _registry
    _registry = registry


# ---------------------------------------------------------------------------
# MCP protocol handlers
# ---------------------------------------------------------------------------


@server.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    return get_registry().list_tools()


@server.call_tool()
async def handle_call_tool(
    name: str, arguments: dict | None
) -> types.CallToolResult:
    """Dispatch a tool call through the registry."""
    client = get_client()
    try:
        return await get_registry().call_tool(name, arguments, client)
    except ValueError as e:
        return build_error_response(
            "unknown_tool",
            str(e),
            "Use list_tools to see available tools.",
        )


# ---------------------------------------------------------------------------
# Server lifecycle
# ---------------------------------------------------------------------------


async def main(config_overrides: dict | None = None):
    """Run the MCP server with stdio transport.

    Logging goes to a file only; stdout carries JSON-RPC.

    Args:
        config_overrides: CLI values (host, cookie_file, insecure, debug,
            log_file, read_only).
    """
    overrides = dict(config_overrides or {})
    log_file = overrides.pop("log_file", None)
    read_only = overrides.pop("read_only", False)

    # Early logging for startup; the lifespan re-applies it with the
    # YAML logging section once config files are read
    setup_logging(debug=overrides.get("debug", False), log_file=log_file)

    registry = ToolRegistry(ALL_SPECS, read_only=read_only)
    logger.info(
        "Registered %d tools (of %d total, read_only=%s)",
        registry.tool_count(),
        len(ALL_SPECS),
        read_only,
    )
    if read_only:
        print(
            f"Read-only mode: {registry.tool_count()} of {len(ALL_SPECS)} tools enabled",
            file=sys.stderr,
        )
    set_registry(registry)

    # set_client() is called here, not in the lifespan, so that running
    # this file as __main__ updates the module the handlers live in.
    async with server_lifespan(config_overrides=overrides, log_file=log_file) as ctx:
        set_client(ctx["client"])
        try:
            async with mcp.server.stdio.stdio_server() as (
                read_stream,
                write_stream,
            ):
                init_options = InitializationOptions(
                    server_name=SERVER_NAME,
                    server_version=__version__,
                    capabilities=server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                )
                await server.run(read_stream, write_stream, init_options)
        finally:
            set_client(None)
            set_registry(None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Wikitext Sync MCP Server - pull and push MediaWiki pages over MCP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with default config (from .env or .wikitext_sync/config.yml)
  wikitext-sync-mcp

  # Override the wiki host
  wikitext-sync-mcp --host en.wikipedia.org

  # Reuse a logged-in browser session
  wikitext-sync-mcp --cookie-file ~/.wikitext_sync/cookies.txt

  # Hide page_push and logout
  wikitext-sync-mcp --read-only

  # Create .wikitext_sync/config.yml in the current directory
  wikitext-sync-mcp --init-config

Note: This server uses stdio transport for JSON-RPC communication with MCP clients.
All user-facing messages are written to stderr.
        """,
    )
    parser.add_argument(
        "--host",
        help="Override wiki host (takes precedence over WIKITEXT_HOST and config files)",
    )
    parser.add_argument(
        "--cookie-file",
        help="Mozilla-format cookie jar holding a logged-in session",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (use only for development)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log at DEBUG level",
    )
    parser.add_argument(
        "--log-file",
        help=(
            "Log file path (default: LOG_FILE, then logging.file from "
            f"config.yml, then {DEFAULT_LOG_FILE})"
        ),
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write a starter .wikitext_sync/config.yml if no config file exists, then exit",
    )
    parser.add_argument(
        "--read-only",
        action="store_true",
        help="Expose only tools that do not change the wiki",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"wikitext-sync-mcp version {__version__}",
    )
    return parser


def run() -> None:
    """Console entry point: parse CLI arguments and run the server."""
    args = build_parser().parse_args()

    if args.init_config:
        path = ensure_config()
        print(f"Config file: {path}", file=sys.stderr)
        return

    config_overrides: dict = {}
    if args.host:
        config_overrides["host"] = args.host
    if args.cookie_file:
        config_overrides["cookie_file"] = args.cookie_file
    if args.insecure:
        config_overrides["insecure"] = True
    if args.debug:
        config_overrides["debug"] = True
    if args.read_only:
        config_overrides["read_only"] = True
    if args.log_file:
        config_overrides["log_file"] = args.log_file

    if config_overrides:
        print(
            f"Config overrides from CLI: {', '.join(config_overrides)}",
            file=sys.stderr,
        )

    try:
        asyncio.run(main(config_overrides=config_overrides or None))
    except RuntimeError:
        # Already reported on stderr by the lifespan
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    run()
