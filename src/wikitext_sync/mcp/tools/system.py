"""System tool handlers for MCP server: ping and logout."""

import logging
from typing import Any

import mcp.types as types

from ...core.async_utils import run_serialized
from ...core.client import MediaWikiClient
from ...i18n import i18n
from ...sync.version import MINIMUM_SUPPORTED, compare_version
from .registry import ToolSpec

logger = logging.getLogger(__name__)


SYSTEM_TOOLS = [
    types.Tool(
        name="ping",
        description="Test wiki connectivity and report the MediaWiki version and whether it is supported (1.32.0 or later).",
        annotations=types.ToolAnnotations(
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {},
            "required": [],
        },
    ),
    types.Tool(
        name="logout",
        description="End the wiki session held by this server.",
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {},
            "required": [],
        },
    ),
]


async def _handle_ping(
    client: MediaWikiClient, args: dict[str, Any]
) -> types.CallToolResult:
    generator = await run_serialized(client.site_generator)
    supported = compare_version(generator, *MINIMUM_SUPPORTED)

    lines = [f"Connected to {client.api_url}. Generator: {generator or 'unknown'}"]
    if supported is None:
        lines.append(i18n("version-indeterminate", client.config.language))
    elif not supported:
        lines.append(i18n("version-too-old", client.config.language))

    return types.CallToolResult(
        content=[types.TextContent(type="text", text="\n".join(lines))],
        structuredContent={
            "api_url": client.api_url,
            "generator": generator,
            "minimum_version": str(MINIMUM_SUPPORTED),
            "supported": supported,
        },
    )


async def _handle_logout(
    client: MediaWikiClient, args: dict[str, Any]
) -> types.CallToolResult:
    await run_serialized(client.logout)
    return types.CallToolResult(
        content=[
            types.TextContent(
                type="text",
                text=i18n("logout-result-success", client.config.language),
            )
        ],
    )


SYSTEM_SPECS: list[ToolSpec] = [
    ToolSpec(tool=SYSTEM_TOOLS[0], handler=_handle_ping),
    ToolSpec(tool=SYSTEM_TOOLS[1], handler=_handle_logout, writes=True),
]
