"""Citation tool handler for MCP server."""

import logging
from dataclasses import replace
from typing import Any

import mcp.types as types

from ...cite.web import add_web_cite
from ...core.async_utils import run_sync
from ...core.client import MediaWikiClient
from ...sync.host import ScriptedHost
from .errors import build_error_response
from .registry import ToolSpec

logger = logging.getLogger(__name__)


CITE_TOOLS = [
    types.Tool(
        name="cite_web",
        description="Build a citation for a web page: fetches it, extracts title, author, site name, publication date and language, and looks up a Wayback Machine snapshot.",
        annotations=types.ToolAnnotations(
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=False,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "url": {
                    "type": "string",
                    "description": "URL of the page to cite",
                },
                "format": {
                    "type": "string",
                    "description": "Template with {$arg} slots and optional <!arg>...</!arg> sections (default from config)",
                },
                "archive": {
                    "type": "boolean",
                    "description": "Look up an archived copy (default from config)",
                },
            },
            "required": ["url"],
        },
    ),
]


async def _handle_cite_web(
    client: MediaWikiClient, args: dict[str, Any]
) -> types.CallToolResult:
    url = (args.get("url") or "").strip()
    if not url.startswith(("http://", "https://")):
        raise ValueError(f"Invalid URL '{url}': must start with http:// or https://")

    config = client.config
    if args.get("format") or "archive" in args:
        config = replace(
            config,
            cite_format=args.get("format") or config.cite_format,
            cite_archive=args.get("archive", config.cite_archive),
        )

    host = ScriptedHost(text="", inputs=[url])
    citation = await run_sync(add_web_cite, host, config)
    if citation is None:
        return build_error_response(
            "server_error",
            host.transcript(["error"]) or f"Could not cite {url}",
            "Check that the URL is reachable from this machine.",
        )
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=citation)],
        structuredContent={"url": url, "citation": citation},
    )


CITE_SPECS: list[ToolSpec] = [
    ToolSpec(tool=CITE_TOOLS[0], handler=_handle_cite_web),
]
