"""View tool handlers for MCP server.

``page_preview`` and ``page_diff`` render a local document through the
wiki without saving it; ``page_view`` renders a saved page.  All three
return standalone HTML, or write it to ``output_path``.
"""

import logging
from typing import Any

import mcp.types as types

from ...core.async_utils import run_serialized
from ...core.client import MediaWikiClient
from ...file_handler import write_file_async
from ...sync.host import ScriptedHost
from ...sync.models import PullOptions, SyncKind, SyncResult
from ...sync.view import ViewEngine, load_url
from .errors import build_error_response, translate_sync_error
from .page import _document_from_args, _text
from .registry import ToolSpec

logger = logging.getLogger(__name__)

_READ_ONLY = types.ToolAnnotations(
    readOnlyHint=True,
    destructiveHint=False,
    idempotentHint=True,
    openWorldHint=True,
)

_DOCUMENT_PROPERTIES: dict[str, Any] = {
    "content": {
        "type": "string",
        "description": "Document text (alternative to file_path)",
    },
    "file_path": {
        "type": "string",
        "description": "Absolute path of a local document (alternative to content)",
    },
    "title": {
        "type": "string",
        "description": "Page title; defaults to the header's pageTitle, then the file name",
    },
    "output_path": {
        "type": "string",
        "description": "Absolute path to write the HTML to instead of returning it",
    },
}


VIEW_TOOLS = [
    types.Tool(
        name="page_preview",
        description="Render a document to HTML as the wiki would display it once saved. Nothing is saved.",
        annotations=_READ_ONLY,
        inputSchema={
            "type": "object",
            "properties": _DOCUMENT_PROPERTIES,
            "required": [],
        },
    ),
    types.Tool(
        name="page_diff",
        description="Render the differences between a document and the latest revision of its page as an HTML table.",
        annotations=_READ_ONLY,
        inputSchema={
            "type": "object",
            "properties": _DOCUMENT_PROPERTIES,
            "required": [],
        },
    ),
    types.Tool(
        name="page_view",
        description="Render the current revision of a wiki page to HTML.",
        annotations=_READ_ONLY,
        inputSchema={
            "type": "object",
            "properties": {
                "title": {
                    "type": "string",
                    "description": "Page title",
                },
                "redirects": {
                    "type": "boolean",
                    "description": "Follow redirects (default from config)",
                },
                "convert_titles": {
                    "type": "boolean",
                    "description": "Convert the title to other language variants (default from config)",
                },
                "output_path": {
                    "type": "string",
                    "description": "Absolute path to write the HTML to instead of returning it",
                },
            },
            "required": ["title"],
        },
    ),
]


def _engine(client: MediaWikiClient, host: ScriptedHost) -> ViewEngine:
    config = client.config
    return ViewEngine(
        client,
        host,
        lang=config.language,
        base_href=config.article_url,
        css=config.preview_css,
        get_css=config.get_css,
        styles_url=load_url(config.api_url),
    )


async def _respond(
    result: SyncResult, host: ScriptedHost, args: dict[str, Any]
) -> types.CallToolResult:
    if result.kind is SyncKind.ERROR:
        return translate_sync_error(result)
    if result.kind is SyncKind.MISSING:
        reason = f" ({result.reason})" if result.reason else ""
        return build_error_response(
            "not_found",
            f"Page '{result.title}' does not exist{reason}",
            "Use page_preview for a page that has not been created yet.",
        )

    html = result.content or ""
    structured: dict[str, Any] = {
        "kind": result.kind.value,
        "title": result.title,
        "display_title": result.display_title,
        "html_length": len(html),
    }
    output_path = args.get("output_path")
    if output_path:
        resolved, count = await write_file_async(output_path, html)
        structured["output_path"] = str(resolved)
        body = f"Wrote {count} bytes to {resolved}"
    else:
        body = html

    transcript = host.transcript()
    return _text(f"{transcript}\n\n{body}" if transcript else body, structured)


async def _handle_preview(
    client: MediaWikiClient, args: dict[str, Any]
) -> types.CallToolResult:
    text, file_path = await _document_from_args(args)
    host = ScriptedHost(text=text, file_name=file_path)
    title = (args.get("title") or "").strip() or None
    result = await run_serialized(_engine(client, host).preview, None, title)
    return await _respond(result, host, args)


async def _handle_diff(
    client: MediaWikiClient, args: dict[str, Any]
) -> types.CallToolResult:
    text, file_path = await _document_from_args(args)
    host = ScriptedHost(text=text, file_name=file_path)
    title = (args.get("title") or "").strip() or None
    result = await run_serialized(_engine(client, host).diff, None, title)
    return await _respond(result, host, args)


async def _handle_view(
    client: MediaWikiClient, args: dict[str, Any]
) -> types.CallToolResult:
    title = (args.get("title") or "").strip()
    if not title:
        raise ValueError("title is required")

    config = client.config
    options = PullOptions(
        redirects=args.get("redirects", config.redirects),
        convert_titles=args.get("convert_titles", config.convert_titles),
    )
    host = ScriptedHost()
    result = await run_serialized(_engine(client, host).view_page, title, options)
    return await _respond(result, host, args)


VIEW_SPECS: list[ToolSpec] = [
    ToolSpec(tool=VIEW_TOOLS[0], handler=_handle_preview),
    ToolSpec(tool=VIEW_TOOLS[1], handler=_handle_diff),
    ToolSpec(tool=VIEW_TOOLS[2], handler=_handle_view),
]
