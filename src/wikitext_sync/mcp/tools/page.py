"""Page tool handlers for MCP server.

``page_pull`` and ``page_push`` drive the Pull and Push engines through a
``ScriptedHost`` whose prompt answers come from the tool arguments;
everything the engines would have shown the user is returned as text.
``page_info`` decodes a document's ``[PAGE_INFO]`` header locally.
"""

import logging
from typing import Any

import mcp.types as types

from ...core.async_utils import run_serialized
from ...core.client import MediaWikiClient
from ...file_handler import (
    read_file_async,
    write_file_async,
)
from ...i18n import i18n
from ...sync.host import ScriptedHost
from ...sync.metadata import extract, suggest_title
from ...sync.models import PullOptions, PushOptions, SyncKind, SyncResult
from ...sync.pull import PullEngine
from ...sync.push import PushEngine
from .errors import build_error_response, translate_sync_error
from .registry import ToolSpec

logger = logging.getLogger(__name__)


# Tool definitions for list_tools()
PAGE_TOOLS = [
    types.Tool(
        name="page_pull",
        description="Fetch the latest revision of a wiki page as a document with a [PAGE_INFO] header recording title, page id, revision id and content model. Optionally writes it to a local file.",
        annotations=types.ToolAnnotations(
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "title": {
                    "type": "string",
                    "description": "Page title",
                },
                "create_if_missing": {
                    "type": "boolean",
                    "default": False,
                    "description": "For a missing page, return a header-only document to start it",
                },
                "redirects": {
                    "type": "boolean",
                    "description": "Follow redirects (default from config)",
                },
                "convert_titles": {
                    "type": "boolean",
                    "description": "Convert the title to other language variants (default from config)",
                },
                "file_path": {
                    "type": "string",
                    "description": "Absolute path to write the document to",
                },
            },
            "required": ["title"],
        },
    ),
    types.Tool(
        name="page_push",
        description="Save a document as a new revision. The [PAGE_INFO] header is stripped before submission and supplies the title when none is given.",
        annotations=types.ToolAnnotations(
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=True,
        ),
        inputSchema={
            "type": "object",
            "properties": {
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
                    "description": "Page title; defaults to the header's pageTitle",
                },
                "summary": {
                    "type": "string",
                    "description": "Edit summary",
                },
                "skip_title_prompt": {
                    "type": "boolean",
                    "description": "Save under the header's pageTitle even when title is given (default from config)",
                },
            },
            "required": [],
        },
    ),
    types.Tool(
        name="page_info",
        description="Decode the [PAGE_INFO] header of a document without contacting the wiki.",
        annotations=types.ToolAnnotations(
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=False,
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "content": {
                    "type": "string",
                    "description": "Document text (alternative to file_path)",
                },
                "file_path": {
                    "type": "string",
                    "description": "Absolute path of a local document",
                },
            },
            "required": [],
        },
    ),
]


def _text(text: str, structured: dict[str, Any] | None = None) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=text)],
        structuredContent=structured,
    )


async def _document_from_args(args: dict[str, Any]) -> tuple[str, str | None]:
    """Return (text, file_path) from ``content`` or ``file_path``."""
    content = args.get("content")
    file_path = args.get("file_path")
    if content is not None and file_path:
        raise ValueError("Pass either content or file_path, not both")
    if content is not None:
        return content, None
    if not file_path:
        raise ValueError("Either content or file_path is required")
    text, encoding, resolved = await read_file_async(file_path)
    logger.debug("Read %s (%s)", resolved, encoding)
    return text, str(resolved)


# ---------------------------------------------------------------------------
# page_pull
# ---------------------------------------------------------------------------


def _pull(engine: PullEngine, title: str, options: PullOptions) -> SyncResult:
    engine.warn_if_outdated()
    return engine.run(title, options)


async def _handle_pull(
    client: MediaWikiClient, args: dict[str, Any]
) -> types.CallToolResult:
    title = (args.get("title") or "").strip()
    if not title:
        raise ValueError("title is required")

    config = client.config
    lang = config.language
    answer = i18n("button-yes" if args.get("create_if_missing") else "button-no", lang)
    host = ScriptedHost(choices=[answer])
    options = PullOptions(
        redirects=args.get("redirects", config.redirects),
        convert_titles=args.get("convert_titles", config.convert_titles),
    )
    engine = PullEngine(client, host, lang=lang)
    result = await run_serialized(_pull, engine, title, options)

    match result.kind:
        case SyncKind.ERROR:
            return translate_sync_error(result)
        case SyncKind.INTERWIKI_REDIRECT:
            return build_error_response(
                "interwiki",
                f"'{result.title}' belongs to interwiki '{result.target}'",
                "Point WIKITEXT_HOST at that wiki and pull again.",
            )
        case SyncKind.MISSING if result.content is None:
            reason = f" ({result.reason})" if result.reason else ""
            return build_error_response(
                "not_found",
                f"Page '{result.title}' does not exist{reason}",
                "Pass create_if_missing=true to start a new page.",
            )

    structured: dict[str, Any] = {
        "kind": result.kind.value,
        "title": result.title,
        "page_info": result.info.header_fields() if result.info else None,
    }
    file_path = args.get("file_path")
    if file_path:
        resolved, count = await write_file_async(file_path, result.content or "")
        structured["file_path"] = str(resolved)
        structured["bytes_written"] = count
        summary = f"Wrote {count} bytes to {resolved}"
    else:
        summary = result.content or ""

    transcript = host.transcript()
    text = f"{transcript}\n\n{summary}" if transcript else summary
    return _text(text, structured)


# ---------------------------------------------------------------------------
# page_push
# ---------------------------------------------------------------------------


async def _handle_push(
    client: MediaWikiClient, args: dict[str, Any]
) -> types.CallToolResult:
    text, file_path = await _document_from_args(args)
    summary = args.get("summary") or ""
    title = (args.get("title") or "").strip()

    config = client.config
    recorded = extract(text).info
    options = PushOptions(
        skip_title_prompt=args.get("skip_title_prompt", config.skip_title_prompt)
    )
    if options.skip_title_prompt and recorded is not None and recorded.page_title:
        # The engine never asks for a title, so only the summary is answered
        answers: list[str | None] = [summary]
    else:
        answers = [title or suggest_title(recorded, file_path), summary]

    host = ScriptedHost(text=text, file_name=file_path, inputs=answers)
    engine = PushEngine(
        client,
        host,
        lang=config.language,
        edit_tag=config.edit_tag,
        max_tag_pages=config.max_tag_pages,
    )
    result = await run_serialized(engine.push, None, options)

    if result.kind is SyncKind.ERROR:
        return translate_sync_error(result)

    edit = result.edit
    structured = {
        "kind": result.kind.value,
        "title": result.title,
        "page_id": edit.page_id if edit else None,
        "content_model": edit.content_model if edit else None,
        "old_revid": edit.old_revid if edit else None,
        "new_revid": edit.new_revid if edit else None,
        "new_timestamp": edit.new_timestamp if edit else None,
        "watched": edit.watched if edit else False,
    }
    return _text(host.transcript(), structured)


# ---------------------------------------------------------------------------
# page_info
# ---------------------------------------------------------------------------


async def _handle_info(
    client: MediaWikiClient, args: dict[str, Any]
) -> types.CallToolResult:
    text, _ = await _document_from_args(args)
    stripped, info = extract(text)
    if info is None:
        return _text(
            "No [PAGE_INFO] header found.",
            {"page_info": None, "content_length": len(stripped)},
        )
    fields = info.header_fields()
    lines = [f"{key}: {value or '-'}" for key, value in fields.items()]
    return _text(
        "\n".join(lines),
        {"page_info": fields, "content_length": len(stripped)},
    )


PAGE_SPECS: list[ToolSpec] = [
    ToolSpec(tool=PAGE_TOOLS[0], handler=_handle_pull),
    ToolSpec(tool=PAGE_TOOLS[1], handler=_handle_push, writes=True),
    ToolSpec(tool=PAGE_TOOLS[2], handler=_handle_info),
]
