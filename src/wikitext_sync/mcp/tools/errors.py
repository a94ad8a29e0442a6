"""Error response builders for MCP tool handlers.

Errors carry a corrective action so an agent can recover without human
help.  Engine outcomes of kind ``ERROR`` are mapped by their
``error_kind``.
"""

import mcp.types as types

from ...sync.models import SyncResult


def build_error_response(
    error_type: str, message: str, corrective_action: str
) -> types.CallToolResult:
    """Build a structured error response with corrective action.

    Args:
        error_type: Error category (not_found, validation_error, token_error,
            interwiki, server_error, ...)
        message: Human-readable error description
        corrective_action: Specific action the agent can take

    Returns:
        CallToolResult with isError=True

    Examples:
        >>> build_error_response("not_found", "Page 'Foo' does not exist", "Pass create_if_missing=true.")
        CallToolResult(content=[TextContent(...)], isError=True)
    """
    error_text = f"Error ({error_type}): {message}\n\nAction: {corrective_action}"

    return types.CallToolResult(
        content=[types.TextContent(type="text", text=error_text)],
        isError=True,
    )


# error_kind -> (error_type, corrective action)
_KIND_ACTIONS: dict[str, tuple[str, str]] = {
    "no_title": (
        "validation_error",
        "Pass a title argument or include a [PAGE_INFO] header with pageTitle.",
    ),
    "no_document": (
        "validation_error",
        "Pass either content or file_path.",
    ),
    "token": (
        "token_error",
        "Check that WIKITEXT_COOKIE_FILE holds a logged-in session, then retry.",
    ),
    "unsupported_content_model": (
        "unsupported_content_model",
        "This page's content model cannot carry a PAGE_INFO header; edit it on the wiki instead.",
    ),
    "malformed": (
        "server_error",
        "The response was not an action-API answer; check WIKITEXT_HOST and WIKITEXT_API_PATH.",
    ),
    "api": (
        "api_error",
        "Check the page title, your permissions and the request arguments.",
    ),
    "edit_failed": (
        "edit_rejected",
        "The wiki rejected the edit (abuse filter, captcha or protection); review it in a browser.",
    ),
    "transport": (
        "server_error",
        "Check network connectivity and WIKITEXT_HOST, then retry.",
    ),
}

_DEFAULT_ACTION = ("server_error", "Retry later or check the server log.")


def translate_sync_error(result: SyncResult) -> types.CallToolResult:
    """Turn an ``ERROR`` outcome into a structured error response."""
    error_type, action = _KIND_ACTIONS.get(
        result.error_kind or "", _DEFAULT_ACTION
    )
    return build_error_response(error_type, result.detail or "", action)
