"""Tests for MCP error response builders."""

import pytest

from wikitext_sync.mcp.tools.errors import build_error_response, translate_sync_error
from wikitext_sync.sync.models import SyncResult


def test_build_error_response_format():
    result = build_error_response("not_found", "Page 'Foo' does not exist", "Create it.")
    assert result.isError is True
    assert result.content[0].text == (
        "Error (not_found): Page 'Foo' does not exist\n\nAction: Create it."
    )


@pytest.mark.parametrize(
    "kind, error_type",
    [
        ("no_title", "validation_error"),
        ("no_document", "validation_error"),
        ("token", "token_error"),
        ("unsupported_content_model", "unsupported_content_model"),
        ("malformed", "server_error"),
        ("api", "api_error"),
        ("edit_failed", "edit_rejected"),
        ("transport", "server_error"),
        ("unexpected", "server_error"),
    ],
)
def test_translate_sync_error(kind, error_type):
    result = translate_sync_error(SyncResult.error(kind, "details here", title="X"))
    text = result.content[0].text
    assert result.isError is True
    assert text.startswith(f"Error ({error_type}): details here")
    assert "\n\nAction: " in text
