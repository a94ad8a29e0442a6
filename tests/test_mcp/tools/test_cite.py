"""Tests for the cite_web MCP tool handler."""

from unittest.mock import MagicMock, patch

from wikitext_sync.config import Config
from wikitext_sync.mcp.tools.cite import CITE_SPECS
from wikitext_sync.mcp.tools.registry import ToolRegistry


def _client(**overrides):
    client = MagicMock()
    client.config = Config(host="wiki.example.org", **overrides)
    return client


async def _call(client, args):
    return await ToolRegistry(CITE_SPECS).call_tool("cite_web", args, client)


class TestCiteWeb:
    async def test_invalid_url(self):
        result = await _call(_client(), {"url": "ftp://example.com"})
        assert result.isError
        assert "Error (validation_error): Invalid URL" in result.content[0].text

    @patch("wikitext_sync.mcp.tools.cite.add_web_cite")
    async def test_returns_citation(self, mock_add):
        mock_add.return_value = "{{cite web|url=https://example.com}}"
        result = await _call(_client(), {"url": " https://example.com "})

        assert not result.isError
        assert result.content[0].text == "{{cite web|url=https://example.com}}"
        assert result.structuredContent == {
            "url": "https://example.com",
            "citation": "{{cite web|url=https://example.com}}",
        }
        host, config = mock_add.call_args[0]
        assert list(host.inputs) == ["https://example.com"]
        assert config.cite_archive is True

    @patch("wikitext_sync.mcp.tools.cite.add_web_cite")
    async def test_overrides_applied_to_copy(self, mock_add):
        mock_add.return_value = "x"
        client = _client()
        await _call(
            client,
            {"url": "https://example.com", "format": "{$url}", "archive": False},
        )
        _, config = mock_add.call_args[0]
        assert config.cite_format == "{$url}"
        assert config.cite_archive is False
        assert client.config.cite_archive is True

    @patch("wikitext_sync.mcp.tools.cite.add_web_cite")
    async def test_failure_reports_transcript(self, mock_add):
        def fail(host, config):
            host.show_error("Error: Failed to fetch https://example.com: 404")
            return None

        mock_add.side_effect = fail
        result = await _call(_client(), {"url": "https://example.com"})
        assert result.isError
        assert "[error] Error: Failed to fetch" in result.content[0].text
