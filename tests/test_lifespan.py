"""Tests for wikitext_sync.mcp.lifespan and the server CLI parser.

server_lifespan() must resolve config, check the wiki and yield the client,
or fail fast with RuntimeError and a message on stderr.
"""

import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from wikitext_sync.config import Config
from wikitext_sync.core import async_utils
from wikitext_sync.mcp.lifespan import server_lifespan
from wikitext_sync.mcp.server import build_parser, run

LIFESPAN = "wikitext_sync.mcp.lifespan"


@pytest.fixture(autouse=True)
def no_config_files():
    with (
        patch(f"{LIFESPAN}.load_dotenv"),
        patch(f"{LIFESPAN}.discover_config_files", return_value=[]),
        patch(f"{LIFESPAN}.setup_logging"),
    ):
        yield
    async_utils._session_lock = None


class TestServerLifespan:
    async def test_yields_client(self, capsys):
        client = MagicMock()
        with (
            patch(f"{LIFESPAN}.load_config", return_value=Config(host="wiki.example.org")),
            patch(f"{LIFESPAN}.MediaWikiClient", return_value=client),
            patch(f"{LIFESPAN}.run_sync", new=AsyncMock(return_value="MediaWiki 1.41.0")),
        ):
            async with server_lifespan() as ctx:
                assert ctx["client"] is client
                assert async_utils._session_lock is not None

        err = capsys.readouterr().err
        assert "Connected: MediaWiki 1.41.0" in err
        assert "shutting down" in err

    async def test_cli_overrides_passed(self):
        with (
            patch(f"{LIFESPAN}.load_config", return_value=Config(host="cli.example.org")) as mock_load,
            patch(f"{LIFESPAN}.MediaWikiClient"),
            patch(f"{LIFESPAN}.run_sync", new=AsyncMock(return_value="")),
        ):
            async with server_lifespan({"host": "cli.example.org", "insecure": True}):
                pass

        kwargs = mock_load.call_args[1]
        assert kwargs["host"] == "cli.example.org"
        assert kwargs["insecure"] is True
        assert kwargs["yaml_fallbacks"] is None

    async def test_yaml_sections_become_fallbacks(self, tmp_path):
        config_file = tmp_path / "config.yml"
        raw = {"wiki": {"host": "yaml.example.org"}, "cite": {"archive": False}}
        with (
            patch(f"{LIFESPAN}.discover_config_files", return_value=[config_file]),
            patch(f"{LIFESPAN}.load_hierarchical_config", return_value=raw),
            patch(f"{LIFESPAN}.load_config", return_value=Config(host="yaml.example.org")) as mock_load,
            patch(f"{LIFESPAN}.MediaWikiClient"),
            patch(f"{LIFESPAN}.run_sync", new=AsyncMock(return_value="")),
        ):
            async with server_lifespan():
                pass

        kwargs = mock_load.call_args[1]
        assert kwargs["yaml_fallbacks"]["host"] == "yaml.example.org"
        assert "cookie_file" not in kwargs["yaml_fallbacks"]
        assert kwargs["cite_fallbacks"]["archive"] is False

    async def test_yaml_logging_section_applied(self, tmp_path):
        raw = {"logging": {"level": "INFO", "file": str(tmp_path / "yaml.log"), "format": "json"}}
        with (
            patch(f"{LIFESPAN}.discover_config_files", return_value=[tmp_path / "config.yml"]),
            patch(f"{LIFESPAN}.load_hierarchical_config", return_value=raw),
            patch(f"{LIFESPAN}.load_config", return_value=Config(host="wiki.example.org")),
            patch(f"{LIFESPAN}.MediaWikiClient"),
            patch(f"{LIFESPAN}.run_sync", new=AsyncMock(return_value="")),
            patch(f"{LIFESPAN}.setup_logging") as mock_setup,
        ):
            async with server_lifespan():
                pass

        mock_setup.assert_called_once_with(
            debug=False,
            log_file=str(tmp_path / "yaml.log"),
            level="INFO",
            debug_format="json",
        )

    async def test_cli_log_file_beats_yaml(self, tmp_path):
        raw = {"logging": {"file": str(tmp_path / "yaml.log")}}
        with (
            patch(f"{LIFESPAN}.discover_config_files", return_value=[tmp_path / "config.yml"]),
            patch(f"{LIFESPAN}.load_hierarchical_config", return_value=raw),
            patch(f"{LIFESPAN}.load_config", return_value=Config(host="wiki.example.org", debug=True)),
            patch(f"{LIFESPAN}.MediaWikiClient"),
            patch(f"{LIFESPAN}.run_sync", new=AsyncMock(return_value="")),
            patch(f"{LIFESPAN}.setup_logging") as mock_setup,
        ):
            async with server_lifespan(log_file="/var/log/cli.log"):
                pass

        kwargs = mock_setup.call_args[1]
        assert kwargs["log_file"] == "/var/log/cli.log"
        assert kwargs["debug"] is True
        assert kwargs["level"] is None
        assert kwargs["debug_format"] == "text"

    async def test_config_error(self, capsys):
        with patch(f"{LIFESPAN}.load_config", side_effect=ValueError("Wiki host not found.")):
            with pytest.raises(RuntimeError, match="Configuration error"):
                async with server_lifespan():
                    pass
        assert "ERROR: Configuration error" in capsys.readouterr().err

    async def test_connection_failure(self, capsys):
        with (
            patch(f"{LIFESPAN}.load_config", return_value=Config(host="wiki.example.org")),
            patch(f"{LIFESPAN}.MediaWikiClient"),
            patch(f"{LIFESPAN}.run_sync", new=AsyncMock(side_effect=OSError("unreachable"))),
        ):
            with pytest.raises(RuntimeError, match="Wiki connection failed"):
                async with server_lifespan():
                    pass
        assert "ERROR: Wiki connection failed." in capsys.readouterr().err


class TestBuildParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.host is None
        assert args.read_only is False
        assert args.log_file is None
        assert args.init_config is False

    def test_flags(self):
        args = build_parser().parse_args(
            ["--host", "en.wikipedia.org", "--cookie-file", "/c.txt", "--insecure", "--read-only", "--debug"]
        )
        assert args.host == "en.wikipedia.org"
        assert args.cookie_file == "/c.txt"
        assert args.insecure is True
        assert args.read_only is True
        assert args.debug is True

    def test_init_config_writes_and_exits(self, tmp_path, capsys):
        target = tmp_path / ".wikitext_sync" / "config.yml"
        with (
            patch.object(sys, "argv", ["wikitext-sync-mcp", "--init-config"]),
            patch("wikitext_sync.mcp.server.ensure_config", return_value=target) as mock_ensure,
            patch("wikitext_sync.mcp.server.asyncio.run") as mock_run,
        ):
            run()

        mock_ensure.assert_called_once_with()
        mock_run.assert_not_called()
        assert f"Config file: {target}" in capsys.readouterr().err
