"""Lifespan management for MCP server startup and shutdown."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv

from ..config import load_config
from ..config_loader import (
    discover_config_files,
    load_hierarchical_config,
)
from ..config_schema import UnifiedConfig, build_config
from ..core.async_utils import init_session_lock, run_sync
from ..core.client import MediaWikiClient
from ..logger import setup_logging

logger = logging.getLogger(__name__)

_HINT = "Check WIKITEXT_HOST, WIKITEXT_API_PATH and WIKITEXT_COOKIE_FILE."


def _stderr_print(msg: str) -> None:
    """Print message to stderr for user feedback (safe in MCP mode)."""
    print(msg, file=sys.stderr, flush=True)


def _non_none(section: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in section.items() if v is not None}


@asynccontextmanager
async def server_lifespan(
    config_overrides: dict[str, Any] | None = None,
    log_file: str | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """
    Manage server startup and shutdown.

    On startup: load .env, then YAML config (as fallbacks), resolve the
    final ``Config`` (CLI > env > .env > YAML > defaults), re-apply logging
    from the YAML ``logging`` section, create the ``MediaWikiClient`` and
    query ``meta=siteinfo``.  Startup fails fast when the wiki is
    unreachable.

    Args:
        config_overrides: CLI values (host, cookie_file, insecure, debug).
        log_file: ``--log-file`` value; wins over ``logging.file``.

    Yields:
        Dict with a 'client' key holding the MediaWikiClient.

    Raises:
        RuntimeError: If configuration is invalid or the wiki is unreachable.
    """
    logger.info("MCP server starting...")
    _stderr_print("Wikitext Sync MCP Server starting...")

    try:
        # .env first so YAML ${VAR} references can see its values
        load_dotenv()

        wiki_fallbacks: dict[str, Any] | None = None
        cite_fallbacks: dict[str, Any] | None = None
        unified = UnifiedConfig()
        sources = []
        config_files = discover_config_files()
        if config_files:
            unified = build_config(load_hierarchical_config())
            wiki_fallbacks = _non_none(unified.wiki.model_dump())
            cite_fallbacks = _non_none(unified.cite.model_dump())
            sources.append(f"config file: {config_files[0]}")

        overrides = config_overrides or {}
        config = load_config(
            host=overrides.get("host"),
            cookie_file=overrides.get("cookie_file"),
            insecure=overrides.get("insecure", False),
            debug=overrides.get("debug", False),
            yaml_fallbacks=wiki_fallbacks,
            cite_fallbacks=cite_fallbacks,
        )

        setup_logging(
            debug=config.debug,
            log_file=log_file or unified.logging.file,
            level=unified.logging.level,
            debug_format=unified.logging.format,
        )

        if overrides:
            sources.append("CLI arguments")
        sources.append("environment variables")
        source_desc = ", ".join(sources)
        logger.info("Configuration loaded from: %s", source_desc)
        _stderr_print(f"  Configuration loaded from: {source_desc}")
        logger.info("API URL: %s", config.api_url)
        _stderr_print(f"  API URL: {config.api_url}")
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        _stderr_print(f"ERROR: Configuration error: {e}")
        raise RuntimeError(f"Configuration error: {e}. {_HINT}") from e

    _stderr_print("  Probing wiki...")
    try:
        client = MediaWikiClient(config)
        generator = await run_sync(client.validate_connection)
        logger.info("Connected to %s (%s)", config.host, generator)
        _stderr_print(f"  Connected: {generator or 'unknown generator'}")
        init_session_lock()
        _stderr_print("Server ready. Waiting for MCP client connection...")
    except Exception as e:
        logger.error("Failed to reach wiki: %s", e)
        _stderr_print("ERROR: Wiki connection failed.")
        _stderr_print(f"  {e}")
        raise RuntimeError(f"Wiki connection failed: {e}. {_HINT}") from e

    yield {"client": client}

    logger.info("MCP server shutting down")
    _stderr_print("Wikitext Sync MCP Server shutting down.")
