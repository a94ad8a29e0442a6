"""Unified configuration schema for wikitext_sync.

Defines Pydantic models for the YAML config structure with dedicated
sections for the wiki connection, web citations and logging, plus
the builder used by the server lifespan.  The ``wiki`` and ``cite``
sections become fallbacks for ``config.load_config()``; ``logging`` is
applied directly with ``logger.setup_logging()``.

Usage:
    from wikitext_sync.config_schema import UnifiedConfig, build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class WikiConfig(BaseModel):
    """Wiki connection and sync behaviour.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    host: str | None = Field(
        default=None, description="Wiki host, e.g. en.wikipedia.org"
    )
    transfer_protocol: Literal["http://", "https://"] = "https://"
    api_path: str = Field(default="/w/api.php", pattern=r"^/")
    article_path: str = "/wiki/"
    user_agent: str | None = None
    cookie_file: str | None = Field(
        default=None,
        description="Mozilla cookie jar holding a logged-in session",
    )
    insecure: bool = Field(
        default=False,
        description="Disable SSL verification (development only)",
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    timeout: float = Field(default=60.0, gt=0)
    language: str = Field(default="en", description="Message language")
    redirects: bool = True
    convert_titles: bool = False
    skip_title_prompt: bool = False
    edit_tag: str = "WikitextExtensionForVSCode"
    max_tag_pages: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Maximum list=tags pages fetched per push (1-10000)",
    )
    get_css: bool = Field(
        default=False,
        description="Request the wiki's <head> (styles, scripts) with previews",
    )
    preview_css: str = Field(
        default="", description="Extra CSS added to rendered previews"
    )

    model_config = {"frozen": True}


class CiteConfig(BaseModel):
    """Web citation settings.

    Selectors are XPath expressions, optionally suffixed with ``|attr``
    to read an attribute instead of the element text.
    """

    format: str | None = Field(
        default=None, description="Citation template with {$arg} slots"
    )
    archive: bool = Field(
        default=True, description="Look up a Wayback Machine snapshot"
    )
    author_selectors: list[str] = Field(default_factory=list)
    title_selectors: list[str] = Field(default_factory=list)
    date_selectors: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration, applied by the server lifespan.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            ``LOG_LEVEL`` wins when set; unset means WARNING.
        file: Log file path, used when ``--log-file`` is not given.
        format: "text" or "json" (one JSON object per record).
    """

    level: str | None = Field(default=None, description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: Literal["text", "json"] = Field(
        default="text", description="Record format"
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has defaults, so ``UnifiedConfig()`` is always valid.
    """

    wiki: WikiConfig = Field(default_factory=WikiConfig)
    cite: CiteConfig = Field(default_factory=CiteConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the merged raw dict.

    Missing sections get defaults.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
