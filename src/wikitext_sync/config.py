"""Configuration for wiki access, sync behaviour and web citations.

Reads settings from CLI args, environment variables, .env files, and YAML
config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    WIKITEXT_HOST: Wiki host name, e.g. en.wikipedia.org (required)
    WIKITEXT_PROTOCOL: Transfer protocol (optional, default: https://)
    WIKITEXT_API_PATH: Path of api.php (optional, default: /w/api.php)
    WIKITEXT_COOKIE_FILE: Mozilla cookie jar of a logged-in session (optional)
    WIKITEXT_INSECURE: Skip SSL verification (optional, default: false)
    WIKITEXT_DEBUG: Enable debug logging (optional, default: false)
    WIKITEXT_LANGUAGE: Message language, en or zh-cn (optional, default: en)
    WIKITEXT_REDIRECTS: Follow redirects when pulling (optional, default: true)
    WIKITEXT_CONVERT_TITLES: Convert titles to other variants (optional, default: false)
    WIKITEXT_SKIP_TITLE_PROMPT: Push under the recorded title without asking (optional, default: false)
    WIKITEXT_MAX_TAG_PAGES: Max list=tags pages fetched per push (optional, default: 100)
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "wikitext-sync (+https://github.com/wikitext-sync)"

DEFAULT_CITE_FORMAT = (
    "{{cite web"
    "<!url>|url={$url}</!url>"
    "<!title>|title={$title}</!title>"
    "<!author>|author={$author}</!author>"
    "<!accessdate>|access-date={$accessdate}</!accessdate>"
    "<!website>|website={$website}</!website>"
    "<!publicationdate>|publication-date={$publicationdate}</!publicationdate>"
    "<!archiveurl>|archive-url={$archiveurl}</!archiveurl>"
    "<!archivedate>|archive-date={$archivedate}</!archivedate>"
    "<!language>|language={$language}</!language>"
    "}}"
)

_PROTOCOLS = ("http://", "https://")


@dataclass
class Config:
    host: str
    transfer_protocol: str = "https://"
    api_path: str = "/w/api.php"
    article_path: str = "/wiki/"
    user_agent: str = DEFAULT_USER_AGENT
    cookie_file: str | None = None
    insecure: bool = False
    debug: bool = False
    timeout: float = 60.0
    language: str = "en"
    redirects: bool = True
    convert_titles: bool = False
    skip_title_prompt: bool = False
    edit_tag: str = "WikitextExtensionForVSCode"
    max_tag_pages: int = 100
    get_css: bool = False
    preview_css: str = ""
    cite_format: str = DEFAULT_CITE_FORMAT
    cite_archive: bool = True
    cite_author_selectors: list[str] = field(default_factory=list)
    cite_title_selectors: list[str] = field(default_factory=list)
    cite_date_selectors: list[str] = field(default_factory=list)

    @property
    def api_url(self) -> str:
        return f"{self.transfer_protocol}{self.host}{self.api_path}"

    @property
    def article_url(self) -> str:
        """Base URL of article links, used as the base of rendered HTML."""
        return f"{self.transfer_protocol}{self.host}{self.article_path}"


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If the host is empty, the protocol is not http(s), the
            API path is relative, or ``max_tag_pages`` is below 1.
    """
    # Accept "https://en.wikipedia.org/" as a host and split off the scheme
    config.host = config.host.strip()
    for protocol in _PROTOCOLS:
        if config.host.startswith(protocol):
            config.transfer_protocol = protocol
            config.host = config.host.removeprefix(protocol)
    config.host = config.host.removesuffix("/")

    if not config.host:
        raise ValueError(
            "Wiki host cannot be empty. Set WIKITEXT_HOST environment variable."
        )

    if config.transfer_protocol not in _PROTOCOLS:
        raise ValueError(
            f"Invalid transfer protocol '{config.transfer_protocol}': "
            "must be http:// or https://"
        )

    if not config.api_path.startswith("/"):
        raise ValueError(
            f"Invalid API path '{config.api_path}': must start with /"
        )

    if config.max_tag_pages < 1:
        raise ValueError(
            f"Invalid max_tag_pages {config.max_tag_pages}: must be at least 1"
        )

    if config.insecure:
        logger.warning(
            "WARNING: SSL verification disabled (insecure=True). Use only for development."
        )


def get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def _resolve_bool(cli: bool, env_key: str, fb: dict, key: str, default: bool) -> bool:
    if cli:
        return True
    env_value = get_bool_env(env_key)
    if env_value is not None:
        return env_value
    return bool(fb.get(key, default))


def load_config(
    host: str | None = None,
    cookie_file: str | None = None,
    insecure: bool = False,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
    cite_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        host: Override wiki host (takes precedence over env var and YAML).
        cookie_file: Override cookie jar path.
        insecure: Skip SSL verification (CLI flag).
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Dict of values from the YAML ``wiki`` section.
        cite_fallbacks: Dict of values from the YAML ``cite`` section.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If no host is configured or a value is invalid.
    """
    fb = yaml_fallbacks or {}
    cite = cite_fallbacks or {}

    # --- String fields: CLI > env > YAML > default ---

    wiki_host = host or os.getenv("WIKITEXT_HOST") or fb.get("host")
    if not wiki_host:
        raise ValueError(
            "Wiki host not found. Set WIKITEXT_HOST environment variable, "
            "pass --host CLI argument, or add 'host' to config.yml."
        )

    protocol = (
        os.getenv("WIKITEXT_PROTOCOL")
        or fb.get("transfer_protocol")
        or "https://"
    )
    api_path = os.getenv("WIKITEXT_API_PATH") or fb.get("api_path") or "/w/api.php"
    jar = cookie_file or os.getenv("WIKITEXT_COOKIE_FILE") or fb.get("cookie_file")
    language = os.getenv("WIKITEXT_LANGUAGE") or fb.get("language") or "en"

    # --- Boolean fields: CLI > env > YAML > default ---

    final_insecure = _resolve_bool(insecure, "WIKITEXT_INSECURE", fb, "insecure", False)
    final_debug = _resolve_bool(debug, "WIKITEXT_DEBUG", fb, "debug", False)
    final_redirects = _resolve_bool(False, "WIKITEXT_REDIRECTS", fb, "redirects", True)
    final_convert = _resolve_bool(
        False, "WIKITEXT_CONVERT_TITLES", fb, "convert_titles", False
    )
    final_skip = _resolve_bool(
        False, "WIKITEXT_SKIP_TITLE_PROMPT", fb, "skip_title_prompt", False
    )

    # --- Numeric fields: env > YAML > default ---

    max_pages_raw = os.getenv("WIKITEXT_MAX_TAG_PAGES")
    if max_pages_raw is not None:
        try:
            final_max_pages = int(max_pages_raw)
        except ValueError:
            raise ValueError(
                f"Invalid WIKITEXT_MAX_TAG_PAGES '{max_pages_raw}': must be a positive number"
            ) from None
    elif "max_tag_pages" in fb:
        final_max_pages = int(fb["max_tag_pages"])
    else:
        final_max_pages = 100

    config = Config(
        host=wiki_host,
        transfer_protocol=protocol,
        api_path=api_path,
        article_path=fb.get("article_path") or "/wiki/",
        user_agent=fb.get("user_agent") or DEFAULT_USER_AGENT,
        cookie_file=jar,
        insecure=final_insecure,
        debug=final_debug,
        timeout=float(fb.get("timeout", 60.0)),
        language=language,
        redirects=final_redirects,
        convert_titles=final_convert,
        skip_title_prompt=final_skip,
        edit_tag=fb.get("edit_tag") or "WikitextExtensionForVSCode",
        max_tag_pages=final_max_pages,
        get_css=bool(fb.get("get_css", False)),
        preview_css=fb.get("preview_css") or "",
        cite_format=cite.get("format") or DEFAULT_CITE_FORMAT,
        cite_archive=bool(cite.get("archive", True)),
        cite_author_selectors=list(cite.get("author_selectors") or []),
        cite_title_selectors=list(cite.get("title_selectors") or []),
        cite_date_selectors=list(cite.get("date_selectors") or []),
    )

    validate_config(config)

    return config
