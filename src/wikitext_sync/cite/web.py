"""
Citation metadata extraction from arbitrary web pages.

Fetches a page, guesses its title, author, site name, publication date
and language from common markup conventions, optionally asks the Wayback
Machine for an archived copy, and renders everything into a citation
template such as ``{{cite web|url={$url}<!title>|title={$title}</!title>}}``.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from email.utils import parsedate_to_datetime

import requests
from charset_normalizer import from_bytes
from lxml import html
from pydantic import BaseModel, Field, ValidationError

from ..config import DEFAULT_CITE_FORMAT, Config
from ..i18n import i18n
from ..sync.errors import TransportError, describe_error
from ..sync.host import EditorHost

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
ARCHIVE_API_URL = "https://archive.org/wayback/available"

_META_CHARSET_RE = re.compile(
    rb"""<meta[^>]+charset\s*=\s*["']?([A-Za-z0-9_.:-]+)""", re.IGNORECASE
)
_HEADER_CHARSET_RE = re.compile(r"charset=([^\s;]+)", re.IGNORECASE)
_XML_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>")
_WHITESPACE_RE = re.compile(r"\s+")


def _class_xpath(name: str) -> str:
    return f"//*[contains(concat(' ', normalize-space(@class), ' '), ' {name} ')]"


# ---------------------------------------------------------------------------
# Wayback Machine availability response
# ---------------------------------------------------------------------------


class _Snapshot(BaseModel):
    url: str
    timestamp: str
    available: bool = True


class _Snapshots(BaseModel):
    closest: _Snapshot | None = None


class _ArchiveResult(BaseModel):
    archived_snapshots: _Snapshots = Field(default_factory=_Snapshots)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def declared_charset(raw: bytes, content_type: str | None) -> str | None:
    """Charset named by a ``<meta>`` tag, else by the Content-Type header."""
    match = _META_CHARSET_RE.search(raw[:4096])
    if match:
        return match.group(1).decode("ascii")
    if content_type:
        header = _HEADER_CHARSET_RE.search(content_type)
        if header:
            return header.group(1).strip("\"'")
    return None


def decode_html(raw: bytes, content_type: str | None = None) -> str:
    """Decode a page body, trusting the declared charset when it works."""
    charset = declared_charset(raw, content_type)
    if charset:
        try:
            return raw.decode(charset)
        except (LookupError, UnicodeDecodeError):
            logger.debug("Declared charset %s does not decode; detecting", charset)

    best = from_bytes(raw).best()
    if best is None:
        return raw.decode("utf-8", errors="replace")
    return str(best)


def normalize_date(value: str) -> str:
    """Reduce an ISO 8601 or RFC 2822 timestamp to ``YYYY-MM-DD``.

    Unrecognized values are returned unchanged.
    """
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(text).date().isoformat()
    except (TypeError, ValueError):
        logger.warning("Unrecognized date format: %r", value)
        return text


# ---------------------------------------------------------------------------
# Templating
# ---------------------------------------------------------------------------


def replace_argument(
    template: str,
    arg: str,
    value: str | None,
    language: str | None = None,
) -> str:
    """Fill ``{$arg}`` in *template*.

    With a value, ``<!arg>`` / ``</!arg>`` markers are removed and their
    content kept; without one, everything between the markers is dropped.
    ``|`` in values becomes ``&#124;``.  A Japanese title is written as
    ``script-title=ja:...``.
    """
    placeholder = re.compile(r"\{\$" + re.escape(arg) + r"\}")
    name = re.escape(arg)
    cleaned = value.strip().replace("|", "&#124;") if value else ""

    if not cleaned:
        template = re.sub(rf"<!{name}>[\s\S]*?</!{name}>", "", template)
        return placeholder.sub("", template)

    template = re.sub(rf"</?!{name}>", "", template)
    if arg == "title" and language and language.lower().split("-")[0] == "ja":
        template = re.sub(r"(\|\s*)title(?=\s*=)", r"\1script-title", template)
        cleaned = f"ja:{cleaned}"
    return placeholder.sub(lambda _: cleaned, template)


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class WebCiteInfo:
    """Citation fields of one web page.

    Call ``build()`` to fetch and extract, then ``render()``.

    Args:
        url: Page to cite.
        config: Supplies the XPath selectors and the archive switch.
        session: HTTP session to use; a fresh one by default.
    """

    def __init__(
        self,
        url: str,
        config: Config | None = None,
        session: requests.Session | None = None,
    ):
        self.url = url.strip()
        self.config = config
        self.session = session or requests.Session()
        self.access_date = date.today().isoformat()
        self.title: str | None = None
        self.author: str | None = None
        self.site_name: str | None = None
        self.publish_date: str | None = None
        self.language: str | None = None
        self.archived_url: str | None = None
        self.archived_date: str | None = None
        self._tree: html.HtmlElement | None = None

    def build(self) -> WebCiteInfo:
        """Fetch the page (and archive) and fill in every field.

        Raises:
            TransportError: If the page cannot be fetched or parsed.
        """
        self._tree = self._fetch_page()
        if self.config is None or self.config.cite_archive:
            self._fetch_archive()

        cfg = self.config
        self.title = self._find_title(cfg.cite_title_selectors if cfg else [])
        self.publish_date = self._find_date(cfg.cite_date_selectors if cfg else [])
        self.site_name = self._find_site_name()
        self.author = self._find_author(cfg.cite_author_selectors if cfg else [])
        self.language = (
            self._attr("//html", "lang")
            or self._attr("//body", "lang")
            or self._attr("//article", "lang")
        )
        logger.debug("Cite fields for %s: %s", self.url, self.arguments())
        return self

    def arguments(self) -> dict[str, str | None]:
        return {
            "url": self.url,
            "author": self.author,
            "title": self.title,
            "accessdate": self.access_date,
            "website": self.site_name,
            "publicationdate": self.publish_date,
            "archiveurl": self.archived_url,
            "archivedate": self.archived_date,
            "language": self.language,
        }

    def render(self, template: str | None = None) -> str:
        """Fill every argument of *template* (default ``{{cite web}}``)."""
        result = template or DEFAULT_CITE_FORMAT
        for arg, value in self.arguments().items():
            language = self.language if arg == "title" else None
            result = replace_argument(result, arg, value, language)
        return result

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _fetch_page(self) -> html.HtmlElement:
        try:
            response = self.session.get(
                self.url,
                headers={"User-Agent": BROWSER_USER_AGENT},
                timeout=(10, 30),
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"Failed to fetch {self.url}: {e}") from e

        text = decode_html(response.content, response.headers.get("content-type"))
        text = _XML_DECLARATION_RE.sub("", text, count=1)
        if not text.strip():
            raise TransportError(f"Empty document at {self.url}")
        return html.fromstring(text)

    def _fetch_archive(self) -> None:
        try:
            response = self.session.get(
                ARCHIVE_API_URL, params={"url": self.url}, timeout=(10, 30)
            )
            response.raise_for_status()
            result = _ArchiveResult.model_validate(response.json())
        except (requests.RequestException, ValueError, ValidationError) as e:
            logger.warning("Wayback lookup for %s failed: %s", self.url, e)
            return

        closest = result.archived_snapshots.closest
        if closest is None or not closest.available:
            return
        self.archived_url = re.sub(r"^http://", "https://", closest.url)
        try:
            self.archived_date = (
                datetime.strptime(closest.timestamp[:8], "%Y%m%d").date().isoformat()
            )
        except ValueError:
            logger.warning("Bad Wayback timestamp %r", closest.timestamp)

    # ------------------------------------------------------------------
    # Field heuristics
    # ------------------------------------------------------------------

    def _find_title(self, selectors: list[str]) -> str | None:
        direct = (
            self._from_selectors(selectors)
            or self._attr("//meta[@property='og:title']")
            or self._attr("//meta[@property='twitter:title' or @name='twitter:title']")
            or self._text("//h1")
        )
        if direct:
            return direct
        page_title = self._text("//title")
        if not page_title:
            return None
        return page_title.split("|")[0].split(" - ")[0].strip() or None

    def _find_date(self, selectors: list[str]) -> str | None:
        raw = (
            self._from_selectors(selectors)
            or self._attr("//meta[@property='article:published_time']")
            or self._attr("//time", "datetime")
        )
        return normalize_date(raw) if raw else None

    def _find_site_name(self) -> str | None:
        name = self._attr("//meta[@property='og:site_name']") or self._attr(
            "//meta[@property='twitter:site' or @name='twitter:site']"
        )
        if name:
            return name
        page_title = self._text("//title")
        if not page_title:
            return None
        for separator in ("|", " - "):
            if separator in page_title:
                return page_title.split(separator)[-1].strip() or None
        return None

    def _find_author(self, selectors: list[str]) -> str | None:
        return (
            self._from_selectors(selectors)
            or self._text(_class_xpath("author-name"))
            or self._text(_class_xpath("author"))
        )

    # ------------------------------------------------------------------
    # XPath helpers
    # ------------------------------------------------------------------

    def _first(self, xpath: str):
        if self._tree is None:
            return None
        found = self._tree.xpath(xpath)
        if isinstance(found, list):
            return found[0] if found else None
        return found

    def _text(self, xpath: str) -> str | None:
        node = self._first(xpath)
        if node is None:
            return None
        text = node if isinstance(node, str) else node.text_content()
        return _WHITESPACE_RE.sub(" ", text).strip() or None

    def _attr(self, xpath: str, attr: str = "content") -> str | None:
        node = self._first(xpath)
        if node is None or isinstance(node, str):
            return None
        return (node.get(attr) or "").strip() or None

    def _from_selectors(self, selectors: list[str]) -> str | None:
        """First non-empty match of ``xpath`` or ``xpath|attribute`` selectors."""
        for selector in selectors:
            xpath, _, attr = selector.partition("|")
            value = self._attr(xpath, attr) if attr else self._text(xpath)
            if value:
                return value
        return None


def add_web_cite(
    host: EditorHost,
    config: Config,
    session: requests.Session | None = None,
) -> str | None:
    """Ask for a URL and insert its citation at the host's selection.

    Returns:
        The inserted citation, or ``None`` if cancelled or failed.
    """
    lang = config.language
    url = host.show_input(
        i18n("enter-url-to-ref", lang), placeholder="https://sample.com"
    )
    if not url:
        return None

    with host.status(i18n("wikitext-cite", lang)):
        try:
            info = WebCiteInfo(url, config, session).build()
            citation = info.render(config.cite_format)
        except Exception as e:
            logger.error("Citation for %s failed: %s", url, e)
            host.show_error(i18n("error", lang, describe_error(e)))
            return None

    host.insert_at_selection(citation)
    return citation
