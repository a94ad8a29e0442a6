"""View Engine: render documents and pages to HTML through the wiki.

- ``preview`` parses the document's text (header stripped) as the page
  its header records, without saving anything.
- ``diff`` compares the document's text with the page's latest revision.
- ``view_page`` parses a page as it is currently saved.

The wiki does all the rendering; this module builds the requests and
wraps the returned fragments into a standalone HTML page whose
``<base href>`` is the wiki's article path, so relative links resolve.
Failures are reported through the host and returned as
``SyncKind.ERROR``; they are never raised to the caller.
"""

from __future__ import annotations

import html
import logging

from ..i18n import i18n
from .errors import NoTitleGiven, describe_error, error_kind
from .host import EditorHost, Transport
from .metadata import extract, suggest_title
from .models import PageInfo, PullOptions, SyncKind, SyncResult
from .responses import ParseInfo, ParseResult, ReadPageResult, convert

logger = logging.getLogger(__name__)

VIEW_PROPS = ("text", "displaytitle", "categorieshtml")

_LOADER_SCRIPT = (
    "<script>(window.RLQ = window.RLQ || []).push(function () { "
    "mw.loader.load(['site', 'mediawiki.page.startup', 'mediawiki.page.ready']); "
    "});</script>"
)

_DIFF_COLUMNS = (
    '<colgroup><col class="diff-marker"><col class="diff-content">'
    '<col class="diff-marker"><col class="diff-content"></colgroup>'
)


def _flag(value: bool) -> str:
    return "1" if value else "0"


def load_url(api_url: str) -> str | None:
    """``load.php`` next to *api_url*, or ``None`` if it is not an api.php URL."""
    head, sep, tail = api_url.rpartition("api.php")
    if not sep:
        return None
    return f"{head}load.php{tail}"


def _head(base_href: str, css: str, extra: str = "") -> str:
    base = f'<base href="{html.escape(base_href, quote=True)}" />'
    return f"{base}<style>{css}</style>{extra}"


def render_view_html(parse: ParseInfo, base_href: str, css: str = "") -> str:
    """Wrap an ``action=parse`` result into a full HTML page.

    The wiki's own ``<head>`` is used when it was requested (``headhtml``);
    otherwise a minimal one is written.
    """
    head = _head(base_href, css)
    head_html = parse.headhtml.body if parse.headhtml else None
    if head_html:
        page = head_html.replace("<head>", "<head>" + head, 1)
    else:
        page = f"<!DOCTYPE html><html><head>{head}</head><body>"

    text = parse.text.body if parse.text else None
    if text:
        page += f'<div id="mw-content-text">{text}</div>'
    page += (parse.categorieshtml.body if parse.categorieshtml else None) or ""
    return page + _LOADER_SCRIPT + "</body></html>"


def render_diff_html(
    diff: str | None,
    base_href: str,
    css: str = "",
    styles_url: str | None = None,
) -> str:
    """Wrap the table rows of a revision diff into a full HTML page."""
    link = ""
    if styles_url:
        href = f"{styles_url}?modules=mediawiki.diff.styles&only=styles"
        link = f'<link rel="stylesheet" href="{html.escape(href, quote=True)}" />'
    page = f"<!DOCTYPE html><html><head>{_head(base_href, css, link)}</head><body>"
    if diff:
        page += (
            '<div id="mw-content-text"><table class="diff">'
            f"{_DIFF_COLUMNS}<tbody>{diff}</tbody></table></div>"
        )
    return page + "</body></html>"


class ViewEngine:
    """Renders through *transport* on behalf of *host*.

    Args:
        transport: Action-API handle. Callers must not run two engines
            against the same handle concurrently.
        host: Editor collaborator for the active document and messages.
        lang: Language of user-visible messages and of the rendered page.
        base_href: Article URL that relative links resolve against.
        css: Extra stylesheet inserted into every rendered page.
        get_css: Also request the wiki's ``<head>`` (skins, scripts).
        styles_url: ``load.php`` URL used to style diffs.
    """

    def __init__(
        self,
        transport: Transport,
        host: EditorHost,
        lang: str | None = None,
        base_href: str = "",
        css: str = "",
        get_css: bool = False,
        styles_url: str | None = None,
    ) -> None:
        self.transport = transport
        self.host = host
        self.lang = lang
        self.base_href = base_href
        self.css = css
        self.get_css = get_css
        self.styles_url = styles_url

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    @property
    def props(self) -> str:
        return "|".join(VIEW_PROPS + (("headhtml",) if self.get_css else ()))

    @property
    def uselang(self) -> str:
        return self.lang or "en"

    def build_preview_request(
        self, text: str, title: str | None, content_model: str | None
    ) -> dict[str, str]:
        params = {
            "action": "parse",
            "text": text,
            "prop": self.props,
            "contentmodel": content_model or "wikitext",
            "pst": "1",
            "disableeditsection": "yes",
            "uselang": self.uselang,
        }
        if title:
            params["title"] = title
        return params

    def build_diff_request(self, text: str, title: str) -> dict[str, str]:
        return {
            "action": "query",
            "prop": "revisions",
            "rvdifftotext": text,
            "rvdifftotextpst": "1",
            "rvprop": "",
            "titles": title,
            "uselang": self.uselang,
        }

    def build_page_request(
        self, title: str, options: PullOptions
    ) -> dict[str, str]:
        return {
            "action": "parse",
            "page": title,
            "prop": self.props,
            "redirects": _flag(options.redirects),
            "converttitles": _flag(options.convert_titles),
            "uselang": self.uselang,
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def preview(
        self, document_text: str | None = None, title: str | None = None
    ) -> SyncResult:
        """Render the document as it would look once pushed.

        The title defaults to the header's ``pageTitle``, then the file
        name; without one the text is still parsed, as an untitled page.
        """
        document = self._document(document_text)
        if document is None:
            return SyncResult.error("no_document", "No active document")
        content, info, suggested = document
        title = title or suggested
        params = self.build_preview_request(
            content, title, info.content_model if info else None
        )
        return self._parse(params, title, info)

    def view_page(
        self, title: str, options: PullOptions | None = None
    ) -> SyncResult:
        """Render the saved page *title*."""
        options = options or PullOptions()
        return self._parse(self.build_page_request(title, options), title)

    def diff(
        self, document_text: str | None = None, title: str | None = None
    ) -> SyncResult:
        """Compare the document with the latest revision of its page.

        Returns ``NO_CHANGE`` when the wiki reports no differences and
        ``MISSING`` (after a warning) when the page does not exist.
        """
        document = self._document(document_text)
        if document is None:
            return SyncResult.error("no_document", "No active document")
        content, info, suggested = document
        title = title or suggested
        if not title:
            error = NoTitleGiven()
            self.host.show_warning(i18n("error-no-title-given", self.lang))
            return SyncResult.error(error_kind(error), str(error))

        with self.host.status(i18n("wikitext-preview", self.lang)):
            try:
                payload = self.transport.request(
                    self.build_diff_request(content, title)
                )
                result = convert(ReadPageResult, payload, "rvdifftotext")
                return self._handle_diff(result, title, info)
            except Exception as e:
                return self._fail(e, title)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _document(
        self, document_text: str | None
    ) -> tuple[str, PageInfo | None, str | None] | None:
        text = document_text if document_text is not None else self.host.get_text()
        if text is None:
            self.host.show_warning(i18n("error-no-active-editor", self.lang))
            return None
        content, info = extract(text)
        return content, info, suggest_title(info, self.host.get_file_name())

    def _parse(
        self,
        params: dict[str, str],
        title: str | None,
        info: PageInfo | None = None,
    ) -> SyncResult:
        with self.host.status(i18n("wikitext-preview", self.lang)):
            try:
                payload = self.transport.request(params)
                parse = convert(ParseResult, payload, "action=parse").parse
                if parse is None:
                    logger.warning("Parse of %r returned no parse object", title)
                    return SyncResult.error(
                        "malformed", "Response contained no parse result", title=title
                    )
                logger.debug("Rendered %r (%s)", parse.title, params["action"])
                return SyncResult(
                    kind=SyncKind.SUCCESS,
                    title=parse.title or title,
                    display_title=parse.displaytitle,
                    content=render_view_html(parse, self.base_href, self.css),
                    info=info,
                )
            except Exception as e:
                return self._fail(e, title)

    def _handle_diff(
        self, result: ReadPageResult, title: str, info: PageInfo | None
    ) -> SyncResult:
        page = result.first_page
        if page is None:
            logger.warning("Diff query for %r returned no page", title)
            return SyncResult.error(
                "malformed", "Response contained no page", title=title
            )
        page_title = page.title or title
        if page.is_missing or page.is_invalid:
            self.host.show_warning(
                i18n(
                    "error-nonexist",
                    self.lang,
                    page_title,
                    page.invalidreason or "",
                )
            )
            return SyncResult.missing(page_title, page.invalidreason)

        revision = page.first_revision
        if revision is None:
            return SyncResult.error(
                "malformed", "Response contained no revision", title=page_title
            )
        diff = revision.diff.body if revision.diff else None
        logger.debug("Diff of %r: %d chars", page_title, len(diff or ""))
        return SyncResult(
            kind=SyncKind.SUCCESS if diff else SyncKind.NO_CHANGE,
            title=page_title,
            content=render_diff_html(
                diff, self.base_href, self.css, self.styles_url
            ),
            info=info,
        )

    def _fail(self, error: Exception, title: str | None) -> SyncResult:
        logger.error("View of %r failed: %s", title, error)
        self.host.show_error(i18n("error", self.lang, describe_error(error)))
        return SyncResult.error(error_kind(error), describe_error(error), title=title)
