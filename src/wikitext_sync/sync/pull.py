"""Pull Engine: fetch a page's latest revision into a document.

A pull issues one ``prop=revisions`` query, classifies the answer and
either renders the page behind a ``[PAGE_INFO]`` header, offers to start
a new page, or reports why nothing could be fetched.  Failures are
reported through the host and returned as ``SyncKind.ERROR``; they are
never raised to the caller.
"""

from __future__ import annotations

import logging

from ..i18n import i18n
from .errors import UnsupportedContentModel, describe_error, error_kind
from .host import EditorHost, Transport
from .metadata import embed, extract, model_to_language, suggest_title
from .models import PageInfo, PullOptions, SyncResult, VersionTriple
from .responses import Jump, Page, ReadPageResult, convert
from .version import MINIMUM_SUPPORTED, is_at_least

logger = logging.getLogger(__name__)

HEADER_SEPARATOR = "\n\n"


def _flag(value: bool) -> str:
    return "1" if value else "0"


def _str_or_none(value: int | None) -> str | None:
    return None if value is None else str(value)


class PullEngine:
    """Reads pages through *transport* and hands documents to *host*.

    Args:
        transport: Authenticated action-API handle. Callers must not run
            two engines against the same handle concurrently.
        host: Editor collaborator for prompts, documents and messages.
        lang: Language of user-visible messages.
        min_version: Oldest server version pulled without a warning.
    """

    def __init__(
        self,
        transport: Transport,
        host: EditorHost,
        lang: str | None = None,
        min_version: VersionTriple = MINIMUM_SUPPORTED,
    ) -> None:
        self.transport = transport
        self.host = host
        self.lang = lang
        self.min_version = min_version

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def pull(
        self, title: str, options: PullOptions | None = None
    ) -> str | None:
        """Fetch *title* and return the rendered document, if any."""
        return self.run(title, options).content

    def prompt_and_pull(
        self, options: PullOptions | None = None
    ) -> SyncResult | None:
        """Ask for a title, check the server version, then pull.

        When replacing the active document, the prompt is seeded with the
        title recorded in that document or derived from its file name.

        Returns:
            The pull outcome, or ``None`` if the user gave no title.
        """
        options = options or PullOptions()
        default = None
        if options.replace_existing:
            text = self.host.get_text()
            if text is not None:
                default = suggest_title(
                    extract(text).info, self.host.get_file_name()
                )

        title = self.host.show_input(
            i18n("enter-page-name", self.lang), value=default
        )
        if not title:
            return None

        self.warn_if_outdated()
        return self.run(title, options)

    def warn_if_outdated(self) -> bool | None:
        """Warn when the server is older than ``min_version``.

        An unreachable or unparseable version is reported as indeterminate
        and does not stop the pull.
        """
        try:
            newer = is_at_least(self.transport, *self.min_version)
        except Exception as e:
            logger.warning("Version check failed: %s", describe_error(e))
            newer = None

        if newer is None:
            self.host.show_warning(i18n("version-indeterminate", self.lang))
        elif not newer:
            self.host.show_warning(i18n("version-too-old", self.lang))
        return newer

    def run(
        self, title: str, options: PullOptions | None = None
    ) -> SyncResult:
        """Pull *title* and return the classified outcome.

        The status indicator is shown for the whole request and cleared
        on every exit path.
        """
        options = options or PullOptions()
        with self.host.status(i18n("wikitext-raw", self.lang)):
            try:
                payload = self.transport.request(
                    self.build_request(title, options)
                )
                result = convert(ReadPageResult, payload, "prop=revisions")
                return self._handle(result, title, options)
            except Exception as e:
                logger.error("Pull of %r failed: %s", title, e)
                self.host.show_error(self._failure_message(e))
                return SyncResult.error(
                    error_kind(e), describe_error(e), title=title
                )

    # ------------------------------------------------------------------
    # Request and classification
    # ------------------------------------------------------------------

    @staticmethod
    def build_request(title: str, options: PullOptions) -> dict[str, str]:
        return {
            "action": "query",
            "prop": "revisions",
            "rvprop": "content|ids",
            "rvslots": "*",
            "titles": title,
            "redirects": _flag(options.redirects),
            "converttitles": _flag(options.convert_titles),
        }

    def _handle(
        self, result: ReadPageResult, title: str, options: PullOptions
    ) -> SyncResult:
        interwiki = result.first_interwiki
        if interwiki is not None:
            logger.debug("Interwiki title %r -> %r", interwiki.title, interwiki.iw)
            self.host.show_warning(
                i18n(
                    "error-interwiki",
                    self.lang,
                    interwiki.title or "",
                    interwiki.iw or "",
                )
            )

        page = result.first_page
        if page is None:
            if interwiki is not None:
                return SyncResult.interwiki(interwiki.title, interwiki.iw)
            logger.warning("Query for %r returned no page", title)
            return SyncResult.error(
                "malformed", "Response contained no page", title=title
            )

        if page.is_missing or page.is_invalid:
            logger.debug(
                "Page %r missing=%s invalid=%s",
                page.title,
                page.is_missing,
                page.is_invalid,
            )
            return self._offer_creation(page, title, options)

        logger.debug("Page %r found (pageid=%s)", page.title, page.pageid)
        return self._render(page, result, options)

    def _offer_creation(
        self, page: Page, title: str, options: PullOptions
    ) -> SyncResult:
        page_title = page.title or title
        yes = i18n("button-yes", self.lang)
        choice = self.host.show_choice(
            i18n(
                "error-nonexist",
                self.lang,
                page_title,
                page.invalidreason or "",
            ),
            [yes, i18n("button-no", self.lang)],
        )
        if choice != yes:
            return SyncResult.missing(page_title, page.invalidreason)

        info = PageInfo(page_title=page_title)
        content = embed(info, lang=self.lang) + HEADER_SEPARATOR
        self._deliver(content, info, options)
        return SyncResult.missing(
            page_title, page.invalidreason, content=content, info=info
        )

    def _render(
        self, page: Page, result: ReadPageResult, options: PullOptions
    ) -> SyncResult:
        revision = page.first_revision
        slot = revision.main if revision is not None else None
        info = PageInfo(
            page_title=page.title,
            page_id=_str_or_none(page.pageid),
            revision_id=_str_or_none(revision.revid if revision else None),
            content_model=slot.contentmodel if slot else None,
            content_format=slot.contentformat if slot else None,
        )
        body = (slot.content if slot else None) or ""
        content = embed(info, lang=self.lang) + HEADER_SEPARATOR + body
        self._deliver(content, info, options)

        query = result.query
        normalized = query.normalized[0] if query and query.normalized else None
        redirect = query.redirects[0] if query and query.redirects else None
        self.host.show_information(
            i18n(
                "pull-result-success",
                self.lang,
                page.title or "",
                info.content_model or "",
                self._jump_text(normalized),
                self._jump_text(redirect),
            )
        )
        return SyncResult.success(content, info)

    def _deliver(
        self, content: str, info: PageInfo, options: PullOptions
    ) -> None:
        if options.replace_existing and self.host.get_text() is not None:
            self.host.replace_text(content)
        else:
            self.host.open_document(
                content, model_to_language(info.content_model)
            )

    def _jump_text(self, jump: Jump | None) -> str:
        if jump is None:
            return i18n("false", self.lang)
        return i18n("from-to", self.lang, jump.from_ or "", jump.to or "")

    def _failure_message(self, error: Exception) -> str:
        if isinstance(error, UnsupportedContentModel):
            return i18n(
                "error-unsupported-content-model",
                self.lang,
                error.content_model or "",
            )
        return i18n("error", self.lang, describe_error(error))
