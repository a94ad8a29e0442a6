"""Push Engine: submit a document as a new revision of a page."""

from __future__ import annotations

import logging
from typing import Any

from ..i18n import i18n
from .errors import (
    NoTitleGiven,
    TokenAcquisitionError,
    describe_error,
    error_kind,
)
from .host import EditorHost, Transport
from .metadata import extract, suggest_title
from .models import (
    EditReport,
    EditToken,
    PageInfo,
    PushOptions,
    SyncKind,
    SyncResult,
)
from .responses import EditResult, convert, is_set
from .tags import DEFAULT_MAX_PAGES, get_valid_tags
from .tokens import acquire_edit_token

logger = logging.getLogger(__name__)

DEFAULT_EDIT_TAG = "WikitextExtensionForVSCode"


def _str_or_none(value: int | None) -> str | None:
    return None if value is None else str(value)


def classify_edit(payload: Any) -> SyncResult:
    """Turn an ``action=edit`` response into a ``SyncResult``.

    A ``nochange`` marker means the text equalled the current revision.
    A ``result`` other than ``Success`` (captcha, abuse filter) is an
    error.

    Raises:
        MalformedResponseError: If the response has no ``edit`` object.
    """
    edit = convert(EditResult, payload, "action=edit").edit
    report = EditReport(
        title=edit.title,
        page_id=_str_or_none(edit.pageid),
        result=edit.result,
        content_model=edit.contentmodel,
        watched=is_set(edit.watched),
        old_revid=_str_or_none(edit.oldrevid),
        new_revid=_str_or_none(edit.newrevid),
        new_timestamp=edit.newtimestamp,
    )
    if is_set(edit.nochange):
        return SyncResult.no_change(report)
    if edit.result is not None and edit.result != "Success":
        return SyncResult.error(
            "edit_failed", f"Edit result: {edit.result}", title=edit.title
        )
    return SyncResult(
        kind=SyncKind.SUCCESS,
        title=edit.title,
        edit=report,
    )


class PushEngine:
    """Submits documents through *transport* on behalf of *host*.

    Args:
        transport: Authenticated action-API handle. Callers must not run
            two engines against the same handle concurrently.
        host: Editor collaborator for prompts and messages.
        lang: Language of user-visible messages.
        edit_tag: Change tag attached to edits when the wiki defines it.
        max_tag_pages: Upper bound on ``list=tags`` pages fetched.
    """

    def __init__(
        self,
        transport: Transport,
        host: EditorHost,
        lang: str | None = None,
        edit_tag: str | None = DEFAULT_EDIT_TAG,
        max_tag_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        self.transport = transport
        self.host = host
        self.lang = lang
        self.edit_tag = edit_tag
        self.max_tag_pages = max_tag_pages

    # ------------------------------------------------------------------
    # Title and summary
    # ------------------------------------------------------------------

    def resolve_title(
        self, info: PageInfo | None, options: PushOptions
    ) -> str | None:
        """Pick the page title to save under.

        The recorded title is used without asking when
        ``skip_title_prompt`` is set.  Otherwise the user confirms a title
        seeded with the recorded one or the file name.
        """
        recorded = info.page_title if info else None
        if options.skip_title_prompt and recorded:
            return recorded
        return self.host.show_input(
            i18n("enter-page-name", self.lang),
            value=suggest_title(info, self.host.get_file_name()),
        )

    def collect_summary(self) -> str:
        suffix = i18n("edit-summary-placeholder", self.lang)
        summary = self.host.show_input(
            i18n("enter-summary", self.lang), value="", placeholder=suffix
        )
        return (summary or "") + suffix.strip()

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def build_edit_request(
        self, title: str, text: str, summary: str, token: EditToken
    ) -> dict[str, str]:
        params = {
            "action": "edit",
            "title": title,
            "text": text,
            "summary": summary,
            "token": token.value,
        }
        if self.edit_tag:
            valid = get_valid_tags(self.transport, self.max_tag_pages)
            if self.edit_tag in valid:
                params["tags"] = self.edit_tag
            else:
                logger.debug("Tag %r not defined on this wiki", self.edit_tag)
        return params

    def push(
        self,
        document_text: str | None = None,
        options: PushOptions | None = None,
    ) -> SyncResult:
        """Strip metadata from the document and save it to the wiki.

        Args:
            document_text: Text to push; defaults to the host's active
                document.
            options: Title prompt behaviour.

        Returns:
            ``SUCCESS`` or ``NO_CHANGE`` with an ``EditReport``, or
            ``ERROR``. Nothing is raised.
        """
        options = options or PushOptions()
        text = document_text if document_text is not None else self.host.get_text()
        if text is None:
            self.host.show_warning(i18n("error-no-active-editor", self.lang))
            return SyncResult.error("no_document", "No active document")

        content, info = extract(text)
        title = self.resolve_title(info, options)
        if not title:
            error = NoTitleGiven()
            self.host.show_warning(i18n("error-no-title-given", self.lang))
            return SyncResult.error(error_kind(error), str(error))

        summary = self.collect_summary()

        token: EditToken | None = None
        with self.host.status(i18n("wikitext-edit", self.lang)):
            try:
                token = acquire_edit_token(self.transport)
                params = self.build_edit_request(title, content, summary, token)
                logger.debug(
                    "Submitting %d chars to %r (tags=%s)",
                    len(content),
                    title,
                    params.get("tags"),
                )
                outcome = classify_edit(self.transport.request(params))
            except TokenAcquisitionError as e:
                logger.error("Push of %r aborted: %s", title, e)
                self.host.show_error(
                    i18n(
                        "error-getting-token",
                        self.lang,
                        e.new_api_error or "",
                        e.legacy_api_error or "",
                    )
                )
                return SyncResult.error(error_kind(e), str(e), title=title)
            except Exception as e:
                logger.error("Push of %r failed: %s", title, e)
                self.host.show_error(
                    i18n(
                        "error-edit",
                        self.lang,
                        describe_error(e),
                        token.value if token else "",
                    )
                )
                return SyncResult.error(
                    error_kind(e), describe_error(e), title=title
                )

        self._report(outcome)
        return outcome

    def _report(self, outcome: SyncResult) -> None:
        edit = outcome.edit
        if edit is None:
            self.host.show_error(i18n("error", self.lang, outcome.detail or ""))
            return

        watched = i18n("true" if edit.watched else "false", self.lang)
        common = (
            edit.title or "",
            edit.page_id or "",
            edit.result or "",
            edit.content_model or "",
            watched,
        )
        if outcome.kind is SyncKind.NO_CHANGE:
            self.host.show_warning(
                i18n("edit-result-nochange", self.lang, *common)
            )
        else:
            self.host.show_information(
                i18n(
                    "edit-result-success",
                    self.lang,
                    *common,
                    edit.old_revid or "",
                    edit.new_revid or "",
                    edit.new_timestamp or "",
                )
            )
