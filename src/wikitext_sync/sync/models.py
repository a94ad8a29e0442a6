"""Data contracts for the page sync protocol.

- ``PageInfo``: identity snapshot of a page, embedded in document text.
- ``VersionTriple``: parsed MediaWiki version, ordered lexicographically.
- ``EditToken`` / ``TokenResult``: outcome of edit-token negotiation.
- ``SyncKind`` / ``SyncResult``: classified outcome of a pull, push or view.
- ``PullOptions`` / ``PushOptions``: per-call behaviour switches.

All models are request-scoped values and frozen.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, Field

from .errors import TokenAcquisitionError

# Order in which fields appear in an embedded header.
PAGE_INFO_KEYS = (
    "pageTitle",
    "pageID",
    "revisionID",
    "contentModel",
    "contentFormat",
)


class PageInfo(BaseModel):
    """Identity of a page at the revision a document was pulled from.

    Every field is independently optional.  Field aliases are the keys
    used in the embedded ``[PAGE_INFO]`` block.
    """

    page_title: str | None = Field(default=None, alias="pageTitle")
    page_id: str | None = Field(default=None, alias="pageID")
    revision_id: str | None = Field(default=None, alias="revisionID")
    content_model: str | None = Field(default=None, alias="contentModel")
    content_format: str | None = Field(
        default=None, alias="contentFormat"
    )

    model_config = {"frozen": True, "populate_by_name": True}

    def header_fields(self) -> dict[str, str | None]:
        """Return the fields keyed by header name, in header order."""
        dumped = self.model_dump(by_alias=True)
        return {key: dumped[key] for key in PAGE_INFO_KEYS}


class VersionTriple(NamedTuple):
    major: int
    minor: int
    revision: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.revision}"


class TokenGeneration(str, Enum):
    """API generation that issued an edit token."""

    CSRF = "csrf"
    EDIT = "edit"


@dataclass(frozen=True, slots=True)
class EditToken:
    value: str
    generation: TokenGeneration


@dataclass(frozen=True, slots=True)
class TokenResult:
    """Tagged outcome of token negotiation.

    Exactly one of ``token`` or the error pair is meaningful: ``token`` is
    set on success, otherwise either error message may still be ``None``
    when the failing attempt raised something without a message.
    """

    token: EditToken | None = None
    new_api_error: str | None = None
    legacy_api_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.token is not None

    def unwrap(self) -> EditToken:
        """Return the token or raise ``TokenAcquisitionError``."""
        if self.token is None:
            raise TokenAcquisitionError(
                self.new_api_error, self.legacy_api_error
            )
        return self.token


class SyncKind(str, Enum):
    """Classified outcome of a pull or push."""

    SUCCESS = "success"
    NO_CHANGE = "nochange"
    MISSING = "missing"
    INTERWIKI_REDIRECT = "interwiki"
    ERROR = "error"


class EditReport(BaseModel):
    """Fields of an ``action=edit`` response worth reporting to the user.

    Attributes:
        title: Title the server saved under.
        page_id: Page id as reported by the server.
        result: Server status string (normally ``Success``).
        content_model: Content model of the page after the edit.
        watched: Whether the page is on the user's watchlist.
        old_revid: Revision replaced by this edit (new edits only).
        new_revid: Revision created by this edit (new edits only).
        new_timestamp: Server timestamp of the new revision.
    """

    title: str | None = None
    page_id: str | None = None
    result: str | None = None
    content_model: str | None = None
    watched: bool = False
    old_revid: str | None = None
    new_revid: str | None = None
    new_timestamp: str | None = None

    model_config = {"frozen": True}


class SyncResult(BaseModel):
    """Outcome of a single pull, push, preview, diff or page view.

    Attributes:
        kind: Which branch the operation ended in.
        title: Page title the outcome refers to.
        content: Rendered document (pull), submitted text (push) or HTML
            (preview, diff and page view).
        info: Page identity embedded in ``content``.
        reason: Server explanation for a missing or invalid title.
        target: Interwiki prefix the title resolved to.
        error_kind: Short machine-readable error category.
        detail: Human-readable error detail.
        edit: Edit response summary (push only).
        display_title: Title as the wiki displays it (views only).
    """

    kind: SyncKind
    title: str | None = None
    content: str | None = None
    info: PageInfo | None = None
    reason: str | None = None
    target: str | None = None
    error_kind: str | None = None
    detail: str | None = None
    edit: EditReport | None = None
    display_title: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def success(
        cls,
        content: str | None,
        info: PageInfo | None,
        edit: EditReport | None = None,
    ) -> SyncResult:
        return cls(
            kind=SyncKind.SUCCESS,
            title=info.page_title if info else None,
            content=content,
            info=info,
            edit=edit,
        )

    @classmethod
    def no_change(cls, edit: EditReport) -> SyncResult:
        return cls(kind=SyncKind.NO_CHANGE, title=edit.title, edit=edit)

    @classmethod
    def missing(
        cls,
        title: str | None,
        reason: str | None,
        content: str | None = None,
        info: PageInfo | None = None,
    ) -> SyncResult:
        return cls(
            kind=SyncKind.MISSING,
            title=title,
            reason=reason,
            content=content,
            info=info,
        )

    @classmethod
    def interwiki(cls, title: str | None, target: str | None) -> SyncResult:
        return cls(
            kind=SyncKind.INTERWIKI_REDIRECT, title=title, target=target
        )

    @classmethod
    def error(
        cls, error_kind: str, detail: str, title: str | None = None
    ) -> SyncResult:
        return cls(
            kind=SyncKind.ERROR,
            error_kind=error_kind,
            detail=detail,
            title=title,
        )

    @property
    def ok(self) -> bool:
        return self.kind is not SyncKind.ERROR


@dataclass(frozen=True)
class PullOptions:
    redirects: bool = True
    convert_titles: bool = False
    replace_existing: bool = False


@dataclass(frozen=True)
class PushOptions:
    skip_title_prompt: bool = False
