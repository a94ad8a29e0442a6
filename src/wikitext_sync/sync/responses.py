"""Typed records for MediaWiki action-API payloads.

Every server field is optional unless the operation cannot make sense
without it; unknown fields are kept.  ``convert()`` is the only way raw
JSON enters the engines, so a structurally invalid payload (a list where
an object belongs, a page map that is not a map) fails immediately with
``MalformedResponseError`` instead of surfacing later as an
``AttributeError``.

Shapes follow ``formatversion=1`` where presence markers such as
``missing`` or ``nochange`` are empty strings; the boolean form used by
``formatversion=2`` is accepted as well.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, Field, ValidationError

from .errors import MalformedResponseError

T = TypeVar("T", bound=BaseModel)

# Presence marker: "" in formatversion=1, true in formatversion=2.
Marker = str | bool | None


def is_set(marker: Marker) -> bool:
    """Return True when a presence marker is present."""
    return marker is not None and marker is not False


class _Record(BaseModel):
    model_config = {
        "extra": "allow",
        "frozen": True,
        "populate_by_name": True,
    }


# ---------------------------------------------------------------------------
# action=query&prop=revisions
# ---------------------------------------------------------------------------


class TextBlob(_Record):
    """``{"*": ...}`` wrapper formatversion=1 uses for HTML and diffs."""

    body: str | None = Field(default=None, alias="*")


class ContentSlot(_Record):
    contentmodel: str | None = None
    contentformat: str | None = None
    content: str | None = Field(default=None, alias="*")


class Revision(ContentSlot):
    """A revision; pre-1.32 servers put content fields on the revision itself."""

    revid: int | None = None
    parentid: int | None = None
    slots: dict[str, ContentSlot] | None = None
    diff: TextBlob | None = None

    @property
    def main(self) -> ContentSlot:
        """Main-slot content, falling back to the legacy flat layout."""
        if self.slots and "main" in self.slots:
            return self.slots["main"]
        return self


class Page(_Record):
    pageid: int | None = None
    ns: int | None = None
    title: str | None = None
    revisions: list[Revision] | None = None
    missing: Marker = None
    invalid: Marker = None
    invalidreason: str | None = None

    @property
    def is_missing(self) -> bool:
        return is_set(self.missing)

    @property
    def is_invalid(self) -> bool:
        return is_set(self.invalid)

    @property
    def first_revision(self) -> Revision | None:
        return self.revisions[0] if self.revisions else None


class Jump(_Record):
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None


class Interwiki(_Record):
    title: str | None = None
    iw: str | None = None


class ReadPageQuery(_Record):
    normalized: list[Jump] | None = None
    redirects: list[Jump] | None = None
    pages: dict[str, Page] | None = None
    interwiki: list[Interwiki] | None = None


class ReadPageResult(_Record):
    batchcomplete: Marker = None
    query: ReadPageQuery | None = None

    @property
    def first_page(self) -> Page | None:
        if self.query is None or not self.query.pages:
            return None
        return next(iter(self.query.pages.values()))

    @property
    def first_interwiki(self) -> Interwiki | None:
        if self.query is None or not self.query.interwiki:
            return None
        return self.query.interwiki[0]


# ---------------------------------------------------------------------------
# action=parse
# ---------------------------------------------------------------------------


class ParseInfo(_Record):
    title: str | None = None
    pageid: int | None = None
    revid: int | None = None
    displaytitle: str | None = None
    text: TextBlob | None = None
    categorieshtml: TextBlob | None = None
    headhtml: TextBlob | None = None


class ParseResult(_Record):
    parse: ParseInfo | None = None


# ---------------------------------------------------------------------------
# Tokens: meta=tokens (current) and action=tokens (legacy)
# ---------------------------------------------------------------------------


class CsrfTokens(_Record):
    csrftoken: str | None = None


class TokensQuery(_Record):
    tokens: CsrfTokens | None = None


class TokensResult(_Record):
    query: TokensQuery | None = None


class LegacyTokens(_Record):
    edittoken: str | None = None


class LegacyTokensResult(_Record):
    tokens: LegacyTokens | None = None


# ---------------------------------------------------------------------------
# list=tags
# ---------------------------------------------------------------------------


class Tag(_Record):
    name: str | int
    active: Marker = None
    defined: Marker = None

    @property
    def usable(self) -> bool:
        return is_set(self.active) and is_set(self.defined)


class TagsQuery(_Record):
    tags: list[Tag]


class TagsResult(_Record):
    query: TagsQuery
    continue_: dict[str, str | int] | None = Field(
        default=None, alias="continue"
    )


# ---------------------------------------------------------------------------
# meta=siteinfo
# ---------------------------------------------------------------------------


class SiteGeneral(_Record):
    generator: str | None = None
    sitename: str | None = None


class SiteInfoQuery(_Record):
    general: SiteGeneral | None = None


class SiteInfoResult(_Record):
    query: SiteInfoQuery | None = None

    @property
    def generator(self) -> str | None:
        if self.query is None or self.query.general is None:
            return None
        return self.query.general.generator


# ---------------------------------------------------------------------------
# action=edit
# ---------------------------------------------------------------------------


class EditInfo(_Record):
    result: str | None = None
    pageid: int | None = None
    title: str | None = None
    contentmodel: str | None = None
    nochange: Marker = None
    watched: Marker = None
    oldrevid: int | None = None
    newrevid: int | None = None
    newtimestamp: str | None = None


class EditResult(_Record):
    edit: EditInfo


def convert(model: type[T], payload: Any, what: str) -> T:
    """Validate *payload* against *model*.

    Args:
        model: Record class describing the expected response.
        payload: Decoded JSON returned by the transport.
        what: Short name of the request, used in the error message.

    Raises:
        MalformedResponseError: If the payload does not fit the model.
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError(
            what, f"expected an object, got {type(payload).__name__}"
        )
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise MalformedResponseError(what, str(e)) from e
