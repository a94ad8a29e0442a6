"""Embed and extract page identity inside document text.

A pulled document starts with a header such as::

    <%-- [PAGE_INFO]
        comment = #Please do not remove this struct...#
        pageTitle = #Main Page#
        pageID = #1#
        revisionID = #42#
        contentModel = #wikitext#
        contentFormat = #text/x-wiki#
    [END_PAGE_INFO] --%>

wrapped in whatever comment syntax keeps it inert for the page's content
model (nothing for wikitext, ``/* */`` for scripts and stylesheets,
``--[=[ --]=]`` for Lua).  The block is found anywhere in the text, so a
user may move it without breaking the round trip.

Values are delimited by ``#`` and are not escaped: titles, ids and model
names must not contain ``#``.
"""

from __future__ import annotations

import logging
import re
from pathlib import PureWindowsPath
from typing import NamedTuple

from ..i18n import i18n
from .errors import UnsupportedContentModel
from .models import PAGE_INFO_KEYS, PageInfo

logger = logging.getLogger(__name__)

_OPEN = "<%-- [PAGE_INFO]"
_CLOSE = "[END_PAGE_INFO] --%>"

# Comment delimiters keyed by editor language.
_COMMENT_DELIMITERS: dict[str, tuple[str, str]] = {
    "wikitext": ("", ""),
    "jsonc": ("/*", "*/"),
    "lua": ("--[=[", "--]=]"),
    "javascript": ("/*", "*/"),
    "css": ("/*", "*/"),
    "php": ("/*", "*/"),
}

# Server content models whose editor language differs from the model name.
_MODEL_LANGUAGES: dict[str, str] = {
    "flow-board": "jsonc",
    "sanitized-css": "css",
    "Scribunto": "lua",
}

_BLOCK_RE = re.compile(
    r"\s*(?:/\*|--\[=\[)?\s*<%--\s*\[PAGE_INFO\]"
    r"(?P<body>[\s\S]*?)"
    r"\[END_PAGE_INFO\]\s*--%>\s*(?:\*/|--\]=\])?\s*"
)

_FIELD_RES: dict[str, re.Pattern[str]] = {
    key: re.compile(
        rf"(?<![A-Za-z]){key}\s*=\s*#(.*?)#", re.IGNORECASE
    )
    for key in PAGE_INFO_KEYS
}


class ContentInfo(NamedTuple):
    content: str
    info: PageInfo | None


def model_to_language(content_model: str | None) -> str:
    """Map a server content model to the editor language used for it."""
    if content_model is None:
        return "wikitext"
    return _MODEL_LANGUAGES.get(content_model, content_model)


def embed(
    info: PageInfo,
    content_model: str | None = None,
    lang: str | None = None,
) -> str:
    """Serialize *info* into a header block.

    Args:
        info: Page identity to record.
        content_model: Content model deciding the comment wrapper;
            defaults to ``info.content_model``.
        lang: Language of the "do not remove" notice.

    Returns:
        The header, without trailing newlines.

    Raises:
        UnsupportedContentModel: If no comment syntax is known for the model.
    """
    model = content_model if content_model is not None else info.content_model
    delimiters = _COMMENT_DELIMITERS.get(model_to_language(model))
    if delimiters is None:
        raise UnsupportedContentModel(model)

    fields: dict[str, str | None] = {
        "comment": i18n("page-info-comment", lang),
        **info.header_fields(),
    }
    for key, value in fields.items():
        if value and "#" in value:
            logger.warning(
                "Page info field %s contains '#'; it will not round-trip: %r",
                key,
                value,
            )
    lines = "\n".join(
        f"    {key} = #{value or ''}#" for key, value in fields.items()
    )
    opening, closing = delimiters
    return f"{opening}{_OPEN}\n{lines}\n{_CLOSE}{closing}"


def extract(content: str) -> ContentInfo:
    """Split *content* into its body and embedded page identity.

    The first ``[PAGE_INFO]`` block is parsed and removed together with
    its comment wrapper and the whitespace around it.  Empty values parse
    as ``None``.  Without a block the content is returned unchanged and
    ``info`` is ``None``.
    """
    match = _BLOCK_RE.search(content)
    if match is None:
        return ContentInfo(content, None)

    body = match.group("body")
    values: dict[str, str | None] = {}
    for key, pattern in _FIELD_RES.items():
        found = pattern.search(body)
        values[key] = found.group(1) or None if found else None

    stripped = content[: match.start()] + content[match.end() :]
    return ContentInfo(stripped, PageInfo(**values))


def title_from_file_name(file_name: str | None) -> str | None:
    """Derive a page title from a document's file name.

    ``/home/me/Main Page.wiki`` becomes ``Main Page``.  Everything after the
    first dot of the base name is dropped.
    """
    if not file_name:
        return None
    base = PureWindowsPath(file_name).name
    return base.split(".")[0] or None


def suggest_title(
    info: PageInfo | None, file_name: str | None
) -> str | None:
    """Title to offer by default: the recorded one, else the file name."""
    if info is not None and info.page_title:
        return info.page_title
    return title_from_file_name(file_name)
