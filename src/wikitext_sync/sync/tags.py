"""Discovery of the edit tags a wiki currently accepts."""

from __future__ import annotations

import logging

from .host import Transport
from .responses import TagsResult, convert

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 100


def get_valid_tags(
    transport: Transport, max_pages: int = DEFAULT_MAX_PAGES
) -> set[str]:
    """Collect the names of all tags that are both active and defined.

    Pages through ``list=tags`` by merging the server's ``continue`` map
    into the next request until the server stops sending one.  The loop
    also stops, with a warning, after *max_pages* requests or when the
    server repeats a continuation it has already sent; the tags gathered
    so far are returned in both cases.

    Raises:
        TransportError: If a request fails.
        MalformedResponseError: If a page lacks ``query.tags``.
    """
    base = {
        "action": "query",
        "list": "tags",
        "tglimit": "max",
        "tgprop": "active|defined",
    }
    tags: set[str] = set()
    seen: set[tuple[tuple[str, str], ...]] = set()
    params = dict(base)

    for page in range(1, max_pages + 1):
        payload = transport.request(params)
        result = convert(TagsResult, payload, "list=tags")
        tags.update(str(tag.name) for tag in result.query.tags if tag.usable)

        if not result.continue_:
            logger.debug("Tag list complete after %d page(s)", page)
            return tags

        continuation = {k: str(v) for k, v in result.continue_.items()}
        key = tuple(sorted(continuation.items()))
        if key in seen:
            logger.warning(
                "Server repeated tag continuation %s; stopping", continuation
            )
            return tags
        seen.add(key)
        params = {**base, **continuation}

    logger.warning(
        "Tag list still continuing after %d pages; stopping", max_pages
    )
    return tags
