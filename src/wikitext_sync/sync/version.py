"""Server software version check."""

from __future__ import annotations

import logging
import re

from .host import Transport
from .models import VersionTriple
from .responses import SiteInfoResult, convert

logger = logging.getLogger(__name__)

_GENERATOR_RE = re.compile(r"^MediaWiki (\d+)\.(\d+)\.(\d+)")

MINIMUM_SUPPORTED = VersionTriple(1, 32, 0)


def parse_generator(generator: str | None) -> VersionTriple | None:
    """Parse ``"MediaWiki 1.35.2-wmf.1"`` into ``(1, 35, 2)``.

    Anything after the revision number is ignored.  Returns ``None`` for
    other software or an unparseable string.
    """
    if not generator:
        return None
    match = _GENERATOR_RE.match(generator)
    if match is None:
        return None
    return VersionTriple(*(int(part) for part in match.groups()))


def compare_version(
    generator: str | None, major: int, minor: int, revision: int
) -> bool | None:
    """Return whether *generator* is at least the given version.

    ``None`` means the answer is unknown.
    """
    version = parse_generator(generator)
    if version is None:
        return None
    return version >= VersionTriple(major, minor, revision)


def fetch_generator(transport: Transport) -> str | None:
    payload = transport.request(
        {"action": "query", "meta": "siteinfo", "siprop": "general"}
    )
    return convert(SiteInfoResult, payload, "meta=siteinfo").generator


def is_at_least(
    transport: Transport, major: int, minor: int, revision: int
) -> bool | None:
    """Ask the server for its version and compare it to a threshold.

    Returns:
        ``True`` or ``False``, or ``None`` when the generator string could
        not be parsed.

    Raises:
        TransportError: If the siteinfo request fails.
    """
    generator = fetch_generator(transport)
    result = compare_version(generator, major, minor, revision)
    if result is None:
        logger.warning("Could not parse server generator %r", generator)
    else:
        logger.debug(
            "Server %r at least %d.%d.%d: %s",
            generator,
            major,
            minor,
            revision,
            result,
        )
    return result
