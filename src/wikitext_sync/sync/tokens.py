"""Edit-token negotiation across the two action-API generations.

Servers since MediaWiki 1.24 issue edit tokens through
``meta=tokens&type=csrf``; older ones only know ``action=tokens&type=edit``.
Which one a server speaks is not known up front, so the current endpoint
is tried first and the legacy one second.
"""

from __future__ import annotations

import logging

from .errors import WikiSyncError, describe_error
from .host import Transport
from .models import EditToken, TokenGeneration, TokenResult
from .responses import LegacyTokensResult, TokensResult, convert

logger = logging.getLogger(__name__)


class _NoTokenInResponse(WikiSyncError):
    def __init__(self, endpoint: str) -> None:
        super().__init__(f"{endpoint} response carried no token")


def _mask(token: str) -> str:
    return f"{token[:4]}..." if len(token) > 4 else "..."


def _fetch_csrf(transport: Transport) -> EditToken:
    payload = transport.request(
        {"action": "query", "meta": "tokens", "type": "csrf"}
    )
    result = convert(TokensResult, payload, "meta=tokens")
    tokens = result.query.tokens if result.query else None
    if tokens is None or not tokens.csrftoken:
        raise _NoTokenInResponse("meta=tokens")
    return EditToken(tokens.csrftoken, TokenGeneration.CSRF)


def _fetch_legacy(transport: Transport) -> EditToken:
    payload = transport.request({"action": "tokens", "type": "edit"})
    result = convert(LegacyTokensResult, payload, "action=tokens")
    if result.tokens is None or not result.tokens.edittoken:
        raise _NoTokenInResponse("action=tokens")
    return EditToken(result.tokens.edittoken, TokenGeneration.EDIT)


def negotiate_edit_token(transport: Transport) -> TokenResult:
    """Try both token endpoints and report the outcome without raising.

    The legacy endpoint is only consulted when the current one fails;
    its error is ``None`` when it was never tried.

    Returns:
        A ``TokenResult`` holding either the token or both failure texts.
    """
    try:
        token = _fetch_csrf(transport)
        logger.debug("Got csrf token %s", _mask(token.value))
        return TokenResult(token=token)
    except Exception as e:
        new_api_error = describe_error(e)
        logger.warning(
            "meta=tokens failed (%s); falling back to action=tokens",
            new_api_error,
        )

    try:
        token = _fetch_legacy(transport)
        logger.debug("Got legacy edit token %s", _mask(token.value))
        return TokenResult(token=token)
    except Exception as e:
        legacy_api_error = describe_error(e)
        logger.error(
            "Both token endpoints failed: NEW: %s; OLD: %s",
            new_api_error,
            legacy_api_error,
        )
        return TokenResult(
            new_api_error=new_api_error,
            legacy_api_error=legacy_api_error,
        )


def acquire_edit_token(transport: Transport) -> EditToken:
    """Return an edit token from whichever endpoint the server supports.

    Raises:
        TokenAcquisitionError: If both endpoints failed; carries both
            underlying messages.
    """
    return negotiate_edit_token(transport).unwrap()
