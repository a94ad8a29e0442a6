"""Exception taxonomy for page synchronisation.

Only genuinely exceptional conditions are exceptions here.  Missing
pages, invalid titles, interwiki titles and no-op edits are ordinary
outcomes and are reported through ``SyncKind`` instead.
"""

from __future__ import annotations


class WikiSyncError(Exception):
    """Base class for all errors raised by wikitext_sync."""

    @property
    def info(self) -> str | None:
        return None


class TransportError(WikiSyncError):
    """The HTTP exchange with the action API failed.

    Attributes:
        info: Server-provided explanation, if any.
        code: Server-provided error code, if any.
    """

    def __init__(
        self,
        message: str,
        info: str | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self._info = info
        self.code = code

    @property
    def info(self) -> str | None:
        return self._info


class ApiError(TransportError):
    """The server answered with an ``error`` object."""

    def __init__(self, code: str | None, info: str | None) -> None:
        super().__init__(
            f"{code or 'unknown'}: {info or 'no details'}",
            info=info,
            code=code,
        )


class MalformedResponseError(WikiSyncError):
    """A response did not have the structure the action API documents."""

    def __init__(self, what: str, detail: str) -> None:
        super().__init__(f"Malformed {what} response: {detail}")
        self.what = what
        self.detail = detail


class TokenAcquisitionError(WikiSyncError):
    """Neither the current nor the legacy token endpoint produced a token."""

    def __init__(
        self,
        new_api_error: str | None,
        legacy_api_error: str | None,
    ) -> None:
        super().__init__(
            f"Could not get edit token: NEW: {new_api_error or ''}; "
            f"OLD: {legacy_api_error or ''}"
        )
        self.new_api_error = new_api_error
        self.legacy_api_error = legacy_api_error


class UnsupportedContentModel(WikiSyncError):
    """No comment syntax is known for the page's content model."""

    def __init__(self, content_model: str | None) -> None:
        super().__init__(
            f"Unsupported content model: {content_model}. "
            "Page information cannot be embedded safely."
        )
        self.content_model = content_model


class NoTitleGiven(WikiSyncError):
    """A push was attempted without a page title."""

    def __init__(self) -> None:
        super().__init__("Empty title, post failed.")


def describe_error(error: BaseException) -> str:
    """Return the most useful human-readable text for *error*.

    Prefers the server-provided ``info`` and falls back to the exception
    message (or its class name when the message is empty).
    """
    info = getattr(error, "info", None)
    if isinstance(info, str) and info:
        return info
    return str(error) or type(error).__name__


def error_kind(error: BaseException) -> str:
    """Short machine-readable category for *error*."""
    match error:
        case NoTitleGiven():
            return "no_title"
        case TokenAcquisitionError():
            return "token"
        case UnsupportedContentModel():
            return "unsupported_content_model"
        case MalformedResponseError():
            return "malformed"
        case ApiError():
            return "api"
        case TransportError():
            return "transport"
        case _:
            return "unexpected"
