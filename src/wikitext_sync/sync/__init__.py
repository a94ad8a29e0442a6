"""Page sync and metadata protocol.

Public API for pulling MediaWiki pages into local documents and pushing
them back.

Architecture
------------
A pulled document carries the identity of the page it came from
(title, page id, revision id, content model and format) in a
``[PAGE_INFO]`` comment header.  Pushing strips that header again, so
the document text is the only durable state.

Modules:

- ``metadata``  -- ``embed`` / ``extract``: the header codec.
- ``tokens``    -- edit-token negotiation with legacy fallback.
- ``tags``      -- paginated discovery of active, defined edit tags.
- ``version``   -- server version check.
- ``pull``      -- ``PullEngine``: fetch, classify, render.
- ``push``      -- ``PushEngine``: strip, resolve title, submit, classify.
- ``view``      -- ``ViewEngine``: preview, diff and page view as HTML.
- ``host``      -- ``Transport`` and ``EditorHost`` protocols,
  ``ScriptedHost``.
- ``responses`` -- typed action-API payloads and the strict converter.
- ``models``    -- ``PageInfo``, ``SyncResult`` and other data contracts.
- ``errors``    -- exception taxonomy.

Usage example
-------------
::

    from wikitext_sync.config import load_config
    from wikitext_sync.core.client import MediaWikiClient
    from wikitext_sync.sync import PullEngine, PullOptions, ScriptedHost

    client = MediaWikiClient(load_config())
    host = ScriptedHost()
    result = PullEngine(client, host).run("Main Page", PullOptions())
    print(result.content)
"""

from .errors import (
    ApiError,
    MalformedResponseError,
    NoTitleGiven,
    TokenAcquisitionError,
    TransportError,
    UnsupportedContentModel,
    WikiSyncError,
    describe_error,
)
from .host import EditorHost, ScriptedHost, Transport
from .metadata import embed, extract, model_to_language
from .models import (
    EditReport,
    EditToken,
    PageInfo,
    PullOptions,
    PushOptions,
    SyncKind,
    SyncResult,
    TokenGeneration,
    TokenResult,
    VersionTriple,
)
from .pull import PullEngine
from .push import PushEngine, classify_edit
from .tags import get_valid_tags
from .tokens import acquire_edit_token, negotiate_edit_token
from .version import compare_version, is_at_least, parse_generator
from .view import ViewEngine, render_diff_html, render_view_html

__all__ = [
    "ApiError",
    "EditReport",
    "EditToken",
    "EditorHost",
    "MalformedResponseError",
    "NoTitleGiven",
    "PageInfo",
    "PullEngine",
    "PullOptions",
    "PushEngine",
    "PushOptions",
    "ScriptedHost",
    "SyncKind",
    "SyncResult",
    "TokenAcquisitionError",
    "TokenGeneration",
    "TokenResult",
    "Transport",
    "TransportError",
    "UnsupportedContentModel",
    "ViewEngine",
    "WikiSyncError",
    "acquire_edit_token",
    "classify_edit",
    "compare_version",
    "describe_error",
    "embed",
    "extract",
    "get_valid_tags",
    "is_at_least",
    "model_to_language",
    "negotiate_edit_token",
    "parse_generator",
    "render_diff_html",
    "render_view_html",
]
