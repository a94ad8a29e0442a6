"""Wiki transport shared by the engines and the MCP server."""

from .async_utils import run_serialized, run_sync
from .client import MediaWikiClient

__all__ = ["MediaWikiClient", "run_serialized", "run_sync"]
