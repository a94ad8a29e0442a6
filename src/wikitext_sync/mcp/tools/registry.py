"""ToolSpec and ToolRegistry for read-only tool filtering.

- ToolSpec: immutable link between a Tool definition, its async handler
  ``(client, args) -> CallToolResult`` and whether it changes the wiki.
- ToolRegistry: drops write tools in read-only mode, then provides
  list_tools() and call_tool() dispatch with centralized error handling.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import mcp.types as types

from ...core.client import MediaWikiClient
from ...sync.errors import (
    ApiError,
    TokenAcquisitionError,
    TransportError,
    WikiSyncError,
    describe_error,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Immutable definition of a single MCP tool.

    Attributes:
        tool: The MCP Tool definition (name, description, inputSchema).
        handler: Async handler with signature (client, args) -> CallToolResult.
        writes: True if the tool changes state on the wiki.
    """

    tool: types.Tool
    handler: Callable[[MediaWikiClient, dict], Awaitable[types.CallToolResult]]
    writes: bool = False


class ToolRegistry:
    """Registry of ToolSpecs; with ``read_only`` set, write tools are hidden."""

    def __init__(self, specs: list[ToolSpec], read_only: bool = False):
        self.read_only = read_only
        self._specs: dict[str, ToolSpec] = {
            spec.tool.name: spec
            for spec in specs
            if not (read_only and spec.writes)
        }

    def list_tools(self) -> list[types.Tool]:
        return [spec.tool for spec in self._specs.values()]

    def tool_count(self) -> int:
        return len(self._specs)

    async def call_tool(
        self,
        name: str,
        arguments: dict | None,
        client: MediaWikiClient,
    ) -> types.CallToolResult:
        """Dispatch a tool call to its handler.

        Exceptions escaping a handler become structured error responses.

        Raises:
            ValueError: If the tool is unknown or hidden.
        """
        from .errors import build_error_response

        spec = self._specs.get(name)
        if spec is None:
            raise ValueError(f"Unknown tool: {name}")
        args = arguments or {}
        try:
            return await spec.handler(client, args)
        except TokenAcquisitionError as e:
            logger.warning("Token error in %s: %s", name, e)
            return build_error_response(
                "token_error",
                str(e),
                "Check that WIKITEXT_COOKIE_FILE holds a logged-in session.",
            )
        except ApiError as e:
            logger.warning("API error in %s: %s", name, e)
            return build_error_response(
                "api_error",
                describe_error(e),
                "Check your permissions and the request arguments.",
            )
        except (TransportError, WikiSyncError) as e:
            logger.warning("Wiki error in %s: %s", name, e)
            return build_error_response(
                "server_error",
                describe_error(e),
                "Check network connectivity and WIKITEXT_HOST, then retry.",
            )
        except ValueError as e:
            return build_error_response(
                "validation_error",
                str(e),
                "Check parameter values and retry.",
            )
        except Exception as e:
            logger.exception("Unexpected error in tool %s", name)
            return build_error_response(
                "server_error",
                str(e),
                "Retry later or check the server log.",
            )
