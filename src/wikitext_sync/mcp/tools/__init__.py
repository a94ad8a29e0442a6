"""MCP tool handlers for wiki page sync.

Each module defines its ``types.Tool`` list and matching ``ToolSpec``s;
``ALL_SPECS`` is what the server registers.
"""

from .cite import CITE_SPECS, CITE_TOOLS
from .errors import build_error_response, translate_sync_error
from .page import PAGE_SPECS, PAGE_TOOLS
from .registry import ToolRegistry, ToolSpec
from .system import SYSTEM_SPECS, SYSTEM_TOOLS
from .view import VIEW_SPECS, VIEW_TOOLS

ALL_SPECS: list[ToolSpec] = SYSTEM_SPECS + PAGE_SPECS + VIEW_SPECS + CITE_SPECS

__all__ = [
    "build_error_response",
    "translate_sync_error",
    # Registry
    "ToolSpec",
    "ToolRegistry",
    # ToolSpec lists
    "ALL_SPECS",
    "CITE_SPECS",
    "PAGE_SPECS",
    "SYSTEM_SPECS",
    "VIEW_SPECS",
    # Tool lists
    "CITE_TOOLS",
    "PAGE_TOOLS",
    "SYSTEM_TOOLS",
    "VIEW_TOOLS",
]
