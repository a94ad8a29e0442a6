"""Citation helpers."""

from .web import WebCiteInfo, add_web_cite, replace_argument

__all__ = ["WebCiteInfo", "add_web_cite", "replace_argument"]
