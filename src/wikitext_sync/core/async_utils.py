"""Async utilities for driving the synchronous client from MCP handlers."""

import asyncio
import logging
from typing import Any, Callable, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)

# One lock for the shared wiki session, created at server startup
_session_lock: asyncio.Lock | None = None


def init_session_lock() -> None:
    """Create the session lock. Call once at server startup."""
    global _session_lock
    _session_lock = asyncio.Lock()
    logger.info("Wiki session lock initialized")


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    Args:
        func: Synchronous function to call
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)
    """
    return await asyncio.to_thread(func, *args, **kwargs)


async def run_serialized(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run *func* in a thread while holding the session lock.

    Pull, push and logout flows go through here so that at most one of
    them uses the wiki session at a time.  Without an initialized lock
    the call is not serialized.

    Example:
        result = await run_serialized(engine.run, title, options)
    """
    if _session_lock is None:
        return await asyncio.to_thread(func, *args, **kwargs)
    async with _session_lock:
        return await asyncio.to_thread(func, *args, **kwargs)
