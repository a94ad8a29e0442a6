"""Tests for core/async_utils.py: thread offloading and the session lock."""

import asyncio
import threading
import time

import pytest

from wikitext_sync.core import async_utils
from wikitext_sync.core.async_utils import init_session_lock, run_serialized, run_sync


@pytest.fixture(autouse=True)
def reset_lock():
    async_utils._session_lock = None
    yield
    async_utils._session_lock = None


async def test_run_sync_uses_worker_thread():
    main_thread = threading.get_ident()
    worker = await run_sync(threading.get_ident)
    assert worker != main_thread


async def test_run_sync_passes_arguments():
    assert await run_sync(lambda a, b=0: a + b, 2, b=3) == 5


async def test_run_sync_propagates_exceptions():
    def boom():
        raise ValueError("bad title")

    with pytest.raises(ValueError, match="bad title"):
        await run_sync(boom)


async def test_run_serialized_without_lock():
    assert await run_serialized(str.upper, "push") == "PUSH"


async def test_run_serialized_never_overlaps():
    init_session_lock()
    active = 0
    peak = 0
    guard = threading.Lock()

    def flow():
        nonlocal active, peak
        with guard:
            active += 1
            peak = max(peak, active)
        time.sleep(0.02)
        with guard:
            active -= 1

    await asyncio.gather(*(run_serialized(flow) for _ in range(4)))
    assert peak == 1


async def test_run_sync_does_not_take_lock():
    init_session_lock()
    async with async_utils._session_lock:
        assert await run_sync(lambda: "read") == "read"
