"""Shared pytest fixtures for wikitext-sync tests."""

from collections import deque
from collections.abc import Mapping
from typing import Any
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

from wikitext_sync.config import Config
from wikitext_sync.sync.host import ScriptedHost

load_dotenv()


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live MediaWiki instance",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live MediaWiki instance"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


class FakeTransport:
    """Transport double that replays scripted responses in order.

    Each scripted entry is either a dict (returned) or an exception
    instance (raised).  Every request's parameters are recorded.
    """

    def __init__(self, *responses: Any):
        self.responses: deque[Any] = deque(responses)
        self.requests: list[dict[str, str]] = []

    def request(self, params: Mapping[str, str]) -> dict[str, Any]:
        self.requests.append(dict(params))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {dict(params)}")
        response = self.responses.popleft()
        if isinstance(response, BaseException):
            raise response
        return response

    def actions(self) -> list[str]:
        """Short description of each request, e.g. ``query:tokens``."""
        out = []
        for params in self.requests:
            detail = params.get("meta") or params.get("list") or params.get("prop") or params.get("type", "")
            out.append(f"{params.get('action')}:{detail}")
        return out


@pytest.fixture
def mock_config():
    """Create a Config instance for testing."""
    return Config(host="wiki.example.org")


@pytest.fixture
def fake_transport():
    """Factory fixture for FakeTransport."""
    return FakeTransport


@pytest.fixture
def scripted_host():
    """Factory fixture for ScriptedHost."""
    return ScriptedHost


@pytest.fixture
def mock_client(mock_config):
    """MagicMock standing in for MediaWikiClient."""
    from wikitext_sync.core.client import MediaWikiClient

    client = MagicMock(spec=MediaWikiClient)
    client.config = mock_config
    client.api_url = mock_config.api_url
    return client
