"""Tests for wikitext_sync.sync.version: server version check."""

import logging

import pytest

from wikitext_sync import __version__
from wikitext_sync.sync.errors import TransportError
from wikitext_sync.sync.models import VersionTriple
from wikitext_sync.sync.version import (
    MINIMUM_SUPPORTED,
    compare_version,
    fetch_generator,
    is_at_least,
    parse_generator,
)


def _siteinfo(generator):
    return {"batchcomplete": "", "query": {"general": {"generator": generator, "sitename": "Wiki"}}}


def test_package_version_is_string():
    assert isinstance(__version__, str)
    assert __version__.count(".") == 2


class TestParseGenerator:
    @pytest.mark.parametrize(
        "generator, expected",
        [
            ("MediaWiki 1.35.2", VersionTriple(1, 35, 2)),
            ("MediaWiki 1.35.2-extra", VersionTriple(1, 35, 2)),
            ("MediaWiki 1.42.0-wmf.5", VersionTriple(1, 42, 0)),
            ("MediaWiki 1.30", None),
            ("SomeOtherSoftware 3.1", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse(self, generator, expected):
        assert parse_generator(generator) == expected

    def test_triple_str(self):
        assert str(VersionTriple(1, 32, 0)) == "1.32.0"


class TestCompareVersion:
    @pytest.mark.parametrize(
        "generator, expected",
        [
            ("MediaWiki 1.35.2-extra", True),
            ("MediaWiki 1.32.0", True),
            ("MediaWiki 1.31.99", False),
            ("MediaWiki 1.30.0", False),
            ("MediaWiki 2.0.0", True),
            ("SomeOtherSoftware 3.1", None),
        ],
    )
    def test_against_minimum(self, generator, expected):
        assert compare_version(generator, *MINIMUM_SUPPORTED) is expected

    def test_ordering_is_lexicographic(self):
        # 1.100.0 is newer than 1.32.0 even though "100" < "32" as strings
        assert compare_version("MediaWiki 1.100.0", 1, 32, 0) is True


class TestIsAtLeast:
    def test_sends_siteinfo_query(self, fake_transport):
        transport = fake_transport(_siteinfo("MediaWiki 1.39.5"))
        assert is_at_least(transport, 1, 32, 0) is True
        assert transport.requests == [
            {"action": "query", "meta": "siteinfo", "siprop": "general"}
        ]

    def test_old_server(self, fake_transport):
        assert is_at_least(fake_transport(_siteinfo("MediaWiki 1.30.0")), 1, 32, 0) is False

    def test_unparseable_logs_warning(self, fake_transport, caplog):
        transport = fake_transport(_siteinfo("SomeOtherSoftware 3.1"))
        with caplog.at_level(logging.WARNING):
            assert is_at_least(transport, 1, 32, 0) is None
        assert "Could not parse server generator" in caplog.text

    def test_missing_general_is_indeterminate(self, fake_transport):
        assert is_at_least(fake_transport({"query": {}}), 1, 32, 0) is None

    def test_transport_error_propagates(self, fake_transport):
        with pytest.raises(TransportError):
            is_at_least(fake_transport(TransportError("down")), 1, 32, 0)

    def test_fetch_generator(self, fake_transport):
        assert fetch_generator(fake_transport(_siteinfo("MediaWiki 1.41.0"))) == "MediaWiki 1.41.0"
