"""Tests for logger.py: setup_logging() and JsonFormatter.

logging.basicConfig is mocked so the handler setup_logging builds can be
inspected without fighting pytest's own log capture.
"""

import json
import logging
import sys
from unittest.mock import patch

import pytest

from wikitext_sync.logger import DEFAULT_LOG_FILE, JsonFormatter, setup_logging


@pytest.fixture(autouse=True)
def _no_log_env(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_FILE", raising=False)


@pytest.fixture
def log_file(tmp_path):
    return str(tmp_path / "server.log")


def _handler(mock_basic):
    [handler] = mock_basic.call_args[1]["handlers"]
    return handler


class TestSetupLogging:
    @patch("wikitext_sync.logger.logging.basicConfig")
    def test_file_only(self, mock_basic, log_file):
        setup_logging(log_file=log_file)

        kwargs = mock_basic.call_args[1]
        handler = _handler(mock_basic)
        assert isinstance(handler, logging.FileHandler)
        assert handler.baseFilename == log_file
        assert kwargs["level"] == logging.WARNING
        assert kwargs["force"] is True
        handler.close()

    @patch("wikitext_sync.logger.logging.basicConfig")
    def test_log_file_env(self, mock_basic, tmp_path, monkeypatch):
        path = str(tmp_path / "env.log")
        monkeypatch.setenv("LOG_FILE", path)
        setup_logging()

        handler = _handler(mock_basic)
        assert handler.baseFilename == path
        handler.close()

    @patch("wikitext_sync.logger.logging.basicConfig")
    def test_debug_overrides_level(self, mock_basic, log_file, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(debug=True, log_file=log_file, level="INFO")
        assert mock_basic.call_args[1]["level"] == logging.DEBUG
        _handler(mock_basic).close()

    @patch("wikitext_sync.logger.logging.basicConfig")
    def test_log_level_env_beats_config_level(self, mock_basic, log_file, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        setup_logging(log_file=log_file, level="INFO")
        assert mock_basic.call_args[1]["level"] == logging.ERROR
        _handler(mock_basic).close()

    @patch("wikitext_sync.logger.logging.basicConfig")
    def test_config_level_used_without_env(self, mock_basic, log_file):
        setup_logging(log_file=log_file, level="info")
        assert mock_basic.call_args[1]["level"] == logging.INFO
        _handler(mock_basic).close()

    @patch("wikitext_sync.logger.logging.basicConfig")
    def test_unknown_log_level_falls_back_to_warning(self, mock_basic, log_file, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "CHATTY")
        setup_logging(log_file=log_file)
        assert mock_basic.call_args[1]["level"] == logging.WARNING
        _handler(mock_basic).close()

    @patch("wikitext_sync.logger.logging.basicConfig")
    def test_noisy_loggers_quieted(self, mock_basic, log_file):
        logging.getLogger("urllib3").setLevel(logging.DEBUG)
        setup_logging(log_file=log_file)
        assert logging.getLogger("urllib3").level == logging.WARNING
        _handler(mock_basic).close()

    @patch("wikitext_sync.logger.logging.basicConfig")
    def test_json_format_selected(self, mock_basic, log_file):
        setup_logging(log_file=log_file, debug_format="json")
        handler = _handler(mock_basic)
        assert isinstance(handler.formatter, JsonFormatter)
        handler.close()

    @patch("wikitext_sync.logger.logging.basicConfig")
    def test_text_format_names_logger(self, mock_basic, log_file):
        setup_logging(log_file=log_file)
        handler = _handler(mock_basic)
        assert "%(name)s" in handler.formatter._fmt
        handler.close()

    def test_default_log_file_path(self):
        assert DEFAULT_LOG_FILE.endswith("wikitext-sync.log")


class TestJsonFormatter:
    def _record(self, msg, *args, exc_info=None):
        return logging.LogRecord(
            name="wikitext_sync.sync.push",
            level=logging.ERROR,
            pathname=__file__,
            lineno=1,
            msg=msg,
            args=args,
            exc_info=exc_info,
        )

    def test_fields(self):
        line = JsonFormatter().format(self._record("Push of %r failed", "Main Page"))
        entry = json.loads(line)
        assert entry["level"] == "ERROR"
        assert entry["logger"] == "wikitext_sync.sync.push"
        assert entry["msg"] == "Push of 'Main Page' failed"
        assert "ts" in entry
        assert "exc" not in entry

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = self._record("failed", exc_info=sys.exc_info())
        entry = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in entry["exc"]
