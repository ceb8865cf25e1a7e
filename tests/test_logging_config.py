"""Unit tests for structlog setup."""

import json
import logging

import pytest
import structlog

from relay import config
from relay.logging_config import setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestSetupLogging:
    def test_stdlib_records_rendered_as_json(self, capsys):
        setup_logging("INFO", "json")
        logging.getLogger("relay.test").info("Message %s stored", "m-1")
        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "Message m-1 stored"
        assert payload["level"] == "info"
        assert payload["logger"] == "relay.test"
        assert "timestamp" in payload

    def test_structlog_events_carry_fields(self, capsys):
        setup_logging("INFO", "json")
        structlog.get_logger("relay.audit").info("message.sent", case_id="case-1")
        payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert payload["event"] == "message.sent"
        assert payload["case_id"] == "case-1"

    def test_level_filtering(self, capsys):
        setup_logging("WARNING", "json")
        logging.getLogger("relay.test").info("hidden")
        assert capsys.readouterr().out == ""

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("NOT-A-LEVEL")
        assert logging.getLogger().level == logging.INFO

    def test_console_format(self, capsys):
        setup_logging("INFO", "console")
        logging.getLogger("relay.test").info("plain text")
        assert "plain text" in capsys.readouterr().out

    def test_single_handler_installed(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger().handlers) == 1

    def test_defaults_come_from_settings(self, monkeypatch, capsys):
        monkeypatch.setattr(config, "settings", None)
        monkeypatch.setenv("RELAY_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("RELAY_LOG_FORMAT", "console")
        setup_logging()
        assert logging.getLogger().level == logging.WARNING
        logging.getLogger("relay.test").warning("plain warning")
        out = capsys.readouterr().out
        assert "plain warning" in out
        assert not out.lstrip().startswith("{")

    def test_explicit_arguments_override_settings(self, monkeypatch):
        monkeypatch.setattr(config, "settings", None)
        monkeypatch.setenv("RELAY_LOG_LEVEL", "WARNING")
        setup_logging("DEBUG", "json")
        assert logging.getLogger().level == logging.DEBUG
