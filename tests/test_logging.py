"""Tests for structured logging configuration."""

import json
import logging
import sys
from unittest.mock import patch

from postguard.app.core.logging import (
    ContextFilter,
    JSONFormatter,
    get_log_context,
    get_logger,
    get_logging_config,
)


def make_record(msg="Test message", level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """Test JSON formatter for structured logging."""

    def test_basic_json_format(self):
        output = JSONFormatter().format(make_record())
        data = json.loads(output)

        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["source"]["file"] == "test.py"
        assert data["source"]["line"] == 1

    def test_json_format_with_context(self):
        record = make_record("Request admitted")
        record.request_id = "req-1"
        record.client_key = "203.0.113.7"
        record.decision = "admitted"
        record.duration_ms = 12.5

        data = json.loads(JSONFormatter().format(record))

        assert data["request_id"] == "req-1"
        assert data["client_key"] == "203.0.113.7"
        assert data["decision"] == "admitted"
        assert data["duration_ms"] == 12.5
        assert "extra" not in data

    def test_json_format_with_extra_fields(self):
        record = make_record("Custom event")
        record.retry_after = 18

        data = json.loads(JSONFormatter().format(record))

        assert data["extra"]["retry_after"] == 18

    def test_unset_context_fields_are_omitted(self):
        record = make_record()
        ContextFilter().filter(record)

        data = json.loads(JSONFormatter().format(record))

        assert "client_key" not in data
        assert "request_id" not in data

    def test_json_format_with_exception(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("Error occurred", logging.ERROR, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert isinstance(data["exception"], list)
        assert any("ValueError" in line for line in data["exception"])


class TestContextFilter:
    """Test the context defaults filter."""

    def test_adds_defaults(self):
        record = make_record()

        assert ContextFilter().filter(record) is True
        assert record.request_id is None
        assert record.client_key is None
        assert record.decision is None

    def test_keeps_existing_values(self):
        record = make_record()
        record.client_key = "198.51.100.3"

        ContextFilter().filter(record)

        assert record.client_key == "198.51.100.3"


class TestLogContext:
    """Test get_log_context helper."""

    def test_drops_none_values(self):
        context = get_log_context(client_key="203.0.113.7")
        assert context == {"client_key": "203.0.113.7"}

    def test_includes_extra_fields(self):
        context = get_log_context(request_id="r", decision="rejected_spam", path="/api")
        assert context == {"request_id": "r", "decision": "rejected_spam", "path": "/api"}


class TestLoggingConfig:
    """Test dictConfig generation."""

    def test_text_format(self):
        with patch("postguard.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "text"
            mock_settings.log_level = "debug"
            config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "standard"
        assert config["loggers"]["postguard"]["level"] == "DEBUG"
        assert config["loggers"]["postguard"]["propagate"] is False

    def test_structured_format(self):
        with patch("postguard.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "structured"
            mock_settings.log_level = "INFO"
            config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "structured"
        assert "client_key" in config["formatters"]["structured"]["format"]

    def test_json_format(self):
        with patch("postguard.app.core.logging.settings") as mock_settings:
            mock_settings.log_format = "JSON"
            mock_settings.log_level = "INFO"
            config = get_logging_config()

        assert config["handlers"]["console"]["formatter"] == "json"
        assert config["formatters"]["json"]["()"] == "postguard.app.core.logging.JSONFormatter"

    def test_get_logger(self):
        assert get_logger("postguard.test").name == "postguard.test"
