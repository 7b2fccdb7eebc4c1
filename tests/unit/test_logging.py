"""
Unit Tests for Logging Utilities
"""
import json
import logging
import pytest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from dbschemas.utils.logging import (
    ConsoleFormatter,
    StructuredFormatter,
    get_handler_context,
    get_logger,
    log_context,
    log_operation,
)


def make_record(message="hello", **extra):
    record = logging.LogRecord("dbschemas.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogContext:
    """Tests for log_context"""

    def test_sets_and_restores_handler(self):
        assert get_handler_context() is None

        with log_context(handler="database"):
            assert get_handler_context() == "database"
            with log_context(handler="cache"):
                assert get_handler_context() == "cache"
            assert get_handler_context() == "database"

        assert get_handler_context() is None


class TestFormatters:
    """Tests for log formatters"""

    def test_structured_formatter(self):
        with log_context(handler="file"):
            output = StructuredFormatter().format(make_record(extra_fields={"tables": 3}))

        entry = json.loads(output)
        assert entry["message"] == "hello"
        assert entry["handler"] == "file"
        assert entry["tables"] == 3

    def test_console_formatter_prefix(self):
        with log_context(handler="model"):
            output = ConsoleFormatter().format(make_record())
        assert "[model] hello" in output


class TestLogOperation:
    """Tests for log_operation"""

    def test_success(self, caplog):
        logger = get_logger("dbschemas.test")

        with caplog.at_level(logging.DEBUG, logger="dbschemas.test"):
            with log_operation(logger, "draft", handlers=["database"]) as ctx:
                ctx["tables"] = 2

        assert ctx["status"] == "success"
        assert ctx["tables"] == 2
        assert "duration_ms" in ctx
        assert "Completed draft" in caplog.text

    def test_failure_reraises(self, caplog):
        logger = get_logger("dbschemas.test")

        with caplog.at_level(logging.DEBUG, logger="dbschemas.test"):
            with pytest.raises(RuntimeError):
                with log_operation(logger, "archive") as ctx:
                    raise RuntimeError("boom")

        assert ctx["status"] == "error"
        assert ctx["error_type"] == "RuntimeError"
        assert "Failed archive" in caplog.text
