"""
Tests for structured logging helpers.
"""
import json
import logging

import pytest

from app.logging_config import StructuredFormatter, StructuredLogger, timed


@pytest.fixture
def logger():
    return StructuredLogger("volunteer.test")


class TestTimed:
    """Test the timing decorator."""

    def test_logs_duration_on_success(self, logger, caplog):
        @timed(logger)
        def add(a, b):
            return a + b

        with caplog.at_level(logging.DEBUG, logger="volunteer.test"):
            assert add(2, 3) == 5

        record = caplog.records[-1]
        assert record.getMessage() == "add completed"
        assert record.context["function"] == "add"
        assert record.context["duration_ms"] >= 0

    def test_logs_and_reraises_failure(self, logger, caplog):
        @timed(logger)
        def explode():
            raise ValueError("boom")

        with caplog.at_level(logging.DEBUG, logger="volunteer.test"):
            with pytest.raises(ValueError):
                explode()

        record = caplog.records[-1]
        assert record.levelname == "ERROR"
        assert record.context["error_type"] == "ValueError"
        assert record.context["error_message"] == "boom"


class TestStructuredFormatter:
    """Test JSON log output."""

    def test_context_merged_into_json(self, logger, caplog):
        with caplog.at_level(logging.INFO, logger="volunteer.test"):
            logger.warning("Media cleanup failed", error=RuntimeError("offline"), public_id="a/b")

        line = json.loads(StructuredFormatter().format(caplog.records[-1]))
        assert line["level"] == "WARNING"
        assert line["logger"] == "volunteer.test"
        assert line["message"] == "Media cleanup failed"
        assert line["public_id"] == "a/b"
        assert line["error_type"] == "RuntimeError"
