"""Tests for structured logging setup."""

import json

import structlog

from object_mapper.logging import (
    TRUNCATION_MARKER,
    ValueTruncatingProcessor,
    get_logger,
    setup_logging,
)


class TestValueTruncatingProcessor:
    """Test cases for ValueTruncatingProcessor."""

    def test_truncates_long_strings(self):
        """Test that long values are cut and marked."""
        processor = ValueTruncatingProcessor(max_value_length=10)
        event_dict = {"event": "mapping started", "payload": "x" * 50}

        result = processor(None, "info", event_dict)

        assert result["payload"] == "x" * 10 + TRUNCATION_MARKER

    def test_preserves_reserved_fields(self):
        """Test that event, level and timestamp are never truncated."""
        processor = ValueTruncatingProcessor(max_value_length=10)
        event = "a very long event name that is kept"

        result = processor(None, "info", {"event": event, "level": "info"})

        assert result["event"] == event

    def test_leaves_numbers_and_none(self):
        """Test that numeric, boolean and None values pass through."""
        processor = ValueTruncatingProcessor(max_value_length=20)
        event_dict = {"event": "e", "index": 10**30, "ok": True, "missing": None}

        result = processor(None, "info", dict(event_dict))

        assert result == event_dict

    def test_truncates_rendered_objects(self):
        """Test that non-string values are bounded by their repr."""
        processor = ValueTruncatingProcessor(max_value_length=20)

        result = processor(None, "info", {"event": "e", "items": list(range(100))})

        assert result["items"].startswith("[0, 1, 2")
        assert result["items"].endswith(TRUNCATION_MARKER)

    def test_short_values_untouched(self):
        """Test that values within the limit are kept as-is."""
        processor = ValueTruncatingProcessor()

        result = processor(None, "info", {"event": "e", "target_type": "tests.Person"})

        assert result["target_type"] == "tests.Person"


class TestGetLogger:
    """Test cases for get_logger."""

    def test_routes_to_stdlib_when_unconfigured(self, caplog):
        """Test that an unconfigured logger renders key/value pairs through logging."""
        assert not structlog.is_configured()
        logger = get_logger("object_mapper.test")

        with caplog.at_level("WARNING"):
            logger.warning("list element skipped", index=3)

        assert "event='list element skipped'" in caplog.text
        assert "index=3" in caplog.text

    def test_unconfigured_logger_respects_level(self, caplog):
        """Test that records below the logging level are dropped."""
        logger = get_logger("object_mapper.test")

        with caplog.at_level("WARNING"):
            logger.debug("mapping started")

        assert "mapping started" not in caplog.text


class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_json_output(self, caplog):
        """Test that JSON format renders parseable events."""
        setup_logging(log_level="DEBUG", log_format="json", max_value_length=20)
        assert structlog.is_configured()

        with caplog.at_level("DEBUG"):
            get_logger("object_mapper.test").info("mapping completed", payload="y" * 100)

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["event"] == "mapping completed"
        assert payload["level"] == "info"
        assert payload["payload"] == "y" * 20 + TRUNCATION_MARKER
        assert "timestamp" in payload

    def test_console_output(self, caplog):
        """Test that console format renders the event text."""
        setup_logging(log_level="INFO", log_format="console")

        with caplog.at_level("INFO"):
            get_logger("object_mapper.test").info("mapping completed", source_type="dict")

        message = caplog.records[-1].getMessage()
        assert "mapping completed" in message
        assert "source_type=dict" in message

    def test_level_filtering(self, caplog):
        """Test that the configured level filters lower events."""
        setup_logging(log_level="ERROR")

        with caplog.at_level("DEBUG"):
            get_logger("object_mapper.test").warning("list element skipped")

        assert "list element skipped" not in caplog.text
