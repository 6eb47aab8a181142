"""Tests for the structlog configuration helpers."""

import pytest

from flowcreate.core.enums import Environment, LogFormat, LogLevel
from flowcreate.core.errors import ConfigurationError
from flowcreate.core.logging import (
    LogConfig,
    MessageLengthFilter,
    SensitiveDataFilter,
    StructuredLogger,
)


class RecordingLogger:
    """Stands in for the structlog logger behind a StructuredLogger."""

    def __init__(self):
        self.records: list[tuple[str, str, dict]] = []

    def __getattr__(self, method_name):
        def _record(message, **kwargs):
            self.records.append((method_name, message, kwargs))

        return _record


@pytest.mark.unit
class TestSensitiveDataFilter:
    """Test credential masking."""

    def test_masks_sensitive_keys_recursively(self):
        event = {
            "event": "Executing integration",
            "integration_id": "abc",
            "secret_ref": "crm-api-key",
            "headers": {"Authorization": "Bearer xyz", "Accept": "application/json"},
            "api_key": "k",
            "token": None,
        }

        filtered = SensitiveDataFilter()(None, "info", event)

        assert filtered["secret_ref"] == "***[MASKED]"
        assert filtered["api_key"] == "***[MASKED]"
        assert filtered["headers"] == {
            "Authorization": "***[MASKED]",
            "Accept": "application/json",
        }
        assert filtered["token"] is None
        assert filtered["integration_id"] == "abc"
        assert event["secret_ref"] == "crm-api-key"


@pytest.mark.unit
class TestMessageLengthFilter:
    def test_truncates_long_events(self):
        event = MessageLengthFilter(max_length=10)(None, "info", {"event": "x" * 20})

        assert event["event"] == "x" * 10 + "... [TRUNCATED]"

    def test_short_events_untouched(self):
        event = MessageLengthFilter(max_length=10)(None, "info", {"event": "short"})

        assert event["event"] == "short"


@pytest.mark.unit
class TestLogConfig:
    """Test logging configuration defaults."""

    def test_environment_defaults(self):
        development = LogConfig(environment=Environment.DEVELOPMENT)
        testing = LogConfig(environment=Environment.TESTING)
        production = LogConfig(format=LogFormat.CONSOLE, environment=Environment.PRODUCTION)

        assert development.format == LogFormat.CONSOLE
        assert development.enable_caller_info
        assert testing.level == LogLevel.WARNING
        assert testing.format == LogFormat.PLAIN
        assert production.format == LogFormat.JSON

    def test_message_length_floor(self):
        with pytest.raises(ConfigurationError):
            LogConfig(max_message_length=10)


@pytest.mark.unit
class TestStructuredLogger:
    def test_level_gate_and_bind(self):
        """Test records below the configured level are dropped."""
        config = LogConfig(level=LogLevel.WARNING, environment=Environment.STAGING)
        logger = StructuredLogger("flowcreate.test", config)
        recorder = RecordingLogger()
        logger._logger = recorder

        logger.info("Ignored")
        logger.warning("Kept", integration_id="abc")
        logger.exception("Failed")

        assert recorder.records == [
            ("warning", "Kept", {"integration_id": "abc"}),
            ("error", "Failed", {"exc_info": True}),
        ]
