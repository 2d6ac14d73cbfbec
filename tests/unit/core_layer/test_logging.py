"""
Unit Tests for Logging Module

Tests logger creation, processors, setup and the log_stage helper.
"""

import logging
from unittest.mock import MagicMock, patch

import pytest
import structlog

from leveled_cache.core.config.constants import Stage
from leveled_cache.core.logging.logger import (
    add_log_level_name,
    add_timestamp,
    get_logger,
    log_stage,
    setup_logging,
)


@pytest.fixture
def reset_structlog():
    """Restore structlog defaults after a test reconfigures it."""
    yield
    structlog.reset_defaults()


@pytest.mark.unit
class TestLoggerCreation:
    """Test logger creation."""

    def test_get_logger_returns_logger_instance(self):
        """Test that get_logger returns a logger instance."""
        logger = get_logger(__name__)

        assert logger is not None
        assert hasattr(logger, "info")
        assert hasattr(logger, "debug")
        assert hasattr(logger, "error")

    def test_get_logger_with_different_names(self):
        logger1 = get_logger("module1")
        logger2 = get_logger("module2")

        assert logger1 is not logger2


@pytest.mark.unit
class TestProcessors:
    """Test the custom structlog processors."""

    def test_add_timestamp_is_utc_iso(self):
        event = add_timestamp(None, "info", {"event": "x"})

        assert event["timestamp"].endswith("Z")
        assert "T" in event["timestamp"]

    def test_add_log_level_name_uppercases(self):
        assert add_log_level_name(None, "info", {"level": "debug"})["level"] == "DEBUG"

    def test_add_log_level_name_without_level(self):
        assert add_log_level_name(None, "info", {"event": "x"}) == {"event": "x"}


@pytest.mark.unit
class TestLogStageFunction:
    """Test the log_stage utility function."""

    def test_log_stage_calls_logger(self):
        """Test that log_stage calls the logger with correct parameters."""
        mock_logger = MagicMock()

        log_stage(mock_logger, Stage.LEVEL_READ, "Level hit", level_index=0, cache_key="k")

        mock_logger.info.assert_called_once_with(
            "Level hit", stage=Stage.LEVEL_READ, level_index=0, cache_key="k"
        )

    def test_log_stage_with_different_levels(self):
        mock_logger = MagicMock()

        log_stage(mock_logger, Stage.LEVEL_MISS, "Debug", level="debug")
        log_stage(mock_logger, Stage.LEVEL_FAILURE, "Failed", level="ERROR")

        mock_logger.debug.assert_called_once()
        mock_logger.error.assert_called_once()
        mock_logger.info.assert_not_called()

    def test_log_stage_handles_none_logger(self):
        """None is not a logger; the AttributeError surfaces."""
        with pytest.raises(AttributeError):
            log_stage(None, Stage.FAN_OUT, "Test")

    def test_stage_values_serialize_as_strings(self):
        assert Stage.LEVEL_FAILURE == "2.E"
        assert Stage.REDIS.value == "REDIS"


@pytest.mark.unit
class TestSetupLogging:
    """Test structlog configuration."""

    def test_json_renderer(self, reset_structlog):
        with patch("leveled_cache.core.logging.logger.logging.basicConfig") as mock_basic:
            setup_logging(log_level="debug", log_format="json")

        assert mock_basic.call_args.kwargs["level"] == logging.DEBUG
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert add_timestamp in processors

    def test_console_renderer(self, reset_structlog):
        with patch("leveled_cache.core.logging.logger.logging.basicConfig"):
            setup_logging(log_level="INFO", log_format="console")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_defaults_come_from_settings(self, reset_structlog, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        monkeypatch.setenv("LOG_FORMAT", "console")

        with patch("leveled_cache.core.logging.logger.logging.basicConfig") as mock_basic:
            setup_logging()

        assert mock_basic.call_args.kwargs["level"] == logging.WARNING
        assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)
