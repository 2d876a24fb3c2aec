"""
Unit Tests for Centralized Logging.

Tests the logging configuration, structured fields, and source handling.
"""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import MagicMock, patch

import pytest
import structlog

from notekeep.backend.core import logging as logging_module
from notekeep.backend.core.logging import VALID_SOURCES, log_with_source, setup_logging


@pytest.fixture
def restore_logging():
    """Undo setup_logging side effects on the root logger and structlog."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()


def _config(console: bool, file: bool) -> dict:
    return {
        "level": "INFO",
        "format": "json",
        "handlers": {
            "console": {"enabled": console},
            "file": {"enabled": file, "path": "logs/test.jsonl", "max_bytes": 1024, "backup_count": 1},
        },
    }


class TestValidSources:
    def test_contains_expected_values(self):
        expected = frozenset({"cli", "shell", "session", "notes", "store", "internal", "unknown"})
        assert VALID_SOURCES == expected

    def test_is_frozenset(self):
        assert isinstance(VALID_SOURCES, frozenset)


class TestLogWithSource:
    def test_passes_source_and_context(self):
        logger = MagicMock()
        log_with_source(logger, "notes", "info", "Notes loaded", count=3)
        logger.info.assert_called_once_with("Notes loaded", source="notes", count=3)

    def test_level_is_case_insensitive(self):
        logger = MagicMock()
        log_with_source(logger, "store", "DEBUG", "Store request")
        logger.debug.assert_called_once()

    def test_invalid_level_raises(self):
        logger = MagicMock(spec=["info"])
        with pytest.raises(AttributeError):
            log_with_source(logger, "store", "loud", "nope")


class TestSetupLogging:
    def test_file_handler_from_config(self, tmp_path, restore_logging):
        with patch.object(logging_module, "_load_logging_config", return_value=_config(False, True)), \
                patch.object(logging_module, "_resolve_log_path", return_value=tmp_path / "logs" / "t.jsonl"):
            setup_logging()

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RotatingFileHandler)
        assert (tmp_path / "logs").is_dir()

    def test_arguments_override_config(self, restore_logging):
        with patch.object(logging_module, "_load_logging_config", return_value=_config(False, False)):
            setup_logging(level="DEBUG", format_type="console", enable_console=True)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_http_client_loggers_quieted(self, restore_logging):
        with patch.object(logging_module, "_load_logging_config", return_value=_config(False, False)):
            setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
