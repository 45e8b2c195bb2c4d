"""Tests for logging helpers."""

import logging

import pytest

from vocab2anki_core.utils.logging import (
    LOG_LEVEL_ENV,
    configured_level,
    get_logger,
    log_exceptions,
)


class TestConfiguredLevel:
    """Tests for the environment-driven log level."""

    def test_defaults_to_info(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)

        assert configured_level() == logging.INFO

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV, " debug ")

        assert configured_level() == logging.DEBUG

    def test_unknown_name_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV, "chatty")

        assert configured_level() == logging.INFO


class TestGetLogger:
    """Tests for get_logger."""

    def test_single_handler(self) -> None:
        """Test that repeated lookups do not stack handlers."""
        first = get_logger("vocab2anki_core.tests.handlers")
        second = get_logger("vocab2anki_core.tests.handlers")

        assert first is second
        assert len(second.handlers) == 1

    def test_new_logger_uses_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV, "WARNING")

        logger = get_logger("vocab2anki_core.tests.from_env")

        assert logger.level == logging.WARNING

    def test_explicit_level_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV, "WARNING")

        logger = get_logger("vocab2anki_core.tests.explicit", level=logging.DEBUG)

        assert logger.level == logging.DEBUG


class TestLogExceptions:
    """Tests for the log_exceptions decorator."""

    def test_logs_and_reraises(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that a failure is logged with its label and still raised."""
        logger = get_logger("vocab2anki_core.tests.failing")

        @log_exceptions(logger, "zip packaging")
        def pack() -> bytes:
            raise ValueError("bad entry name")

        with caplog.at_level(logging.ERROR, logger=logger.name):
            with pytest.raises(ValueError, match="bad entry name"):
                pack()

        (record,) = caplog.records
        assert record.getMessage() == "zip packaging failed: ValueError: bad entry name"
        assert record.exc_info is not None

    def test_label_defaults_to_function_name(self, caplog: pytest.LogCaptureFixture) -> None:
        logger = get_logger("vocab2anki_core.tests.default_label")

        @log_exceptions(logger)
        def serialize() -> None:
            raise OSError("disk full")

        with caplog.at_level(logging.ERROR, logger=logger.name):
            with pytest.raises(OSError):
                serialize()

        assert caplog.records[0].getMessage().startswith("serialize failed: OSError")

    def test_success_passes_through(self) -> None:
        logger = get_logger("vocab2anki_core.tests.passing")

        @log_exceptions(logger)
        def add(a: int, b: int) -> int:
            return a + b

        assert add(2, b=3) == 5
        assert add.__name__ == "add"
