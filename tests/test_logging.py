"""Tests for logging setup."""

import logging

import pytest

from vibecode.utils.logging import LogConfig, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Tests for configuring the root logger."""

    def test_records_go_to_stderr(self, restore_root_logger, capsys):
        """Test log output stays off stdout, which belongs to the prompt."""
        setup_logging(LogConfig(level="INFO"))

        logging.getLogger("vibecode.example").info("turn finished")

        captured = capsys.readouterr()
        assert "turn finished" in captured.err
        assert captured.out == ""

    def test_level_from_environment(self, restore_root_logger, monkeypatch):
        """Test LOG_LEVEL sets the root level when no config is given."""
        monkeypatch.setenv("LOG_LEVEL", "debug")

        setup_logging()

        assert restore_root_logger.level == logging.DEBUG

    def test_http_loggers_are_quieted(self, restore_root_logger):
        """Test only the HTTP client loggers are raised to WARNING."""
        logging.getLogger("asyncio").setLevel(logging.NOTSET)

        setup_logging(LogConfig(level="DEBUG"))

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
        assert logging.getLogger("asyncio").level == logging.NOTSET


class TestGetLogger:
    """Tests for module loggers."""

    def test_default_level(self, monkeypatch):
        """Test loggers default to WARNING."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert get_logger("vibecode.tests.default").level == logging.WARNING

    def test_explicit_level(self, monkeypatch):
        """Test an explicit level wins over LOG_LEVEL."""
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        assert get_logger("vibecode.tests.explicit", "info").level == logging.INFO
