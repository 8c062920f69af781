# Juicebar Logging Configuration Tests
"""Unit tests for the logging_config module."""

import logging
import os
import stat

import pytest

from juicebar.core.logging_config import (
    DEFAULT_LOG_LEVEL,
    LOG_FILENAME,
    LOG_FORMAT,
    ROOT_LOGGER_NAME,
    LoggingConfig,
    PrivacyFormatter,
    configure_logging,
    get_logging_config,
    sanitize_path_for_logging,
)


@pytest.fixture
def logging_config():
    """The singleton, with its handler removed afterwards."""
    config = get_logging_config()
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    previous_level = root_logger.level
    yield config
    if config._file_handler is not None:
        root_logger.removeHandler(config._file_handler)
        config._file_handler.close()
        config._file_handler = None
    root_logger.setLevel(previous_level)


def _record(msg):
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


class TestPrivacyFormatter:
    """Tests for the PrivacyFormatter class."""

    def test_format_replaces_home_directory(self):
        """Test that home directory paths are replaced with ~."""
        formatter = PrivacyFormatter(LOG_FORMAT)
        home = os.path.expanduser("~")
        if home in ("", "/"):
            pytest.skip("No usable home directory")

        formatted = formatter.format(_record(f"Reading {home}/.config/juicebar/settings.json"))

        assert "~/.config/juicebar/settings.json" in formatted
        assert home + "/" not in formatted

    def test_format_preserves_system_paths(self):
        """Test that sysfs paths are left alone."""
        formatter = PrivacyFormatter(LOG_FORMAT)
        formatted = formatter.format(_record("Reading /sys/class/power_supply/BAT0"))
        assert "/sys/class/power_supply/BAT0" in formatted

    def test_sanitize_without_paths(self):
        """Test that plain text is unchanged."""
        assert sanitize_path_for_logging("Battery at 10%") == "Battery at 10%"


class TestLoggingConfig:
    """Tests for the LoggingConfig singleton."""

    def test_singleton(self):
        """Test that every instantiation returns the same object."""
        assert LoggingConfig() is LoggingConfig()
        assert LoggingConfig() is get_logging_config()

    def test_configure_creates_log_file(self, logging_config, tmp_path):
        """Test that configuring writes to the log directory."""
        log_dir = tmp_path / "logs"

        assert configure_logging(log_level="INFO", log_dir=log_dir) is True
        logging.getLogger("juicebar.test").info("hello")
        logging_config._file_handler.flush()

        log_file = log_dir / LOG_FILENAME
        assert log_file.exists()
        assert "hello" in log_file.read_text()
        assert logging_config.get_log_dir() == log_dir

    def test_configure_restricts_permissions(self, logging_config, tmp_path):
        """Test that the log directory is private to the user."""
        log_dir = tmp_path / "logs"
        configure_logging(log_dir=log_dir)

        assert stat.S_IMODE(log_dir.stat().st_mode) == 0o700

    def test_reconfigure_replaces_handler(self, logging_config, tmp_path):
        """Test that configuring twice keeps a single handler."""
        configure_logging(log_dir=tmp_path / "a")
        configure_logging(log_dir=tmp_path / "b")

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        handler = logging_config._file_handler
        assert root_logger.handlers.count(handler) == 1
        assert handler.baseFilename == str(tmp_path / "b" / LOG_FILENAME)

    def test_configure_failure(self, logging_config, tmp_path):
        """Test that an unusable directory is reported."""
        blocker = tmp_path / "file"
        blocker.write_text("")

        assert configure_logging(log_dir=blocker / "logs") is False

    def test_set_log_level(self, logging_config, tmp_path):
        """Test changing the level at runtime."""
        configure_logging(log_dir=tmp_path)

        assert logging_config.set_log_level("debug") is True
        assert logging_config.get_log_level() == "DEBUG"

    def test_set_invalid_log_level(self, logging_config):
        """Test that unknown level names are rejected."""
        assert logging_config.set_log_level("LOUD") is False
        assert logging_config.set_log_level("root") is False

    def test_default_level_without_handler(self, logging_config):
        """Test the level reported before configuration."""
        assert logging_config.get_log_level() == DEFAULT_LOG_LEVEL

    def test_clear_logs(self, logging_config, tmp_path):
        """Test that clearing removes old content and keeps logging."""
        configure_logging(log_level="INFO", log_dir=tmp_path)
        logging.getLogger("juicebar.test").info("old entry")
        (tmp_path / f"{LOG_FILENAME}.1").write_text("rotated")

        assert logging_config.clear_logs() is True

        assert not (tmp_path / f"{LOG_FILENAME}.1").exists()
        logging_config._file_handler.flush()
        assert "old entry" not in (tmp_path / LOG_FILENAME).read_text()
        assert logging_config.get_log_files() == [tmp_path / LOG_FILENAME]
