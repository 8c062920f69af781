# Juicebar Logging Configuration Module
"""
Centralized logging configuration for Juicebar.

This module provides a configurable logging system with:
- Privacy-aware formatting that replaces home directory paths with ~
- Rotating file handlers to manage disk space
- Thread-safe runtime reconfiguration

Logging should be configured early in application startup, before
other modules that use logging are imported.
"""

import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Default log directory follows XDG specification
DEFAULT_LOG_DIR = (
    Path(os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share")))
    / "juicebar"
    / "debug"
)

# Default log settings
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
DEFAULT_BACKUP_COUNT = 3

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILENAME = "juicebar.log"

# Logger at the root of the package tree
ROOT_LOGGER_NAME = "juicebar"


def sanitize_path_for_logging(text: str) -> str:
    """
    Replace the user's home directory with ~ in a string.

    Args:
        text: Text that may contain absolute paths

    Returns:
        The text with home directory prefixes replaced
    """
    home = os.path.expanduser("~")
    if not home or home == "/":
        return text
    return text.replace(home, "~")


class PrivacyFormatter(logging.Formatter):
    """
    Log formatter that sanitizes paths for privacy.

    Replaces home directory paths with ~ so usernames do not leak
    when logs are shared.
    """

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        return sanitize_path_for_logging(formatted)


class LoggingConfig:
    """
    Singleton manager for Juicebar logging configuration.

    Provides thread-safe methods for configuring logging, changing
    the log level at runtime, and clearing log files.
    """

    _instance: "LoggingConfig | None" = None
    _lock = threading.Lock()

    def __new__(cls) -> "LoggingConfig":
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the logging configuration (only runs once)."""
        if self._initialized:
            return

        self._file_handler: RotatingFileHandler | None = None
        self._log_dir: Path = DEFAULT_LOG_DIR
        self._log_file: Path | None = None
        self._max_bytes = DEFAULT_MAX_BYTES
        self._backup_count = DEFAULT_BACKUP_COUNT
        self._config_lock = threading.Lock()
        self._initialized = True

    def _create_handler(self, level: int) -> RotatingFileHandler:
        """Create the rotating file handler. Caller holds lock."""
        handler = RotatingFileHandler(
            self._log_file,
            maxBytes=self._max_bytes,
            backupCount=self._backup_count,
            encoding="utf-8",
        )
        handler.setFormatter(PrivacyFormatter(LOG_FORMAT, DATE_FORMAT))
        handler.setLevel(level)
        return handler

    def configure(
        self,
        log_dir: Path | str | None = None,
        log_level: str = DEFAULT_LOG_LEVEL,
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = DEFAULT_BACKUP_COUNT,
    ) -> bool:
        """
        Configure the logging system.

        Sets up a rotating file handler with privacy-aware formatting on
        the package logger.

        Args:
            log_dir: Directory for log files (default: ~/.local/share/juicebar/debug/)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            max_bytes: Maximum size per log file in bytes
            backup_count: Number of backup files to keep

        Returns:
            True if configuration succeeded, False otherwise
        """
        with self._config_lock:
            try:
                self._log_dir = Path(log_dir) if log_dir is not None else DEFAULT_LOG_DIR
                self._log_dir.mkdir(parents=True, exist_ok=True)
                self._log_dir.chmod(0o700)
                self._log_file = self._log_dir / LOG_FILENAME
                self._max_bytes = max_bytes
                self._backup_count = backup_count

                root_logger = logging.getLogger(ROOT_LOGGER_NAME)
                if self._file_handler is not None:
                    root_logger.removeHandler(self._file_handler)
                    self._file_handler.close()

                level = getattr(logging, log_level.upper(), logging.WARNING)
                self._file_handler = self._create_handler(level)

                if self._log_file.exists():
                    self._log_file.chmod(0o600)

                root_logger.setLevel(level)
                root_logger.addHandler(self._file_handler)

                root_logger.info(
                    "Logging configured: level=%s, max_size=%d bytes, backups=%d",
                    log_level,
                    max_bytes,
                    backup_count,
                )
                return True

            except OSError as e:
                print(f"Failed to configure logging: {e}", file=sys.stderr)
                return False

    def set_log_level(self, level: str) -> bool:
        """
        Change the log level at runtime.

        Args:
            level: New log level (DEBUG, INFO, WARNING, ERROR)

        Returns:
            True if the level was changed
        """
        log_level = getattr(logging, level.upper(), None)
        if not isinstance(log_level, int):
            return False

        with self._config_lock:
            if self._file_handler is not None:
                self._file_handler.setLevel(log_level)

            root_logger = logging.getLogger(ROOT_LOGGER_NAME)
            root_logger.setLevel(log_level)
            root_logger.info("Log level changed to %s", level)
            return True

    def get_log_level(self) -> str:
        """
        Get the current log level name.

        Returns:
            Current log level as string (e.g., "WARNING")
        """
        with self._config_lock:
            if self._file_handler is not None:
                return logging.getLevelName(self._file_handler.level)
            return DEFAULT_LOG_LEVEL

    def _get_log_files_unlocked(self) -> list[Path]:
        """Get all log files. Caller holds lock."""
        if self._log_dir is None or not self._log_dir.exists():
            return []
        return sorted(self._log_dir.glob(f"{LOG_FILENAME}*"))

    def get_log_files(self) -> list[Path]:
        """
        Get the current log file and its rotated backups.

        Returns:
            List of log file paths, sorted by name
        """
        with self._config_lock:
            return self._get_log_files_unlocked()

    def get_log_dir(self) -> Path:
        """Get the log directory path."""
        return self._log_dir

    def clear_logs(self) -> bool:
        """
        Delete all log files and start a fresh one.

        Returns:
            True if all files were deleted successfully
        """
        with self._config_lock:
            root_logger = logging.getLogger(ROOT_LOGGER_NAME)
            if self._file_handler is not None:
                root_logger.removeHandler(self._file_handler)
                self._file_handler.close()
                self._file_handler = None

            success = True
            for log_file in self._get_log_files_unlocked():
                try:
                    log_file.unlink()
                except OSError:
                    success = False

            if self._log_file is not None:
                try:
                    self._file_handler = self._create_handler(
                        root_logger.level or logging.WARNING
                    )
                except OSError:
                    return False
                root_logger.addHandler(self._file_handler)
                root_logger.info("Log files cleared")

            return success


# Module-level singleton instance
_config = LoggingConfig()


def configure_logging(
    log_level: str = DEFAULT_LOG_LEVEL,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    log_dir: Path | str | None = None,
) -> bool:
    """
    Configure the Juicebar logging system.

    This is the main entry point for setting up logging.

    Returns:
        True if configuration succeeded
    """
    return _config.configure(
        log_dir=log_dir,
        log_level=log_level,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )


def get_logging_config() -> LoggingConfig:
    """Get the LoggingConfig singleton instance."""
    return _config
