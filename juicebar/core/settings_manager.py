# Juicebar Settings Manager Module
"""
Settings manager module for Juicebar providing persistent user preferences.

Settings are stored as JSON in the XDG config directory and merged over
built-in defaults on load. Subscribers are told whenever a value changes.
"""

import copy
import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = (
    Path(os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))) / "juicebar"
)

SETTINGS_FILENAME = "settings.json"


class SettingsManager:
    """
    Manager for persistent application settings.

    Provides thread-safe get/set access to a JSON settings file and
    notifies subscribers after a value changes.
    """

    DEFAULT_SETTINGS: dict[str, Any] = {
        "show_time": False,
        "notification_thresholds": [5, 10, 100],
        "notifications_enabled": True,
        "update_interval": 60,
        "debug_log_level": "WARNING",
        "debug_log_max_size_mb": 5,
        "debug_log_max_files": 3,
    }

    def __init__(self, config_dir: Optional[Path | str] = None):
        """
        Initialize the SettingsManager.

        Args:
            config_dir: Directory for the settings file. Defaults to
                        $XDG_CONFIG_HOME/juicebar. Created on first save.
        """
        self._config_dir = Path(config_dir) if config_dir is not None else DEFAULT_CONFIG_DIR
        self._settings_file = self._config_dir / SETTINGS_FILENAME
        self._lock = threading.Lock()
        self._subscribers: list[Callable[[str, Any], None]] = []
        self._settings = self._load()

    @property
    def settings_file(self) -> Path:
        """Get the path of the settings file."""
        return self._settings_file

    def _load(self) -> dict[str, Any]:
        """
        Load settings from disk merged over the defaults.

        A missing or unreadable file yields the defaults.
        """
        settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        if not self._settings_file.exists():
            return settings

        try:
            with open(self._settings_file, encoding="utf-8") as f:
                stored = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read settings, using defaults: %s", e)
            return settings

        if not isinstance(stored, dict):
            logger.warning("Settings file does not hold an object, using defaults")
            return settings

        settings.update(stored)
        return settings

    def _save(self) -> bool:
        """
        Atomically write the settings to disk. Caller holds lock.

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                suffix=".json",
                prefix="settings_",
                dir=self._config_dir,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(self._settings, f, indent=2)
                Path(temp_path).replace(self._settings_file)
                return True
            except Exception:
                Path(temp_path).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to save settings: %s", e)
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value.

        Args:
            key: Setting name
            default: Value returned if the setting is unknown

        Returns:
            The stored value, or default
        """
        with self._lock:
            return copy.deepcopy(self._settings.get(key, default))

    def set(self, key: str, value: Any) -> bool:
        """
        Set a setting value and save it.

        Subscribers are notified only if the value changed and was saved.

        Args:
            key: Setting name
            value: New JSON-serializable value

        Returns:
            True if the setting was saved, False otherwise
        """
        with self._lock:
            had_key = key in self._settings
            previous = self._settings.get(key)
            self._settings[key] = copy.deepcopy(value)
            if not self._save():
                if had_key:
                    self._settings[key] = previous
                else:
                    del self._settings[key]
                return False
            changed = previous != value
            subscribers = list(self._subscribers)

        if changed:
            logger.debug("Setting changed: %s", key)
            for callback in subscribers:
                callback(key, value)
        return True

    def get_all(self) -> dict[str, Any]:
        """Get a copy of all settings."""
        with self._lock:
            return copy.deepcopy(self._settings)

    def reset_to_defaults(self) -> bool:
        """
        Restore the default settings and save them.

        Subscribers are notified once for every key that changed.

        Returns:
            True if saved successfully, False otherwise
        """
        with self._lock:
            previous = self._settings
            self._settings = copy.deepcopy(self.DEFAULT_SETTINGS)
            if not self._save():
                self._settings = previous
                return False
            changed = [
                key for key, value in self._settings.items() if previous.get(key) != value
            ]
            subscribers = list(self._subscribers)

        for key in changed:
            for callback in subscribers:
                callback(key, self.DEFAULT_SETTINGS[key])
        return True

    def subscribe(self, callback: Callable[[str, Any], None]) -> Callable[[], None]:
        """
        Register a callback for setting changes.

        Args:
            callback: Called with (key, new_value) after a change is saved

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe
