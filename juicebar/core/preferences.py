# Juicebar User Preferences
"""
Typed view of the user settings the battery logic reads.
"""

import logging

from .battery_types import DisplayPreference, NotificationThreshold
from .settings_manager import SettingsManager

logger = logging.getLogger(__name__)

SHOW_TIME_KEY = "show_time"
THRESHOLDS_KEY = "notification_thresholds"


class UserPreferences:
    """Read and write display and notification preferences."""

    def __init__(self, settings_manager: SettingsManager):
        self._settings = settings_manager

    @property
    def show_time(self) -> bool:
        """Whether the title shows the remaining time instead of the percentage."""
        value = self._settings.get(SHOW_TIME_KEY, False)
        if not isinstance(value, bool):
            logger.warning("Ignoring malformed %s setting: %r", SHOW_TIME_KEY, value)
            return False
        return value

    @show_time.setter
    def show_time(self, value: bool) -> None:
        self._settings.set(SHOW_TIME_KEY, bool(value))

    def display_preference(self) -> DisplayPreference:
        """Get a snapshot of the display preference."""
        return DisplayPreference(show_time=self.show_time)

    def enabled_thresholds(self) -> frozenset[NotificationThreshold]:
        """
        Get the thresholds the user wants notifications for.

        Entries that name no known threshold are skipped.
        """
        stored = self._settings.get(THRESHOLDS_KEY, [])
        if not isinstance(stored, list):
            logger.warning("Ignoring malformed %s setting: %r", THRESHOLDS_KEY, stored)
            return frozenset()

        thresholds = set()
        for value in stored:
            try:
                thresholds.add(NotificationThreshold.parse(value))
            except (ValueError, TypeError):
                logger.warning("Ignoring unknown notification threshold: %r", value)
        return frozenset(thresholds)

    def set_enabled_thresholds(self, thresholds) -> bool:
        """
        Store the thresholds the user wants notifications for.

        Returns:
            True if saved successfully, False otherwise
        """
        values = sorted({NotificationThreshold.parse(t).value for t in thresholds})
        return self._settings.set(THRESHOLDS_KEY, values)
