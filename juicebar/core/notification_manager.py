# Juicebar Notification Manager Module
"""
Notification manager module for Juicebar providing desktop notifications.
Uses the Gio.Notification API so notifications go through the session's
notification service.
"""

import logging
from typing import Optional

from gi.repository import Gio

from .battery_types import NotificationEvent, NotificationKind
from .settings_manager import SettingsManager

logger = logging.getLogger(__name__)

# Thresholds at or below this percentage are sent as urgent
URGENT_PERCENTAGE = 10


class NotificationManager:
    """
    Manager for battery desktop notifications.

    Sends the events decided by the NotificationPolicy. Notifications
    can be disabled via user settings.
    """

    # Notification IDs; a new notification replaces the previous one with the same ID
    NOTIFICATION_ID_CHARGED = "battery-charged"
    NOTIFICATION_ID_LOW = "battery-low"

    def __init__(self, settings_manager: Optional[SettingsManager] = None):
        """
        Initialize the NotificationManager.

        Args:
            settings_manager: Optional SettingsManager instance for checking
                              notification preferences. If not provided, a
                              default instance is created.
        """
        self._app: Optional[Gio.Application] = None
        self._settings = settings_manager if settings_manager else SettingsManager()

    def set_application(self, app: Gio.Application) -> None:
        """
        Set the application reference for sending notifications.

        This must be called after the application is registered,
        typically in do_startup().

        Args:
            app: The Gio.Application instance
        """
        self._app = app

    def notify(self, event: NotificationEvent) -> bool:
        """
        Send the notification for a policy event.

        Args:
            event: Event returned by NotificationPolicy.evaluate()

        Returns:
            True if the notification was sent, False otherwise
        """
        if event.kind is NotificationKind.FULLY_CHARGED:
            return self.notify_fully_charged()
        return self.notify_low_battery(event.threshold.value)

    def notify_fully_charged(self) -> bool:
        """
        Send the fully charged notification.

        Returns:
            True if notification was sent, False otherwise
        """
        if not self._can_notify():
            return False

        self.withdraw_notification(self.NOTIFICATION_ID_LOW)
        return self._send(
            notification_id=self.NOTIFICATION_ID_CHARGED,
            title="Battery Fully Charged",
            body="You can unplug the power adapter.",
            priority=Gio.NotificationPriority.NORMAL,
            icon_name="battery-full-charged-symbolic",
        )

    def notify_low_battery(self, percentage: int) -> bool:
        """
        Send a low battery notification.

        Args:
            percentage: Checkpoint percentage that was reached

        Returns:
            True if notification was sent, False otherwise
        """
        if not self._can_notify():
            return False

        if percentage <= URGENT_PERCENTAGE:
            priority = Gio.NotificationPriority.URGENT
            icon_name = "battery-caution-symbolic"
        else:
            priority = Gio.NotificationPriority.NORMAL
            icon_name = "battery-low-symbolic"

        return self._send(
            notification_id=self.NOTIFICATION_ID_LOW,
            title="Low Battery",
            body=f"{percentage}% of battery remaining. Consider plugging in.",
            priority=priority,
            icon_name=icon_name,
        )

    def _can_notify(self) -> bool:
        """
        Check if notifications are enabled and possible.

        Returns:
            True if notifications can be sent, False otherwise
        """
        if self._app is None:
            logger.debug("No application set, notification skipped")
            return False

        return self.notifications_enabled

    def _send(
        self,
        notification_id: str,
        title: str,
        body: str,
        priority: Gio.NotificationPriority,
        icon_name: str,
    ) -> bool:
        """
        Send a notification.

        Args:
            notification_id: Unique ID for this notification (for deduplication)
            title: Notification title
            body: Notification body text
            priority: Notification priority (NORMAL or URGENT)
            icon_name: Themed icon shown with the notification

        Returns:
            True if notification was sent successfully, False otherwise
        """
        try:
            notification = Gio.Notification.new(title)
            notification.set_body(body)
            notification.set_priority(priority)
            notification.set_icon(Gio.ThemedIcon.new(icon_name))

            self._app.send_notification(notification_id, notification)
            logger.debug("Sent notification %s", notification_id)
            return True
        except Exception as e:
            # The D-Bus notification service may not be running
            logger.warning("Failed to send notification %s: %s", notification_id, e)
            return False

    def withdraw_notification(self, notification_id: str) -> bool:
        """
        Withdraw a previously sent notification.

        Args:
            notification_id: The ID of the notification to withdraw

        Returns:
            True if withdrawal was attempted, False if no app reference
        """
        if self._app is None:
            return False

        try:
            self._app.withdraw_notification(notification_id)
            return True
        except Exception as e:
            logger.debug("Failed to withdraw notification %s: %s", notification_id, e)
            return False

    @property
    def notifications_enabled(self) -> bool:
        """
        Check if notifications are enabled in settings.

        Returns:
            True if notifications are enabled, False otherwise
        """
        return self._settings.get("notifications_enabled", True)
