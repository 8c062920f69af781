# Juicebar Notification Policy Module
"""
Notification policy deciding when a battery notification should be sent.

The policy keeps a single piece of state, the last threshold a
notification was sent for:
- Plugged in and charged: notify once about the full charge
- Unplugged: notify once when the percentage hits an enabled checkpoint
  exactly
- Plugged in but not yet charged: forget the last threshold so every
  checkpoint can fire again during the next cycle
"""

import logging
import threading
from collections.abc import Iterable
from typing import Optional

from .battery_types import BatterySnapshot, NotificationEvent, NotificationThreshold

logger = logging.getLogger(__name__)


class NotificationPolicy:
    """
    Debounced decision engine for battery notifications.

    Holds the last notified threshold for the lifetime of the process.
    Access is serialized with a lock so events delivered from different
    threads cannot interleave state updates.
    """

    def __init__(self):
        """Initialize the policy with no debounce state."""
        self._last_notified: Optional[NotificationThreshold] = None
        self._lock = threading.Lock()

    @property
    def last_notified(self) -> Optional[NotificationThreshold]:
        """Get the threshold the most recent notification was sent for."""
        return self._last_notified

    def evaluate(
        self,
        snapshot: BatterySnapshot,
        enabled_thresholds: Iterable[NotificationThreshold],
    ) -> Optional[NotificationEvent]:
        """
        Decide whether a snapshot should trigger a notification.

        Args:
            snapshot: Current battery snapshot
            enabled_thresholds: Thresholds the user wants notifications for

        Returns:
            The notification to send, or None
        """
        enabled = frozenset(enabled_thresholds)

        with self._lock:
            if snapshot.is_plugged and snapshot.is_charged:
                return self._evaluate_charged(enabled)

            if not snapshot.is_plugged:
                return self._evaluate_discharging(snapshot.percentage, enabled)

            if self._last_notified is not None:
                logger.info(
                    "Power connected, re-arming notifications (last: %s)",
                    self._last_notified.name,
                )
            self._last_notified = None
            return None

    def _evaluate_charged(
        self, enabled: frozenset[NotificationThreshold]
    ) -> Optional[NotificationEvent]:
        """Handle the plugged-in-and-charged state. Caller holds lock."""
        full = NotificationThreshold.HUNDRED_PERCENT
        if full not in enabled or self._last_notified is full:
            return None

        self._last_notified = full
        logger.info("Battery fully charged, sending notification")
        return NotificationEvent.fully_charged()

    def _evaluate_discharging(
        self, percentage: int, enabled: frozenset[NotificationThreshold]
    ) -> Optional[NotificationEvent]:
        """Handle the running-on-battery state. Caller holds lock."""
        threshold = NotificationThreshold.for_percentage(percentage)
        if threshold is None or threshold not in enabled:
            return None
        if self._last_notified is threshold:
            return None

        self._last_notified = threshold
        logger.info("Battery at %d%%, sending low battery notification", percentage)
        return NotificationEvent.low_battery(threshold)
