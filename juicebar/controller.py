# Juicebar Battery Controller
"""
Controller tying the battery provider, presenter, policy and status item together.

Each event runs one synchronous cycle: poll the provider, render the
status item, and (for power source events) let the notification policy
decide whether to notify. The controller has no GI dependency so it can
be driven by any event source.
"""

import logging
from collections.abc import Callable
from typing import Optional, Protocol

from .core.battery_types import BatteryError, BatterySnapshot, NotificationEvent
from .core.notification_policy import NotificationPolicy
from .core.preferences import UserPreferences
from .core.status_presenter import (
    BatteryIcon,
    MenuDetails,
    StatusDisplay,
    describe,
    error_icon,
    present,
)

logger = logging.getLogger(__name__)


class BatterySource(Protocol):
    def poll(self) -> BatterySnapshot: ...


class StatusSurface(Protocol):
    def show(self, display: StatusDisplay, details: MenuDetails) -> None: ...

    def show_error(self, icon: BatteryIcon) -> None: ...


class BatteryController:
    """
    Reacts to power source and preference changes.

    Power source changes render the status item and evaluate the
    notification policy. Preference changes only re-render.
    """

    def __init__(
        self,
        provider: BatterySource,
        preferences: UserPreferences,
        surface: StatusSurface,
        notifier: Callable[[NotificationEvent], object],
        policy: Optional[NotificationPolicy] = None,
    ):
        """
        Initialize the BatteryController.

        Args:
            provider: Source of battery snapshots
            preferences: User display and notification preferences
            surface: Status item the display is rendered into
            notifier: Called with each event the policy decides to send
            policy: Notification policy; a fresh one is created if omitted
        """
        self._provider = provider
        self._preferences = preferences
        self._surface = surface
        self._notifier = notifier
        self._policy = policy if policy is not None else NotificationPolicy()
        self._last_error: Optional[type] = None

    @property
    def policy(self) -> NotificationPolicy:
        """Get the notification policy."""
        return self._policy

    def on_power_source_changed(self) -> Optional[BatterySnapshot]:
        """Handle a power source change."""
        return self.refresh(evaluate_notifications=True)

    def on_preferences_changed(self, key: str = "", value: object = None) -> Optional[BatterySnapshot]:
        """Handle a preference change; signature matches SettingsManager subscribers."""
        logger.debug("Preferences changed (%s), refreshing status item", key or "all")
        return self.refresh(evaluate_notifications=False)

    def refresh(self, evaluate_notifications: bool = True) -> Optional[BatterySnapshot]:
        """
        Run one poll-render-evaluate cycle.

        Args:
            evaluate_notifications: Whether to run the notification policy

        Returns:
            The snapshot that was rendered, or None if polling failed
        """
        try:
            snapshot = self._provider.poll()
        except BatteryError as e:
            if type(e) is not self._last_error:
                logger.warning("Battery unavailable: %s", e)
                self._last_error = type(e)
            self._surface.show_error(error_icon(e))
            return None

        if self._last_error is not None:
            logger.info("Battery available again")
            self._last_error = None

        preference = self._preferences.display_preference()
        self._surface.show(present(snapshot, preference), describe(snapshot, preference))

        if evaluate_notifications:
            event = self._policy.evaluate(snapshot, self._preferences.enabled_thresholds())
            if event is not None:
                self._notifier(event)

        return snapshot
