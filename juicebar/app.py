# Juicebar Application
"""
Main Gio application class for Juicebar.

Juicebar has no windows: the application holds itself alive while the
status item sits in the tray. All callbacks (UPower signals, menu
actions, setting changes) arrive on the GLib main loop, so the
controller is only ever invoked serially.

Classes:
    JuicebarApp: Gio.Application subclass wiring the collaborators together.
"""

import logging
from typing import Any

import gi

gi.require_version("Gio", "2.0")
gi.require_version("GLib", "2.0")
from gi.repository import Gio

from .controller import BatteryController
from .core.battery_provider import BatteryProvider
from .core.notification_manager import NotificationManager
from .core.power_monitor import DEFAULT_UPDATE_INTERVAL, PowerSourceMonitor
from .core.preferences import SHOW_TIME_KEY, UserPreferences
from .core.settings_manager import SettingsManager
from .ui.status_item import StatusItem

logger = logging.getLogger(__name__)

APPLICATION_ID = "io.github.juicebar.Juicebar"


class JuicebarApp(Gio.Application):
    """Juicebar battery status application."""

    def __init__(self, settings_manager: SettingsManager | None = None):
        """
        Initialize the application.

        Args:
            settings_manager: Optional SettingsManager; a default one
                              is created if not provided.
        """
        super().__init__(
            application_id=APPLICATION_ID,
            flags=Gio.ApplicationFlags.FLAGS_NONE,
        )

        self._settings_manager = settings_manager or SettingsManager()
        self._preferences = UserPreferences(self._settings_manager)
        self._notification_manager = NotificationManager(self._settings_manager)

        self._status_item = StatusItem(
            on_show_time_toggled=self._on_show_time_toggled,
            on_menu_opened=self._on_menu_opened,
            on_quit=self.quit,
        )
        self._controller = BatteryController(
            provider=BatteryProvider(),
            preferences=self._preferences,
            surface=self._status_item,
            notifier=self._notification_manager.notify,
        )
        self._monitor = PowerSourceMonitor(
            self._controller.on_power_source_changed,
            update_interval=self._settings_manager.get(
                "update_interval", DEFAULT_UPDATE_INTERVAL
            ),
        )
        self._unsubscribe_settings = None

    @property
    def settings_manager(self) -> SettingsManager:
        """Get the settings manager instance."""
        return self._settings_manager

    @property
    def controller(self) -> BatteryController:
        """Get the battery controller."""
        return self._controller

    def do_startup(self):
        """Register the status item and start watching the power source."""
        Gio.Application.do_startup(self)

        # No windows keep the application alive
        self.hold()

        self._notification_manager.set_application(self)
        self._status_item.set_show_time(self._preferences.show_time)
        self._status_item.register()
        self._unsubscribe_settings = self._settings_manager.subscribe(self._on_setting_changed)
        self._monitor.start()

        self._controller.on_power_source_changed()
        logger.info("Juicebar started")

    def do_activate(self):
        """Refresh the status item when the application is activated again."""
        self._controller.on_power_source_changed()

    def do_shutdown(self):
        """Stop monitoring and remove the status item."""
        self._monitor.stop()
        if self._unsubscribe_settings is not None:
            self._unsubscribe_settings()
            self._unsubscribe_settings = None
        self._status_item.unregister()
        logger.info("Juicebar stopped")

        Gio.Application.do_shutdown(self)

    def _on_setting_changed(self, key: str, value: Any) -> None:
        if key == "update_interval":
            self._monitor.set_update_interval(value)
            return
        if key == SHOW_TIME_KEY:
            self._status_item.set_show_time(bool(value))
        self._controller.on_preferences_changed(key, value)

    def _on_show_time_toggled(self, show_time: bool) -> None:
        self._preferences.show_time = show_time

    def _on_menu_opened(self) -> None:
        self._controller.on_preferences_changed("menu")
