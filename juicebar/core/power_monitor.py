# Juicebar Power Source Monitor Module
"""
Power source monitor module for Juicebar.

Watches UPower's PropertiesChanged signals on the system bus and calls
back when the power source state may have changed. A periodic GLib
timeout keeps polling on systems without UPower, and bursts of D-Bus
signals are coalesced into a single callback on the main loop.
"""

import logging
from collections.abc import Callable

from gi.repository import Gio, GLib

logger = logging.getLogger(__name__)

UPOWER_BUS_NAME = "org.freedesktop.UPower"
PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"

DEFAULT_UPDATE_INTERVAL = 60


def _coerce_interval(value) -> int:
    """Convert a stored interval to whole seconds, falling back to the default."""
    try:
        interval = int(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning(
            "Invalid update interval %r, using %ds", value, DEFAULT_UPDATE_INTERVAL
        )
        return DEFAULT_UPDATE_INTERVAL
    return max(1, interval)


class PowerSourceMonitor:
    """
    Monitor delivering "power source changed" callbacks.

    The callback always runs on the GLib main loop, never more than once
    per burst of D-Bus signals.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        update_interval: int = DEFAULT_UPDATE_INTERVAL,
    ):
        """
        Initialize the PowerSourceMonitor.

        Args:
            callback: Called with no arguments when the power source may
                      have changed.
            update_interval: Seconds between fallback polls.
        """
        self._callback = callback
        self._update_interval = _coerce_interval(update_interval)

        # Must hold a strong reference while subscribed
        self._bus: Gio.DBusConnection | None = None
        self._subscription_id: int = 0
        self._timeout_id: int = 0
        self._idle_id: int = 0
        self._running = False

    def start(self) -> None:
        """Subscribe to UPower signals and start the fallback timer."""
        if self._running:
            return

        self._subscribe_upower()
        self._timeout_id = GLib.timeout_add_seconds(self._update_interval, self._on_timeout)
        self._running = True
        logger.info("Power source monitor started (interval=%ds)", self._update_interval)

    def stop(self) -> None:
        """Unsubscribe from signals and remove pending sources."""
        if not self._running:
            return

        if self._bus is not None and self._subscription_id:
            self._bus.signal_unsubscribe(self._subscription_id)
        self._subscription_id = 0
        self._bus = None

        if self._timeout_id:
            GLib.source_remove(self._timeout_id)
            self._timeout_id = 0
        if self._idle_id:
            GLib.source_remove(self._idle_id)
            self._idle_id = 0

        self._running = False
        logger.info("Power source monitor stopped")

    def set_update_interval(self, interval: int) -> None:
        """Change the fallback poll interval, restarting the timer if running."""
        self._update_interval = _coerce_interval(interval)
        if not self._running:
            return

        if self._timeout_id:
            GLib.source_remove(self._timeout_id)
        self._timeout_id = GLib.timeout_add_seconds(self._update_interval, self._on_timeout)
        logger.debug("Update interval changed to %ds", self._update_interval)

    def _subscribe_upower(self) -> None:
        """Subscribe to UPower property changes, if the system bus is reachable."""
        try:
            self._bus = Gio.bus_get_sync(Gio.BusType.SYSTEM, None)
        except GLib.Error as e:
            logger.warning("System bus unavailable, polling only: %s", e.message)
            self._bus = None
            return

        self._subscription_id = self._bus.signal_subscribe(
            UPOWER_BUS_NAME,
            PROPERTIES_INTERFACE,
            "PropertiesChanged",
            None,
            None,
            Gio.DBusSignalFlags.NONE,
            self._on_properties_changed,
        )
        logger.debug("Subscribed to UPower property changes")

    def _on_properties_changed(
        self,
        connection: Gio.DBusConnection,
        sender_name: str,
        object_path: str,
        interface_name: str,
        signal_name: str,
        parameters: GLib.Variant,
        *user_data,
    ) -> None:
        """Handle a UPower PropertiesChanged signal."""
        logger.debug("UPower properties changed on %s", object_path)
        self._schedule_callback()

    def _schedule_callback(self) -> None:
        """Queue the callback on the main loop unless one is already queued."""
        if self._idle_id:
            return
        self._idle_id = GLib.idle_add(self._dispatch)

    def _dispatch(self) -> bool:
        self._idle_id = 0
        self._callback()
        return GLib.SOURCE_REMOVE

    def _on_timeout(self) -> bool:
        self._schedule_callback()
        return GLib.SOURCE_CONTINUE

    @property
    def update_interval(self) -> int:
        """Get the fallback poll interval in seconds."""
        return self._update_interval
