# Juicebar Status Item - StatusNotifierItem D-Bus Implementation
"""
System tray status item using the StatusNotifierItem (SNI) D-Bus protocol.

This implementation uses GIO's D-Bus API directly, so no GTK version is
needed. It implements the org.kde.StatusNotifierItem specification, which
is supported by KDE Plasma, Cinnamon (via xapp-sn-watcher), XFCE (with
the status notifier plugin) and the GNOME AppIndicator extension. The
title text next to the icon uses the Ayatana label extension.

The context menu is exported with libdbusmenu when it is installed.
"""

import logging
import os
import subprocess
from collections.abc import Callable
from typing import Optional

import gi
from gi.repository import Gio, GLib

from ..core.status_presenter import BatteryIcon, IconKind, MenuDetails, StatusDisplay

logger = logging.getLogger(__name__)

# Try to load libdbusmenu for menu export
DBUSMENU_AVAILABLE = False
Dbusmenu = None
try:
    gi.require_version("Dbusmenu", "0.4")
    from gi.repository import Dbusmenu

    DBUSMENU_AVAILABLE = True
except (ValueError, ImportError) as e:
    logger.info("libdbusmenu not available, menu will not be shown: %s", e)


# StatusNotifierItem D-Bus interface XML
STATUS_NOTIFIER_ITEM_XML = """
<!DOCTYPE node PUBLIC "-//freedesktop//DTD D-BUS Object Introspection 1.0//EN"
"http://www.freedesktop.org/standards/dbus/1.0/introspect.dtd">
<node>
  <interface name="org.kde.StatusNotifierItem">
    <property type="s" name="Category" access="read"/>
    <property type="s" name="Id" access="read"/>
    <property type="s" name="Title" access="read"/>
    <property type="s" name="Status" access="read"/>
    <property type="u" name="WindowId" access="read"/>
    <property type="s" name="IconName" access="read"/>
    <property type="(sa(iiay)ss)" name="ToolTip" access="read"/>
    <property type="b" name="ItemIsMenu" access="read"/>
    <property type="o" name="Menu" access="read"/>
    <property type="s" name="XAyatanaLabel" access="read"/>
    <property type="s" name="XAyatanaLabelGuide" access="read"/>
    <method name="ContextMenu">
      <arg type="i" name="x" direction="in"/>
      <arg type="i" name="y" direction="in"/>
    </method>
    <method name="Activate">
      <arg type="i" name="x" direction="in"/>
      <arg type="i" name="y" direction="in"/>
    </method>
    <method name="SecondaryActivate">
      <arg type="i" name="x" direction="in"/>
      <arg type="i" name="y" direction="in"/>
    </method>
    <method name="Scroll">
      <arg type="i" name="delta" direction="in"/>
      <arg type="s" name="orientation" direction="in"/>
    </method>
    <signal name="NewTitle"/>
    <signal name="NewIcon"/>
    <signal name="NewToolTip"/>
    <signal name="NewStatus">
      <arg type="s" name="status"/>
    </signal>
    <signal name="XAyatanaNewLabel">
      <arg type="s" name="label"/>
      <arg type="s" name="guide"/>
    </signal>
  </interface>
</node>
"""

ERROR_TITLE = "Battery unavailable"

# Power settings panels per desktop, tried before the generic fallbacks
POWER_SETTINGS_COMMANDS = {
    "gnome": ["gnome-control-center", "power"],
    "kde": ["systemsettings", "kcm_powerdevilprofilesconfig"],
    "xfce": ["xfce4-power-manager-settings"],
    "cinnamon": ["cinnamon-settings", "power"],
    "mate": ["mate-power-preferences"],
}


def detect_desktop_environment() -> str:
    """
    Detect the current desktop environment.

    Returns:
        Desktop environment name (gnome, kde, xfce, cinnamon, mate, or unknown)
    """
    desktop = os.environ.get("XDG_CURRENT_DESKTOP", "").lower()
    session = os.environ.get("DESKTOP_SESSION", "").lower()

    if "gnome" in desktop or "gnome" in session or "unity" in desktop:
        return "gnome"
    if "kde" in desktop or "plasma" in desktop or "kde" in session:
        return "kde"
    if "xfce" in desktop or "xfce" in session:
        return "xfce"
    if "cinnamon" in desktop or "cinnamon" in session:
        return "cinnamon"
    if "mate" in desktop or "mate" in session:
        return "mate"
    return "unknown"


def open_power_settings() -> bool:
    """
    Open the desktop's power settings panel.

    Returns:
        True if a settings program was launched
    """
    desktop = detect_desktop_environment()
    commands = []
    if desktop in POWER_SETTINGS_COMMANDS:
        commands.append(POWER_SETTINGS_COMMANDS[desktop])
    commands.extend(cmd for cmd in POWER_SETTINGS_COMMANDS.values() if cmd not in commands)

    for cmd in commands:
        try:
            subprocess.Popen(cmd, start_new_session=True)
            logger.debug("Launched %s", cmd[0])
            return True
        except OSError:
            continue

    logger.warning("Could not open power settings: no settings program found")
    return False


class StatusItem:
    """
    Battery status item in the system tray.

    Renders the StatusDisplay and MenuDetails produced by the presenter
    and reports menu actions through callbacks.
    """

    SNI_PATH = "/StatusNotifierItem"
    MENU_PATH = "/MenuBar"

    def __init__(
        self,
        on_show_time_toggled: Optional[Callable[[bool], None]] = None,
        on_menu_opened: Optional[Callable[[], None]] = None,
        on_quit: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize the status item.

        Args:
            on_show_time_toggled: Called with the new state of the
                                  "Show Remaining Time" checkbox
            on_menu_opened: Called right before the menu is shown
            on_quit: Called when "Quit" is activated
        """
        self._on_show_time_toggled = on_show_time_toggled
        self._on_menu_opened = on_menu_opened
        self._on_quit = on_quit

        self._bus: Gio.DBusConnection | None = None
        self._registration_id = 0
        self._bus_name_id = 0
        self._dbus_name = f"org.kde.StatusNotifierItem-{os.getpid()}-1"

        # Display state
        self._icon = BatteryIcon(IconKind.NONE)
        self._title = ""
        self._details = MenuDetails("", "")
        self._show_time = False
        self._has_error = False

        # DBusMenu server and the items updated on refresh
        self._dbusmenu_server = None
        self._menu_root = None
        self._source_item = None
        self._charge_item = None
        self._show_time_item = None

        self._setup_dbusmenu()

    # -- Rendering ------------------------------------------------------------

    def show(self, display: StatusDisplay, details: MenuDetails) -> None:
        """Render a battery status."""
        changed_icon = display.icon != self._icon or self._has_error
        self._icon = display.icon
        self._title = display.title
        self._details = details
        self._has_error = False

        self._update_menu_labels()
        if changed_icon:
            self._emit_signal("NewIcon")
            self._emit_signal("NewStatus", GLib.Variant("(s)", (self.sni_status,)))
        self._emit_title_signals()

    def show_error(self, icon: BatteryIcon) -> None:
        """Render a battery error icon."""
        self._icon = icon
        self._title = ERROR_TITLE
        self._details = MenuDetails(ERROR_TITLE, "")
        self._has_error = True

        self._update_menu_labels()
        self._emit_signal("NewIcon")
        self._emit_signal("NewStatus", GLib.Variant("(s)", (self.sni_status,)))
        self._emit_title_signals()

    def set_show_time(self, show_time: bool) -> None:
        """Sync the "Show Remaining Time" checkbox with the preference."""
        self._show_time = bool(show_time)
        if self._show_time_item is not None:
            self._show_time_item.property_set_int(
                Dbusmenu.MENUITEM_PROP_TOGGLE_STATE,
                Dbusmenu.MENUITEM_TOGGLE_STATE_CHECKED
                if self._show_time
                else Dbusmenu.MENUITEM_TOGGLE_STATE_UNCHECKED,
            )

    @property
    def icon_name(self) -> str:
        return self._icon.icon_name

    @property
    def title(self) -> str:
        return self._title

    @property
    def tooltip(self) -> str:
        """Tooltip body built from the menu details."""
        return "\n".join(line for line in self._details if line)

    @property
    def sni_status(self) -> str:
        return "NeedsAttention" if self._has_error else "Active"

    def _emit_title_signals(self) -> None:
        self._emit_signal("NewTitle")
        self._emit_signal("NewToolTip")
        self._emit_signal("XAyatanaNewLabel", GLib.Variant("(ss)", (self._title, "")))

    # -- Menu ----------------------------------------------------------------

    def _setup_dbusmenu(self) -> None:
        """Set up the DBusMenu server for context menu export."""
        if not DBUSMENU_AVAILABLE:
            logger.debug("DBusMenu not available, context menu will not be shown")
            return

        try:
            self._dbusmenu_server = Dbusmenu.Server.new(self.MENU_PATH)
            self._menu_root = Dbusmenu.Menuitem.new()
            self._menu_root.connect("about-to-show", self._on_menu_about_to_show)
            self._build_menu()
            self._dbusmenu_server.set_root(self._menu_root)
            logger.debug("DBusMenu server initialized at %s", self.MENU_PATH)
        except Exception as e:
            logger.warning("Failed to set up DBusMenu: %s", e)
            self._dbusmenu_server = None
            self._menu_root = None

    def _new_item(self, item_id: int, label: Optional[str] = None):
        item = Dbusmenu.Menuitem.new_with_id(item_id)
        if label is None:
            item.property_set(Dbusmenu.MENUITEM_PROP_TYPE, "separator")
        else:
            item.property_set(Dbusmenu.MENUITEM_PROP_LABEL, label)
        self._menu_root.child_append(item)
        return item

    def _build_menu(self) -> None:
        """Build the menu structure."""
        self._source_item = self._new_item(1, self._details.source)
        self._source_item.property_set_bool(Dbusmenu.MENUITEM_PROP_ENABLED, False)
        self._charge_item = self._new_item(2, self._details.charge)
        self._charge_item.property_set_bool(Dbusmenu.MENUITEM_PROP_ENABLED, False)

        self._new_item(3)

        self._show_time_item = self._new_item(4, "Show Remaining Time")
        self._show_time_item.property_set(Dbusmenu.MENUITEM_PROP_TOGGLE_TYPE, "checkmark")
        self._show_time_item.connect("item-activated", self._on_menu_show_time)
        self.set_show_time(self._show_time)

        power_item = self._new_item(5, "Power Settings…")
        power_item.connect("item-activated", self._on_menu_power_settings)

        self._new_item(6)

        quit_item = self._new_item(7, "Quit")
        quit_item.connect("item-activated", self._on_menu_quit)

    def _update_menu_labels(self) -> None:
        if self._source_item is None or self._charge_item is None:
            return
        self._source_item.property_set(Dbusmenu.MENUITEM_PROP_LABEL, self._details.source)
        self._charge_item.property_set(Dbusmenu.MENUITEM_PROP_LABEL, self._details.charge)
        self._charge_item.property_set_bool(
            Dbusmenu.MENUITEM_PROP_VISIBLE, bool(self._details.charge)
        )

    def _on_menu_about_to_show(self, menuitem) -> bool:
        if self._on_menu_opened is not None:
            self._on_menu_opened()
        return False

    def _on_menu_show_time(self, menuitem, timestamp) -> None:
        """Handle the "Show Remaining Time" checkbox."""
        self.set_show_time(not self._show_time)
        if self._on_show_time_toggled is not None:
            self._on_show_time_toggled(self._show_time)

    def _on_menu_power_settings(self, menuitem, timestamp) -> None:
        open_power_settings()

    def _on_menu_quit(self, menuitem, timestamp) -> None:
        if self._on_quit is not None:
            self._on_quit()

    # -- D-Bus ---------------------------------------------------------------

    def _handle_method_call(
        self,
        connection: Gio.DBusConnection,
        sender: str,
        object_path: str,
        interface_name: str,
        method_name: str,
        parameters: GLib.Variant,
        invocation: Gio.DBusMethodInvocation,
    ) -> None:
        """Handle D-Bus method calls for org.kde.StatusNotifierItem."""
        logger.debug("Method call: %s from %s", method_name, sender)

        if method_name in ("Activate", "ContextMenu", "SecondaryActivate", "Scroll"):
            # The menu is served by DBusMenu; clicks only refresh the details
            if method_name in ("Activate", "ContextMenu") and self._on_menu_opened:
                self._on_menu_opened()
            invocation.return_value(None)
        else:
            invocation.return_dbus_error(
                "org.freedesktop.DBus.Error.UnknownMethod", f"Unknown method: {method_name}"
            )

    def _handle_get_property(
        self,
        connection: Gio.DBusConnection,
        sender: str,
        object_path: str,
        interface_name: str,
        property_name: str,
    ) -> GLib.Variant | None:
        """Handle D-Bus property reads for org.kde.StatusNotifierItem."""
        if property_name == "Category":
            return GLib.Variant("s", "Hardware")
        elif property_name == "Id":
            return GLib.Variant("s", "juicebar")
        elif property_name == "Title":
            return GLib.Variant("s", self._title or "Juicebar")
        elif property_name == "Status":
            return GLib.Variant("s", self.sni_status)
        elif property_name == "WindowId":
            return GLib.Variant("u", 0)
        elif property_name == "IconName":
            return GLib.Variant("s", self.icon_name)
        elif property_name == "ToolTip":
            # (icon_name, icon_data, title, description)
            return GLib.Variant("(sa(iiay)ss)", (self.icon_name, [], self._title, self.tooltip))
        elif property_name == "ItemIsMenu":
            return GLib.Variant("b", True)
        elif property_name == "Menu":
            return GLib.Variant("o", self.MENU_PATH)
        elif property_name == "XAyatanaLabel":
            return GLib.Variant("s", self._title)
        elif property_name == "XAyatanaLabelGuide":
            return GLib.Variant("s", "")
        return None

    def _emit_signal(self, signal_name: str, args: GLib.Variant | None = None) -> None:
        """Emit a signal on the StatusNotifierItem interface."""
        if self._bus is None:
            return
        try:
            self._bus.emit_signal(
                None,
                self.SNI_PATH,
                "org.kde.StatusNotifierItem",
                signal_name,
                args,
            )
        except GLib.Error as e:
            logger.error("Failed to emit %s: %s", signal_name, e.message)

    def _register_with_watcher(self) -> None:
        """Register with the StatusNotifierWatcher."""
        if self._bus is None:
            return

        self._bus.call(
            "org.kde.StatusNotifierWatcher",
            "/StatusNotifierWatcher",
            "org.kde.StatusNotifierWatcher",
            "RegisterStatusNotifierItem",
            GLib.Variant("(s)", (self._dbus_name,)),
            None,
            Gio.DBusCallFlags.NONE,
            -1,
            None,
            self._on_register_complete,
        )

    def _on_register_complete(self, source, result, *user_data) -> None:
        """Callback when registration completes."""
        try:
            self._bus.call_finish(result)
            logger.info("Registered with StatusNotifierWatcher")
        except GLib.Error as e:
            logger.warning("No StatusNotifierWatcher available: %s", e.message)

    def _on_bus_acquired(self, connection: Gio.DBusConnection, name: str, *user_data) -> None:
        """Called when the session bus connection is acquired."""
        self._bus = connection
        node_info = Gio.DBusNodeInfo.new_for_xml(STATUS_NOTIFIER_ITEM_XML)
        self._registration_id = connection.register_object(
            self.SNI_PATH,
            node_info.interfaces[0],
            self._handle_method_call,
            self._handle_get_property,
            None,
        )
        logger.debug("StatusNotifierItem registered at %s", self.SNI_PATH)

    def _on_name_acquired(self, connection: Gio.DBusConnection, name: str, *user_data) -> None:
        logger.debug("D-Bus name acquired: %s", name)
        self._register_with_watcher()

    def _on_name_lost(self, connection: Gio.DBusConnection, name: str, *user_data) -> None:
        logger.warning("D-Bus name lost: %s", name)

    def register(self) -> None:
        """Own the item's name on the session bus and export the item."""
        if self._bus_name_id:
            return
        self._bus_name_id = Gio.bus_own_name(
            Gio.BusType.SESSION,
            self._dbus_name,
            Gio.BusNameOwnerFlags.NONE,
            self._on_bus_acquired,
            self._on_name_acquired,
            self._on_name_lost,
        )

    def unregister(self) -> None:
        """Remove the item from the session bus."""
        if self._bus is not None and self._registration_id:
            self._bus.unregister_object(self._registration_id)
        self._registration_id = 0
        if self._bus_name_id:
            Gio.bus_unown_name(self._bus_name_id)
            self._bus_name_id = 0
        self._bus = None
