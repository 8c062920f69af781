# Juicebar Core Module
"""
Core functionality for Juicebar.
Contains the battery types, status presenter, notification policy,
battery provider and settings.

Modules that need GObject introspection (notification_manager,
power_monitor) are imported directly rather than re-exported here.
"""

from .battery_types import (
    BatteryError,
    BatterySnapshot,
    ConnectionAlreadyOpenError,
    DisplayPreference,
    NotificationEvent,
    NotificationKind,
    NotificationThreshold,
    ServiceNotFoundError,
)
from .notification_policy import NotificationPolicy
from .status_presenter import BatteryIcon, IconKind, MenuDetails, StatusDisplay, present

__all__ = [
    "BatteryError",
    "BatteryIcon",
    "BatterySnapshot",
    "ConnectionAlreadyOpenError",
    "DisplayPreference",
    "IconKind",
    "MenuDetails",
    "NotificationEvent",
    "NotificationKind",
    "NotificationPolicy",
    "NotificationThreshold",
    "ServiceNotFoundError",
    "StatusDisplay",
    "present",
]
