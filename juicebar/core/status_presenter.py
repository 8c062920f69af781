# Juicebar Status Presenter
"""
Status presenter module mapping a battery snapshot to what the status item shows.

All functions here are pure: the same snapshot and preference always give
the same icon and text, and missing snapshot fields fall back to the
percentage instead of failing.
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import NamedTuple, Optional

from .battery_types import (
    BatteryError,
    BatterySnapshot,
    ConnectionAlreadyOpenError,
    DisplayPreference,
)

# Discharging icon fill levels, in percent
FILL_LEVELS = (0, 25, 50, 75, 100)

CALCULATING_TEXT = "Calculating…"


class IconKind(Enum):
    """Icon variants the status item can show."""

    CHARGED_AND_PLUGGED = "charged_and_plugged"
    CHARGING = "charging"
    DISCHARGING = "discharging"
    DEAD_CROPPED = "dead_cropped"
    NONE = "none"


# Symbolic icon names from the freedesktop icon naming spec
_DISCHARGING_ICONS = {
    0: "battery-empty-symbolic",
    25: "battery-caution-symbolic",
    50: "battery-low-symbolic",
    75: "battery-good-symbolic",
    100: "battery-full-symbolic",
}

_ICON_NAMES = {
    IconKind.CHARGED_AND_PLUGGED: "battery-full-charged-symbolic",
    IconKind.CHARGING: "battery-good-charging-symbolic",
    IconKind.DEAD_CROPPED: "dialog-warning-symbolic",
    IconKind.NONE: "battery-missing-symbolic",
}


@dataclass(frozen=True)
class BatteryIcon:
    """
    Icon selector for the status item.

    Attributes:
        kind: Icon variant
        level: Fill level (one of FILL_LEVELS) for DISCHARGING, None otherwise
    """
    kind: IconKind
    level: Optional[int] = None

    @property
    def icon_name(self) -> str:
        """Get the theme icon name for this icon."""
        if self.kind is IconKind.DISCHARGING:
            return _DISCHARGING_ICONS.get(self.level, "battery-missing-symbolic")
        return _ICON_NAMES[self.kind]


class StatusDisplay(NamedTuple):
    """Icon and title for the status item."""

    icon: BatteryIcon
    title: str


class MenuDetails(NamedTuple):
    """Detail lines shown in the status item menu."""

    source: str
    charge: str


def fill_level(percentage: int) -> int:
    """
    Round a percentage to the nearest icon fill level.

    Args:
        percentage: Battery percentage, clamped to 0-100

    Returns:
        One of FILL_LEVELS
    """
    clamped = max(0, min(100, int(percentage)))
    return min(100, ((clamped + 12) // 25) * 25)


def format_time(duration: timedelta) -> str:
    """
    Format a duration as hours and minutes, e.g. "3:45".

    Seconds are truncated and negative durations show as "0:00".
    """
    total_minutes = max(0, int(duration.total_seconds()) // 60)
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}:{minutes:02d}"


def format_time_remaining(snapshot: BatterySnapshot) -> Optional[str]:
    """
    Describe the remaining time of a snapshot.

    Returns:
        "H:MM until full" while charging, "H:MM remaining" otherwise,
        or None if the snapshot has no time estimate
    """
    if snapshot.time_remaining is None:
        return None
    formatted = format_time(snapshot.time_remaining)
    if snapshot.is_charging:
        return f"{formatted} until full"
    return f"{formatted} remaining"


def _capacity_suffix(snapshot: BatterySnapshot) -> str:
    if not snapshot.has_capacity_figures:
        return ""
    return f" ({snapshot.current_charge_mah} / {snapshot.max_capacity_mah} mAh)"


def select_icon(snapshot: BatterySnapshot) -> BatteryIcon:
    """Pick the status icon for a snapshot."""
    if snapshot.is_charged and snapshot.is_plugged:
        return BatteryIcon(IconKind.CHARGED_AND_PLUGGED)
    if snapshot.is_charging:
        return BatteryIcon(IconKind.CHARGING)
    return BatteryIcon(IconKind.DISCHARGING, fill_level(snapshot.percentage))


def present(snapshot: BatterySnapshot, preference: DisplayPreference) -> StatusDisplay:
    """
    Build the icon and title shown in the status item.

    The title shows the remaining time when the user prefers it and the
    system has an estimate, and the percentage otherwise. The mAh figures
    are appended when both are known.

    Args:
        snapshot: Current battery snapshot
        preference: Display preference of the user

    Returns:
        StatusDisplay with the icon selector and title text
    """
    title = None
    if preference.show_time:
        title = format_time_remaining(snapshot)
    if title is None:
        title = f"{snapshot.percentage} %"
    return StatusDisplay(select_icon(snapshot), title + _capacity_suffix(snapshot))


def describe(snapshot: BatterySnapshot, preference: DisplayPreference) -> MenuDetails:
    """
    Build the detail lines for the status item menu.

    The charge line shows whichever value the title does not: the
    percentage when the title shows the time, the time otherwise.
    """
    source = f"Power source: {snapshot.source_description}"
    if preference.show_time:
        charge = f"{snapshot.percentage} %"
    else:
        charge = format_time_remaining(snapshot) or CALCULATING_TEXT
    return MenuDetails(source, charge + _capacity_suffix(snapshot))


def error_icon(error: BatteryError) -> BatteryIcon:
    """Pick the icon shown when polling the power source failed."""
    if isinstance(error, ConnectionAlreadyOpenError):
        return BatteryIcon(IconKind.DEAD_CROPPED)
    return BatteryIcon(IconKind.NONE)
