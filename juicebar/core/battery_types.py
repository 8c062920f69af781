# Juicebar Battery Types
"""
Type definitions shared by the battery status and notification logic.

This module defines:
- BatterySnapshot: Immutable reading of the power source state
- NotificationThreshold: Percentage checkpoints eligible for a notification
- DisplayPreference: How the status title should be rendered
- NotificationEvent: Decision handed to the notification sender
- BatteryError and subclasses: Reasons a poll of the power source failed
"""

import functools
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Optional


class BatteryError(Exception):
    """Base class for errors raised while polling the power source."""


class ConnectionAlreadyOpenError(BatteryError):
    """The power source service exists but could not be read."""


class ServiceNotFoundError(BatteryError):
    """No battery or power source service was found on this system."""


@dataclass(frozen=True)
class BatterySnapshot:
    """
    One reading of the power source state.

    Attributes:
        percentage: Charge level (0-100)
        is_plugged: Whether the system runs on external power
        is_charging: Whether the battery is currently charging
        is_charged: Whether the battery is full while plugged in
        current_charge_mah: Current charge in mAh, None if unknown
        max_capacity_mah: Full charge capacity in mAh, None if unknown
        time_remaining: Estimated time until empty (or full while charging),
                        None if the system cannot estimate it
        source_description: Human readable name of the active power source
    """
    percentage: int
    is_plugged: bool
    is_charging: bool
    is_charged: bool
    current_charge_mah: Optional[int] = None
    max_capacity_mah: Optional[int] = None
    time_remaining: Optional[timedelta] = None
    source_description: str = "Battery Power"

    @property
    def has_capacity_figures(self) -> bool:
        """Check if both mAh figures are available."""
        return self.current_charge_mah is not None and self.max_capacity_mah is not None


@functools.total_ordering
class NotificationThreshold(Enum):
    """
    Percentage checkpoints a notification can be sent for.

    The value of each member is its checkpoint percentage. HUNDRED_PERCENT
    stands for "fully charged while plugged in" and is never matched while
    discharging.
    """

    FIVE_PERCENT = 5
    TEN_PERCENT = 10
    FIFTEEN_PERCENT = 15
    TWENTY_PERCENT = 20
    THIRTY_PERCENT = 30
    FORTY_PERCENT = 40
    FIFTY_PERCENT = 50
    HUNDRED_PERCENT = 100

    def __lt__(self, other):
        if not isinstance(other, NotificationThreshold):
            return NotImplemented
        return self.value < other.value

    @classmethod
    def for_percentage(cls, percentage: int) -> Optional["NotificationThreshold"]:
        """
        Get the low battery checkpoint matching a percentage exactly.

        Args:
            percentage: Current battery percentage

        Returns:
            The matching checkpoint, or None if the percentage is not a
            low battery checkpoint
        """
        for threshold in cls:
            if threshold is not cls.HUNDRED_PERCENT and threshold.value == percentage:
                return threshold
        return None

    @classmethod
    def parse(cls, value) -> "NotificationThreshold":
        """
        Convert a stored setting value to a threshold.

        Args:
            value: The checkpoint percentage (as a number or numeric string)
                   or the member name

        Returns:
            The matching NotificationThreshold

        Raises:
            ValueError: If the value names no checkpoint
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip()
            if name.isdigit():
                return cls(int(name))
            try:
                return cls[name.upper()]
            except KeyError:
                raise ValueError(f"Unknown notification threshold: {value!r}") from None
        if isinstance(value, bool):
            raise ValueError(f"Unknown notification threshold: {value!r}")
        return cls(value)


@dataclass(frozen=True)
class DisplayPreference:
    """User choice for the status title (remaining time or percentage)."""

    show_time: bool = False


class NotificationKind(Enum):
    """Kind of notification the policy decided to send."""

    FULLY_CHARGED = "fully_charged"
    LOW_BATTERY = "low_battery"


@dataclass(frozen=True)
class NotificationEvent:
    """A notification to hand over to the notification sender."""

    kind: NotificationKind
    threshold: Optional[NotificationThreshold] = None

    @classmethod
    def fully_charged(cls) -> "NotificationEvent":
        return cls(NotificationKind.FULLY_CHARGED, NotificationThreshold.HUNDRED_PERCENT)

    @classmethod
    def low_battery(cls, threshold: NotificationThreshold) -> "NotificationEvent":
        return cls(NotificationKind.LOW_BATTERY, threshold)
