# Juicebar Battery Provider Module
"""
Battery provider module reading the power source state of the system.

Uses psutil for the charge level, AC state and time estimate, and the
kernel power_supply sysfs class for the charging status and the mAh
figures psutil does not expose.
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

import psutil

from .battery_types import (
    BatterySnapshot,
    ConnectionAlreadyOpenError,
    ServiceNotFoundError,
)

logger = logging.getLogger(__name__)

POWER_SUPPLY_DIR = Path("/sys/class/power_supply")

AC_POWER = "AC Power"
BATTERY_POWER = "Battery Power"


class BatteryProvider:
    """
    Provider for battery snapshots.

    Each call to poll() reads the current state; nothing is cached
    between polls.
    """

    def __init__(self, power_supply_dir: Path | str = POWER_SUPPLY_DIR):
        """
        Initialize the BatteryProvider.

        Args:
            power_supply_dir: Directory of the kernel power_supply class.
                              Only the first BAT* entry is used.
        """
        self._power_supply_dir = Path(power_supply_dir)

    def poll(self) -> BatterySnapshot:
        """
        Read the current power source state.

        Returns:
            BatterySnapshot for the current state

        Raises:
            ServiceNotFoundError: If the system has no battery
            ConnectionAlreadyOpenError: If the battery could not be read
        """
        try:
            battery = psutil.sensors_battery()
        except (OSError, RuntimeError) as e:
            raise ConnectionAlreadyOpenError(f"Could not read battery status: {e}") from e

        if battery is None:
            raise ServiceNotFoundError("No battery found")

        percentage = max(0, min(100, round(battery.percent)))
        battery_path = self._find_battery_path()
        status = self._read_battery_file(battery_path, "status")
        is_plugged = self._resolve_plugged(battery.power_plugged, status)
        is_charged, is_charging = self._resolve_charge_state(is_plugged, percentage, status)
        current_charge, max_capacity = self._read_capacity_mah(battery_path)

        return BatterySnapshot(
            percentage=percentage,
            is_plugged=is_plugged,
            is_charging=is_charging,
            is_charged=is_charged,
            current_charge_mah=current_charge,
            max_capacity_mah=max_capacity,
            time_remaining=self._resolve_time_remaining(battery.secsleft),
            source_description=AC_POWER if is_plugged else BATTERY_POWER,
        )

    @staticmethod
    def _resolve_plugged(power_plugged: Optional[bool], status: Optional[str]) -> bool:
        """Work out the AC state when psutil cannot tell."""
        if power_plugged is not None:
            return bool(power_plugged)
        return (status or "").lower() != "discharging"

    @staticmethod
    def _resolve_charge_state(
        is_plugged: bool, percentage: int, status: Optional[str]
    ) -> tuple[bool, bool]:
        """
        Derive the charged and charging flags.

        Returns:
            Tuple of (is_charged, is_charging)
        """
        if not is_plugged:
            return False, False

        status_lower = (status or "").lower()
        if status_lower == "full":
            return True, False
        if status_lower == "charging":
            return False, True
        if status_lower == "not charging":
            # Charge limit reached or charger holding the level
            return percentage >= 100, False

        is_charged = percentage >= 100
        return is_charged, not is_charged

    @staticmethod
    def _resolve_time_remaining(secsleft) -> Optional[timedelta]:
        if secsleft in (psutil.POWER_TIME_UNKNOWN, psutil.POWER_TIME_UNLIMITED):
            return None
        if secsleft is None or secsleft < 0:
            return None
        return timedelta(seconds=secsleft)

    def _find_battery_path(self) -> Optional[Path]:
        """
        Find the first battery in the power_supply directory.

        Returns:
            Path to the battery directory, or None if none is found
        """
        try:
            candidates = sorted(self._power_supply_dir.glob("BAT*"))
        except OSError:
            return None
        return candidates[0] if candidates else None

    @staticmethod
    def _read_battery_file(battery_path: Optional[Path], filename: str) -> Optional[str]:
        """
        Read a file from the battery sysfs directory.

        Returns:
            The stripped file contents, or None if unavailable
        """
        if battery_path is None:
            return None

        try:
            return (battery_path / filename).read_text().strip()
        except (OSError, UnicodeDecodeError):
            return None

    def _read_capacity_mah(
        self, battery_path: Optional[Path]
    ) -> tuple[Optional[int], Optional[int]]:
        """
        Read the current and full charge in mAh.

        The kernel reports charge_now and charge_full in µAh. Batteries
        that only report energy (µWh) have no mAh figures.

        Returns:
            Tuple of (current_charge_mah, max_capacity_mah), both None
            unless both values could be read
        """
        charge_now = self._read_battery_file(battery_path, "charge_now")
        charge_full = self._read_battery_file(battery_path, "charge_full")
        if charge_now is None or charge_full is None:
            return None, None

        try:
            current = int(charge_now) // 1000
            maximum = int(charge_full) // 1000
        except ValueError:
            logger.debug("Unparseable charge values: %r / %r", charge_now, charge_full)
            return None, None

        if current < 0 or maximum < 0:
            return None, None
        return current, maximum
