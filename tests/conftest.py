# Juicebar Test Configuration
"""
Pytest configuration and shared fixtures for Juicebar tests.

Modules that need GObject introspection are tested against mocked
gi/Gio/GLib/Dbusmenu modules (see the mock_gi fixture), so no D-Bus
session or PyGObject installation is required to run the tests.
"""

import sys
from datetime import timedelta
from unittest import mock

import pytest

from juicebar.core.battery_types import BatterySnapshot

# Modules importing gi.repository; reloaded against the mocks
GI_MODULES = (
    "juicebar.app",
    "juicebar.ui",
    "juicebar.ui.status_item",
    "juicebar.core.notification_manager",
    "juicebar.core.power_monitor",
)


class FakeGLibError(Exception):
    """Stand-in for GLib.Error with its message attribute."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


def _clear_gi_modules():
    """Drop cached modules that bound the gi mocks."""
    for name in GI_MODULES:
        module = sys.modules.pop(name, None)
        parent_name, _, child = name.rpartition(".")
        parent = sys.modules.get(parent_name)
        # "from package import module" would return the stale attribute
        if module is not None and getattr(parent, child, None) is module:
            delattr(parent, child)


@pytest.fixture
def mock_gi(monkeypatch):
    """
    Replace gi and its repository with mocks.

    Yields:
        Dict with the "gio", "glib" and "dbusmenu" mocks
    """
    mock_glib = mock.MagicMock()
    mock_glib.Error = FakeGLibError
    mock_glib.SOURCE_REMOVE = False
    mock_glib.SOURCE_CONTINUE = True
    mock_glib.Variant = mock.MagicMock(side_effect=lambda fmt, value: (fmt, value))

    mock_gio = mock.MagicMock()

    mock_dbusmenu = mock.MagicMock()
    mock_dbusmenu.Menuitem.new_with_id.side_effect = lambda item_id: mock.MagicMock(
        name=f"menuitem-{item_id}"
    )

    mock_repository = mock.MagicMock()
    mock_repository.Gio = mock_gio
    mock_repository.GLib = mock_glib
    mock_repository.Dbusmenu = mock_dbusmenu

    mock_gi_module = mock.MagicMock()
    mock_gi_module.repository = mock_repository

    monkeypatch.setitem(sys.modules, "gi", mock_gi_module)
    monkeypatch.setitem(sys.modules, "gi.repository", mock_repository)
    _clear_gi_modules()

    yield {"gio": mock_gio, "glib": mock_glib, "dbusmenu": mock_dbusmenu}

    _clear_gi_modules()


@pytest.fixture
def make_snapshot():
    """
    Factory for battery snapshots.

    Defaults to a discharging battery at 50% with no time estimate
    and no mAh figures.
    """

    def _make(
        percentage: int = 50,
        is_plugged: bool = False,
        is_charging: bool = False,
        is_charged: bool = False,
        current_charge_mah=None,
        max_capacity_mah=None,
        time_remaining=None,
        source_description=None,
    ) -> BatterySnapshot:
        if isinstance(time_remaining, (int, float)):
            time_remaining = timedelta(seconds=time_remaining)
        if source_description is None:
            source_description = "AC Power" if is_plugged else "Battery Power"
        return BatterySnapshot(
            percentage=percentage,
            is_plugged=is_plugged,
            is_charging=is_charging,
            is_charged=is_charged,
            current_charge_mah=current_charge_mah,
            max_capacity_mah=max_capacity_mah,
            time_remaining=time_remaining,
            source_description=source_description,
        )

    return _make


@pytest.fixture
def temp_config_dir(tmp_path):
    """Directory for settings storage."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir
