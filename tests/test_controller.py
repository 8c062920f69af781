# Juicebar BatteryController Tests
"""Unit tests for the BatteryController class."""

from datetime import timedelta
from unittest import mock

import pytest

from juicebar.controller import BatteryController
from juicebar.core.battery_types import (
    ConnectionAlreadyOpenError,
    NotificationEvent,
    NotificationThreshold,
    ServiceNotFoundError,
)
from juicebar.core.notification_policy import NotificationPolicy
from juicebar.core.preferences import UserPreferences
from juicebar.core.settings_manager import SettingsManager
from juicebar.core.status_presenter import BatteryIcon, IconKind


class FakeSurface:
    """Records what the controller renders."""

    def __init__(self):
        self.shown = []
        self.errors = []

    def show(self, display, details):
        self.shown.append((display, details))

    def show_error(self, icon):
        self.errors.append(icon)


@pytest.fixture
def preferences(temp_config_dir):
    return UserPreferences(SettingsManager(config_dir=temp_config_dir))


@pytest.fixture
def provider():
    return mock.Mock()


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def notifier():
    return mock.Mock()


@pytest.fixture
def controller(provider, preferences, surface, notifier):
    return BatteryController(provider, preferences, surface, notifier)


class TestPowerSourceChanged:
    """Tests for the power source event cycle."""

    def test_renders_snapshot(self, controller, provider, surface, make_snapshot):
        """Test that a poll is rendered into the status item."""
        snapshot = make_snapshot(percentage=73, time_remaining=timedelta(hours=2))
        provider.poll.return_value = snapshot

        assert controller.on_power_source_changed() is snapshot

        display, details = surface.shown[-1]
        assert display.title == "73 %"
        assert display.icon == BatteryIcon(IconKind.DISCHARGING, 75)
        assert details.source == "Power source: Battery Power"
        assert details.charge == "2:00 remaining"

    def test_uses_display_preference(self, controller, provider, preferences, surface, make_snapshot):
        """Test that the title follows the show time preference."""
        preferences.show_time = True
        provider.poll.return_value = make_snapshot(percentage=73, time_remaining=timedelta(hours=2))

        controller.on_power_source_changed()

        display, details = surface.shown[-1]
        assert display.title == "2:00 remaining"
        assert details.charge == "73 %"

    def test_sends_notification(self, controller, provider, notifier, make_snapshot):
        """Test that policy events are handed to the notifier."""
        provider.poll.return_value = make_snapshot(percentage=10)

        controller.on_power_source_changed()

        notifier.assert_called_once_with(
            NotificationEvent.low_battery(NotificationThreshold.TEN_PERCENT)
        )

    def test_notification_is_debounced(self, controller, provider, notifier, make_snapshot):
        """Test that repeated events at one checkpoint notify once."""
        provider.poll.return_value = make_snapshot(percentage=10)

        controller.on_power_source_changed()
        controller.on_power_source_changed()

        assert notifier.call_count == 1

    def test_disabled_threshold(self, controller, provider, preferences, notifier, make_snapshot):
        """Test that only enabled thresholds notify."""
        preferences.set_enabled_thresholds([NotificationThreshold.FIVE_PERCENT])
        provider.poll.return_value = make_snapshot(percentage=10)

        controller.on_power_source_changed()

        notifier.assert_not_called()

    def test_uses_injected_policy(self, provider, preferences, surface, notifier, make_snapshot):
        """Test that a shared policy keeps its state."""
        policy = NotificationPolicy()
        controller = BatteryController(provider, preferences, surface, notifier, policy=policy)
        provider.poll.return_value = make_snapshot(
            percentage=100, is_plugged=True, is_charged=True
        )

        controller.on_power_source_changed()

        assert controller.policy is policy
        assert policy.last_notified is NotificationThreshold.HUNDRED_PERCENT
        notifier.assert_called_once_with(NotificationEvent.fully_charged())


class TestPreferencesChanged:
    """Tests for the preference event cycle."""

    def test_rerenders_without_notifying(self, controller, provider, surface, notifier, make_snapshot):
        """Test that preference changes only re-render."""
        provider.poll.return_value = make_snapshot(percentage=10)

        controller.on_preferences_changed("show_time", True)

        assert len(surface.shown) == 1
        notifier.assert_not_called()
        assert controller.policy.last_notified is None

    def test_matches_settings_subscriber_signature(self, controller, provider, temp_config_dir, make_snapshot):
        """Test that the handler can subscribe to settings changes directly."""
        provider.poll.return_value = make_snapshot()
        settings = SettingsManager(config_dir=temp_config_dir)
        settings.subscribe(controller.on_preferences_changed)

        settings.set("show_time", True)

        provider.poll.assert_called_once_with()


class TestPollErrors:
    """Tests for provider failures."""

    def test_connection_error_icon(self, controller, provider, surface, notifier):
        """Test the icon for an unreadable battery."""
        provider.poll.side_effect = ConnectionAlreadyOpenError("busy")

        assert controller.on_power_source_changed() is None

        assert surface.errors == [BatteryIcon(IconKind.DEAD_CROPPED)]
        assert surface.shown == []
        notifier.assert_not_called()

    def test_no_battery_icon(self, controller, provider, surface):
        """Test the icon for a missing battery."""
        provider.poll.side_effect = ServiceNotFoundError("none")

        controller.on_preferences_changed()

        assert surface.errors == [BatteryIcon(IconKind.NONE)]

    def test_error_does_not_touch_policy(self, controller, provider, make_snapshot):
        """Test that a failed poll keeps the debounce state."""
        provider.poll.return_value = make_snapshot(percentage=10)
        controller.on_power_source_changed()

        provider.poll.side_effect = ServiceNotFoundError("none")
        controller.on_power_source_changed()

        assert controller.policy.last_notified is NotificationThreshold.TEN_PERCENT

    def test_repeated_error_logged_once(self, controller, provider, caplog):
        """Test that a persisting failure is logged once."""
        provider.poll.side_effect = ServiceNotFoundError("none")

        with caplog.at_level("WARNING", logger="juicebar.controller"):
            controller.on_power_source_changed()
            controller.on_power_source_changed()

        assert len([r for r in caplog.records if "Battery unavailable" in r.message]) == 1

    def test_recovery(self, controller, provider, surface, make_snapshot):
        """Test that rendering resumes once polling works again."""
        provider.poll.side_effect = ServiceNotFoundError("none")
        controller.on_power_source_changed()

        provider.poll.side_effect = None
        provider.poll.return_value = make_snapshot(percentage=40)
        controller.on_power_source_changed()

        assert surface.shown[-1][0].title == "40 %"
