"""Tests for do-not-disturb window evaluation."""

from datetime import UTC, datetime, time

import pytest
from notifications.preference.preference import DoNotDisturb, NotificationPreference
from notifications.preference.quiet_hours import in_do_not_disturb, is_within_window, local_time


def _preference(enabled=True, start="22:00", end="08:00", timezone="UTC"):
    pref = NotificationPreference.defaults_for("user-dnd")
    pref.do_not_disturb = DoNotDisturb(enabled=enabled, start_time=start, end_time=end)
    pref.timezone = timezone
    return pref


class TestWindow:
    @pytest.mark.parametrize(
        "local, expected",
        [
            (time(23, 30), True),
            (time(22, 0), True),
            (time(7, 59), True),
            (time(8, 0), False),
            (time(9, 0), False),
            (time(21, 59), False),
        ],
    )
    def test_window_wrapping_midnight(self, local, expected):
        assert is_within_window(local, time(22, 0), time(8, 0)) is expected

    def test_same_day_window(self):
        assert is_within_window(time(13, 0), time(12, 0), time(14, 0)) is True
        assert is_within_window(time(14, 0), time(12, 0), time(14, 0)) is False

    def test_empty_window(self):
        assert is_within_window(time(10, 0), time(10, 0), time(10, 0)) is False


class TestInDoNotDisturb:
    def test_inside_window(self):
        assert in_do_not_disturb(_preference(), datetime(2024, 5, 1, 23, 30, tzinfo=UTC)) is True

    def test_outside_window(self):
        assert in_do_not_disturb(_preference(), datetime(2024, 5, 1, 9, 0, tzinfo=UTC)) is False

    def test_disabled_window(self):
        assert in_do_not_disturb(_preference(enabled=False), datetime(2024, 5, 1, 23, 30, tzinfo=UTC)) is False

    def test_uses_user_timezone(self):
        # 21:30 UTC is 23:30 in Berlin (CEST)
        pref = _preference(timezone="Europe/Berlin")
        assert in_do_not_disturb(pref, datetime(2024, 7, 1, 21, 30, tzinfo=UTC)) is True
        assert in_do_not_disturb(pref, datetime(2024, 7, 1, 7, 0, tzinfo=UTC)) is False

    def test_naive_moment_is_utc(self):
        assert local_time(datetime(2024, 5, 1, 23, 30), "UTC") == time(23, 30)
