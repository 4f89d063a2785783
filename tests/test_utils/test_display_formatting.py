"""Tests for alarm and countdown display formatting."""

from datetime import timedelta

import pytest

from clockblocked.utils.formatting import format_alarm_time, format_countdown, format_days


class TestFormatAlarmTime:
    @pytest.mark.parametrize(
        "hours,minutes,expected",
        [
            (0, 0, "12:00 AM"),
            (7, 5, "7:05 AM"),
            (12, 30, "12:30 PM"),
            (23, 59, "11:59 PM"),
        ],
    )
    def test_twelve_hour_clock(self, hours, minutes, expected):
        assert format_alarm_time(hours, minutes) == expected


class TestFormatDays:
    def test_every_day(self):
        assert format_days(range(7)) == "Every day"

    def test_no_days(self):
        assert format_days([]) == "No days selected"

    def test_sorted_names(self):
        assert format_days([5, 1, 3]) == "Mon, Wed, Fri"

    def test_duplicates_ignored(self):
        assert format_days([0, 0, 6]) == "Sun, Sat"


class TestFormatCountdown:
    def test_minutes_and_seconds(self):
        assert format_countdown(timedelta(minutes=14, seconds=7)) == "14:07"

    def test_partial_seconds_truncate(self):
        assert format_countdown(timedelta(seconds=59.9)) == "0:59"

    def test_negative_floors_at_zero(self):
        assert format_countdown(timedelta(seconds=-3)) == "0:00"
