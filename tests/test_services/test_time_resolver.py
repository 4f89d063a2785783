"""Tests for next-occurrence resolution."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

import pytest

from clockblocked.services.time_resolver import alarm_weekday, next_occurrence


@dataclass
class _Alarm:
    hours: int
    minutes: int
    selected_days: List[int] = field(default_factory=list)


# 2025-01-06 is a Monday (alarm weekday 1)
MONDAY = datetime(2025, 1, 6, 7, 0)


class TestAlarmWeekday:
    def test_sunday_is_zero(self):
        assert alarm_weekday(datetime(2025, 1, 5)) == 0

    def test_monday_is_one(self):
        assert alarm_weekday(MONDAY) == 1

    def test_saturday_is_six(self):
        assert alarm_weekday(datetime(2025, 1, 11)) == 6


class TestNextOccurrence:
    def test_empty_selection_returns_none(self):
        assert next_occurrence(_Alarm(8, 0, []), MONDAY) is None

    def test_later_today(self):
        result = next_occurrence(_Alarm(8, 30, [1]), MONDAY)
        assert result == datetime(2025, 1, 6, 8, 30)

    def test_earlier_today_rolls_to_next_week(self):
        """Today's instant already passed and today is the only selected day."""
        result = next_occurrence(_Alarm(6, 0, [1]), MONDAY)
        assert result == datetime(2025, 1, 13, 6, 0)

    def test_exactly_now_is_not_in_the_future(self):
        result = next_occurrence(_Alarm(7, 0, [1]), MONDAY)
        assert result == datetime(2025, 1, 13, 7, 0)

    def test_seconds_and_microseconds_are_zero(self):
        now = datetime(2025, 1, 6, 7, 0, 30, 123456)
        result = next_occurrence(_Alarm(7, 1, [1]), now)
        assert result == datetime(2025, 1, 6, 7, 1, 0, 0)

    def test_next_selected_weekday(self):
        # Wednesday = 3
        result = next_occurrence(_Alarm(6, 0, [3]), MONDAY)
        assert result == datetime(2025, 1, 8, 6, 0)

    def test_wraps_over_the_weekend(self):
        saturday_night = datetime(2025, 1, 11, 23, 0)
        result = next_occurrence(_Alarm(6, 0, [1]), saturday_night)
        assert result == datetime(2025, 1, 13, 6, 0)

    def test_sunday_alarm(self):
        result = next_occurrence(_Alarm(9, 0, [0]), MONDAY)
        assert result == datetime(2025, 1, 12, 9, 0)

    def test_picks_earliest_of_several_days(self):
        result = next_occurrence(_Alarm(6, 0, [5, 2, 4]), MONDAY)
        assert result == datetime(2025, 1, 7, 6, 0)

    @pytest.mark.parametrize("days", [[0], [1], [2], [3], [4], [5], [6], list(range(7))])
    def test_result_is_future_selected_and_within_a_week(self, days):
        alarm = _Alarm(7, 0, days)
        result = next_occurrence(alarm, MONDAY)
        assert result is not None
        assert result > MONDAY
        assert alarm_weekday(result) in days
        assert (result - MONDAY).days <= 7

    def test_keeps_timezone_of_now(self):
        now = datetime(2025, 1, 6, 7, 0, tzinfo=timezone.utc)
        result = next_occurrence(_Alarm(8, 0, [1]), now)
        assert result == datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc)
