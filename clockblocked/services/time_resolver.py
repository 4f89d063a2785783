"""
Time resolver: next wall-clock firing instant of a recurring alarm.

Pure logic. No store, no scheduler, no clock reads; callers pass ``now``.
Weekdays follow the alarm convention 0=Sunday .. 6=Saturday.
"""

from datetime import datetime, time, timedelta
from typing import Iterable, Optional, Protocol

# Today plus seven more days, so today's weekday next week is reachable
SCAN_DAYS = 8


class AlarmTime(Protocol):
    hours: int
    minutes: int
    selected_days: Iterable[int]


def alarm_weekday(moment: datetime) -> int:
    """Weekday of *moment* in the alarm convention (Sunday=0)."""
    return (moment.weekday() + 1) % 7


def next_occurrence(alarm: AlarmTime, now: datetime) -> Optional[datetime]:
    """Return the earliest instant strictly after *now* that the alarm fires.

    Returns None when no weekday is selected.
    """
    days = set(alarm.selected_days)
    if not days:
        return None

    at = time(alarm.hours, alarm.minutes)
    for offset in range(SCAN_DAYS):
        day = now.date() + timedelta(days=offset)
        candidate = datetime.combine(day, at, tzinfo=now.tzinfo)
        if alarm_weekday(candidate) in days and candidate > now:
            return candidate
    return None
