"""Display formatting for alarm times, weekday sets and the challenge countdown."""

from datetime import timedelta
from typing import Iterable

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def format_alarm_time(hours: int, minutes: int) -> str:
    """Format a 24-hour time as 12-hour with AM/PM, e.g. ``8:05 AM``."""
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{minutes:02d} {period}"


def format_days(selected_days: Iterable[int]) -> str:
    """Format a weekday set (0=Sunday) into a readable string."""
    days = sorted(set(selected_days))
    if len(days) == 7:
        return "Every day"
    if not days:
        return "No days selected"
    return ", ".join(DAY_NAMES[day] for day in days)


def format_countdown(remaining: timedelta) -> str:
    """Format remaining challenge time as ``M:SS``; negative values show 0:00."""
    total_seconds = max(0, int(remaining.total_seconds()))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"
