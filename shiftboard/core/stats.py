"""Dashboard statistics, recomputed from the full shift set on every change."""

from collections.abc import Iterable
from datetime import datetime
from zoneinfo import ZoneInfo

from shiftboard.core.models import ShiftRecord
from shiftboard.core.time_utils import month_bounds, week_bounds


def shifts_between(shifts: Iterable[ShiftRecord], start: datetime, end: datetime) -> list[ShiftRecord]:
    """Shifts whose date falls in [start, end)."""
    return [shift for shift in shifts if start <= shift.date < end]


def weekly_hours(shifts: Iterable[ShiftRecord], now: datetime, tz: ZoneInfo) -> float:
    """Total scheduled hours in the calendar week containing now."""
    start, end = week_bounds(now, tz)
    return sum((shift.hours for shift in shifts_between(shifts, start, end)), 0.0)


def monthly_shift_count(shifts: Iterable[ShiftRecord], now: datetime, tz: ZoneInfo) -> int:
    """Number of shifts in the calendar month containing now."""
    start, end = month_bounds(now, tz)
    return len(shifts_between(shifts, start, end))
