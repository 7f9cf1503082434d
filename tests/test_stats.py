"""
Tests for calendar boundaries and dashboard statistics.
"""

import datetime
from zoneinfo import ZoneInfo

import pytest

from shiftboard.core.stats import monthly_shift_count, weekly_hours
from shiftboard.core.time_utils import month_bounds, shift_interval, week_bounds

PARIS = ZoneInfo("Europe/Paris")


class TestWeekBounds:
    def test_week_starts_monday_midnight(self, now):
        start, end = week_bounds(now, PARIS)

        assert start == datetime.datetime(2026, 10, 19, 0, 0, tzinfo=PARIS)
        assert end == datetime.datetime(2026, 10, 26, 0, 0, tzinfo=PARIS)

    def test_monday_is_its_own_week_start(self):
        monday = datetime.datetime(2026, 10, 19, 0, 0, tzinfo=PARIS)
        assert week_bounds(monday, PARIS)[0] == monday

    def test_uses_local_day_not_utc_day(self):
        """Sunday 23:30 UTC is already Monday in Paris (after the DST change)."""
        now_utc = datetime.datetime(2026, 10, 25, 23, 30, tzinfo=datetime.timezone.utc)

        start, _ = week_bounds(now_utc, PARIS)

        assert start.date() == datetime.date(2026, 10, 26)

    def test_naive_now_rejected(self):
        with pytest.raises(ValueError):
            week_bounds(datetime.datetime(2026, 10, 21), PARIS)


class TestMonthBounds:
    def test_october(self, now):
        start, end = month_bounds(now, PARIS)

        assert start == datetime.datetime(2026, 10, 1, tzinfo=PARIS)
        assert end == datetime.datetime(2026, 11, 1, tzinfo=PARIS)

    def test_december_rolls_into_next_year(self):
        start, end = month_bounds(datetime.datetime(2026, 12, 15, tzinfo=PARIS), PARIS)

        assert start.date() == datetime.date(2026, 12, 1)
        assert end.date() == datetime.date(2027, 1, 1)


class TestStats:
    def test_weekly_hours_counts_whole_week(self, week_shifts, now):
        """Monday (4h, already past) + Wednesday (4h) + Sunday (7.5h)."""
        assert weekly_hours(week_shifts, now, PARIS) == pytest.approx(15.5)

    def test_monthly_shift_count(self, week_shifts, now):
        """September 30 is outside October, the other five are inside."""
        assert monthly_shift_count(week_shifts, now, PARIS) == 5

    def test_empty_set(self, now):
        assert weekly_hours([], now, PARIS) == 0.0
        assert monthly_shift_count([], now, PARIS) == 0

    def test_sunday_late_shift_is_in_week(self, make_shift, now):
        late = make_shift("late", datetime.date(2026, 10, 25), "23:00", "23:30")
        assert weekly_hours([late], now, PARIS) == pytest.approx(0.5)

    def test_minutes_are_fractional_hours(self, make_shift, now):
        shift = make_shift("x", now.date(), "08:15", "12:00")
        assert weekly_hours([shift], now, PARIS) == pytest.approx(3.75)

    def test_stats_recomputed_from_source(self, week_shifts, now):
        """Same inputs, same numbers; nothing accumulates between calls."""
        assert weekly_hours(week_shifts, now, PARIS) == weekly_hours(week_shifts, now, PARIS)
        assert monthly_shift_count(week_shifts, now, PARIS) == monthly_shift_count(week_shifts, now, PARIS)


def test_shift_interval_combines_day_and_times(make_shift):
    shift = make_shift("x", datetime.date(2026, 10, 22), "19:00", "23:00")

    start, end = shift_interval(shift.date, shift.start_time, shift.end_time)

    assert start == datetime.datetime(2026, 10, 22, 19, 0, tzinfo=PARIS)
    assert end - start == datetime.timedelta(hours=4)
