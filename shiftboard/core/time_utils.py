import datetime
import logging
from collections.abc import Callable
from zoneinfo import ZoneInfo

from shiftboard.core.constants import DAYS_PER_WEEK, WEEK_START_WEEKDAY

logger = logging.getLogger(__name__)

NowFn = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def require_aware(value: datetime.datetime, name: str = "now") -> datetime.datetime:
    """Reject naive datetimes; comparing them to aware shift dates is ambiguous."""
    if value.tzinfo is None or value.utcoffset() is None:
        logger.error("Naive datetime passed as %s: %r", name, value)
        raise ValueError(f"{name} must be timezone-aware")
    return value


def week_bounds(now: datetime.datetime, tz: ZoneInfo) -> tuple[datetime.datetime, datetime.datetime]:
    """Return [start, end) of the calendar week containing now, in tz.

    Weeks start on WEEK_START_WEEKDAY (Monday) at local midnight.
    """
    local = require_aware(now).astimezone(tz)
    days_since_start = (local.weekday() - WEEK_START_WEEKDAY) % DAYS_PER_WEEK
    first_day = local.date() - datetime.timedelta(days=days_since_start)
    start = datetime.datetime.combine(first_day, datetime.time.min, tzinfo=tz)
    end = datetime.datetime.combine(
        first_day + datetime.timedelta(days=DAYS_PER_WEEK), datetime.time.min, tzinfo=tz
    )
    return start, end


def month_bounds(now: datetime.datetime, tz: ZoneInfo) -> tuple[datetime.datetime, datetime.datetime]:
    """Return [start, end) of the calendar month containing now, in tz."""
    local = require_aware(now).astimezone(tz)
    first = local.date().replace(day=1)
    if first.month == 12:
        next_first = first.replace(year=first.year + 1, month=1)
    else:
        next_first = first.replace(month=first.month + 1)
    start = datetime.datetime.combine(first, datetime.time.min, tzinfo=tz)
    end = datetime.datetime.combine(next_first, datetime.time.min, tzinfo=tz)
    return start, end


def shift_interval(
    day: datetime.datetime,
    start_time: datetime.time,
    end_time: datetime.time,
) -> tuple[datetime.datetime, datetime.datetime]:
    """Combine a shift's day with its local start/end times in the day's timezone."""
    start_dt = datetime.datetime.combine(day.date(), start_time, tzinfo=day.tzinfo)
    end_dt = datetime.datetime.combine(day.date(), end_time, tzinfo=day.tzinfo)
    return start_dt, end_dt
