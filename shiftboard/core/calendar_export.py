"""iCalendar export of an employee's upcoming shifts."""

import datetime
from collections.abc import Iterable

from icalendar import Calendar, Event

from shiftboard.core.constants import TIME_FORMAT_HM
from shiftboard.core.models import ShiftRecord
from shiftboard.core.time_utils import shift_interval, utc_now


def _shift_summary(shift: ShiftRecord) -> str:
    return f"{shift.role} - {shift.schedule_name}"


def generate_ical(
    shifts: Iterable[ShiftRecord],
    calendar_name: str,
    timezone_name: str,
    stamp: datetime.datetime | None = None,
) -> str:
    """
    Build an iCal document with one event per shift.

    Args:
        shifts: Shifts to export, typically the upcoming list
        calendar_name: Shown by calendar apps as the calendar title
        timezone_name: IANA name advertised as X-WR-TIMEZONE
        stamp: DTSTAMP for every event (defaults to now)

    Returns:
        iCal-formatted string
    """
    cal = Calendar()
    cal.add("prodid", "-//Shiftboard//shiftboard.app//")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", calendar_name)
    cal.add("x-wr-timezone", timezone_name)

    stamp = stamp or utc_now()
    for shift in shifts:
        cal.add_component(_create_shift_event(shift, stamp))

    return cal.to_ical().decode("utf-8")


def _create_shift_event(shift: ShiftRecord, stamp: datetime.datetime) -> Event:
    event = Event()
    event.add("summary", _shift_summary(shift))
    event.add("uid", f"{shift.id}@shiftboard")

    start_dt, end_dt = shift_interval(shift.date, shift.start_time, shift.end_time)
    event.add("dtstart", start_dt)
    event.add("dtend", end_dt)

    start = shift.start_time.strftime(TIME_FORMAT_HM)
    end = shift.end_time.strftime(TIME_FORMAT_HM)
    description_parts = [
        f"Poste: {shift.role}",
        f"Planning: {shift.schedule_name}",
        f"Horaires: {start} - {end} ({shift.hours:.1f} h)",
    ]
    event.add("description", "\n".join(description_parts))
    event.add("dtstamp", stamp)

    return event
