from collections.abc import Iterable
from datetime import datetime

from shiftboard.core.constants import DEFAULT_UPCOMING_LIMIT
from shiftboard.core.models import ShiftRecord
from shiftboard.core.time_utils import require_aware


def select_upcoming(
    shifts: Iterable[ShiftRecord],
    now: datetime,
    limit: int = DEFAULT_UPCOMING_LIMIT,
) -> list[ShiftRecord]:
    """
    Return the next `limit` shifts starting at or after `now`.

    Shifts are ordered by date, ties broken by id, since the source order is
    not stable. Pure: the input is not modified and repeated calls with the
    same arguments return equal lists.

    Args:
        shifts: Any iterable of shift records, in any order
        now: Current instant (timezone-aware); a shift starting exactly at
            `now` counts as upcoming
        limit: Maximum number of shifts returned

    Returns:
        New list of at most `limit` shifts

    Raises:
        ValueError: If limit is negative or now is naive
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    require_aware(now)

    upcoming = [shift for shift in shifts if shift.date >= now]
    upcoming.sort(key=lambda shift: (shift.date, shift.id))
    return upcoming[:limit]
