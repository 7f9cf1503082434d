# shiftboard/core/repository.py
"""
Shift sources.

Every source implements the same contract: ``await fetch(employee)`` returns
the employee's shifts in no particular order, or raises FetchError. Callers
never need to know which source is configured.
"""

import asyncio
import datetime
from collections.abc import Callable, Iterable
from typing import Any, Protocol
from urllib.parse import quote
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shiftboard.core import config
from shiftboard.core.constants import SAMPLE_ROLE, SAMPLE_SCHEDULE_NAME
from shiftboard.core.errors import FetchError
from shiftboard.core.logging_config import get_logger
from shiftboard.core.models import EmployeeContext, ShiftRecord
from shiftboard.core.time_utils import NowFn, utc_now
from shiftboard.database.database import SessionLocal, Shift

logger = get_logger(__name__)

_shift_list = TypeAdapter(list[ShiftRecord])


class ShiftRepository(Protocol):
    async def fetch(self, employee: EmployeeContext) -> list[ShiftRecord]: ...


def ensure_unique_ids(shifts: list[ShiftRecord], employee_id: str | None = None) -> list[ShiftRecord]:
    """Raise FetchError if two records share an id."""
    seen: set[str] = set()
    for shift in shifts:
        if shift.id in seen:
            raise FetchError(f"Duplicate shift id {shift.id!r} in source", employee_id)
        seen.add(shift.id)
    return shifts


def parse_shifts(payload: Any, employee_id: str | None = None) -> list[ShiftRecord]:
    """
    Validate a decoded JSON payload into shift records.

    Raises:
        FetchError: If the payload is not a list or any record is invalid
    """
    if not isinstance(payload, list):
        raise FetchError(f"Expected a list of shifts, got {type(payload).__name__}", employee_id)
    try:
        shifts = _shift_list.validate_python(payload)
    except ValidationError as e:
        raise FetchError(f"Invalid shift record: {e.error_count()} validation error(s)", employee_id) from e
    return ensure_unique_ids(shifts, employee_id)


class StaticShiftRepository:
    """
    Sample schedule: one lunch shift today and one evening shift tomorrow.

    Stands in for a live source in development. Dates are relative to
    now_fn so the sample never goes stale.
    """

    def __init__(self, now_fn: NowFn = utc_now, tz: ZoneInfo = config.TIMEZONE):
        self._now_fn = now_fn
        self._tz = tz

    async def fetch(self, employee: EmployeeContext) -> list[ShiftRecord]:
        today = self._now_fn().astimezone(self._tz).date()
        tomorrow = today + datetime.timedelta(days=1)
        samples = [
            ("1", today, datetime.time(11, 0), datetime.time(15, 0)),
            ("2", tomorrow, datetime.time(19, 0), datetime.time(23, 0)),
        ]
        return [
            ShiftRecord(
                id=shift_id,
                date=datetime.datetime.combine(day, start, tzinfo=self._tz),
                start_time=start,
                end_time=end,
                role=SAMPLE_ROLE,
                schedule_name=SAMPLE_SCHEDULE_NAME,
            )
            for shift_id, day, start, end in samples
        ]


class InMemoryShiftRepository:
    """Shifts held in memory per employee id. Test double and demo source."""

    def __init__(self, shifts: dict[str, Iterable[ShiftRecord]] | None = None, error: Exception | None = None):
        self._shifts = {employee_id: list(items) for employee_id, items in (shifts or {}).items()}
        self.error = error
        self.calls: list[EmployeeContext] = []

    def put(self, employee_id: str, shifts: Iterable[ShiftRecord]) -> None:
        self._shifts[employee_id] = list(shifts)

    async def fetch(self, employee: EmployeeContext) -> list[ShiftRecord]:
        self.calls.append(employee)
        if self.error is not None:
            if isinstance(self.error, FetchError):
                raise self.error
            raise FetchError(str(self.error), employee.employee_id) from self.error
        return ensure_unique_ids(list(self._shifts.get(employee.employee_id, [])), employee.employee_id)


class HttpShiftRepository:
    """
    JSON-over-HTTP shift feed.

    GET {base_url}/employees/{employee_id}/shifts must return a JSON list of
    shift objects using camelCase keys.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = config.SHIFT_FETCH_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        headers: dict[str, str] | None = None,
    ):
        if not base_url and client is None:
            raise ValueError("HttpShiftRepository needs a base_url or a client")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._headers = headers or {}

    def _url(self, employee: EmployeeContext) -> str:
        return f"{self._base_url}/employees/{quote(employee.employee_id, safe='')}/shifts"

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, headers=self._headers)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.get(url, headers=self._headers)

    async def fetch(self, employee: EmployeeContext) -> list[ShiftRecord]:
        url = self._url(employee)
        employee_id = employee.employee_id
        try:
            response = await self._get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise FetchError(f"Shift source returned HTTP {e.response.status_code}", employee_id) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Shift source unreachable: {e}", employee_id) from e
        except ValueError as e:
            raise FetchError("Shift source returned invalid JSON", employee_id) from e

        shifts = parse_shifts(payload, employee_id)
        logger.debug(f"Fetched {len(shifts)} shifts from {url}")
        return shifts


class SqlShiftRepository:
    """Read-only shift source over the SQLAlchemy shift table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def _load(self, employee_id: str) -> list[ShiftRecord]:
        with self._session_factory() as session:
            rows = session.query(Shift).filter(Shift.employee_id == employee_id).all()
            return ensure_unique_ids([self._to_record(row) for row in rows], employee_id)

    @staticmethod
    def _to_record(row: Shift) -> ShiftRecord:
        try:
            tz = ZoneInfo(row.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise FetchError(f"Shift {row.id} has unknown timezone {row.timezone!r}", row.employee_id) from e
        try:
            return ShiftRecord(
                id=row.id,
                date=datetime.datetime.combine(row.date, row.start_time, tzinfo=tz),
                start_time=row.start_time,
                end_time=row.end_time,
                role=row.role,
                schedule_name=row.schedule_name,
            )
        except ValidationError as e:
            raise FetchError(f"Shift {row.id} is invalid: {e.error_count()} validation error(s)", row.employee_id) from e

    async def fetch(self, employee: EmployeeContext) -> list[ShiftRecord]:
        try:
            return await asyncio.to_thread(self._load, employee.employee_id)
        except SQLAlchemyError as e:
            raise FetchError(f"Shift query failed: {e}", employee.employee_id) from e


def build_repository(source: str = config.SHIFT_SOURCE, now_fn: NowFn = utc_now) -> ShiftRepository:
    """Create the configured shift source."""
    if source == "http":
        logger.info(f"Using HTTP shift source at {config.SHIFT_SOURCE_URL}")
        return HttpShiftRepository(config.SHIFT_SOURCE_URL)
    if source == "database":
        logger.info("Using database shift source")
        return SqlShiftRepository(SessionLocal)
    if source == "static":
        logger.info("Using static sample shift source")
        return StaticShiftRepository(now_fn=now_fn)
    raise ValueError(f"Unknown shift source: {source!r}")
