"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures:
- now: fixed "current instant" (Wednesday 2026-10-21 10:00 Paris)
- make_shift: factory for valid ShiftRecord values
- repository: in-memory shift source for employee "emp-1"
- test_client: FastAPI TestClient wired to the in-memory source and fixed clock
- auth_headers: bearer token for employee "emp-1"
"""

import datetime
import sys
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from shiftboard.auth.auth import create_access_token
from shiftboard.core.models import EmployeeContext, ShiftRecord
from shiftboard.core.repository import InMemoryShiftRepository
from shiftboard.main import create_app

PARIS = ZoneInfo("Europe/Paris")
EMPLOYEE_ID = "emp-1"


@pytest.fixture
def now():
    """Wednesday 21 October 2026, 10:00 in Paris."""
    return datetime.datetime(2026, 10, 21, 10, 0, tzinfo=PARIS)


@pytest.fixture
def employee():
    return EmployeeContext(employee_id=EMPLOYEE_ID, display_name="Camille Martin")


@pytest.fixture
def make_shift():
    """
    Factory for shift records.

    The shift date is the given day at the shift's start time in Paris.
    """

    def _make(
        shift_id: str,
        day: datetime.date,
        start: str = "11:00",
        end: str = "15:00",
        role: str = "Serveur",
        schedule_name: str = "Semaine 43 - Octobre",
    ) -> ShiftRecord:
        start_time = datetime.time.fromisoformat(start)
        return ShiftRecord(
            id=shift_id,
            date=datetime.datetime.combine(day, start_time, tzinfo=PARIS),
            start_time=start_time,
            end_time=datetime.time.fromisoformat(end),
            role=role,
            schedule_name=schedule_name,
        )

    return _make


@pytest.fixture
def week_shifts(make_shift):
    """
    A realistic October schedule around the fixed now.

    Upcoming from now: s3 (Wed 19:00), s4 (Sun), s5 (next Mon), s6 (Oct 31).
    """
    return [
        make_shift("s1", datetime.date(2026, 9, 30), "11:00", "15:00"),
        make_shift("s2", datetime.date(2026, 10, 19), "11:00", "15:00", role="Barman"),
        make_shift("s3", datetime.date(2026, 10, 21), "19:00", "23:00"),
        make_shift("s4", datetime.date(2026, 10, 25), "09:30", "17:00", role="Cuisine"),
        make_shift("s5", datetime.date(2026, 10, 26), "11:00", "15:00", role="Runner"),
        make_shift("s6", datetime.date(2026, 10, 31), "18:00", "23:30", role="Plongeur"),
    ]


@pytest.fixture
def repository(week_shifts):
    return InMemoryShiftRepository({EMPLOYEE_ID: week_shifts})


@pytest.fixture
def test_client(repository, now):
    """
    TestClient with the in-memory repository and a frozen clock.

    Yields:
        TestClient: FastAPI test client
    """
    app = create_app(repository=repository, now_fn=lambda: now)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers():
    token = create_access_token(EMPLOYEE_ID, display_name="Camille Martin")
    return {"Authorization": f"Bearer {token}"}
