# shiftboard/routes/dashboard.py
"""
Dashboard routes - the employee's upcoming shifts and statistics as JSON.
"""

from fastapi import APIRouter, Depends, Request, Response, status

from shiftboard.auth.auth import get_current_employee
from shiftboard.core.calendar_export import generate_ical
from shiftboard.core.logging_config import get_logger
from shiftboard.core.models import EmployeeContext
from shiftboard.core.notifications import ReportedPermissionPlatform
from shiftboard.routes.shared import ActivateRequest, get_sessions, require_session, session_payload

logger = get_logger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.post("/activate")
async def activate_dashboard(
    request: Request,
    body: ActivateRequest | None = None,
    employee: EmployeeContext = Depends(get_current_employee),
):
    """Open the dashboard: fetch shifts and record the browser's permission state."""
    session = get_sessions(request).get_or_create(employee.employee_id)
    platform = ReportedPermissionPlatform(body.permission if body else None)
    await session.presenter.activate(employee, platform)
    return session_payload(session)


@router.get("")
async def read_dashboard(
    request: Request,
    employee: EmployeeContext = Depends(get_current_employee),
):
    """Current view model, recomputed for the current instant. No refetch."""
    session = require_session(request, employee.employee_id)
    session.presenter.refresh()
    return session_payload(session)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def close_dashboard(
    request: Request,
    employee: EmployeeContext = Depends(get_current_employee),
) -> Response:
    """Navigation away from the dashboard."""
    closed = get_sessions(request).close(employee.employee_id)
    if not closed:
        logger.debug(f"No dashboard session to close for employee {employee.employee_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/calendar.ics", response_class=Response)
async def export_calendar(
    request: Request,
    employee: EmployeeContext = Depends(get_current_employee),
) -> Response:
    """Upcoming shifts as an iCal download."""
    sessions = get_sessions(request)
    session = require_session(request, employee.employee_id)
    view_model = session.presenter.refresh()

    ical_content = generate_ical(
        view_model.upcoming,
        calendar_name=f"Planning {employee.display_name or employee.employee_id}",
        timezone_name=sessions.tz.key,
    )
    return Response(
        content=ical_content,
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="planning.ics"'},
    )
