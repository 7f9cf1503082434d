# shiftboard/routes/notifications.py
"""
Notification permission route, called when the employee clicks
"Activer les notifications".
"""

from fastapi import APIRouter, Depends, Request

from shiftboard.auth.auth import get_current_employee
from shiftboard.core.models import EmployeeContext
from shiftboard.core.notifications import ReportedPermissionPlatform
from shiftboard.routes.shared import PermissionRequest, require_session, session_payload

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.post("/permission")
async def request_permission(
    body: PermissionRequest,
    request: Request,
    employee: EmployeeContext = Depends(get_current_employee),
):
    session = require_session(request, employee.employee_id)
    state = await session.presenter.request_permission(ReportedPermissionPlatform(body.result))
    return {"permission": state.value, **session_payload(session)}
