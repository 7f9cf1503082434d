# shiftboard/routes/shared.py
"""
Helpers shared by the dashboard routes.
"""

from fastapi import HTTPException, Request, status
from pydantic import BaseModel

from shiftboard.core.sessions import DashboardSession, DashboardSessions


class ActivateRequest(BaseModel):
    """Browser's current Notification.permission, if it could read it."""

    permission: str | None = None


class PermissionRequest(BaseModel):
    """Answer returned by the browser's permission prompt."""

    result: str | None = None


def get_sessions(request: Request) -> DashboardSessions:
    return request.app.state.sessions


def require_session(request: Request, employee_id: str) -> DashboardSession:
    """Existing dashboard session for employee, 404 if never activated."""
    session = get_sessions(request).get(employee_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dashboard not activated")
    return session


def session_payload(session: DashboardSession) -> dict:
    """View model and pending notices as JSON. Draining hands each notice out once."""
    return {
        "viewModel": session.presenter.view_model.model_dump(mode="json", by_alias=True),
        "notices": [notice.model_dump(mode="json") for notice in session.notices.drain()],
    }
