from dataclasses import dataclass
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from shiftboard.core import config
from shiftboard.core.logging_config import get_logger
from shiftboard.core.notifications import NotificationPermissionController, ReportedPermissionPlatform
from shiftboard.core.notifier import NoticeQueue
from shiftboard.core.presenter import DashboardPresenter
from shiftboard.core.repository import ShiftRepository
from shiftboard.core.time_utils import NowFn, utc_now

logger = get_logger(__name__)


@dataclass
class DashboardSession:
    """One employee's dashboard: presenter plus the notice channel the browser reads."""

    presenter: DashboardPresenter
    notices: NoticeQueue
    last_seen: datetime


class DashboardSessions:
    """
    Presenters per employee id, created on first use.

    A session nobody has touched for idle_timeout seconds counts as a tab
    that went away without closing the dashboard; it is deactivated and
    dropped the next time the sessions are consulted.
    """

    def __init__(
        self,
        repository: ShiftRepository,
        now_fn: NowFn = utc_now,
        tz: ZoneInfo = config.TIMEZONE,
        limit: int = config.UPCOMING_LIMIT,
        idle_timeout: int = config.SESSION_IDLE_TIMEOUT,
    ):
        self.repository = repository
        self.now_fn = now_fn
        self.tz = tz
        self.limit = limit
        self.idle_timeout = timedelta(seconds=idle_timeout)
        self._sessions: dict[str, DashboardSession] = {}

    def get(self, employee_id: str) -> DashboardSession | None:
        now = self.now_fn()
        self.evict_idle(now)
        session = self._sessions.get(employee_id)
        if session is not None:
            session.last_seen = now
        return session

    def get_or_create(self, employee_id: str) -> DashboardSession:
        session = self.get(employee_id)
        if session is None:
            notices = NoticeQueue()
            presenter = DashboardPresenter(
                repository=self.repository,
                # Requests bring their own answer; without one the browser could not ask
                permissions=NotificationPermissionController(ReportedPermissionPlatform(), notices),
                notifier=notices,
                now_fn=self.now_fn,
                tz=self.tz,
                limit=self.limit,
            )
            session = DashboardSession(presenter=presenter, notices=notices, last_seen=self.now_fn())
            self._sessions[employee_id] = session
            logger.debug(f"Created dashboard session for employee {employee_id}")
        return session

    def close(self, employee_id: str) -> bool:
        """Deactivate and drop a session. Returns False if there was none."""
        session = self._sessions.pop(employee_id, None)
        if session is None:
            return False
        session.presenter.deactivate()
        return True

    def evict_idle(self, now: datetime | None = None) -> int:
        """Deactivate and drop sessions idle longer than the timeout. Returns how many."""
        now = now or self.now_fn()
        expired = [
            employee_id
            for employee_id, session in self._sessions.items()
            if now - session.last_seen > self.idle_timeout
        ]
        for employee_id in expired:
            self._sessions.pop(employee_id).presenter.deactivate()
        if expired:
            logger.info(
                f"Expired {len(expired)} idle dashboard sessions",
                extra={"extra_fields": {"expired": len(expired), "remaining": len(self._sessions)}},
            )
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)
