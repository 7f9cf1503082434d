# shiftboard/core/presenter.py
"""
Dashboard orchestration.

The presenter owns one employee's dashboard state: the fetched shift set,
the loading flag and (through the controller) the permission state. Every
change replaces a whole slice and rebuilds the view model from a single
snapshot; nothing is updated incrementally.
"""

import asyncio
from collections.abc import Callable, Iterable
from datetime import datetime
from zoneinfo import ZoneInfo

from shiftboard.core import config
from shiftboard.core.constants import NOTICE_FETCH_FAILED
from shiftboard.core.errors import FetchError
from shiftboard.core.logging_config import get_logger
from shiftboard.core.models import (
    DashboardViewModel,
    EmployeeContext,
    NoticeKind,
    NotificationPermissionState,
    ShiftRecord,
    UpcomingShift,
)
from shiftboard.core.notifications import NotificationPermissionController, PermissionPlatform
from shiftboard.core.notifier import Notifier
from shiftboard.core.repository import ShiftRepository
from shiftboard.core.roles import category_for
from shiftboard.core.selector import select_upcoming
from shiftboard.core.sentry_config import capture_exception
from shiftboard.core.stats import monthly_shift_count, weekly_hours
from shiftboard.core.time_utils import NowFn, utc_now

logger = get_logger(__name__)

Listener = Callable[[DashboardViewModel], None]


def compute_view_model(
    shifts: Iterable[ShiftRecord],
    permission: NotificationPermissionState,
    now: datetime,
    loading: bool = False,
    tz: ZoneInfo = config.TIMEZONE,
    limit: int = config.UPCOMING_LIMIT,
) -> DashboardViewModel:
    """
    Build the view model for one snapshot of dashboard state.

    Pure: the same shifts, permission, instant and loading flag always give
    an equal view model.
    """
    shifts = list(shifts)
    upcoming = tuple(
        UpcomingShift(**shift.model_dump(), category=category_for(shift.role))
        for shift in select_upcoming(shifts, now, limit)
    )
    return DashboardViewModel(
        loading=loading,
        upcoming=upcoming,
        weekly_hours=weekly_hours(shifts, now, tz),
        monthly_shift_count=monthly_shift_count(shifts, now, tz),
        permission=permission,
        computed_at=now,
    )


class DashboardPresenter:
    """Drives one dashboard: activation, shift loading, permission, re-renders."""

    def __init__(
        self,
        repository: ShiftRepository,
        permissions: NotificationPermissionController,
        notifier: Notifier,
        now_fn: NowFn = utc_now,
        tz: ZoneInfo = config.TIMEZONE,
        limit: int = config.UPCOMING_LIMIT,
    ):
        self._repository = repository
        self._permissions = permissions
        self._notifier = notifier
        self._now_fn = now_fn
        self._tz = tz
        self._limit = limit

        self._generation = 0
        self._active = False
        self._employee: EmployeeContext | None = None
        self._shifts: tuple[ShiftRecord, ...] = ()
        self._loading = True
        self._listeners: list[Listener] = []
        self._view_model = self._compute(self._now_fn())

    @property
    def view_model(self) -> DashboardViewModel:
        return self._view_model

    @property
    def shifts(self) -> tuple[ShiftRecord, ...]:
        return self._shifts

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def employee(self) -> EmployeeContext | None:
        return self._employee

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with every rebuilt view model. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def activate(
        self,
        employee: EmployeeContext,
        platform: PermissionPlatform | None = None,
    ) -> DashboardViewModel:
        """
        Start a new dashboard generation for employee.

        Fetches shifts and asks for notification permission concurrently,
        returning once both have settled. Results of any earlier generation
        still in flight, shifts or permission answers, are discarded when
        they arrive.

        Args:
            employee: Whose shifts to load
            platform: Answers this activation's permission request
                (defaults to the controller's platform)
        """
        self._generation += 1
        generation = self._generation
        self._active = True
        self._employee = employee
        self._shifts = ()
        self._loading = True

        logger.info(
            f"Activating dashboard for employee {employee.employee_id}",
            extra={"extra_fields": {"employee_id": employee.employee_id, "generation": generation}},
        )
        self._rebuild()

        await asyncio.gather(
            self._load_shifts(employee, generation),
            self._load_permission(generation, platform),
        )
        return self._view_model

    def deactivate(self) -> None:
        """Navigation away: forget the shift set and ignore late results."""
        self._generation += 1
        self._active = False
        self._shifts = ()
        self._loading = True
        logger.debug(f"Dashboard deactivated (generation {self._generation})")
        self._rebuild()

    async def request_permission(self, platform: PermissionPlatform | None = None) -> NotificationPermissionState:
        """
        Explicit user request for notification permission.

        Returns the platform's answer. The answer is only recorded if the
        dashboard was not re-activated or closed while the prompt was open.
        """
        generation = self._generation
        state = await self._permissions.ask("user", platform)
        if generation != self._generation:
            logger.debug(f"Ignoring permission answer {state.value} from superseded generation {generation}")
            return state
        self._permissions.apply(state, "user")
        self._rebuild()
        return state

    def refresh(self, now: datetime | None = None) -> DashboardViewModel:
        """Recompute against a new instant without refetching."""
        self._rebuild(now)
        return self._view_model

    def _is_stale(self, generation: int) -> bool:
        return not self._active or generation != self._generation

    async def _load_shifts(self, employee: EmployeeContext, generation: int) -> None:
        try:
            shifts = await self._repository.fetch(employee)
        except Exception as e:
            if self._is_stale(generation):
                logger.debug(f"Ignoring failed fetch from stale generation {generation}: {e}")
                return
            if not isinstance(e, FetchError):
                e = FetchError(f"Unexpected error fetching shifts: {e}", employee.employee_id)
            logger.error(
                f"Failed to fetch shifts for employee {employee.employee_id}: {e}",
                extra={"extra_fields": {"employee_id": employee.employee_id, "generation": generation}},
                exc_info=True,
            )
            capture_exception(e, {"employee": {"id": employee.employee_id}})
            self._notifier.notify(NoticeKind.ERROR, NOTICE_FETCH_FAILED)
            shifts = []

        if self._is_stale(generation):
            logger.debug(f"Dropping {len(shifts)} shifts from stale generation {generation}")
            return

        self._shifts = tuple(shifts)
        self._loading = False
        logger.info(
            f"Loaded {len(self._shifts)} shifts for employee {employee.employee_id}",
            extra={"extra_fields": {"employee_id": employee.employee_id, "shift_count": len(self._shifts)}},
        )
        self._rebuild()

    async def _load_permission(self, generation: int, platform: PermissionPlatform | None) -> None:
        state = await self._permissions.ask("activation", platform)
        if self._is_stale(generation):
            logger.debug(f"Ignoring permission answer {state.value} from stale generation {generation}")
            return
        self._permissions.apply(state, "activation")
        self._rebuild()

    def _compute(self, now: datetime) -> DashboardViewModel:
        return compute_view_model(
            self._shifts,
            self._permissions.state,
            now,
            loading=self._loading,
            tz=self._tz,
            limit=self._limit,
        )

    def _rebuild(self, now: datetime | None = None) -> None:
        self._view_model = self._compute(now or self._now_fn())
        for listener in list(self._listeners):
            try:
                listener(self._view_model)
            except Exception:
                logger.exception("Dashboard listener failed")
