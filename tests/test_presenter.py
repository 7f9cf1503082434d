"""
Tests for dashboard orchestration: activation, loading state, failure
recovery, staleness and permission handling.
"""

import asyncio
import datetime
from zoneinfo import ZoneInfo

import pytest

from shiftboard.core.constants import NOTICE_FETCH_FAILED, CategoryKey
from shiftboard.core.errors import FetchError
from shiftboard.core.models import NoticeKind, NotificationPermissionState
from shiftboard.core.notifications import (
    NotificationPermissionController,
    ReportedPermissionPlatform,
    StaticPermissionPlatform,
)
from shiftboard.core.notifier import NoticeQueue
from shiftboard.core.presenter import DashboardPresenter, compute_view_model
from shiftboard.core.repository import InMemoryShiftRepository

PARIS = ZoneInfo("Europe/Paris")


class GatedRepository:
    """First fetch blocks until released; later fetches answer immediately."""

    def __init__(self, slow_result, fast_result):
        self.slow_result = slow_result
        self.fast_result = fast_result
        self.release = asyncio.Event()
        self.calls = 0

    async def fetch(self, employee):
        self.calls += 1
        if self.calls == 1:
            await self.release.wait()
            if isinstance(self.slow_result, Exception):
                raise self.slow_result
            return self.slow_result
        return self.fast_result


class GatedPermissionPlatform:
    """Holds its answer until released, like a prompt the user leaves open."""

    def __init__(self, answer):
        self.answer = answer
        self.release = asyncio.Event()
        self.calls = 0

    async def request(self):
        self.calls += 1
        await self.release.wait()
        return self.answer


def _presenter(repository, now, answer="denied"):
    notices = NoticeQueue()
    platform = StaticPermissionPlatform(answer)
    presenter = DashboardPresenter(
        repository=repository,
        permissions=NotificationPermissionController(platform, notices),
        notifier=notices,
        now_fn=lambda: now,
        tz=PARIS,
        limit=5,
    )
    return presenter, notices, platform


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


class TestComputeViewModel:
    def test_populated(self, week_shifts, now):
        view_model = compute_view_model(week_shifts, NotificationPermissionState.GRANTED, now, tz=PARIS)

        assert view_model.loading is False
        assert [shift.id for shift in view_model.upcoming] == ["s3", "s4", "s5", "s6"]
        assert [shift.category for shift in view_model.upcoming] == [
            CategoryKey.CHART_1,
            CategoryKey.CHART_4,
            CategoryKey.CHART_3,
            CategoryKey.DEFAULT,
        ]
        assert view_model.weekly_hours == pytest.approx(15.5)
        assert view_model.monthly_shift_count == 5
        assert view_model.permission is NotificationPermissionState.GRANTED
        assert view_model.computed_at == now

    def test_pure(self, week_shifts, now):
        first = compute_view_model(week_shifts, NotificationPermissionState.UNKNOWN, now, tz=PARIS)
        second = compute_view_model(week_shifts, NotificationPermissionState.UNKNOWN, now, tz=PARIS)
        assert first == second

    def test_loading_flag_passes_through(self, now):
        view_model = compute_view_model([], NotificationPermissionState.UNKNOWN, now, loading=True, tz=PARIS)

        assert view_model.loading is True
        assert view_model.upcoming == ()

    def test_limit(self, week_shifts, now):
        view_model = compute_view_model(week_shifts, NotificationPermissionState.UNKNOWN, now, tz=PARIS, limit=2)
        assert len(view_model.upcoming) == 2


class TestActivation:
    def test_loading_before_activation(self, repository, now):
        presenter, _, _ = _presenter(repository, now)

        assert presenter.view_model.loading is True
        assert presenter.is_active is False

    @pytest.mark.asyncio
    async def test_activate_populates_view_model(self, repository, employee, now):
        presenter, notices, platform = _presenter(repository, now, answer="granted")

        view_model = await presenter.activate(employee)

        assert view_model.loading is False
        assert len(view_model.upcoming) == 4
        assert view_model.permission is NotificationPermissionState.GRANTED
        assert repository.calls == [employee]
        assert platform.calls == 1
        assert [notice.kind for notice in notices.drain()] == [NoticeKind.SUCCESS]

    @pytest.mark.asyncio
    async def test_empty_schedule_is_not_a_failure(self, employee, now):
        presenter, notices, _ = _presenter(InMemoryShiftRepository(), now)

        view_model = await presenter.activate(employee)

        assert view_model.loading is False
        assert view_model.upcoming == ()
        assert len(notices) == 0

    @pytest.mark.asyncio
    async def test_fetch_failure_degrades_to_empty(self, employee, now):
        repository = InMemoryShiftRepository(error=FetchError("feed down", employee.employee_id))
        presenter, notices, _ = _presenter(repository, now)

        view_model = await presenter.activate(employee)
        for _ in range(3):
            presenter.refresh()

        assert view_model.loading is False
        assert view_model.upcoming == ()
        assert view_model.weekly_hours == 0.0
        errors = [notice for notice in notices.drain() if notice.kind is NoticeKind.ERROR]
        assert [notice.message for notice in errors] == [NOTICE_FETCH_FAILED]

    @pytest.mark.asyncio
    async def test_unexpected_repository_error_is_contained(self, employee, now):
        class BrokenRepository:
            async def fetch(self, employee):
                raise KeyError("oops")

        presenter, notices, _ = _presenter(BrokenRepository(), now)

        view_model = await presenter.activate(employee)

        assert view_model.loading is False
        assert len([n for n in notices.drain() if n.kind is NoticeKind.ERROR]) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("fails", [False, True])
    async def test_loading_turns_false_exactly_once(self, week_shifts, employee, now, fails):
        repository = InMemoryShiftRepository(
            {employee.employee_id: week_shifts},
            error=FetchError("down") if fails else None,
        )
        presenter, _, _ = _presenter(repository, now)
        frames = []
        presenter.subscribe(lambda view_model: frames.append(view_model.loading))

        await presenter.activate(employee)

        assert frames[0] is True
        assert frames[-1] is False
        transitions = sum(1 for before, after in zip(frames, frames[1:]) if before and not after)
        assert transitions == 1

    @pytest.mark.asyncio
    async def test_reactivation_refetches(self, repository, employee, now):
        presenter, _, platform = _presenter(repository, now)

        await presenter.activate(employee)
        await presenter.activate(employee)

        assert len(repository.calls) == 2
        assert platform.calls == 2
        assert presenter.generation == 2


class TestStaleness:
    @pytest.mark.asyncio
    async def test_late_result_from_superseded_activation_is_ignored(self, make_shift, employee, now):
        old = [make_shift("old", now.date() + datetime.timedelta(days=1))]
        new = [make_shift("new", now.date() + datetime.timedelta(days=2))]
        repository = GatedRepository(old, new)
        presenter, _, _ = _presenter(repository, now)

        first = asyncio.create_task(presenter.activate(employee))
        await _settle()
        assert repository.calls == 1

        await presenter.activate(employee)
        assert [shift.id for shift in presenter.view_model.upcoming] == ["new"]

        repository.release.set()
        await first

        assert [shift.id for shift in presenter.view_model.upcoming] == ["new"]
        assert [shift.id for shift in presenter.shifts] == ["new"]

    @pytest.mark.asyncio
    async def test_late_failure_after_deactivation_is_silent(self, employee, now):
        repository = GatedRepository(FetchError("too late"), [])
        presenter, notices, _ = _presenter(repository, now)

        task = asyncio.create_task(presenter.activate(employee))
        await _settle()
        presenter.deactivate()
        repository.release.set()
        await task

        assert presenter.is_active is False
        assert presenter.shifts == ()
        assert not any(notice.kind is NoticeKind.ERROR for notice in notices.drain())

    @pytest.mark.asyncio
    async def test_loading_stays_true_until_fetch_settles(self, week_shifts, employee, now):
        repository = GatedRepository(week_shifts, [])
        presenter, _, _ = _presenter(repository, now)

        task = asyncio.create_task(presenter.activate(employee))
        await _settle()

        assert presenter.view_model.loading is True
        repository.release.set()
        await task
        assert presenter.view_model.loading is False

    @pytest.mark.asyncio
    async def test_late_permission_from_superseded_activation_is_ignored(self, repository, employee, now):
        presenter, notices, _ = _presenter(repository, now, answer="denied")
        slow = GatedPermissionPlatform("granted")

        first = asyncio.create_task(presenter.activate(employee, slow))
        await _settle()
        assert slow.calls == 1

        await presenter.activate(employee)
        assert presenter.view_model.permission is NotificationPermissionState.DENIED

        slow.release.set()
        await first

        assert presenter.view_model.permission is NotificationPermissionState.DENIED
        assert not any(notice.kind is NoticeKind.SUCCESS for notice in notices.drain())

    @pytest.mark.asyncio
    async def test_late_permission_after_deactivation_is_ignored(self, repository, employee, now):
        presenter, notices, _ = _presenter(repository, now)
        slow = GatedPermissionPlatform("granted")

        task = asyncio.create_task(presenter.activate(employee, slow))
        await _settle()
        presenter.deactivate()
        slow.release.set()
        await task

        assert presenter.view_model.permission is NotificationPermissionState.UNKNOWN
        assert len(notices) == 0

    @pytest.mark.asyncio
    async def test_user_answer_arriving_after_deactivation_is_ignored(self, repository, employee, now):
        presenter, notices, _ = _presenter(repository, now)
        await presenter.activate(employee)
        slow = GatedPermissionPlatform("granted")

        request = asyncio.create_task(presenter.request_permission(slow))
        await _settle()
        presenter.deactivate()
        slow.release.set()

        assert await request is NotificationPermissionState.GRANTED
        assert presenter.view_model.permission is NotificationPermissionState.DENIED
        assert len(notices) == 0

    @pytest.mark.asyncio
    async def test_overlapping_activations_keep_their_own_answers(self, repository, employee, now):
        presenter, notices, _ = _presenter(repository, now)
        granted = ReportedPermissionPlatform("granted")
        denied = ReportedPermissionPlatform("denied")

        await asyncio.gather(
            presenter.activate(employee, granted),
            presenter.activate(employee, denied),
        )

        assert granted.pending is None
        assert denied.pending is None
        assert presenter.generation == 2
        assert presenter.view_model.permission is NotificationPermissionState.DENIED
        assert len(notices) == 0


class TestPermission:
    @pytest.mark.asyncio
    async def test_user_request_updates_view_model(self, repository, employee, now):
        presenter, notices, platform = _presenter(repository, now, answer="granted")
        await presenter.activate(employee)
        notices.drain()

        state = await presenter.request_permission()

        assert state is NotificationPermissionState.GRANTED
        assert presenter.view_model.permission is NotificationPermissionState.GRANTED
        assert platform.calls == 2
        assert len(notices.drain()) == 1

    @pytest.mark.asyncio
    async def test_permission_change_keeps_shift_slice(self, repository, employee, now):
        presenter, _, platform = _presenter(repository, now, answer="denied")
        before = await presenter.activate(employee)

        platform.answer = "granted"
        await presenter.request_permission()
        after = presenter.view_model

        assert after.upcoming == before.upcoming
        assert after.permission is NotificationPermissionState.GRANTED


class TestRefreshAndListeners:
    @pytest.mark.asyncio
    async def test_refresh_recomputes_for_new_instant(self, repository, employee, now):
        presenter, _, _ = _presenter(repository, now)
        await presenter.activate(employee)

        later = now + datetime.timedelta(days=5)  # Monday 26 October
        view_model = presenter.refresh(later)

        assert [shift.id for shift in view_model.upcoming] == ["s5", "s6"]
        assert view_model.weekly_hours == pytest.approx(9.5)
        assert len(repository.calls) == 1

    @pytest.mark.asyncio
    async def test_unsubscribe(self, repository, employee, now):
        presenter, _, _ = _presenter(repository, now)
        frames = []
        unsubscribe = presenter.subscribe(frames.append)
        unsubscribe()

        await presenter.activate(employee)

        assert frames == []

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_dashboard(self, repository, employee, now):
        presenter, _, _ = _presenter(repository, now)

        def broken(view_model):
            raise RuntimeError("render failed")

        presenter.subscribe(broken)
        view_model = await presenter.activate(employee)

        assert view_model.loading is False

    @pytest.mark.asyncio
    async def test_view_models_are_rebuilt_not_mutated(self, repository, employee, now):
        presenter, _, _ = _presenter(repository, now)
        initial = presenter.view_model

        await presenter.activate(employee)

        assert presenter.view_model is not initial
        assert initial.loading is True

    @pytest.mark.asyncio
    async def test_listeners_see_deactivation(self, repository, employee, now):
        presenter, _, _ = _presenter(repository, now)
        await presenter.activate(employee)
        frames = []
        presenter.subscribe(frames.append)

        presenter.deactivate()

        assert len(frames) == 1
        assert frames[0].loading is True
        assert frames[0].upcoming == ()
