"""
Notification permission lifecycle.

The browser performs the actual prompt and sends its answer with each
request; this module tracks the resulting state per dashboard session and
emits the "enabled" toast. Requests are only ever made on activation or
explicit user action, never retried.
"""

from typing import Protocol

from shiftboard.core.constants import NOTICE_NOTIFICATIONS_ENABLED
from shiftboard.core.errors import PermissionUnsupported
from shiftboard.core.logging_config import get_logger
from shiftboard.core.models import NoticeKind, NotificationPermissionState
from shiftboard.core.notifier import Notifier

logger = get_logger(__name__)

# Browser answers that are not states of their own.
# "default" means the prompt was dismissed without a choice.
BROWSER_ANSWER_ALIASES: dict[str, NotificationPermissionState] = {
    "default": NotificationPermissionState.DENIED,
}


class PermissionPlatform(Protocol):
    async def request(self) -> NotificationPermissionState | str: ...


class ReportedPermissionPlatform:
    """
    Platform adapter for one answer reported by the browser.

    The client runs Notification.requestPermission() and sends the result
    with its HTTP request. Each instance belongs to that one request and
    answers once. No answer means the client could not ask, i.e.
    notifications are unsupported.
    """

    def __init__(self, answer: str | None = None) -> None:
        self._answer = answer

    @property
    def pending(self) -> str | None:
        return self._answer

    async def request(self) -> str:
        answer, self._answer = self._answer, None
        if answer is None:
            raise PermissionUnsupported("Client did not report a notification permission answer")
        return answer


class StaticPermissionPlatform:
    """Always answers the same thing."""

    def __init__(self, answer: NotificationPermissionState | str):
        self.answer = answer
        self.calls = 0

    async def request(self) -> NotificationPermissionState | str:
        self.calls += 1
        return self.answer


def to_permission_state(answer: NotificationPermissionState | str) -> NotificationPermissionState:
    """Normalize a platform answer. Anything unrecognized counts as unsupported."""
    if isinstance(answer, NotificationPermissionState):
        state = answer
    elif answer in BROWSER_ANSWER_ALIASES:
        state = BROWSER_ANSWER_ALIASES[answer]
    else:
        try:
            state = NotificationPermissionState(answer)
        except ValueError:
            logger.warning(f"Unrecognized permission answer {answer!r}, treating as unsupported")
            return NotificationPermissionState.UNSUPPORTED

    if state is NotificationPermissionState.UNKNOWN:
        # A platform that cannot tell us is a platform we cannot use
        return NotificationPermissionState.UNSUPPORTED
    return state


class NotificationPermissionController:
    """
    Owns the permission state of one dashboard session.

    State starts as unknown and only changes through apply(), which
    request_permission() and request_on_load() call after asking the
    platform exactly once.
    """

    def __init__(self, platform: PermissionPlatform, notifier: Notifier):
        self._platform = platform
        self._notifier = notifier
        self._state = NotificationPermissionState.UNKNOWN

    @property
    def state(self) -> NotificationPermissionState:
        return self._state

    async def request_permission(self) -> NotificationPermissionState:
        """Explicit user action: ask the platform and record the answer."""
        return await self._request(trigger="user")

    async def request_on_load(self) -> NotificationPermissionState:
        """Lifecycle request made once per dashboard activation."""
        return await self._request(trigger="activation")

    async def ask(self, trigger: str, platform: PermissionPlatform | None = None) -> NotificationPermissionState:
        """
        Ask the platform once and normalize the answer without recording it.

        Callers that may be superseded while the prompt is open use this with
        apply(), so a late answer can be dropped before it touches the state.
        """
        if platform is None:
            platform = self._platform
        try:
            answer = await platform.request()
        except PermissionUnsupported as e:
            logger.info(f"Notifications unsupported ({trigger}): {e}")
            return NotificationPermissionState.UNSUPPORTED
        except Exception as e:
            logger.warning(f"Permission request failed ({trigger}), treating as unsupported: {e}", exc_info=True)
            return NotificationPermissionState.UNSUPPORTED
        return to_permission_state(answer)

    def apply(self, state: NotificationPermissionState, trigger: str) -> NotificationPermissionState:
        """Record an answer. Granted emits the "enabled" notice."""
        previous, self._state = self._state, state
        logger.info(
            f"Notification permission {previous.value} -> {state.value}",
            extra={"extra_fields": {"trigger": trigger, "permission": state.value}},
        )

        if state is NotificationPermissionState.GRANTED:
            self._notifier.notify(NoticeKind.SUCCESS, NOTICE_NOTIFICATIONS_ENABLED)

        return state

    async def _request(self, trigger: str) -> NotificationPermissionState:
        return self.apply(await self.ask(trigger), trigger)
