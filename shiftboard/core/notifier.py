"""
Notify channel: fire-and-forget toast messages for the rendering layer.
"""

from typing import Protocol

from shiftboard.core.logging_config import get_logger
from shiftboard.core.models import Notice, NoticeKind

logger = get_logger(__name__)


class Notifier(Protocol):
    def notify(self, kind: NoticeKind, message: str) -> None: ...


class LoggingNotifier:
    """Writes notices to the log only. Used when nobody renders toasts."""

    def notify(self, kind: NoticeKind, message: str) -> None:
        kind = NoticeKind(kind)
        level = "warning" if kind is NoticeKind.ERROR else "info"
        getattr(logger, level)(f"Notice ({kind.value}): {message}")


class NoticeQueue:
    """
    Collects notices until the rendering layer picks them up.

    Each notice is handed out once by drain().
    """

    def __init__(self) -> None:
        self._pending: list[Notice] = []

    def notify(self, kind: NoticeKind, message: str) -> None:
        notice = Notice(kind=NoticeKind(kind), message=message)
        logger.debug(f"Queued notice ({notice.kind.value}): {message}")
        self._pending.append(notice)

    def drain(self) -> list[Notice]:
        pending, self._pending = self._pending, []
        return pending

    def __len__(self) -> int:
        return len(self._pending)
