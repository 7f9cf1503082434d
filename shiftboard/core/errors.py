# shiftboard/core/errors.py
"""Exceptions raised by the shift dashboard core."""


class ShiftboardError(Exception):
    """Base class for shiftboard errors."""


class FetchError(ShiftboardError):
    """Shifts could not be retrieved (transport, status or parse failure)."""

    def __init__(self, message: str, employee_id: str | None = None):
        super().__init__(message)
        self.employee_id = employee_id


class PermissionUnsupported(ShiftboardError):
    """The platform cannot show notifications."""
