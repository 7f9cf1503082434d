import enum
from datetime import datetime, time

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from shiftboard.core.constants import SECONDS_PER_HOUR, CategoryKey


class ShiftRecord(BaseModel):
    """A single scheduled work period for an employee.

    Feeds use camelCase keys (startTime, scheduleName); Python code uses the
    snake_case attribute names. Both are accepted on input.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1)
    date: datetime
    start_time: time
    end_time: time
    role: str
    schedule_name: str

    @field_validator("date")
    @classmethod
    def _require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("date must be timezone-aware")
        return value

    @model_validator(mode="after")
    def _check_time_range(self) -> "ShiftRecord":
        # Overnight shifts are not supported
        if self.end_time <= self.start_time:
            raise ValueError(
                f"end_time {self.end_time.isoformat()} must be after start_time {self.start_time.isoformat()}"
            )
        return self

    @property
    def hours(self) -> float:
        """Length of the shift in hours."""
        start = self.start_time.hour * 3600 + self.start_time.minute * 60 + self.start_time.second
        end = self.end_time.hour * 3600 + self.end_time.minute * 60 + self.end_time.second
        return (end - start) / SECONDS_PER_HOUR


class UpcomingShift(ShiftRecord):
    """A shift annotated with the visual category of its role."""

    category: CategoryKey


class NotificationPermissionState(str, enum.Enum):
    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"


class NoticeKind(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notice(BaseModel):
    """A toast message for the rendering layer."""

    model_config = ConfigDict(frozen=True)

    kind: NoticeKind
    message: str


class EmployeeContext(BaseModel):
    """Identity of the employee whose shifts are shown."""

    model_config = ConfigDict(frozen=True)

    employee_id: str = Field(min_length=1)
    display_name: str | None = None


class DashboardViewModel(BaseModel):
    """Everything the rendering layer needs for one dashboard frame."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    loading: bool
    upcoming: tuple[UpcomingShift, ...] = ()
    weekly_hours: float = 0.0
    monthly_shift_count: int = 0
    permission: NotificationPermissionState = NotificationPermissionState.UNKNOWN
    computed_at: datetime | None = None
