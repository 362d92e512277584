from datetime import date, datetime, timezone
from typing import Annotated, Literal
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models import AttendanceEvent, AttendanceEventSource, AttendanceStatus


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDateTime = Annotated[datetime, AfterValidator(_as_utc)]
DayStatus = Literal["present", "incomplete", "absent"]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AttendanceEventCreate(ApiModel):
    employee_id: str | None = Field(default=None, min_length=1, max_length=64)
    status: AttendanceStatus
    timestamp: datetime | None = None
    location: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, max_length=1000)


class AttendanceEventRead(ApiModel):
    id: UUID
    employee_id: str
    timestamp: UtcDateTime
    status: AttendanceStatus
    source: AttendanceEventSource
    location: str | None = None
    notes: str | None = None

    @classmethod
    def from_event(cls, event: AttendanceEvent) -> "AttendanceEventRead":
        return cls(
            id=event.id,
            employee_id=event.employee_id,
            timestamp=event.ts_utc,
            status=event.status,
            source=event.source,
            location=event.location,
            notes=event.notes,
        )


class DailySummaryRead(ApiModel):
    employee_id: str
    day: date = Field(alias="date")
    check_in_time: UtcDateTime | None = None
    check_out_time: UtcDateTime | None = None
    working_hours: float | None = None
    status: DayStatus


class MonthlyStatsRead(ApiModel):
    employee_id: str
    year: int
    month: int
    total_days: int
    present_days: int
    incomplete_days: int
    absent_days: int
    average_working_hours: float


class DailyBreakdownRead(ApiModel):
    day: date = Field(alias="date")
    check_ins: int
    check_outs: int
    unique_employees: int


class RangeStatsRead(ApiModel):
    start_date: date
    end_date: date
    total_records: int
    total_check_ins: int
    total_check_outs: int
    unique_employees: int
    daily_breakdown: list[DailyBreakdownRead]


class PaginatedEventsRead(ApiModel):
    data: list[AttendanceEventRead]
    total: int
    page: int
    limit: int
    total_pages: int


class AdminNotificationRead(ApiModel):
    id: UUID
    employee_id: str
    message: str
    is_read: bool
    created_at: UtcDateTime


class ProfileChangeLogCreate(ApiModel):
    employee_id: str | None = Field(default=None, min_length=1, max_length=64)
    changed_field: str = Field(min_length=1, max_length=50)
    old_value: str | None = None
    new_value: str | None = None


class ProfileChangeLogRead(ApiModel):
    id: UUID
    employee_id: str
    changed_field: str
    old_value: str | None = None
    new_value: str | None = None
    changed_at: UtcDateTime
