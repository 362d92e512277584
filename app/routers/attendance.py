from datetime import date

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.errors import INVALID_DATE, INVALID_PAGINATION, ApiError
from app.models import AttendanceEvent
from app.schemas import (
    AttendanceEventCreate,
    AttendanceEventRead,
    DailySummaryRead,
    MonthlyStatsRead,
    PaginatedEventsRead,
    RangeStatsRead,
)
from app.security import CallerContext, ensure_self_or_admin, require_admin, require_caller
from app.services.attendance import check_in, check_out, create_event, list_events_for_employee
from app.services.day_bounds import parse_calendar_date
from app.services.pagination import list_events_page
from app.services.summary import daily_summary, monthly_stats, range_stats

router = APIRouter(prefix="/attendance", tags=["attendance"])


def _track_event(request: Request, event: AttendanceEvent) -> None:
    request.state.employee_id = event.employee_id
    request.state.event_id = str(event.id)


def _optional_date(value: str | None, field_name: str) -> date | None:
    if value is None or not value.strip():
        return None
    return parse_calendar_date(value, field_name)


def _int_param(value: str | None, field_name: str, code: str, default: int | None = None) -> int:
    raw = (value or "").strip()
    if not raw:
        if default is not None:
            return default
        raise ApiError(status_code=400, code=code, message=f"{field_name} is required.")
    try:
        return int(raw)
    except ValueError as exc:
        raise ApiError(status_code=400, code=code, message=f"{field_name} must be an integer.") from exc


def _list_records(
    db: Session,
    employee_id: str,
    start_date: str | None,
    end_date: str | None,
) -> list[AttendanceEventRead]:
    events = list_events_for_employee(
        db,
        employee_id,
        start_date=_optional_date(start_date, "startDate"),
        end_date=_optional_date(end_date, "endDate"),
    )
    return [AttendanceEventRead.from_event(event) for event in events]


@router.post("/check-in", response_model=AttendanceEventRead, status_code=status.HTTP_201_CREATED)
def checkin(
    request: Request,
    caller: CallerContext = Depends(require_caller),
    db: Session = Depends(get_db),
) -> AttendanceEventRead:
    event = check_in(db, caller.employee_id)
    _track_event(request, event)
    return AttendanceEventRead.from_event(event)


@router.post("/check-out", response_model=AttendanceEventRead, status_code=status.HTTP_201_CREATED)
def checkout(
    request: Request,
    caller: CallerContext = Depends(require_caller),
    db: Session = Depends(get_db),
) -> AttendanceEventRead:
    event = check_out(db, caller.employee_id)
    _track_event(request, event)
    return AttendanceEventRead.from_event(event)


@router.post("", response_model=AttendanceEventRead, status_code=status.HTTP_201_CREATED)
def create_attendance_event(
    payload: AttendanceEventCreate,
    request: Request,
    caller: CallerContext = Depends(require_caller),
    db: Session = Depends(get_db),
) -> AttendanceEventRead:
    employee_id = payload.employee_id or caller.employee_id
    if employee_id != caller.employee_id and not caller.is_admin:
        raise ApiError(
            status_code=403,
            code="FORBIDDEN",
            message="Only admins can create events for other employees.",
        )
    event = create_event(
        db,
        employee_id=employee_id,
        status=payload.status,
        ts_utc=payload.timestamp,
        location=payload.location,
        notes=payload.notes,
    )
    _track_event(request, event)
    return AttendanceEventRead.from_event(event)


@router.get("/my-records", response_model=list[AttendanceEventRead])
def my_records(
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    caller: CallerContext = Depends(require_caller),
    db: Session = Depends(get_db),
) -> list[AttendanceEventRead]:
    return _list_records(db, caller.employee_id, start_date, end_date)


@router.get("/employee/{employee_id}", response_model=list[AttendanceEventRead])
def employee_records(
    employee_id: str,
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    caller: CallerContext = Depends(require_caller),
    db: Session = Depends(get_db),
) -> list[AttendanceEventRead]:
    ensure_self_or_admin(caller, employee_id)
    return _list_records(db, employee_id, start_date, end_date)


@router.get("/summary/daily", response_model=DailySummaryRead)
def my_daily_summary(
    day: str | None = Query(default=None, alias="date"),
    caller: CallerContext = Depends(require_caller),
    db: Session = Depends(get_db),
) -> DailySummaryRead:
    return daily_summary(db, caller.employee_id, parse_calendar_date(day))


@router.get("/summary/daily/{employee_id}", response_model=DailySummaryRead)
def employee_daily_summary(
    employee_id: str,
    day: str | None = Query(default=None, alias="date"),
    caller: CallerContext = Depends(require_caller),
    db: Session = Depends(get_db),
) -> DailySummaryRead:
    target_day = parse_calendar_date(day)
    ensure_self_or_admin(caller, employee_id)
    return daily_summary(db, employee_id, target_day)


@router.get("/stats/monthly", response_model=MonthlyStatsRead)
def my_monthly_stats(
    year: str | None = Query(default=None),
    month: str | None = Query(default=None),
    caller: CallerContext = Depends(require_caller),
    db: Session = Depends(get_db),
) -> MonthlyStatsRead:
    return monthly_stats(
        db,
        caller.employee_id,
        _int_param(year, "year", INVALID_DATE),
        _int_param(month, "month", INVALID_DATE),
    )


@router.get("/stats/monthly/{employee_id}", response_model=MonthlyStatsRead)
def employee_monthly_stats(
    employee_id: str,
    year: str | None = Query(default=None),
    month: str | None = Query(default=None),
    caller: CallerContext = Depends(require_caller),
    db: Session = Depends(get_db),
) -> MonthlyStatsRead:
    ensure_self_or_admin(caller, employee_id)
    return monthly_stats(
        db,
        employee_id,
        _int_param(year, "year", INVALID_DATE),
        _int_param(month, "month", INVALID_DATE),
    )


@router.get("/stats", response_model=RangeStatsRead)
def date_range_stats(
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    _admin: CallerContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> RangeStatsRead:
    return range_stats(
        db,
        parse_calendar_date(start_date, "startDate"),
        parse_calendar_date(end_date, "endDate"),
    )


@router.get("/all", response_model=PaginatedEventsRead)
def all_records(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    day: str | None = Query(default=None, alias="date"),
    _admin: CallerContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> PaginatedEventsRead:
    return list_events_page(
        db,
        page=_int_param(page, "page", INVALID_PAGINATION, default=1),
        limit=_int_param(limit, "limit", INVALID_PAGINATION, default=10),
        day=_optional_date(day, "date"),
    )
