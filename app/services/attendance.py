from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import (
    DUPLICATE_CHECK_IN,
    DUPLICATE_CHECK_OUT,
    INVALID_RANGE,
    MISSING_CHECK_IN,
    ApiError,
)
from app.models import AttendanceEvent, AttendanceEventSource, AttendanceStatus
from app.services.day_bounds import day_key, day_window, normalize_ts
from app.services.event_store import (
    append_event,
    find_first_event,
    list_employee_events_between,
)

logger = logging.getLogger("app.attendance")

DAILY_UNIQUE_INDEX = "uq_attendance_events_self_service_daily"

_DUPLICATE_ERRORS: dict[AttendanceStatus, tuple[str, str]] = {
    AttendanceStatus.CHECK_IN: (DUPLICATE_CHECK_IN, "Already checked in today."),
    AttendanceStatus.CHECK_OUT: (DUPLICATE_CHECK_OUT, "Already checked out today."),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _duplicate_error(status: AttendanceStatus) -> ApiError:
    code, message = _DUPLICATE_ERRORS[status]
    return ApiError(status_code=409, code=code, message=message)


def _is_daily_uniqueness_conflict(exc: IntegrityError) -> bool:
    origin = exc.orig
    constraint_name = getattr(getattr(origin, "diag", None), "constraint_name", None)
    if constraint_name == DAILY_UNIQUE_INDEX:
        return True
    detail = str(origin)
    if DAILY_UNIQUE_INDEX in detail:
        return True
    # SQLite reports the indexed columns instead of the index name.
    return "UNIQUE" in detail.upper() and "work_date" in detail


def _lock_employee(db: Session, employee_id: str) -> None:
    # Serializes check-then-append per employee until the transaction ends.
    if db.get_bind().dialect.name != "postgresql":
        return
    db.execute(
        text("SELECT pg_advisory_xact_lock(hashtext(:employee_id))"),
        {"employee_id": employee_id},
    )


def _log_event_created(event: AttendanceEvent) -> None:
    logger.info(
        "attendance_event_created",
        extra={
            "event_id": str(event.id),
            "employee_id": event.employee_id,
            "status": event.status.value,
            "source": event.source.value,
            "work_date": event.work_date.isoformat(),
        },
    )


def _append_self_service_event(
    db: Session,
    *,
    employee_id: str,
    status: AttendanceStatus,
    ts_utc: datetime,
) -> AttendanceEvent:
    event = AttendanceEvent(
        employee_id=employee_id,
        status=status,
        ts_utc=ts_utc,
        work_date=day_key(ts_utc),
        source=AttendanceEventSource.SELF_SERVICE,
    )
    try:
        append_event(db, event)
    except IntegrityError as exc:
        db.rollback()
        if not _is_daily_uniqueness_conflict(exc):
            raise
        logger.warning(
            "attendance_daily_uniqueness_conflict",
            extra={"employee_id": employee_id, "status": status.value},
        )
        raise _duplicate_error(status) from exc

    _log_event_created(event)
    return event


def check_in(db: Session, employee_id: str) -> AttendanceEvent:
    ts_utc = _utcnow()
    window = day_window(day_key(ts_utc))
    _lock_employee(db, employee_id)

    existing = find_first_event(
        db,
        employee_id=employee_id,
        status=AttendanceStatus.CHECK_IN,
        window=window,
    )
    if existing is not None:
        raise _duplicate_error(AttendanceStatus.CHECK_IN)

    return _append_self_service_event(
        db,
        employee_id=employee_id,
        status=AttendanceStatus.CHECK_IN,
        ts_utc=ts_utc,
    )


def check_out(db: Session, employee_id: str) -> AttendanceEvent:
    ts_utc = _utcnow()
    window = day_window(day_key(ts_utc))
    _lock_employee(db, employee_id)

    checkin_event = find_first_event(
        db,
        employee_id=employee_id,
        status=AttendanceStatus.CHECK_IN,
        window=window,
    )
    if checkin_event is None:
        raise ApiError(
            status_code=409,
            code=MISSING_CHECK_IN,
            message="No check-in record found for today.",
        )

    existing = find_first_event(
        db,
        employee_id=employee_id,
        status=AttendanceStatus.CHECK_OUT,
        window=window,
    )
    if existing is not None:
        raise _duplicate_error(AttendanceStatus.CHECK_OUT)

    return _append_self_service_event(
        db,
        employee_id=employee_id,
        status=AttendanceStatus.CHECK_OUT,
        ts_utc=ts_utc,
    )


def create_event(
    db: Session,
    *,
    employee_id: str,
    status: AttendanceStatus,
    ts_utc: datetime | None = None,
    location: str | None = None,
    notes: str | None = None,
) -> AttendanceEvent:
    """Append an event without sequencing or duplicate checks.

    Used for administrative and back-dated entries; the caller owns
    consistency of the resulting day.
    """
    event_ts = normalize_ts(ts_utc) if ts_utc is not None else _utcnow()
    event = AttendanceEvent(
        employee_id=employee_id,
        status=status,
        ts_utc=event_ts,
        work_date=day_key(event_ts),
        source=AttendanceEventSource.MANUAL,
        location=location,
        notes=notes,
    )
    append_event(db, event)
    _log_event_created(event)
    return event


def list_events_for_employee(
    db: Session,
    employee_id: str,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[AttendanceEvent]:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ApiError(
            status_code=400,
            code=INVALID_RANGE,
            message="endDate must not be before startDate.",
        )
    return list_employee_events_between(
        db,
        employee_id=employee_id,
        start_utc=day_window(start_date).start if start_date is not None else None,
        end_utc=day_window(end_date).end if end_date is not None else None,
    )
