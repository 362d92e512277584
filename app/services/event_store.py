from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models import AttendanceEvent, AttendanceStatus
from app.services.day_bounds import DayWindow


def _window_filters(window: DayWindow | None) -> list[Any]:
    if window is None:
        return []
    return [AttendanceEvent.ts_utc >= window.start, AttendanceEvent.ts_utc <= window.end]


def _ascending() -> tuple[Any, Any]:
    return AttendanceEvent.ts_utc.asc(), AttendanceEvent.id.asc()


def _descending() -> tuple[Any, Any]:
    return AttendanceEvent.ts_utc.desc(), AttendanceEvent.id.desc()


def append_event(db: Session, event: AttendanceEvent) -> AttendanceEvent:
    db.add(event)
    db.flush()
    db.commit()
    db.refresh(event)
    return event


def find_first_event(
    db: Session,
    *,
    employee_id: str,
    status: AttendanceStatus,
    window: DayWindow,
) -> AttendanceEvent | None:
    return db.scalar(
        select(AttendanceEvent)
        .where(
            AttendanceEvent.employee_id == employee_id,
            AttendanceEvent.status == status,
            *_window_filters(window),
        )
        .order_by(*_ascending())
        .limit(1)
    )


def list_employee_events(
    db: Session,
    *,
    employee_id: str,
    window: DayWindow,
) -> list[AttendanceEvent]:
    return list(
        db.scalars(
            select(AttendanceEvent)
            .where(
                AttendanceEvent.employee_id == employee_id,
                *_window_filters(window),
            )
            .order_by(*_ascending())
        ).all()
    )


def list_events_in_window(db: Session, window: DayWindow) -> list[AttendanceEvent]:
    return list(
        db.scalars(
            select(AttendanceEvent)
            .where(*_window_filters(window))
            .order_by(*_ascending())
        ).all()
    )


def list_employee_events_between(
    db: Session,
    *,
    employee_id: str,
    start_utc: datetime | None = None,
    end_utc: datetime | None = None,
) -> list[AttendanceEvent]:
    stmt = select(AttendanceEvent).where(AttendanceEvent.employee_id == employee_id)
    if start_utc is not None:
        stmt = stmt.where(AttendanceEvent.ts_utc >= start_utc)
    if end_utc is not None:
        stmt = stmt.where(AttendanceEvent.ts_utc <= end_utc)
    return list(db.scalars(stmt.order_by(*_descending())).all())


def count_events(db: Session, window: DayWindow | None = None) -> int:
    total = db.scalar(
        select(func.count()).select_from(AttendanceEvent).where(*_window_filters(window))
    )
    return int(total or 0)


def page_events(
    db: Session,
    *,
    offset: int,
    limit: int,
    window: DayWindow | None = None,
) -> list[AttendanceEvent]:
    return list(
        db.scalars(
            select(AttendanceEvent)
            .where(*_window_filters(window))
            .order_by(*_descending())
            .offset(offset)
            .limit(limit)
        ).all()
    )
