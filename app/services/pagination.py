from __future__ import annotations

from datetime import date
from math import ceil

from sqlalchemy.orm import Session

from app.errors import INVALID_PAGINATION, ApiError
from app.schemas import AttendanceEventRead, PaginatedEventsRead
from app.services.day_bounds import day_window
from app.services.event_store import count_events, page_events

MAX_PAGE_LIMIT = 100


def _validate_page(page: int, limit: int) -> None:
    if page < 1:
        raise ApiError(status_code=400, code=INVALID_PAGINATION, message="page must be at least 1.")
    if not 1 <= limit <= MAX_PAGE_LIMIT:
        raise ApiError(
            status_code=400,
            code=INVALID_PAGINATION,
            message=f"limit must be between 1 and {MAX_PAGE_LIMIT}.",
        )


def list_events_page(
    db: Session,
    *,
    page: int = 1,
    limit: int = 10,
    day: date | None = None,
) -> PaginatedEventsRead:
    _validate_page(page, limit)
    window = day_window(day) if day is not None else None
    total = count_events(db, window)
    events = page_events(db, offset=(page - 1) * limit, limit=limit, window=window)
    return PaginatedEventsRead(
        data=[AttendanceEventRead.from_event(event) for event in events],
        total=total,
        page=page,
        limit=limit,
        total_pages=ceil(total / limit),
    )
