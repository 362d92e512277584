from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.errors import INVALID_DATE, ApiError
from app.settings import get_settings

logger = logging.getLogger("app.attendance")

_CALENDAR_DATE_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
_LAST_INSTANT_OFFSET = timedelta(microseconds=1)


@dataclass(frozen=True, slots=True)
class DayWindow:
    """Closed ``[start, end]`` interval of UTC instants."""

    start: datetime
    end: datetime


@lru_cache
def reference_timezone() -> ZoneInfo:
    raw_name = (get_settings().attendance_timezone or "").strip() or "UTC"
    try:
        return ZoneInfo(raw_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("attendance_timezone_invalid", extra={"attendance_timezone": raw_name})
        return ZoneInfo("UTC")


def normalize_ts(ts_utc: datetime | None) -> datetime:
    if ts_utc is None:
        return datetime.now(timezone.utc)

    if ts_utc.tzinfo is None:
        return ts_utc.replace(tzinfo=timezone.utc)

    return ts_utc.astimezone(timezone.utc)


def day_key(instant: datetime) -> date:
    return normalize_ts(instant).astimezone(reference_timezone()).date()


def _local_midnight_utc(day: date) -> datetime:
    local_start = datetime.combine(day, time.min, tzinfo=reference_timezone())
    return local_start.astimezone(timezone.utc)


def day_window(day: date | None = None) -> DayWindow:
    target = day if day is not None else day_key(normalize_ts(None))
    try:
        start = _local_midnight_utc(target)
        next_start = _local_midnight_utc(target + timedelta(days=1))
    except OverflowError as exc:
        raise ApiError(
            status_code=400,
            code=INVALID_DATE,
            message=f"{target.isoformat()} is outside the supported date range.",
        ) from exc
    return DayWindow(start=start, end=next_start - _LAST_INSTANT_OFFSET)


def span_window(start_day: date, end_day: date) -> DayWindow:
    return DayWindow(start=day_window(start_day).start, end=day_window(end_day).end)


def _validate_year_month(year: int, month: int) -> None:
    # December of the last supported year has no "next month" to anchor on.
    if not 1 <= month <= 12 or not 1 <= year < 9999:
        raise ApiError(
            status_code=400,
            code=INVALID_DATE,
            message=f"{year:04d}-{month:02d} is not a valid year and month.",
        )


def days_in_month(year: int, month: int) -> int:
    _validate_year_month(year, month)
    return calendar.monthrange(year, month)[1]


def month_window(year: int, month: int) -> DayWindow:
    _validate_year_month(year, month)
    first_day = date(year, month, 1)
    if month == 12:
        next_month_first_day = date(year + 1, 1, 1)
    else:
        next_month_first_day = date(year, month + 1, 1)
    return DayWindow(
        start=_local_midnight_utc(first_day),
        end=_local_midnight_utc(next_month_first_day) - _LAST_INSTANT_OFFSET,
    )


def parse_calendar_date(value: str | None, field_name: str = "date") -> date:
    raw = (value or "").strip()
    if not raw:
        raise ApiError(status_code=400, code=INVALID_DATE, message=f"{field_name} is required.")
    if not _CALENDAR_DATE_PATTERN.match(raw):
        raise ApiError(
            status_code=400,
            code=INVALID_DATE,
            message=f"{field_name} must be in YYYY-MM-DD format.",
        )
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise ApiError(
            status_code=400,
            code=INVALID_DATE,
            message=f"{field_name} is not a valid calendar date.",
        ) from exc
