from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from app.models import AttendanceStatus
from app.services.day_bounds import day_key, normalize_ts

STATUS_PRESENT = "present"
STATUS_INCOMPLETE = "incomplete"
STATUS_ABSENT = "absent"

_SECONDS_PER_HOUR = 3600


class LedgerEntry(Protocol):
    employee_id: str
    status: AttendanceStatus
    ts_utc: datetime


@dataclass(frozen=True, slots=True)
class DayPairing:
    status: str
    check_in_ts: datetime | None
    check_out_ts: datetime | None
    hours: float | None


@dataclass(frozen=True, slots=True)
class MonthComputation:
    total_days: int
    present_days: int
    incomplete_days: int
    absent_days: int
    average_working_hours: float


@dataclass(frozen=True, slots=True)
class DayCounts:
    day: date
    check_ins: int
    check_outs: int
    unique_employees: int


@dataclass(frozen=True, slots=True)
class RangeComputation:
    total_records: int
    total_check_ins: int
    total_check_outs: int
    unique_employees: int
    daily_breakdown: list[DayCounts]


def round_hours(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def elapsed_hours(check_in_ts: datetime, check_out_ts: datetime) -> float:
    seconds = (normalize_ts(check_out_ts) - normalize_ts(check_in_ts)).total_seconds()
    # Manual entries can place the check-out before the check-in.
    return max(0.0, seconds / _SECONDS_PER_HOUR)


def pair_day_events(events: Iterable[LedgerEntry]) -> DayPairing:
    """Classify one employee-day; events must be in ascending timestamp order.

    The earliest event of each kind wins when duplicates exist.
    """
    first_in: LedgerEntry | None = None
    first_out: LedgerEntry | None = None
    for event in events:
        if event.status == AttendanceStatus.CHECK_IN and first_in is None:
            first_in = event
        elif event.status == AttendanceStatus.CHECK_OUT and first_out is None:
            first_out = event

    check_in_ts = normalize_ts(first_in.ts_utc) if first_in is not None else None
    check_out_ts = normalize_ts(first_out.ts_utc) if first_out is not None else None
    if check_in_ts is not None and check_out_ts is not None:
        return DayPairing(
            status=STATUS_PRESENT,
            check_in_ts=check_in_ts,
            check_out_ts=check_out_ts,
            hours=elapsed_hours(check_in_ts, check_out_ts),
        )
    if check_in_ts is not None:
        return DayPairing(
            status=STATUS_INCOMPLETE,
            check_in_ts=check_in_ts,
            check_out_ts=check_out_ts,
            hours=None,
        )
    return DayPairing(
        status=STATUS_ABSENT,
        check_in_ts=None,
        check_out_ts=check_out_ts,
        hours=None,
    )


def group_by_day(events: Iterable[LedgerEntry]) -> dict[date, list[LedgerEntry]]:
    grouped: dict[date, list[LedgerEntry]] = {}
    for event in events:
        grouped.setdefault(day_key(event.ts_utc), []).append(event)
    return grouped


def summarize_month(events: Sequence[LedgerEntry], *, total_days: int) -> MonthComputation:
    present_days = 0
    incomplete_days = 0
    total_hours = 0.0
    for day_events in group_by_day(events).values():
        pairing = pair_day_events(day_events)
        if pairing.status == STATUS_PRESENT:
            present_days += 1
            total_hours += pairing.hours or 0.0
        elif pairing.status == STATUS_INCOMPLETE:
            incomplete_days += 1

    average = round_hours(total_hours / present_days) if present_days else 0.0
    return MonthComputation(
        total_days=total_days,
        present_days=present_days,
        incomplete_days=incomplete_days,
        absent_days=total_days - present_days - incomplete_days,
        average_working_hours=average,
    )


def summarize_range(events: Sequence[LedgerEntry]) -> RangeComputation:
    total_check_ins = 0
    total_check_outs = 0
    employees: set[str] = set()
    breakdown: dict[date, tuple[int, int, set[str]]] = {}

    for event in events:
        key = day_key(event.ts_utc)
        check_ins, check_outs, day_employees = breakdown.get(key, (0, 0, set()))
        day_employees.add(event.employee_id)
        employees.add(event.employee_id)
        if event.status == AttendanceStatus.CHECK_IN:
            total_check_ins += 1
            check_ins += 1
        else:
            total_check_outs += 1
            check_outs += 1
        breakdown[key] = (check_ins, check_outs, day_employees)

    return RangeComputation(
        total_records=len(events),
        total_check_ins=total_check_ins,
        total_check_outs=total_check_outs,
        unique_employees=len(employees),
        daily_breakdown=[
            DayCounts(
                day=day,
                check_ins=check_ins,
                check_outs=check_outs,
                unique_employees=len(day_employees),
            )
            for day, (check_ins, check_outs, day_employees) in sorted(breakdown.items())
        ],
    )
