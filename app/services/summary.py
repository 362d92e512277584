from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy.orm import Session

from app.errors import INVALID_RANGE, ApiError
from app.schemas import DailyBreakdownRead, DailySummaryRead, MonthlyStatsRead, RangeStatsRead
from app.services.day_bounds import day_window, days_in_month, month_window, span_window
from app.services.event_store import list_employee_events, list_events_in_window
from app.services.summary_calc import pair_day_events, round_hours, summarize_month, summarize_range

MAX_RANGE_DAYS = 365


def daily_summary(db: Session, employee_id: str, day: date) -> DailySummaryRead:
    events = list_employee_events(db, employee_id=employee_id, window=day_window(day))
    pairing = pair_day_events(events)
    return DailySummaryRead(
        employee_id=employee_id,
        day=day,
        check_in_time=pairing.check_in_ts,
        check_out_time=pairing.check_out_ts,
        working_hours=round_hours(pairing.hours) if pairing.hours is not None else None,
        status=pairing.status,
    )


def monthly_stats(db: Session, employee_id: str, year: int, month: int) -> MonthlyStatsRead:
    total_days = days_in_month(year, month)
    events = list_employee_events(db, employee_id=employee_id, window=month_window(year, month))
    computation = summarize_month(events, total_days=total_days)
    return MonthlyStatsRead(
        employee_id=employee_id,
        year=year,
        month=month,
        total_days=computation.total_days,
        present_days=computation.present_days,
        incomplete_days=computation.incomplete_days,
        absent_days=computation.absent_days,
        average_working_hours=computation.average_working_hours,
    )


def _validate_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise ApiError(
            status_code=400,
            code=INVALID_RANGE,
            message="endDate must not be before startDate.",
        )
    if end_date - start_date > timedelta(days=MAX_RANGE_DAYS):
        raise ApiError(
            status_code=400,
            code=INVALID_RANGE,
            message=f"Date range cannot exceed {MAX_RANGE_DAYS} days.",
        )


def range_stats(db: Session, start_date: date, end_date: date) -> RangeStatsRead:
    _validate_range(start_date, end_date)
    events = list_events_in_window(db, span_window(start_date, end_date))
    computation = summarize_range(events)
    return RangeStatsRead(
        start_date=start_date,
        end_date=end_date,
        total_records=computation.total_records,
        total_check_ins=computation.total_check_ins,
        total_check_outs=computation.total_check_outs,
        unique_employees=computation.unique_employees,
        daily_breakdown=[
            DailyBreakdownRead(
                day=item.day,
                check_ins=item.check_ins,
                check_outs=item.check_outs,
                unique_employees=item.unique_employees,
            )
            for item in computation.daily_breakdown
        ],
    )
