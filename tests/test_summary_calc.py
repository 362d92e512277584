from __future__ import annotations

import unittest
from datetime import date, datetime, timezone
from types import SimpleNamespace

from app.models import AttendanceStatus
from app.services.summary_calc import (
    STATUS_ABSENT,
    STATUS_INCOMPLETE,
    STATUS_PRESENT,
    elapsed_hours,
    pair_day_events,
    round_hours,
    summarize_month,
    summarize_range,
)

IN = AttendanceStatus.CHECK_IN
OUT = AttendanceStatus.CHECK_OUT


def _event(employee_id: str, status: AttendanceStatus, *parts: int) -> SimpleNamespace:
    return SimpleNamespace(
        employee_id=employee_id,
        status=status,
        ts_utc=datetime(*parts, tzinfo=timezone.utc),
    )


class DayPairingTests(unittest.TestCase):
    def test_paired_day_is_present_with_hours(self) -> None:
        pairing = pair_day_events(
            [
                _event("E1", IN, 2025, 1, 1, 1, 0),
                _event("E1", OUT, 2025, 1, 1, 9, 30),
            ]
        )

        self.assertEqual(pairing.status, STATUS_PRESENT)
        self.assertEqual(pairing.hours, 8.5)
        self.assertEqual(pairing.check_in_ts, datetime(2025, 1, 1, 1, 0, tzinfo=timezone.utc))

    def test_check_in_only_is_incomplete(self) -> None:
        pairing = pair_day_events([_event("E1", IN, 2025, 1, 1, 8, 0)])

        self.assertEqual(pairing.status, STATUS_INCOMPLETE)
        self.assertIsNone(pairing.hours)
        self.assertIsNone(pairing.check_out_ts)

    def test_empty_day_is_absent(self) -> None:
        pairing = pair_day_events([])

        self.assertEqual(pairing.status, STATUS_ABSENT)
        self.assertIsNone(pairing.check_in_ts)
        self.assertIsNone(pairing.check_out_ts)

    def test_check_out_without_check_in_is_absent(self) -> None:
        pairing = pair_day_events([_event("E1", OUT, 2025, 1, 1, 17, 0)])

        self.assertEqual(pairing.status, STATUS_ABSENT)
        self.assertIsNone(pairing.hours)
        self.assertIsNotNone(pairing.check_out_ts)

    def test_earliest_event_of_each_kind_wins(self) -> None:
        pairing = pair_day_events(
            [
                _event("E1", IN, 2025, 1, 1, 8, 0),
                _event("E1", IN, 2025, 1, 1, 9, 0),
                _event("E1", OUT, 2025, 1, 1, 12, 0),
                _event("E1", OUT, 2025, 1, 1, 18, 0),
            ]
        )

        self.assertEqual(pairing.check_in_ts, datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc))
        self.assertEqual(pairing.check_out_ts, datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))
        self.assertEqual(pairing.hours, 4.0)

    def test_check_out_before_check_in_counts_zero_hours(self) -> None:
        pairing = pair_day_events(
            [
                _event("E1", OUT, 2025, 1, 1, 7, 0),
                _event("E1", IN, 2025, 1, 1, 8, 0),
            ]
        )

        self.assertEqual(pairing.status, STATUS_PRESENT)
        self.assertEqual(pairing.hours, 0.0)


class RoundingTests(unittest.TestCase):
    def test_rounds_half_up_to_two_decimals(self) -> None:
        self.assertEqual(round_hours(8.125), 8.13)
        self.assertEqual(round_hours(8.124), 8.12)
        self.assertEqual(round_hours(0.005), 0.01)
        self.assertEqual(round_hours(8.0), 8.0)

    def test_elapsed_hours_uses_fractional_hours(self) -> None:
        start = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)
        end = datetime(2025, 1, 1, 9, 20, tzinfo=timezone.utc)

        self.assertEqual(round_hours(elapsed_hours(start, end)), 0.33)


class MonthSummaryTests(unittest.TestCase):
    def test_day_counts_partition_the_month(self) -> None:
        events = [
            _event("E1", IN, 2025, 1, 2, 8, 0),
            _event("E1", OUT, 2025, 1, 2, 16, 0),
            _event("E1", IN, 2025, 1, 3, 8, 0),
            _event("E1", OUT, 2025, 1, 3, 17, 0),
            _event("E1", IN, 2025, 1, 6, 9, 0),
            _event("E1", OUT, 2025, 1, 7, 17, 0),
        ]

        result = summarize_month(events, total_days=31)

        self.assertEqual(result.present_days, 2)
        self.assertEqual(result.incomplete_days, 1)
        self.assertEqual(result.absent_days, 28)
        self.assertEqual(
            result.present_days + result.incomplete_days + result.absent_days,
            result.total_days,
        )
        self.assertEqual(result.average_working_hours, 8.5)

    def test_average_rounds_only_the_final_mean(self) -> None:
        events = [
            _event("E1", IN, 2025, 1, 2, 8, 0),
            _event("E1", OUT, 2025, 1, 2, 8, 0, 21, 600000),
            _event("E1", IN, 2025, 1, 3, 8, 0),
            _event("E1", OUT, 2025, 1, 3, 8, 0),
        ]

        result = summarize_month(events, total_days=31)

        # Per-day rounding would give (0.01 + 0.00) / 2 -> 0.01.
        self.assertEqual(result.present_days, 2)
        self.assertEqual(result.average_working_hours, 0.0)

    def test_month_without_present_days_averages_zero(self) -> None:
        result = summarize_month([_event("E1", IN, 2025, 2, 3, 8, 0)], total_days=28)

        self.assertEqual(result.present_days, 0)
        self.assertEqual(result.incomplete_days, 1)
        self.assertEqual(result.absent_days, 27)
        self.assertEqual(result.average_working_hours, 0.0)


class RangeSummaryTests(unittest.TestCase):
    def test_totals_and_daily_breakdown(self) -> None:
        events = [
            _event("E1", IN, 2025, 1, 1, 8, 0),
            _event("E2", IN, 2025, 1, 1, 9, 0),
            _event("E1", OUT, 2025, 1, 1, 17, 0),
            _event("E1", IN, 2025, 1, 3, 8, 0),
        ]

        result = summarize_range(events)

        self.assertEqual(result.total_records, 4)
        self.assertEqual(result.total_check_ins, 3)
        self.assertEqual(result.total_check_outs, 1)
        self.assertEqual(result.unique_employees, 2)
        self.assertEqual([item.day for item in result.daily_breakdown], [date(2025, 1, 1), date(2025, 1, 3)])
        first_day = result.daily_breakdown[0]
        self.assertEqual((first_day.check_ins, first_day.check_outs, first_day.unique_employees), (2, 1, 2))
        self.assertEqual(
            sum(item.check_ins + item.check_outs for item in result.daily_breakdown),
            result.total_records,
        )

    def test_breakdown_is_sorted_regardless_of_input_order(self) -> None:
        events = [
            _event("E1", IN, 2025, 1, 5, 8, 0),
            _event("E1", IN, 2025, 1, 2, 8, 0),
        ]

        result = summarize_range(events)

        self.assertEqual([item.day for item in result.daily_breakdown], [date(2025, 1, 2), date(2025, 1, 5)])

    def test_empty_range(self) -> None:
        result = summarize_range([])

        self.assertEqual(result.total_records, 0)
        self.assertEqual(result.unique_employees, 0)
        self.assertEqual(result.daily_breakdown, [])


if __name__ == "__main__":
    unittest.main()
