from __future__ import annotations

import unittest
from datetime import date, datetime, timezone
from unittest.mock import patch

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.errors import ApiError
from app.models import AttendanceEvent, AttendanceEventSource, AttendanceStatus
from app.services.attendance import check_in, check_out, create_event, list_events_for_employee
from support import make_session_factory, seed_event

MORNING = datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)
EVENING = datetime(2025, 1, 15, 17, 0, tzinfo=timezone.utc)
NEXT_MORNING = datetime(2025, 1, 16, 8, 0, tzinfo=timezone.utc)


def _at(moment: datetime):  # type: ignore[no-untyped-def]
    return patch("app.services.attendance._utcnow", return_value=moment)


class AttendanceLedgerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        self.db = self.session_factory()

    def tearDown(self) -> None:
        self.db.close()

    def _event_count(self) -> int:
        return int(self.db.scalar(select(func.count()).select_from(AttendanceEvent)) or 0)

    def test_check_in_appends_self_service_event(self) -> None:
        with _at(MORNING):
            event = check_in(self.db, "E1")

        self.assertEqual(event.employee_id, "E1")
        self.assertEqual(event.status, AttendanceStatus.CHECK_IN)
        self.assertEqual(event.source, AttendanceEventSource.SELF_SERVICE)
        self.assertEqual(event.work_date, date(2025, 1, 15))
        self.assertIsNotNone(event.id)

    def test_second_check_in_same_day_is_rejected(self) -> None:
        with _at(MORNING):
            check_in(self.db, "E1")
        with _at(EVENING), self.assertRaises(ApiError) as exc:
            check_in(self.db, "E1")

        self.assertEqual(exc.exception.status_code, 409)
        self.assertEqual(exc.exception.code, "DUPLICATE_CHECK_IN")
        self.assertEqual(self._event_count(), 1)

    def test_check_in_is_allowed_again_next_day(self) -> None:
        with _at(MORNING):
            check_in(self.db, "E1")
        with _at(NEXT_MORNING):
            event = check_in(self.db, "E1")

        self.assertEqual(event.work_date, date(2025, 1, 16))
        self.assertEqual(self._event_count(), 2)

    def test_check_in_is_scoped_per_employee(self) -> None:
        with _at(MORNING):
            check_in(self.db, "E1")
            check_in(self.db, "E2")

        self.assertEqual(self._event_count(), 2)

    def test_check_out_requires_check_in_same_day(self) -> None:
        with _at(EVENING), self.assertRaises(ApiError) as exc:
            check_out(self.db, "E1")

        self.assertEqual(exc.exception.status_code, 409)
        self.assertEqual(exc.exception.code, "MISSING_CHECK_IN")
        self.assertEqual(exc.exception.message, "No check-in record found for today.")
        self.assertEqual(self._event_count(), 0)

    def test_previous_day_check_in_does_not_allow_check_out(self) -> None:
        with _at(MORNING):
            check_in(self.db, "E1")
        with _at(NEXT_MORNING), self.assertRaises(ApiError) as exc:
            check_out(self.db, "E1")

        self.assertEqual(exc.exception.code, "MISSING_CHECK_IN")

    def test_check_out_after_check_in(self) -> None:
        with _at(MORNING):
            check_in(self.db, "E1")
        with _at(EVENING):
            event = check_out(self.db, "E1")

        self.assertEqual(event.status, AttendanceStatus.CHECK_OUT)
        self.assertEqual(event.source, AttendanceEventSource.SELF_SERVICE)

    def test_second_check_out_same_day_is_rejected(self) -> None:
        with _at(MORNING):
            check_in(self.db, "E1")
        with _at(EVENING):
            check_out(self.db, "E1")
            with self.assertRaises(ApiError) as exc:
                check_out(self.db, "E1")

        self.assertEqual(exc.exception.code, "DUPLICATE_CHECK_OUT")
        self.assertEqual(self._event_count(), 2)

    def test_check_out_with_missing_check_in_reports_missing_before_duplicate(self) -> None:
        seed_event(self.db, "E1", AttendanceStatus.CHECK_OUT, datetime(2025, 1, 15, 7, 0, tzinfo=timezone.utc))

        with _at(EVENING), self.assertRaises(ApiError) as exc:
            check_out(self.db, "E1")

        self.assertEqual(exc.exception.code, "MISSING_CHECK_IN")

    def test_unique_index_rejects_duplicate_when_precheck_misses(self) -> None:
        with _at(MORNING):
            check_in(self.db, "E1")

        with (
            _at(EVENING),
            patch("app.services.attendance.find_first_event", return_value=None),
            self.assertRaises(ApiError) as exc,
        ):
            check_in(self.db, "E1")

        self.assertEqual(exc.exception.status_code, 409)
        self.assertEqual(exc.exception.code, "DUPLICATE_CHECK_IN")
        self.assertEqual(self._event_count(), 1)

    def test_unrelated_integrity_errors_propagate(self) -> None:
        failure = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: attendance_events.employee_id"))

        with (
            _at(MORNING),
            patch("app.services.attendance.append_event", side_effect=failure),
            self.assertRaises(IntegrityError),
        ):
            check_in(self.db, "E1")

    def test_create_event_bypasses_sequencing(self) -> None:
        first = create_event(self.db, employee_id="E1", status=AttendanceStatus.CHECK_OUT, ts_utc=MORNING)
        second = create_event(self.db, employee_id="E1", status=AttendanceStatus.CHECK_OUT, ts_utc=EVENING)

        self.assertEqual(first.source, AttendanceEventSource.MANUAL)
        self.assertEqual(second.work_date, date(2025, 1, 15))
        self.assertEqual(self._event_count(), 2)

    def test_create_event_keeps_location_and_notes(self) -> None:
        event = create_event(
            self.db,
            employee_id="E1",
            status=AttendanceStatus.CHECK_IN,
            ts_utc=MORNING,
            location="HQ",
            notes="Badge reader offline",
        )

        self.assertEqual(event.location, "HQ")
        self.assertEqual(event.notes, "Badge reader offline")

    def test_self_service_check_in_still_allowed_after_manual_event(self) -> None:
        seed_event(self.db, "E1", AttendanceStatus.CHECK_OUT, MORNING)

        with _at(EVENING):
            event = check_in(self.db, "E1")

        self.assertEqual(event.status, AttendanceStatus.CHECK_IN)

    def test_list_events_for_employee_newest_first_with_bounds(self) -> None:
        seed_event(self.db, "E1", AttendanceStatus.CHECK_IN, datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc))
        seed_event(self.db, "E1", AttendanceStatus.CHECK_IN, datetime(2025, 1, 2, 8, 0, tzinfo=timezone.utc))
        seed_event(self.db, "E1", AttendanceStatus.CHECK_OUT, datetime(2025, 1, 2, 23, 59, 59, tzinfo=timezone.utc))
        seed_event(self.db, "E1", AttendanceStatus.CHECK_IN, datetime(2025, 1, 3, 8, 0, tzinfo=timezone.utc))
        seed_event(self.db, "E2", AttendanceStatus.CHECK_IN, datetime(2025, 1, 2, 9, 0, tzinfo=timezone.utc))

        all_events = list_events_for_employee(self.db, "E1")
        bounded = list_events_for_employee(
            self.db,
            "E1",
            start_date=date(2025, 1, 2),
            end_date=date(2025, 1, 2),
        )
        open_start = list_events_for_employee(self.db, "E1", end_date=date(2025, 1, 1))

        self.assertEqual(len(all_events), 4)
        self.assertEqual(all_events[0].work_date, date(2025, 1, 3))
        self.assertEqual(
            [item.status for item in bounded],
            [AttendanceStatus.CHECK_OUT, AttendanceStatus.CHECK_IN],
        )
        self.assertEqual(len(open_start), 1)

    def test_list_events_rejects_inverted_range(self) -> None:
        with self.assertRaises(ApiError) as exc:
            list_events_for_employee(
                self.db,
                "E1",
                start_date=date(2025, 1, 5),
                end_date=date(2025, 1, 1),
            )

        self.assertEqual(exc.exception.status_code, 400)
        self.assertEqual(exc.exception.code, "INVALID_RANGE")


if __name__ == "__main__":
    unittest.main()
