"""Tests for availability queries (resolver + generator + conflicts)."""

from datetime import date, datetime, timedelta, timezone

import pytest

from booking_engine.errors import InvalidRange, InvalidSlot, NotFound, ServiceNotAssigned
from booking_engine.models import Business, BookingStatus, BusinessService, Employee
from booking_engine.services.booking_commit import commit_booking
from booking_engine.services.slots import (
    BookingConfig,
    calculate_employee_slots,
    calculate_employee_slots_range,
)

from conftest import CUSTOMER_ID, MONDAY, NOW, SUNDAY, add_booking, seed_salon, times

ALL_MONDAY = ["09:00", "10:00", "11:00", "14:00", "15:00", "16:00", "17:00"]


def monday_at(hour, minute=0):
    return datetime(MONDAY.year, MONDAY.month, MONDAY.day, hour, minute)


class TestDaySlots:
    def test_open_day_without_bookings(self, db):
        salon = seed_salon(db)

        result = calculate_employee_slots(db, salon.employee_id, salon.service_id, MONDAY, now=NOW)

        assert result["date"] == MONDAY
        assert times(result) == ALL_MONDAY
        assert all(s["available"] for s in result["slots"])

    def test_booking_marks_only_its_slot_unavailable(self, db):
        salon = seed_salon(db)
        add_booking(db, salon, monday_at(10))

        result = calculate_employee_slots(db, salon.employee_id, salon.service_id, MONDAY, now=NOW)

        assert times(result) == ALL_MONDAY
        assert [s["time"] for s in result["slots"] if not s["available"]] == ["10:00"]

    def test_canceled_booking_frees_the_slot(self, db):
        salon = seed_salon(db)
        add_booking(db, salon, monday_at(10), status=BookingStatus.CANCELED)

        result = calculate_employee_slots(db, salon.employee_id, salon.service_id, MONDAY, now=NOW)

        assert times(result, only_available=True) == ALL_MONDAY

    def test_closed_day_is_empty(self, db):
        salon = seed_salon(db)

        result = calculate_employee_slots(db, salon.employee_id, salon.service_id, SUNDAY, now=NOW)

        assert result == {"date": SUNDAY, "slots": []}

    def test_repeated_queries_are_identical(self, db):
        salon = seed_salon(db)
        add_booking(db, salon, monday_at(15))

        first = calculate_employee_slots(db, salon.employee_id, salon.service_id, MONDAY, now=NOW)
        second = calculate_employee_slots(db, salon.employee_id, salon.service_id, MONDAY, now=NOW)

        assert first == second

    def test_today_hides_elapsed_slots(self, db):
        salon = seed_salon(db)

        result = calculate_employee_slots(
            db, salon.employee_id, salon.service_id, MONDAY, now=monday_at(14, 10)
        )

        assert times(result) == ["15:00", "16:00", "17:00"]

    def test_business_step_override(self, db):
        salon = seed_salon(db, slot_step_minutes=30)

        result = calculate_employee_slots(db, salon.employee_id, salon.service_id, MONDAY, now=NOW)

        assert times(result)[:5] == ["09:00", "09:30", "10:00", "10:30", "11:00"]
        assert "11:30" not in times(result)

    def test_global_step_from_config(self, db):
        salon = seed_salon(db)
        config = BookingConfig(step_minutes=30)

        result = calculate_employee_slots(
            db, salon.employee_id, salon.service_id, MONDAY, now=NOW, config=config
        )

        assert "09:30" in times(result)

    def test_business_lead_time(self, db):
        salon = seed_salon(db, min_lead_minutes=120)

        result = calculate_employee_slots(
            db, salon.employee_id, salon.service_id, MONDAY, now=monday_at(8)
        )

        assert times(result)[0] == "11:00"

    def test_beyond_horizon_is_empty(self, db):
        salon = seed_salon(db, business_hours={d: ("09:00", "18:00") for d in range(7)},
                           availability=[(d, "09:00", "18:00") for d in range(7)])
        far = NOW.date() + timedelta(days=61)

        result = calculate_employee_slots(db, salon.employee_id, salon.service_id, far, now=NOW)

        assert result["slots"] == []

    def test_online_booking_disabled(self, db):
        salon = seed_salon(db)
        db.get(Business, salon.business_id).accepts_online_booking = False
        db.commit()

        result = calculate_employee_slots(db, salon.employee_id, salon.service_id, MONDAY, now=NOW)

        assert result["slots"] == []

    def test_business_timezone_wall_clock(self, db):
        salon = seed_salon(db, timezone="America/New_York")
        add_booking(db, salon, monday_at(9))

        # 13:30 UTC is 08:30 in New York (EST), before opening
        now = datetime(2030, 1, 7, 13, 30, tzinfo=timezone.utc)
        result = calculate_employee_slots(db, salon.employee_id, salon.service_id, MONDAY, now=now)

        assert times(result) == ALL_MONDAY
        assert [s["time"] for s in result["slots"] if not s["available"]] == ["09:00"]

    def test_business_timezone_hides_elapsed_local_slots(self, db):
        salon = seed_salon(db, timezone="America/New_York")

        # 16:30 UTC is 11:30 in New York
        now = datetime(2030, 1, 7, 16, 30, tzinfo=timezone.utc)
        result = calculate_employee_slots(db, salon.employee_id, salon.service_id, MONDAY, now=now)

        assert times(result) == ["14:00", "15:00", "16:00", "17:00"]


class TestValidation:
    def test_unknown_employee(self, db):
        salon = seed_salon(db)
        with pytest.raises(NotFound):
            calculate_employee_slots(db, 9999, salon.service_id, MONDAY, now=NOW)

    def test_inactive_employee(self, db):
        salon = seed_salon(db)
        db.get(Employee, salon.employee_id).is_active = False
        db.commit()
        with pytest.raises(NotFound):
            calculate_employee_slots(db, salon.employee_id, salon.service_id, MONDAY, now=NOW)

    def test_unassigned_service(self, db):
        salon = seed_salon(db)
        other = BusinessService(business_id=salon.business_id, name="Color", duration_minutes=90)
        db.add(other)
        db.commit()

        with pytest.raises(ServiceNotAssigned):
            calculate_employee_slots(db, salon.employee_id, other.id, MONDAY, now=NOW)

    def test_service_of_another_business(self, db):
        salon = seed_salon(db)
        other = seed_salon(db, slug="barber")

        with pytest.raises(NotFound):
            calculate_employee_slots(db, salon.employee_id, other.service_id, MONDAY, now=NOW)


class TestRange:
    def test_range_matches_per_date_queries(self, db):
        salon = seed_salon(db)
        add_booking(db, salon, monday_at(11))
        start, end = SUNDAY, MONDAY + timedelta(days=2)

        batch = calculate_employee_slots_range(
            db, salon.employee_id, salon.service_id, start, end, now=NOW
        )

        assert batch["employee_id"] == salon.employee_id
        assert batch["business_service_id"] == salon.service_id
        assert [d["date"] for d in batch["days"]] == [start + timedelta(days=i) for i in range(4)]
        for day in batch["days"]:
            single = calculate_employee_slots(
                db, salon.employee_id, salon.service_id, day["date"], now=NOW
            )
            assert day == single

    def test_reversed_range_is_rejected(self, db):
        salon = seed_salon(db)

        with pytest.raises(InvalidRange):
            calculate_employee_slots_range(
                db, salon.employee_id, salon.service_id, MONDAY, SUNDAY, now=NOW
            )

    def test_range_longer_than_batch_limit_is_rejected(self, db):
        salon = seed_salon(db)
        config = BookingConfig(max_batch_days=7)

        with pytest.raises(InvalidRange):
            calculate_employee_slots_range(
                db, salon.employee_id, salon.service_id,
                MONDAY, MONDAY + timedelta(days=7), now=NOW, config=config,
            )

        week = calculate_employee_slots_range(
            db, salon.employee_id, salon.service_id,
            MONDAY, MONDAY + timedelta(days=6), now=NOW, config=config,
        )
        assert len(week["days"]) == 7


class TestDaylightSaving:
    # 2030-03-31 is a Sunday; Paris clocks jump from 02:00 to 03:00
    SPRING_FORWARD = date(2030, 3, 31)
    NOW = datetime(2030, 3, 20, 12, 0)

    def open_all_sunday(self, db):
        return seed_salon(
            db,
            timezone="Europe/Paris",
            business_hours={0: ("00:00", "24:00")},
            availability=[(0, "00:00", "24:00")],
        )

    def test_skipped_hour_not_offered(self, db):
        salon = self.open_all_sunday(db)

        result = calculate_employee_slots(
            db, salon.employee_id, salon.service_id, self.SPRING_FORWARD, now=self.NOW
        )

        assert "02:00" not in times(result)
        assert len(result["slots"]) == 23

    def test_every_offered_slot_can_be_booked(self, db):
        salon = self.open_all_sunday(db)
        result = calculate_employee_slots(
            db, salon.employee_id, salon.service_id, self.SPRING_FORWARD, now=self.NOW
        )

        for hhmm in times(result)[:4]:
            hour, minute = map(int, hhmm.split(":"))
            commit_booking(
                db,
                employee_id=salon.employee_id,
                business_service_id=salon.service_id,
                scheduled_at=datetime(2030, 3, 31, hour, minute),
                requester_id=CUSTOMER_ID,
                now=self.NOW,
            )

        after = calculate_employee_slots(
            db, salon.employee_id, salon.service_id, self.SPRING_FORWARD, now=self.NOW
        )
        assert [s["time"] for s in after["slots"] if not s["available"]] == times(result)[:4]

    def test_commit_in_skipped_hour_is_invalid(self, db):
        salon = self.open_all_sunday(db)

        with pytest.raises(InvalidSlot):
            commit_booking(
                db,
                employee_id=salon.employee_id,
                business_service_id=salon.service_id,
                scheduled_at=datetime(2030, 3, 31, 2, 0),
                requester_id=CUSTOMER_ID,
                now=self.NOW,
            )
