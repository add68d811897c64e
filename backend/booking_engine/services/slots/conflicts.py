# backend/booking_engine/services/slots/conflicts.py
"""
Conflict filter.

Marks a slot unavailable when [slot start, slot start + duration) overlaps
an occupying booking of the same employee. Every status except CANCELED
occupies time (a DISPUTED booking still consumed it).
"""

from datetime import date, datetime, timedelta
from typing import Iterable, NamedTuple
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ...models import OCCUPYING_STATUSES, Booking
from .clock import day_bounds_utc, utc_to_local
from .generator import Slot


class BusyInterval(NamedTuple):
    """Occupied [start, end), naive business-local datetimes."""
    start: datetime
    end: datetime


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """Half-open interval overlap."""
    return a_start < b_end and b_start < a_end


def mark_conflicts(slots: list[Slot], busy: Iterable[BusyInterval]) -> list[Slot]:
    """Set available=False on slots overlapping any busy interval. Mutates and returns slots."""
    busy = sorted(busy)
    if not busy:
        return slots

    for slot in slots:
        start = slot.local_start()
        end = start + timedelta(minutes=slot.duration)
        if any(overlaps(start, end, b.start, b.end) for b in busy):
            slot.available = False

    return slots


# ── Database helpers ─────────────────────────────────────────────────────


def get_occupying_bookings(
    db: Session,
    employee_id: int,
    range_start_utc: datetime,
    range_end_utc: datetime,
) -> list[Booking]:
    """Bookings of employee that occupy any part of [range_start_utc, range_end_utc)."""
    return (
        db.query(Booking)
        .filter(
            Booking.employee_id == employee_id,
            Booking.status.in_(OCCUPYING_STATUSES),
            Booking.scheduled_at < range_end_utc,
            Booking.ends_at > range_start_utc,
        )
        .order_by(Booking.scheduled_at)
        .all()
    )


def load_busy_intervals(
    db: Session,
    employee_id: int,
    target_date: date,
    tz: ZoneInfo,
) -> list[BusyInterval]:
    """Busy intervals of employee touching the business-local target_date."""
    day_start, day_end = day_bounds_utc(target_date, tz)
    bookings = get_occupying_bookings(db, employee_id, day_start, day_end)
    return [
        BusyInterval(utc_to_local(b.scheduled_at, tz), utc_to_local(b.ends_at, tz))
        for b in bookings
    ]
