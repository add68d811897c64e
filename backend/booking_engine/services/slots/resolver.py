# backend/booking_engine/services/slots/resolver.py
"""
Calendar constraint resolver.

For one (business, employee, date) produces the open time-of-day windows in
which the employee could start a service:

  business hours of the weekday  ∩  union(employee windows of the weekday)

All times are business-local wall clock, in minutes since midnight.
Pure functions first; the DB loader at the bottom only fetches rows.
"""

import logging
from datetime import date
from typing import Iterable, NamedTuple

from sqlalchemy.orm import Session

from ...models import BusinessHours, Employee, EmployeeAvailability
from .config import time_str_to_minutes

logger = logging.getLogger(__name__)


class TimeWindow(NamedTuple):
    """Half-open interval [start, end) in minutes since midnight."""
    start: int
    end: int


def day_of_week(target_date: date) -> int:
    """Weekday index with 0 = Sunday, matching stored hours/availability rows."""
    return (target_date.weekday() + 1) % 7


def merge_windows(windows: Iterable[TimeWindow]) -> list[TimeWindow]:
    """Union of windows: sorted, overlapping or touching ones merged, empty ones dropped."""
    merged: list[TimeWindow] = []
    for window in sorted(w for w in windows if w.end > w.start):
        if merged and window.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = TimeWindow(last.start, max(last.end, window.end))
        else:
            merged.append(window)
    return merged


def _row_window(row) -> TimeWindow | None:
    try:
        return TimeWindow(time_str_to_minutes(row.start_time), time_str_to_minutes(row.end_time))
    except ValueError:
        logger.warning(f"Skipping malformed window {row.start_time!r}-{row.end_time!r}")
        return None


def resolve_day_windows(
    business_hours: Iterable,
    availabilities: Iterable,
    target_date: date,
) -> list[TimeWindow]:
    """
    Compute open windows for target_date.

    Args:
        business_hours: BusinessHours-like rows (day_of_week, start_time, end_time, is_closed)
        availabilities: EmployeeAvailability-like rows (day_of_week, start_time, end_time)
        target_date: Calendar day, business-local

    Returns:
        Ordered, non-overlapping windows. Empty list = nobody works that day.
    """
    dow = day_of_week(target_date)

    # Step 1: business open interval
    hours = next((h for h in business_hours if h.day_of_week == dow), None)
    if hours is None or hours.is_closed:
        return []
    business_window = _row_window(hours)
    if business_window is None or business_window.end <= business_window.start:
        return []

    # Step 2: employee windows, unioned
    employee_windows = merge_windows(
        w for w in (_row_window(a) for a in availabilities if a.day_of_week == dow)
        if w is not None
    )
    if not employee_windows:
        return []

    # Step 3: intersect each with business hours
    result = []
    for window in employee_windows:
        start = max(business_window.start, window.start)
        end = min(business_window.end, window.end)
        if start < end:
            result.append(TimeWindow(start, end))

    return result


# ── Database helpers ─────────────────────────────────────────────────────


def load_day_windows(db: Session, employee: Employee, target_date: date) -> list[TimeWindow]:
    """Load the rows for employee's weekday and resolve them."""
    dow = day_of_week(target_date)

    hours = (
        db.query(BusinessHours)
        .filter(
            BusinessHours.business_id == employee.business_id,
            BusinessHours.day_of_week == dow,
        )
        .all()
    )
    availabilities = (
        db.query(EmployeeAvailability)
        .filter(
            EmployeeAvailability.employee_id == employee.id,
            EmployeeAvailability.day_of_week == dow,
        )
        .all()
    )

    return resolve_day_windows(hours, availabilities, target_date)
