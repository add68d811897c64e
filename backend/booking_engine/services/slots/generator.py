# backend/booking_engine/services/slots/generator.py
"""
Slot generator: discretizes resolver windows into candidate start times.

A candidate t in window [start, end) is emitted when t + duration <= end,
stepping t by step_minutes from the window start. Starts at or before
now + lead time are dropped, so a slot is never offered in the past. With a
zone given, wall-clock starts skipped by a DST transition are dropped too.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from .clock import local_to_utc, utc_to_local
from .config import minutes_to_time_str
from .resolver import TimeWindow


@dataclass
class Slot:
    date: date
    start: int  # minutes since midnight, business-local
    duration: int
    available: bool = True

    @property
    def time(self) -> str:
        return minutes_to_time_str(self.start)

    def local_start(self) -> datetime:
        return slot_datetime(self.date, self.start)


def slot_datetime(target_date: date, minutes: int) -> datetime:
    """Naive business-local datetime for a minute offset on target_date."""
    return datetime.combine(target_date, time.min) + timedelta(minutes=minutes)


def exists_in_zone(local_dt: datetime, tz: ZoneInfo) -> bool:
    """False for wall-clock times inside a DST gap (they map onto a later instant)."""
    return utc_to_local(local_to_utc(local_dt, tz), tz) == local_dt


def generate_slots(
    windows: Iterable[TimeWindow],
    duration_minutes: int,
    step_minutes: int,
    target_date: date,
    now: Optional[datetime] = None,
    lead_minutes: int = 0,
    tz: Optional[ZoneInfo] = None,
) -> list[Slot]:
    """
    Generate candidate slots for target_date.

    Args:
        windows: Open windows from the resolver (ordered, non-overlapping)
        duration_minutes: Service duration, the size of every slot
        step_minutes: Distance between consecutive candidate starts
        target_date: Business-local date
        now: Business-local naive "now"; None disables past filtering
        lead_minutes: Minimum minutes between now and a slot start
        tz: Business zone; starts that do not exist on the wall clock are skipped

    Returns:
        Slots ascending by start time, all marked available.
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")
    if step_minutes <= 0:
        raise ValueError(f"step_minutes must be positive, got {step_minutes}")

    earliest = now + timedelta(minutes=lead_minutes) if now is not None else None

    slots: list[Slot] = []
    for window in sorted(windows):
        t = window.start
        while t + duration_minutes <= window.end:
            start = slot_datetime(target_date, t)
            if (earliest is None or start > earliest) and (tz is None or exists_in_zone(start, tz)):
                slots.append(Slot(date=target_date, start=t, duration=duration_minutes))
            t += step_minutes

    return slots
