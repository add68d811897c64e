# backend/booking_engine/services/slots/clock.py
"""
Business-local wall clock helpers.

Hours, availability windows and slots are wall-clock times of the business's
own timezone. Bookings are stored as naive UTC instants. These helpers are the
only place the two meet.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ...config import settings

logger = logging.getLogger(__name__)


def get_zone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or settings.default_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name!r}, falling back to {settings.default_timezone}")
        return ZoneInfo(settings.default_timezone)


def local_now(tz: ZoneInfo, now: datetime | None = None) -> datetime:
    """
    Current business-local time as a naive datetime.

    `now` may be injected: aware values are converted, naive values are
    taken as already business-local.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now
    return now.astimezone(tz).replace(tzinfo=None)


def local_to_utc(local_dt: datetime, tz: ZoneInfo) -> datetime:
    """Naive business-local -> naive UTC (storage format)."""
    return local_dt.replace(tzinfo=tz).astimezone(timezone.utc).replace(tzinfo=None)


def utc_to_local(utc_dt: datetime, tz: ZoneInfo) -> datetime:
    """Naive UTC (storage format) -> naive business-local."""
    return utc_dt.replace(tzinfo=timezone.utc).astimezone(tz).replace(tzinfo=None)


def to_local(instant: datetime, tz: ZoneInfo) -> datetime:
    """Incoming instant -> naive business-local. Naive input is read as local wall clock."""
    if instant.tzinfo is None:
        return instant
    return instant.astimezone(tz).replace(tzinfo=None)


def day_bounds_utc(target_date: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """[start, end) of the business-local day, as naive UTC."""
    start = datetime.combine(target_date, time.min)
    end = start + timedelta(days=1)
    return local_to_utc(start, tz), local_to_utc(end, tz)
