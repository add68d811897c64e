# backend/booking_engine/services/slots/config.py
"""
Booking configuration for slots calculation.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from ...config import settings

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for booking/slots system.

    Attributes:
        step_minutes: Grid step between candidate starts.
                      None = use the service duration (back-to-back slots).
        min_lead_minutes: Minimum minutes between "now" and a bookable start
        horizon_days: How many days ahead slots are offered
        max_batch_days: Largest date range accepted by the batch query
    """
    step_minutes: Optional[int] = None
    min_lead_minutes: int = 0
    horizon_days: int = 60
    max_batch_days: int = 31

    def __post_init__(self):
        """Validate configuration."""
        if self.step_minutes is not None and self.step_minutes <= 0:
            raise ValueError(f"step_minutes must be positive, got {self.step_minutes}")
        if self.min_lead_minutes < 0:
            raise ValueError(f"min_lead_minutes must be >= 0, got {self.min_lead_minutes}")
        if self.horizon_days <= 0 or self.max_batch_days <= 0:
            raise ValueError("horizon_days and max_batch_days must be positive")

    def resolve_step(self, duration_minutes: int, business_step: Optional[int] = None) -> int:
        """Business override, then global setting, then the service duration."""
        return business_step or self.step_minutes or duration_minutes

    def resolve_lead(self, business_lead: Optional[int] = None) -> int:
        return self.min_lead_minutes if business_lead is None else business_lead


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton) built from settings."""
    return BookingConfig(
        step_minutes=settings.slot_step_minutes,
        min_lead_minutes=settings.min_lead_minutes,
        horizon_days=settings.horizon_days,
        max_batch_days=settings.max_batch_days,
    )


def is_time_str(value: str) -> bool:
    return value == "24:00" or bool(_TIME_RE.match(value or ""))


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight ("24:00" is accepted as end of day)."""
    if value == "24:00":
        return MINUTES_PER_DAY
    match = _TIME_RE.match(value or "")
    if not match:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
