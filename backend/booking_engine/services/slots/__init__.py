# backend/booking_engine/services/slots/__init__.py
"""
Slots calculation module.

Resolver:  business hours ∩ employee windows -> open windows per day
Generator: open windows -> candidate starts of the service duration
Conflicts: candidate starts overlapping occupying bookings -> unavailable
"""

from .config import BookingConfig, get_booking_config
from .resolver import TimeWindow, resolve_day_windows, load_day_windows
from .generator import Slot, generate_slots
from .conflicts import BusyInterval, mark_conflicts, overlaps
from .availability import (
    BookingContext,
    load_context,
    calculate_employee_slots,
    calculate_employee_slots_range,
)

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "TimeWindow",
    "resolve_day_windows",
    "load_day_windows",
    "Slot",
    "generate_slots",
    "BusyInterval",
    "mark_conflicts",
    "overlaps",
    "BookingContext",
    "load_context",
    "calculate_employee_slots",
    "calculate_employee_slots_range",
]
