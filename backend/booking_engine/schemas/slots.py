# backend/booking_engine/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date

from .common import CamelModel


class SlotInfo(CamelModel):
    """A candidate start time."""
    time: str  # "HH:MM", business-local
    available: bool


class SlotsDayResponse(CamelModel):
    """Slots of one employee/service on one day."""
    date: date
    slots: list[SlotInfo]


class SlotsRangeResponse(CamelModel):
    """Batch response: one entry per requested day."""
    employee_id: int
    business_service_id: int
    days: list[SlotsDayResponse]
