# backend/booking_engine/schemas/bookings.py

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .common import CamelModel, as_utc


class BookingCreate(CamelModel):
    business_service_id: int
    employee_id: int
    scheduled_at: datetime  # ISO-8601 instant; naive = business-local
    notes: Optional[str] = Field(default=None, max_length=2000)


class BookingCancel(CamelModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class BookingRead(CamelModel):
    id: int

    business_id: int
    business_service_id: int
    employee_id: int
    requester_id: int
    provider_id: int

    scheduled_at: datetime
    ends_at: datetime
    duration_minutes: int

    status: str
    agreed_price_cents: Optional[int] = None
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None
    completed_at: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime

    @field_validator("scheduled_at", "ends_at", "completed_at", "created_at", "updated_at")
    @classmethod
    def _utc(cls, value):
        return as_utc(value)
