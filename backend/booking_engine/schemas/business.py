# backend/booking_engine/schemas/business.py

from datetime import datetime
from typing import Optional
from zoneinfo import available_timezones

from pydantic import Field, field_validator, model_validator

from ..services.slots.config import is_time_str, time_str_to_minutes
from .common import CamelModel


class BusinessHoursItem(CamelModel):
    day_of_week: int = Field(ge=0, le=6)  # 0 = Sunday
    start_time: str
    end_time: str
    is_closed: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def _hhmm(cls, value: str) -> str:
        if not is_time_str(value):
            raise ValueError("time must be HH:MM (24h)")
        return value

    @model_validator(mode="after")
    def _ordered(self):
        if not self.is_closed and time_str_to_minutes(self.start_time) >= time_str_to_minutes(self.end_time):
            raise ValueError("startTime must be before endTime")
        return self


class BusinessHoursUpdate(CamelModel):
    hours: list[BusinessHoursItem]

    @field_validator("hours")
    @classmethod
    def _unique_days(cls, value: list[BusinessHoursItem]) -> list[BusinessHoursItem]:
        days = [h.day_of_week for h in value]
        if len(days) != len(set(days)):
            raise ValueError("each dayOfWeek may appear only once")
        return value


class BusinessHoursRead(CamelModel):
    id: int
    business_id: int
    day_of_week: int
    start_time: str
    end_time: str
    is_closed: bool


class BusinessCreate(CamelModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1, pattern=r"^[a-z0-9-]+$")
    timezone: str = "UTC"
    accepts_online_booking: bool = True
    min_lead_minutes: Optional[int] = Field(default=None, ge=0)
    slot_step_minutes: Optional[int] = Field(default=None, gt=0)

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        if value not in available_timezones():
            raise ValueError(f"unknown timezone {value!r}")
        return value


class BusinessUpdate(CamelModel):
    """Partial update; omitted fields keep their value, null clears the optional overrides."""
    name: Optional[str] = Field(default=None, min_length=1)
    timezone: Optional[str] = None
    accepts_online_booking: Optional[bool] = None
    min_lead_minutes: Optional[int] = Field(default=None, ge=0)
    slot_step_minutes: Optional[int] = Field(default=None, gt=0)

    @field_validator("name", "timezone", "accepts_online_booking")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    @field_validator("timezone")
    @classmethod
    def _known_zone(cls, value: str) -> str:
        if value not in available_timezones():
            raise ValueError(f"unknown timezone {value!r}")
        return value


class BusinessRead(CamelModel):
    id: int
    owner_id: int
    name: str
    slug: str
    timezone: str
    accepts_online_booking: bool
    is_active: bool
    min_lead_minutes: Optional[int] = None
    slot_step_minutes: Optional[int] = None
    created_at: datetime


class BusinessServiceCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    duration_minutes: int = Field(gt=0, le=24 * 60)
    price_cents: int = Field(ge=0)
    currency: str = "EUR"


class BusinessServiceRead(CamelModel):
    id: int
    business_id: int
    name: str
    description: Optional[str] = None
    duration_minutes: int
    price_cents: int
    currency: str
    is_active: bool


class BusinessServiceUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0, le=24 * 60)
    price_cents: Optional[int] = Field(default=None, ge=0)
    currency: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "duration_minutes", "price_cents", "currency", "is_active")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value
