# backend/booking_engine/schemas/employees.py

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator, model_validator

from ..services.slots.config import is_time_str, time_str_to_minutes
from .common import CamelModel


class AvailabilityItem(CamelModel):
    day_of_week: int = Field(ge=0, le=6)  # 0 = Sunday
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def _hhmm(cls, value: str) -> str:
        if not is_time_str(value):
            raise ValueError("time must be HH:MM (24h)")
        return value

    @model_validator(mode="after")
    def _ordered(self):
        if time_str_to_minutes(self.start_time) >= time_str_to_minutes(self.end_time):
            raise ValueError("startTime must be before endTime")
        return self


class AvailabilityRead(AvailabilityItem):
    id: int
    employee_id: int


class EmployeeCreate(CamelModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    user_id: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    bio: Optional[str] = None
    availabilities: list[AvailabilityItem] = []
    service_ids: list[int] = []


class EmployeeUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    user_id: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    bio: Optional[str] = None
    availabilities: Optional[list[AvailabilityItem]] = None
    service_ids: Optional[list[int]] = None


class EmployeeRead(CamelModel):
    id: int
    business_id: int
    user_id: Optional[int] = None
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool
    availabilities: list[AvailabilityRead] = []
    service_ids: list[int] = []
    created_at: datetime
    updated_at: datetime
