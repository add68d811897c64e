# backend/booking_engine/schemas/common.py

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON uses camelCase (employeeId, scheduledAt, ...); Python uses snake_case."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


def as_utc(value: datetime | None) -> datetime | None:
    """Stored timestamps are naive UTC; expose them as aware UTC instants."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SuccessResponse(BaseModel):
    success: bool = True
