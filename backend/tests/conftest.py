"""Shared test fixtures and helpers."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.pop("REDIS_URL", None)

from datetime import date, datetime, timedelta
from types import SimpleNamespace
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking_engine.database import create_db_engine, get_db
from booking_engine.main import app
from booking_engine.models import (
    Base,
    Booking,
    BookingStatus,
    Business,
    BusinessHours,
    BusinessService,
    Employee,
    EmployeeAvailability,
)
from booking_engine.services.slots.clock import get_zone, local_to_utc

OWNER_ID = 100
CUSTOMER_ID = 200
OTHER_CUSTOMER_ID = 201

# 2030-01-07 is a Monday, 2030-01-06 a Sunday
MONDAY = date(2030, 1, 7)
SUNDAY = date(2030, 1, 6)
NOW = datetime(2030, 1, 1, 8, 0)


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    # Route handlers share the test session so seeds and requests see one transaction stream
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def events(monkeypatch):
    """Capture emitted events instead of pushing them to Redis."""
    captured = []

    class _FakeRedis:
        def rpush(self, key, value):
            captured.append((key, value))
            return len(captured)

    monkeypatch.setattr("booking_engine.services.events.redis_client", _FakeRedis())
    return captured


def seed_salon(
    db,
    business_hours: Optional[dict] = None,
    availability: Optional[list] = None,
    duration: int = 60,
    timezone: str = "UTC",
    slot_step_minutes: Optional[int] = None,
    min_lead_minutes: Optional[int] = None,
    slug: str = "salon",
) -> SimpleNamespace:
    """
    Business open Monday 09:00-18:00 (closed otherwise), one employee available
    Monday 09:00-12:00 and 14:00-18:00, one 60-minute service assigned to them.
    """
    if business_hours is None:
        business_hours = {1: ("09:00", "18:00")}
    if availability is None:
        availability = [(1, "09:00", "12:00"), (1, "14:00", "18:00")]

    business = Business(
        owner_id=OWNER_ID,
        name="Salon",
        slug=slug,
        timezone=timezone,
        slot_step_minutes=slot_step_minutes,
        min_lead_minutes=min_lead_minutes,
    )
    db.add(business)
    db.flush()

    for dow in range(7):
        if dow in business_hours:
            start, end = business_hours[dow]
            db.add(BusinessHours(business_id=business.id, day_of_week=dow, start_time=start, end_time=end))
        else:
            db.add(BusinessHours(
                business_id=business.id, day_of_week=dow,
                start_time="00:00", end_time="00:00", is_closed=True,
            ))

    service = BusinessService(
        business_id=business.id,
        name="Haircut",
        duration_minutes=duration,
        price_cents=2500,
    )
    employee = Employee(business_id=business.id, first_name="Ana", last_name="Lopez")
    employee.services = [service]
    employee.availabilities = [
        EmployeeAvailability(day_of_week=dow, start_time=start, end_time=end)
        for dow, start, end in availability
    ]
    db.add_all([service, employee])
    db.commit()

    return SimpleNamespace(
        business_id=business.id,
        employee_id=employee.id,
        service_id=service.id,
        timezone=timezone,
    )


def add_booking(
    db,
    salon: SimpleNamespace,
    local_start: datetime,
    duration: int = 60,
    status: BookingStatus = BookingStatus.PENDING,
    requester_id: int = CUSTOMER_ID,
) -> Booking:
    start_utc = local_to_utc(local_start, get_zone(salon.timezone))
    booking = Booking(
        business_id=salon.business_id,
        business_service_id=salon.service_id,
        employee_id=salon.employee_id,
        requester_id=requester_id,
        provider_id=OWNER_ID,
        scheduled_at=start_utc,
        ends_at=start_utc + timedelta(minutes=duration),
        duration_minutes=duration,
        status=status.value,
    )
    db.add(booking)
    db.commit()
    return booking


def times(day: dict, only_available: bool = False) -> list[str]:
    return [s["time"] for s in day["slots"] if s["available"] or not only_available]


def next_weekday(weekday: int, min_days_ahead: int = 2) -> date:
    """Next date with Python weekday() == weekday at least min_days_ahead from today."""
    start = date.today() + timedelta(days=min_days_ahead)
    return start + timedelta(days=(weekday - start.weekday()) % 7)
