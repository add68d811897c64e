# backend/booking_engine/services/slots/availability.py
"""
Employee availability for a business service.

Runs resolver -> generator -> conflict filter for one date or a range of
dates. Nothing is cached: every call reads committed state, so two calls
without intervening writes return identical results.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ...errors import InvalidRange, NotFound, ServiceNotAssigned
from ...models import Business, BusinessService, Employee
from .clock import get_zone, local_now
from .config import BookingConfig, get_booking_config
from .conflicts import load_busy_intervals, mark_conflicts
from .generator import Slot, generate_slots
from .resolver import load_day_windows

logger = logging.getLogger(__name__)


@dataclass
class BookingContext:
    """Everything the engine needs about one (employee, service) pair."""
    employee: Employee
    service: BusinessService
    business: Business
    tz: ZoneInfo
    step_minutes: int
    lead_minutes: int
    horizon_days: int

    @property
    def duration_minutes(self) -> int:
        return self.service.duration_minutes


def load_context(
    db: Session,
    employee_id: int,
    service_id: int,
    config: BookingConfig | None = None,
    lock: bool = False,
) -> BookingContext:
    """
    Load and check employee, service and business.

    With lock=True the employee row is selected FOR UPDATE, which serializes
    concurrent commits for the same employee on databases with row locks.

    Raises:
        NotFound: employee/service missing, inactive, or of different businesses
        ServiceNotAssigned: employee does not perform the service
    """
    config = config or get_booking_config()

    query = db.query(Employee).filter(Employee.id == employee_id)
    if lock:
        query = query.with_for_update()
    employee = query.first()
    if not employee or not employee.is_active:
        raise NotFound("Employee not found")

    service = db.get(BusinessService, service_id)
    if not service or not service.is_active:
        raise NotFound("Service not found")

    if service.business_id != employee.business_id:
        raise NotFound("Employee and service belong to different businesses")

    business = db.get(Business, employee.business_id)
    if not business or not business.is_active:
        raise NotFound("Business not found")

    if not any(s.id == service.id for s in employee.services):
        raise ServiceNotAssigned()

    return BookingContext(
        employee=employee,
        service=service,
        business=business,
        tz=get_zone(business.timezone),
        step_minutes=config.resolve_step(service.duration_minutes, business.slot_step_minutes),
        lead_minutes=config.resolve_lead(business.min_lead_minutes),
        horizon_days=config.horizon_days,
    )


def compute_candidate_slots(
    db: Session,
    ctx: BookingContext,
    target_date: date,
    now_local: datetime,
) -> list[Slot]:
    """Resolver + generator for one date (no booking conflicts applied)."""
    if not ctx.business.accepts_online_booking:
        return []
    if target_date > now_local.date() + timedelta(days=ctx.horizon_days):
        return []

    windows = load_day_windows(db, ctx.employee, target_date)
    return generate_slots(
        windows,
        ctx.duration_minutes,
        ctx.step_minutes,
        target_date,
        now=now_local,
        lead_minutes=ctx.lead_minutes,
        tz=ctx.tz,
    )


def compute_day_slots(
    db: Session,
    ctx: BookingContext,
    target_date: date,
    now_local: datetime,
) -> list[Slot]:
    """Resolver + generator + conflict filter for one date."""
    slots = compute_candidate_slots(db, ctx, target_date, now_local)
    if not slots:
        return slots

    busy = load_busy_intervals(db, ctx.employee.id, target_date, ctx.tz)
    return mark_conflicts(slots, busy)


def _day_payload(target_date: date, slots: list[Slot]) -> dict:
    return {
        "date": target_date,
        "slots": [{"time": s.time, "available": s.available} for s in slots],
    }


def calculate_employee_slots(
    db: Session,
    employee_id: int,
    service_id: int,
    target_date: date,
    now: Optional[datetime] = None,
    config: BookingConfig | None = None,
) -> dict:
    """
    Slots of one employee for one service on one date.

    Returns:
        Dict for SlotsDayResponse: {"date", "slots": [{"time", "available"}]}
    """
    ctx = load_context(db, employee_id, service_id, config)
    now_local = local_now(ctx.tz, now)

    slots = compute_day_slots(db, ctx, target_date, now_local)
    logger.debug(
        f"slots employee={employee_id} service={service_id} date={target_date}: "
        f"{sum(s.available for s in slots)}/{len(slots)} available"
    )
    return _day_payload(target_date, slots)


def calculate_employee_slots_range(
    db: Session,
    employee_id: int,
    service_id: int,
    start_date: date,
    end_date: date,
    now: Optional[datetime] = None,
    config: BookingConfig | None = None,
) -> dict:
    """
    Batch variant: one entry per date in [start_date, end_date].

    Each date is computed independently; the result is the same as calling
    calculate_employee_slots once per date.

    Raises:
        InvalidRange: end_date before start_date, or more than max_batch_days days
    """
    config = config or get_booking_config()

    if end_date < start_date:
        raise InvalidRange("endDate must not be before startDate")
    if (end_date - start_date).days + 1 > config.max_batch_days:
        raise InvalidRange(f"Date range cannot exceed {config.max_batch_days} days")

    ctx = load_context(db, employee_id, service_id, config)
    now_local = local_now(ctx.tz, now)

    days = []
    current = start_date
    while current <= end_date:
        days.append(_day_payload(current, compute_day_slots(db, ctx, current, now_local)))
        current += timedelta(days=1)

    return {
        "employee_id": employee_id,
        "business_service_id": service_id,
        "days": days,
    }
