# backend/booking_engine/services/booking_commit.py
"""
Booking commit transaction.

Turns one selected slot into a PENDING booking. Nothing from the earlier
slot query is trusted: the employee/service relation, the open windows, the
slot grid and the conflicts are all checked again inside the transaction
that inserts the row.

Serialization per employee:
- PostgreSQL: the employee row is locked with SELECT ... FOR UPDATE
- SQLite: transactions start with BEGIN IMMEDIATE (see database.py)
- Both: partial unique index (employee_id, scheduled_at) WHERE status <> 'CANCELED'
  turns a lost race on the same start into IntegrityError -> SlotConflict
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import BookingEngineError, InvalidSlot, SlotConflict
from ..models import Booking, BookingStatus
from .events import booking_payload, emit_event
from .slots.availability import compute_candidate_slots, load_context
from .slots.clock import local_now, local_to_utc, to_local
from .slots.config import BookingConfig, minutes_to_time_str
from .slots.conflicts import get_occupying_bookings

logger = logging.getLogger(__name__)


def _check_slot(db: Session, ctx, local_start: datetime, now_local: datetime) -> None:
    """Raise InvalidSlot unless local_start is exactly a generated slot start."""
    if local_start.second or local_start.microsecond:
        raise InvalidSlot("Requested time is not aligned to a slot")

    target_date = local_start.date()
    minutes = local_start.hour * 60 + local_start.minute

    candidates = compute_candidate_slots(db, ctx, target_date, now_local)
    if not any(slot.start == minutes for slot in candidates):
        raise InvalidSlot(
            f"{target_date.isoformat()} {minutes_to_time_str(minutes)} is not an open slot"
        )


def commit_booking(
    db: Session,
    employee_id: int,
    business_service_id: int,
    scheduled_at: datetime,
    requester_id: int,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
    config: BookingConfig | None = None,
) -> Booking:
    """
    Atomically create a PENDING booking for one slot.

    Args:
        scheduled_at: Requested start. Aware values are converted to the
                      business timezone; naive values are business-local.
        now: Injected current time (tests); defaults to the real clock.

    Raises:
        NotFound, ServiceNotAssigned, InvalidSlot, SlotConflict.
        SQLAlchemyError for storage failures.
        No booking row exists after any raise.
    """
    try:
        ctx = load_context(db, employee_id, business_service_id, config, lock=True)

        local_start = to_local(scheduled_at, ctx.tz)
        now_local = local_now(ctx.tz, now)
        _check_slot(db, ctx, local_start, now_local)

        start_utc = local_to_utc(local_start, ctx.tz)
        end_utc = start_utc + timedelta(minutes=ctx.duration_minutes)

        if get_occupying_bookings(db, employee_id, start_utc, end_utc):
            raise SlotConflict()

        booking = Booking(
            business_id=ctx.business.id,
            business_service_id=ctx.service.id,
            employee_id=employee_id,
            requester_id=requester_id,
            provider_id=ctx.business.owner_id,
            scheduled_at=start_utc,
            ends_at=end_utc,
            duration_minutes=ctx.duration_minutes,
            agreed_price_cents=ctx.service.price_cents,
            status=BookingStatus.PENDING.value,
            notes=notes,
        )
        db.add(booking)
        db.flush()
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Slot race lost: employee={employee_id} at={scheduled_at.isoformat()}")
        raise SlotConflict()
    except BookingEngineError as e:
        db.rollback()
        logger.info(
            f"Booking rejected ({e.code}): employee={employee_id} "
            f"service={business_service_id} at={scheduled_at.isoformat()}"
        )
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Booking commit failed: employee={employee_id}")
        raise

    db.refresh(booking)
    logger.info(
        f"Booking {booking.id} created: employee={employee_id} "
        f"start={local_start.isoformat()} ({ctx.business.timezone})"
    )
    emit_event("booking_created", booking_payload(booking))
    return booking
