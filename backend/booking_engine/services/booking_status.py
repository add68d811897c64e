# backend/booking_engine/services/booking_status.py
"""
Booking lifecycle after creation.

PENDING -> ACCEPTED -> IN_PROGRESS -> COMPLETED
PENDING | ACCEPTED -> CANCELED          (frees the slot)
IN_PROGRESS | COMPLETED -> DISPUTED     (slot stays consumed)
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..errors import Forbidden, InvalidTransition, NotFound
from ..models import Booking, BookingStatus, Employee
from .events import booking_payload, emit_event

logger = logging.getLogger(__name__)

S = BookingStatus

# action -> (allowed from, target, provider only)
TRANSITIONS: dict[str, tuple[frozenset, BookingStatus, bool]] = {
    "accept": (frozenset({S.PENDING}), S.ACCEPTED, True),
    "start": (frozenset({S.ACCEPTED}), S.IN_PROGRESS, True),
    "complete": (frozenset({S.IN_PROGRESS}), S.COMPLETED, True),
    "cancel": (frozenset({S.PENDING, S.ACCEPTED}), S.CANCELED, False),
    "dispute": (frozenset({S.IN_PROGRESS, S.COMPLETED}), S.DISPUTED, False),
}


def provider_ids(db: Session, booking: Booking) -> set[int]:
    """Users acting as provider: the business owner and the employee's linked user."""
    ids = {booking.provider_id}
    employee = db.get(Employee, booking.employee_id)
    if employee and employee.user_id is not None:
        ids.add(employee.user_id)
    return ids


def provider_filter(user_id: int):
    """SQL criterion matching the bookings where user_id is in provider_ids()."""
    return or_(
        Booking.provider_id == user_id,
        Booking.employee_id.in_(select(Employee.id).where(Employee.user_id == user_id)),
    )


def transition_booking(
    db: Session,
    booking_id: int,
    action: str,
    actor_id: int,
    reason: Optional[str] = None,
) -> Booking:
    """
    Apply a lifecycle action to a booking.

    Raises:
        NotFound: unknown booking or action
        Forbidden: actor is not a party allowed to perform the action
        InvalidTransition: action not allowed from the current status
    """
    if action not in TRANSITIONS:
        raise NotFound(f"Unknown action {action!r}")
    allowed_from, target, provider_only = TRANSITIONS[action]

    booking = (
        db.query(Booking)
        .filter(Booking.id == booking_id)
        .with_for_update()
        .first()
    )
    if not booking:
        raise NotFound("Booking not found")

    providers = provider_ids(db, booking)
    if provider_only and actor_id not in providers:
        raise Forbidden(f"Only the provider can {action} a booking")
    if actor_id not in providers and actor_id != booking.requester_id:
        raise Forbidden()

    current = BookingStatus(booking.status)
    if current not in allowed_from:
        raise InvalidTransition(f"Cannot {action} a booking in status {current.value}")

    booking.status = target.value
    if target == S.COMPLETED:
        booking.completed_at = datetime.now(timezone.utc).replace(tzinfo=None)
    if target == S.CANCELED and reason:
        booking.cancel_reason = reason

    db.commit()
    db.refresh(booking)

    logger.info(f"Booking {booking.id}: {current.value} -> {target.value} by user {actor_id}")
    emit_event("booking_status_changed", {**booking_payload(booking), "previous_status": current.value})
    return booking
