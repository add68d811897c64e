# backend/booking_engine/routers/bookings.py
# POST creates through the commit transaction; status changes go through
# action endpoints only. PATCH = 405, DELETE = 405 (cancel instead).

from datetime import date, datetime, time, timedelta
from typing import Literal, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import get_current_user_id
from ..errors import Forbidden, NotFound
from ..models import Booking as DBBooking
from ..schemas.bookings import BookingCancel, BookingCreate, BookingRead
from ..services.booking_commit import commit_booking
from ..services.booking_status import provider_filter, provider_ids, transition_booking

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return commit_booking(
        db,
        employee_id=data.employee_id,
        business_service_id=data.business_service_id,
        scheduled_at=data.scheduled_at,
        requester_id=user_id,
        notes=data.notes,
    )


@router.get("/me", response_model=list[BookingRead])
def list_my_bookings(
    role: Optional[Literal["requester", "provider"]] = None,
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    query = db.query(DBBooking)

    if role == "requester":
        query = query.filter(DBBooking.requester_id == user_id)
    elif role == "provider":
        query = query.filter(provider_filter(user_id))
    else:
        query = query.filter(
            or_(DBBooking.requester_id == user_id, provider_filter(user_id))
        )

    # from/to are UTC calendar days, inclusive
    if date_from:
        query = query.filter(DBBooking.scheduled_at >= datetime.combine(date_from, time.min))
    if date_to:
        query = query.filter(
            DBBooking.scheduled_at < datetime.combine(date_to + timedelta(days=1), time.min)
        )

    return query.order_by(DBBooking.scheduled_at).all()


@router.get("/{id}", response_model=BookingRead)
def get_booking(
    id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    obj = db.get(DBBooking, id)
    if not obj:
        raise NotFound("Booking not found")
    if user_id != obj.requester_id and user_id not in provider_ids(db, obj):
        raise Forbidden()
    return obj


@router.post("/{id}/cancel", response_model=BookingRead)
def cancel_booking(
    id: int,
    data: Optional[BookingCancel] = Body(None),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    reason = data.reason if data else None
    return transition_booking(db, id, "cancel", user_id, reason=reason)


@router.post("/{id}/{action}", response_model=BookingRead)
def change_booking_status(
    id: int,
    action: Literal["accept", "start", "complete", "dispute"],
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return transition_booking(db, id, action, user_id)


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
