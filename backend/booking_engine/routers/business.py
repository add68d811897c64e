# backend/booking_engine/routers/business.py
# Business settings: the only writer of BusinessHours read by the slot engine.

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..deps import get_current_user_id, get_my_business
from ..errors import NotFound
from ..models import Business as DBBusiness
from ..models import BusinessHours as DBBusinessHours
from ..models import BusinessService as DBBusinessService
from ..schemas.business import (
    BusinessCreate,
    BusinessHoursRead,
    BusinessHoursUpdate,
    BusinessRead,
    BusinessServiceCreate,
    BusinessServiceRead,
    BusinessServiceUpdate,
    BusinessUpdate,
)
from ..schemas.common import SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/business", tags=["business"])


def _hours_of(db: Session, business_id: int) -> list[DBBusinessHours]:
    return (
        db.query(DBBusinessHours)
        .filter(DBBusinessHours.business_id == business_id)
        .order_by(DBBusinessHours.day_of_week)
        .all()
    )


def _get_by_slug(db: Session, slug: str) -> DBBusiness:
    obj = (
        db.query(DBBusiness)
        .filter(DBBusiness.slug == slug, DBBusiness.is_active.is_(True))
        .first()
    )
    if not obj:
        raise NotFound("Business not found")
    return obj


def _get_owned_service(db: Session, id: int, business: DBBusiness) -> DBBusinessService:
    obj = db.get(DBBusinessService, id)
    if not obj or obj.business_id != business.id:
        raise NotFound("Service not found")
    return obj


# ---------------------------------------------------------------------
# Business
# ---------------------------------------------------------------------

@router.post("", response_model=BusinessRead, status_code=status.HTTP_201_CREATED)
def create_business(
    data: BusinessCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if db.query(DBBusiness).filter(DBBusiness.slug == data.slug).first():
        raise HTTPException(status_code=409, detail="Slug already taken")

    obj = DBBusiness(owner_id=user_id, **data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.get("/mine", response_model=BusinessRead)
def get_mine(business: DBBusiness = Depends(get_my_business)):
    return business


@router.put("", response_model=BusinessRead)
def update_business(
    data: BusinessUpdate,
    business: DBBusiness = Depends(get_my_business),
    db: Session = Depends(get_db),
):
    """Settings read by the slot engine: timezone, online booking, lead time, step."""
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(business, field, value)

    db.commit()
    db.refresh(business)
    logger.info(f"Business {business.id} updated")
    return business


# ---------------------------------------------------------------------
# Business hours
# ---------------------------------------------------------------------

@router.get("/hours/mine", response_model=list[BusinessHoursRead])
def get_my_hours(
    business: DBBusiness = Depends(get_my_business),
    db: Session = Depends(get_db),
):
    return _hours_of(db, business.id)


@router.put("/hours", response_model=list[BusinessHoursRead])
def update_hours(
    data: BusinessHoursUpdate,
    business: DBBusiness = Depends(get_my_business),
    db: Session = Depends(get_db),
):
    """Replace the whole weekly schedule. Days missing from the payload become closed."""
    db.query(DBBusinessHours).filter(DBBusinessHours.business_id == business.id).delete()
    # Old rows must be gone before the (business, day) unique constraint sees new ones
    db.flush()

    for item in data.hours:
        db.add(DBBusinessHours(business_id=business.id, **item.model_dump()))

    db.commit()
    logger.info(f"Business {business.id}: hours replaced ({len(data.hours)} days)")
    return _hours_of(db, business.id)


# ---------------------------------------------------------------------
# Business services
# ---------------------------------------------------------------------

@router.post("/services", response_model=BusinessServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(
    data: BusinessServiceCreate,
    business: DBBusiness = Depends(get_my_business),
    db: Session = Depends(get_db),
):
    obj = DBBusinessService(business_id=business.id, **data.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.put("/services/{id}", response_model=BusinessServiceRead)
def update_service(
    id: int,
    data: BusinessServiceUpdate,
    business: DBBusiness = Depends(get_my_business),
    db: Session = Depends(get_db),
):
    """Existing bookings keep their duration and price snapshot."""
    obj = _get_owned_service(db, id, business)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)
    logger.info(f"Business service {obj.id} updated")
    return obj


@router.delete("/services/{id}", response_model=SuccessResponse)
def delete_service(
    id: int,
    business: DBBusiness = Depends(get_my_business),
    db: Session = Depends(get_db),
):
    obj = _get_owned_service(db, id, business)
    obj.is_active = False
    db.commit()
    logger.info(f"Business service {obj.id} deactivated")
    return SuccessResponse()


# ---------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------

@router.get("/{slug}/hours", response_model=list[BusinessHoursRead])
def get_hours(slug: str, db: Session = Depends(get_db)):
    return _hours_of(db, _get_by_slug(db, slug).id)


@router.get("/{slug}", response_model=BusinessRead)
def get_business(slug: str, db: Session = Depends(get_db)):
    return _get_by_slug(db, slug)
