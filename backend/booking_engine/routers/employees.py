# backend/booking_engine/routers/employees.py
# Employee management: the only writer of EmployeeAvailability.
# - PUT = full replacement of availabilities / services when present
# - DELETE = soft-delete (is_active)

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload

from ..database import get_db
from ..deps import get_my_business
from ..errors import NotFound
from ..models import Business as DBBusiness
from ..models import BusinessService as DBBusinessService
from ..models import Employee as DBEmployee
from ..models import EmployeeAvailability as DBAvailability
from ..schemas.common import SuccessResponse
from ..schemas.employees import AvailabilityItem, EmployeeCreate, EmployeeRead, EmployeeUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


def _load_services(db: Session, business_id: int, service_ids: list[int]) -> list[DBBusinessService]:
    if not service_ids:
        return []
    services = (
        db.query(DBBusinessService)
        .filter(
            DBBusinessService.id.in_(service_ids),
            DBBusinessService.business_id == business_id,
        )
        .all()
    )
    if len(services) != len(set(service_ids)):
        raise HTTPException(status_code=400, detail="Unknown service for this business")
    return services


def _availability_rows(items: list[AvailabilityItem]) -> list[DBAvailability]:
    return [DBAvailability(**item.model_dump()) for item in items]


def _get_owned(db: Session, id: int, business: DBBusiness) -> DBEmployee:
    obj = db.get(DBEmployee, id)
    if not obj or obj.business_id != business.id:
        raise NotFound("Employee not found")
    return obj


# ---------------------------------------------------------------------
# Base CRUD
# ---------------------------------------------------------------------

@router.post("", response_model=EmployeeRead, status_code=status.HTTP_201_CREATED)
def create_employee(
    data: EmployeeCreate,
    business: DBBusiness = Depends(get_my_business),
    db: Session = Depends(get_db),
):
    fields = data.model_dump(exclude={"availabilities", "service_ids"})
    obj = DBEmployee(business_id=business.id, **fields)
    obj.availabilities = _availability_rows(data.availabilities)
    obj.services = _load_services(db, business.id, data.service_ids)

    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.get("/business/{business_id}", response_model=list[EmployeeRead])
def list_business_employees(business_id: int, db: Session = Depends(get_db)):
    return (
        db.query(DBEmployee)
        .options(selectinload(DBEmployee.availabilities), selectinload(DBEmployee.services))
        .filter(DBEmployee.business_id == business_id, DBEmployee.is_active.is_(True))
        .order_by(DBEmployee.id)
        .all()
    )


@router.get("/{id}", response_model=EmployeeRead)
def get_employee(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBEmployee, id)
    if not obj:
        raise NotFound("Employee not found")
    return obj


@router.put("/{id}", response_model=EmployeeRead)
def update_employee(
    id: int,
    data: EmployeeUpdate,
    business: DBBusiness = Depends(get_my_business),
    db: Session = Depends(get_db),
):
    obj = _get_owned(db, id, business)

    for field, value in data.model_dump(
        exclude_unset=True, exclude={"availabilities", "service_ids"}
    ).items():
        setattr(obj, field, value)

    if data.availabilities is not None:
        # delete-orphan cascade removes the previous rows
        obj.availabilities = _availability_rows(data.availabilities)
    if data.service_ids is not None:
        obj.services = _load_services(db, business.id, data.service_ids)

    db.commit()
    db.refresh(obj)
    logger.info(f"Employee {obj.id} updated")
    return obj


@router.delete("/{id}", response_model=SuccessResponse)
def delete_employee(
    id: int,
    business: DBBusiness = Depends(get_my_business),
    db: Session = Depends(get_db),
):
    obj = _get_owned(db, id, business)
    obj.is_active = False
    db.commit()
    logger.info(f"Employee {obj.id} deactivated")
    return SuccessResponse()
