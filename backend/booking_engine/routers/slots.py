# backend/booking_engine/routers/slots.py
"""
Slots API endpoints.

GET /employees/slots        - slots of an employee for a service on one day
GET /employees/slots/range  - same, batched over a date range
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.slots import SlotsDayResponse, SlotsRangeResponse
from ..services.slots import (
    calculate_employee_slots,
    calculate_employee_slots_range,
)

router = APIRouter(prefix="/employees/slots", tags=["slots"])


@router.get("", response_model=SlotsDayResponse)
def get_slots_day(
    employee_id: int = Query(..., alias="employeeId"),
    business_service_id: int = Query(..., alias="businessServiceId"),
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Get slots for one employee/service on a specific day."""
    result = calculate_employee_slots(
        db=db,
        employee_id=employee_id,
        service_id=business_service_id,
        target_date=target_date,
    )
    return SlotsDayResponse(**result)


@router.get("/range", response_model=SlotsRangeResponse)
def get_slots_range(
    employee_id: int = Query(..., alias="employeeId"),
    business_service_id: int = Query(..., alias="businessServiceId"),
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    db: Session = Depends(get_db),
):
    """Get slots for every day in [startDate, endDate] in one call (400 on a bad range)."""
    result = calculate_employee_slots_range(
        db=db,
        employee_id=employee_id,
        service_id=business_service_id,
        start_date=start_date,
        end_date=end_date,
    )
    return SlotsRangeResponse(**result)
