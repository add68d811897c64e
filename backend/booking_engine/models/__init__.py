from .tables import (
    OCCUPYING_STATUSES,
    Base,
    Booking,
    BookingStatus,
    Business,
    BusinessHours,
    BusinessService,
    Employee,
    EmployeeAvailability,
    metadata,
    t_employee_services,
)

__all__ = [
    "OCCUPYING_STATUSES",
    "Base",
    "Booking",
    "BookingStatus",
    "Business",
    "BusinessHours",
    "BusinessService",
    "Employee",
    "EmployeeAvailability",
    "metadata",
    "t_employee_services",
]
