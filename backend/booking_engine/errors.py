# backend/booking_engine/errors.py
"""
Business-rule failures of the booking engine.

Every error carries the HTTP status and a stable machine code; the app-level
handler in main.py renders them as {"message", "code"}. Storage failures are
not part of this taxonomy: they propagate as SQLAlchemyError and become 500.
"""


class BookingEngineError(Exception):
    status_code = 400
    code = "BAD_REQUEST"
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(BookingEngineError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class Forbidden(BookingEngineError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Not allowed"


class ServiceNotAssigned(BookingEngineError):
    status_code = 422
    code = "SERVICE_NOT_ASSIGNED"
    default_message = "Employee does not perform this service"


class InvalidSlot(BookingEngineError):
    """Requested time is not a slot of any open window (client should refetch)."""

    status_code = 422
    code = "INVALID_SLOT"
    default_message = "Requested time is not an available slot"


class SlotConflict(BookingEngineError):
    """Slot was taken by another booking (client should refetch and pick again)."""

    status_code = 409
    code = "SLOT_CONFLICT"
    default_message = "This slot is no longer available"


class InvalidTransition(BookingEngineError):
    status_code = 409
    code = "INVALID_TRANSITION"
    default_message = "Booking status change not allowed"


class InvalidRange(BookingEngineError):
    status_code = 400
    code = "INVALID_RANGE"
    default_message = "Invalid date range"
