"""
Custom exceptions for the booking and payment engines.
Raised in engine.py / payments.services and rendered by the views as
{"success": false, "message": str(exc), "code": exc.code} with exc.status.
"""


class BookingEngineError(Exception):
    """Base exception for all booking engine errors."""
    code = 'INTERNAL_ERROR'
    status = 500
    default_message = 'Something went wrong. Please try again.'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class BookingValidationError(BookingEngineError):
    """Missing or malformed request parameters."""
    code = 'VALIDATION_ERROR'
    status = 400
    default_message = 'carId and booking_date are required'


class InvalidBookingDateError(BookingEngineError):
    """booking_date is not YYYY-MM-DD, not a real date, or earlier than tomorrow."""
    code = 'INVALID_DATE'
    status = 400
    default_message = 'Booking is allowed only from tomorrow onwards'


class CarNotFoundError(BookingEngineError):
    """No available car with that id (preview)."""
    code = 'NOT_FOUND'
    status = 404
    default_message = 'Car not available'


class CarUnavailableError(BookingEngineError):
    """Raised when the locked availability check finds no bookable car row."""
    code = 'CAR_UNAVAILABLE'
    status = 404
    default_message = 'Car not available'


class BookingForbiddenError(BookingEngineError):
    code = 'FORBIDDEN'
    status = 403
    default_message = 'Access denied'


class BookingFailedError(BookingEngineError):
    """Anything went wrong after the car was locked; the transaction was rolled back."""
    code = 'BOOKING_FAILED'
    status = 500
    default_message = 'Booking failed'
