"""
Payment callback errors. Same contract as the booking engine errors:
code + HTTP status, rendered by the views.
"""
from apps.bookings.exceptions import BookingEngineError


class PaymentValidationError(BookingEngineError):
    code = 'VALIDATION_ERROR'
    status = 400
    default_message = 'razorpay_order_id, razorpay_payment_id and razorpay_signature are required'


class SignatureMismatchError(BookingEngineError):
    """Checkout signature did not match. Nothing was written."""
    code = 'SIGNATURE_MISMATCH'
    status = 400
    default_message = 'Signature mismatch'


class PaymentNotFoundError(BookingEngineError):
    """No Payment for the callback's gateway order id."""
    code = 'PAYMENT_NOT_FOUND'
    status = 404
    default_message = 'Payment not found'


class PaymentNotPendingError(BookingEngineError):
    """Success callback for a payment that already failed (booking cancelled)."""
    code = 'PAYMENT_NOT_PENDING'
    status = 409
    default_message = 'Payment is no longer pending; booking was cancelled'
