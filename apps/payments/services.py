"""
Payment state transitions — the second half of the booking flow.

Public API:
  verify_payment(order_id, payment_id, signature, gateway=None)   checkout success callback
  confirm_captured_payment(order_id, payment_id, event_id=None)   webhook payment.captured
  fail_payment(order_id, changed_by='callback', reason='', event_id=None)

Booking and Payment always move together inside one transaction, with the
Payment row (and its booking) locked. Transitions are guarded on the payment
still being pending, so duplicate callbacks change nothing and notify nobody.
"""
import logging
from dataclasses import dataclass

from django.db import transaction
from django.utils import timezone

from apps.bookings.models import Booking, PaymentStatus
from apps.cars.models import Car
from apps.notifications.emails import send_booking_notifications

from .exceptions import (
    PaymentNotFoundError,
    PaymentNotPendingError,
    PaymentValidationError,
    SignatureMismatchError,
)
from .gateway import get_gateway
from .models import Payment

logger = logging.getLogger(__name__)


@dataclass
class ConfirmationResult:
    booking: Booking
    already_confirmed: bool = False
    notifications_sent: bool = False


def _lock_payment(order_id):
    return (
        Payment.objects
        .select_for_update()
        .select_related('booking')
        .filter(razorpay_order_id=order_id)
        .first()
    )


def verify_payment(order_id, payment_id, signature, gateway=None) -> ConfirmationResult:
    """
    Checkout success callback. The signature is checked before any database
    access; a mismatch raises SignatureMismatchError with nothing written.
    """
    if not (order_id and payment_id and signature):
        raise PaymentValidationError()

    gateway = gateway or get_gateway()
    if not gateway.verify_signature(order_id, payment_id, signature):
        logger.warning('Signature mismatch for order %s (payment %s)', order_id, payment_id)
        raise SignatureMismatchError()

    return _confirm(order_id, payment_id, signature=signature, changed_by='callback')


def confirm_captured_payment(order_id, payment_id, event_id=None) -> ConfirmationResult:
    """Webhook path. The webhook body signature has already authenticated the event."""
    return _confirm(order_id, payment_id, changed_by='webhook', event_id=event_id)


def _confirm(order_id, payment_id, signature='', changed_by='callback', event_id=None):
    with transaction.atomic():
        payment = _lock_payment(order_id)
        if payment is None:
            logger.warning('Confirmation for unknown order %s rejected', order_id)
            raise PaymentNotFoundError()

        booking = payment.booking

        if payment.payment_status == PaymentStatus.PAID:
            logger.info('Order %s already paid, booking %s unchanged', order_id, booking.id)
            return ConfirmationResult(booking=booking, already_confirmed=True)

        if payment.payment_status == PaymentStatus.FAILED:
            # Money may have been captured for a cancelled booking: needs a manual refund
            logger.error(
                'Payment %s captured for order %s after booking %s was cancelled',
                payment_id, order_id, booking.id,
            )
            raise PaymentNotPendingError()

        payment.mark_paid(payment_id, signature=signature, webhook_event_id=event_id)
        booking.confirm(changed_by=changed_by)

    logger.info('Booking %s confirmed via %s (payment %s)', booking.id, changed_by, payment_id)

    # Outside the transaction: a mail failure never undoes the confirmation
    notifications_sent = send_booking_notifications(booking)
    return ConfirmationResult(booking=booking, notifications_sent=notifications_sent)


def fail_payment(order_id, changed_by='callback', reason='', event_id=None):
    """
    Failure callback: pending payment → failed, booking → cancelled, car released.

    Returns the booking, or None for an unknown order id. Unknown orders and
    payments that already reached a terminal state are ignored, not errors.
    """
    if not order_id:
        raise PaymentValidationError('razorpay_order_id is required')

    with transaction.atomic():
        payment = _lock_payment(order_id)
        if payment is None:
            logger.info('Failure callback for unknown order %s ignored', order_id)
            return None

        booking = payment.booking
        if not payment.is_pending:
            logger.info(
                'Failure callback for order %s ignored, payment already %s',
                order_id, payment.payment_status,
            )
            return booking

        payment.mark_failed(webhook_event_id=event_id)
        booking.cancel(changed_by=changed_by, reason=reason or 'Payment failed')
        Car.all_objects.filter(id=booking.car_id).update(
            is_available=True, updated_at=timezone.now(),
        )

    logger.info('Booking %s cancelled via %s, car %s released', booking.id, changed_by, booking.car_id)
    return booking
