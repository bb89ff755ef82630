"""
Booking engine — pure business logic, no HTTP/request awareness.

Public API:
  parse_booking_date(value)
  get_booking_preview(car_id, booking_date)
  create_pending_booking(user, car_id, booking_date, gateway=None)
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, date as date_type

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.cars.models import Car
from apps.payments.gateway import GatewayOrder, get_gateway, to_minor_units
from apps.payments.models import Payment
from apps.bookings.exceptions import (
    BookingFailedError,
    BookingForbiddenError,
    BookingValidationError,
    CarNotFoundError,
    CarUnavailableError,
    InvalidBookingDateError,
)
from apps.bookings.models import Booking, BookingStatusLog, BookingStatus
from apps.bookings.permissions import can_book_car

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

PREVIEW_NOTE = (
    'Booking allowed only from tomorrow onwards. '
    'Remaining car amount will be paid directly to the dealer'
)


@dataclass
class PendingBooking:
    booking: Booking
    payment: Payment
    order: GatewayOrder


# ── Date helpers ──────────────────────────────────────────────────────────────

def earliest_booking_date() -> date_type:
    """Tomorrow in the server's TIME_ZONE."""
    return timezone.localdate() + timedelta(days=1)


def parse_booking_date(value) -> date_type:
    """
    Parse a YYYY-MM-DD string and check it is tomorrow or later.
    Raises InvalidBookingDateError otherwise.
    """
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise InvalidBookingDateError('booking_date must be in YYYY-MM-DD format')
    try:
        booking_date = datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise InvalidBookingDateError('booking_date is not a valid calendar date')

    if booking_date < earliest_booking_date():
        raise InvalidBookingDateError()
    return booking_date


def _require(car_id, booking_date):
    if not car_id or not booking_date:
        raise BookingValidationError()


def _available_cars():
    return Car.objects.select_related('dealer').filter(is_available=True)


def _has_live_booking(car_id):
    return Booking.objects.filter(
        car_id=car_id,
        booking_status__in=[BookingStatus.PENDING, BookingStatus.CONFIRMED],
    ).exists()


def _get_available_car(car_id, locked=False):
    qs = _available_cars()
    if locked:
        qs = qs.select_for_update(of=('self',))
    try:
        return qs.filter(id=car_id).first()
    except DjangoValidationError:
        # Malformed UUID: no such car
        return None


# ── Preview ───────────────────────────────────────────────────────────────────

def get_booking_preview(car_id, booking_date) -> dict:
    """
    Read-only summary of what booking this car on this date would cost now.

    Raises:
      BookingValidationError  — car_id or booking_date missing
      InvalidBookingDateError — bad format or earlier than tomorrow
      CarNotFoundError        — no available car with that id
    """
    _require(car_id, booking_date)
    parsed = parse_booking_date(booking_date)

    car = _get_available_car(car_id)
    if car is None:
        raise CarNotFoundError()

    platform_fee = settings.PLATFORM_FEE
    return {
        'car': {
            'id': car.id,
            'make': car.make,
            'model': car.model,
            'variant': car.variant,
            'price': car.price,
        },
        'dealer': {
            'id': car.dealer.id,
            'business_name': car.dealer.business_name,
            'city': car.dealer.city,
        },
        'booking_date': parsed.isoformat(),
        'platform_fee': platform_fee,
        'payable_now': platform_fee,
        'note': PREVIEW_NOTE,
    }


# ── Booking creation ──────────────────────────────────────────────────────────

def create_pending_booking(user, car_id, booking_date, gateway=None) -> PendingBooking:
    """
    Reserve a car: one transaction, car row locked with SELECT FOR UPDATE.

    Steps (all inside the same transaction):
      1. Lock the car row, filtered on is_available
      2. Create the pending Booking and mark the car unavailable
      3. Open a gateway order for the platform fee
      4. Create the pending Payment carrying the gateway order id

    The lock is held across the gateway call, so concurrent attempts on the
    same car wait, then fail the availability filter once this one commits.
    Any failure after step 1 rolls everything back, releasing the car.

    Raises:
      BookingValidationError / InvalidBookingDateError — bad input
      CarUnavailableError  — booked already, delisted, or no such car
      BookingForbiddenError — dealer booking their own stock
      BookingFailedError   — anything else; nothing was written
    """
    _require(car_id, booking_date)
    parsed = parse_booking_date(booking_date)
    gateway = gateway or get_gateway()

    try:
        with transaction.atomic():
            car = _get_available_car(car_id, locked=True)
            if car is None:
                raise CarUnavailableError()
            if not can_book_car(user, car):
                raise BookingForbiddenError('You cannot book a car from your own dealership')

            fee = settings.PLATFORM_FEE
            booking = Booking.objects.create(
                user=user,
                car=car,
                dealer=car.dealer,
                booking_date=parsed,
                platform_fee=fee,
            )
            BookingStatusLog.objects.create(
                booking=booking,
                from_status='',
                to_status=BookingStatus.PENDING,
                changed_by='customer',
                reason='Booking created, awaiting platform fee',
            )

            car.is_available = False
            car.save(update_fields=['is_available', 'updated_at'])

            order = gateway.create_order(
                to_minor_units(fee), settings.PLATFORM_CURRENCY, str(booking.id),
            )

            payment = Payment.objects.create(
                booking=booking,
                payment_method='razorpay',
                amount=fee,
                currency=settings.PLATFORM_CURRENCY,
                razorpay_order_id=order.id,
            )
    except (CarUnavailableError, BookingForbiddenError):
        raise
    except IntegrityError as exc:
        if _has_live_booking(car_id):
            # Car was relisted while a live booking still holds it (uq_active_booking_per_car)
            logger.warning('Booking for car %s rejected, car already has a live booking', car_id)
            raise CarUnavailableError() from exc
        logger.exception('Booking creation failed for car %s by user %s: %s', car_id, user.pk, exc)
        raise BookingFailedError() from exc
    except Exception as exc:
        logger.exception('Booking creation failed for car %s by user %s: %s', car_id, user.pk, exc)
        raise BookingFailedError() from exc

    logger.info('Booking %s created for car %s, gateway order %s', booking.id, car.id, order.id)
    return PendingBooking(booking=booking, payment=payment, order=order)
