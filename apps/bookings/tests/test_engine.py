from datetime import timedelta
from uuid import uuid4

import pytest
from django.utils import timezone

from apps.bookings.engine import (
    create_pending_booking,
    earliest_booking_date,
    get_booking_preview,
    parse_booking_date,
)
from apps.bookings.exceptions import (
    BookingFailedError,
    BookingForbiddenError,
    BookingValidationError,
    CarNotFoundError,
    CarUnavailableError,
    InvalidBookingDateError,
)
from apps.bookings.models import Booking, BookingStatus, BookingStatusLog, PaymentStatus
from apps.cars.models import Car
from apps.payments.models import Payment


class ExplodingGateway:
    def create_order(self, amount_minor_units, currency, receipt):
        raise RuntimeError("gateway timed out")


# ── Dates ─────────────────────────────────────────────────────────────────────

def test_earliest_booking_date_is_tomorrow():
    assert earliest_booking_date() == timezone.localdate() + timedelta(days=1)


def test_tomorrow_is_accepted(tomorrow):
    assert parse_booking_date(tomorrow).isoformat() == tomorrow


@pytest.mark.parametrize("days", [0, -1, -30])
def test_today_and_past_dates_are_rejected(days):
    value = (timezone.localdate() + timedelta(days=days)).isoformat()

    with pytest.raises(InvalidBookingDateError) as exc_info:
        parse_booking_date(value)

    assert exc_info.value.code == "INVALID_DATE"
    assert exc_info.value.status == 400


@pytest.mark.parametrize("value", ["2030/01/05", "05-01-2030", "tomorrow", "", None, 20300105])
def test_malformed_dates_are_rejected(value):
    with pytest.raises(InvalidBookingDateError):
        parse_booking_date(value)


def test_impossible_calendar_date_is_rejected():
    with pytest.raises(InvalidBookingDateError):
        parse_booking_date("2031-02-30")


# ── Preview ───────────────────────────────────────────────────────────────────

def test_preview_charges_only_the_platform_fee(car, tomorrow):
    preview = get_booking_preview(str(car.id), tomorrow)

    assert preview["platform_fee"] == 500
    assert preview["payable_now"] == 500
    assert preview["booking_date"] == tomorrow
    assert preview["car"]["id"] == car.id
    assert preview["dealer"]["business_name"] == "Speed Motors"
    assert "phone" not in preview["dealer"]
    assert "Remaining car amount" in preview["note"]


def test_preview_writes_nothing(car, tomorrow):
    get_booking_preview(car.id, tomorrow)

    assert Booking.objects.count() == 0
    assert Payment.objects.count() == 0


@pytest.mark.parametrize("car_id, booking_date", [(None, "2030-01-05"), ("abc", None), ("", "")])
def test_preview_requires_car_and_date(db, car_id, booking_date):
    with pytest.raises(BookingValidationError):
        get_booking_preview(car_id, booking_date)


def test_preview_of_unknown_car_is_not_found(db, tomorrow):
    with pytest.raises(CarNotFoundError) as exc_info:
        get_booking_preview(uuid4(), tomorrow)

    assert exc_info.value.status == 404


def test_preview_of_booked_car_is_not_found(car, tomorrow):
    car.is_available = False
    car.save()

    with pytest.raises(CarNotFoundError):
        get_booking_preview(car.id, tomorrow)


# ── Creation ──────────────────────────────────────────────────────────────────

def test_create_pending_booking(customer, car, tomorrow, gateway):
    pending = create_pending_booking(customer, car.id, tomorrow, gateway=gateway)

    booking = Booking.objects.get(id=pending.booking.id)
    assert booking.user == customer
    assert booking.dealer == car.dealer
    assert booking.booking_date.isoformat() == tomorrow
    assert booking.platform_fee == 500
    assert booking.booking_status == BookingStatus.PENDING
    assert booking.payment_status == PaymentStatus.PENDING
    assert booking.dealer_payment_status == PaymentStatus.PENDING

    payment = booking.payment
    assert payment.razorpay_order_id == pending.order.id
    assert payment.amount == 500
    assert payment.currency == "INR"
    assert payment.transaction_id is None
    assert payment.is_pending

    assert pending.order.amount == 50000
    assert pending.order.receipt == str(booking.id)


def test_create_marks_car_unavailable(pending_booking, car):
    car.refresh_from_db()
    assert car.is_available is False


def test_create_logs_initial_status(pending_booking):
    log = BookingStatusLog.objects.get(booking=pending_booking.booking)
    assert log.from_status == ""
    assert log.to_status == BookingStatus.PENDING
    assert log.changed_by == "customer"


def test_second_booking_for_same_car_is_unavailable(pending_booking, other_customer, car, tomorrow, gateway):
    with pytest.raises(CarUnavailableError) as exc_info:
        create_pending_booking(other_customer, car.id, tomorrow, gateway=gateway)

    assert exc_info.value.code == "CAR_UNAVAILABLE"
    assert exc_info.value.status == 404
    assert Booking.objects.count() == 1


def test_unknown_or_malformed_car_is_unavailable(customer, tomorrow, gateway):
    for car_id in (uuid4(), "not-a-uuid"):
        with pytest.raises(CarUnavailableError):
            create_pending_booking(customer, car_id, tomorrow, gateway=gateway)

    assert Booking.objects.count() == 0


def test_delisted_car_is_unavailable(customer, car, tomorrow, gateway):
    car.delist()

    with pytest.raises(CarUnavailableError):
        create_pending_booking(customer, car.id, tomorrow, gateway=gateway)


def test_dealer_cannot_book_own_car(dealer, car, tomorrow, gateway):
    with pytest.raises(BookingForbiddenError) as exc_info:
        create_pending_booking(dealer.user, car.id, tomorrow, gateway=gateway)

    assert exc_info.value.status == 403
    car.refresh_from_db()
    assert car.is_available is True
    assert Booking.objects.count() == 0


def test_invalid_date_writes_nothing(customer, car, gateway):
    today = timezone.localdate().isoformat()

    with pytest.raises(InvalidBookingDateError):
        create_pending_booking(customer, car.id, today, gateway=gateway)

    assert Booking.objects.count() == 0


def test_gateway_failure_rolls_everything_back(customer, car, tomorrow):
    with pytest.raises(BookingFailedError) as exc_info:
        create_pending_booking(customer, car.id, tomorrow, gateway=ExplodingGateway())

    assert exc_info.value.code == "BOOKING_FAILED"
    assert exc_info.value.status == 500
    assert Booking.objects.count() == 0
    assert BookingStatusLog.objects.count() == 0
    assert Payment.objects.count() == 0
    car.refresh_from_db()
    assert car.is_available is True


def test_car_is_bookable_again_after_gateway_failure(customer, car, tomorrow, gateway):
    with pytest.raises(BookingFailedError):
        create_pending_booking(customer, car.id, tomorrow, gateway=ExplodingGateway())

    pending = create_pending_booking(customer, car.id, tomorrow, gateway=gateway)
    assert pending.booking.booking_status == BookingStatus.PENDING


def test_relisted_car_with_live_booking_is_unavailable(pending_booking, other_customer, car, tomorrow, gateway):
    # Admin flips the flag back while the pending booking still holds the car
    Car.all_objects.filter(id=car.id).update(is_available=True)

    with pytest.raises(CarUnavailableError):
        create_pending_booking(other_customer, car.id, tomorrow, gateway=gateway)

    assert Booking.objects.filter(car=car).count() == 1
    assert Payment.objects.count() == 1
