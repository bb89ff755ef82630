import hashlib
import hmac
import json

import pytest

from apps.bookings.models import BookingStatus, PaymentStatus
from apps.payments.models import Payment

VERIFY_URL = "/api/payments/verify/"
FAILED_URL = "/api/payments/failed/"
WEBHOOK_URL = "/api/payments/webhook/"
WEBHOOK_SECRET = "test_webhook_secret"


def _callback(pending, gateway, payment_id="pay_ABC123"):
    order_id = pending.order.id
    return {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": payment_id,
        "razorpay_signature": gateway.sign(order_id, payment_id),
    }


def _post_json(client, url, data):
    return client.post(url, json.dumps(data), content_type="application/json")


def _webhook(client, payload, secret=WEBHOOK_SECRET):
    body = json.dumps(payload).encode()
    signature = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return client.post(
        WEBHOOK_URL, body, content_type="application/json", HTTP_X_RAZORPAY_SIGNATURE=signature,
    )


def _event(event, order_id, event_id="evt_001", payment_id="pay_HOOK1", **entity):
    return {
        "id": event_id,
        "event": event,
        "payload": {"payment": {"entity": {"id": payment_id, "order_id": order_id, **entity}}},
    }


# ── Verify ────────────────────────────────────────────────────────────────────

def test_full_booking_flow(client, auth, customer, car, tomorrow, gateway, mailoutbox):
    created = client.post(
        "/api/bookings/",
        {"carId": str(car.id), "booking_date": tomorrow},
        content_type="application/json",
        **auth(customer),
    ).json()
    order_id = created["razorpay"]["order_id"]

    response = _post_json(client, VERIFY_URL, {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": "pay_E2E",
        "razorpay_signature": gateway.sign(order_id, "pay_E2E"),
    })

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["booking_id"] == created["booking_id"]
    assert body["booking_status"] == "confirmed"
    assert body["payment_status"] == "paid"
    assert body["notifications_sent"] is True
    assert len(mailoutbox) == 2


def test_verify_accepts_checkout_form_post(client, pending_booking, gateway, mailoutbox):
    response = client.post(VERIFY_URL, _callback(pending_booking, gateway))

    assert response.status_code == 200
    assert response.json()["booking_status"] == "confirmed"


def test_verify_twice_reports_already_confirmed(client, pending_booking, gateway, mailoutbox):
    _post_json(client, VERIFY_URL, _callback(pending_booking, gateway))

    response = _post_json(client, VERIFY_URL, _callback(pending_booking, gateway))

    assert response.status_code == 200
    assert response.json()["already_confirmed"] is True
    assert len(mailoutbox) == 2


def test_verify_signature_mismatch(client, pending_booking, gateway):
    data = _callback(pending_booking, gateway)
    data["razorpay_signature"] = "0" * 64

    response = _post_json(client, VERIFY_URL, data)

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Signature mismatch", "code": "SIGNATURE_MISMATCH"}
    pending_booking.booking.refresh_from_db()
    assert pending_booking.booking.booking_status == BookingStatus.PENDING


@pytest.mark.parametrize("signature", ["\u00e9" * 64, 12345, ["abc"]])
def test_verify_rejects_non_hex_signatures(client, pending_booking, gateway, signature):
    data = _callback(pending_booking, gateway)
    data["razorpay_signature"] = signature

    response = _post_json(client, VERIFY_URL, data)

    assert response.status_code == 400
    assert response.json()["code"] == "SIGNATURE_MISMATCH"
    pending_booking.booking.refresh_from_db()
    assert pending_booking.booking.booking_status == BookingStatus.PENDING


def test_webhook_with_non_ascii_signature_header(client, pending_booking):
    body = json.dumps(_event("payment.captured", pending_booking.order.id)).encode()

    response = client.post(
        WEBHOOK_URL, body, content_type="application/json", HTTP_X_RAZORPAY_SIGNATURE="\u00e9" * 64,
    )

    assert response.status_code == 400


def test_verify_missing_fields(client, db):
    response = _post_json(client, VERIFY_URL, {"razorpay_order_id": "order_x"})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_verify_unknown_order(client, db, gateway):
    response = _post_json(client, VERIFY_URL, {
        "razorpay_order_id": "order_nope",
        "razorpay_payment_id": "pay_1",
        "razorpay_signature": gateway.sign("order_nope", "pay_1"),
    })

    assert response.status_code == 404
    assert response.json()["code"] == "PAYMENT_NOT_FOUND"


def test_verify_after_failure_conflicts(client, pending_booking, gateway):
    _post_json(client, FAILED_URL, {"razorpay_order_id": pending_booking.order.id})

    response = _post_json(client, VERIFY_URL, _callback(pending_booking, gateway))

    assert response.status_code == 409
    assert response.json()["code"] == "PAYMENT_NOT_PENDING"


def test_verify_bad_json(client, db):
    response = client.post(VERIFY_URL, "{oops", content_type="application/json")

    assert response.status_code == 400


def test_verify_rejects_get(client, db):
    assert client.get(VERIFY_URL).status_code == 405


# ── Failed ────────────────────────────────────────────────────────────────────

def test_failed_callback_cancels(client, pending_booking, car):
    response = _post_json(client, FAILED_URL, {"razorpay_order_id": pending_booking.order.id})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["booking_id"] == str(pending_booking.booking.id)
    assert body["booking_status"] == "cancelled"
    car.refresh_from_db()
    assert car.is_available is True


def test_failed_callback_for_unknown_order(client, pending_booking):
    response = _post_json(client, FAILED_URL, {"razorpay_order_id": "order_nope"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "booking_id": None, "booking_status": None}
    pending_booking.booking.refresh_from_db()
    assert pending_booking.booking.booking_status == BookingStatus.PENDING


def test_failed_callback_requires_order_id(client, db):
    response = _post_json(client, FAILED_URL, {})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


# ── Webhook ───────────────────────────────────────────────────────────────────

def test_webhook_captured_confirms(client, pending_booking, mailoutbox):
    response = _webhook(client, _event("payment.captured", pending_booking.order.id))

    assert response.status_code == 200
    payment = Payment.objects.get(razorpay_order_id=pending_booking.order.id)
    assert payment.payment_status == PaymentStatus.PAID
    assert payment.webhook_event_id == "evt_001"
    assert payment.booking.booking_status == BookingStatus.CONFIRMED
    assert len(mailoutbox) == 2


def test_webhook_replay_is_skipped(client, pending_booking, mailoutbox):
    event = _event("payment.captured", pending_booking.order.id)
    _webhook(client, event)

    response = _webhook(client, event)

    assert response.status_code == 200
    assert len(mailoutbox) == 2


def test_webhook_after_checkout_verify_does_not_renotify(client, pending_booking, gateway, mailoutbox):
    _post_json(client, VERIFY_URL, _callback(pending_booking, gateway))

    response = _webhook(client, _event("payment.captured", pending_booking.order.id))

    assert response.status_code == 200
    assert len(mailoutbox) == 2


def test_webhook_failed_cancels(client, pending_booking, car):
    event = _event("payment.failed", pending_booking.order.id, error_description="Bank declined")

    response = _webhook(client, event)

    assert response.status_code == 200
    booking = Payment.objects.get(razorpay_order_id=pending_booking.order.id).booking
    assert booking.booking_status == BookingStatus.CANCELLED
    assert booking.status_logs.get(to_status=BookingStatus.CANCELLED).reason == "Bank declined"
    car.refresh_from_db()
    assert car.is_available is True


def test_webhook_bad_signature(client, pending_booking):
    response = _webhook(client, _event("payment.captured", pending_booking.order.id), secret="wrong")

    assert response.status_code == 400
    pending_booking.booking.refresh_from_db()
    assert pending_booking.booking.booking_status == BookingStatus.PENDING


@pytest.mark.parametrize("payload", [
    {"id": "evt_x", "event": "order.paid", "payload": {}},
    {"id": "evt_y", "event": "payment.captured", "payload": {}},
    _event("payment.captured", "order_nope", event_id="evt_z"),
])
def test_webhook_answers_200_for_unusable_events(client, db, payload):
    assert _webhook(client, payload).status_code == 200


def test_webhook_rejects_get(client, db):
    assert client.get(WEBHOOK_URL).status_code == 405
