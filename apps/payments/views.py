"""
Payment callback views.

Flow:
  1. POST /api/bookings/  → car locked → PENDING booking + payment → Razorpay order
  2. Client opens the Razorpay checkout with the returned order id
  3. verify   → checkout success handler posts ids + signature
              → verify signature → CONFIRMED → emails to customer and dealer
  4. failed   → checkout failure/dismissal → CANCELLED, car released
  5. webhook  → Razorpay server-side event → authoritative, idempotent copy of 3/4

None of these redirect or render: callers are the gateway or a client SDK
and get machine-readable JSON back.
"""
import json
import logging

from django.conf import settings
from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from apps.bookings.exceptions import BookingEngineError
from apps.core.http import api_error, api_error_from, read_payload

from .gateway import verify_webhook_signature
from .models import Payment
from .services import confirm_captured_payment, fail_payment, verify_payment

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Verify (checkout success)
# ─────────────────────────────────────────────────────────────────────────────

@csrf_exempt
@require_POST
def verify_payment_callback(request):
    data = read_payload(request)
    if data is None:
        return api_error('Invalid JSON')

    order_id = data.get('razorpay_order_id', '')
    try:
        result = verify_payment(
            order_id=order_id,
            payment_id=data.get('razorpay_payment_id', ''),
            signature=data.get('razorpay_signature', ''),
        )
    except BookingEngineError as exc:
        return api_error_from(exc)
    except Exception as exc:
        logger.exception('Verify payment error for order %s: %s', order_id, exc)
        return api_error('Payment verification failed', status=500, code='INTERNAL_ERROR')

    if result.already_confirmed:
        message = 'Payment already verified, booking confirmed'
    elif result.notifications_sent:
        message = 'Payment verified, booking confirmed, notifications sent'
    else:
        message = 'Payment verified, booking confirmed; notification delivery failed'

    return JsonResponse({
        'success': True,
        'booking_id': result.booking.id,
        'booking_status': result.booking.booking_status,
        'payment_status': result.booking.payment_status,
        'already_confirmed': result.already_confirmed,
        'notifications_sent': result.notifications_sent,
        'message': message,
    })


# ─────────────────────────────────────────────────────────────────────────────
# Failed (checkout failure / dismissal)
# ─────────────────────────────────────────────────────────────────────────────

@csrf_exempt
@require_POST
def payment_failed_callback(request):
    data = read_payload(request)
    if data is None:
        return api_error('Invalid JSON')

    order_id = data.get('razorpay_order_id', '')
    try:
        booking = fail_payment(order_id, changed_by='callback')
    except BookingEngineError as exc:
        return api_error_from(exc)
    except Exception as exc:
        logger.exception('Payment failure callback error for order %s: %s', order_id, exc)
        return api_error('Could not record payment failure', status=500, code='INTERNAL_ERROR')

    return JsonResponse({
        'success': True,
        'booking_id': booking.id if booking else None,
        'booking_status': booking.booking_status if booking else None,
    })


# ─────────────────────────────────────────────────────────────────────────────
# Razorpay Webhook (server-to-server — authoritative)
# ─────────────────────────────────────────────────────────────────────────────

@csrf_exempt
def razorpay_webhook(request):
    """
    Razorpay fires this endpoint for every payment event.
    Must be CSRF-exempt; security comes from HMAC-SHA256 signature check.
    Always answers 200 once authenticated so Razorpay does not retry forever.
    """
    if request.method != 'POST':
        logger.warning('Webhook: Received non-POST request.')
        return HttpResponse(status=405)

    raw_body = request.body
    signature = request.headers.get('X-Razorpay-Signature', '')

    if not verify_webhook_signature(settings.RAZORPAY_WEBHOOK_SECRET, raw_body, signature):
        logger.warning('Webhook signature verification failed.')
        return HttpResponse(status=400)

    try:
        payload = json.loads(raw_body)
    except json.JSONDecodeError:
        return HttpResponse(status=400)

    event = payload.get('event', '')
    event_id = payload.get('id') or None

    # Idempotency: skip if already processed
    if event_id and Payment.objects.filter(webhook_event_id=event_id).exists():
        logger.info('Webhook event %s already processed — skipping.', event_id)
        return HttpResponse(status=200)

    try:
        if event in ('payment.captured', 'payment.failed'):
            entity = payload['payload']['payment']['entity']
            order_id = entity['order_id']

            if event == 'payment.captured':
                result = confirm_captured_payment(order_id, entity['id'], event_id=event_id)
                logger.info('Webhook %s: booking %s confirmed', event_id, result.booking.id)
            else:
                fail_payment(order_id, changed_by='webhook',
                             reason=entity.get('error_description') or '', event_id=event_id)
        else:
            logger.info('Webhook event %s (%s) ignored', event_id, event)
    except BookingEngineError as exc:
        logger.warning('Webhook %s (%s) not applied: %s', event_id, event, exc)
    except Exception as exc:
        # Webhook must never crash or return 500
        logger.exception('Webhook processing error: %s', exc)

    return HttpResponse(status=200)
