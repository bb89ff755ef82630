"""
Email notification service for car bookings.

All functions are synchronous (no task queue).
Called from payments.services after a confirmation has committed.

Public API:
  send_booking_notifications(booking) -> bool
  send_customer_booking_confirmed(booking) -> bool
  send_dealer_new_booking(booking) -> bool
"""
import logging
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


def _load_booking(booking):
    """Re-read the booking with everything the emails need in one query."""
    from apps.bookings.models import Booking

    return Booking.objects.select_related('user', 'car', 'dealer', 'dealer__user').get(id=booking.id)


def _booking_context(booking) -> dict:
    """Common template context for both booking emails."""
    customer = booking.user
    dealer = booking.dealer
    return {
        'customer_name':  customer.display_name,
        'customer_email': customer.email,
        'dealer_name':    dealer.business_name,
        'dealer_email':   dealer.contact_email,
        'dealer_city':    dealer.city,
        'car_name':       booking.car.display_name,
        'booking_date':   booking.booking_date,
        'platform_fee':   booking.platform_fee,
        'booking_ref':    booking.id_short,
        'support_email':  settings.DEFAULT_FROM_EMAIL,
    }


def _send(subject: str, to_email: str, html_template: str, txt_template: str, context: dict) -> bool:
    """Low-level send helper — multipart email with HTML + text fallback. True on success."""
    if not to_email:
        logger.warning('Email "%s" skipped — no address (booking ref %s)', subject, context.get('booking_ref'))
        return False

    try:
        text_body = render_to_string(txt_template, context)
        html_body = render_to_string(html_template, context)

        msg = EmailMultiAlternatives(
            subject=subject,
            body=text_body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[to_email],
        )
        msg.attach_alternative(html_body, 'text/html')
        msg.send(fail_silently=False)
        logger.info('Email "%s" sent to %s', subject, to_email)
        return True
    except Exception as exc:
        # The booking is already committed; report, never raise
        logger.exception('Failed to send email "%s" to %s: %s', subject, to_email, exc)
        return False


# ─────────────────────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────────────────────

def send_customer_booking_confirmed(booking) -> bool:
    ctx = _booking_context(booking)
    return _send(
        subject='Your Car Booking is Confirmed',
        to_email=ctx['customer_email'],
        html_template='emails/customer_booking_confirmed.html',
        txt_template='emails/customer_booking_confirmed.txt',
        context=ctx,
    )


def send_dealer_new_booking(booking) -> bool:
    ctx = _booking_context(booking)
    return _send(
        subject='New Car Booking Received',
        to_email=ctx['dealer_email'],
        html_template='emails/dealer_new_booking.html',
        txt_template='emails/dealer_new_booking.txt',
        context=ctx,
    )


def send_booking_notifications(booking) -> bool:
    """
    Customer confirmation + dealer alert for a freshly confirmed booking.
    Both are attempted even if the first fails. True only if both went out.
    """
    booking = _load_booking(booking)
    customer_ok = send_customer_booking_confirmed(booking)
    dealer_ok = send_dealer_new_booking(booking)
    return customer_ok and dealer_ok
