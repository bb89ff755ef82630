"""
management command: cancel_stale_bookings

Cancels pending bookings whose platform fee was never paid, releasing
their cars. Goes through the same failure transition as the gateway's
failure callback, so booking, payment and car stay consistent.

Run via OS cron every 5 minutes:
  */5 * * * *  /path/to/venv/bin/python manage.py cancel_stale_bookings
"""
from datetime import timedelta
from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone
from apps.bookings.models import BookingStatus, PaymentStatus
from apps.payments.models import Payment
from apps.payments.services import fail_payment


class Command(BaseCommand):
    help = 'Cancel pending bookings older than BOOKING_PENDING_TTL_MINUTES and release their cars'

    def add_arguments(self, parser):
        parser.add_argument(
            '--minutes', type=int, default=None,
            help='Override BOOKING_PENDING_TTL_MINUTES for this run',
        )

    def handle(self, *args, **options):
        ttl = options['minutes'] or settings.BOOKING_PENDING_TTL_MINUTES
        cutoff = timezone.now() - timedelta(minutes=ttl)

        stale_orders = list(
            Payment.objects.filter(
                payment_status=PaymentStatus.PENDING,
                booking__booking_status=BookingStatus.PENDING,
                booking__created_at__lt=cutoff,
            ).values_list('razorpay_order_id', flat=True)
        )

        count = 0
        for order_id in stale_orders:
            # Re-checked under lock: a late success callback wins
            booking = fail_payment(
                order_id,
                changed_by='cron',
                reason=f'Platform fee not paid within {ttl} minutes',
            )
            if booking is not None and booking.booking_status == BookingStatus.CANCELLED:
                count += 1

        self.stdout.write(
            self.style.SUCCESS(f'cancel_stale_bookings: cancelled {count} bookings')
        )
