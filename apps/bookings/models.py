"""
Bookings app models:
  - Booking          : a car reserved for a date against the platform fee
  - BookingStatusLog : audit trail of state transitions
"""
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from apps.core.models import UUIDModel, TimestampedModel
from apps.cars.models import Car, Dealer


# ── Booking State Machine ─────────────────────────────────────────────────────
#
#   pending ──(payment verified)──> confirmed   [terminal]
#   pending ──(payment failed)────> cancelled   [terminal]

class BookingStatus(models.TextChoices):
    PENDING   = 'pending',   'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    CANCELLED = 'cancelled', 'Cancelled'


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID    = 'paid',    'Paid'
    FAILED  = 'failed',  'Failed'


class InvalidTransition(Exception):
    """A terminal booking was asked to move again."""


class Booking(UUIDModel, TimestampedModel):
    """
    Created in pending/pending/pending by the booking engine, together with its
    Payment, inside the transaction holding the car's row lock.
    Status fields are only written through confirm() and cancel().
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='car_bookings',
    )
    car = models.ForeignKey(Car, on_delete=models.PROTECT, related_name='bookings')
    dealer = models.ForeignKey(Dealer, on_delete=models.PROTECT, related_name='bookings')
    booking_date = models.DateField(db_index=True)
    platform_fee = models.DecimalField(
        max_digits=10, decimal_places=2, validators=[MinValueValidator(0)],
    )

    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING,
    )
    booking_status = models.CharField(
        max_length=10, choices=BookingStatus.choices,
        default=BookingStatus.PENDING, db_index=True,
    )
    dealer_payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING,
    )
    # Settlement reference recorded once the dealer is paid out
    dealer_payment_reference = models.CharField(max_length=100, blank=True, null=True)

    class Meta:
        verbose_name = 'Booking'
        verbose_name_plural = 'Bookings'
        ordering = ['-created_at']
        constraints = [
            # Only the three reachable status pairs may be stored
            models.CheckConstraint(
                condition=(
                    models.Q(booking_status='pending', payment_status='pending')
                    | models.Q(booking_status='confirmed', payment_status='paid')
                    | models.Q(booking_status='cancelled', payment_status='failed')
                ),
                name='ck_booking_status_pair',
            ),
            # DB-level guard: one live booking per car
            models.UniqueConstraint(
                fields=['car'],
                condition=models.Q(booking_status__in=['pending', 'confirmed']),
                name='uq_active_booking_per_car',
            ),
        ]

    def __str__(self):
        return f"#{self.id_short} | {self.car} | {self.booking_date} [{self.booking_status}]"

    @property
    def id_short(self):
        return str(self.id)[:8].upper()

    @property
    def is_terminal(self):
        return self.booking_status != BookingStatus.PENDING

    # ── State transition helpers ──────────────────────────────────────────────

    def confirm(self, changed_by='system'):
        """pending → confirmed, payment paid. Dealer payout starts pending."""
        self._transition(BookingStatus.CONFIRMED, changed_by)
        self.payment_status = PaymentStatus.PAID
        self.dealer_payment_status = PaymentStatus.PENDING
        self.dealer_payment_reference = None
        self.save(update_fields=[
            'booking_status', 'payment_status', 'dealer_payment_status',
            'dealer_payment_reference', 'updated_at',
        ])

    def cancel(self, changed_by='system', reason=''):
        """pending → cancelled, payment failed. Nothing owed to the dealer."""
        self._transition(BookingStatus.CANCELLED, changed_by, reason)
        self.payment_status = PaymentStatus.FAILED
        self.dealer_payment_status = PaymentStatus.FAILED
        self.dealer_payment_reference = None
        self.save(update_fields=[
            'booking_status', 'payment_status', 'dealer_payment_status',
            'dealer_payment_reference', 'updated_at',
        ])

    def _transition(self, new_status, changed_by, reason=''):
        old_status = self.booking_status
        if self.is_terminal:
            raise InvalidTransition(f"Booking {self.id_short} is already {old_status}")
        self.booking_status = new_status
        BookingStatusLog.objects.create(
            booking=self,
            from_status=old_status,
            to_status=new_status,
            changed_by=changed_by,
            reason=reason,
        )


# ── Booking Audit Log ─────────────────────────────────────────────────────────

class BookingStatusLog(UUIDModel):
    """Immutable audit trail of every status transition on a booking."""
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='status_logs')
    from_status = models.CharField(max_length=10, choices=BookingStatus.choices, blank=True)
    to_status = models.CharField(max_length=10, choices=BookingStatus.choices)
    changed_by = models.CharField(max_length=80, help_text='customer / callback / webhook / cron')
    reason = models.TextField(blank=True)
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Booking Status Log'
        verbose_name_plural = 'Booking Status Logs'
        ordering = ['changed_at']

    def __str__(self):
        return f"Booking {str(self.booking_id)[:8]}: {self.from_status or '∅'} → {self.to_status}"
