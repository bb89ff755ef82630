"""
Payment model — the gateway side of a booking. One Payment per Booking.

Created pending together with the booking, before the customer pays.
Moves to paid or failed in the same transaction as its booking.

razorpay_order_id is unique outright; transaction_id and webhook_event_id
are only unique once populated (conditional constraints, NULL-safe).
"""
from django.db import models
from django.utils import timezone
from apps.core.models import UUIDModel, TimestampedModel
from apps.bookings.models import Booking, PaymentStatus


class Payment(UUIDModel, TimestampedModel):
    booking = models.OneToOneField(
        Booking, on_delete=models.CASCADE, related_name='payment',
    )
    payment_method = models.CharField(max_length=20, default='razorpay')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='INR')
    razorpay_order_id = models.CharField(max_length=100)
    # Gateway payment id; only populated once the gateway confirms
    transaction_id = models.CharField(max_length=100, blank=True, null=True)
    razorpay_signature = models.CharField(max_length=255, blank=True)
    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING, db_index=True,
    )
    webhook_event_id = models.CharField(max_length=100, blank=True, null=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['razorpay_order_id'],
                name='uq_payment_razorpay_order_id',
            ),
            models.UniqueConstraint(
                fields=['transaction_id'],
                condition=models.Q(transaction_id__isnull=False),
                name='uq_payment_transaction_id',
            ),
            models.UniqueConstraint(
                fields=['webhook_event_id'],
                condition=models.Q(webhook_event_id__isnull=False),
                name='uq_payment_webhook_event_id',
            ),
        ]

    def __str__(self):
        return f"Payment {self.razorpay_order_id} [{self.payment_status}] ₹{self.amount}"

    @property
    def is_pending(self):
        return self.payment_status == PaymentStatus.PENDING

    def mark_paid(self, transaction_id: str, signature: str = '', webhook_event_id=None):
        self.payment_status = PaymentStatus.PAID
        self.transaction_id = transaction_id
        self.razorpay_signature = signature or ''
        self.paid_at = timezone.now()
        update_fields = ['payment_status', 'transaction_id', 'razorpay_signature', 'paid_at', 'updated_at']
        if webhook_event_id:
            self.webhook_event_id = webhook_event_id
            update_fields.append('webhook_event_id')
        self.save(update_fields=update_fields)

    def mark_failed(self, webhook_event_id=None):
        self.payment_status = PaymentStatus.FAILED
        update_fields = ['payment_status', 'updated_at']
        if webhook_event_id:
            self.webhook_event_id = webhook_event_id
            update_fields.append('webhook_event_id')
        self.save(update_fields=update_fields)
