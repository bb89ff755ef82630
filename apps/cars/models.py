"""
Dealer and Car — the bookable inventory.

A car is bookable while is_available is True. The booking engine flips the
flag off under a row lock when a booking is created, and the payment failure
path flips it back on when that booking is cancelled.
"""
from django.conf import settings
from django.db import models
from apps.core.models import BaseModel


class Dealer(BaseModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='dealer_profile',
    )
    business_name = models.CharField(max_length=160)
    city = models.CharField(max_length=80)
    # Never exposed by the booking API
    phone = models.CharField(max_length=20, blank=True)

    class Meta:
        verbose_name = 'Dealer'
        verbose_name_plural = 'Dealers'
        ordering = ['business_name']

    def __str__(self):
        return f"{self.business_name} ({self.city})"

    @property
    def contact_email(self):
        return self.user.email


class Car(BaseModel):
    dealer = models.ForeignKey(Dealer, on_delete=models.PROTECT, related_name='cars')
    make = models.CharField(max_length=60)
    model = models.CharField(max_length=60)
    variant = models.CharField(max_length=60, blank=True)
    # Display only; the platform never collects the car price
    price = models.DecimalField(max_digits=12, decimal_places=2)
    is_available = models.BooleanField(default=True, db_index=True)

    class Meta:
        verbose_name = 'Car'
        verbose_name_plural = 'Cars'
        ordering = ['make', 'model']

    def __str__(self):
        return self.display_name

    @property
    def display_name(self):
        return f"{self.make} {self.model} {self.variant}".strip()
