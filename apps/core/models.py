"""
Shared abstract models for the booking apps.
"""
import uuid
from django.db import models
from django.utils import timezone


class UUIDModel(models.Model):
    """UUID primary key; ids travel to the payment gateway as receipts."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True


class TimestampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ListedQuerySet(models.QuerySet):
    def listed(self):
        return self.filter(delisted_at__isnull=True)


class ListedManager(models.Manager):
    """Default manager hiding delisted rows."""
    def get_queryset(self):
        return ListedQuerySet(self.model, using=self._db).listed()


class DelistableModel(models.Model):
    """
    Rows referenced by bookings are never physically removed.
    delist() hides the row from the default manager; all_objects still sees it.
    """
    delisted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = ListedManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True

    def delist(self):
        self.delisted_at = timezone.now()
        self.save(update_fields=['delisted_at'])


class BaseModel(UUIDModel, TimestampedModel, DelistableModel):
    """UUID pk + timestamps + delisting, for dealer-owned catalogue records."""
    class Meta:
        abstract = True
