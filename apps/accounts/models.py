"""
User model — every API caller is a User with a role.
The role travels inside the JWT as the `role` claim.
"""
from django.contrib.auth.models import AbstractUser
from django.db import models


class UserRole(models.TextChoices):
    CUSTOMER = 'customer', 'Customer'
    DEALER   = 'dealer',   'Dealer'
    ADMIN    = 'admin',    'Admin'


class User(AbstractUser):
    role = models.CharField(
        max_length=10, choices=UserRole.choices, default=UserRole.CUSTOMER, db_index=True,
    )

    @property
    def is_admin_role(self):
        return self.role == UserRole.ADMIN

    @property
    def display_name(self):
        return self.get_full_name() or self.username
