from datetime import timedelta
from decimal import Decimal

import pytest
from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.accounts.models import UserRole
from apps.accounts.serializers import issue_access_token
from apps.cars.models import Car, Dealer
from apps.payments.gateway import StubGateway

User = get_user_model()


@pytest.fixture
def customer(db):
    return User.objects.create_user(
        username="asha",
        email="asha@example.com",
        password="examplepass",
        first_name="Asha",
        role=UserRole.CUSTOMER,
    )


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(
        username="ravi",
        email="ravi@example.com",
        password="examplepass",
        role=UserRole.CUSTOMER,
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username="ops",
        email="ops@example.com",
        password="examplepass",
        role=UserRole.ADMIN,
    )


@pytest.fixture
def dealer(db):
    owner = User.objects.create_user(
        username="speedmotors",
        email="sales@speedmotors.example",
        password="examplepass",
        role=UserRole.DEALER,
    )
    return Dealer.objects.create(
        user=owner,
        business_name="Speed Motors",
        city="Bengaluru",
        phone="+91 98765 43210",
    )


@pytest.fixture
def car(dealer):
    return Car.objects.create(
        dealer=dealer,
        make="Hyundai",
        model="Creta",
        variant="SX",
        price=Decimal("1650000.00"),
        is_available=True,
    )


@pytest.fixture
def tomorrow():
    return (timezone.localdate() + timedelta(days=1)).isoformat()


@pytest.fixture
def gateway():
    """Stub gateway signing with the configured key secret, like the live checkout."""
    return StubGateway(key_id=settings.RAZORPAY_KEY_ID, key_secret=settings.RAZORPAY_KEY_SECRET)


@pytest.fixture
def auth():
    """auth(user) → extra kwargs for the Django test client carrying a bearer token."""
    def _auth(user):
        return {"HTTP_AUTHORIZATION": f"Bearer {issue_access_token(user)}"}
    return _auth


@pytest.fixture
def pending_booking(customer, car, tomorrow, gateway):
    """A freshly created pending booking (with payment and gateway order) for `customer`."""
    from apps.bookings.engine import create_pending_booking

    return create_pending_booking(customer, car.id, tomorrow, gateway=gateway)
