from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command

from apps.accounts.models import UserRole
from apps.cars.models import Car, Dealer

User = get_user_model()


def _seed(*args):
    call_command("seed_data", *args, stdout=StringIO())


def test_seed_data_creates_demo_records(db):
    _seed()

    assert User.objects.count() == 4
    assert User.objects.get(username="admin").role == UserRole.ADMIN
    assert User.objects.get(username="customer").check_password("autobook123")
    assert Dealer.objects.count() == 2
    assert Car.objects.filter(is_available=True).count() == 5


def test_seed_data_is_idempotent(db):
    _seed()
    _seed("--flush")

    assert User.objects.count() == 4
    assert Dealer.objects.count() == 2
    assert Car.objects.count() == 5


def test_seed_data_password_option(db):
    _seed("--password", "s3cret-pass")

    assert User.objects.get(username="speedmotors").check_password("s3cret-pass")
