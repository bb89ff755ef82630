"""
Seed management command.

Populates the database with local demo data:
  - 1 admin, 1 customer, 2 dealer users
  - 2 dealerships
  - 5 available cars

Every seeded user gets the password given by --password (default 'autobook123').

Usage:
    python manage.py seed_data
    python manage.py seed_data --flush   # wipe cars/dealers and re-seed
"""
from decimal import Decimal
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from apps.accounts.models import UserRole
from apps.cars.models import Car, Dealer

User = get_user_model()


class Command(BaseCommand):
    help = 'Seed demo users, dealerships and cars'

    def add_arguments(self, parser):
        parser.add_argument(
            '--flush', action='store_true',
            help='Delete cars and dealers that have no bookings before re-seeding',
        )
        parser.add_argument('--password', default='autobook123')

    def _user(self, username, role, password, **extra):
        user, created = User.objects.get_or_create(
            username=username,
            defaults={'email': f'{username}@autobook.example', 'role': role, **extra},
        )
        if created:
            user.set_password(password)
            user.save(update_fields=['password'])
        return user

    @transaction.atomic
    def handle(self, *args, **options):
        password = options['password']

        if options['flush']:
            self.stdout.write('Flushing unbooked cars and dealers...')
            Car.all_objects.filter(bookings__isnull=True).delete()
            Dealer.all_objects.filter(cars__isnull=True, bookings__isnull=True).delete()

        # ── Users ─────────────────────────────────────────────────────────────
        self.stdout.write('Seeding users...')
        self._user('admin', UserRole.ADMIN, password, is_staff=True, is_superuser=True)
        self._user('customer', UserRole.CUSTOMER, password, first_name='Asha')
        dealer_user1 = self._user('speedmotors', UserRole.DEALER, password)
        dealer_user2 = self._user('citywheels', UserRole.DEALER, password)
        self.stdout.write(self.style.SUCCESS('  ✔ 4 users created'))

        # ── Dealers ───────────────────────────────────────────────────────────
        self.stdout.write('Seeding dealers...')
        dealer1, _ = Dealer.objects.get_or_create(
            user=dealer_user1,
            defaults={'business_name': 'Speed Motors', 'city': 'Bengaluru', 'phone': '+91 98765 43210'},
        )
        dealer2, _ = Dealer.objects.get_or_create(
            user=dealer_user2,
            defaults={'business_name': 'City Wheels', 'city': 'Kochi', 'phone': '+91 98765 43211'},
        )
        self.stdout.write(self.style.SUCCESS('  ✔ 2 dealers created'))

        # ── Cars ──────────────────────────────────────────────────────────────
        self.stdout.write('Seeding cars...')
        cars_data = [
            {'dealer': dealer1, 'make': 'Maruti Suzuki', 'model': 'Swift', 'variant': 'ZXi', 'price': '749000'},
            {'dealer': dealer1, 'make': 'Hyundai', 'model': 'Creta', 'variant': 'SX', 'price': '1650000'},
            {'dealer': dealer1, 'make': 'Tata', 'model': 'Nexon', 'variant': 'EV Max', 'price': '1849000'},
            {'dealer': dealer2, 'make': 'Mahindra', 'model': 'XUV700', 'variant': 'AX7', 'price': '2299000'},
            {'dealer': dealer2, 'make': 'Honda', 'model': 'City', 'variant': '', 'price': '1199000'},
        ]
        for car in cars_data:
            Car.objects.get_or_create(
                dealer=car['dealer'], make=car['make'], model=car['model'], variant=car['variant'],
                defaults={'price': Decimal(car['price']), 'is_available': True},
            )
        self.stdout.write(self.style.SUCCESS('  ✔ 5 cars created'))

        self.stdout.write(self.style.SUCCESS(f"\n✅ Seed complete! Log in as 'customer' / '{password}'."))
