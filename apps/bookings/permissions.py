"""
Capability checks: (actor, resource) → bool.

Views and engine code ask these functions instead of comparing roles and
owner ids inline, so the rules can be tested without HTTP.
"""
from apps.accounts.models import UserRole

from .models import Booking


def _dealer_user_id(dealer):
    return dealer.user_id if dealer is not None else None


def can_book_car(actor, car) -> bool:
    """Any active user may book, except a dealer booking their own stock."""
    if actor is None or not actor.is_active:
        return False
    return _dealer_user_id(car.dealer) != actor.id


def can_view_booking(actor, booking) -> bool:
    """The customer who booked, the dealer holding the car, or an admin."""
    if actor is None or not actor.is_active:
        return False
    if actor.is_admin_role:
        return True
    if booking.user_id == actor.id:
        return True
    return _dealer_user_id(booking.dealer) == actor.id


def visible_bookings(actor):
    """Queryset of bookings the actor may list."""
    qs = Booking.objects.select_related('car', 'dealer', 'payment')
    if actor.is_admin_role:
        return qs
    if actor.role == UserRole.DEALER:
        return qs.filter(dealer__user=actor)
    return qs.filter(user=actor)
