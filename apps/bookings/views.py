"""
Booking API views — bearer-authenticated JSON endpoints.

  GET  /api/bookings/preview/?carId=&booking_date=   preview (read only)
  POST /api/bookings/                                create pending booking + gateway order
  GET  /api/bookings/                                bookings visible to the caller
  GET  /api/bookings/<uuid>/                         one booking
"""
import logging

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from apps.accounts.models import UserRole
from apps.core.decorators import jwt_required, roles_required
from apps.core.http import api_error, api_error_from, read_payload

from .engine import create_pending_booking, get_booking_preview
from .exceptions import BookingEngineError
from .models import Booking
from .permissions import can_view_booking, visible_bookings

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _car_id(params):
    return params.get('carId') or params.get('car_id')


def _serialize_booking(booking: Booking) -> dict:
    payment = getattr(booking, 'payment', None)
    return {
        'id': booking.id,
        'car': {
            'id': booking.car.id,
            'name': booking.car.display_name,
        },
        'dealer': {
            'id': booking.dealer.id,
            'business_name': booking.dealer.business_name,
            'city': booking.dealer.city,
        },
        'booking_date': booking.booking_date,
        'platform_fee': booking.platform_fee,
        'booking_status': booking.booking_status,
        'payment_status': booking.payment_status,
        'dealer_payment_status': booking.dealer_payment_status,
        'payment': {
            'order_id': payment.razorpay_order_id,
            'transaction_id': payment.transaction_id,
            'amount': payment.amount,
            'currency': payment.currency,
            'payment_status': payment.payment_status,
        } if payment else None,
        'created_at': booking.created_at,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Preview
# ─────────────────────────────────────────────────────────────────────────────

@require_GET
@jwt_required
def booking_preview(request):
    try:
        preview = get_booking_preview(_car_id(request.GET), request.GET.get('booking_date'))
    except BookingEngineError as exc:
        return api_error_from(exc)
    except Exception as exc:
        logger.exception('Preview booking error: %s', exc)
        return api_error('Failed to load booking preview', status=500, code='INTERNAL_ERROR')

    return JsonResponse({'success': True, 'booking_preview': preview})


# ─────────────────────────────────────────────────────────────────────────────
# Create / list
# ─────────────────────────────────────────────────────────────────────────────

@csrf_exempt
@require_http_methods(['GET', 'POST'])
@jwt_required
def bookings(request):
    if request.method == 'GET':
        return _list_bookings(request)
    return _create_booking(request)


def _list_bookings(request):
    results = [_serialize_booking(b) for b in visible_bookings(request.user)]
    return JsonResponse({'success': True, 'count': len(results), 'bookings': results})


@roles_required(UserRole.CUSTOMER, UserRole.DEALER)
def _create_booking(request):
    data = read_payload(request)
    if data is None:
        return api_error('Invalid JSON')

    try:
        pending = create_pending_booking(
            user=request.user,
            car_id=_car_id(data),
            booking_date=data.get('booking_date'),
        )
    except BookingEngineError as exc:
        return api_error_from(exc)

    return JsonResponse({
        'success': True,
        'booking_id': pending.booking.id,
        'razorpay': {
            'order_id': pending.order.id,
            'amount': pending.order.amount,
            'currency': pending.order.currency,
            'key': settings.RAZORPAY_KEY_ID,
        },
    }, status=201)


# ─────────────────────────────────────────────────────────────────────────────
# Detail
# ─────────────────────────────────────────────────────────────────────────────

@require_GET
@jwt_required
def booking_detail(request, booking_id):
    booking = (
        Booking.objects
        .select_related('car', 'dealer', 'payment')
        .filter(id=booking_id)
        .first()
    )
    if booking is None:
        return api_error('Booking not found', status=404, code='NOT_FOUND')
    if not can_view_booking(request.user, booking):
        return api_error('Access denied', status=403, code='FORBIDDEN')

    return JsonResponse({'success': True, 'booking': _serialize_booking(booking)})
