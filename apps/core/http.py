"""
JSON helpers shared by the API views.

Every error leaves the service in the same envelope:
  {"success": false, "message": "...", "code": "..."}
"""
import json

from django.http import JsonResponse


def api_error(message: str, status: int = 400, code: str = 'VALIDATION_ERROR') -> JsonResponse:
    return JsonResponse({'success': False, 'message': message, 'code': code}, status=status)


def api_error_from(exc) -> JsonResponse:
    """Render a BookingEngineError (anything with code/status attributes)."""
    return api_error(str(exc), status=exc.status, code=exc.code)


def read_payload(request) -> dict:
    """
    Body parameters from either a JSON body or a form post.
    The Razorpay checkout posts its callback form-encoded; API clients send JSON.
    Returns None when a JSON body cannot be decoded.
    """
    content_type = request.content_type or ''
    if content_type.startswith('application/json'):
        try:
            data = json.loads(request.body or b'{}')
        except json.JSONDecodeError:
            return None
        return data if isinstance(data, dict) else None
    return request.POST.dict()
