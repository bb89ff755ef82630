"""
API authentication decorators.

Bearer tokens are validated with simplejwt's JWTAuthentication, which reads
the Authorization header straight from request.META and loads the user named
by the token's userId claim. Views below these decorators can trust request.user.
"""
import logging
from functools import wraps

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken

from .http import api_error

logger = logging.getLogger(__name__)


def jwt_required(view_func):
    """Require a valid bearer token. 401 JSON otherwise."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            result = JWTAuthentication().authenticate(request)
        except InvalidToken:
            return api_error('Invalid or expired authentication token', status=401, code='AUTH_INVALID')
        except AuthenticationFailed as exc:
            logger.info('Bearer token rejected: %s', exc.detail)
            return api_error('User no longer exists or is inactive', status=401, code='AUTH_INVALID')

        if result is None:
            return api_error('Not authorized, token missing', status=401, code='AUTH_REQUIRED')

        request.user, request.auth = result
        return view_func(request, *args, **kwargs)
    return wrapper


def roles_required(*roles):
    """Restrict a jwt_required view to the given user roles. 403 JSON otherwise."""
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            if request.user.role not in roles:
                return api_error('Access denied', status=403, code='FORBIDDEN')
            return view_func(request, *args, **kwargs)
        return wrapper
    return decorator
