"""
Project-wide error handlers.

The service is API-only, so every handler answers with the same JSON
envelope the DRF exception handler uses: ``error``, ``status_code`` and
``message``.
"""

from django.http import JsonResponse
from django.views.decorators.csrf import requires_csrf_token
from django.views.decorators.cache import never_cache
import logging

logger = logging.getLogger(__name__)


def _error_response(status, title, message, **extra):
    payload = {
        'error': title,
        'status_code': status,
        'message': message,
    }
    payload.update(extra)
    return JsonResponse(payload, status=status)


@never_cache
@requires_csrf_token
def handler404(request, exception=None):
    """Custom 404 error handler."""
    logger.warning(f"404 error for path: {request.path} from IP: {request.META.get('REMOTE_ADDR')}")
    return _error_response(
        404,
        'Resource not found',
        'The requested resource does not exist.',
        path=request.path,
    )


@never_cache
@requires_csrf_token
def handler500(request):
    """Custom 500 error handler."""
    logger.error(f"500 error for path: {request.path} from IP: {request.META.get('REMOTE_ADDR')}")
    return _error_response(
        500,
        'Internal server error',
        'An unexpected error occurred. Please try again later.',
    )


@never_cache
@requires_csrf_token
def handler403(request, exception=None):
    """Custom 403 error handler."""
    logger.warning(f"403 error for path: {request.path} from IP: {request.META.get('REMOTE_ADDR')}")
    return _error_response(
        403,
        'Access forbidden',
        'You do not have permission to access this resource.',
    )


def csrf_failure(request, reason=""):
    """Custom CSRF failure handler."""
    logger.warning(f"CSRF failure for path: {request.path} from IP: {request.META.get('REMOTE_ADDR')} - Reason: {reason}")
    return _error_response(
        403,
        'CSRF verification failed',
        'CSRF token missing or incorrect. Please refresh the page and try again.',
    )
