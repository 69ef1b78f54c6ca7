"""
REST error mapping.

Service errors and DRF's own exceptions leave the API in the same JSON shape
as the plain Django handlers in ``apps.core.error_handlers``.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from apps.core.exceptions import ServiceError

logger = logging.getLogger(__name__)

DRF_TITLES = {
    status.HTTP_400_BAD_REQUEST: ('Invalid request', 'validation_error'),
    status.HTTP_401_UNAUTHORIZED: ('Authentication required', 'not_authenticated'),
    status.HTTP_403_FORBIDDEN: ('Access forbidden', 'forbidden'),
    status.HTTP_404_NOT_FOUND: ('Resource not found', 'not_found'),
    status.HTTP_405_METHOD_NOT_ALLOWED: ('Method not allowed', 'method_not_allowed'),
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: ('Unsupported media type', 'unsupported_media_type'),
    status.HTTP_429_TOO_MANY_REQUESTS: ('Too many requests', 'throttled'),
}


def _log_service_error(exc, context):
    view = context.get('view')
    request = context.get('request')
    user_id = getattr(getattr(request, 'user', None), 'pk', None)
    if exc.status_code >= 500:
        logger.error("%s in %s for user %s: %s", exc.__class__.__name__, view.__class__.__name__, user_id, exc.message)
    else:
        logger.warning("%s in %s for user %s: %s", exc.__class__.__name__, view.__class__.__name__, user_id, exc.message)


def api_exception_handler(exc, context):
    if isinstance(exc, ServiceError):
        _log_service_error(exc, context)
        # ATOMIC_REQUESTS would otherwise commit the partial work of a failed call
        set_rollback()
        return Response(exc.as_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    title, code = DRF_TITLES.get(response.status_code, ('Request failed', 'error'))
    data = {
        'error': title,
        'code': code,
        'status_code': response.status_code,
    }
    if isinstance(response.data, dict) and 'detail' in response.data:
        data['message'] = str(response.data['detail'])
    elif isinstance(response.data, dict):
        data['message'] = 'The submitted data is invalid.'
        data['fields'] = response.data
    else:
        data['message'] = '; '.join(str(item) for item in response.data)
    response.data = data
    return response
