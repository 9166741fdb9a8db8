"""
Request ID Middleware for Newskoop.

Generates and propagates unique request IDs for tracing.

Features:
- Accepts incoming X-Request-ID header, generates a UUID otherwise
- Adds request ID to response headers
- Injects request ID into thread-local logging context
- Logs request completion with duration and feeds the HTTP metrics
- Provides context for Celery task correlation

Access request ID in views:
    from apps.core.middleware import get_request_id

    def my_view(request):
        request_id = get_request_id()
        # or
        request_id = request.request_id
"""

import time
import uuid
import threading
import logging
from django.utils.deprecation import MiddlewareMixin

from apps.core.metrics import increment_http_request, observe_http_duration

logger = logging.getLogger(__name__)

# Thread-local storage for request context
_request_context = threading.local()


def get_request_id():
    """
    Get the current request ID from thread-local storage.

    Returns None if called outside of a request context.
    """
    return getattr(_request_context, 'request_id', None)


def get_request_context():
    return {
        'request_id': getattr(_request_context, 'request_id', None),
        'user_id': getattr(_request_context, 'user_id', None),
        'path': getattr(_request_context, 'path', None),
    }


def set_request_context(request_id, user_id=None, path=None):
    """
    Set request context in thread-local storage.

    Useful for setting context in Celery tasks.
    """
    _request_context.request_id = request_id
    _request_context.user_id = user_id
    _request_context.path = path


def clear_request_context():
    _request_context.request_id = None
    _request_context.user_id = None
    _request_context.path = None


class RequestIDMiddleware(MiddlewareMixin):
    """
    Middleware to handle request IDs for tracing.

    Flow:
    1. Check for incoming X-Request-ID header
    2. Generate new UUID if not present or malformed
    3. Store in thread-local for access in views/logging
    4. Attach to request object as request.request_id
    5. Add to response headers and log the request
    """

    REQUEST_ID_HEADER = 'HTTP_X_REQUEST_ID'
    RESPONSE_HEADER = 'X-Request-ID'

    def process_request(self, request):
        request_id = request.META.get(self.REQUEST_ID_HEADER)

        if request_id:
            try:
                uuid.UUID(request_id)
            except (ValueError, TypeError):
                request_id = str(uuid.uuid4())
        else:
            request_id = str(uuid.uuid4())

        _request_context.request_id = request_id
        _request_context.path = request.path

        if hasattr(request, 'user') and request.user.is_authenticated:
            _request_context.user_id = str(request.user.id)
        else:
            _request_context.user_id = None

        request.request_id = request_id
        request._started_at = time.perf_counter()

        return None

    def process_response(self, request, response):
        request_id = getattr(request, 'request_id', None)

        if request_id:
            response[self.RESPONSE_HEADER] = request_id

        started = getattr(request, '_started_at', None)
        if started is not None:
            duration = time.perf_counter() - started
            observe_http_duration(duration)
            increment_http_request(response.status_code)
            logger.info(
                "%s %s %s %.1fms",
                request.method,
                request.path,
                response.status_code,
                duration * 1000,
                extra={'request_id': request_id, 'status_code': response.status_code},
            )

        clear_request_context()

        return response


class RequestIDFilter(logging.Filter):
    """
    Logging filter that adds request_id to log records.

    Wired into the LOGGING config as the ``request_id`` filter.
    """

    def filter(self, record):
        if not getattr(record, 'request_id', None):
            record.request_id = get_request_id() or '-'
        return True


def celery_request_id_headers():
    """
    Get headers to pass to Celery tasks for correlation.

    Usage:
        task.apply_async(args=[...], headers=celery_request_id_headers())
    """
    request_id = get_request_id()
    if request_id:
        return {'request_id': request_id}
    return {}


def setup_celery_request_context(headers):
    """Set up request context in a Celery task from its headers."""
    request_id = headers.get('request_id')
    if request_id:
        set_request_context(request_id)
    else:
        set_request_context(str(uuid.uuid4()))
