"""
Request logging middleware for API calls.
"""
import logging
import time

from django.conf import settings

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """
    Logs method, path, status, caller and duration for every /api/ request.

    DRF copies the authenticated user back onto the Django request, so
    `request.user` is current by the time the response comes back.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.path.startswith('/api/'):
            return self.get_response(request)

        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = (time.monotonic() - started) * 1000

        user_id = getattr(getattr(request, 'user', None), 'id', None)

        logger.info(
            "%s %s -> %s user_id=%s has_access_token=%s (%.1f ms)",
            request.method,
            request.path,
            response.status_code,
            user_id,
            settings.AUTH_COOKIE_NAME in request.COOKIES,
            elapsed_ms,
        )
        return response
