"""
DRF exception handler producing the API's JSON envelope:

    {"success": false, "message": "...", "code": "...", "errors": {...}}

``code`` appears when the exception carries a single string code and
``errors`` carries the full field map of a validation failure.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def first_message(detail) -> str:
    """Return the first human-readable message nested in a DRF error detail."""
    if isinstance(detail, dict):
        for value in detail.values():
            return first_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return first_message(detail[0]) if detail else ""
    return str(detail)


def envelope_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled error in %s",
            view.__class__.__name__ if view else "unknown view",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        set_rollback()
        return Response(
            {"success": False, "message": INTERNAL_ERROR_MESSAGE},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    payload = {"success": False, "message": first_message(response.data)}

    codes = exc.get_codes() if hasattr(exc, "get_codes") else None
    if isinstance(codes, str):
        payload["code"] = codes

    if isinstance(exc, ValidationError):
        payload["errors"] = response.data

    response.data = payload
    return response
