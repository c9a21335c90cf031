from __future__ import annotations

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class FoodResQError(Exception):
    """Base class for errors that map onto an API status code."""

    status_code = 500
    default_message = "Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FoodResQError):
    status_code = 400
    default_message = "Invalid input"


class AuthenticationError(FoodResQError):
    status_code = 401
    default_message = "Not authorized to access this route"


class AuthorizationError(FoodResQError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFoundError(FoodResQError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(FoodResQError):
    # Conflicts are reported as bad requests, same as the rest of the API.
    status_code = 400
    default_message = "Request conflicts with the current state"


class UnexpectedError(FoodResQError):
    status_code = 500


def first_error_message(data) -> str:
    """Flatten DRF error payloads to the first human readable message."""
    if isinstance(data, dict):
        if "detail" in data:
            return str(data["detail"])
        for field, errors in data.items():
            message = first_error_message(errors)
            if field == "non_field_errors":
                return message
            return f"{field}: {message}"
        return "Invalid input"
    if isinstance(data, (list, tuple)):
        return first_error_message(data[0]) if data else "Invalid input"
    return str(data)


def _error_response(message: str, status: int) -> Response:
    return Response({"success": False, "error": message}, status=status)


def api_exception_handler(exc, context):
    """DRF exception handler producing the ``{success, error}`` envelope."""
    if isinstance(exc, FoodResQError):
        set_rollback()
        if exc.status_code >= 500:
            logger.error(f"Request failed: {exc.message}", exc_info=exc)
        return _error_response(exc.message, exc.status_code)

    if isinstance(exc, DjangoValidationError):
        return _error_response(first_error_message(exc.messages), 400)

    response = exception_handler(exc, context)
    if response is not None:
        response.data = {"success": False, "error": first_error_message(response.data)}
        return response

    view = context.get("view")
    logger.error(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}", exc_info=exc)
    return _error_response(str(exc) or "Server Error", 500)
