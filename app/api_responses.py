"""
API Response Utilities - Standardized error handling and responses
Every error body carries `error` (a message, or {field: [messages]}) and `code`
"""

from flask import jsonify
from functools import wraps
from sqlalchemy.exc import SQLAlchemyError
import logging

from exceptions import OmnilogException

logger = logging.getLogger(__name__)


# API Error Codes
class ErrorCode:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    PRO_REQUIRED = "PRO_REQUIRED"
    LOG_LIMIT_REACHED = "LOG_LIMIT_REACHED"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    BILLING_NOT_CONFIGURED = "BILLING_NOT_CONFIGURED"


DEFAULT_MESSAGES = {
    ErrorCode.NOT_FOUND: "Not found",
    ErrorCode.VALIDATION_ERROR: "Invalid body",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred",
    ErrorCode.UNAUTHORIZED: "Unauthorized",
    ErrorCode.FORBIDDEN: "Access forbidden",
    ErrorCode.CONFLICT: "Resource conflict",
    ErrorCode.RATE_LIMIT_EXCEEDED: "Rate limit exceeded",
}


def error_response(
    error_code=ErrorCode.INTERNAL_ERROR,
    message=None,
    status_code=400,
    log_error=True,
    **extra,
):
    """
    Standard error response format for API endpoints
    """
    response = {"error": message or DEFAULT_MESSAGES.get(error_code, "Request failed"), "code": error_code}
    response.update(extra)

    if log_error and error_code == ErrorCode.INTERNAL_ERROR:
        logger.error(f"{error_code}: {message}")

    return jsonify(response), status_code


def handle_api_errors(f):
    """
    Decorator to standardize error handling for API endpoints
    Domain exceptions pass through to the app handlers; the rest become JSON errors
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except OmnilogException:
            raise
        except ValueError as e:
            return error_response(ErrorCode.VALIDATION_ERROR, message=str(e), status_code=400)
        except SQLAlchemyError as e:
            logger.error(f"Database error in {f.__name__}: {e}", exc_info=True)
            return error_response(
                ErrorCode.INTERNAL_ERROR, message="An unexpected error occurred", status_code=500, log_error=False
            )

    return wrapper


def validation_error_response(field_errors):
    """
    Field-level validation errors: {"error": {"field": ["message", ...]}}
    """
    return error_response(ErrorCode.VALIDATION_ERROR, message=field_errors, status_code=400, log_error=False)


def not_found_response(resource_type):
    """
    Convenience function for not found errors
    """
    return error_response(ErrorCode.NOT_FOUND, message=f"{resource_type} not found", status_code=404)
