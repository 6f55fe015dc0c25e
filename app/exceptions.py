"""
OMNILOG - Custom Exceptions and Exception Handlers
"""
import structlog
from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = structlog.get_logger('exceptions')


class OmnilogException(Exception):
    """Base exception for OMNILOG"""
    status_code = 400

    def __init__(self, message, code: str = "OMNILOG_ERROR", **extra):
        self.message = message
        self.code = code
        self.extra = extra
        super().__init__(message)

    def to_dict(self):
        body = {
            'error': self.message,
            'code': self.code,
        }
        body.update(self.extra)
        return body


class ValidationException(OmnilogException):
    """Validation-related exceptions; message may be a {field: [errors]} dict"""
    status_code = 400

    def __init__(self, message="Invalid body", code: str = "VALIDATION_ERROR", **extra):
        super().__init__(message, code=code, **extra)
        logger.warning(f"Validation error: {message}")


class AuthenticationException(OmnilogException):
    """Authentication-related exceptions"""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="UNAUTHORIZED")


class AuthorizationException(OmnilogException):
    """Tier gates and other access denials"""
    status_code = 403

    def __init__(self, message: str = "Access denied", code: str = "FORBIDDEN", **extra):
        super().__init__(message, code=code, **extra)
        logger.warning(f"Authorization error: {message}")


class NotFoundException(OmnilogException):
    """Missing resources"""
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class ConflictException(OmnilogException):
    """Uniqueness conflicts (email, username)"""
    status_code = 409

    def __init__(self, message: str):
        super().__init__(message, code="CONFLICT")


class ProviderException(OmnilogException):
    """Third-party catalog failures that must surface to the client"""
    status_code = 502

    def __init__(self, message: str = "Search failed"):
        super().__init__(message, code="PROVIDER_ERROR")
        logger.error(f"Provider error: {message}")


class BillingNotConfiguredException(OmnilogException):
    """Stripe keys are missing"""
    status_code = 503

    def __init__(self, message: str = "Stripe is not configured"):
        super().__init__(message, code="BILLING_NOT_CONFIGURED")


def register_exception_handlers(app):
    """Register exception handlers with Flask app"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions"""
        return jsonify({
            'error': e.description,
            'code': e.name.upper().replace(' ', '_'),
        }), e.code

    @app.errorhandler(OmnilogException)
    def handle_omnilog_exception(e):
        """Handle OMNILOG custom exceptions"""
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """Handle all other exceptions"""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({
            'error': 'An unexpected error occurred',
            'code': 'INTERNAL_ERROR',
        }), 500
