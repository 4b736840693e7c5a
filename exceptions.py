# exceptions.py
from typing import Optional


class AppError(Exception):
    """Base for errors that map onto an API response."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class AuthorizationError(AppError):
    status_code = 401
    code = "not_authorized"
    default_message = "Not authorized"


class ConflictError(AppError):
    status_code = 400
    code = "conflict"
    default_message = "Resource already exists"


class PaymentVerificationError(AppError):
    status_code = 400
    code = "payment_verification_failed"
    default_message = "Payment verification failed"


class NotEligibleError(ValidationError):
    code = "not_eligible"
    default_message = "Not eligible for a certificate"


class InternalError(AppError):
    pass
