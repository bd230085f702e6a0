"""
Domain exceptions for the storefront backend.

Services raise these instead of HTTP errors; `app.main` maps every
AppError to the JSON envelope:

    {"success": false, "message": "...", "error": "<code>"}
"""

from fastapi import status


class AppError(Exception):
    """Base exception for all application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(AppError):
    """Malformed or missing input, raised before any side effect."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"


class PermissionDeniedError(AppError):
    """Authenticated, but not allowed to perform the action."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class NotFoundError(AppError):
    """Referenced user, order, address or product does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ConflictError(AppError):
    """State conflict, e.g. tracking numbers exhausted or stock too low."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class OrderCreationFailed(AppError):
    """
    Transactional failure while placing an order.

    The underlying exception is kept on `cause` (and chained with
    `raise ... from`), but never sent to clients.
    """

    code = "order_creation_failed"

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__("Failed to create order")
