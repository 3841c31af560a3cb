"""Domain errors raised by the lending core.

Every error carries the HTTP status it is reported with; the API renders
them as ``{"error": "<message>"}``.
"""
from fastapi import status


class LendingError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LendingError):
    """Missing, empty or out-of-range input."""


class ConflictError(LendingError):
    """Username already taken, or an idempotency key reused for another book."""


class AuthError(LendingError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(LendingError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(LendingError):
    status_code = status.HTTP_404_NOT_FOUND


class OutOfStockError(LendingError):
    """No available copy left to borrow."""


class InvalidStateError(LendingError):
    """Transaction already returned."""


class InsufficientStockError(LendingError):
    """Quantity adjustment would go negative. Internal to the catalog."""
