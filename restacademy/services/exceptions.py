"""Typed failures raised by the user and auth services.

The API layer maps each of these onto a transport status; services never
build HTTP responses themselves.
"""

from typing import Any, Dict, Optional


class UserServiceError(Exception):
    """Base class for every typed service failure."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}


class NotFound(UserServiceError):
    """No user exists with the requested identifier."""

    def __init__(self, user_id: int):
        super().__init__(
            f"User not found with id: {user_id}",
            code="NOT_FOUND",
            details={"id": user_id},
        )


class DuplicateEmail(UserServiceError):
    """Another user already holds the email."""

    def __init__(self, email: str):
        super().__init__(
            f"Email already exists: {email}",
            code="DUPLICATE_EMAIL",
            details={"email": email},
        )


class InvalidQuery(UserServiceError):
    """Query parameters are outside the accepted domain."""

    def __init__(self, message: str, **details: Any):
        super().__init__(message, code="INVALID_QUERY", details=details)


class InvalidCredentials(UserServiceError):
    """Unknown email and wrong password are reported identically."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class InvalidToken(UserServiceError):
    """Malformed, tampered or expired bearer token."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, code="INVALID_TOKEN")


class ValidationFailed(UserServiceError):
    """Request shape did not satisfy field constraints."""

    def __init__(self, field_errors: Dict[str, str], message: str = "Invalid input parameters"):
        super().__init__(message, code="VALIDATION_FAILED", details={"fields": field_errors})
        self.field_errors = field_errors


class StorageUnavailable(UserServiceError):
    """The backing store failed; the original error is chained as __cause__."""

    def __init__(self, action: str):
        super().__init__(
            f"Storage unavailable while trying to {action}",
            code="STORAGE_UNAVAILABLE",
        )
