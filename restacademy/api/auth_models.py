"""Request/response models for authentication and error payloads."""

from datetime import datetime
from typing import Dict, Optional

from pydantic import Field

from restacademy.models.constants import EMAIL_MAX_LENGTH, PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH
from restacademy.models.user import CamelModel, UserCreate


class LoginRequest(CamelModel):
    """Request model for email/password login."""
    email: str = Field(..., min_length=1, max_length=EMAIL_MAX_LENGTH)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)


class RegisterRequest(UserCreate):
    """Request model for account registration."""
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class LoginResponse(CamelModel):
    """Response model for a successful login."""
    token: str
    token_type: str = "Bearer"
    email: str
    first_name: str
    last_name: str


class PrincipalResponse(CamelModel):
    """The authenticated identity behind a bearer token."""
    email: str
    first_name: str
    last_name: str


class ErrorResponse(CamelModel):
    """Body returned for every failed request."""
    timestamp: datetime
    status: int
    error: str
    message: str
    path: str
    validation_errors: Optional[Dict[str, str]] = None
