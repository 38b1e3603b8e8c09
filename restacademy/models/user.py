"""User data models for REST Academy.

`User` is the persisted entity as the service layer sees it. Everything that
leaves the service goes through `UserPublicView`, which never carries the
password hash. Authentication works on `Principal`, joined to `User` only by
email.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from restacademy.models.constants import (
    EMAIL_MAX_LENGTH,
    EMAIL_PATTERN,
    MAX_AGE,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    DEPARTMENT_MAX_LENGTH,
    DEPARTMENT_MIN_LENGTH,
)


def utc_now() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns round-trip."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys; accepts either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(BaseModel):
    """Persisted user record."""

    id: int = Field(..., description="Store-assigned identifier (never reused)")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    email: str = Field(..., description="Email address (unique, case-sensitive)")
    age: int = Field(..., ge=0, description="Age in years")
    department: str = Field(..., description="Department name")
    password_hash: Optional[str] = Field(None, repr=False, description="Salted password digest")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last mutation timestamp")


class UserFields(CamelModel):
    """Full mutable state of a user as supplied by callers."""

    first_name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    last_name: str = Field(..., min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)
    email: str = Field(..., max_length=EMAIL_MAX_LENGTH, pattern=EMAIL_PATTERN)
    age: int = Field(..., ge=0, le=MAX_AGE)
    department: str = Field(..., min_length=DEPARTMENT_MIN_LENGTH, max_length=DEPARTMENT_MAX_LENGTH)

    @field_validator("first_name", "last_name", "department")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class UserCreate(UserFields):
    """Request body for direct user creation."""


class UserUpdate(UserFields):
    """Request body for a full-replace update (partial updates are not supported)."""


class UserPublicView(CamelModel):
    """Projection of a user that is safe to return to callers."""

    id: int
    first_name: str
    last_name: str
    email: str
    age: int
    department: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserPublicView":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            age=user.age,
            department=user.department,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserPage(CamelModel):
    """One page of users plus position metadata."""

    users: List[UserPublicView]
    current_page: int
    total_items: int
    total_pages: int
    page_size: int
    has_next: bool
    has_previous: bool


class DepartmentCount(CamelModel):
    department: str
    user_count: int


class Principal(BaseModel):
    """Authentication identity. Carries only what login and token checks need."""

    email: str
    first_name: str
    last_name: str
    password_hash: Optional[str] = Field(None, repr=False, exclude=True)
