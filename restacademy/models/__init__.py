"""Data models for REST Academy."""

from restacademy.models.user import (
    User,
    UserCreate,
    UserUpdate,
    UserPublicView,
    UserPage,
    DepartmentCount,
    Principal,
    utc_now,
)

__all__ = [
    "User",
    "UserCreate",
    "UserUpdate",
    "UserPublicView",
    "UserPage",
    "DepartmentCount",
    "Principal",
    "utc_now",
]
