"""User management service.

Owns the User lifecycle: uniqueness of email, conversion to public views and
the query operations (paging, filtering, search). Every operation works on the
repository's session, so the email check and the write that follows it share
one transaction; the storage-level unique constraint backs the check up under
concurrent writers.
"""

import logging
import math
from typing import List, Optional

from sqlalchemy.orm import Session

from restacademy.database.user_repository import UserRepository
from restacademy.models.constants import SORT_DIRECTIONS, SORT_FIELDS
from restacademy.models.user import Principal, UserFields, UserPage, UserPublicView
from restacademy.services.exceptions import DuplicateEmail, InvalidQuery, NotFound

logger = logging.getLogger(__name__)


class UserService:
    """CRUD and query operations over users."""

    def __init__(self, db: Session, repository: Optional[UserRepository] = None):
        self.repository = repository or UserRepository(db)

    def create(self, fields: UserFields, password_hash: Optional[str] = None) -> UserPublicView:
        """Create a user.

        Args:
            fields: Validated user state
            password_hash: Pre-hashed credential to attach, if any

        Raises:
            DuplicateEmail: If another user already has `fields.email`
        """
        if self.repository.exists_by_email(fields.email):
            raise DuplicateEmail(fields.email)
        user = self.repository.create(fields, password_hash=password_hash)
        return UserPublicView.from_user(user)

    def get_by_id(self, user_id: int) -> UserPublicView:
        user = self.repository.get(user_id)
        if user is None:
            raise NotFound(user_id)
        return UserPublicView.from_user(user)

    def list_paged(self, page: int, size: int, sort_by: str, sort_dir: str) -> UserPage:
        """Return one page of users.

        Args:
            page: Zero-based page index
            size: Page size (at least 1)
            sort_by: Public or column name of a sortable field
            sort_dir: "asc" or "desc" (case-insensitive)

        Raises:
            InvalidQuery: For a negative page, a size below 1, an unknown sort
                field or unknown direction
        """
        if page < 0:
            raise InvalidQuery("Page index must not be negative", page=page)
        if size < 1:
            raise InvalidQuery("Page size must be at least 1", size=size)
        column = SORT_FIELDS.get(sort_by)
        if column is None:
            raise InvalidQuery(f"Unknown sort field: {sort_by}", sortBy=sort_by)
        direction = (sort_dir or "").lower()
        if direction not in SORT_DIRECTIONS:
            raise InvalidQuery(f"Unknown sort direction: {sort_dir}", sortDir=sort_dir)

        users, total = self.repository.get_page(
            offset=page * size,
            limit=size,
            sort_column=column,
            descending=direction == "desc",
        )
        total_pages = max(1, math.ceil(total / size))
        return UserPage(
            users=[UserPublicView.from_user(user) for user in users],
            current_page=page,
            total_items=total,
            total_pages=total_pages,
            page_size=size,
            has_next=page + 1 < total_pages,
            has_previous=page > 0,
        )

    def list_all(self) -> List[UserPublicView]:
        """Every user, in storage order."""
        return [UserPublicView.from_user(user) for user in self.repository.get_all()]

    def update(self, user_id: int, fields: UserFields) -> UserPublicView:
        """Replace all mutable fields of a user.

        Raises:
            NotFound: If the user does not exist
            DuplicateEmail: If the new email belongs to another user
        """
        current = self.repository.get(user_id)
        if current is None:
            raise NotFound(user_id)
        if fields.email != current.email and self.repository.exists_by_email(fields.email):
            raise DuplicateEmail(fields.email)

        updated = self.repository.update(user_id, fields)
        if updated is None:
            # Deleted by a concurrent request between the two reads.
            raise NotFound(user_id)
        return UserPublicView.from_user(updated)

    def delete(self, user_id: int) -> None:
        """Delete a user permanently. Deleting an absent id raises NotFound."""
        if not self.repository.delete(user_id):
            raise NotFound(user_id)
        logger.info(f"Deleted user {user_id}")

    def list_by_department(self, department: str) -> List[UserPublicView]:
        return [UserPublicView.from_user(user) for user in self.repository.get_by_department(department)]

    def list_by_age_range(self, min_age: int, max_age: int) -> List[UserPublicView]:
        """Users whose age lies in [min_age, max_age]."""
        if min_age > max_age:
            raise InvalidQuery(
                "Minimum age must not be greater than maximum age",
                minAge=min_age,
                maxAge=max_age,
            )
        return [UserPublicView.from_user(user) for user in self.repository.get_by_age_range(min_age, max_age)]

    def search_by_first_name(self, pattern: str) -> List[UserPublicView]:
        """Case-insensitive substring search on first name; empty pattern matches all."""
        return [UserPublicView.from_user(user) for user in self.repository.search_by_first_name(pattern or "")]

    def count_by_department(self, department: str) -> int:
        return self.repository.count_by_department(department)

    def email_exists(self, email: str) -> bool:
        return self.repository.exists_by_email(email)

    def get_principal(self, email: str) -> Optional[Principal]:
        return self.repository.get_principal(email)
