"""Repository for User database operations.

Every method runs on the caller's session, so a service can perform a
uniqueness check and the following write inside one transaction. The
`uq_users_email` constraint stays the authoritative guard: a violation at
commit time is rolled back and reported as `DuplicateEmail`. Any other
SQLAlchemy failure is rolled back and reported as `StorageUnavailable`.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import asc, desc, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from restacademy.database.models import UserDB
from restacademy.models.user import Principal, User, UserFields, utc_now
from restacademy.services.exceptions import DuplicateEmail, StorageUnavailable

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _storage(self, action: str, email: Optional[str] = None) -> Iterator[None]:
        """Roll back and translate SQLAlchemy failures raised inside the block.

        When `email` is given, an integrity violation means the unique email
        constraint fired and is reported as `DuplicateEmail`.
        """
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            if email is None:
                logger.error(f"Failed to {action}: {type(e).__name__}: {str(e)}")
                raise StorageUnavailable(action) from e
            logger.info(f"Rejected duplicate email while trying to {action}: {email}")
            raise DuplicateEmail(email) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {type(e).__name__}: {str(e)}")
            raise StorageUnavailable(action) from e

    def get(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        with self._storage(f"load user {user_id}"):
            user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        return user_db.to_pydantic() if user_db else None

    def get_principal(self, email: str) -> Optional[Principal]:
        """Get the authentication principal for an email."""
        with self._storage("load principal"):
            user_db = self.db.query(UserDB).filter(UserDB.email == email).first()
        return user_db.to_principal() if user_db else None

    def exists_by_email(self, email: str) -> bool:
        with self._storage("check email"):
            return self.db.query(UserDB.id).filter(UserDB.email == email).first() is not None

    def create(self, fields: UserFields, password_hash: Optional[str] = None) -> User:
        """Insert a new user and commit."""
        now = utc_now()
        user_db = UserDB(
            first_name=fields.first_name,
            last_name=fields.last_name,
            email=fields.email,
            age=fields.age,
            department=fields.department,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
        with self._storage("create user", email=fields.email):
            self.db.add(user_db)
            self.db.commit()
            self.db.refresh(user_db)
        logger.debug(f"Created user {user_db.id}: {user_db.email}")
        return user_db.to_pydantic()

    def update(self, user_id: int, fields: UserFields) -> Optional[User]:
        """Replace all mutable fields of a user and commit.

        Returns None if the user does not exist.
        """
        with self._storage(f"load user {user_id}"):
            user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        if not user_db:
            return None

        user_db.first_name = fields.first_name
        user_db.last_name = fields.last_name
        user_db.email = fields.email
        user_db.age = fields.age
        user_db.department = fields.department
        user_db.updated_at = utc_now()

        with self._storage(f"update user {user_id}", email=fields.email):
            self.db.commit()
            self.db.refresh(user_db)
        logger.debug(f"Updated user {user_id}: {user_db.email}")
        return user_db.to_pydantic()

    def delete(self, user_id: int) -> bool:
        """Permanently delete a user by ID."""
        with self._storage(f"delete user {user_id}"):
            user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
            if not user_db:
                return False
            self.db.delete(user_db)
            self.db.commit()
        logger.debug(f"Deleted user {user_id}")
        return True

    def get_all(self) -> List[User]:
        """Get all users in storage order."""
        with self._storage("list users"):
            users_db = self.db.query(UserDB).all()
        return [user_db.to_pydantic() for user_db in users_db]

    def get_page(self, offset: int, limit: int, sort_column: str, descending: bool) -> Tuple[List[User], int]:
        """Get one slice of users ordered by `sort_column`, plus the total count.

        Ties are broken by ascending id.
        """
        column = getattr(UserDB, sort_column)
        order = desc(column) if descending else asc(column)
        with self._storage("list user page"):
            total = self.db.query(func.count(UserDB.id)).scalar() or 0
            users_db = (
                self.db.query(UserDB)
                .order_by(order, asc(UserDB.id))
                .offset(offset)
                .limit(limit)
                .all()
            )
        return [user_db.to_pydantic() for user_db in users_db], int(total)

    def get_by_department(self, department: str) -> List[User]:
        """Get users in a department sorted by last name, then id."""
        with self._storage("list users by department"):
            users_db = (
                self.db.query(UserDB)
                .filter(UserDB.department == department)
                .order_by(asc(UserDB.last_name), asc(UserDB.id))
                .all()
            )
        return [user_db.to_pydantic() for user_db in users_db]

    def get_by_age_range(self, min_age: int, max_age: int) -> List[User]:
        """Get users with min_age <= age <= max_age."""
        with self._storage("list users by age"):
            users_db = (
                self.db.query(UserDB)
                .filter(UserDB.age >= min_age, UserDB.age <= max_age)
                .order_by(asc(UserDB.id))
                .all()
            )
        return [user_db.to_pydantic() for user_db in users_db]

    def search_by_first_name(self, pattern: str) -> List[User]:
        """Case-insensitive substring match on first name (wildcards matched literally).

        SQLite connections carry a Unicode `casefold()` function (see
        `set_sqlite_pragmas`); other databases fold with their own `lower()`.
        """
        query = self.db.query(UserDB)
        if pattern:
            if self.db.get_bind().dialect.name == "sqlite":
                folded, needle = func.casefold(UserDB.first_name), pattern.casefold()
            else:
                folded, needle = func.lower(UserDB.first_name), pattern.lower()
            query = query.filter(folded.contains(needle, autoescape=True))
        with self._storage("search users"):
            users_db = query.order_by(asc(UserDB.id)).all()
        return [user_db.to_pydantic() for user_db in users_db]

    def count_by_department(self, department: str) -> int:
        with self._storage("count users by department"):
            count = (
                self.db.query(func.count(UserDB.id))
                .filter(UserDB.department == department)
                .scalar()
            )
        return int(count or 0)
