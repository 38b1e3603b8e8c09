"""SQLAlchemy database models for REST Academy."""

from sqlalchemy import Column, String, Integer, DateTime, UniqueConstraint

from restacademy.database.database import Base
from restacademy.models.user import utc_now


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"
    __table_args__ = (
        # Authoritative guard for email uniqueness under concurrent writes.
        UniqueConstraint("email", name="uq_users_email"),
        # Never hand out a previously used id on SQLite.
        {"sqlite_autoincrement": True},
    )

    # Primary key (store-assigned, never reused)
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Profile
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False, index=True)
    email = Column(String(100), nullable=False)
    age = Column(Integer, nullable=False)
    department = Column(String(100), nullable=False, index=True)

    # Credential (absent for users created without registration)
    password_hash = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from restacademy.models.user import User
        return User(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            age=self.age,
            department=self.department,
            password_hash=self.password_hash,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_principal(self):
        """Project the row onto the fields authentication needs."""
        from restacademy.models.user import Principal
        return Principal(
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            password_hash=self.password_hash,
        )
