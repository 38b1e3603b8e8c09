"""Pytest fixtures and configuration for REST Academy tests."""

import os

# Keep the app's module-level engine off the working directory.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from restacademy.database.database import Base, set_sqlite_pragmas
from restacademy.database import models  # noqa: F401
from restacademy.database.user_repository import UserRepository
from restacademy.auth.jwt import TokenIssuer
from restacademy.auth.passwords import CredentialHasher
from restacademy.models.user import UserCreate
from restacademy.services.auth_service import AuthService
from restacademy.services.user_service import UserService


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_JWT_SECRET = "test-secret-key"
# Low PBKDF2 cost keeps the suite fast; production uses PASSWORD_HASH_ROUNDS.
TEST_HASH_ROUNDS = 1000


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    event.listen(engine, "connect", set_sqlite_pragmas)

    # Create all tables
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def user_repository(db_session: Session):
    """Create a UserRepository instance for testing."""
    return UserRepository(db_session)


@pytest.fixture
def user_service(db_session: Session):
    """Create a UserService instance for testing."""
    return UserService(db_session)


@pytest.fixture
def hasher():
    return CredentialHasher(rounds=TEST_HASH_ROUNDS)


@pytest.fixture
def token_issuer():
    return TokenIssuer(secret=TEST_JWT_SECRET)


@pytest.fixture
def auth_service(user_service, hasher, token_issuer):
    return AuthService(user_service, hasher, token_issuer)


@pytest.fixture
def sample_user_base():
    """Base user data for creating test users.

    Returns a dict with default user attributes that can be overridden.
    """
    return {
        "first_name": "John",
        "last_name": "Doe",
        "email": "john.doe@test.com",
        "age": 30,
        "department": "Engineering",
    }


@pytest.fixture
def sample_user(sample_user_base):
    """Create a sample UserCreate payload for testing."""
    return UserCreate(**sample_user_base)


@pytest.fixture
def make_user(user_service, sample_user_base):
    """Factory that creates users through the service with overrides."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {**sample_user_base, "email": f"user{counter['n']}@test.com", **overrides}
        return user_service.create(UserCreate(**data))

    return _make


@pytest.fixture
def expired_token_issuer():
    """Issuer whose clock is two days in the past, so fresh tokens are already expired."""
    past = datetime.now(timezone.utc) - timedelta(days=2)
    return TokenIssuer(secret=TEST_JWT_SECRET, ttl=timedelta(hours=24), clock=lambda: past)


@pytest.fixture
def test_client(db_session: Session, hasher, token_issuer):
    """Create a FastAPI test client with overridden database, hasher and token issuer."""
    from restacademy.api.app import app
    from restacademy.database.database import get_db
    from restacademy.auth.dependencies import get_credential_hasher, get_token_issuer

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_credential_hasher] = lambda: hasher
    app.dependency_overrides[get_token_issuer] = lambda: token_issuer

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
