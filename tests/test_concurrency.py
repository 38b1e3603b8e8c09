"""Concurrent creates racing on one email.

Each worker gets its own session on a file-backed SQLite database, and all
workers are held at a barrier after the email check, so every one of them
observes "email free" before any insert happens. The unique constraint must
still let exactly one through.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from restacademy.database.database import Base
from restacademy.database.models import UserDB
from restacademy.database.user_repository import UserRepository
from restacademy.models.user import UserCreate
from restacademy.services.exceptions import DuplicateEmail
from restacademy.services.user_service import UserService

WORKERS = 4


class RacingUserRepository(UserRepository):
    """Waits for every worker to finish its email check before continuing."""

    def __init__(self, db, barrier: threading.Barrier):
        super().__init__(db)
        self.barrier = barrier

    def exists_by_email(self, email: str) -> bool:
        exists = super().exists_by_email(email)
        self.barrier.wait(timeout=10)
        return exists


@pytest.fixture
def file_session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


def test_concurrent_creates_same_email_exactly_one_wins(file_session_factory, sample_user_base):
    barrier = threading.Barrier(WORKERS)
    fields = UserCreate(**{**sample_user_base, "email": "race@test.com"})

    def attempt(_):
        session = file_session_factory()
        try:
            service = UserService(session, repository=RacingUserRepository(session, barrier))
            try:
                service.create(fields)
                return "created"
            except DuplicateEmail:
                return "duplicate"
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        outcomes = list(pool.map(attempt, range(WORKERS)))

    assert outcomes.count("created") == 1
    assert outcomes.count("duplicate") == WORKERS - 1

    session = file_session_factory()
    try:
        assert session.query(UserDB).filter(UserDB.email == "race@test.com").count() == 1
    finally:
        session.close()


def test_concurrent_creates_distinct_emails_all_succeed(file_session_factory, sample_user_base):
    def attempt(i):
        session = file_session_factory()
        try:
            return UserService(session).create(UserCreate(**{**sample_user_base, "email": f"u{i}@test.com"})).id
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        ids = list(pool.map(attempt, range(WORKERS * 2)))

    assert len(set(ids)) == WORKERS * 2
