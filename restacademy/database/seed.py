"""Sample data for local demos.

Loaded at startup only when `SEED_SAMPLE_DATA=true` and the users table is
empty. Every sample account shares the password `password123`.
"""

import logging
import os
from typing import List, Tuple

from sqlalchemy.orm import Session

from restacademy.auth.passwords import CredentialHasher
from restacademy.models.user import UserCreate
from restacademy.services.user_service import UserService

logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = "password123"

SAMPLE_USERS: List[Tuple[str, str, str, int, str]] = [
    ("John", "Doe", "john.doe@example.com", 28, "Engineering"),
    ("Jane", "Smith", "jane.smith@example.com", 32, "Marketing"),
    ("Mike", "Johnson", "mike.johnson@example.com", 25, "Engineering"),
    ("Sarah", "Wilson", "sarah.wilson@example.com", 30, "HR"),
    ("David", "Brown", "david.brown@example.com", 35, "Finance"),
    ("Emily", "Davis", "emily.davis@example.com", 27, "Marketing"),
    ("Chris", "Miller", "chris.miller@example.com", 29, "Engineering"),
    ("Lisa", "Anderson", "lisa.anderson@example.com", 31, "Sales"),
]


def seed_enabled() -> bool:
    return os.getenv("SEED_SAMPLE_DATA", "False").lower() == "true"


def seed_sample_users(db: Session, hasher: CredentialHasher) -> int:
    """Insert the sample users if no users exist yet.

    Returns:
        Number of users created (0 if the table already had rows)
    """
    service = UserService(db)
    if service.list_all():
        logger.info("Users table not empty; skipping sample data")
        return 0

    # One digest shared by all sample accounts keeps startup fast.
    password_hash = hasher.hash(SAMPLE_PASSWORD)
    for first_name, last_name, email, age, department in SAMPLE_USERS:
        service.create(
            UserCreate(
                first_name=first_name,
                last_name=last_name,
                email=email,
                age=age,
                department=department,
            ),
            password_hash=password_hash,
        )
    logger.info(f"Loaded {len(SAMPLE_USERS)} sample users")
    return len(SAMPLE_USERS)
