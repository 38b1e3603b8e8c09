"""Password hashing for REST Academy.

We never store the raw password, only a salted PBKDF2-SHA256 digest in
passlib's modular crypt format (`$pbkdf2-sha256$rounds$salt$checksum`), so the
salt and cost travel with the digest.
"""

import os
from passlib.context import CryptContext
from dotenv import load_dotenv

load_dotenv()

PASSWORD_HASH_SCHEME = "pbkdf2_sha256"
PASSWORD_HASH_ROUNDS = int(os.getenv("PASSWORD_HASH_ROUNDS", "29000"))


class CredentialHasher:
    """Salted one-way password hashing with constant-time verification."""

    def __init__(self, rounds: int = PASSWORD_HASH_ROUNDS):
        self._context = CryptContext(
            schemes=[PASSWORD_HASH_SCHEME],
            deprecated="auto",
            pbkdf2_sha256__rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        """Hash a password with a fresh random salt."""
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        """Check a password against a stored digest.

        Malformed or foreign digests never verify.
        """
        if not digest:
            return False
        try:
            return self._context.verify(plaintext, digest)
        except ValueError:
            return False

    def dummy_verify(self) -> None:
        """Spend the time of one verification without a real digest."""
        self._context.dummy_verify()
