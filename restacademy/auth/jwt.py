"""JWT token generation and validation for REST Academy."""

import os
import jwt
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from dotenv import load_dotenv

from restacademy.services.exceptions import InvalidToken

load_dotenv()

# JWT configuration
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))


def _aware_utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Signs and verifies stateless bearer tokens.

    Args:
        secret: HMAC signing key held by the server
        algorithm: JWT signing algorithm
        ttl: Lifetime of issued tokens
        clock: Returns the current aware UTC time; replaceable in tests
    """

    def __init__(
        self,
        secret: str = JWT_SECRET_KEY,
        algorithm: str = JWT_ALGORITHM,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], datetime] = _aware_utc_now,
    ):
        if not secret:
            raise ValueError("A token signing secret must be provided")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl if ttl is not None else timedelta(hours=JWT_EXPIRATION_HOURS)
        self._clock = clock

    def issue(self, subject: str) -> str:
        """Create a signed token for a subject (user email).

        Args:
            subject: Identity to encode in the `sub` claim

        Returns:
            Encoded JWT token string
        """
        issued_at = self._clock()
        payload = {
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """Validate a token and return its subject.

        Raises:
            InvalidToken: If the token is malformed, tampered with, signed with
                another key or expired
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "iat", "exp"], "verify_iat": False},
            )
        except jwt.InvalidTokenError as e:
            raise InvalidToken() from e

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidToken()
        return subject
