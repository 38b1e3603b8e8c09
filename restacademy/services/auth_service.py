"""Authentication service: login, registration and bearer-token checks.

Holds no state of its own. Credential hashing and token signing are
constructor-injected so tests can pass cheap, deterministic instances.
"""

import logging
from typing import NamedTuple

from restacademy.auth.jwt import TokenIssuer
from restacademy.auth.passwords import CredentialHasher
from restacademy.models.user import Principal, UserCreate, UserPublicView
from restacademy.services.exceptions import DuplicateEmail, InvalidCredentials, InvalidToken
from restacademy.services.user_service import UserService

logger = logging.getLogger(__name__)


class LoginResult(NamedTuple):
    token: str
    email: str
    first_name: str
    last_name: str


class AuthService:
    """Orchestrates UserService, CredentialHasher and TokenIssuer."""

    def __init__(self, user_service: UserService, hasher: CredentialHasher, token_issuer: TokenIssuer):
        self.user_service = user_service
        self.hasher = hasher
        self.token_issuer = token_issuer

    def login(self, email: str, password: str) -> LoginResult:
        """Authenticate credentials and issue a token.

        Unknown email, missing stored hash and wrong password all raise the
        same InvalidCredentials.
        """
        principal = self.user_service.get_principal(email)
        if principal is None or not principal.password_hash:
            # Keep response time independent of whether the account exists.
            self.hasher.dummy_verify()
            logger.warning("Rejected login attempt")
            raise InvalidCredentials()
        if not self.hasher.verify(password, principal.password_hash):
            logger.warning("Rejected login attempt")
            raise InvalidCredentials()

        token = self.token_issuer.issue(principal.email)
        logger.info(f"Issued token for {principal.email}")
        return LoginResult(
            token=token,
            email=principal.email,
            first_name=principal.first_name,
            last_name=principal.last_name,
        )

    def register(self, fields: UserCreate, password: str) -> UserPublicView:
        """Create an account with a hashed password. Does not log in."""
        if self.user_service.email_exists(fields.email):
            raise DuplicateEmail(fields.email)
        user = self.user_service.create(fields, password_hash=self.hasher.hash(password))
        logger.info(f"Registered user {user.id}: {user.email}")
        return user

    def authenticate(self, token: str) -> Principal:
        """Resolve a bearer token to its principal.

        Raises:
            InvalidToken: If the token fails verification or its subject no
                longer exists
        """
        email = self.token_issuer.verify(token)
        principal = self.user_service.get_principal(email)
        if principal is None:
            raise InvalidToken()
        return principal
