"""FastAPI dependencies for services and authentication."""

from functools import lru_cache
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from restacademy.database.database import get_db
from restacademy.auth.jwt import TokenIssuer
from restacademy.auth.passwords import CredentialHasher
from restacademy.models.user import Principal
from restacademy.services.auth_service import AuthService
from restacademy.services.exceptions import InvalidToken
from restacademy.services.user_service import UserService

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


@lru_cache
def get_credential_hasher() -> CredentialHasher:
    """Process-wide hasher built from environment configuration."""
    return CredentialHasher()


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Process-wide token issuer built from environment configuration."""
    return TokenIssuer()


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_auth_service(
    user_service: UserService = Depends(get_user_service),
    hasher: CredentialHasher = Depends(get_credential_hasher),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(user_service, hasher, token_issuer)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    auth_service: AuthService = Depends(get_auth_service),
) -> Principal:
    """Get the authenticated principal from a bearer token.

    Raises:
        InvalidToken: If no bearer token is supplied, or it does not verify
    """
    if not credentials or credentials.scheme.lower() != "bearer":
        raise InvalidToken("Not authenticated")
    return auth_service.authenticate(credentials.credentials)
