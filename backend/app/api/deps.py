"""Shared API dependencies, including the request auth gate."""
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.errors import UnauthorizedError
from app.models.user import User
from app.services.credential_store import UserRepository
from app.services.media_storage import MediaStorage
from app.services.tokens import TokenConfig, TokenIssuer, TokenVerifier

__all__ = [
    "ACCESS_TOKEN_COOKIE",
    "REFRESH_TOKEN_COOKIE",
    "get_current_user",
    "get_db",
    "get_media_storage",
    "get_token_config",
    "get_token_issuer",
    "get_token_verifier",
    "get_user_repository",
]

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

bearer_scheme = HTTPBearer(auto_error=False)


def get_token_config() -> TokenConfig:
    return TokenConfig.from_settings(get_settings())


def get_media_storage() -> MediaStorage:
    settings = get_settings()
    return MediaStorage(settings.media_dir, settings.media_url_prefix)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_token_issuer(
    config: TokenConfig = Depends(get_token_config),
    users: UserRepository = Depends(get_user_repository),
) -> TokenIssuer:
    return TokenIssuer(config, users)


def get_token_verifier(
    config: TokenConfig = Depends(get_token_config),
    users: UserRepository = Depends(get_user_repository),
) -> TokenVerifier:
    return TokenVerifier(config, users)


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> User:
    """Require a valid access token and return its user.

    The ``accessToken`` cookie takes precedence over an Authorization header.
    """
    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise UnauthorizedError("Unauthorized request", headers={"WWW-Authenticate": "Bearer"})

    try:
        return verifier.verify_access(token)
    except UnauthorizedError as exc:
        exc.headers = {"WWW-Authenticate": "Bearer"}
        raise
