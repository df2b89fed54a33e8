"""Access/refresh token issuance, rotation and verification.

Access tokens are stateless JWTs checked by signature and expiry alone.
Refresh tokens are JWTs too, but a refresh token is only honoured while it is
byte-for-byte equal to the value stored on the user row. Issuing a new pair
overwrites that value, so every older refresh token stops working at once.
"""
import hmac
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.exc import SQLAlchemyError

from app.config import Settings
from app.errors import InternalError, UnauthorizedError
from app.models.user import User
from app.services.credential_store import UserRepository

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True)
class TokenConfig:
    """Signing secrets and lifetimes for both token kinds."""

    access_token_secret: str
    refresh_token_secret: str
    access_token_ttl: timedelta
    refresh_token_ttl: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        return cls(
            access_token_secret=settings.access_token_secret,
            refresh_token_secret=settings.refresh_token_secret,
            access_token_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_token_ttl=timedelta(days=settings.refresh_token_expire_days),
            algorithm=settings.algorithm,
        )

    def secret_for(self, token_type: str) -> str:
        if token_type == ACCESS_TOKEN_TYPE:
            return self.access_token_secret
        return self.refresh_token_secret

    def ttl_for(self, token_type: str) -> timedelta:
        if token_type == ACCESS_TOKEN_TYPE:
            return self.access_token_ttl
        return self.refresh_token_ttl


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def encode_token(config: TokenConfig, user_id: str, token_type: str) -> str:
    """Sign a token of the given type for a user."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "type": token_type,
        # Random id keeps two tokens minted in the same second distinct
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + config.ttl_for(token_type),
    }
    return jwt.encode(payload, config.secret_for(token_type), algorithm=config.algorithm)


def decode_token(config: TokenConfig, token: str, token_type: str) -> str:
    """Check signature, expiry and type; return the user id in ``sub``.

    Raises UnauthorizedError on any failure.
    """
    try:
        payload = jwt.decode(
            token,
            config.secret_for(token_type),
            algorithms=[config.algorithm],
        )
    except ExpiredSignatureError:
        raise UnauthorizedError(f"{token_type.capitalize()} token has expired")
    except JWTError:
        raise UnauthorizedError(f"Invalid {token_type} token")

    user_id = payload.get("sub")
    if payload.get("type") != token_type or not user_id:
        raise UnauthorizedError(f"Invalid {token_type} token")
    return user_id


class TokenIssuer:
    """Mints token pairs and keeps the stored refresh token in step."""

    def __init__(self, config: TokenConfig, users: UserRepository):
        self.config = config
        self.users = users

    def issue(self, user_id: str) -> TokenPair:
        """Mint a new pair and persist its refresh token, replacing any prior one.

        The pair is only returned once the write has committed.
        """
        try:
            pair = TokenPair(
                access_token=encode_token(self.config, user_id, ACCESS_TOKEN_TYPE),
                refresh_token=encode_token(self.config, user_id, REFRESH_TOKEN_TYPE),
            )
        except JWTError as exc:
            logger.error(f"Token signing failed for user {user_id}: {exc}")
            raise InternalError("Something went wrong while generating tokens") from exc

        try:
            matched = self.users.update_fields(user_id, relaxed=True, refresh_token=pair.refresh_token)
            if not matched:
                self.users.rollback()
                logger.error(f"Cannot store refresh token, user {user_id} is gone")
                raise InternalError("Something went wrong while generating tokens")
            self.users.commit()
        except SQLAlchemyError as exc:
            self.users.rollback()
            logger.error(f"Persisting refresh token failed for user {user_id}: {exc}")
            raise InternalError("Something went wrong while generating tokens") from exc

        logger.info(f"Issued token pair for user {user_id}")
        return pair

    def revoke(self, user_id: str) -> None:
        """Clear the stored refresh token so no outstanding one can be used."""
        try:
            self.users.update_fields(user_id, relaxed=True, refresh_token=None)
            self.users.commit()
        except SQLAlchemyError as exc:
            self.users.rollback()
            logger.error(f"Clearing refresh token failed for user {user_id}: {exc}")
            raise InternalError("Something went wrong while logging out") from exc
        logger.info(f"Revoked refresh token for user {user_id}")


class TokenVerifier:
    """Resolves presented tokens back to users."""

    def __init__(self, config: TokenConfig, users: UserRepository):
        self.config = config
        self.users = users

    def verify_access(self, token: str) -> User:
        """Return the token's user without its password hash or refresh token loaded."""
        user_id = decode_token(self.config, token, ACCESS_TOKEN_TYPE)
        user = self.users.find_by_id(user_id, sanitized=True)
        if user is None:
            logger.warning(f"Access token for unknown user {user_id}")
            raise UnauthorizedError("Invalid access token")
        return user

    def verify_refresh(self, token: str) -> User:
        """Return the token's user if the token is the one currently stored."""
        user_id = decode_token(self.config, token, REFRESH_TOKEN_TYPE)
        user = self.users.find_by_id(user_id)
        if user is None:
            logger.warning(f"Refresh token for unknown user {user_id}")
            raise UnauthorizedError("Invalid refresh token")

        stored = user.refresh_token
        if not stored or not hmac.compare_digest(stored.encode("utf-8"), token.encode("utf-8")):
            logger.warning(f"Rejected stale or revoked refresh token for user {user_id}")
            raise UnauthorizedError("Refresh token is expired or used")
        return user
