"""Authentication and account schemas."""
from pydantic import EmailStr, Field

from app.schemas.common import CamelModel


class UserRegister(CamelModel):
    """User registration fields (sent as multipart form data)."""

    username: str = Field(..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6, max_length=128)


class UserLogin(CamelModel):
    """User login request. Either username or email identifies the account."""

    username: str | None = None
    email: str | None = None
    password: str


class TokenRefresh(CamelModel):
    """Token refresh request; the cookie wins when both are present."""

    refresh_token: str | None = None


class PasswordChange(CamelModel):
    old_password: str
    new_password: str = Field(..., min_length=6, max_length=128)


class AccountUpdate(CamelModel):
    full_name: str | None = None
    email: EmailStr | None = None


class UserResponse(CamelModel):
    """User info response. Never carries the password hash or refresh token."""

    id: str
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str | None = None
    created_at: str
    updated_at: str | None = None


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenPairResponse):
    user: UserResponse
