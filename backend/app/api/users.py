"""User account and authentication API endpoints."""
import logging

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from pydantic import ValidationError as PydanticValidationError

from app.api.deps import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_current_user,
    get_media_storage,
    get_token_issuer,
    get_token_verifier,
    get_user_repository,
)
from app.config import get_settings
from app.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    describe_validation_errors,
)
from app.models.user import User
from app.schemas.auth import (
    AccountUpdate,
    LoginResponse,
    PasswordChange,
    TokenPairResponse,
    TokenRefresh,
    UserLogin,
    UserRegister,
    UserResponse,
)
from app.schemas.common import ApiResponse
from app.services.credential_store import UserRepository
from app.services.media_storage import MediaStorage
from app.services.passwords import verify_password
from app.services.tokens import TokenIssuer, TokenPair, TokenVerifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])
settings = get_settings()


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
        "path": "/",
    }


def set_auth_cookies(response: Response, pair: TokenPair) -> None:
    """Issue secure HttpOnly cookies for both tokens."""
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=pair.access_token,
        max_age=settings.access_token_expire_minutes * 60,
        **_cookie_options(),
    )
    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE,
        value=pair.refresh_token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        **_cookie_options(),
    )


def clear_auth_cookies(response: Response) -> None:
    """Clear both token cookies."""
    for key in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(key=key, **_cookie_options())


@router.post("/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
def register(
    full_name: str | None = Form(None, alias="fullName"),
    email: str | None = Form(None),
    username: str | None = Form(None),
    password: str | None = Form(None),
    avatar: UploadFile | None = File(None),
    cover_image: UploadFile | None = File(None, alias="coverImage"),
    users: UserRepository = Depends(get_user_repository),
    media: MediaStorage = Depends(get_media_storage),
):
    """Register a new user with an avatar and optional cover image."""
    if any(not (value and value.strip()) for value in (full_name, email, username, password)):
        raise ValidationError("All fields are required")

    try:
        user_data = UserRegister(
            username=username.strip(),
            email=email.strip(),
            full_name=full_name.strip(),
            password=password,
        )
    except PydanticValidationError as exc:
        raise ValidationError(describe_validation_errors(exc.errors())) from exc

    if users.find_by_username_or_email(username=user_data.username, email=user_data.email):
        raise ConflictError("User with given username or email already exists")

    if avatar is None or not avatar.filename:
        raise ValidationError("Avatar file is required")

    media.check_image(avatar)
    if cover_image is not None and cover_image.filename:
        media.check_image(cover_image)

    avatar_url = media.save(avatar)
    if not avatar_url:
        raise InternalError("Avatar could not be uploaded")

    cover_image_url = ""
    try:
        cover_image_url = media.save(cover_image) or ""
        user = users.create(
            username=user_data.username,
            email=user_data.email,
            full_name=user_data.full_name,
            password=user_data.password,
            avatar=avatar_url,
            cover_image=cover_image_url,
        )
    except Exception:
        media.delete(avatar_url)
        media.delete(cover_image_url)
        raise

    logger.info(f"Registered user {user.id} ({user.username})")
    return ApiResponse(
        status=status.HTTP_201_CREATED,
        data=UserResponse.model_validate(user),
        message="User registered successfully",
    )


@router.post("/login", response_model=ApiResponse[LoginResponse])
def login(
    credentials: UserLogin,
    response: Response,
    users: UserRepository = Depends(get_user_repository),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Login with username or email and get a token pair."""
    if not (credentials.username or credentials.email):
        raise ValidationError("Username or email is required")

    user = users.find_by_username_or_email(username=credentials.username, email=credentials.email)
    if user is None:
        raise NotFoundError("User does not exist")

    if not verify_password(credentials.password, user.password_hash):
        logger.warning(f"Failed login for user {user.id}")
        raise UnauthorizedError(
            "Invalid user credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    pair = issuer.issue(user.id)
    set_auth_cookies(response, pair)
    logger.info(f"User {user.id} logged in")

    return ApiResponse(
        status=status.HTTP_200_OK,
        data=LoginResponse(
            user=UserResponse.model_validate(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        ),
        message="User logged in successfully",
    )


@router.post("/logout", response_model=ApiResponse[dict])
def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Logout and revoke the stored refresh token."""
    issuer.revoke(current_user.id)
    clear_auth_cookies(response)
    return ApiResponse(status=status.HTTP_200_OK, data={}, message="User logged out")


@router.post("/refresh-token", response_model=ApiResponse[TokenPairResponse])
def refresh_access_token(
    request: Request,
    response: Response,
    body: TokenRefresh | None = None,
    verifier: TokenVerifier = Depends(get_token_verifier),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Exchange a refresh token (cookie or body) for a new pair, rotating the stored one."""
    incoming_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not incoming_token and body is not None:
        incoming_token = body.refresh_token
    if not incoming_token:
        raise UnauthorizedError("Unauthorized request")

    user = verifier.verify_refresh(incoming_token)
    pair = issuer.issue(user.id)
    set_auth_cookies(response, pair)

    return ApiResponse(
        status=status.HTTP_200_OK,
        data=TokenPairResponse(access_token=pair.access_token, refresh_token=pair.refresh_token),
        message="Access token refreshed",
    )


@router.post("/change-password", response_model=ApiResponse[dict])
def change_password(
    payload: PasswordChange,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    """Change the current user's password."""
    if not verify_password(payload.old_password, current_user.password_hash):
        raise ValidationError("Invalid old password")

    users.update_fields(current_user.id, password=payload.new_password)
    users.commit()
    logger.info(f"User {current_user.id} changed password")
    return ApiResponse(status=status.HTTP_200_OK, data={}, message="Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[UserResponse])
def get_current_user_profile(current_user: User = Depends(get_current_user)):
    """Get the authenticated user."""
    return ApiResponse(
        status=status.HTTP_200_OK,
        data=UserResponse.model_validate(current_user),
        message="User fetched successfully",
    )


@router.patch("/update-details", response_model=ApiResponse[UserResponse])
def update_account_details(
    payload: AccountUpdate,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    """Update full name and email."""
    if not (payload.full_name and payload.full_name.strip()) or not payload.email:
        raise ValidationError("All fields are required")

    existing = users.find_by_username_or_email(email=payload.email)
    if existing is not None and existing.id != current_user.id:
        raise ConflictError("Email is already in use")

    users.update_fields(current_user.id, full_name=payload.full_name.strip(), email=payload.email)
    users.commit()

    return ApiResponse(
        status=status.HTTP_200_OK,
        data=UserResponse.model_validate(current_user),
        message="Account details updated successfully",
    )


def _replace_image(
    field: str,
    upload: UploadFile | None,
    label: str,
    current_user: User,
    users: UserRepository,
    media: MediaStorage,
) -> User:
    if upload is None or not upload.filename:
        raise ValidationError(f"{label} file is missing")

    url = media.save(upload)
    if not url:
        raise InternalError(f"Error while uploading {label.lower()}")

    previous_url = getattr(current_user, field)
    try:
        users.update_fields(current_user.id, **{field: url})
        users.commit()
    except Exception:
        users.rollback()
        media.delete(url)
        raise
    media.delete(previous_url)
    return current_user


@router.patch("/update-avatar", response_model=ApiResponse[UserResponse])
def update_avatar(
    avatar: UploadFile | None = File(None),
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
    media: MediaStorage = Depends(get_media_storage),
):
    """Replace the current user's avatar."""
    user = _replace_image("avatar", avatar, "Avatar", current_user, users, media)
    return ApiResponse(
        status=status.HTTP_200_OK,
        data=UserResponse.model_validate(user),
        message="Avatar updated successfully",
    )


@router.patch("/update-cover-image", response_model=ApiResponse[UserResponse])
def update_cover_image(
    cover_image: UploadFile | None = File(None, alias="coverImage"),
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
    media: MediaStorage = Depends(get_media_storage),
):
    """Replace the current user's cover image."""
    user = _replace_image("cover_image", cover_image, "Cover image", current_user, users, media)
    return ApiResponse(
        status=status.HTTP_200_OK,
        data=UserResponse.model_validate(user),
        message="Cover image updated successfully",
    )
