"""Channel profile and watch history endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.errors import NotFoundError, ValidationError
from app.models.user import User
from app.schemas.channel import ChannelProfileResponse, WatchHistoryItem
from app.schemas.common import ApiResponse
from app.services.channels import ChannelProfileQuery, WatchHistoryQuery

router = APIRouter(prefix="/users", tags=["channels"])


@router.get("/c/{username}", response_model=ApiResponse[ChannelProfileResponse])
def get_channel_profile(
    username: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get a channel's profile with subscriber counts."""
    if not username.strip():
        raise ValidationError("Username is missing")

    profile = ChannelProfileQuery(db).fetch(username, viewer_id=current_user.id)
    if profile is None:
        raise NotFoundError("Channel does not exist")

    return ApiResponse(
        status=status.HTTP_200_OK,
        data=ChannelProfileResponse(**profile),
        message="User channel fetched successfully",
    )


@router.get("/history", response_model=ApiResponse[list[WatchHistoryItem]])
def get_watch_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get the current user's watch history, newest first."""
    history = WatchHistoryQuery(db).fetch(current_user.id)
    return ApiResponse(
        status=status.HTTP_200_OK,
        data=[WatchHistoryItem(**item) for item in history],
        message="Watch history fetched successfully",
    )
