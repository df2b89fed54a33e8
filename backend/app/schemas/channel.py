"""Channel profile and watch history schemas."""
from app.schemas.common import CamelModel


class ChannelProfileResponse(CamelModel):
    id: str
    username: str
    full_name: str
    email: str
    avatar: str
    cover_image: str | None = None
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool


class VideoOwner(CamelModel):
    id: str
    username: str
    full_name: str
    avatar: str


class WatchHistoryItem(CamelModel):
    """A watched video with a trimmed view of its owner."""

    id: str
    video_file: str
    thumbnail: str
    title: str
    description: str | None = None
    duration: float
    views: int
    watched_at: str
    owner: VideoOwner
