"""SQLAlchemy models package."""
from app.models.user import User
from app.models.video import Video, WatchHistoryEntry
from app.models.subscription import Subscription

__all__ = [
    "User",
    "Video",
    "WatchHistoryEntry",
    "Subscription",
]
