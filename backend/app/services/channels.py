"""Read-side queries for channel pages and watch history."""
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.subscription import Subscription
from app.models.user import User
from app.models.video import Video, WatchHistoryEntry


class ChannelProfileQuery:
    """A channel's public profile with subscription counts.

    ``subscribers_count`` counts users subscribed to the channel,
    ``channels_subscribed_to_count`` counts channels the channel's owner
    follows, and ``is_subscribed`` says whether the viewer follows it.
    """

    def __init__(self, db: Session):
        self.db = db

    def fetch(self, username: str, viewer_id: str | None = None) -> dict[str, Any] | None:
        subscribers_count = (
            select(func.count(Subscription.id))
            .where(Subscription.channel_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        subscribed_to_count = (
            select(func.count(Subscription.id))
            .where(Subscription.subscriber_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        is_subscribed = (
            select(Subscription.id)
            .where(
                Subscription.channel_id == User.id,
                Subscription.subscriber_id == viewer_id,
            )
            .correlate(User)
            .exists()
        )

        row = (
            self.db.query(
                User.id,
                User.username,
                User.full_name,
                User.email,
                User.avatar,
                User.cover_image,
                subscribers_count.label("subscribers_count"),
                subscribed_to_count.label("channels_subscribed_to_count"),
                is_subscribed.label("is_subscribed"),
            )
            .filter(User.username == username.strip().lower())
            .first()
        )
        if row is None:
            return None

        profile = dict(row._mapping)
        profile["is_subscribed"] = bool(profile["is_subscribed"])
        return profile


class WatchHistoryQuery:
    """Videos a user has watched, newest first, joined with their owners."""

    def __init__(self, db: Session):
        self.db = db

    def fetch(self, user_id: str) -> list[dict[str, Any]]:
        rows = (
            self.db.query(
                Video,
                WatchHistoryEntry.watched_at,
                User.username,
                User.full_name,
                User.avatar,
            )
            .join(WatchHistoryEntry, WatchHistoryEntry.video_id == Video.id)
            .join(User, User.id == Video.owner_id)
            .filter(WatchHistoryEntry.user_id == user_id)
            .order_by(WatchHistoryEntry.watched_at.desc())
            .all()
        )

        history = []
        for video, watched_at, owner_username, owner_full_name, owner_avatar in rows:
            history.append({
                "id": video.id,
                "video_file": video.video_file,
                "thumbnail": video.thumbnail,
                "title": video.title,
                "description": video.description,
                "duration": video.duration,
                "views": video.views,
                "watched_at": watched_at,
                "owner": {
                    "id": video.owner_id,
                    "username": owner_username,
                    "full_name": owner_full_name,
                    "avatar": owner_avatar,
                },
            })
        return history
