"""Video and watch history models."""
import uuid

from sqlalchemy import Boolean, Column, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from app.database import Base
from app.models.user import utcnow_iso


class Video(Base):
    """Published video owned by a channel."""

    __tablename__ = "videos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    video_file = Column(String(500), nullable=False)
    thumbnail = Column(String(500), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    duration = Column(Float, nullable=False)  # Seconds
    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(String(32), default=utcnow_iso)
    updated_at = Column(String(32), default=utcnow_iso, onupdate=utcnow_iso)

    owner = relationship("User", back_populates="videos")


class WatchHistoryEntry(Base):
    """A video the user has watched."""

    __tablename__ = "watch_history"
    __table_args__ = (
        Index("ix_watch_history_user_watched", "user_id", "watched_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    watched_at = Column(String(32), nullable=False, default=utcnow_iso)

    user = relationship("User", back_populates="watch_history")
    video = relationship("Video")
