"""User model."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship, validates

from app.database import Base


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class User(Base):
    """User account; doubles as the user's channel."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(100), nullable=False, index=True)
    avatar = Column(String(500), nullable=False)
    cover_image = Column(String(500), default="")
    password_hash = Column(String(255), nullable=False)
    refresh_token = Column(Text)  # Single active refresh token, NULL when logged out
    created_at = Column(String(32), default=utcnow_iso)
    updated_at = Column(String(32), default=utcnow_iso, onupdate=utcnow_iso)

    # Relationships
    videos = relationship("Video", back_populates="owner", cascade="all, delete-orphan")
    watch_history = relationship("WatchHistoryEntry", back_populates="user", cascade="all, delete-orphan")

    @validates("username", "email")
    def normalize_identifier(self, key: str, value: str) -> str:
        """Usernames and emails are stored trimmed and lowercased."""
        if value is None:
            raise ValueError(f"{key} is required")
        return value.strip().lower()
