"""Channel subscription model."""
import uuid

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

from app.database import Base
from app.models.user import utcnow_iso


class Subscription(Base):
    """A subscriber following a channel. Both sides are users."""

    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscription"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    subscriber_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(String(32), default=utcnow_iso)
