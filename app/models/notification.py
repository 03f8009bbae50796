"""
Desire — Notification model (per-user polled outbox).
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.timestamps import utcnow


class NotificationKind(str, enum.Enum):
    LIKE = "like"
    MATCH = "match"
    UNMATCH = "unmatch"
    MESSAGE = "message"


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_created", "user_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[str] = mapped_column(
        String(10), nullable=False, comment="like / match / unmatch / message"
    )
    from_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    # ── Relationships ──────────────────────────────────────────────
    from_user: Mapped["User"] = relationship(
        "User", foreign_keys=[from_user_id], lazy="selectin"
    )

    def __repr__(self) -> str:
        return (
            f"<Notification {self.kind!r} to={self.user_id} "
            f"from={self.from_user_id} read={self.is_read}>"
        )
