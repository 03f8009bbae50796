"""
Desire — Like and Match models.

``likes`` holds directed "liker likes liked" facts, unique per ordered pair.
``matches`` holds one row per unordered pair, stored canonically with the
smaller id in ``user1_id`` so the unique constraint is symmetric.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.timestamps import utcnow


def canonical_pair(a: uuid.UUID, b: uuid.UUID) -> tuple[uuid.UUID, uuid.UUID]:
    """Return ``(min, max)`` of two user ids."""
    return (a, b) if a < b else (b, a)


class Like(Base):
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("liker_id", "liked_id", name="uq_like_pair"),
        CheckConstraint("liker_id <> liked_id", name="ck_like_not_self"),
        Index("ix_likes_liked_id", "liked_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    liker_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    liked_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    # ── Relationships ──────────────────────────────────────────────
    liker: Mapped["User"] = relationship(
        "User", foreign_keys=[liker_id], lazy="selectin"
    )
    liked: Mapped["User"] = relationship(
        "User", foreign_keys=[liked_id], lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Like {self.liker_id} -> {self.liked_id}>"


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        UniqueConstraint("user1_id", "user2_id", name="uq_match_pair"),
        CheckConstraint("user1_id < user2_id", name="ck_match_canonical_order"),
        Index("ix_matches_user2_id", "user2_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    user1_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    user2_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    # ── Relationships ──────────────────────────────────────────────
    user1: Mapped["User"] = relationship(
        "User", foreign_keys=[user1_id], lazy="selectin"
    )
    user2: Mapped["User"] = relationship(
        "User", foreign_keys=[user2_id], lazy="selectin"
    )

    def other_user_id(self, user_id: uuid.UUID) -> uuid.UUID:
        return self.user2_id if self.user1_id == user_id else self.user1_id

    def __repr__(self) -> str:
        return f"<Match {self.user1_id} <-> {self.user2_id}>"
