"""
Desire — User model.

Owned by the identity service; the matching core only references users by
id and reads display data from them.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.timestamps import utcnow


class ProfileVisibility(str, enum.Enum):
    PUBLIC = "public"
    MATCHES = "matches"
    PRIVATE = "private"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(
        String(100), unique=True, index=True, nullable=False
    )
    username: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False
    )
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gender: Mapped[str | None] = mapped_column(
        String(10), nullable=True, comment="male / female / other"
    )
    looking_for: Mapped[str | None] = mapped_column(
        String(10), nullable=True, comment="male / female / both"
    )
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    interests: Mapped[list | None] = mapped_column(
        JSON, nullable=True, comment="Array of interest tags"
    )
    photos: Mapped[list | None] = mapped_column(
        JSON, nullable=True, comment="Array of photo URLs"
    )
    profile_image: Mapped[str | None] = mapped_column(String(255), nullable=True)
    profile_visibility: Mapped[str] = mapped_column(
        String(10),
        default=ProfileVisibility.PUBLIC.value,
        server_default=ProfileVisibility.PUBLIC.value,
        nullable=False,
        comment="public / matches / private",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true", nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    def __repr__(self) -> str:
        return f"<User {self.username!r} id={self.id}>"
