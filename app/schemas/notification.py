from pydantic import AliasChoices, Field
from uuid import UUID
from datetime import datetime
from typing import Optional

from app.schemas.common import ApiModel


class NotificationItem(ApiModel):
    id: UUID
    kind: str = Field(
        validation_alias=AliasChoices("kind", "type"),
        serialization_alias="type",
    )
    message: str
    is_read: bool
    created_at: datetime
    from_user_id: Optional[UUID] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image: Optional[str] = None


class NotificationListResponse(ApiModel):
    success: bool = True
    notifications: list[NotificationItem] = Field(default_factory=list)


class UnreadCountResponse(ApiModel):
    success: bool = True
    count: int
