from pydantic import Field
from uuid import UUID
from datetime import datetime
from typing import Optional

from app.schemas.common import ApiModel


class StartConversationResponse(ApiModel):
    success: bool = True
    conversation_id: UUID


class ConversationItem(ApiModel):
    id: UUID
    last_message_at: datetime
    other_user_id: UUID
    username: str
    first_name: str
    last_name: str
    profile_image: Optional[str] = None
    last_message: Optional[str] = None
    sender_id: Optional[UUID] = None
    message_time: Optional[datetime] = None
    is_from_me: bool
    unread_count: int


class ConversationListResponse(ApiModel):
    success: bool = True
    conversations: list[ConversationItem] = Field(default_factory=list)


class MessageItem(ApiModel):
    id: UUID
    message: str
    created_at: datetime
    is_read: bool
    sender_id: UUID
    first_name: str
    last_name: str
    profile_image: Optional[str] = None
    is_from_me: bool


class MessageListResponse(ApiModel):
    success: bool = True
    messages: list[MessageItem] = Field(default_factory=list)


class SendMessageRequest(ApiModel):
    conversation_id: UUID
    message: str = Field(min_length=1, max_length=5000)


class SendMessageResponse(ApiModel):
    success: bool = True
    message_id: UUID
