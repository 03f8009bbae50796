"""
Desire — Messages API

Conversations may only be opened between matched users; once open, either
participant can read and send messages.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import get_conversation_service
from app.schemas.message import (
    ConversationListResponse,
    MessageListResponse,
    SendMessageRequest,
    SendMessageResponse,
    StartConversationResponse,
)
from app.security import get_current_user_id
from app.services.conversation_service import ConversationService

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# POST /start-conversation/{user_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/start-conversation/{user_id}",
    response_model=StartConversationResponse,
    summary="Open (or reuse) a conversation with a matched user",
    responses={201: {"model": StartConversationResponse}},
)
async def start_conversation(
    user_id: uuid.UUID,
    response: Response,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
) -> StartConversationResponse:
    """Return the pair's conversation id.

    Responds 201 when a new conversation was created and 200 when an
    existing one was returned.
    """
    conversation_id, created = await service.start_conversation(current_user_id, user_id)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return StartConversationResponse(conversation_id=conversation_id)


# ──────────────────────────────────────────────────────────────────────────────
# GET /conversations
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/conversations",
    response_model=ConversationListResponse,
    summary="List the caller's conversations",
)
async def list_conversations(
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
) -> ConversationListResponse:
    items = await service.list_conversations(current_user_id)
    return ConversationListResponse(conversations=items)


# ──────────────────────────────────────────────────────────────────────────────
# GET /conversation/{conversation_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/conversation/{conversation_id}",
    response_model=MessageListResponse,
    summary="Read a conversation's messages",
)
async def get_messages(
    conversation_id: uuid.UUID,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
) -> MessageListResponse:
    messages = await service.get_messages(current_user_id, conversation_id)
    return MessageListResponse(messages=messages)


# ──────────────────────────────────────────────────────────────────────────────
# POST /send
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/send",
    response_model=SendMessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
)
async def send_message(
    payload: SendMessageRequest,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
) -> SendMessageResponse:
    message_id = await service.send_message(
        current_user_id,
        payload.conversation_id,
        payload.message,
    )
    return SendMessageResponse(message_id=message_id)
