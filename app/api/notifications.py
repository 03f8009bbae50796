"""
Desire — Notifications API

Notifications are polled; there is no push channel.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends

from app.api.deps import get_notification_outbox
from app.schemas.common import SuccessResponse
from app.schemas.notification import NotificationListResponse, UnreadCountResponse
from app.security import get_current_user_id
from app.services.notification_service import NotificationOutbox

logger = structlog.get_logger("desire.api.notifications")

router = APIRouter()


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List recent notifications",
)
async def list_notifications(
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    outbox: NotificationOutbox = Depends(get_notification_outbox),
) -> NotificationListResponse:
    return NotificationListResponse(notifications=await outbox.list_for_user(current_user_id))


# Static paths are registered before "/{notification_id}/read".

@router.put(
    "/read-all",
    response_model=SuccessResponse,
    summary="Mark every notification read",
)
async def mark_all_read(
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    outbox: NotificationOutbox = Depends(get_notification_outbox),
) -> SuccessResponse:
    await outbox.mark_all_read(current_user_id)
    return SuccessResponse(message="All notifications marked as read")


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Count unread notifications",
)
async def unread_count(
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    outbox: NotificationOutbox = Depends(get_notification_outbox),
) -> UnreadCountResponse:
    return UnreadCountResponse(count=await outbox.unread_count(current_user_id))


@router.put(
    "/{notification_id}/read",
    response_model=SuccessResponse,
    summary="Mark one notification read",
)
async def mark_read(
    notification_id: uuid.UUID,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    outbox: NotificationOutbox = Depends(get_notification_outbox),
) -> SuccessResponse:
    """Only the recipient's own notification is touched; an unknown id is a
    no-op."""
    updated = await outbox.mark_read(current_user_id, notification_id)
    if not updated:
        logger.info(
            "mark_read_noop",
            user_id=str(current_user_id),
            notification_id=str(notification_id),
        )
    return SuccessResponse(message="Notification marked as read")
