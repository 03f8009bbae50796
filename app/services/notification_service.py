"""
Desire — Notification Outbox

Durable, per-user notices that clients poll.  Writers (the matching engine
and the messaging service) call ``emit`` inside their own transaction; the
insert runs in a SAVEPOINT so that a failed notification is logged and
dropped without rolling back the primary write it describes.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.notification import Notification, NotificationKind
from app.models.user import User

logger = structlog.get_logger("desire.notification_service")

FALLBACK_DISPLAY_NAME = "Someone"


async def display_name(session: AsyncSession, user_id: uuid.UUID) -> str:
    """Return the user's first name, or a generic placeholder.

    A missing user or a failed lookup never aborts the calling action.
    """
    try:
        result = await session.execute(
            select(User.first_name).where(User.id == user_id)
        )
        name = result.scalar_one_or_none()
    except SQLAlchemyError:
        logger.warning("display_name_lookup_failed", user_id=str(user_id))
        return FALLBACK_DISPLAY_NAME
    return name or FALLBACK_DISPLAY_NAME


class NotificationOutbox:
    """Emit and read per-user notifications."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        list_limit: int = 50,
    ) -> None:
        self._session_factory = session_factory
        self.list_limit = list_limit

    # ── Writes ────────────────────────────────────────────────────────────

    async def emit(
        self,
        session: AsyncSession,
        *,
        recipient_id: uuid.UUID,
        kind: NotificationKind,
        message: str,
        origin_id: uuid.UUID | None = None,
    ) -> Notification | None:
        """Insert a notification as a best-effort secondary write.

        Returns the new row, or ``None`` when the insert failed.
        """
        log = logger.bind(
            recipient_id=str(recipient_id),
            kind=kind.value,
            origin_id=str(origin_id) if origin_id else None,
        )
        notification = Notification(
            user_id=recipient_id,
            kind=kind.value,
            from_user_id=origin_id,
            message=message,
            is_read=False,
        )
        try:
            async with session.begin_nested():
                session.add(notification)
        except SQLAlchemyError:
            log.exception("notification_emit_failed")
            return None

        log.info("notification_emitted", notification_id=str(notification.id))
        return notification

    async def mark_read(self, user_id: uuid.UUID, notification_id: uuid.UUID) -> bool:
        """Mark one of the user's notifications read.

        Returns ``False`` when no notification with that id belongs to the
        user; other users' rows are never touched.
        """
        async with self._session_factory.begin() as session:
            result = await session.execute(
                update(Notification)
                .where(
                    Notification.id == notification_id,
                    Notification.user_id == user_id,
                )
                .values(is_read=True)
            )
        updated = result.rowcount > 0
        logger.info(
            "notification_marked_read",
            user_id=str(user_id),
            notification_id=str(notification_id),
            updated=updated,
        )
        return updated

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        async with self._session_factory.begin() as session:
            result = await session.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.is_read.is_(False))
                .values(is_read=True)
            )
        logger.info("notifications_marked_read", user_id=str(user_id), count=result.rowcount)
        return result.rowcount

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_for_user(self, user_id: uuid.UUID) -> list[dict[str, Any]]:
        """Return the most recent notifications for ``user_id``, newest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Notification)
                .where(Notification.user_id == user_id)
                .order_by(Notification.created_at.desc())
                .limit(self.list_limit)
            )
            notifications = result.scalars().all()

        items: list[dict[str, Any]] = []
        for n in notifications:
            origin = n.from_user
            items.append({
                "id": n.id,
                "kind": n.kind,
                "message": n.message,
                "is_read": n.is_read,
                "created_at": n.created_at,
                "from_user_id": n.from_user_id,
                "first_name": origin.first_name if origin else None,
                "last_name": origin.last_name if origin else None,
                "profile_image": origin.profile_image if origin else None,
            })
        return items

    async def unread_count(self, user_id: uuid.UUID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.count())
                .select_from(Notification)
                .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            )
            return int(result.scalar_one())
