"""
Desire — Conversation Gate & Messaging

A conversation may only be opened between matched users.  Starting one is
idempotent per unordered pair: the existing conversation id is returned even
if the pair has since unmatched (conversations are not torn down on unmatch).
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.errors import PermissionDeniedError, SelfActionError
from app.models.conversation import Conversation, Message
from app.models.match import canonical_pair
from app.models.notification import NotificationKind
from app.models.timestamps import utcnow
from app.services.matching_service import match_exists
from app.services.notification_service import NotificationOutbox, display_name
from app.services.pair_lock import NullPairLock

logger = structlog.get_logger("desire.conversation_service")

NOT_MATCHED_MESSAGE = "You can only message matched users"


class ConversationService:
    """Match-gated conversation creation plus message history and sending."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifications: NotificationOutbox,
        pair_lock: Any | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._notifications = notifications
        self._pair_lock = pair_lock if pair_lock is not None else NullPairLock()

    # ── Gate ──────────────────────────────────────────────────────────────

    async def start_conversation(
        self,
        user_id: uuid.UUID,
        other_id: uuid.UUID,
    ) -> tuple[uuid.UUID, bool]:
        """Return ``(conversation_id, created)`` for the pair.

        Raises
        ------
        SelfActionError
            ``user_id == other_id``.
        PermissionDeniedError
            No conversation exists yet and the pair is not matched.
        """
        if user_id == other_id:
            raise SelfActionError("Cannot start conversation with yourself")

        log = logger.bind(user_id=str(user_id), other_id=str(other_id))
        low, high = canonical_pair(user_id, other_id)

        async with self._pair_lock.hold(user_id, other_id):
            async with self._session_factory.begin() as session:
                existing = (
                    await session.execute(
                        select(Conversation.id).where(
                            Conversation.user1_id == low,
                            Conversation.user2_id == high,
                        )
                    )
                ).scalar_one_or_none()
                if existing is not None:
                    log.info("conversation_exists", conversation_id=str(existing))
                    return existing, False

                if not await match_exists(session, user_id, other_id):
                    log.info("conversation_denied_not_matched")
                    raise PermissionDeniedError(NOT_MATCHED_MESSAGE)

                conversation = Conversation(user1_id=low, user2_id=high)
                session.add(conversation)
                await session.flush()
                conversation_id = conversation.id

        log.info("conversation_created", conversation_id=str(conversation_id))
        return conversation_id, True

    # ── Messaging ─────────────────────────────────────────────────────────

    async def list_conversations(self, user_id: uuid.UUID) -> list[dict[str, Any]]:
        """Conversations of ``user_id`` with the latest message and unread
        count, most recently active first."""
        async with self._session_factory() as session:
            conversations = (
                await session.execute(
                    select(Conversation)
                    .where(or_(Conversation.user1_id == user_id, Conversation.user2_id == user_id))
                    .order_by(Conversation.last_message_at.desc())
                )
            ).scalars().all()
            if not conversations:
                return []

            ids = [c.id for c in conversations]

            unread_rows = await session.execute(
                select(Message.conversation_id, func.count())
                .where(
                    Message.conversation_id.in_(ids),
                    Message.sender_id != user_id,
                    Message.is_read.is_(False),
                )
                .group_by(Message.conversation_id)
            )
            unread = {cid: count for cid, count in unread_rows.all()}

            latest = (
                select(Message.conversation_id, func.max(Message.created_at).label("at"))
                .where(Message.conversation_id.in_(ids))
                .group_by(Message.conversation_id)
                .subquery()
            )
            last_rows = await session.execute(
                select(Message).join(
                    latest,
                    and_(
                        Message.conversation_id == latest.c.conversation_id,
                        Message.created_at == latest.c.at,
                    ),
                )
            )
            last_message = {m.conversation_id: m for m in last_rows.scalars().all()}

        items: list[dict[str, Any]] = []
        for c in conversations:
            other = c.user2 if c.user1_id == user_id else c.user1
            last = last_message.get(c.id)
            items.append({
                "id": c.id,
                "last_message_at": c.last_message_at,
                "other_user_id": other.id,
                "username": other.username,
                "first_name": other.first_name,
                "last_name": other.last_name,
                "profile_image": other.profile_image,
                "last_message": last.body if last else None,
                "sender_id": last.sender_id if last else None,
                "message_time": last.created_at if last else None,
                "is_from_me": bool(last and last.sender_id == user_id),
                "unread_count": unread.get(c.id, 0),
            })
        return items

    async def get_messages(
        self,
        user_id: uuid.UUID,
        conversation_id: uuid.UUID,
    ) -> list[dict[str, Any]]:
        """Return the conversation's messages oldest first and mark the
        other participant's messages read."""
        async with self._session_factory.begin() as session:
            conversation = await self._participant_conversation(session, user_id, conversation_id)

            await session.execute(
                update(Message)
                .where(
                    Message.conversation_id == conversation.id,
                    Message.sender_id != user_id,
                    Message.is_read.is_(False),
                )
                .values(is_read=True)
                .execution_options(synchronize_session=False)
            )

            messages = (
                await session.execute(
                    select(Message)
                    .where(Message.conversation_id == conversation.id)
                    .order_by(Message.created_at.asc())
                    .execution_options(populate_existing=True)
                )
            ).scalars().all()

            return [
                {
                    "id": m.id,
                    "message": m.body,
                    "created_at": m.created_at,
                    "is_read": m.is_read,
                    "sender_id": m.sender_id,
                    "first_name": m.sender.first_name,
                    "last_name": m.sender.last_name,
                    "profile_image": m.sender.profile_image,
                    "is_from_me": m.sender_id == user_id,
                }
                for m in messages
            ]

    async def send_message(
        self,
        user_id: uuid.UUID,
        conversation_id: uuid.UUID,
        body: str,
    ) -> uuid.UUID:
        """Append a message and notify the other participant."""
        log = logger.bind(user_id=str(user_id), conversation_id=str(conversation_id))

        async with self._session_factory.begin() as session:
            conversation = await self._participant_conversation(session, user_id, conversation_id)

            message = Message(conversation_id=conversation.id, sender_id=user_id, body=body)
            session.add(message)
            conversation.last_message_at = utcnow()
            await session.flush()
            message_id = message.id

            recipient_id = conversation.other_user_id(user_id)
            sender_name = await display_name(session, user_id)
            await self._notifications.emit(
                session,
                recipient_id=recipient_id,
                kind=NotificationKind.MESSAGE,
                message=f"{sender_name} sent you a message!",
                origin_id=user_id,
            )

        log.info("message_sent", message_id=str(message_id))
        return message_id

    # ── Internal helpers ──────────────────────────────────────────────────

    async def _participant_conversation(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        conversation_id: uuid.UUID,
    ) -> Conversation:
        conversation = await session.get(Conversation, conversation_id)
        if conversation is None or not conversation.has_participant(user_id):
            logger.info(
                "conversation_access_denied",
                user_id=str(user_id),
                conversation_id=str(conversation_id),
            )
            raise PermissionDeniedError("Access denied")
        return conversation
