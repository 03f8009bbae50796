"""
Desire — Like/Match Engine

Turns one-directional likes into symmetric matches:

  like(A, B)     insert Like(A→B); if Like(B→A) exists, create
                 Match(min, max) and notify both users, otherwise notify B
                 of the like.
  unmatch(A, B)  delete Match{A, B}, notify B.  Both likes stay, and a
                 repeated like is rejected as a duplicate, so a match is
                 never rebuilt from stale likes.

Each pair-scoped action runs inside one transaction while holding the pair
lock (``app.services.pair_lock``).  Without serialization two reciprocal
likes may both miss each other inside their transactions.  Each like that
saw no reciprocal takes a second look after committing, so the later of the
two always finds both rows and creates the match.  The unique constraint on
``matches`` and the idempotent insert keep it to a single row, and only the
call that created the row emits the match notification pair.  The liked user
may additionally keep a ``like`` notice from the racing call.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.errors import (
    DuplicateActionError,
    MatchNotFoundError,
    NotFoundError,
    SelfActionError,
)
from app.models.match import Like, Match, canonical_pair
from app.models.notification import NotificationKind
from app.models.user import User
from app.services.notification_service import NotificationOutbox, display_name
from app.services.pair_lock import NullPairLock
from app.services.summaries import matched_user_summary, user_summary

logger = structlog.get_logger("desire.matching_service")

MATCH_MESSAGE = "You have a new match!"


# ──────────────────────────────────────────────────────────────────────────────
# Store helpers (shared with the conversation and visibility gates)
# ──────────────────────────────────────────────────────────────────────────────

async def get_match(session: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> Match | None:
    low, high = canonical_pair(a, b)
    result = await session.execute(
        select(Match).where(Match.user1_id == low, Match.user2_id == high)
    )
    return result.scalar_one_or_none()


async def match_exists(session: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> bool:
    low, high = canonical_pair(a, b)
    result = await session.execute(
        select(Match.id).where(Match.user1_id == low, Match.user2_id == high)
    )
    return result.scalar_one_or_none() is not None


async def like_exists(session: AsyncSession, liker_id: uuid.UUID, liked_id: uuid.UUID) -> bool:
    result = await session.execute(
        select(Like.id).where(Like.liker_id == liker_id, Like.liked_id == liked_id)
    )
    return result.scalar_one_or_none() is not None


async def matched_partner_ids(session: AsyncSession, user_id: uuid.UUID) -> set[uuid.UUID]:
    result = await session.execute(
        select(Match.user1_id, Match.user2_id).where(
            or_(Match.user1_id == user_id, Match.user2_id == user_id)
        )
    )
    return {u2 if u1 == user_id else u1 for u1, u2 in result.all()}


class MatchingService:
    """The like/match state machine.

    Dependencies are injected at construction so that the service can be
    exercised against any database and lock backend.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifications: NotificationOutbox,
        pair_lock: Any | None = None,
    ) -> None:
        """
        Parameters
        ----------
        session_factory:
            Factory for the durable store; each operation opens its own
            transaction.
        notifications:
            Outbox receiving like / match / unmatch notices.
        pair_lock:
            Object exposing ``hold(a, b)`` as an async context manager.
            Defaults to no serialization.
        """
        self._session_factory = session_factory
        self._notifications = notifications
        self._pair_lock = pair_lock if pair_lock is not None else NullPairLock()

    # ── Actions ───────────────────────────────────────────────────────────

    async def like(self, liker_id: uuid.UUID, liked_id: uuid.UUID) -> dict[str, Any]:
        """Record that ``liker_id`` likes ``liked_id`` and detect a match.

        Returns
        -------
        dict
            ``{"is_match": bool, "matched_user": dict | None}``;
            ``matched_user`` is the liked user's card when a match formed.

        Raises
        ------
        SelfActionError
            ``liker_id == liked_id``.
        NotFoundError
            Either user does not exist or is deactivated.
        DuplicateActionError
            ``liker_id`` already liked ``liked_id``; nothing is written.
        """
        if liker_id == liked_id:
            raise SelfActionError("Cannot like yourself")

        log = logger.bind(liker_id=str(liker_id), liked_id=str(liked_id))
        log.info("like_start")

        async with self._pair_lock.hold(liker_id, liked_id):
            async with self._session_factory.begin() as session:
                liker = await session.get(User, liker_id)
                if liker is None or not liker.is_active:
                    raise NotFoundError("User not found")
                liked_user = await session.get(User, liked_id)
                if liked_user is None or not liked_user.is_active:
                    raise NotFoundError("User not found")

                if await like_exists(session, liker_id, liked_id):
                    log.info("like_duplicate")
                    raise DuplicateActionError("Already liked this user")

                try:
                    async with session.begin_nested():
                        session.add(Like(liker_id=liker_id, liked_id=liked_id))
                except IntegrityError:
                    if not await like_exists(session, liker_id, liked_id):
                        raise
                    log.info("like_duplicate", detected_by="constraint")
                    raise DuplicateActionError("Already liked this user")

                if await self._reciprocal_like_exists(session, liker_id, liked_id):
                    created = await self._insert_match(session, liker_id, liked_id)
                    if created:
                        await self._emit_match_pair(session, liker_id, liked_id)
                    else:
                        log.warning("match_already_present")
                    is_match = True
                else:
                    liker_name = await display_name(session, liker_id)
                    await self._notifications.emit(
                        session,
                        recipient_id=liked_id,
                        kind=NotificationKind.LIKE,
                        message=f"{liker_name} liked your profile!",
                        origin_id=liker_id,
                    )
                    is_match = False

            if not is_match:
                is_match = await self._reconcile_match(liker_id, liked_id)

        result = {
            "is_match": is_match,
            "matched_user": matched_user_summary(liked_user) if is_match else None,
        }
        log.info("like_complete", is_match=is_match)
        return result

    async def dislike(self, user_id: uuid.UUID, other_id: uuid.UUID) -> None:
        """Client-side filter only; nothing is persisted."""
        if user_id == other_id:
            raise SelfActionError("Cannot dislike yourself")
        logger.info("dislike", user_id=str(user_id), other_id=str(other_id))

    async def unmatch(self, user_id: uuid.UUID, other_id: uuid.UUID) -> None:
        """Delete the match between the pair and notify ``other_id``.

        The underlying likes are left in place.
        """
        if user_id == other_id:
            raise SelfActionError("Cannot unmatch yourself")

        log = logger.bind(user_id=str(user_id), other_id=str(other_id))
        log.info("unmatch_start")

        async with self._pair_lock.hold(user_id, other_id):
            async with self._session_factory.begin() as session:
                match = await get_match(session, user_id, other_id)
                if match is None:
                    log.info("unmatch_no_match")
                    raise MatchNotFoundError()

                await session.delete(match)
                await session.flush()

                name = await display_name(session, user_id)
                await self._notifications.emit(
                    session,
                    recipient_id=other_id,
                    kind=NotificationKind.UNMATCH,
                    message=f"{name} unmatched with you",
                    origin_id=user_id,
                )

        log.info("unmatch_complete")

    # ── Projections ───────────────────────────────────────────────────────

    async def list_matches(self, user_id: uuid.UUID) -> list[dict[str, Any]]:
        """Matched users' cards with ``match_date``, newest match first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Match)
                .where(or_(Match.user1_id == user_id, Match.user2_id == user_id))
                .order_by(Match.created_at.desc())
            )
            matches = result.scalars().all()

        items: list[dict[str, Any]] = []
        for m in matches:
            other = m.user2 if m.user1_id == user_id else m.user1
            card = user_summary(other)
            card["match_date"] = m.created_at
            items.append(card)

        logger.info("list_matches", user_id=str(user_id), count=len(items))
        return items

    async def list_sent_likes(self, user_id: uuid.UUID) -> list[dict[str, Any]]:
        """Users ``user_id`` liked, with ``liked_at`` and ``matched``."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Like)
                .where(Like.liker_id == user_id)
                .order_by(Like.created_at.desc())
            )
            likes = result.scalars().all()
            partners = await matched_partner_ids(session, user_id)

        items: list[dict[str, Any]] = []
        for like in likes:
            card = user_summary(like.liked)
            card["liked_at"] = like.created_at
            card["matched"] = like.liked_id in partners
            items.append(card)
        return items

    async def list_received_likes(self, user_id: uuid.UUID) -> list[dict[str, Any]]:
        """Users who liked ``user_id``, with ``liked_at``, ``matched`` and
        ``liked_back`` (the viewer already liked the sender)."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Like)
                .where(Like.liked_id == user_id)
                .order_by(Like.created_at.desc())
            )
            likes = result.scalars().all()
            partners = await matched_partner_ids(session, user_id)
            sent = set(
                (
                    await session.execute(
                        select(Like.liked_id).where(Like.liker_id == user_id)
                    )
                ).scalars().all()
            )

        items: list[dict[str, Any]] = []
        for like in likes:
            card = user_summary(like.liker)
            card["liked_at"] = like.created_at
            card["matched"] = like.liker_id in partners
            card["liked_back"] = like.liker_id in sent
            items.append(card)
        return items

    # ── Internal helpers ──────────────────────────────────────────────────

    async def _insert_match(self, session: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> bool:
        """Insert Match(min, max) unless it exists.  Returns True if created."""
        if await match_exists(session, a, b):
            return False

        low, high = canonical_pair(a, b)
        try:
            async with session.begin_nested():
                session.add(Match(user1_id=low, user2_id=high))
        except IntegrityError:
            return False

        logger.info("match_created", user1_id=str(low), user2_id=str(high))
        return True

    async def _reciprocal_like_exists(
        self, session: AsyncSession, liker_id: uuid.UUID, liked_id: uuid.UUID
    ) -> bool:
        return await like_exists(session, liked_id, liker_id)

    async def _emit_match_pair(self, session: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> None:
        await self._notifications.emit(
            session,
            recipient_id=b,
            kind=NotificationKind.MATCH,
            message=MATCH_MESSAGE,
            origin_id=a,
        )
        await self._notifications.emit(
            session,
            recipient_id=a,
            kind=NotificationKind.MATCH,
            message=MATCH_MESSAGE,
            origin_id=b,
        )

    async def _reconcile_match(self, liker_id: uuid.UUID, liked_id: uuid.UUID) -> bool:
        """Second look, after our like committed, for a reciprocal like.

        Two unserialized reciprocal likes can each miss the other's
        uncommitted row.  Whichever call gets here and wins the idempotent
        insert creates the match and emits the notification pair; returns
        True only for that call.
        """
        async with self._session_factory.begin() as session:
            if not await like_exists(session, liked_id, liker_id):
                return False
            if not await self._insert_match(session, liker_id, liked_id):
                return False
            await self._emit_match_pair(session, liker_id, liked_id)

        logger.warning("match_reconciled", liker_id=str(liker_id), liked_id=str(liked_id))
        return True
