"""
Desire — Service providers for FastAPI dependency injection.

Services are cheap, stateless wrappers around the session factory and the
pair lock, so they are built per request.  Tests swap the storage and lock
backends through ``app.dependency_overrides`` on ``get_session_factory`` and
``get_pair_lock``.
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import get_settings
from app.database import get_session_factory
from app.services.conversation_service import ConversationService
from app.services.favorite_service import FavoriteService
from app.services.matching_service import MatchingService
from app.services.notification_service import NotificationOutbox
from app.services.pair_lock import LocalPairLock, NullPairLock
from app.services.profile_service import ProfileService

# ── Pair lock (installed by the lifespan; lazily defaulted otherwise) ─────────

_pair_lock = None


def install_pair_lock(lock) -> None:
    global _pair_lock
    _pair_lock = lock


def get_pair_lock():
    global _pair_lock
    if _pair_lock is None:
        settings = get_settings()
        if settings.SERIALIZE_PAIR_ACTIONS:
            _pair_lock = LocalPairLock(wait_seconds=settings.PAIR_LOCK_WAIT_SECONDS)
        else:
            _pair_lock = NullPairLock()
    return _pair_lock


# ── Services ──────────────────────────────────────────────────────────────────

def get_notification_outbox(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> NotificationOutbox:
    return NotificationOutbox(
        session_factory,
        list_limit=get_settings().NOTIFICATIONS_LIMIT,
    )


def get_matching_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    notifications: NotificationOutbox = Depends(get_notification_outbox),
    pair_lock=Depends(get_pair_lock),
) -> MatchingService:
    return MatchingService(session_factory, notifications, pair_lock)


def get_conversation_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    notifications: NotificationOutbox = Depends(get_notification_outbox),
    pair_lock=Depends(get_pair_lock),
) -> ConversationService:
    return ConversationService(session_factory, notifications, pair_lock)


def get_profile_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ProfileService:
    return ProfileService(session_factory)


def get_favorite_service(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> FavoriteService:
    return FavoriteService(session_factory)
