"""
Desire — Favorites

Private bookmarks.  Favoriting has no effect on matching; listed cards carry
a derived ``matched`` flag.
"""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.errors import DuplicateActionError, NotFoundError, SelfActionError
from app.models.favorite import Favorite
from app.models.user import User
from app.services.matching_service import matched_partner_ids
from app.services.summaries import user_summary

logger = structlog.get_logger("desire.favorite_service")


class FavoriteService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, user_id: uuid.UUID, other_id: uuid.UUID) -> None:
        if user_id == other_id:
            raise SelfActionError("Cannot add yourself to favorites")

        log = logger.bind(user_id=str(user_id), other_id=str(other_id))

        async with self._session_factory.begin() as session:
            if await session.get(User, user_id) is None:
                raise NotFoundError("User not found")
            if await session.get(User, other_id) is None:
                raise NotFoundError("User not found")

            if await self._favorite_exists(session, user_id, other_id):
                raise DuplicateActionError("User already in favorites")

            try:
                async with session.begin_nested():
                    session.add(Favorite(user_id=user_id, favorite_user_id=other_id))
            except IntegrityError:
                if not await self._favorite_exists(session, user_id, other_id):
                    raise
                raise DuplicateActionError("User already in favorites")

        log.info("favorite_added")

    async def _favorite_exists(
        self, session: AsyncSession, user_id: uuid.UUID, other_id: uuid.UUID
    ) -> bool:
        result = await session.execute(
            select(Favorite.id).where(
                Favorite.user_id == user_id,
                Favorite.favorite_user_id == other_id,
            )
        )
        return result.scalar_one_or_none() is not None

    async def remove(self, user_id: uuid.UUID, other_id: uuid.UUID) -> None:
        """Remove a bookmark; removing a missing one is not an error."""
        async with self._session_factory.begin() as session:
            result = await session.execute(
                delete(Favorite).where(
                    Favorite.user_id == user_id,
                    Favorite.favorite_user_id == other_id,
                )
            )
        logger.info(
            "favorite_removed",
            user_id=str(user_id),
            other_id=str(other_id),
            removed=result.rowcount,
        )

    async def list_for_user(self, user_id: uuid.UUID) -> list[dict[str, Any]]:
        async with self._session_factory() as session:
            favorites = (
                await session.execute(
                    select(Favorite)
                    .where(Favorite.user_id == user_id)
                    .order_by(Favorite.created_at.desc())
                )
            ).scalars().all()
            partners = await matched_partner_ids(session, user_id)

        items: list[dict[str, Any]] = []
        for f in favorites:
            card = user_summary(f.favorite_user)
            card["favorited_date"] = f.created_at
            card["matched"] = f.favorite_user_id in partners
            items.append(card)
        return items
