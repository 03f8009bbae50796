"""
Desire — Profile Visibility Gate & Potential Matches

Profile reads are gated on the target's visibility mode:

  public   → anyone may view
  matches  → only users currently matched with the target
  private  → nobody (a match does not unlock it)

The browse feed pages through the same compatible set, newest accounts
first.

Potential matches are an unordered, uniform random sample without
replacement over the eligible candidate set; there is deliberately no
ranking.
"""

from __future__ import annotations

import math
import random
import uuid
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.errors import NotFoundError, PermissionDeniedError, SelfActionError
from app.models.favorite import Favorite
from app.models.match import Like
from app.models.user import ProfileVisibility, User
from app.services.matching_service import match_exists
from app.services.summaries import user_profile, user_summary

logger = structlog.get_logger("desire.profile_service")

PRIVATE_PROFILE_MESSAGE = (
    "This profile is private. Try liking them to create a match "
    "and unlock their full profile!"
)

# looking_for value → genders a user wants to see
_GENDERS_FOR_PREFERENCE: dict[str, tuple[str, ...]] = {
    "male": ("male",),
    "female": ("female",),
    "both": ("male", "female"),
}


async def can_view(session: AsyncSession, viewer_id: uuid.UUID, target: User) -> bool:
    """Evaluate the visibility gate against current match state."""
    if target.profile_visibility == ProfileVisibility.PUBLIC.value:
        return True
    if target.profile_visibility == ProfileVisibility.MATCHES.value:
        return await match_exists(session, viewer_id, target.id)
    return False


class ProfileService:
    """Gated profile reads and the potential-matches sampler."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        rng: random.Random | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._rng = rng

    async def get_profile(self, viewer_id: uuid.UUID, target_id: uuid.UUID) -> dict[str, Any]:
        """Return ``target_id``'s profile if ``viewer_id`` may see it.

        Raises
        ------
        SelfActionError
            The viewer asked for their own profile through this path.
        NotFoundError
            The target does not exist.
        PermissionDeniedError
            The target's visibility mode hides it from the viewer.
        """
        if viewer_id == target_id:
            raise SelfActionError("Cannot view your own profile this way")

        log = logger.bind(viewer_id=str(viewer_id), target_id=str(target_id))

        async with self._session_factory() as session:
            target = await session.get(User, target_id)
            if target is None or not target.is_active:
                raise NotFoundError("User not found")

            if not await can_view(session, viewer_id, target):
                log.info("profile_view_denied", visibility=target.profile_visibility)
                raise PermissionDeniedError(PRIVATE_PROFILE_MESSAGE)

            return user_profile(target)

    async def browse(self, user_id: uuid.UUID, page: int = 1, limit: int = 12) -> dict[str, Any]:
        """One page of compatible users, newest accounts first.

        Uses the same mutual gender preference as ``potential_matches`` but
        does not hide users the viewer already liked.

        Returns
        -------
        dict
            ``{"users": [card, ...], "pagination": {...}}`` where each card
            also carries ``gender`` and ``created_at``.
        """
        async with self._session_factory() as session:
            viewer = await session.get(User, user_id)
            if viewer is None:
                raise NotFoundError("User not found")

            wanted_genders = _GENDERS_FOR_PREFERENCE.get(viewer.looking_for or "", ())
            if not wanted_genders or viewer.gender is None:
                users: list[User] = []
                total = 0
            else:
                conditions = (
                    User.is_active.is_(True),
                    User.id != user_id,
                    User.gender.in_(wanted_genders),
                    User.looking_for.in_((viewer.gender, "both")),
                )
                total = int(
                    (
                        await session.execute(
                            select(func.count()).select_from(User).where(*conditions)
                        )
                    ).scalar_one()
                )
                users = list(
                    (
                        await session.execute(
                            select(User)
                            .where(*conditions)
                            .order_by(User.created_at.desc(), User.id)
                            .offset((page - 1) * limit)
                            .limit(limit)
                        )
                    ).scalars().all()
                )

        total_pages = math.ceil(total / limit)
        cards = []
        for u in users:
            card = user_summary(u)
            card["gender"] = u.gender
            card["created_at"] = u.created_at
            cards.append(card)

        logger.info("browse", user_id=str(user_id), page=page, total=total, returned=len(cards))
        return {
            "users": cards,
            "pagination": {
                "current_page": page,
                "total_pages": total_pages,
                "total_users": total,
                "has_next": page < total_pages,
                "has_prev": page > 1,
            },
        }

    async def potential_matches(self, user_id: uuid.UUID, limit: int = 12) -> list[dict[str, Any]]:
        """Sample up to ``limit`` eligible candidates for ``user_id``.

        Eligible: active, not the viewer, of a gender the viewer is looking
        for, looking for the viewer's gender (or both), and not already
        liked by the viewer.  Each card carries ``is_favorited``.
        """
        log = logger.bind(user_id=str(user_id))

        async with self._session_factory() as session:
            viewer = await session.get(User, user_id)
            if viewer is None:
                raise NotFoundError("User not found")

            wanted_genders = _GENDERS_FOR_PREFERENCE.get(viewer.looking_for or "", ())
            if not wanted_genders or viewer.gender is None:
                log.info("potential_matches_no_preferences")
                return []

            already_liked = select(Like.liked_id).where(Like.liker_id == user_id)
            stmt = (
                select(User.id)
                .where(User.is_active.is_(True))
                .where(User.id != user_id)
                .where(User.gender.in_(wanted_genders))
                .where(User.looking_for.in_((viewer.gender, "both")))
                .where(User.id.not_in(already_liked))
            )
            if self._rng is None:
                picked = list(
                    (await session.execute(stmt.order_by(func.random()).limit(limit)))
                    .scalars()
                    .all()
                )
            else:
                # reproducible draw over the whole eligible set
                candidate_ids = list((await session.execute(stmt)).scalars().all())
                picked = self._rng.sample(candidate_ids, min(limit, len(candidate_ids)))
            if not picked:
                log.info("potential_matches_complete", returned=0)
                return []

            users = (
                await session.execute(select(User).where(User.id.in_(picked)))
            ).scalars().all()
            favorited = set(
                (
                    await session.execute(
                        select(Favorite.favorite_user_id).where(
                            Favorite.user_id == user_id,
                            Favorite.favorite_user_id.in_(picked),
                        )
                    )
                ).scalars().all()
            )

        by_id = {u.id: u for u in users}
        cards: list[dict[str, Any]] = []
        for uid in picked:  # keep the sampled order
            card = user_summary(by_id[uid])
            card["is_favorited"] = uid in favorited
            cards.append(card)

        log.info("potential_matches_complete", returned=len(cards))
        return cards
