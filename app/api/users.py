"""
Desire — Users API

Discovery feed and visibility-gated profile reads.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, Query

from app.api.deps import get_profile_service
from app.config import get_settings
from app.schemas.user import BrowseResponse, PotentialMatchesResponse, UserProfileResponse
from app.security import get_current_user_id
from app.services.profile_service import ProfileService

logger = structlog.get_logger("desire.api.users")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# GET / — Paginated browse feed
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=BrowseResponse,
    summary="Page through compatible users",
)
async def browse_users(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=50),
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> BrowseResponse:
    result = await service.browse(current_user_id, page=page, limit=limit)
    return BrowseResponse(**result)


# ──────────────────────────────────────────────────────────────────────────────
# GET /potential-matches — Discovery feed
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/potential-matches",
    response_model=PotentialMatchesResponse,
    summary="Random sample of compatible, not-yet-liked users",
)
async def potential_matches(
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> PotentialMatchesResponse:
    """Return up to ``POTENTIAL_MATCHES_LIMIT`` candidates in random order.

    The sample is drawn without replacement, so a single response never
    repeats a user.  Users already liked by the caller are never offered.
    """
    limit = get_settings().POTENTIAL_MATCHES_LIMIT
    matches = await service.potential_matches(current_user_id, limit=limit)
    logger.info("potential_matches_served", user_id=str(current_user_id), count=len(matches))
    return PotentialMatchesResponse(matches=matches)


# ──────────────────────────────────────────────────────────────────────────────
# GET /{user_id} — Profile read
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/{user_id}",
    response_model=UserProfileResponse,
    summary="Read another user's profile",
)
async def get_user_profile(
    user_id: uuid.UUID,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> UserProfileResponse:
    """Profiles are visible per the target's ``profileVisibility``:
    ``public`` to everyone, ``matches`` to matched users only, ``private``
    to nobody."""
    profile = await service.get_profile(current_user_id, user_id)
    return UserProfileResponse(user=profile)
