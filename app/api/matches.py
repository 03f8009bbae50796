"""
Desire — Matches API

Like / dislike / unmatch actions plus the three list views of a user's
match state.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from app.api.deps import get_matching_service
from app.schemas.common import SuccessResponse
from app.schemas.match import (
    LikeResponse,
    MatchListResponse,
    ReceivedLikesResponse,
    SentLikesResponse,
)
from app.security import get_current_user_id
from app.services.matching_service import MatchingService

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# POST /like/{user_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/like/{user_id}",
    response_model=LikeResponse,
    summary="Like a user",
)
async def like_user(
    user_id: uuid.UUID,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service),
) -> LikeResponse:
    """Like ``user_id``.  ``isMatch`` is true when the like was reciprocal."""
    result = await service.like(current_user_id, user_id)
    return LikeResponse(**result)


# ──────────────────────────────────────────────────────────────────────────────
# POST /dislike/{user_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/dislike/{user_id}",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
    summary="Dislike a user",
)
async def dislike_user(
    user_id: uuid.UUID,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service),
) -> SuccessResponse:
    await service.dislike(current_user_id, user_id)
    return SuccessResponse()


# ──────────────────────────────────────────────────────────────────────────────
# POST /unmatch/{user_id}
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/unmatch/{user_id}",
    response_model=SuccessResponse,
    summary="Remove a match",
)
async def unmatch_user(
    user_id: uuid.UUID,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service),
) -> SuccessResponse:
    await service.unmatch(current_user_id, user_id)
    return SuccessResponse(message="Unmatched successfully")


# ──────────────────────────────────────────────────────────────────────────────
# GET list views
# ──────────────────────────────────────────────────────────────────────────────

@router.get(
    "/my-matches",
    response_model=MatchListResponse,
    summary="List current matches",
)
async def my_matches(
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service),
) -> MatchListResponse:
    return MatchListResponse(matches=await service.list_matches(current_user_id))


@router.get(
    "/my-likes",
    response_model=SentLikesResponse,
    summary="List users the caller liked",
)
async def my_likes(
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service),
) -> SentLikesResponse:
    return SentLikesResponse(likes=await service.list_sent_likes(current_user_id))


@router.get(
    "/likes-me",
    response_model=ReceivedLikesResponse,
    summary="List users who liked the caller",
)
async def likes_me(
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service),
) -> ReceivedLikesResponse:
    return ReceivedLikesResponse(likes=await service.list_received_likes(current_user_id))
