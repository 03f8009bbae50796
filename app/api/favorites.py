"""
Desire — Favorites API
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from app.api.deps import get_favorite_service
from app.schemas.common import SuccessResponse
from app.schemas.favorite import FavoriteListResponse
from app.security import get_current_user_id
from app.services.favorite_service import FavoriteService

router = APIRouter()


@router.get(
    "",
    response_model=FavoriteListResponse,
    summary="List favorited users",
)
async def list_favorites(
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: FavoriteService = Depends(get_favorite_service),
) -> FavoriteListResponse:
    return FavoriteListResponse(favorites=await service.list_for_user(current_user_id))


@router.post(
    "/{user_id}",
    response_model=SuccessResponse,
    summary="Add a user to favorites",
)
async def add_favorite(
    user_id: uuid.UUID,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: FavoriteService = Depends(get_favorite_service),
) -> SuccessResponse:
    await service.add(current_user_id, user_id)
    return SuccessResponse(message="Added to favorites")


@router.delete(
    "/{user_id}",
    response_model=SuccessResponse,
    summary="Remove a user from favorites",
)
async def remove_favorite(
    user_id: uuid.UUID,
    current_user_id: uuid.UUID = Depends(get_current_user_id),
    service: FavoriteService = Depends(get_favorite_service),
) -> SuccessResponse:
    await service.remove(current_user_id, user_id)
    return SuccessResponse(message="Removed from favorites")
