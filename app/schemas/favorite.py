from pydantic import Field
from datetime import datetime

from app.schemas.common import ApiModel
from app.schemas.user import UserCard


class FavoriteItem(UserCard):
    favorited_date: datetime
    matched: bool


class FavoriteListResponse(ApiModel):
    success: bool = True
    favorites: list[FavoriteItem] = Field(default_factory=list)
