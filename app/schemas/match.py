from pydantic import Field
from uuid import UUID
from datetime import datetime
from typing import Optional

from app.schemas.common import ApiModel
from app.schemas.user import UserCard


class MatchedUser(ApiModel):
    id: UUID
    first_name: str
    profile_image: Optional[str] = None


class LikeResponse(ApiModel):
    success: bool = True
    is_match: bool
    matched_user: Optional[MatchedUser] = None


class MatchListItem(UserCard):
    match_date: datetime


class SentLikeItem(UserCard):
    liked_at: datetime
    matched: bool


class ReceivedLikeItem(UserCard):
    liked_at: datetime
    matched: bool
    liked_back: bool


class MatchListResponse(ApiModel):
    success: bool = True
    matches: list[MatchListItem] = Field(default_factory=list)


class SentLikesResponse(ApiModel):
    success: bool = True
    likes: list[SentLikeItem] = Field(default_factory=list)


class ReceivedLikesResponse(ApiModel):
    success: bool = True
    likes: list[ReceivedLikeItem] = Field(default_factory=list)
