from pydantic import Field
from uuid import UUID
from datetime import datetime
from typing import Optional

from app.schemas.common import ApiModel


class UserCard(ApiModel):
    id: UUID
    username: str
    first_name: str
    last_name: str
    age: Optional[int] = None
    bio: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    photos: list[str] = []
    profile_image: Optional[str] = None


class UserProfile(UserCard):
    gender: Optional[str] = None
    interests: list[str] = []
    profile_visibility: str
    created_at: datetime


class UserProfileResponse(ApiModel):
    success: bool = True
    user: UserProfile


class PotentialMatch(UserCard):
    is_favorited: bool = False


class PotentialMatchesResponse(ApiModel):
    success: bool = True
    matches: list[PotentialMatch] = Field(default_factory=list)


class BrowseUser(UserCard):
    gender: Optional[str] = None
    created_at: datetime


class Pagination(ApiModel):
    current_page: int
    total_pages: int
    total_users: int
    has_next: bool
    has_prev: bool


class BrowseResponse(ApiModel):
    success: bool = True
    users: list[BrowseUser] = Field(default_factory=list)
    pagination: Pagination
