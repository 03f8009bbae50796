"""
Desire — User card projections shared by the list endpoints.
"""

from __future__ import annotations

from typing import Any

from app.models.user import User


def matched_user_summary(user: User) -> dict[str, Any]:
    """Minimal card returned with a fresh match."""
    return {
        "id": user.id,
        "first_name": user.first_name,
        "profile_image": user.profile_image,
    }


def user_summary(user: User) -> dict[str, Any]:
    """Public card shown in match, like and favorite lists."""
    return {
        "id": user.id,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "age": user.age,
        "bio": user.bio,
        "country": user.country,
        "state": user.state,
        "city": user.city,
        "photos": list(user.photos or []),
        "profile_image": user.profile_image,
    }


def user_profile(user: User) -> dict[str, Any]:
    """Full profile, returned only after the visibility gate passes."""
    profile = user_summary(user)
    profile.update({
        "gender": user.gender,
        "interests": list(user.interests or []),
        "profile_visibility": user.profile_visibility,
        "created_at": user.created_at,
    })
    return profile
