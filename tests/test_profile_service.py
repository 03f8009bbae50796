"""Tests for ProfileService — visibility gate and potential matches."""
import random
import uuid

import pytest

from app.errors import NotFoundError, PermissionDeniedError, SelfActionError
from app.services.profile_service import PRIVATE_PROFILE_MESSAGE, ProfileService


async def make_match(matching_service, a, b):
    await matching_service.like(a.id, b.id)
    await matching_service.like(b.id, a.id)


class TestVisibilityGate:

    @pytest.mark.asyncio
    async def test_public_profile_visible_to_anyone(self, profile_service, make_user):
        viewer = await make_user()
        target = await make_user(profile_visibility="public", interests=["hiking"])

        profile = await profile_service.get_profile(viewer.id, target.id)
        assert profile["id"] == target.id
        assert profile["interests"] == ["hiking"]
        assert profile["profile_visibility"] == "public"

    @pytest.mark.asyncio
    async def test_matches_only_profile(self, profile_service, matching_service, make_user):
        viewer = await make_user(gender="female", looking_for="male")
        target = await make_user(gender="male", looking_for="female", profile_visibility="matches")

        with pytest.raises(PermissionDeniedError):
            await profile_service.get_profile(viewer.id, target.id)

        await make_match(matching_service, viewer, target)
        profile = await profile_service.get_profile(viewer.id, target.id)
        assert profile["id"] == target.id

        await matching_service.unmatch(target.id, viewer.id)
        with pytest.raises(PermissionDeniedError):
            await profile_service.get_profile(viewer.id, target.id)

    @pytest.mark.asyncio
    async def test_private_profile_hidden_even_when_matched(
        self, profile_service, matching_service, make_user
    ):
        viewer = await make_user(gender="female", looking_for="male")
        target = await make_user(gender="male", looking_for="female", profile_visibility="private")
        await make_match(matching_service, viewer, target)

        with pytest.raises(PermissionDeniedError) as exc_info:
            await profile_service.get_profile(viewer.id, target.id)
        assert exc_info.value.message == PRIVATE_PROFILE_MESSAGE

    @pytest.mark.asyncio
    async def test_missing_or_inactive_target(self, profile_service, make_user):
        viewer = await make_user()
        inactive = await make_user(is_active=False)

        with pytest.raises(NotFoundError):
            await profile_service.get_profile(viewer.id, uuid.uuid4())
        with pytest.raises(NotFoundError):
            await profile_service.get_profile(viewer.id, inactive.id)

    @pytest.mark.asyncio
    async def test_self_view_rejected(self, profile_service, make_user):
        viewer = await make_user()
        with pytest.raises(SelfActionError):
            await profile_service.get_profile(viewer.id, viewer.id)


class TestPotentialMatches:

    @pytest.mark.asyncio
    async def test_filters_by_mutual_preference(self, profile_service, make_user):
        me = await make_user(gender="female", looking_for="male")
        fits = await make_user(gender="male", looking_for="female")
        fits_both = await make_user(gender="male", looking_for="both")
        await make_user(gender="male", looking_for="male")        # not into me
        await make_user(gender="female", looking_for="female")    # wrong gender
        await make_user(gender="male", looking_for="female", is_active=False)

        result = await profile_service.potential_matches(me.id)
        assert {c["id"] for c in result} == {fits.id, fits_both.id}

    @pytest.mark.asyncio
    async def test_looking_for_both(self, profile_service, make_user):
        me = await make_user(gender="male", looking_for="both")
        woman = await make_user(gender="female", looking_for="male")
        man = await make_user(gender="male", looking_for="both")
        await make_user(gender="female", looking_for="female")

        result = await profile_service.potential_matches(me.id)
        assert {c["id"] for c in result} == {woman.id, man.id}

    @pytest.mark.asyncio
    async def test_excludes_self_and_already_liked(
        self, profile_service, matching_service, make_user
    ):
        me = await make_user(gender="female", looking_for="both")
        liked = await make_user(gender="male", looking_for="female")
        other = await make_user(gender="male", looking_for="female")
        await matching_service.like(me.id, liked.id)

        result = await profile_service.potential_matches(me.id)
        ids = [c["id"] for c in result]
        assert me.id not in ids
        assert liked.id not in ids
        assert ids == [other.id]

    @pytest.mark.asyncio
    async def test_limit_and_no_duplicates(self, session_factory, make_user):
        me = await make_user(gender="female", looking_for="male")
        for _ in range(8):
            await make_user(gender="male", looking_for="female")

        service = ProfileService(session_factory, rng=random.Random(7))
        result = await service.potential_matches(me.id, limit=5)
        ids = [c["id"] for c in result]
        assert len(ids) == 5
        assert len(set(ids)) == 5

    @pytest.mark.asyncio
    async def test_database_side_sample_respects_limit(self, profile_service, make_user):
        me = await make_user(gender="female", looking_for="male")
        eligible = {
            (await make_user(gender="male", looking_for="female")).id for _ in range(6)
        }

        result = await profile_service.potential_matches(me.id, limit=3)
        ids = [c["id"] for c in result]
        assert len(ids) == 3
        assert len(set(ids)) == 3
        assert set(ids) <= eligible

    @pytest.mark.asyncio
    async def test_sample_is_driven_by_injected_rng(self, session_factory, make_user):
        me = await make_user(gender="female", looking_for="male")
        for _ in range(10):
            await make_user(gender="male", looking_for="female")

        first = await ProfileService(session_factory, rng=random.Random(42)).potential_matches(me.id, limit=4)
        second = await ProfileService(session_factory, rng=random.Random(42)).potential_matches(me.id, limit=4)
        assert [c["id"] for c in first] == [c["id"] for c in second]

    @pytest.mark.asyncio
    async def test_favorited_flag(self, profile_service, favorite_service, make_user):
        me = await make_user(gender="female", looking_for="male")
        fav = await make_user(gender="male", looking_for="female")
        plain = await make_user(gender="male", looking_for="female")
        await favorite_service.add(me.id, fav.id)

        result = {c["id"]: c for c in await profile_service.potential_matches(me.id)}
        assert result[fav.id]["is_favorited"] is True
        assert result[plain.id]["is_favorited"] is False

    @pytest.mark.asyncio
    async def test_no_preferences_yields_nothing(self, profile_service, make_user):
        me = await make_user(gender=None, looking_for=None)
        await make_user(gender="male", looking_for="both")
        assert await profile_service.potential_matches(me.id) == []


class TestBrowse:

    @pytest.mark.asyncio
    async def test_pages_cover_compatible_users(self, profile_service, matching_service, make_user):
        me = await make_user(gender="female", looking_for="male")
        eligible = [await make_user(gender="male", looking_for="female") for _ in range(5)]
        await make_user(gender="male", looking_for="male")
        await make_user(gender="male", looking_for="female", is_active=False)
        # liked users stay in the feed
        await matching_service.like(me.id, eligible[0].id)

        first = await profile_service.browse(me.id, page=1, limit=3)
        second = await profile_service.browse(me.id, page=2, limit=3)

        assert first["pagination"] == {
            "current_page": 1,
            "total_pages": 2,
            "total_users": 5,
            "has_next": True,
            "has_prev": False,
        }
        assert second["pagination"]["has_next"] is False
        assert second["pagination"]["has_prev"] is True

        first_ids = [u["id"] for u in first["users"]]
        second_ids = [u["id"] for u in second["users"]]
        assert len(first_ids) == 3
        assert len(second_ids) == 2
        assert set(first_ids) | set(second_ids) == {u.id for u in eligible}
        assert all(u["gender"] == "male" for u in first["users"])

    @pytest.mark.asyncio
    async def test_page_past_the_end(self, profile_service, make_user):
        me = await make_user(gender="female", looking_for="male")
        await make_user(gender="male", looking_for="female")

        result = await profile_service.browse(me.id, page=4, limit=12)
        assert result["users"] == []
        assert result["pagination"]["total_users"] == 1
        assert result["pagination"]["has_next"] is False

    @pytest.mark.asyncio
    async def test_no_preferences_is_an_empty_feed(self, profile_service, make_user):
        me = await make_user(gender=None, looking_for=None)
        result = await profile_service.browse(me.id)
        assert result["users"] == []
        assert result["pagination"]["total_pages"] == 0

    @pytest.mark.asyncio
    async def test_unknown_viewer(self, profile_service):
        with pytest.raises(NotFoundError):
            await profile_service.browse(uuid.uuid4())
