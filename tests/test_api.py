"""HTTP tests: auth, status codes and wire shape of the /api surface."""
from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
import pytest_asyncio

from app.security import create_access_token


@pytest_asyncio.fixture
async def one_and_two(make_user):
    one = await make_user(first_name="One", gender="female", looking_for="male")
    two = await make_user(first_name="Two", gender="male", looking_for="female")
    return one, two


class TestAuth:

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, api_client, one_and_two):
        _, two = one_and_two
        response = await api_client.post(f"/api/matches/like/{two.id}")
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Access token required"}

    @pytest.mark.asyncio
    async def test_garbage_token_is_403(self, api_client, one_and_two):
        _, two = one_and_two
        response = await api_client.post(
            f"/api/matches/like/{two.id}",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_expired_token_is_403(self, api_client, one_and_two):
        one, two = one_and_two
        token = create_access_token(one.id, expires_delta=timedelta(seconds=-5))
        response = await api_client.post(
            f"/api/matches/like/{two.id}",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 403

        likes = await api_client.get("/api/matches/my-likes", headers={"Authorization": f"Bearer {token}"})
        assert likes.status_code == 403


class TestMatchFlow:

    @pytest.mark.asyncio
    async def test_like_like_back_unmatch(self, api_client, auth, one_and_two):
        one, two = one_and_two

        first = await api_client.post(f"/api/matches/like/{two.id}", headers=auth(one.id))
        assert first.status_code == 200, first.text
        assert first.json() == {"success": True, "isMatch": False, "matchedUser": None}

        second = await api_client.post(f"/api/matches/like/{one.id}", headers=auth(two.id))
        body = second.json()
        assert body["isMatch"] is True
        assert body["matchedUser"]["id"] == str(one.id)
        assert body["matchedUser"]["firstName"] == "One"

        matches = (await api_client.get("/api/matches/my-matches", headers=auth(one.id))).json()
        assert [m["id"] for m in matches["matches"]] == [str(two.id)]
        assert "matchDate" in matches["matches"][0]

        likes_me = (await api_client.get("/api/matches/likes-me", headers=auth(two.id))).json()
        assert likes_me["likes"][0]["likedBack"] is True

        unmatch = await api_client.post(f"/api/matches/unmatch/{two.id}", headers=auth(one.id))
        assert unmatch.status_code == 200
        assert unmatch.json()["success"] is True

        for user in (one, two):
            listed = (await api_client.get("/api/matches/my-matches", headers=auth(user.id))).json()
            assert listed["matches"] == []

        start = await api_client.post(
            f"/api/messages/start-conversation/{two.id}", headers=auth(one.id)
        )
        assert start.status_code == 403
        assert start.json()["reason"] == "permission_denied"

    @pytest.mark.asyncio
    async def test_domain_error_shapes(self, api_client, auth, one_and_two):
        one, two = one_and_two

        self_like = await api_client.post(f"/api/matches/like/{one.id}", headers=auth(one.id))
        assert self_like.status_code == 400
        assert self_like.json()["reason"] == "self_action"
        assert self_like.json()["success"] is False

        await api_client.post(f"/api/matches/like/{two.id}", headers=auth(one.id))
        duplicate = await api_client.post(f"/api/matches/like/{two.id}", headers=auth(one.id))
        assert duplicate.status_code == 400
        assert duplicate.json()["reason"] == "duplicate_action"

        no_match = await api_client.post(f"/api/matches/unmatch/{two.id}", headers=auth(one.id))
        assert no_match.status_code == 400
        assert no_match.json() == {
            "success": False,
            "reason": "no_match_found",
            "message": "No match found",
        }

    @pytest.mark.asyncio
    async def test_like_unknown_user_is_404(self, api_client, auth, one_and_two):
        one, _ = one_and_two
        response = await api_client.post(f"/api/matches/like/{uuid.uuid4()}", headers=auth(one.id))
        assert response.status_code == 404
        assert response.json()["reason"] == "not_found"

    @pytest.mark.asyncio
    async def test_dislike(self, api_client, auth, one_and_two):
        one, two = one_and_two
        response = await api_client.post(f"/api/matches/dislike/{two.id}", headers=auth(one.id))
        assert response.status_code == 200
        assert response.json() == {"success": True}


class TestMessages:

    @pytest.mark.asyncio
    async def test_conversation_lifecycle(self, api_client, auth, one_and_two):
        one, two = one_and_two
        await api_client.post(f"/api/matches/like/{two.id}", headers=auth(one.id))
        await api_client.post(f"/api/matches/like/{one.id}", headers=auth(two.id))

        created = await api_client.post(
            f"/api/messages/start-conversation/{two.id}", headers=auth(one.id)
        )
        assert created.status_code == 201
        conversation_id = created.json()["conversationId"]

        reused = await api_client.post(
            f"/api/messages/start-conversation/{one.id}", headers=auth(two.id)
        )
        assert reused.status_code == 200
        assert reused.json()["conversationId"] == conversation_id

        sent = await api_client.post(
            "/api/messages/send",
            json={"conversationId": conversation_id, "message": "hey"},
            headers=auth(one.id),
        )
        assert sent.status_code == 201
        assert "messageId" in sent.json()

        conversations = (
            await api_client.get("/api/messages/conversations", headers=auth(two.id))
        ).json()["conversations"]
        assert conversations[0]["unreadCount"] == 1
        assert conversations[0]["lastMessage"] == "hey"

        messages = (
            await api_client.get(f"/api/messages/conversation/{conversation_id}", headers=auth(two.id))
        ).json()["messages"]
        assert messages[0]["message"] == "hey"
        assert messages[0]["isFromMe"] is False
        assert messages[0]["isRead"] is True

    @pytest.mark.asyncio
    async def test_empty_message_is_422(self, api_client, auth, one_and_two):
        one, _ = one_and_two
        response = await api_client.post(
            "/api/messages/send",
            json={"conversationId": str(uuid.uuid4()), "message": ""},
            headers=auth(one.id),
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_outsider_gets_403(self, api_client, auth, make_user, one_and_two):
        one, two = one_and_two
        outsider = await make_user()
        await api_client.post(f"/api/matches/like/{two.id}", headers=auth(one.id))
        await api_client.post(f"/api/matches/like/{one.id}", headers=auth(two.id))
        conversation_id = (
            await api_client.post(f"/api/messages/start-conversation/{two.id}", headers=auth(one.id))
        ).json()["conversationId"]

        response = await api_client.get(
            f"/api/messages/conversation/{conversation_id}", headers=auth(outsider.id)
        )
        assert response.status_code == 403


class TestNotifications:

    @pytest.mark.asyncio
    async def test_list_count_and_mark_read(self, api_client, auth, one_and_two):
        one, two = one_and_two
        await api_client.post(f"/api/matches/like/{two.id}", headers=auth(one.id))

        count = (await api_client.get("/api/notifications/unread-count", headers=auth(two.id))).json()
        assert count == {"success": True, "count": 1}

        notifications = (
            await api_client.get("/api/notifications", headers=auth(two.id))
        ).json()["notifications"]
        assert len(notifications) == 1
        note = notifications[0]
        assert note["type"] == "like"
        assert note["fromUserId"] == str(one.id)
        assert note["firstName"] == "One"
        assert note["isRead"] is False

        marked = await api_client.put(f"/api/notifications/{note['id']}/read", headers=auth(two.id))
        assert marked.status_code == 200
        count = (await api_client.get("/api/notifications/unread-count", headers=auth(two.id))).json()
        assert count["count"] == 0

    @pytest.mark.asyncio
    async def test_read_all(self, api_client, auth, one_and_two):
        one, two = one_and_two
        await api_client.post(f"/api/matches/like/{two.id}", headers=auth(one.id))
        await api_client.post(f"/api/matches/like/{one.id}", headers=auth(two.id))

        assert (
            await api_client.get("/api/notifications/unread-count", headers=auth(two.id))
        ).json()["count"] == 2

        response = await api_client.put("/api/notifications/read-all", headers=auth(two.id))
        assert response.status_code == 200
        assert (
            await api_client.get("/api/notifications/unread-count", headers=auth(two.id))
        ).json()["count"] == 0


class TestFavoritesAndUsers:

    @pytest.mark.asyncio
    async def test_favorites_round(self, api_client, auth, one_and_two):
        one, two = one_and_two

        added = await api_client.post(f"/api/favorites/{two.id}", headers=auth(one.id))
        assert added.status_code == 200
        again = await api_client.post(f"/api/favorites/{two.id}", headers=auth(one.id))
        assert again.status_code == 400

        favorites = (await api_client.get("/api/favorites", headers=auth(one.id))).json()["favorites"]
        assert [f["id"] for f in favorites] == [str(two.id)]
        assert favorites[0]["matched"] is False
        assert "favoritedDate" in favorites[0]

        removed = await api_client.delete(f"/api/favorites/{two.id}", headers=auth(one.id))
        assert removed.status_code == 200
        assert (await api_client.get("/api/favorites", headers=auth(one.id))).json()["favorites"] == []

    @pytest.mark.asyncio
    async def test_potential_matches(self, api_client, auth, one_and_two):
        one, two = one_and_two
        response = await api_client.get("/api/users/potential-matches", headers=auth(one.id))
        assert response.status_code == 200
        matches = response.json()["matches"]
        assert [m["id"] for m in matches] == [str(two.id)]
        assert matches[0]["isFavorited"] is False

    @pytest.mark.asyncio
    async def test_browse_feed(self, api_client, auth, one_and_two):
        one, two = one_and_two
        response = await api_client.get("/api/users?page=1&limit=5", headers=auth(one.id))
        assert response.status_code == 200
        body = response.json()
        assert [u["id"] for u in body["users"]] == [str(two.id)]
        assert "createdAt" in body["users"][0]
        assert body["pagination"] == {
            "currentPage": 1,
            "totalPages": 1,
            "totalUsers": 1,
            "hasNext": False,
            "hasPrev": False,
        }

        bad_page = await api_client.get("/api/users?page=0", headers=auth(one.id))
        assert bad_page.status_code == 422

    @pytest.mark.asyncio
    async def test_profile_visibility(self, api_client, auth, make_user, one_and_two):
        one, _ = one_and_two
        public = await make_user(profile_visibility="public", first_name="Pub")
        private = await make_user(profile_visibility="private")

        visible = await api_client.get(f"/api/users/{public.id}", headers=auth(one.id))
        assert visible.status_code == 200
        assert visible.json()["user"]["firstName"] == "Pub"
        assert visible.json()["user"]["profileVisibility"] == "public"

        hidden = await api_client.get(f"/api/users/{private.id}", headers=auth(one.id))
        assert hidden.status_code == 403
        assert hidden.json()["reason"] == "permission_denied"

        own = await api_client.get(f"/api/users/{one.id}", headers=auth(one.id))
        assert own.status_code == 400


class TestHealth:

    @pytest.mark.asyncio
    async def test_liveness(self, api_client):
        response = await api_client.get("/health")
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_deep(self, api_client):
        response = await api_client.get("/health/deep")
        body = response.json()
        assert body["database"] == "connected"
        assert body["redis"] == "not_configured"
        assert body["status"] == "healthy"
