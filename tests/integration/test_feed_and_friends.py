"""Integration: friendships, feed visibility and pagination."""

from __future__ import annotations

import uuid

import pytest
import pytest_asyncio

from gamelib.activity.feed_service import get_activity_feed, get_user_activities
from gamelib.collection.service import create_entry
from gamelib.errors import ConflictError, NotFoundError
from gamelib.social.friendship_service import (
    accept_friend_request,
    are_friends,
    ensure_can_view,
    list_friend_ids,
    list_pending_requests,
    reject_friend_request,
    remove_friend,
    send_friend_request,
)
from gamelib.users.service import get_or_create_profile


@pytest_asyncio.fixture
async def friends(db_session, user_id, other_user_id):
    request = await send_friend_request(db_session, user_id, other_user_id)
    await accept_friend_request(db_session, other_user_id, request.id)
    await db_session.commit()
    return user_id, other_user_id


class TestFriendRequests:
    @pytest.mark.asyncio
    async def test_accept_creates_both_directions(self, db_session, user_id, other_user_id):
        request = await send_friend_request(db_session, user_id, other_user_id)
        assert request.status == "pending"
        assert [r.id for r in await list_pending_requests(db_session, other_user_id)] == [request.id]
        assert await list_pending_requests(db_session, user_id) == []

        accepted = await accept_friend_request(db_session, other_user_id, request.id)
        await db_session.commit()

        assert accepted.status == "accepted"
        assert await list_friend_ids(db_session, user_id) == [other_user_id]
        assert await list_friend_ids(db_session, other_user_id) == [user_id]
        assert await list_pending_requests(db_session, other_user_id) == []

    @pytest.mark.asyncio
    async def test_only_recipient_can_accept(self, db_session, user_id, other_user_id):
        request = await send_friend_request(db_session, user_id, other_user_id)
        with pytest.raises(NotFoundError):
            await accept_friend_request(db_session, user_id, request.id)

    @pytest.mark.asyncio
    async def test_reject(self, db_session, user_id, other_user_id):
        request = await send_friend_request(db_session, user_id, other_user_id)
        rejected = await reject_friend_request(db_session, other_user_id, request.id)
        await db_session.commit()

        assert rejected.status == "rejected"
        assert not await are_friends(db_session, user_id, other_user_id)
        with pytest.raises(ConflictError):
            await send_friend_request(db_session, user_id, other_user_id)

    @pytest.mark.asyncio
    async def test_duplicate_in_either_direction(self, db_session, user_id, other_user_id):
        await send_friend_request(db_session, user_id, other_user_id)
        with pytest.raises(ConflictError):
            await send_friend_request(db_session, user_id, other_user_id)
        with pytest.raises(ConflictError):
            await send_friend_request(db_session, other_user_id, user_id)

    @pytest.mark.asyncio
    async def test_self_and_unknown(self, db_session, user_id):
        with pytest.raises(ValueError):
            await send_friend_request(db_session, user_id, user_id)
        with pytest.raises(NotFoundError):
            await send_friend_request(db_session, user_id, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_remove_friend(self, db_session, friends):
        me, friend = friends
        await remove_friend(db_session, me, friend)
        await db_session.commit()

        assert await list_friend_ids(db_session, me) == []
        assert await list_friend_ids(db_session, friend) == []
        with pytest.raises(NotFoundError):
            await remove_friend(db_session, me, friend)


class TestVisibility:
    @pytest.mark.asyncio
    async def test_owner_and_friend_can_view(self, db_session, friends):
        me, friend = friends
        await ensure_can_view(db_session, me, me)
        await ensure_can_view(db_session, me, friend)
        await ensure_can_view(db_session, friend, me)

    @pytest.mark.asyncio
    async def test_stranger_cannot_view(self, db_session, user_id):
        stranger = str(uuid.uuid4())
        await get_or_create_profile(db_session, stranger)
        await db_session.commit()
        with pytest.raises(NotFoundError):
            await ensure_can_view(db_session, stranger, user_id)

    @pytest.mark.asyncio
    async def test_pending_request_does_not_grant_visibility(self, db_session, user_id, other_user_id):
        await send_friend_request(db_session, user_id, other_user_id)
        await db_session.commit()
        with pytest.raises(NotFoundError):
            await ensure_can_view(db_session, other_user_id, user_id)


class TestFeed:
    @pytest.mark.asyncio
    async def test_feed_includes_self_and_friends_newest_first(self, db_session, friends):
        me, friend = friends
        await create_entry(db_session, me, 1, "wishlist")
        await create_entry(db_session, friend, 2, "playing")
        await create_entry(db_session, me, 3, "completed")
        await db_session.commit()

        activities, total = await get_activity_feed(db_session, me)
        assert total == 3
        assert [a.game_id for a in activities] == [3, 2, 1]

        friend_view, _ = await get_activity_feed(db_session, friend)
        assert {a.game_id for a in friend_view} == {1, 2, 3}

    @pytest.mark.asyncio
    async def test_feed_excludes_strangers(self, db_session, user_id, other_user_id):
        await create_entry(db_session, user_id, 1, "wishlist")
        await create_entry(db_session, other_user_id, 2, "wishlist")
        await db_session.commit()

        activities, total = await get_activity_feed(db_session, user_id)
        assert total == 1
        assert activities[0].user_id == user_id

    @pytest.mark.asyncio
    async def test_pagination(self, db_session, user_id):
        for game_id in range(1, 6):
            await create_entry(db_session, user_id, game_id, "wishlist")
        await db_session.commit()

        page1, total = await get_user_activities(db_session, user_id, page=1, per_page=2)
        page3, _ = await get_user_activities(db_session, user_id, page=3, per_page=2)
        assert total == 5
        assert [a.game_id for a in page1] == [5, 4]
        assert [a.game_id for a in page3] == [1]
