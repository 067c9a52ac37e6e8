"""Friendship endpoints: /api/v1/friends/*."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.auth.dependencies import get_current_user
from gamelib.database import get_session
from gamelib.db.models import Friendship, Profile
from gamelib.social.friendship_service import (
    accept_friend_request,
    list_friend_ids,
    list_pending_requests,
    reject_friend_request,
    remove_friend,
    send_friend_request,
)
from gamelib.social.schemas import (
    FriendListResponse,
    FriendRequestCreate,
    FriendRequestListResponse,
    FriendshipResponse,
)

router = APIRouter(prefix="/api/v1/friends", tags=["Friends"])


def _friendship_response(friendship: Friendship) -> FriendshipResponse:
    return FriendshipResponse(
        id=str(friendship.id),
        user_id=str(friendship.user_id),
        friend_id=str(friendship.friend_id),
        status=friendship.status,
        requested_by=str(friendship.requested_by),
        created_at=friendship.created_at,
    )


@router.get("", response_model=FriendListResponse)
async def list_friends(
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> FriendListResponse:
    """Ids of accepted friends."""
    friend_ids = await list_friend_ids(db, user.id)
    return FriendListResponse(friend_ids=friend_ids, total=len(friend_ids))


@router.get("/requests", response_model=FriendRequestListResponse)
async def list_requests(
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> FriendRequestListResponse:
    """Pending requests addressed to the caller."""
    requests = await list_pending_requests(db, user.id)
    return FriendRequestListResponse(requests=[_friendship_response(r) for r in requests])


@router.post("/requests", response_model=FriendshipResponse, status_code=201)
async def create_request(
    body: FriendRequestCreate,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> FriendshipResponse:
    """Send a friend request."""
    try:
        request = await send_friend_request(db, user.id, str(body.friend_id))
        await db.commit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _friendship_response(request)


@router.post("/requests/{request_id}/accept", response_model=FriendshipResponse)
async def accept_request(
    request_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> FriendshipResponse:
    """Accept a pending request addressed to the caller."""
    request = await accept_friend_request(db, user.id, str(request_id))
    await db.commit()
    return _friendship_response(request)


@router.post("/requests/{request_id}/reject", response_model=FriendshipResponse)
async def reject_request(
    request_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> FriendshipResponse:
    """Reject a pending request addressed to the caller."""
    request = await reject_friend_request(db, user.id, str(request_id))
    await db.commit()
    return _friendship_response(request)


@router.delete("/{friend_id}", status_code=204)
async def delete_friend(
    friend_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Remove a friend in both directions."""
    await remove_friend(db, user.id, str(friend_id))
    await db.commit()
    return Response(status_code=204)
