"""Friend requests and friendships.

A request is one pending row (requester -> recipient). Accepting it marks the
row accepted and inserts the reciprocal accepted row, so "my friends" is always
``user_id = me AND status = 'accepted'``.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.db.models import Friendship, Profile
from gamelib.errors import ConflictError, NotFoundError


async def send_friend_request(db: AsyncSession, user_id: str, friend_id: str) -> Friendship:
    """Create a pending request from user_id to friend_id.

    Raises:
        ValueError: If a user tries to befriend themselves.
        NotFoundError: If the recipient has no profile.
        ConflictError: If a relationship already exists in either direction.
    """
    if user_id == friend_id:
        msg = "Cannot send a friend request to yourself"
        raise ValueError(msg)

    if await db.get(Profile, friend_id) is None:
        msg = "User not found"
        raise NotFoundError(msg)

    existing = await db.execute(
        select(Friendship).where(
            or_(
                (Friendship.user_id == user_id) & (Friendship.friend_id == friend_id),
                (Friendship.user_id == friend_id) & (Friendship.friend_id == user_id),
            )
        )
    )
    if existing.scalars().first() is not None:
        msg = "Friend request already exists"
        raise ConflictError(msg)

    now = datetime.now(timezone.utc)
    request = Friendship(
        user_id=user_id,
        friend_id=friend_id,
        status="pending",
        requested_by=user_id,
        created_at=now,
        updated_at=now,
    )
    db.add(request)
    try:
        await db.flush()
    except IntegrityError as e:
        msg = "Friend request already exists"
        raise ConflictError(msg) from e
    return request


async def _get_incoming_request(db: AsyncSession, user_id: str, request_id: str) -> Friendship:
    result = await db.execute(
        select(Friendship).where(
            Friendship.id == request_id,
            Friendship.friend_id == user_id,
            Friendship.status == "pending",
        )
    )
    request = result.scalar_one_or_none()
    if request is None:
        msg = "Friend request not found"
        raise NotFoundError(msg)
    return request


async def accept_friend_request(db: AsyncSession, user_id: str, request_id: str) -> Friendship:
    """Accept a pending request addressed to user_id.

    Raises:
        NotFoundError: If no pending request with that id is addressed to user_id.
    """
    request = await _get_incoming_request(db, user_id, request_id)
    now = datetime.now(timezone.utc)
    request.status = "accepted"
    request.updated_at = now

    reciprocal = Friendship(
        user_id=user_id,
        friend_id=request.user_id,
        status="accepted",
        requested_by=request.user_id,
        created_at=now,
        updated_at=now,
    )
    db.add(reciprocal)
    await db.flush()
    return request


async def reject_friend_request(db: AsyncSession, user_id: str, request_id: str) -> Friendship:
    """Reject a pending request addressed to user_id.

    Raises:
        NotFoundError: If no pending request with that id is addressed to user_id.
    """
    request = await _get_incoming_request(db, user_id, request_id)
    request.status = "rejected"
    request.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return request


async def remove_friend(db: AsyncSession, user_id: str, friend_id: str) -> None:
    """Delete the friendship in both directions.

    Raises:
        NotFoundError: If the two users are not friends.
    """
    if friend_id not in await list_friend_ids(db, user_id):
        msg = "Friend not found"
        raise NotFoundError(msg)

    await db.execute(
        delete(Friendship).where(
            or_(
                (Friendship.user_id == user_id) & (Friendship.friend_id == friend_id),
                (Friendship.user_id == friend_id) & (Friendship.friend_id == user_id),
            )
        )
    )
    await db.flush()


async def list_friend_ids(db: AsyncSession, user_id: str) -> list[str]:
    """Ids of accepted friends."""
    result = await db.execute(
        select(Friendship.friend_id).where(
            Friendship.user_id == user_id,
            Friendship.status == "accepted",
        )
    )
    return [str(friend_id) for friend_id in result.scalars()]


async def list_pending_requests(db: AsyncSession, user_id: str) -> list[Friendship]:
    """Pending requests addressed to user_id, newest first."""
    result = await db.execute(
        select(Friendship)
        .where(Friendship.friend_id == user_id, Friendship.status == "pending")
        .order_by(Friendship.created_at.desc())
    )
    return list(result.scalars().all())


async def are_friends(db: AsyncSession, user_id: str, other_id: str) -> bool:
    return other_id in await list_friend_ids(db, user_id)


async def ensure_can_view(db: AsyncSession, viewer_id: str, owner_id: str) -> None:
    """Per-user data is visible to its owner and accepted friends only.

    Raises:
        NotFoundError: For anyone else.
    """
    if viewer_id == owner_id:
        return
    if not await are_friends(db, viewer_id, owner_id):
        msg = "User not found"
        raise NotFoundError(msg)
