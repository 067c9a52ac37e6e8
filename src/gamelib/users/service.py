"""Profile lifecycle: creation at signup, updates, cascading deletion."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError

from gamelib.db.models import Activity, CollectionEntry, Friendship, Profile, UserStats

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,20}$")


async def get_profile(db: AsyncSession, user_id: str) -> Profile | None:
    """Fetch a profile by id."""
    return await db.get(Profile, user_id)


async def get_or_create_profile(
    db: AsyncSession,
    user_id: str,
    email: str | None = None,
) -> tuple[Profile, bool]:
    """Return the caller's profile, creating it with zeroed stats on first sight.

    Returns (profile, created). Does not commit. Losing a race with another
    first request rolls the session back and returns the winner's row.
    """
    profile = await get_profile(db, user_id)
    if profile is not None:
        return profile, False

    now = datetime.now(timezone.utc)
    profile = Profile(id=user_id, email=email, created_at=now, updated_at=now)
    try:
        db.add(profile)
        await db.flush()
        db.add(UserStats(user_id=user_id, updated_at=now))
        await db.flush()
    except IntegrityError:
        # A concurrent first request created it
        await db.rollback()
        existing = await get_profile(db, user_id)
        if existing is None:
            raise
        logger.info("profile_create_raced", user_id=user_id)
        return existing, False

    logger.info("profile_created", user_id=user_id)
    return profile, True


async def update_profile(
    db: AsyncSession,
    profile: Profile,
    username: str | None = None,
    bio: str | None = None,
    avatar: str | None = None,
) -> Profile:
    """
    Update profile fields.

    Raises:
        ValueError: If the username is malformed or already taken (case-insensitive).
    """
    if username is not None:
        if not _USERNAME_RE.match(username):
            msg = "Username must be 3-20 characters of letters, digits or underscore"
            raise ValueError(msg)
        normalized = username.lower()
        result = await db.execute(
            select(Profile)
            .where(Profile.username_normalized == normalized)
            .where(Profile.id != profile.id)
        )
        if result.scalar_one_or_none() is not None:
            msg = "Username already taken"
            raise ValueError(msg)
        profile.username = username
        profile.username_normalized = normalized

    if bio is not None:
        profile.bio = bio
    if avatar is not None:
        profile.avatar = avatar

    profile.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return profile


async def delete_profile(db: AsyncSession, user_id: str) -> None:
    """Delete a profile and everything derived from it.

    Stats are not recomputed: the aggregate goes away with the user.
    """
    await db.execute(delete(Activity).where(Activity.user_id == user_id))
    await db.execute(
        delete(Friendship).where(
            or_(
                Friendship.user_id == user_id,
                Friendship.friend_id == user_id,
                Friendship.requested_by == user_id,
            )
        )
    )
    await db.execute(delete(CollectionEntry).where(CollectionEntry.user_id == user_id))
    await db.execute(delete(UserStats).where(UserStats.user_id == user_id))
    await db.execute(delete(Profile).where(Profile.id == user_id))
    await db.flush()
    logger.info("profile_deleted", user_id=user_id)
