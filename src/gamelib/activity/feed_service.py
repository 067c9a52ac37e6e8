"""Activity feed reads."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.db.models import Activity
from gamelib.social.friendship_service import list_friend_ids


async def _paginate(
    db: AsyncSession,
    user_ids: Sequence[str],
    page: int,
    per_page: int,
) -> tuple[list[Activity], int]:
    offset = (page - 1) * per_page

    total_result = await db.execute(
        select(func.count()).select_from(Activity).where(Activity.user_id.in_(user_ids))
    )
    total = total_result.scalar_one()

    result = await db.execute(
        select(Activity)
        .where(Activity.user_id.in_(user_ids))
        .order_by(Activity.created_at.desc(), Activity.id)
        .offset(offset)
        .limit(per_page)
    )
    return list(result.scalars().all()), total


async def get_activity_feed(
    db: AsyncSession,
    user_id: str,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Activity], int]:
    """Activities of the user and their accepted friends, newest first."""
    user_ids = [user_id, *await list_friend_ids(db, user_id)]
    return await _paginate(db, user_ids, page, per_page)


async def get_user_activities(
    db: AsyncSession,
    user_id: str,
    page: int = 1,
    per_page: int = 20,
) -> tuple[list[Activity], int]:
    """One user's own activities, newest first."""
    return await _paginate(db, [user_id], page, per_page)
