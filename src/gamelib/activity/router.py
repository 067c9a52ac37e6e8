"""Activity feed endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.activity.feed_service import get_activity_feed, get_user_activities
from gamelib.activity.schemas import ActivityFeedResponse, activity_response
from gamelib.auth.dependencies import get_current_user
from gamelib.database import get_session
from gamelib.db.models import Profile
from gamelib.dependencies import pagination
from gamelib.social.friendship_service import ensure_can_view

router = APIRouter(prefix="/api/v1", tags=["Activity"])


@router.get("/feed", response_model=ActivityFeedResponse)
async def get_feed(
    paging: tuple[int, int] = Depends(pagination),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ActivityFeedResponse:
    """Own and friends' activities, newest first."""
    page, per_page = paging
    activities, total = await get_activity_feed(db, user.id, page, per_page)
    return ActivityFeedResponse(
        activities=[activity_response(a) for a in activities],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/users/{user_id}/activity", response_model=ActivityFeedResponse)
async def get_user_activity(
    user_id: uuid.UUID,
    paging: tuple[int, int] = Depends(pagination),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ActivityFeedResponse:
    """One user's activities. Visible to the user and accepted friends only."""
    await ensure_can_view(db, user.id, str(user_id))
    page, per_page = paging
    activities, total = await get_user_activities(db, str(user_id), page, per_page)
    return ActivityFeedResponse(
        activities=[activity_response(a) for a in activities],
        total=total,
        page=page,
        per_page=per_page,
    )
