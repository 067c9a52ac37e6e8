"""Stats API endpoints: /api/v1/users/{user_id}/stats."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.auth.dependencies import get_current_user
from gamelib.badges.service import load_thresholds
from gamelib.badges.tiers import badge_progress
from gamelib.database import get_session
from gamelib.db.models import Profile, UserStats
from gamelib.errors import NotFoundError
from gamelib.social.friendship_service import ensure_can_view
from gamelib.stats.aggregator import get_user_stats
from gamelib.stats.schemas import BadgeProgressResponse, UserStatsResponse

router = APIRouter(prefix="/api/v1/users", tags=["Stats"])


async def _stats_response(db: AsyncSession, stats: UserStats) -> UserStatsResponse:
    progress = badge_progress(stats.completed_games, await load_thresholds(db))
    return UserStatsResponse(
        user_id=str(stats.user_id),
        total_games=stats.total_games,
        completed_games=stats.completed_games,
        wishlist_games=stats.wishlist_games,
        playing_games=stats.playing_games,
        dropped_games=stats.dropped_games,
        average_rating=float(stats.average_rating) if stats.average_rating is not None else None,
        total_ratings=stats.total_ratings,
        favorite_genre=stats.favorite_genre,
        current_badge_tier=stats.current_badge_tier,
        badge_progress=BadgeProgressResponse(
            current_tier=progress.current_tier,
            next_tier=progress.next_tier,
            games_to_next_tier=progress.games_to_next_tier,
            progress=progress.progress,
        ),
        updated_at=stats.updated_at,
    )


async def _load(db: AsyncSession, user_id: str) -> UserStats:
    stats = await get_user_stats(db, user_id)
    if stats is None:
        msg = "Stats not found"
        raise NotFoundError(msg)
    return stats


@router.get("/me/stats", response_model=UserStatsResponse)
async def get_my_stats(
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserStatsResponse:
    """Own stats with badge progress."""
    return await _stats_response(db, await _load(db, user.id))


@router.get("/{user_id}/stats", response_model=UserStatsResponse)
async def get_stats(
    user_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserStatsResponse:
    """Stats of self or an accepted friend; 404 for anyone else."""
    await ensure_can_view(db, user.id, str(user_id))
    return await _stats_response(db, await _load(db, str(user_id)))
