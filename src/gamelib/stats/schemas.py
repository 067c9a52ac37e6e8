"""Pydantic schemas for stats endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class BadgeProgressResponse(BaseModel):
    current_tier: int
    next_tier: int | None = None
    games_to_next_tier: int
    progress: float


class UserStatsResponse(BaseModel):
    user_id: str
    total_games: int
    completed_games: int
    wishlist_games: int
    playing_games: int
    dropped_games: int
    average_rating: float | None = None
    total_ratings: int
    favorite_genre: str | None = None
    current_badge_tier: int
    badge_progress: BadgeProgressResponse
    updated_at: datetime
