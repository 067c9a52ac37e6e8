"""Pydantic schemas for activity feed endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ActivityResponse(BaseModel):
    id: str
    user_id: str
    activity_type: str
    game_id: int
    game_name: str
    game_cover_url: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    metadata: dict = {}
    created_at: datetime


class ActivityFeedResponse(BaseModel):
    activities: list[ActivityResponse]
    total: int
    page: int
    per_page: int


def activity_response(activity) -> ActivityResponse:  # noqa: ANN001
    """Build an ActivityResponse from the ORM model."""
    return ActivityResponse(
        id=str(activity.id),
        user_id=str(activity.user_id),
        activity_type=activity.activity_type,
        game_id=activity.game_id,
        game_name=activity.game_name,
        game_cover_url=activity.game_cover_url,
        old_value=activity.old_value,
        new_value=activity.new_value,
        metadata=activity.activity_metadata or {},
        created_at=activity.created_at,
    )
