"""Pydantic schemas for collection endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from gamelib.activity.schemas import ActivityResponse

Status = Literal["wishlist", "playing", "completed", "dropped"]
Source = Literal["manual", "steam", "steam_wishlist", "epic", "gog", "playstation", "riot", "lol", "valorant", "tft"]


class CreateEntryRequest(BaseModel):
    game_id: int = Field(..., ge=1)
    status: Status
    source: Source = "manual"
    rating: int | None = Field(None, ge=1, le=10)
    playtime_minutes: int = Field(0, ge=0)
    notes: str | None = Field(None, max_length=2000)


class UpdateEntryRequest(BaseModel):
    """Only fields present in the body are applied. ``"rating": null`` clears the rating."""

    model_config = ConfigDict(extra="forbid")

    status: Status | None = None
    rating: int | None = Field(None, ge=1, le=10)
    notes: str | None = Field(None, max_length=2000)
    playtime_minutes: int | None = Field(None, ge=0)


class EntryResponse(BaseModel):
    id: str
    game_id: int
    status: str
    rating: int | None = None
    notes: str | None = None
    source: str
    playtime_minutes: int
    added_at: datetime
    updated_at: datetime


class EntryMutationResponse(BaseModel):
    entry: EntryResponse
    activity: ActivityResponse | None = None


class CollectionResponse(BaseModel):
    entries: list[EntryResponse]
    total: int
