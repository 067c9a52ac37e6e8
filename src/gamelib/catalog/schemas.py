"""Pydantic schemas for catalog endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field


class GameUpsertRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=512)
    slug: str | None = Field(None, max_length=256)
    cover_url: str | None = None
    genres: list[str] = []
    platforms: list[str] = []
    summary: str | None = None
    release_date: date | None = None
    steam_app_id: int | None = Field(None, ge=1)


class GameResponse(BaseModel):
    id: int
    name: str
    slug: str | None = None
    cover_url: str | None = None
    genres: list[str] = []
    platforms: list[str] = []
    summary: str | None = None
    release_date: date | None = None
    steam_app_id: int | None = None
    last_updated_at: datetime
