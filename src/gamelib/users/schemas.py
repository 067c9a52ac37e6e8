"""Pydantic schemas for profile endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ProfileUpdateRequest(BaseModel):
    username: str | None = Field(None, min_length=3, max_length=20)
    bio: str | None = Field(None, max_length=280)
    avatar: str | None = Field(None, max_length=64)


class ProfileResponse(BaseModel):
    id: str
    email: str | None = None
    username: str | None = None
    bio: str | None = None
    avatar: str
    created_at: datetime
