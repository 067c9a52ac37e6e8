"""Pydantic schemas for friendship endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel


class FriendRequestCreate(BaseModel):
    friend_id: uuid.UUID


class FriendshipResponse(BaseModel):
    id: str
    user_id: str
    friend_id: str
    status: str
    requested_by: str
    created_at: datetime


class FriendListResponse(BaseModel):
    friend_ids: list[str]
    total: int


class FriendRequestListResponse(BaseModel):
    requests: list[FriendshipResponse]
