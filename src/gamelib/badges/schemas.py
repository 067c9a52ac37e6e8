"""Pydantic schemas for badge endpoints."""

from __future__ import annotations

from pydantic import BaseModel


class BadgeTierResponse(BaseModel):
    tier: int
    name: str
    description: str
    required_games: int
    icon_name: str


class BadgeTierListResponse(BaseModel):
    badges: list[BadgeTierResponse]
