"""Badge tier endpoints (public)."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.badges.schemas import BadgeTierListResponse, BadgeTierResponse
from gamelib.badges.service import list_badge_tiers
from gamelib.database import get_session

router = APIRouter(prefix="/api/v1/badges", tags=["Badges"])


@router.get("", response_model=BadgeTierListResponse)
async def get_badge_tiers(db: AsyncSession = Depends(get_session)) -> BadgeTierListResponse:
    """All badge tiers ordered by tier."""
    tiers = await list_badge_tiers(db)
    return BadgeTierListResponse(
        badges=[
            BadgeTierResponse(
                tier=t.tier,
                name=t.name,
                description=t.description,
                required_games=t.required_games,
                icon_name=t.icon_name,
            )
            for t in tiers
        ]
    )
