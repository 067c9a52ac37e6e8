"""Badge tier seeding and lookup."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.badges.tiers import BADGE_TIERS, TierThreshold
from gamelib.database import dialect_insert
from gamelib.db.models import BadgeTier

logger = logging.getLogger(__name__)


async def seed_badge_tiers(db: AsyncSession) -> int:
    """Upsert all badge tiers. Returns number of tiers seeded."""
    insert = dialect_insert(db)
    seeded = 0
    for tier_data in BADGE_TIERS:
        stmt = insert(BadgeTier).values(**tier_data)
        stmt = stmt.on_conflict_do_update(
            index_elements=["tier"],
            set_={
                "name": stmt.excluded.name,
                "description": stmt.excluded.description,
                "required_games": stmt.excluded.required_games,
                "icon_name": stmt.excluded.icon_name,
            },
        )
        await db.execute(stmt)
        seeded += 1

    await db.commit()
    logger.info("Seeded %d badge tiers", seeded)
    return seeded


async def list_badge_tiers(db: AsyncSession) -> list[BadgeTier]:
    """All badge tiers ordered by tier."""
    result = await db.execute(select(BadgeTier).order_by(BadgeTier.tier))
    return list(result.scalars().all())


async def load_thresholds(db: AsyncSession) -> list[TierThreshold]:
    """Tier thresholds as stored. An empty table yields no thresholds (tier 0)."""
    result = await db.execute(select(BadgeTier.tier, BadgeTier.required_games))
    return [TierThreshold(tier=row.tier, required_games=row.required_games) for row in result]
