"""Activity classification and emission for collection mutations.

Rules, in priority order:

1. deletion            -> nothing
2. creation            -> game_added (new_value = initial status)
3. status changed      -> completed, or status_changed for any other new status
4. rating set/changed  -> rating_added (old_value "none" when previously unrated)
5. anything else       -> nothing

A status change wins over a simultaneous rating change; the rating change is
not fed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.catalog.service import get_game
from gamelib.db.models import Activity
from gamelib.errors import NotFoundError

logger = logging.getLogger(__name__)

GAME_ADDED = "game_added"
STATUS_CHANGED = "status_changed"
RATING_ADDED = "rating_added"
COMPLETED = "completed"

NO_RATING = "none"


@dataclass(frozen=True)
class EntryState:
    """The fields of a collection entry that drive activity classification."""

    status: str
    rating: int | None = None
    source: str = "manual"


@dataclass(frozen=True)
class ActivityDraft:
    activity_type: str
    old_value: str | None = None
    new_value: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def _rating_changed(old: int | None, new: int | None) -> bool:
    if new is None:
        return False
    return old is None or old != new


def classify_transition(old: EntryState | None, new: EntryState | None) -> ActivityDraft | None:
    """Decide which activity, if any, a single entry mutation produces.

    ``old`` is None for a creation, ``new`` is None for a deletion.
    """
    if new is None:
        return None

    if old is None:
        return ActivityDraft(
            activity_type=GAME_ADDED,
            new_value=new.status,
            metadata={"source": new.source},
        )

    if old.status != new.status:
        return ActivityDraft(
            activity_type=COMPLETED if new.status == "completed" else STATUS_CHANGED,
            old_value=old.status,
            new_value=new.status,
            metadata={"old_status": old.status, "new_status": new.status},
        )

    if _rating_changed(old.rating, new.rating):
        return ActivityDraft(
            activity_type=RATING_ADDED,
            old_value=NO_RATING if old.rating is None else str(old.rating),
            new_value=str(new.rating),
            metadata={"rating": new.rating},
        )

    return None


async def emit_activity(
    db: AsyncSession,
    user_id: str,
    game_id: int,
    draft: ActivityDraft,
) -> Activity:
    """Insert one activity, capturing the game's current name and cover."""
    game = await get_game(db, game_id)
    if game is None:
        msg = f"Game {game_id} not found"
        raise NotFoundError(msg)

    activity = Activity(
        user_id=user_id,
        activity_type=draft.activity_type,
        game_id=game_id,
        game_name=game.name,
        game_cover_url=game.cover_url,
        old_value=draft.old_value,
        new_value=draft.new_value,
        activity_metadata=dict(draft.metadata),
        created_at=datetime.now(timezone.utc),
    )
    db.add(activity)
    await db.flush()
    logger.debug("Emitted %s activity for user %s game %s", draft.activity_type, user_id, game_id)
    return activity
