"""Derived-state hooks for collection mutations.

The collection service calls exactly one hook after each flushed mutation, in
the same session. Nothing is committed here; the caller owns the transaction,
so entry + stats + activity commit or roll back together.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.activity.emitter import EntryState, classify_transition, emit_activity
from gamelib.db.models import Activity, CollectionEntry
from gamelib.stats.aggregator import recompute_user_stats

logger = logging.getLogger(__name__)


def entry_state(entry: CollectionEntry) -> EntryState:
    """Capture the classification-relevant fields of an entry."""
    return EntryState(status=entry.status, rating=entry.rating, source=entry.source)


class CollectionTriggers:
    """Keeps user stats and the activity feed in step with collection entries."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def on_entry_created(self, entry: CollectionEntry) -> Activity | None:
        await recompute_user_stats(self.db, entry.user_id)
        return await self._emit(entry, None, entry_state(entry))

    async def on_entry_updated(self, entry: CollectionEntry, before: EntryState) -> Activity | None:
        await recompute_user_stats(self.db, entry.user_id)
        return await self._emit(entry, before, entry_state(entry))

    async def on_entry_deleted(self, user_id: str) -> None:
        """Deletions only recompute stats; they never reach the feed."""
        await recompute_user_stats(self.db, user_id)

    async def _emit(
        self,
        entry: CollectionEntry,
        old: EntryState | None,
        new: EntryState,
    ) -> Activity | None:
        draft = classify_transition(old, new)
        if draft is None:
            return None
        return await emit_activity(self.db, entry.user_id, entry.game_id, draft)
