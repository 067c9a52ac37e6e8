"""Collection entry mutations.

Every mutation flushes the entry change and runs the matching derived-state hook
in the same session. The caller commits; on any exception nothing is committed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.catalog.service import get_game
from gamelib.collection.constants import MAX_RATING, MIN_RATING, MUTABLE_FIELDS, SOURCES, STATUSES
from gamelib.collection.triggers import CollectionTriggers, entry_state
from gamelib.db.models import Activity, CollectionEntry
from gamelib.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def _validate_status(status: str) -> None:
    if status not in STATUSES:
        msg = f"Invalid status '{status}'. Expected one of: {', '.join(STATUSES)}"
        raise ValueError(msg)


def _validate_source(source: str) -> None:
    if source not in SOURCES:
        msg = f"Invalid source '{source}'. Expected one of: {', '.join(SOURCES)}"
        raise ValueError(msg)


def _validate_rating(rating: int | None) -> None:
    if rating is None:
        return
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        msg = f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}"
        raise ValueError(msg)


def _validate_playtime(minutes: int) -> None:
    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes < 0:
        msg = "playtime_minutes must be a non-negative integer"
        raise ValueError(msg)


async def get_entry(db: AsyncSession, user_id: str, entry_id: str) -> CollectionEntry | None:
    """Fetch an entry owned by user_id. Entries of other users are invisible."""
    result = await db.execute(
        select(CollectionEntry).where(
            CollectionEntry.id == entry_id,
            CollectionEntry.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def list_entries(
    db: AsyncSession,
    user_id: str,
    status: str | None = None,
) -> list[CollectionEntry]:
    """A user's entries, most recently added first, optionally filtered by status."""
    stmt = select(CollectionEntry).where(CollectionEntry.user_id == user_id)
    if status is not None:
        _validate_status(status)
        stmt = stmt.where(CollectionEntry.status == status)
    result = await db.execute(stmt.order_by(CollectionEntry.added_at.desc()))
    return list(result.scalars().all())


async def create_entry(
    db: AsyncSession,
    user_id: str,
    game_id: int,
    status: str,
    source: str = "manual",
    rating: int | None = None,
    playtime_minutes: int = 0,
    notes: str | None = None,
) -> tuple[CollectionEntry, Activity | None]:
    """Add a game to a user's collection.

    Returns (entry, activity).

    Raises:
        ValueError: On invalid status, source, rating or playtime.
        NotFoundError: If the game is not in the catalog.
        ConflictError: If the user already tracks this game.
    """
    _validate_status(status)
    _validate_source(source)
    _validate_rating(rating)
    _validate_playtime(playtime_minutes)

    if await get_game(db, game_id) is None:
        msg = f"Game {game_id} not found"
        raise NotFoundError(msg)

    existing = await db.execute(
        select(CollectionEntry.id).where(
            CollectionEntry.user_id == user_id,
            CollectionEntry.game_id == game_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        msg = f"Game {game_id} is already in the collection"
        raise ConflictError(msg)

    now = datetime.now(timezone.utc)
    entry = CollectionEntry(
        user_id=user_id,
        game_id=game_id,
        status=status,
        source=source,
        rating=rating,
        playtime_minutes=playtime_minutes,
        notes=notes,
        added_at=now,
        updated_at=now,
    )
    db.add(entry)
    try:
        await db.flush()
    except IntegrityError as e:
        # Concurrent insert of the same (user, game) won the unique constraint
        msg = f"Game {game_id} is already in the collection"
        raise ConflictError(msg) from e

    activity = await CollectionTriggers(db).on_entry_created(entry)
    logger.info("User %s added game %s (%s, source=%s)", user_id, game_id, status, source)
    return entry, activity


async def update_entry(
    db: AsyncSession,
    user_id: str,
    entry_id: str,
    changes: dict[str, Any],
) -> tuple[CollectionEntry, Activity | None]:
    """Apply changes to status, rating, notes and/or playtime_minutes.

    A rating of None clears it. Returns (entry, activity).

    Raises:
        ValueError: On unknown fields or invalid values.
        NotFoundError: If the entry does not exist or belongs to another user.
    """
    unknown = set(changes) - MUTABLE_FIELDS
    if unknown:
        msg = f"Field(s) not updatable: {', '.join(sorted(unknown))}"
        raise ValueError(msg)

    if "status" in changes:
        _validate_status(changes["status"])
    if "rating" in changes:
        _validate_rating(changes["rating"])
    if "playtime_minutes" in changes:
        _validate_playtime(changes["playtime_minutes"])

    entry = await get_entry(db, user_id, entry_id)
    if entry is None:
        msg = "Collection entry not found"
        raise NotFoundError(msg)

    before = entry_state(entry)
    for field_name, value in changes.items():
        setattr(entry, field_name, value)
    entry.updated_at = datetime.now(timezone.utc)
    await db.flush()

    activity = await CollectionTriggers(db).on_entry_updated(entry, before)
    return entry, activity


async def delete_entry(db: AsyncSession, user_id: str, entry_id: str) -> None:
    """Remove an entry. Stats are recomputed; no activity is emitted.

    Raises:
        NotFoundError: If the entry does not exist or belongs to another user.
    """
    entry = await get_entry(db, user_id, entry_id)
    if entry is None:
        msg = "Collection entry not found"
        raise NotFoundError(msg)

    game_id = entry.game_id
    await db.delete(entry)
    await db.flush()

    await CollectionTriggers(db).on_entry_deleted(user_id)
    logger.info("User %s removed game %s", user_id, game_id)
