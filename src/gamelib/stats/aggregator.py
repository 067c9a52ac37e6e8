"""Per-user stats aggregation.

``compute_stats`` is a pure function of a user's full entry set; the same
entries always produce an equal snapshot. ``recompute_user_stats`` loads the
entries, validates the result and upserts the ``user_stats`` row inside the
caller's transaction.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.badges.service import load_thresholds
from gamelib.badges.tiers import DEFAULT_THRESHOLDS, TierThreshold, tier_for
from gamelib.database import dialect_insert
from gamelib.db.models import CollectionEntry, Game, UserStats
from gamelib.errors import ConsistencyError

logger = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class EntrySnapshot:
    """The slice of a collection entry the aggregator reads."""

    status: str
    rating: int | None = None
    genres: tuple[str, ...] = ()


@dataclass(frozen=True)
class StatsSnapshot:
    total_games: int = 0
    completed_games: int = 0
    wishlist_games: int = 0
    playing_games: int = 0
    dropped_games: int = 0
    average_rating: Decimal | None = None
    total_ratings: int = 0
    favorite_genre: str | None = None
    current_badge_tier: int = 0


def average_rating(ratings: Sequence[int]) -> Decimal | None:
    """Mean rounded half-up to one decimal, or None for no ratings."""
    if not ratings:
        return None
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)


def favorite_genre(genre_lists: Iterable[Iterable[str]]) -> str | None:
    """Most frequent genre. Ties go to the lexicographically smallest name."""
    counts = Counter(genre for genres in genre_lists for genre in genres)
    if not counts:
        return None
    genre, _ = min(counts.items(), key=lambda item: (-item[1], item[0]))
    return genre


def compute_stats(
    entries: Iterable[EntrySnapshot],
    tiers: Sequence[TierThreshold] = DEFAULT_THRESHOLDS,
) -> StatsSnapshot:
    """Aggregate a user's full entry set."""
    entries = list(entries)
    by_status = Counter(e.status for e in entries)
    ratings = [e.rating for e in entries if e.rating is not None]
    completed = by_status["completed"]

    return StatsSnapshot(
        total_games=len(entries),
        completed_games=completed,
        wishlist_games=by_status["wishlist"],
        playing_games=by_status["playing"],
        dropped_games=by_status["dropped"],
        average_rating=average_rating(ratings),
        total_ratings=len(ratings),
        favorite_genre=favorite_genre(e.genres for e in entries if e.status == "completed"),
        current_badge_tier=tier_for(completed, tiers),
    )


def check_invariants(snapshot: StatsSnapshot) -> None:
    """Raise ConsistencyError if the snapshot is not internally consistent."""
    status_sum = (
        snapshot.completed_games
        + snapshot.wishlist_games
        + snapshot.playing_games
        + snapshot.dropped_games
    )
    if snapshot.total_games != status_sum:
        msg = f"total_games={snapshot.total_games} does not match status counts sum={status_sum}"
        raise ConsistencyError(msg)
    if (snapshot.average_rating is None) != (snapshot.total_ratings == 0):
        msg = (
            f"average_rating={snapshot.average_rating} inconsistent with "
            f"total_ratings={snapshot.total_ratings}"
        )
        raise ConsistencyError(msg)
    if snapshot.total_ratings > snapshot.total_games:
        msg = f"total_ratings={snapshot.total_ratings} exceeds total_games={snapshot.total_games}"
        raise ConsistencyError(msg)
    if snapshot.current_badge_tier < 0:
        msg = f"negative badge tier {snapshot.current_badge_tier}"
        raise ConsistencyError(msg)


async def load_entry_snapshots(db: AsyncSession, user_id: str) -> list[EntrySnapshot]:
    """All of a user's entries with their catalog genres."""
    result = await db.execute(
        select(CollectionEntry.status, CollectionEntry.rating, Game.genres)
        .outerjoin(Game, Game.id == CollectionEntry.game_id)
        .where(CollectionEntry.user_id == user_id)
    )
    return [
        EntrySnapshot(status=row.status, rating=row.rating, genres=tuple(row.genres or ()))
        for row in result
    ]


async def lock_user_stats(db: AsyncSession, user_id: str) -> UserStats:
    """Ensure the user's stats row exists and hold its row lock until commit.

    Everything read after this returns sees the mutations committed by earlier
    lock holders, so concurrent recomputes for one user serialize.
    """
    insert = dialect_insert(db)
    await db.execute(
        insert(UserStats)
        .values(user_id=user_id, updated_at=datetime.now(timezone.utc))
        .on_conflict_do_nothing(index_elements=["user_id"])
    )
    result = await db.execute(
        select(UserStats)
        .where(UserStats.user_id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def recompute_user_stats(db: AsyncSession, user_id: str) -> UserStats:
    """Recompute and upsert the stats row for one user.

    Pure recomputation: safe to call any number of times. The row lock is taken
    before the entries are read.
    Raises ConsistencyError (aborting the caller's transaction) on invariant violation.
    """
    stats = await lock_user_stats(db, user_id)

    entries = await load_entry_snapshots(db, user_id)
    tiers = await load_thresholds(db)
    snapshot = compute_stats(entries, tiers)

    try:
        check_invariants(snapshot)
    except ConsistencyError:
        logger.error("Stats invariant violated for user %s: %s", user_id, snapshot)
        raise

    stats.total_games = snapshot.total_games
    stats.completed_games = snapshot.completed_games
    stats.wishlist_games = snapshot.wishlist_games
    stats.playing_games = snapshot.playing_games
    stats.dropped_games = snapshot.dropped_games
    stats.average_rating = snapshot.average_rating
    stats.total_ratings = snapshot.total_ratings
    stats.favorite_genre = snapshot.favorite_genre
    stats.current_badge_tier = snapshot.current_badge_tier
    stats.updated_at = datetime.now(timezone.utc)

    await db.flush()
    return stats


async def get_user_stats(db: AsyncSession, user_id: str) -> UserStats | None:
    """Fetch the stored stats row for a user."""
    result = await db.execute(select(UserStats).where(UserStats.user_id == user_id))
    return result.scalar_one_or_none()


def snapshot_of(stats: UserStats) -> StatsSnapshot:
    """Stored row as a comparable snapshot."""
    return StatsSnapshot(
        total_games=stats.total_games,
        completed_games=stats.completed_games,
        wishlist_games=stats.wishlist_games,
        playing_games=stats.playing_games,
        dropped_games=stats.dropped_games,
        average_rating=stats.average_rating,
        total_ratings=stats.total_ratings,
        favorite_genre=stats.favorite_genre,
        current_badge_tier=stats.current_badge_tier,
    )
