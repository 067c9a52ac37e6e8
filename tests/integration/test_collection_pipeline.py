"""Integration: collection mutation -> stats recompute -> activity emission."""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import delete, event, func, select
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.catalog.service import upsert_game
from gamelib.collection.service import create_entry, delete_entry, list_entries, update_entry
from gamelib.db.models import Activity, CollectionEntry, UserStats
from gamelib.errors import ConflictError, ConsistencyError, NotFoundError
from gamelib.stats.aggregator import (
    compute_stats,
    get_user_stats,
    load_entry_snapshots,
    recompute_user_stats,
    snapshot_of,
)


async def _activities(db: AsyncSession, user_id: str) -> list[Activity]:
    result = await db.execute(
        select(Activity).where(Activity.user_id == user_id).order_by(Activity.created_at)
    )
    return list(result.scalars().all())


async def _stored_matches_recompute(db: AsyncSession, user_id: str) -> bool:
    stats = await get_user_stats(db, user_id)
    return snapshot_of(stats) == compute_stats(await load_entry_snapshots(db, user_id))


class TestScenarios:
    @pytest.mark.asyncio
    async def test_add_to_wishlist(self, db_session, user_id):
        """Adding a wishlist entry counts it and emits game_added."""
        entry, activity = await create_entry(db_session, user_id, 1, "wishlist")
        await db_session.commit()

        stats = await get_user_stats(db_session, user_id)
        assert stats.total_games == 1
        assert stats.wishlist_games == 1
        assert stats.average_rating is None

        assert activity.activity_type == "game_added"
        assert activity.new_value == "wishlist"
        assert activity.old_value is None
        assert activity.game_name == "Hollow Knight"
        assert activity.game_cover_url == "https://img.example.com/1.jpg"
        assert activity.activity_metadata == {"source": "manual"}
        assert len(await _activities(db_session, user_id)) == 1

    @pytest.mark.asyncio
    async def test_wishlist_to_completed(self, db_session, user_id):
        entry, _ = await create_entry(db_session, user_id, 1, "wishlist")
        await db_session.commit()

        _, activity = await update_entry(db_session, user_id, entry.id, {"status": "completed"})
        await db_session.commit()

        stats = await get_user_stats(db_session, user_id)
        assert stats.completed_games == 1
        assert stats.wishlist_games == 0
        assert stats.favorite_genre == "Metroidvania"

        assert activity.activity_type == "completed"
        assert activity.old_value == "wishlist"
        assert activity.new_value == "completed"
        assert len(await _activities(db_session, user_id)) == 2

    @pytest.mark.asyncio
    async def test_first_rating_on_completed_entry(self, db_session, user_id):
        entry, _ = await create_entry(db_session, user_id, 2, "completed")
        await db_session.commit()

        _, activity = await update_entry(db_session, user_id, entry.id, {"rating": 9})
        await db_session.commit()

        assert activity.activity_type == "rating_added"
        assert activity.old_value == "none"
        assert activity.new_value == "9"

        stats = await get_user_stats(db_session, user_id)
        assert stats.average_rating == Decimal("9.0")
        assert stats.total_ratings == 1

    @pytest.mark.asyncio
    async def test_badge_tier_crosses_threshold(self, db_session, user_id):
        """The 25th completed game moves the user to tier 1 on that mutation."""
        for game_id in range(100, 125):
            await upsert_game(db_session, game_id, f"Game {game_id}", genres=["Indie"])
        await db_session.commit()

        for game_id in range(100, 124):
            await create_entry(db_session, user_id, game_id, "completed")
        await db_session.commit()
        assert (await get_user_stats(db_session, user_id)).current_badge_tier == 0

        last, _ = await create_entry(db_session, user_id, 124, "playing")
        await db_session.commit()
        assert (await get_user_stats(db_session, user_id)).current_badge_tier == 0

        await update_entry(db_session, user_id, last.id, {"status": "completed"})
        await db_session.commit()
        stats = await get_user_stats(db_session, user_id)
        assert stats.completed_games == 25
        assert stats.current_badge_tier == 1

    @pytest.mark.asyncio
    async def test_delete_only_entry(self, db_session, user_id):
        entry, _ = await create_entry(db_session, user_id, 3, "completed", rating=8)
        await db_session.commit()
        before = len(await _activities(db_session, user_id))

        await delete_entry(db_session, user_id, entry.id)
        await db_session.commit()

        stats = await get_user_stats(db_session, user_id)
        assert stats.total_games == 0
        assert stats.completed_games == 0
        assert stats.total_ratings == 0
        assert stats.average_rating is None
        assert stats.favorite_genre is None
        assert len(await _activities(db_session, user_id)) == before


class TestDerivedStateConsistency:
    @pytest.mark.asyncio
    async def test_stats_match_recompute_after_each_mutation(self, db_session, user_id):
        e1, _ = await create_entry(db_session, user_id, 1, "playing")
        assert await _stored_matches_recompute(db_session, user_id)
        e2, _ = await create_entry(db_session, user_id, 2, "completed", rating=6)
        assert await _stored_matches_recompute(db_session, user_id)
        await update_entry(db_session, user_id, e1.id, {"status": "dropped", "rating": 3})
        assert await _stored_matches_recompute(db_session, user_id)
        await update_entry(db_session, user_id, e2.id, {"rating": None})
        assert await _stored_matches_recompute(db_session, user_id)
        await delete_entry(db_session, user_id, e1.id)
        assert await _stored_matches_recompute(db_session, user_id)
        await db_session.commit()

    @pytest.mark.asyncio
    async def test_recompute_is_idempotent(self, db_session, user_id):
        await create_entry(db_session, user_id, 1, "completed", rating=7)
        await create_entry(db_session, user_id, 2, "completed", rating=8)
        await db_session.commit()

        first = snapshot_of(await recompute_user_stats(db_session, user_id))
        second = snapshot_of(await recompute_user_stats(db_session, user_id))
        assert first == second
        assert first.average_rating == Decimal("7.5")

    @pytest.mark.asyncio
    async def test_genre_tie_break_is_lexicographic(self, db_session, user_id):
        # Hades: Roguelike/Action, Disco Elysium: RPG -> one each, "Action" sorts first
        await create_entry(db_session, user_id, 3, "completed")
        await create_entry(db_session, user_id, 4, "completed")
        await db_session.commit()
        assert (await get_user_stats(db_session, user_id)).favorite_genre == "Action"

    @pytest.mark.asyncio
    async def test_stats_isolated_per_user(self, db_session, user_id, other_user_id):
        await create_entry(db_session, user_id, 1, "completed")
        await create_entry(db_session, other_user_id, 2, "wishlist")
        await db_session.commit()

        mine = await get_user_stats(db_session, user_id)
        theirs = await get_user_stats(db_session, other_user_id)
        assert (mine.completed_games, mine.wishlist_games) == (1, 0)
        assert (theirs.completed_games, theirs.wishlist_games) == (0, 1)


class TestActivitySuppression:
    @pytest.mark.asyncio
    async def test_notes_and_playtime_emit_nothing(self, db_session, user_id):
        entry, _ = await create_entry(db_session, user_id, 1, "playing")
        _, activity = await update_entry(
            db_session, user_id, entry.id, {"notes": "great so far", "playtime_minutes": 120}
        )
        await db_session.commit()
        assert activity is None
        assert len(await _activities(db_session, user_id)) == 1

    @pytest.mark.asyncio
    async def test_clearing_rating_emits_nothing(self, db_session, user_id):
        entry, _ = await create_entry(db_session, user_id, 1, "completed", rating=8)
        _, activity = await update_entry(db_session, user_id, entry.id, {"rating": None})
        await db_session.commit()
        assert activity is None
        assert (await get_user_stats(db_session, user_id)).total_ratings == 0

    @pytest.mark.asyncio
    async def test_status_and_rating_together_emit_status_only(self, db_session, user_id):
        entry, _ = await create_entry(db_session, user_id, 1, "playing")
        _, activity = await update_entry(db_session, user_id, entry.id, {"status": "completed", "rating": 10})
        await db_session.commit()

        assert activity.activity_type == "completed"
        types = [a.activity_type for a in await _activities(db_session, user_id)]
        assert types.count("rating_added") == 0
        assert (await get_user_stats(db_session, user_id)).total_ratings == 1

    @pytest.mark.asyncio
    async def test_activity_keeps_game_name_after_rename(self, db_session, user_id):
        _, activity = await create_entry(db_session, user_id, 5, "wishlist")
        await db_session.commit()
        await upsert_game(db_session, 5, "Outer Wilds: Archaeologist Edition")
        await db_session.commit()

        stored = (await _activities(db_session, user_id))[0]
        assert stored.game_name == "Outer Wilds"


class TestErrors:
    @pytest.mark.asyncio
    async def test_duplicate_entry_conflicts(self, db_session, user_id):
        await create_entry(db_session, user_id, 1, "wishlist")
        await db_session.commit()

        with pytest.raises(ConflictError):
            await create_entry(db_session, user_id, 1, "playing")
        await db_session.rollback()

        assert len(await list_entries(db_session, user_id)) == 1
        assert len(await _activities(db_session, user_id)) == 1

    @pytest.mark.asyncio
    async def test_unknown_game(self, db_session, user_id):
        with pytest.raises(NotFoundError):
            await create_entry(db_session, user_id, 9999, "wishlist")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"status": "beaten"},
            {"status": "playing", "rating": 0},
            {"status": "playing", "rating": 11},
            {"status": "playing", "playtime_minutes": -1},
            {"status": "playing", "source": "itch"},
        ],
    )
    async def test_invalid_values_rejected(self, db_session, user_id, kwargs):
        with pytest.raises(ValueError):
            await create_entry(db_session, user_id, 1, **kwargs)
        assert (await get_user_stats(db_session, user_id)).total_games == 0

    @pytest.mark.asyncio
    async def test_unknown_update_field(self, db_session, user_id):
        entry, _ = await create_entry(db_session, user_id, 1, "playing")
        with pytest.raises(ValueError):
            await update_entry(db_session, user_id, entry.id, {"game_id": 2})

    @pytest.mark.asyncio
    async def test_other_users_entry_is_not_found(self, db_session, user_id, other_user_id):
        entry, _ = await create_entry(db_session, user_id, 1, "playing")
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await update_entry(db_session, other_user_id, entry.id, {"status": "completed"})
        with pytest.raises(NotFoundError):
            await delete_entry(db_session, other_user_id, entry.id)
        with pytest.raises(NotFoundError):
            await delete_entry(db_session, user_id, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_consistency_failure_leaves_nothing_behind(self, db_session, user_id, monkeypatch):
        """An invariant violation aborts the whole mutation."""

        def _fail(snapshot):
            msg = "forced"
            raise ConsistencyError(msg)

        monkeypatch.setattr("gamelib.stats.aggregator.check_invariants", _fail)
        with pytest.raises(ConsistencyError):
            await create_entry(db_session, user_id, 1, "wishlist")
        await db_session.rollback()

        count = await db_session.execute(
            select(func.count()).select_from(CollectionEntry).where(CollectionEntry.user_id == user_id)
        )
        assert count.scalar_one() == 0
        assert await _activities(db_session, user_id) == []
        assert (await get_user_stats(db_session, user_id)).total_games == 0


class TestStatsRowLock:
    @pytest.mark.asyncio
    async def test_stats_row_locked_before_entries_are_read(self, db_session, user_id):
        await create_entry(db_session, user_id, 1, "playing")
        selects: list[str] = []

        def _record(state):
            if state.is_select:
                selects.append(str(state.statement.compile(dialect=postgresql.dialect())))

        event.listen(db_session.sync_session, "do_orm_execute", _record)
        try:
            await recompute_user_stats(db_session, user_id)
        finally:
            event.remove(db_session.sync_session, "do_orm_execute", _record)

        lock = next(i for i, sql in enumerate(selects) if "FROM user_stats" in sql and "FOR UPDATE" in sql)
        entries = next(i for i, sql in enumerate(selects) if "FROM user_games" in sql)
        assert lock < entries

    @pytest.mark.asyncio
    async def test_missing_stats_row_is_created(self, db_session, user_id):
        await create_entry(db_session, user_id, 2, "completed", rating=7)
        await db_session.execute(delete(UserStats).where(UserStats.user_id == user_id))
        await db_session.commit()

        stats = await recompute_user_stats(db_session, user_id)
        await db_session.commit()
        assert stats.total_games == 1
        assert stats.completed_games == 1
        assert stats.average_rating == Decimal("7.0")
