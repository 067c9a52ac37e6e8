"""Game catalog lookup and upsert."""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.db.models import Game


async def get_game(db: AsyncSession, game_id: int) -> Game | None:
    """Fetch a catalog game by id."""
    result = await db.execute(select(Game).where(Game.id == game_id))
    return result.scalar_one_or_none()


async def upsert_game(
    db: AsyncSession,
    game_id: int,
    name: str,
    *,
    slug: str | None = None,
    cover_url: str | None = None,
    genres: list[str] | None = None,
    platforms: list[str] | None = None,
    summary: str | None = None,
    release_date: date | None = None,
    steam_app_id: int | None = None,
) -> tuple[Game, bool]:
    """Create or refresh a catalog game. Returns (game, created).

    Existing activities keep the name and cover they captured when emitted.

    Raises:
        ValueError: If the name is blank.
    """
    if not name.strip():
        msg = "Game name must not be empty"
        raise ValueError(msg)

    now = datetime.now(timezone.utc)
    game = await get_game(db, game_id)
    created = game is None
    if game is None:
        game = Game(id=game_id, first_added_at=now)
        db.add(game)

    game.name = name
    game.slug = slug
    game.cover_url = cover_url
    game.genres = list(genres or [])
    game.platforms = list(platforms or [])
    game.summary = summary
    game.release_date = release_date
    game.steam_app_id = steam_app_id
    game.last_updated_at = now

    await db.flush()
    return game, created
