"""Game catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.auth.dependencies import require_catalog_writer
from gamelib.catalog.schemas import GameResponse, GameUpsertRequest
from gamelib.catalog.service import get_game, upsert_game
from gamelib.database import get_session
from gamelib.db.models import Game

router = APIRouter(prefix="/api/v1/games", tags=["Catalog"])


def _game_response(game: Game) -> GameResponse:
    return GameResponse(
        id=game.id,
        name=game.name,
        slug=game.slug,
        cover_url=game.cover_url,
        genres=list(game.genres or []),
        platforms=list(game.platforms or []),
        summary=game.summary,
        release_date=game.release_date,
        steam_app_id=game.steam_app_id,
        last_updated_at=game.last_updated_at,
    )


@router.get("/{game_id}", response_model=GameResponse)
async def get_game_endpoint(
    game_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_session),
) -> GameResponse:
    """Catalog game detail (public)."""
    game = await get_game(db, game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return _game_response(game)


@router.put("/{game_id}", response_model=GameResponse)
async def upsert_game_endpoint(
    body: GameUpsertRequest,
    game_id: int = Path(..., ge=1),
    _writer: dict = Depends(require_catalog_writer),
    db: AsyncSession = Depends(get_session),
) -> GameResponse:
    """Create or refresh a catalog game. Requires the catalog sync role."""
    try:
        game, _ = await upsert_game(
            db,
            game_id,
            body.name,
            slug=body.slug,
            cover_url=body.cover_url,
            genres=body.genres,
            platforms=body.platforms,
            summary=body.summary,
            release_date=body.release_date,
            steam_app_id=body.steam_app_id,
        )
        await db.commit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _game_response(game)
