"""Collection API endpoints: /api/v1/collection/*."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.activity.publisher import publish_activity
from gamelib.activity.schemas import activity_response
from gamelib.auth.dependencies import get_current_user
from gamelib.collection.schemas import (
    CollectionResponse,
    CreateEntryRequest,
    EntryMutationResponse,
    EntryResponse,
    Status,
    UpdateEntryRequest,
)
from gamelib.collection.service import create_entry, delete_entry, list_entries, update_entry
from gamelib.database import get_session
from gamelib.db.models import Activity, CollectionEntry, Profile
from gamelib.dependencies import get_redis_dep

router = APIRouter(prefix="/api/v1/collection", tags=["Collection"])


def _entry_response(entry: CollectionEntry) -> EntryResponse:
    return EntryResponse(
        id=str(entry.id),
        game_id=entry.game_id,
        status=entry.status,
        rating=entry.rating,
        notes=entry.notes,
        source=entry.source,
        playtime_minutes=entry.playtime_minutes,
        added_at=entry.added_at,
        updated_at=entry.updated_at,
    )


def _mutation_response(entry: CollectionEntry, activity: Activity | None) -> EntryMutationResponse:
    return EntryMutationResponse(
        entry=_entry_response(entry),
        activity=activity_response(activity) if activity is not None else None,
    )


@router.get("", response_model=CollectionResponse)
async def list_collection(
    status: Status | None = Query(None),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CollectionResponse:
    """List own collection, optionally filtered by status."""
    entries = await list_entries(db, user.id, status)
    return CollectionResponse(entries=[_entry_response(e) for e in entries], total=len(entries))


@router.post("", response_model=EntryMutationResponse, status_code=201)
async def add_to_collection(
    body: CreateEntryRequest,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
) -> EntryMutationResponse:
    """Add a game. 409 if already tracked, 404 if the game is not in the catalog."""
    try:
        entry, activity = await create_entry(
            db,
            user.id,
            body.game_id,
            body.status,
            source=body.source,
            rating=body.rating,
            playtime_minutes=body.playtime_minutes,
            notes=body.notes,
        )
        await db.commit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    await publish_activity(redis, activity)
    return _mutation_response(entry, activity)


@router.patch("/{entry_id}", response_model=EntryMutationResponse)
async def update_collection_entry(
    entry_id: uuid.UUID,
    body: UpdateEntryRequest,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
) -> EntryMutationResponse:
    """Update status, rating, notes or playtime of an own entry."""
    changes = body.model_dump(exclude_unset=True)
    try:
        entry, activity = await update_entry(db, user.id, str(entry_id), changes)
        await db.commit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    await publish_activity(redis, activity)
    return _mutation_response(entry, activity)


@router.delete("/{entry_id}", status_code=204)
async def remove_from_collection(
    entry_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Remove an own entry. Never produces a feed activity."""
    await delete_entry(db, user.id, str(entry_id))
    await db.commit()
    return Response(status_code=204)
