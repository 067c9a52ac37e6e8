"""Profile endpoints: /api/v1/users/me."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.auth.dependencies import get_current_user
from gamelib.database import get_session
from gamelib.db.models import Profile
from gamelib.users.schemas import ProfileResponse, ProfileUpdateRequest
from gamelib.users.service import delete_profile, update_profile

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


def _profile_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=str(profile.id),
        email=profile.email,
        username=profile.username,
        bio=profile.bio,
        avatar=profile.avatar,
        created_at=profile.created_at,
    )


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(user: Profile = Depends(get_current_user)) -> ProfileResponse:
    """Own profile."""
    return _profile_response(user)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    body: ProfileUpdateRequest,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    """Update username, bio or avatar."""
    try:
        profile = await update_profile(db, user, username=body.username, bio=body.bio, avatar=body.avatar)
        await db.commit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _profile_response(profile)


@router.delete("/me", status_code=204)
async def delete_my_profile(
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Delete own profile with its collection, stats, activities and friendships."""
    user_id = user.id
    await delete_profile(db, user_id)
    await db.commit()
    logger.info("account_deleted", user_id=user_id)
    return Response(status_code=204)
