"""FastAPI authentication dependencies."""

from __future__ import annotations

import uuid
from typing import Any

import jwt
import structlog
from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.auth.jwt import verify_token
from gamelib.config import get_settings
from gamelib.database import get_session
from gamelib.db.models import Profile
from gamelib.users.service import get_or_create_profile

_bearer = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> Profile:
    """
    Verify the bearer JWT and return the caller's profile.

    First sight of a user creates the profile with a zeroed stats row.
    Raises 401 on an invalid token.
    """
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
        user_id = str(uuid.UUID(payload["sub"]))
    except (jwt.InvalidTokenError, ValueError) as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    structlog.contextvars.bind_contextvars(user_id=user_id)
    profile, created = await get_or_create_profile(db, user_id, payload.get("email"))
    if created:
        await db.commit()
    return profile


async def require_catalog_writer(
    credentials: HTTPAuthorizationCredentials = Security(_bearer),
) -> dict[str, Any]:
    """
    Verify the bearer JWT carries the catalog sync role.

    Raises 401 on an invalid token and 403 for ordinary user tokens. No
    profile is created for service callers.
    """
    try:
        payload = verify_token(credentials.credentials, expected_type="access")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    if payload.get("role") != get_settings().catalog_writer_role:
        raise HTTPException(status_code=403, detail="Catalog writes require the catalog sync role")
    return payload
