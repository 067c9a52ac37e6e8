"""
JWT verification for tokens issued by the identity provider.

The ``sub`` claim carries the user's UUID; ``email`` is optional. Token issuing
lives with the identity provider; ``create_access_token`` exists for tooling
and tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from gamelib.config import get_settings


def create_access_token(
    user_id: str,
    email: str | None = None,
    expires_minutes: int = 60,
    role: str | None = None,
) -> str:
    """
    Create a signed access token.

    Args:
        user_id: The user's UUID (becomes ``sub``).
        email: Optional email claim.
        expires_minutes: Lifetime of the token.
        role: Optional service role claim (e.g. the catalog sync role).

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
        "iss": settings.jwt_issuer,
        "type": "access",
    }
    if email is not None:
        payload["email"] = email
    if role is not None:
        payload["role"] = role
    if settings.jwt_audience:
        payload["aud"] = settings.jwt_audience
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str, expected_type: str = "access") -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or wrong type.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if payload.get("type", "access") != expected_type:
        msg = f"Expected token type '{expected_type}', got '{payload.get('type')}'"
        raise jwt.InvalidTokenError(msg)

    return payload
