"""Shared test fixtures.

Tests run against an in-memory SQLite database (aiosqlite) created from the
ORM metadata. Redis is left uninitialized, so publishing and rate limiting
are no-ops unless a test installs a fake client.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from gamelib.auth.jwt import create_access_token
from gamelib.badges.service import seed_badge_tiers
from gamelib.catalog.service import upsert_game
from gamelib.config import get_settings
from gamelib.database import close_db, get_engine, get_session_factory, init_db
from gamelib.db.base import Base
from gamelib.main import create_app
from gamelib.users.service import get_or_create_profile

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# id -> (name, genres)
CATALOG: dict[int, tuple[str, list[str]]] = {
    1: ("Hollow Knight", ["Metroidvania", "Platformer"]),
    2: ("Celeste", ["Platformer"]),
    3: ("Hades", ["Roguelike", "Action"]),
    4: ("Disco Elysium", ["RPG"]),
    5: ("Outer Wilds", ["Adventure", "Puzzle"]),
}


async def _seed_catalog(db: AsyncSession) -> None:
    for game_id, (name, genres) in CATALOG.items():
        await upsert_game(
            db,
            game_id,
            name,
            cover_url=f"https://img.example.com/{game_id}.jpg",
            genres=genres,
            platforms=["pc"],
        )
    await db.commit()


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh schema with badge tiers and a small catalog."""
    await init_db(TEST_DATABASE_URL)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with get_session_factory()() as session:
        await seed_badge_tiers(session)
        await _seed_catalog(session)

    yield

    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """A direct database session for service-level tests."""
    async with get_session_factory()() as session:
        yield session


@pytest_asyncio.fixture
async def user_id(db_session: AsyncSession) -> str:
    """A profile with zeroed stats, committed."""
    uid = str(uuid.uuid4())
    await get_or_create_profile(db_session, uid, "player@example.com")
    await db_session.commit()
    return uid


@pytest_asyncio.fixture
async def other_user_id(db_session: AsyncSession) -> str:
    uid = str(uuid.uuid4())
    await get_or_create_profile(db_session, uid, "friend@example.com")
    await db_session.commit()
    return uid


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app, sharing the test database."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@dataclass(frozen=True)
class ApiUser:
    id: str
    headers: dict[str, str]


def _api_user(email: str) -> ApiUser:
    uid = str(uuid.uuid4())
    token = create_access_token(uid, email)
    return ApiUser(id=uid, headers={"Authorization": f"Bearer {token}"})


@pytest.fixture
def alice() -> ApiUser:
    """A caller whose profile is created on first authenticated request."""
    return _api_user("alice@example.com")


@pytest.fixture
def bob() -> ApiUser:
    return _api_user("bob@example.com")


@pytest.fixture
def catalog_writer_headers() -> dict[str, str]:
    """Bearer headers for the library sync job that maintains the catalog."""
    token = create_access_token(str(uuid.uuid4()), role=get_settings().catalog_writer_role)
    return {"Authorization": f"Bearer {token}"}
