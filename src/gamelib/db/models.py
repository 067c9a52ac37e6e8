"""ORM models for the GameLib schema.

Types are kept portable (``Uuid``, ``JSON`` with a JSONB variant) so the same
models run on PostgreSQL in production and on SQLite in tests.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from gamelib.db.base import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class Profile(Base):
    """One row per authenticated user. The id is the identity provider subject."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint(
            "username IS NULL OR length(username) BETWEEN 3 AND 20",
            name="username_length",
        ),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    username: Mapped[str | None] = mapped_column(String(20), nullable=True, unique=True)
    username_normalized: Mapped[str | None] = mapped_column(String(20), nullable=True, unique=True)
    bio: Mapped[str | None] = mapped_column(String(280), nullable=True)
    avatar: Mapped[str] = mapped_column(String(64), nullable=False, default="avatar_1")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Game catalog
# ---------------------------------------------------------------------------


class Game(Base):
    """Shared game catalog. One row per catalog game across all users."""

    __tablename__ = "games"
    __table_args__ = (Index("idx_games_name", "name"),)

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str | None] = mapped_column(String(256), nullable=True)
    cover_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    genres: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    platforms: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    release_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    steam_app_id: Mapped[int | None] = mapped_column(Integer, nullable=True, unique=True)
    first_added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    last_updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Collection entries
# ---------------------------------------------------------------------------


class CollectionEntry(Base):
    """A user's record of tracking one game. Unique per (user_id, game_id)."""

    __tablename__ = "user_games"
    __table_args__ = (
        UniqueConstraint("user_id", "game_id", name="uq_user_games_user_game"),
        CheckConstraint(
            "status IN ('wishlist', 'playing', 'completed', 'dropped')",
            name="user_games_status_check",
        ),
        CheckConstraint("rating IS NULL OR rating BETWEEN 1 AND 10", name="user_games_rating_check"),
        CheckConstraint("playtime_minutes >= 0", name="user_games_playtime_check"),
        Index("idx_user_games_user_status", "user_id", "status"),
        Index("idx_user_games_user_added", "user_id", "added_at"),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    game_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[str] = mapped_column(String(32), nullable=False, default="manual")
    playtime_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


# ---------------------------------------------------------------------------
# Derived stats
# ---------------------------------------------------------------------------


class UserStats(Base):
    """Denormalized per-user statistics. Written only by the stats aggregator."""

    __tablename__ = "user_stats"
    __table_args__ = (Index("idx_user_stats_badge_tier", "current_badge_tier"),)

    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True
    )
    total_games: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_games: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wishlist_games: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    playing_games: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dropped_games: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_rating: Mapped[Decimal | None] = mapped_column(Numeric(3, 1), nullable=True)
    total_ratings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    favorite_genre: Mapped[str | None] = mapped_column(Text, nullable=True)
    current_badge_tier: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class BadgeTier(Base):
    """Static badge tier definitions, seeded once."""

    __tablename__ = "badges"
    __table_args__ = (CheckConstraint("tier BETWEEN 0 AND 5", name="badges_tier_check"),)

    tier: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    required_games: Mapped[int] = mapped_column(Integer, nullable=False)
    icon_name: Mapped[str] = mapped_column(String(32), nullable=False)


# ---------------------------------------------------------------------------
# Social
# ---------------------------------------------------------------------------


class Activity(Base):
    """Append-only feed event derived from a collection mutation."""

    __tablename__ = "activities"
    __table_args__ = (
        CheckConstraint(
            "activity_type IN ('game_added', 'status_changed', 'rating_added', 'completed')",
            name="activities_type_check",
        ),
        Index("idx_activities_user_created", "user_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    activity_type: Mapped[str] = mapped_column(String(32), nullable=False)
    game_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    game_name: Mapped[str] = mapped_column(Text, nullable=False)
    game_cover_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    old_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    activity_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSONType, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Friendship(Base):
    """Directed friendship row. Accepted friendships exist in both directions."""

    __tablename__ = "friendships"
    __table_args__ = (
        UniqueConstraint("user_id", "friend_id", name="uq_friendships_pair"),
        CheckConstraint("user_id != friend_id", name="friendships_no_self"),
        CheckConstraint("status IN ('pending', 'accepted', 'rejected')", name="friendships_status_check"),
        Index("idx_friendships_user_status", "user_id", "status"),
        Index("idx_friendships_friend_status", "friend_id", "status"),
    )

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    friend_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    requested_by: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
