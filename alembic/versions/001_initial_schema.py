"""Initial schema: profiles, game catalog, collections, derived stats and feed.

Creates profiles, games, user_games, user_stats, badges, activities and
friendships. Badge tier rows are seeded by the application at startup.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Profiles ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS profiles (
            id UUID PRIMARY KEY,
            email VARCHAR(320),
            username VARCHAR(20) UNIQUE,
            username_normalized VARCHAR(20) UNIQUE,
            bio VARCHAR(280),
            avatar VARCHAR(64) NOT NULL DEFAULT 'avatar_1',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT username_length CHECK (username IS NULL OR length(username) BETWEEN 3 AND 20)
        )
    """)

    # --- Game catalog ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS games (
            id BIGINT PRIMARY KEY,
            name TEXT NOT NULL,
            slug VARCHAR(256),
            cover_url TEXT,
            genres JSONB NOT NULL DEFAULT '[]',
            platforms JSONB NOT NULL DEFAULT '[]',
            summary TEXT,
            release_date DATE,
            steam_app_id INTEGER UNIQUE,
            first_added_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            last_updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_games_name ON games(name)")

    # --- Collection entries ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_games (
            id UUID PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            game_id BIGINT NOT NULL REFERENCES games(id) ON DELETE CASCADE,
            status VARCHAR(16) NOT NULL,
            rating INTEGER,
            notes TEXT,
            source VARCHAR(32) NOT NULL DEFAULT 'manual',
            playtime_minutes INTEGER NOT NULL DEFAULT 0,
            added_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_user_games_user_game UNIQUE (user_id, game_id),
            CONSTRAINT user_games_status_check
                CHECK (status IN ('wishlist', 'playing', 'completed', 'dropped')),
            CONSTRAINT user_games_rating_check CHECK (rating IS NULL OR rating BETWEEN 1 AND 10),
            CONSTRAINT user_games_playtime_check CHECK (playtime_minutes >= 0)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_user_games_user_status ON user_games(user_id, status)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_user_games_user_added ON user_games(user_id, added_at)")

    # --- Derived stats ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_stats (
            user_id UUID PRIMARY KEY REFERENCES profiles(id) ON DELETE CASCADE,
            total_games INTEGER NOT NULL DEFAULT 0,
            completed_games INTEGER NOT NULL DEFAULT 0,
            wishlist_games INTEGER NOT NULL DEFAULT 0,
            playing_games INTEGER NOT NULL DEFAULT 0,
            dropped_games INTEGER NOT NULL DEFAULT 0,
            average_rating NUMERIC(3, 1),
            total_ratings INTEGER NOT NULL DEFAULT 0,
            favorite_genre TEXT,
            current_badge_tier INTEGER NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_user_stats_badge_tier ON user_stats(current_badge_tier)")

    # --- Badge tiers ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badges (
            tier INTEGER PRIMARY KEY,
            name VARCHAR(64) NOT NULL,
            description TEXT NOT NULL,
            required_games INTEGER NOT NULL,
            icon_name VARCHAR(32) NOT NULL,
            CONSTRAINT badges_tier_check CHECK (tier BETWEEN 0 AND 5)
        )
    """)

    # --- Activity feed ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS activities (
            id UUID PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            activity_type VARCHAR(32) NOT NULL,
            game_id BIGINT NOT NULL REFERENCES games(id) ON DELETE CASCADE,
            game_name TEXT NOT NULL,
            game_cover_url TEXT,
            old_value TEXT,
            new_value TEXT,
            metadata JSONB NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT activities_type_check
                CHECK (activity_type IN ('game_added', 'status_changed', 'rating_added', 'completed'))
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_activities_user_created ON activities(user_id, created_at DESC)")

    # --- Friendships ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS friendships (
            id UUID PRIMARY KEY,
            user_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            friend_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            status VARCHAR(16) NOT NULL DEFAULT 'pending',
            requested_by UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_friendships_pair UNIQUE (user_id, friend_id),
            CONSTRAINT friendships_no_self CHECK (user_id != friend_id),
            CONSTRAINT friendships_status_check CHECK (status IN ('pending', 'accepted', 'rejected'))
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_friendships_user_status ON friendships(user_id, status)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_friendships_friend_status ON friendships(friend_id, status)")


def downgrade() -> None:
    for table in ["friendships", "activities", "badges", "user_stats", "user_games", "games", "profiles"]:
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")
