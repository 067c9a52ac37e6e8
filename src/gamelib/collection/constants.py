"""Allowed values for collection entry fields."""

from __future__ import annotations

STATUSES: tuple[str, ...] = ("wishlist", "playing", "completed", "dropped")

SOURCES: tuple[str, ...] = (
    "manual",
    "steam",
    "steam_wishlist",
    "epic",
    "gog",
    "playstation",
    "riot",
    "lol",
    "valorant",
    "tft",
)

MUTABLE_FIELDS: frozenset[str] = frozenset({"status", "rating", "notes", "playtime_minutes"})

MIN_RATING = 1
MAX_RATING = 10
