"""Badge tier thresholds and tier computation.

Tiers are keyed by the number of completed games. Tier 0 has threshold 0, so
every user qualifies for at least tier 0.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

BADGE_TIERS: list[dict] = [
    {"tier": 0, "name": "Newcomer", "description": "Welcome to your game collection!", "required_games": 0, "icon_name": "star"},
    {"tier": 1, "name": "Game Lover", "description": "Completed your first 25 games", "required_games": 25, "icon_name": "trophy"},
    {"tier": 2, "name": "Collector", "description": "50 completed games is impressive!", "required_games": 50, "icon_name": "medal"},
    {"tier": 3, "name": "Expert Gamer", "description": "100 games! A true gamer", "required_games": 100, "icon_name": "crown"},
    {"tier": 4, "name": "Legend", "description": "250 completed games is legendary", "required_games": 250, "icon_name": "gem"},
    {"tier": 5, "name": "Immortal", "description": "500+ games. Unstoppable.", "required_games": 500, "icon_name": "fire"},
]


@dataclass(frozen=True)
class TierThreshold:
    tier: int
    required_games: int


DEFAULT_THRESHOLDS: tuple[TierThreshold, ...] = tuple(
    TierThreshold(tier=t["tier"], required_games=t["required_games"]) for t in BADGE_TIERS
)


@dataclass(frozen=True)
class BadgeProgress:
    current_tier: int
    next_tier: int | None
    games_to_next_tier: int
    progress: float


def tier_for(completed_count: int, tiers: Sequence[TierThreshold] = DEFAULT_THRESHOLDS) -> int:
    """Highest tier whose threshold is <= completed_count (0 if none qualify)."""
    qualifying = [t.tier for t in tiers if t.required_games <= completed_count]
    return max(qualifying, default=0)


def badge_progress(completed_count: int, tiers: Sequence[TierThreshold] = DEFAULT_THRESHOLDS) -> BadgeProgress:
    """Progress from the current tier threshold towards the next one.

    At the top tier ``next_tier`` is None and progress is 1.0.
    """
    current = tier_for(completed_count, tiers)
    by_tier = {t.tier: t.required_games for t in tiers}
    higher = sorted(t for t in by_tier if t > current)
    if not higher:
        return BadgeProgress(current_tier=current, next_tier=None, games_to_next_tier=0, progress=1.0)

    next_tier = higher[0]
    current_required = by_tier.get(current, 0)
    next_required = by_tier[next_tier]
    span = next_required - current_required
    fraction = (completed_count - current_required) / span if span > 0 else 1.0
    return BadgeProgress(
        current_tier=current,
        next_tier=next_tier,
        games_to_next_tier=max(0, next_required - completed_count),
        progress=min(1.0, max(0.0, fraction)),
    )
