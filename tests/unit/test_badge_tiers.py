"""Badge tier computation tests."""

import pytest

from gamelib.badges.tiers import BADGE_TIERS, DEFAULT_THRESHOLDS, TierThreshold, badge_progress, tier_for


class TestTierFor:
    def test_zero_completed_is_newcomer(self):
        assert tier_for(0) == 0

    def test_boundary_24_stays_tier_0(self):
        """24 completed games is one short of Game Lover."""
        assert tier_for(24) == 0

    @pytest.mark.parametrize(
        "completed,expected_tier",
        [
            (25, 1),
            (49, 1),
            (50, 2),
            (99, 2),
            (100, 3),
            (249, 3),
            (250, 4),
            (499, 4),
            (500, 5),
            (10_000, 5),
        ],
    )
    def test_thresholds(self, completed, expected_tier):
        assert tier_for(completed) == expected_tier

    def test_no_thresholds_defaults_to_0(self):
        assert tier_for(1000, []) == 0

    def test_custom_thresholds(self):
        tiers = [TierThreshold(0, 0), TierThreshold(1, 2), TierThreshold(2, 5)]
        assert tier_for(1, tiers) == 0
        assert tier_for(2, tiers) == 1
        assert tier_for(7, tiers) == 2

    def test_tier_is_monotone_in_completed_count(self):
        tiers = [tier_for(n) for n in range(0, 600)]
        assert tiers == sorted(tiers)


class TestBadgeTierDefinitions:
    def test_six_tiers_in_order(self):
        assert [t["tier"] for t in BADGE_TIERS] == [0, 1, 2, 3, 4, 5]

    def test_names_and_icons(self):
        assert [t["name"] for t in BADGE_TIERS] == [
            "Newcomer",
            "Game Lover",
            "Collector",
            "Expert Gamer",
            "Legend",
            "Immortal",
        ]
        assert [t["icon_name"] for t in BADGE_TIERS] == ["star", "trophy", "medal", "crown", "gem", "fire"]

    def test_thresholds_strictly_increase(self):
        required = [t.required_games for t in DEFAULT_THRESHOLDS]
        assert required == [0, 25, 50, 100, 250, 500]


class TestBadgeProgress:
    def test_progress_within_tier(self):
        progress = badge_progress(30)
        assert progress.current_tier == 1
        assert progress.next_tier == 2
        assert progress.games_to_next_tier == 20
        assert progress.progress == pytest.approx(0.2)

    def test_progress_at_zero(self):
        progress = badge_progress(0)
        assert progress.current_tier == 0
        assert progress.next_tier == 1
        assert progress.games_to_next_tier == 25
        assert progress.progress == 0.0

    def test_top_tier_has_no_next(self):
        progress = badge_progress(750)
        assert progress.current_tier == 5
        assert progress.next_tier is None
        assert progress.games_to_next_tier == 0
        assert progress.progress == 1.0
