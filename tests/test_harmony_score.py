"""
Tests for the Harmony Score Engine.

Tests cover:
- Each of the three score terms
- Bounds and rounding
- Trailing window reads from the event log
"""
import pytest
from datetime import date, timedelta

from harmony.models import Category
from harmony.services.harmony_score import (
    HarmonyScoreBreakdown,
    HarmonyScoreEngine,
    distribution_points,
    score_harmony,
)

TODAY = date(2026, 3, 15)

MIND, BODY, SOUL = Category.MIND, Category.BODY, Category.SOUL


def counts(mind=0, body=0, soul=0):
    return {MIND: mind, BODY: body, SOUL: soul}


def streaks(mind=0, body=0, soul=0):
    return {MIND: mind, BODY: body, SOUL: soul}


class TestScoreHarmony:
    """Tests for the pure scoring function."""

    def test_empty_window_scores_zero(self):
        assert score_harmony(counts(), streaks()) == HarmonyScoreBreakdown()

    def test_perfect_balance_with_healthy_streaks(self):
        """Equal counts and every current streak >= 3 gives 100."""
        result = score_harmony(counts(3, 3, 3), streaks(3, 4, 5))
        assert result.all_active_points == 30
        assert result.healthy_streak_points == 20
        assert result.score == 100

    def test_balance_without_streaks(self):
        """No healthy-streak bonus when any category streak is short."""
        result = score_harmony(counts(2, 2, 2), streaks(5, 5, 2))
        assert result.healthy_streak_points == 0
        assert result.score == 80

    def test_single_category_gets_no_bonus(self):
        """All activity in one category: no all-active bonus and no distribution points."""
        result = score_harmony(counts(mind=5), streaks(mind=5))
        assert result.all_active_points == 0
        assert result.distribution_points == 0
        assert result.score == 0

    def test_uneven_distribution(self):
        """50/25/25 split earns half the distribution points."""
        result = score_harmony(counts(2, 1, 1), streaks(1, 1, 1))
        assert result.distribution_points == pytest.approx(25.0, abs=0.01)
        assert result.score == 55

    def test_distribution_never_negative(self):
        assert distribution_points(counts(mind=1, body=1)) == 0

    def test_distribution_empty(self):
        assert distribution_points(counts()) == 0

    def test_rewards_balance_not_volume(self):
        """Doubling every count does not change the score."""
        small = score_harmony(counts(1, 2, 3), streaks())
        large = score_harmony(counts(10, 20, 30), streaks())
        assert small.score == large.score

    @pytest.mark.parametrize('values', [
        (1, 0, 0), (1, 1, 1), (7, 3, 1), (100, 1, 1), (4, 4, 5),
    ])
    def test_score_bounds(self, values):
        result = score_harmony(counts(*values), streaks(9, 9, 9))
        assert 0 <= result.score <= 100

    def test_breakdown_to_dict(self):
        data = score_harmony(counts(2, 1, 1), streaks()).to_dict()
        assert set(data) == {'all_active_points', 'healthy_streak_points', 'distribution_points', 'score'}


class TestHarmonyScoreEngine:
    """Tests for HarmonyScoreEngine against the event log."""

    def test_new_user_scores_zero(self, app):
        with app.app_context():
            assert HarmonyScoreEngine().calculate('user-1', TODAY) == 0

    def test_balanced_week(self, app, log_completion):
        """One of each category for the last three days scores 100."""
        with app.app_context():
            for n in range(3):
                day = TODAY - timedelta(days=n)
                for category in ('Mind', 'Body', 'Soul'):
                    log_completion('user-1', category, day)

            assert HarmonyScoreEngine().calculate('user-1', TODAY) == 100

    def test_window_is_seven_days_including_today(self, app, log_completion):
        """Completions eight days back fall outside the window."""
        with app.app_context():
            log_completion('user-1', 'Mind', TODAY - timedelta(days=6))
            log_completion('user-1', 'Body', TODAY - timedelta(days=6))
            log_completion('user-1', 'Soul', TODAY - timedelta(days=7))

            breakdown = HarmonyScoreEngine().calculate_breakdown('user-1', TODAY)
            assert breakdown.all_active_points == 0

            log_completion('user-1', 'Soul', TODAY - timedelta(days=6))
            breakdown = HarmonyScoreEngine().calculate_breakdown('user-1', TODAY)
            assert breakdown.all_active_points == 30

    def test_configured_healthy_streak(self, app, log_completion):
        """HEALTHY_STREAK_DAYS=1 gives the bonus for a single balanced day."""
        with app.app_context():
            for category in ('Mind', 'Body', 'Soul'):
                log_completion('user-1', category, TODAY)

            assert HarmonyScoreEngine().calculate('user-1', TODAY) == 80
            assert HarmonyScoreEngine(healthy_streak_days=1).calculate('user-1', TODAY) == 100

    def test_mind_only_five_days(self, app, log_completion):
        with app.app_context():
            for n in range(5):
                log_completion('user-1', 'Mind', TODAY - timedelta(days=n))

            breakdown = HarmonyScoreEngine().calculate_breakdown('user-1', TODAY)
            assert breakdown.all_active_points == 0
            assert breakdown.score == 0
