"""
Tests for the Streak Calculator.

Tests cover:
- Pure current/longest streak rules
- Per-category, harmony and activity streaks read from the event log
- Lookback window and input validation
"""
import pytest
from datetime import date, timedelta

from harmony.models import Category
from harmony.services.streak_calculator import (
    HARMONY,
    StreakCalculator,
    StreakResult,
    calculate_streak,
    current_streak,
    longest_streak,
)
from harmony.utils.exceptions import InvalidInputError

TODAY = date(2026, 3, 15)


def days_back(*offsets):
    return {TODAY - timedelta(days=n) for n in offsets}


class TestStreakRules:
    """Tests for the pure streak functions."""

    def test_empty_history(self):
        """No dates means both streaks are zero."""
        assert calculate_streak(set(), TODAY) == StreakResult(0, 0)

    def test_today_required_for_current_streak(self):
        """Yesterday-only activity gives no current streak."""
        result = calculate_streak(days_back(1, 2, 3), TODAY)
        assert result.current_streak == 0
        assert result.longest_streak == 3

    def test_every_day_through_today(self):
        """Completion every day in the range counts every day."""
        result = calculate_streak(days_back(*range(10)), TODAY)
        assert result == StreakResult(10, 10)

    def test_gap_breaks_current_streak(self):
        """Missing yesterday limits the current streak to today."""
        result = calculate_streak(days_back(0, 2, 3, 4, 5), TODAY)
        assert result.current_streak == 1
        assert result.longest_streak == 4

    def test_longest_streak_anywhere_in_history(self):
        dates = days_back(0, 1) | days_back(20, 21, 22, 23, 24)
        assert longest_streak(dates) == 5
        assert current_streak(dates, TODAY) == 2

    def test_duplicate_dates_count_once(self):
        """Streaks count days, not completions."""
        assert longest_streak([TODAY, TODAY, TODAY]) == 1

    def test_month_boundary(self):
        dates = {date(2026, 2, 27), date(2026, 2, 28), date(2026, 3, 1)}
        assert calculate_streak(dates, date(2026, 3, 1)) == StreakResult(3, 3)

    @pytest.mark.parametrize('offsets', [
        (0,),
        (0, 1, 2),
        (1, 2, 3),
        (0, 2, 4, 6),
        (0, 1, 5, 6, 7, 8),
        (3, 4, 5, 30, 31),
    ])
    def test_current_never_exceeds_longest(self, offsets):
        result = calculate_streak(days_back(*offsets), TODAY)
        assert result.current_streak <= result.longest_streak

    def test_to_dict(self):
        assert StreakResult(2, 5).to_dict() == {'current_streak': 2, 'longest_streak': 5}


class TestStreakCalculator:
    """Tests for StreakCalculator against the event log."""

    def test_category_streak(self, app, log_completion):
        """Mind on three consecutive days ending today."""
        with app.app_context():
            for n in range(3):
                log_completion('user-1', 'Mind', TODAY - timedelta(days=n))

            calculator = StreakCalculator()
            mind = calculator.calculate_category_streak('user-1', Category.MIND, TODAY)
            body = calculator.calculate_category_streak('user-1', Category.BODY, TODAY)

            assert mind == StreakResult(3, 3)
            assert body == StreakResult(0, 0)

    def test_harmony_streak_requires_all_three(self, app, log_completion):
        """A day counts toward harmony only when Mind, Body and Soul were all done."""
        with app.app_context():
            for n in range(3):
                day = TODAY - timedelta(days=n)
                log_completion('user-1', 'Mind', day)
                log_completion('user-1', 'Body', day)
            # Soul only today and yesterday
            log_completion('user-1', 'Soul', TODAY)
            log_completion('user-1', 'Soul', TODAY - timedelta(days=1))

            result = StreakCalculator().calculate('user-1', HARMONY, TODAY)
            assert result == StreakResult(2, 2)

    def test_activity_streak_any_category(self, app, log_completion):
        with app.app_context():
            log_completion('user-1', 'Mind', TODAY)
            log_completion('user-1', 'Body', TODAY - timedelta(days=1))
            log_completion('user-1', 'Soul', TODAY - timedelta(days=2))

            result = StreakCalculator().calculate_activity_streak('user-1', TODAY)
            assert result == StreakResult(3, 3)

    def test_calculate_all_keys(self, app, log_completion):
        with app.app_context():
            log_completion('user-1', 'Soul', TODAY)

            results = StreakCalculator().calculate_all('user-1', TODAY)

            assert set(results) == {'Mind', 'Body', 'Soul', HARMONY}
            assert results['Soul'].current_streak == 1
            assert results[HARMONY].current_streak == 0

    def test_other_users_ignored(self, app, log_completion):
        with app.app_context():
            log_completion('user-2', 'Mind', TODAY)

            result = StreakCalculator().calculate('user-1', 'mind', TODAY)
            assert result == StreakResult(0, 0)

    def test_completion_late_in_utc_day(self, app, log_completion):
        """23:00 UTC still belongs to that UTC day."""
        with app.app_context():
            log_completion('user-1', 'Body', TODAY - timedelta(days=1), hour=23)
            log_completion('user-1', 'Body', TODAY, hour=0)

            result = StreakCalculator().calculate('user-1', 'Body', TODAY)
            assert result.current_streak == 2

    def test_lookback_window_limits_history(self, app, log_completion):
        """Events older than the lookback window are not read."""
        with app.app_context():
            for n in range(10, 15):
                log_completion('user-1', 'Mind', TODAY - timedelta(days=n))

            calculator = StreakCalculator(lookback_days=7)
            assert calculator.calculate('user-1', 'Mind', TODAY).longest_streak == 0

            calculator = StreakCalculator(lookback_days=365)
            assert calculator.calculate('user-1', 'Mind', TODAY).longest_streak == 5

    def test_invalid_category(self, app):
        with app.app_context():
            with pytest.raises(InvalidInputError) as exc_info:
                StreakCalculator().calculate('user-1', 'Spirit', TODAY)
            assert exc_info.value.code == 'INVALID_CATEGORY'

    def test_invalid_user_id(self, app):
        with app.app_context():
            with pytest.raises(InvalidInputError):
                StreakCalculator().calculate('', 'Mind', TODAY)
