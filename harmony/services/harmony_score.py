"""
Harmony Score Engine

Balance score (0-100) across Mind/Body/Soul over the trailing window
(today plus the six days before it by default).

Formula:
- +30 points: all three categories have at least one completion in the window
- +20 points: the smallest category current streak is healthy (>= 3 days)
- +50 points scaled by distribution: 50 * (1 - deviation / 66.66), where deviation
  is the summed distance of each category's share from the ideal 33.33%.
  Rewards balance, not volume.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

from flask import current_app

from ..models.enums import Category
from ..utils.dates import resolve_today, window_start
from .event_log import EventLogReader, event_log_reader
from .streak_calculator import StreakCalculator, StreakResult

ALL_ACTIVE_POINTS = 30
HEALTHY_STREAK_POINTS = 20
DISTRIBUTION_POINTS = 50

IDEAL_SHARE = 33.33
MAX_DEVIATION = 66.66  # 100% in one category, 0% in the other two

DEFAULT_WINDOW_DAYS = 7
DEFAULT_HEALTHY_STREAK_DAYS = 3


@dataclass(frozen=True)
class HarmonyScoreBreakdown:
    all_active_points: int = 0
    healthy_streak_points: int = 0
    distribution_points: float = 0.0
    score: int = 0

    def to_dict(self):
        return {
            'all_active_points': self.all_active_points,
            'healthy_streak_points': self.healthy_streak_points,
            'distribution_points': round(self.distribution_points, 2),
            'score': self.score,
        }


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def distribution_points(counts: Dict[Category, int]) -> float:
    """Balance term in [0, 50]; 0 when there are no completions."""
    total = sum(counts.get(category, 0) for category in Category)
    if total == 0:
        return 0.0
    deviation = sum(
        abs((counts.get(category, 0) / total) * 100 - IDEAL_SHARE)
        for category in Category
    )
    return max(0.0, DISTRIBUTION_POINTS * (1 - deviation / MAX_DEVIATION))


def score_harmony(
    counts: Dict[Category, int],
    current_streaks: Dict[Category, int],
    healthy_streak_days: int = DEFAULT_HEALTHY_STREAK_DAYS,
) -> HarmonyScoreBreakdown:
    """
    Combine the three signals into a score.

    Args:
        counts: Completions per category inside the window
        current_streaks: Current streak per category
        healthy_streak_days: Minimum streak for the healthy-streak bonus
    """
    if sum(counts.get(category, 0) for category in Category) == 0:
        return HarmonyScoreBreakdown()

    all_active = ALL_ACTIVE_POINTS if all(counts.get(c, 0) > 0 for c in Category) else 0

    smallest_streak = min(current_streaks.get(c, 0) for c in Category)
    healthy = HEALTHY_STREAK_POINTS if smallest_streak >= healthy_streak_days else 0

    spread = distribution_points(counts)

    score = _round_half_up(all_active + healthy + spread)
    return HarmonyScoreBreakdown(
        all_active_points=all_active,
        healthy_streak_points=healthy,
        distribution_points=spread,
        score=min(100, max(0, score)),
    )


class HarmonyScoreEngine:
    """Loads window counts and streaks for a user and scores them."""

    def __init__(
        self,
        reader: EventLogReader = None,
        streak_calculator: StreakCalculator = None,
        window_days: int = None,
        healthy_streak_days: int = None,
    ):
        self.reader = reader or event_log_reader
        self.streak_calculator = streak_calculator or StreakCalculator(self.reader)
        config = current_app.config
        self.window_days = window_days or config.get('HARMONY_WINDOW_DAYS', DEFAULT_WINDOW_DAYS)
        self.healthy_streak_days = healthy_streak_days or config.get(
            'HEALTHY_STREAK_DAYS', DEFAULT_HEALTHY_STREAK_DAYS
        )

    def calculate_breakdown(
        self,
        user_id: str,
        today: Optional[date] = None,
        category_streaks: Optional[Dict[Category, StreakResult]] = None,
    ) -> HarmonyScoreBreakdown:
        """
        Score a user's trailing window.

        Args:
            user_id: User to score
            today: Last day of the window (UTC); defaults to today
            category_streaks: Already computed streaks, to avoid re-reading the log
        """
        today = resolve_today(today)
        counts = self.reader.get_category_counts(user_id, since=window_start(today, self.window_days))

        if sum(counts.values()) == 0:
            return HarmonyScoreBreakdown()

        if category_streaks is None:
            category_streaks = {
                category: self.streak_calculator.calculate_category_streak(user_id, category, today)
                for category in Category
            }
        current = {category: category_streaks[category].current_streak for category in Category}

        return score_harmony(counts, current, self.healthy_streak_days)

    def calculate(self, user_id: str, today: Optional[date] = None, category_streaks=None) -> int:
        return self.calculate_breakdown(user_id, today, category_streaks).score
