"""
Streak Calculator

Current and longest consecutive-day streaks per category, for the
synthetic "harmony" category (all three categories done the same day),
and for plain activity (any category).

A streak counts days, not completions. Today must be present for the
current streak to be non-zero: there is no credit for a day still in progress.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, Optional, Union

from flask import current_app

from ..models.enums import Category
from ..utils.dates import resolve_today, window_start
from .event_log import EventLogReader, event_log_reader

# Synthetic category: all three categories complete on the same day
HARMONY = 'harmony'

DEFAULT_LOOKBACK_DAYS = 365


@dataclass(frozen=True)
class StreakResult:
    current_streak: int = 0
    longest_streak: int = 0

    def to_dict(self):
        return {
            'current_streak': self.current_streak,
            'longest_streak': self.longest_streak,
        }


def current_streak(dates: Iterable[date], today: date) -> int:
    """Consecutive days ending at today. 0 when today is missing."""
    present = set(dates)
    streak = 0
    check = today
    while check in present:
        streak += 1
        check -= timedelta(days=1)
    return streak


def longest_streak(dates: Iterable[date]) -> int:
    """Longest run of consecutive dates anywhere in the history."""
    longest = 0
    run = 0
    previous = None
    for day in sorted(set(dates)):
        if previous is not None and (day - previous).days == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day
    return longest


def calculate_streak(dates: Iterable[date], today: date) -> StreakResult:
    """
    Both streak figures for a set of dates.

    The ongoing streak counts as a provisional longest, so
    current_streak <= longest_streak always holds.
    """
    present = set(dates)
    if not present:
        return StreakResult(0, 0)
    current = current_streak(present, today)
    return StreakResult(
        current_streak=current,
        longest_streak=max(longest_streak(present), current),
    )


class StreakCalculator:
    """Reads dates from the event log and applies the streak rules."""

    def __init__(self, reader: EventLogReader = None, lookback_days: int = None):
        self.reader = reader or event_log_reader
        if lookback_days is None:
            lookback_days = current_app.config.get('STREAK_LOOKBACK_DAYS', DEFAULT_LOOKBACK_DAYS)
        self.lookback_days = lookback_days

    def lookback_start(self, today: date) -> date:
        """First day inside the lookback window."""
        return window_start(today, self.lookback_days)

    def calculate(
        self,
        user_id: str,
        category: Union[Category, str],
        today: Optional[date] = None,
    ) -> StreakResult:
        """
        Streak for a category, or for HARMONY.

        Raises:
            InvalidInputError: If the category is neither a routine category nor 'harmony'
            TransientStorageError: If the event log cannot be read
        """
        today = resolve_today(today)
        if isinstance(category, str) and category.strip().lower() == HARMONY:
            return self.calculate_harmony_streak(user_id, today)
        return self.calculate_category_streak(user_id, Category.parse(category), today)

    def calculate_category_streak(self, user_id: str, category: Category, today: Optional[date] = None) -> StreakResult:
        today = resolve_today(today)
        dates = self.reader.get_completion_dates(user_id, category, since=self.lookback_start(today))
        return calculate_streak(dates, today)

    def calculate_harmony_streak(self, user_id: str, today: Optional[date] = None) -> StreakResult:
        today = resolve_today(today)
        flags = self.reader.get_daily_flags(user_id, since=self.lookback_start(today))
        harmony_dates = {day for day, done in flags.items() if all(done.values())}
        return calculate_streak(harmony_dates, today)

    def calculate_activity_streak(self, user_id: str, today: Optional[date] = None) -> StreakResult:
        today = resolve_today(today)
        dates = self.reader.get_activity_dates(user_id, since=self.lookback_start(today))
        return calculate_streak(dates, today)

    def calculate_all(self, user_id: str, today: Optional[date] = None) -> Dict[str, StreakResult]:
        """Streaks for Mind, Body, Soul and harmony, keyed by category value and HARMONY."""
        today = resolve_today(today)
        results = {
            category.value: self.calculate_category_streak(user_id, category, today)
            for category in Category
        }
        results[HARMONY] = self.calculate_harmony_streak(user_id, today)
        return results
