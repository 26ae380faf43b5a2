"""
Progress Orchestrator

Single entry point that recomputes a user's derived progress from the
event log and persists it. Replaces the old trigger chain: every step is
an explicit synchronous call.

Run steps:
1. Read the event log once for the lookback window
2. Per-category and harmony streaks, unique routines, last activity, harmony score
3. Sync daily progress records and overwrite UserStats in one transaction
4. Milestone Rule Engine against the fresh stats

Everything is computed before anything is written, so a failed computation
leaves the previous snapshot untouched.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models.enums import Category
from ..models.progress import DailyProgressRecord, UserStats
from ..utils.dates import resolve_today, utcnow
from ..utils.exceptions import TransientStorageError
from ..utils.storage import translate_storage_errors
from .event_log import EventLogReader, event_log_reader, validate_user_id
from .harmony_score import HarmonyScoreBreakdown, HarmonyScoreEngine
from .milestone_engine import MilestoneCheckResult, MilestoneEngine
from .streak_calculator import StreakCalculator, StreakResult, calculate_streak

logger = logging.getLogger(__name__)


@dataclass
class ProgressRunResult:
    stats: UserStats
    milestones: MilestoneCheckResult
    harmony: HarmonyScoreBreakdown
    stats_changed: bool = False

    def to_dict(self):
        return {
            'stats': self.stats.to_dict(),
            'harmony': self.harmony.to_dict(),
            'milestones': self.milestones.to_dict(),
            'stats_changed': self.stats_changed,
        }


class ProgressOrchestrator:
    """Recomputes and persists derived progress for one user per call."""

    def __init__(
        self,
        reader: EventLogReader = None,
        streak_calculator: StreakCalculator = None,
        harmony_engine: HarmonyScoreEngine = None,
        milestone_engine: MilestoneEngine = None,
    ):
        self.reader = reader or event_log_reader
        self.streak_calculator = streak_calculator or StreakCalculator(self.reader)
        self.harmony_engine = harmony_engine or HarmonyScoreEngine(self.reader, self.streak_calculator)
        self.milestone_engine = milestone_engine or MilestoneEngine(
            self.reader, self.streak_calculator, harmony_engine=self.harmony_engine
        )

    def run(self, user_id: str, today: Optional[date] = None) -> ProgressRunResult:
        """
        Full recompute for a user.

        Idempotent: with no new events, a second run leaves UserStats
        byte-identical (updated_at included) and awards nothing.

        Raises:
            InvalidInputError: If user_id is malformed
            TransientStorageError: If storage fails; prior UserStats stay intact
        """
        user_id = validate_user_id(user_id)
        today = resolve_today(today)
        since = self.streak_calculator.lookback_start(today)

        flags = self.reader.get_daily_flags(user_id, since=since)
        values, streaks, harmony = self._compute(user_id, flags, today)

        stats, changed = self._persist(user_id, flags, values, since)

        milestones = self.milestone_engine.check_and_award(user_id, stats=stats, today=today)

        logger.info(
            '[Harmony] Progress run for user %s: streak=%d score=%d awarded=%d%s',
            user_id, stats.current_streak, stats.harmony_score, len(milestones.awarded),
            '' if changed else ' (unchanged)',
        )
        return ProgressRunResult(
            stats=stats,
            milestones=milestones,
            harmony=harmony,
            stats_changed=changed,
        )

    def _compute(self, user_id: str, flags, today: date):
        """Every UserStats value, from one read of the daily flags plus aggregates."""
        streaks: Dict[Category, StreakResult] = {}
        for category in Category:
            dates = {day for day, done in flags.items() if done[category]}
            streaks[category] = calculate_streak(dates, today)
        harmony_streak = calculate_streak(
            {day for day, done in flags.items() if all(done.values())}, today
        )

        harmony = self.harmony_engine.calculate_breakdown(user_id, today, category_streaks=streaks)

        values = {
            'current_streak': harmony_streak.current_streak,
            'longest_streak': harmony_streak.longest_streak,
            'harmony_score': harmony.score,
            'total_completions': self.reader.count_completions(user_id),
        }
        for category in Category:
            prefix = category.field_prefix
            values[f'{prefix}_current_streak'] = streaks[category].current_streak
            values[f'{prefix}_longest_streak'] = streaks[category].longest_streak
            values[f'unique_{prefix}_routines'] = self.reader.count_unique_routines(user_id, category)
            values[f'last_{prefix}_activity'] = self.reader.get_last_activity_date(user_id, category)

        return values, streaks, harmony

    @translate_storage_errors('persist user stats')
    def _persist(self, user_id: str, flags, values: dict, since: date):
        """
        Daily records and the stats overwrite, committed together.

        An overlapping run may insert the user's first rows between our read
        and our commit. The loser rolls back and reapplies its values as updates.
        """
        try:
            return self._write(user_id, flags, values, since)
        except IntegrityError:
            db.session.rollback()
            logger.info('[Harmony] Stats rows for user %s inserted by a concurrent run, retrying as updates', user_id)
            return self._write(user_id, flags, values, since)

    def _write(self, user_id: str, flags, values: dict, since: date):
        self._sync_daily_records(user_id, flags, since)

        stats = self._find_stats(user_id)
        changed = stats is None or stats.stat_values() != values
        if stats is None:
            stats = UserStats(user_id=user_id)
            db.session.add(stats)
        if changed:
            for name, value in values.items():
                setattr(stats, name, value)
            stats.updated_at = utcnow()

        db.session.commit()
        return stats, changed

    def _sync_daily_records(self, user_id: str, flags, since: date) -> None:
        existing = self.reader.get_daily_records(user_id, since)

        for day in sorted(set(flags) | set(existing)):
            done = flags.get(day, {category: False for category in Category})
            record = existing.get(day)
            if record is None:
                record = DailyProgressRecord(user_id=user_id, date=day)
                db.session.add(record)
            for category in Category:
                column = f'{category.field_prefix}_complete'
                if getattr(record, column) != done[category]:
                    setattr(record, column, done[category])

    def get_stats(self, user_id: str, today: Optional[date] = None) -> UserStats:
        """
        Stats read with a lazy recompute first.

        If the recompute hits a storage failure, the last persisted snapshot
        is returned instead; with no snapshot the failure propagates.
        """
        user_id = validate_user_id(user_id)
        try:
            return self.run(user_id, today).stats
        except TransientStorageError as e:
            logger.warning('[Harmony] Recompute failed for user %s, serving stored stats: %s', user_id, e.message)
            stats = self._stored_stats(user_id)
            if stats is None:
                raise
            return stats

    @translate_storage_errors('read user stats')
    def _stored_stats(self, user_id: str) -> Optional[UserStats]:
        return self._find_stats(user_id)

    def _find_stats(self, user_id: str) -> Optional[UserStats]:
        return UserStats.query.filter_by(user_id=user_id).first()

    def on_completion_logged(self, user_id: str, category=None, today: Optional[date] = None) -> ProgressRunResult:
        """Hook for the completion-logging collaborator, called after each write."""
        if category is not None:
            logger.debug('[Harmony] Completion logged for user %s in %s', user_id, Category.parse(category).value)
        return self.run(user_id, today)
