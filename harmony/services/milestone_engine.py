"""
Milestone Rule Engine

Evaluates every catalog rule against a user's freshly computed stats,
records progress toward unachieved milestones and awards newly met ones
exactly once.

Per-(user, milestone) lifecycle:
- Not started / in progress: implied by MilestoneProgress.current_value vs threshold
- Achieved: a UserMilestone row exists (terminal; never deleted except by hard reset)

Exactly-once: the already-achieved lookup is the fast path. The unique
constraint on (user_id, milestone_id) is the backstop; losing an insert
race is reported as DuplicateAwardRace and counted as success. Progress
rows that a concurrent check inserted first are rewritten as updates.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional, Set, Tuple

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models.enums import Category, Rarity, ThresholdType
from ..models.milestones import MilestoneDefinition, MilestoneProgress, UserMilestone
from ..models.progress import UserStats
from ..utils.dates import resolve_today, utcnow
from ..utils.exceptions import (
    ConfigurationError,
    DuplicateAwardRace,
    InvalidInputError,
)
from ..utils.storage import translate_storage_errors
from .event_log import EventLogReader, event_log_reader, validate_user_id
from .harmony_score import HarmonyScoreEngine
from .streak_calculator import HARMONY, StreakCalculator

logger = logging.getLogger(__name__)

# perfect_balance: each category's share of unique routines must fall in this band
PERFECT_BALANCE_MIN_ROUTINES = 30
PERFECT_BALANCE_BAND = (30, 36)


@dataclass
class MetricSnapshot:
    """Everything the built-in rules measure, gathered once per check."""
    user_id: str
    today: date
    total_completions: int = 0
    unique_routines: Dict[Category, int] = field(default_factory=dict)
    harmony_streak: int = 0
    longest_harmony_streak: int = 0
    longest_activity_streak: int = 0
    harmony_score: int = 0
    first_activity: Optional[date] = None


@dataclass
class MilestoneCheckResult:
    awarded: List[UserMilestone] = field(default_factory=list)
    skipped: List[ConfigurationError] = field(default_factory=list)
    evaluated: int = 0
    races: int = 0

    def to_dict(self):
        return {
            'awarded': [m.milestone_id for m in self.awarded],
            'skipped': [{'milestone_id': e.milestone_id, 'reason': e.reason} for e in self.skipped],
            'evaluated': self.evaluated,
            'races': self.races,
        }


def _perfect_balance(snapshot: MetricSnapshot) -> int:
    if snapshot.total_completions < PERFECT_BALANCE_MIN_ROUTINES:
        return 0
    total_unique = sum(snapshot.unique_routines.get(c, 0) for c in Category)
    if total_unique == 0:
        return 0
    low, high = PERFECT_BALANCE_BAND
    for category in Category:
        share = snapshot.unique_routines.get(category, 0) / total_unique * 100
        if not low <= share <= high:
            return 0
    return PERFECT_BALANCE_MIN_ROUTINES


# Built-in metrics: name -> fn(snapshot). unique_routines takes a category parameter.
BUILTIN_METRICS: Dict[str, Callable[[MetricSnapshot], int]] = {
    'total_completions': lambda s: s.total_completions,
    'harmony_streak': lambda s: s.harmony_streak,
    'longest_harmony_streak': lambda s: s.longest_harmony_streak,
    'longest_activity_streak': lambda s: s.longest_activity_streak,
    'harmony_score': lambda s: s.harmony_score,
    'categories_started': lambda s: sum(1 for c in Category if s.unique_routines.get(c, 0) >= 1),
    'perfect_balance': _perfect_balance,
    'journey_started': lambda s: 1 if s.first_activity else 0,
    'journey_days': lambda s: (s.today - s.first_activity).days if s.first_activity else 0,
}

PARAMETERIZED_METRICS = {'unique_routines'}


def progress_text(threshold_type: str, current: int, threshold: int) -> str:
    """Human readable progress, e.g. '7/30 days'."""
    if threshold_type == ThresholdType.DAYS.value:
        return f'{current}/{threshold} days'
    if threshold_type == ThresholdType.PERCENTAGE.value:
        return f'{current}/{threshold}%'
    if threshold_type == ThresholdType.BOOLEAN.value:
        return 'Complete' if current >= threshold else 'Incomplete'
    return f'{current}/{threshold}'


def percentage_complete(current: int, threshold: int) -> int:
    if threshold <= 0:
        return 0
    return min(100, current * 100 // threshold)


class MilestoneEngine:
    """
    Milestone evaluation and celebration bookkeeping for one user at a time.

    Extra metrics owned by other collaborators (friends, circles, pain check-ins)
    can be plugged in with register_metric(); catalog rules that name an unknown
    metric are skipped and logged.
    """

    def __init__(
        self,
        reader: EventLogReader = None,
        streak_calculator: StreakCalculator = None,
        external_metrics: Optional[Dict[str, Callable[[str], int]]] = None,
        harmony_engine: HarmonyScoreEngine = None,
    ):
        self.reader = reader or event_log_reader
        self.streak_calculator = streak_calculator or StreakCalculator(self.reader)
        self.harmony_engine = harmony_engine or HarmonyScoreEngine(self.reader, self.streak_calculator)
        self.external_metrics = dict(external_metrics or {})

    def register_metric(self, name: str, fn: Callable[[str], int]) -> None:
        """Register a metric computed outside the engine, keyed by name, called with user_id."""
        if name in BUILTIN_METRICS or name in PARAMETERIZED_METRICS:
            raise InvalidInputError(f"Metric {name!r} is built in", field='metric')
        self.external_metrics[name] = fn

    # Evaluation
    def build_live_snapshot(self, user_id: str, today: Optional[date] = None) -> MetricSnapshot:
        """Snapshot read straight from the event log, for checks run without fresh stats."""
        today = resolve_today(today)
        streaks = self.streak_calculator.calculate_all(user_id, today)
        category_streaks = {category: streaks[category.value] for category in Category}
        activity = self.streak_calculator.calculate_activity_streak(user_id, today)
        return MetricSnapshot(
            user_id=user_id,
            today=today,
            total_completions=self.reader.count_completions(user_id),
            unique_routines={c: self.reader.count_unique_routines(user_id, c) for c in Category},
            harmony_streak=streaks[HARMONY].current_streak,
            longest_harmony_streak=streaks[HARMONY].longest_streak,
            longest_activity_streak=activity.longest_streak,
            harmony_score=self.harmony_engine.calculate(user_id, today, category_streaks=category_streaks),
            first_activity=self.reader.get_first_activity_date(user_id),
        )

    def build_snapshot(self, user_id: str, stats: UserStats, today: Optional[date] = None) -> MetricSnapshot:
        today = resolve_today(today)
        activity = self.streak_calculator.calculate_activity_streak(user_id, today)
        return MetricSnapshot(
            user_id=user_id,
            today=today,
            total_completions=stats.total_completions or 0,
            unique_routines={c: stats.unique_routines_for(c) for c in Category},
            harmony_streak=stats.current_streak or 0,
            longest_harmony_streak=stats.longest_streak or 0,
            longest_activity_streak=activity.longest_streak,
            harmony_score=stats.harmony_score or 0,
            first_activity=self.reader.get_first_activity_date(user_id),
        )

    def resolve_value(self, definition: MilestoneDefinition, snapshot: MetricSnapshot) -> int:
        """
        Current value of a rule's metric.

        Raises:
            ConfigurationError: If the metric, its parameter, or the threshold is unusable
        """
        if definition.threshold is None or definition.threshold <= 0:
            raise ConfigurationError(definition.id, f"threshold must be positive, got {definition.threshold}")
        try:
            ThresholdType(definition.threshold_type)
        except ValueError:
            raise ConfigurationError(definition.id, f"unknown threshold type {definition.threshold_type!r}")

        name, _, param = (definition.metric or '').partition(':')

        if name in PARAMETERIZED_METRICS:
            try:
                category = Category.parse(param)
            except InvalidInputError:
                raise ConfigurationError(definition.id, f"unknown category {param!r} for {name}")
            return snapshot.unique_routines.get(category, 0)

        if param:
            raise ConfigurationError(definition.id, f"metric {name!r} takes no parameter")

        if name in BUILTIN_METRICS:
            return int(BUILTIN_METRICS[name](snapshot))

        if name in self.external_metrics:
            try:
                return int(self.external_metrics[name](snapshot.user_id))
            except Exception as e:
                raise ConfigurationError(definition.id, f"metric {name!r} failed: {e}") from e

        raise ConfigurationError(definition.id, f"unknown metric {definition.metric!r}")

    @translate_storage_errors('check and award milestones')
    def check_and_award(
        self,
        user_id: str,
        stats: Optional[UserStats] = None,
        today: Optional[date] = None,
    ) -> MilestoneCheckResult:
        """
        Evaluate every rule and award newly met milestones.

        Safe to call repeatedly and concurrently: at most one UserMilestone
        row per (user, milestone) ever exists.

        Args:
            user_id: User to evaluate
            stats: Freshly written stats; computed from the event log when omitted
            today: Evaluation day (UTC)
        """
        user_id = validate_user_id(user_id)
        today = resolve_today(today)
        if stats is None:
            snapshot = self.build_live_snapshot(user_id, today)
        else:
            snapshot = self.build_snapshot(user_id, stats, today)
        result = MilestoneCheckResult()

        achieved = self._achieved_ids(user_id)
        definitions = MilestoneDefinition.query.order_by(
            MilestoneDefinition.category, MilestoneDefinition.order_index
        ).all()

        values: Dict[str, int] = {}
        to_award: List[Tuple[MilestoneDefinition, int]] = []

        for definition in definitions:
            if definition.id in achieved:
                continue

            try:
                value = self.resolve_value(definition, snapshot)
            except ConfigurationError as e:
                logger.warning('Skipping milestone rule %s for user %s: %s', definition.id, user_id, e.reason)
                result.skipped.append(e)
                continue
            result.evaluated += 1

            values[definition.id] = value
            if value >= definition.threshold:
                to_award.append((definition, value))

        try:
            self._record_progress(user_id, values)
        except IntegrityError:
            db.session.rollback()
            logger.info('Progress rows for user %s inserted by a concurrent run, retrying as updates', user_id)
            self._record_progress(user_id, values)

        for definition, value in to_award:
            try:
                result.awarded.append(self._award(user_id, definition, value))
            except DuplicateAwardRace:
                logger.info('Milestone %s already awarded to user %s by a concurrent run', definition.id, user_id)
                result.races += 1

        if result.awarded:
            logger.info(
                'Awarded %d milestone(s) to user %s: %s',
                len(result.awarded), user_id, ', '.join(m.milestone_id for m in result.awarded),
            )

        return result

    def _progress_rows(self, user_id: str) -> Dict[str, MilestoneProgress]:
        return {
            row.milestone_id: row
            for row in MilestoneProgress.query.filter_by(user_id=user_id).all()
        }

    def _record_progress(self, user_id: str, values: Dict[str, int]) -> None:
        """Upsert one progress row per evaluated rule and commit."""
        rows = self._progress_rows(user_id)
        now = utcnow()
        for milestone_id, value in values.items():
            progress = rows.get(milestone_id)
            if progress is None:
                progress = MilestoneProgress(user_id=user_id, milestone_id=milestone_id)
                db.session.add(progress)
            if progress.current_value != value:
                progress.current_value = value
                progress.last_updated = now
        db.session.commit()

    def _achieved_ids(self, user_id: str) -> Set[str]:
        rows = db.session.query(UserMilestone.milestone_id).filter(UserMilestone.user_id == user_id).all()
        return {milestone_id for (milestone_id,) in rows}

    def _award(self, user_id: str, definition: MilestoneDefinition, value: int) -> UserMilestone:
        """
        Insert the award row in its own transaction.

        Raises:
            DuplicateAwardRace: If the unique constraint rejects the insert
        """
        award = UserMilestone(
            user_id=user_id,
            milestone_id=definition.id,
            achieved_at=utcnow(),
            progress_value=value,
            shown_celebration=False,
            shared_to_activity=False,
        )
        db.session.add(award)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateAwardRace(user_id, definition.id)
        return award

    # Celebration queue
    @translate_storage_errors('read uncelebrated milestones')
    def get_uncelebrated(self, user_id: str) -> List[UserMilestone]:
        """Achieved but not yet shown, oldest first."""
        return UserMilestone.query.filter_by(
            user_id=validate_user_id(user_id),
            shown_celebration=False,
        ).order_by(UserMilestone.achieved_at.asc(), UserMilestone.id.asc()).all()

    @translate_storage_errors('mark milestone celebrated')
    def mark_celebrated(self, user_id: str, milestone_id: str) -> bool:
        """
        Flip shown_celebration to true. Re-calling is harmless.

        Returns:
            False if the user has not achieved this milestone
        """
        award = self._get_award(user_id, milestone_id)
        if award is None:
            return False
        if not award.shown_celebration:
            award.shown_celebration = True
            db.session.commit()
        return True

    @translate_storage_errors('mark milestone shared')
    def mark_shared(self, user_id: str, milestone_id: str) -> bool:
        """Flip shared_to_activity to true once the activity feed entry exists."""
        award = self._get_award(user_id, milestone_id)
        if award is None:
            return False
        if not award.shared_to_activity:
            award.shared_to_activity = True
            db.session.commit()
        return True

    def _get_award(self, user_id: str, milestone_id: str) -> Optional[UserMilestone]:
        if not milestone_id:
            raise InvalidInputError("milestone_id is required", field='milestone_id')
        return UserMilestone.query.filter_by(
            user_id=validate_user_id(user_id),
            milestone_id=milestone_id,
        ).first()

    # Read models
    @translate_storage_errors('read milestones')
    def get_milestones(self, user_id: str) -> List[dict]:
        """Every catalog entry with the user's progress and achievement."""
        user_id = validate_user_id(user_id)
        progress = {
            row.milestone_id: row.current_value
            for row in MilestoneProgress.query.filter_by(user_id=user_id).all()
        }
        awards = {
            row.milestone_id: row
            for row in UserMilestone.query.filter_by(user_id=user_id).all()
        }
        definitions = MilestoneDefinition.query.order_by(
            MilestoneDefinition.category, MilestoneDefinition.order_index
        ).all()

        summaries = []
        for definition in definitions:
            award = awards.get(definition.id)
            current = progress.get(definition.id, 0)
            if award is not None:
                current = max(current, award.progress_value or 0)
            summaries.append({
                'milestone': definition.to_dict(),
                'current_progress': current,
                'is_achieved': award is not None,
                'achieved_at': award.achieved_at.isoformat() if award else None,
                'percentage_complete': 100 if award else percentage_complete(current, definition.threshold),
                'progress_text': progress_text(definition.threshold_type, current, definition.threshold),
            })
        return summaries

    def get_milestone_summary(self, user_id: str) -> dict:
        """Achieved / in progress / upcoming counts and the closest unachieved milestone."""
        milestones = self.get_milestones(user_id)
        achieved = [m for m in milestones if m['is_achieved']]
        in_progress = [m for m in milestones if not m['is_achieved'] and m['current_progress'] > 0]
        upcoming = [m for m in milestones if not m['is_achieved'] and m['current_progress'] == 0]

        next_milestone = None
        for m in milestones:
            if m['is_achieved']:
                continue
            if next_milestone is None or m['percentage_complete'] > next_milestone['percentage_complete']:
                next_milestone = m

        total = len(milestones)
        return {
            'total': total,
            'achieved': len(achieved),
            'in_progress': len(in_progress),
            'upcoming': len(upcoming),
            'completion_percentage': round(len(achieved) / total * 100) if total else 0,
            'next_milestone': next_milestone,
        }


def sort_for_display(milestones: List[dict]) -> List[dict]:
    """Achieved first, then by progress, then rarer first."""
    def rarity_weight(m):
        try:
            return Rarity(m['milestone']['rarity']).weight
        except ValueError:
            return 0

    return sorted(
        milestones,
        key=lambda m: (not m['is_achieved'], -m['percentage_complete'], -rarity_weight(m)),
    )
