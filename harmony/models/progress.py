"""
Progress Models

Completion events (read-only source of truth), the derived daily progress
cache, and the per-user stats snapshot.
"""

from ..extensions import db
from ..utils.dates import utcnow
from .enums import Category, enum_values


class CompletionEvent(db.Model):
    """A finished routine. Written by the completion-logging collaborator, never updated."""

    __tablename__ = 'completion_events'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    category = db.Column(
        db.Enum(Category, name='routine_category', native_enum=False, values_callable=enum_values),
        nullable=False,
    )
    routine_id = db.Column(db.String(64), nullable=False)
    completed_at = db.Column(db.DateTime, nullable=False, default=utcnow)  # naive UTC

    __table_args__ = (
        db.Index('ix_completion_events_user_category_time', 'user_id', 'category', 'completed_at'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'category': self.category.value if self.category else None,
            'routine_id': self.routine_id,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }


class DailyProgressRecord(db.Model):
    """Which categories a user completed on a UTC calendar day."""

    __tablename__ = 'daily_progress'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)

    mind_complete = db.Column(db.Boolean, nullable=False, default=False)
    body_complete = db.Column(db.Boolean, nullable=False, default=False)
    soul_complete = db.Column(db.Boolean, nullable=False, default=False)

    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'date', name='unique_user_daily_progress'),
    )

    def is_complete(self, category: Category) -> bool:
        return bool(getattr(self, f'{category.field_prefix}_complete'))

    @property
    def all_complete(self) -> bool:
        return all(self.is_complete(category) for category in Category)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'date': self.date.isoformat() if self.date else None,
            'mind_complete': bool(self.mind_complete),
            'body_complete': bool(self.body_complete),
            'soul_complete': bool(self.soul_complete),
            'all_complete': self.all_complete,
        }


class UserStats(db.Model):
    """
    Derived progress snapshot for one user.

    Rewritten as a whole by the progress orchestrator; never patched field by field.
    current_streak/longest_streak are the harmony (all three categories) streak.
    """

    __tablename__ = 'user_stats'

    # Every value the orchestrator recomputes. updated_at is bookkeeping, not a stat.
    STAT_FIELDS = (
        'current_streak',
        'longest_streak',
        'mind_current_streak',
        'body_current_streak',
        'soul_current_streak',
        'mind_longest_streak',
        'body_longest_streak',
        'soul_longest_streak',
        'unique_mind_routines',
        'unique_body_routines',
        'unique_soul_routines',
        'last_mind_activity',
        'last_body_activity',
        'last_soul_activity',
        'harmony_score',
        'total_completions',
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, unique=True)

    # Harmony streak
    current_streak = db.Column(db.Integer, nullable=False, default=0)
    longest_streak = db.Column(db.Integer, nullable=False, default=0)

    # Per-category streaks
    mind_current_streak = db.Column(db.Integer, nullable=False, default=0)
    body_current_streak = db.Column(db.Integer, nullable=False, default=0)
    soul_current_streak = db.Column(db.Integer, nullable=False, default=0)
    mind_longest_streak = db.Column(db.Integer, nullable=False, default=0)
    body_longest_streak = db.Column(db.Integer, nullable=False, default=0)
    soul_longest_streak = db.Column(db.Integer, nullable=False, default=0)

    # Unique routines
    unique_mind_routines = db.Column(db.Integer, nullable=False, default=0)
    unique_body_routines = db.Column(db.Integer, nullable=False, default=0)
    unique_soul_routines = db.Column(db.Integer, nullable=False, default=0)

    # Last activity dates (UTC)
    last_mind_activity = db.Column(db.Date)
    last_body_activity = db.Column(db.Date)
    last_soul_activity = db.Column(db.Date)

    harmony_score = db.Column(db.Integer, nullable=False, default=0)
    total_completions = db.Column(db.Integer, nullable=False, default=0)

    updated_at = db.Column(db.DateTime, default=utcnow)

    def unique_routines_for(self, category: Category) -> int:
        return getattr(self, f'unique_{category.field_prefix}_routines') or 0

    def stat_values(self) -> dict:
        """The recomputed values only, for change detection."""
        return {name: getattr(self, name) for name in self.STAT_FIELDS}

    def to_dict(self):
        data = {'user_id': self.user_id}
        for name, value in self.stat_values().items():
            if name.startswith('last_'):
                data[name] = value.isoformat() if value else None
            else:
                data[name] = value or 0
        data['updated_at'] = self.updated_at.isoformat() if self.updated_at else None
        return data

    @classmethod
    def empty(cls, user_id: str) -> 'UserStats':
        """Zero baseline for a user with no history (not added to the session)."""
        stats = cls(user_id=user_id)
        for name in cls.STAT_FIELDS:
            setattr(stats, name, None if name.startswith('last_') else 0)
        return stats
