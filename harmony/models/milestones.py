"""
Milestone Models

Static milestone catalog, per-user awards and per-user progress.
"""

from ..extensions import db
from ..utils.dates import utcnow
from .enums import Rarity, ThresholdType


class MilestoneDefinition(db.Model):
    """Catalog entry. Managed outside the engine; read-only at runtime."""

    __tablename__ = 'milestone_definitions'

    id = db.Column(db.String(64), primary_key=True)  # e.g. 'streak_7'
    category = db.Column(db.String(32), nullable=False, index=True)
    # Categories: streak, completion, balance, specialization, journey, consistency, social, pain

    # Display
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=False, default='')
    icon_name = db.Column(db.String(50), nullable=False, default='trophy')
    icon_color = db.Column(db.String(20), nullable=False, default='#3B82F6')

    # Rule
    metric = db.Column(db.String(64), nullable=False)  # e.g. 'total_completions', 'unique_routines:Mind'
    threshold = db.Column(db.Integer, nullable=False)
    threshold_type = db.Column(db.String(20), nullable=False, default=ThresholdType.COUNT.value)
    # Types: count, days, percentage, boolean

    rarity = db.Column(db.String(20), nullable=False, default=Rarity.COMMON.value)
    order_index = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'category': self.category,
            'name': self.name,
            'description': self.description,
            'icon_name': self.icon_name,
            'icon_color': self.icon_color,
            'metric': self.metric,
            'threshold': self.threshold,
            'threshold_type': self.threshold_type,
            'rarity': self.rarity,
            'order_index': self.order_index,
        }


class UserMilestone(db.Model):
    """Milestone achieved by a user. Created once; only the flags change afterwards."""

    __tablename__ = 'user_milestones'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    milestone_id = db.Column(
        db.String(64),
        db.ForeignKey('milestone_definitions.id', ondelete='CASCADE'),
        nullable=False,
    )

    achieved_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    progress_value = db.Column(db.Integer)

    # Celebration modal / activity feed status
    shown_celebration = db.Column(db.Boolean, nullable=False, default=False)
    shared_to_activity = db.Column(db.Boolean, nullable=False, default=False)

    # Unique constraint
    __table_args__ = (
        db.UniqueConstraint('user_id', 'milestone_id', name='unique_user_milestone'),
        db.Index('ix_user_milestones_celebration', 'user_id', 'shown_celebration'),
    )

    definition = db.relationship('MilestoneDefinition', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'milestone_id': self.milestone_id,
            'milestone': self.definition.to_dict() if self.definition else None,
            'achieved_at': self.achieved_at.isoformat() if self.achieved_at else None,
            'progress_value': self.progress_value,
            'shown_celebration': bool(self.shown_celebration),
            'shared_to_activity': bool(self.shared_to_activity),
        }


class MilestoneProgress(db.Model):
    """Latest measured value toward a milestone."""

    __tablename__ = 'milestone_progress'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    milestone_id = db.Column(
        db.String(64),
        db.ForeignKey('milestone_definitions.id', ondelete='CASCADE'),
        nullable=False,
    )
    current_value = db.Column(db.Integer, nullable=False, default=0)
    last_updated = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'milestone_id', name='unique_user_milestone_progress'),
    )

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'milestone_id': self.milestone_id,
            'current_value': self.current_value,
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
        }


# Default catalog installed by `flask progress seed-milestones`
DEFAULT_MILESTONES = [
    # Harmony streaks (all three categories on consecutive days)
    {'id': 'streak_1', 'category': 'streak', 'name': 'First Step',
     'description': 'Complete your first day of harmony', 'icon_name': 'footsteps', 'icon_color': '#3B82F6',
     'metric': 'longest_harmony_streak', 'threshold': 1, 'threshold_type': 'days', 'rarity': 'common', 'order_index': 1},
    {'id': 'streak_7', 'category': 'streak', 'name': 'Week Warrior',
     'description': 'Maintain a 7-day harmony streak', 'icon_name': 'trophy', 'icon_color': '#10B981',
     'metric': 'longest_harmony_streak', 'threshold': 7, 'threshold_type': 'days', 'rarity': 'rare', 'order_index': 2},
    {'id': 'streak_30', 'category': 'streak', 'name': 'Monthly Master',
     'description': 'Achieve a 30-day harmony streak', 'icon_name': 'ribbon', 'icon_color': '#8B5CF6',
     'metric': 'longest_harmony_streak', 'threshold': 30, 'threshold_type': 'days', 'rarity': 'epic', 'order_index': 3},
    {'id': 'streak_100', 'category': 'streak', 'name': 'Centurion',
     'description': 'Reach a 100-day harmony streak', 'icon_name': 'medal', 'icon_color': '#F59E0B',
     'metric': 'longest_harmony_streak', 'threshold': 100, 'threshold_type': 'days', 'rarity': 'legendary', 'order_index': 4},
    {'id': 'streak_365', 'category': 'streak', 'name': 'Legendary',
     'description': 'Complete a full year of harmony', 'icon_name': 'star', 'icon_color': '#EF4444',
     'metric': 'longest_harmony_streak', 'threshold': 365, 'threshold_type': 'days', 'rarity': 'legendary', 'order_index': 5},

    # Routine completions
    {'id': 'routine_1', 'category': 'completion', 'name': 'Getting Started',
     'description': 'Complete your first routine', 'icon_name': 'play-circle', 'icon_color': '#3B82F6',
     'metric': 'total_completions', 'threshold': 1, 'threshold_type': 'count', 'rarity': 'common', 'order_index': 1},
    {'id': 'routine_10', 'category': 'completion', 'name': 'Committed',
     'description': 'Complete 10 routines', 'icon_name': 'checkmark-done', 'icon_color': '#10B981',
     'metric': 'total_completions', 'threshold': 10, 'threshold_type': 'count', 'rarity': 'common', 'order_index': 2},
    {'id': 'routine_50', 'category': 'completion', 'name': 'Dedicated',
     'description': 'Complete 50 routines', 'icon_name': 'albums', 'icon_color': '#8B5CF6',
     'metric': 'total_completions', 'threshold': 50, 'threshold_type': 'count', 'rarity': 'rare', 'order_index': 3},
    {'id': 'routine_100', 'category': 'completion', 'name': 'Veteran',
     'description': 'Complete 100 routines', 'icon_name': 'shield', 'icon_color': '#F59E0B',
     'metric': 'total_completions', 'threshold': 100, 'threshold_type': 'count', 'rarity': 'epic', 'order_index': 4},
    {'id': 'routine_500', 'category': 'completion', 'name': 'Master',
     'description': 'Complete 500 routines', 'icon_name': 'diamond', 'icon_color': '#EF4444',
     'metric': 'total_completions', 'threshold': 500, 'threshold_type': 'count', 'rarity': 'legendary', 'order_index': 5},

    # Category balance
    {'id': 'balance_mind_first', 'category': 'balance', 'name': 'Mindful Beginning',
     'description': 'Complete your first Mind routine', 'icon_name': 'brain', 'icon_color': '#3B82F6',
     'metric': 'unique_routines:Mind', 'threshold': 1, 'threshold_type': 'count', 'rarity': 'common', 'order_index': 1},
    {'id': 'balance_body_first', 'category': 'balance', 'name': 'Physical Start',
     'description': 'Complete your first Body routine', 'icon_name': 'body', 'icon_color': '#EF4444',
     'metric': 'unique_routines:Body', 'threshold': 1, 'threshold_type': 'count', 'rarity': 'common', 'order_index': 2},
    {'id': 'balance_soul_first', 'category': 'balance', 'name': 'Spiritual Awakening',
     'description': 'Complete your first Soul routine', 'icon_name': 'heart', 'icon_color': '#F59E0B',
     'metric': 'unique_routines:Soul', 'threshold': 1, 'threshold_type': 'count', 'rarity': 'common', 'order_index': 3},
    {'id': 'balance_all_categories', 'category': 'balance', 'name': 'Balanced Beginner',
     'description': 'Complete at least one routine in each category', 'icon_name': 'shuffle', 'icon_color': '#10B981',
     'metric': 'categories_started', 'threshold': 3, 'threshold_type': 'count', 'rarity': 'rare', 'order_index': 4},
    {'id': 'balance_perfect', 'category': 'balance', 'name': 'Perfect Harmony',
     'description': 'Achieve perfect balance (33/33/33) over 30+ routines', 'icon_name': 'infinite', 'icon_color': '#8B5CF6',
     'metric': 'perfect_balance', 'threshold': 30, 'threshold_type': 'count', 'rarity': 'epic', 'order_index': 5},
    {'id': 'balance_harmony_score_90', 'category': 'balance', 'name': 'In Tune',
     'description': 'Reach a harmony score of 90', 'icon_name': 'pulse', 'icon_color': '#10B981',
     'metric': 'harmony_score', 'threshold': 90, 'threshold_type': 'percentage', 'rarity': 'rare', 'order_index': 6},

    # Category specialization
    {'id': 'specialist_mind_50', 'category': 'specialization', 'name': 'Mind Master',
     'description': 'Complete 50 Mind routines', 'icon_name': 'school', 'icon_color': '#3B82F6',
     'metric': 'unique_routines:Mind', 'threshold': 50, 'threshold_type': 'count', 'rarity': 'epic', 'order_index': 1},
    {'id': 'specialist_body_50', 'category': 'specialization', 'name': 'Body Builder',
     'description': 'Complete 50 Body routines', 'icon_name': 'fitness', 'icon_color': '#EF4444',
     'metric': 'unique_routines:Body', 'threshold': 50, 'threshold_type': 'count', 'rarity': 'epic', 'order_index': 2},
    {'id': 'specialist_soul_50', 'category': 'specialization', 'name': 'Soul Searcher',
     'description': 'Complete 50 Soul routines', 'icon_name': 'sunny', 'icon_color': '#F59E0B',
     'metric': 'unique_routines:Soul', 'threshold': 50, 'threshold_type': 'count', 'rarity': 'epic', 'order_index': 3},

    # Journey (measured from the first logged completion)
    {'id': 'journey_started', 'category': 'journey', 'name': 'Journey Begins',
     'description': 'Start your wellness journey', 'icon_name': 'map', 'icon_color': '#3B82F6',
     'metric': 'journey_started', 'threshold': 1, 'threshold_type': 'boolean', 'rarity': 'common', 'order_index': 1},
    {'id': 'journey_week', 'category': 'journey', 'name': 'One Week In',
     'description': 'One week on your journey', 'icon_name': 'time', 'icon_color': '#10B981',
     'metric': 'journey_days', 'threshold': 7, 'threshold_type': 'days', 'rarity': 'common', 'order_index': 2},
    {'id': 'journey_month', 'category': 'journey', 'name': 'One Month Strong',
     'description': 'One month on your journey', 'icon_name': 'hourglass', 'icon_color': '#8B5CF6',
     'metric': 'journey_days', 'threshold': 30, 'threshold_type': 'days', 'rarity': 'rare', 'order_index': 3},
    {'id': 'journey_quarter', 'category': 'journey', 'name': 'Quarter Year',
     'description': 'Three months of dedication', 'icon_name': 'rose', 'icon_color': '#F59E0B',
     'metric': 'journey_days', 'threshold': 90, 'threshold_type': 'days', 'rarity': 'epic', 'order_index': 4},
    {'id': 'journey_half', 'category': 'journey', 'name': 'Half Year Hero',
     'description': 'Six months of transformation', 'icon_name': 'gift', 'icon_color': '#EF4444',
     'metric': 'journey_days', 'threshold': 180, 'threshold_type': 'days', 'rarity': 'epic', 'order_index': 5},
    {'id': 'journey_year', 'category': 'journey', 'name': 'One Year Anniversary',
     'description': 'A full year of wellness', 'icon_name': 'trophy', 'icon_color': '#F59E0B',
     'metric': 'journey_days', 'threshold': 365, 'threshold_type': 'days', 'rarity': 'legendary', 'order_index': 6},

    # Consistency (any category on consecutive days)
    {'id': 'consistency_3_days', 'category': 'consistency', 'name': 'Building Momentum',
     'description': '3 consecutive days of activity', 'icon_name': 'flash', 'icon_color': '#3B82F6',
     'metric': 'longest_activity_streak', 'threshold': 3, 'threshold_type': 'days', 'rarity': 'common', 'order_index': 1},
    {'id': 'consistency_7_days', 'category': 'consistency', 'name': 'Week Consistent',
     'description': '7 consecutive days of activity', 'icon_name': 'flame', 'icon_color': '#10B981',
     'metric': 'longest_activity_streak', 'threshold': 7, 'threshold_type': 'days', 'rarity': 'rare', 'order_index': 2},
    {'id': 'consistency_30_days', 'category': 'consistency', 'name': 'Never Miss',
     'description': '30 consecutive days of activity', 'icon_name': 'infinite', 'icon_color': '#8B5CF6',
     'metric': 'longest_activity_streak', 'threshold': 30, 'threshold_type': 'days', 'rarity': 'epic', 'order_index': 3},
]


def seed_milestone_catalog(definitions=None) -> dict:
    """
    Install catalog entries that are not present yet.

    Existing rows are left untouched; the catalog is owned outside the engine
    and this only bootstraps fresh databases.

    Returns:
        Dict with counts of created and skipped definitions
    """
    created = 0
    skipped = 0

    for data in definitions or DEFAULT_MILESTONES:
        if db.session.get(MilestoneDefinition, data['id']):
            skipped += 1
            continue
        db.session.add(MilestoneDefinition(**data))
        created += 1

    db.session.commit()

    return {
        'created': created,
        'skipped': skipped,
    }
