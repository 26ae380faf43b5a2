"""
Hard reset: wipe every progress row a user owns.

Milestone definitions are shared catalog data and are never touched.
After a purge the next progress run produces the zero baseline.
"""

import logging

from ..extensions import db
from ..models.milestones import MilestoneProgress, UserMilestone
from ..models.progress import CompletionEvent, DailyProgressRecord, UserStats
from ..utils.storage import translate_storage_errors
from .event_log import validate_user_id

logger = logging.getLogger(__name__)

# Derived rows first, the completion log last
PURGE_ORDER = (
    ('user_milestones', UserMilestone),
    ('milestone_progress', MilestoneProgress),
    ('user_stats', UserStats),
    ('daily_progress', DailyProgressRecord),
    ('completion_events', CompletionEvent),
)


@translate_storage_errors('hard reset')
def purge_user_data(user_id: str) -> dict:
    """
    Delete the user's events, daily records, stats, awards and progress in one transaction.

    Returns:
        Dict of table name -> deleted row count, plus 'total'
    """
    user_id = validate_user_id(user_id)

    counts = {}
    for table, model in PURGE_ORDER:
        counts[table] = model.query.filter_by(user_id=user_id).delete(synchronize_session=False)

    db.session.commit()

    counts['total'] = sum(counts.values())
    logger.info('[Harmony] Hard reset for user %s removed %d rows', user_id, counts['total'])
    return counts
