"""
Event Log Reader

Read-only view over a user's completion events and the derived
daily progress cache. All day boundaries are UTC.
"""

from datetime import date, timedelta
from typing import Dict, Optional, Set

from sqlalchemy import func

from ..models.enums import Category
from ..models.progress import CompletionEvent, DailyProgressRecord
from ..utils.dates import start_of_day, to_utc_date
from ..utils.exceptions import InvalidInputError
from ..utils.storage import translate_storage_errors


def validate_user_id(user_id) -> str:
    """
    Reject empty or oversized user ids before any query runs.

    Raises:
        InvalidInputError: If the id is not a non-empty string of at most 64 chars
    """
    if user_id is None:
        raise InvalidInputError("user_id is required", field='user_id')
    user_id = str(user_id).strip()
    if not user_id or len(user_id) > 64:
        raise InvalidInputError(f"Invalid user_id {user_id!r}", field='user_id')
    return user_id


class EventLogReader:
    """Queries over completion_events and daily_progress for one service call."""

    def _events(self, user_id: str, since: Optional[date] = None, category: Optional[Category] = None):
        query = CompletionEvent.query.filter(CompletionEvent.user_id == validate_user_id(user_id))
        if category is not None:
            query = query.filter(CompletionEvent.category == Category.parse(category))
        if since is not None:
            query = query.filter(CompletionEvent.completed_at >= start_of_day(since))
        return query

    @translate_storage_errors('read completion dates')
    def get_completion_dates(self, user_id: str, category: Category, since: Optional[date] = None) -> Set[date]:
        """Distinct UTC dates on which the user completed a routine in `category`."""
        rows = self._events(user_id, since, category).with_entities(CompletionEvent.completed_at).all()
        return {to_utc_date(completed_at) for (completed_at,) in rows}

    @translate_storage_errors('read activity dates')
    def get_activity_dates(self, user_id: str, since: Optional[date] = None) -> Set[date]:
        """Distinct UTC dates with at least one completion in any category."""
        rows = self._events(user_id, since).with_entities(CompletionEvent.completed_at).all()
        return {to_utc_date(completed_at) for (completed_at,) in rows}

    @translate_storage_errors('read daily flags')
    def get_daily_flags(self, user_id: str, since: Optional[date] = None) -> Dict[date, Dict[Category, bool]]:
        """Per-date completion flags built straight from the event log."""
        rows = self._events(user_id, since).with_entities(
            CompletionEvent.category, CompletionEvent.completed_at
        ).all()

        flags: Dict[date, Dict[Category, bool]] = {}
        for category, completed_at in rows:
            day = to_utc_date(completed_at)
            day_flags = flags.setdefault(day, {c: False for c in Category})
            day_flags[Category.parse(category)] = True
        return flags

    @translate_storage_errors('read category counts')
    def get_category_counts(self, user_id: str, since: Optional[date] = None) -> Dict[Category, int]:
        """Number of completions per category (not distinct days)."""
        rows = (
            self._events(user_id, since)
            .with_entities(CompletionEvent.category, func.count(CompletionEvent.id))
            .group_by(CompletionEvent.category)
            .all()
        )
        counts = {category: 0 for category in Category}
        for category, count in rows:
            counts[Category.parse(category)] = count
        return counts

    @translate_storage_errors('count completions')
    def count_completions(self, user_id: str) -> int:
        return self._events(user_id).count()

    @translate_storage_errors('count unique routines')
    def count_unique_routines(self, user_id: str, category: Category) -> int:
        """Distinct routine ids ever completed in `category`."""
        return (
            self._events(user_id, category=category)
            .with_entities(func.count(func.distinct(CompletionEvent.routine_id)))
            .scalar()
        ) or 0

    @translate_storage_errors('read last activity')
    def get_last_activity_date(self, user_id: str, category: Category) -> Optional[date]:
        latest = (
            self._events(user_id, category=category)
            .with_entities(func.max(CompletionEvent.completed_at))
            .scalar()
        )
        return to_utc_date(latest) if latest else None

    @translate_storage_errors('read first activity')
    def get_first_activity_date(self, user_id: str) -> Optional[date]:
        earliest = self._events(user_id).with_entities(func.min(CompletionEvent.completed_at)).scalar()
        return to_utc_date(earliest) if earliest else None

    @translate_storage_errors('read daily progress')
    def get_daily_record(self, user_id: str, day: date) -> Optional[DailyProgressRecord]:
        return DailyProgressRecord.query.filter_by(
            user_id=validate_user_id(user_id),
            date=to_utc_date(day),
        ).first()

    @translate_storage_errors('read daily progress')
    def get_daily_records(self, user_id: str, since: date) -> Dict[date, DailyProgressRecord]:
        records = DailyProgressRecord.query.filter(
            DailyProgressRecord.user_id == validate_user_id(user_id),
            DailyProgressRecord.date >= since,
        ).all()
        return {record.date: record for record in records}

    def get_today_and_yesterday(self, user_id: str, today: date):
        """(today's record, yesterday's record); either may be None."""
        return (
            self.get_daily_record(user_id, today),
            self.get_daily_record(user_id, today - timedelta(days=1)),
        )


event_log_reader = EventLogReader()
