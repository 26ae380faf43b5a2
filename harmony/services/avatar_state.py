"""
Avatar State Deriver

Maps today's (and, before anything is logged today, yesterday's) daily
progress into one of five light states per category.

State precedence (first match wins):
- Radiant: all three categories completed today, for every category
- Glowing: this category completed today, even while executing another
- Awakening: not completed today, but a routine in this category is executing now
- Sleepy: nothing recorded today yet, and yesterday was a harmony day
- Dormant: anything else, including no data at all

The executing flag comes from the caller's session; it is never read from the log.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from ..models.enums import Category, LightState
from ..models.progress import DailyProgressRecord
from ..utils.dates import resolve_today
from .event_log import EventLogReader, event_log_reader


@dataclass(frozen=True)
class AvatarState:
    category: Category
    light_state: LightState

    def to_dict(self):
        return {
            'category': self.category.value,
            'light_state': self.light_state.value,
        }


def derive_light_state(
    category_completed_today: bool,
    all_completed_today: bool,
    has_today_record: bool,
    yesterday_all_completed: bool = False,
    is_executing: bool = False,
) -> LightState:
    if all_completed_today:
        return LightState.RADIANT
    if category_completed_today:
        return LightState.GLOWING
    if is_executing:
        return LightState.AWAKENING
    if not has_today_record and yesterday_all_completed:
        return LightState.SLEEPY
    return LightState.DORMANT


def derive_avatar_states(
    today_record: Optional[DailyProgressRecord],
    yesterday_record: Optional[DailyProgressRecord] = None,
    executing_category: Optional[Category] = None,
) -> List[AvatarState]:
    """Light state for Mind, Body and Soul, in that order. No I/O."""
    has_today = today_record is not None
    all_today = has_today and today_record.all_complete
    # Yesterday only matters before anything is recorded today
    yesterday_harmony = (not has_today) and yesterday_record is not None and yesterday_record.all_complete

    states = []
    for category in Category:
        states.append(AvatarState(
            category=category,
            light_state=derive_light_state(
                category_completed_today=has_today and today_record.is_complete(category),
                all_completed_today=all_today,
                has_today_record=has_today,
                yesterday_all_completed=yesterday_harmony,
                is_executing=executing_category == category,
            ),
        ))
    return states


def get_avatar_states(
    user_id: str,
    executing_category=None,
    today: Optional[date] = None,
    reader: EventLogReader = None,
) -> List[AvatarState]:
    """
    Load today's and yesterday's daily records and derive the three states.

    Raises:
        InvalidInputError: If user_id or executing_category is malformed
    """
    reader = reader or event_log_reader
    executing = Category.parse(executing_category) if executing_category else None
    today_record, yesterday_record = reader.get_today_and_yesterday(user_id, resolve_today(today))
    return derive_avatar_states(today_record, yesterday_record, executing)
