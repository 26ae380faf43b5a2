"""
Database models for the Harmony progress engine.
Completion log, derived daily/user progress and the milestone system.
"""
from .enums import Category, ThresholdType, Rarity, LightState
from .progress import CompletionEvent, DailyProgressRecord, UserStats
from .milestones import (
    MilestoneDefinition,
    UserMilestone,
    MilestoneProgress,
    DEFAULT_MILESTONES,
    seed_milestone_catalog,
)

__all__ = [
    # Enums
    'Category',
    'ThresholdType',
    'Rarity',
    'LightState',
    # Progress
    'CompletionEvent',
    'DailyProgressRecord',
    'UserStats',
    # Milestones
    'MilestoneDefinition',
    'UserMilestone',
    'MilestoneProgress',
    'DEFAULT_MILESTONES',
    'seed_milestone_catalog',
]
