"""
Closed value sets used across the progress engine.
"""
from enum import Enum

from ..utils.exceptions import InvalidInputError


class Category(str, Enum):
    """Wellness routine category."""
    MIND = 'Mind'
    BODY = 'Body'
    SOUL = 'Soul'

    @property
    def field_prefix(self) -> str:
        """Column prefix used by per-category stats fields (mind_, body_, soul_)."""
        return self.value.lower()

    @classmethod
    def parse(cls, value) -> 'Category':
        """
        Parse a category from user or config input.

        Matching is case-insensitive ('mind', 'Mind', 'MIND').

        Raises:
            InvalidInputError: If the value is not one of Mind, Body, Soul
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        raise InvalidInputError(
            f"Invalid category {value!r}; expected one of Mind, Body, Soul",
            field='category',
        )


class ThresholdType(str, Enum):
    """How a milestone threshold is measured and displayed."""
    COUNT = 'count'
    DAYS = 'days'
    PERCENTAGE = 'percentage'
    BOOLEAN = 'boolean'


class Rarity(str, Enum):
    COMMON = 'common'
    RARE = 'rare'
    EPIC = 'epic'
    LEGENDARY = 'legendary'

    @property
    def weight(self) -> int:
        return {'common': 1, 'rare': 2, 'epic': 3, 'legendary': 4}[self.value]


class LightState(str, Enum):
    """Avatar light state, lowest to highest."""
    DORMANT = 'Dormant'
    SLEEPY = 'Sleepy'
    AWAKENING = 'Awakening'
    GLOWING = 'Glowing'
    RADIANT = 'Radiant'


def enum_values(enum_cls):
    """values_callable for SQLAlchemy Enum columns: store values, not member names."""
    return [member.value for member in enum_cls]
