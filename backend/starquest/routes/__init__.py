"""Aggregate import for all API route modules."""

from . import (
    auth,
    children,
    quests,
    activity,
    rewards,
    redemptions,
    levels,
    credit,
)

__all__ = [
    "auth",
    "children",
    "quests",
    "activity",
    "rewards",
    "redemptions",
    "levels",
    "credit",
]
