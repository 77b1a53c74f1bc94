"""
Row-store models for the footprint engine.

All SQLAlchemy models are imported here so metadata sees every table.
"""

from ectracc.models.footprint import Footprint, FOOTPRINT_CATEGORIES
from ectracc.models.goal import Goal, GOAL_TIMEFRAMES

__all__ = [
    "Footprint",
    "FOOTPRINT_CATEGORIES",
    "Goal",
    "GOAL_TIMEFRAMES",
]
