"""Data models for stryde."""

from .activity import Activity
from .calibration import ActivityType, CalibrationProfile
from .goal import Goal, GoalType
from .location import Coordinate, RoutePoint

__all__ = [
    "Activity",
    "ActivityType",
    "CalibrationProfile",
    "Coordinate",
    "Goal",
    "GoalType",
    "RoutePoint",
]
