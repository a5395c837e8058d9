"""Database layer for stryde."""

from .engine import get_data_dir, get_db_path, init_db
from .repositories import (
    ActivityRepository,
    CalibrationProfileRepository,
    GoalRepository,
)

__all__ = [
    "ActivityRepository",
    "CalibrationProfileRepository",
    "get_data_dir",
    "get_db_path",
    "GoalRepository",
    "init_db",
]
