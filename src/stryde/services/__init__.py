"""Calibration, goals, statistics and live recording services."""

from .calibration import CalibrationResult, CalibrationWalk, RejectionReason, StrideCalibrator
from .goals import AdaptiveTargetCalculator, GoalService
from .recorder import ActivityRecorder, PersistenceFailure
from .statistics import StreakCalculator, StreakInfo

__all__ = [
    "ActivityRecorder",
    "AdaptiveTargetCalculator",
    "CalibrationResult",
    "CalibrationWalk",
    "GoalService",
    "PersistenceFailure",
    "RejectionReason",
    "StreakCalculator",
    "StreakInfo",
    "StrideCalibrator",
]
