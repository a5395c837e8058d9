"""GPS distance, session timing and the live session state machine."""

from .accumulator import DistanceAccumulator, SignalQuality
from .clock import ClockSource, ManualClock, SessionClock, SystemClock
from .geo import distance, haversine_m
from .noise import NoiseFilter
from .session import ActivitySession, ConcurrentSessionConflict, SessionEnded, SessionState

__all__ = [
    "ActivitySession",
    "ClockSource",
    "ConcurrentSessionConflict",
    "DistanceAccumulator",
    "distance",
    "haversine_m",
    "ManualClock",
    "NoiseFilter",
    "SessionClock",
    "SessionEnded",
    "SessionState",
    "SignalQuality",
    "SystemClock",
]
