"""CLI commands for stryde."""

from .activities import activities
from .calibrate import calibrate
from .goals import goals
from .init import init
from .insights import insights
from .profiles import profiles
from .track import track

__all__ = [
    "activities",
    "calibrate",
    "goals",
    "init",
    "insights",
    "profiles",
    "track",
]
