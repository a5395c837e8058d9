"""Running GPS distance with noise rejection.

The same accumulator backs both calibration walks and live activity
tracking.
"""

import logging
from enum import Enum

from ..models.location import Coordinate
from .geo import distance
from .noise import NoiseFilter

logger = logging.getLogger(__name__)

STRONG_ACCURACY_M = 10.0
FAIR_ACCURACY_M = 20.0


class SignalQuality(str, Enum):
    """Coarse GPS signal classification."""

    STRONG = "Strong"
    FAIR = "Fair"
    WEAK = "Weak"

    @classmethod
    def from_accuracy(cls, accuracy_m: float) -> "SignalQuality":
        if accuracy_m < STRONG_ACCURACY_M:
            return cls.STRONG
        if accuracy_m < FAIR_ACCURACY_M:
            return cls.FAIR
        return cls.WEAK


class DistanceAccumulator:
    """Accumulates distance between accepted fixes.

    A rejected fix is discarded without moving the baseline, so a single
    teleport does not poison the next comparison.
    """

    def __init__(self, noise_filter: NoiseFilter | None = None):
        self.noise_filter = noise_filter or NoiseFilter()
        self.total_m = 0.0
        self.last_accepted: Coordinate | None = None
        self.signal_quality = SignalQuality.WEAK
        self.last_accuracy_m: float | None = None
        self.worst_accuracy_m: float | None = None

    def ingest(self, fix: Coordinate) -> float | None:
        """Feed one fix.

        Returns:
            The accepted delta in meters, ``0.0`` when the fix became the
            baseline, or ``None`` when it was rejected.
        """
        self.signal_quality = SignalQuality.from_accuracy(fix.accuracy_m)
        self.last_accuracy_m = fix.accuracy_m
        if self.worst_accuracy_m is None or fix.accuracy_m > self.worst_accuracy_m:
            self.worst_accuracy_m = fix.accuracy_m

        if self.last_accepted is None:
            self.last_accepted = fix
            return 0.0

        delta = distance(self.last_accepted, fix)
        if not self.noise_filter.accept(delta):
            logger.debug("Rejected fix at %s (delta %.2f m)", fix.timestamp, delta)
            return None

        self.total_m += delta
        self.last_accepted = fix
        return delta

    def reset(self) -> None:
        """Clear the running total and baseline for a new run."""
        self.total_m = 0.0
        self.last_accepted = None
        self.signal_quality = SignalQuality.WEAK
        self.last_accuracy_m = None
        self.worst_accuracy_m = None
