"""GPS noise rejection policy."""

from dataclasses import dataclass

DEFAULT_MIN_DELTA_M = 0.5  # jitter while standing still
DEFAULT_MAX_DELTA_M = 5.0  # jump after a lost fix


@dataclass(frozen=True)
class NoiseFilter:
    """Accepts a delta between consecutive accepted fixes.

    Only deltas strictly inside ``(min_delta_m, max_delta_m)`` are kept.
    The thresholds are tuning values, not physical limits.
    """

    min_delta_m: float = DEFAULT_MIN_DELTA_M
    max_delta_m: float = DEFAULT_MAX_DELTA_M

    def __post_init__(self):
        if self.min_delta_m < 0 or self.max_delta_m <= self.min_delta_m:
            raise ValueError("NoiseFilter requires 0 <= min_delta_m < max_delta_m")

    def accept(self, delta_m: float) -> bool:
        return self.min_delta_m < delta_m < self.max_delta_m
