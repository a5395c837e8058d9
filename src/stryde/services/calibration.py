"""Stride calibration from a measured walk and a user-counted step total."""

from dataclasses import dataclass
from enum import Enum

from ..models.calibration import ActivityType, CalibrationProfile
from ..models.location import Coordinate
from ..tracking.accumulator import DistanceAccumulator, SignalQuality
from ..tracking.noise import NoiseFilter

# (worst accuracy below, confidence); anything worse gets DEFAULT_CONFIDENCE
CONFIDENCE_STEPS = (
    (5.0, 0.98),
    (10.0, 0.95),
    (15.0, 0.85),
)
DEFAULT_CONFIDENCE = 0.75

STRIDE_GUIDANCE = "Typical stride lengths: walking 0.6-0.8 m, running 0.8-1.2 m."


class RejectionReason(str, Enum):
    """Why a calibration attempt could not produce a profile."""

    DISTANCE_TOO_SHORT = "distance_too_short"
    TOO_FEW_STEPS = "too_few_steps"
    STRIDE_TOO_SHORT = "stride_too_short"
    STRIDE_TOO_LONG = "stride_too_long"


@dataclass
class CalibrationResult:
    """Outcome of a calibration attempt.

    Either ``stride_length_m`` and ``confidence`` are set, or
    ``rejection`` explains why the user should retry.
    """

    stride_length_m: float | None = None
    confidence: float | None = None
    rejection: RejectionReason | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.rejection is None

    @classmethod
    def rejected(cls, reason: RejectionReason, message: str) -> "CalibrationResult":
        return cls(rejection=reason, message=message)


def confidence_for_accuracy(worst_accuracy_m: float | None) -> float:
    """Map the worst GPS accuracy seen during the walk to a confidence score."""
    if worst_accuracy_m is None:
        return DEFAULT_CONFIDENCE
    for limit, confidence in CONFIDENCE_STEPS:
        if worst_accuracy_m < limit:
            return confidence
    return DEFAULT_CONFIDENCE


@dataclass(frozen=True)
class StrideCalibrator:
    """Turns distance and step count into a stride length.

    The step count is entered by the user rather than read from a sensor.
    """

    min_distance_m: float = 5.0
    min_steps: int = 5
    min_stride_m: float = 0.3
    max_stride_m: float = 1.5

    def calibrate(
        self,
        measured_distance_m: float,
        reported_steps: int,
        worst_accuracy_m: float | None = None,
    ) -> CalibrationResult:
        """Compute stride length and confidence, or a rejection.

        Args:
            measured_distance_m: Distance from the accumulator after the walk
            reported_steps: Steps counted by the user
            worst_accuracy_m: Largest GPS accuracy radius seen during the walk

        Returns:
            A CalibrationResult; nothing is persisted here.
        """
        if measured_distance_m < self.min_distance_m:
            return CalibrationResult.rejected(
                RejectionReason.DISTANCE_TOO_SHORT,
                f"Only {measured_distance_m:.1f} m measured; walk at least "
                f"{self.min_distance_m:g} m and try again.",
            )
        if reported_steps < self.min_steps:
            return CalibrationResult.rejected(
                RejectionReason.TOO_FEW_STEPS,
                f"Enter at least {self.min_steps} steps and try again.",
            )

        stride = measured_distance_m / reported_steps
        if stride < self.min_stride_m:
            return CalibrationResult.rejected(
                RejectionReason.STRIDE_TOO_SHORT,
                f"Calculated stride length ({stride:.2f} m) seems too short. "
                f"{STRIDE_GUIDANCE} Please check your step count.",
            )
        if stride > self.max_stride_m:
            return CalibrationResult.rejected(
                RejectionReason.STRIDE_TOO_LONG,
                f"Calculated stride length ({stride:.2f} m) seems too long. "
                f"{STRIDE_GUIDANCE} Please check your step count.",
            )

        return CalibrationResult(
            stride_length_m=stride,
            confidence=confidence_for_accuracy(worst_accuracy_m),
        )


class CalibrationWalk:
    """A single calibration run over live GPS fixes."""

    def __init__(
        self,
        calibrator: StrideCalibrator | None = None,
        noise_filter: NoiseFilter | None = None,
    ):
        self.calibrator = calibrator or StrideCalibrator()
        self.accumulator = DistanceAccumulator(noise_filter)

    @property
    def distance_m(self) -> float:
        return self.accumulator.total_m

    @property
    def signal_quality(self) -> SignalQuality:
        return self.accumulator.signal_quality

    def start(self) -> None:
        self.accumulator.reset()

    def ingest(self, fix: Coordinate) -> float | None:
        return self.accumulator.ingest(fix)

    def finish(self, reported_steps: int) -> CalibrationResult:
        return self.calibrator.calibrate(
            self.accumulator.total_m,
            reported_steps,
            self.accumulator.worst_accuracy_m,
        )


def build_profile(result: CalibrationResult, activity_type: ActivityType) -> CalibrationProfile:
    """Create a profile from a successful calibration."""
    if not result.ok:
        raise ValueError(f"Cannot build a profile from a rejected calibration: {result.message}")
    return CalibrationProfile(
        step_length_m=result.stride_length_m,
        activity_type=activity_type,
        confidence=result.confidence,
    )
