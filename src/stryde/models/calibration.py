"""Calibration profile model."""

import time
from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4


class ActivityType(str, Enum):
    """Kind of movement a stride length was calibrated for."""

    WALKING = "walking"
    RUNNING = "running"
    HIKING = "hiking"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class CalibrationProfile:
    """Stride length measured during one calibration walk.

    Several profiles may exist per activity type; the one with the
    highest confidence is treated as active.
    """

    step_length_m: float
    activity_type: ActivityType
    confidence: float  # 0.0 - 1.0
    id: str = field(default_factory=lambda: uuid4().hex)
    created_at: int = field(default_factory=_now_ms)
    updated_at: int = field(default_factory=_now_ms)

    def __post_init__(self):
        if self.step_length_m <= 0:
            raise ValueError("step_length_m must be positive")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be between 0 and 1")

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "step_length_m": self.step_length_m,
            "activity_type": self.activity_type.value,
            "confidence": self.confidence,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CalibrationProfile":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            step_length_m=data["step_length_m"],
            activity_type=ActivityType(data["activity_type"]),
            confidence=data["confidence"],
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )

    def get_summary(self) -> str:
        """Human-readable one-line summary."""
        return (
            f"{self.activity_type.value}: {self.step_length_m:.2f} m/step "
            f"({self.confidence * 100:.0f}% confidence)"
        )
