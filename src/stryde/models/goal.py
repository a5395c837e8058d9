"""Goal model."""

from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4


class GoalType(str, Enum):
    """Supported goal kinds."""

    DAILY_STEPS = "daily_steps"
    WEEKLY_STEPS = "weekly_steps"
    DAILY_DISTANCE = "daily_distance"  # meters

    @property
    def is_weekly(self) -> bool:
        return self is GoalType.WEEKLY_STEPS

    @property
    def is_distance(self) -> bool:
        return self is GoalType.DAILY_DISTANCE


@dataclass
class Goal:
    """A target for one period.

    ``date`` is an ISO date string: the day for daily goals, the week
    start (Sunday) for weekly goals. At most one goal exists per
    ``(type, date)`` pair.
    """

    type: GoalType
    target: float
    date: str
    current: float = 0.0
    id: str = field(default_factory=lambda: uuid4().hex)

    def __post_init__(self):
        if self.target <= 0:
            raise ValueError("Goal target must be positive")
        if self.current < 0:
            raise ValueError("Goal current must not be negative")

    @property
    def is_complete(self) -> bool:
        return self.current >= self.target

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "type": self.type.value,
            "target": self.target,
            "current": self.current,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Goal":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            type=GoalType(data["type"]),
            target=data["target"],
            current=data.get("current", 0.0),
            date=data["date"],
        )
