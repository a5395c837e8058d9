"""Activity record model."""

from dataclasses import dataclass, field
from uuid import uuid4

from .location import RoutePoint


@dataclass
class Activity:
    """A tracked session as stored.

    ``ended_at is None`` marks an in-progress or interrupted session.
    Units: meters, milliseconds, steps.
    """

    profile_id: str
    started_at: int  # epoch ms
    steps: int = 0
    distance_m: float = 0.0
    duration_ms: int = 0
    route_points: list[RoutePoint] = field(default_factory=list)
    elevation_gain_m: float = 0.0
    ended_at: int | None = None
    id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def is_finished(self) -> bool:
        return self.ended_at is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage or export."""
        return {
            "id": self.id,
            "profile_id": self.profile_id,
            "steps": self.steps,
            "distance_m": self.distance_m,
            "duration_ms": self.duration_ms,
            "route_points": [p.to_dict() for p in self.route_points],
            "elevation_gain_m": self.elevation_gain_m,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Activity":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            profile_id=data["profile_id"],
            steps=data.get("steps", 0),
            distance_m=data.get("distance_m", 0.0),
            duration_ms=data.get("duration_ms", 0),
            route_points=[RoutePoint.from_dict(p) for p in data.get("route_points", [])],
            elevation_gain_m=data.get("elevation_gain_m", 0.0),
            started_at=data["started_at"],
            ended_at=data.get("ended_at"),
        )
