"""Location data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinate:
    """A single normalized GPS fix."""

    latitude: float  # degrees
    longitude: float  # degrees
    accuracy_m: float = 0.0
    timestamp: int = 0  # epoch ms
    altitude_m: float | None = None


@dataclass
class RoutePoint:
    """A point on a recorded route."""

    latitude: float
    longitude: float
    timestamp: int
    elevation: float | None = None

    @classmethod
    def from_coordinate(cls, fix: Coordinate) -> "RoutePoint":
        """Create a route point from an accepted fix."""
        return cls(
            latitude=fix.latitude,
            longitude=fix.longitude,
            timestamp=fix.timestamp,
            elevation=fix.altitude_m,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        data = {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timestamp": self.timestamp,
        }
        if self.elevation is not None:
            data["elevation"] = self.elevation
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "RoutePoint":
        """Create from dictionary."""
        return cls(
            latitude=data["latitude"],
            longitude=data["longitude"],
            timestamp=data["timestamp"],
            elevation=data.get("elevation"),
        )
