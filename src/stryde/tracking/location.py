"""Location provider boundary.

Platform payloads are normalized into ``Coordinate`` here; nothing past
this module looks at raw payload shapes.
"""

import json
import logging
import math
from pathlib import Path
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

from ..models.location import Coordinate
from .clock import ManualClock

logger = logging.getLogger(__name__)

FixCallback = Callable[[Coordinate], Awaitable[None]]


def _pick(data: dict, *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def coordinate_from_payload(payload: dict) -> Coordinate:
    """Normalize a location payload.

    Accepts the nested ``{"coords": {...}, "timestamp": ...}`` shape
    emitted by mobile location APIs and a flat
    ``{"latitude": ..., "longitude": ...}`` shape. A missing accuracy is
    treated as unknown (infinitely bad).

    Raises:
        ValueError: If coordinates or timestamp are missing or invalid.
    """
    coords = payload.get("coords", payload)
    if not isinstance(coords, dict):
        raise ValueError("Location payload 'coords' must be a mapping")

    latitude = _pick(coords, "latitude", "lat")
    longitude = _pick(coords, "longitude", "lon", "lng")
    timestamp = _pick(payload, "timestamp", "time")
    if timestamp is None:
        timestamp = _pick(coords, "timestamp", "time")
    if latitude is None or longitude is None:
        raise ValueError("Location payload is missing latitude/longitude")
    if timestamp is None:
        raise ValueError("Location payload is missing a timestamp")

    latitude = float(latitude)
    longitude = float(longitude)
    if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
        raise ValueError(f"Coordinates out of range: {latitude}, {longitude}")

    accuracy = _pick(coords, "accuracy", "accuracy_m", "accuracyMeters")
    accuracy = math.inf if accuracy is None else float(accuracy)
    if accuracy < 0:
        raise ValueError("Accuracy must not be negative")

    altitude = _pick(coords, "altitude", "altitude_m", "elevation")

    return Coordinate(
        latitude=latitude,
        longitude=longitude,
        accuracy_m=accuracy,
        timestamp=int(timestamp),
        altitude_m=float(altitude) if altitude is not None else None,
    )


def load_payloads(path: Path) -> list[dict]:
    """Load recorded location payloads from a JSON file.

    The file holds either a list of payloads or ``{"fixes": [...]}``.
    """
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        data = data.get("fixes", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of location payloads")
    return data


@runtime_checkable
class LocationProvider(Protocol):
    """Source of GPS fixes.

    Permission prompts and subscription setup live outside the core;
    the core only consumes the callback.
    """

    async def subscribe(self, callback: FixCallback) -> None:
        """Deliver fixes to ``callback`` until stopped."""
        ...

    def stop(self) -> None:
        """Stop delivering fixes."""
        ...


class ReplayLocationProvider:
    """Replays recorded payloads in order.

    When a ``ManualClock`` is given it is moved to each fix's timestamp
    before delivery, so sessions see recorded time instead of wall time.
    Malformed payloads are logged and skipped.
    """

    def __init__(self, payloads: list[dict], clock: ManualClock | None = None):
        self.payloads = payloads
        self.clock = clock
        self.delivered = 0
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def subscribe(self, callback: FixCallback) -> None:
        for payload in self.payloads[self.delivered:]:
            if self._stopped:
                break
            self.delivered += 1
            try:
                fix = coordinate_from_payload(payload)
            except ValueError as exc:
                logger.warning("Skipping malformed location payload: %s", exc)
                continue
            if self.clock is not None:
                self.clock.set(fix.timestamp)
            await callback(fix)

    def stop(self) -> None:
        self._stopped = True
