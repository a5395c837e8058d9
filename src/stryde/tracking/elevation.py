"""Elevation statistics for recorded routes."""

from dataclasses import dataclass

from ..models.location import RoutePoint


@dataclass
class ElevationProfile:
    """Summary of elevation along a route (whole meters)."""

    total_gain: int = 0
    total_loss: int = 0
    min_elevation: int = 0
    max_elevation: int = 0
    average_elevation: int = 0


def _round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def elevation_profile(points: list[RoutePoint]) -> ElevationProfile:
    """Compute gain, loss and range over points that carry an elevation."""
    elevations = [p.elevation for p in points if p.elevation is not None]
    if not elevations:
        return ElevationProfile()

    gain = 0.0
    loss = 0.0
    for previous, current in zip(elevations, elevations[1:]):
        diff = current - previous
        if diff > 0:
            gain += diff
        else:
            loss -= diff

    return ElevationProfile(
        total_gain=_round_half_up(gain),
        total_loss=_round_half_up(loss),
        min_elevation=_round_half_up(min(elevations)),
        max_elevation=_round_half_up(max(elevations)),
        average_elevation=_round_half_up(sum(elevations) / len(elevations)),
    )


def smooth_elevations(values: list[float], window: int = 5) -> list[float]:
    """Centered moving average; shorter inputs are returned unchanged."""
    if len(values) < window:
        return list(values)

    half = window // 2
    smoothed = []
    for i in range(len(values)):
        lo = max(0, i - half)
        hi = min(len(values), i + half + 1)
        chunk = values[lo:hi]
        smoothed.append(sum(chunk) / len(chunk))
    return smoothed
