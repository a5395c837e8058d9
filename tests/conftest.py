"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from stryde.db import init_db
from stryde.models.activity import Activity
from stryde.models.location import Coordinate
from stryde.tracking.clock import ManualClock

# Meters per degree of latitude on the haversine sphere
METERS_PER_DEGREE = 111_194.93

T0 = int(datetime(2024, 3, 11, 8, 0, tzinfo=timezone.utc).timestamp() * 1000)


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def db_path(temp_db_path):
    """A temporary database with the schema created."""
    asyncio.run(init_db(temp_db_path))
    return temp_db_path


@pytest.fixture
def clock():
    return ManualClock(T0)


@pytest.fixture
def make_fix():
    """Build a fix ``meters_north`` of the origin on the equator."""

    def _make(meters_north: float, timestamp: int = T0, accuracy: float = 3.0, altitude=None):
        return Coordinate(
            latitude=meters_north / METERS_PER_DEGREE,
            longitude=0.0,
            accuracy_m=accuracy,
            timestamp=timestamp,
            altitude_m=altitude,
        )

    return _make


@pytest.fixture
def make_activity():
    """Build a completed activity starting at a UTC datetime."""

    def _make(started: datetime, steps: int = 1000, distance_m: float = 800.0,
              duration_ms: int = 600_000, finished: bool = True, route_points=None):
        started_at = int(started.replace(tzinfo=timezone.utc).timestamp() * 1000)
        return Activity(
            profile_id="profile-1",
            started_at=started_at,
            steps=steps,
            distance_m=distance_m,
            duration_ms=duration_ms,
            route_points=route_points or [],
            ended_at=started_at + duration_ms if finished else None,
        )

    return _make
