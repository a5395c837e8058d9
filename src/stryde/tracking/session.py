"""Live activity session state machine.

States: ``idle -> active <-> paused -> ended``. Illegal pause/resume or
recording calls are no-ops so duplicate UI events are harmless; only
``start()`` on a live session is a hard error.
"""

import logging
import math
from enum import Enum

from ..models.activity import Activity
from ..models.location import Coordinate, RoutePoint
from .accumulator import DistanceAccumulator, SignalQuality
from .clock import ClockSource, SessionClock, SystemClock
from .noise import NoiseFilter

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle state of an activity session."""

    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    ENDED = "ended"


class ConcurrentSessionConflict(Exception):
    """A session is already active or paused."""

    def __init__(self, activity_id: str | None):
        self.activity_id = activity_id
        super().__init__(
            f"Activity {activity_id} is still in progress; end or discard it first"
        )


class SessionEnded(Exception):
    """The session has already ended and cannot be restarted."""


class ActivitySession:
    """One tracked activity: distance, active time, steps and elevation."""

    def __init__(
        self,
        clock: ClockSource | None = None,
        noise_filter: NoiseFilter | None = None,
    ):
        self.clock = clock or SystemClock()
        self.accumulator = DistanceAccumulator(noise_filter)
        self.state = SessionState.IDLE
        self.activity: Activity | None = None
        self.session_clock: SessionClock | None = None
        self._base_distance_m = 0.0
        self._last_elevation: float | None = None

    @classmethod
    def recover(
        cls,
        activity: Activity,
        clock: ClockSource | None = None,
        noise_filter: NoiseFilter | None = None,
        paused: bool = False,
    ) -> "ActivitySession":
        """Rebuild a live session from an interrupted activity record.

        The persisted ``duration_ms`` and ``distance_m`` become the base
        values; timing restarts now with no paused time and the distance
        accumulator starts without a baseline. Any downtime between the
        last write and this call is not counted, and a pause that was open
        at crash time is lost. Storage does not record whether the session
        was paused, so the caller decides through ``paused``.
        """
        if activity.ended_at is not None:
            raise SessionEnded(f"Activity {activity.id} has already ended")

        session = cls(clock=clock, noise_filter=noise_filter)
        session.activity = activity
        session.session_clock = SessionClock(
            session.clock,
            started_at=session.clock.now(),
            base_elapsed_ms=activity.duration_ms,
        )
        session._base_distance_m = activity.distance_m
        if activity.route_points:
            session._last_elevation = activity.route_points[-1].elevation
        session.state = SessionState.ACTIVE
        if paused:
            session.pause()
        logger.info("Recovered activity %s in %s state", activity.id, session.state.value)
        return session

    @property
    def is_live(self) -> bool:
        """True while active or paused."""
        return self.state in (SessionState.ACTIVE, SessionState.PAUSED)

    @property
    def signal_quality(self) -> SignalQuality:
        return self.accumulator.signal_quality

    def start(self, profile_id: str) -> Activity:
        """Begin a new activity with zeroed counters."""
        if self.is_live:
            raise ConcurrentSessionConflict(self.activity.id if self.activity else None)
        if self.state is SessionState.ENDED:
            raise SessionEnded("Session has ended; create a new session to start again")

        now = self.clock.now()
        self.activity = Activity(profile_id=profile_id, started_at=now)
        self.session_clock = SessionClock(self.clock, started_at=now)
        self.accumulator.reset()
        self._base_distance_m = 0.0
        self._last_elevation = None
        self.state = SessionState.ACTIVE
        logger.debug("Started activity %s", self.activity.id)
        return self.activity

    def pause(self) -> bool:
        if self.state is not SessionState.ACTIVE:
            return False
        self.session_clock.pause()
        self.state = SessionState.PAUSED
        return True

    def resume(self) -> bool:
        if self.state is not SessionState.PAUSED:
            return False
        self.session_clock.resume()
        self.state = SessionState.ACTIVE
        return True

    def record_fix(self, fix: Coordinate) -> bool:
        """Feed a GPS fix. Returns True when it was added to the route."""
        if self.state is not SessionState.ACTIVE:
            return False

        is_baseline = self.accumulator.last_accepted is None
        delta = self.accumulator.ingest(fix)
        if is_baseline:
            self._last_elevation = fix.altitude_m
            return False
        if delta is None:
            return False

        self.activity.distance_m = self._base_distance_m + self.accumulator.total_m
        self.activity.route_points.append(RoutePoint.from_coordinate(fix))

        if fix.altitude_m is not None:
            if self._last_elevation is not None and fix.altitude_m > self._last_elevation:
                self.activity.elevation_gain_m += fix.altitude_m - self._last_elevation
            self._last_elevation = fix.altitude_m
        return True

    def record_steps(self, delta: int) -> bool:
        """Add an incremental step count."""
        if self.state is not SessionState.ACTIVE:
            return False
        if delta < 0:
            raise ValueError("Step delta must not be negative")
        self.activity.steps += int(delta)
        return True

    def set_absolute_steps(self, steps: int) -> bool:
        """Replace the step count, e.g. with a stride-derived total."""
        if self.state is not SessionState.ACTIVE:
            return False
        if steps < 0:
            raise ValueError("Step count must not be negative")
        self.activity.steps = int(steps)
        return True

    def derive_steps(self, stride_length_m: float) -> bool:
        """Set steps from distance using a calibrated stride length."""
        if self.state is not SessionState.ACTIVE or stride_length_m <= 0:
            return False
        return self.set_absolute_steps(math.floor(self.activity.distance_m / stride_length_m))

    def elapsed_ms(self) -> int:
        """Current active duration; frozen once ended."""
        if self.activity is None:
            return 0
        if self.state is SessionState.ENDED:
            return self.activity.duration_ms
        return self.session_clock.elapsed()

    def snapshot(self) -> Activity | None:
        """The live activity with ``duration_ms`` brought up to date."""
        if self.activity is None:
            return None
        if self.is_live:
            self.activity.duration_ms = self.session_clock.elapsed()
        return self.activity

    def end(self) -> Activity | None:
        """Finalize the activity. An open pause is closed at the end time."""
        if not self.is_live:
            return None
        ended_at = self.clock.now()
        self.activity.duration_ms = self.session_clock.close(ended_at)
        self.activity.ended_at = ended_at
        self.state = SessionState.ENDED
        logger.debug(
            "Ended activity %s: %.1f m in %d ms",
            self.activity.id,
            self.activity.distance_m,
            self.activity.duration_ms,
        )
        return self.activity
