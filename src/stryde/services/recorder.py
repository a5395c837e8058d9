"""Live recording: one ActivitySession mirrored into storage.

In-memory state is updated first and then written. A failed write is
logged and remembered, never rolled back, so the live counters keep
working while storage is unavailable.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

import aiosqlite

from ..models.activity import Activity
from ..models.location import Coordinate
from ..tracking.clock import ClockSource, SystemClock
from ..tracking.location import LocationProvider
from ..tracking.noise import NoiseFilter
from ..tracking.session import ActivitySession, ConcurrentSessionConflict

logger = logging.getLogger(__name__)


class ActivityStore(Protocol):
    """The subset of ActivityRepository the recorder needs."""

    async def create(self, activity: Activity) -> str: ...

    async def update(self, activity: Activity) -> None: ...

    async def delete(self, activity_id: str) -> None: ...

    async def get_active(self) -> Activity | None: ...


@dataclass
class PersistenceFailure:
    """A write that did not reach storage."""

    operation: str
    activity_id: str | None
    error: str


class ActivityRecorder:
    """Owns the single live session.

    Pass one recorder to everything that records activities. ``start()``
    raises ConcurrentSessionConflict while its session is live or while
    storage still holds an unfinished activity from an earlier run.
    """

    def __init__(
        self,
        store: ActivityStore,
        clock: ClockSource | None = None,
        noise_filter: NoiseFilter | None = None,
    ):
        self.store = store
        self.clock = clock or SystemClock()
        self.noise_filter = noise_filter
        self.session: ActivitySession | None = None
        self.failures: list[PersistenceFailure] = []
        # False until the live activity's row exists in the store
        self._stored = False
        self._pending = False

    @property
    def is_tracking(self) -> bool:
        return self.session is not None and self.session.is_live

    @property
    def unsynced(self) -> bool:
        """True while the latest state of the live activity is not in storage."""
        return self._pending

    @property
    def activity(self) -> Activity | None:
        return self.session.activity if self.session else None

    def _ensure_idle(self) -> None:
        if self.is_tracking:
            raise ConcurrentSessionConflict(self.session.activity.id)

    async def start(self, profile_id: str) -> Activity:
        """Start a new activity session.

        Raises:
            ConcurrentSessionConflict: If this recorder is tracking, or storage
                still holds an unfinished activity (recover or discard it first).
        """
        self._ensure_idle()
        existing = await self.store.get_active()
        if existing is not None:
            raise ConcurrentSessionConflict(existing.id)

        session = ActivitySession(clock=self.clock, noise_filter=self.noise_filter)
        activity = session.start(profile_id)
        self.session = session
        self._stored = False
        await self._persist("create")
        return activity

    async def recover(self, paused: bool = False) -> ActivitySession | None:
        """Resume tracking the interrupted activity found in storage.

        Returns:
            The rebuilt session, or None when nothing was interrupted.

        Raises:
            ConcurrentSessionConflict: If this recorder is already tracking.
        """
        self._ensure_idle()
        activity = await self.store.get_active()
        if activity is None:
            return None
        self.session = ActivitySession.recover(
            activity, clock=self.clock, noise_filter=self.noise_filter, paused=paused
        )
        self._stored = True
        self._pending = False
        return self.session

    async def pause(self) -> bool:
        if self.session is None or not self.session.pause():
            return False
        await self._persist("pause")
        return True

    async def resume(self) -> bool:
        if self.session is None or not self.session.resume():
            return False
        await self._persist("resume")
        return True

    async def record_fix(self, fix: Coordinate) -> bool:
        """Feed a fix; storage is only touched when the route grew."""
        if self.session is None or not self.session.record_fix(fix):
            return False
        await self._persist("record_fix")
        return True

    async def record_steps(self, delta: int) -> bool:
        if self.session is None or not self.session.record_steps(delta):
            return False
        await self._persist("record_steps")
        return True

    async def set_steps(self, steps: int) -> bool:
        if self.session is None or not self.session.set_absolute_steps(steps):
            return False
        await self._persist("set_steps")
        return True

    async def derive_steps(self, stride_length_m: float) -> bool:
        if self.session is None or not self.session.derive_steps(stride_length_m):
            return False
        await self._persist("derive_steps")
        return True

    async def end(self) -> Activity | None:
        """Finalize the live activity."""
        if self.session is None:
            return None
        activity = self.session.end()
        if activity is None:
            return None
        await self._persist("end")
        return activity

    async def discard(self) -> None:
        """Drop the live activity from memory and storage."""
        if self.session is None or self.session.activity is None:
            return
        activity_id = self.session.activity.id
        stored = self._stored
        self.session = None
        self._stored = False
        self._pending = False
        if stored:
            await self._write("discard", self.store.delete, activity_id, activity_id=activity_id)

    async def track(
        self,
        provider: LocationProvider,
        on_fix: Callable[[Coordinate, bool], Awaitable[None]] | None = None,
    ) -> None:
        """Consume fixes from a provider until it stops.

        Stopping the provider leaves the session as it is.
        """

        async def handle(fix: Coordinate) -> None:
            accepted = await self.record_fix(fix)
            if on_fix is not None:
                await on_fix(fix, accepted)

        await provider.subscribe(handle)

    async def _persist(self, operation: str) -> None:
        """Write the current snapshot, creating the row if an earlier create failed."""
        activity = self.session.snapshot()
        if self._stored:
            ok = await self._write(operation, self.store.update, activity)
        else:
            ok = await self._write(operation, self.store.create, activity)
            self._stored = ok
        self._pending = not ok

    async def _write(self, operation: str, func, *args, activity_id: str | None = None) -> bool:
        if activity_id is None and args and isinstance(args[0], Activity):
            activity_id = args[0].id
        try:
            await func(*args)
        except (aiosqlite.Error, OSError) as exc:
            logger.warning(
                "Could not persist %s for activity %s: %s", operation, activity_id, exc
            )
            self.failures.append(PersistenceFailure(operation, activity_id, str(exc)))
            return False
        return True
