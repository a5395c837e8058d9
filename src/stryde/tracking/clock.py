"""Clock sources and pause-aware elapsed time."""

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockSource(Protocol):
    """Anything that can report the current time in epoch milliseconds."""

    def now(self) -> int:
        ...


class SystemClock:
    """Wall clock."""

    def now(self) -> int:
        return int(time.time() * 1000)


class ManualClock:
    """Clock driven by hand, for tests and replays."""

    def __init__(self, start_ms: int = 0):
        self.current = start_ms

    def now(self) -> int:
        return self.current

    def set(self, ms: int) -> None:
        self.current = ms

    def advance(self, ms: int) -> int:
        self.current += ms
        return self.current


class SessionClock:
    """Active duration across pause/resume cycles.

    Paused time is only committed to ``total_paused_ms`` on ``resume()``;
    ``elapsed()`` subtracts the open pause interval as well, so the value
    freezes while paused.
    """

    def __init__(self, clock: ClockSource, started_at: int | None = None, base_elapsed_ms: int = 0):
        self.clock = clock
        self.started_at = clock.now() if started_at is None else started_at
        self.base_elapsed_ms = base_elapsed_ms
        self.paused_at: int | None = None
        self.total_paused_ms = 0

    @property
    def is_paused(self) -> bool:
        return self.paused_at is not None

    def pause(self) -> bool:
        """Open a pause interval. No-op when already paused."""
        if self.is_paused:
            return False
        self.paused_at = self.clock.now()
        return True

    def resume(self) -> bool:
        """Close the open pause interval. No-op when not paused."""
        if self.paused_at is None:
            return False
        self.total_paused_ms += max(0, self.clock.now() - self.paused_at)
        self.paused_at = None
        return True

    def elapsed(self, now: int | None = None) -> int:
        """Active milliseconds at ``now`` (defaults to the clock)."""
        if now is None:
            now = self.clock.now()
        open_pause = now - self.paused_at if self.paused_at is not None else 0
        active = (now - self.started_at) - self.total_paused_ms - open_pause
        return self.base_elapsed_ms + max(0, active)

    def close(self, ended_at: int) -> int:
        """Fold any open pause up to ``ended_at`` and return the final duration."""
        if self.paused_at is not None:
            self.total_paused_ms += max(0, ended_at - self.paused_at)
            self.paused_at = None
        return self.base_elapsed_ms + max(0, ended_at - self.started_at - self.total_paused_ms)
