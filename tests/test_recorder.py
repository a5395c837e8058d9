"""Tests for the live activity recorder."""

import asyncio

import aiosqlite
import pytest

from stryde.db import ActivityRepository
from stryde.models.activity import Activity
from stryde.services.recorder import ActivityRecorder
from stryde.tracking.clock import ManualClock
from stryde.tracking.location import ReplayLocationProvider
from stryde.tracking.session import ConcurrentSessionConflict, SessionState


class MemoryStore:
    """In-memory activity store."""

    def __init__(self):
        self.activities: dict[str, Activity] = {}
        self.writes = 0

    async def create(self, activity):
        self.activities[activity.id] = Activity.from_dict(activity.to_dict())
        self.writes += 1
        return activity.id

    async def update(self, activity):
        self.activities[activity.id] = Activity.from_dict(activity.to_dict())
        self.writes += 1

    async def delete(self, activity_id):
        self.activities.pop(activity_id, None)

    async def get_active(self):
        live = [a for a in self.activities.values() if a.ended_at is None]
        return max(live, key=lambda a: a.started_at) if live else None


class BrokenStore(MemoryStore):
    """Store whose updates always fail."""

    async def update(self, activity):
        raise aiosqlite.OperationalError("database is locked")


class FailingCreateStore(MemoryStore):
    """Store whose first create fails."""

    def __init__(self):
        super().__init__()
        self.create_calls = 0

    async def create(self, activity):
        self.create_calls += 1
        if self.create_calls == 1:
            raise aiosqlite.OperationalError("disk I/O error")
        return await super().create(activity)

    async def update(self, activity):
        # Like an UPDATE matching no row
        if activity.id in self.activities:
            await super().update(activity)


class TestActivityRecorder:
    """Tests for ActivityRecorder."""

    def test_lifecycle_is_persisted(self, clock, make_fix):
        store = MemoryStore()
        recorder = ActivityRecorder(store, clock=clock)

        async def run():
            activity = await recorder.start("profile-1")
            await recorder.record_fix(make_fix(0))
            await recorder.record_fix(make_fix(2))
            await recorder.record_steps(3)
            clock.advance(60_000)
            await recorder.end()
            return activity

        activity = asyncio.run(run())
        stored = store.activities[activity.id]
        assert stored.ended_at == clock.now()
        assert stored.steps == 3
        assert stored.duration_ms == 60_000
        assert stored.distance_m == pytest.approx(2.0, abs=1e-3)
        assert len(stored.route_points) == 1
        assert not recorder.unsynced
        assert not recorder.is_tracking

    def test_baseline_fix_is_not_written(self, clock, make_fix):
        store = MemoryStore()
        recorder = ActivityRecorder(store, clock=clock)

        async def run():
            await recorder.start("profile-1")
            return await recorder.record_fix(make_fix(0))

        assert asyncio.run(run()) is False
        assert store.writes == 1

    def test_second_start_conflicts(self, clock):
        recorder = ActivityRecorder(MemoryStore(), clock=clock)

        async def run():
            activity = await recorder.start("profile-1")
            with pytest.raises(ConcurrentSessionConflict) as exc_info:
                await recorder.start("profile-2")
            return activity, exc_info.value

        activity, error = asyncio.run(run())
        assert error.activity_id == activity.id
        assert recorder.activity.profile_id == "profile-1"

    def test_start_after_end(self, clock):
        recorder = ActivityRecorder(MemoryStore(), clock=clock)

        async def run():
            first = await recorder.start("profile-1")
            await recorder.end()
            second = await recorder.start("profile-1")
            return first, second

        first, second = asyncio.run(run())
        assert first.id != second.id
        assert recorder.is_tracking

    def test_failed_writes_keep_counting(self, clock, make_fix):
        """Storage errors are recorded but the live counters keep going."""
        recorder = ActivityRecorder(BrokenStore(), clock=clock)

        async def run():
            await recorder.start("profile-1")
            await recorder.record_fix(make_fix(0))
            await recorder.record_fix(make_fix(2))
            await recorder.record_fix(make_fix(4))
            await recorder.record_steps(10)

        asyncio.run(run())
        assert recorder.activity.distance_m == pytest.approx(4.0, abs=1e-3)
        assert recorder.activity.steps == 10
        assert recorder.unsynced
        assert [f.operation for f in recorder.failures] == ["record_fix", "record_fix", "record_steps"]
        assert "locked" in recorder.failures[0].error
        assert recorder.failures[0].activity_id == recorder.activity.id

    def test_discard(self, clock):
        store = MemoryStore()
        recorder = ActivityRecorder(store, clock=clock)

        async def run():
            await recorder.start("profile-1")
            await recorder.discard()

        asyncio.run(run())
        assert store.activities == {}
        assert recorder.activity is None
        assert not recorder.is_tracking

    def test_recover(self, clock):
        store = MemoryStore()
        interrupted = Activity(
            profile_id="profile-1",
            started_at=clock.now() - 600_000,
            distance_m=420.0,
            duration_ms=300_000,
        )
        store.activities[interrupted.id] = interrupted
        recorder = ActivityRecorder(store, clock=clock)

        session = asyncio.run(recorder.recover(paused=True))
        assert session.state is SessionState.PAUSED
        assert recorder.activity.id == interrupted.id
        assert recorder.is_tracking

    def test_recover_nothing(self, clock):
        recorder = ActivityRecorder(MemoryStore(), clock=clock)
        assert asyncio.run(recorder.recover()) is None

    def test_track_with_provider(self, make_fix):
        clock = ManualClock(0)
        store = MemoryStore()
        recorder = ActivityRecorder(store, clock=clock)
        payloads = [
            {"coords": {"latitude": make_fix(m).latitude, "longitude": 0.0, "accuracy": 5}, "timestamp": 1000 * i}
            for i, m in enumerate([0, 2, 4, 40, 6])
        ]
        provider = ReplayLocationProvider(payloads, clock=clock)
        seen = []

        async def on_fix(fix, accepted):
            seen.append(accepted)

        async def run():
            await recorder.start("profile-1")
            await recorder.track(provider, on_fix=on_fix)
            return await recorder.end()

        activity = asyncio.run(run())
        assert seen == [False, True, True, False, True]
        assert activity.distance_m == pytest.approx(6.0, abs=1e-3)
        assert activity.duration_ms == 4000

    def test_with_sqlite(self, db_path, clock, make_fix):
        repo = ActivityRepository(db_path)
        recorder = ActivityRecorder(repo, clock=clock)

        async def run():
            activity = await recorder.start("profile-1")
            await recorder.record_fix(make_fix(0, altitude=10.0))
            await recorder.record_fix(make_fix(2, altitude=12.0))
            stored_live = await repo.get_active()
            clock.advance(1000)
            await recorder.end()
            return activity, stored_live, await repo.get(activity.id)

        activity, stored_live, stored = asyncio.run(run())
        assert stored_live.id == activity.id
        assert stored.ended_at is not None
        assert stored.route_points[0].elevation == 12.0
        assert stored.elevation_gain_m == pytest.approx(2.0)


class TestUnfinishedInStorage:
    """Only one unfinished activity may exist, across restarts too."""

    def _interrupted(self, clock) -> Activity:
        return Activity(profile_id="profile-1", started_at=clock.now() - 600_000, distance_m=300.0)

    def test_start_refuses_stored_unfinished(self, clock):
        store = MemoryStore()
        interrupted = self._interrupted(clock)
        store.activities[interrupted.id] = interrupted
        recorder = ActivityRecorder(store, clock=clock)

        with pytest.raises(ConcurrentSessionConflict) as exc_info:
            asyncio.run(recorder.start("profile-1"))
        assert exc_info.value.activity_id == interrupted.id
        assert len(store.activities) == 1
        assert recorder.activity is None

    def test_start_after_recover_and_end(self, clock):
        store = MemoryStore()
        interrupted = self._interrupted(clock)
        store.activities[interrupted.id] = interrupted
        recorder = ActivityRecorder(store, clock=clock)

        async def run():
            await recorder.recover()
            await recorder.end()
            return await recorder.start("profile-1")

        activity = asyncio.run(run())
        unfinished = [a for a in store.activities.values() if a.ended_at is None]
        assert [a.id for a in unfinished] == [activity.id]

    def test_recover_while_tracking_conflicts(self, clock):
        store = MemoryStore()
        recorder = ActivityRecorder(store, clock=clock)

        async def run():
            activity = await recorder.start("profile-1")
            with pytest.raises(ConcurrentSessionConflict):
                await recorder.recover()
            return activity

        activity = asyncio.run(run())
        assert recorder.activity.id == activity.id

    def test_start_refuses_stored_unfinished_sqlite(self, db_path, clock):
        repo = ActivityRepository(db_path)
        interrupted = self._interrupted(clock)
        asyncio.run(repo.create(interrupted))

        with pytest.raises(ConcurrentSessionConflict):
            asyncio.run(ActivityRecorder(repo, clock=clock).start("profile-2"))

        everything = asyncio.run(repo.list_recent(limit=None))
        assert [a.id for a in everything if a.ended_at is None] == [interrupted.id]

        # A fresh recorder can pick it up and finish it
        recorder = ActivityRecorder(repo, clock=clock)

        async def finish_and_restart():
            await recorder.recover()
            await recorder.end()
            return await recorder.start("profile-2")

        new_activity = asyncio.run(finish_and_restart())
        assert asyncio.run(repo.get_active()).id == new_activity.id


class TestFailedCreate:
    """A failed create is retried so the activity still reaches storage."""

    def test_create_retried_on_next_write(self, clock, make_fix):
        store = FailingCreateStore()
        recorder = ActivityRecorder(store, clock=clock)

        async def run():
            activity = await recorder.start("profile-1")
            pending_after_start = recorder.unsynced
            await recorder.record_fix(make_fix(0))
            await recorder.record_fix(make_fix(2))
            clock.advance(30_000)
            await recorder.end()
            return activity, pending_after_start

        activity, pending_after_start = asyncio.run(run())
        assert pending_after_start
        assert [f.operation for f in recorder.failures] == ["create"]
        assert store.create_calls == 2
        stored = store.activities[activity.id]
        assert stored.ended_at == clock.now()
        assert stored.distance_m == pytest.approx(2.0, abs=1e-3)
        assert not recorder.unsynced

    def test_create_failing_until_end(self, clock):
        store = FailingCreateStore()
        recorder = ActivityRecorder(store, clock=clock)

        async def run():
            activity = await recorder.start("profile-1")
            clock.advance(1000)
            await recorder.end()
            return activity

        activity = asyncio.run(run())
        # The end write creates the row with the final state
        assert store.activities[activity.id].duration_ms == 1000
        assert not recorder.unsynced

    def test_discard_before_stored(self, clock):
        store = FailingCreateStore()
        recorder = ActivityRecorder(store, clock=clock)

        async def run():
            await recorder.start("profile-1")
            await recorder.discard()

        asyncio.run(run())
        assert store.activities == {}
        assert not recorder.unsynced
        assert [f.operation for f in recorder.failures] == ["create"]

    def test_sqlite_row_written_after_failed_create(self, db_path, clock, make_fix):
        repo = ActivityRepository(db_path)
        recorder = ActivityRecorder(repo, clock=clock)
        original_create = repo.create
        calls = []

        async def flaky_create(activity):
            calls.append(activity.id)
            if len(calls) == 1:
                raise aiosqlite.OperationalError("database is locked")
            return await original_create(activity)

        repo.create = flaky_create

        async def run():
            activity = await recorder.start("profile-1")
            await recorder.record_fix(make_fix(0))
            await recorder.record_fix(make_fix(3))
            await recorder.end()
            return await repo.get(activity.id)

        stored = asyncio.run(run())
        assert stored is not None
        assert stored.ended_at is not None
        assert stored.distance_m == pytest.approx(3.0, abs=1e-3)
