"""End-to-end activity recording against SQLite.

Run with: pytest integration_tests/ -v -m integration
"""

import asyncio

import pytest

from stryde.db import ActivityRepository, CalibrationProfileRepository, GoalRepository
from stryde.models.calibration import ActivityType
from stryde.models.goal import GoalType
from stryde.services.calibration import CalibrationWalk, build_profile
from stryde.services.goals import GoalService
from stryde.services.recorder import ActivityRecorder
from stryde.services.statistics import StreakCalculator
from stryde.tracking.clock import ManualClock
from stryde.tracking.location import ReplayLocationProvider
from stryde.tracking.noise import NoiseFilter
from stryde.tracking.session import ActivitySession, SessionState
from stryde.utils.dates import local_date

METERS_PER_DEGREE = 111_194.93
START_MS = 1_710_144_000_000  # 2024-03-11 08:00 UTC
SECOND = 1000


def payload(meters_north: float, timestamp: int, accuracy: float = 5.0) -> dict:
    return {
        "coords": {"latitude": meters_north / METERS_PER_DEGREE, "longitude": 0.0, "accuracy": accuracy},
        "timestamp": timestamp,
    }


class TestActivityFlow:
    """Calibrate, record with a pause, then report."""

    def test_calibrate_record_and_report(self, db_path):
        profile_repo = CalibrationProfileRepository(db_path)
        activity_repo = ActivityRepository(db_path)
        goal_repo = GoalRepository(db_path)

        # Calibration walk: 50 m in 64 steps
        clock = ManualClock(START_MS - 3600 * SECOND)
        walk = CalibrationWalk()
        walk.start()
        provider = ReplayLocationProvider(
            [payload(i, clock.now() + i * SECOND, accuracy=4.0) for i in range(51)]
        )

        async def calibrate_walk(fix):
            walk.ingest(fix)

        asyncio.run(provider.subscribe(calibrate_walk))
        result = walk.finish(64)
        assert result.ok
        profile = build_profile(result, ActivityType.WALKING)
        asyncio.run(profile_repo.create(profile))

        # 10 segments of 62 m, a 2 minute pause, then 5 segments of 36 m
        clock = ManualClock(START_MS)
        recorder = ActivityRecorder(
            activity_repo, clock=clock, noise_filter=NoiseFilter(max_delta_m=100.0)
        )
        first_leg = [payload(62 * i, START_MS + 20 * SECOND * i) for i in range(11)]
        resume_at = START_MS + 320 * SECOND
        second_leg = [payload(620 + 36 * j, resume_at + 20 * SECOND * j) for j in range(1, 6)]

        async def record():
            active = await profile_repo.get_active(ActivityType.WALKING)
            await recorder.start(active.id)
            await recorder.track(ReplayLocationProvider(first_leg, clock=clock))
            await recorder.pause()

            clock.set(START_MS + 260 * SECOND)
            interrupted = await activity_repo.get_active()
            clock.set(resume_at)
            await recorder.resume()

            await recorder.track(ReplayLocationProvider(second_leg, clock=clock))
            await recorder.derive_steps(active.step_length_m)
            await recorder.end()
            return interrupted, await activity_repo.get(recorder.activity.id)

        interrupted, stored = asyncio.run(record())

        assert interrupted.ended_at is None
        assert interrupted.distance_m == pytest.approx(620.0, abs=0.01)
        assert stored.distance_m == pytest.approx(800.0, abs=0.01)
        # 420 s elapsed minus the 120 s pause
        assert stored.duration_ms == 300 * SECOND
        assert len(stored.route_points) == 15
        assert stored.ended_at == START_MS + 420 * SECOND
        # 800 m / (50 m / 64 steps) = 1024
        assert stored.steps in (1023, 1024)
        assert not recorder.unsynced

        # Reporting
        day = local_date(stored.started_at)
        service = GoalService(goal_repo, activity_repo)
        asyncio.run(service.ensure_period_goals(day))
        asyncio.run(service.refresh_progress())
        daily = [g for g in asyncio.run(goal_repo.list_for_date(day.isoformat()))
                 if g.type == GoalType.DAILY_DISTANCE]
        assert daily[0].current == pytest.approx(800.0, abs=0.01)

        streaks = StreakCalculator().calculate([stored], today=day)
        assert streaks.current_streak == 1

    def test_crash_recovery(self, db_path):
        activity_repo = ActivityRepository(db_path)
        clock = ManualClock(START_MS)

        async def crash():
            recorder = ActivityRecorder(activity_repo, clock=clock, noise_filter=NoiseFilter(max_delta_m=100.0))
            await recorder.start("profile-1")
            await recorder.track(
                ReplayLocationProvider([payload(50 * i, START_MS + 15 * SECOND * i) for i in range(5)], clock=clock)
            )

        asyncio.run(crash())

        # The app comes back ten minutes later
        clock.set(START_MS + 660 * SECOND)
        recorder = ActivityRecorder(activity_repo, clock=clock)

        async def recover():
            session = await recorder.recover()
            clock.advance(30 * SECOND)
            await recorder.end()
            return session

        session = asyncio.run(recover())
        assert isinstance(session, ActivitySession)
        assert session.state is SessionState.ENDED

        stored = asyncio.run(activity_repo.get(session.activity.id))
        assert stored.distance_m == pytest.approx(200.0, abs=0.01)
        # 60 s recorded before the crash plus 30 s after recovery
        assert stored.duration_ms == 90 * SECOND
        assert asyncio.run(activity_repo.get_active()) is None
