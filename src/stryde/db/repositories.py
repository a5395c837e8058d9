"""Data access layer for stryde."""

import json
import time
from pathlib import Path

import aiosqlite

from ..models.activity import Activity
from ..models.calibration import ActivityType, CalibrationProfile
from ..models.goal import Goal, GoalType
from ..models.location import RoutePoint
from .engine import get_db_path


class CalibrationProfileRepository:
    """Repository for calibration profiles."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, profile: CalibrationProfile) -> str:
        """Store a new calibration profile."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO calibration_profiles
                (id, activity_type, step_length_m, confidence, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    profile.id,
                    profile.activity_type.value,
                    profile.step_length_m,
                    profile.confidence,
                    profile.created_at,
                    profile.updated_at,
                ),
            )
            await db.commit()
        return profile.id

    async def get(self, profile_id: str) -> CalibrationProfile | None:
        """Get a profile by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM calibration_profiles WHERE id = ?", (profile_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return CalibrationProfile.from_dict(dict(row))

    async def list_all(self) -> list[CalibrationProfile]:
        """List all profiles, most recently updated first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM calibration_profiles ORDER BY updated_at DESC"
            )
            rows = await cursor.fetchall()
            return [CalibrationProfile.from_dict(dict(row)) for row in rows]

    async def list_by_activity_type(self, activity_type: ActivityType) -> list[CalibrationProfile]:
        """List profiles for one activity type, most confident first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM calibration_profiles
                WHERE activity_type = ?
                ORDER BY confidence DESC, updated_at DESC
                """,
                (activity_type.value,),
            )
            rows = await cursor.fetchall()
            return [CalibrationProfile.from_dict(dict(row)) for row in rows]

    async def get_active(self, activity_type: ActivityType | None = None) -> CalibrationProfile | None:
        """The highest-confidence profile, optionally for one activity type."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            if activity_type is not None:
                cursor = await db.execute(
                    """
                    SELECT * FROM calibration_profiles WHERE activity_type = ?
                    ORDER BY confidence DESC, updated_at DESC LIMIT 1
                    """,
                    (activity_type.value,),
                )
            else:
                cursor = await db.execute(
                    """
                    SELECT * FROM calibration_profiles
                    ORDER BY confidence DESC, updated_at DESC LIMIT 1
                    """
                )
            row = await cursor.fetchone()
            if row is None:
                return None
            return CalibrationProfile.from_dict(dict(row))

    async def update(self, profile: CalibrationProfile) -> None:
        """Update an existing profile and bump its ``updated_at``."""
        if profile.id is None:
            raise ValueError("Profile must have an ID to update")

        profile.updated_at = int(time.time() * 1000)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE calibration_profiles SET
                    activity_type = ?, step_length_m = ?, confidence = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    profile.activity_type.value,
                    profile.step_length_m,
                    profile.confidence,
                    profile.updated_at,
                    profile.id,
                ),
            )
            await db.commit()

    async def delete(self, profile_id: str) -> None:
        """Delete a profile."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM calibration_profiles WHERE id = ?", (profile_id,))
            await db.commit()


class ActivityRepository:
    """Repository for tracked activities."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, activity: Activity) -> str:
        """Store a new activity."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO activities
                (id, profile_id, steps, distance_m, duration_ms, route_points,
                 elevation_gain_m, started_at, ended_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (activity.id, activity.profile_id, *self._mutable_fields(activity)),
            )
            await db.commit()
        return activity.id

    async def update(self, activity: Activity) -> None:
        """Write all mutable fields of an activity."""
        if activity.id is None:
            raise ValueError("Activity must have an ID to update")

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE activities SET
                    steps = ?, distance_m = ?, duration_ms = ?, route_points = ?,
                    elevation_gain_m = ?, started_at = ?, ended_at = ?
                WHERE id = ?
                """,
                (*self._mutable_fields(activity), activity.id),
            )
            await db.commit()

    async def get(self, activity_id: str) -> Activity | None:
        """Get an activity by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM activities WHERE id = ?", (activity_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_activity(row)

    async def get_active(self) -> Activity | None:
        """The newest activity that has not ended."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM activities WHERE ended_at IS NULL
                ORDER BY started_at DESC LIMIT 1
                """
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_activity(row)

    async def list_recent(self, limit: int | None = 50, offset: int = 0) -> list[Activity]:
        """Activities newest first; ``limit=None`` returns all."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            if limit is None:
                cursor = await db.execute(
                    "SELECT * FROM activities ORDER BY started_at DESC"
                )
            else:
                cursor = await db.execute(
                    "SELECT * FROM activities ORDER BY started_at DESC LIMIT ? OFFSET ?",
                    (limit, offset),
                )
            rows = await cursor.fetchall()
            return [self._row_to_activity(row) for row in rows]

    async def list_between(self, start_ms: int, end_ms: int) -> list[Activity]:
        """Activities started within ``[start_ms, end_ms]``, newest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM activities
                WHERE started_at >= ? AND started_at <= ?
                ORDER BY started_at DESC
                """,
                (start_ms, end_ms),
            )
            rows = await cursor.fetchall()
            return [self._row_to_activity(row) for row in rows]

    async def delete(self, activity_id: str) -> None:
        """Delete an activity."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM activities WHERE id = ?", (activity_id,))
            await db.commit()

    def _mutable_fields(self, activity: Activity) -> tuple:
        return (
            activity.steps,
            activity.distance_m,
            activity.duration_ms,
            json.dumps([p.to_dict() for p in activity.route_points]),
            activity.elevation_gain_m,
            activity.started_at,
            activity.ended_at,
        )

    def _row_to_activity(self, row: aiosqlite.Row) -> Activity:
        """Convert a database row to an Activity."""
        return Activity(
            id=row["id"],
            profile_id=row["profile_id"],
            steps=row["steps"],
            distance_m=row["distance_m"],
            duration_ms=row["duration_ms"],
            route_points=[RoutePoint.from_dict(p) for p in json.loads(row["route_points"])],
            elevation_gain_m=row["elevation_gain_m"],
            started_at=row["started_at"],
            ended_at=row["ended_at"],
        )


class GoalRepository:
    """Repository for goals."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def set_goal(self, goal: Goal) -> str:
        """Store a goal, replacing any goal with the same type and date."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "DELETE FROM goals WHERE type = ? AND date = ?",
                (goal.type.value, goal.date),
            )
            await db.execute(
                """
                INSERT INTO goals (id, type, target, current, date)
                VALUES (?, ?, ?, ?, ?)
                """,
                (goal.id, goal.type.value, goal.target, goal.current, goal.date),
            )
            await db.commit()
        return goal.id

    async def get(self, goal_id: str) -> Goal | None:
        """Get a goal by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM goals WHERE id = ?", (goal_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return Goal.from_dict(dict(row))

    async def update_progress(self, goal_id: str, current: float) -> None:
        """Set a goal's current progress."""
        if current < 0:
            raise ValueError("Goal progress must not be negative")
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "UPDATE goals SET current = ? WHERE id = ?", (current, goal_id)
            )
            await db.commit()

    async def list_all(self) -> list[Goal]:
        """All goals, newest period first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM goals ORDER BY date DESC")
            rows = await cursor.fetchall()
            return [Goal.from_dict(dict(row)) for row in rows]

    async def list_for_date(self, date: str) -> list[Goal]:
        """Goals keyed to an ISO date."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM goals WHERE date = ?", (date,))
            rows = await cursor.fetchall()
            return [Goal.from_dict(dict(row)) for row in rows]

    async def list_by_type(self, goal_type: GoalType) -> list[Goal]:
        """Goals of one type, newest period first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM goals WHERE type = ? ORDER BY date DESC",
                (goal_type.value,),
            )
            rows = await cursor.fetchall()
            return [Goal.from_dict(dict(row)) for row in rows]

    async def delete(self, goal_id: str) -> None:
        """Delete a goal."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM goals WHERE id = ?", (goal_id,))
            await db.commit()
