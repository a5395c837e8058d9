"""Database engine setup and initialization."""

import os
from pathlib import Path

import aiosqlite

# Default data directory
DATA_DIR = Path(__file__).parent.parent.parent.parent / "data"

DATA_DIR_ENV = "STRYDE_DATA_DIR"


def get_data_dir() -> Path:
    """Get the data directory, honouring ``STRYDE_DATA_DIR``."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return DATA_DIR


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "stryde.db"


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS calibration_profiles (
                id TEXT PRIMARY KEY NOT NULL,
                activity_type TEXT NOT NULL
                    CHECK(activity_type IN ('walking', 'running', 'hiking')),
                step_length_m REAL NOT NULL CHECK(step_length_m > 0),
                confidence REAL NOT NULL CHECK(confidence >= 0 AND confidence <= 1),
                created_at INTEGER NOT NULL,
                updated_at INTEGER NOT NULL
            )
        """)

        # ended_at IS NULL marks an in-progress or interrupted activity
        await db.execute("""
            CREATE TABLE IF NOT EXISTS activities (
                id TEXT PRIMARY KEY NOT NULL,
                profile_id TEXT NOT NULL,
                steps INTEGER NOT NULL DEFAULT 0,
                distance_m REAL NOT NULL DEFAULT 0,
                duration_ms INTEGER NOT NULL DEFAULT 0,
                route_points TEXT NOT NULL DEFAULT '[]',
                elevation_gain_m REAL NOT NULL DEFAULT 0,
                started_at INTEGER NOT NULL,
                ended_at INTEGER
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS goals (
                id TEXT PRIMARY KEY NOT NULL,
                type TEXT NOT NULL
                    CHECK(type IN ('daily_steps', 'weekly_steps', 'daily_distance')),
                target REAL NOT NULL,
                current REAL NOT NULL DEFAULT 0,
                date TEXT NOT NULL
            )
        """)

        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_activities_profile_id
            ON activities(profile_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_activities_started_at
            ON activities(started_at)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_goals_date
            ON goals(date)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_goals_type
            ON goals(type)
        """)

        await db.commit()
