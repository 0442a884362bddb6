"""Database engine setup and initialization."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from ..errors import PersistenceError

logger = logging.getLogger(__name__)

# Default data directory
DATA_DIR = Path(__file__).parent.parent.parent.parent / "data"


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "summit_lift.db"


@asynccontextmanager
async def connect(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    """Open a connection with foreign keys enforced and dict-like rows.

    Nothing is committed unless the caller commits, so a failure part-way
    through a batch leaves the store unchanged. Store errors surface as
    ``PersistenceError``.
    """
    try:
        async with aiosqlite.connect(db_path) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys = ON")
            yield db
    except aiosqlite.Error as e:
        logger.error("Database operation failed on %s: %s", db_path, e)
        raise PersistenceError(str(e)) from e


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with connect(db_path) as db:
        # Key/value user preferences
        await db.execute("""
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)

        # Canonical exercise definitions
        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercise_definitions (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                normalized_name TEXT UNIQUE NOT NULL,
                is_bodyweight INTEGER DEFAULT 0,
                bodyweight_factor REAL DEFAULT 1.0,
                bodyweight_kg REAL,
                created_at TIMESTAMP NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_plans (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT,
                is_active INTEGER DEFAULT 0,
                created_at TIMESTAMP NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS plan_phases (
                id TEXT PRIMARY KEY,
                plan_id TEXT NOT NULL,
                name TEXT NOT NULL,
                order_index INTEGER DEFAULT 0,
                is_active INTEGER DEFAULT 0,
                notes TEXT,
                created_at TIMESTAMP NOT NULL,
                FOREIGN KEY (plan_id) REFERENCES workout_plans(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS workouts (
                id TEXT PRIMARY KEY,
                plan_id TEXT NOT NULL,
                phase_id TEXT,
                name TEXT NOT NULL,
                notes TEXT,
                order_index INTEGER DEFAULT 0,
                FOREIGN KEY (plan_id) REFERENCES workout_plans(id) ON DELETE CASCADE,
                FOREIGN KEY (phase_id) REFERENCES plan_phases(id) ON DELETE CASCADE
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercise_templates (
                id TEXT PRIMARY KEY,
                workout_id TEXT NOT NULL,
                definition_id TEXT NOT NULL,
                target_weight REAL NOT NULL,
                target_reps_min INTEGER NOT NULL,
                target_reps_max INTEGER NOT NULL,
                number_of_sets INTEGER NOT NULL,
                notes TEXT,
                order_index INTEGER DEFAULT 0,
                created_at TIMESTAMP NOT NULL,
                FOREIGN KEY (workout_id) REFERENCES workouts(id) ON DELETE CASCADE,
                FOREIGN KEY (definition_id) REFERENCES exercise_definitions(id)
            )
        """)

        # Sessions keep snapshots of template ids/names instead of foreign keys
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_sessions (
                id TEXT PRIMARY KEY,
                workout_id TEXT NOT NULL,
                workout_name TEXT NOT NULL,
                plan_id TEXT NOT NULL,
                plan_name TEXT NOT NULL,
                phase_id TEXT,
                phase_name TEXT,
                date TIMESTAMP NOT NULL,
                is_completed INTEGER DEFAULT 0,
                completed_at TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercise_logs (
                id TEXT PRIMARY KEY,
                session_id TEXT NOT NULL,
                definition_id TEXT NOT NULL,
                exercise_name TEXT NOT NULL,
                weight REAL NOT NULL DEFAULT 0,
                reps TEXT NOT NULL DEFAULT '[]',
                notes TEXT,
                order_index INTEGER DEFAULT 0,
                is_bodyweight INTEGER DEFAULT 0,
                bodyweight_kg REAL,
                bodyweight_factor REAL,
                FOREIGN KEY (session_id) REFERENCES workout_sessions(id) ON DELETE CASCADE,
                FOREIGN KEY (definition_id) REFERENCES exercise_definitions(id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS body_weight_logs (
                id TEXT PRIMARY KEY,
                date TIMESTAMP NOT NULL,
                weight REAL NOT NULL,
                notes TEXT
            )
        """)

        # Create indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_phases_plan
            ON plan_phases(plan_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workouts_plan_phase
            ON workouts(plan_id, phase_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_templates_workout
            ON exercise_templates(workout_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_templates_definition
            ON exercise_templates(definition_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_sessions_plan
            ON workout_sessions(plan_id, is_completed, date)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_sessions_workout
            ON workout_sessions(workout_id, is_completed)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_logs_session
            ON exercise_logs(session_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_logs_definition
            ON exercise_logs(definition_id)
        """)

        await db.commit()
