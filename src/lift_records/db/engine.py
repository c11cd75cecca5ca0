"""Database engine setup and initialization."""

import json
from pathlib import Path

import aiosqlite

from ..config import get_settings


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    settings = get_settings()
    if data_dir is None:
        data_dir = settings.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / settings.db_filename


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT UNIQUE NOT NULL,
                preferences TEXT DEFAULT '{}',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # user_id NULL marks a global exercise
        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercises (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                exercise_type TEXT,
                user_id INTEGER,
                is_bodyweight INTEGER DEFAULT 0,
                band_type TEXT,
                aliases TEXT DEFAULT '[]',
                FOREIGN KEY (user_id) REFERENCES users(id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS lift_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                exercise_id INTEGER NOT NULL,
                logged_at TIMESTAMP NOT NULL,
                comments TEXT DEFAULT '',
                deleted_at TIMESTAMP,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (user_id) REFERENCES users(id),
                FOREIGN KEY (exercise_id) REFERENCES exercises(id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS lift_sets (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                lift_log_id INTEGER NOT NULL,
                position INTEGER NOT NULL,
                weight REAL,
                reps INTEGER,
                hold_seconds INTEGER,
                band_color TEXT,
                notes TEXT DEFAULT '',
                FOREIGN KEY (lift_log_id) REFERENCES lift_logs(id) ON DELETE CASCADE
            )
        """)

        # Append-only; previous_pr_id UNIQUE means a record is superseded at most once
        await db.execute("""
            CREATE TABLE IF NOT EXISTS personal_records (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                exercise_id INTEGER NOT NULL,
                lift_log_id INTEGER NOT NULL,
                pr_type TEXT NOT NULL,
                discriminator REAL,
                discriminator_key TEXT NOT NULL DEFAULT '',
                value REAL NOT NULL,
                achieved_at TIMESTAMP NOT NULL,
                previous_pr_id INTEGER UNIQUE,
                previous_value REAL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (lift_log_id) REFERENCES lift_logs(id),
                FOREIGN KEY (previous_pr_id) REFERENCES personal_records(id)
            )
        """)

        # Explicit head pointer for each supersession chain
        await db.execute("""
            CREATE TABLE IF NOT EXISTS current_records (
                user_id INTEGER NOT NULL,
                exercise_id INTEGER NOT NULL,
                pr_type TEXT NOT NULL,
                discriminator_key TEXT NOT NULL DEFAULT '',
                record_id INTEGER NOT NULL UNIQUE,
                PRIMARY KEY (user_id, exercise_id, pr_type, discriminator_key),
                FOREIGN KEY (record_id) REFERENCES personal_records(id)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS pr_detection_runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                lift_log_id INTEGER NOT NULL,
                fingerprint TEXT NOT NULL,
                trigger TEXT NOT NULL,
                snapshot TEXT DEFAULT '{}',
                new_pr_types TEXT DEFAULT '[]',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (lift_log_id, fingerprint),
                FOREIGN KEY (lift_log_id) REFERENCES lift_logs(id)
            )
        """)

        # Create indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_lift_logs_user_exercise
            ON lift_logs(user_id, exercise_id, logged_at)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_lift_sets_log
            ON lift_sets(lift_log_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_personal_records_user_exercise
            ON personal_records(user_id, exercise_id, pr_type)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_personal_records_log
            ON personal_records(lift_log_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_exercises_title
            ON exercises(title)
        """)

        await db.commit()


async def seed_exercises(db_path: Path | None = None) -> int:
    """Seed the database with the global exercise library.

    Returns the number of exercises added; existing titles are skipped.
    """
    from ..models.exercises import COMMON_EXERCISES

    if db_path is None:
        db_path = get_db_path()

    added = 0
    async with aiosqlite.connect(db_path) as db:
        for exercise in COMMON_EXERCISES:
            cursor = await db.execute(
                "SELECT 1 FROM exercises WHERE title = ? AND user_id IS NULL",
                (exercise.title,),
            )
            if await cursor.fetchone() is not None:
                continue
            data = exercise.to_dict()
            await db.execute(
                """
                INSERT INTO exercises
                (title, exercise_type, user_id, is_bodyweight, band_type, aliases)
                VALUES (?, ?, NULL, ?, ?, ?)
                """,
                (
                    data["title"],
                    data["exercise_type"],
                    int(data["is_bodyweight"]),
                    data["band_type"],
                    json.dumps(data["aliases"]),
                ),
            )
            added += 1

        await db.commit()
    return added
