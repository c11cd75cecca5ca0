"""Database layer for lift-records."""

from .engine import get_db_path, init_db, seed_exercises
from .repositories import (
    ExerciseRepository,
    LiftLogRepository,
    PersonalRecordRepository,
    PRStoreSession,
    UserRepository,
)

__all__ = [
    "ExerciseRepository",
    "get_db_path",
    "init_db",
    "LiftLogRepository",
    "PersonalRecordRepository",
    "PRStoreSession",
    "seed_exercises",
    "UserRepository",
]
