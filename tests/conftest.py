"""Pytest configuration and fixtures."""

import tempfile
from datetime import datetime
from pathlib import Path

import pytest
import pytest_asyncio

from lift_records.config import Settings
from lift_records.db import (
    ExerciseRepository,
    LiftLogRepository,
    UserRepository,
    init_db,
    seed_exercises,
)
from lift_records.exercise_types import ExerciseTypeRegistry
from lift_records.models.exercises import Exercise
from lift_records.models.lift_log import LiftLog, LiftSet
from lift_records.models.user import User
from lift_records.services.pr_detection import PRDetectionEngine


def make_log(
    user_id: int,
    exercise_id: int,
    sets: list[LiftSet],
    day: int = 1,
    lift_log_id: int | None = None,
) -> LiftLog:
    """Build a lift log dated January ``day``, 2024."""
    return LiftLog(
        id=lift_log_id,
        user_id=user_id,
        exercise_id=exercise_id,
        logged_at=datetime(2024, 1, day, 18, 0),
        sets=sets,
    )


def weighted(*pairs: tuple[float, int]) -> list[LiftSet]:
    """Sets from (weight, reps) pairs."""
    return [LiftSet(weight=w, reps=r) for w, r in pairs]


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def settings(temp_db_path):
    """Settings pointing at the temporary database."""
    return Settings(data_dir=temp_db_path.parent, db_filename=temp_db_path.name)


@pytest.fixture
def registry(settings):
    """Exercise type registry built from test settings."""
    return ExerciseTypeRegistry(settings)


@pytest.fixture
def sample_user():
    """An unsaved user with default preferences."""
    return User(name="Test User", id=1)


@pytest_asyncio.fixture
async def db_path(temp_db_path):
    """Initialized and seeded database."""
    await init_db(temp_db_path)
    await seed_exercises(temp_db_path)
    return temp_db_path


@pytest_asyncio.fixture
async def user(db_path):
    """A stored user."""
    repo = UserRepository(db_path)
    user = User(name="Test User")
    user.id = await repo.create(user)
    return user


@pytest_asyncio.fixture
async def library(db_path) -> dict[str, Exercise]:
    """Seeded exercises keyed by title."""
    return {e.title: e for e in await ExerciseRepository(db_path).list_all()}


@pytest.fixture
def engine(registry, db_path):
    """Detection engine over the test database."""
    return PRDetectionEngine(registry, db_path=db_path)


@pytest.fixture
def store_log(db_path):
    """Store a lift log and return it with its ID set."""
    repo = LiftLogRepository(db_path)

    async def _store(lift_log: LiftLog) -> LiftLog:
        lift_log.id = await repo.create(lift_log)
        return lift_log

    return _store
