"""Shared CLI utilities."""

import asyncio
from dataclasses import dataclass, field
from functools import wraps
from pathlib import Path

import click

from ..config import Settings
from ..db.repositories import (
    ExerciseRepository,
    LiftLogRepository,
    PersonalRecordRepository,
    UserRepository,
)
from ..exercise_types.resolver import ExerciseTypeRegistry
from ..models.exercises import Exercise
from ..models.user import User
from ..services.lift_logging import LiftLogService
from ..utils.exercise_utils import find_matching_exercise


def async_command(f):
    """Decorator to run async Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


@dataclass
class AppContext:
    """Objects shared by every command, stored on ``ctx.obj``."""

    settings: Settings
    registry: ExerciseTypeRegistry = field(init=False)

    def __post_init__(self):
        self.registry = ExerciseTypeRegistry(self.settings)

    @property
    def data_dir(self) -> Path:
        return self.settings.data_dir

    @property
    def db_path(self) -> Path:
        return self.settings.db_path

    def users(self) -> UserRepository:
        return UserRepository(self.db_path)

    def exercises(self) -> ExerciseRepository:
        return ExerciseRepository(self.db_path)

    def lift_logs(self) -> LiftLogRepository:
        return LiftLogRepository(self.db_path)

    def records(self) -> PersonalRecordRepository:
        return PersonalRecordRepository(self.db_path)

    def lift_log_service(self) -> LiftLogService:
        return LiftLogService(self.registry, db_path=self.db_path)


def ensure_initialized(ctx: click.Context) -> AppContext:
    """Ensure the database is initialized and return the app context."""
    app: AppContext = ctx.obj
    if not app.db_path.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Project not initialized. Run 'lift-records init' first."
        )
        ctx.exit(1)
    return app


async def resolve_user(ctx: click.Context, name: str | None) -> User:
    """Look up a user by name, or the first user when no name is given."""
    app: AppContext = ctx.obj
    repo = app.users()
    user = await repo.get_by_name(name) if name else await repo.get_first()
    if user is None:
        echo_error(f"User '{name}' not found." if name else "No users found. Run 'lift-records init'.")
        ctx.exit(1)
    return user


async def resolve_exercise(ctx: click.Context, user: User, name: str) -> Exercise:
    """Find an exercise visible to the user by ID, title or alias."""
    app: AppContext = ctx.obj
    visible = await app.exercises().list_visible(user)
    if name.isdigit():
        match = next((e for e in visible if e.id == int(name)), None)
    else:
        match = find_matching_exercise(name, visible)
    if match is None:
        echo_error(f"Exercise '{name}' not found.")
        ctx.exit(1)
    return match


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = ["".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers))]
    lines.append("".join("-" * w + " " * padding for w in widths))
    for row in rows:
        lines.append("".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row)))

    return "\n".join(line.rstrip() for line in lines)
