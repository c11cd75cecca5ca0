"""Exercise library commands."""

import click

from ..errors import LiftRecordsError
from ..models.exercises import Exercise, ExerciseType
from ..utils.exercise_utils import categorize_exercises_by_type
from .base import (
    AppContext,
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    resolve_user,
)


@click.group()
def exercises():
    """Manage the exercise library."""
    pass


@exercises.command("add")
@click.argument("title")
@click.option(
    "--type",
    "exercise_type",
    default=ExerciseType.REGULAR.value,
    show_default=True,
    help="Exercise type (" + ", ".join(t.value for t in ExerciseType) + ")",
)
@click.option("--alias", "aliases", multiple=True, help="Alternative name (repeatable)")
@click.option("--user", "user_name", default=None, help="Owner (defaults to the first user)")
@click.option("--global", "is_global", is_flag=True, help="Share with all users")
@click.pass_context
@async_command
async def add_exercise(
    ctx: click.Context,
    title: str,
    exercise_type: str,
    aliases: tuple[str, ...],
    user_name: str | None,
    is_global: bool,
):
    """Add an exercise. The type is checked strictly."""
    app: AppContext = ensure_initialized(ctx)
    user = None if is_global else await resolve_user(ctx, user_name)

    draft = Exercise(
        title=title,
        exercise_type=exercise_type,
        user_id=user.id if user else None,
        aliases=list(aliases),
    )
    try:
        strategy = app.registry.resolve_strict(draft)
    except LiftRecordsError as e:
        echo_error(str(e))
        ctx.exit(1)

    data = strategy.normalize_exercise_input(draft.to_dict())
    exercise = Exercise.from_dict(data)
    exercise_id = await app.exercises().create(exercise)
    echo_success(f"Added '{exercise.title}' as {strategy.display_name} (ID: {exercise_id})")


@exercises.command("list")
@click.option("--user", "user_name", default=None, help="Show exercises visible to this user")
@click.option("--type", "exercise_type", default=None, help="Only list one exercise type")
@click.pass_context
@async_command
async def list_exercises(ctx: click.Context, user_name: str | None, exercise_type: str | None):
    """List exercises grouped by type."""
    app: AppContext = ensure_initialized(ctx)
    user = await resolve_user(ctx, user_name)
    visible = await app.exercises().list_visible(user)

    if not visible:
        echo_info("No exercises found.")
        return

    for type_key, group in categorize_exercises_by_type(visible).items():
        if not group or (exercise_type and type_key != exercise_type):
            continue
        click.echo(click.style(f"\n{type_key}", bold=True))
        rows = [
            [str(e.id), e.title, "global" if e.is_global else "own", ", ".join(e.aliases)]
            for e in group
        ]
        click.echo(format_table(["ID", "Title", "Scope", "Aliases"], rows))
