"""Lift logging commands."""

import re
from datetime import datetime

import click
import questionary

from ..errors import LiftRecordsError
from ..exercise_types.base import ExerciseTypeStrategy
from ..models.display import DisplayRow, RowKind
from ..models.user import User
from ..services.lift_logging import LoggedPerformance
from .base import (
    AppContext,
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    resolve_exercise,
    resolve_user,
)

SET_PATTERN = re.compile(r"^(?P<weight>\d+(?:\.\d+)?)\s*x\s*(?P<reps>\d+)(?:\s*x\s*(?P<count>\d+))?$")
BAND_PATTERN = re.compile(r"^(?P<color>[a-zA-Z]+)\s*[:x]\s*(?P<reps>\d+)$")
HOLD_PATTERN = re.compile(r"^(?P<seconds>\d+)s(?:\s*\+\s*(?P<weight>\d+(?:\.\d+)?))?$")
DISTANCE_PATTERN = re.compile(r"^(?P<meters>\d+)m$")

FIELD_PROMPTS = {
    "weight": "Weight",
    "reps": "Reps",
    "band_color": "Band color",
    "hold_seconds": "Hold (seconds)",
}


def parse_set_spec(spec: str) -> list[dict]:
    """Parse a --set value into raw set input.

    Accepted forms: ``135x5``, ``135x5x3`` (three sets), ``12`` (reps only),
    ``red:12`` (band and reps), ``45s`` or ``45s+25`` (hold, optional
    weight) and ``500m`` (distance).
    """
    text = spec.strip().lower()

    match = SET_PATTERN.match(text)
    if match:
        count = int(match["count"] or 1)
        return [{"weight": match["weight"], "reps": match["reps"]} for _ in range(count)]

    match = HOLD_PATTERN.match(text)
    if match:
        return [{"hold_seconds": match["seconds"], "weight": match["weight"]}]

    match = DISTANCE_PATTERN.match(text)
    if match:
        return [{"reps": match["meters"]}]

    match = BAND_PATTERN.match(text)
    if match:
        return [{"band_color": match["color"], "reps": match["reps"]}]

    if text.isdigit():
        return [{"reps": text}]

    raise click.BadParameter(f"Cannot parse set '{spec}'", param_hint="--set")


async def prompt_sets(strategy: ExerciseTypeStrategy, user: User) -> list[dict]:
    """Ask for sets interactively, one form field at a time."""
    fields = strategy.form_fields_for(user)
    sets: list[dict] = []
    while True:
        raw: dict = {}
        for name in fields:
            label = FIELD_PROMPTS.get(name, name)
            if name == "band_color":
                raw[name] = await questionary.select(
                    label, choices=strategy.settings.bands_by_order()
                ).ask_async()
            else:
                raw[name] = await questionary.text(f"{label}:").ask_async()
        sets.append(raw)
        if not await questionary.confirm("Add another set?", default=False).ask_async():
            return sets


def echo_rows(rows: list[DisplayRow]) -> None:
    """Print comparison rows grouped by section."""
    section = None
    for row in rows:
        if row.kind == RowKind.ACHIEVEMENT:
            click.echo(click.style(f"{row.label}: {row.value}", fg="green", bold=True))
            continue
        if row.section != section:
            section = row.section
            click.echo(click.style(section, bold=True))
        if row.kind == RowKind.FOOTER:
            click.echo(f"  {row.label}: lift-records {row.link}")
        elif row.comparison is not None:
            click.echo(f"  {row.label}: {row.value} (today: {row.comparison})")
        else:
            click.echo(f"  {row.label}: {row.value}")


def echo_performance(performance: LoggedPerformance, strategy: ExerciseTypeStrategy) -> None:
    lift_log = performance.lift_log
    echo_success(f"Logged {strategy.format_logged_item(lift_log)} (ID: {lift_log.id})")
    if performance.detection.is_pr:
        click.echo(click.style("New personal record!", fg="yellow", bold=True))
    echo_rows(performance.rows)
    if performance.hint:
        echo_info(performance.hint)


def _collect_raw_sets(
    set_specs: tuple[str, ...],
    band: str | None = None,
    reps: int | None = None,
    hold: int | None = None,
) -> list[dict]:
    raw_sets: list[dict] = []
    for spec in set_specs:
        raw_sets.extend(parse_set_spec(spec))
    if hold is not None:
        raw_sets.append({"hold_seconds": hold})
    elif band is not None or reps is not None:
        raw = {"reps": reps}
        if band is not None:
            raw["band_color"] = band
        raw_sets.append(raw)
    return raw_sets


@click.group()
def log():
    """Log performances and see the records they set."""
    pass


@log.command("add")
@click.argument("exercise_name")
@click.option("--set", "set_specs", multiple=True, help="A set, e.g. 135x5, 0x12 (bodyweight), red:12, 45s, 500m")
@click.option("--band", default=None, help="Band color for a single banded set")
@click.option("--reps", type=int, default=None, help="Reps for a single set given with --band")
@click.option("--hold", type=int, default=None, help="Hold seconds for a single static hold set")
@click.option("--user", "user_name", default=None, help="User name (defaults to the first user)")
@click.option("--date", "logged_at", type=click.DateTime(), default=None, help="When it was performed")
@click.option("--comment", default="", help="Comment for the whole session")
@click.pass_context
@async_command
async def add(
    ctx: click.Context,
    exercise_name: str,
    set_specs: tuple[str, ...],
    band: str | None,
    reps: int | None,
    hold: int | None,
    user_name: str | None,
    logged_at: datetime | None,
    comment: str,
):
    """Log a performance of EXERCISE_NAME.

    Without --set, --band, --reps or --hold the sets are asked for
    interactively.
    """
    app: AppContext = ensure_initialized(ctx)
    user = await resolve_user(ctx, user_name)
    exercise = await resolve_exercise(ctx, user, exercise_name)
    strategy = app.registry.resolve_safe(exercise)

    raw_sets = _collect_raw_sets(set_specs, band, reps, hold) or await prompt_sets(strategy, user)

    try:
        performance = await app.lift_log_service().record(
            user, exercise, raw_sets, logged_at=logged_at, comments=comment
        )
    except LiftRecordsError as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_performance(performance, strategy)


@log.command("edit")
@click.argument("lift_log_id", type=int)
@click.option("--set", "set_specs", multiple=True, required=True, help="Replacement sets")
@click.option("--user", "user_name", default=None, help="User name (defaults to the first user)")
@click.option("--date", "logged_at", type=click.DateTime(), default=None, help="New timestamp")
@click.option("--comment", default=None, help="New comment")
@click.pass_context
@async_command
async def edit(
    ctx: click.Context,
    lift_log_id: int,
    set_specs: tuple[str, ...],
    user_name: str | None,
    logged_at: datetime | None,
    comment: str | None,
):
    """Replace the sets of a logged performance and re-check records."""
    app: AppContext = ensure_initialized(ctx)
    user = await resolve_user(ctx, user_name)

    existing = await app.lift_logs().get(lift_log_id)
    if existing is None:
        echo_error(f"Lift log {lift_log_id} not found.")
        ctx.exit(1)
    exercise = await app.exercises().get(existing.exercise_id)
    strategy = app.registry.resolve_safe(exercise)

    try:
        performance = await app.lift_log_service().update(
            user,
            exercise,
            lift_log_id,
            _collect_raw_sets(set_specs),
            logged_at=logged_at,
            comments=comment,
        )
    except (LiftRecordsError, ValueError) as e:
        echo_error(str(e))
        ctx.exit(1)

    echo_performance(performance, strategy)


@log.command("delete")
@click.argument("lift_log_id", type=int)
@click.option("--user", "user_name", default=None, help="User name (defaults to the first user)")
@click.pass_context
@async_command
async def delete(ctx: click.Context, lift_log_id: int, user_name: str | None):
    """Delete a logged performance. Records it set stay in history."""
    app: AppContext = ensure_initialized(ctx)
    user = await resolve_user(ctx, user_name)

    if not await app.lift_log_service().delete(user, lift_log_id):
        echo_error(f"Lift log {lift_log_id} not found.")
        ctx.exit(1)
    echo_success(f"Deleted lift log {lift_log_id}")


@log.command("list")
@click.argument("exercise_name", required=False)
@click.option("--user", "user_name", default=None, help="User name (defaults to the first user)")
@click.option("--limit", default=20, show_default=True, help="Maximum number of logs")
@click.pass_context
@async_command
async def list_logs(
    ctx: click.Context, exercise_name: str | None, user_name: str | None, limit: int
):
    """List recent performances, optionally for one exercise."""
    app: AppContext = ensure_initialized(ctx)
    user = await resolve_user(ctx, user_name)
    exercise = await resolve_exercise(ctx, user, exercise_name) if exercise_name else None

    lift_logs = await app.lift_logs().list_for(
        user.id, exercise.id if exercise else None, limit=limit
    )
    if not lift_logs:
        echo_info("No logged performances.")
        return

    titles = {e.id: e for e in await app.exercises().list_visible(user)}
    rows = []
    for lift_log in lift_logs:
        logged_exercise = titles.get(lift_log.exercise_id) or await app.exercises().get(
            lift_log.exercise_id
        )
        strategy = app.registry.resolve_safe(logged_exercise)
        rows.append(
            [
                str(lift_log.id),
                lift_log.logged_at.strftime("%Y-%m-%d %H:%M"),
                logged_exercise.title,
                strategy.format_logged_item(lift_log),
            ]
        )
    click.echo(format_table(["ID", "Date", "Exercise", "Performance"], rows))
