"""Personal record commands."""

import click

from ..models.records import PR_TYPE_ORDER, PRType
from ..services.pr_detection import PRDetectionEngine
from ..services.pr_recalculation import PRRecalculationService
from .base import (
    AppContext,
    async_command,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_table,
    resolve_exercise,
    resolve_user,
)


@click.group()
def records():
    """View and rebuild personal records."""
    pass


@records.command("current")
@click.argument("exercise_name")
@click.option("--user", "user_name", default=None, help="User name (defaults to the first user)")
@click.pass_context
@async_command
async def current(ctx: click.Context, exercise_name: str, user_name: str | None):
    """Show the standing records for an exercise."""
    app: AppContext = ensure_initialized(ctx)
    user = await resolve_user(ctx, user_name)
    exercise = await resolve_exercise(ctx, user, exercise_name)
    strategy = app.registry.resolve_safe(exercise)

    standing = await app.records().current_for(user.id, exercise.id)
    if not standing:
        echo_info(f"No records yet for {exercise.title}.")
        return

    standing.sort(key=lambda r: (PR_TYPE_ORDER.index(r.pr_type), r.discriminator or 0))
    rows = [
        [
            strategy.record_label(r),
            strategy.format_record_value(r, r.value),
            r.achieved_at.strftime("%Y-%m-%d"),
        ]
        for r in standing
    ]
    click.echo(click.style(f"{exercise.title} records", bold=True))
    click.echo(format_table(["Record", "Value", "Achieved"], rows))


@records.command("history")
@click.argument("exercise_name", required=False)
@click.option("--exercise", "exercise_id", type=int, default=None, help="Exercise ID")
@click.option(
    "--type",
    "pr_type",
    type=click.Choice([t.value for t in PRType]),
    default=None,
    help="Only one record category",
)
@click.option("--user", "user_name", default=None, help="User name (defaults to the first user)")
@click.pass_context
@async_command
async def history(
    ctx: click.Context,
    exercise_name: str | None,
    exercise_id: int | None,
    pr_type: str | None,
    user_name: str | None,
):
    """Show every record ever set for an exercise, oldest first."""
    app: AppContext = ensure_initialized(ctx)
    user = await resolve_user(ctx, user_name)
    if exercise_name is None and exercise_id is None:
        raise click.UsageError("Give an exercise name or --exercise ID")
    exercise = await resolve_exercise(ctx, user, exercise_name or str(exercise_id))
    strategy = app.registry.resolve_safe(exercise)

    all_records = await app.records().history(
        user.id, exercise.id, PRType(pr_type) if pr_type else None
    )
    if not all_records:
        echo_info(f"No records yet for {exercise.title}.")
        return

    rows = []
    for r in all_records:
        previous = (
            strategy.format_record_value(r, r.previous_value)
            if r.previous_value is not None
            else "first"
        )
        rows.append(
            [
                r.achieved_at.strftime("%Y-%m-%d"),
                strategy.record_label(r),
                strategy.format_record_value(r, r.value),
                previous,
                str(r.lift_log_id),
            ]
        )
    click.echo(click.style(f"{exercise.title} record history", bold=True))
    click.echo(format_table(["Date", "Record", "Value", "Previous", "Log"], rows))


@records.command("recalculate")
@click.option("--user", "user_name", default=None, help="Only this user")
@click.option("--exercise", "exercise_name", default=None, help="Only this exercise")
@click.option("--dry-run", is_flag=True, help="Report what would be rebuilt without writing")
@click.option("--force", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
@async_command
async def recalculate(
    ctx: click.Context,
    user_name: str | None,
    exercise_name: str | None,
    dry_run: bool,
    force: bool,
):
    """Rebuild record history by replaying logs in date order."""
    app: AppContext = ensure_initialized(ctx)

    user_id = None
    exercise_id = None
    if user_name or exercise_name:
        user = await resolve_user(ctx, user_name)
        user_id = user.id
        if exercise_name:
            exercise_id = (await resolve_exercise(ctx, user, exercise_name)).id

    if not dry_run and not force:
        click.confirm("This deletes and rebuilds personal records. Continue?", abort=True)

    service = PRRecalculationService(PRDetectionEngine(app.registry, records=app.records()))
    summaries = await service.recalculate_all(user_id, exercise_id, dry_run=dry_run)

    if not summaries:
        echo_warning("No logged performances to recalculate.")
        return

    rows = [
        [
            str(s.user_id),
            str(s.exercise_id),
            str(s.logs_processed),
            str(s.records_removed),
            "-" if dry_run else str(s.records_created),
        ]
        for s in summaries
    ]
    click.echo(format_table(["User", "Exercise", "Logs", "Removed", "Created"], rows))
    if dry_run:
        echo_info("Dry run: nothing was changed.")
    else:
        echo_success(f"Recalculated {len(summaries)} exercise histories")
