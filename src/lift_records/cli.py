"""CLI entry point for lift-records."""

from pathlib import Path

import click

from .commands import exercises, init, log, records, users
from .commands.base import AppContext
from .config import get_settings
from .log_config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="lift-records")
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="LIFT_RECORDS_DATA_DIR",
    default=None,
    help="Directory holding the database",
)
@click.option("--log-level", default=None, help="Override LIFT_RECORDS_LOG_LEVEL")
@click.pass_context
def main(ctx: click.Context, data_dir: Path | None, log_level: str | None):
    """lift-records: strength training log with personal record tracking.

    Every logged performance is checked against your standing records for
    that exercise. New bests are stored with a link to the record they beat.

    Example usage:

        # Initialize the database
        lift-records init

        # Log sets
        lift-records log add "Bench Press" --set 135x5 --set 135x5

        # Review records
        lift-records records current "Bench Press"
        lift-records records history "Bench Press"
    """
    settings = get_settings()
    updates = {}
    if data_dir is not None:
        updates["data_dir"] = data_dir
    if log_level:
        updates["log_level"] = log_level
    if updates:
        settings = settings.model_copy(update=updates)

    setup_logging(settings.log_format, settings.log_level)
    ctx.obj = AppContext(settings=settings)


main.add_command(init)
main.add_command(users)
main.add_command(exercises)
main.add_command(log)
main.add_command(records)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
