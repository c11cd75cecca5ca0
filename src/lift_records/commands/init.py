"""Initialize project command."""

import click

from ..db import init_db, seed_exercises
from ..models.user import User
from .base import AppContext, async_command, echo_info, echo_success


@click.command()
@click.option("--user", "user_name", default="me", show_default=True, help="Name of the first user")
@click.pass_context
@async_command
async def init(ctx: click.Context, user_name: str):
    """Initialize the lift-records database.

    Creates the data directory, the SQLite schema, the global exercise
    library and a first user.
    """
    app: AppContext = ctx.obj
    echo_info(f"Initializing lift-records in {app.data_dir}")

    app.data_dir.mkdir(parents=True, exist_ok=True)
    await init_db(app.db_path)
    echo_success("Database initialized")

    added = await seed_exercises(app.db_path)
    echo_success(f"Exercise library populated ({added} new exercises)")

    users = app.users()
    if await users.get_by_name(user_name) is None:
        await users.create(User(name=user_name))
        echo_success(f"Created user '{user_name}'")

    click.echo()
    click.echo("lift-records is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo('  lift-records log add "Bench Press" --set 135x5 --set 135x5')
    click.echo('  lift-records records current "Bench Press"')
