"""User management commands."""

import click

from ..models.user import User, UserPreferences
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


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


@click.group()
def users():
    """Manage users and their preferences."""
    pass


@users.command("add")
@click.argument("name")
@click.option("--hide-global", is_flag=True, help="Only show exercises the user created")
@click.option("--no-extra-weight", is_flag=True, help="Do not ask for added weight on bodyweight exercises")
@click.pass_context
@async_command
async def add_user(ctx: click.Context, name: str, hide_global: bool, no_extra_weight: bool):
    """Add a user."""
    app: AppContext = ensure_initialized(ctx)
    repo = app.users()

    if await repo.get_by_name(name) is not None:
        echo_error(f"User '{name}' already exists.")
        ctx.exit(1)

    preferences = UserPreferences(
        show_global_exercises=not hide_global,
        show_extra_weight=not no_extra_weight,
    )
    user_id = await repo.create(User(name=name, preferences=preferences))
    echo_success(f"Created user '{name}' (ID: {user_id})")


@users.command("list")
@click.pass_context
@async_command
async def list_users(ctx: click.Context):
    """List users and their preferences."""
    app: AppContext = ensure_initialized(ctx)
    all_users = await app.users().list_all()

    if not all_users:
        echo_info("No users found.")
        return

    rows = [
        [
            str(u.id),
            u.name,
            _yes_no(u.preferences.show_global_exercises),
            _yes_no(u.preferences.show_extra_weight),
            _yes_no(u.preferences.prefill_suggested_values),
        ]
        for u in all_users
    ]
    click.echo(format_table(["ID", "Name", "Global", "Extra weight", "Prefill"], rows))


@users.command("prefs")
@click.argument("name")
@click.option("--show-global/--hide-global", default=None, help="Show global exercises")
@click.option("--extra-weight/--no-extra-weight", default=None, help="Ask for added weight on bodyweight exercises")
@click.option("--prefill/--no-prefill", default=None, help="Prefill suggested values when logging")
@click.pass_context
@async_command
async def prefs(
    ctx: click.Context,
    name: str,
    show_global: bool | None,
    extra_weight: bool | None,
    prefill: bool | None,
):
    """Show or change a user's preferences."""
    app: AppContext = ensure_initialized(ctx)
    user = await resolve_user(ctx, name)
    preferences = user.preferences

    changed = False
    if show_global is not None:
        preferences.show_global_exercises = show_global
        changed = True
    if extra_weight is not None:
        preferences.show_extra_weight = extra_weight
        changed = True
    if prefill is not None:
        preferences.prefill_suggested_values = prefill
        changed = True

    if changed:
        await app.users().update(user)
        echo_success(f"Updated preferences for '{user.name}'")

    for key, value in preferences.to_dict().items():
        click.echo(f"  {key}: {_yes_no(value)}")
