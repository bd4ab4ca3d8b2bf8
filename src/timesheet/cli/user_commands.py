"""CLI commands for user administration."""

from typing import Optional

import click  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from timesheet.cli.helpers import (
    auth_options,
    console,
    fail,
    format_day,
    get_accounts,
    get_storage,
    login,
)
from timesheet.core.errors import TimesheetError
from timesheet.core.models import ROLES, User

ROLE_CHOICE = click.Choice(ROLES, case_sensitive=False)


def _target(ctx: click.Context, email: Optional[str], actor: User) -> User:
    """Resolve an optional target email (defaults to the acting user)."""
    if email is None:
        return actor
    user = get_storage(ctx).get_user_by_email(email)
    if user is None:
        fail(f"No user with email {email}")
    return user


@click.group()
def users() -> None:
    """Manage user accounts."""
    pass


@users.command("list")
@auth_options
@click.pass_context
def users_list(ctx: click.Context, user_email: str, password: str) -> None:
    """List users (administrators see everyone).

    Example:
        timesheet users list
    """
    actor = login(ctx, user_email, password)

    table = Table(title="Users")
    table.add_column("Email", style="cyan")
    table.add_column("Name")
    table.add_column("Role", style="magenta")
    table.add_column("Created", style="dim")

    for user in get_accounts(ctx).list_users(actor):
        table.add_row(user.email, user.name, user.role, format_day(ctx, user.created_at))

    console.print(table)


@users.command("add")
@auth_options
@click.argument("email")
@click.option("--name", help="Display name")
@click.option("--role", type=ROLE_CHOICE, default="user", help="Role (default: user)")
@click.option(
    "--new-password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Password for the new account",
)
@click.pass_context
def users_add(
    ctx: click.Context,
    user_email: str,
    password: str,
    email: str,
    name: Optional[str],
    role: str,
    new_password: str,
) -> None:
    """Add a user account (administrators only).

    Example:
        timesheet users add bob@example.com --name Bob --role user
    """
    actor = login(ctx, user_email, password)

    try:
        user = get_accounts(ctx).add_user(actor, email, new_password, name=name, role=role.lower())
    except TimesheetError as e:
        fail(e)

    console.print(f"[green]✓[/green] Added {user.email} ({user.role})")


@users.command("edit")
@auth_options
@click.argument("email", required=False)
@click.option("--name", help="New display name")
@click.option("--email", "new_email", help="New email address")
@click.option("--role", type=ROLE_CHOICE, help="New role (administrators only)")
@click.pass_context
def users_edit(
    ctx: click.Context,
    user_email: str,
    password: str,
    email: Optional[str],
    name: Optional[str],
    new_email: Optional[str],
    role: Optional[str],
) -> None:
    """Edit a profile. EMAIL defaults to the acting user.

    Example:
        timesheet users edit --name "Alice Smith"
        timesheet users edit bob@example.com --role admin
    """
    actor = login(ctx, user_email, password)
    target = _target(ctx, email, actor)

    try:
        user = get_accounts(ctx).update_profile(
            actor,
            target.id,
            name=name,
            email=new_email,
            role=role.lower() if role else None,
        )
    except TimesheetError as e:
        fail(e)

    if user is None:
        fail(f"No user with email {email}")
    console.print(f"[green]✓[/green] Updated {user.email}")
    console.print(f"  Name: {user.name}")
    console.print(f"  Role: {user.role}")


@users.command("passwd")
@auth_options
@click.argument("email", required=False)
@click.option(
    "--new-password",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="New password",
)
@click.pass_context
def users_passwd(
    ctx: click.Context,
    user_email: str,
    password: str,
    email: Optional[str],
    new_password: str,
) -> None:
    """Change a password. EMAIL defaults to the acting user.

    Administrators may reset other users' passwords.

    Example:
        timesheet users passwd
        timesheet users passwd bob@example.com
    """
    actor = login(ctx, user_email, password)
    target = _target(ctx, email, actor)

    try:
        changed = get_accounts(ctx).change_password(
            actor, target.id, new_password, current_password=password
        )
    except TimesheetError as e:
        fail(e)

    if not changed:
        fail(f"No user with email {email}")
    console.print(f"[green]✓[/green] Password changed for {target.email}")


@users.command("delete")
@auth_options
@click.argument("email")
@click.confirmation_option(prompt="Delete this user and all their time entries?")
@click.pass_context
def users_delete(ctx: click.Context, user_email: str, password: str, email: str) -> None:
    """Delete a user and their time entries (administrators only).

    Example:
        timesheet users delete bob@example.com --yes
    """
    actor = login(ctx, user_email, password)
    target = _target(ctx, email, actor)

    try:
        deleted = get_accounts(ctx).delete_user(actor, target.id)
    except TimesheetError as e:
        fail(e)

    if not deleted:
        fail(f"No user with email {email}")
    console.print(f"[green]✓[/green] Deleted {target.email}")
