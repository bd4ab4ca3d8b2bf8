"""Shared state and helpers for CLI commands."""

import sys
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Callable, NoReturn, Optional

import click  # type: ignore[import-not-found]
from rich.console import Console  # type: ignore[import-not-found]
from rich.markup import escape  # type: ignore[import-not-found]

from timesheet.analysis.date_range import CUSTOM, DateRange, resolve_date_range
from timesheet.core.accounts import AccountManager
from timesheet.core.config import ConfigManager
from timesheet.core.errors import AuthenticationError, StorageError
from timesheet.core.models import User
from timesheet.core.storage import StorageManager
from timesheet.core.tracker import HoursTracker

console = Console()
error_console = Console(stderr=True)


def fail(message: Any) -> NoReturn:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {escape(str(message))}")
    sys.exit(1)


class TimesheetGroup(click.Group):
    """Root command group that reports unreadable data files as errors."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except StorageError as e:
            fail(e)


def get_config(ctx: click.Context) -> ConfigManager:
    """Get the ConfigManager loaded by the root command."""
    return ctx.find_root().obj["config"]


def format_day(ctx: click.Context, day: date) -> str:
    """Format a date with the configured general.date_format."""
    return day.strftime(get_config(ctx).date_format)


def get_storage(ctx: click.Context) -> StorageManager:
    """Get StorageManager for --data-dir, or the configured data directory."""
    obj = ctx.find_root().obj
    if "storage" not in obj:
        data_dir = obj.get("data_dir")
        obj["storage"] = StorageManager(
            Path(data_dir) if data_dir else get_config(ctx).data_dir
        )
    return obj["storage"]


def get_tracker(ctx: click.Context) -> HoursTracker:
    """Get HoursTracker using the configured category table."""
    return HoursTracker(get_storage(ctx), get_config(ctx).category_table())


def get_accounts(ctx: click.Context) -> AccountManager:
    """Get AccountManager using the configured password rules."""
    config = get_config(ctx)
    return AccountManager(
        get_storage(ctx),
        min_password_length=config.get("security.min_password_length", 6),
        hash_method=config.get("security.hash_method", "scrypt"),
    )


def login(ctx: click.Context, email: str, password: str) -> User:
    """Authenticate the acting user or exit."""
    try:
        return get_accounts(ctx).authenticate(email, password)
    except AuthenticationError as e:
        fail(e)


def auth_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the --user/--password options identifying the acting user."""
    func = click.option(
        "--password",
        envvar="TIMESHEET_PASSWORD",
        prompt=True,
        hide_input=True,
        help="Password of the acting user (or $TIMESHEET_PASSWORD)",
    )(func)
    func = click.option(
        "-u",
        "--user",
        "user_email",
        envvar="TIMESHEET_USER",
        required=True,
        help="Email of the acting user (or $TIMESHEET_USER)",
    )(func)
    return func


def parse_date(ctx: Optional[click.Context], param: Any, value: Optional[str]) -> Optional[date]:
    """Click callback accepting YYYY-MM-DD, 'today' or 'yesterday'."""
    if value is None:
        return None
    text = value.strip().lower()
    if text == "today":
        return date.today()
    if text == "yesterday":
        return date.today() - timedelta(days=1)
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a date (use YYYY-MM-DD)")


def parse_time(ctx: Optional[click.Context], param: Any, value: Optional[str]) -> Optional[time]:
    """Click callback accepting HH:MM."""
    if value is None:
        return None
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a time (use HH:MM)")


def resolve_user_id(ctx: click.Context, email: Optional[str]) -> Optional[str]:
    """Look up a user ID by email, exiting if the email is unknown."""
    if email is None:
        return None
    user = get_storage(ctx).get_user_by_email(email)
    if user is None:
        fail(f"No user with email {email}")
    return user.id


def user_names(ctx: click.Context) -> dict[str, str]:
    """Map user IDs to display names."""
    return {user.id: user.name for user in get_storage(ctx).list_users()}


def find_entry_id(ctx: click.Context, entry_ref: str) -> Optional[str]:
    """Expand a full or unique prefix entry ID.

    Returns:
        Full entry ID, or None if nothing matches

    Exits if the prefix matches more than one entry.
    """
    matches = [e.id for e in get_storage(ctx).list_time_entries() if e.id.startswith(entry_ref)]
    if entry_ref in matches:
        return entry_ref
    if len(matches) > 1:
        fail(f"Entry ID '{entry_ref}' is ambiguous ({len(matches)} matches)")
    return matches[0] if matches else None


def range_from_options(
    period: Optional[str],
    start: Optional[date],
    end: Optional[date],
) -> Optional[DateRange]:
    """Turn --period/--from/--to options into a date range.

    --from switches to a custom range ending --to (default: today).

    Returns:
        Resolved range, or None when no option was given
    """
    if end is not None and start is None:
        fail("--to requires --from")
    if start is not None:
        return resolve_date_range(CUSTOM, start, end or date.today())
    if period is not None:
        return resolve_date_range(period)
    return None
