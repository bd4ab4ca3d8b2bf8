"""Command-line entry point for the timesheet tool."""

import json
from datetime import date, time
from pathlib import Path
from typing import Optional

import click  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from timesheet import __version__
from timesheet.analysis.date_range import PERIODS, resolve_date_range
from timesheet.analysis.reports import ReportGenerator, format_hours, format_time_span
from timesheet.cli.config_commands import config
from timesheet.cli.data_commands import data
from timesheet.cli.helpers import (
    TimesheetGroup,
    auth_options,
    console,
    error_console,
    fail,
    find_entry_id,
    format_day,
    get_accounts,
    get_config,
    get_tracker,
    login,
    parse_date,
    parse_time,
    range_from_options,
    resolve_user_id,
    user_names,
)
from timesheet.cli.user_commands import users
from timesheet.core.config import ConfigManager
from timesheet.core.errors import TimesheetError
from timesheet.core.models import Viewer
from timesheet.logging_config import setup_logging

PERIOD_CHOICE = click.Choice(PERIODS, case_sensitive=False)


@click.group(cls=TimesheetGroup)
@click.version_option(version=__version__)
@click.option("--data-dir", help="Custom data directory", type=click.Path())
@click.option(
    "--config",
    "config_path",
    envvar="TIMESHEET_CONFIG",
    help="Configuration file (default: ~/.timesheet/config.yml)",
    type=click.Path(dir_okay=False),
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to the console")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(
    ctx: click.Context,
    data_dir: Optional[str],
    config_path: Optional[str],
    verbose: bool,
    no_color: bool,
) -> None:
    """Timesheet - Work hours logging and reporting.

    Log hours against categories, then summarize them by period.
    """
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir

    if no_color:
        console.no_color = True
        error_console.no_color = True

    try:
        config_mgr = ConfigManager(Path(config_path) if config_path else None)
    except ValueError as e:
        # The corrupted file was replaced by defaults; reload them
        error_console.print(f"[yellow]Warning:[/yellow] {e}")
        config_mgr = ConfigManager(Path(config_path) if config_path else None)
    ctx.obj["config"] = config_mgr

    setup_logging(
        level=config_mgr.get("advanced.log_level", "WARNING"),
        log_file=config_mgr.get("advanced.log_file"),
        verbose=verbose,
    )


@cli.command()
@click.argument("email")
@click.option("--name", help="Display name (default: part of email before '@')")
@click.password_option(help="Password for the new account")
@click.pass_context
def register(ctx: click.Context, email: str, name: Optional[str], password: str) -> None:
    """Create an account. The first account becomes an administrator.

    Example:
        timesheet register alice@example.com --name "Alice"
    """
    try:
        user = get_accounts(ctx).register(email, password, name=name)
    except TimesheetError as e:
        fail(e)

    console.print(f"[green]✓[/green] Registered {user.email} ({user.role})")


@cli.command()
@auth_options
@click.option(
    "--date",
    "entry_date",
    callback=parse_date,
    default="today",
    help="Day worked (YYYY-MM-DD, 'today', 'yesterday')",
)
@click.option("--start", "start_time", callback=parse_time, help="Start time (HH:MM)")
@click.option("--end", "end_time", callback=parse_time, help="End time (HH:MM)")
@click.option("--hours", type=float, help="Hours worked (when no start/end time)")
@click.option("-c", "--category", required=True, help="Category")
@click.option("-s", "--subcategory", required=True, help="Subcategory")
@click.option("-d", "--description", required=True, help="What was done")
@click.option("--for", "for_email", help="Log hours for another user (admins only)")
@click.pass_context
def add(
    ctx: click.Context,
    user_email: str,
    password: str,
    entry_date: date,
    start_time: Optional[time],
    end_time: Optional[time],
    hours: Optional[float],
    category: str,
    subcategory: str,
    description: str,
    for_email: Optional[str],
) -> None:
    """Log a time entry.

    Example:
        timesheet add --start 09:00 --end 17:00 -c Development \\
            -s "Code Review" -d "Reviewed pull requests"
        timesheet add --date yesterday --hours 2.5 -c Leave -s "Sick Leave" -d "Doctor"
    """
    actor = login(ctx, user_email, password)
    owner_id = resolve_user_id(ctx, for_email) or actor.id

    try:
        entry = get_tracker(ctx).create_entry(
            owner_id,
            entry_date,
            category,
            subcategory,
            description,
            start_time=start_time,
            end_time=end_time,
            hours=hours,
            viewer=Viewer.for_user(actor),
        )
    except TimesheetError as e:
        fail(e)

    day = format_day(ctx, entry.date)
    console.print(f"[green]✓[/green] Logged {format_hours(entry.hours)} on {day}")
    console.print(f"  Category: {entry.category} / {entry.subcategory}")
    console.print(f"  ID: {entry.id}")


@cli.command()
@auth_options
@click.option("-p", "--period", type=PERIOD_CHOICE, help="Reporting period")
@click.option("--from", "start", callback=parse_date, help="First day (YYYY-MM-DD)")
@click.option("--to", "end", callback=parse_date, help="Last day (YYYY-MM-DD)")
@click.option("--only", "only_email", help="Only entries of this user (admins)")
@click.option("-n", "--limit", type=int, default=20, help="Number of entries to show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def log(
    ctx: click.Context,
    user_email: str,
    password: str,
    period: Optional[str],
    start: Optional[date],
    end: Optional[date],
    only_email: Optional[str],
    limit: int,
    as_json: bool,
) -> None:
    """Show logged time entries, newest first.

    Example:
        timesheet log
        timesheet log --period last-week
        timesheet log --from 2025-01-01 --to 2025-01-31 --json
    """
    actor = login(ctx, user_email, password)
    viewer = Viewer.for_user(actor)
    date_range = range_from_options(period, start, end)

    entries = get_tracker(ctx).list_entries(
        viewer,
        date_range=date_range,
        user_id=resolve_user_id(ctx, only_email),
        limit=limit,
    )

    if as_json:
        click.echo(json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False))
        return

    if not entries:
        console.print("[yellow]No entries found[/yellow]")
        return

    names = user_names(ctx) if viewer.is_privileged else None

    table = Table(title=date_range.label if date_range else "Time Entries")
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Time", style="dim")
    if names is not None:
        table.add_column("User", style="green")
    table.add_column("Category", style="cyan")
    table.add_column("Subcategory", style="blue")
    table.add_column("Hours", style="magenta", justify="right")
    table.add_column("Description")

    for entry in entries:
        row = [entry.id[:8], format_day(ctx, entry.date), format_time_span(entry)]
        if names is not None:
            row.append(names.get(entry.user_id, entry.user_id))
        row += [entry.category, entry.subcategory, format_hours(entry.hours), entry.description]
        table.add_row(*row)

    console.print(table)


@cli.command()
@auth_options
@click.argument("entry_id")
@click.option("--date", "entry_date", callback=parse_date, help="New date")
@click.option("--start", "start_time", callback=parse_time, help="New start time (HH:MM)")
@click.option("--end", "end_time", callback=parse_time, help="New end time (HH:MM)")
@click.option("--hours", type=float, help="New hours (entries without start/end time)")
@click.option("--clear-times", is_flag=True, help="Remove start/end times (use with --hours)")
@click.option("-c", "--category", help="New category")
@click.option("-s", "--subcategory", help="New subcategory")
@click.option("-d", "--description", help="New description")
@click.pass_context
def edit(
    ctx: click.Context,
    user_email: str,
    password: str,
    entry_id: str,
    entry_date: Optional[date],
    start_time: Optional[time],
    end_time: Optional[time],
    hours: Optional[float],
    clear_times: bool,
    category: Optional[str],
    subcategory: Optional[str],
    description: Optional[str],
) -> None:
    """Edit an existing time entry.

    ENTRY_ID may be abbreviated to any unique prefix.

    Example:
        timesheet edit 3fa85f64 --end 18:00
        timesheet edit 3fa85f64 -c Development -s "Code Review"
    """
    actor = login(ctx, user_email, password)
    full_id = find_entry_id(ctx, entry_id)
    if full_id is None:
        fail(f"Entry not found: {entry_id}")

    try:
        entry = get_tracker(ctx).update_entry(
            full_id,
            entry_date=entry_date,
            category=category,
            subcategory=subcategory,
            description=description,
            start_time=start_time,
            end_time=end_time,
            hours=hours,
            clear_times=clear_times,
            viewer=Viewer.for_user(actor),
        )
    except TimesheetError as e:
        fail(e)

    if entry is None:
        fail(f"Entry not found: {entry_id}")

    console.print(f"[green]✓[/green] Updated entry {entry.id[:8]}")
    day = format_day(ctx, entry.date)
    console.print(f"  {day} {format_time_span(entry)} {format_hours(entry.hours)}")
    console.print(f"  Category: {entry.category} / {entry.subcategory}")


@cli.command()
@auth_options
@click.argument("entry_id")
@click.confirmation_option(prompt="Delete this entry?")
@click.pass_context
def delete(ctx: click.Context, user_email: str, password: str, entry_id: str) -> None:
    """Delete a time entry.

    Example:
        timesheet delete 3fa85f64 --yes
    """
    actor = login(ctx, user_email, password)
    full_id = find_entry_id(ctx, entry_id)

    try:
        deleted = full_id is not None and get_tracker(ctx).delete_entry(
            full_id, viewer=Viewer.for_user(actor)
        )
    except TimesheetError as e:
        fail(e)

    if not deleted:
        fail(f"Entry not found: {entry_id}")
    console.print(f"[green]✓[/green] Deleted entry {entry_id}")


@cli.command()
@auth_options
@click.option("-p", "--period", type=PERIOD_CHOICE, help="Reporting period (default from config)")
@click.option("--from", "start", callback=parse_date, help="First day of a custom range")
@click.option("--to", "end", callback=parse_date, help="Last day of a custom range")
@click.option("--only", "only_email", help="Only entries of this user (admins)")
@click.option("--details", is_flag=True, help="List every entry under its subcategory")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def report(
    ctx: click.Context,
    user_email: str,
    password: str,
    period: Optional[str],
    start: Optional[date],
    end: Optional[date],
    only_email: Optional[str],
    details: bool,
    as_json: bool,
) -> None:
    """Summarize hours by category for a period.

    Periods: this-week, last-week, this-month, last-month, past-3-months,
    past-6-months, past-year, this-year, last-year, custom.

    Example:
        timesheet report
        timesheet report --period this-month --details
        timesheet report --from 2025-01-01 --to 2025-03-31
    """
    actor = login(ctx, user_email, password)
    viewer = Viewer.for_user(actor)
    config_mgr = get_config(ctx)

    date_range = range_from_options(period, start, end) or resolve_date_range(
        config_mgr.get("analytics.default_period")
    )
    summary = get_tracker(ctx).summarize(
        viewer,
        date_range,
        user_id=resolve_user_id(ctx, only_email),
        trend_min_buckets=config_mgr.get("analytics.trend_min_buckets", 2),
    )

    if as_json:
        result = {
            "period": date_range.label,
            "start": date_range.start.isoformat(),
            "end": date_range.end.isoformat(),
            **summary.to_dict(),
        }
        click.echo(json.dumps(result, indent=2, ensure_ascii=False))
        return

    ReportGenerator(console, date_format=config_mgr.date_format).summary_report(
        summary,
        date_range,
        user_names=user_names(ctx) if viewer.is_privileged else None,
        show_details=details,
    )


@cli.command()
@click.pass_context
def categories(ctx: click.Context) -> None:
    """List the categories and subcategories entries can be logged under."""
    table = Table(title="Categories")
    table.add_column("Category", style="cyan")
    table.add_column("Subcategories")

    category_table = get_config(ctx).category_table()
    for category in category_table:
        table.add_row(category, ", ".join(category_table.subcategories(category)))

    console.print(table)


cli.add_command(users)
cli.add_command(data)
cli.add_command(config)


if __name__ == "__main__":
    cli(obj={})
