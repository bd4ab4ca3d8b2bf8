"""Export, import and maintenance CLI commands."""

from datetime import date
from pathlib import Path
from typing import Optional

import click  # type: ignore[import-not-found]

from timesheet.analysis.date_range import PERIODS
from timesheet.cli.helpers import (
    auth_options,
    console,
    fail,
    get_config,
    get_storage,
    get_tracker,
    login,
    parse_date,
    range_from_options,
    user_names,
)
from timesheet.core.demo import DEMO_PASSWORD, DEMO_USERS, load_demo_data
from timesheet.core.models import TimeEntry, User, Viewer
from timesheet.export_import import CSVExporter, ExcelExporter, JSONExporter, JSONImporter

FORMAT_BY_EXTENSION = {
    ".json": "json",
    ".csv": "csv",
    ".xlsx": "excel",
}

EXPORTERS = {
    "json": JSONExporter,
    "csv": CSVExporter,
    "excel": ExcelExporter,
}


def _require_admin(actor: User, action: str) -> None:
    if not actor.is_admin:
        fail(f"Only administrators can {action}")


@click.group()
def data() -> None:
    """Export, import and reset stored data."""
    pass


@data.command(name="export")
@auth_options
@click.argument("output_file", type=click.Path(dir_okay=False))
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(list(EXPORTERS), case_sensitive=False),
    help="Export format (auto-detected from file extension if not specified)",
)
@click.option("-p", "--period", type=click.Choice(PERIODS), help="Only entries in this period")
@click.option("--from", "start", callback=parse_date, help="First day (YYYY-MM-DD)")
@click.option("--to", "end", callback=parse_date, help="Last day (YYYY-MM-DD)")
@click.option(
    "--entries-only",
    is_flag=True,
    help="JSON: write only your visible entries instead of a full backup",
)
@click.option(
    "--include-charts/--no-charts",
    default=True,
    help="Include a pie chart in Excel export (default: yes)",
)
@click.pass_context
def export_command(
    ctx: click.Context,
    user_email: str,
    password: str,
    output_file: str,
    fmt: Optional[str],
    period: Optional[str],
    start: Optional[date],
    end: Optional[date],
    entries_only: bool,
    include_charts: bool,
) -> None:
    """Export data to JSON, CSV or Excel.

    JSON writes a full backup of users and entries (administrators only),
    or with --entries-only the entries visible to you. CSV and Excel write
    the entries visible to you. Entry exports can be limited to a period.
    A file name without an extension gets the format's extension.

    Examples:
      timesheet data export backup.json
      timesheet data export mine.json --entries-only --period this-month
      timesheet data export hours.csv --period last-month
      timesheet data export hours -f excel --from 2025-01-01 --to 2025-03-31
    """
    actor = login(ctx, user_email, password)
    output_path = Path(output_file)

    if not fmt:
        ext = output_path.suffix.lower()
        fmt = FORMAT_BY_EXTENSION.get(ext)
        if not fmt:
            fail(f"Could not detect format from extension '{ext}'. Please specify --format")

    exporter = EXPORTERS[fmt.lower()](output_path)
    if not output_path.suffix:
        exporter.output_path = output_path.with_suffix(exporter.get_file_extension())

    storage = get_storage(ctx)

    try:
        if isinstance(exporter, JSONExporter) and not entries_only:
            _require_admin(actor, "export a full backup")
            all_users = storage.list_users()
            all_entries = storage.list_time_entries()
            exporter.export_backup(all_users, all_entries)
            console.print(
                f"[green]✓[/green] Exported {len(all_users)} users and "
                f"{len(all_entries)} entries to {exporter.output_path}"
            )
            return

        date_range = range_from_options(period, start, end)
        entries = get_tracker(ctx).list_entries(Viewer.for_user(actor), date_range=date_range)
        if not entries:
            console.print("[yellow]Warning:[/yellow] No entries match the filters")

        written = exporter.export_entries(
            entries,
            date_range,
            user_names=user_names(ctx),
            include_charts=include_charts,
        )
    except OSError as e:
        fail(e)

    console.print(f"[green]✓[/green] Exported {written} entries to {exporter.output_path}")


@data.command(name="import")
@auth_options
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--entries-only",
    is_flag=True,
    help="Add or update entries from an entries export instead of replacing everything",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be imported without actually importing",
)
@click.confirmation_option(prompt="Import into the stored data?")
@click.pass_context
def import_command(
    ctx: click.Context,
    user_email: str,
    password: str,
    input_file: str,
    entries_only: bool,
    dry_run: bool,
) -> None:
    """Import a JSON file (administrators only).

    By default the file must be a full backup and replaces all users and
    entries. With --entries-only the file's entries are added, replacing
    stored entries with the same ID; their owners must already exist.

    Examples:
      timesheet data import backup.json --yes
      timesheet data import mine.json --entries-only --yes
      timesheet data import backup.json --dry-run --yes
    """
    actor = login(ctx, user_email, password)
    _require_admin(actor, "import data")
    storage = get_storage(ctx)
    importer = JSONImporter(Path(input_file))

    try:
        if entries_only:
            users: list[User] = []
            entries = importer.import_entries()
            _check_entries(ctx, entries)
        else:
            users, entries = importer.import_backup()
    except ValueError as e:
        fail(e)

    console.print(f"Found {len(users)} users and {len(entries)} entries in {input_file}")
    if dry_run:
        console.print("[yellow]Dry run:[/yellow] no data was changed")
        return

    if get_config(ctx).get("advanced.backup_on_import", True):
        backup_path = storage.backup()
        console.print(f"Backed up current data to {backup_path}")

    if entries_only:
        for entry in entries:
            storage.save_time_entry(entry)
        console.print(f"[green]✓[/green] Imported {len(entries)} entries")
        return

    storage.import_data(users, entries)
    console.print(f"[green]✓[/green] Imported {len(users)} users and {len(entries)} entries")


def _check_entries(ctx: click.Context, entries: list[TimeEntry]) -> None:
    """Reject entries with unknown owners or categories not in the configured table."""
    known_users = {u.id for u in get_storage(ctx).list_users()}
    table = get_config(ctx).category_table()
    for entry in entries:
        if entry.user_id not in known_users:
            raise ValueError(f"Time entry {entry.id} belongs to an unknown user: {entry.user_id}")
        table.validate(entry.category, entry.subcategory)


@data.command(name="clear")
@auth_options
@click.confirmation_option(prompt="Delete ALL users and time entries?")
@click.pass_context
def clear_command(ctx: click.Context, user_email: str, password: str) -> None:
    """Delete every user and time entry (administrators only).

    A backup is written first.

    Example:
      timesheet data clear --yes
    """
    actor = login(ctx, user_email, password)
    _require_admin(actor, "clear data")

    storage = get_storage(ctx)
    backup_path = storage.backup()
    storage.clear_all_data()
    console.print(f"[green]✓[/green] All data cleared (backup: {backup_path})")


@data.command(name="demo")
@click.option("-u", "--user", "user_email", envvar="TIMESHEET_USER", help="Administrator email")
@click.option("--password", envvar="TIMESHEET_PASSWORD", help="Administrator password")
@click.confirmation_option(prompt="Replace all data with the demo data set?")
@click.pass_context
def demo_command(
    ctx: click.Context,
    user_email: Optional[str],
    password: Optional[str],
) -> None:
    """Replace all data with demo users and entries.

    On an empty store no login is needed; otherwise an administrator must
    confirm with --user/--password.

    Example:
      timesheet data demo --yes
    """
    storage = get_storage(ctx)

    if storage.list_users():
        if not user_email or not password:
            fail("Existing data found; log in as an administrator with --user/--password")
        actor = login(ctx, user_email, password)
        _require_admin(actor, "load demo data")
        backup_path = storage.backup()
        console.print(f"Backed up current data to {backup_path}")

    n_users, n_entries = load_demo_data(
        storage, hash_method=get_config(ctx).get("security.hash_method")
    )
    console.print(f"[green]✓[/green] Loaded {n_users} demo users and {n_entries} entries")

    console.print(
        f"[yellow]Demo accounts use the password '{DEMO_PASSWORD}':[/yellow] "
        + ", ".join(email for _, email, _, _, _ in DEMO_USERS)
    )
