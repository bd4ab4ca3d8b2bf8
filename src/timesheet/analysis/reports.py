"""Terminal rendering of aggregated work hours."""

from typing import Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]
from rich.text import Text  # type: ignore[import-not-found]

from timesheet.analysis.aggregator import AnalyticsSummary
from timesheet.analysis.date_range import DateRange
from timesheet.core.models import TimeEntry

BAR_WIDTH = 25
DEFAULT_DATE_FORMAT = "%Y-%m-%d"
DESCRIPTION_WIDTH = 50


def format_hours(hours: float) -> str:
    """Format hours with one decimal, e.g. '7.5h'."""
    return f"{hours:.1f}h"


def format_time_span(entry: TimeEntry) -> str:
    """'09:00-17:30' for entries with clock times, '-' otherwise."""
    if entry.start_time and entry.end_time:
        return f"{entry.start_time:%H:%M}-{entry.end_time:%H:%M}"
    return "-"


def _shorten(text: str, width: int = DESCRIPTION_WIDTH) -> str:
    return text if len(text) <= width else text[:width] + "..."


def _bar(share: float, width: int = BAR_WIDTH) -> Text:
    """Horizontal bar filled to ``share`` percent."""
    filled = int(share / 100 * width)
    bar = Text("█" * filled, style="blue")
    bar.append("░" * (width - filled), style="dim")
    return bar


class ReportGenerator:
    """Prints an AnalyticsSummary as rich tables."""

    def __init__(self, console: Optional[Console] = None, date_format: str = DEFAULT_DATE_FORMAT):
        self.console = console or Console()
        self.date_format = date_format

    def summary_report(
        self,
        summary: AnalyticsSummary,
        date_range: DateRange,
        user_names: Optional[dict[str, str]] = None,
        show_details: bool = False,
    ) -> None:
        """Print the overview, the category breakdown and, when present, the monthly trend.

        Args:
            summary: Aggregated analytics
            date_range: Range the summary covers
            user_names: User ID -> display name; adds a User column to the details
            show_details: Also list every entry under its subcategory
        """
        span = (
            f"{date_range.start.strftime(self.date_format)} - "
            f"{date_range.end.strftime(self.date_format)}"
        )
        self.console.print(
            f"\n[bold cyan]Work Hours - {date_range.label}[/bold cyan] [dim]({span})[/dim]\n"
        )

        if summary.is_empty:
            self.console.print("[yellow]No entries found for this period[/yellow]")
            return

        self._overview(summary)
        self._breakdown(summary)
        if show_details:
            self._details(summary, user_names)
        if summary.has_trend:
            self._trend(summary)

    def _overview(self, summary: AnalyticsSummary) -> None:
        grid = Table(show_header=False, box=None, padding=(0, 2))
        grid.add_column(style="dim")
        grid.add_column(style="bold")
        grid.add_row("Total Hours:", format_hours(summary.total_hours))
        grid.add_row("Working Days:", str(summary.working_days))
        grid.add_row("Avg Hours/Day:", format_hours(summary.avg_hours_per_day))
        grid.add_row("Entries:", str(summary.entry_count))
        self.console.print(grid)
        self.console.print()

    def _breakdown(self, summary: AnalyticsSummary) -> None:
        table = Table(title="Hours by Category")
        table.add_column("Category", style="cyan")
        table.add_column("Subcategory", style="blue")
        table.add_column("Entries", justify="right")
        table.add_column("Hours", style="magenta", justify="right")
        table.add_column("% Total", style="green", justify="right")
        table.add_column("Share")

        for group in summary.categories.values():
            share = "-" if group.percentage is None else f"{group.percentage:.1f}%"
            table.add_row(
                f"[bold]{group.category}[/bold]",
                "",
                str(group.entry_count),
                format_hours(group.total_hours),
                share,
                _bar(group.percentage or 0.0),
            )
            for sub in group.subcategories.values():
                table.add_row("", sub.subcategory, str(sub.entry_count), format_hours(sub.hours))

        self.console.print(table)
        self.console.print()

    def _details(self, summary: AnalyticsSummary, user_names: Optional[dict[str, str]]) -> None:
        table = Table(title="Entry Details")
        for header, style in (
            ("Category", "cyan"),
            ("Subcategory", "blue"),
            ("Date", None),
            ("Time", "dim"),
            ("Description", None),
        ):
            table.add_column(header, style=style)
        if user_names is not None:
            table.add_column("User", style="green")
        table.add_column("Hours", style="magenta", justify="right")

        for group in summary.categories.values():
            for sub in group.subcategories.values():
                for entry in sub.entries:
                    cells = [
                        group.category,
                        sub.subcategory,
                        entry.date.strftime(self.date_format),
                        format_time_span(entry),
                        _shorten(entry.description),
                    ]
                    if user_names is not None:
                        cells.append(user_names.get(entry.user_id, entry.user_id))
                    cells.append(format_hours(entry.hours))
                    table.add_row(*cells)

        self.console.print(table)
        self.console.print()

    def _trend(self, summary: AnalyticsSummary) -> None:
        table = Table(title="Monthly Trend")
        table.add_column("Month", style="cyan")
        table.add_column("Hours", style="magenta", justify="right")
        table.add_column("Relative")

        peak = max(bucket.hours for bucket in summary.monthly_trend) or 1.0
        for bucket in summary.monthly_trend:
            table.add_row(bucket.label, format_hours(bucket.hours), _bar(bucket.hours / peak * 100))

        self.console.print(table)
