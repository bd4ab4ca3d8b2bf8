"""Excel timesheet export with a category summary and chart."""

from typing import Any, Optional

import openpyxl  # type: ignore[import-untyped]
from openpyxl.chart import PieChart, Reference  # type: ignore[import-untyped]
from openpyxl.styles import Alignment, Font, PatternFill  # type: ignore[import-untyped]
from openpyxl.utils import get_column_letter  # type: ignore[import-untyped]

from timesheet.analysis.aggregator import aggregate
from timesheet.analysis.date_range import DateRange
from timesheet.core.models import TimeEntry
from timesheet.export_import.base import Exporter

ENTRY_HEADERS = [
    "Date",
    "User",
    "Category",
    "Subcategory",
    "Start",
    "End",
    "Hours",
    "Description",
]

HEADER_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF")
SECTION_FONT = Font(bold=True, size=12)


def _clock(value: Any) -> str:
    return value.strftime("%H:%M") if value else "-"


class ExcelExporter(Exporter):
    """Workbook with an Entries sheet and, optionally, a Summary sheet."""

    extension = ".xlsx"

    def write_entries(
        self,
        entries: list[TimeEntry],
        date_range: Optional[DateRange],
        **kwargs: Any,
    ) -> None:
        """Build and save the workbook.

        Options:
            user_names (dict): User ID -> display name
            include_summary (bool): Add the Summary sheet (default: True)
            include_charts (bool): Add the category pie chart (default: True)
        """
        wb = openpyxl.Workbook()
        wb.remove(wb.active)

        self._entries_sheet(wb, entries, kwargs.get("user_names") or {})
        if kwargs.get("include_summary", True):
            self._summary_sheet(wb, entries, date_range, kwargs.get("include_charts", True))

        wb.save(self.output_path)

    def _entries_sheet(self, wb: Any, entries: list[TimeEntry], names: dict[str, str]) -> None:
        ws = wb.create_sheet("Entries")

        for col, header in enumerate(ENTRY_HEADERS, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.alignment = Alignment(horizontal="center", vertical="center")

        for row, entry in enumerate(entries, start=2):
            values = (
                entry.date.isoformat(),
                names.get(entry.user_id, entry.user_id),
                entry.category,
                entry.subcategory,
                _clock(entry.start_time),
                _clock(entry.end_time),
                round(entry.hours, 2),
                entry.description,
            )
            for col, value in enumerate(values, start=1):
                ws.cell(row, col, value)

        for col in range(1, len(ENTRY_HEADERS)):
            ws.column_dimensions[get_column_letter(col)].width = 15
        ws.column_dimensions[get_column_letter(len(ENTRY_HEADERS))].width = 50

    def _summary_sheet(
        self,
        wb: Any,
        entries: list[TimeEntry],
        date_range: Optional[DateRange],
        include_charts: bool,
    ) -> None:
        """Totals, the per-category table with its pie chart, and the monthly trend."""
        summary = aggregate(entries)
        ws = wb.create_sheet("Summary", 0)

        ws["A1"] = "Work Hours Summary"
        ws["A1"].font = Font(bold=True, size=14)
        if date_range is not None:
            ws["B1"] = (
                f"{date_range.label}: {date_range.start:%Y-%m-%d} - {date_range.end:%Y-%m-%d}"
            )

        totals = [
            ("Total Hours:", round(summary.total_hours, 1)),
            ("Working Days:", summary.working_days),
            ("Avg Hours/Day:", round(summary.avg_hours_per_day, 1)),
            ("Total Entries:", summary.entry_count),
        ]
        for offset, (label, value) in enumerate(totals):
            ws.cell(3 + offset, 1, label)
            ws.cell(3 + offset, 2, value)

        row = 8
        ws.cell(row, 1, "Hours by Category").font = SECTION_FONT
        row += 1
        header_row = row
        for col, header in enumerate(("Category", "Hours", "% Total"), start=1):
            ws.cell(row, col, header).font = Font(bold=True)

        for point in summary.pie_data:
            row += 1
            ws.cell(row, 1, point["name"])
            ws.cell(row, 2, point["value"])
            ws.cell(row, 3, point["percentage"])

        if include_charts and summary.pie_data:
            chart = PieChart()
            chart.title = "Hours by Category"
            chart.add_data(
                Reference(ws, min_col=2, min_row=header_row, max_row=row), titles_from_data=True
            )
            chart.set_categories(Reference(ws, min_col=1, min_row=header_row + 1, max_row=row))
            chart.height = 10
            chart.width = 15
            ws.add_chart(chart, "E3")

        if summary.has_trend:
            row += 2
            ws.cell(row, 1, "Monthly Trend").font = SECTION_FONT
            for bucket in summary.monthly_trend:
                row += 1
                ws.cell(row, 1, bucket.label)
                ws.cell(row, 2, bucket.hours)

        for letter, width in (("A", 25), ("B", 15), ("C", 12)):
            ws.column_dimensions[letter].width = width
