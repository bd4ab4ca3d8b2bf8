"""CSV timesheet export."""

import csv
from datetime import time
from typing import Any, Optional

from timesheet.analysis.date_range import DateRange
from timesheet.core.models import TimeEntry
from timesheet.export_import.base import Exporter

CSV_FIELDS = [
    "date",
    "user",
    "category",
    "subcategory",
    "start_time",
    "end_time",
    "hours",
    "description",
]


def _sort_key(entry: TimeEntry) -> tuple:
    return (entry.date, entry.start_time or time.min)


class CSVExporter(Exporter):
    """One row per entry, oldest first."""

    extension = ".csv"

    def write_entries(
        self,
        entries: list[TimeEntry],
        date_range: Optional[DateRange],
        **kwargs: Any,
    ) -> None:
        """Option ``user_names`` maps user IDs to the names shown in the user column."""
        names: dict[str, str] = kwargs.get("user_names") or {}

        with open(self.output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            writer.writeheader()
            for entry in sorted(entries, key=_sort_key):
                stored = entry.to_dict()
                writer.writerow(
                    {
                        "date": stored["date"],
                        "user": names.get(entry.user_id, entry.user_id),
                        "category": entry.category,
                        "subcategory": entry.subcategory,
                        "start_time": stored["start_time"],
                        "end_time": stored["end_time"],
                        "hours": round(entry.hours, 2),
                        "description": entry.description,
                    }
                )
