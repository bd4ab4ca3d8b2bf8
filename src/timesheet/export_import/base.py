"""Shared plumbing for file exporters and importers."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from timesheet.analysis.date_range import DateRange
from timesheet.core.models import TimeEntry


class Exporter(ABC):
    """Writes time entries to one output file.

    Subclasses declare their extension and implement ``write_entries``;
    ``export_entries`` applies the optional date range and creates the
    parent directory first.
    """

    extension = ""

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)

    def get_file_extension(self) -> str:
        """File extension of this format, including the dot."""
        return self.extension

    def export_entries(
        self,
        entries: list[TimeEntry],
        date_range: Optional[DateRange] = None,
        **kwargs: Any,
    ) -> int:
        """Write the entries that fall inside ``date_range``.

        Args:
            entries: Entries to export
            date_range: Only export entries dated inside this range
            **kwargs: Format-specific options

        Returns:
            Number of entries written
        """
        selected = [e for e in entries if date_range is None or date_range.contains(e.date)]
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.write_entries(selected, date_range, **kwargs)
        return len(selected)

    @abstractmethod
    def write_entries(
        self,
        entries: list[TimeEntry],
        date_range: Optional[DateRange],
        **kwargs: Any,
    ) -> None:
        """Write already selected entries to ``self.output_path``."""


class Importer(ABC):
    """Reads time entries from one input file."""

    extension = ""

    def __init__(self, input_path: Path):
        self.input_path = Path(input_path)

    def get_file_extension(self) -> str:
        """File extension of this format, including the dot."""
        return self.extension

    def read_text(self) -> str:
        """Return the input file's contents after checking name and existence.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file has the wrong extension
        """
        if not self.input_path.exists():
            raise FileNotFoundError(f"Input file not found: {self.input_path}")
        expected = self.get_file_extension()
        if self.input_path.suffix.lower() != expected:
            raise ValueError(f"Expected {expected} file, got {self.input_path.suffix}")
        return self.input_path.read_text(encoding="utf-8")

    @abstractmethod
    def import_entries(self, **kwargs: Any) -> list[TimeEntry]:
        """Parse entries from the input file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is malformed
        """
