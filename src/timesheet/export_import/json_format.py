"""JSON export and import, including full backups."""

import json
from datetime import datetime
from typing import Any, Optional

from timesheet import __version__
from timesheet.analysis.date_range import DateRange
from timesheet.core.models import TimeEntry, User
from timesheet.core.storage import TIME_ENTRIES_KEY, USERS_KEY
from timesheet.core.tracker import resolve_hours
from timesheet.export_import.base import Exporter, Importer

FORMAT_VERSION = "1.0"


def _export_metadata(entry_count: int, date_range: Optional[DateRange] = None) -> dict[str, Any]:
    span = {"start": None, "end": None}
    if date_range is not None:
        span = {"start": date_range.start.isoformat(), "end": date_range.end.isoformat()}
    return {
        "export_date": datetime.now().isoformat(),
        "entry_count": entry_count,
        "date_range": span,
        "format_version": FORMAT_VERSION,
        "app_version": __version__,
    }


class JSONExporter(Exporter):
    """Write entries, or a whole data set, as a JSON document."""

    extension = ".json"

    def _dump(self, payload: dict[str, Any], indent: int) -> None:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.output_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=indent, ensure_ascii=False)

    def write_entries(
        self,
        entries: list[TimeEntry],
        date_range: Optional[DateRange],
        **kwargs: Any,
    ) -> None:
        """Options: ``indent`` (default 2), ``include_metadata`` (default True)."""
        payload: dict[str, Any] = {TIME_ENTRIES_KEY: [e.to_dict() for e in entries]}
        if kwargs.get("include_metadata", True):
            payload["metadata"] = _export_metadata(len(entries), date_range)
        self._dump(payload, kwargs.get("indent", 2))

    def export_backup(self, users: list[User], entries: list[TimeEntry], indent: int = 2) -> None:
        """Write every user and entry so the file can be restored with import_backup."""
        payload = {
            USERS_KEY: [u.to_dict() for u in users],
            TIME_ENTRIES_KEY: [e.to_dict() for e in entries],
            "metadata": _export_metadata(len(entries)),
        }
        self._dump(payload, indent)


class JSONImporter(Importer):
    """Read entries or a full backup from a JSON document."""

    extension = ".json"

    def _load(self) -> Any:
        text = self.read_text()
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON file: {e}") from e

    @staticmethod
    def _parse_entries(rows: Any) -> list[TimeEntry]:
        if not isinstance(rows, list):
            raise ValueError(f"'{TIME_ENTRIES_KEY}' must be an array")

        parsed = []
        for row in rows:
            try:
                entry = TimeEntry.from_dict(row)
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"Invalid time entry data: {e}") from e
            try:
                resolve_hours(entry.start_time, entry.end_time, entry.hours)
            except ValueError as e:
                raise ValueError(f"Invalid time entry {entry.id}: {e}") from e
            parsed.append(entry)

        if len({e.id for e in parsed}) != len(parsed):
            raise ValueError("File contains duplicate entry IDs")
        return parsed

    def import_entries(self, **kwargs: Any) -> list[TimeEntry]:
        """Read entries from an object holding a 'time_entries' array, or from a bare array."""
        data = self._load()
        if isinstance(data, list):
            return self._parse_entries(data)
        if isinstance(data, dict) and TIME_ENTRIES_KEY in data:
            return self._parse_entries(data[TIME_ENTRIES_KEY])
        raise ValueError(f"JSON must contain '{TIME_ENTRIES_KEY}' array or be an array itself")

    def import_backup(self) -> tuple[list[User], list[TimeEntry]]:
        """Read a file written by JSONExporter.export_backup.

        Returns:
            Tuple of (users, entries)

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the backup is malformed, repeats a user ID or email,
                or holds entries owned by users it does not contain
        """
        data = self._load()
        if not isinstance(data, dict) or USERS_KEY not in data or TIME_ENTRIES_KEY not in data:
            raise ValueError(f"Backup must contain '{USERS_KEY}' and '{TIME_ENTRIES_KEY}' arrays")
        if not isinstance(data[USERS_KEY], list):
            raise ValueError(f"'{USERS_KEY}' must be an array")

        users = []
        for row in data[USERS_KEY]:
            try:
                users.append(User.from_dict(row))
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"Invalid user data: {e}") from e

        user_ids = {u.id for u in users}
        if len(user_ids) != len(users):
            raise ValueError("Backup contains duplicate user IDs")
        if len({u.email.lower() for u in users}) != len(users):
            raise ValueError("Backup contains duplicate emails")

        entries = self._parse_entries(data[TIME_ENTRIES_KEY])
        orphans = [e.id for e in entries if e.user_id not in user_ids]
        if orphans:
            raise ValueError(f"Time entries reference unknown users: {', '.join(orphans)}")

        return users, entries
