"""JSON key-value storage with atomic writes.

Each record (users, time entries) lives in its own JSON file holding a flat
list. Every read parses the file again, so callers always receive
independent copies and must write back explicitly.
"""

import json
import logging
import os
import shutil
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from timesheet.core.errors import StorageError
from timesheet.core.models import TimeEntry, User

logger = logging.getLogger(__name__)

USERS_KEY = "users"
TIME_ENTRIES_KEY = "time_entries"

Row = dict[str, Any]


@contextmanager
def _file_lock(file_obj: Any, exclusive: bool) -> Iterator[None]:
    """Hold an OS-level lock on ``file_obj`` for the duration of the block."""
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        msvcrt.locking(file_obj.fileno(), msvcrt.LK_NBLCK if exclusive else msvcrt.LK_NBRLCK, 1)
        try:
            yield
        finally:
            msvcrt.locking(file_obj.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
        try:
            yield
        finally:
            fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


class StorageManager:
    """Reads and writes the users and time-entry records under ``data_dir``.

    Backups are written to a ``backups`` directory beside ``data_dir``.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        if data_dir is None:
            data_dir = Path.home() / ".timesheet" / "data"
        self.data_dir = Path(data_dir)
        self.users_file = self.data_dir / f"{USERS_KEY}.json"
        self.entries_file = self.data_dir / f"{TIME_ENTRIES_KEY}.json"
        self.backup_dir = self.data_dir.parent / "backups"

        for directory in (self.data_dir, self.backup_dir):
            directory.mkdir(parents=True, exist_ok=True)
        for record in (self.users_file, self.entries_file):
            if not record.exists():
                self._write_rows(record, [])

    def _write_rows(self, record: Path, rows: list[Row]) -> None:
        """Replace a record file via a locked temp file and rename."""
        staging = record.with_suffix(".tmp")
        try:
            with open(staging, "w", encoding="utf-8") as f:
                with _file_lock(f, exclusive=True):
                    json.dump(rows, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
            staging.replace(record)
        except Exception:
            staging.unlink(missing_ok=True)
            raise

    def _read_rows(self, record: Path) -> list[Row]:
        """Parse a record file; a missing or blank file is an empty list.

        Raises:
            StorageError: If the file is not valid JSON or not a JSON list
        """
        if not record.exists():
            return []
        with open(record, encoding="utf-8") as f:
            with _file_lock(f, exclusive=False):
                content = f.read()

        if not content.strip():
            return []
        try:
            rows = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupted record file {record}: {e}") from e
        if not isinstance(rows, list):
            raise StorageError(f"Corrupted record file (expected a list): {record}")
        return rows

    def _load(self, record: Path, from_dict: Callable[[Row], Any]) -> list[Any]:
        rows = self._read_rows(record)
        try:
            return [from_dict(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Corrupted record in {record}: {e}") from e

    def _upsert(self, record: Path, row: Row) -> None:
        rows = self._read_rows(record)
        positions = [i for i, existing in enumerate(rows) if existing["id"] == row["id"]]
        if positions:
            rows[positions[0]] = row
        else:
            rows.append(row)
        self._write_rows(record, rows)

    def _remove(self, record: Path, doomed: Callable[[Row], bool]) -> int:
        """Drop matching rows and return how many were dropped."""
        rows = self._read_rows(record)
        kept = [row for row in rows if not doomed(row)]
        if len(kept) != len(rows):
            self._write_rows(record, kept)
        return len(rows) - len(kept)

    def backup(self, label: Optional[str] = None) -> Path:
        """Copy both record files into ``backup_dir/<label>``.

        Args:
            label: Directory name; a timestamp when omitted

        Returns:
            The backup directory
        """
        target = self.backup_dir / (label or datetime.now().strftime("%Y%m%d_%H%M%S"))
        target.mkdir(parents=True, exist_ok=True)
        for record in (self.users_file, self.entries_file):
            if record.exists():
                shutil.copy2(record, target / record.name)

        logger.info(f"Backup created at {target}")
        return target

    # Users

    def list_users(self) -> list[User]:
        return self._load(self.users_file, User.from_dict)

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return next((u for u in self.list_users() if u.id == user_id), None)

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Find a user by email, ignoring case and surrounding whitespace."""
        wanted = email.strip().lower()
        return next((u for u in self.list_users() if u.email.lower() == wanted), None)

    def save_user(self, user: User) -> None:
        """Insert the user, or replace the stored user with the same ID."""
        self._upsert(self.users_file, user.to_dict())

    def delete_user(self, user_id: str) -> bool:
        """Delete a user together with their time entries.

        Returns:
            False if no such user exists
        """
        if not self._remove(self.users_file, lambda row: row["id"] == user_id):
            return False
        dropped = self._remove(self.entries_file, lambda row: row["user_id"] == user_id)
        logger.info(f"Deleted user {user_id} and {dropped} of their entries")
        return True

    # Time entries

    def list_time_entries(self) -> list[TimeEntry]:
        return self._load(self.entries_file, TimeEntry.from_dict)

    def list_time_entries_by_user(self, user_id: str) -> list[TimeEntry]:
        return [e for e in self.list_time_entries() if e.user_id == user_id]

    def get_time_entry(self, entry_id: str) -> Optional[TimeEntry]:
        return next((e for e in self.list_time_entries() if e.id == entry_id), None)

    def save_time_entry(self, entry: TimeEntry) -> None:
        """Insert the entry, or replace the stored entry with the same ID."""
        self._upsert(self.entries_file, entry.to_dict())

    def delete_time_entry(self, entry_id: str) -> bool:
        """Returns False if no such entry exists."""
        return self._remove(self.entries_file, lambda row: row["id"] == entry_id) > 0

    # Whole data set

    def export_data(self) -> dict[str, list[Row]]:
        """Both records as plain dictionaries, keyed 'users' and 'time_entries'."""
        return {
            USERS_KEY: self._read_rows(self.users_file),
            TIME_ENTRIES_KEY: self._read_rows(self.entries_file),
        }

    def import_data(self, users: list[User], entries: list[TimeEntry]) -> None:
        """Replace both records wholesale."""
        self._write_rows(self.users_file, [u.to_dict() for u in users])
        self._write_rows(self.entries_file, [e.to_dict() for e in entries])
        logger.info(f"Imported {len(users)} users and {len(entries)} time entries")

    def clear_all_data(self) -> None:
        self.import_data([], [])
        logger.warning("All users and time entries cleared")
