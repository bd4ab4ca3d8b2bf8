"""Selection of the time entries a viewer may see within a date range."""

from collections.abc import Iterable
from typing import Optional

from timesheet.analysis.date_range import DateRange
from timesheet.core.models import TimeEntry, Viewer


def is_visible(entry: TimeEntry, viewer: Viewer) -> bool:
    """Check whether a viewer may see an entry.

    Args:
        entry: Entry to check
        viewer: Viewing identity

    Returns:
        True for privileged viewers or the entry's owner
    """
    return viewer.is_privileged or entry.user_id == viewer.user_id


def filter_entries(
    entries: Iterable[TimeEntry],
    date_range: DateRange,
    viewer: Viewer,
    user_id: Optional[str] = None,
) -> list[TimeEntry]:
    """Filter entries by date range and visibility scope.

    Args:
        entries: Entries to filter
        date_range: Inclusive range the entry date must fall in
        viewer: Viewing identity; non-privileged viewers only see their own entries
        user_id: Further restrict results to one owner (privileged viewers)

    Returns:
        Matching entries in input order
    """
    return [
        entry
        for entry in entries
        if date_range.contains(entry.date)
        and is_visible(entry, viewer)
        and (user_id is None or entry.user_id == user_id)
    ]
