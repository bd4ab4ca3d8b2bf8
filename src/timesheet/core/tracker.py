"""Time entry service: validated create, update, delete and summaries."""

import logging
import math
from datetime import date, time
from typing import Optional

from timesheet.analysis.aggregator import DEFAULT_TREND_MIN_BUCKETS, AnalyticsSummary, aggregate
from timesheet.analysis.date_range import DateRange
from timesheet.analysis.filters import filter_entries, is_visible
from timesheet.core.categories import CategoryTable
from timesheet.core.errors import PermissionDeniedError, ValidationError
from timesheet.core.models import TimeEntry, Viewer, hours_between
from timesheet.core.storage import StorageManager

logger = logging.getLogger(__name__)

# Supplied hours may be rounded (e.g. 0.33 for 20 minutes)
HOURS_TOLERANCE = 0.01


def resolve_hours(
    start_time: Optional[time],
    end_time: Optional[time],
    hours: Optional[float] = None,
) -> float:
    """Work out an entry's duration and check it is consistent.

    Args:
        start_time: Start time of day (optional)
        end_time: End time of day (optional)
        hours: Explicit duration; required when no times are given

    Returns:
        Duration in hours

    Raises:
        ValidationError: If only one time is given, end is not after start,
            the duration is not positive, or the explicit hours disagree
            with the times
    """
    if start_time is None and end_time is not None:
        raise ValidationError("start_time", "Start time is required when an end time is given")
    if end_time is None and start_time is not None:
        raise ValidationError("end_time", "End time is required when a start time is given")

    if start_time is not None and end_time is not None:
        if end_time <= start_time:
            raise ValidationError("end_time", "End time must be after start time")
        computed = hours_between(start_time, end_time)
        if hours is not None and not math.isclose(hours, computed, abs_tol=HOURS_TOLERANCE):
            raise ValidationError(
                "hours",
                f"{hours} hours does not match {start_time:%H:%M}-{end_time:%H:%M} "
                f"({computed:.2f} hours)",
            )
        return computed

    if hours is None:
        raise ValidationError("hours", "Hours are required when no start/end time is given")
    if not math.isfinite(hours) or hours <= 0:
        raise ValidationError("hours", "Hours must be a positive number")
    return float(hours)


def _require_text(field_name: str, value: Optional[str]) -> str:
    if value is None or not value.strip():
        label = field_name.replace("_", " ").capitalize()
        raise ValidationError(field_name, f"{label} is required")
    return value.strip()


def _sort_key(entry: TimeEntry) -> tuple[date, time, str]:
    return (entry.date, entry.start_time or time.min, entry.created_at.isoformat())


class HoursTracker:
    """Work hours logging on top of the storage accessor."""

    def __init__(
        self,
        storage: Optional[StorageManager] = None,
        categories: Optional[CategoryTable] = None,
    ):
        """Initialize hours tracker.

        Args:
            storage: Storage manager instance. Creates default if None.
            categories: Allowed categories. Uses the default table if None.
        """
        self.storage = storage or StorageManager()
        self.categories = categories or CategoryTable()

    def _check_can_modify(self, viewer: Optional[Viewer], entry: TimeEntry) -> None:
        if viewer is not None and not self.can_modify(viewer, entry):
            raise PermissionDeniedError("You can only change your own time entries")

    @staticmethod
    def can_modify(viewer: Viewer, entry: TimeEntry) -> bool:
        """Check whether a viewer may edit or delete an entry."""
        return viewer.is_privileged or entry.user_id == viewer.user_id

    def create_entry(
        self,
        user_id: str,
        entry_date: Optional[date],
        category: str,
        subcategory: str,
        description: str,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
        hours: Optional[float] = None,
        viewer: Optional[Viewer] = None,
    ) -> TimeEntry:
        """Log a new time entry.

        Args:
            user_id: Owner of the entry
            entry_date: Day the work happened on
            category: Category label
            subcategory: Subcategory label
            description: What was done
            start_time: Start time of day
            end_time: End time of day
            hours: Explicit duration (needed only without start/end times)
            viewer: Acting identity; when given, must own the entry or be privileged

        Returns:
            Created entry

        Raises:
            ValidationError: If any field is missing or inconsistent
            PermissionDeniedError: If the viewer may not log hours for user_id
        """
        user_id = _require_text("user_id", user_id)
        if entry_date is None:
            raise ValidationError("date", "Date is required")
        category = _require_text("category", category)
        subcategory = _require_text("subcategory", subcategory)
        description = _require_text("description", description)

        self.categories.validate(category, subcategory)
        duration = resolve_hours(start_time, end_time, hours)

        if self.storage.get_user_by_id(user_id) is None:
            raise ValidationError("user_id", f"Unknown user: {user_id}")

        entry = TimeEntry(
            user_id=user_id,
            date=entry_date,
            category=category,
            subcategory=subcategory,
            description=description,
            start_time=start_time,
            end_time=end_time,
            hours=duration,
        )
        self._check_can_modify(viewer, entry)

        self.storage.save_time_entry(entry)
        logger.info(f"Created entry {entry.id} ({duration:.2f}h) for user {user_id}")
        return entry

    def get_entry(self, entry_id: str) -> Optional[TimeEntry]:
        """Get an entry by ID.

        Returns:
            Entry or None if not found
        """
        return self.storage.get_time_entry(entry_id)

    def update_entry(
        self,
        entry_id: str,
        entry_date: Optional[date] = None,
        category: Optional[str] = None,
        subcategory: Optional[str] = None,
        description: Optional[str] = None,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
        hours: Optional[float] = None,
        clear_times: bool = False,
        viewer: Optional[Viewer] = None,
    ) -> Optional[TimeEntry]:
        """Update some or all fields of an entry.

        Fields left as None keep their current value. The merged record is
        validated as a whole and its hours recomputed from the times.

        Args:
            entry_id: ID of entry to edit
            entry_date: New date
            category: New category
            subcategory: New subcategory
            description: New description
            start_time: New start time
            end_time: New end time
            hours: New duration (only for entries without times)
            clear_times: Drop start/end times (hours must then be known)
            viewer: Acting identity; when given, must own the entry or be privileged

        Returns:
            Updated entry, or None if no entry has that ID

        Raises:
            ValidationError: If the merged record is invalid
            PermissionDeniedError: If the viewer may not change the entry
        """
        entry = self.storage.get_time_entry(entry_id)
        if entry is None:
            return None
        self._check_can_modify(viewer, entry)

        new_category = entry.category if category is None else _require_text("category", category)
        new_subcategory = (
            entry.subcategory if subcategory is None else _require_text("subcategory", subcategory)
        )
        new_description = (
            entry.description
            if description is None
            else _require_text("description", description)
        )
        self.categories.validate(new_category, new_subcategory)

        if clear_times:
            new_start, new_end = None, None
        else:
            new_start = entry.start_time if start_time is None else start_time
            new_end = entry.end_time if end_time is None else end_time

        if hours is None and new_start is None and new_end is None:
            hours = entry.hours
        duration = resolve_hours(new_start, new_end, hours)

        if entry_date is not None:
            entry.date = entry_date
        entry.category = new_category
        entry.subcategory = new_subcategory
        entry.description = new_description
        entry.start_time = new_start
        entry.end_time = new_end
        entry.hours = duration

        self.storage.save_time_entry(entry)
        logger.info(f"Updated entry {entry.id}")
        return entry

    def delete_entry(self, entry_id: str, viewer: Optional[Viewer] = None) -> bool:
        """Delete an entry by ID.

        Args:
            entry_id: ID of entry to delete
            viewer: Acting identity; when given, must own the entry or be privileged

        Returns:
            True if deleted, False if not found

        Raises:
            PermissionDeniedError: If the viewer may not delete the entry
        """
        entry = self.storage.get_time_entry(entry_id)
        if entry is None:
            return False
        self._check_can_modify(viewer, entry)

        deleted = self.storage.delete_time_entry(entry_id)
        if deleted:
            logger.info(f"Deleted entry {entry_id}")
        return deleted

    def list_entries(
        self,
        viewer: Viewer,
        date_range: Optional[DateRange] = None,
        user_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[TimeEntry]:
        """List entries visible to a viewer, most recent first.

        Args:
            viewer: Viewing identity
            date_range: Only include entries inside this range
            user_id: Only include entries of this owner
            limit: Maximum number of entries to return

        Returns:
            Visible entries sorted by date and start time, newest first
        """
        entries = self.storage.list_time_entries()
        if date_range is not None:
            entries = filter_entries(entries, date_range, viewer, user_id=user_id)
        else:
            entries = [
                e
                for e in entries
                if is_visible(e, viewer) and (user_id is None or e.user_id == user_id)
            ]

        entries.sort(key=_sort_key, reverse=True)
        if limit:
            entries = entries[:limit]
        return entries

    def summarize(
        self,
        viewer: Viewer,
        date_range: DateRange,
        user_id: Optional[str] = None,
        trend_min_buckets: int = DEFAULT_TREND_MIN_BUCKETS,
    ) -> AnalyticsSummary:
        """Aggregate the entries a viewer can see within a date range.

        Args:
            viewer: Viewing identity
            date_range: Resolved reporting range
            user_id: Restrict to one owner (privileged viewers)
            trend_min_buckets: Minimum months for the monthly trend

        Returns:
            Aggregated analytics over a fresh snapshot of the entries
        """
        entries = filter_entries(
            self.storage.list_time_entries(), date_range, viewer, user_id=user_id
        )
        return aggregate(entries, trend_min_buckets=trend_min_buckets)
