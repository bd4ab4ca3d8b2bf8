"""Resolution of named reporting periods into concrete date ranges."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

THIS_WEEK = "this-week"
LAST_WEEK = "last-week"
THIS_MONTH = "this-month"
LAST_MONTH = "last-month"
PAST_3_MONTHS = "past-3-months"
PAST_6_MONTHS = "past-6-months"
PAST_YEAR = "past-year"
THIS_YEAR = "this-year"
LAST_YEAR = "last-year"
CUSTOM = "custom"

PERIOD_LABELS = {
    THIS_WEEK: "This Week",
    LAST_WEEK: "Last Week",
    THIS_MONTH: "This Month",
    LAST_MONTH: "Last Month",
    PAST_3_MONTHS: "Past 3 Months",
    PAST_6_MONTHS: "Past 6 Months",
    PAST_YEAR: "Past Year",
    THIS_YEAR: "This Year",
    LAST_YEAR: "Last Year",
    CUSTOM: "Custom Range",
}

PERIODS = tuple(PERIOD_LABELS)

# Rolling periods: token -> months back from now
_ROLLING_MONTHS = {
    PAST_3_MONTHS: 3,
    PAST_6_MONTHS: 6,
    PAST_YEAR: 12,
}


@dataclass(frozen=True)
class DateRange:
    """Inclusive interval a report covers.

    Attributes:
        start: First instant included
        end: Last instant included
        label: Display label of the period it was resolved from
    """

    start: datetime
    end: datetime
    label: str

    def contains(self, day: date) -> bool:
        """Check whether a calendar day falls inside the range."""
        return self.start.date() <= day <= self.end.date()


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move a datetime by whole months, clamping the day to the month's length.

    Args:
        moment: Starting point
        months: Number of months to add (negative to go back)

    Returns:
        Shifted datetime with the same time of day

    Example:
        >>> shift_months(datetime(2024, 3, 31), -1)
        datetime.datetime(2024, 2, 29, 0, 0)
    """
    month_index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _week_range(day: date, label: str) -> DateRange:
    monday = day - timedelta(days=day.weekday())
    sunday = monday + timedelta(days=6)
    return DateRange(_start_of_day(monday), _end_of_day(sunday), label)


def _month_range(year: int, month: int, label: str) -> DateRange:
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(
        _start_of_day(date(year, month, 1)),
        _end_of_day(date(year, month, last_day)),
        label,
    )


def _year_range(year: int, label: str) -> DateRange:
    return DateRange(
        _start_of_day(date(year, 1, 1)),
        _end_of_day(date(year, 12, 31)),
        label,
    )


def resolve_date_range(
    period: Optional[str],
    custom_start: Optional[Union[date, datetime]] = None,
    custom_end: Optional[Union[date, datetime]] = None,
    now: Optional[datetime] = None,
) -> DateRange:
    """Resolve a period token into a concrete inclusive date range.

    Weeks run Monday to Sunday. Month and year periods cover whole calendar
    months/years. Rolling periods (past-N) run from N months before ``now``
    up to ``now``. A custom period missing either bound, and any unknown
    token, falls back to the current week.

    Args:
        period: Period token (see PERIODS)
        custom_start: First day of a custom range
        custom_end: Last day of a custom range
        now: Reference time. Defaults to the current local time

    Returns:
        Resolved DateRange
    """
    if now is None:
        now = datetime.now()
    today = now.date()

    if period == THIS_WEEK:
        return _week_range(today, PERIOD_LABELS[THIS_WEEK])

    if period == LAST_WEEK:
        return _week_range(today - timedelta(days=7), PERIOD_LABELS[LAST_WEEK])

    if period == THIS_MONTH:
        return _month_range(today.year, today.month, PERIOD_LABELS[THIS_MONTH])

    if period == LAST_MONTH:
        previous = shift_months(now, -1)
        return _month_range(previous.year, previous.month, PERIOD_LABELS[LAST_MONTH])

    if period in _ROLLING_MONTHS:
        start = shift_months(now, -_ROLLING_MONTHS[period])
        return DateRange(start, now, PERIOD_LABELS[period])

    if period == THIS_YEAR:
        return _year_range(today.year, PERIOD_LABELS[THIS_YEAR])

    if period == LAST_YEAR:
        return _year_range(today.year - 1, PERIOD_LABELS[LAST_YEAR])

    if period == CUSTOM and custom_start is not None and custom_end is not None:
        first, last = _as_date(custom_start), _as_date(custom_end)
        if first > last:
            first, last = last, first
        return DateRange(_start_of_day(first), _end_of_day(last), PERIOD_LABELS[CUSTOM])

    return _week_range(today, PERIOD_LABELS[THIS_WEEK])
