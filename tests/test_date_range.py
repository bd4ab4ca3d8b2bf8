"""Tests for period resolution."""

from datetime import date, datetime, time

import pytest  # type: ignore[import-not-found]

from timesheet.analysis.date_range import (
    PERIODS,
    DateRange,
    resolve_date_range,
    shift_months,
)

NOW = datetime(2024, 1, 17, 14, 30)  # a Wednesday


def _days(date_range: DateRange) -> tuple[date, date]:
    return date_range.start.date(), date_range.end.date()


class TestShiftMonths:
    """Test month arithmetic."""

    def test_back_one_month(self) -> None:
        assert shift_months(datetime(2024, 5, 15), -1) == datetime(2024, 4, 15)

    def test_across_year_boundary(self) -> None:
        assert shift_months(datetime(2024, 1, 10), -3) == datetime(2023, 10, 10)

    def test_clamps_to_month_end(self) -> None:
        assert shift_months(datetime(2024, 3, 31), -1) == datetime(2024, 2, 29)
        assert shift_months(datetime(2023, 3, 31), -1) == datetime(2023, 2, 28)

    def test_forward(self) -> None:
        assert shift_months(datetime(2024, 11, 30), 3) == datetime(2025, 2, 28)


class TestResolveDateRange:
    """Test resolve_date_range for every period token."""

    def test_this_week(self) -> None:
        """Weeks run Monday through Sunday."""
        date_range = resolve_date_range("this-week", now=NOW)

        assert _days(date_range) == (date(2024, 1, 15), date(2024, 1, 21))
        assert date_range.start.time() == time.min
        assert date_range.end.time() == time.max
        assert date_range.label == "This Week"

    def test_this_week_on_sunday(self) -> None:
        date_range = resolve_date_range("this-week", now=datetime(2024, 1, 21, 23, 0))
        assert _days(date_range) == (date(2024, 1, 15), date(2024, 1, 21))

    def test_this_week_on_monday(self) -> None:
        date_range = resolve_date_range("this-week", now=datetime(2024, 1, 15, 0, 5))
        assert _days(date_range) == (date(2024, 1, 15), date(2024, 1, 21))

    def test_last_week(self) -> None:
        date_range = resolve_date_range("last-week", now=NOW)
        assert _days(date_range) == (date(2024, 1, 8), date(2024, 1, 14))

    def test_this_month(self) -> None:
        date_range = resolve_date_range("this-month", now=NOW)
        assert _days(date_range) == (date(2024, 1, 1), date(2024, 1, 31))

    def test_last_month_crosses_year(self) -> None:
        date_range = resolve_date_range("last-month", now=NOW)
        assert _days(date_range) == (date(2023, 12, 1), date(2023, 12, 31))

    def test_last_month_leap_february(self) -> None:
        date_range = resolve_date_range("last-month", now=datetime(2024, 3, 31))
        assert _days(date_range) == (date(2024, 2, 1), date(2024, 2, 29))

    @pytest.mark.parametrize(
        "period,expected_start",
        [
            ("past-3-months", datetime(2023, 10, 17, 14, 30)),
            ("past-6-months", datetime(2023, 7, 17, 14, 30)),
            ("past-year", datetime(2023, 1, 17, 14, 30)),
        ],
    )
    def test_rolling_periods(self, period: str, expected_start: datetime) -> None:
        """Rolling periods end at the reference time."""
        date_range = resolve_date_range(period, now=NOW)
        assert date_range.start == expected_start
        assert date_range.end == NOW

    def test_this_year(self) -> None:
        date_range = resolve_date_range("this-year", now=NOW)
        assert _days(date_range) == (date(2024, 1, 1), date(2024, 12, 31))

    def test_last_year(self) -> None:
        date_range = resolve_date_range("last-year", now=NOW)
        assert _days(date_range) == (date(2023, 1, 1), date(2023, 12, 31))

    def test_custom(self) -> None:
        date_range = resolve_date_range(
            "custom", date(2024, 2, 1), date(2024, 2, 10), now=NOW
        )
        assert _days(date_range) == (date(2024, 2, 1), date(2024, 2, 10))
        assert date_range.end.time() == time.max
        assert date_range.label == "Custom Range"

    def test_custom_accepts_datetimes(self) -> None:
        date_range = resolve_date_range(
            "custom", datetime(2024, 2, 1, 15, 0), datetime(2024, 2, 10, 8, 0), now=NOW
        )
        assert date_range.start == datetime(2024, 2, 1)
        assert date_range.end.date() == date(2024, 2, 10)

    def test_custom_inverted_bounds_are_swapped(self) -> None:
        date_range = resolve_date_range("custom", date(2024, 2, 10), date(2024, 2, 1), now=NOW)
        assert _days(date_range) == (date(2024, 2, 1), date(2024, 2, 10))

    @pytest.mark.parametrize(
        "custom_start,custom_end",
        [(None, date(2024, 2, 10)), (date(2024, 2, 1), None), (None, None)],
    )
    def test_custom_missing_bound_falls_back_to_this_week(self, custom_start, custom_end) -> None:
        date_range = resolve_date_range("custom", custom_start, custom_end, now=NOW)
        assert date_range == resolve_date_range("this-week", now=NOW)

    @pytest.mark.parametrize("period", ["fortnight", "", None])
    def test_unknown_period_falls_back_to_this_week(self, period) -> None:
        assert resolve_date_range(period, now=NOW) == resolve_date_range("this-week", now=NOW)

    @pytest.mark.parametrize("period", [p for p in PERIODS if p != "custom"])
    def test_start_never_after_end(self, period: str) -> None:
        date_range = resolve_date_range(period, now=NOW)
        assert date_range.start <= date_range.end


class TestDateRangeContains:
    """Test day-granularity membership."""

    def test_boundaries_are_inclusive(self) -> None:
        date_range = resolve_date_range("this-week", now=NOW)
        assert date_range.contains(date(2024, 1, 15))
        assert date_range.contains(date(2024, 1, 21))
        assert not date_range.contains(date(2024, 1, 14))
        assert not date_range.contains(date(2024, 1, 22))

    def test_rolling_range_includes_start_day(self) -> None:
        """The first day of a rolling range counts even though it starts mid-day."""
        date_range = resolve_date_range("past-3-months", now=NOW)
        assert date_range.contains(date(2023, 10, 17))
        assert not date_range.contains(date(2023, 10, 16))
