"""Aggregation of time entries into category/subcategory summaries."""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

from timesheet.core.models import TimeEntry

DEFAULT_TREND_MIN_BUCKETS = 2


@dataclass
class SubcategoryAggregate:
    """Hours and entries for one subcategory within a category."""

    subcategory: str
    hours: float = 0.0
    entries: list[TimeEntry] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return len(self.entries)


@dataclass
class CategoryAggregate:
    """Hours and entries for one category.

    Attributes:
        category: Category label
        total_hours: Sum of member entries' hours
        entries: Member entries in input order
        subcategories: Subcategory label -> aggregate, in first-seen order
        percentage: Share of the overall total (None when the total is zero)
    """

    category: str
    total_hours: float = 0.0
    entries: list[TimeEntry] = field(default_factory=list)
    subcategories: dict[str, SubcategoryAggregate] = field(default_factory=dict)
    percentage: Optional[float] = None

    @property
    def entry_count(self) -> int:
        return len(self.entries)


@dataclass
class MonthlyBucket:
    """Hours summed over one calendar month."""

    year: int
    month: int
    hours: float

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass
class AnalyticsSummary:
    """Everything derived from one set of filtered entries."""

    categories: dict[str, CategoryAggregate]
    total_hours: float
    entry_count: int
    working_days: int
    avg_hours_per_day: float
    pie_data: list[dict[str, Any]]
    bar_data: list[dict[str, Any]]
    monthly_trend: list[MonthlyBucket]
    trend_min_buckets: int = DEFAULT_TREND_MIN_BUCKETS

    @property
    def has_trend(self) -> bool:
        """Whether the monthly trend has enough buckets to be worth showing."""
        return len(self.monthly_trend) >= self.trend_min_buckets

    @property
    def is_empty(self) -> bool:
        return self.entry_count == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary (entries omitted)."""
        return {
            "total_hours": round(self.total_hours, 2),
            "entry_count": self.entry_count,
            "working_days": self.working_days,
            "avg_hours_per_day": round(self.avg_hours_per_day, 2),
            "categories": [
                {
                    "category": cat.category,
                    "total_hours": round(cat.total_hours, 2),
                    "entry_count": cat.entry_count,
                    "percentage": cat.percentage,
                    "subcategories": [
                        {
                            "subcategory": sub.subcategory,
                            "hours": round(sub.hours, 2),
                            "entry_count": sub.entry_count,
                        }
                        for sub in cat.subcategories.values()
                    ],
                }
                for cat in self.categories.values()
            ],
            "pie_data": self.pie_data,
            "bar_data": self.bar_data,
            "monthly_trend": [
                {"month": bucket.label, "hours": bucket.hours} for bucket in self.monthly_trend
            ]
            if self.has_trend
            else [],
        }


def percentage_of(hours: float, total_hours: float) -> Optional[float]:
    """Share of a total as a percentage rounded to one decimal.

    Returns:
        Percentage, or None when the total is not positive
    """
    if total_hours <= 0:
        return None
    return round(hours / total_hours * 100, 1)


def monthly_trend(entries: Iterable[TimeEntry]) -> list[MonthlyBucket]:
    """Sum hours per (year, month), chronologically ascending.

    Args:
        entries: Entries to bucket

    Returns:
        Buckets with hours rounded to one decimal
    """
    buckets: dict[tuple[int, int], list[float]] = {}
    for entry in entries:
        buckets.setdefault(entry.month_key, []).append(entry.hours)

    return [
        MonthlyBucket(year=year, month=month, hours=round(math.fsum(hours), 1))
        for (year, month), hours in sorted(buckets.items())
    ]


def aggregate(
    entries: Iterable[TimeEntry],
    trend_min_buckets: int = DEFAULT_TREND_MIN_BUCKETS,
) -> AnalyticsSummary:
    """Group entries by category and subcategory and derive statistics.

    Category and subcategory order follows the first time each label is
    seen in ``entries``.
    Entries are read, never modified.

    Args:
        entries: Already filtered entries
        trend_min_buckets: Minimum number of months for the trend to count

    Returns:
        AnalyticsSummary (zeros and empty collections for empty input)
    """
    entries = list(entries)
    categories: dict[str, CategoryAggregate] = {}

    for entry in entries:
        cat = categories.get(entry.category)
        if cat is None:
            cat = categories[entry.category] = CategoryAggregate(category=entry.category)
        cat.entries.append(entry)

        sub = cat.subcategories.get(entry.subcategory)
        if sub is None:
            sub = cat.subcategories[entry.subcategory] = SubcategoryAggregate(
                subcategory=entry.subcategory
            )
        sub.entries.append(entry)

    # Every level sums its own entries with fsum
    total_hours = math.fsum(entry.hours for entry in entries)
    for cat in categories.values():
        cat.total_hours = math.fsum(entry.hours for entry in cat.entries)
        cat.percentage = percentage_of(cat.total_hours, total_hours)
        for sub in cat.subcategories.values():
            sub.hours = math.fsum(entry.hours for entry in sub.entries)

    working_days = len({entry.date for entry in entries})
    avg_hours_per_day = total_hours / working_days if working_days else 0.0

    pie_data = [
        {
            "name": cat.category,
            "value": round(cat.total_hours, 1),
            "percentage": cat.percentage,
        }
        for cat in categories.values()
    ]
    bar_data = [
        {
            "category": cat.category,
            "subcategory": sub.subcategory,
            "hours": round(sub.hours, 1),
        }
        for cat in categories.values()
        for sub in cat.subcategories.values()
    ]

    return AnalyticsSummary(
        categories=categories,
        total_hours=total_hours,
        entry_count=len(entries),
        working_days=working_days,
        avg_hours_per_day=avg_hours_per_day,
        pie_data=pie_data,
        bar_data=bar_data,
        monthly_trend=monthly_trend(entries),
        trend_min_buckets=trend_min_buckets,
    )
