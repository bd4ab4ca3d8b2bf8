"""Tests for entry aggregation."""

import math
import random
from datetime import date, timedelta

import pytest  # type: ignore[import-not-found]

from conftest import make_entry
from timesheet.analysis.aggregator import aggregate, monthly_trend, percentage_of


def _random_entries(seed: int, count: int) -> list:
    rng = random.Random(seed)
    labels = {"A": ["X", "Y"], "B": ["Z"], "C": ["P", "Q", "R"]}
    entries = []
    for _ in range(count):
        category = rng.choice(list(labels))
        entries.append(
            make_entry(
                rng.choice(["u1", "u2"]),
                date(2024, 1, 1) + timedelta(days=rng.randrange(90)),
                category=category,
                subcategory=rng.choice(labels[category]),
                hours=round(rng.uniform(0.1, 9.9), 2),
            )
        )
    return entries


class TestAggregate:
    """Test aggregate()."""

    def test_category_example(self) -> None:
        """Categories keep first-seen order and split the total evenly."""
        entries = [
            make_entry("u1", date(2024, 1, 15), category="A", subcategory="X", hours=3),
            make_entry("u1", date(2024, 1, 15), category="A", subcategory="Y", hours=2),
            make_entry("u1", date(2024, 1, 16), category="B", subcategory="Z", hours=5),
        ]

        summary = aggregate(entries)

        assert list(summary.categories) == ["A", "B"]
        assert summary.categories["A"].total_hours == 5
        assert summary.categories["B"].total_hours == 5
        assert summary.total_hours == 10
        assert summary.categories["A"].percentage == 50.0
        assert summary.categories["B"].percentage == 50.0
        assert list(summary.categories["A"].subcategories) == ["X", "Y"]
        assert summary.entry_count == 3

    def test_subcategory_order_is_first_seen(self) -> None:
        entries = [
            make_entry("u1", date(2024, 1, 15), category="A", subcategory="Y", hours=1),
            make_entry("u1", date(2024, 1, 15), category="A", subcategory="X", hours=1),
            make_entry("u1", date(2024, 1, 15), category="A", subcategory="Y", hours=1),
        ]

        cat = aggregate(entries).categories["A"]

        assert list(cat.subcategories) == ["Y", "X"]
        assert cat.subcategories["Y"].hours == 2
        assert cat.subcategories["Y"].entry_count == 2
        assert cat.entry_count == 3

    def test_empty_input(self) -> None:
        """Empty input is a valid, displayable result."""
        summary = aggregate([])

        assert summary.categories == {}
        assert summary.total_hours == 0
        assert summary.working_days == 0
        assert summary.avg_hours_per_day == 0
        assert summary.pie_data == []
        assert summary.bar_data == []
        assert summary.monthly_trend == []
        assert summary.is_empty
        assert not summary.has_trend

    def test_working_days_and_average(self) -> None:
        entries = [
            make_entry("u1", date(2024, 1, 15), hours=8),
            make_entry("u2", date(2024, 1, 15), hours=4),
            make_entry("u1", date(2024, 1, 16), hours=6),
        ]

        summary = aggregate(entries)

        assert summary.working_days == 2
        assert summary.avg_hours_per_day == 9.0

    @pytest.mark.slow
    @pytest.mark.parametrize("seed", range(10))
    def test_sum_invariants(self, seed: int) -> None:
        """Category totals, subcategory hours and the grand total agree."""
        summary = aggregate(_random_entries(seed, 60))

        category_sum = math.fsum(cat.total_hours for cat in summary.categories.values())
        subcategory_sum = math.fsum(
            sub.hours for cat in summary.categories.values() for sub in cat.subcategories.values()
        )
        assert category_sum == pytest.approx(summary.total_hours)
        assert subcategory_sum == pytest.approx(summary.total_hours)
        assert summary.avg_hours_per_day == pytest.approx(
            summary.total_hours / summary.working_days
        )

    @pytest.mark.parametrize("seed", range(10))
    def test_percentages_sum_to_100(self, seed: int) -> None:
        summary = aggregate(_random_entries(seed, 40))
        total = sum(cat.percentage for cat in summary.categories.values())
        # One decimal of rounding per category
        assert total == pytest.approx(100.0, abs=0.05 * len(summary.categories))

    def test_entries_not_modified(self) -> None:
        entries = _random_entries(1, 10)
        before = [e.to_dict() for e in entries]

        aggregate(entries)

        assert [e.to_dict() for e in entries] == before

    def test_deterministic(self) -> None:
        entries = _random_entries(3, 30)
        assert aggregate(entries).to_dict() == aggregate(list(entries)).to_dict()

    def test_pie_and_bar_data(self) -> None:
        entries = [
            make_entry("u1", date(2024, 1, 15), category="A", subcategory="X", hours=1.25),
            make_entry("u1", date(2024, 1, 15), category="B", subcategory="Z", hours=3.75),
        ]

        summary = aggregate(entries)

        assert summary.pie_data == [
            {"name": "A", "value": 1.2, "percentage": 25.0},
            {"name": "B", "value": 3.8, "percentage": 75.0},
        ]
        assert summary.bar_data == [
            {"category": "A", "subcategory": "X", "hours": 1.2},
            {"category": "B", "subcategory": "Z", "hours": 3.8},
        ]


class TestMonthlyTrend:
    """Test monthly bucketing."""

    def test_buckets_are_chronological(self) -> None:
        entries = [
            make_entry("u1", date(2025, 1, 20), hours=8),
            make_entry("u1", date(2024, 12, 15), hours=8),
            make_entry("u1", date(2025, 1, 21), hours=4.5),
        ]

        buckets = monthly_trend(entries)

        assert [(b.label, b.hours) for b in buckets] == [("2024-12", 8.0), ("2025-01", 12.5)]

    def test_has_trend_requires_two_months(self) -> None:
        one_month = [make_entry("u1", date(2025, 1, d)) for d in (20, 21)]
        two_months = one_month + [make_entry("u1", date(2024, 12, 15))]

        assert not aggregate(one_month).has_trend
        assert aggregate(two_months).has_trend

    def test_custom_minimum(self) -> None:
        entries = [make_entry("u1", date(2025, 1, 20))]
        assert aggregate(entries, trend_min_buckets=1).has_trend


class TestPercentageOf:
    def test_zero_total(self) -> None:
        assert percentage_of(0, 0) is None

    def test_rounding(self) -> None:
        assert percentage_of(1, 3) == 33.3
