"""Work category table.

Each category owns an ordered set of allowed subcategories. Entries are
validated against the table when they are created or edited.
"""

from collections.abc import Iterator, Mapping, Sequence
from typing import Optional

from timesheet.core.errors import ValidationError

DEFAULT_CATEGORIES: dict[str, tuple[str, ...]] = {
    "Development": (
        "Frontend Development",
        "Backend Development",
        "Database Design",
        "System Testing",
        "Code Review",
    ),
    "Project Management": (
        "Requirements Analysis",
        "Progress Tracking",
        "Meeting Coordination",
        "Documentation",
        "Risk Assessment",
    ),
    "Customer Service": (
        "Customer Inquiries",
        "Issue Resolution",
        "Technical Support",
        "Product Demo",
        "Training",
    ),
    "Administration": (
        "Paperwork",
        "Report Writing",
        "Data Organization",
        "Meeting Minutes",
        "Other Administration",
    ),
    "Leave": (
        "Annual Leave",
        "Sick Leave",
        "Personal Leave",
        "Special Leave",
        "Compensatory Leave",
    ),
}


class CategoryTable:
    """Ordered mapping of category label to allowed subcategory labels."""

    def __init__(self, table: Optional[Mapping[str, Sequence[str]]] = None):
        """Initialize category table.

        Args:
            table: Category -> subcategories mapping. Defaults to DEFAULT_CATEGORIES
        """
        source = DEFAULT_CATEGORIES if table is None else table
        self._table: dict[str, tuple[str, ...]] = {
            category: tuple(subcategories) for category, subcategories in source.items()
        }

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, category: object) -> bool:
        return category in self._table

    @property
    def categories(self) -> list[str]:
        """Category labels in table order."""
        return list(self._table)

    def subcategories(self, category: str) -> tuple[str, ...]:
        """Allowed subcategories for a category (empty if unknown)."""
        return self._table.get(category, ())

    def validate(self, category: str, subcategory: str) -> None:
        """Check that a category/subcategory pair is allowed.

        Args:
            category: Category label
            subcategory: Subcategory label

        Raises:
            ValidationError: If the category is unknown or the subcategory
                does not belong to it
        """
        if category not in self._table:
            raise ValidationError("category", f"Unknown category: {category}")
        if subcategory not in self._table[category]:
            raise ValidationError(
                "subcategory",
                f"'{subcategory}' is not a subcategory of '{category}'",
            )

    def to_dict(self) -> dict[str, list[str]]:
        """Convert to a plain mapping (for config files)."""
        return {category: list(subs) for category, subs in self._table.items()}
