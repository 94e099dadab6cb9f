"""Mapping between expense fields, CSV headers and category names."""

from typing import Optional

from expensecsv.domain.entities import Category

EXPORT_HEADERS = [
    "Date",
    "Amount",
    "Description",
    "Category",
    "Notes",
    "Created By",
    "Created At",
]

# Lower-cased CSV header -> expense field
FIELD_MAPPING = {
    "date": "expense_date",
    "amount": "amount",
    "description": "description",
    "category": "category_id",
    "notes": "notes",
}

REQUIRED_FIELDS = ("amount", "description", "expense_date")

UNKNOWN_CATEGORY_NAME = "Unknown"


class FieldMapper:
    """Resolves headers and categories for one import or export run."""

    def __init__(self, categories: list[Category]):
        """Build both category lookups.

        Args:
            categories: Categories known to the caller
        """
        self._names_by_id = {}
        self._ids_by_name = {}
        for category in categories:
            self._names_by_id[category.id] = category.name
            self._ids_by_name[category.name.lower()] = category.id

    @staticmethod
    def map_headers(header_fields: list[str]) -> dict[int, str]:
        """Map header positions to expense fields.

        Args:
            header_fields: Tokenized header row

        Returns:
            Dict of column index -> field name. Headers without a mapping are
            left out.
        """
        mapped = {}
        for index, header in enumerate(header_fields):
            field = FIELD_MAPPING.get(header.strip().lower())
            if field is not None:
                mapped[index] = field
        return mapped

    def category_name(self, category_id: Optional[str]) -> str:
        """Return the category name for an ID, or "Unknown"."""
        if category_id is None:
            return UNKNOWN_CATEGORY_NAME
        return self._names_by_id.get(category_id, UNKNOWN_CATEGORY_NAME)

    def category_id(self, name: str) -> Optional[str]:
        """Return the category ID for a name (exact, case-insensitive)."""
        return self._ids_by_name.get(name.lower())
