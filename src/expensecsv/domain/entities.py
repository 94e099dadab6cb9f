"""Domain model entities for expensecsv.

These are pure data classes representing the records that flow through the
CSV engines. Expense records and categories are owned by the persistence
layer; row errors and progress states only live for one operation.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Category:
    """Named spending bucket."""

    id: str
    name: str


@dataclass(frozen=True)
class ExpenseRecord:
    """Single expense line item."""

    amount: Decimal
    description: str
    expense_date: date
    category_id: Optional[str]
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class ImportRowError:
    """A CSV data line that was rejected during import.

    ``line`` is 1-based and counts data lines only, so the first line after
    the header is line 1.
    """

    line: int
    content: str
    message: str


@dataclass(frozen=True)
class ProgressState:
    """Progress of a chunked operation."""

    processed: int
    total: int

    @property
    def percentage(self) -> int:
        """Completed share in whole percent.

        Floored, so 100 is only reported once everything is processed.
        """
        if self.total <= 0:
            return 100
        return self.processed * 100 // self.total

    @property
    def done(self) -> bool:
        return self.processed >= self.total
