"""Mapper functions to convert between wire dicts and domain entities.

Wire dicts use the persistence layer's snake_case keys. Keeping the
conversion here lets the engines work on typed entities only.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from expensecsv.domain import entities as domain
from expensecsv.domain.errors import ValidationError
from expensecsv.utils.date_parser import to_date, to_datetime


def category_from_dict(data: dict[str, Any]) -> domain.Category:
    """Convert a category dict ({"id", "name"}) to a Category entity."""
    try:
        return domain.Category(id=data["id"], name=str(data["name"]))
    except (KeyError, TypeError) as e:
        raise ValidationError(f"Invalid category {data!r}: missing {e}")


def record_from_dict(data: dict[str, Any]) -> domain.ExpenseRecord:
    """Convert a stored expense dict to an ExpenseRecord entity.

    The creator's name is read from ``created_by`` or, as the persistence
    layer nests it, from ``created_by_user.full_name``.
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Invalid expense record {data!r}")

    for key in ("amount", "expense_date"):
        if data.get(key) is None:
            raise ValidationError(f"Expense record is missing '{key}'")

    try:
        amount = Decimal(str(data["amount"]))
    except InvalidOperation:
        raise ValidationError(f"Expense record has invalid amount {data['amount']!r}")

    try:
        expense_date = to_date(data["expense_date"])
        created_at = to_datetime(data.get("created_at"))
    except ValueError as e:
        raise ValidationError(f"Expense record has invalid date: {e}")

    created_by = data.get("created_by")
    if created_by is None:
        created_by = (data.get("created_by_user") or {}).get("full_name")

    return domain.ExpenseRecord(
        amount=amount,
        description=data.get("description") or "",
        expense_date=expense_date,
        category_id=data.get("category_id"),
        notes=data.get("notes"),
        created_by=created_by,
        created_at=created_at,
        id=data.get("id"),
    )


def record_to_dict(record: domain.ExpenseRecord) -> dict[str, Any]:
    """Convert an ExpenseRecord entity to a JSON-safe dict."""
    data = {
        "amount": float(record.amount),
        "description": record.description,
        "expense_date": record.expense_date.isoformat(),
        "category_id": record.category_id,
        "notes": record.notes,
    }
    if record.created_by is not None:
        data["created_by"] = record.created_by
    if record.created_at is not None:
        data["created_at"] = record.created_at.isoformat()
    if record.id is not None:
        data["id"] = record.id
    return data


def row_error_to_dict(error: domain.ImportRowError) -> dict[str, Any]:
    """Convert an ImportRowError entity to a dict."""
    return {
        "line": error.line,
        "content": error.content,
        "message": error.message,
    }
