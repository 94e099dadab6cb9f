"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class UnknownOperationError(DomainError):
    """Inbound message names an operation the worker does not support."""


class OperationCancelled(DomainError):
    """A running operation was cancelled at a chunk boundary."""


def invalid_amount(raw: str) -> str:
    """Return message for an amount that is not a positive number."""
    return f"Invalid amount: {raw}"


def invalid_date(raw: str) -> str:
    """Return message for an unparsable date."""
    return f"Invalid date format: {raw}"


def unknown_category(raw: str) -> str:
    """Return message for a category name with no match."""
    return f"Unknown category: {raw}"


def missing_required_fields() -> str:
    """Return message for a row without amount, description or date."""
    return "Missing required fields: amount, description, or date"


def unknown_operation(operation_type) -> str:
    """Return message for an unsupported inbound message type."""
    return f"Unknown operation type: {operation_type}"


def operation_cancelled() -> str:
    return "Operation cancelled"


def worker_busy() -> str:
    return "Worker is busy with another operation"
