"""Typed messages exchanged between a host and the CSV worker.

Inbound: ``{"type": "EXPORT_CSV" | "IMPORT_CSV" | "PARSE_CSV", "data": {...}}``.
Outbound: zero or more PROGRESS messages followed by exactly one terminal
message (EXPORT_COMPLETE, IMPORT_COMPLETE, PARSE_COMPLETE or ERROR).
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from expensecsv.domain.entities import Category, ExpenseRecord, ImportRowError
from expensecsv.domain.errors import (
    UnknownOperationError,
    ValidationError,
    unknown_operation,
)
from expensecsv.worker.mappers import (
    category_from_dict,
    record_from_dict,
    record_to_dict,
    row_error_to_dict,
)

EXPORT_CSV = "EXPORT_CSV"
IMPORT_CSV = "IMPORT_CSV"
PARSE_CSV = "PARSE_CSV"

PROGRESS = "PROGRESS"
EXPORT_COMPLETE = "EXPORT_COMPLETE"
IMPORT_COMPLETE = "IMPORT_COMPLETE"
PARSE_COMPLETE = "PARSE_COMPLETE"
ERROR = "ERROR"

TERMINAL_TYPES = frozenset({EXPORT_COMPLETE, IMPORT_COMPLETE, PARSE_COMPLETE, ERROR})


# Inbound requests


@dataclass(frozen=True)
class ExportRequest:
    records: list[ExpenseRecord]
    categories: list[Category]
    include_headers: bool = True


@dataclass(frozen=True)
class ImportRequest:
    csv_content: str
    categories: list[Category]


@dataclass(frozen=True)
class ParseRequest:
    csv_content: str


Request = Union[ExportRequest, ImportRequest, ParseRequest]


def parse_request(message: Any) -> Request:
    """Decode an inbound message into a typed request.

    Args:
        message: Dict with "type" and "data" keys

    Returns:
        ExportRequest, ImportRequest or ParseRequest

    Raises:
        UnknownOperationError: If the type is not supported
        ValidationError: If the payload is malformed
    """
    if not isinstance(message, dict):
        raise ValidationError(f"Message must be an object, got {type(message).__name__}")

    operation = message.get("type")
    data = message.get("data") or {}
    if not isinstance(data, dict):
        raise ValidationError("Message data must be an object")

    if operation == EXPORT_CSV:
        expenses = _list_field(data, "expenses", required=True)
        return ExportRequest(
            records=[record_from_dict(item) for item in expenses],
            categories=[category_from_dict(item) for item in _list_field(data, "categories")],
            include_headers=bool(data.get("includeHeaders", True)),
        )

    if operation == IMPORT_CSV:
        return ImportRequest(
            csv_content=_text_field(data, "csvContent"),
            categories=[category_from_dict(item) for item in _list_field(data, "categories")],
        )

    if operation == PARSE_CSV:
        return ParseRequest(csv_content=_text_field(data, "csvContent"))

    raise UnknownOperationError(unknown_operation(operation))


def _list_field(data: dict, key: str, required: bool = False) -> list:
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError(f"Message data is missing '{key}'")
        return []
    if not isinstance(value, list):
        raise ValidationError(f"'{key}' must be a list")
    return value


def _text_field(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValidationError(f"'{key}' must be a string")
    return value


# Outbound messages


@dataclass(frozen=True)
class ProgressMessage:
    type: ClassVar[str] = PROGRESS
    terminal: ClassVar[bool] = False

    progress: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "progress": self.progress, "message": self.message}


@dataclass(frozen=True)
class ExportComplete:
    type: ClassVar[str] = EXPORT_COMPLETE
    terminal: ClassVar[bool] = True

    csv_content: str
    total_records: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "csvContent": self.csv_content,
            "totalRecords": self.total_records,
        }


@dataclass(frozen=True)
class ImportComplete:
    type: ClassVar[str] = IMPORT_COMPLETE
    terminal: ClassVar[bool] = True

    records: list[ExpenseRecord] = field(default_factory=list)
    errors: list[ImportRowError] = field(default_factory=list)
    total_lines: int = 0

    @property
    def success_count(self) -> int:
        return len(self.records)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "expenses": [record_to_dict(record) for record in self.records],
            "errors": [row_error_to_dict(error) for error in self.errors],
            "totalLines": self.total_lines,
            "successCount": self.success_count,
            "errorCount": self.error_count,
        }


@dataclass(frozen=True)
class ParseComplete:
    type: ClassVar[str] = PARSE_COMPLETE
    terminal: ClassVar[bool] = True

    headers: list[str]
    total_lines: int
    preview: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "headers": list(self.headers),
            "totalLines": self.total_lines,
            "preview": list(self.preview),
        }


@dataclass(frozen=True)
class ErrorMessage:
    type: ClassVar[str] = ERROR
    terminal: ClassVar[bool] = True

    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "error": self.error}


OutboundMessage = Union[ProgressMessage, ExportComplete, ImportComplete, ParseComplete, ErrorMessage]
