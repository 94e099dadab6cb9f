"""CSV import domain service."""

import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, Iterable, Optional, Union

from expensecsv.config import DEFAULT_PREVIEW_ROWS, WorkerConfig
from expensecsv.domain.entities import (
    Category,
    ExpenseRecord,
    ImportRowError,
    ProgressState,
)
from expensecsv.domain.errors import (
    ValidationError,
    invalid_amount,
    invalid_date,
    missing_required_fields,
    unknown_category,
)
from expensecsv.domain.field_mapping import REQUIRED_FIELDS, FieldMapper
from expensecsv.utils.amount_parser import parse_amount
from expensecsv.utils.csv_tokenizer import parse_csv_line
from expensecsv.utils.date_parser import parse_date
from expensecsv.domain.scheduler import CancellationToken, ChunkScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportResult:
    """Finished import: accepted records and rejected lines."""

    records: list[ExpenseRecord] = field(default_factory=list)
    errors: list[ImportRowError] = field(default_factory=list)
    total_lines: int = 0

    @property
    def success_count(self) -> int:
        return len(self.records)

    @property
    def error_count(self) -> int:
        return len(self.errors)


@dataclass(frozen=True)
class PreviewResult:
    """Structure of a CSV file without any row validation."""

    headers: list[str]
    total_lines: int
    preview: list[str]


def split_lines(csv_content: str) -> list[str]:
    """Split CSV text into trimmed, non-blank lines.

    Splitting happens before tokenization, so a quoted field that contains a
    line break ends up split across two lines.
    """
    return [line.strip() for line in csv_content.split("\n") if line.strip()]


def preview_csv(csv_content: str, preview_rows: int = DEFAULT_PREVIEW_ROWS) -> PreviewResult:
    """Inspect headers, data line count and the first few lines.

    Args:
        csv_content: Full CSV text
        preview_rows: Number of data lines to include after the header

    Returns:
        PreviewResult with trimmed header names, the number of data lines and
        the raw header line followed by up to preview_rows data lines
    """
    lines = split_lines(csv_content)
    if not lines:
        return PreviewResult(headers=[], total_lines=0, preview=[])

    headers = [header.strip() for header in parse_csv_line(lines[0])]
    return PreviewResult(
        headers=headers,
        total_lines=len(lines) - 1,
        preview=lines[: preview_rows + 1],
    )


class CSVImportService:
    """Service for turning CSV text into validated expense records."""

    def __init__(self, config: Optional[WorkerConfig] = None):
        """Initialize CSV import service.

        Args:
            config: Worker configuration. Defaults to WorkerConfig()
        """
        self.config = config or WorkerConfig()

    async def iter_import(
        self,
        csv_content: str,
        categories: Iterable[Category],
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncIterator[Union[ProgressState, ImportResult]]:
        """Import CSV text chunk by chunk.

        Rows that fail validation are collected as ImportRowError values and
        never stop the rest of the batch.

        Args:
            csv_content: CSV text whose first non-blank line is the header
            categories: Categories used to resolve the Category column
            cancel_token: Optional token checked between chunks

        Yields:
            One ProgressState per chunk, then a single ImportResult

        Raises:
            ValidationError: If the content has no header line
            OperationCancelled: If cancelled between chunks
        """
        lines = split_lines(csv_content)
        if not lines:
            raise ValidationError("CSV content is empty")

        column_map = FieldMapper.map_headers(parse_csv_line(lines[0]))
        mapper = FieldMapper(list(categories))
        scheduler = ChunkScheduler(self.config.import_chunk_size)
        data_lines = lines[1:]

        logger.info(
            "Importing %d lines, mapped columns: %s",
            len(data_lines),
            sorted(column_map.values()),
        )

        records = []
        errors = []

        def process_chunk(offset: int, chunk: list[str]) -> None:
            for line_number, line in enumerate(chunk, start=offset + 1):
                try:
                    records.append(self.parse_row(line, column_map, mapper))
                except ValueError as e:
                    logger.debug("Line %d rejected: %s", line_number, e)
                    errors.append(ImportRowError(line=line_number, content=line, message=str(e)))

        async for progress in scheduler.run(data_lines, process_chunk, cancel_token):
            yield progress

        logger.info(
            "Import complete: %d accepted, %d rejected", len(records), len(errors)
        )
        yield ImportResult(records=records, errors=errors, total_lines=len(data_lines))

    async def import_csv(
        self,
        csv_content: str,
        categories: Iterable[Category],
        cancel_token: Optional[CancellationToken] = None,
        on_progress: Optional[Callable[[ProgressState], None]] = None,
    ) -> ImportResult:
        """Run an import to completion and return its result.

        Args:
            csv_content: CSV text whose first non-blank line is the header
            categories: Categories used to resolve the Category column
            cancel_token: Optional token checked between chunks
            on_progress: Optional callback for each ProgressState
        """
        result = None
        async for item in self.iter_import(csv_content, categories, cancel_token):
            if isinstance(item, ImportResult):
                result = item
            elif on_progress is not None:
                on_progress(item)
        return result

    @staticmethod
    def parse_row(line: str, column_map: dict[int, str], mapper: FieldMapper) -> ExpenseRecord:
        """Build a record from one data line.

        Columns are matched by header position. Missing trailing fields are
        simply absent, which usually ends in a missing-field rejection.

        Args:
            line: Raw data line
            column_map: Column index -> field name, from FieldMapper.map_headers
            mapper: Category lookup for this run

        Returns:
            Validated ExpenseRecord

        Raises:
            ValidationError: On the first invalid field, or when amount,
                description or date is missing
        """
        values = parse_csv_line(line)
        fields = {}

        for index, field_name in column_map.items():
            if index >= len(values):
                continue
            raw = values[index]
            value = raw.strip()

            if field_name == "amount":
                try:
                    fields[field_name] = parse_amount(value)
                except ValueError:
                    raise ValidationError(invalid_amount(raw))
            elif field_name == "expense_date":
                try:
                    fields[field_name] = parse_date(value)
                except ValueError:
                    raise ValidationError(invalid_date(value))
            elif field_name == "category_id":
                category_id = mapper.category_id(value)
                if category_id is None:
                    raise ValidationError(unknown_category(value))
                fields[field_name] = category_id
            else:
                fields[field_name] = value

        if any(not fields.get(name) for name in REQUIRED_FIELDS):
            raise ValidationError(missing_required_fields())

        return ExpenseRecord(
            amount=fields["amount"],
            description=fields["description"],
            expense_date=fields["expense_date"],
            category_id=fields.get("category_id"),
            notes=fields.get("notes") or None,
        )
