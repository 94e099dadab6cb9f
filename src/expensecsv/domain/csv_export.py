"""CSV export domain service."""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Iterable, Optional, Union

from expensecsv.config import WorkerConfig
from expensecsv.domain.entities import Category, ExpenseRecord, ProgressState
from expensecsv.domain.field_mapping import EXPORT_HEADERS, FieldMapper
from expensecsv.utils.amount_parser import format_amount
from expensecsv.utils.csv_tokenizer import escape_csv_value
from expensecsv.utils.date_parser import format_export_date, format_export_datetime
from expensecsv.domain.scheduler import CancellationToken, ChunkScheduler

logger = logging.getLogger(__name__)

UNKNOWN_CREATOR = "Unknown"


@dataclass(frozen=True)
class ExportResult:
    """Finished export: CSV text and the number of records written."""

    csv_content: str
    total_records: int


class CSVExportService:
    """Service for rendering expense records as CSV text."""

    def __init__(self, config: Optional[WorkerConfig] = None):
        """Initialize CSV export service.

        Args:
            config: Worker configuration. Defaults to WorkerConfig()
        """
        self.config = config or WorkerConfig()

    async def iter_export(
        self,
        records: Iterable[ExpenseRecord],
        categories: Iterable[Category],
        include_headers: bool = True,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncIterator[Union[ProgressState, ExportResult]]:
        """Export records chunk by chunk.

        Args:
            records: Records to export, in output order
            categories: Categories used to resolve category names
            include_headers: Whether to write the header row first
            cancel_token: Optional token checked between chunks

        Yields:
            One ProgressState per chunk, then a single ExportResult

        Raises:
            OperationCancelled: If cancelled between chunks
        """
        records = list(records)
        mapper = FieldMapper(list(categories))
        scheduler = ChunkScheduler(self.config.export_chunk_size)

        logger.info("Exporting %d expenses", len(records))

        rows = []
        if include_headers:
            rows.append(",".join(EXPORT_HEADERS) + "\n")

        def format_chunk(offset: int, chunk: list[ExpenseRecord]) -> None:
            for record in chunk:
                rows.append(self.format_row(record, mapper) + "\n")

        async for progress in scheduler.run(records, format_chunk, cancel_token):
            yield progress

        logger.info("Export complete: %d expenses", len(records))
        yield ExportResult(csv_content="".join(rows), total_records=len(records))

    async def export_csv(
        self,
        records: Iterable[ExpenseRecord],
        categories: Iterable[Category],
        include_headers: bool = True,
        cancel_token: Optional[CancellationToken] = None,
        on_progress: Optional[Callable[[ProgressState], None]] = None,
    ) -> ExportResult:
        """Run an export to completion and return its result."""
        result = None
        async for item in self.iter_export(records, categories, include_headers, cancel_token):
            if isinstance(item, ExportResult):
                result = item
            elif on_progress is not None:
                on_progress(item)
        return result

    @staticmethod
    def format_row(record: ExpenseRecord, mapper: FieldMapper) -> str:
        """Render one record as a CSV line without its terminator."""
        fields = [
            format_export_date(record.expense_date),
            format_amount(record.amount),
            escape_csv_value(record.description),
            escape_csv_value(mapper.category_name(record.category_id)),
            escape_csv_value(record.notes or ""),
            escape_csv_value(record.created_by or UNKNOWN_CREATOR),
            escape_csv_value(format_export_datetime(record.created_at)),
        ]
        return ",".join(fields)
