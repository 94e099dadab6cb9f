"""Routes inbound worker messages to the CSV engines."""

import logging
from enum import Enum
from typing import Any, AsyncIterator, Optional

from expensecsv.config import WorkerConfig
from expensecsv.domain.csv_export import CSVExportService, ExportResult
from expensecsv.domain.csv_import import CSVImportService, ImportResult, preview_csv
from expensecsv.domain.entities import ProgressState
from expensecsv.domain.errors import worker_busy
from expensecsv.domain.scheduler import CancellationToken
from expensecsv.worker.messages import (
    ErrorMessage,
    ExportComplete,
    ExportRequest,
    ImportComplete,
    ImportRequest,
    OutboundMessage,
    ParseComplete,
    ParseRequest,
    ProgressMessage,
    Request,
    parse_request,
)

logger = logging.getLogger(__name__)


class DispatcherState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def progress_message(progress: ProgressState, noun: str) -> ProgressMessage:
    """Build the PROGRESS message for a chunk boundary."""
    return ProgressMessage(
        progress=progress.percentage,
        message=f"Processed {progress.processed} of {progress.total} {noun}",
    )


class MessageDispatcher:
    """Runs one operation per inbound message.

    States move Idle -> Running -> Completed | Failed. Every dispatch emits
    zero or more ProgressMessage values followed by exactly one terminal
    message. Failures never escape as exceptions; they become ErrorMessage.
    """

    def __init__(self, config: Optional[WorkerConfig] = None):
        """Initialize dispatcher.

        Args:
            config: Worker configuration shared by all engines
        """
        self.config = config or WorkerConfig()
        self.state = DispatcherState.IDLE
        self.export_service = CSVExportService(self.config)
        self.import_service = CSVImportService(self.config)

    async def dispatch(
        self,
        message: Any,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncIterator[OutboundMessage]:
        """Handle one inbound message.

        Args:
            message: Inbound dict ({"type": ..., "data": ...})
            cancel_token: Optional token checked between chunks

        Yields:
            Outbound messages, the last one terminal
        """
        if self.state is DispatcherState.RUNNING:
            logger.warning("Rejected message while another operation is running")
            yield ErrorMessage(error=worker_busy())
            return

        try:
            request = parse_request(message)
        except Exception as e:
            logger.error("Rejected message: %s", e)
            self.state = DispatcherState.FAILED
            yield ErrorMessage(error=str(e))
            return

        self.state = DispatcherState.RUNNING
        logger.info("Starting %s", type(request).__name__)
        try:
            async for outbound in self._run(request, cancel_token):
                if outbound.terminal:
                    self.state = DispatcherState.COMPLETED
                yield outbound
        except Exception as e:
            logger.error("%s failed: %s", type(request).__name__, e)
            self.state = DispatcherState.FAILED
            yield ErrorMessage(error=str(e))
        finally:
            if self.state is DispatcherState.RUNNING:
                self.state = DispatcherState.FAILED

    async def _run(
        self, request: Request, cancel_token: Optional[CancellationToken]
    ) -> AsyncIterator[OutboundMessage]:
        if isinstance(request, ExportRequest):
            async for item in self.export_service.iter_export(
                request.records,
                request.categories,
                include_headers=request.include_headers,
                cancel_token=cancel_token,
            ):
                if isinstance(item, ExportResult):
                    yield ExportComplete(
                        csv_content=item.csv_content, total_records=item.total_records
                    )
                else:
                    yield progress_message(item, "expenses")

        elif isinstance(request, ImportRequest):
            async for item in self.import_service.iter_import(
                request.csv_content, request.categories, cancel_token=cancel_token
            ):
                if isinstance(item, ImportResult):
                    yield ImportComplete(
                        records=item.records,
                        errors=item.errors,
                        total_lines=item.total_lines,
                    )
                else:
                    yield progress_message(item, "lines")

        elif isinstance(request, ParseRequest):
            result = preview_csv(request.csv_content, self.config.preview_rows)
            yield ParseComplete(
                headers=result.headers,
                total_lines=result.total_lines,
                preview=result.preview,
            )
