"""Cooperative chunked processing with progress reporting."""

import asyncio
import logging
import threading
from typing import AsyncIterator, Callable, Optional, Sequence, TypeVar

from expensecsv.domain.entities import ProgressState
from expensecsv.domain.errors import (
    OperationCancelled,
    ValidationError,
    operation_cancelled,
)

__all__ = ["CancellationToken", "ChunkScheduler"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """Cancellation flag shared between a host and a running operation.

    Backed by a threading.Event so it can be set from another thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelled if cancel() has been called."""
        if self._event.is_set():
            raise OperationCancelled(operation_cancelled())


class ChunkScheduler:
    """Runs work in fixed-size slices, yielding to the event loop in between.

    Each slice is processed synchronously. After every slice a ProgressState
    is produced and control goes back to the event loop before the next
    slice starts, so other tasks on the same loop stay responsive. Slices run
    strictly in order; there is no parallelism.
    """

    def __init__(self, chunk_size: int) -> None:
        """Initialize scheduler.

        Args:
            chunk_size: Maximum number of items per slice

        Raises:
            ValidationError: If chunk_size is smaller than 1
        """
        if chunk_size < 1:
            raise ValidationError(f"Chunk size must be at least 1, got {chunk_size}")
        self.chunk_size = chunk_size

    async def run(
        self,
        items: Sequence[T],
        process_chunk: Callable[[int, Sequence[T]], None],
        cancel_token: Optional[CancellationToken] = None,
    ) -> AsyncIterator[ProgressState]:
        """Process items slice by slice.

        Args:
            items: Work items
            process_chunk: Called as process_chunk(offset, chunk) where offset
                is the index of the chunk's first item in items
            cancel_token: Checked before every slice

        Yields:
            ProgressState after each slice. The last one has
            processed == total; an empty input yields ProgressState(0, 0).

        Raises:
            OperationCancelled: If the token is cancelled at a slice boundary
        """
        total = len(items)

        if total == 0:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            yield ProgressState(processed=0, total=0)
            return

        processed = 0
        while processed < total:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            chunk = items[processed : processed + self.chunk_size]
            process_chunk(processed, chunk)
            processed += len(chunk)
            logger.debug("Processed chunk ending at %d of %d", processed, total)

            yield ProgressState(processed=processed, total=total)

            if processed < total:
                await asyncio.sleep(0)
