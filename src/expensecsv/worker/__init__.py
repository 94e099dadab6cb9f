"""Worker boundary: messages, dispatch and the host thread."""

from expensecsv.domain.scheduler import CancellationToken, ChunkScheduler

__all__ = ["CancellationToken", "ChunkScheduler"]
