"""Runtime configuration for the CSV worker."""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional

from expensecsv.domain.errors import ValidationError

DEFAULT_EXPORT_CHUNK_SIZE = 1000
DEFAULT_IMPORT_CHUNK_SIZE = 500
DEFAULT_PREVIEW_ROWS = 5

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class WorkerConfig:
    """Tunable limits for the CSV engines.

    Attributes:
        export_chunk_size: Records formatted per export chunk
        import_chunk_size: Data lines processed per import chunk
        preview_rows: Data lines included in a parse preview
    """

    export_chunk_size: int = DEFAULT_EXPORT_CHUNK_SIZE
    import_chunk_size: int = DEFAULT_IMPORT_CHUNK_SIZE
    preview_rows: int = DEFAULT_PREVIEW_ROWS

    def __post_init__(self):
        for field_name in ("export_chunk_size", "import_chunk_size"):
            value = getattr(self, field_name)
            if not isinstance(value, int) or value < 1:
                raise ValidationError(f"{field_name} must be a positive integer, got {value!r}")
        if not isinstance(self.preview_rows, int) or self.preview_rows < 0:
            raise ValidationError(
                f"preview_rows must be a non-negative integer, got {self.preview_rows!r}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WorkerConfig":
        """Build a config, letting environment variables override defaults.

        Args:
            environ: Mapping to read from. If None, uses os.environ

        Reads EXPENSECSV_EXPORT_CHUNK_SIZE, EXPENSECSV_IMPORT_CHUNK_SIZE and
        EXPENSECSV_PREVIEW_ROWS.

        Raises:
            ValidationError: If a variable is set but not a valid integer
        """
        if environ is None:
            environ = os.environ

        return cls(
            export_chunk_size=_int_from_env(
                environ, "EXPENSECSV_EXPORT_CHUNK_SIZE", DEFAULT_EXPORT_CHUNK_SIZE
            ),
            import_chunk_size=_int_from_env(
                environ, "EXPENSECSV_IMPORT_CHUNK_SIZE", DEFAULT_IMPORT_CHUNK_SIZE
            ),
            preview_rows=_int_from_env(environ, "EXPENSECSV_PREVIEW_ROWS", DEFAULT_PREVIEW_ROWS),
        )


def _int_from_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got '{raw}'")


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a stderr handler to the package logger.

    Idempotent: calling it again changes the level and points the existing
    handler at the current sys.stderr.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)

    Returns:
        The ``expensecsv`` logger
    """
    logger = logging.getLogger("expensecsv")
    logger.setLevel(level.upper())

    for handler in logger.handlers:
        if getattr(handler, "_expensecsv_handler", False):
            handler.setStream(sys.stderr)
            return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._expensecsv_handler = True
    logger.addHandler(handler)
    return logger
