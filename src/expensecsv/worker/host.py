"""Background worker thread that owns a MessageDispatcher.

The host and the worker share no mutable state: every message crossing the
boundary in either direction is copied through JSON.
"""

import asyncio
import json
import logging
import queue
import threading
from contextlib import aclosing
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Iterator, Optional

from expensecsv.config import WorkerConfig
from expensecsv.domain.scheduler import CancellationToken
from expensecsv.worker.dispatcher import MessageDispatcher
from expensecsv.worker.messages import TERMINAL_TYPES, ErrorMessage

__all__ = ["CSVWorker", "clone_message"]

logger = logging.getLogger(__name__)

_STOP = object()


def _json_default(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} cannot cross the worker boundary")


def clone_message(message: Any) -> Any:
    """Deep-copy a message the way it would travel between processes."""
    return json.loads(json.dumps(message, default=_json_default))


class CSVWorker:
    """Runs CSV operations on a dedicated thread.

    Requests posted with post_message() are queued and handled one at a time
    in arrival order. Outbound messages are delivered to on_message if given,
    otherwise they are queued for get_message() / iter_messages().
    """

    def __init__(
        self,
        config: Optional[WorkerConfig] = None,
        on_message: Optional[Callable[[dict], None]] = None,
    ) -> None:
        """Initialize worker.

        Args:
            config: Worker configuration. Defaults to WorkerConfig.from_env()
            on_message: Optional callback invoked on the worker thread with
                each outbound message dict
        """
        self.config = config or WorkerConfig.from_env()
        self._on_message = on_message
        self._inbox: queue.Queue = queue.Queue()
        self._outbox: queue.Queue = queue.Queue()
        self._dispatcher = MessageDispatcher(self.config)
        self._lock = threading.Lock()
        self._current_token: Optional[CancellationToken] = None
        self._terminal_sent = False
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread (no-op if already running)."""
        if self.running:
            return
        self._thread = threading.Thread(
            target=self._serve, name="expensecsv-worker", daemon=True
        )
        self._thread.start()

    def post_message(self, message: dict) -> None:
        """Queue an inbound message, starting the thread if needed."""
        self.start()
        self._inbox.put(clone_message(message))

    def cancel(self) -> None:
        """Cancel the in-flight operation at its next chunk boundary."""
        with self._lock:
            token = self._current_token
        if token is not None:
            token.cancel()

    def terminate(self, timeout: Optional[float] = None) -> None:
        """Stop the worker after the current operation finishes."""
        if self._thread is None:
            return
        self._inbox.put(_STOP)
        self._thread.join(timeout)
        self._thread = None

    def get_message(self, timeout: Optional[float] = None) -> dict:
        """Return the next outbound message.

        Raises:
            queue.Empty: If nothing arrives within timeout
        """
        return self._outbox.get(timeout=timeout)

    def iter_messages(self, timeout: Optional[float] = None) -> Iterator[dict]:
        """Yield outbound messages up to and including the next terminal one."""
        while True:
            message = self.get_message(timeout)
            yield message
            if message["type"] in TERMINAL_TYPES:
                return

    def _serve(self) -> None:
        while True:
            message = self._inbox.get()
            if message is _STOP:
                break

            token = CancellationToken()
            with self._lock:
                self._current_token = token
            self._terminal_sent = False
            try:
                asyncio.run(self._handle(message, token))
            except Exception as e:
                logger.exception("Worker failed while handling a message")
                if not self._terminal_sent:
                    self._post(ErrorMessage(error=str(e) or type(e).__name__).to_dict())
            finally:
                with self._lock:
                    self._current_token = None

    async def _handle(self, message: dict, token: CancellationToken) -> None:
        async with aclosing(self._dispatcher.dispatch(message, token)) as outbound_messages:
            async for outbound in outbound_messages:
                self._post(outbound.to_dict())

    def _post(self, payload: dict) -> None:
        payload = clone_message(payload)
        if payload.get("type") in TERMINAL_TYPES:
            self._terminal_sent = True
        if self._on_message is None:
            self._outbox.put(payload)
            return
        try:
            self._on_message(payload)
        except Exception:
            logger.exception("on_message callback failed for %s", payload.get("type"))

    def __enter__(self) -> "CSVWorker":
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.terminate()
