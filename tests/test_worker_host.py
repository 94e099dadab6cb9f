"""Tests for the background worker thread."""

import threading
from datetime import date
from decimal import Decimal

import pytest

from expensecsv.config import WorkerConfig
from expensecsv.worker.host import CSVWorker, clone_message

TIMEOUT = 5


@pytest.fixture
def worker():
    worker = CSVWorker(WorkerConfig(export_chunk_size=1, import_chunk_size=1))
    yield worker
    worker.terminate(timeout=TIMEOUT)


def test_export_round_trip(worker, expense_dicts, category_dicts):
    worker.post_message(
        {"type": "EXPORT_CSV", "data": {"expenses": expense_dicts, "categories": category_dicts}}
    )

    messages = list(worker.iter_messages(timeout=TIMEOUT))

    assert [m["type"] for m in messages] == ["PROGRESS", "PROGRESS", "EXPORT_COMPLETE"]
    assert [m["progress"] for m in messages[:-1]] == [50, 100]
    assert messages[-1]["totalRecords"] == 2


def test_requests_run_in_order(worker):
    worker.post_message({"type": "PARSE_CSV", "data": {"csvContent": "a,b\n1,2\n"}})
    worker.post_message({"type": "BOGUS"})
    worker.post_message({"type": "PARSE_CSV", "data": {"csvContent": "c\n"}})

    first = list(worker.iter_messages(timeout=TIMEOUT))
    second = list(worker.iter_messages(timeout=TIMEOUT))
    third = list(worker.iter_messages(timeout=TIMEOUT))

    assert first[-1]["headers"] == ["a", "b"]
    assert second == [{"type": "ERROR", "error": "Unknown operation type: BOGUS"}]
    assert third[-1]["headers"] == ["c"]


def test_on_message_callback(category_dicts):
    received = []
    finished = threading.Event()

    def on_message(message):
        received.append(message)
        if message["type"] == "IMPORT_COMPLETE":
            finished.set()

    with CSVWorker(WorkerConfig(import_chunk_size=1), on_message=on_message) as worker:
        worker.post_message(
            {
                "type": "IMPORT_CSV",
                "data": {
                    "csvContent": "Date,Amount,Description\n2024-01-15,5,Coffee\n2024-01-16,N/A,Tea\n",
                    "categories": category_dicts,
                },
            }
        )
        assert finished.wait(TIMEOUT)

    complete = received[-1]
    assert complete["successCount"] == 1
    assert complete["expenses"][0] == {
        "amount": 5.0,
        "description": "Coffee",
        "expense_date": "2024-01-15",
        "category_id": None,
        "notes": None,
    }
    assert complete["errors"] == [
        {"line": 2, "content": "2024-01-16,N/A,Tea", "message": "Invalid amount: N/A"}
    ]


def test_cancel_between_chunks(expense_dicts):
    """Cancelling after the first progress message stops before the next chunk."""
    received = []
    finished = threading.Event()

    def on_message(message):
        received.append(message)
        if message["type"] == "PROGRESS":
            worker.cancel()
        else:
            finished.set()

    worker = CSVWorker(WorkerConfig(export_chunk_size=1), on_message=on_message)
    with worker:
        worker.post_message({"type": "EXPORT_CSV", "data": {"expenses": expense_dicts * 3}})
        assert finished.wait(TIMEOUT)

    assert [m["type"] for m in received] == ["PROGRESS", "ERROR"]
    assert received[-1]["error"] == "Operation cancelled"


def test_unexpected_failure_reports_error_and_keeps_serving(worker, monkeypatch):
    dispatch = worker._dispatcher.dispatch
    failures = []

    async def failing_dispatch(message, cancel_token=None):
        if not failures:
            failures.append(message)
            raise RuntimeError("dispatcher crashed")
        async for outbound in dispatch(message, cancel_token):
            yield outbound

    monkeypatch.setattr(worker._dispatcher, "dispatch", failing_dispatch)

    worker.post_message({"type": "PARSE_CSV", "data": {"csvContent": "a\n"}})
    worker.post_message({"type": "PARSE_CSV", "data": {"csvContent": "b\n"}})

    first = list(worker.iter_messages(timeout=TIMEOUT))
    second = list(worker.iter_messages(timeout=TIMEOUT))

    assert first == [{"type": "ERROR", "error": "dispatcher crashed"}]
    assert second[-1]["headers"] == ["b"]
    assert worker.running


def test_posted_message_is_copied(worker):
    message = {"type": "PARSE_CSV", "data": {"csvContent": "a\n"}}
    worker.post_message(message)
    message["data"]["csvContent"] = "changed\n"

    result = list(worker.iter_messages(timeout=TIMEOUT))[-1]

    assert result["headers"] == ["a"]


def test_clone_message_converts_values():
    original = {"when": date(2024, 1, 15), "amount": Decimal("1.50"), "tags": ["a"]}

    cloned = clone_message(original)

    assert cloned == {"when": "2024-01-15", "amount": "1.50", "tags": ["a"]}
    assert cloned["tags"] is not original["tags"]


def test_clone_message_rejects_unknown_types():
    with pytest.raises(TypeError):
        clone_message({"value": object()})


def test_terminate_without_start():
    worker = CSVWorker(WorkerConfig())
    worker.terminate()
    assert not worker.running
