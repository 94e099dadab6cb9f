"""Tests for the message dispatcher state machine."""

import pytest

from expensecsv.config import WorkerConfig
from expensecsv.domain.scheduler import CancellationToken
from expensecsv.worker.dispatcher import DispatcherState, MessageDispatcher
from expensecsv.worker.messages import (
    ErrorMessage,
    ExportComplete,
    ImportComplete,
    ParseComplete,
    ProgressMessage,
)


async def collect(dispatcher, message, token=None):
    return [outbound async for outbound in dispatcher.dispatch(message, token)]


@pytest.fixture
def dispatcher():
    return MessageDispatcher(WorkerConfig(export_chunk_size=1, import_chunk_size=1))


def assert_progress_then_terminal(messages):
    """Progress messages first, non-decreasing, one 100, then one terminal message."""
    *progress, terminal = messages
    assert all(isinstance(m, ProgressMessage) for m in progress)
    values = [m.progress for m in progress]
    assert values == sorted(values)
    if values:
        assert values.count(100) == 1
        assert values[-1] == 100
    assert terminal.terminal


def test_initial_state(dispatcher):
    assert dispatcher.state is DispatcherState.IDLE


@pytest.mark.asyncio
async def test_export(dispatcher, expense_dicts, category_dicts):
    messages = await collect(
        dispatcher,
        {"type": "EXPORT_CSV", "data": {"expenses": expense_dicts, "categories": category_dicts}},
    )

    assert_progress_then_terminal(messages)
    assert [m.message for m in messages[:-1]] == [
        "Processed 1 of 2 expenses",
        "Processed 2 of 2 expenses",
    ]
    complete = messages[-1]
    assert isinstance(complete, ExportComplete)
    assert complete.total_records == 2
    assert complete.csv_content.split("\n")[1].startswith('01/15/2024,12.5,"Lunch, with client",Food,')
    assert dispatcher.state is DispatcherState.COMPLETED


@pytest.mark.asyncio
async def test_export_writes_amounts_as_plain_numbers(dispatcher):
    """String amounts are read as decimals and written without trailing zeros."""
    expense = {"amount": "12.50", "description": "x", "expense_date": "2024-01-15"}

    messages = await collect(
        dispatcher,
        {"type": "EXPORT_CSV", "data": {"expenses": [expense], "includeHeaders": False}},
    )

    assert messages[-1].csv_content.startswith("01/15/2024,12.5,x,")


@pytest.mark.asyncio
async def test_import(dispatcher, category_dicts):
    csv_content = (
        "Date,Amount,Description,Category\n"
        "2024-01-15,12.50,Lunch,Food\n"
        "2024-01-16,8.00,Taxi,Unknown Bucket\n"
    )

    messages = await collect(
        dispatcher,
        {"type": "IMPORT_CSV", "data": {"csvContent": csv_content, "categories": category_dicts}},
    )

    assert_progress_then_terminal(messages)
    assert messages[0].message == "Processed 1 of 2 lines"
    complete = messages[-1]
    assert isinstance(complete, ImportComplete)
    data = complete.to_dict()
    assert data["successCount"] == 1
    assert data["errorCount"] == 1
    assert data["totalLines"] == 2
    assert data["errors"][0]["line"] == 2
    assert "Unknown category" in data["errors"][0]["message"]


@pytest.mark.asyncio
async def test_parse_has_no_progress(dispatcher):
    csv_content = "Date,Amount\n" + "\n".join(f"2024-01-15,{i}" for i in range(100))

    messages = await collect(dispatcher, {"type": "PARSE_CSV", "data": {"csvContent": csv_content}})

    assert len(messages) == 1
    parsed = messages[0]
    assert isinstance(parsed, ParseComplete)
    assert parsed.total_lines == 100
    assert len(parsed.preview) == 6


@pytest.mark.asyncio
async def test_unknown_operation(dispatcher):
    messages = await collect(dispatcher, {"type": "SHRED_CSV", "data": {}})

    assert messages == [ErrorMessage(error="Unknown operation type: SHRED_CSV")]
    assert dispatcher.state is DispatcherState.FAILED


@pytest.mark.asyncio
async def test_malformed_payload(dispatcher):
    messages = await collect(dispatcher, {"type": "EXPORT_CSV", "data": {"categories": []}})

    assert len(messages) == 1
    assert isinstance(messages[0], ErrorMessage)
    assert "expenses" in messages[0].error


@pytest.mark.asyncio
async def test_empty_import_fails(dispatcher):
    messages = await collect(
        dispatcher, {"type": "IMPORT_CSV", "data": {"csvContent": "", "categories": []}}
    )

    assert messages == [ErrorMessage(error="CSV content is empty")]
    assert dispatcher.state is DispatcherState.FAILED


@pytest.mark.asyncio
async def test_cancelled_operation_ends_with_error(dispatcher, expense_dicts):
    token = CancellationToken()
    token.cancel()

    messages = await collect(
        dispatcher, {"type": "EXPORT_CSV", "data": {"expenses": expense_dicts}}, token
    )

    assert messages == [ErrorMessage(error="Operation cancelled")]
    assert dispatcher.state is DispatcherState.FAILED


@pytest.mark.asyncio
async def test_busy_while_running(dispatcher, expense_dicts):
    """A second message during a run is refused without disturbing the first."""
    message = {"type": "EXPORT_CSV", "data": {"expenses": expense_dicts}}
    first_run = dispatcher.dispatch(message)

    first = await first_run.__anext__()
    assert isinstance(first, ProgressMessage)
    assert dispatcher.state is DispatcherState.RUNNING

    refused = await collect(dispatcher, message)
    assert refused == [ErrorMessage(error="Worker is busy with another operation")]

    rest = [outbound async for outbound in first_run]
    assert isinstance(rest[-1], ExportComplete)
    assert dispatcher.state is DispatcherState.COMPLETED


@pytest.mark.asyncio
async def test_dispatcher_reusable_after_failure(dispatcher):
    await collect(dispatcher, {"type": "NOPE"})

    messages = await collect(dispatcher, {"type": "PARSE_CSV", "data": {"csvContent": "a\n"}})

    assert isinstance(messages[-1], ParseComplete)
    assert dispatcher.state is DispatcherState.COMPLETED


@pytest.mark.asyncio
async def test_unexpected_setup_error_is_reported(dispatcher):
    """Payload shapes that break decoding still end in a single ERROR."""
    messages = await collect(
        dispatcher,
        {
            "type": "EXPORT_CSV",
            "data": {
                "expenses": [
                    {
                        "amount": 5,
                        "description": "Coffee",
                        "expense_date": "2024-01-15",
                        "created_by_user": "not an object",
                    }
                ]
            },
        },
    )

    assert len(messages) == 1
    assert isinstance(messages[0], ErrorMessage)
    assert dispatcher.state is DispatcherState.FAILED
