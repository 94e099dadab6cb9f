"""Shared pytest fixtures for expensecsv tests."""

import json
from datetime import date, datetime
from decimal import Decimal

import pytest

from expensecsv.config import WorkerConfig
from expensecsv.domain.csv_export import CSVExportService
from expensecsv.domain.csv_import import CSVImportService
from expensecsv.domain.entities import Category, ExpenseRecord


@pytest.fixture
def categories():
    """Categories known to the caller."""
    return [
        Category(id="c1", name="Food"),
        Category(id="c2", name="Travel"),
        Category(id="c3", name="Office Supplies"),
    ]


@pytest.fixture
def sample_records():
    """A handful of expense records covering the quoting cases."""
    return [
        ExpenseRecord(
            amount=Decimal("12.50"),
            description="Lunch, with client",
            expense_date=date(2024, 1, 15),
            category_id="c1",
            notes=None,
            created_by="Alice Smith",
            created_at=datetime(2024, 1, 15, 9, 30),
        ),
        ExpenseRecord(
            amount=Decimal("230"),
            description='Train to "HQ"',
            expense_date=date(2024, 2, 3),
            category_id="c2",
            notes="Return ticket",
            created_by="Bob",
            created_at=datetime(2024, 2, 3, 17, 5),
        ),
        ExpenseRecord(
            amount=Decimal("4.99"),
            description="Pens",
            expense_date=date(2024, 3, 31),
            category_id="c3",
            notes="Blue, black",
        ),
    ]


@pytest.fixture
def small_chunks_config():
    """Config with tiny chunks so short inputs span several chunks."""
    return WorkerConfig(export_chunk_size=2, import_chunk_size=2)


@pytest.fixture
def export_service(small_chunks_config):
    return CSVExportService(small_chunks_config)


@pytest.fixture
def import_service(small_chunks_config):
    return CSVImportService(small_chunks_config)


@pytest.fixture
def category_dicts():
    """Categories in the wire format."""
    return [{"id": "c1", "name": "Food"}, {"id": "c2", "name": "Travel"}]


@pytest.fixture
def expense_dicts():
    """Expenses as the persistence layer returns them."""
    return [
        {
            "id": "e1",
            "amount": 12.5,
            "description": "Lunch, with client",
            "expense_date": "2024-01-15",
            "category_id": "c1",
            "notes": None,
            "created_by_user": {"full_name": "Alice Smith"},
            "created_at": "2024-01-15T09:30:00",
        },
        {
            "id": "e2",
            "amount": 40,
            "description": "Taxi",
            "expense_date": "2024-01-16",
            "category_id": "c2",
            "notes": "Airport",
            "created_by_user": {"full_name": "Bob"},
            "created_at": "2024-01-16T18:00:00",
        },
    ]


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def categories_file(tmp_path, category_dicts):
    """Categories JSON file wrapped the way the API returns it."""
    path = tmp_path / "categories.json"
    path.write_text(json.dumps({"categories": category_dicts}), encoding="utf-8")
    return path


@pytest.fixture
def expenses_file(tmp_path, expense_dicts):
    path = tmp_path / "expenses.json"
    path.write_text(json.dumps(expense_dicts), encoding="utf-8")
    return path
