"""Utility functions for expensecsv."""

from expensecsv.utils.date_parser import parse_date
from expensecsv.utils.amount_parser import parse_amount, format_amount
from expensecsv.utils.csv_tokenizer import parse_csv_line, escape_csv_value

__all__ = [
    "parse_date",
    "parse_amount",
    "format_amount",
    "parse_csv_line",
    "escape_csv_value",
]
