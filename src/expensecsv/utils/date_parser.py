"""Date parsing and formatting utilities."""

from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser as date_parser


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Parsing is permissive and month-first, matching what the export writes:
    - "2024-01-15"
    - "01/15/2024"
    - "January 15, 2024"
    - "2024-01-15T09:30:00Z" (the time part is dropped)

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    if date_str is None or not date_str.strip():
        raise ValueError("Empty date string")

    try:
        dt = date_parser.parse(date_str.strip())
        return dt.date()
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def to_date(value: Union[date, datetime, str]) -> date:
    """Coerce a stored date value (date, datetime or ISO text) to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(value)


def to_datetime(value: Union[datetime, str, None]) -> Optional[datetime]:
    """Coerce a stored timestamp (datetime or ISO text) to a datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return date_parser.isoparse(value)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse timestamp '{value}': {e}")


def format_export_date(value: date) -> str:
    """Format a date the way an en-US locale renders it: ``MM/DD/YYYY``."""
    return value.strftime("%m/%d/%Y")


def format_export_datetime(value: Optional[datetime]) -> str:
    """Format a timestamp as ``MM/DD/YYYY, HH:MM AM``; empty when missing."""
    if value is None:
        return ""
    return value.strftime("%m/%d/%Y, %I:%M %p")
