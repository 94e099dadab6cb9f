"""Helpers for reading JSON input files given on the command line."""

import json
from pathlib import Path

from expensecsv.domain.errors import ValidationError


def load_json_list(path: str, key: str) -> list:
    """Load a list of objects from a JSON file.

    Accepts either a bare list or an object wrapping the list under ``key``
    (e.g. ``{"expenses": [...]}``, as the API returns it).

    Raises:
        ValidationError: If the file is not valid JSON or holds no such list
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"{path} is not valid JSON: {e}")

    if isinstance(data, dict):
        data = data.get(key)
    if not isinstance(data, list):
        raise ValidationError(f"{path} must contain a list of {key}")
    return data


def read_csv_text(path: str) -> str:
    """Read a CSV file as text, dropping a UTF-8 byte order mark."""
    return Path(path).read_text(encoding="utf-8-sig")
