"""Quote-aware CSV line tokenizer and field escaper."""

from typing import Any

_NEEDS_QUOTING = (",", '"', "\n", "\r")


def parse_csv_line(line: str) -> list[str]:
    """Split a single CSV line into field values.

    Handles:
    - Plain fields: ``a,b,c``
    - Quoted fields with commas: ``"Lunch, with client"``
    - Escaped quotes inside quoted fields: a doubled quote (two ``"``
      characters) inside a quoted field reads as one literal quote

    Unbalanced quotes are not an error: everything after an unmatched opening
    quote is read as quoted content, commas included.

    Args:
        line: One line of CSV text, without its line terminator

    Returns:
        Field values in order. An empty line yields ``[""]``.
    """
    values = []
    current = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]

        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                # Escaped quote
                current.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            values.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    values.append("".join(current))
    return values


def escape_csv_value(value: Any) -> str:
    """Render a value as CSV field text.

    Values containing a comma, a double quote or a line break are wrapped in
    double quotes with internal quotes doubled. Everything else is returned
    as its string form. ``None`` renders as an empty field.

    Args:
        value: Any value; non-strings are converted with ``str()``

    Returns:
        Field text safe to join with commas
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)

    if any(ch in value for ch in _NEEDS_QUOTING):
        return '"' + value.replace('"', '""') + '"'

    return value


def unescape_csv_value(field: str) -> str:
    """Decode a single escaped field back into its value."""
    return parse_csv_line(field)[0]
