"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an imported amount string into a positive Decimal.

    Everything except digits, ``.`` and ``-`` is removed first, so currency
    symbols, thousands separators and whitespace are tolerated:
    - "123.45"
    - "$123.45"
    - "1,234.56"
    - " 12.50 USD"

    Args:
        amount_str: Amount string as read from the CSV field

    Returns:
        Decimal amount, always finite and greater than zero

    Raises:
        ValueError: If the cleaned string is not a number or is not positive
    """
    if amount_str is None:
        raise ValueError("Empty amount string")

    cleaned = _NON_NUMERIC.sub("", amount_str)
    if not cleaned:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"Amount must be greater than zero: '{amount_str}'")

    return amount


def format_amount(amount) -> str:
    """Render an amount as plain number text for export.

    Trailing zeros are dropped and exponent notation is never used:
    ``Decimal("12.50") -> "12.5"``, ``100.0 -> "100"``.
    """
    if amount is None:
        return ""
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    if not amount.is_finite():
        return str(amount)

    text = format(amount.normalize(), "f")
    if text in ("-0", "0"):
        return "0"
    return text
