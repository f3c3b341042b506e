"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(value) -> Decimal:
    """Parse an amount into a Decimal.

    Accepts Decimal, int and float values as well as strings such as
    "123.45", "$1,234.56" or "(12.00)" (negative in parentheses).

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, bool):
        raise ValueError(f"Could not parse amount '{value}'")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if value is None or not str(value).strip():
        raise ValueError("Empty amount string")

    text = str(value).strip()
    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1]

    text = re.sub(r"[$€£¥,\s]", "", text)

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{value}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{value}'")
    return -amount if is_negative else amount


def parse_ledger_amount(value) -> Decimal:
    """Parse a debit or credit amount. Missing values count as zero.

    Raises:
        ValueError: If the value cannot be parsed or is negative
    """
    if value is None or value == "":
        return Decimal("0")
    amount = parse_amount(value)
    if amount < 0:
        raise ValueError(f"Ledger amounts cannot be negative, got {amount}")
    return amount
