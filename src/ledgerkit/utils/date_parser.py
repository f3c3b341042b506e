"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from dateutil import parser as date_parser


def parse_date(value: str | date) -> date:
    """Parse a date string into a date object.

    Supports absolute dates in any format python-dateutil understands
    ("2024-01-15", "January 15, 2024", ISO timestamps) and the relative
    words "today", "yesterday" and "tomorrow". Date and datetime values are
    passed through (datetimes are truncated to their date).

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Could not parse date '{value}'")

    text = value.strip()
    today = date.today()
    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text.lower() in relative_dates:
        return relative_dates[text.lower()]

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{value}': {e}")
