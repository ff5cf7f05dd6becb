"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO dates: "2024-01-15"
    - Brazilian dates: "15/01/2024" (day first)
    - Relative dates: "today", "yesterday", "tomorrow" and their
      Portuguese forms "hoje", "ontem", "amanhã"

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    if not date_str or not date_str.strip():
        raise ValueError("Empty date string")

    date_str = date_str.strip().lower()
    today = date.today()

    # Handle relative dates
    relative_dates = {
        "today": today,
        "hoje": today,
        "yesterday": today - timedelta(days=1),
        "ontem": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "amanhã": today + timedelta(days=1),
        "amanha": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # ISO input is year first; anything else is read day first
    try:
        if len(date_str) >= 4 and date_str[:4].isdigit():
            return date_parser.isoparse(date_str).date()
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
