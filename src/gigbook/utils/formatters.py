"""Brazilian display formats for money and dates."""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union


def format_currency(value: Union[Decimal, int, float]) -> str:
    """Format a value as Brazilian reais, e.g. ``R$ 1.234,56``."""
    amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):,.2f}"
    # 1,234.56 -> 1.234,56
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {text}"


def format_date(value: Optional[Union[date, datetime]]) -> str:
    """Format a date as DD/MM/YYYY. None gives an empty string."""
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def format_hours(value: Decimal) -> str:
    """Format an hour count with a comma decimal, e.g. ``2,5h``."""
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text.replace(".", ",") + "h"
