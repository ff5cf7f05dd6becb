"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles Brazilian and plain formats:
    - "123.45"
    - "123,45"
    - "1.234,56"
    - "R$ 1.234,56"
    - "1,234.56"

    The right-most separator is the decimal one when both appear. A lone
    dot followed by exactly three digits ("1.234") is a thousands separator.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    original = amount_str
    # Remove currency symbols and whitespace
    amount_str = re.sub(r"R\$|[$\s ]", "", amount_str.strip(), flags=re.IGNORECASE)

    if "," in amount_str and "." in amount_str:
        if amount_str.rfind(",") > amount_str.rfind("."):
            amount_str = amount_str.replace(".", "").replace(",", ".")
        else:
            amount_str = amount_str.replace(",", "")
    elif "," in amount_str:
        amount_str = amount_str.replace(",", ".")
    elif re.fullmatch(r"-?\d{1,3}(\.\d{3})+", amount_str):
        amount_str = amount_str.replace(".", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{original}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{original}'")
    return amount
