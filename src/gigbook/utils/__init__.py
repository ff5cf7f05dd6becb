"""Utility functions for gigbook."""

from gigbook.utils.date_parser import parse_date
from gigbook.utils.amount_parser import parse_amount
from gigbook.utils.formatters import format_currency, format_date

__all__ = ["parse_date", "parse_amount", "format_currency", "format_date"]
