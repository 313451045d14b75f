"""Monetary display helpers."""

from typing import Any

from finplanner.models.fields import to_number


def format_currency(amount: Any, symbol: str = "$") -> str:
    """
    Render an amount with its currency symbol.

    Thousands separators and exactly two decimals; a missing or
    non-finite amount renders as zero.

        >>> format_currency(1234.5, "$")
        '$1,234.50'
    """
    return f"{symbol}{to_number(amount):,.2f}"
