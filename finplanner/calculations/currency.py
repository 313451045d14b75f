"""
Currency Conversion

DESIGN DECISION: Rates are a static reference table quoted against USD.
There is no live feed; conversions are indicative only.
"""

from typing import Any

from finplanner.models.calculations import CurrencyConversion
from finplanner.models.fields import safe_divide, to_number


class UnknownCurrencyError(ValueError):
    """Raised when a currency code is not in the reference table."""


# Units of each currency per 1 USD
REFERENCE_RATES: dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 151.5,
    "AUD": 1.52,
    "CAD": 1.36,
    "CHF": 0.90,
    "CNY": 7.23,
    "INR": 83.3,
    "LKR": 305.5,
    "SGD": 1.35,
    "NZD": 1.66,
}

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "$",
    "AUD": "$",
    "JPY": "¥",
    "INR": "₹",
    "CNY": "¥",
    "LKR": "Rs.",
    "CHF": "Fr.",
    "SGD": "$",
    "NZD": "$",
}


def _rate_for(code: str) -> float:
    rate = REFERENCE_RATES.get(str(code).strip().upper())
    if rate is None:
        raise UnknownCurrencyError(f"Unknown currency: {code}")
    return rate


def exchange_rate(source: str, target: str) -> float:
    """Units of `target` per one unit of `source`."""
    return _rate_for(target) / _rate_for(source)


def convert_currency(amount: Any, source: str, target: str) -> CurrencyConversion:
    """Convert an amount between two reference currencies."""
    rate = exchange_rate(source, target)
    value = to_number(amount)
    return CurrencyConversion(
        amount=value,
        source=source.strip().upper(),
        target=target.strip().upper(),
        rate=rate,
        inverse_rate=safe_divide(1, rate),
        converted=value * rate,
    )


def currency_symbol(code: str) -> str:
    """Display symbol for a currency code, or the code itself."""
    code = str(code).strip().upper()
    return CURRENCY_SYMBOLS.get(code, code)
