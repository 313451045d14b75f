"""
Numeric field coercion

DESIGN DECISION: Budget data arrives from forms and JSON blobs, so a
number can be missing, blank, NaN or a stray string. The calculation
engines must be total functions over that input, so every monetary field
is normalized on the way in instead of being rejected:

- Missing / None / blank / unparseable / NaN / infinite -> 0.0
- Negative values of non-negative quantities -> 0.0
- Signed quantities (rollover, income deltas) keep their sign

The same helpers are used by the engines for their scalar arguments.
"""

import math
from datetime import date, datetime
from typing import Annotated, Any, Optional

from pydantic import BeforeValidator


def to_number(value: Any, default: float = 0.0) -> float:
    """Convert anything to a finite float, falling back to `default`."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_non_negative(value: Any) -> float:
    """Convert to a finite float and clamp negatives to zero."""
    return max(0.0, to_number(value))


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning 0 instead of NaN/Infinity on a zero denominator."""
    if not denominator:
        return 0.0
    result = numerator / denominator
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def to_optional_date(value: Any) -> Optional[date]:
    """Parse a due date; anything unparseable becomes None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def to_month_count(value: Any) -> int:
    """Convert to a whole, non-negative number of months."""
    return int(to_non_negative(value))


# Annotated field types used across the models
Amount = Annotated[float, BeforeValidator(to_non_negative)]
SignedAmount = Annotated[float, BeforeValidator(to_number)]
OptionalDate = Annotated[Optional[date], BeforeValidator(to_optional_date)]
MonthCount = Annotated[int, BeforeValidator(to_month_count)]
