"""
Calculation Engines

Pure functions over budget data: no storage, no network, no state.
Numeric input is normalized rather than rejected, so every engine
returns a defined result for any reasonable input.
"""

from finplanner.calculations.currency import (
    CURRENCY_SYMBOLS,
    REFERENCE_RATES,
    UnknownCurrencyError,
    convert_currency,
    currency_symbol,
    exchange_rate,
)
from finplanner.calculations.formatting import format_currency
from finplanner.calculations.growth import (
    project_growth,
    project_lumpsum,
    project_retirement,
    return_on_investment,
)
from finplanner.calculations.loans import (
    MAX_AMORTIZATION_MONTHS,
    PAYOFF_TOLERANCE,
    amortize_loan,
    monthly_payment,
)
from finplanner.calculations.notifications import evaluate_notifications
from finplanner.calculations.periods import (
    calculate_rollover,
    sort_history,
    start_new_period,
)
from finplanner.calculations.scenarios import (
    baby_event,
    car_event,
    custom_event,
    education_event,
    house_event,
    months_until,
    project_scenario,
    retirement_event,
    simulate_life_event,
)
from finplanner.calculations.tax import (
    JURISDICTIONS,
    UnknownJurisdictionError,
    compute_business_tax,
    compute_income_tax,
    get_jurisdiction,
    invoice_totals,
    plan_income_tax,
    to_gross,
    to_net,
    vat_breakdown,
)
from finplanner.calculations.totals import calculate_totals

__all__ = [
    # Totals and alerts
    "calculate_totals",
    "evaluate_notifications",
    "format_currency",
    # Loans and growth
    "MAX_AMORTIZATION_MONTHS",
    "PAYOFF_TOLERANCE",
    "amortize_loan",
    "monthly_payment",
    "project_growth",
    "project_lumpsum",
    "project_retirement",
    "return_on_investment",
    # Tax
    "JURISDICTIONS",
    "UnknownJurisdictionError",
    "compute_business_tax",
    "compute_income_tax",
    "get_jurisdiction",
    "invoice_totals",
    "plan_income_tax",
    "to_gross",
    "to_net",
    "vat_breakdown",
    # Scenarios
    "baby_event",
    "car_event",
    "custom_event",
    "education_event",
    "house_event",
    "months_until",
    "project_scenario",
    "retirement_event",
    "simulate_life_event",
    # Periods
    "calculate_rollover",
    "sort_history",
    "start_new_period",
    # Currency
    "CURRENCY_SYMBOLS",
    "REFERENCE_RATES",
    "UnknownCurrencyError",
    "convert_currency",
    "currency_symbol",
    "exchange_rate",
]
