"""
Period Lifecycle

Rollover and the creation of a new budgeting period from the current one.

DESIGN DECISION: A new period keeps the recurring structure of the old
one (the same bills, debts, categories, income sources, funds and
holdings) but none of its activity: paid flags are cleared and actual
income, spending and savings start at zero. The old period is never
modified.
"""

from collections.abc import Iterable
from datetime import date, datetime
from typing import Any, Optional

from finplanner.calculations.totals import calculate_totals
from finplanner.models.budget import BudgetPeriod, PeriodType, generate_id
from finplanner.models.fields import to_number


def calculate_rollover(period: BudgetPeriod) -> float:
    """Amount carried into the next period: what was left to spend."""
    return calculate_totals(period).left_to_spend


def next_month(month: int, year: int) -> tuple[int, int]:
    """The calendar month after (month, year)."""
    if month == 12:
        return 1, year + 1
    return month + 1, year


def start_new_period(
    previous: BudgetPeriod,
    rollover: Optional[Any] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
    period_type: Optional[PeriodType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> BudgetPeriod:
    """
    Create the period that follows `previous`.

    Args:
        previous: The period being closed
        rollover: Amount carried forward; defaults to the previous
            period's left-to-spend
        month, year: Defaults to the calendar month after `previous`

    Returns:
        A new BudgetPeriod with fresh ids for the period
    """
    if rollover is None:
        carried = calculate_rollover(previous)
    else:
        carried = to_number(rollover)

    default_month, default_year = next_month(previous.month, previous.year)

    return BudgetPeriod(
        id=generate_id(),
        period_type=period_type or previous.period_type,
        month=month or default_month,
        year=year or default_year,
        start_date=start_date,
        end_date=end_date,
        currency=previous.currency,
        currency_symbol=previous.currency_symbol,
        rollover=carried,
        income=[i.model_copy(update={"actual": 0.0}) for i in previous.income],
        expenses=[e.model_copy(update={"spent": 0.0}) for e in previous.expenses],
        bills=[b.model_copy(update={"paid": False}) for b in previous.bills],
        debts=[d.model_copy(update={"paid": False}) for d in previous.debts],
        savings=[s.model_copy(update={"amount": 0.0}) for s in previous.savings],
        investments=[
            i.model_copy(update={"amount": 0.0, "contributed": False})
            for i in previous.investments
        ],
        created=datetime.utcnow(),
    )


def sort_history(periods: Iterable[BudgetPeriod]) -> list[BudgetPeriod]:
    """Periods in creation order, oldest first."""
    return sorted(periods, key=lambda p: p.created)
