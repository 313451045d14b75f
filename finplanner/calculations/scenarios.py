"""
Life-Event Scenario Projector

Projects net worth month by month with and without a life event (a
baby, a house, a car, ...), starting from the current monthly surplus
and liquid assets.

The event builders turn the answers of the event wizard into an
EventImpact; `project_scenario` does the month-by-month projection.

Timeline convention: point m is net worth at the start of month m, so
point 0 is today. The upfront cost lands exactly at point start_month;
the surplus and recurring flows of month m land in point m + 1.
"""

from datetime import date, datetime
from typing import Any, Optional, Union

from finplanner.calculations.loans import monthly_payment
from finplanner.calculations.totals import calculate_totals
from finplanner.models.budget import BudgetPeriod
from finplanner.models.calculations import EventImpact, LifeEventType, ScenarioProjection
from finplanner.models.fields import to_non_negative, to_number, to_optional_date


DEFAULT_HORIZON_MONTHS = 60

# Monthly repayment assumed for loan-funded education
STUDENT_LOAN_MONTHLY_PAYMENT = 50.0


def months_until(event_date: Union[date, datetime, str, None], today: Optional[date] = None) -> int:
    """Whole calendar months from today to the event; never negative."""
    target = to_optional_date(event_date)
    if target is None:
        return 0
    today = today or date.today()
    return max(0, (target.year - today.year) * 12 + (target.month - today.month))


# =============================================================================
# EVENT BUILDERS
# =============================================================================

def baby_event(
    initial_cost: Any = 0.0,
    childcare: Any = 0.0,
    supplies: Any = 0.0,
    leave_loss: Any = 0.0,
    start_month: int = 0,
) -> EventImpact:
    """Setup costs plus lost income during leave up front; childcare and supplies forever."""
    return EventImpact(
        event_type=LifeEventType.BABY,
        upfront_cost=to_non_negative(initial_cost) + to_non_negative(leave_loss),
        monthly_cost=to_non_negative(childcare) + to_non_negative(supplies),
        start_month=start_month,
    )


def house_event(
    price: Any,
    downpayment: Any,
    annual_rate: Any,
    term_years: Any = 30,
    maintenance: Any = 0.0,
    start_month: int = 0,
) -> EventImpact:
    """A mortgaged home: the down payment up front, then mortgage plus upkeep."""
    down = to_non_negative(downpayment)
    years = int(to_non_negative(term_years)) or 30
    upkeep = to_non_negative(maintenance)
    payment = monthly_payment(to_non_negative(price) - down, annual_rate, years * 12)

    return EventImpact(
        event_type=LifeEventType.HOUSE,
        upfront_cost=down,
        monthly_cost=payment + upkeep,
        start_month=start_month,
        active_months=years * 12,
        residual_monthly_cost=upkeep,
        loan_payment=payment,
    )


def car_event(
    price: Any,
    trade_in: Any,
    annual_rate: Any,
    term_months: Any = 60,
    insurance: Any = 0.0,
    start_month: int = 0,
) -> EventImpact:
    """A financed car: the trade-in value up front, then loan plus insurance."""
    trade = to_non_negative(trade_in)
    months = int(to_non_negative(term_months)) or 60
    cover = to_non_negative(insurance)
    payment = monthly_payment(to_non_negative(price) - trade, annual_rate, months)

    return EventImpact(
        event_type=LifeEventType.CAR,
        upfront_cost=trade,
        monthly_cost=payment + cover,
        start_month=start_month,
        active_months=months,
        residual_monthly_cost=cover,
        loan_payment=payment,
    )


def education_event(
    tuition: Any,
    years: Any = 4,
    funding: str = "cash",
    start_month: int = 0,
) -> EventImpact:
    """
    A course of study.

    Paid from cash flow, the annual tuition is spread monthly over the
    course. Funded by student loans, only a small repayment is modelled.
    """
    if funding == "cash":
        duration = int(to_non_negative(years)) or 4
        return EventImpact(
            event_type=LifeEventType.EDUCATION,
            monthly_cost=to_non_negative(tuition) / 12,
            start_month=start_month,
            active_months=duration * 12,
        )

    return EventImpact(
        event_type=LifeEventType.EDUCATION,
        monthly_cost=STUDENT_LOAN_MONTHLY_PAYMENT,
        start_month=start_month,
        loan_payment=STUDENT_LOAN_MONTHLY_PAYMENT,
    )


def retirement_event(
    monthly_need: Any,
    pension: Any = 0.0,
    start_month: int = 0,
) -> EventImpact:
    """Spending not covered by the pension is a cost; a larger pension is income."""
    shortfall = to_non_negative(monthly_need) - to_non_negative(pension)
    return EventImpact(
        event_type=LifeEventType.RETIREMENT,
        monthly_cost=max(0.0, shortfall),
        monthly_income=max(0.0, -shortfall),
        start_month=start_month,
    )


def custom_event(
    event_type: Union[LifeEventType, str],
    initial_cost: Any = 0.0,
    monthly_cost: Any = 0.0,
    income_change: Any = 0.0,
    start_month: int = 0,
) -> EventImpact:
    """Any other event: a one-time cost, a recurring cost and a change in income."""
    return EventImpact(
        event_type=LifeEventType(event_type),
        upfront_cost=initial_cost,
        monthly_cost=monthly_cost,
        monthly_income=income_change,
        start_month=start_month,
    )


# =============================================================================
# PROJECTION
# =============================================================================

def _event_flow(impact: EventImpact, month: int) -> float:
    """Net change to cash caused by the event during `month`."""
    if month < impact.start_month:
        return 0.0

    elapsed = month - impact.start_month
    if impact.active_months is None or elapsed < impact.active_months:
        cost = impact.monthly_cost
    else:
        cost = impact.residual_monthly_cost

    return impact.monthly_income - cost


def project_scenario(
    baseline_surplus: Any,
    liquid_assets: Any,
    impact: EventImpact,
    horizon: Any = DEFAULT_HORIZON_MONTHS,
) -> ScenarioProjection:
    """
    Project net worth with and without the event.

    Args:
        baseline_surplus: Current monthly income minus committed outflow
        liquid_assets: Current savings plus investments
        impact: Cash-flow shape of the event
        horizon: Number of months projected

    Returns:
        ScenarioProjection with horizon + 1 points for both paths
    """
    surplus = to_number(baseline_surplus)
    assets = to_number(liquid_assets)
    months = int(to_non_negative(horizon))

    baseline = [assets]
    with_event = [assets - (impact.upfront_cost if impact.start_month == 0 else 0.0)]

    for point in range(1, months + 1):
        baseline.append(baseline[-1] + surplus)
        value = with_event[-1] + surplus + _event_flow(impact, point - 1)
        if point == impact.start_month:
            value -= impact.upfront_cost
        with_event.append(value)

    return ScenarioProjection(
        months=list(range(months + 1)),
        baseline=baseline,
        with_event=with_event,
        final_baseline=baseline[-1],
        final_with_event=with_event[-1],
        baseline_surplus=surplus,
        new_monthly_surplus=surplus - impact.monthly_cost + impact.monthly_income,
        impact=impact,
    )


def simulate_life_event(
    period: BudgetPeriod,
    impact: EventImpact,
    horizon: Any = DEFAULT_HORIZON_MONTHS,
) -> ScenarioProjection:
    """Project an event against a budget period's surplus and liquid assets."""
    totals = calculate_totals(period)
    return project_scenario(totals.surplus, totals.liquid_assets, impact, horizon)
