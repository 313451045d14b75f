"""
Investment Growth Engine

SIP / lumpsum projections, retirement corpus estimates and simple ROI.

Compounding happens once per contribution period: the value grows by
rate / periods_per_year, then the period's contribution is added. A
step-up raises the contribution at each year boundary.
"""

from typing import Any, Union

from finplanner.models.calculations import (
    ContributionFrequency,
    GrowthDataPoint,
    GrowthProjection,
    RetirementProjection,
)
from finplanner.models.fields import safe_divide, to_non_negative, to_number


DEFAULT_RETIREMENT_RETURN = 7.0

# Corpus needed to fund a year of spending (the 4% withdrawal rule)
RETIREMENT_CORPUS_MULTIPLE = 25


def _simulate(
    principal: float,
    contribution: float,
    periods_per_year: int,
    annual_rate: float,
    years: int,
    step_up: float,
) -> tuple[float, float, list[GrowthDataPoint]]:
    value = principal
    invested = principal
    period_rate = annual_rate / 100 / periods_per_year
    points = [GrowthDataPoint(year=0, invested=invested, gain=0.0, value=value)]

    for year in range(1, years + 1):
        for _ in range(periods_per_year):
            value *= 1 + period_rate
            value += contribution
            invested += contribution
        points.append(GrowthDataPoint(
            year=year,
            invested=invested,
            gain=value - invested,
            value=value,
        ))
        contribution *= 1 + step_up / 100

    return value, invested, points


def project_growth(
    principal: Any,
    contribution: Any,
    frequency: Union[ContributionFrequency, str],
    annual_rate: Any,
    years: Any,
    step_up: Any = 0.0,
    inflation: Any = 0.0,
) -> GrowthProjection:
    """
    Project a recurring investment plan.

    Args:
        principal: Starting amount
        contribution: Amount added every period
        frequency: Contribution frequency (weekly ... annually)
        annual_rate: Expected annual return in percent
        years: Duration in whole years
        step_up: Annual increase of the contribution in percent
        inflation: Annual inflation in percent, for the real value

    Returns:
        GrowthProjection with yearly points and the cost of starting
        one year later (computed by a separate simulation)
    """
    frequency = ContributionFrequency(frequency)
    principal = to_non_negative(principal)
    contribution = to_non_negative(contribution)
    rate = to_number(annual_rate)
    years = int(to_non_negative(years))
    step_up = to_number(step_up)
    inflation = to_number(inflation)
    periods = frequency.periods_per_year

    final_value, invested, points = _simulate(
        principal, contribution, periods, rate, years, step_up
    )
    delayed_value, _, _ = _simulate(
        principal, contribution, periods, rate, max(0, years - 1), step_up
    )

    gain = final_value - invested
    real_value = safe_divide(final_value, (1 + inflation / 100) ** years)

    return GrowthProjection(
        principal=principal,
        contribution=contribution,
        frequency=frequency,
        annual_rate=rate,
        years=years,
        step_up=step_up,
        inflation=inflation,
        final_value=final_value,
        total_invested=invested,
        total_gain=gain,
        real_value=real_value,
        return_percent=safe_divide(gain, invested) * 100,
        delayed_final_value=delayed_value,
        cost_of_delay=final_value - delayed_value,
        points=points,
    )


def project_lumpsum(
    principal: Any,
    annual_rate: Any,
    years: Any,
    frequency: Union[ContributionFrequency, str] = ContributionFrequency.MONTHLY,
    inflation: Any = 0.0,
) -> GrowthProjection:
    """A one-time investment compounded at `frequency`."""
    return project_growth(
        principal=principal,
        contribution=0.0,
        frequency=frequency,
        annual_rate=annual_rate,
        years=years,
        inflation=inflation,
    )


def project_retirement(
    current_age: Any,
    retirement_age: Any,
    current_savings: Any,
    monthly_saving: Any,
    monthly_spend: Any,
    inflation: Any,
    expected_return: Any = DEFAULT_RETIREMENT_RETURN,
) -> RetirementProjection:
    """
    Estimate the retirement corpus and what it needs to be.

    The corpus compounds monthly at `expected_return`. The requirement
    is 25x a year of today's spending inflated to the retirement date.
    """
    years = max(0, int(to_number(retirement_age) - to_number(current_age)))
    months = years * 12
    monthly_rate = to_number(expected_return) / 100 / 12
    savings = to_non_negative(current_savings)
    monthly = to_non_negative(monthly_saving)

    growth = (1 + monthly_rate) ** months
    if monthly_rate == 0:
        contributions = monthly * months
    else:
        contributions = monthly * (growth - 1) / monthly_rate
    corpus = savings * growth + contributions

    future_spend = to_non_negative(monthly_spend) * (1 + to_number(inflation) / 100) ** years
    required = future_spend * 12 * RETIREMENT_CORPUS_MULTIPLE

    return RetirementProjection(
        years_to_retirement=years,
        projected_corpus=corpus,
        required_corpus=required,
        future_monthly_spend=future_spend,
    )


def return_on_investment(current_value: Any, cost_basis: Any) -> float:
    """Gain over cost basis in percent; 0 when nothing was invested."""
    cost = to_number(cost_basis)
    return safe_divide(to_number(current_value) - cost, cost) * 100
