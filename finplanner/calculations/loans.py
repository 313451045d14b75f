"""
Loan Amortization Engine

Simulates a loan month by month with an optional recurring extra
payment, and compares the result against the contractual schedule.

DESIGN DECISION: The simulation loop is bounded by
MAX_AMORTIZATION_MONTHS. A payment that never covers the interest would
otherwise loop forever; instead the partial schedule is returned with
`converged=False` so callers can tell "paid off" from "capped".
"""

from typing import Any

from finplanner.models.calculations import AmortizationRow, LoanSchedule
from finplanner.models.fields import to_non_negative


MAX_AMORTIZATION_MONTHS = 600

# A remaining balance at or below this is treated as paid off
PAYOFF_TOLERANCE = 0.1


def monthly_payment(principal: Any, annual_rate: Any, months: Any) -> float:
    """
    Standard annuity payment (EMI).

    EMI = P * i * (1 + i)^n / ((1 + i)^n - 1) with i = rate / 100 / 12,
    or P / n when the rate is zero. Returns 0 for a non-positive
    principal or term.
    """
    principal = to_non_negative(principal)
    rate = to_non_negative(annual_rate)
    n = int(to_non_negative(months))

    if principal <= 0 or n <= 0:
        return 0.0

    i = rate / 100 / 12
    if i == 0:
        return principal / n

    growth = (1 + i) ** n
    return principal * i * growth / (growth - 1)


def amortize_loan(
    principal: Any,
    annual_rate: Any,
    term_months: Any,
    extra_payment: Any = 0.0,
    max_months: int = MAX_AMORTIZATION_MONTHS,
    tolerance: float = PAYOFF_TOLERANCE,
) -> LoanSchedule:
    """
    Simulate a loan until it is paid off or the iteration cap is reached.

    Each month: interest = balance * i, principal paid =
    min(balance, EMI + extra - interest), balance -= principal paid.
    A yearly snapshot is recorded every 12 months and on the last
    simulated month.

    Args:
        principal: Amount borrowed
        annual_rate: Annual interest rate in percent
        term_months: Contractual term used for the EMI
        extra_payment: Recurring amount paid on top of the EMI
        max_months: Safety cap on simulated months
        tolerance: Balance at or below which the loan counts as repaid

    Returns:
        LoanSchedule with totals, savings versus the contractual
        schedule, and yearly rows
    """
    principal = to_non_negative(principal)
    rate = to_non_negative(annual_rate)
    n = int(to_non_negative(term_months))
    extra = to_non_negative(extra_payment)

    i = rate / 100 / 12
    emi = monthly_payment(principal, rate, n)

    balance = principal
    month = 0
    total_interest = 0.0
    total_payment = 0.0
    year_principal = 0.0
    year_interest = 0.0
    schedule: list[AmortizationRow] = []

    while balance > tolerance and month < max_months:
        month += 1
        interest = balance * i
        principal_paid = min(balance, emi + extra - interest)
        balance -= principal_paid

        total_interest += interest
        total_payment += interest + principal_paid
        year_principal += principal_paid
        year_interest += interest

        if month % 12 == 0 or balance <= tolerance or month == max_months:
            schedule.append(AmortizationRow(
                year=(month - 1) // 12 + 1,
                month=month,
                principal_paid=year_principal,
                interest_paid=year_interest,
                balance=max(0.0, balance),
            ))
            year_principal = 0.0
            year_interest = 0.0

    converged = balance <= tolerance
    baseline_interest = emi * n - principal if emi > 0 else 0.0

    return LoanSchedule(
        principal=principal,
        annual_rate=rate,
        term_months=n,
        extra_payment=extra,
        emi=emi,
        months_paid=month,
        total_payment=total_payment,
        total_interest=total_interest,
        final_balance=max(0.0, balance),
        converged=converged,
        baseline_total_interest=baseline_interest,
        interest_saved=max(0.0, baseline_interest - total_interest) if converged else 0.0,
        months_saved=max(0, n - month) if converged else 0,
        schedule=schedule,
    )

