"""
Totals Aggregator

Reduces one budget period to its summary totals.

DESIGN DECISION: Bills count as committed outflow whether or not they
have been paid yet, so "left to spend" reserves the money for them as
soon as they are entered. Paid amounts are reported separately.
"""

from finplanner.models.budget import BudgetPeriod
from finplanner.models.calculations import BudgetTotals


def calculate_totals(period: BudgetPeriod) -> BudgetTotals:
    """
    Summarize a budget period.

    Income counts only what actually arrived (`actual`), never what was
    planned. `total_out` is everything already committed; `left_to_spend`
    is income plus rollover minus `total_out`.
    """
    total_income = sum(item.actual for item in period.income)
    total_expenses = sum(item.spent for item in period.expenses)
    total_bills = sum(item.amount for item in period.bills)
    total_debts = sum(item.payment for item in period.debts)
    total_savings = sum(item.amount for item in period.savings)
    total_investments = sum(item.amount for item in period.investments)

    total_out = (
        total_expenses + total_bills + total_debts + total_savings + total_investments
    )
    left_to_spend = total_income + period.rollover - total_out

    budgeted_expenses = sum(item.budgeted for item in period.expenses)
    available_to_budget = (
        total_income
        + period.rollover
        - budgeted_expenses
        - total_bills
        - total_debts
        - total_savings
        - total_investments
    )

    return BudgetTotals(
        total_income=total_income,
        total_expenses=total_expenses,
        total_bills=total_bills,
        total_debts=total_debts,
        total_savings=total_savings,
        total_investments=total_investments,
        total_out=total_out,
        left_to_spend=left_to_spend,
        planned_income=sum(item.planned for item in period.income),
        budgeted_expenses=budgeted_expenses,
        planned_savings=sum(item.planned for item in period.savings),
        planned_contributions=sum(item.monthly for item in period.investments),
        available_to_budget=available_to_budget,
        paid_bills=sum(item.amount for item in period.bills if item.paid),
        paid_debts=sum(item.payment for item in period.debts if item.paid),
    )
