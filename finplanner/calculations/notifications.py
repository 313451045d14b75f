"""
Notification Evaluator

Inspects a budget period (and optionally earlier periods) and produces
the list of alerts shown to the user.

Rules:
1. Unpaid bills and debts: overdue -> danger, due today -> warning,
   due within the upcoming window -> info
2. Expense categories: at or over budget -> danger, at or over the
   warning ratio -> warning (only the higher one fires)
3. With history: a bill or category spend well above its recent average
   -> warning
4. Savings: more set aside than last period, or the planned savings
   total reached -> success

DESIGN DECISION: Alerts carry a structured target (`category` +
`target_item_id`) so callers can focus the originating item without
parsing the id string.
"""

from collections.abc import Sequence
from datetime import date
from typing import Optional

from finplanner.calculations.formatting import format_currency
from finplanner.calculations.totals import calculate_totals
from finplanner.models.budget import BudgetPeriod
from finplanner.models.calculations import (
    Notification,
    NotificationCategory,
    NotificationKind,
    NotificationSeverity,
)
from finplanner.models.fields import safe_divide


UPCOMING_DUE_WINDOW_DAYS = 7
BUDGET_WARNING_RATIO = 0.8
ANOMALY_RATIO = 1.2
ANOMALY_LOOKBACK_PERIODS = 3
ANOMALY_MIN_SAMPLES = 2

SEVERITY_ORDER = {
    NotificationSeverity.DANGER: 0,
    NotificationSeverity.WARNING: 1,
    NotificationSeverity.SUCCESS: 2,
    NotificationSeverity.INFO: 3,
}

CATEGORY_ORDER = {
    NotificationCategory.BILL: 0,
    NotificationCategory.DEBT: 1,
    NotificationCategory.BUDGET: 2,
    NotificationCategory.SAVINGS: 3,
}


def _sort_key(notification: Notification) -> tuple:
    return (
        SEVERITY_ORDER[notification.severity],
        CATEGORY_ORDER[notification.category],
        notification.target_item_id or "",
        notification.id,
    )


def _same_name(a: str, b: str) -> bool:
    return a.strip().casefold() == b.strip().casefold()


# =============================================================================
# RULES
# =============================================================================

def _due_date_alerts(
    period: BudgetPeriod,
    today: date,
    window_days: int,
) -> list[Notification]:
    alerts = []
    items = [(NotificationCategory.BILL, bill) for bill in period.bills]
    items += [(NotificationCategory.DEBT, debt) for debt in period.debts]

    for category, item in items:
        if item.paid or item.due_date is None:
            continue

        label = category.value
        days = (item.due_date - today).days

        if days < 0:
            severity, kind = NotificationSeverity.DANGER, NotificationKind.OVERDUE
            message = f"Overdue {label}: {item.name}"
        elif days == 0:
            severity, kind = NotificationSeverity.WARNING, NotificationKind.DUE_TODAY
            message = f"{label} Due Today: {item.name}"
        elif days <= window_days:
            severity, kind = NotificationSeverity.INFO, NotificationKind.DUE_SOON
            unit = "day" if days == 1 else "days"
            message = f"{label} Due in {days} {unit}: {item.name}"
        else:
            continue

        alerts.append(Notification(
            id=f"{label}-{item.id}",
            category=category,
            severity=severity,
            kind=kind,
            message=message,
            date=item.due_date,
            target_item_id=item.id,
        ))

    return alerts


def _budget_alerts(
    period: BudgetPeriod,
    today: date,
    warning_ratio: float,
) -> list[Notification]:
    alerts = []
    symbol = period.currency_symbol

    for expense in period.expenses:
        if expense.budgeted <= 0:
            continue

        ratio = expense.spent / expense.budgeted
        if ratio >= 1.0:
            overspend = format_currency(expense.spent - expense.budgeted, symbol)
            alerts.append(Notification(
                id=f"budget-over-{expense.id}",
                category=NotificationCategory.BUDGET,
                severity=NotificationSeverity.DANGER,
                kind=NotificationKind.OVER_BUDGET,
                message=f"You've exceeded your {expense.name} budget by {overspend}.",
                date=today,
                target_item_id=expense.id,
            ))
        elif ratio >= warning_ratio:
            alerts.append(Notification(
                id=f"budget-warn-{expense.id}",
                category=NotificationCategory.BUDGET,
                severity=NotificationSeverity.WARNING,
                kind=NotificationKind.BUDGET_WARNING,
                message=f"You're {round(ratio * 100)}% through your {expense.name} budget.",
                date=today,
                target_item_id=expense.id,
            ))

    return alerts


def _anomaly_alerts(
    period: BudgetPeriod,
    recent: list[BudgetPeriod],
    today: date,
    anomaly_ratio: float,
    min_samples: int,
) -> list[Notification]:
    """
    Flag bills and category spend above `anomaly_ratio` x their average.

    Items are matched to earlier periods by name. Only earlier values
    above zero count as samples.
    """
    alerts = []
    symbol = period.currency_symbol

    for bill in period.bills:
        if bill.amount <= 0:
            continue
        samples = []
        for past in recent:
            match = next((b for b in past.bills if _same_name(b.name, bill.name)), None)
            if match is not None and match.amount > 0:
                samples.append(match.amount)
        if len(samples) < min_samples:
            continue
        average = sum(samples) / len(samples)
        if bill.amount > average * anomaly_ratio:
            alerts.append(Notification(
                id=f"bill-high-{bill.id}",
                category=NotificationCategory.BILL,
                severity=NotificationSeverity.WARNING,
                kind=NotificationKind.UNUSUAL_AMOUNT,
                message=(
                    f"Your {bill.name} bill is unusually high "
                    f"({format_currency(bill.amount, symbol)}) compared to average "
                    f"({format_currency(average, symbol)})."
                ),
                date=today,
                target_item_id=bill.id,
            ))

    for expense in period.expenses:
        if expense.spent <= 0:
            continue
        samples = []
        for past in recent:
            match = next((e for e in past.expenses if _same_name(e.name, expense.name)), None)
            if match is not None and match.spent > 0:
                samples.append(match.spent)
        if len(samples) < min_samples:
            continue
        average = sum(samples) / len(samples)
        if expense.spent > average * anomaly_ratio:
            alerts.append(Notification(
                id=f"spend-high-{expense.id}",
                category=NotificationCategory.BUDGET,
                severity=NotificationSeverity.WARNING,
                kind=NotificationKind.UNUSUAL_AMOUNT,
                message=(
                    f"Spending on {expense.name} is unusually high "
                    f"({format_currency(expense.spent, symbol)}) compared to average "
                    f"({format_currency(average, symbol)})."
                ),
                date=today,
                target_item_id=expense.id,
            ))

    return alerts


def _savings_alert(
    period: BudgetPeriod,
    previous: Optional[BudgetPeriod],
    today: date,
) -> Optional[Notification]:
    totals = calculate_totals(period)
    symbol = period.currency_symbol
    saved = totals.total_savings + totals.total_investments

    if previous is not None:
        prev_totals = calculate_totals(previous)
        diff = saved - (prev_totals.total_savings + prev_totals.total_investments)
        if diff > 0 and saved > 0:
            return Notification(
                id="savings-win",
                category=NotificationCategory.SAVINGS,
                severity=NotificationSeverity.SUCCESS,
                kind=NotificationKind.SAVINGS_WIN,
                message=(
                    f"You've saved {format_currency(diff, symbol)} more this period "
                    f"compared to last!"
                ),
                date=today,
            )

    if totals.planned_savings > 0 and totals.total_savings >= totals.planned_savings:
        progress = safe_divide(totals.total_savings, totals.planned_savings)
        return Notification(
            id="savings-win",
            category=NotificationCategory.SAVINGS,
            severity=NotificationSeverity.SUCCESS,
            kind=NotificationKind.SAVINGS_WIN,
            message=(
                f"Savings goal reached: {format_currency(totals.total_savings, symbol)} "
                f"saved ({round(progress * 100)}% of plan)."
            ),
            date=today,
        )

    return None


# =============================================================================
# PUBLIC API
# =============================================================================

def evaluate_notifications(
    period: BudgetPeriod,
    history: Sequence[BudgetPeriod] = (),
    today: Optional[date] = None,
    upcoming_window_days: int = UPCOMING_DUE_WINDOW_DAYS,
    warning_ratio: float = BUDGET_WARNING_RATIO,
    anomaly_ratio: float = ANOMALY_RATIO,
    anomaly_lookback: int = ANOMALY_LOOKBACK_PERIODS,
    anomaly_min_samples: int = ANOMALY_MIN_SAMPLES,
) -> list[Notification]:
    """
    Produce the ordered alerts for a period.

    Args:
        period: The period being evaluated
        history: Earlier periods, any order; the period itself is ignored
            if it appears here
        today: Reference date for due-date rules (defaults to today)

    Returns:
        Alerts ordered by severity (danger, warning, success, info), then
        category (Bill, Debt, Budget, Savings), then item id.
    """
    today = today or date.today()

    recent = sorted(
        (p for p in history if p.id != period.id),
        key=lambda p: p.created,
        reverse=True,
    )

    alerts = _due_date_alerts(period, today, upcoming_window_days)
    alerts += _budget_alerts(period, today, warning_ratio)

    if recent:
        alerts += _anomaly_alerts(
            period,
            recent[:anomaly_lookback],
            today,
            anomaly_ratio,
            anomaly_min_samples,
        )

    savings = _savings_alert(period, recent[0] if recent else None, today)
    if savings is not None:
        alerts.append(savings)

    return sorted(alerts, key=_sort_key)
