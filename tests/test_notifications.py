"""Tests for the notification evaluator."""

from datetime import date, datetime, timedelta

from finplanner.calculations import evaluate_notifications
from finplanner.models import (
    BillItem,
    BudgetPeriod,
    DebtItem,
    ExpenseItem,
    NotificationCategory,
    NotificationKind,
    NotificationSeverity,
    SavingsItem,
)


TODAY = date(2025, 4, 15)


def by_id(notifications):
    return {n.id: n for n in notifications}


class TestDueDateAlerts:
    """Tests for overdue / due today / upcoming bills and debts."""

    def test_overdue_bill(self):
        """An unpaid bill past its due date is a danger alert."""
        bill = BillItem(id="b1", name="Power", amount=90, due_date=TODAY - timedelta(days=2))
        alerts = by_id(evaluate_notifications(BudgetPeriod(bills=[bill]), today=TODAY))

        alert = alerts["Bill-b1"]
        assert alert.severity == NotificationSeverity.DANGER
        assert alert.kind == NotificationKind.OVERDUE
        assert alert.message == "Overdue Bill: Power"
        assert alert.date == bill.due_date
        assert alert.category == NotificationCategory.BILL
        assert alert.target_item_id == "b1"

    def test_due_today_debt(self):
        """A debt due today is a warning."""
        debt = DebtItem(id="d1", name="Car loan", payment=300, due_date=TODAY)
        alerts = by_id(evaluate_notifications(BudgetPeriod(debts=[debt]), today=TODAY))

        alert = alerts["Debt-d1"]
        assert alert.severity == NotificationSeverity.WARNING
        assert alert.message == "Debt Due Today: Car loan"

    def test_upcoming_within_window(self):
        """Bills due inside the window are info alerts with a day count."""
        period = BudgetPeriod(bills=[
            BillItem(id="b1", name="Water", amount=30, due_date=TODAY + timedelta(days=1)),
            BillItem(id="b2", name="Phone", amount=40, due_date=TODAY + timedelta(days=7)),
            BillItem(id="b3", name="Gym", amount=50, due_date=TODAY + timedelta(days=8)),
        ])
        alerts = by_id(evaluate_notifications(period, today=TODAY))

        assert alerts["Bill-b1"].message == "Bill Due in 1 day: Water"
        assert alerts["Bill-b2"].message == "Bill Due in 7 days: Phone"
        assert alerts["Bill-b2"].severity == NotificationSeverity.INFO
        assert "Bill-b3" not in alerts

    def test_window_is_configurable(self):
        """A shorter window drops later bills."""
        bill = BillItem(id="b1", name="Phone", amount=40, due_date=TODAY + timedelta(days=5))
        alerts = evaluate_notifications(
            BudgetPeriod(bills=[bill]), today=TODAY, upcoming_window_days=3
        )
        assert alerts == []

    def test_paid_and_undated_items_are_ignored(self):
        """Paid items and items without a due date raise nothing."""
        period = BudgetPeriod(bills=[
            BillItem(name="Rent", amount=1000, due_date=TODAY - timedelta(days=5), paid=True),
            BillItem(name="Misc", amount=10),
        ])
        assert evaluate_notifications(period, today=TODAY) == []


class TestBudgetAlerts:
    """Tests for category budget alerts."""

    def test_over_budget(self):
        """Spending 1200 of a 1000 budget raises a danger alert."""
        period = BudgetPeriod(expenses=[
            ExpenseItem(id="e1", name="Dining", budgeted=1000, spent=1200),
        ])
        alerts = by_id(evaluate_notifications(period, today=TODAY))

        alert = alerts["budget-over-e1"]
        assert alert.severity == NotificationSeverity.DANGER
        assert alert.kind == NotificationKind.OVER_BUDGET
        assert alert.message == "You've exceeded your Dining budget by $200.00."
        assert alert.date == TODAY

    def test_exactly_at_budget_is_over(self):
        """Reaching the budget counts as over it."""
        period = BudgetPeriod(expenses=[ExpenseItem(id="e1", name="Fuel", budgeted=100, spent=100)])
        assert "budget-over-e1" in by_id(evaluate_notifications(period, today=TODAY))

    def test_warning_only_once(self):
        """At 85% only the warning fires, never both."""
        period = BudgetPeriod(expenses=[ExpenseItem(id="e1", name="Fuel", budgeted=200, spent=170)])
        alerts = evaluate_notifications(period, today=TODAY)

        assert [a.id for a in alerts] == ["budget-warn-e1"]
        assert alerts[0].message == "You're 85% through your Fuel budget."

    def test_unbudgeted_categories_are_ignored(self):
        """A zero budget never divides by zero."""
        period = BudgetPeriod(expenses=[ExpenseItem(name="Gifts", budgeted=0, spent=80)])
        assert evaluate_notifications(period, today=TODAY) == []


class TestAnomalyAlerts:
    """Tests for history-based unusual amount alerts."""

    def _history(self, amounts, name="Electricity"):
        return [
            BudgetPeriod(
                month=i + 1,
                year=2025,
                bills=[BillItem(name=name, amount=amount)],
                expenses=[ExpenseItem(name="Groceries", spent=amount * 4)],
                created=datetime(2025, i + 1, 1),
            )
            for i, amount in enumerate(amounts)
        ]

    def test_bill_well_above_average(self):
        """A bill above 1.2x its trailing average is flagged."""
        current = BudgetPeriod(bills=[BillItem(id="b1", name="electricity", amount=150)])
        alerts = by_id(evaluate_notifications(current, self._history([100, 100, 100]), today=TODAY))

        alert = alerts["bill-high-b1"]
        assert alert.severity == NotificationSeverity.WARNING
        assert alert.kind == NotificationKind.UNUSUAL_AMOUNT
        assert alert.category == NotificationCategory.BILL

    def test_bill_near_average_is_quiet(self):
        """Exactly 1.2x the average does not fire."""
        current = BudgetPeriod(bills=[BillItem(id="b1", name="Electricity", amount=120)])
        alerts = by_id(evaluate_notifications(current, self._history([100, 100]), today=TODAY))
        assert "bill-high-b1" not in alerts

    def test_needs_minimum_samples(self):
        """One earlier sample is not enough history."""
        current = BudgetPeriod(bills=[BillItem(id="b1", name="Electricity", amount=500)])
        alerts = by_id(evaluate_notifications(current, self._history([100]), today=TODAY))
        assert "bill-high-b1" not in alerts

    def test_only_recent_periods_count(self):
        """Only the three newest earlier periods feed the average."""
        history = self._history([1000, 100, 100, 100])
        current = BudgetPeriod(bills=[BillItem(id="b1", name="Electricity", amount=200)])
        alerts = by_id(evaluate_notifications(current, history, today=TODAY))
        assert "bill-high-b1" in alerts

    def test_category_spend_anomaly(self):
        """Category spend is compared the same way."""
        current = BudgetPeriod(expenses=[ExpenseItem(id="e1", name="Groceries", spent=900)])
        alerts = by_id(evaluate_notifications(current, self._history([100, 100, 100]), today=TODAY))

        alert = alerts["spend-high-e1"]
        assert alert.category == NotificationCategory.BUDGET


class TestSavingsAlerts:
    """Tests for the savings win alert."""

    def test_saved_more_than_last_period(self):
        """Saving more than the previous period is a success."""
        previous = BudgetPeriod(
            savings=[SavingsItem(name="Fund", amount=100)],
            created=datetime(2025, 3, 1),
        )
        current = BudgetPeriod(
            savings=[SavingsItem(name="Fund", amount=250)],
            created=datetime(2025, 4, 1),
        )
        alerts = by_id(evaluate_notifications(current, [previous], today=TODAY))

        alert = alerts["savings-win"]
        assert alert.severity == NotificationSeverity.SUCCESS
        assert alert.message == "You've saved $150.00 more this period compared to last!"

    def test_goal_reached_without_history(self):
        """Reaching the planned savings total is a success."""
        current = BudgetPeriod(savings=[SavingsItem(name="Fund", planned=200, amount=200)])
        alerts = by_id(evaluate_notifications(current, today=TODAY))
        assert alerts["savings-win"].kind == NotificationKind.SAVINGS_WIN

    def test_no_win_when_saving_less(self):
        """Saving less than before and short of plan raises nothing."""
        previous = BudgetPeriod(savings=[SavingsItem(amount=300)], created=datetime(2025, 3, 1))
        current = BudgetPeriod(savings=[SavingsItem(planned=500, amount=100)])
        assert evaluate_notifications(current, [previous], today=TODAY) == []


class TestOrdering:
    """Tests for the alert order."""

    def test_severity_then_category(self):
        """Danger first, then warning, success, info."""
        period = BudgetPeriod(
            bills=[
                BillItem(id="b1", name="Soon", amount=10, due_date=TODAY + timedelta(days=3)),
                BillItem(id="b2", name="Late", amount=10, due_date=TODAY - timedelta(days=3)),
            ],
            debts=[DebtItem(id="d1", name="Loan", payment=10, due_date=TODAY - timedelta(days=1))],
            expenses=[ExpenseItem(id="e1", name="Fuel", budgeted=100, spent=90)],
            savings=[SavingsItem(planned=50, amount=60)],
        )
        alerts = evaluate_notifications(period, today=TODAY)

        assert [a.id for a in alerts] == [
            "Bill-b2",
            "Debt-d1",
            "budget-warn-e1",
            "savings-win",
            "Bill-b1",
        ]

    def test_current_period_in_history_is_ignored(self):
        """Passing the period itself as history changes nothing."""
        period = BudgetPeriod(savings=[SavingsItem(amount=100)])
        assert evaluate_notifications(period, [period], today=TODAY) == []
