"""Tests for the life-event scenario projector."""

from datetime import date

import pytest

from finplanner.calculations import (
    baby_event,
    car_event,
    custom_event,
    education_event,
    house_event,
    monthly_payment,
    months_until,
    project_scenario,
    retirement_event,
    simulate_life_event,
)
from finplanner.models import (
    BudgetPeriod,
    ExpenseItem,
    IncomeItem,
    LifeEventType,
    SavingsItem,
)


class TestProjectScenario:
    """Tests for project_scenario."""

    def test_point_count_and_month_zero(self):
        """Horizon + 1 points; month 0 is today's liquid assets."""
        impact = custom_event("medical", initial_cost=1000, monthly_cost=100, start_month=6)
        projection = project_scenario(500, 10_000, impact, horizon=24)

        assert projection.months == list(range(25))
        assert len(projection.baseline) == 25
        assert projection.baseline[0] == 10_000
        assert projection.with_event[0] == 10_000

    def test_paths_match_until_start_month(self):
        """Before the event both paths agree; at its start the upfront cost lands."""
        impact = custom_event("marriage", initial_cost=8000, monthly_cost=200, start_month=6)
        projection = project_scenario(500, 10_000, impact, horizon=24)

        for m in range(6):
            assert projection.with_event[m] == pytest.approx(projection.baseline[m])
        assert projection.with_event[6] == pytest.approx(projection.baseline[6] - 8000)
        assert projection.with_event[7] == pytest.approx(projection.baseline[7] - 8000 - 200)

    def test_immediate_event(self):
        """An event starting now takes the upfront cost at month 0."""
        impact = custom_event("business", initial_cost=2500, start_month=0)
        projection = project_scenario(100, 5000, impact, horizon=12)

        assert projection.baseline[0] == 5000
        assert projection.with_event[0] == 2500
        assert projection.final_with_event == pytest.approx(projection.final_baseline - 2500)

    def test_negative_start_month_means_now(self):
        """A start offset in the past is clamped to today."""
        impact = custom_event("business", initial_cost=2500, start_month=-3)
        projection = project_scenario(100, 5000, impact, horizon=12)

        assert impact.start_month == 0
        assert projection.with_event[0] == 2500

    def test_fractional_start_month_is_truncated(self):
        """Start offsets are whole months."""
        assert custom_event("medical", start_month="4.7").start_month == 4
        assert custom_event("medical", start_month=None).start_month == 0

    def test_baseline_is_linear(self):
        """The baseline grows by the surplus every month."""
        impact = custom_event("relocation")
        projection = project_scenario(250, 0, impact, horizon=60)
        assert projection.final_baseline == pytest.approx(250 * 60)

    def test_income_change(self):
        """A positive income change lifts the with-event path."""
        impact = custom_event("startup", income_change=300, start_month=0)
        projection = project_scenario(0, 0, impact, horizon=10)

        assert projection.final_with_event == pytest.approx(3000)
        assert projection.new_monthly_surplus == pytest.approx(300)
        assert projection.net_worth_difference == pytest.approx(3000)

    def test_finite_cost_switches_to_residual(self):
        """After a loan term only the residual cost remains."""
        impact = car_event(20_000, 0, 0, term_months=10, insurance=50)
        projection = project_scenario(0, 0, impact, horizon=20)

        after_loan = projection.with_event[10]
        assert after_loan == pytest.approx(-(2000 + 50) * 10)
        assert projection.with_event[20] == pytest.approx(after_loan - 50 * 10)

    def test_zero_horizon(self):
        """A zero horizon yields only today."""
        projection = project_scenario(100, 50, custom_event("medical"), horizon=0)
        assert projection.baseline == [50]
        assert projection.final_baseline == 50


class TestEventBuilders:
    """Tests for the event wizards."""

    def test_baby(self):
        """Setup and leave loss are upfront; childcare and supplies recur forever."""
        impact = baby_event(initial_cost=3000, childcare=800, supplies=150, leave_loss=4000)
        assert impact.upfront_cost == 7000
        assert impact.monthly_cost == 950
        assert impact.active_months is None

    def test_house(self):
        """Down payment up front; mortgage plus maintenance for the term."""
        impact = house_event(400_000, 80_000, 6, term_years=30, maintenance=200)

        assert impact.upfront_cost == 80_000
        assert impact.loan_payment == pytest.approx(monthly_payment(320_000, 6, 360))
        assert impact.monthly_cost == pytest.approx(impact.loan_payment + 200)
        assert impact.active_months == 360
        assert impact.residual_monthly_cost == 200

    def test_education_cash_and_loans(self):
        """Cash-funded tuition is spread monthly; loans cost a small repayment."""
        cash = education_event(24_000, years=2)
        assert cash.monthly_cost == pytest.approx(2000)
        assert cash.active_months == 24

        loans = education_event(24_000, funding="loans")
        assert loans.monthly_cost == 50
        assert loans.active_months is None

    def test_retirement(self):
        """A shortfall is a cost; a larger pension is income."""
        short = retirement_event(3000, pension=1000)
        assert short.monthly_cost == 2000
        assert short.monthly_income == 0

        covered = retirement_event(1000, pension=1500)
        assert covered.monthly_cost == 0
        assert covered.monthly_income == 500

    def test_custom_event_type(self):
        """Custom events keep their type; negative costs clamp to zero."""
        impact = custom_event("medical", initial_cost=-10, income_change=-200)
        assert impact.event_type == LifeEventType.MEDICAL
        assert impact.upfront_cost == 0
        assert impact.monthly_income == -200

    def test_unknown_event_type(self):
        """Unknown event types are rejected."""
        with pytest.raises(ValueError):
            custom_event("holiday")


class TestMonthsUntil:
    """Tests for event start offsets."""

    def test_calendar_months(self):
        """Offsets count calendar months."""
        assert months_until(date(2026, 3, 1), today=date(2025, 12, 31)) == 3

    def test_past_and_missing_dates(self):
        """Past or missing dates start now."""
        assert months_until(date(2020, 1, 1), today=date(2025, 1, 1)) == 0
        assert months_until(None) == 0
        assert months_until("garbage") == 0


class TestSimulateLifeEvent:
    """Tests for projecting against a budget period."""

    def test_uses_period_surplus_and_assets(self):
        """Surplus and liquid assets come from the period's totals."""
        period = BudgetPeriod(
            income=[IncomeItem(name="Salary", actual=4000)],
            expenses=[ExpenseItem(name="Living", spent=2500)],
            savings=[SavingsItem(name="Fund", amount=500)],
        )
        projection = simulate_life_event(period, custom_event("medical"), horizon=12)

        assert projection.baseline_surplus == pytest.approx(1000)
        assert projection.baseline[0] == pytest.approx(500)
        assert projection.final_baseline == pytest.approx(500 + 12 * 1000)
