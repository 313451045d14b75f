"""Tests for the tax engine: income tax, VAT / GST and business tax."""

import math

import pytest

from finplanner.calculations import (
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


LKR_BRACKETS = [
    (1_200_000, 0),
    (1_700_000, 6),
    (2_200_000, 12),
    (2_700_000, 18),
    (3_200_000, 24),
    (3_700_000, 30),
    (math.inf, 36),
]


class TestIncomeTax:
    """Tests for compute_income_tax."""

    def test_sri_lanka_example(self):
        """1.8M under the Sri Lanka table pays 42,000."""
        result = compute_income_tax(1_800_000, LKR_BRACKETS)

        assert result.taxable_income == 1_800_000
        assert result.tax_payable == pytest.approx(42_000)
        assert result.effective_rate == pytest.approx(42_000 / 1_800_000)
        assert result.net_income == pytest.approx(1_758_000)

    def test_slices_cover_taxable_income_exactly(self):
        """Slice amounts sum to taxable income for many incomes."""
        for table in (LKR_BRACKETS, JURISDICTIONS["USA"].brackets, JURISDICTIONS["CHE"].brackets):
            for income in (0, 1, 999, 50_000, 1_234_567, 9_999_999):
                result = compute_income_tax(income, table, deductions=500)
                assert sum(s.taxable_amount for s in result.slices) == pytest.approx(
                    result.taxable_income
                )
                assert sum(s.tax for s in result.slices) == pytest.approx(result.tax_payable)

    def test_tax_is_monotonic_in_income(self):
        """More income never means less tax."""
        for code, jurisdiction in JURISDICTIONS.items():
            previous = -1.0
            for income in range(0, 5_000_000, 37_000):
                tax = compute_income_tax(income, jurisdiction.brackets, 10_000).tax_payable
                assert tax >= previous, code
                previous = tax

    def test_deductions_reduce_taxable_income(self):
        """Deductions come off before brackets apply, never below zero."""
        assert compute_income_tax(1_800_000, LKR_BRACKETS, 600_000).tax_payable == 0
        result = compute_income_tax(100, LKR_BRACKETS, 500)
        assert result.taxable_income == 0
        assert result.slices == []

    def test_zero_income_has_zero_effective_rate(self):
        """Division by zero yields 0."""
        result = compute_income_tax(0, LKR_BRACKETS)
        assert result.effective_rate == 0
        assert result.effective_rate_percent == 0

    def test_unsorted_and_incomplete_tables(self):
        """Brackets are sorted, and the last one is treated as unbounded."""
        result = compute_income_tax(300, [(200, 20), (100, 10)])
        # 100 @ 10% + the rest @ 20%
        assert result.tax_payable == pytest.approx(10 + 40)
        assert math.isinf(result.slices[-1].upper)

    def test_empty_table_means_no_tax(self):
        """Without brackets nothing is taxed."""
        result = compute_income_tax(50_000, [])
        assert result.tax_payable == 0
        assert result.taxable_income == 50_000

    def test_dict_brackets(self):
        """Brackets may be given as mappings with a missing top limit."""
        result = compute_income_tax(
            150, [{"limit": 100, "rate": 0}, {"limit": None, "rate": 50}]
        )
        assert result.tax_payable == pytest.approx(25)

    def test_monthly_views(self):
        """Monthly figures are annual figures over twelve."""
        result = compute_income_tax(1_800_000, LKR_BRACKETS)
        assert result.monthly_tax == pytest.approx(3_500)
        assert result.monthly_income == pytest.approx(150_000)


class TestPlanIncomeTax:
    """Tests for jurisdiction-based planning."""

    def test_lookup_is_case_insensitive(self):
        """Country codes are matched without regard to case."""
        assert get_jurisdiction("lkr").name == "Sri Lanka"

    def test_unknown_jurisdiction(self):
        """Unknown codes raise a ValueError subclass."""
        with pytest.raises(UnknownJurisdictionError):
            get_jurisdiction("XYZ")
        with pytest.raises(ValueError):
            plan_income_tax("XYZ", [1000])

    def test_monthly_incomes_are_annualized(self):
        """Monthly income and deductions are multiplied by twelve."""
        result = plan_income_tax("LKR", [100_000, 50_000], [0], frequency="monthly")
        assert result.gross_income == 1_800_000
        assert result.tax_payable == pytest.approx(42_000)

    def test_standard_deduction_applies(self):
        """India's standard deduction is always subtracted."""
        result = plan_income_tax("IND", [1_000_000])
        assert result.total_deductions == 50_000
        assert result.taxable_income == 950_000

    def test_what_if_adjustments(self):
        """A raise increases income; an extra investment adds a deduction."""
        base = plan_income_tax("LKR", [1_800_000])
        raised = plan_income_tax("LKR", [1_800_000], income_adjustment_percent=10)
        invested = plan_income_tax("LKR", [1_800_000], additional_deductions=100_000)

        assert raised.gross_income == pytest.approx(1_980_000)
        assert raised.tax_payable > base.tax_payable
        assert invested.tax_payable < base.tax_payable


class TestVat:
    """Tests for VAT / GST calculations."""

    def test_exclusive(self):
        """1000 at 18% exclusive."""
        split = vat_breakdown(1000, 18)
        assert split.net == pytest.approx(1000)
        assert split.tax == pytest.approx(180)
        assert split.gross == pytest.approx(1180)

    def test_inclusive(self):
        """1000 at 18% inclusive."""
        split = vat_breakdown(1000, 18, inclusive=True)
        assert split.gross == pytest.approx(1000)
        assert split.net == pytest.approx(847.46, abs=0.01)
        assert split.tax == pytest.approx(152.54, abs=0.01)

    def test_round_trip(self):
        """Converting to gross and back is lossless within tolerance."""
        for amount in (0, 0.01, 99.99, 1000, 123456.78):
            for rate in (0, 5, 12.5, 18, 25):
                assert to_net(to_gross(amount, rate), rate) == pytest.approx(amount)
                assert to_gross(to_net(amount, rate), rate) == pytest.approx(amount)

    def test_invoice_totals(self):
        """Lines carry their own rate, quantity and inclusive flag."""
        summary = invoice_totals([
            {"name": "Consulting", "amount": 500, "quantity": 2, "rate": 18},
            {"name": "Book", "amount": 118, "rate": 18, "inclusive": True},
        ])
        assert summary.net == pytest.approx(1100)
        assert summary.tax == pytest.approx(198)
        assert summary.gross == pytest.approx(1298)
        assert len(summary.lines) == 2


class TestBusinessTax:
    """Tests for the simplified corporate income statement."""

    def test_profit(self):
        """Tax is charged on earnings before tax."""
        result = compute_business_tax(
            revenue=1_000_000,
            cost_of_goods=400_000,
            operating_expenses=[100_000, 50_000],
            depreciation=50_000,
            other_income=20_000,
            corporate_rate=30,
        )
        assert result.gross_profit == 600_000
        assert result.ebitda == 450_000
        assert result.ebit == 400_000
        assert result.ebt == 420_000
        assert result.tax == pytest.approx(126_000)
        assert result.net_profit == pytest.approx(294_000)
        assert result.net_margin == pytest.approx(29.4)

    def test_loss_pays_no_tax(self):
        """A loss produces no tax and no credit."""
        result = compute_business_tax(100, 500, 0, corporate_rate=30)
        assert result.tax == 0
        assert result.net_profit == -400

    def test_adjustments(self):
        """Revenue and expense adjustments are percentages."""
        result = compute_business_tax(
            1000, 0, 100, revenue_adjustment_percent=10, expense_adjustment_percent=-50
        )
        assert result.projected_revenue == pytest.approx(1100)
        assert result.operating_expenses == pytest.approx(50)

    def test_zero_revenue_margin(self):
        """No revenue means a zero margin, not a division error."""
        assert compute_business_tax(0, 0, 0).net_margin == 0
