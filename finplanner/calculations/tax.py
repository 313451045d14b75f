"""
Progressive Tax Engine

Income tax over a bracket table, VAT/GST conversions, invoices and a
simplified corporate tax statement. Also holds the reference tax rules
of the supported countries.

DESIGN DECISION: Bracket tables are normalized before use: sorted by
upper limit, and the last bracket is always treated as unbounded. A
table that stops short of infinity therefore taxes everything above its
last limit at its last rate instead of leaving income untaxed.
"""

import math
from collections.abc import Iterable
from typing import Any, Union

from finplanner.models.calculations import (
    BracketSlice,
    BusinessTaxResult,
    IncomeTaxResult,
    InvoiceLine,
    InvoiceLineResult,
    InvoiceSummary,
    TaxBracket,
    TaxJurisdiction,
    VatBreakdown,
)
from finplanner.models.fields import safe_divide, to_non_negative, to_number


class UnknownJurisdictionError(ValueError):
    """Raised when a country code has no tax rules."""


BracketInput = Union[TaxBracket, tuple, dict]


# =============================================================================
# REFERENCE TAX RULES
# =============================================================================

INF = math.inf

JURISDICTIONS: dict[str, TaxJurisdiction] = {
    j.code: j for j in [
        TaxJurisdiction(
            code="LKR",
            name="Sri Lanka",
            currency="LKR",
            symbol="Rs.",
            fiscal_year_start="April 1",
            brackets=[
                TaxBracket(limit=1_200_000, rate=0),
                TaxBracket(limit=1_700_000, rate=6),
                TaxBracket(limit=2_200_000, rate=12),
                TaxBracket(limit=2_700_000, rate=18),
                TaxBracket(limit=3_200_000, rate=24),
                TaxBracket(limit=3_700_000, rate=30),
                TaxBracket(limit=INF, rate=36),
            ],
            standard_deduction=0,
            corporate_rate=30,
            vat_rate=18,
            vat_name="VAT",
            deduction_types=[
                "EPF Contribution", "Insurance Premium", "Donations (Approved)",
                "Housing Loan Interest", "Education Exp.",
            ],
            income_types=["Employment", "Business", "Rental", "Interest/Dividends", "Other"],
        ),
        TaxJurisdiction(
            code="IND",
            name="India",
            currency="INR",
            symbol="₹",
            fiscal_year_start="April 1",
            brackets=[
                TaxBracket(limit=300_000, rate=0),
                TaxBracket(limit=600_000, rate=5),
                TaxBracket(limit=900_000, rate=10),
                TaxBracket(limit=1_200_000, rate=15),
                TaxBracket(limit=1_500_000, rate=20),
                TaxBracket(limit=INF, rate=30),
            ],
            standard_deduction=50_000,
            corporate_rate=25,
            vat_rate=18,
            vat_name="GST",
            deduction_types=["80C (LIC/PPF)", "80D (Medical)", "HRA", "NPS", "Home Loan Interest"],
            income_types=[
                "Salary", "Business/Profession", "Capital Gains",
                "House Property", "Other Sources",
            ],
        ),
        TaxJurisdiction(
            code="USA",
            name="United States",
            currency="USD",
            symbol="$",
            fiscal_year_start="Jan 1",
            brackets=[
                TaxBracket(limit=11_000, rate=10),
                TaxBracket(limit=44_725, rate=12),
                TaxBracket(limit=95_375, rate=22),
                TaxBracket(limit=182_100, rate=24),
                TaxBracket(limit=231_250, rate=32),
                TaxBracket(limit=578_125, rate=35),
                TaxBracket(limit=INF, rate=37),
            ],
            standard_deduction=13_850,
            corporate_rate=21,
            vat_rate=8,  # average state sales tax
            vat_name="Sales Tax",
            deduction_types=[
                "401(k)", "IRA", "Mortgage Interest", "Student Loan Interest",
                "Charity", "State Taxes",
            ],
            income_types=["Wages (W-2)", "Business (1099)", "Investments", "Retirement", "Other"],
        ),
        TaxJurisdiction(
            code="UK",
            name="United Kingdom",
            currency="GBP",
            symbol="£",
            fiscal_year_start="April 6",
            brackets=[
                TaxBracket(limit=12_570, rate=0),
                TaxBracket(limit=50_270, rate=20),
                TaxBracket(limit=125_140, rate=40),
                TaxBracket(limit=INF, rate=45),
            ],
            standard_deduction=0,
            corporate_rate=25,
            vat_rate=20,
            vat_name="VAT",
            deduction_types=["Pension Contributions", "Charitable Giving", "Work Expenses"],
            income_types=["Employment", "Self-Employment", "Property", "Dividends", "Pension"],
        ),
        TaxJurisdiction(
            code="AUS",
            name="Australia",
            currency="AUD",
            symbol="$",
            fiscal_year_start="July 1",
            brackets=[
                TaxBracket(limit=18_200, rate=0),
                TaxBracket(limit=45_000, rate=16),
                TaxBracket(limit=135_000, rate=30),
                TaxBracket(limit=190_000, rate=37),
                TaxBracket(limit=INF, rate=45),
            ],
            standard_deduction=0,
            corporate_rate=30,
            vat_rate=10,
            vat_name="GST",
            deduction_types=[
                "Work-related Expenses", "Self-education", "Charitable Donations",
                "Income Protection Insurance",
            ],
            income_types=["Salary", "Business Income", "Investment Income", "Capital Gains"],
        ),
        TaxJurisdiction(
            code="CAN",
            name="Canada",
            currency="CAD",
            symbol="$",
            fiscal_year_start="Jan 1",
            brackets=[
                TaxBracket(limit=53_359, rate=15),
                TaxBracket(limit=106_717, rate=20.5),
                TaxBracket(limit=165_430, rate=26),
                TaxBracket(limit=235_675, rate=29),
                TaxBracket(limit=INF, rate=33),
            ],
            standard_deduction=15_000,  # basic personal amount
            corporate_rate=15,
            vat_rate=5,  # federal GST
            vat_name="GST",
            deduction_types=["RRSP", "Union Dues", "Child Care Expenses", "Moving Expenses"],
            income_types=["Employment", "Self-Employment", "Interest/Investments", "Pension"],
        ),
        TaxJurisdiction(
            code="NZL",
            name="New Zealand",
            currency="NZD",
            symbol="$",
            fiscal_year_start="April 1",
            brackets=[
                TaxBracket(limit=14_000, rate=10.5),
                TaxBracket(limit=48_000, rate=17.5),
                TaxBracket(limit=70_000, rate=30),
                TaxBracket(limit=180_000, rate=33),
                TaxBracket(limit=INF, rate=39),
            ],
            standard_deduction=0,
            corporate_rate=28,
            vat_rate=15,
            vat_name="GST",
            deduction_types=[
                "Donations (Tax Credit)", "Income Protection Insurance", "Accountancy Fees",
            ],
            income_types=[
                "Salary/Wages", "Business/Self-Employed", "Schedular Payments", "Interest",
            ],
        ),
        TaxJurisdiction(
            code="CHE",
            name="Switzerland",
            currency="CHF",
            symbol="Fr.",
            fiscal_year_start="Jan 1",
            # Federal tax only; cantonal tax varies
            brackets=[
                TaxBracket(limit=14_500, rate=0),
                TaxBracket(limit=31_600, rate=0.77),
                TaxBracket(limit=41_400, rate=0.88),
                TaxBracket(limit=55_200, rate=2.64),
                TaxBracket(limit=72_500, rate=2.97),
                TaxBracket(limit=103_600, rate=5.94),
                TaxBracket(limit=134_600, rate=6.6),
                TaxBracket(limit=176_000, rate=8.8),
                TaxBracket(limit=INF, rate=11.5),
            ],
            standard_deduction=6_500,
            corporate_rate=15,
            vat_rate=8.1,
            vat_name="VAT",
            deduction_types=[
                "Social Security (AHV/IV)", "Pension (Pillar 2/3a)",
                "Health Insurance Premiums", "Professional Expenses",
            ],
            income_types=["Employment Income", "Self-Employment", "Investment Income"],
        ),
        TaxJurisdiction(
            code="CHN",
            name="China",
            currency="CNY",
            symbol="¥",
            fiscal_year_start="Jan 1",
            brackets=[
                TaxBracket(limit=36_000, rate=3),
                TaxBracket(limit=144_000, rate=10),
                TaxBracket(limit=300_000, rate=20),
                TaxBracket(limit=420_000, rate=25),
                TaxBracket(limit=660_000, rate=30),
                TaxBracket(limit=960_000, rate=35),
                TaxBracket(limit=INF, rate=45),
            ],
            standard_deduction=60_000,  # 5000 per month
            corporate_rate=25,
            vat_rate=13,
            vat_name="VAT",
            deduction_types=[
                "Social Insurance", "Housing Fund", "Children Education",
                "Continuing Education", "Serious Illness", "Mortgage Interest/Rent",
                "Elderly Care",
            ],
            income_types=[
                "Wages/Salaries", "Remuneration", "Author's Remuneration",
                "Royalties", "Business Income",
            ],
        ),
        TaxJurisdiction(
            code="RUS",
            name="Russia",
            currency="RUB",
            symbol="₽",
            fiscal_year_start="Jan 1",
            brackets=[
                TaxBracket(limit=2_400_000, rate=13),
                TaxBracket(limit=5_000_000, rate=15),
                TaxBracket(limit=20_000_000, rate=18),
                TaxBracket(limit=50_000_000, rate=20),
                TaxBracket(limit=INF, rate=22),
            ],
            standard_deduction=0,
            corporate_rate=20,
            vat_rate=20,
            vat_name="VAT",
            deduction_types=[
                "Standard (Children)", "Social (Charity/Education/Medical)",
                "Property (Housing Purchase)", "Investment",
            ],
            income_types=["Employment", "Dividend", "Lease/Rental", "Sale of Property"],
        ),
    ]
}


def get_jurisdiction(code: str) -> TaxJurisdiction:
    """Look up tax rules by country code (case-insensitive)."""
    jurisdiction = JURISDICTIONS.get(str(code).strip().upper())
    if jurisdiction is None:
        raise UnknownJurisdictionError(f"No tax rules for jurisdiction: {code}")
    return jurisdiction


# =============================================================================
# INCOME TAX
# =============================================================================

def _to_bracket(bracket: BracketInput) -> TaxBracket:
    if isinstance(bracket, TaxBracket):
        return bracket
    if isinstance(bracket, dict):
        return TaxBracket.model_validate(bracket)
    limit, rate = bracket
    return TaxBracket(limit=limit, rate=rate)


def normalize_brackets(brackets: Iterable[BracketInput]) -> list[TaxBracket]:
    """Sort brackets by limit and make the last one unbounded."""
    table = sorted((_to_bracket(b) for b in brackets), key=lambda b: b.limit)
    if not table:
        return [TaxBracket(limit=INF, rate=0)]
    table[-1] = TaxBracket(limit=INF, rate=table[-1].rate)
    return table


def compute_income_tax(
    gross_income: Any,
    brackets: Iterable[BracketInput],
    deductions: Any = 0.0,
) -> IncomeTaxResult:
    """
    Compute progressive income tax.

    Each bracket taxes min(taxable, limit) - previous limit. Zero-rate
    brackets still take their slice of income; they are tax-free
    allowances, not gaps.

    Args:
        gross_income: Annual gross income
        brackets: (limit, rate%) pairs, TaxBracket models or dicts
        deductions: Total deductions (standard plus itemized)

    Returns:
        IncomeTaxResult with per-bracket slices and an effective rate
        expressed as a fraction of gross income
    """
    gross = to_non_negative(gross_income)
    total_deductions = to_non_negative(deductions)
    taxable = max(0.0, gross - total_deductions)

    tax_payable = 0.0
    previous_limit = 0.0
    slices = []

    for bracket in normalize_brackets(brackets):
        if taxable <= previous_limit:
            break
        amount = max(0.0, min(taxable, bracket.limit) - previous_limit)
        if amount > 0:
            tax = amount * bracket.rate / 100
            tax_payable += tax
            slices.append(BracketSlice(
                lower=previous_limit,
                upper=bracket.limit,
                rate=bracket.rate,
                taxable_amount=amount,
                tax=tax,
            ))
        previous_limit = bracket.limit

    return IncomeTaxResult(
        gross_income=gross,
        total_deductions=total_deductions,
        taxable_income=taxable,
        tax_payable=tax_payable,
        effective_rate=safe_divide(tax_payable, gross),
        net_income=gross - tax_payable,
        slices=slices,
    )


def plan_income_tax(
    jurisdiction: Union[TaxJurisdiction, str],
    incomes: Iterable[Any],
    deductions: Iterable[Any] = (),
    frequency: str = "yearly",
    income_adjustment_percent: Any = 0.0,
    additional_deductions: Any = 0.0,
) -> IncomeTaxResult:
    """
    Income tax for a set of income sources under a country's rules.

    Monthly inputs are annualized. The income adjustment models a raise
    or pay cut in percent; `additional_deductions` models an extra
    tax-saving investment. The country's standard deduction is always
    applied.
    """
    if not isinstance(jurisdiction, TaxJurisdiction):
        jurisdiction = get_jurisdiction(jurisdiction)

    factor = 12 if frequency == "monthly" else 1
    annual_income = sum(to_non_negative(x) for x in incomes) * factor
    projected_income = annual_income * (1 + to_number(income_adjustment_percent) / 100)

    annual_deductions = sum(to_non_negative(x) for x in deductions) * factor
    total_deductions = (
        annual_deductions
        + jurisdiction.standard_deduction
        + to_non_negative(additional_deductions)
    )

    return compute_income_tax(projected_income, jurisdiction.brackets, total_deductions)


# =============================================================================
# VAT / GST
# =============================================================================

def vat_breakdown(amount: Any, rate: Any, inclusive: bool = False) -> VatBreakdown:
    """
    Split an amount into net, tax and gross.

    Exclusive: the amount is net and tax is added on top.
    Inclusive: the amount is gross and the tax is backed out of it.
    """
    amount = to_non_negative(amount)
    rate = to_non_negative(rate)

    if inclusive:
        gross = amount
        net = gross / (1 + rate / 100)
        tax = gross - net
    else:
        net = amount
        tax = net * rate / 100
        gross = net + tax

    return VatBreakdown(net=net, tax=tax, gross=gross, rate=rate, inclusive=inclusive)


def to_gross(net: Any, rate: Any) -> float:
    """Add tax to a net amount."""
    return vat_breakdown(net, rate, inclusive=False).gross


def to_net(gross: Any, rate: Any) -> float:
    """Remove tax from a gross amount."""
    return vat_breakdown(gross, rate, inclusive=True).net


def invoice_totals(lines: Iterable[Union[InvoiceLine, dict]]) -> InvoiceSummary:
    """
    Total an itemized invoice.

    Every line carries its own rate and inclusive flag; its amount is
    multiplied by its quantity before the split. Net, tax and gross are
    summed independently.
    """
    results = []
    for line in lines:
        if not isinstance(line, InvoiceLine):
            line = InvoiceLine.model_validate(line)
        split = vat_breakdown(line.amount * line.quantity, line.rate, line.inclusive)
        results.append(InvoiceLineResult(
            **line.model_dump(),
            net=split.net,
            tax=split.tax,
            gross=split.gross,
        ))

    return InvoiceSummary(
        lines=results,
        net=sum(r.net for r in results),
        tax=sum(r.tax for r in results),
        gross=sum(r.gross for r in results),
    )


# =============================================================================
# BUSINESS TAX
# =============================================================================

def compute_business_tax(
    revenue: Any,
    cost_of_goods: Any,
    operating_expenses: Any,
    depreciation: Any = 0.0,
    other_income: Any = 0.0,
    corporate_rate: Any = 0.0,
    revenue_adjustment_percent: Any = 0.0,
    expense_adjustment_percent: Any = 0.0,
) -> BusinessTaxResult:
    """
    Simplified corporate income statement.

    `operating_expenses` may be a single amount or a list of amounts.
    Tax is never negative: a loss pays no tax and produces no credit.
    """
    if isinstance(operating_expenses, (list, tuple)):
        opex = sum(to_non_negative(x) for x in operating_expenses)
    else:
        opex = to_non_negative(operating_expenses)

    projected_revenue = to_non_negative(revenue) * (1 + to_number(revenue_adjustment_percent) / 100)
    gross_profit = projected_revenue - to_non_negative(cost_of_goods)
    opex *= 1 + to_number(expense_adjustment_percent) / 100

    ebitda = gross_profit - opex
    ebit = ebitda - to_non_negative(depreciation)
    ebt = ebit + to_number(other_income)

    tax = max(0.0, ebt * to_non_negative(corporate_rate) / 100)
    net_profit = ebt - tax

    return BusinessTaxResult(
        projected_revenue=projected_revenue,
        gross_profit=gross_profit,
        operating_expenses=opex,
        ebitda=ebitda,
        ebit=ebit,
        ebt=ebt,
        tax=tax,
        net_profit=net_profit,
        net_margin=safe_divide(net_profit, projected_revenue) * 100,
    )
