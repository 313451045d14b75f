"""
Calculation Result Models for finplanner

Every engine in `finplanner.calculations` returns one of these models.
They are plain data: created once per calculation, never mutated, and
`model_dump()` gives a JSON-ready dict for export.
"""

import math
from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, computed_field, field_validator

from finplanner.models.fields import Amount, MonthCount, SignedAmount


# =============================================================================
# TOTALS
# =============================================================================

class BudgetTotals(BaseModel):
    """Summary totals of one budget period."""

    total_income: float
    total_expenses: float
    total_bills: float
    total_debts: float
    total_savings: float
    total_investments: float
    total_out: float
    left_to_spend: float

    # Planned side of the budget
    planned_income: float = 0.0
    budgeted_expenses: float = 0.0
    planned_savings: float = 0.0
    planned_contributions: float = 0.0
    available_to_budget: float = 0.0

    # What has actually been paid so far
    paid_bills: float = 0.0
    paid_debts: float = 0.0

    @computed_field
    @property
    def surplus(self) -> float:
        """Monthly surplus before rollover: income minus everything committed."""
        return self.total_income - self.total_out

    @computed_field
    @property
    def liquid_assets(self) -> float:
        """Money set aside this period (savings plus investments)."""
        return self.total_savings + self.total_investments


# =============================================================================
# NOTIFICATIONS
# =============================================================================

class NotificationCategory(str, Enum):
    """Which part of the budget an alert points at."""
    BILL = "Bill"
    DEBT = "Debt"
    BUDGET = "Budget"
    SAVINGS = "Savings"


class NotificationSeverity(str, Enum):
    """Alert severity, most urgent first."""
    DANGER = "danger"
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"


class NotificationKind(str, Enum):
    """What triggered an alert."""
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    DUE_SOON = "due_soon"
    OVER_BUDGET = "over_budget"
    BUDGET_WARNING = "budget_warning"
    UNUSUAL_AMOUNT = "unusual_amount"
    SAVINGS_WIN = "savings_win"


class Notification(BaseModel):
    """
    One actionable alert derived from a budget period.

    Never persisted. `category` + `target_item_id` tell the caller which
    item to focus; `id` is stable across recomputations.
    """

    id: str
    category: NotificationCategory
    severity: NotificationSeverity
    kind: NotificationKind
    message: str
    date: date
    target_item_id: Optional[str] = None


# =============================================================================
# LOANS
# =============================================================================

class AmortizationRow(BaseModel):
    """Yearly snapshot of a loan schedule."""

    year: int = Field(ge=1)
    month: int = Field(ge=1, description="Simulated month at which the snapshot was taken")
    principal_paid: float
    interest_paid: float
    balance: float


class LoanSchedule(BaseModel):
    """Result of simulating a loan month by month."""

    principal: float
    annual_rate: float
    term_months: int
    extra_payment: float
    emi: float

    months_paid: int
    total_payment: float
    total_interest: float
    final_balance: float
    converged: bool = Field(
        description="False when the iteration cap stopped the simulation before payoff"
    )

    # Comparison against the contractual schedule without extra payments
    baseline_total_interest: float
    # Zero when the simulation stopped at the iteration cap
    interest_saved: float
    months_saved: int

    schedule: list[AmortizationRow] = Field(default_factory=list)

    @property
    def monthly_outlay(self) -> float:
        return self.emi + self.extra_payment


# =============================================================================
# GROWTH
# =============================================================================

PERIODS_PER_YEAR = {
    "weekly": 52,
    "biweekly": 26,
    "monthly": 12,
    "quarterly": 4,
    "annually": 1,
}


class ContributionFrequency(str, Enum):
    """How often a contribution goes into an investment."""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"

    @property
    def periods_per_year(self) -> int:
        return PERIODS_PER_YEAR[self.value]


class GrowthDataPoint(BaseModel):
    """Investment state at the end of a year (year 0 is the starting point)."""

    year: int = Field(ge=0)
    invested: float
    gain: float
    value: float


class GrowthProjection(BaseModel):
    """Result of a SIP / lumpsum growth simulation."""

    principal: float
    contribution: float
    frequency: ContributionFrequency
    annual_rate: float
    years: int
    step_up: float
    inflation: float

    final_value: float
    total_invested: float
    total_gain: float
    real_value: float
    return_percent: float

    # Same plan started one year later
    delayed_final_value: float
    cost_of_delay: float

    points: list[GrowthDataPoint] = Field(default_factory=list)


class RetirementProjection(BaseModel):
    """Retirement corpus estimate."""

    years_to_retirement: int
    projected_corpus: float
    required_corpus: float
    future_monthly_spend: float

    @property
    def gap(self) -> float:
        """Positive when the projected corpus falls short."""
        return self.required_corpus - self.projected_corpus

    @property
    def on_track(self) -> bool:
        return self.gap <= 0


# =============================================================================
# TAX
# =============================================================================

class TaxBracket(BaseModel):
    """
    One slab of a progressive tax table.

    `limit` is the upper bound of the slab; the top slab is unbounded.
    """

    limit: float = math.inf
    rate: Amount = Field(default=0.0, description="Rate in percent")

    @field_validator("limit", mode="before")
    @classmethod
    def normalize_limit(cls, v: Any) -> float:
        if v is None or v == "":
            return math.inf
        try:
            limit = float(v)
        except (TypeError, ValueError):
            return math.inf
        if math.isnan(limit):
            return math.inf
        return max(0.0, limit)


class TaxJurisdiction(BaseModel):
    """Tax rules of one country."""

    code: str
    name: str
    currency: str
    symbol: str
    fiscal_year_start: str
    brackets: list[TaxBracket]
    standard_deduction: Amount = 0.0
    corporate_rate: Amount = 0.0
    vat_rate: Amount = 0.0
    vat_name: str = "VAT"
    deduction_types: list[str] = Field(default_factory=list)
    income_types: list[str] = Field(default_factory=list)


class BracketSlice(BaseModel):
    """The part of taxable income that fell into one bracket."""

    lower: float
    upper: float
    rate: float
    taxable_amount: float
    tax: float


class IncomeTaxResult(BaseModel):
    """Result of a progressive income tax calculation."""

    gross_income: float
    total_deductions: float
    taxable_income: float
    tax_payable: float
    effective_rate: float = Field(description="Tax payable / gross income, as a fraction")
    net_income: float
    slices: list[BracketSlice] = Field(default_factory=list)

    @property
    def effective_rate_percent(self) -> float:
        return self.effective_rate * 100

    @property
    def monthly_income(self) -> float:
        return self.gross_income / 12

    @property
    def monthly_tax(self) -> float:
        return self.tax_payable / 12

    @property
    def monthly_net(self) -> float:
        return self.net_income / 12


class VatBreakdown(BaseModel):
    """Net / tax / gross split of one amount."""

    net: float
    tax: float
    gross: float
    rate: float
    inclusive: bool


class InvoiceLine(BaseModel):
    """One invoice line with its own rate and inclusive flag."""

    name: str = ""
    amount: Amount = 0.0
    quantity: Amount = 1.0
    rate: Amount = 0.0
    inclusive: bool = False


class InvoiceLineResult(InvoiceLine):
    """An invoice line after the tax split."""

    net: float
    tax: float
    gross: float


class InvoiceSummary(BaseModel):
    """Invoice totals, each summed independently across lines."""

    lines: list[InvoiceLineResult] = Field(default_factory=list)
    net: float = 0.0
    tax: float = 0.0
    gross: float = 0.0


class BusinessTaxResult(BaseModel):
    """Simplified corporate income statement and tax."""

    projected_revenue: float
    gross_profit: float
    operating_expenses: float
    ebitda: float
    ebit: float
    ebt: float
    tax: float
    net_profit: float
    net_margin: float = Field(description="Net profit / revenue, in percent")


# =============================================================================
# CURRENCY
# =============================================================================

class CurrencyConversion(BaseModel):
    """A currency conversion at a reference rate."""

    amount: float
    source: str
    target: str
    rate: float
    inverse_rate: float
    converted: float


# =============================================================================
# LIFE EVENTS
# =============================================================================

class LifeEventType(str, Enum):
    """Life events the scenario projector knows how to shape."""
    BABY = "baby"
    HOUSE = "house"
    CAR = "car"
    MARRIAGE = "marriage"
    EDUCATION = "education"
    BUSINESS = "business"
    MEDICAL = "medical"
    RELOCATION = "relocation"
    RETIREMENT = "retirement"
    STARTUP = "startup"


class EventImpact(BaseModel):
    """
    The cash-flow shape of a life event.

    The upfront cost hits once at `start_month`. From then on the event
    costs `monthly_cost` every month, for `active_months` months if set
    (a loan term or a course length) and `residual_monthly_cost`
    afterwards. `active_months=None` means the cost never stops.
    """

    event_type: LifeEventType
    upfront_cost: Amount = 0.0
    monthly_cost: Amount = 0.0
    monthly_income: SignedAmount = 0.0
    start_month: MonthCount = 0
    active_months: Optional[int] = Field(default=None, ge=0)
    residual_monthly_cost: Amount = 0.0
    loan_payment: Amount = 0.0


class ScenarioProjection(BaseModel):
    """
    Month-indexed net worth with and without a life event.

    Point m is the net worth at the start of month m; point 0 is today.
    """

    months: list[int]
    baseline: list[float]
    with_event: list[float]
    final_baseline: float
    final_with_event: float
    baseline_surplus: float
    new_monthly_surplus: float
    impact: EventImpact

    @property
    def net_worth_difference(self) -> float:
        return self.final_with_event - self.final_baseline
