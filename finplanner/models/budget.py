"""
Budget Data Models for finplanner

A BudgetPeriod is one monthly (or custom-range) snapshot of income,
expenses, bills, debts, savings and investments. It is the root entity:
totals, alerts and projections are all pure derivations of it.

DESIGN DECISION: Periods are never merged. A new period supersedes the
old one (optionally carrying a rollover) and the old one moves to
history unchanged.

Monetary fields use the coercing types from `fields`, so a period loaded
from a half-filled form never makes a calculation crash.
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finplanner.models.fields import Amount, OptionalDate, SignedAmount


MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


def generate_id() -> str:
    """Short random identifier for periods and line items."""
    return uuid4().hex[:9]


# =============================================================================
# ENUMS
# =============================================================================

class PeriodType(str, Enum):
    """How a budgeting period is delimited."""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    PAYCHECK = "paycheck"
    CUSTOM = "custom"


# =============================================================================
# LINE ITEMS
# =============================================================================

class LineItem(BaseModel):
    """Common identity for every line item in a period."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=generate_id)
    name: str = Field(default="", max_length=200)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        """Older exports stored numeric ids."""
        if v is None or v == "":
            return generate_id()
        return str(v)


class IncomeItem(LineItem):
    """An income source: what was planned and what actually arrived."""

    planned: Amount = 0.0
    actual: Amount = 0.0


class ExpenseItem(LineItem):
    """A spending category with its budget."""

    budgeted: Amount = 0.0
    spent: Amount = 0.0


class BillItem(LineItem):
    """A recurring bill. Counts as committed outflow whether or not paid."""

    amount: Amount = 0.0
    due_date: OptionalDate = None
    paid: bool = False


class DebtItem(LineItem):
    """
    A debt being paid down.

    `payment` is what is paid this period; `balance` is what is still owed.
    """

    balance: Amount = 0.0
    payment: Amount = 0.0
    paid: bool = False
    due_date: OptionalDate = None


class SavingsItem(LineItem):
    """A savings fund. `amount` is what was put aside this period."""

    planned: Amount = 0.0
    amount: Amount = 0.0
    balance: Amount = 0.0


class InvestmentItem(LineItem):
    """
    An investment holding.

    `amount` is what went into it this period; `monthly` is the standing
    contribution plan.
    """

    amount: Amount = 0.0
    monthly: Amount = 0.0
    contributed: bool = False


# =============================================================================
# BUDGET PERIOD
# =============================================================================

class BudgetPeriod(BaseModel):
    """
    One budgeting snapshot.

    Every line item belongs to exactly one period.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=generate_id)
    period_type: PeriodType = PeriodType.MONTHLY
    month: int = Field(default_factory=lambda: datetime.now().month, ge=1, le=12)
    year: int = Field(default_factory=lambda: datetime.now().year, ge=1900, le=3000)
    start_date: OptionalDate = None
    end_date: OptionalDate = None

    currency: str = Field(default="USD", min_length=3, max_length=3)
    currency_symbol: str = Field(default="$", max_length=5)

    rollover: SignedAmount = 0.0

    income: list[IncomeItem] = Field(default_factory=list)
    expenses: list[ExpenseItem] = Field(default_factory=list)
    bills: list[BillItem] = Field(default_factory=list)
    debts: list[DebtItem] = Field(default_factory=list)
    savings: list[SavingsItem] = Field(default_factory=list)
    investments: list[InvestmentItem] = Field(default_factory=list)

    created: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        if v is None or v == "":
            return generate_id()
        return str(v)

    @field_validator(
        "income", "expenses", "bills", "debts", "savings", "investments",
        mode="before",
    )
    @classmethod
    def drop_missing_collections(cls, v):
        """A missing collection is an empty one."""
        return v or []

    @property
    def label(self) -> str:
        """Human-readable period name, e.g. 'March 2025'."""
        if self.period_type == PeriodType.CUSTOM and self.start_date and self.end_date:
            return f"{self.start_date.isoformat()} to {self.end_date.isoformat()}"
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"
