"""
Event Planning Models for finplanner

Shapes used by the AI event advisor. They are not part of the numeric
core: nothing in `finplanner.calculations` reads them.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from finplanner.models.budget import generate_id
from finplanner.models.fields import Amount


class EventExpense(BaseModel):
    """A single cost booked against an event."""

    id: str = Field(default_factory=generate_id)
    name: str = ""
    amount: Amount = 0.0
    category: str = ""
    date: Optional[str] = None
    vendor_id: Optional[str] = None
    paid_by: Optional[str] = None


class EventCategory(BaseModel):
    """A budget envelope within an event (venue, catering, ...)."""

    id: str = Field(default_factory=generate_id)
    name: str
    allocated: Amount = 0.0


class EventRecord(BaseModel):
    """A planned event such as a wedding, birthday or trip."""

    id: str = Field(default_factory=generate_id)
    name: str = "New Event"
    type: str = "General"
    date: Optional[str] = None
    location: Optional[str] = None
    total_budget: Amount = 0.0
    currency_symbol: str = "$"
    categories: list[EventCategory] = Field(default_factory=list)
    expenses: list[EventExpense] = Field(default_factory=list)
    notes: str = ""
    created: datetime = Field(default_factory=datetime.utcnow)

    @property
    def total_spent(self) -> float:
        return sum(e.amount for e in self.expenses)


# =============================================================================
# STRATEGY PLANS
# =============================================================================

class StrategyType(str, Enum):
    """How the user intends to absorb a new recurring cost."""
    CUT = "cut"
    EARN = "earn"
    SAVE = "save"


class ExpenseSnapshot(BaseModel):
    """A named current expense, used to suggest where to cut."""

    name: str
    amount: Amount = 0.0


class StrategyContext(BaseModel):
    """Input for a micro-plan that covers a life event's monthly cost."""

    event_type: str
    monthly_cost: Amount = 0.0
    current_expenses: list[ExpenseSnapshot] = Field(default_factory=list)
    strategy: StrategyType = StrategyType.CUT
    currency_symbol: str = "$"
