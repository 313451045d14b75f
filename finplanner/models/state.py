"""
Application State for finplanner

DESIGN DECISION: All mutable budgeting state lives in one explicit
object owned by the controller. The calculation engines receive
snapshots of it and never see the object itself.

Storage keeps a flat list of periods plus the id of the current one;
`AppState.from_periods()` and `AppState.all_periods()` convert between
that shape and current/history.
"""

from typing import Optional

from pydantic import BaseModel, Field

from finplanner.models.budget import BudgetPeriod, generate_id


class AppState(BaseModel):
    """The period being edited plus every archived period."""

    current: BudgetPeriod = Field(default_factory=BudgetPeriod)
    history: list[BudgetPeriod] = Field(default_factory=list)

    @classmethod
    def from_periods(
        cls,
        periods: list[BudgetPeriod],
        current_id: Optional[str] = None,
    ) -> "AppState":
        """
        Split a stored period list into current and history.

        Falls back to the most recently created period when `current_id`
        is unknown, and to a fresh period when nothing is stored.
        """
        if not periods:
            return cls()

        current = next((p for p in periods if p.id == current_id), None)
        if current is None:
            current = max(periods, key=lambda p: p.created)

        history = [p for p in periods if p.id != current.id]
        history.sort(key=lambda p: p.created)
        return cls(current=current, history=history)

    def all_periods(self) -> list[BudgetPeriod]:
        """History followed by the current period."""
        return [*self.history, self.current]

    def find_period(self, period_id: str) -> Optional[BudgetPeriod]:
        for period in self.all_periods():
            if period.id == period_id:
                return period
        return None

    def archive_current(self, replacement: BudgetPeriod) -> None:
        """Move the current period to history and make `replacement` current."""
        self.history.append(self.current)
        self.current = replacement

    def delete_period(self, period_id: str) -> bool:
        """Remove an archived period. The current period cannot be deleted."""
        before = len(self.history)
        self.history = [p for p in self.history if p.id != period_id]
        return len(self.history) < before

    def duplicate_period(self, period_id: str) -> Optional[BudgetPeriod]:
        """Copy an archived period into history under a new id."""
        source = next((p for p in self.history if p.id == period_id), None)
        if source is None:
            return None
        duplicate = source.model_copy(
            deep=True,
            update={"id": generate_id(), "created": BudgetPeriod().created},
        )
        self.history.append(duplicate)
        return duplicate
