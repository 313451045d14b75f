"""
In-Memory Storage Implementation

Keeps everything in process memory. Used by tests and by the `memory`
storage backend; nothing survives a restart.
"""

from typing import Optional
from uuid import UUID

from finplanner.models.audit import AuditEvent
from finplanner.models.budget import BudgetPeriod
from finplanner.services.storage.interface import (
    AuditStorageInterface,
    BudgetStorageInterface,
)


class InMemoryBudgetStorage(BudgetStorageInterface):
    """Budget storage backed by a list."""

    def __init__(
        self,
        periods: Optional[list[BudgetPeriod]] = None,
        current_period_id: Optional[str] = None,
    ):
        self._periods = [p.model_copy(deep=True) for p in periods or []]
        self._current_period_id = current_period_id

    async def load_periods(self) -> list[BudgetPeriod]:
        # Copies, so callers cannot mutate what is "stored"
        return [p.model_copy(deep=True) for p in self._periods]

    async def save_periods(self, periods: list[BudgetPeriod]) -> bool:
        self._periods = [p.model_copy(deep=True) for p in periods]
        return True

    async def get_current_period_id(self) -> Optional[str]:
        return self._current_period_id

    async def set_current_period_id(self, period_id: str) -> bool:
        self._current_period_id = period_id
        return True


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log backed by a list."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        related = [e for e in self.events if e.correlation_id == correlation_id]
        return sorted(related, key=lambda e: e.timestamp)

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return sorted(self.events, key=lambda e: e.timestamp, reverse=True)[:limit]
