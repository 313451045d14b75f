"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the local JSON file for Google Sheets (or a database)
2. Use in-memory storage for testing
3. Keep the calculation engines unaware of persistence

The interface is intentionally simple: budget state is a list of
periods plus the id of the current one, read and written as a whole.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from finplanner.models.audit import AuditEvent
from finplanner.models.budget import BudgetPeriod


class BudgetStorageInterface(ABC):
    """
    Abstract interface for budget period storage.

    Any storage implementation (JSON file, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def load_periods(self) -> list[BudgetPeriod]:
        """
        Load every stored period.

        Returns:
            All periods, in no particular order (empty if nothing stored)

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def save_periods(self, periods: list[BudgetPeriod]) -> bool:
        """
        Replace the stored periods with `periods`.

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_current_period_id(self) -> Optional[str]:
        """Id of the period being edited, if one was stored."""
        pass

    @abstractmethod
    async def set_current_period_id(self, period_id: str) -> bool:
        """
        Remember which period is being edited.

        Returns:
            True if saved successfully
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one rollover).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
