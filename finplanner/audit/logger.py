"""
Audit Logger

DESIGN DECISION: Every change to the budget state is logged.
This provides:
1. Traceability of how each period came to be
2. Debugging capability when storage or the advisor fails
3. A history the user can inspect

The audit logger:
- Is async so it fits the storage interfaces
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from finplanner.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from finplanner.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The configured audit storage (for persistence)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("finplanner.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_periods_loaded(
        self,
        period_count: int,
        current_period_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a state load."""
        await self.log(AuditEventBuilder.periods_loaded(
            period_count=period_count,
            current_period_id=current_period_id,
            correlation_id=correlation_id,
        ))

    async def log_period_saved(
        self,
        period_id: str,
        label: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a period save."""
        await self.log(AuditEventBuilder.period_saved(
            period_id=period_id,
            label=label,
            correlation_id=correlation_id,
        ))

    async def log_period_updated(
        self,
        period_id: str,
        label: str,
        left_to_spend: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an edit of the current period."""
        await self.log(AuditEventBuilder.period_updated(
            period_id=period_id,
            label=label,
            left_to_spend=left_to_spend,
            correlation_id=correlation_id,
        ))

    async def log_period_created(
        self,
        period_id: str,
        label: str,
        previous_period_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log the start of a new period."""
        await self.log(AuditEventBuilder.period_created(
            period_id=period_id,
            label=label,
            previous_period_id=previous_period_id,
            correlation_id=correlation_id,
        ))

    async def log_period_deleted(
        self,
        period_id: str,
        label: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log removal of an archived period."""
        await self.log(AuditEventBuilder.period_deleted(
            period_id=period_id,
            label=label,
            correlation_id=correlation_id,
        ))

    async def log_period_duplicated(
        self,
        period_id: str,
        source_period_id: str,
        label: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.period_duplicated(
            period_id=period_id,
            source_period_id=source_period_id,
            label=label,
            correlation_id=correlation_id,
        ))

    async def log_rollover_confirmed(
        self,
        previous_period_id: str,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a confirmed rollover."""
        await self.log(AuditEventBuilder.rollover_confirmed(
            previous_period_id=previous_period_id,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_advisory_requested(
        self,
        kind: str,
        period_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.advisory_requested(
            kind=kind,
            period_count=period_count,
            correlation_id=correlation_id,
        ))

    async def log_advisory_generated(
        self,
        kind: str,
        response_length: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.advisory_generated(
            kind=kind,
            response_length=response_length,
            correlation_id=correlation_id,
        ))

    async def log_advisory_failed(
        self,
        kind: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.advisory_failed(
            kind=kind,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_scenario_simulated(
        self,
        event_type: str,
        period_id: str,
        final_baseline: float,
        final_with_event: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a life-event projection."""
        await self.log(AuditEventBuilder.scenario_simulated(
            event_type=event_type,
            period_id=period_id,
            final_baseline=final_baseline,
            final_with_event=final_with_event,
            correlation_id=correlation_id,
        ))

    async def log_storage_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed storage operation."""
        await self.log(AuditEventBuilder.storage_failed(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., closing a period).
    Pass it through all subsequent operations.
    """
    return uuid4()
