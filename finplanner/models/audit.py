"""
Audit Models for finplanner

Every state change of the budget is logged for audit purposes.
This provides:
1. Traceability of what happened to each period
2. Debugging information when storage or the advisor fails
3. The ability to reconstruct how a period came to be

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each controller operation that changes state or calls out to a
    collaborator has its own event type.
    """
    # Periods
    PERIODS_LOADED = "periods_loaded"
    PERIOD_SAVED = "period_saved"
    PERIOD_UPDATED = "period_updated"
    PERIOD_CREATED = "period_created"
    PERIOD_DELETED = "period_deleted"
    PERIOD_DUPLICATED = "period_duplicated"
    ROLLOVER_CONFIRMED = "rollover_confirmed"

    # Advisory
    ADVISORY_REQUESTED = "advisory_requested"
    ADVISORY_GENERATED = "advisory_generated"
    ADVISORY_FAILED = "advisory_failed"

    # Scenarios
    SCENARIO_SIMULATED = "scenario_simulated"

    # System events
    STORAGE_FAILED = "storage_failed"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'period', 'scenario', 'advice')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one rollover)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.period_saved(period_id, label, correlation_id)
        event = AuditEventBuilder.rollover_confirmed(previous_id, amount, correlation_id)
    """

    @staticmethod
    def periods_loaded(
        period_count: int,
        current_period_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERIODS_LOADED,
            entity_type="period",
            entity_id=current_period_id,
            correlation_id=correlation_id,
            description=f"Loaded {period_count} budget periods",
            details={"period_count": period_count},
        )

    @staticmethod
    def period_saved(
        period_id: str,
        label: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERIOD_SAVED,
            entity_type="period",
            entity_id=period_id,
            correlation_id=correlation_id,
            description=f"Budget period saved: {label}",
            details={"label": label},
        )

    @staticmethod
    def period_updated(
        period_id: str,
        label: str,
        left_to_spend: float,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERIOD_UPDATED,
            entity_type="period",
            entity_id=period_id,
            correlation_id=correlation_id,
            description=f"Budget period updated: {label}",
            details={"label": label, "left_to_spend": left_to_spend},
            is_user_action=True,
        )

    @staticmethod
    def period_created(
        period_id: str,
        label: str,
        previous_period_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERIOD_CREATED,
            entity_type="period",
            entity_id=period_id,
            correlation_id=correlation_id,
            description=f"New budget period started: {label}",
            details={"previous_period_id": previous_period_id},
            is_user_action=True,
        )

    @staticmethod
    def period_deleted(
        period_id: str,
        label: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERIOD_DELETED,
            entity_type="period",
            entity_id=period_id,
            correlation_id=correlation_id,
            description=f"Budget period deleted: {label}",
            details={"label": label},
            is_user_action=True,
        )

    @staticmethod
    def period_duplicated(
        period_id: str,
        source_period_id: str,
        label: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERIOD_DUPLICATED,
            entity_type="period",
            entity_id=period_id,
            correlation_id=correlation_id,
            description=f"Budget period duplicated: {label}",
            details={"source_period_id": source_period_id, "label": label},
            is_user_action=True,
        )

    @staticmethod
    def rollover_confirmed(
        previous_period_id: str,
        amount: float,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ROLLOVER_CONFIRMED,
            entity_type="period",
            entity_id=previous_period_id,
            correlation_id=correlation_id,
            description=f"Rollover of {amount:.2f} confirmed",
            details={"amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def advisory_requested(
        kind: str,
        period_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVISORY_REQUESTED,
            entity_type="advice",
            correlation_id=correlation_id,
            description=f"Advice requested: {kind}",
            details={"kind": kind, "period_count": period_count},
            is_user_action=True,
        )

    @staticmethod
    def advisory_generated(
        kind: str,
        response_length: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVISORY_GENERATED,
            entity_type="advice",
            correlation_id=correlation_id,
            description=f"Advice generated: {kind}",
            details={"kind": kind, "response_length": response_length},
        )

    @staticmethod
    def advisory_failed(
        kind: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVISORY_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="advice",
            correlation_id=correlation_id,
            description=f"Advice unavailable: {kind}",
            error_message=error_message,
            details={"kind": kind},
        )

    @staticmethod
    def scenario_simulated(
        event_type: str,
        period_id: str,
        final_baseline: float,
        final_with_event: float,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCENARIO_SIMULATED,
            entity_type="scenario",
            entity_id=period_id,
            correlation_id=correlation_id,
            description=f"Life event simulated: {event_type}",
            details={
                "event_type": event_type,
                "final_baseline": final_baseline,
                "final_with_event": final_with_event,
            },
            is_user_action=True,
        )

    @staticmethod
    def storage_failed(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Storage operation failed: {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
            correlation_id=correlation_id,
        )
