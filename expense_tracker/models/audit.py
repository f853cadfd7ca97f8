"""
Audit Models for Expense Tracker

Every mutation of the expense collection, and every failure to keep
durable storage in sync, is recorded as an audit event. This provides:
1. The side channel through which rejected mutations are reported
2. Debugging information when storage misbehaves
3. A readable history of what happened in a session

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Store lifecycle
    STORE_LOADED = "store_loaded"
    STORAGE_RECOVERED = "storage_recovered"

    # Mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSE_REJECTED = "expense_rejected"

    # Persistence
    PERSIST_FAILED = "persist_failed"

    # Form handling
    FORM_VALIDATION_FAILED = "form_validation_failed"


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

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
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

    # Context - which expense is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'storage')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Expense id this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one form submission)"
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
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
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
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, "USD", 12.5)
        event = AuditEventBuilder.expense_rejected("add", reason, expense_id)
    """

    @staticmethod
    def store_loaded(
        storage_key: str,
        loaded_count: int,
        discarded_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_LOADED,
            entity_type="storage",
            description=f"Loaded {loaded_count} expenses from '{storage_key}'",
            details={
                "storage_key": storage_key,
                "loaded_count": loaded_count,
                "discarded_count": discarded_count,
            },
        )

    @staticmethod
    def storage_recovered(
        storage_key: str,
        problem: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_RECOVERED,
            severity=AuditSeverity.WARNING,
            entity_type="storage",
            description=f"Stored value under '{storage_key}' unusable, starting empty",
            details={
                "storage_key": storage_key,
                "problem": problem,
            },
        )

    @staticmethod
    def expense_added(
        expense_id: int,
        currency: str,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added: {amount} {currency}",
            details={
                "currency": currency,
                "amount": amount,
            },
        )

    @staticmethod
    def expense_updated(
        expense_id: int,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense {expense_id} updated",
            details={
                "changed_fields": changed_fields,
            },
        )

    @staticmethod
    def expense_deleted(
        expense_id: int,
        removed: bool,
    ) -> AuditEvent:
        description = (
            f"Expense {expense_id} deleted"
            if removed
            else f"Expense {expense_id} not found, nothing deleted"
        )
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            description=description,
            details={
                "removed": removed,
            },
        )

    @staticmethod
    def expense_rejected(
        operation: str,
        reason: str,
        expense_id: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Rejected {operation}: {reason}"[:500],
            details={
                "operation": operation,
                "reason": reason,
            },
        )

    @staticmethod
    def persist_failed(
        storage_key: str,
        error_message: str,
        expense_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSIST_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            description=f"Could not write expenses to '{storage_key}'",
            error_message=error_message,
            details={
                "storage_key": storage_key,
                "expense_count": expense_count,
            },
        )

    @staticmethod
    def form_validation_failed(
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FORM_VALIDATION_FAILED,
            entity_type="form",
            correlation_id=correlation_id,
            description=f"Form rejected: {reason}",
            details={
                "reason": reason,
            },
        )
