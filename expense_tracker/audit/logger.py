"""
Audit Logger

DESIGN DECISION: Every mutation of the expense collection is logged.
This provides:
1. The side channel for rejected mutations (the store never raises)
2. Debugging capability when storage falls out of sync
3. A session history callers can inspect

The audit logger:
- Is synchronous; the core is single-threaded and has no suspension points
- Gracefully handles failures (doesn't crash the app if logging fails)
- Keeps a bounded in-memory history of recent events
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


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
    2. An in-memory history (for callers and tests to inspect)
    """

    def __init__(
        self,
        history_size: int = 500,
    ):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to keep in memory.
                         0 keeps none.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("expense_tracker.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written to the local log.
        """
        self._history.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Logging must never take the app down
            return False

        return True

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(self._history)
        events.reverse()
        return events[:limit]

    def events_of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        """All remembered events of one type, oldest first."""
        return [event for event in self._history if event.event_type == event_type]

    def clear_history(self) -> None:
        self._history.clear()

    def log_store_loaded(
        self,
        storage_key: str,
        loaded_count: int,
        discarded_count: int,
    ) -> None:
        """Log a completed load."""
        self.log(AuditEventBuilder.store_loaded(
            storage_key=storage_key,
            loaded_count=loaded_count,
            discarded_count=discarded_count,
        ))

    def log_storage_recovered(self, storage_key: str, problem: str) -> None:
        """Log that an unusable stored value was replaced by an empty collection."""
        self.log(AuditEventBuilder.storage_recovered(
            storage_key=storage_key,
            problem=problem,
        ))

    def log_expense_added(
        self,
        expense_id: int,
        currency: str,
        amount: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            currency=currency,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_expense_updated(
        self,
        expense_id: int,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_updated(
            expense_id=expense_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    def log_expense_deleted(self, expense_id: int, removed: bool) -> None:
        self.log(AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            removed=removed,
        ))

    def log_expense_rejected(
        self,
        operation: str,
        reason: str,
        expense_id: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a mutation the store refused."""
        self.log(AuditEventBuilder.expense_rejected(
            operation=operation,
            reason=reason,
            expense_id=expense_id,
            correlation_id=correlation_id,
        ))

    def log_persist_failed(
        self,
        storage_key: str,
        error_message: str,
        expense_count: int,
    ) -> None:
        self.log(AuditEventBuilder.persist_failed(
            storage_key=storage_key,
            error_message=error_message,
            expense_count=expense_count,
        ))

    def log_form_validation_failed(
        self,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.form_validation_failed(
            reason=reason,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., one form submission).
    """
    return uuid4()
