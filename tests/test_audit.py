"""Tests for the audit logger."""

from expense_tracker.audit import AuditLogger, create_correlation_id
from expense_tracker.models.audit import AuditEventType, AuditSeverity


class TestAuditLogger:
    """History and severity routing."""

    def test_event_is_remembered(self, audit_logger):
        audit_logger.log_expense_added(1, "USD", 10.0)
        [event] = audit_logger.recent_events()
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.entity_id == 1

    def test_recent_events_newest_first(self, audit_logger):
        audit_logger.log_expense_added(1, "USD", 10.0)
        audit_logger.log_expense_deleted(1, removed=True)
        types = [event.event_type for event in audit_logger.recent_events()]
        assert types == [AuditEventType.EXPENSE_DELETED, AuditEventType.EXPENSE_ADDED]

    def test_recent_events_limit(self, audit_logger):
        for expense_id in range(5):
            audit_logger.log_expense_added(expense_id, "USD", 1.0)
        assert [event.entity_id for event in audit_logger.recent_events(limit=2)] == [4, 3]

    def test_history_is_bounded(self):
        audit_logger = AuditLogger(history_size=3)
        for expense_id in range(5):
            audit_logger.log_expense_added(expense_id, "USD", 1.0)
        assert [event.entity_id for event in audit_logger.recent_events()] == [4, 3, 2]

    def test_events_of_type_oldest_first(self, audit_logger):
        audit_logger.log_expense_rejected("add", "description is empty")
        audit_logger.log_expense_added(1, "USD", 1.0)
        audit_logger.log_expense_rejected("update", "no expense with id 9", expense_id=9)
        rejected = audit_logger.events_of_type(AuditEventType.EXPENSE_REJECTED)
        assert [event.details["operation"] for event in rejected] == ["add", "update"]
        assert all(event.severity == AuditSeverity.WARNING for event in rejected)

    def test_severity_is_recorded(self, audit_logger):
        audit_logger.log_store_loaded("expenses", 2, 1)
        audit_logger.log_storage_recovered("expenses", "not a list")
        audit_logger.log_persist_failed("expenses", "quota exceeded", 2)
        severities = [event.severity for event in audit_logger.recent_events()]
        assert severities == [
            AuditSeverity.ERROR,
            AuditSeverity.WARNING,
            AuditSeverity.INFO,
        ]

    def test_correlation_id_is_carried(self, audit_logger):
        correlation_id = create_correlation_id()
        audit_logger.log_form_validation_failed("fill in all fields", correlation_id=correlation_id)
        [event] = audit_logger.recent_events()
        assert event.correlation_id == correlation_id

    def test_clear_history(self, audit_logger):
        audit_logger.log_expense_deleted(1, removed=False)
        audit_logger.clear_history()
        assert audit_logger.recent_events() == []
