"""
Tests for Expense Tracker models

Test strategy:
1. Unit tests for individual components (models, validators, aggregation)
2. Store tests run against in-memory storage
3. File storage tests use a temporary directory
"""

import math
from uuid import uuid4

import pytest
from pydantic import ValidationError

from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    ExpenseForm,
    ValidationResult,
    generate_expense_id,
)


class TestExpenseModel:
    """Tests for the persisted Expense model."""

    def test_expense_creation(self):
        """Test Expense model creation."""
        expense = Expense(id=1, description="Coffee", amount=3.5, date="2024-01-15", currency="EUR")
        assert expense.id == 1
        assert expense.amount == 3.5
        assert expense.currency == "EUR"

    def test_integer_amount_is_accepted(self):
        """JSON numbers without a fraction are still amounts."""
        expense = Expense.model_validate(
            {"id": 1, "description": "Bus", "amount": 2, "date": "2024-01-15", "currency": "HUF"}
        )
        assert expense.amount == 2.0

    @pytest.mark.parametrize("amount", [0, -5, math.nan, math.inf])
    def test_rejects_non_positive_or_non_finite_amount(self, amount):
        with pytest.raises(ValidationError):
            Expense(id=1, description="Bad", amount=amount, date="2024-01-15", currency="USD")

    def test_rejects_string_amount(self):
        """Strict mode: "100" is not an amount."""
        with pytest.raises(ValidationError):
            Expense.model_validate(
                {"id": 1, "description": "x", "amount": "100", "date": "2024-01-15", "currency": "USD"}
            )

    def test_rejects_string_id(self):
        with pytest.raises(ValidationError):
            Expense.model_validate(
                {"id": "1", "description": "x", "amount": 1, "date": "2024-01-15", "currency": "USD"}
            )

    def test_rejects_boolean_id_and_amount(self):
        with pytest.raises(ValidationError):
            Expense.model_validate(
                {"id": True, "description": "x", "amount": 1, "date": "2024-01-15", "currency": "USD"}
            )
        with pytest.raises(ValidationError):
            Expense.model_validate(
                {"id": 1, "description": "x", "amount": True, "date": "2024-01-15", "currency": "USD"}
            )

    def test_currency_is_not_restricted_by_the_model(self):
        """The allow-list is a validation rule, not part of the entity."""
        expense = Expense(id=1, description="x", amount=1, date="2024-01-15", currency="JPY")
        assert expense.currency == "JPY"

    def test_unknown_fields_are_ignored(self):
        expense = Expense.model_validate(
            {"id": 1, "description": "x", "amount": 1, "date": "2024-01-15",
             "currency": "USD", "category": "food"}
        )
        assert expense.to_storage_dict() == {
            "id": 1, "description": "x", "amount": 1.0, "date": "2024-01-15", "currency": "USD",
        }

    def test_expense_is_immutable(self):
        expense = Expense(id=1, description="x", amount=1, date="2024-01-15", currency="USD")
        with pytest.raises(ValidationError):
            expense.amount = 5


class TestFormAndDraft:
    """Tests for raw form input and drafts."""

    def test_form_from_mapping_fills_missing_fields(self):
        form = ExpenseForm.from_mapping({"description": "Taxi", "amount": None})
        assert form == ExpenseForm(description="Taxi", amount="", date="", currency="")

    def test_form_from_mapping_stringifies_values(self):
        form = ExpenseForm.from_mapping({"amount": 12.5})
        assert form.amount == "12.5"

    def test_draft_with_id(self):
        draft = ExpenseDraft(description="Taxi", amount=12.5, date="2024-03-01", currency="GBP")
        assert draft.with_id(42) == {
            "id": 42, "description": "Taxi", "amount": 12.5, "date": "2024-03-01", "currency": "GBP",
        }

    def test_generated_ids_are_positive_integers(self):
        first = generate_expense_id()
        second = generate_expense_id()
        assert isinstance(first, int) and first > 0
        assert second >= first - 1000

    def test_validation_result_helpers(self):
        assert ValidationResult.ok() == ValidationResult(valid=True, reason=None)
        failed = ValidationResult.failed("fill in all fields")
        assert failed.valid is False
        assert failed.reason == "fill in all fields"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            description="Expense added",
        )
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.expense_added(7, "USD", 12.5)
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["entity_id"] == 7
        assert log_dict["details"]["currency"] == "USD"

    def test_expense_rejected_is_a_warning(self):
        correlation_id = uuid4()
        event = AuditEventBuilder.expense_rejected(
            "add", "description is empty", expense_id=3, correlation_id=correlation_id
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.details == {"operation": "add", "reason": "description is empty"}
        assert event.correlation_id == correlation_id

    def test_persist_failed_is_an_error(self):
        event = AuditEventBuilder.persist_failed("expenses", "quota exceeded", 4)
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "quota exceeded"
        assert event.details["expense_count"] == 4

    def test_long_rejection_reason_is_truncated_in_description(self):
        event = AuditEventBuilder.expense_rejected("add", "x" * 1000)
        assert len(event.description) <= 500
        assert event.details["reason"] == "x" * 1000
