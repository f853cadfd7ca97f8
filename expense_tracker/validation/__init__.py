"""Form validation package."""

from expense_tracker.validation.validator import (
    REASON_INVALID_AMOUNT,
    REASON_INVALID_CURRENCY,
    REASON_MISSING_FIELDS,
    ExpenseFormValidator,
    build_expense_draft,
    parse_amount,
    validate_edit_form,
    validate_expense_form,
)

__all__ = [
    "REASON_INVALID_AMOUNT",
    "REASON_INVALID_CURRENCY",
    "REASON_MISSING_FIELDS",
    "ExpenseFormValidator",
    "build_expense_draft",
    "parse_amount",
    "validate_edit_form",
    "validate_expense_form",
]
