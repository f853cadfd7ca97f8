"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    Expense,
    ExpenseDraft,
    ExpenseForm,
    ValidationResult,
    generate_expense_id,
)
from expense_tracker.models.summary import (
    ChartPoint,
    CostMap,
    CurrencyBreakdown,
    PeriodBreakdown,
    SummaryReport,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "Expense",
    "ExpenseDraft",
    "ExpenseForm",
    "ValidationResult",
    "generate_expense_id",
    # Summary models
    "ChartPoint",
    "CostMap",
    "CurrencyBreakdown",
    "PeriodBreakdown",
    "SummaryReport",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
