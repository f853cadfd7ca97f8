"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Expense entry (raw form -> validate -> draft -> id -> store)
2. Expense editing (raw form -> validate -> draft -> store update)
3. Summaries (store snapshot -> per-currency report)

DESIGN DECISION: The store is built here and handed to whoever needs it.
There is no module-level "current expenses" list; two AppComponents
bundles never share state unless they share a storage backend.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional, Union
from uuid import UUID

from expense_tracker.audit import AuditLogger, create_correlation_id
from expense_tracker.config import Settings, get_settings
from expense_tracker.models.expense import (
    ExpenseForm,
    ValidationResult,
    generate_expense_id,
)
from expense_tracker.models.summary import SummaryReport
from expense_tracker.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorage,
)
from expense_tracker.store import ExpenseStore
from expense_tracker.summaries.periods import DateLike
from expense_tracker.summaries.report import build_summary_report
from expense_tracker.validation import ExpenseFormValidator


class ExpenseEntryFlow:
    """
    Orchestrates adding and editing expenses from raw form input.

    Flow:
    1. Validate the raw strings (first failed rule wins)
    2. Build a canonical draft (trimmed text, parsed amount)
    3. Attach a fresh id (new expenses only)
    4. Hand the candidate to the store, which re-checks it

    The returned ValidationResult is what the UI shows. A form that passes
    validation can still be refused by the store; that shows up in the
    audit log and in the unchanged collection, not in the result.
    """

    def __init__(
        self,
        store: ExpenseStore,
        validator: Optional[ExpenseFormValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        id_factory: Callable[[], int] = generate_expense_id,
    ):
        self._store = store
        self._validator = validator or ExpenseFormValidator()
        self._audit_logger = audit_logger or store.audit_logger
        self._id_factory = id_factory

    def _check(
        self,
        fields: Union[ExpenseForm, dict[str, Any]],
        correlation_id: Optional[UUID],
    ) -> ValidationResult:
        result = self._validator.validate(fields)
        if not result.valid:
            self._audit_logger.log_form_validation_failed(
                reason=result.reason or "",
                correlation_id=correlation_id,
            )
        return result

    def submit_expense(
        self,
        fields: Union[ExpenseForm, dict[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        """Validate a new-expense form and add it to the store."""
        correlation_id = correlation_id or create_correlation_id()

        result = self._check(fields, correlation_id)
        if not result.valid:
            return result

        draft = self._validator.build(fields)
        self._store.add(draft.with_id(self._id_factory()), correlation_id=correlation_id)
        return result

    def edit_expense(
        self,
        expense_id: int,
        fields: Union[ExpenseForm, dict[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> ValidationResult:
        """Validate an edit form and apply it to an existing expense."""
        correlation_id = correlation_id or create_correlation_id()

        result = self._check(fields, correlation_id)
        if not result.valid:
            return result

        self._store.update(
            expense_id,
            self._validator.build(fields),
            correlation_id=correlation_id,
        )
        return result

    def remove_expense(self, expense_id: int) -> None:
        self._store.delete(expense_id)


@dataclass
class AppComponents:
    """Everything a front end needs, wired together."""

    settings: Settings
    storage: KeyValueStorage
    audit_logger: AuditLogger
    store: ExpenseStore
    entry_flow: ExpenseEntryFlow

    def summary(
        self,
        week_anchor: Optional[DateLike] = None,
        month_anchor: Optional[DateLike] = None,
        year: Optional[int] = None,
    ) -> SummaryReport:
        """Per-currency summary; each anchor defaults to today."""
        today = date.today()
        app = self.settings.app
        return build_summary_report(
            self.store.expenses,
            week_anchor=week_anchor or today,
            month_anchor=month_anchor or today,
            year=year or today.year,
            currency_order=app.currency_list,
            fallback_currency=app.fallback_currency,
        )


def create_storage(settings: Settings) -> KeyValueStorage:
    """Build the storage backend selected in settings."""
    storage_settings = settings.storage
    if storage_settings.backend == "memory":
        return InMemoryStorage()
    return JsonFileStorage(
        storage_settings.data_dir,
        write_attempts=storage_settings.write_attempts,
    )


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use. Defaults to get_settings().
        storage: Backend override, e.g. InMemoryStorage() in tests.
                If None, the backend is chosen from settings.

    Returns:
        AppComponents with a loaded, ready store
    """
    settings = settings or get_settings()
    app_settings = settings.app

    storage = storage if storage is not None else create_storage(settings)
    audit_logger = AuditLogger(history_size=app_settings.audit_history_size)

    store = ExpenseStore(
        storage,
        audit_logger=audit_logger,
        storage_key=settings.storage.key,
        allowed_currencies=app_settings.currency_list,
    )
    entry_flow = ExpenseEntryFlow(
        store,
        validator=ExpenseFormValidator(app_settings.currency_list),
        audit_logger=audit_logger,
    )

    return AppComponents(
        settings=settings,
        storage=storage,
        audit_logger=audit_logger,
        store=store,
        entry_flow=entry_flow,
    )
