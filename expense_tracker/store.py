"""
Expense Store

The single owner of the expense collection and its durable copy.

Lifecycle: construct -> load -> ready. After load, the collection lives
in memory and is written back to storage, whole, after every mutation.

DESIGN DECISION: Two different severities for similar checks.
- Loading tolerates legacy bad data. Entries with missing fields, wrong
  types or a non-positive amount are dropped without complaint, and a
  stored value that is not a JSON list resets the collection to empty.
- Mutations refuse new bad data. A rejected add/update is a no-op that
  is reported as an audit warning. Nothing is raised.

These are kept as two separately named paths, _filter_loaded_entries and
_admit_candidate, so each contract can be tested on its own.

DESIGN DECISION: A failed write does not roll back memory.
Losing the user's edit in the running session is worse than a durable
copy that is briefly behind; the next successful write catches it up.
"""

import json
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.models.expense import Expense
from expense_tracker.services.storage import KeyValueStorage, StorageError, StoreNotReadyError
from expense_tracker.summaries.periods import parse_local_date


DEFAULT_STORAGE_KEY = "expenses"

_EXPENSE_FIELDS = ("description", "amount", "date", "currency")


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "expense"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


class ExpenseStore:
    """
    Validated, persistent collection of expenses.

    Consumers receive the store instance explicitly; there is no global
    collection. Readers get immutable snapshots, so aggregating while the
    store is mutated later is safe.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        audit_logger: Optional[AuditLogger] = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        allowed_currencies: Optional[Sequence[str]] = None,
        autoload: bool = True,
    ):
        """
        Initialize the store.

        Args:
            storage: Durable key-value backend
            audit_logger: Where mutations and failures are reported.
                         A local-only logger is created if None.
            storage_key: Slot the collection is kept under
            allowed_currencies: If given, mutations must use one of these
            autoload: Load immediately; otherwise call load() before use
        """
        self._storage = storage
        self._audit = audit_logger if audit_logger is not None else AuditLogger()
        self._storage_key = storage_key
        self._allowed_currencies = (
            list(allowed_currencies) if allowed_currencies is not None else None
        )
        self._expenses: Optional[list[Expense]] = None

        if autoload:
            self.load()

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def is_ready(self) -> bool:
        return self._expenses is not None

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit

    @property
    def expenses(self) -> tuple[Expense, ...]:
        """Snapshot of the collection, in the order expenses were added."""
        return tuple(self._require_ready())

    def get_expense(self, expense_id: int) -> Optional[Expense]:
        for expense in self._require_ready():
            if expense.id == expense_id:
                return expense
        return None

    def __len__(self) -> int:
        return len(self._require_ready())

    def __iter__(self) -> Iterator[Expense]:
        return iter(self.expenses)

    def _require_ready(self) -> list[Expense]:
        if self._expenses is None:
            raise StoreNotReadyError("ExpenseStore.load() has not been called")
        return self._expenses

    # =========================================================================
    # LOADING
    # =========================================================================

    def load(self) -> None:
        """
        Read the collection from storage, keeping only the valid entries.

        Never raises for bad data: an absent, unreadable, unparsable or
        non-list value all result in an empty collection. An unusable
        value stays in storage until the next persist() overwrites it.
        """
        raw = self._read_raw()

        if raw is None:
            self._expenses = []
            self._audit.log_store_loaded(self._storage_key, 0, 0)
            return

        try:
            parsed = json.loads(raw)
        except ValueError:
            self._expenses = []
            self._audit.log_storage_recovered(self._storage_key, "stored value is not valid JSON")
            return

        if not isinstance(parsed, list):
            self._expenses = []
            self._audit.log_storage_recovered(
                self._storage_key,
                f"stored value is a JSON {type(parsed).__name__}, not a list",
            )
            return

        kept = self._filter_loaded_entries(parsed)
        self._expenses = kept
        self._audit.log_store_loaded(
            self._storage_key,
            loaded_count=len(kept),
            discarded_count=len(parsed) - len(kept),
        )

    def _read_raw(self) -> Optional[str]:
        try:
            return self._storage.get(self._storage_key)
        except StorageError as e:
            self._audit.log_storage_recovered(self._storage_key, f"read failed: {e}")
            return None

    @staticmethod
    def _filter_loaded_entries(entries: list[Any]) -> list[Expense]:
        """
        Legacy-tolerant path: keep what is structurally valid, drop the rest.

        Checks field presence, field types and amount > 0. Nothing is
        reported per entry.
        """
        kept = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            try:
                kept.append(Expense.model_validate(entry))
            except ValidationError:
                continue
        return kept

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def _admit_candidate(
        self,
        candidate: Any,
        operation: str,
        expense_id: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Expense]:
        """
        Strict path for new data: return a checked Expense, or None after
        reporting why the candidate was refused.
        """
        reason = None
        expense = None

        if isinstance(candidate, BaseModel):
            data = candidate.model_dump()
        elif isinstance(candidate, Mapping):
            data = dict(candidate)
        else:
            data = None
            reason = f"expected an expense record, got {type(candidate).__name__}"

        if data is not None:
            try:
                expense = Expense.model_validate(data)
            except ValidationError as e:
                reason = _describe_validation_error(e)

        if expense is not None:
            if not expense.description.strip():
                reason = "description is empty"
            elif parse_local_date(expense.date) is None:
                reason = f"date {expense.date!r} is not a valid YYYY-MM-DD date"
            elif not expense.currency:
                reason = "currency is missing"
            elif (
                self._allowed_currencies is not None
                and expense.currency not in self._allowed_currencies
            ):
                reason = f"currency {expense.currency!r} is not allowed"

        if reason is not None:
            if expense_id is None and isinstance(data, dict):
                raw_id = data.get("id")
                if isinstance(raw_id, int) and not isinstance(raw_id, bool):
                    expense_id = raw_id
            self._audit.log_expense_rejected(
                operation, reason, expense_id=expense_id, correlation_id=correlation_id
            )
            return None

        return expense

    def add(self, expense: Any, correlation_id: Optional[UUID] = None) -> None:
        """
        Append an expense and persist.

        The candidate (an Expense, or a mapping with all five fields) is
        re-checked here even if the form validator already passed it.
        An invalid candidate leaves the collection untouched; the reason
        goes to the audit log, tagged with correlation_id if one is given.
        """
        expenses = self._require_ready()

        admitted = self._admit_candidate(expense, "add", correlation_id=correlation_id)
        if admitted is None:
            return

        expenses.append(admitted)
        self._audit.log_expense_added(
            admitted.id, admitted.currency, admitted.amount, correlation_id=correlation_id
        )
        self.persist()

    def update(
        self,
        expense_id: int,
        patch: Any,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Replace every field except the id of an existing expense, in place.

        Args:
            expense_id: Which expense to change
            patch: ExpenseDraft or mapping with description, amount,
                   date and currency. An "id" key in the patch is ignored.
            correlation_id: Ties the resulting audit events to one user action

        No-op (reported to the audit log) if the patch is missing or
        invalid, or if no expense has this id.
        """
        expenses = self._require_ready()

        if patch is None:
            self._audit.log_expense_rejected(
                "update", "no changes given",
                expense_id=expense_id, correlation_id=correlation_id,
            )
            return

        if isinstance(patch, BaseModel):
            fields = patch.model_dump()
        elif isinstance(patch, Mapping):
            fields = dict(patch)
        else:
            self._audit.log_expense_rejected(
                "update",
                f"expected expense fields, got {type(patch).__name__}",
                expense_id=expense_id,
                correlation_id=correlation_id,
            )
            return
        fields.pop("id", None)

        admitted = self._admit_candidate(
            {**fields, "id": expense_id}, "update", expense_id, correlation_id
        )
        if admitted is None:
            return

        for index, current in enumerate(expenses):
            if current.id == expense_id:
                break
        else:
            self._audit.log_expense_rejected(
                "update",
                f"no expense with id {expense_id}",
                expense_id=expense_id,
                correlation_id=correlation_id,
            )
            return

        changed = [
            name for name in _EXPENSE_FIELDS
            if getattr(current, name) != getattr(admitted, name)
        ]
        expenses[index] = admitted
        self._audit.log_expense_updated(expense_id, changed, correlation_id=correlation_id)
        self.persist()

    def delete(self, expense_id: int) -> None:
        """
        Remove the expense with this id, if there is one, then persist.

        Persists even when nothing was removed so storage always mirrors
        memory. Deleting a missing id is not an error.
        """
        expenses = self._require_ready()

        remaining = [expense for expense in expenses if expense.id != expense_id]
        removed = len(remaining) != len(expenses)
        expenses[:] = remaining

        self._audit.log_expense_deleted(expense_id, removed)
        self.persist()

    def persist(self) -> bool:
        """
        Write the whole collection to storage.

        Returns True on success. A failed write is logged and swallowed;
        the in-memory collection is kept as is.
        """
        expenses = self._require_ready()
        payload = json.dumps([expense.to_storage_dict() for expense in expenses])

        try:
            self._storage.set(self._storage_key, payload)
        except Exception as e:
            self._audit.log_persist_failed(
                self._storage_key,
                error_message=str(e),
                expense_count=len(expenses),
            )
            return False

        return True

