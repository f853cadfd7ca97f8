"""Tests for the persistent expense store."""

import json
from uuid import uuid4

import pytest

from expense_tracker.models.audit import AuditEventType
from expense_tracker.models.expense import Expense, ExpenseDraft
from expense_tracker.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    StorageReadError,
    StoreNotReadyError,
)
from expense_tracker.store import ExpenseStore


def stored(storage, key="expenses"):
    return json.loads(storage.get(key))


def expense_dict(expense_id=1, **overrides):
    data = {
        "id": expense_id,
        "description": "Groceries",
        "amount": 100.0,
        "date": "2024-01-15",
        "currency": "USD",
    }
    data.update(overrides)
    return data


class UnreadableStorage(InMemoryStorage):
    def get(self, key):
        raise StorageReadError("disk on fire")


class TestLoad:
    """Loading tolerates whatever is in storage."""

    def test_absent_value_gives_empty_store(self, store, audit_logger):
        assert store.is_ready
        assert store.expenses == ()
        [event] = audit_logger.events_of_type(AuditEventType.STORE_LOADED)
        assert event.details["loaded_count"] == 0

    def test_loads_saved_expenses_in_order(self, seeded_storage, sample_expenses):
        store = ExpenseStore(seeded_storage)
        assert list(store.expenses) == sample_expenses
        assert len(store) == 5

    @pytest.mark.parametrize("raw", ["not json", "{\"id\": 1}", "42", "null", "\"text\""])
    def test_unusable_value_gives_empty_store(self, raw, audit_logger):
        storage = InMemoryStorage({"expenses": raw})
        store = ExpenseStore(storage, audit_logger=audit_logger)
        assert store.expenses == ()
        assert audit_logger.events_of_type(AuditEventType.STORAGE_RECOVERED)

    def test_unusable_value_is_left_until_next_write(self):
        storage = InMemoryStorage({"expenses": "not json"})
        store = ExpenseStore(storage)
        assert storage.get("expenses") == "not json"
        store.add(expense_dict())
        assert len(stored(storage)) == 1

    def test_invalid_entries_are_dropped_silently(self, audit_logger):
        entries = [
            expense_dict(1),
            {"id": 2, "description": "no amount", "date": "2024-01-15", "currency": "USD"},
            expense_dict(3, amount="100"),
            expense_dict(4, amount=0),
            expense_dict(5, amount=-20),
            expense_dict(6, id="6"),
            None,
            {},
            "expense",
            expense_dict(7, description="Lunch"),
        ]
        storage = InMemoryStorage({"expenses": json.dumps(entries)})
        store = ExpenseStore(storage, audit_logger=audit_logger)

        assert [expense.id for expense in store.expenses] == [1, 7]
        [event] = audit_logger.events_of_type(AuditEventType.STORE_LOADED)
        assert event.details["loaded_count"] == 2
        assert event.details["discarded_count"] == 8
        assert audit_logger.events_of_type(AuditEventType.EXPENSE_REJECTED) == []

    def test_extra_fields_are_dropped(self):
        storage = InMemoryStorage({"expenses": json.dumps([expense_dict(1, category="food")])})
        store = ExpenseStore(storage)
        assert store.expenses[0] == Expense(**expense_dict(1))

    def test_read_failure_gives_empty_store(self, audit_logger):
        store = ExpenseStore(UnreadableStorage(), audit_logger=audit_logger)
        assert store.expenses == ()
        [event] = audit_logger.events_of_type(AuditEventType.STORAGE_RECOVERED)
        assert "disk on fire" in event.details["problem"]

    def test_custom_storage_key(self):
        storage = InMemoryStorage({"travel": json.dumps([expense_dict(9)])})
        store = ExpenseStore(storage, storage_key="travel")
        assert store.get_expense(9) is not None


class TestNotReady:
    """A store that has not loaded refuses to be used."""

    @pytest.fixture
    def unloaded(self, storage):
        return ExpenseStore(storage, autoload=False)

    def test_not_ready_before_load(self, unloaded):
        assert unloaded.is_ready is False
        with pytest.raises(StoreNotReadyError):
            unloaded.expenses
        with pytest.raises(StoreNotReadyError):
            unloaded.add(expense_dict())
        with pytest.raises(StoreNotReadyError):
            unloaded.delete(1)
        with pytest.raises(StoreNotReadyError):
            unloaded.update(1, expense_dict())
        with pytest.raises(StoreNotReadyError):
            unloaded.persist()

    def test_ready_after_load(self, unloaded):
        unloaded.load()
        assert unloaded.expenses == ()


class TestAdd:
    """Tests for adding expenses."""

    def test_add_appends_and_persists(self, store, storage, audit_logger):
        store.add(expense_dict(1))
        store.add(Expense(**expense_dict(2, description="Lunch")))

        assert [expense.id for expense in store.expenses] == [1, 2]
        assert [entry["id"] for entry in stored(storage)] == [1, 2]
        assert len(audit_logger.events_of_type(AuditEventType.EXPENSE_ADDED)) == 2

    def test_stored_form_has_exactly_five_fields(self, store, storage):
        store.add(expense_dict(1))
        assert stored(storage) == [expense_dict(1)]

    @pytest.mark.parametrize("bad", [
        expense_dict(description=""),
        expense_dict(description="   "),
        expense_dict(amount=0),
        expense_dict(amount=-1),
        expense_dict(amount="100"),
        expense_dict(date="15/01/2024"),
        expense_dict(date="2024-02-30"),
        expense_dict(currency=""),
        {"description": "no id", "amount": 1.0, "date": "2024-01-15", "currency": "USD"},
        None,
        "Groceries",
    ])
    def test_invalid_candidate_is_rejected(self, store, storage, audit_logger, bad):
        store.add(bad)

        assert store.expenses == ()
        assert storage.get("expenses") is None
        assert audit_logger.events_of_type(AuditEventType.EXPENSE_ADDED) == []
        [event] = audit_logger.events_of_type(AuditEventType.EXPENSE_REJECTED)
        assert event.details["operation"] == "add"

    def test_rejection_names_the_expense(self, store, audit_logger):
        store.add(expense_dict(12, description=""))
        [event] = audit_logger.events_of_type(AuditEventType.EXPENSE_REJECTED)
        assert event.entity_id == 12
        assert event.details["reason"] == "description is empty"

    def test_allowed_currencies_are_enforced(self, storage, audit_logger):
        store = ExpenseStore(storage, audit_logger=audit_logger, allowed_currencies=["USD"])
        store.add(expense_dict(1, currency="JPY"))
        store.add(expense_dict(2, currency="USD"))
        assert [expense.id for expense in store.expenses] == [2]

    def test_any_currency_without_allow_list(self, store):
        store.add(expense_dict(1, currency="JPY"))
        assert store.get_expense(1).currency == "JPY"

    def test_snapshot_is_not_affected_by_later_adds(self, store):
        store.add(expense_dict(1))
        snapshot = store.expenses
        store.add(expense_dict(2))
        assert len(snapshot) == 1


class TestUpdate:
    """Tests for editing expenses."""

    @pytest.fixture
    def filled(self, store):
        for expense_id in (1, 2, 3):
            store.add(expense_dict(expense_id, description=f"Item {expense_id}"))
        return store

    def test_update_replaces_fields_in_place(self, filled, storage, audit_logger):
        draft = ExpenseDraft(description="Dinner", amount=42.0, date="2024-01-16", currency="EUR")
        filled.update(2, draft)

        assert [expense.id for expense in filled.expenses] == [1, 2, 3]
        assert filled.get_expense(2) == Expense(
            id=2, description="Dinner", amount=42.0, date="2024-01-16", currency="EUR"
        )
        assert stored(storage)[1]["description"] == "Dinner"
        [event] = audit_logger.events_of_type(AuditEventType.EXPENSE_UPDATED)
        assert event.details["changed_fields"] == ["description", "amount", "date", "currency"]

    def test_id_in_patch_is_ignored(self, filled):
        filled.update(2, expense_dict(99, description="Renamed"))
        assert filled.get_expense(99) is None
        assert filled.get_expense(2).description == "Renamed"

    def test_reports_only_changed_fields(self, filled, audit_logger):
        filled.update(1, expense_dict(1, description="Item 1", amount=5.0))
        [event] = audit_logger.events_of_type(AuditEventType.EXPENSE_UPDATED)
        assert event.details["changed_fields"] == ["amount"]

    def test_missing_patch_is_rejected(self, filled, storage, audit_logger):
        writes = storage.write_count
        filled.update(1, None)
        assert storage.write_count == writes
        [event] = audit_logger.events_of_type(AuditEventType.EXPENSE_REJECTED)
        assert event.entity_id == 1

    def test_invalid_patch_is_rejected(self, filled, audit_logger):
        before = filled.expenses
        filled.update(1, expense_dict(1, amount=-5))
        assert filled.expenses == before
        assert audit_logger.events_of_type(AuditEventType.EXPENSE_REJECTED)

    def test_rejection_carries_correlation_id(self, filled, audit_logger):
        correlation_id = uuid4()
        filled.update(404, expense_dict(404), correlation_id=correlation_id)
        [event] = audit_logger.events_of_type(AuditEventType.EXPENSE_REJECTED)
        assert event.correlation_id == correlation_id

    def test_unknown_id_is_rejected(self, filled, storage, audit_logger):
        writes = storage.write_count
        filled.update(404, expense_dict(404))
        assert len(filled) == 3
        assert storage.write_count == writes
        [event] = audit_logger.events_of_type(AuditEventType.EXPENSE_REJECTED)
        assert event.entity_id == 404


class TestDelete:
    """Tests for removing expenses."""

    def test_delete_removes_and_persists(self, store, storage):
        store.add(expense_dict(1))
        store.add(expense_dict(2))
        store.delete(1)
        assert [expense.id for expense in store.expenses] == [2]
        assert [entry["id"] for entry in stored(storage)] == [2]

    def test_delete_is_idempotent_and_still_persists(self, store, storage, audit_logger):
        store.add(expense_dict(1))
        store.delete(1)
        writes = storage.write_count
        store.delete(1)

        assert store.expenses == ()
        assert storage.write_count == writes + 1
        assert stored(storage) == []
        events = audit_logger.events_of_type(AuditEventType.EXPENSE_DELETED)
        assert [event.details["removed"] for event in events] == [True, False]

    def test_delete_removes_every_duplicate(self):
        storage = InMemoryStorage({"expenses": json.dumps([expense_dict(1), expense_dict(1)])})
        store = ExpenseStore(storage)
        store.delete(1)
        assert store.expenses == ()


class TestPersist:
    """Tests for writing the collection back."""

    def test_failed_write_keeps_memory(self, audit_logger):
        storage = InMemoryStorage(fail_writes=True)
        store = ExpenseStore(storage, audit_logger=audit_logger)
        store.add(expense_dict(1))

        assert [expense.id for expense in store.expenses] == [1]
        assert storage.get("expenses") is None
        [event] = audit_logger.events_of_type(AuditEventType.PERSIST_FAILED)
        assert event.details["expense_count"] == 1
        assert store.persist() is False

    def test_persist_returns_true(self, store):
        assert store.persist() is True

    def test_round_trip_through_file_storage(self, tmp_path, sample_expenses):
        first = ExpenseStore(JsonFileStorage(tmp_path, fsync=False))
        for expense in sample_expenses:
            first.add(expense)

        second = ExpenseStore(JsonFileStorage(tmp_path, fsync=False))
        assert second.expenses == first.expenses
