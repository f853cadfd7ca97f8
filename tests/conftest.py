"""Shared fixtures for the expense tracker tests."""

import json

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.config import get_settings
from expense_tracker.models.expense import Expense
from expense_tracker.services.storage import InMemoryStorage
from expense_tracker.store import ExpenseStore


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests away from the developer's .env and home directory."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "SUPPORTED_CURRENCIES",
        "DEFAULT_CURRENCY",
        "AUDIT_HISTORY_SIZE",
        "EXPENSES_STORAGE_BACKEND",
        "EXPENSES_STORAGE_DATA_DIR",
        "EXPENSES_STORAGE_KEY",
        "EXPENSES_STORAGE_WRITE_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_expenses():
    """The week of Monday 2024-01-15, plus entries outside it."""
    return [
        Expense(id=1, description="Groceries", amount=100, date="2024-01-15", currency="USD"),
        Expense(id=2, description="Lunch", amount=200, date="2024-01-16", currency="EUR"),
        Expense(id=3, description="Cinema", amount=150, date="2024-01-20", currency="USD"),
        Expense(id=4, description="Rent", amount=300, date="2024-02-01", currency="HUF"),
        Expense(id=5, description="Gift", amount=250, date="2023-12-01", currency="USD"),
    ]


@pytest.fixture
def audit_logger():
    return AuditLogger(history_size=100)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage, audit_logger):
    return ExpenseStore(storage, audit_logger=audit_logger)


@pytest.fixture
def seeded_storage(sample_expenses):
    payload = json.dumps([expense.to_storage_dict() for expense in sample_expenses])
    return InMemoryStorage({"expenses": payload})


@pytest.fixture
def currencies():
    return ["HUF", "USD", "EUR", "GBP"]
