"""
Core Data Models for Expense Tracker

These models define the schemas for expense data flowing through the system:
1. ExpenseForm - raw form fields, always strings, before validation
2. ExpenseDraft - a validated, canonical expense that has no id yet
3. Expense - a persisted expense, the unit the store and the aggregator work on

DESIGN DECISION: Expense uses pydantic strict mode.
Stored data is untrusted, so "1" is not an id and "100" is not an amount.
Load-time filtering relies on this to drop entries with the wrong types.
"""

import secrets
import time
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Expense(BaseModel):
    """
    A single recorded expense.

    The currency is deliberately a plain string here. Membership in the
    allow-list is a validation rule, not a property of the entity.
    """
    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    id: int = Field(
        ...,
        description="Caller-assigned identifier, unique within the collection"
    )
    description: str = Field(
        ...,
        description="What the money was spent on"
    )
    amount: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Amount spent, strictly positive"
    )
    date: str = Field(
        ...,
        description="Local calendar date as YYYY-MM-DD"
    )
    currency: str = Field(
        ...,
        description="Currency code, e.g. HUF"
    )

    @field_validator('id', 'amount', mode='before')
    @classmethod
    def reject_booleans(cls, v: Any) -> Any:
        """JSON true/false must never pass as a number."""
        if isinstance(v, bool):
            raise ValueError("Boolean is not a valid number")
        return v

    def to_storage_dict(self) -> dict:
        """Serialize with exactly the five stored fields."""
        return {
            "id": self.id,
            "description": self.description,
            "amount": self.amount,
            "date": self.date,
            "currency": self.currency,
        }


class ExpenseDraft(BaseModel):
    """
    Every expense field except the id.

    Produced by build_expense_draft() after form validation, and used as
    the patch for ExpenseStore.update(). The draft only fixes the shape;
    the store re-checks the values before accepting it.
    """

    description: str
    amount: float
    date: str
    currency: str

    def with_id(self, expense_id: int) -> dict:
        """Candidate dict for the store, with the given id attached."""
        return {"id": expense_id, **self.model_dump()}


class ExpenseForm(BaseModel):
    """Raw form input. Everything is a string until validation passes."""

    description: str = ""
    amount: str = ""
    date: str = ""
    currency: str = ""

    @classmethod
    def from_mapping(cls, fields: Mapping[str, Any]) -> "ExpenseForm":
        """Build a form from loosely typed input; missing or None fields become ""."""
        values = {}
        for name in cls.model_fields:
            value = fields.get(name)
            values[name] = "" if value is None else str(value)
        return cls(**values)


def generate_expense_id() -> int:
    """
    Create a new expense id.

    Millisecond clock scaled up, plus a random tail. Ids grow over time
    and two ids minted in the same millisecond collide with a chance of
    one in a thousand. Collisions are not checked for.
    """
    return int(time.time() * 1000) * 1000 + secrets.randbelow(1000)


class ValidationResult(BaseModel):
    """
    Verdict on a set of form fields.

    reason is only set when valid is False, and always holds exactly one
    human-readable message: the first rule that failed.
    """

    valid: bool = Field(
        ...,
        description="Did every rule pass?"
    )
    reason: Optional[str] = Field(
        default=None,
        description="Message for the first failed rule"
    )

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def failed(cls, reason: str) -> "ValidationResult":
        return cls(valid=False, reason=reason)
