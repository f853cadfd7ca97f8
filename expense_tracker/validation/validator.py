"""
Expense Form Validation

Checks raw form fields before they are allowed anywhere near the store.

Rules are checked in a fixed order and the first failure wins, so the
user always sees exactly one message:
1. All four fields filled in (description counts only after trimming)
2. Currency is one of the allowed codes
3. Amount is a finite number greater than zero

The allowed currencies are passed in. They are configuration, and the
validator has no opinion about which codes exist.

IMPORTANT: Validation NEVER fixes input. It reports the problem and the
caller decides what to show.
"""

import math
import re
from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union

from expense_tracker.config import get_settings
from expense_tracker.models.expense import ExpenseDraft, ExpenseForm, ValidationResult


REASON_MISSING_FIELDS = "fill in all fields"
REASON_INVALID_CURRENCY = "select a valid currency"
REASON_INVALID_AMOUNT = "enter a valid positive amount"

FormInput = Union[ExpenseForm, Mapping[str, Any]]

# Plain decimal notation with an optional exponent. No digit separators.
_AMOUNT_PATTERN = re.compile(r"^[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")


def _as_form(fields: FormInput) -> ExpenseForm:
    if isinstance(fields, ExpenseForm):
        return fields
    return ExpenseForm.from_mapping(fields)


def parse_amount(text: str) -> Optional[float]:
    """
    Parse an amount typed by the user.

    Returns None unless the text is a finite number in plain decimal or
    exponent notation. "1_000", "0x10" and "inf" are not amounts.
    """
    if not isinstance(text, str):
        return None
    text = text.strip()
    if not _AMOUNT_PATTERN.match(text):
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def validate_expense_form(
    fields: FormInput,
    allowed_currencies: Sequence[str],
) -> ValidationResult:
    """
    Validate raw expense form fields.

    Args:
        fields: ExpenseForm or a mapping with description/amount/date/currency
        allowed_currencies: Currency codes the user may pick from

    Returns:
        ValidationResult, with the reason for the first failed rule
    """
    form = _as_form(fields)

    if not form.description.strip() or not form.amount or not form.date or not form.currency:
        return ValidationResult.failed(REASON_MISSING_FIELDS)

    if form.currency not in allowed_currencies:
        return ValidationResult.failed(REASON_INVALID_CURRENCY)

    amount = parse_amount(form.amount)
    if amount is None or amount <= 0:
        return ValidationResult.failed(REASON_INVALID_AMOUNT)

    return ValidationResult.ok()


# The edit dialog applies the same rules as the add form.
validate_edit_form = validate_expense_form


def build_expense_draft(fields: FormInput) -> ExpenseDraft:
    """
    Turn validated form fields into a canonical expense without an id.

    Only call this after validate_expense_form() passed: the amount is
    parsed here and a bad amount raises ValueError.
    """
    form = _as_form(fields)
    amount = parse_amount(form.amount)
    if amount is None:
        raise ValueError(f"Amount is not a number: {form.amount!r}")

    return ExpenseDraft(
        description=form.description.strip(),
        amount=amount,
        date=form.date,
        currency=form.currency,
    )


class ExpenseFormValidator:
    """
    Form validator bound to an allow-list.

    Defaults to the currencies from settings, so UI code can create one
    without knowing where the list comes from.
    """

    def __init__(
        self,
        allowed_currencies: Optional[Sequence[str]] = None,
    ):
        """
        Initialize validator.

        Args:
            allowed_currencies: Ordered currency codes.
                               If None, the configured list is used.
        """
        if allowed_currencies is None:
            allowed_currencies = get_settings().app.currency_list
        self._allowed = list(allowed_currencies)

    @property
    def allowed_currencies(self) -> list[str]:
        return list(self._allowed)

    def validate(self, fields: FormInput) -> ValidationResult:
        return validate_expense_form(fields, self._allowed)

    def build(self, fields: FormInput) -> ExpenseDraft:
        return build_expense_draft(fields)
