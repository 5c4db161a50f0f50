"""Validation for the add/edit expense form."""

from __future__ import annotations

import random
import string
from datetime import datetime
from typing import Dict, List, Optional, Union

try:
    from .constants import CATEGORIES, RECURRING_FREQUENCIES
    from .date_utils import get_local_datetime, parse_date
    from .models import Expense
except ImportError:  # pragma: no cover - fallback for direct execution
    from constants import CATEGORIES, RECURRING_FREQUENCIES
    from date_utils import get_local_datetime, parse_date
    from models import Expense

_ID_ALPHABET = string.digits + string.ascii_lowercase


class ExpenseValidationError(ValueError):
    """Raised when form input cannot be turned into an expense.

    ``errors`` maps form field names to user-facing messages.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


def generate_expense_id(now: Optional[datetime] = None) -> str:
    """Build an id like ``exp_1760882400000_k3j9x0a1b``."""
    current = now or datetime.now()
    millis = int(current.timestamp() * 1000)
    suffix = ''.join(random.choices(_ID_ALPHABET, k=9))
    return f"exp_{millis}_{suffix}"


def parse_tags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [t.strip() for t in raw.split(',') if t.strip()]


def build_expense(
    amount: Union[str, float, None],
    date: Optional[str],
    category: str,
    notes: str = '',
    tags: Union[str, List[str], None] = '',
    is_recurring: bool = False,
    recurring_frequency: Optional[str] = None,
    existing: Optional[Expense] = None,
) -> Expense:
    """Validate raw form values and return an :class:`Expense`.

    When ``existing`` is given its id is preserved so the result can be
    written back as an edit.
    """
    errors: Dict[str, str] = {}

    number: Optional[float] = None
    try:
        number = float(str(amount).strip()) if amount not in (None, '') else None
    except ValueError:
        number = None
    if number is None or number != number or number <= 0:
        errors['amount'] = "Please enter a valid amount"

    if category not in CATEGORIES:
        errors['category'] = f"Unknown category '{category}'"

    if is_recurring and recurring_frequency is not None and recurring_frequency not in RECURRING_FREQUENCIES:
        errors['recurring_frequency'] = f"Unknown frequency '{recurring_frequency}'"

    date_value = (date or '').strip() or get_local_datetime()
    try:
        parse_date(date_value)
    except ValueError:
        errors['date'] = "Please enter a valid date"

    if errors:
        raise ExpenseValidationError(errors)

    tag_list = parse_tags(tags) if isinstance(tags, str) or tags is None else [t.strip() for t in tags if t.strip()]

    return Expense(
        id=existing.id if existing else generate_expense_id(),
        amount=number,
        date=date_value,
        category=category,
        notes=notes or '',
        tags=tag_list,
        is_recurring=bool(is_recurring),
        recurring_frequency=recurring_frequency if is_recurring else None,
    )
