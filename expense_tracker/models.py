"""Data types for expenses, budgets, goals and settings.

The JSON representation keeps the camelCase field names used by earlier
backups (``isRecurring``, ``targetAmount`` ...) so exported files stay
interchangeable.  ``from_dict`` raises ``ValueError`` for records that are
missing required fields or carry unparsable numbers.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

try:
    from .config import CURRENCY
    from .constants import BUDGET_PERIODS, RECURRING_FREQUENCIES, THEMES
except ImportError:  # pragma: no cover - fallback for direct execution
    from config import CURRENCY
    from constants import BUDGET_PERIODS, RECURRING_FREQUENCIES, THEMES


def _require(data: Dict[str, Any], key: str, kind: str) -> Any:
    if not isinstance(data, dict):
        raise ValueError(f"{kind} record must be an object, got {type(data).__name__}")
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"{kind} record is missing '{key}'")
    return value


def _to_float(value: Any, label: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Invalid {label}: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid {label}: {value!r}") from None
    if number != number:  # NaN
        raise ValueError(f"Invalid {label}: {value!r}")
    return number


@dataclass
class Expense:
    id: str
    amount: float
    date: str
    category: str
    notes: str = ''
    tags: List[str] = field(default_factory=list)
    is_recurring: bool = False
    recurring_frequency: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'amount': self.amount,
            'date': self.date,
            'category': self.category,
            'notes': self.notes,
            'tags': list(self.tags),
            'isRecurring': self.is_recurring,
        }
        if self.recurring_frequency:
            payload['recurringFrequency'] = self.recurring_frequency
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Expense':
        expense_id = str(_require(data, 'id', 'Expense'))
        amount = _to_float(_require(data, 'amount', 'Expense'), 'amount')
        date_value = str(_require(data, 'date', 'Expense'))
        category = str(_require(data, 'category', 'Expense'))

        tags = data.get('tags') or []
        if not isinstance(tags, list):
            raise ValueError(f"Expense '{expense_id}' has invalid tags: {tags!r}")
        is_recurring = data.get('isRecurring')
        if is_recurring is None:
            is_recurring = False
        elif not isinstance(is_recurring, bool):
            raise ValueError(f"Expense '{expense_id}' has invalid isRecurring flag: {is_recurring!r}")
        frequency = data.get('recurringFrequency')
        if frequency is not None and frequency not in RECURRING_FREQUENCIES:
            raise ValueError(f"Expense '{expense_id}' has invalid recurring frequency '{frequency}'")

        return cls(
            id=expense_id,
            amount=amount,
            date=date_value,
            category=category,
            notes=str(data.get('notes') or ''),
            tags=[str(tag) for tag in tags],
            is_recurring=is_recurring,
            recurring_frequency=frequency,
        )

    def merged(self, updates: Dict[str, Any]) -> 'Expense':
        """Return a copy with the given attribute updates applied; ``id`` is kept."""
        allowed = {k: v for k, v in updates.items() if k in _EXPENSE_FIELDS and k != 'id'}
        return replace(self, **allowed)


_EXPENSE_FIELDS = {
    'id', 'amount', 'date', 'category', 'notes', 'tags', 'is_recurring', 'recurring_frequency'
}


@dataclass
class CategoryTotal:
    category: str
    total: float
    percentage: float
    count: int

    @property
    def average(self) -> float:
        return self.total / self.count if self.count else 0.0


@dataclass
class Budget:
    category: str
    limit: float
    period: str = 'monthly'

    def to_dict(self) -> Dict[str, Any]:
        return {'category': self.category, 'limit': self.limit, 'period': self.period}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Budget':
        category = str(_require(data, 'category', 'Budget'))
        limit = _to_float(_require(data, 'limit', 'Budget'), 'budget limit')
        if limit <= 0:
            raise ValueError(f"Budget limit for '{category}' must be positive")
        period = data.get('period') or 'monthly'
        if period not in BUDGET_PERIODS:
            raise ValueError(f"Budget for '{category}' has invalid period '{period}'")
        return cls(category=category, limit=limit, period=period)


@dataclass
class SpendingGoal:
    id: str
    name: str
    target_amount: float
    current_amount: float
    deadline: str
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'name': self.name,
            'targetAmount': self.target_amount,
            'currentAmount': self.current_amount,
            'deadline': self.deadline,
        }
        if self.category:
            payload['category'] = self.category
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SpendingGoal':
        return cls(
            id=str(_require(data, 'id', 'Goal')),
            name=str(_require(data, 'name', 'Goal')),
            target_amount=_to_float(_require(data, 'targetAmount', 'Goal'), 'target amount'),
            current_amount=_to_float(data.get('currentAmount', 0.0), 'current amount'),
            deadline=str(_require(data, 'deadline', 'Goal')),
            category=data.get('category') or None,
        )


@dataclass
class DateRange:
    start: str
    end: str


@dataclass
class FilterOptions:
    category: Optional[str] = None
    date_range: Optional[DateRange] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    search_term: Optional[str] = None
    tags: Optional[List[str]] = None


@dataclass
class AppSettings:
    currency: str = CURRENCY
    theme: str = 'light'
    budgets: List[Budget] = field(default_factory=list)
    goals: List[SpendingGoal] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'currency': self.currency,
            'theme': self.theme,
            'budgets': [b.to_dict() for b in self.budgets],
            'goals': [g.to_dict() for g in self.goals],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppSettings':
        if not isinstance(data, dict):
            raise ValueError("Settings must be an object")
        theme = data.get('theme') or 'light'
        if theme not in THEMES:
            raise ValueError(f"Unknown theme '{theme}'")
        budgets = data.get('budgets')
        goals = data.get('goals')
        budgets = [] if budgets is None else budgets
        goals = [] if goals is None else goals
        if not isinstance(budgets, list) or not isinstance(goals, list):
            raise ValueError("Settings 'budgets' and 'goals' must be lists")
        return cls(
            currency=str(data.get('currency') or CURRENCY),
            theme=theme,
            budgets=[Budget.from_dict(b) for b in budgets],
            goals=[SpendingGoal.from_dict(g) for g in goals],
        )
