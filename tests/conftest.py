from datetime import datetime

import pytest

from expense_tracker import db
from expense_tracker.models import Expense


@pytest.fixture
def temp_store(tmp_path, monkeypatch):
    """Point the key-value store at a throwaway SQLite file."""
    path = tmp_path / 'store.db'
    monkeypatch.setattr(db, 'DB_PATH', path)
    return path


@pytest.fixture
def now():
    # Wednesday; the week started on Sunday 2026-10-18
    return datetime(2026, 10, 21, 15, 0)


def make_expense(expense_id, amount, date, category='Food', notes='', tags=None, **kwargs):
    return Expense(
        id=expense_id,
        amount=amount,
        date=date,
        category=category,
        notes=notes,
        tags=list(tags or []),
        **kwargs,
    )


@pytest.fixture
def sample_expenses():
    return [
        make_expense('a', 10.0, '2026-10-21T09:00', 'Food', notes='Lunch with team', tags=['work']),
        make_expense('b', 20.0, '2026-10-18T12:00', 'Coffee', notes='Beans'),
        make_expense('c', 30.0, '2026-10-17T12:00', 'Food', notes='Dinner', tags=['personal', 'date']),
        make_expense('d', 40.0, '2026-09-30T10:00', 'Transport', notes='Train pass', tags=['work']),
        make_expense('e', 50.0, '2025-12-31T23:00', 'Food', notes='New year party'),
    ]
