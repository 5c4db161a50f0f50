import json
from datetime import datetime

import pytest

from expense_tracker import db, storage
from expense_tracker.constants import STORAGE_KEYS
from expense_tracker.models import AppSettings, Budget, SpendingGoal

from conftest import make_expense


def test_get_expenses_empty_store(temp_store) -> None:
    assert storage.get_expenses() == []
    assert storage.get_settings() is None


def test_add_update_delete_roundtrip(temp_store) -> None:
    first = make_expense('one', 12.5, '2026-10-19T08:30', 'Coffee', notes='Latte')
    second = make_expense('two', 40.0, '2026-10-19T12:00', 'Food')
    assert storage.add_expense(first)
    assert storage.add_expense(second)

    # newest first
    assert [e.id for e in storage.get_expenses()] == ['two', 'one']

    assert storage.update_expense('one', {'amount': 15.0, 'notes': 'Flat white'})
    updated = next(e for e in storage.get_expenses() if e.id == 'one')
    assert updated.amount == 15.0
    assert updated.notes == 'Flat white'
    assert updated.category == 'Coffee'

    assert storage.delete_expense('two')
    assert [e.id for e in storage.get_expenses()] == ['one']


def test_update_with_expense_keeps_stored_id(temp_store) -> None:
    storage.save_expenses([make_expense('keep', 10.0, '2026-10-19T08:00')])
    replacement = make_expense('other', 99.0, '2026-10-20T09:00', 'Gym', tags=['health'])
    assert storage.update_expense('keep', replacement)
    [stored] = storage.get_expenses()
    assert stored.id == 'keep'
    assert stored.amount == 99.0
    assert stored.category == 'Gym'
    assert stored.tags == ['health']


def test_update_and_delete_unknown_id(temp_store) -> None:
    storage.save_expenses([make_expense('x', 1.0, '2026-10-19T08:00')])
    assert storage.update_expense('missing', {'amount': 5.0}) is False
    assert storage.delete_expense('missing') is False
    assert len(storage.get_expenses()) == 1


def test_corrupt_json_degrades_to_empty(temp_store, caplog) -> None:
    db.set_item(STORAGE_KEYS['EXPENSES'], '{not json')
    with caplog.at_level('WARNING'):
        assert storage.get_expenses() == []
    assert 'corrupt' in caplog.text


def test_invalid_records_are_skipped(temp_store) -> None:
    payload = [
        {'id': 'ok', 'amount': 5, 'date': '2026-10-19T08:00', 'category': 'Food'},
        {'id': 'bad', 'amount': 'abc', 'date': '2026-10-19T08:00', 'category': 'Food'},
        {'amount': 3, 'date': '2026-10-19T08:00', 'category': 'Food'},
    ]
    db.set_item(STORAGE_KEYS['EXPENSES'], json.dumps(payload))
    assert [e.id for e in storage.get_expenses()] == ['ok']


def test_stored_record_uses_camel_case(temp_store) -> None:
    storage.save_expenses([
        make_expense('r', 30.0, '2026-10-19T08:00', 'Subscriptions',
                     is_recurring=True, recurring_frequency='monthly'),
    ])
    [record] = json.loads(db.get_item(STORAGE_KEYS['EXPENSES']))
    assert record['isRecurring'] is True
    assert record['recurringFrequency'] == 'monthly'


def test_budgets_live_in_settings(temp_store) -> None:
    assert storage.set_budget(Budget('Food', 200.0))
    assert storage.set_budget(Budget('Coffee', 50.0, 'weekly'))
    assert storage.set_budget(Budget('Food', 300.0))
    budgets = storage.get_budgets()
    assert [(b.category, b.limit) for b in budgets] == [('Coffee', 50.0), ('Food', 300.0)]
    assert storage.get_settings().budgets == budgets

    assert storage.remove_budget('Coffee')
    assert [b.category for b in storage.get_budgets()] == ['Food']


def test_goals_and_theme_preserve_other_settings(temp_store) -> None:
    storage.save_settings(AppSettings(currency='EUR', theme='light'))
    storage.save_goals([SpendingGoal('g', 'Trip', 1000.0, 100.0, '2026-12-31')])
    storage.set_theme('dark')
    settings = storage.get_settings()
    assert settings.currency == 'EUR'
    assert settings.theme == 'dark'
    assert [g.name for g in storage.get_goals()] == ['Trip']


def test_export_then_import_json(temp_store, sample_expenses) -> None:
    storage.save_expenses(sample_expenses)
    storage.save_settings(AppSettings(currency='USD', theme='dark'))
    backup = storage.export_data()

    storage.clear_all_data()
    assert storage.get_expenses() == []

    assert storage.import_data(backup)
    assert [e.id for e in storage.get_expenses()] == ['a', 'b', 'c', 'd', 'e']
    assert storage.get_settings().currency == 'USD'


def test_export_data_shape(temp_store) -> None:
    payload = json.loads(storage.export_data())
    assert payload == {'expenses': [], 'settings': None}


@pytest.mark.parametrize(
    'payload',
    [
        'not json',
        '[1, 2, 3]',
        json.dumps({'expenses': [{'id': 'x', 'amount': 'lots', 'date': '2026-10-19', 'category': 'Food'}]}),
        json.dumps({'expenses': {'id': 'x'}}),
        json.dumps({'settings': {'theme': 'neon'}}),
        json.dumps({'settings': {'currency': 'MAD', 'theme': 'light', 'budgets': 5}}),
        json.dumps({'settings': {'goals': {'id': 'g'}}}),
    ],
)
def test_import_data_rejects_invalid_payload(temp_store, payload) -> None:
    storage.save_expenses([make_expense('keep', 1.0, '2026-10-19T08:00')])
    assert storage.import_data(payload) is False
    assert [e.id for e in storage.get_expenses()] == ['keep']


def test_import_data_settings_only_keeps_expenses(temp_store) -> None:
    storage.save_expenses([make_expense('keep', 1.0, '2026-10-19T08:00')])
    assert storage.import_data(json.dumps({'settings': {'currency': 'GBP', 'theme': 'light'}}))
    assert [e.id for e in storage.get_expenses()] == ['keep']
    assert storage.get_settings().currency == 'GBP'


def test_import_data_empty_expenses_clears_store(temp_store) -> None:
    storage.save_expenses([make_expense('old', 1.0, '2026-10-19T08:00')])
    assert storage.import_data('{"expenses": [], "settings": null}')
    assert storage.get_expenses() == []


def test_stored_settings_with_non_list_budgets_are_ignored(temp_store) -> None:
    db.set_item(STORAGE_KEYS['SETTINGS'], json.dumps({'theme': 'dark', 'budgets': 5}))
    assert storage.get_settings() is None
    assert storage.get_budgets() == []


def test_export_to_csv(sample_expenses) -> None:
    text = storage.export_to_csv(sample_expenses[:3] + [make_expense('f', 7.25, '2026-10-20T18:45', 'Gifts', notes='Card, "thanks"')])
    lines = text.split('\n')
    assert lines[0] == 'Date,Amount,Category,Notes,Tags'
    assert lines[1] == '"2026-10-21 09:00","10","Food","Lunch with team","work"'
    assert lines[3] == '"2026-10-17 12:00","30","Food","Dinner","personal;date"'
    assert lines[4] == '"2026-10-20 18:45","7.25","Gifts","Card, ""thanks""",""'
    assert not text.endswith('\n')


def test_export_to_csv_empty() -> None:
    assert storage.export_to_csv([]) == 'Date,Amount,Category,Notes,Tags'


def test_import_from_csv(sample_expenses) -> None:
    text = storage.export_to_csv(sample_expenses)
    imported = storage.import_from_csv(text)
    assert [(e.amount, e.category, e.date) for e in imported] == [
        (e.amount, e.category, e.date) for e in sample_expenses
    ]
    assert imported[2].tags == ['personal', 'date']
    assert len({e.id for e in imported}) == len(imported)
    assert all(e.id.startswith('exp_') for e in imported)


def test_import_from_csv_skips_bad_rows(caplog) -> None:
    text = '\n'.join([
        'Date,Amount,Category,Notes,Tags',
        '"2026-10-19 08:00","12","Food","ok",""',
        '"not-a-date","5","Food","bad date",""',
        '"2026-10-19 09:00","-3","Food","negative",""',
        '"2026-10-19 10:00","abc","Food","not a number",""',
    ])
    with caplog.at_level('WARNING'):
        imported = storage.import_from_csv(text)
    assert [e.notes for e in imported] == ['ok']
    assert 'Skipped 3' in caplog.text


def test_import_from_csv_requires_columns() -> None:
    with pytest.raises(ValueError, match='Amount'):
        storage.import_from_csv('Date,Category\n2026-10-19,Food\n')


def test_clear_all_data_removes_every_key(temp_store, sample_expenses) -> None:
    storage.save_expenses(sample_expenses)
    storage.set_budget(Budget('Food', 100.0))
    storage.clear_all_data()
    assert db.keys() == []
    assert storage.get_budgets() == []


def test_export_filename() -> None:
    assert storage.export_filename('csv', datetime(2026, 10, 19)) == 'finance-tracker-2026-10-19.csv'
    assert storage.export_filename('.json', datetime(2026, 1, 2)) == 'finance-tracker-2026-01-02.json'
