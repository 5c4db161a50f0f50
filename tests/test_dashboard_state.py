import types

import pytest

from expense_tracker import dashboard, storage
from expense_tracker.models import AppSettings

from conftest import make_expense


@pytest.fixture
def state(monkeypatch):
    dummy_state = {}
    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(session_state=dummy_state))
    dashboard.init_session_state()
    return dummy_state


def test_init_session_state_keeps_existing_values(monkeypatch):
    dummy_state = {'active_panel': 'export'}
    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(session_state=dummy_state))
    dashboard.init_session_state()
    assert dummy_state['active_panel'] == 'export'
    assert dummy_state['confirm_clear'] is False
    assert set(dummy_state) == set(dashboard.SESSION_DEFAULTS)


def test_open_panel_rejects_unknown_and_clears_edit(state):
    state['editing_expense_id'] = 'x'
    dashboard.open_panel('export')
    assert state['active_panel'] == 'export'
    assert state['editing_expense_id'] is None
    dashboard.open_panel('nonsense')
    assert state['active_panel'] is None


def test_submit_expense_adds_then_edits(state, temp_store):
    first = make_expense('one', 10.0, '2026-10-19T08:00')
    dashboard.open_panel('form')
    assert dashboard.submit_expense(first)
    assert state['active_panel'] is None
    assert state['flash'] == 'Expense added.'
    assert state['dismissed_onboarding'] is True

    dashboard.start_edit(first)
    assert state['active_panel'] == 'form'
    edited = make_expense('fresh-id', 25.0, '2026-10-19T08:00', 'Gym')
    assert dashboard.submit_expense(edited)
    assert state['flash'] == 'Expense updated.'
    assert state['editing_expense_id'] is None

    [stored] = storage.get_expenses()
    assert (stored.id, stored.amount, stored.category) == ('one', 25.0, 'Gym')


def test_submit_edit_of_vanished_expense_keeps_form_open(state, temp_store):
    dashboard.start_edit(make_expense('gone', 1.0, '2026-10-19T08:00'))
    assert dashboard.submit_expense(make_expense('gone', 2.0, '2026-10-19T08:00')) is False
    assert state['active_panel'] == 'form'


def test_confirm_delete(state, temp_store):
    storage.save_expenses([make_expense('one', 10.0, '2026-10-19T08:00')])
    state['pending_delete_id'] = 'one'
    assert dashboard.confirm_delete('one')
    assert state['pending_delete_id'] is None
    assert state['flash'] == 'Expense deleted.'
    assert storage.get_expenses() == []


def test_should_show_onboarding(state):
    assert dashboard.should_show_onboarding([])
    state['dismissed_onboarding'] = True
    assert not dashboard.should_show_onboarding([])
    state['dismissed_onboarding'] = False
    assert not dashboard.should_show_onboarding([make_expense('x', 1.0, '2026-10-19T08:00')])


def test_header_actions(state, temp_store):
    settings = AppSettings(theme='light')
    assert dashboard.apply_header_action(None, settings) is False

    assert dashboard.apply_header_action('toggle_theme', settings)
    assert storage.get_settings().theme == 'dark'

    assert dashboard.apply_header_action('add', settings)
    assert state['active_panel'] == 'form'

    assert dashboard.apply_header_action('import', settings)
    assert state['active_panel'] == 'import'

    assert dashboard.apply_header_action('clear', settings)
    assert state['confirm_clear'] is True


def test_import_uploaded_csv(state, temp_store):
    text = 'Date,Amount,Category,Notes,Tags\n"2026-10-19 08:00","12","Food","Lunch","work;team"'
    state['active_panel'] = 'import'
    assert dashboard.import_uploaded('expenses.CSV', text)
    assert state['active_panel'] is None
    [expense] = storage.get_expenses()
    assert expense.tags == ['work', 'team']


def test_import_uploaded_rejects_bad_files(state, temp_store):
    storage.save_expenses([make_expense('keep', 1.0, '2026-10-19T08:00')])
    assert dashboard.import_uploaded('broken.csv', 'Date,Notes\n2026-10-19,x') is False
    assert dashboard.import_uploaded('backup.json', '{oops') is False
    assert [e.id for e in storage.get_expenses()] == ['keep']


def test_clear_everything_resets_state(state, temp_store):
    storage.save_expenses([make_expense('one', 10.0, '2026-10-19T08:00')])
    state['active_panel'] = 'settings'
    state['confirm_clear'] = True
    dashboard.clear_everything()
    assert storage.get_expenses() == []
    assert state == dashboard.SESSION_DEFAULTS


def test_rerun_prefers_streamlit_rerun(monkeypatch):
    called = {}
    st_mock = types.SimpleNamespace(rerun=lambda: called.setdefault('method', 'rerun'))
    monkeypatch.setattr(dashboard, 'st', st_mock)
    dashboard._rerun()
    assert called['method'] == 'rerun'


def test_rerun_falls_back_to_experimental(monkeypatch):
    called = {}
    st_mock = types.SimpleNamespace(experimental_rerun=lambda: called.setdefault('method', 'experimental'))
    monkeypatch.setattr(dashboard, 'st', st_mock)
    dashboard._rerun()
    assert called['method'] == 'experimental'
