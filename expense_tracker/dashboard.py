"""Streamlit app for the expense tracker.

This module wires the storage layer, the calculations and the UI
components together.  Screen state (which panel is open, which expense is
being edited, pending confirmations) lives in ``st.session_state``; all
persistent data goes through :mod:`storage`.

To run the dashboard from the command line::

    streamlit run expense_tracker/Home.py

or use ``python run_dashboard.py``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict, List, Optional

import streamlit as st

if __package__:
    from . import db, storage
    from .calculations import ExpenseAnalytics
    from .config import CURRENCY
    from .filters import filter_expenses, has_active_filters
    from .models import AppSettings, Expense
    from .ui import ExpenseTrackerUI
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from expense_tracker import db, storage  # type: ignore
    from expense_tracker.calculations import ExpenseAnalytics  # type: ignore
    from expense_tracker.config import CURRENCY  # type: ignore
    from expense_tracker.filters import filter_expenses, has_active_filters  # type: ignore
    from expense_tracker.models import AppSettings, Expense  # type: ignore
    from expense_tracker.ui import ExpenseTrackerUI  # type: ignore

logger = logging.getLogger(__name__)

SESSION_DEFAULTS: Dict[str, Any] = {
    'active_panel': None,
    'editing_expense_id': None,
    'pending_delete_id': None,
    'confirm_clear': False,
    'dismissed_onboarding': False,
    'flash': None,
}

PANELS = {'form', 'export', 'import', 'settings'}


def _configure_logging() -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(
            level=os.getenv("EXPENSE_TRACKER_LOG_LEVEL", "INFO"),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _rerun() -> None:
    if hasattr(st, 'rerun'):
        st.rerun()
    elif hasattr(st, 'experimental_rerun'):
        st.experimental_rerun()


# ---------------------------------------------------------------------------
# Session state transitions
# ---------------------------------------------------------------------------


def init_session_state() -> None:
    state = st.session_state
    for key, value in SESSION_DEFAULTS.items():
        if key not in state:
            state[key] = value


def open_panel(panel: Optional[str]) -> None:
    state = st.session_state
    state['active_panel'] = panel if panel in PANELS else None
    if panel != 'form':
        state['editing_expense_id'] = None


def start_edit(expense: Expense) -> None:
    st.session_state['active_panel'] = 'form'
    st.session_state['editing_expense_id'] = expense.id


def close_form() -> None:
    st.session_state['active_panel'] = None
    st.session_state['editing_expense_id'] = None


def should_show_onboarding(expenses: List[Expense]) -> bool:
    return not expenses and not st.session_state.get('dismissed_onboarding', False)


def apply_header_action(action: Optional[str], settings: AppSettings) -> bool:
    """Handle a header/settings action. Returns True when a rerun is needed."""
    if action is None:
        return False
    if action == 'add':
        open_panel('form')
    elif action == 'toggle_theme':
        storage.set_theme('light' if settings.theme == 'dark' else 'dark')
    elif action == 'clear':
        st.session_state['confirm_clear'] = True
    else:
        open_panel(action)
    return True


def submit_expense(expense: Expense) -> bool:
    """Persist a submitted form as an edit or an addition."""
    editing_id = st.session_state.get('editing_expense_id')
    if editing_id:
        ok = storage.update_expense(editing_id, expense)
    else:
        ok = storage.add_expense(expense)
    if ok:
        close_form()
        st.session_state['dismissed_onboarding'] = True
        st.session_state['flash'] = "Expense updated." if editing_id else "Expense added."
    return ok


def confirm_delete(expense_id: str) -> bool:
    ok = storage.delete_expense(expense_id)
    st.session_state['pending_delete_id'] = None
    if ok:
        st.session_state['flash'] = "Expense deleted."
    return ok


def import_uploaded(filename: str, text: str) -> bool:
    """Replace stored data with an uploaded JSON backup or CSV export."""
    if filename.lower().endswith('.csv'):
        try:
            expenses = storage.import_from_csv(text)
        except ValueError as exc:
            logger.warning("CSV import of %s failed: %s", filename, exc)
            return False
        ok = storage.save_expenses(expenses)
    else:
        ok = storage.import_data(text)
    if ok:
        st.session_state['active_panel'] = None
        st.session_state['flash'] = "Data imported successfully!"
    return ok


def clear_everything() -> None:
    storage.clear_all_data()
    for key, value in SESSION_DEFAULTS.items():
        st.session_state[key] = value


def _find_expense(expenses: List[Expense], expense_id: Optional[str]) -> Optional[Expense]:
    if not expense_id:
        return None
    return next((e for e in expenses if e.id == expense_id), None)


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------


def main() -> None:
    """Entry point for the Streamlit app."""
    _configure_logging()
    db.init_db()
    init_session_state()

    settings = storage.get_settings() or AppSettings(currency=CURRENCY)
    ui = ExpenseTrackerUI(settings.currency, configure_page=True)
    ui.apply_theme(settings.theme)

    if apply_header_action(ui.render_header(settings.theme), settings):
        _rerun()

    flash = st.session_state.get('flash')
    if flash:
        st.success(flash)
        st.session_state['flash'] = None

    expenses = storage.get_expenses()
    analytics = ExpenseAnalytics(expenses)

    if should_show_onboarding(expenses):
        add_clicked, dismissed = ui.render_onboarding_banner()
        if add_clicked:
            open_panel('form')
            _rerun()
        if dismissed:
            st.session_state['dismissed_onboarding'] = True
            _rerun()

    _render_active_panel(ui, settings, expenses)

    if st.session_state.get('confirm_clear'):
        decision = ui.render_clear_confirmation()
        if decision is not None:
            if decision:
                clear_everything()
            else:
                st.session_state['confirm_clear'] = False
            _rerun()

    ui.render_summary_cards(analytics.totals, analytics.averages, analytics.prediction)

    if expenses:
        ui.render_advanced_statistics(analytics)
        ui.render_charts(analytics.last_7_days, analytics.category_totals)
        new_budget, removed = ui.render_budget_tracker(storage.get_budgets(), expenses, analytics.now)
        if new_budget is not None:
            storage.set_budget(new_budget)
            _rerun()
        if removed is not None:
            storage.remove_budget(removed)
            _rerun()

    goals = storage.get_goals()
    new_goal, removed_goal = ui.render_goals(goals, analytics.now)
    if new_goal is not None:
        storage.save_goals(list(goals) + [new_goal])
        _rerun()
    if removed_goal is not None:
        storage.save_goals([g for g in goals if g.id != removed_goal])
        _rerun()

    category_totals = analytics.category_totals
    if category_totals:
        left, right = st.columns([1, 2])
    else:
        left, right = None, st.container()

    if left is not None:
        with left:
            ui.render_top_categories(category_totals, limit=8)

    with right:
        filters = ui.render_expense_filters()
        visible = filter_expenses(expenses, filters)
        pending = _find_expense(expenses, st.session_state.get('pending_delete_id'))
        if pending is not None:
            decision = ui.render_delete_confirmation(pending)
            if decision is not None:
                if decision:
                    confirm_delete(pending.id)
                else:
                    st.session_state['pending_delete_id'] = None
                _rerun()
        action, target = ui.render_expense_list(visible, has_active_filters(filters))
        if action == 'edit' and target is not None:
            start_edit(target)
            _rerun()
        elif action == 'delete' and target is not None:
            st.session_state['pending_delete_id'] = target.id
            _rerun()


def _render_active_panel(ui: ExpenseTrackerUI, settings: AppSettings, expenses: List[Expense]) -> None:
    panel = st.session_state.get('active_panel')
    if panel is None:
        return

    with st.container(border=True):
        if panel == 'form':
            editing = _find_expense(expenses, st.session_state.get('editing_expense_id'))
            expense, cancelled = ui.render_expense_form(editing)
            if cancelled:
                close_form()
                _rerun()
            elif expense is not None:
                if submit_expense(expense):
                    _rerun()
                else:
                    st.error("Failed to save expense. Check the logs for details.")
        elif panel == 'export':
            ui.render_export_panel(
                json_payload=storage.export_data(),
                csv_payload=storage.export_to_csv(expenses),
                json_name=storage.export_filename('json'),
                csv_name=storage.export_filename('csv'),
            )
        elif panel == 'import':
            uploaded = ui.render_import_panel()
            if uploaded is not None:
                filename, text = uploaded
                if import_uploaded(filename, text):
                    _rerun()
                else:
                    st.error("Failed to import data. Please check the file format.")
        elif panel == 'settings':
            if apply_header_action(ui.render_settings_panel(settings.theme), settings):
                _rerun()

        if st.button("Close", key="close_panel"):
            open_panel(None)
            _rerun()


if __name__ == "__main__":  # pragma: no cover
    main()
