"""Streamlit UI components for the expense tracker.

Each ``render_*`` method draws one section of the dashboard.  Methods that
collect input return the resulting value (a validated :class:`Expense`, a
:class:`Budget`, a filter set ...) and leave persistence to the caller in
:mod:`dashboard`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple

import pandas as pd
import streamlit as st
from streamlit.errors import StreamlitAPIException

try:
    from . import visualization as viz
    from .calculations import ExpenseAnalytics, calculate_goal_progress, get_budget_statuses
    from .config import APP_VERSION
    from .constants import BUDGET_PERIODS, CATEGORIES, COLORS, RECURRING_FREQUENCIES
    from .date_utils import format_date, parse_date
    from .filters import ALL_CATEGORIES, build_filter_options
    from .forms import ExpenseValidationError, build_expense, generate_expense_id
    from .models import Budget, CategoryTotal, Expense, FilterOptions, SpendingGoal
except ImportError:  # pragma: no cover - fallback for direct execution
    import visualization as viz
    from calculations import ExpenseAnalytics, calculate_goal_progress, get_budget_statuses
    from config import APP_VERSION
    from constants import BUDGET_PERIODS, CATEGORIES, COLORS, RECURRING_FREQUENCIES
    from date_utils import format_date, parse_date
    from filters import ALL_CATEGORIES, build_filter_options
    from forms import ExpenseValidationError, build_expense, generate_expense_id
    from models import Budget, CategoryTotal, Expense, FilterOptions, SpendingGoal


def format_money(amount: float, currency: str) -> str:
    return f"{amount:,.2f} {currency}"


def plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


class ExpenseTrackerUI:
    """UI components for recording and reviewing expenses."""
    _PAGE_CONFIGURED = False

    def __init__(self, currency: str, *, configure_page: bool = False):
        self.currency = currency
        if configure_page:
            self.setup_page_config()

    def setup_page_config(self) -> None:
        if ExpenseTrackerUI._PAGE_CONFIGURED:
            return
        try:
            st.set_page_config(
                page_title="Finance Tracker",
                page_icon="💰",
                layout="wide",
                initial_sidebar_state="collapsed",
            )
        except StreamlitAPIException:
            # Already configured upstream
            pass
        finally:
            ExpenseTrackerUI._PAGE_CONFIGURED = True

    def apply_theme(self, theme: str) -> None:
        if theme != 'dark':
            return
        st.markdown("""
        <style>
        .stApp {
            background-color: #111827;
            color: #f9fafb;
        }
        .stMetric {
            background-color: #1f2937;
            padding: 1rem;
            border-radius: 0.75rem;
        }
        </style>
        """, unsafe_allow_html=True)

    # ------------------------------------------------------------------
    # Header and banners
    # ------------------------------------------------------------------

    def render_header(self, theme: str) -> Optional[str]:
        """Render the title bar. Returns the name of the clicked action, if any."""
        col1, col2, col3, col4, col5, col6 = st.columns([4, 1, 1, 1, 1, 1])
        with col1:
            st.title("💰 Finance Tracker")
            st.caption("Track expenses, set budgets, and achieve your financial goals.")
        action = None
        with col2:
            if st.button("➕ Add", help="Record a new expense", key="hdr_add"):
                action = 'add'
        with col3:
            if st.button("⬇️ Export", key="hdr_export"):
                action = 'export'
        with col4:
            if st.button("⬆️ Import", key="hdr_import"):
                action = 'import'
        with col5:
            if st.button("⚙️ Settings", key="hdr_settings"):
                action = 'settings'
        with col6:
            label = "☀️ Light" if theme == 'dark' else "🌙 Dark"
            if st.button(label, help="Toggle dark/light theme", key="hdr_theme"):
                action = 'toggle_theme'
        return action

    def render_onboarding_banner(self) -> Tuple[bool, bool]:
        """Returns ``(add_clicked, dismissed)``."""
        with st.container(border=True):
            st.markdown("### 👋 Welcome to Finance Tracker")
            st.markdown(
                "Start by adding your first expense. Everything you record is stored "
                "locally on this machine; nothing is sent anywhere."
            )
            col1, col2, _ = st.columns([1, 1, 4])
            add_clicked = col1.button("Add first expense", key="onboarding_add")
            dismissed = col2.button("Dismiss", key="onboarding_dismiss")
        return add_clicked, dismissed

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def render_summary_cards(
        self,
        totals: Dict[str, float],
        averages: Optional[Dict[str, float]] = None,
        prediction: Optional[float] = None,
    ) -> None:
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("📅 Today", format_money(totals['daily_total'], self.currency))
            if averages is not None:
                st.caption(f"Avg: {format_money(averages['daily'], self.currency)}/day")
        with col2:
            st.metric("📈 This Week", format_money(totals['weekly_total'], self.currency))
        with col3:
            st.metric("🥧 This Month", format_money(totals['monthly_total'], self.currency))
            if prediction is not None:
                st.caption(f"Next month est: {format_money(prediction, self.currency)}")
        with col4:
            st.metric("🎯 This Year", format_money(totals['yearly_total'], self.currency))

    def render_advanced_statistics(self, analytics: ExpenseAnalytics) -> None:
        averages = analytics.averages
        stats = analytics.stats
        with st.expander("📊 Advanced Statistics"):
            col1, col2, col3, col4 = st.columns(4)
            col1.metric("Average Daily Spending", format_money(averages['daily'], self.currency))
            col2.metric("Average Weekly Spending", format_money(averages['weekly'], self.currency))
            col3.metric("Average Monthly Spending", format_money(averages['monthly'], self.currency))
            col4.metric("Next Month Prediction", format_money(analytics.prediction, self.currency))

            st.markdown("#### Category Insights")
            for ct in analytics.category_totals[:5]:
                left, right = st.columns([3, 1])
                left.markdown(
                    f"**{ct.category}**  \n"
                    f"{plural(ct.count, 'transaction')} • Avg: {format_money(ct.average, self.currency)}"
                )
                right.markdown(f"**{format_money(ct.total, self.currency)}**  \n{ct.percentage:.1f}%")

            st.markdown("#### Total Summary")
            summary = pd.DataFrame(
                [
                    ("Total Expenses", str(stats['count'])),
                    ("Total Spent (All Time)", format_money(stats['total'], self.currency)),
                    ("Most Expensive", format_money(stats['max'], self.currency)),
                    ("Least Expensive", format_money(stats['min'], self.currency)),
                ],
                columns=["Metric", "Value"],
            )
            st.table(summary.set_index("Metric"))

    def render_charts(self, last_7_days: Sequence[Dict[str, Any]], category_totals: Sequence[CategoryTotal]) -> None:
        col1, col2 = st.columns(2)
        with col1:
            st.plotly_chart(
                viz.create_spending_trend_chart(last_7_days, currency=self.currency),
                use_container_width=True,
            )
        with col2:
            st.plotly_chart(viz.create_category_breakdown_chart(category_totals), use_container_width=True)

    def render_top_categories(self, category_totals: Sequence[CategoryTotal], limit: int = 5) -> None:
        st.subheader("Top Categories")
        for idx, ct in enumerate(list(category_totals)[:limit]):
            color = COLORS[idx % len(COLORS)]
            left, right = st.columns([3, 2])
            left.markdown(
                f"<span style='color:{color}'>●</span> **{ct.category}**  \n"
                f"<small>{plural(ct.count, 'transaction')}</small>",
                unsafe_allow_html=True,
            )
            right.markdown(f"**{format_money(ct.total, self.currency)}**  \n{ct.percentage:.1f}%")

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    def render_budget_tracker(
        self,
        budgets: Sequence[Budget],
        expenses: Sequence[Expense],
        now: Optional[datetime] = None,
    ) -> Tuple[Optional[Budget], Optional[str]]:
        """Render budget progress. Returns ``(new_budget, category_to_remove)``."""
        st.subheader("🎯 Budgets")
        new_budget: Optional[Budget] = None
        removed: Optional[str] = None

        statuses = get_budget_statuses(budgets, expenses, now)
        if not statuses:
            st.info("No budgets set. Use **Set Budget** below to get started!")
        else:
            icons = {'good': '✅', 'warning': '⚠️', 'over': '🚨'}
            for status in statuses:
                left, right = st.columns([5, 1])
                with left:
                    st.markdown(
                        f"{icons[status.status]} **{status.category}** ({status.period}): "
                        f"{status.spent:.2f} / {status.limit:.2f} {self.currency}"
                    )
                    st.progress(min(status.percentage, 100.0) / 100.0)
                    st.caption(f"{status.percentage:.1f}% of budget used")
                with right:
                    if st.button("Remove", key=f"remove_budget_{status.category}"):
                        removed = status.category
            st.plotly_chart(viz.create_budget_progress_chart(statuses), use_container_width=True)

        with st.expander("Set Budget"):
            with st.form("budget_form", clear_on_submit=True):
                category = st.selectbox("Category", options=list(CATEGORIES))
                limit = st.number_input(f"Budget Limit ({self.currency})", min_value=0.0, step=10.0)
                period = st.selectbox("Period", options=list(BUDGET_PERIODS), index=BUDGET_PERIODS.index('monthly'))
                submitted = st.form_submit_button("Set Budget")
                if submitted:
                    if limit <= 0:
                        st.error("Please enter a budget limit greater than zero.")
                    else:
                        new_budget = Budget(category=category, limit=float(limit), period=period)
        return new_budget, removed

    def render_goals(
        self,
        goals: Sequence[SpendingGoal],
        now: Optional[datetime] = None,
    ) -> Tuple[Optional[SpendingGoal], Optional[str]]:
        """Render savings goals. Returns ``(new_goal, goal_id_to_remove)``."""
        st.subheader("🏁 Goals")
        new_goal: Optional[SpendingGoal] = None
        removed: Optional[str] = None

        progress = calculate_goal_progress(goals, now)
        if not progress:
            st.caption("No goals yet.")
        for item in progress:
            left, right = st.columns([5, 1])
            with left:
                days = item['days_left']
                when = "" if days is None else f" • {plural(abs(days), 'day')} {'left' if days >= 0 else 'overdue'}"
                st.markdown(
                    f"**{item['name']}** ({item['status']}): "
                    f"{format_money(item['current_amount'], self.currency)} / "
                    f"{format_money(item['target_amount'], self.currency)}{when}"
                )
                st.progress(item['progress_percentage'] / 100.0)
            with right:
                if st.button("Remove", key=f"remove_goal_{item['id']}"):
                    removed = item['id']

        with st.expander("Add Goal"):
            with st.form("goal_form", clear_on_submit=True):
                name = st.text_input("Name")
                col1, col2 = st.columns(2)
                target = col1.number_input(f"Target ({self.currency})", min_value=0.0, step=50.0)
                saved = col2.number_input(f"Saved so far ({self.currency})", min_value=0.0, step=50.0)
                deadline = st.date_input("Deadline")
                if st.form_submit_button("Add Goal"):
                    if not name.strip() or target <= 0:
                        st.error("Please enter a name and a target greater than zero.")
                    else:
                        new_goal = SpendingGoal(
                            id=generate_expense_id(now).replace('exp_', 'goal_', 1),
                            name=name.strip(),
                            target_amount=float(target),
                            current_amount=float(saved),
                            deadline=deadline.isoformat(),
                        )
        return new_goal, removed

    # ------------------------------------------------------------------
    # Expense list and form
    # ------------------------------------------------------------------

    def render_expense_filters(self) -> FilterOptions:
        search = st.text_input("Search expenses...", key="filter_search", placeholder="Search notes or category")
        with st.expander("Filters"):
            col1, col2, col3 = st.columns(3)
            category = col1.selectbox(
                "Category",
                options=[ALL_CATEGORIES] + list(CATEGORIES),
                format_func=lambda c: "All Categories" if c == ALL_CATEGORIES else c,
                key="filter_category",
            )
            min_amount = col2.text_input("Min Amount", key="filter_min", placeholder="0.00")
            max_amount = col3.text_input("Max Amount", key="filter_max", placeholder="0.00")
            st.button("✖ Clear Filters", key="filter_clear", on_click=_clear_filter_widgets)
        return build_filter_options(
            category=category,
            search_term=search,
            min_amount=min_amount,
            max_amount=max_amount,
        )

    def render_expense_list(self, expenses: Sequence[Expense], filters_active: bool) -> Tuple[Optional[str], Optional[Expense]]:
        """Render the list. Returns ``(action, expense)`` for an edit/delete click."""
        st.subheader("Expenses")
        if not expenses:
            hint = "Try adjusting your filters." if filters_active else "Add your first one!"
            st.info(f"No expenses found. {hint}")
            return None, None

        action: Optional[str] = None
        target: Optional[Expense] = None
        for expense in expenses:
            with st.container(border=True):
                left, mid, right = st.columns([5, 2, 1])
                with left:
                    st.markdown(f"**{expense.category}**" + (" 🔁" if expense.is_recurring else ""))
                    if expense.notes:
                        st.caption(expense.notes)
                    if expense.tags:
                        st.caption(" ".join(f"#{t}" for t in expense.tags))
                with mid:
                    st.markdown(f"**{format_money(expense.amount, self.currency)}**")
                    st.caption(_display_date(expense.date))
                with right:
                    if st.button("✏️", key=f"edit_{expense.id}", help="Edit"):
                        action, target = 'edit', expense
                    if st.button("🗑️", key=f"delete_{expense.id}", help="Delete"):
                        action, target = 'delete', expense
        return action, target

    def render_delete_confirmation(self, expense: Expense) -> Optional[bool]:
        """Returns True/False once the user confirms or cancels, else None."""
        st.warning(
            f"Are you sure you want to delete this expense? "
            f"{expense.category}, {format_money(expense.amount, self.currency)}"
        )
        col1, col2, _ = st.columns([1, 1, 4])
        if col1.button("✅ Confirm", key="confirm_delete"):
            return True
        if col2.button("❌ Cancel", key="cancel_delete"):
            return False
        return None

    def render_expense_form(self, existing: Optional[Expense] = None) -> Tuple[Optional[Expense], bool]:
        """Render the add/edit form. Returns ``(expense, cancelled)``."""
        st.subheader("Edit Expense" if existing else "Add Expense")
        default_when = _form_datetime(existing)
        with st.form("expense_form"):
            amount = st.text_input(
                f"Amount ({self.currency}) *",
                value=str(existing.amount) if existing else "",
                placeholder="0.00",
            )
            col1, col2 = st.columns(2)
            day = col1.date_input("Date *", value=default_when.date())
            clock = col2.time_input("Time *", value=default_when.time().replace(second=0, microsecond=0))
            category_index = CATEGORIES.index(existing.category) if existing and existing.category in CATEGORIES else 0
            category = st.selectbox("Category", options=list(CATEGORIES), index=category_index)
            notes = st.text_area("Notes (optional)", value=existing.notes if existing else "", placeholder="Add any additional details...")
            tags = st.text_input(
                "Tags (optional, comma-separated)",
                value=", ".join(existing.tags) if existing else "",
                placeholder="e.g., work, personal, urgent",
            )
            is_recurring = st.checkbox("Recurring expense", value=existing.is_recurring if existing else False)
            frequency_options = list(RECURRING_FREQUENCIES)
            frequency_index = (
                frequency_options.index(existing.recurring_frequency)
                if existing and existing.recurring_frequency in frequency_options else 2
            )
            frequency = st.selectbox("Repeats", options=frequency_options, index=frequency_index)

            col_submit, col_cancel = st.columns(2)
            submitted = col_submit.form_submit_button("Update" if existing else "Add Expense")
            cancelled = col_cancel.form_submit_button("Cancel")

        if cancelled:
            return None, True
        if not submitted:
            return None, False
        try:
            expense = build_expense(
                amount=amount,
                date=datetime.combine(day, clock).strftime("%Y-%m-%dT%H:%M"),
                category=category,
                notes=notes,
                tags=tags,
                is_recurring=is_recurring,
                recurring_frequency=frequency if is_recurring else None,
                existing=existing,
            )
        except ExpenseValidationError as exc:
            for message in exc.errors.values():
                st.error(message)
            return None, False
        return expense, False

    # ------------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------------

    def render_export_panel(self, json_payload: str, csv_payload: str, json_name: str, csv_name: str) -> None:
        st.subheader("Export Data")
        st.markdown("Choose the format to export your financial data:")
        col1, col2 = st.columns(2)
        col1.download_button(
            "⬇️ Export as JSON",
            data=json_payload,
            file_name=json_name,
            mime="application/json",
        )
        col2.download_button(
            "⬇️ Export as CSV",
            data=csv_payload,
            file_name=csv_name,
            mime="text/csv",
        )
        st.caption("JSON format includes all data and settings. CSV format is compatible with Excel.")

    def render_import_panel(self) -> Optional[Tuple[str, str]]:
        """Returns ``(filename, text)`` once a file has been uploaded."""
        st.subheader("Import Data")
        st.warning("Importing will replace all existing data. Make sure to export your current data first!")
        uploaded = st.file_uploader("Select JSON or CSV file to import:", type=["json", "csv"], key="import_file")
        if uploaded is None:
            return None
        if not st.button("Import", key="import_confirm"):
            return None
        try:
            text = uploaded.getvalue().decode("utf-8-sig")
        except UnicodeDecodeError:
            st.error("Error importing data. Please ensure the file is valid UTF-8 text.")
            return None
        return uploaded.name, text

    def render_settings_panel(self, theme: str) -> Optional[str]:
        """Render settings. Returns the chosen action, if any."""
        st.subheader("Settings")
        action = None
        st.markdown("**Appearance**")
        dark = st.toggle("Dark Mode", value=theme == 'dark')
        if dark != (theme == 'dark'):
            action = 'toggle_theme'

        st.markdown("**Data Management**")
        col1, col2, col3 = st.columns(3)
        if col1.button("Backup Data", key="settings_backup"):
            action = 'export'
        if col2.button("Restore Data", key="settings_restore"):
            action = 'import'
        if col3.button("Clear All Data", key="settings_clear", type="primary"):
            action = 'clear'

        st.markdown("**About**")
        st.caption(f"Finance Tracker v{APP_VERSION}")
        st.caption("All data is stored locally on this machine.")
        return action

    def render_clear_confirmation(self) -> Optional[bool]:
        st.error("⚠️ Are you sure you want to delete all data? This action cannot be undone!")
        col1, col2, _ = st.columns([1, 1, 4])
        if col1.button("✅ Confirm", key="confirm_clear_btn"):
            return True
        if col2.button("❌ Cancel", key="cancel_clear_btn"):
            return False
        return None


def _clear_filter_widgets() -> None:
    st.session_state["filter_search"] = ""
    st.session_state["filter_category"] = ALL_CATEGORIES
    st.session_state["filter_min"] = ""
    st.session_state["filter_max"] = ""


def _display_date(value: str) -> str:
    try:
        return format_date(value, include_time=True)
    except ValueError:
        return value


def _form_datetime(existing: Optional[Expense]) -> datetime:
    if existing is not None:
        try:
            return parse_date(existing.date)
        except ValueError:
            pass
    return datetime.now()
