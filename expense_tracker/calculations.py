"""Spending aggregations behind the dashboard.

This module contains pure functions over a sequence of
:class:`~expense_tracker.models.Expense`: totals per calendar window,
per-category breakdowns, averages over the recorded span, zero-filled daily
trend series, a three-month-average forecast and budget/goal progress.
They are independent of the user interface so they can be unit tested and
reused from the command-line scripts.

Functions that depend on the clock accept ``now``; when omitted the
current local time is used.  Empty input always yields zeros or empty
collections rather than an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

try:
    from .constants import BUDGET_OVER_PERCENT, BUDGET_WARNING_PERCENT, DATE_FORMATS
    from .date_utils import parse_date, start_of_day, start_of_month, start_of_week, start_of_year
    from .models import Budget, CategoryTotal, Expense, SpendingGoal
except ImportError:  # pragma: no cover - fallback for direct execution
    from constants import BUDGET_OVER_PERCENT, BUDGET_WARNING_PERCENT, DATE_FORMATS
    from date_utils import parse_date, start_of_day, start_of_month, start_of_week, start_of_year
    from models import Budget, CategoryTotal, Expense, SpendingGoal

FRAME_COLUMNS = ['id', 'amount', 'date', 'category', 'notes', 'tags', 'is_recurring']


@dataclass
class BudgetStatus:
    category: str
    spent: float
    limit: float
    percentage: float
    status: str
    period: str = 'monthly'

    @property
    def remaining(self) -> float:
        return self.limit - self.spent


# ---------------------------------------------------------------------------
# Columnar view
# ---------------------------------------------------------------------------


def _safe_parse(value: str) -> Any:
    try:
        return parse_date(value)
    except ValueError:
        return pd.NaT


def expenses_to_frame(expenses: Sequence[Expense]) -> pd.DataFrame:
    """Return one row per expense with a parsed ``date`` column.

    Unparsable dates become ``NaT`` and drop out of every time-window
    calculation while still counting towards category totals.
    """
    if not expenses:
        frame = pd.DataFrame(columns=FRAME_COLUMNS)
        frame['amount'] = frame['amount'].astype(float)
        frame['date'] = pd.to_datetime(frame['date'])
        return frame
    frame = pd.DataFrame(
        [
            {
                'id': e.id,
                'amount': float(e.amount),
                'date': _safe_parse(e.date),
                'category': e.category,
                'notes': e.notes,
                'tags': list(e.tags),
                'is_recurring': e.is_recurring,
            }
            for e in expenses
        ],
        columns=FRAME_COLUMNS,
    )
    frame['date'] = pd.to_datetime(frame['date'])
    return frame


def _sum_since(frame: pd.DataFrame, start: datetime) -> float:
    return float(frame.loc[frame['date'] >= pd.Timestamp(start), 'amount'].sum())


# ---------------------------------------------------------------------------
# Totals and breakdowns
# ---------------------------------------------------------------------------


def calculate_totals(expenses: Sequence[Expense], now: Optional[datetime] = None) -> Dict[str, float]:
    """Sum spending since the start of today, this week, this month and this year.

    Weeks start on Sunday.  There is no upper bound, so future-dated
    expenses are included.
    """
    current = now or datetime.now()
    frame = expenses_to_frame(expenses)
    if frame.empty:
        return {'daily_total': 0.0, 'weekly_total': 0.0, 'monthly_total': 0.0, 'yearly_total': 0.0}
    return {
        'daily_total': _sum_since(frame, start_of_day(current)),
        'weekly_total': _sum_since(frame, start_of_week(current)),
        'monthly_total': _sum_since(frame, start_of_month(current)),
        'yearly_total': _sum_since(frame, start_of_year(current)),
    }


def get_category_totals(expenses: Sequence[Expense]) -> List[CategoryTotal]:
    """Group spending by category, largest total first.

    ``percentage`` is each category's share of the grand total; ties keep
    the order in which categories first appear.
    """
    frame = expenses_to_frame(expenses)
    if frame.empty:
        return []
    grouped = frame.groupby('category', sort=False)['amount'].agg(['sum', 'count'])
    grouped = grouped.sort_values('sum', ascending=False, kind='mergesort')
    grand_total = float(frame['amount'].sum())
    return [
        CategoryTotal(
            category=str(category),
            total=float(row['sum']),
            count=int(row['count']),
            percentage=(float(row['sum']) / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for category, row in grouped.iterrows()
    ]


def calculate_averages(expenses: Sequence[Expense]) -> Dict[str, float]:
    """Average spending per day, week and month over the recorded span.

    The span is the fractional number of days between the earliest and
    latest expense, floored at one day.
    """
    frame = expenses_to_frame(expenses)
    if frame.empty:
        return {'daily': 0.0, 'weekly': 0.0, 'monthly': 0.0}
    total = float(frame['amount'].sum())
    dates = frame['date'].dropna()
    span_days = 1.0
    if not dates.empty:
        span_days = max(1.0, (dates.max() - dates.min()) / pd.Timedelta(days=1))
    daily = total / span_days
    return {'daily': daily, 'weekly': daily * 7, 'monthly': daily * 30}


def get_spending_trend(
    expenses: Sequence[Expense],
    days: int = 30,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Daily totals for the last ``days`` calendar days ending today.

    Today is the last entry, so the window runs from ``days - 1`` days ago
    through today rather than stopping at yesterday.  Days without
    spending are present with an amount of zero.
    """
    if days <= 0:
        return []
    today = pd.Timestamp(start_of_day(now))
    index = pd.date_range(end=today, periods=days, freq='D')
    frame = expenses_to_frame(expenses).dropna(subset=['date'])
    if frame.empty:
        daily = pd.Series(0.0, index=index)
    else:
        daily = (
            frame.groupby(frame['date'].dt.normalize())['amount']
            .sum()
            .reindex(index, fill_value=0.0)
        )
    return [
        {'date': day.strftime(DATE_FORMATS['ISO']), 'amount': float(amount)}
        for day, amount in daily.items()
    ]


def get_last_7_days(expenses: Sequence[Expense], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Seven-day series labelled for charts, e.g. ``{'date': 'Oct 13', ...}``."""
    points = []
    for point in get_spending_trend(expenses, days=7, now=now):
        day = parse_date(point['date'])
        points.append({
            'date': f"{day:%b} {day.day}",
            'day': point['date'],
            'amount': point['amount'],
        })
    return points


def predict_next_month_spending(expenses: Sequence[Expense], now: Optional[datetime] = None) -> float:
    """Estimate next month's spending as the mean of the last three months."""
    frame = expenses_to_frame(expenses)
    if frame.empty:
        return 0.0
    cutoff = pd.Timestamp(now or datetime.now()) - pd.DateOffset(months=3)
    recent = frame[frame['date'] >= cutoff]
    if recent.empty:
        return 0.0
    return float(recent['amount'].sum()) / 3


def summarize_expenses(expenses: Sequence[Expense]) -> Dict[str, float]:
    """Count, all-time total and the largest and smallest single expense."""
    if not expenses:
        return {'count': 0, 'total': 0.0, 'max': 0.0, 'min': 0.0}
    amounts = np.array([float(e.amount) for e in expenses])
    return {
        'count': int(amounts.size),
        'total': float(amounts.sum()),
        'max': float(amounts.max()),
        'min': float(amounts.min()),
    }


# ---------------------------------------------------------------------------
# Budgets and goals
# ---------------------------------------------------------------------------


def budget_status_label(percentage: float) -> str:
    if percentage >= BUDGET_OVER_PERCENT:
        return 'over'
    if percentage >= BUDGET_WARNING_PERCENT:
        return 'warning'
    return 'good'


def _period_start(period: str, now: datetime) -> datetime:
    if period == 'daily':
        return start_of_day(now)
    if period == 'weekly':
        return start_of_week(now)
    return start_of_month(now)


def get_budget_status(
    budget: Budget,
    expenses: Sequence[Expense],
    now: Optional[datetime] = None,
) -> Optional[BudgetStatus]:
    """Spending against ``budget`` within its current day, week or month."""
    if budget is None or budget.limit <= 0:
        return None
    current = now or datetime.now()
    frame = expenses_to_frame(expenses)
    spent = 0.0
    if not frame.empty:
        in_category = frame[frame['category'] == budget.category]
        spent = _sum_since(in_category, _period_start(budget.period, current))
    percentage = spent / budget.limit * 100
    return BudgetStatus(
        category=budget.category,
        spent=spent,
        limit=budget.limit,
        percentage=percentage,
        status=budget_status_label(percentage),
        period=budget.period,
    )


def get_budget_statuses(
    budgets: Sequence[Budget],
    expenses: Sequence[Expense],
    now: Optional[datetime] = None,
) -> List[BudgetStatus]:
    statuses = [get_budget_status(b, expenses, now) for b in budgets]
    return [s for s in statuses if s is not None]


def calculate_goal_progress(goals: Sequence[SpendingGoal], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Progress towards each goal and the days left until its deadline."""
    today = start_of_day(now)
    progress = []
    for goal in goals:
        target = goal.target_amount
        percentage = (goal.current_amount / target * 100) if target > 0 else 0.0
        try:
            days_left: Optional[int] = (start_of_day(parse_date(goal.deadline)) - today).days
        except ValueError:
            days_left = None
        progress.append({
            'id': goal.id,
            'name': goal.name,
            'current_amount': goal.current_amount,
            'target_amount': target,
            'progress_percentage': min(percentage, 100.0),
            'remaining_amount': max(target - goal.current_amount, 0.0),
            'days_left': days_left,
            'status': 'Completed' if percentage >= 100 else ('Overdue' if days_left is not None and days_left < 0 else 'In Progress'),
        })
    return progress


# ---------------------------------------------------------------------------
# Dashboard bundle
# ---------------------------------------------------------------------------


class ExpenseAnalytics:
    """Compute every dashboard metric once for a list of expenses."""

    def __init__(self, expenses: Sequence[Expense], now: Optional[datetime] = None):
        self.expenses = list(expenses)
        self.now = now or datetime.now()

    @property
    def totals(self) -> Dict[str, float]:
        return calculate_totals(self.expenses, self.now)

    @property
    def category_totals(self) -> List[CategoryTotal]:
        return get_category_totals(self.expenses)

    @property
    def averages(self) -> Dict[str, float]:
        return calculate_averages(self.expenses)

    @property
    def trend(self) -> List[Dict[str, Any]]:
        return get_spending_trend(self.expenses, 30, self.now)

    @property
    def prediction(self) -> float:
        return predict_next_month_spending(self.expenses, self.now)

    @property
    def last_7_days(self) -> List[Dict[str, Any]]:
        return get_last_7_days(self.expenses, self.now)

    @property
    def stats(self) -> Dict[str, float]:
        return summarize_expenses(self.expenses)

    def summary(self) -> Dict[str, Any]:
        return {
            'totals': self.totals,
            'category_totals': self.category_totals,
            'averages': self.averages,
            'trend': self.trend,
            'prediction': self.prediction,
            'last_7_days': self.last_7_days,
            'stats': self.stats,
        }
