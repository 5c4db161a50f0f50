"""Plotly visualisation helpers for the expense tracker.

Each function accepts the plain data returned by :mod:`calculations` and
produces an interactive Plotly figure that Streamlit renders via
``st.plotly_chart``.  Empty input yields a placeholder figure titled
"No data to display".
"""

from __future__ import annotations

from typing import Any, Dict, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

try:
    from .calculations import BudgetStatus
    from .config import CURRENCY
    from .constants import COLORS
    from .models import CategoryTotal
except ImportError:  # pragma: no cover - fallback for direct execution
    from calculations import BudgetStatus
    from config import CURRENCY
    from constants import COLORS
    from models import CategoryTotal

STATUS_COLORS = {
    'good': '#10b981',
    'warning': '#f59e0b',
    'over': '#ef4444',
}


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_spending_trend_chart(
    series: Sequence[Dict[str, Any]],
    title: str | None = None,
    currency: str = CURRENCY,
) -> go.Figure:
    """Line chart of a daily spending series.

    Parameters
    ----------
    series : sequence of dict
        Points with ``date`` and ``amount`` keys, as returned by
        :func:`calculations.get_last_7_days` or
        :func:`calculations.get_spending_trend`.
    title : str, optional
        Chart title.  Defaults to "<n>-Day Spending Trend".
    currency : str
        Currency code shown in the hover label.

    Returns
    -------
    plotly.graph_objects.Figure
        Interactive line chart.
    """
    if not series:
        return _empty_figure()
    df = pd.DataFrame(list(series))
    fig = px.line(df, x="date", y="amount", markers=True)
    fig.update_traces(
        line=dict(color=COLORS[0], width=2),
        marker=dict(color=COLORS[0], size=8),
        hovertemplate=f"%{{x}}<br>%{{y:.2f}} {currency}<extra>Amount</extra>",
    )
    fig.update_layout(
        title=title or f"{len(df)}-Day Spending Trend",
        xaxis_title="",
        yaxis_title=f"Amount ({currency})",
        height=300,
    )
    return fig


def create_category_breakdown_chart(
    category_totals: Sequence[CategoryTotal],
    limit: int = 8,
    title: str | None = None,
) -> go.Figure:
    """Pie chart of the largest categories.

    Only the first ``limit`` entries are drawn; ``category_totals`` is
    expected to be sorted by total already.
    """
    if not category_totals:
        return _empty_figure()
    df = pd.DataFrame(
        [{'Category': ct.category, 'Total': ct.total} for ct in list(category_totals)[:limit]]
    )
    fig = px.pie(
        df,
        names="Category",
        values="Total",
        color_discrete_sequence=COLORS,
    )
    fig.update_traces(textinfo="percent+label")
    fig.update_layout(title=title or "Category Breakdown", height=300)
    return fig


def create_budget_progress_chart(statuses: Sequence[BudgetStatus], title: str | None = None) -> go.Figure:
    """Horizontal bars of budget usage, capped at 100 % and coloured by status."""
    if not statuses:
        return _empty_figure()
    df = pd.DataFrame(
        [
            {
                'Category': s.category,
                'Used': min(s.percentage, 100.0),
                'Percentage': s.percentage,
                'Status': s.status,
            }
            for s in statuses
        ]
    )
    fig = go.Figure(
        go.Bar(
            x=df['Used'],
            y=df['Category'],
            orientation='h',
            marker_color=[STATUS_COLORS.get(s, COLORS[0]) for s in df['Status']],
            text=[f"{p:.1f}%" for p in df['Percentage']],
            textposition='auto',
        )
    )
    fig.update_layout(
        title=title or "Budget Usage",
        xaxis=dict(range=[0, 100], title="% of budget used"),
        yaxis_title="",
        height=max(200, 60 * len(df)),
    )
    return fig
