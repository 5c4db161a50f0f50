from expense_tracker.calculations import BudgetStatus, get_category_totals, get_last_7_days
from expense_tracker.visualization import (
    STATUS_COLORS,
    create_budget_progress_chart,
    create_category_breakdown_chart,
    create_spending_trend_chart,
)


def test_empty_inputs_give_placeholder():
    for fig in (
        create_spending_trend_chart([]),
        create_category_breakdown_chart([]),
        create_budget_progress_chart([]),
    ):
        assert fig.layout.title.text == "No data to display"


def test_spending_trend_chart(sample_expenses, now):
    fig = create_spending_trend_chart(get_last_7_days(sample_expenses, now), currency='USD')
    assert fig.layout.title.text == "7-Day Spending Trend"
    assert fig.layout.yaxis.title.text == "Amount (USD)"
    assert list(fig.data[0].y) == [0.0, 0.0, 30.0, 20.0, 0.0, 0.0, 10.0]


def test_category_breakdown_respects_limit(sample_expenses):
    fig = create_category_breakdown_chart(get_category_totals(sample_expenses), limit=2)
    assert list(fig.data[0].labels) == ['Food', 'Transport']


def test_budget_chart_caps_bars_and_colours_by_status():
    statuses = [
        BudgetStatus('Food', 150.0, 100.0, 150.0, 'over'),
        BudgetStatus('Coffee', 10.0, 100.0, 10.0, 'good'),
    ]
    fig = create_budget_progress_chart(statuses)
    bar = fig.data[0]
    assert list(bar.x) == [100.0, 10.0]
    assert list(bar.text) == ['150.0%', '10.0%']
    assert list(bar.marker.color) == [STATUS_COLORS['over'], STATUS_COLORS['good']]
