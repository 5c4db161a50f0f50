"""Static values shared by the storage, calculation and UI layers."""

from __future__ import annotations

try:
    from .config import CURRENCY
except ImportError:  # pragma: no cover - fallback for direct execution
    from config import CURRENCY

CATEGORIES = (
    "Food",
    "Coffee",
    "Transport",
    "Gym",
    "Groceries",
    "Shopping",
    "Subscriptions",
    "Entertainment",
    "Health",
    "Education",
    "Gifts",
    "Other",
)

STORAGE_KEYS = {
    "EXPENSES": "finance_tracker_expenses",
    "SETTINGS": "finance_tracker_settings",
    "BUDGETS": "finance_tracker_budgets",
    "GOALS": "finance_tracker_goals",
}

COLORS = [
    "#3b82f6",
    "#10b981",
    "#f59e0b",
    "#ef4444",
    "#8b5cf6",
    "#ec4899",
    "#14b8a6",
    "#f97316",
    "#06b6d4",
    "#84cc16",
    "#f43f5e",
    "#6366f1",
]

# strftime equivalents of the display patterns
DATE_FORMATS = {
    "DISPLAY": "%b %d, %Y",
    "DISPLAY_WITH_TIME": "%b %d, %Y, %I:%M %p",
    "ISO": "%Y-%m-%d",
    "ISO_WITH_TIME": "%Y-%m-%dT%H:%M",
    "CSV": "%Y-%m-%d %H:%M",
}

RECURRING_FREQUENCIES = ("daily", "weekly", "monthly")
BUDGET_PERIODS = ("daily", "weekly", "monthly")
THEMES = ("light", "dark")

BUDGET_WARNING_PERCENT = 80.0
BUDGET_OVER_PERCENT = 100.0

__all__ = [
    "BUDGET_OVER_PERCENT",
    "BUDGET_PERIODS",
    "BUDGET_WARNING_PERCENT",
    "CATEGORIES",
    "COLORS",
    "CURRENCY",
    "DATE_FORMATS",
    "RECURRING_FREQUENCIES",
    "STORAGE_KEYS",
    "THEMES",
]
