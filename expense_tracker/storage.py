"""Persistence, export and import of expenses and settings.

Everything is kept as JSON documents in the local key-value store
(:mod:`db`).  Reads never raise: a missing key or a corrupt document
degrades to an empty default and is logged.  Writes return ``True`` on
success and ``False`` after logging the failure.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import sqlite3
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

try:
    from . import db
    from .constants import DATE_FORMATS, STORAGE_KEYS
    from .date_utils import parse_date
    from .forms import generate_expense_id, parse_tags
    from .models import AppSettings, Budget, Expense, SpendingGoal
except ImportError:  # pragma: no cover - fallback for direct execution
    import db
    from constants import DATE_FORMATS, STORAGE_KEYS
    from date_utils import parse_date
    from forms import generate_expense_id, parse_tags
    from models import AppSettings, Budget, Expense, SpendingGoal

logger = logging.getLogger(__name__)

CSV_HEADERS = ["Date", "Amount", "Category", "Notes", "Tags"]


# ---------------------------------------------------------------------------
# Raw JSON documents
# ---------------------------------------------------------------------------


def _load_json(key: str) -> Any:
    try:
        raw = db.get_item(key)
    except sqlite3.Error:
        logger.exception("Failed to read '%s' from local storage", key)
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring corrupt JSON stored under '%s'", key)
        return None


def _save_json(key: str, payload: Any) -> bool:
    try:
        db.set_item(key, json.dumps(payload))
    except (sqlite3.Error, TypeError, ValueError):
        logger.exception("Failed to save '%s'", key)
        return False
    return True


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def get_expenses() -> List[Expense]:
    """Load stored expenses, newest first as they were saved."""
    data = _load_json(STORAGE_KEYS["EXPENSES"])
    if not isinstance(data, list):
        return []
    expenses: List[Expense] = []
    for item in data:
        try:
            expenses.append(Expense.from_dict(item))
        except ValueError as exc:
            logger.warning("Skipping invalid stored expense: %s", exc)
    return expenses


def save_expenses(expenses: Sequence[Expense]) -> bool:
    return _save_json(STORAGE_KEYS["EXPENSES"], [e.to_dict() for e in expenses])


def add_expense(expense: Expense) -> bool:
    expenses = get_expenses()
    expenses.insert(0, expense)
    return save_expenses(expenses)


def update_expense(expense_id: str, updates: Union[Expense, Dict[str, Any]]) -> bool:
    """Merge ``updates`` into the stored expense with ``expense_id``.

    ``updates`` may be a full :class:`Expense` or a dict of attribute names.
    Returns False when no expense has that id.
    """
    expenses = get_expenses()
    for idx, current in enumerate(expenses):
        if current.id != expense_id:
            continue
        if isinstance(updates, Expense):
            changes = {k: v for k, v in vars(updates).items() if k != 'id'}
        else:
            changes = dict(updates)
        expenses[idx] = current.merged(changes)
        return save_expenses(expenses)
    return False


def delete_expense(expense_id: str) -> bool:
    expenses = get_expenses()
    remaining = [e for e in expenses if e.id != expense_id]
    if len(remaining) == len(expenses):
        return False
    return save_expenses(remaining)


# ---------------------------------------------------------------------------
# Settings, budgets and goals
# ---------------------------------------------------------------------------


def get_settings() -> Optional[AppSettings]:
    data = _load_json(STORAGE_KEYS["SETTINGS"])
    if data is None:
        return None
    try:
        return AppSettings.from_dict(data)
    except ValueError as exc:
        logger.warning("Ignoring invalid stored settings: %s", exc)
        return None


def save_settings(settings: AppSettings) -> bool:
    return _save_json(STORAGE_KEYS["SETTINGS"], settings.to_dict())


def _settings_or_default() -> AppSettings:
    return get_settings() or AppSettings()


def get_budgets() -> List[Budget]:
    return _settings_or_default().budgets


def save_budgets(budgets: Sequence[Budget]) -> bool:
    settings = _settings_or_default()
    settings.budgets = list(budgets)
    return save_settings(settings)


def set_budget(budget: Budget) -> bool:
    """Add a budget, replacing any existing budget for the same category."""
    budgets = [b for b in get_budgets() if b.category != budget.category]
    budgets.append(budget)
    return save_budgets(budgets)


def remove_budget(category: str) -> bool:
    return save_budgets([b for b in get_budgets() if b.category != category])


def get_goals() -> List[SpendingGoal]:
    return _settings_or_default().goals


def save_goals(goals: Sequence[SpendingGoal]) -> bool:
    settings = _settings_or_default()
    settings.goals = list(goals)
    return save_settings(settings)


def set_theme(theme: str) -> bool:
    settings = _settings_or_default()
    settings.theme = theme
    return save_settings(settings)


# ---------------------------------------------------------------------------
# JSON backup
# ---------------------------------------------------------------------------


def export_data() -> str:
    settings = get_settings()
    payload = {
        'expenses': [e.to_dict() for e in get_expenses()],
        'settings': settings.to_dict() if settings else None,
    }
    return json.dumps(payload, indent=2)


def import_data(json_data: str) -> bool:
    """Replace stored expenses and/or settings from a JSON backup.

    A key that is present replaces the stored value, so an empty
    ``expenses`` list clears the stored expenses.  Nothing is written
    unless every record in the backup is valid.
    """
    try:
        data = json.loads(json_data)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Import failed: payload is not valid JSON")
        return False
    if not isinstance(data, dict):
        logger.warning("Import failed: expected a JSON object at the top level")
        return False

    expenses: Optional[List[Expense]] = None
    settings: Optional[AppSettings] = None
    try:
        if data.get('expenses') is not None:
            if not isinstance(data['expenses'], list):
                raise ValueError("'expenses' must be a list")
            expenses = [Expense.from_dict(item) for item in data['expenses']]
        if data.get('settings') is not None:
            settings = AppSettings.from_dict(data['settings'])
    except ValueError as exc:
        logger.warning("Import failed: %s", exc)
        return False

    ok = True
    if expenses is not None:
        ok = save_expenses(expenses) and ok
    if settings is not None:
        ok = save_settings(settings) and ok
    if ok:
        logger.info(
            "Imported %d expenses%s",
            len(expenses or []),
            " and settings" if settings is not None else "",
        )
    return ok


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


def _format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))


def _format_csv_date(value: str) -> str:
    try:
        return parse_date(value).strftime(DATE_FORMATS["CSV"])
    except ValueError:
        return value


def export_to_csv(expenses: Sequence[Expense]) -> str:
    """Render expenses as CSV with every data cell quoted."""
    frame = pd.DataFrame(
        [
            [
                _format_csv_date(e.date),
                _format_amount(e.amount),
                e.category,
                e.notes,
                ";".join(e.tags),
            ]
            for e in expenses
        ],
        columns=CSV_HEADERS,
    )
    header = ",".join(CSV_HEADERS)
    if frame.empty:
        return header
    body = frame.to_csv(index=False, header=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return header + "\n" + body.rstrip("\n")


def import_from_csv(text: str) -> List[Expense]:
    """Read a CSV produced by :func:`export_to_csv` into new expenses.

    Rows with an unparsable date or a non-positive amount are skipped.
    Raises ``ValueError`` if a required column is missing.
    """
    frame = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    frame.columns = [str(c).strip() for c in frame.columns]
    missing = [c for c in ("Date", "Amount", "Category") if c not in frame.columns]
    if missing:
        raise ValueError(f"CSV is missing required columns: {', '.join(missing)}")

    amounts = pd.to_numeric(frame["Amount"].str.strip(), errors="coerce")
    expenses: List[Expense] = []
    skipped = 0
    for idx, row in frame.iterrows():
        amount = amounts.at[idx]
        if pd.isna(amount) or amount <= 0:
            skipped += 1
            continue
        try:
            when = parse_date(row["Date"])
        except ValueError:
            skipped += 1
            continue
        expenses.append(Expense(
            id=generate_expense_id(),
            amount=float(amount),
            date=when.strftime(DATE_FORMATS["ISO_WITH_TIME"]),
            category=row["Category"].strip() or "Other",
            notes=row.get("Notes", ""),
            tags=parse_tags(row.get("Tags", "").replace(";", ",")),
        ))
    if skipped:
        logger.warning("Skipped %d CSV rows with invalid date or amount", skipped)
    return expenses


# ---------------------------------------------------------------------------
# Housekeeping
# ---------------------------------------------------------------------------


def clear_all_data() -> None:
    for key in STORAGE_KEYS.values():
        db.remove_item(key)
    logger.info("Cleared all stored data")


def export_filename(extension: str, now: Optional[datetime] = None) -> str:
    current = now or datetime.now()
    return f"finance-tracker-{current.strftime(DATE_FORMATS['ISO'])}.{extension.lstrip('.')}"
