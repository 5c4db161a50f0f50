"""Filtering for the expense list."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

try:
    from .date_utils import parse_date
    from .models import DateRange, Expense, FilterOptions
except ImportError:  # pragma: no cover - fallback for direct execution
    from date_utils import parse_date
    from models import DateRange, Expense, FilterOptions

ALL_CATEGORIES = 'all'


def filter_expenses(expenses: Sequence[Expense], filters: Optional[FilterOptions]) -> List[Expense]:
    """Return the expenses matching every criterion set in ``filters``.

    Unset criteria are ignored, so an empty :class:`FilterOptions` returns
    everything.  Input order is preserved.
    """
    filtered = list(expenses)
    if filters is None:
        return filtered

    if filters.category and filters.category != ALL_CATEGORIES:
        filtered = [e for e in filtered if e.category == filters.category]

    if filters.date_range:
        start = parse_date(filters.date_range.start)
        end = parse_date(filters.date_range.end)
        filtered = [e for e in filtered if _within(e, start, end)]

    if filters.min_amount is not None:
        filtered = [e for e in filtered if e.amount >= filters.min_amount]
    if filters.max_amount is not None:
        filtered = [e for e in filtered if e.amount <= filters.max_amount]

    if filters.search_term:
        term = filters.search_term.lower()
        filtered = [
            e for e in filtered
            if term in e.notes.lower() or term in e.category.lower()
        ]

    if filters.tags:
        wanted = set(filters.tags)
        filtered = [e for e in filtered if wanted.intersection(e.tags)]

    return filtered


def _within(expense: Expense, start, end) -> bool:
    try:
        when = parse_date(expense.date)
    except ValueError:
        return False
    return start <= when <= end


def _parse_amount(raw) -> Optional[float]:
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def build_filter_options(
    category: Optional[str] = None,
    search_term: Optional[str] = None,
    min_amount=None,
    max_amount=None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
) -> FilterOptions:
    """Turn raw form values into :class:`FilterOptions`.

    Empty strings and the ``"all"`` category mean "not set"; amounts that
    do not parse as numbers are ignored.
    """
    date_range = None
    if start_date and end_date:
        date_range = DateRange(start=str(start_date), end=str(end_date))
    tag_list = [t for t in (tags or []) if t]
    return FilterOptions(
        category=category if category and category != ALL_CATEGORIES else None,
        search_term=search_term or None,
        min_amount=_parse_amount(min_amount),
        max_amount=_parse_amount(max_amount),
        date_range=date_range,
        tags=tag_list or None,
    )


def has_active_filters(filters: Optional[FilterOptions]) -> bool:
    if filters is None:
        return False
    return any([
        filters.category and filters.category != ALL_CATEGORIES,
        filters.search_term,
        filters.min_amount is not None,
        filters.max_amount is not None,
        filters.date_range is not None,
        filters.tags,
    ])
