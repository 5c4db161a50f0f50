"""Date parsing, formatting and calendar-period helpers.

Expense dates are stored as local ISO strings (``YYYY-MM-DDTHH:MM``).  The
helpers here turn them into naive local ``datetime`` objects and answer the
"is this in the current day/week/month" questions the dashboard asks.  Every
function that depends on the clock accepts an optional ``now`` so callers
and tests can pin the reference time.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Optional, Union

import pandas as pd

try:
    from .constants import DATE_FORMATS
except ImportError:  # pragma: no cover - fallback for direct execution
    from constants import DATE_FORMATS

DateLike = Union[str, date, datetime, pd.Timestamp]


def parse_date(value: DateLike) -> datetime:
    """Convert an ISO string, ``date`` or ``datetime`` into a naive local datetime."""
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        if value is None or not str(value).strip():
            raise ValueError("Empty date value")
        ts = pd.to_datetime(str(value).strip(), errors='coerce')
        if pd.isna(ts):
            raise ValueError(f"Unable to parse date '{value}'")
        parsed = ts.to_pydatetime()
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def format_date(value: DateLike, include_time: bool = False) -> str:
    """Format a date for display, e.g. ``Oct 19, 2026``."""
    parsed = parse_date(value)
    if include_time:
        return f"{parsed:%b} {parsed.day}, {parsed.year}, {parsed:%I:%M %p}"
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def get_local_datetime(now: Optional[datetime] = None) -> str:
    """Current local time in the ``datetime-local`` input format."""
    current = now or datetime.now()
    return current.strftime(DATE_FORMATS["ISO_WITH_TIME"])


def start_of_day(now: Optional[datetime] = None) -> datetime:
    current = now or datetime.now()
    return datetime(current.year, current.month, current.day)


def start_of_week(now: Optional[datetime] = None) -> datetime:
    """Midnight of the most recent Sunday."""
    today = start_of_day(now)
    days_since_sunday = (today.weekday() + 1) % 7
    return today - timedelta(days=days_since_sunday)


def start_of_month(now: Optional[datetime] = None) -> datetime:
    current = now or datetime.now()
    return datetime(current.year, current.month, 1)


def start_of_year(now: Optional[datetime] = None) -> datetime:
    current = now or datetime.now()
    return datetime(current.year, 1, 1)


def is_today(value: DateLike, now: Optional[datetime] = None) -> bool:
    return parse_date(value).date() == start_of_day(now).date()


def is_this_week(value: DateLike, now: Optional[datetime] = None) -> bool:
    return parse_date(value) >= start_of_week(now)


def is_this_month(value: DateLike, now: Optional[datetime] = None) -> bool:
    parsed = parse_date(value)
    current = now or datetime.now()
    return parsed.month == current.month and parsed.year == current.year


def get_date_range(period: str, now: Optional[datetime] = None) -> Dict[str, datetime]:
    """Return ``{'start', 'end'}`` spanning the trailing week, month or year."""
    end = now or datetime.now()
    offsets = {
        'week': pd.DateOffset(days=7),
        'month': pd.DateOffset(months=1),
        'year': pd.DateOffset(years=1),
    }
    if period not in offsets:
        raise ValueError(f"Unknown period '{period}'. Expected one of: {', '.join(offsets)}")
    start = (pd.Timestamp(end) - offsets[period]).to_pydatetime()
    return {'start': start, 'end': end}
