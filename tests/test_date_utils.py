from datetime import date, datetime, timezone

import pandas as pd
import pytest

from expense_tracker import date_utils


def test_parse_date_accepts_common_inputs() -> None:
    assert date_utils.parse_date('2026-10-19T08:30') == datetime(2026, 10, 19, 8, 30)
    assert date_utils.parse_date('2026-10-19') == datetime(2026, 10, 19)
    assert date_utils.parse_date(date(2026, 10, 19)) == datetime(2026, 10, 19)
    assert date_utils.parse_date(pd.Timestamp('2026-10-19 08:30')) == datetime(2026, 10, 19, 8, 30)


def test_parse_date_converts_aware_values_to_naive_local() -> None:
    parsed = date_utils.parse_date(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))
    assert parsed.tzinfo is None


@pytest.mark.parametrize('value', ['', '   ', None, 'garbage'])
def test_parse_date_rejects_invalid(value) -> None:
    with pytest.raises(ValueError):
        date_utils.parse_date(value)


def test_format_date() -> None:
    assert date_utils.format_date('2026-10-09T14:30') == 'Oct 9, 2026'
    assert date_utils.format_date('2026-10-09T14:30', include_time=True) == 'Oct 9, 2026, 02:30 PM'


def test_get_local_datetime() -> None:
    assert date_utils.get_local_datetime(datetime(2026, 10, 19, 7, 5, 59)) == '2026-10-19T07:05'


def test_period_starts(now) -> None:
    assert date_utils.start_of_day(now) == datetime(2026, 10, 21)
    assert date_utils.start_of_week(now) == datetime(2026, 10, 18)
    assert date_utils.start_of_month(now) == datetime(2026, 10, 1)
    assert date_utils.start_of_year(now) == datetime(2026, 1, 1)


def test_period_predicates(now) -> None:
    assert date_utils.is_today('2026-10-21T23:59', now)
    assert not date_utils.is_today('2026-10-20T23:59', now)
    assert date_utils.is_this_week('2026-10-18T00:00', now)
    assert not date_utils.is_this_week('2026-10-17T23:59', now)
    assert date_utils.is_this_month('2026-10-01', now)
    assert not date_utils.is_this_month('2025-10-21', now)


def test_get_date_range(now) -> None:
    assert date_utils.get_date_range('week', now) == {'start': datetime(2026, 10, 14, 15, 0), 'end': now}
    assert date_utils.get_date_range('month', now)['start'] == datetime(2026, 9, 21, 15, 0)
    assert date_utils.get_date_range('year', now)['start'] == datetime(2025, 10, 21, 15, 0)
    with pytest.raises(ValueError):
        date_utils.get_date_range('decade', now)
