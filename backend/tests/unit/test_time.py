"""UTC helpers"""
from datetime import datetime, timezone, timedelta

import pytest

from mtbm_api.utils.time import (
    utc_now, format_iso, parse_iso, minutes_between, month_window, add_minutes
)


def test_utc_now_is_naive_with_millisecond_precision():
    now = utc_now()
    assert now.tzinfo is None
    assert now.microsecond % 1000 == 0


def test_format_iso_appends_z():
    assert format_iso(datetime(2026, 10, 5, 8, 30, 0, 123000)) == "2026-10-05T08:30:00.123Z"


def test_format_iso_converts_aware_values():
    aware = datetime(2026, 10, 5, 10, 0, tzinfo=timezone(timedelta(hours=2)))
    assert format_iso(aware) == "2026-10-05T08:00:00.000Z"


def test_parse_iso_normalises_to_naive_utc():
    assert parse_iso("2026-10-05T08:30:00.123Z") == datetime(2026, 10, 5, 8, 30, 0, 123000)
    assert parse_iso("2026-10-05T10:30:00+02:00") == datetime(2026, 10, 5, 8, 30)


def test_parse_iso_rejects_garbage():
    with pytest.raises(ValueError):
        parse_iso("yesterday-ish")


def test_minutes_between():
    start = datetime(2026, 10, 5, 8, 0)
    assert minutes_between(start, add_minutes(start, 90)) == 90


@pytest.mark.parametrize("year,month_index,start,end", [
    (2026, 0, datetime(2026, 1, 1), datetime(2026, 2, 1)),
    (2026, 9, datetime(2026, 10, 1), datetime(2026, 11, 1)),
    (2026, 11, datetime(2026, 12, 1), datetime(2027, 1, 1)),
])
def test_month_window_is_half_open_calendar_month(year, month_index, start, end):
    assert month_window(year, month_index) == (start, end)

