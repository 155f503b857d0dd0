from datetime import datetime, timedelta, timezone

import pytest

from civic_requests.common.dates import month_bucket, month_key, month_label, parse_date, whole_hours_between

UTC = timezone.utc


def test_parse_iso_with_milliseconds_and_utc_marker():
    assert parse_date("2024-03-04T05:06:07.890Z") == datetime(2024, 3, 4, 5, 6, 7, 890000, tzinfo=UTC)


def test_parse_us_date_with_twelve_hour_clock():
    assert parse_date("01/05/2024 10:00:00 PM") == datetime(2024, 1, 5, 22, 0, tzinfo=UTC)
    assert parse_date("01/05/2024 12:15:00 AM") == datetime(2024, 1, 5, 0, 15, tzinfo=UTC)


def test_parse_us_date_is_month_first():
    assert parse_date("02/03/2024") == datetime(2024, 2, 3, tzinfo=UTC)


def test_parse_iso_date_only():
    assert parse_date("2024-01-01") == datetime(2024, 1, 1, tzinfo=UTC)


def test_parse_falls_back_to_generic_parser():
    assert parse_date("March 5, 2024 14:30") == datetime(2024, 3, 5, 14, 30, tzinfo=UTC)


def test_parse_keeps_explicit_offsets():
    parsed = parse_date("2024-01-31T23:30:00+05:00")
    assert parsed.utcoffset() == timedelta(hours=5)
    assert month_bucket(parsed) == (2024, 1)


@pytest.mark.parametrize(
    "raw",
    [None, "", "   ", "not a date", "13/45/2024", "2024-02-30", True, "%%%", "\x00", "2024-01-01T00:00:00+99:00"],
)
def test_parse_returns_none_for_unusable_input(raw):
    assert parse_date(raw) is None


@pytest.mark.parametrize(
    "raw",
    ["99999999999999999999", "0000-00-00", "12/31/9999 11:59:59 PM", "-1", "1e400", "T", "2024-13-01", "  \t\n", "2024-01-01T00:00:00-24:00"],
)
def test_parse_never_raises(raw):
    result = parse_date(raw)
    assert result is None or isinstance(result, datetime)


def test_parse_accepts_datetime_instances():
    naive = datetime(2024, 1, 1, 8)
    assert parse_date(naive) == datetime(2024, 1, 1, 8, tzinfo=UTC)


def test_whole_hours_truncates_toward_zero():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    assert whole_hours_between(start, start + timedelta(hours=4, minutes=59)) == 4
    assert whole_hours_between(start, start - timedelta(hours=2)) == -2


def test_month_key_and_label():
    assert month_key((2024, 3)) == "2024-03"
    assert month_label((2024, 3)) == "Mar 24"
