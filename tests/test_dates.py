"""Tests for date parsing helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from contrib_stats.dates import human_week_start, normalize_timestamp, parse_relative_date, resolve_date


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2020-01-01", "2020-01-01T00:00:00Z"),
        ("2020-02-08", "2020-02-08T00:00:00Z"),
        ("October 8 2019", "2019-10-08T00:00:00Z"),
        ("2019-10-29T15:30:00Z", "2019-10-29T15:30:00Z"),
        ("2019-10-29T15:30:00+02:00", "2019-10-29T13:30:00Z"),
    ],
)
def test_normalize_timestamp(value, expected):
    assert normalize_timestamp(value) == expected


def test_normalize_timestamp_invalid():
    with pytest.raises(ValueError):
        normalize_timestamp("definitely-not-a-date")


def test_human_week_start():
    assert human_week_start(0) == "1970-01-01 00:00:00 UTC"


def test_parse_relative_date_days():
    result = parse_relative_date("7d")
    expected = (datetime.now(timezone.utc) - timedelta(days=7)).strftime("%Y-%m-%d")
    assert result == expected


def test_parse_relative_date_weeks():
    result = parse_relative_date("2w")
    expected = (datetime.now(timezone.utc) - timedelta(weeks=2)).strftime("%Y-%m-%d")
    assert result == expected


def test_parse_relative_date_months():
    result = parse_relative_date("3m")
    expected = (datetime.now(timezone.utc) - timedelta(days=90)).strftime("%Y-%m-%d")
    assert result == expected


def test_parse_relative_date_years():
    result = parse_relative_date("1y")
    expected = (datetime.now(timezone.utc) - timedelta(days=365)).strftime("%Y-%m-%d")
    assert result == expected


def test_parse_relative_date_invalid():
    assert parse_relative_date("abc") is None
    assert parse_relative_date("10x") is None
    assert parse_relative_date("") is None
    assert parse_relative_date("2024-01-01") is None


def test_resolve_date_none():
    assert resolve_date(None) is None


def test_resolve_date_absolute():
    assert resolve_date("2024-01-15") == "2024-01-15"
    assert resolve_date("October 8 2019") == "October 8 2019"


class _LateEveningUTC(datetime):
    @classmethod
    def now(cls, tz=None):
        assert tz is timezone.utc
        return datetime(2020, 3, 1, 23, 30, tzinfo=timezone.utc)


def test_parse_relative_date_counts_from_utc_today(monkeypatch):
    monkeypatch.setattr("contrib_stats.dates.datetime", _LateEveningUTC)
    assert parse_relative_date("1d") == "2020-02-29"
    assert resolve_date("1w") == "2020-02-23"
