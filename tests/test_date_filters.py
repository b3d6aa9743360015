"""Tests for date_filters module."""
from datetime import date, datetime, timedelta, timezone

import pytest

from bookmark_filters.date_filters import (
    in_date_range,
    matches_date,
    parse_datetime,
)
from bookmark_filters.models import DateFilter


NOW = datetime(2024, 3, 15, 12, 0, 0)


class TestParseDatetime:
    def test_iso_string(self):
        assert parse_datetime("2024-01-15T10:30:00") == datetime(2024, 1, 15, 10, 30)

    def test_date_only_is_midnight(self):
        assert parse_datetime("2024-01-15") == datetime(2024, 1, 15)

    def test_utc_suffix_converted_to_local(self):
        expected = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert parse_datetime("2024-01-15T10:30:00Z") == expected

    def test_date_object(self):
        assert parse_datetime(date(2024, 1, 15)) == datetime(2024, 1, 15)

    def test_epoch_seconds(self):
        assert parse_datetime(0) == datetime.fromtimestamp(0)

    @pytest.mark.parametrize("value", [
        None, "", "   ", "not a date", "2024-13-45", True, [], {},
        "0001-01-01T00:00:00+14:00", "9999-12-31T23:59:59-14:00",
    ])
    def test_unparseable(self, value):
        assert parse_datetime(value) is None


class TestShortcuts:
    def test_today(self):
        today = DateFilter("today")
        assert matches_date(NOW, today, now=NOW)
        assert matches_date(datetime(2024, 3, 15, 0, 0), today, now=NOW)
        assert not matches_date(datetime(2024, 3, 14, 23, 59), today, now=NOW)

    def test_today_excludes_eight_days_ago(self):
        assert not matches_date(NOW - timedelta(days=8), DateFilter("today"), now=NOW)

    def test_yesterday(self):
        yesterday = DateFilter("yesterday")
        assert matches_date(datetime(2024, 3, 14, 0, 0), yesterday, now=NOW)
        assert matches_date(datetime(2024, 3, 14, 23, 59), yesterday, now=NOW)
        assert not matches_date(datetime(2024, 3, 15, 0, 0), yesterday, now=NOW)
        assert not matches_date(datetime(2024, 3, 13, 23, 59), yesterday, now=NOW)

    def test_this_week_is_rolling(self):
        week = DateFilter("this-week")
        assert matches_date(NOW - timedelta(days=6, hours=23), week, now=NOW)
        assert matches_date(NOW - timedelta(days=7), week, now=NOW)
        assert not matches_date(NOW - timedelta(days=7, seconds=1), week, now=NOW)

    def test_this_month(self):
        month = DateFilter("this-month")
        assert matches_date(datetime(2024, 3, 1, 0, 0), month, now=NOW)
        assert not matches_date(datetime(2024, 2, 29, 23, 59), month, now=NOW)

    def test_accepts_dict_filter_and_string_date(self):
        assert matches_date("2024-03-15T08:00:00", {"operator": "today"}, now=NOW)


class TestComparisons:
    def test_after(self):
        after = DateFilter(">", "2024-01-01")
        assert matches_date(datetime(2024, 1, 1, 0, 0, 1), after, now=NOW)
        assert not matches_date(datetime(2024, 1, 1), after, now=NOW)

    def test_before(self):
        before = DateFilter("<", "2024-01-01")
        assert matches_date(datetime(2023, 12, 31, 23, 59), before, now=NOW)
        assert not matches_date(datetime(2024, 1, 1), before, now=NOW)

    def test_same_day(self):
        same_day = DateFilter("=", "2024-01-15")
        assert matches_date(datetime(2024, 1, 15, 0, 0), same_day, now=NOW)
        assert matches_date(datetime(2024, 1, 15, 23, 59, 59), same_day, now=NOW)
        assert not matches_date(datetime(2024, 1, 16), same_day, now=NOW)
        assert not matches_date(datetime(2024, 1, 14, 23, 59), same_day, now=NOW)


class TestNoConstraint:
    @pytest.mark.parametrize("date_filter", [
        None,
        DateFilter("sometime"),
        DateFilter(""),
        DateFilter(">"),
        DateFilter(">", "garbage"),
    ])
    def test_matches_anything(self, date_filter):
        assert matches_date(datetime(1999, 1, 1), date_filter, now=NOW)

    def test_unparseable_record_date_fails_active_filter(self):
        assert not matches_date("not a date", DateFilter("today"), now=NOW)
        assert not matches_date(None, DateFilter(">", "2024-01-01"), now=NOW)

    def test_defaults_to_system_clock(self):
        assert matches_date(datetime.now(), DateFilter("today"))


class TestDateRange:
    def test_closed_interval(self):
        assert in_date_range("2024-01-15", "2024-01-01", "2024-01-31")
        assert in_date_range("2024-01-01T00:00:00", "2024-01-01", "2024-01-31")
        assert not in_date_range("2024-02-01", "2024-01-01", "2024-01-31")
        assert not in_date_range("2023-12-31T23:59:59", "2024-01-01", "2024-01-31")

    def test_date_only_end_covers_whole_day(self):
        assert in_date_range("2024-01-31T18:00:00", "", "2024-01-31")

    def test_timestamp_end_is_exact(self):
        assert in_date_range("2024-01-31T12:00:00", "", "2024-01-31T12:00:00")
        assert not in_date_range("2024-01-31T12:00:01", "", "2024-01-31T12:00:00")

    def test_open_bounds(self):
        assert in_date_range("1990-01-01", "", "2024-01-31")
        assert in_date_range("2090-01-01", "2024-01-01", "")
        assert in_date_range("not a date", "", "")

    def test_unparseable_record_excluded(self):
        assert not in_date_range("not a date", "2024-01-01", "")


class TestCalendarEdges:
    def test_equal_on_last_representable_day(self):
        assert matches_date("9999-12-31T12:00:00", DateFilter("=", "9999-12-31"), now=NOW)
        assert not matches_date("9999-12-30T12:00:00", DateFilter("=", "9999-12-31"), now=NOW)

    def test_range_ending_on_last_representable_day(self):
        assert in_date_range("9999-12-31T23:59:59", "2024-01-01", "9999-12-31")

    def test_out_of_range_aware_record_fails_filter(self):
        assert not matches_date("0001-01-01T00:00:00+14:00", DateFilter("today"), now=NOW)
