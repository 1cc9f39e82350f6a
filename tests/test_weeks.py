"""Tests for planner week arithmetic."""

from datetime import date, datetime, timedelta

import pytest

from tastebook.domain.weeks import (
    format_date_range,
    format_week_start,
    get_monday,
    get_week_range,
    iso_week_number,
    shift_week,
    week_dates,
)


class TestGetMonday:
    def test_every_day_maps_to_its_monday(self):
        monday = date(2026, 10, 19)
        for offset in range(7):
            assert get_monday(monday + timedelta(days=offset)) == monday

    def test_sunday_belongs_to_previous_week(self):
        assert get_monday(date(2026, 10, 18)) == date(2026, 10, 12)

    def test_accepts_strings_and_datetimes(self):
        assert format_week_start("2026-10-21") == "2026-10-19"
        assert format_week_start(datetime(2026, 10, 25, 23, 30)) == "2026-10-19"

    @pytest.mark.parametrize("day", range(1, 32))
    def test_week_start_is_always_a_monday(self, day):
        assert date.fromisoformat(format_week_start(date(2026, 12, day))).weekday() == 0


class TestWeekRange:
    def test_range_spans_seven_days(self):
        assert get_week_range("2026-10-19") == (date(2026, 10, 19), date(2026, 10, 25))

    def test_week_dates(self):
        dates = week_dates("2026-10-19")
        assert dates["monday"] == date(2026, 10, 19)
        assert dates["sunday"] == date(2026, 10, 25)
        assert list(dates) == ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

    def test_shift_week_crosses_year(self):
        assert shift_week("2026-10-19", -1) == "2026-10-12"
        assert shift_week("2026-12-28", 1) == "2027-01-04"

    def test_iso_week_number(self):
        assert iso_week_number(date(2026, 10, 19)) == 43


class TestFormatDateRange:
    def test_same_month(self):
        assert format_date_range(date(2026, 10, 19), date(2026, 10, 25)) == "19 - 25 octubre 2026"

    def test_month_boundary(self):
        assert format_date_range(date(2026, 10, 26), date(2026, 11, 1)) == "26 octubre - 1 noviembre 2026"

    def test_year_boundary(self):
        assert format_date_range(date(2026, 12, 28), date(2027, 1, 3)) == "28 diciembre - 3 enero 2027"
