"""Tests for relative and absolute date parsing."""

from datetime import date, timedelta

import pytest
from dateutil.relativedelta import relativedelta
from fintrack.utils.date_parser import get_date_range, parse_date


def test_parse_absolute_dates():
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("15 Jan 2024") == date(2024, 1, 15)


@pytest.mark.parametrize(
    "text,offset",
    [("today", 0), ("Yesterday", -1), (" tomorrow ", 1)],
)
def test_parse_fixed_relative_dates(text, offset):
    assert parse_date(text) == date.today() + timedelta(days=offset)


def test_parse_period_starts():
    today = date.today()
    monday = today - timedelta(days=today.weekday())

    assert parse_date("this month") == today.replace(day=1)
    assert parse_date("last month") == (today - relativedelta(months=1)).replace(day=1)
    assert parse_date("next month") == (today + relativedelta(months=1)).replace(day=1)
    assert parse_date("this year") == date(today.year, 1, 1)
    assert parse_date("last year") == date(today.year - 1, 1, 1)
    assert parse_date("this week") == monday
    assert parse_date("last week") == monday - timedelta(days=7)
    assert parse_date("next week") == monday + timedelta(days=7)


def test_parse_last_weekday_is_strictly_before_today():
    today = date.today()
    name = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")[
        today.weekday()
    ]

    assert parse_date(f"last {name}") == today - timedelta(days=7)


def test_parse_invalid_date():
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("last fortnight")


def test_get_date_range_this_periods_end_today():
    today = date.today()

    assert get_date_range("this-month") == (today.replace(day=1), today)
    assert get_date_range("this-year") == (date(today.year, 1, 1), today)
    assert get_date_range("this-week") == (today - timedelta(days=today.weekday()), today)


def test_get_date_range_last_month_covers_whole_month():
    start, end = get_date_range("last-month")
    first_of_this_month = date.today().replace(day=1)

    assert start == (first_of_this_month - relativedelta(months=1))
    assert end == first_of_this_month - timedelta(days=1)
    assert start.day == 1
    assert (end + timedelta(days=1)).day == 1


def test_get_date_range_last_year():
    year = date.today().year - 1
    assert get_date_range("last-year") == (date(year, 1, 1), date(year, 12, 31))


def test_get_date_range_last_week_is_monday_to_sunday():
    start, end = get_date_range("last-week")

    assert start.weekday() == 0
    assert end.weekday() == 6
    assert end - start == timedelta(days=6)
    assert end < date.today() - timedelta(days=date.today().weekday())


def test_get_date_range_invalid_period():
    with pytest.raises(ValueError, match="Unknown period"):
        get_date_range("next-decade")
