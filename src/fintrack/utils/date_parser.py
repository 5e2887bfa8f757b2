"""Date parsing for CLI filters."""

from datetime import date, timedelta

from dateutil import parser as date_parser
from dateutil.relativedelta import MO, relativedelta

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
PERIODS = ("this-month", "this-year", "this-week", "last-month", "last-year", "last-week")


def _start_of(unit: str, today: date) -> date:
    if unit == "month":
        return today.replace(day=1)
    if unit == "year":
        return today.replace(month=1, day=1)
    return today + relativedelta(weekday=MO(-1))


_STEPS = {
    "month": relativedelta(months=1),
    "year": relativedelta(years=1),
    "week": relativedelta(weeks=1),
}


def parse_date(date_str: str) -> date:
    """Parse an absolute or relative date.

    Relative forms are "today", "yesterday", "tomorrow" and
    "last|this|next month|year|week", which resolve to the first day of that
    period (weeks start on Monday). "last <weekday>" is the most recent such
    day before today. Anything else goes through dateutil, e.g.
    "2024-01-15" or "15 Jan 2024".

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    fixed = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in fixed:
        return fixed[date_str]

    which, _, unit = date_str.partition(" ")
    if which in ("last", "this", "next") and unit in _STEPS:
        start = _start_of(unit, today)
        if which == "last":
            return start - _STEPS[unit]
        if which == "next":
            return start + _STEPS[unit]
        return start

    if which == "last" and unit in WEEKDAYS:
        days_ago = (today.weekday() - WEEKDAYS.index(unit)) % 7 or 7
        return today - timedelta(days=days_ago)

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from None


def get_date_range(period: str) -> tuple[date, date]:
    """Return (start, end) of a named period, both inclusive.

    "this-*" periods end today; "last-*" periods cover the whole previous
    month, year or Monday-to-Sunday week.

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    if period not in PERIODS:
        raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")

    today = date.today()
    which, unit = period.split("-")
    start = _start_of(unit, today)
    if which == "this":
        return start, today
    previous = start - _STEPS[unit]
    return previous, start - timedelta(days=1)
