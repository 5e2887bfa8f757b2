"""Tests for CLI date filter helpers."""

from datetime import date

import click
import pytest
from click.testing import CliRunner

from fintrack.cli.date_filters import (
    date_range_options,
    pop_period_flags,
    resolve_cli_date_range,
)
from fintrack.utils.date_parser import get_date_range


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_resolve_cli_date_range_rejects_multiple_periods(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date=None,
            end_date=None,
            period_flags={"this-month": True, "last-month": True},
        )

    assert excinfo.value.exit_code == 1
    assert "Only one period option" in capsys.readouterr().err


def test_resolve_cli_date_range_rejects_period_with_start_date(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        resolve_cli_date_range(
            _ctx(),
            start_date="2024-01-01",
            end_date=None,
            period_flags={"this-month": True},
        )

    assert excinfo.value.exit_code == 1
    assert "cannot be combined" in capsys.readouterr().err


def test_resolve_cli_date_range_returns_period_range():
    start, end = resolve_cli_date_range(
        _ctx(), start_date=None, end_date=None, period_flags={"last-year": True}
    )

    assert (start, end) == get_date_range("last-year")


def test_resolve_cli_date_range_explicit_dates_and_default():
    start, end = resolve_cli_date_range(
        _ctx(), start_date="2024-01-02", end_date="2024-01-05", period_flags={}
    )
    assert (start, end) == (date(2024, 1, 2), date(2024, 1, 5))

    default_range = (date(2020, 1, 1), date(2020, 1, 31))
    assert (
        resolve_cli_date_range(
            _ctx(), start_date=None, end_date=None, period_flags={}, default_range=default_range
        )
        == default_range
    )


def test_resolve_cli_date_range_invalid_end_date(capsys):
    with pytest.raises(click.exceptions.Exit):
        resolve_cli_date_range(_ctx(), start_date=None, end_date="not-a-date", period_flags={})

    assert "Invalid end date" in capsys.readouterr().err


def test_date_range_options_decorator():
    seen = {}

    @click.command()
    @date_range_options
    def command(start_date, end_date, **periods):
        seen["start"] = start_date
        seen["flags"] = pop_period_flags(periods)
        seen["left"] = periods

    result = CliRunner().invoke(command, ["--start-date", "2024-03-01", "--last-week"])

    assert result.exit_code == 0, result.output
    assert seen["start"] == "2024-03-01"
    assert seen["flags"]["last-week"] is True
    assert seen["flags"]["this-month"] is False
    assert set(seen["flags"]) == {
        "this-month",
        "this-year",
        "this-week",
        "last-month",
        "last-year",
        "last-week",
    }
    assert seen["left"] == {}
