"""Tests for the summary service."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from fintrack.domain.currency import CurrencyService
from fintrack.domain.entities import TransactionType
from fintrack.domain.summary import SummaryService


class StaticRates(CurrencyService):
    def get_rates(self):
        return {"USD": Decimal("1"), "EUR": Decimal("0.5"), "UAH": Decimal("40")}


@pytest.fixture
def summary_service(temp_db):
    return SummaryService(temp_db, currency_service=StaticRates())


@pytest.fixture
def ledger(account_service, transaction_service, default_categories):
    uah = account_service.create_account("Mono", "Monobank", "UAH")
    eur = account_service.create_account("Trustee", "Trustee", "EUR")

    def add(account_id, day, amount, ttype, category=None):
        return transaction_service.create_transaction(
            account_id=account_id,
            date=datetime(2025, 11, day, 12, 0),
            amount=Decimal(amount),
            transaction_type=ttype,
            category_id=default_categories[category].id if category else None,
        )

    add(uah, 1, "40000", TransactionType.INCOME, "Salary")
    add(uah, 2, "400", TransactionType.EXPENSE, "Products")
    add(eur, 3, "10", TransactionType.EXPENSE, "Products")
    add(eur, 4, "5", TransactionType.EXPENSE)
    add(uah, 5, "4000", TransactionType.EXPENSE, "Transfer Out")
    add(eur, 5, "50", TransactionType.INCOME, "Transfer In")
    return uah, eur


def test_totals_convert_to_one_currency(summary_service, ledger):
    totals = summary_service.totals(currency="usd")

    assert totals.currency == "USD"
    assert totals.transaction_count == 4
    assert totals.income == Decimal("1000.00")
    # 400 UAH + 10 EUR + 5 EUR
    assert totals.expense == Decimal("40.00")
    assert totals.net == Decimal("960.00")


def test_category_breakdown(summary_service, ledger):
    totals = summary_service.totals(currency="UAH")

    breakdown = {(c.name, c.type): (c.total, c.count) for c in totals.categories}
    assert breakdown == {
        ("Salary", TransactionType.INCOME): (Decimal("40000.00"), 1),
        ("Products", TransactionType.EXPENSE): (Decimal("1200.00"), 2),
        ("Uncategorized", TransactionType.EXPENSE): (Decimal("400.00"), 1),
    }
    assert [c.name for c in totals.categories if c.type is TransactionType.EXPENSE] == [
        "Products",
        "Uncategorized",
    ]


def test_transfers_can_be_included(summary_service, ledger):
    totals = summary_service.totals(currency="UAH", include_transfers=True)

    assert totals.transaction_count == 6
    names = {c.name for c in totals.categories}
    assert {"Transfer In", "Transfer Out"} <= names


def test_date_filter(summary_service, ledger):
    totals = summary_service.totals(
        currency="UAH", start_date=date(2025, 11, 2), end_date=date(2025, 11, 3)
    )

    assert totals.transaction_count == 2
    assert totals.income == Decimal("0")
    assert totals.expense == Decimal("1200.00")


def test_empty_ledger(summary_service):
    totals = summary_service.totals()
    assert totals.transaction_count == 0
    assert totals.categories == []
