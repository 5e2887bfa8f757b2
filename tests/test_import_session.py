"""Tests for the import session value object."""

from datetime import datetime
from decimal import Decimal

import pytest
from fintrack.domain.entities import ParsedTransaction, TransactionType
from fintrack.domain.errors import ValidationError
from fintrack.domain.import_session import ImportSession, ImportStage, PreviewRow
from fintrack.parsers.base import BankId, SourceAccount


def _session(bank=BankId.MONOBANK, count=3):
    rows = [
        PreviewRow(
            index=i,
            parsed=ParsedTransaction(
                date=datetime(2025, 11, i + 1, 10, 30),
                description=f"Shop {i}",
                amount=Decimal("10.50") * (i + 1),
                type=TransactionType.EXPENSE,
                currency="UAH",
                hash=f"hash{i}",
                account_name="Checking" if bank is BankId.QIF else None,
            ),
        )
        for i in range(count)
    ]
    return ImportSession(
        bank=bank, file_name="report.csv", account_id=1, stage=ImportStage.PARSED, rows=rows
    )


def test_rows_start_selected():
    session = _session()
    assert len(session.selected_rows()) == 3


def test_selection_changes():
    session = _session()

    session.deselect(1)
    assert [r.index for r in session.selected_rows()] == [0, 2]

    session.toggle(1)
    session.toggle(2)
    assert [r.index for r in session.selected_rows()] == [0, 1]

    session.deselect_all()
    assert session.selected_rows() == []

    session.select_all()
    assert len(session.selected_rows()) == 3


def test_unknown_row_raises():
    with pytest.raises(ValidationError, match="Row 5 does not exist"):
        _session().select(5)


def test_edit_keeps_hash():
    session = _session()

    row = session.edit(0, description="  Corner shop ", amount=Decimal("99.99"), currency="eur")

    assert row.parsed.description == "Corner shop"
    assert row.parsed.amount == Decimal("99.99")
    assert row.parsed.currency == "EUR"
    assert row.parsed.hash == "hash0"


def test_edit_type():
    row = _session().edit(0, transaction_type="income")
    assert row.parsed.type == TransactionType.INCOME


def test_edit_rejects_invalid_values():
    session = _session()

    with pytest.raises(ValidationError, match="Invalid currency code"):
        session.edit(0, currency="EURO")
    with pytest.raises(ValidationError, match="non-negative"):
        session.edit(0, amount=Decimal("-1"))
    with pytest.raises(ValidationError, match="Invalid amount"):
        session.edit(0, amount="12,x")
    with pytest.raises(ValidationError, match="Invalid amount"):
        session.edit(0, amount="NaN")
    with pytest.raises(ValidationError, match="Invalid transaction type"):
        session.edit(0, transaction_type="refund")
    assert session.rows[0].parsed.amount == Decimal("10.50")
    assert session.rows[0].parsed.type == TransactionType.EXPENSE


def test_category_edit_clears_auto_flag():
    session = _session()
    session.rows[0].category_id = 7
    session.rows[0].auto_category = True

    session.edit(0, description="Other text")
    assert session.rows[0].auto_category is True

    session.edit(0, category_id=None)
    assert session.rows[0].category_id is None
    assert session.rows[0].auto_category is False


def test_source_and_multi_account():
    assert _session().source.value == "monobank"
    assert not _session().is_multi_account
    assert _session(BankId.QIF).source.value == "homebank-qif"
    assert _session(BankId.QIF).is_multi_account


def test_json_round_trip_preserves_choices():
    session = _session(BankId.QIF)
    session.source_accounts = [SourceAccount("Checking", "Bank", 3)]
    session.mappings = {"Checking": 4}
    session.stage = ImportStage.MAPPED
    session.deselect(2)
    session.rows[1].category_id = 5
    session.rows[1].auto_category = True

    restored = ImportSession.from_json(session.to_json())

    assert restored == session


def test_from_json_rejects_garbage():
    with pytest.raises(ValidationError, match="Invalid import session file"):
        ImportSession.from_json("not json")
    with pytest.raises(ValidationError, match="expected an object"):
        ImportSession.from_json("[1, 2]")
    with pytest.raises(ValidationError, match="Invalid import session data"):
        ImportSession.from_json('{"bank": "revolut", "file_name": "x"}')
