"""Tests for the statement format parsers."""

from datetime import datetime
from decimal import Decimal

import pytest
from fintrack.domain.entities import TransactionType
from fintrack.domain.errors import StatementParseError, UnsupportedFileError
from fintrack.parsers.base import BankId
from fintrack.parsers.hashing import content_hash, qif_hash
from fintrack.parsers.monobank import MonobankParser
from fintrack.parsers.privat import PrivatParser
from fintrack.parsers.qif import QIFParser, parse_qif_date, transfer_target
from fintrack.parsers.registry import bank_for_file, get_parser, validate_extension
from fintrack.parsers.trustee import TrusteeParser


class TestTrusteeParser:
    def test_parse_single_and_wrapped_rows(self, fixtures_dir):
        result = TrusteeParser().parse_text((fixtures_dir / "trustee.txt").read_text())

        assert len(result.transactions) == 3
        first, wrapped, top_up = result.transactions

        assert first.date == datetime(2025, 11, 1, 15, 41)
        assert first.description == "147 VELMART 31 KIEV UKR"
        assert first.amount == Decimal("2.18")
        assert first.type == TransactionType.EXPENSE
        assert first.currency == "EUR"

        assert wrapped.description == "BOLT.EU/O/2511020910 RIDE TALLINN EST"
        assert wrapped.amount == Decimal("4.50")

        assert top_up.type == TransactionType.INCOME
        assert top_up.amount == Decimal("5.00")

    def test_rows_after_footer_are_ignored(self, fixtures_dir):
        result = TrusteeParser().parse_text((fixtures_dir / "trustee.txt").read_text())
        assert all("FOOTER" not in t.description for t in result.transactions)

    def test_account_info(self, fixtures_dir):
        result = TrusteeParser().parse_text((fixtures_dir / "trustee.txt").read_text())
        assert result.account_info == {
            "period": "2025.11.01 - 2025.11.30",
            "card_number": "****1234",
        }

    def test_hash_matches_content(self, fixtures_dir):
        first = TrusteeParser().parse_text((fixtures_dir / "trustee.txt").read_text()).transactions[0]
        assert first.hash == content_hash(first.date, first.description, first.amount, "EUR")

    def test_missing_table_raises(self):
        with pytest.raises(StatementParseError, match="Transaction table not found"):
            TrusteeParser().parse_text("Some unrelated document\n2025.11.01, 10:00Shop -1.00 EUR")

    def test_table_without_rows_raises(self):
        with pytest.raises(StatementParseError, match=r"\[trustee\] No transactions found"):
            TrusteeParser().parse_text("Date and time of\noperation\nnothing here")


class TestPrivatParser:
    def test_parse_blocks(self, fixtures_dir):
        result = PrivatParser().parse_text((fixtures_dir / "privat.txt").read_text())

        assert len(result.transactions) == 3
        metro, rent, transfer = result.transactions

        assert metro.date == datetime(2025, 11, 22, 20, 35)
        assert metro.description == "KYIVSKYI METROPOLITEN, KYIV"
        assert metro.amount == Decimal("8.00")
        assert metro.type == TransactionType.EXPENSE
        assert metro.currency == "UAH"

        assert rent.description == "Rent payment"
        assert rent.amount == Decimal("1250.50")

        assert transfer.description == "Transfer from card"
        assert transfer.amount == Decimal("1200.00")
        assert transfer.type == TransactionType.INCOME

    def test_account_info(self, fixtures_dir):
        result = PrivatParser().parse_text((fixtures_dir / "privat.txt").read_text())
        assert result.account_info["card_number"] == "545708******2220"
        assert result.account_info["period"] == "01.11.2025"

    def test_trailing_comma_is_stripped(self):
        text = "01.11.2025\n10:00\nSILPO,\n-100,00\nUAH"
        result = PrivatParser().parse_text(text)
        assert result.transactions[0].description == "SILPO"

    def test_block_without_currency_is_skipped(self):
        text = "01.11.2025\n10:00\nATB\n-50,00\nUAH\n02.11.2025\n11:00\nSILPO\n-100,00"
        result = PrivatParser().parse_text(text)

        assert len(result.transactions) == 1
        assert result.transactions[0].description == "ATB"

    def test_no_rows_raises(self):
        with pytest.raises(StatementParseError):
            PrivatParser().parse_text("PrivatBank\nempty statement")


class TestMonobankParser:
    def test_parse_export(self, fixtures_dir):
        result = MonobankParser().parse((fixtures_dir / "monobank.csv").read_bytes())

        assert len(result.transactions) == 10
        silpo = result.transactions[0]
        assert silpo.date == datetime(2025, 11, 4, 17, 15, 38)
        assert silpo.description == "Silpo"
        assert silpo.amount == Decimal("318.94")
        assert silpo.type == TransactionType.EXPENSE
        assert silpo.currency == "UAH"

        salary = result.transactions[3]
        assert salary.type == TransactionType.INCOME
        assert salary.amount == Decimal("25000.00")

    def test_uses_card_currency_amount(self, fixtures_dir):
        netflix = MonobankParser().parse((fixtures_dir / "monobank.csv").read_bytes()).transactions[4]
        assert netflix.amount == Decimal("249.00")
        assert netflix.currency == "UAH"

    def test_hashes_are_unique_per_row(self, fixtures_dir):
        result = MonobankParser().parse((fixtures_dir / "monobank.csv").read_bytes())
        assert len({t.hash for t in result.transactions}) == 10

    def test_bad_rows_are_skipped(self, fixtures_dir):
        result = MonobankParser().parse((fixtures_dir / "monobank_partial.csv").read_bytes())

        assert [t.description for t in result.transactions] == ["Silpo"]

    def test_handles_byte_order_mark(self, fixtures_dir):
        data = b"\xef\xbb\xbf" + (fixtures_dir / "monobank.csv").read_bytes()
        assert len(MonobankParser().parse(data).transactions) == 10

    def test_missing_columns_raise(self, fixtures_dir):
        with pytest.raises(StatementParseError, match="Missing required columns"):
            MonobankParser().parse((fixtures_dir / "no_columns.csv").read_bytes())

    def test_header_only_raises(self):
        header = b'"Date and time",Description,"Card currency amount, (UAH)"\n'
        with pytest.raises(StatementParseError, match="No transactions found"):
            MonobankParser().parse(header)


class TestQIFParser:
    def test_groups_records_by_account(self, fixtures_dir):
        result = QIFParser().parse((fixtures_dir / "sample.qif").read_bytes())

        assert [(a.name, a.type, a.transaction_count) for a in result.accounts] == [
            ("Checking", "Bank", 3),
            ("Savings", "Bank", 1),
        ]
        assert [t.account_name for t in result.transactions] == [
            "Checking",
            "Checking",
            "Checking",
            "Savings",
        ]

    def test_record_fields(self, fixtures_dir):
        groceries, transfer, salary, _ = QIFParser().parse(
            (fixtures_dir / "sample.qif").read_bytes()
        ).transactions

        assert groceries.date == datetime(2025, 11, 1, 12, 0)
        assert groceries.description == "Weekly groceries"
        assert groceries.payee == "Supermarket"
        assert groceries.category == "Products"
        assert groceries.amount == Decimal("500.00")
        assert groceries.type == TransactionType.EXPENSE

        assert transfer.is_transfer
        assert transfer.transfer_account == "Savings"
        assert transfer.category is None
        assert transfer.memo is None
        assert transfer.description == "Transfer"

        assert salary.type == TransactionType.INCOME
        assert not salary.is_transfer

    def test_hash_is_scoped_by_account(self, fixtures_dir):
        groceries = QIFParser().parse((fixtures_dir / "sample.qif").read_bytes()).transactions[0]

        assert groceries.hash == qif_hash(
            "Checking", groceries.date, Decimal("-500.00"), "Weekly groceries"
        )
        assert groceries.hash.startswith("qif-")
        assert groceries.hash != qif_hash(
            "Savings", groceries.date, Decimal("-500.00"), "Weekly groceries"
        )

    def test_reparse_yields_identical_hashes(self, fixtures_dir):
        data = (fixtures_dir / "sample.qif").read_bytes()
        first = [t.hash for t in QIFParser().parse(data).transactions]
        second = [t.hash for t in QIFParser().parse(data).transactions]

        assert first == second
        assert len(set(first)) == len(first)

    def test_without_account_header_uses_default_account(self):
        text = "!Type:Cash\nD01.11.2025\nU-20.00\nPKiosk\n^\n"
        result = QIFParser().parse_text(text)

        assert result.accounts[0].name == "Default"
        assert result.transactions[0].description == "Kiosk"
        assert result.transactions[0].date == datetime(2025, 11, 1, 12, 0)

    def test_record_without_text_gets_placeholder(self):
        result = QIFParser().parse_text("!Type:Bank\nD2025/11/01\nT10.00\n^\n")
        assert result.transactions[0].description == "No description"

    def test_unreadable_record_is_skipped(self):
        text = "!Type:Bank\nD31/31/2025\nT-1.00\n^\nD2025/11/02\nT-2.00\nPShop\n^\n"
        result = QIFParser().parse_text(text)
        assert [t.description for t in result.transactions] == ["Shop"]

    def test_file_without_transactions_raises(self):
        with pytest.raises(StatementParseError, match="No accounts with transactions found"):
            QIFParser().parse_text("!Account\nNEmpty\nTBank\n^\n")

    def test_latin1_fallback(self):
        data = "!Type:Bank\nD2025/11/01\nT-1.00\nPCaf\xe9\n^\n".encode("latin-1")
        assert QIFParser().parse(data).transactions[0].description == "Caf\xe9"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2025/11/03", datetime(2025, 11, 3, 12)),
            ("11/03/2025", datetime(2025, 11, 3, 12)),
            ("03.11.2025", datetime(2025, 11, 3, 12)),
        ],
    )
    def test_parse_qif_date(self, value, expected):
        assert parse_qif_date(value) == expected

    def test_transfer_target(self):
        assert transfer_target("[Savings]") == "Savings"
        assert transfer_target("Products") is None
        assert transfer_target("[]") == ""


class TestRegistry:
    def test_bank_for_file(self):
        assert bank_for_file("report.CSV") == BankId.MONOBANK
        assert bank_for_file("export.qif") == BankId.QIF
        assert bank_for_file("statement.pdf") is None

    def test_get_parser(self):
        assert isinstance(get_parser("privat"), PrivatParser)
        assert isinstance(get_parser(BankId.QIF), QIFParser)
        with pytest.raises(UnsupportedFileError, match="Unknown bank"):
            get_parser("revolut")

    def test_validate_extension(self):
        validate_extension(BankId.TRUSTEE, "statement.pdf")
        with pytest.raises(UnsupportedFileError, match="not supported for monobank"):
            validate_extension(BankId.MONOBANK, "statement.pdf")

    def test_qif_bank_maps_to_homebank_source(self):
        assert BankId.QIF.source.value == "homebank-qif"
        assert BankId.PRIVAT.source.value == "privat"
