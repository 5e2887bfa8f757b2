"""HomeBank QIF (Quicken Interchange Format) parser.

Tags understood::

    !Account        account header, followed by N (name) and T (type)
    !Type:<kind>    start of the transaction list of the current account
    D               date (YYYY/MM/DD, MM/DD/YYYY or DD.MM.YYYY)
    T / U           signed amount, negative is an expense
    P               payee
    M               memo
    L               category, or [AccountName] for a transfer
    ^               end of record
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fintrack.domain.entities import ParsedTransaction, TransactionType
from fintrack.domain.errors import StatementParseError
from fintrack.parsers.base import BankId, ParseResult, SourceAccount, StatementParser
from fintrack.parsers.hashing import qif_hash
from fintrack.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_NAME = "Default"
NO_DESCRIPTION = "No description"
NULL_MEMO = "(null)"
DATE_FORMATS = ("%Y/%m/%d", "%m/%d/%Y", "%d.%m.%Y")


def parse_qif_date(value: str) -> datetime:
    """Parse a QIF date. The time is set to noon."""
    value = value.strip()
    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return parsed.replace(hour=12, minute=0, second=0)
    raise ValueError(f"Unrecognised QIF date '{value}'")


def transfer_target(category: str) -> Optional[str]:
    """Return the account name of a ``[Name]`` transfer category, else None."""
    if len(category) >= 2 and category.startswith("[") and category.endswith("]"):
        return category[1:-1]
    return None


@dataclass
class _Record:
    date: str = ""
    amount: str = ""
    payee: str = ""
    memo: str = ""
    category: str = ""


class QIFParser(StatementParser):
    """Parses multi-account QIF exports.

    Records are grouped by the account they appear under. Accounts that hold
    no transactions are dropped from the result.
    """

    bank = BankId.QIF
    extensions = (".qif",)

    def __init__(self, default_currency: str = "UAH"):
        # QIF carries no currency; rows take the mapped account's currency later
        self.default_currency = default_currency

    def parse(self, data: bytes) -> ParseResult:
        try:
            content = data.decode("utf-8-sig")
        except UnicodeDecodeError:
            content = data.decode("latin-1")
        return self.parse_text(content)

    def parse_text(self, content: str) -> ParseResult:
        transactions: list[ParsedTransaction] = []
        account_types: dict[str, str] = {}
        counts: dict[str, int] = {}

        account: Optional[dict[str, str]] = None
        in_transactions = False
        record = _Record()

        def save_record():
            nonlocal record
            if record.date and account is not None:
                parsed = self._build(account["name"] or DEFAULT_ACCOUNT_NAME, record)
                if parsed is not None:
                    transactions.append(parsed)
                    counts[parsed.account_name] = counts.get(parsed.account_name, 0) + 1
            record = _Record()

        def close_account():
            if account is not None:
                name = account["name"] or DEFAULT_ACCOUNT_NAME
                account_types.setdefault(name, account["type"])

        for raw in content.splitlines():
            line = raw.strip()
            if not line:
                continue

            if line == "!Account":
                if in_transactions:
                    save_record()
                close_account()
                account = {"name": "", "type": ""}
                in_transactions = False
                continue

            if line.startswith("!Type:"):
                if account is None:
                    account = {"name": DEFAULT_ACCOUNT_NAME, "type": line[len("!Type:"):]}
                in_transactions = True
                continue

            if line.startswith("!"):
                # Options such as !Option:AutoSwitch
                continue

            if line == "^":
                if in_transactions:
                    save_record()
                continue

            code, value = line[0], line[1:]
            if not in_transactions:
                if account is None:
                    continue
                if code == "N":
                    account["name"] = value.strip()
                elif code == "T":
                    account["type"] = value.strip()
                continue

            if code == "D":
                record.date = value
            elif code == "T":
                record.amount = value
            elif code == "U":
                record.amount = record.amount or value
            elif code == "P":
                record.payee = value.strip()
            elif code == "M":
                record.memo = value.strip()
            elif code == "L":
                record.category = value.strip()

        if in_transactions:
            save_record()
        close_account()

        accounts = [
            SourceAccount(name=name, type=account_types.get(name, ""), transaction_count=count)
            for name, count in counts.items()
        ]
        if not accounts:
            raise StatementParseError(
                "No accounts with transactions found", source=self.bank.value
            )

        logger.debug(
            "Parsed %d QIF transactions in %d accounts", len(transactions), len(accounts)
        )
        return ParseResult(transactions=transactions, accounts=accounts)

    def _build(self, account_name: str, record: _Record) -> Optional[ParsedTransaction]:
        try:
            date = parse_qif_date(record.date)
            signed = parse_amount(record.amount) if record.amount else Decimal("0")
        except ValueError as e:
            logger.warning("Skipping QIF record in account '%s': %s", account_name, e)
            return None

        memo = "" if record.memo == NULL_MEMO else record.memo
        description = memo or record.payee or NO_DESCRIPTION
        target = transfer_target(record.category)

        return ParsedTransaction(
            date=date,
            description=description,
            amount=abs(signed),
            type=TransactionType.from_signed(signed),
            currency=self.default_currency,
            hash=qif_hash(account_name, date, signed, description),
            memo=memo or None,
            payee=record.payee or None,
            category=None if target is not None else (record.category or None),
            is_transfer=target is not None,
            transfer_account=target,
            account_name=account_name,
        )
