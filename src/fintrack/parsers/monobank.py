"""Monobank statement parser (CSV export)."""

import csv
import io
import logging
from datetime import datetime

from fintrack.domain.entities import ParsedTransaction, TransactionType
from fintrack.domain.errors import StatementParseError
from fintrack.parsers.base import BankId, ParseResult, StatementParser
from fintrack.parsers.hashing import content_hash
from fintrack.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

DATE_COLUMN = "Date and time"
DESCRIPTION_COLUMN = "Description"
AMOUNT_COLUMN = "Card currency amount, (UAH)"
REQUIRED_COLUMNS = (DATE_COLUMN, DESCRIPTION_COLUMN, AMOUNT_COLUMN)

DATE_FORMAT = "%d.%m.%Y %H:%M:%S"
CURRENCY = "UAH"


class MonobankParser(StatementParser):
    """Parses the Monobank CSV export.

    Example::

        "Date and time",Description,MCC,"Card currency amount, (UAH)",...
        "04.11.2025 17:15:38","Silpo",5411,-318.94,...

    Rows with missing fields or an unreadable date or amount are skipped.
    """

    bank = BankId.MONOBANK
    extensions = (".csv",)

    def parse(self, data: bytes) -> ParseResult:
        try:
            content = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise StatementParseError(f"File is not UTF-8 text: {e}", source=self.bank.value) from e

        reader = csv.DictReader(io.StringIO(content))
        fieldnames = [name.strip() for name in (reader.fieldnames or [])]
        missing = [column for column in REQUIRED_COLUMNS if column not in fieldnames]
        if missing:
            raise StatementParseError(
                f"Missing required columns: {', '.join(missing)}", source=self.bank.value
            )
        reader.fieldnames = fieldnames

        transactions: list[ParsedTransaction] = []
        # Row 1 is the header
        for row_num, row in enumerate(reader, start=2):
            date_str = (row.get(DATE_COLUMN) or "").strip()
            description = (row.get(DESCRIPTION_COLUMN) or "").strip()
            amount_str = (row.get(AMOUNT_COLUMN) or "").strip()

            if not date_str or not description or not amount_str:
                logger.debug("Row %d: missing required fields, skipped", row_num)
                continue

            try:
                date = datetime.strptime(date_str, DATE_FORMAT)
            except ValueError:
                logger.warning("Row %d: failed to parse date '%s'", row_num, date_str)
                continue

            try:
                signed = parse_amount(amount_str)
            except ValueError:
                logger.warning("Row %d: failed to parse amount '%s'", row_num, amount_str)
                continue

            amount = abs(signed)
            transactions.append(
                ParsedTransaction(
                    date=date,
                    description=description,
                    amount=amount,
                    type=TransactionType.from_signed(signed),
                    currency=CURRENCY,
                    hash=content_hash(date, description, amount, CURRENCY),
                )
            )

        if not transactions:
            raise StatementParseError("No transactions found", source=self.bank.value)

        logger.debug("Parsed %d Monobank transactions", len(transactions))
        return ParseResult(transactions=transactions)
