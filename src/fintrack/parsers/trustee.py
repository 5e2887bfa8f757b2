"""Trustee card statement parser (PDF)."""

import logging
import re
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fintrack.domain.entities import ParsedTransaction, TransactionType
from fintrack.domain.errors import StatementParseError
from fintrack.parsers.base import BankId, ParseResult
from fintrack.parsers.hashing import content_hash
from fintrack.parsers.pdf_text import PdfStatementParser
from fintrack.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

PERIOD_PATTERN = re.compile(r"Per Period:\s*(\d{4}\.\d{2}\.\d{2}\s*-\s*\d{4}\.\d{2}\.\d{2})")
CARD_PATTERN = re.compile(r"Card number:\s*(\*+\d+)")

# "2025.11.01, 15:41147 VELMART 31 KIEV UKR-2.18 EUR": the description is glued to the time
ROW_PATTERN = re.compile(
    r"^(\d{4}\.\d{2}\.\d{2}),\s*(\d{2}:\d{2})(.+?)([-+]?\d+\.?\d*)\s+([A-Z]{3})$"
)
ROW_START_PATTERN = re.compile(r"^(\d{4}\.\d{2}\.\d{2}),\s*(\d{2}:\d{2})(.+)$")
ROW_END_PATTERN = re.compile(r"^(.+?)\s+([-+]?\d+\.?\d*)\s+([A-Z]{3})$")

SECTION_MARKERS = ("Date and time of", "operation")
FOOTER = "The document is electronically generated"
MAX_CONTINUATION_LINES = 10


class TrusteeParser(PdfStatementParser):
    """Parses Trustee statements.

    Rows are either a single line ending in ``<amount> <CUR>`` or start with
    the date/time prefix and find their amount line within the next
    MAX_CONTINUATION_LINES lines.
    """

    bank = BankId.TRUSTEE

    def parse_text(self, text: str) -> ParseResult:
        account_info = {}
        period = PERIOD_PATTERN.search(text)
        if period:
            account_info["period"] = period.group(1)
        card = CARD_PATTERN.search(text)
        if card:
            account_info["card_number"] = card.group(1)

        lines = [line.strip() for line in text.splitlines()]
        transactions: list[ParsedTransaction] = []
        in_section = False
        i = 0
        while i < len(lines):
            line = lines[i]

            if not in_section:
                if any(marker in line for marker in SECTION_MARKERS):
                    in_section = True
                i += 1
                continue

            if FOOTER in line:
                break

            if not line:
                i += 1
                continue

            match = ROW_PATTERN.match(line)
            if match:
                date_str, time_str, description, amount_str, currency = match.groups()
                transactions.append(
                    self._build(date_str, time_str, description, amount_str, currency)
                )
                i += 1
                continue

            start = ROW_START_PATTERN.match(line)
            if start:
                consumed = self._parse_multiline(lines, i, start, transactions)
                if consumed is not None:
                    i = consumed
            i += 1

        if not in_section:
            raise StatementParseError("Transaction table not found", source=self.bank.value)
        if not transactions:
            raise StatementParseError("No transactions found", source=self.bank.value)

        logger.debug("Parsed %d Trustee transactions", len(transactions))
        return ParseResult(transactions=transactions, account_info=account_info)

    def _parse_multiline(
        self,
        lines: list[str],
        start_index: int,
        start: re.Match,
        transactions: list[ParsedTransaction],
    ) -> Optional[int]:
        """Collect continuation lines of a wrapped row.

        Returns the index of the amount line, or None when no amount was found.
        """
        date_str, time_str, description = start.groups()
        j = start_index + 1
        while j < len(lines) and j < start_index + MAX_CONTINUATION_LINES:
            next_line = lines[j]
            if ROW_START_PATTERN.match(next_line) or FOOTER in next_line:
                break

            end = ROW_END_PATTERN.match(next_line)
            if end:
                tail, amount_str, currency = end.groups()
                description = f"{description} {tail}"
                transactions.append(
                    self._build(date_str, time_str, description, amount_str, currency)
                )
                return j
            if next_line:
                description = f"{description} {next_line}"
            j += 1

        logger.warning("No amount found for Trustee row starting at line %d", start_index + 1)
        return None

    def _build(
        self, date_str: str, time_str: str, description: str, amount_str: str, currency: str
    ) -> ParsedTransaction:
        date = datetime.strptime(f"{date_str} {time_str}", "%Y.%m.%d %H:%M")
        signed: Decimal = parse_amount(amount_str)
        amount = abs(signed)
        description = description.strip()
        return ParsedTransaction(
            date=date,
            description=description,
            amount=amount,
            type=TransactionType.from_signed(signed),
            currency=currency,
            hash=content_hash(date, description, amount, currency),
        )
