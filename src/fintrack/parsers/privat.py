"""PrivatBank card statement parser (PDF)."""

import logging
import re
from datetime import datetime

from fintrack.domain.entities import ParsedTransaction, TransactionType
from fintrack.domain.errors import StatementParseError
from fintrack.parsers.base import BankId, ParseResult
from fintrack.parsers.hashing import content_hash
from fintrack.parsers.pdf_text import PdfStatementParser
from fintrack.utils.amount_parser import parse_amount

logger = logging.getLogger(__name__)

CARD_PATTERN = re.compile(r"(\d{6}\*+\d{4})")
PERIOD_PATTERN = re.compile(r"from\s+(\d{2}\.\d{2}\.\d{4})")

DATE_LINE = re.compile(r"^\d{2}\.\d{2}\.\d{4}$")
TIME_LINE = re.compile(r"^\d{2}:\d{2}$")
CURRENCY_LINE = re.compile(r"^([A-Z]{3})$")
AMOUNT_LINE = re.compile(r"^([-+]?\d+(?:\s\d{3})*,\d{2})$")
TEXT_WITH_AMOUNT_LINE = re.compile(r"^(.+?)\s+([-+]?\d+(?:\s\d{3})*,\d{2})$")

# Lines between the time and the description: card, contract, reference, "from" date
SKIP_LINES = (
    re.compile(r"^\d{6}\*+\d{4}$"),
    re.compile(r"Contract No\.", re.IGNORECASE),
    re.compile(r"^\d{1,4}$"),
    re.compile(r"^from\s+\d{2}\.\d{2}\.\d{4}$", re.IGNORECASE),
    re.compile(r"SAMDNWFC\d+"),
)

MAX_DESCRIPTION_LINES = 20


def _is_skip_line(line: str) -> bool:
    return any(pattern.search(line) for pattern in SKIP_LINES)


class PrivatParser(PdfStatementParser):
    """Parses PrivatBank statements, where each row is a vertical block::

        22.11.2025
        20:35
        545708******2220
        Contract No. SAMDNWFC000129164
        316
        from 25.06.2025
        KYIVSKYI METROPOLITEN,
        KYIV
        -8,00
        UAH
    """

    bank = BankId.PRIVAT

    def parse_text(self, text: str) -> ParseResult:
        account_info = {}
        card = CARD_PATTERN.search(text)
        if card:
            account_info["card_number"] = card.group(1)
        period = PERIOD_PATTERN.search(text)
        if period:
            account_info["period"] = period.group(1)

        lines = [line.strip() for line in text.splitlines()]
        transactions: list[ParsedTransaction] = []
        i = 0
        while i < len(lines):
            if (
                DATE_LINE.match(lines[i])
                and i + 1 < len(lines)
                and TIME_LINE.match(lines[i + 1])
            ):
                result = self._parse_block(lines, i)
                if result is not None:
                    transaction, next_index = result
                    transactions.append(transaction)
                    i = next_index
                    continue
                logger.warning("No amount found for Privat row starting at line %d", i + 1)
            i += 1

        if not transactions:
            raise StatementParseError("No transactions found", source=self.bank.value)

        logger.debug("Parsed %d Privat transactions", len(transactions))
        return ParseResult(transactions=transactions, account_info=account_info)

    def _parse_block(self, lines: list[str], i: int):
        """Parse the row starting at line ``i``.

        Returns (transaction, index after the currency line) or None.
        """
        try:
            date = datetime.strptime(f"{lines[i]} {lines[i + 1]}", "%d.%m.%Y %H:%M")
        except ValueError:
            return None

        start = i + 2
        while start < len(lines) and _is_skip_line(lines[start]):
            start += 1

        parts: list[str] = []
        j = start
        while j < len(lines) and j < start + MAX_DESCRIPTION_LINES:
            line = lines[j]
            amount_only = AMOUNT_LINE.match(line)
            with_text = None if amount_only else TEXT_WITH_AMOUNT_LINE.match(line)

            if amount_only or with_text:
                if with_text:
                    parts.append(with_text.group(1))
                currency = CURRENCY_LINE.match(lines[j + 1]) if j + 1 < len(lines) else None
                if currency:
                    amount_str = amount_only.group(1) if amount_only else with_text.group(2)
                    return self._build(date, parts, amount_str, currency.group(1)), j + 2
            elif line and not DATE_LINE.match(line):
                parts.append(line)
            j += 1

        return None

    def _build(
        self, date: datetime, parts: list[str], amount_str: str, currency: str
    ) -> ParsedTransaction:
        signed = parse_amount(amount_str, decimal_comma=True)
        amount = abs(signed)
        description = re.sub(r",\s*$", "", " ".join(parts).strip())
        return ParsedTransaction(
            date=date,
            description=description,
            amount=amount,
            type=TransactionType.from_signed(signed),
            currency=currency,
            hash=content_hash(date, description, amount, currency),
        )
