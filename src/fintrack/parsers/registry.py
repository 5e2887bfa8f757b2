"""Lookup of statement parsers by bank."""

from pathlib import PurePath
from typing import Optional

from fintrack.domain.errors import UnsupportedFileError
from fintrack.parsers.base import BankId, StatementParser
from fintrack.parsers.monobank import MonobankParser
from fintrack.parsers.privat import PrivatParser
from fintrack.parsers.qif import QIFParser
from fintrack.parsers.trustee import TrusteeParser

PARSERS: dict[BankId, StatementParser] = {
    BankId.TRUSTEE: TrusteeParser(),
    BankId.PRIVAT: PrivatParser(),
    BankId.MONOBANK: MonobankParser(),
    BankId.QIF: QIFParser(),
}

# Formats identified by extension alone; PDFs need content detection
EXTENSION_BANKS = {
    ".csv": BankId.MONOBANK,
    ".qif": BankId.QIF,
}


def get_parser(bank: BankId | str) -> StatementParser:
    """Return the parser registered for a bank.

    Raises:
        UnsupportedFileError: If the bank is unknown
    """
    try:
        return PARSERS[BankId(bank)]
    except ValueError:
        choices = ", ".join(b.value for b in BankId)
        raise UnsupportedFileError(f"Unknown bank '{bank}'. Choose one of: {choices}") from None


def file_extension(file_name: str) -> str:
    return PurePath(file_name).suffix.lower()


def bank_for_file(file_name: str) -> Optional[BankId]:
    """Infer the bank from the extension, or None when content detection is needed."""
    return EXTENSION_BANKS.get(file_extension(file_name))


def validate_extension(bank: BankId, file_name: str) -> None:
    """Check the file extension against the format of the selected bank.

    Raises:
        UnsupportedFileError: If the extension does not match
    """
    parser = get_parser(bank)
    extension = file_extension(file_name)
    if extension not in parser.extensions:
        expected = ", ".join(parser.extensions)
        raise UnsupportedFileError(
            f"File '{PurePath(file_name).name}' is not supported for {bank.value} "
            f"statements (expected {expected})"
        )
