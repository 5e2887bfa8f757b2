"""Statement parsers for supported banks and file formats."""

from fintrack.parsers.base import BankId, ParseResult, SourceAccount, StatementParser
from fintrack.parsers.detector import detect_bank
from fintrack.parsers.registry import bank_for_file, get_parser, validate_extension

__all__ = [
    "BankId",
    "ParseResult",
    "SourceAccount",
    "StatementParser",
    "detect_bank",
    "bank_for_file",
    "get_parser",
    "validate_extension",
]
