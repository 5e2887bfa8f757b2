"""Common types shared by the statement parsers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from fintrack.domain.entities import ImportSource, ParsedTransaction


class BankId(str, Enum):
    """Statement formats the importer understands."""

    TRUSTEE = "trustee"
    PRIVAT = "privat"
    MONOBANK = "monobank"
    QIF = "qif"

    @property
    def source(self) -> ImportSource:
        """Provenance source recorded for rows imported from this format."""
        if self is BankId.QIF:
            return ImportSource.HOMEBANK_QIF
        return ImportSource(self.value)


@dataclass(frozen=True)
class SourceAccount:
    """An account declared inside a multi-account statement (QIF)."""

    name: str
    type: str
    transaction_count: int = 0


@dataclass
class ParseResult:
    """Normalized output of a parser run."""

    transactions: list[ParsedTransaction]
    account_info: dict[str, str] = field(default_factory=dict)
    accounts: list[SourceAccount] = field(default_factory=list)


class StatementParser(ABC):
    """Converts the raw bytes of one statement format into ParsedTransactions.

    Parsers are pure: they never touch the database and either return the
    complete result or raise StatementParseError.
    """

    bank: BankId
    extensions: tuple[str, ...]

    @abstractmethod
    def parse(self, data: bytes) -> ParseResult:
        """Parse a statement file.

        Args:
            data: Raw file content

        Returns:
            ParseResult with transactions in statement order

        Raises:
            StatementParseError: If the file structure is not recognised
        """
        pass
