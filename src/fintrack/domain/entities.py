"""Domain model entities for fintrack.

These are pure data classes representing business concepts, independent of
database schema. Parsers, the import pipeline and the CLI only ever see these
types; the SQLAlchemy models stay behind the database layer.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from fintrack.domain.errors import ValidationError


class TransactionType(str, Enum):
    """Direction of money movement. Amounts are always non-negative."""

    INCOME = "income"
    EXPENSE = "expense"

    @property
    def opposite(self) -> "TransactionType":
        if self is TransactionType.INCOME:
            return TransactionType.EXPENSE
        return TransactionType.INCOME

    @classmethod
    def from_signed(cls, amount: Decimal) -> "TransactionType":
        """Resolve the type of a signed statement amount (negative is expense)."""
        return cls.EXPENSE if amount < 0 else cls.INCOME


class ImportSource(str, Enum):
    """Known statement sources, used to scope import provenance."""

    TRUSTEE = "trustee"
    PRIVAT = "privat"
    MONOBANK = "monobank"
    HOMEBANK_QIF = "homebank-qif"


# System categories used for transfers between accounts
TRANSFER_OUT = "Transfer Out"
TRANSFER_IN = "Transfer In"


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    user_id: str
    name: str
    bank_name: str
    currency: str
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Category domain entity. Each category is either income or expense."""

    id: int
    user_id: str
    name: str
    category_type: TransactionType
    parent_id: Optional[int]
    created_at: datetime
    is_system: bool = False


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    user_id: str
    account_id: int
    date: datetime
    amount: Decimal
    type: TransactionType
    currency: str
    description: Optional[str]
    category_id: Optional[int]
    merchant_name: Optional[str]
    notes: Optional[str]
    source_name: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class ImportedTransactionRecord:
    """Provenance marker proving a statement row was already imported."""

    id: int
    user_id: str
    transaction_id: int
    hash: str
    source: str
    import_date: datetime


@dataclass(frozen=True)
class ParsedTransaction:
    """Format-agnostic output of every statement parser.

    ``amount`` is a magnitude; the direction lives in ``type``. ``hash`` is a
    content fingerprint computed by the parser and is never recomputed after
    the row has been edited in preview.
    """

    date: datetime
    description: str
    amount: Decimal
    type: TransactionType
    currency: str
    hash: str
    memo: Optional[str] = None
    payee: Optional[str] = None
    category: Optional[str] = None
    is_transfer: bool = False
    transfer_account: Optional[str] = None
    account_name: Optional[str] = None

    def __post_init__(self):
        if self.amount < 0:
            raise ValidationError(f"Amount must be non-negative, got {self.amount}")
        if not isinstance(self.type, TransactionType):
            raise ValidationError(f"Invalid transaction type: {self.type!r}")
