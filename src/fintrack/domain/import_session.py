"""State of one statement import, from upload to commit."""

import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from fintrack.domain.entities import ImportSource, ParsedTransaction, TransactionType
from fintrack.domain.errors import ValidationError
from fintrack.parsers.base import BankId, SourceAccount

_UNSET: Any = object()


class ImportStage(str, Enum):
    UPLOAD = "upload"
    PARSED = "parsed"
    MAPPED = "mapped"
    COMMITTED = "committed"


@dataclass
class PreviewRow:
    """A parsed row as shown in the preview, with the user's choices."""

    index: int
    parsed: ParsedTransaction
    selected: bool = True
    category_id: Optional[int] = None
    auto_category: bool = False


@dataclass
class ImportSession:
    """Value object carried through the import stages.

    ``mappings`` is only used for QIF files and maps a source account name to
    an app account ID. ``account_id`` is the target of single-account formats.
    """

    bank: BankId
    file_name: str
    account_id: Optional[int] = None
    stage: ImportStage = ImportStage.UPLOAD
    rows: list[PreviewRow] = field(default_factory=list)
    account_info: dict[str, str] = field(default_factory=dict)
    source_accounts: list[SourceAccount] = field(default_factory=list)
    mappings: dict[str, int] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def source(self) -> ImportSource:
        return self.bank.source

    @property
    def is_multi_account(self) -> bool:
        return self.bank is BankId.QIF

    def row(self, index: int) -> PreviewRow:
        if index < 0 or index >= len(self.rows):
            raise ValidationError(f"Row {index} does not exist (0-{len(self.rows) - 1})")
        return self.rows[index]

    # Selection
    def select(self, index: int) -> None:
        self.row(index).selected = True

    def deselect(self, index: int) -> None:
        self.row(index).selected = False

    def toggle(self, index: int) -> None:
        row = self.row(index)
        row.selected = not row.selected

    def select_all(self) -> None:
        for row in self.rows:
            row.selected = True

    def deselect_all(self) -> None:
        for row in self.rows:
            row.selected = False

    def selected_rows(self) -> list[PreviewRow]:
        """Selected rows in statement order."""
        return [row for row in self.rows if row.selected]

    def edit(
        self,
        index: int,
        description: Optional[str] = None,
        amount: Optional[Decimal] = None,
        currency: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
        category_id: Optional[int] = _UNSET,
    ) -> PreviewRow:
        """Edit a preview row.

        The row keeps its original hash. Setting the category, including
        clearing it with None, turns the auto-match flag off.

        Raises:
            ValidationError: If the row doesn't exist or a value is invalid
        """
        row = self.row(index)
        changes: dict[str, Any] = {}
        if description is not None:
            changes["description"] = description.strip()
        if amount is not None:
            try:
                value = Decimal(str(amount).strip())
            except InvalidOperation:
                raise ValidationError(f"Invalid amount: '{amount}'") from None
            if not value.is_finite():
                raise ValidationError(f"Invalid amount: '{amount}'")
            changes["amount"] = value
        if currency is not None:
            currency = currency.strip().upper()
            if len(currency) != 3 or not currency.isalpha():
                raise ValidationError(f"Invalid currency code: '{currency}'")
            changes["currency"] = currency
        if transaction_type is not None:
            try:
                changes["type"] = TransactionType(transaction_type)
            except ValueError:
                raise ValidationError(f"Invalid transaction type: '{transaction_type}'") from None
        if changes:
            row.parsed = replace(row.parsed, **changes)
        if category_id is not _UNSET:
            row.category_id = category_id
            row.auto_category = False
        return row

    # Serialization
    def to_dict(self) -> dict[str, Any]:
        return {
            "bank": self.bank.value,
            "source": self.source.value,
            "file_name": self.file_name,
            "account_id": self.account_id,
            "stage": self.stage.value,
            "error": self.error,
            "account_info": dict(self.account_info),
            "source_accounts": [
                {"name": a.name, "type": a.type, "transaction_count": a.transaction_count}
                for a in self.source_accounts
            ],
            "mappings": dict(self.mappings),
            "rows": [_row_to_dict(row) for row in self.rows],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImportSession":
        try:
            return cls(
                bank=BankId(data["bank"]),
                file_name=data["file_name"],
                account_id=data.get("account_id"),
                stage=ImportStage(data.get("stage", ImportStage.UPLOAD.value)),
                rows=[_row_from_dict(item) for item in data.get("rows", [])],
                account_info=dict(data.get("account_info") or {}),
                source_accounts=[SourceAccount(**a) for a in data.get("source_accounts", [])],
                mappings={str(k): int(v) for k, v in (data.get("mappings") or {}).items()},
                error=data.get("error"),
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise ValidationError(f"Invalid import session data: {e}") from e

    @classmethod
    def from_json(cls, text: str) -> "ImportSession":
        """Restore a session saved with to_json().

        Raises:
            ValidationError: If the text is not a valid session
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid import session file: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError("Invalid import session file: expected an object")
        return cls.from_dict(data)


def _row_to_dict(row: PreviewRow) -> dict[str, Any]:
    p = row.parsed
    return {
        "index": row.index,
        "selected": row.selected,
        "category_id": row.category_id,
        "auto_category": row.auto_category,
        "date": p.date.isoformat(),
        "description": p.description,
        "amount": str(p.amount),
        "type": p.type.value,
        "currency": p.currency,
        "hash": p.hash,
        "memo": p.memo,
        "payee": p.payee,
        "category": p.category,
        "is_transfer": p.is_transfer,
        "transfer_account": p.transfer_account,
        "account_name": p.account_name,
    }


def _row_from_dict(data: dict[str, Any]) -> PreviewRow:
    parsed = ParsedTransaction(
        date=datetime.fromisoformat(data["date"]),
        description=data["description"],
        amount=Decimal(data["amount"]),
        type=TransactionType(data["type"]),
        currency=data["currency"],
        hash=data["hash"],
        memo=data.get("memo"),
        payee=data.get("payee"),
        category=data.get("category"),
        is_transfer=bool(data.get("is_transfer", False)),
        transfer_account=data.get("transfer_account"),
        account_name=data.get("account_name"),
    )
    return PreviewRow(
        index=int(data["index"]),
        parsed=parsed,
        selected=bool(data.get("selected", True)),
        category_id=data.get("category_id"),
        auto_category=bool(data.get("auto_category", False)),
    )
