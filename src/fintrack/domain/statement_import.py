"""Statement import domain service."""

import logging
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any, Optional

from fintrack.database.base import Database
from fintrack.domain.account import AccountService
from fintrack.domain.category import CategoryService
from fintrack.domain.category_matcher import CategoryMatcher, MatchContext
from fintrack.domain.dedup import DeduplicationGate
from fintrack.domain.entities import Account, TransactionType
from fintrack.domain.errors import (
    NotFoundError,
    UnsupportedFileError,
    ValidationError,
    account_not_found,
)
from fintrack.domain.import_session import ImportSession, ImportStage, PreviewRow
from fintrack.domain.transaction import TransactionService
from fintrack.domain.transfer_pairing import TransferPairing, transfer_description
from fintrack.parsers import pdf_text
from fintrack.parsers.base import BankId, ParseResult
from fintrack.parsers.detector import detect_bank
from fintrack.parsers.registry import bank_for_file, file_extension, get_parser, validate_extension

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateDetail:
    description: str
    amount: Decimal
    date: str
    hash: str


@dataclass
class ImportSummary:
    """Outcome of a commit run."""

    imported: int = 0
    duplicates: int = 0
    failed: int = 0
    paired: int = 0
    skipped: int = 0
    duplicate_details: list[DuplicateDetail] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class StatementImportService:
    """Service for importing bank statements.

    An import runs in stages on an ImportSession: start_session() parses the
    file and pre-applies category suggestions, map_accounts() assigns QIF
    source accounts to app accounts and commit() persists the selected rows.
    """

    def __init__(
        self,
        db: Database,
        user_id: str = "default",
        matcher: Optional[CategoryMatcher] = None,
    ):
        """Initialize statement import service.

        Args:
            db: Database instance
            user_id: Owner of the imported data
            matcher: Category matcher, defaults to name then history matching
        """
        self.db = db
        self.user_id = user_id
        self.account_service = AccountService(db, user_id)
        self.category_service = CategoryService(db, user_id)
        self.transaction_service = TransactionService(db, user_id)
        self.matcher = matcher or CategoryMatcher()

    def detect(self, file_name: str, data: bytes) -> BankId:
        """Determine the statement format of a file.

        Raises:
            UnsupportedFileError: If the extension is not a supported format
        """
        bank = bank_for_file(file_name)
        if bank is not None:
            return bank
        if file_extension(file_name) == ".pdf":
            return detect_bank(pdf_text.extract_pdf_text(data))
        raise UnsupportedFileError(
            f"Unsupported file type '{file_extension(file_name) or file_name}'. "
            "Expected .pdf, .csv or .qif"
        )

    def start_session(
        self,
        file_name: str,
        data: bytes,
        bank: Optional[BankId | str] = None,
        account_id: Optional[int] = None,
    ) -> ImportSession:
        """Parse a statement into a preview session.

        Format errors do not raise: the session stays at the UPLOAD stage with
        ``error`` set, so the caller can pick another file or bank.

        Args:
            file_name: Name of the uploaded file, used for its extension
            data: File content
            bank: Bank override; detected from the file when None
            account_id: Target account for single-account formats

        Returns:
            ImportSession at PARSED stage (MAPPED when QIF accounts were auto-mapped)

        Raises:
            NotFoundError: If account_id does not exist
        """
        if account_id is not None and self.account_service.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        session = ImportSession(
            bank=bank_for_file(file_name) or BankId.TRUSTEE,
            file_name=file_name,
            account_id=account_id,
        )
        try:
            text = None
            if bank is not None:
                session.bank = get_parser(bank).bank
            elif file_extension(file_name) == ".pdf":
                text = pdf_text.extract_pdf_text(data)
                session.bank = detect_bank(text)
            else:
                session.bank = self.detect(file_name, data)
            validate_extension(session.bank, file_name)
            result = self._parse(session.bank, data, text)
        except ValidationError as e:
            logger.warning("Could not parse %s: %s", file_name, e)
            session.error = str(e)
            return session

        session.rows = [
            PreviewRow(index=i, parsed=parsed) for i, parsed in enumerate(result.transactions)
        ]
        session.account_info = result.account_info
        session.source_accounts = result.accounts
        session.stage = ImportStage.PARSED
        logger.info("Parsed %d rows from %s (%s)", len(session.rows), file_name, session.bank.value)

        self.apply_suggestions(session)
        if session.is_multi_account:
            auto = self.auto_map_accounts(session)
            if auto:
                self.map_accounts(session, auto)
        return session

    def _parse(self, bank: BankId, data: bytes, text: Optional[str] = None) -> ParseResult:
        parser = get_parser(bank)
        if text is not None and isinstance(parser, pdf_text.PdfStatementParser):
            return parser.parse_text(text)
        return parser.parse(data)

    def apply_suggestions(self, session: ImportSession) -> int:
        """Pre-select categories on the preview rows.

        QIF transfers get the system Transfer Out / Transfer In category;
        other rows go through the category matcher, with the bank's own
        category label tried first.

        Returns:
            Number of rows that received a suggestion
        """
        context = MatchContext(
            categories=self.category_service.list_categories(),
            transactions=self.db.list_transactions(self.user_id),
        )
        transfer_out, transfer_in = self.category_service.get_transfer_categories()

        suggested = 0
        for row in session.rows:
            parsed = row.parsed
            if parsed.is_transfer:
                category = transfer_out if parsed.type is TransactionType.EXPENSE else transfer_in
                category_id = category.id if category is not None else None
            else:
                category_id = self.matcher.suggest(
                    parsed.description, parsed.type, context, label=parsed.category
                )
            if category_id is not None:
                row.category_id = category_id
                row.auto_category = True
                suggested += 1

        logger.debug("Suggested categories for %d of %d rows", suggested, len(session.rows))
        return suggested

    def auto_map_accounts(self, session: ImportSession) -> dict[str, int]:
        """Map QIF source accounts to app accounts with the same name (case-insensitive)."""
        by_name = {acc.name.lower(): acc.id for acc in self.account_service.list_accounts()}
        mappings = {}
        for source_account in session.source_accounts:
            account_id = by_name.get(source_account.name.lower())
            if account_id is not None:
                mappings[source_account.name] = account_id
        return mappings

    def map_accounts(self, session: ImportSession, mappings: dict[str, int]) -> ImportSession:
        """Assign QIF source accounts to app accounts.

        Rows take the currency of the account they are mapped to. Source
        accounts left out are not committed.

        Raises:
            ValidationError: If no mapping is given, the session is not a
                parsed QIF session or a source account is unknown
            NotFoundError: If an app account doesn't exist
        """
        if not session.is_multi_account:
            raise ValidationError("Account mapping only applies to QIF imports")
        if session.stage not in (ImportStage.PARSED, ImportStage.MAPPED):
            raise ValidationError(f"Cannot map accounts of a session at stage {session.stage.value}")
        if not mappings:
            raise ValidationError("Map at least one source account to an app account")

        known = {a.name for a in session.source_accounts}
        accounts: dict[str, Account] = {}
        for source_name, account_id in mappings.items():
            if source_name not in known:
                raise ValidationError(
                    f"Source account '{source_name}' is not in the file. "
                    f"Available: {', '.join(sorted(known))}"
                )
            account = self.account_service.get_account(account_id)
            if account is None:
                raise NotFoundError(account_not_found(account_id))
            accounts[source_name] = account

        for row in session.rows:
            account = accounts.get(row.parsed.account_name)
            if account is not None and row.parsed.currency != account.currency:
                session.edit(row.index, currency=account.currency)

        session.mappings = {name: acc.id for name, acc in accounts.items()}
        session.stage = ImportStage.MAPPED
        return session

    def commit(self, session: ImportSession) -> ImportSummary:
        """Persist the selected rows of a session.

        Rows are committed one at a time in statement order. Duplicates are
        counted and skipped; a failing row is logged and counted as failed
        without stopping the run.

        Returns:
            ImportSummary

        Raises:
            ValidationError: If the session is not ready to commit
        """
        accounts = self._commit_targets(session)
        gate = DeduplicationGate(self.db, self.user_id, session.source.value)
        gate.load()
        pairing = (
            TransferPairing(self.transaction_service, self.category_service, gate)
            if session.is_multi_account
            else None
        )

        summary = ImportSummary()
        for row in session.selected_rows():
            parsed = row.parsed
            account_key = parsed.account_name if session.is_multi_account else None
            target = accounts.get(account_key)
            if target is None:
                summary.skipped += 1
                continue

            if gate.is_duplicate(parsed.hash):
                summary.duplicates += 1
                summary.duplicate_details.append(
                    DuplicateDetail(
                        description=parsed.description,
                        amount=parsed.amount,
                        date=parsed.date.strftime("%Y-%m-%d"),
                        hash=parsed.hash[:8],
                    )
                )
                continue

            try:
                if parsed.is_transfer and parsed.transfer_account:
                    description = transfer_description(parsed)
                else:
                    description = parsed.description
                transaction_id = self.transaction_service.create_transaction(
                    account_id=target.id,
                    date=parsed.date,
                    amount=parsed.amount,
                    transaction_type=parsed.type,
                    currency=target.currency if session.is_multi_account else parsed.currency,
                    description=description,
                    category_id=row.category_id,
                    merchant_name=parsed.memo or description,
                    source_name=session.source.value,
                )
                gate.record(transaction_id, parsed.hash)

                if pairing is not None and parsed.is_transfer:
                    result = pairing.pair(
                        parsed, parsed.account_name, accounts.get(parsed.transfer_account)
                    )
                    if result.transaction_id is not None:
                        summary.paired += 1

                summary.imported += 1
            except Exception as e:
                logger.exception("Failed to import row %d (%s)", row.index + 1, parsed.description)
                summary.failed += 1
                summary.errors.append(f"Row {row.index + 1}: {e}")

        session.stage = ImportStage.COMMITTED
        logger.info(
            "Import of %s finished: %d imported, %d duplicates, %d failed",
            session.file_name,
            summary.imported,
            summary.duplicates,
            summary.failed,
        )
        return summary

    def _commit_targets(self, session: ImportSession) -> dict[Optional[str], Account]:
        """Resolve the accounts rows are committed to, keyed by source account name."""
        if session.stage is ImportStage.COMMITTED:
            raise ValidationError("Import session was already committed")
        if session.stage is ImportStage.UPLOAD:
            raise ValidationError(session.error or "Import session has no parsed rows")

        if session.is_multi_account:
            if session.stage is not ImportStage.MAPPED or not session.mappings:
                raise ValidationError("Map at least one source account to an app account")
            targets: dict[Optional[str], Account] = {}
            for source_name, account_id in session.mappings.items():
                account = self.account_service.get_account(account_id)
                if account is None:
                    raise NotFoundError(account_not_found(account_id))
                targets[source_name] = account
            return targets

        if session.account_id is None:
            raise ValidationError("Choose the account to import into")
        account = self.account_service.get_account(session.account_id)
        if account is None:
            raise NotFoundError(account_not_found(session.account_id))
        return {None: account}
