"""Transaction domain service."""

from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from fintrack.database.base import Database
from fintrack.domain.entities import Transaction as TransactionEntity, TransactionType
from fintrack.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    transaction_not_found,
)


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database, user_id: str = "default"):
        """Initialize transaction service.

        Args:
            db: Database instance
            user_id: Owner of the transactions
        """
        self.db = db
        self.user_id = user_id

    def create_transaction(
        self,
        account_id: int,
        date: datetime,
        amount: Decimal,
        transaction_type: TransactionType,
        currency: Optional[str] = None,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        merchant_name: Optional[str] = None,
        notes: Optional[str] = None,
        source_name: Optional[str] = None,
    ) -> int:
        """Create a transaction.

        Args:
            account_id: Account ID
            date: Transaction date and time
            amount: Non-negative transaction amount
            transaction_type: Income or expense
            currency: Currency code, defaults to the account currency
            description: Optional description
            category_id: Optional category ID
            merchant_name: Optional merchant name
            notes: Optional notes
            source_name: Optional name of the statement source

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the amount is negative
            NotFoundError: If account or category doesn't exist
        """
        if amount < 0:
            raise ValidationError(f"Amount must be non-negative, got {amount}")

        account = self.db.get_account(account_id)
        if account is None or account.user_id != self.user_id:
            raise NotFoundError(account_not_found(account_id))

        if category_id is not None:
            category = self.db.get_category(category_id)
            if category is None or category.user_id != self.user_id:
                raise NotFoundError(category_not_found(category_id))

        return self.db.create_transaction(
            user_id=self.user_id,
            account_id=account_id,
            date=date,
            amount=amount,
            transaction_type=TransactionType(transaction_type),
            currency=currency or account.currency,
            description=description,
            category_id=category_id,
            merchant_name=merchant_name,
            notes=notes,
            source_name=source_name,
        )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None or txn.user_id != self.user_id:
            return None
        return txn

    def update_category(self, transaction_id: int, category_id: Optional[int]) -> None:
        """Update transaction category.

        Raises:
            NotFoundError: If transaction or category doesn't exist
        """
        if self.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        if category_id is not None and self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        self.db.update_transaction_category(transaction_id, category_id)

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction together with its import provenance.

        Once deleted, the statement row it came from can be imported again.

        Args:
            transaction_id: Transaction ID to delete

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        if self.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        self.db.delete_imported_records_for_transaction(transaction_id)
        self.db.delete_transaction(transaction_id)

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_name: Optional[str] = None,
        account_id: Optional[int] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[TransactionEntity]:
        """List transactions with filters.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            category_name: Optional category name filter (empty string for uncategorized)
            account_id: Optional account ID filter
            transaction_type: Optional income/expense filter

        Returns:
            List of transaction entities, newest first
        """
        category_id = None
        uncategorized = False
        if category_name is not None:
            if category_name == "":
                # Empty string means uncategorized
                uncategorized = True
            else:
                category = self.db.get_category_by_name(
                    self.user_id, category_name, transaction_type
                )
                if category is None:
                    # Category doesn't exist, return empty list
                    return []
                category_id = category.id

        return self.db.list_transactions(
            user_id=self.user_id,
            start_date=start_date,
            end_date=end_date,
            category_id=category_id,
            account_id=account_id,
            transaction_type=transaction_type,
            uncategorized=uncategorized,
        )
