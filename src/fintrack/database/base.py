"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from fintrack.domain.entities import (
    Account,
    Category,
    Transaction,
    TransactionType,
    ImportedTransactionRecord,
)


class Database(ABC):
    """Abstract database interface for fintrack.

    All collections are scoped by ``user_id``; lookups by primary key are not.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, user_id: str, name: str, bank_name: str, currency: str) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_name(self, user_id: str, name: str) -> Optional[Account]:
        """Get account by exact name."""
        pass

    @abstractmethod
    def list_accounts(self, user_id: str) -> list[Account]:
        """List all accounts of a user."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Count transactions booked on an account."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        user_id: str,
        name: str,
        category_type: TransactionType,
        parent_id: Optional[int] = None,
        is_system: bool = False,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(
        self, user_id: str, name: str, category_type: Optional[TransactionType] = None
    ) -> Optional[Category]:
        """Get category by name, optionally restricted to a type."""
        pass

    @abstractmethod
    def list_categories(
        self, user_id: str, category_type: Optional[TransactionType] = None
    ) -> list[Category]:
        """List categories, optionally filtered by type."""
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> None:
        """Delete a category. Transactions in it become uncategorized."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: str,
        account_id: int,
        date: datetime,
        amount: Decimal,
        transaction_type: TransactionType,
        currency: str,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        merchant_name: Optional[str] = None,
        notes: Optional[str] = None,
        source_name: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction_category(self, transaction_id: int, category_id: Optional[int]) -> None:
        """Update transaction category."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category_id: Optional[int] = None,
        account_id: Optional[int] = None,
        transaction_type: Optional[TransactionType] = None,
        uncategorized: bool = False,
    ) -> list[Transaction]:
        """List transactions with optional filters.

        Args:
            user_id: Owner of the transactions
            start_date: Optional start date filter (inclusive)
            end_date: Optional end date filter (inclusive, whole day)
            category_id: Optional category ID filter
            account_id: Optional account ID filter
            transaction_type: Optional income/expense filter
            uncategorized: If True, only return transactions without a category
        """
        pass

    # Import provenance operations
    @abstractmethod
    def create_imported_record(
        self,
        user_id: str,
        transaction_id: int,
        hash: str,
        source: str,
        import_date: Optional[datetime] = None,
    ) -> int:
        """Record that a statement row was imported. Returns record ID."""
        pass

    @abstractmethod
    def get_imported_hashes(self, user_id: str, source: str) -> set[str]:
        """Get every hash previously imported by a user from a source."""
        pass

    @abstractmethod
    def list_imported_records(self, user_id: str) -> list[ImportedTransactionRecord]:
        """List all provenance records of a user."""
        pass

    @abstractmethod
    def delete_imported_records_for_transaction(self, transaction_id: int) -> int:
        """Delete provenance of a transaction. Returns number of rows removed."""
        pass

    @abstractmethod
    def delete_imported_records_for_user(self, user_id: str) -> int:
        """Delete all provenance of a user. Returns number of rows removed."""
        pass
