"""Account domain service."""

from typing import Optional
from fintrack.database.base import Database
from fintrack.domain.entities import Account as AccountEntity
from fintrack.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
)


class AccountService:
    """Service for managing accounts of one user."""

    def __init__(self, db: Database, user_id: str = "default"):
        """Initialize account service.

        Args:
            db: Database instance
            user_id: Owner of the accounts
        """
        self.db = db
        self.user_id = user_id

    def create_account(self, name: str, bank_name: str, currency: str = "UAH") -> int:
        """Create a new account.

        Args:
            name: Account name
            bank_name: Bank name
            currency: ISO 4217 currency code of the account

        Returns:
            Account ID

        Raises:
            ValidationError: If the currency code is malformed
            ConflictError: If account name already exists
        """
        currency = currency.strip().upper()
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationError(f"Invalid currency code: '{currency}'")

        if self.db.get_account_by_name(self.user_id, name) is not None:
            raise ConflictError(f"Account with name '{name}' already exists")

        return self.db.create_account(
            user_id=self.user_id, name=name, bank_name=bank_name, currency=currency
        )

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found (or owned by another user)
        """
        account = self.db.get_account(account_id)
        if account is None or account.user_id != self.user_id:
            return None
        return account

    def get_account_by_name(self, name: str) -> Optional[AccountEntity]:
        """Get account by exact name."""
        return self.db.get_account_by_name(self.user_id, name)

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts.

        Returns:
            List of account entities
        """
        return self.db.list_accounts(self.user_id)

    def delete_account(self, account_id: int) -> None:
        """Delete an account.

        Args:
            account_id: Account ID to delete

        Raises:
            NotFoundError: If account not found
            DependencyError: If account has associated transactions
        """
        if self.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        transaction_count = self.db.get_account_transaction_count(account_id)
        if transaction_count > 0:
            raise DependencyError(account_delete_blocked(account_id, transaction_count))

        self.db.delete_account(account_id)
