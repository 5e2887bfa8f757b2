"""Utility for resolving account names to IDs."""

from fintrack.domain.account import AccountService
from fintrack.domain.errors import NotFoundError


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve account name or ID to account ID.

    Names are tried first, so an account called "2024" is found by name
    before falling back to ID 2024.

    Args:
        account_service: AccountService instance
        account: Account name (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    if isinstance(account, int):
        if account_service.get_account(account) is None:
            raise NotFoundError(f"Account ID {account} not found")
        return account

    by_name = account_service.get_account_by_name(account)
    if by_name is not None:
        return by_name.id

    # Case-insensitive name match
    for acc in account_service.list_accounts():
        if acc.name.lower() == account.strip().lower():
            return acc.id

    try:
        account_id = int(account)
    except ValueError:
        raise NotFoundError(f"Account '{account}' not found") from None

    if account_service.get_account(account_id) is None:
        raise NotFoundError(f"Account ID {account_id} not found")
    return account_id
