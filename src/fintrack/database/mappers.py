"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so enum and decimal handling lives
in one place instead of leaking into the query code.
"""

from decimal import Decimal

from fintrack.domain import entities as domain
from fintrack.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    ImportedTransaction as ORMImportedTransaction,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        user_id=orm_account.user_id,
        name=orm_account.name,
        bank_name=orm_account.bank_name,
        currency=orm_account.currency,
        created_at=orm_account.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        user_id=orm_category.user_id,
        name=orm_category.name,
        category_type=domain.TransactionType(orm_category.category_type),
        parent_id=orm_category.parent_id,
        created_at=orm_category.created_at,
        is_system=bool(orm_category.is_system),
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        account_id=orm_transaction.account_id,
        date=orm_transaction.date,
        amount=Decimal(orm_transaction.amount),
        type=domain.TransactionType(orm_transaction.type),
        currency=orm_transaction.currency,
        description=orm_transaction.description,
        category_id=orm_transaction.category_id,
        merchant_name=orm_transaction.merchant_name,
        notes=orm_transaction.notes,
        source_name=orm_transaction.source_name,
        created_at=orm_transaction.created_at,
    )


def imported_transaction_to_domain(
    orm_record: ORMImportedTransaction,
) -> domain.ImportedTransactionRecord:
    """Convert SQLAlchemy ImportedTransaction model to a provenance record."""
    return domain.ImportedTransactionRecord(
        id=orm_record.id,
        user_id=orm_record.user_id,
        transaction_id=orm_record.transaction_id,
        hash=orm_record.hash,
        source=orm_record.source,
        import_date=orm_record.import_date,
    )
