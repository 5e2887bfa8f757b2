"""Income and expense summary domain service."""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from fintrack.database.base import Database
from fintrack.domain.currency import CurrencyService
from fintrack.domain.entities import Transaction, TransactionType

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class CategoryTotal:
    name: str
    type: TransactionType
    total: Decimal
    count: int


@dataclass
class SummaryTotals:
    """Totals converted into a single currency."""

    currency: str
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    transaction_count: int = 0
    categories: list[CategoryTotal] = field(default_factory=list)

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


class SummaryService:
    """Service for aggregating transactions across accounts and currencies."""

    def __init__(
        self,
        db: Database,
        user_id: str = "default",
        currency_service: Optional[CurrencyService] = None,
    ):
        """Initialize summary service.

        Args:
            db: Database instance
            user_id: Owner of the transactions
            currency_service: Converter for foreign-currency transactions
        """
        self.db = db
        self.user_id = user_id
        self.currency_service = currency_service or CurrencyService()

    def get_filtered_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        include_transfers: bool = False,
    ) -> list[Transaction]:
        """List transactions, leaving out system (transfer) categories unless requested."""
        transactions = self.db.list_transactions(
            self.user_id, start_date=start_date, end_date=end_date
        )
        if include_transfers:
            return transactions

        system_ids = {
            cat.id for cat in self.db.list_categories(self.user_id) if cat.is_system
        }
        return [txn for txn in transactions if txn.category_id not in system_ids]

    def totals(
        self,
        currency: str = "UAH",
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        include_transfers: bool = False,
    ) -> SummaryTotals:
        """Sum income and expense in ``currency``.

        Args:
            currency: Target currency of the totals
            start_date: Optional start date filter
            end_date: Optional end date filter
            include_transfers: If True, include Transfer In/Out transactions

        Returns:
            SummaryTotals with a per-category breakdown, largest first
        """
        currency = currency.upper()
        transactions = self.get_filtered_transactions(start_date, end_date, include_transfers)
        names = {cat.id: cat.name for cat in self.db.list_categories(self.user_id)}

        amounts: dict[tuple[str, TransactionType], list[tuple[Decimal, str]]] = defaultdict(list)
        for txn in transactions:
            name = names.get(txn.category_id, UNCATEGORIZED)
            amounts[(name, txn.type)].append((txn.amount, txn.currency))

        result = SummaryTotals(currency=currency, transaction_count=len(transactions))
        for (name, txn_type), items in amounts.items():
            total = self.currency_service.convert_multiple_currencies(items, currency)
            result.categories.append(CategoryTotal(name, txn_type, total, len(items)))
            if txn_type is TransactionType.INCOME:
                result.income += total
            else:
                result.expense += total

        result.categories.sort(key=lambda c: (c.type.value, -c.total, c.name))
        return result
