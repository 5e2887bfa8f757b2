"""Category domain service."""

import logging
from typing import Optional

from fintrack.database.base import Database
from fintrack.domain.entities import (
    Category as CategoryEntity,
    TransactionType,
    TRANSFER_IN,
    TRANSFER_OUT,
)
from fintrack.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_not_found,
    system_category_locked,
)

logger = logging.getLogger(__name__)

# (name, type, is_system)
DEFAULT_CATEGORIES: list[tuple[str, TransactionType, bool]] = [
    (TRANSFER_OUT, TransactionType.EXPENSE, True),
    (TRANSFER_IN, TransactionType.INCOME, True),
    ("Salary", TransactionType.INCOME, False),
    ("Freelance", TransactionType.INCOME, False),
    ("Investment", TransactionType.INCOME, False),
    ("Other Income", TransactionType.INCOME, False),
    ("Restaurants & Cafes", TransactionType.EXPENSE, False),
    ("Delivery Food", TransactionType.EXPENSE, False),
    ("Products", TransactionType.EXPENSE, False),
    ("Shopping", TransactionType.EXPENSE, False),
    ("Transport", TransactionType.EXPENSE, False),
    ("Bills", TransactionType.EXPENSE, False),
    ("Subscriptions", TransactionType.EXPENSE, False),
    ("Home", TransactionType.EXPENSE, False),
    ("Entertainment", TransactionType.EXPENSE, False),
    ("Healthcare", TransactionType.EXPENSE, False),
    ("Education", TransactionType.EXPENSE, False),
    ("Other", TransactionType.EXPENSE, False),
]


def _parse_type(category_type) -> TransactionType:
    try:
        return TransactionType(category_type)
    except ValueError:
        raise ValidationError(
            f"Invalid category type '{category_type}'. Must be 'income' or 'expense'"
        ) from None


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database, user_id: str = "default"):
        """Initialize category service.

        Args:
            db: Database instance
            user_id: Owner of the categories
        """
        self.db = db
        self.user_id = user_id

    def create_category(
        self,
        name: str,
        category_type: TransactionType | str,
        parent_name: Optional[str] = None,
    ) -> int:
        """Create a category.

        Args:
            name: Category name
            category_type: 'income' or 'expense'
            parent_name: Optional parent category name of the same type

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty or the type is unknown
            ConflictError: If a category with this name and type exists
            NotFoundError: If parent category doesn't exist
        """
        name = name.strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        ctype = _parse_type(category_type)

        if self.db.get_category_by_name(self.user_id, name, ctype) is not None:
            raise ConflictError(f"Category '{name}' ({ctype.value}) already exists")

        parent_id = None
        if parent_name is not None:
            parent = self.db.get_category_by_name(self.user_id, parent_name, ctype)
            if parent is None:
                raise NotFoundError(f"Parent category '{parent_name}' not found")
            parent_id = parent.id

        return self.db.create_category(
            user_id=self.user_id, name=name, category_type=ctype, parent_id=parent_id
        )

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        """Get category by ID."""
        category = self.db.get_category(category_id)
        if category is None or category.user_id != self.user_id:
            return None
        return category

    def get_category_by_name(
        self, name: str, category_type: Optional[TransactionType] = None
    ) -> Optional[CategoryEntity]:
        """Get category by name, optionally restricted to a type."""
        return self.db.get_category_by_name(self.user_id, name, category_type)

    def list_categories(
        self, category_type: Optional[TransactionType | str] = None
    ) -> list[CategoryEntity]:
        """List categories.

        Args:
            category_type: Optional 'income'/'expense' filter

        Returns:
            List of category entities
        """
        ctype = _parse_type(category_type) if category_type is not None else None
        return self.db.list_categories(self.user_id, ctype)

    def delete_category(self, category_id: int) -> None:
        """Delete a category.

        Raises:
            NotFoundError: If category doesn't exist
            ValidationError: If it is a system category
        """
        category = self.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        if category.is_system:
            raise ValidationError(system_category_locked(category.name))
        self.db.delete_category(category_id)

    def ensure_default_categories(self) -> int:
        """Create any missing default categories.

        Returns:
            Number of categories created
        """
        created = 0
        for name, ctype, is_system in DEFAULT_CATEGORIES:
            if self.db.get_category_by_name(self.user_id, name, ctype) is not None:
                continue
            self.db.create_category(
                user_id=self.user_id, name=name, category_type=ctype, is_system=is_system
            )
            created += 1
        if created:
            logger.info("Created %d default categories for user %s", created, self.user_id)
        return created

    def get_transfer_categories(
        self,
    ) -> tuple[Optional[CategoryEntity], Optional[CategoryEntity]]:
        """Return the system (Transfer Out, Transfer In) categories, None when missing."""
        transfer_out = self.db.get_category_by_name(
            self.user_id, TRANSFER_OUT, TransactionType.EXPENSE
        )
        transfer_in = self.db.get_category_by_name(
            self.user_id, TRANSFER_IN, TransactionType.INCOME
        )
        return transfer_out, transfer_in
