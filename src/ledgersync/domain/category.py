"""Category domain service."""

import logging
from typing import Any, Optional

from ledgersync.database.base import Database
from ledgersync.domain.entities import MainCategory, SubCategory
from ledgersync.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    category_path_not_found,
    main_category_delete_blocked,
    sub_category_not_found,
)

logger = logging.getLogger(__name__)

PATH_SEPARATOR = ">"

# Default two-level taxonomy
DEFAULT_CATEGORIES = [
    ("Food", ["Groceries", "Dining Out", "Cafe", "Delivery"]),
    ("Household", ["Supplies", "Medicine", "Toiletries"]),
    ("Housing", ["Rent", "Utilities", "Phone & Internet", "Repairs"]),
    ("Transportation", ["Train & Bus", "Taxi", "Fuel", "Parking"]),
    ("Entertainment", ["Books", "Movies & Music", "Games", "Travel", "Subscriptions"]),
    ("Clothing & Beauty", ["Clothes", "Cleaning", "Hair Salon"]),
    ("Health & Insurance", ["Medical", "Insurance", "Pharmacy"]),
    ("Education", ["Tuition", "Books & Materials", "Seminars"]),
    ("Income", ["Salary", "Side Business", "Dividends", "Interest", "Points"]),
    ("Other", ["Fees", "Taxes", "Donations", "Miscellaneous"]),
]


class CategoryService:
    """Service for managing the main/sub category taxonomy."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_main_category(self, name: str) -> int:
        """Create a main category.

        Raises:
            ValidationError: If name is empty
            ConflictError: If name already exists
        """
        if not name:
            raise ValidationError("Category name is required")
        if self.db.get_main_category_by_name(name) is not None:
            raise ConflictError(f"Main category '{name}' already exists")
        logger.info("Creating main category: %s", name)
        return self.db.create_main_category(name)

    def create_sub_category(self, name: str, main_category_name: str) -> int:
        """Create a sub-category under an existing main category.

        Raises:
            ValidationError: If name is empty
            NotFoundError: If main category doesn't exist
            ConflictError: If the sub-category already exists there
        """
        if not name:
            raise ValidationError("Sub-category name is required")
        main = self.db.get_main_category_by_name(main_category_name)
        if main is None:
            raise NotFoundError(f"Main category '{main_category_name}' not found")
        if self.db.get_sub_category_by_name(main.id, name) is not None:
            raise ConflictError(f"Sub-category '{name}' already exists under '{main_category_name}'")
        logger.info("Creating sub category: %s", name)
        return self.db.create_sub_category(main.id, name)

    def get_sub_category(self, sub_category_id: int) -> Optional[SubCategory]:
        """Get sub-category by ID."""
        return self.db.get_sub_category(sub_category_id)

    def get_sub_category_by_path(self, path: str) -> Optional[SubCategory]:
        """Get sub-category by path.

        Args:
            path: Category path (e.g., "Food > Cafe")

        Returns:
            SubCategory entity or None if not found
        """
        parts = [p.strip() for p in path.split(PATH_SEPARATOR)]
        if len(parts) != 2 or not all(parts):
            return None
        main = self.db.get_main_category_by_name(parts[0])
        if main is None:
            return None
        return self.db.get_sub_category_by_name(main.id, parts[1])

    def resolve_sub_category(self, path: str) -> SubCategory:
        """Get sub-category by path, raising if it doesn't exist.

        Raises:
            NotFoundError: If no sub-category has this path
        """
        sub = self.get_sub_category_by_path(path)
        if sub is None:
            raise NotFoundError(category_path_not_found(path))
        return sub

    def list_main_categories(self) -> list[MainCategory]:
        """List main categories."""
        return self.db.list_main_categories()

    def get_category_tree(self) -> list[dict[str, Any]]:
        """Get the taxonomy as main categories with nested sub-category lists."""
        tree = []
        for main in self.db.list_main_categories():
            tree.append({
                "id": main.id,
                "name": main.name,
                "children": self.db.list_sub_categories(main_category_id=main.id),
            })
        return tree

    def format_category_path(self, sub_category_id: int) -> str:
        """Get full path for a sub-category (e.g., "Food > Cafe")."""
        sub = self.db.get_sub_category(sub_category_id)
        if sub is None:
            return ""
        main = self.db.get_main_category(sub.main_category_id)
        if main is None:
            return sub.name
        return f"{main.name} {PATH_SEPARATOR} {sub.name}"

    def delete_main_category(self, main_category_id: int) -> None:
        """Delete an empty main category.

        Raises:
            NotFoundError: If main category doesn't exist
            DependencyError: If it still has sub-categories
        """
        if self.db.get_main_category(main_category_id) is None:
            raise NotFoundError(f"Main category {main_category_id} not found")
        subs = self.db.list_sub_categories(main_category_id=main_category_id)
        if subs:
            raise DependencyError(main_category_delete_blocked(main_category_id, len(subs)))
        logger.info("Deleting main category: %d", main_category_id)
        self.db.delete_main_category(main_category_id)

    def delete_sub_category(self, sub_category_id: int) -> None:
        """Delete a sub-category with its rules; its transactions become uncategorized.

        Raises:
            NotFoundError: If sub-category doesn't exist
        """
        if self.db.get_sub_category(sub_category_id) is None:
            raise NotFoundError(sub_category_not_found(sub_category_id))
        logger.info("Deleting sub category: %d", sub_category_id)
        self.db.delete_sub_category(sub_category_id)

    def seed_default_categories(self) -> int:
        """Create any missing default categories.

        Returns:
            Number of main and sub-categories created
        """
        created = 0
        for main_name, sub_names in DEFAULT_CATEGORIES:
            main = self.db.get_main_category_by_name(main_name)
            if main is None:
                main_id = self.db.create_main_category(main_name)
                created += 1
            else:
                main_id = main.id
            for sub_name in sub_names:
                if self.db.get_sub_category_by_name(main_id, sub_name) is None:
                    self.db.create_sub_category(main_id, sub_name)
                    created += 1
        logger.info("Seeded %d categories", created)
        return created
