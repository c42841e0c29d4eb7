"""Abstract database interface.

Every service receives an instance of this interface explicitly; there is no
module-level store handle. Write operations raise
``RecordPersistenceError`` when a single record cannot be stored and
``StoreUnavailableError`` when the store cannot be reached.
"""

from abc import ABC, abstractmethod
from typing import Optional, Collection
from datetime import date, datetime

# Import entities directly to avoid circular import through domain/__init__.py
from ledgersync.domain.entities import (
    Provider,
    MainAccount,
    SubAccount,
    BalanceHistory,
    Transaction,
    MainCategory,
    SubCategory,
    CategoryRule,
)


class Database(ABC):
    """Abstract database interface for ledgersync."""

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

    # Provider operations
    @abstractmethod
    def create_provider(
        self, name: str, kind: str, is_active: bool = True, scraper_script: Optional[str] = None
    ) -> int:
        """Create a provider. Returns provider ID."""
        pass

    @abstractmethod
    def get_provider(self, provider_id: int) -> Optional[Provider]:
        """Get provider by ID."""
        pass

    @abstractmethod
    def get_provider_by_name(self, name: str) -> Optional[Provider]:
        """Get provider by name."""
        pass

    @abstractmethod
    def list_providers(self, active_only: bool = False) -> list[Provider]:
        """List providers, optionally only the active ones."""
        pass

    @abstractmethod
    def update_provider_active(self, provider_id: int, is_active: bool) -> None:
        """Activate or deactivate a provider."""
        pass

    # Main account operations
    @abstractmethod
    def create_main_account(self, label: str, provider_id: int, external_key: Optional[str] = None) -> int:
        """Create a main account. Returns main account ID.

        If (provider_id, external_key) already exists, the existing ID is returned.
        """
        pass

    @abstractmethod
    def get_main_account(self, main_account_id: int) -> Optional[MainAccount]:
        """Get main account by ID."""
        pass

    @abstractmethod
    def find_main_account(
        self, provider_id: int, external_key: Optional[str] = None, label: Optional[str] = None
    ) -> Optional[MainAccount]:
        """Find a main account of a provider.

        With an external key, matches on (provider_id, external_key). Without one,
        matches a key-less main account of the provider by label.
        """
        pass

    @abstractmethod
    def list_main_accounts(self, provider_id: Optional[int] = None) -> list[MainAccount]:
        """List main accounts, optionally filtered by provider."""
        pass

    # Sub-account operations
    @abstractmethod
    def upsert_sub_account_balance(self, main_account_id: int, name: str, balance: int) -> SubAccount:
        """Create the sub-account (main_account_id, name) or set its balance."""
        pass

    @abstractmethod
    def create_sub_account(
        self, main_account_id: int, name: str, balance: int = 0, asset_type: str = "CASH"
    ) -> int:
        """Create a sub-account. Returns sub-account ID."""
        pass

    @abstractmethod
    def get_sub_account(self, sub_account_id: int) -> Optional[SubAccount]:
        """Get sub-account by ID."""
        pass

    @abstractmethod
    def find_sub_account(self, institution_label: str, sub_account_name: str) -> Optional[SubAccount]:
        """Find a sub-account by its name and its main account's label."""
        pass

    @abstractmethod
    def list_sub_accounts(self, main_account_id: Optional[int] = None) -> list[SubAccount]:
        """List sub-accounts, optionally filtered by main account."""
        pass

    @abstractmethod
    def update_sub_account(
        self,
        sub_account_id: int,
        balance: Optional[int] = None,
        asset_type: Optional[str] = None,
        main_account_id: Optional[int] = None,
    ) -> None:
        """Update sub-account fields that are not None."""
        pass

    # Balance history operations
    @abstractmethod
    def upsert_balance_snapshot(self, sub_account_id: int, snapshot_date: datetime, balance: int) -> None:
        """Create or overwrite the snapshot for (sub_account_id, snapshot_date)."""
        pass

    @abstractmethod
    def list_balance_history(self, sub_account_id: Optional[int] = None) -> list[BalanceHistory]:
        """List balance snapshots ordered by date, optionally for one sub-account."""
        pass

    @abstractmethod
    def get_latest_snapshot_date(self) -> Optional[datetime]:
        """Get the most recent snapshot date across all sub-accounts."""
        pass

    # Transaction operations
    @abstractmethod
    def insert_transaction_if_absent(
        self, transaction_id: str, sub_account_id: int, date: date, amount: int, description: str
    ) -> bool:
        """Insert a transaction unless its ID exists. Returns True if inserted.

        An existing row is left untouched, including its category and transfer fields.
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        sub_account_id: Optional[int] = None,
        uncategorized: bool = False,
        include_transfers: bool = True,
        description: Optional[str] = None,
        transaction_ids: Optional[Collection[str]] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first.

        Args:
            start_date: Optional start date filter
            end_date: Optional end date filter
            sub_account_id: Optional sub-account filter
            uncategorized: If True, only return transactions without a category
            include_transfers: If False, exclude transactions flagged as transfers
            description: Optional exact description filter
            transaction_ids: Optional restriction to these transaction IDs
        """
        pass

    @abstractmethod
    def list_transfer_candidates(self) -> list[Transaction]:
        """List transactions neither flagged as transfer nor grouped.

        Ordered by date, then insertion time, then ID.
        """
        pass

    @abstractmethod
    def update_transaction_category(self, transaction_id: str, sub_category_id: Optional[int]) -> None:
        """Set or clear a transaction's category unconditionally."""
        pass

    @abstractmethod
    def assign_category_if_uncategorized(self, transaction_ids: Collection[str], sub_category_id: int) -> int:
        """Set the category of those transactions that still have none.

        Returns the number of rows actually updated.
        """
        pass

    @abstractmethod
    def link_transfer(self, first_id: str, second_id: str, transfer_id: str) -> None:
        """Flag both transactions as a transfer pair and cross-link them."""
        pass

    @abstractmethod
    def unlink_transfer(self, transaction_id: str) -> None:
        """Clear transfer fields on a transaction and its linked partner."""
        pass

    @abstractmethod
    def count_transactions(self, uncategorized: bool = False) -> int:
        """Count transactions, optionally only uncategorized ones."""
        pass

    # Category operations
    @abstractmethod
    def create_main_category(self, name: str) -> int:
        """Create a main category. Returns main category ID."""
        pass

    @abstractmethod
    def get_main_category(self, main_category_id: int) -> Optional[MainCategory]:
        """Get main category by ID."""
        pass

    @abstractmethod
    def get_main_category_by_name(self, name: str) -> Optional[MainCategory]:
        """Get main category by name."""
        pass

    @abstractmethod
    def list_main_categories(self) -> list[MainCategory]:
        """List main categories ordered by name."""
        pass

    @abstractmethod
    def delete_main_category(self, main_category_id: int) -> None:
        """Delete a main category."""
        pass

    @abstractmethod
    def create_sub_category(self, main_category_id: int, name: str) -> int:
        """Create a sub-category. Returns sub-category ID."""
        pass

    @abstractmethod
    def get_sub_category(self, sub_category_id: int) -> Optional[SubCategory]:
        """Get sub-category by ID."""
        pass

    @abstractmethod
    def get_sub_category_by_name(self, main_category_id: int, name: str) -> Optional[SubCategory]:
        """Get sub-category by parent and name."""
        pass

    @abstractmethod
    def list_sub_categories(self, main_category_id: Optional[int] = None) -> list[SubCategory]:
        """List sub-categories ordered by name, optionally for one main category."""
        pass

    @abstractmethod
    def delete_sub_category(self, sub_category_id: int) -> None:
        """Delete a sub-category and its rules; its transactions become uncategorized."""
        pass

    # Category rule operations
    @abstractmethod
    def create_category_rule(self, keyword: str, sub_category_id: int, priority: int = 0) -> int:
        """Create a category rule. Returns rule ID."""
        pass

    @abstractmethod
    def upsert_category_rule(self, keyword: str, sub_category_id: int, priority: int = 0) -> CategoryRule:
        """Create the rule (keyword, sub_category_id) unless it exists; return the stored rule."""
        pass

    @abstractmethod
    def get_category_rule(self, rule_id: int) -> Optional[CategoryRule]:
        """Get category rule by ID."""
        pass

    @abstractmethod
    def find_category_rule(self, keyword: str, sub_category_id: int) -> Optional[CategoryRule]:
        """Get category rule by its unique (keyword, sub_category_id) key."""
        pass

    @abstractmethod
    def list_category_rules(self) -> list[CategoryRule]:
        """List rules by descending priority, ties by ascending ID."""
        pass

    @abstractmethod
    def update_category_rule(
        self,
        rule_id: int,
        keyword: Optional[str] = None,
        priority: Optional[int] = None,
        sub_category_id: Optional[int] = None,
    ) -> None:
        """Update category rule fields that are not None."""
        pass

    @abstractmethod
    def delete_category_rule(self, rule_id: int) -> None:
        """Delete a category rule."""
        pass
