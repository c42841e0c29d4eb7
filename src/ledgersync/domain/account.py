"""Provider and account domain services."""

import logging
import time
from datetime import datetime
from typing import Optional

from ledgersync.database.base import Database
from ledgersync.domain.entities import (
    ASSET_TYPES,
    PROVIDER_KINDS,
    BalanceHistory,
    MainAccount,
    Provider,
    SubAccount,
)
from ledgersync.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    main_account_not_found,
    provider_not_found,
    sub_account_not_found,
)

logger = logging.getLogger(__name__)


class ProviderService:
    """Service for managing upstream data providers."""

    def __init__(self, db: Database):
        """Initialize provider service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_provider(
        self, name: str, kind: str = "aggregator", scraper_script: Optional[str] = None
    ) -> int:
        """Create a new provider.

        Args:
            name: Provider name
            kind: One of aggregator, custom, manual
            scraper_script: Optional reference to the export file or script feeding it

        Returns:
            Provider ID

        Raises:
            ValidationError: If name is empty or kind is unknown
            ConflictError: If provider name already exists
        """
        if not name:
            raise ValidationError("Provider name is required")
        if kind not in PROVIDER_KINDS:
            raise ValidationError(f"Unknown provider kind '{kind}'. Expected one of: {', '.join(PROVIDER_KINDS)}")
        if self.db.get_provider_by_name(name) is not None:
            raise ConflictError(f"Provider with name '{name}' already exists")

        logger.info("Creating provider: %s (%s)", name, kind)
        return self.db.create_provider(name=name, kind=kind, scraper_script=scraper_script)

    def get_or_create_provider(self, name: str, kind: str = "aggregator") -> Provider:
        """Return the provider with this name, registering it on first sync."""
        provider = self.db.get_provider_by_name(name)
        if provider is None:
            provider_id = self.create_provider(name=name, kind=kind)
            provider = self.db.get_provider(provider_id)
            if provider is None:
                raise NotFoundError(provider_not_found(provider_id))
        return provider

    def get_provider(self, provider_id: int) -> Optional[Provider]:
        """Get provider by ID."""
        return self.db.get_provider(provider_id)

    def get_provider_by_name(self, name: str) -> Optional[Provider]:
        """Get provider by name."""
        return self.db.get_provider_by_name(name)

    def list_providers(self, active_only: bool = False) -> list[Provider]:
        """List providers."""
        return self.db.list_providers(active_only=active_only)

    def set_active(self, provider_id: int, is_active: bool) -> None:
        """Activate or deactivate a provider.

        Raises:
            NotFoundError: If provider doesn't exist
        """
        if self.db.get_provider(provider_id) is None:
            raise NotFoundError(provider_not_found(provider_id))
        self.db.update_provider_active(provider_id, is_active)


class AccountService:
    """Service for main accounts, sub-accounts and their balance history."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def list_main_accounts(self, provider_id: Optional[int] = None) -> list[MainAccount]:
        """List main accounts, optionally for one provider."""
        return self.db.list_main_accounts(provider_id=provider_id)

    def list_sub_accounts(self, main_account_id: Optional[int] = None) -> list[SubAccount]:
        """List sub-accounts, optionally for one main account."""
        return self.db.list_sub_accounts(main_account_id=main_account_id)

    def get_sub_account(self, sub_account_id: int) -> Optional[SubAccount]:
        """Get sub-account by ID."""
        return self.db.get_sub_account(sub_account_id)

    def create_manual_account(
        self,
        provider_id: int,
        label: str,
        sub_account_name: str,
        initial_balance: int = 0,
        asset_type: str = "CASH",
    ) -> int:
        """Create a manually managed main account with one sub-account.

        The main account gets a unique ``MANUAL_<millis>`` external key so it
        never correlates with scraped accounts.

        Returns:
            Sub-account ID

        Raises:
            NotFoundError: If provider doesn't exist
            ValidationError: If label/name is empty or asset type is unknown
        """
        if self.db.get_provider(provider_id) is None:
            raise NotFoundError(provider_not_found(provider_id))
        if not label or not sub_account_name:
            raise ValidationError("Account label and sub-account name are required")
        self._check_asset_type(asset_type)

        logger.info("Creating manual account: %s (%s)", label, sub_account_name)
        external_key = f"MANUAL_{int(time.time() * 1000)}"
        main_account_id = self.db.create_main_account(label=label, provider_id=provider_id, external_key=external_key)
        return self.db.create_sub_account(
            main_account_id, sub_account_name, balance=initial_balance, asset_type=asset_type
        )

    def update_asset_type(self, sub_account_id: int, asset_type: str) -> None:
        """Change a sub-account's asset type.

        Raises:
            NotFoundError: If sub-account doesn't exist
            ValidationError: If asset type is unknown
        """
        self._check_asset_type(asset_type)
        self._require_sub_account(sub_account_id)
        logger.info("Updating asset type for sub account %d to %s", sub_account_id, asset_type)
        self.db.update_sub_account(sub_account_id, asset_type=asset_type)

    def set_balance(self, sub_account_id: int, balance: int) -> None:
        """Set a sub-account's balance as an explicit user edit.

        Raises:
            NotFoundError: If sub-account doesn't exist
        """
        self._require_sub_account(sub_account_id)
        self.db.update_sub_account(sub_account_id, balance=balance)

    def remap_sub_account(self, sub_account_id: int, main_account_id: int) -> None:
        """Move a sub-account under another main account.

        Raises:
            NotFoundError: If sub-account or main account doesn't exist
        """
        self._require_sub_account(sub_account_id)
        if self.db.get_main_account(main_account_id) is None:
            raise NotFoundError(main_account_not_found(main_account_id))
        logger.info("Remapping sub account %d to main account %d", sub_account_id, main_account_id)
        self.db.update_sub_account(sub_account_id, main_account_id=main_account_id)

    def get_balance_history(self, sub_account_id: Optional[int] = None) -> list[BalanceHistory]:
        """List balance snapshots, oldest first."""
        return self.db.list_balance_history(sub_account_id=sub_account_id)

    def get_last_sync_time(self) -> Optional[datetime]:
        """Return the latest snapshot date, i.e. when balances were last synced."""
        return self.db.get_latest_snapshot_date()

    def _require_sub_account(self, sub_account_id: int) -> SubAccount:
        sub_account = self.db.get_sub_account(sub_account_id)
        if sub_account is None:
            raise NotFoundError(sub_account_not_found(sub_account_id))
        return sub_account

    @staticmethod
    def _check_asset_type(asset_type: str) -> None:
        if asset_type not in ASSET_TYPES:
            raise ValidationError(f"Unknown asset type '{asset_type}'. Expected one of: {', '.join(ASSET_TYPES)}")
