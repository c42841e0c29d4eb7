"""Domain model entities for ledgersync.

These are pure data classes representing business concepts, independent of
database schema. Services and the store interface exchange these instead of
ORM rows, so tests can reason about plain values.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Optional


PROVIDER_KINDS = ("aggregator", "custom", "manual")
ASSET_TYPES = ("CASH", "INVESTMENT", "CRYPTO", "POINT")


@dataclass(frozen=True)
class Provider:
    """Upstream data source domain entity."""

    id: int
    name: str
    kind: str
    is_active: bool
    scraper_script: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class MainAccount:
    """Financial institution relationship under one provider."""

    id: int
    label: str
    provider_id: int
    external_key: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class SubAccount:
    """Named balance bucket under a main account."""

    id: int
    main_account_id: int
    current_name: str
    balance: int
    asset_type: str
    updated_at: datetime


@dataclass(frozen=True)
class BalanceHistory:
    """Daily balance snapshot of a sub-account."""

    id: int
    sub_account_id: int
    date: datetime
    balance: int


@dataclass(frozen=True)
class Transaction:
    """Ledger entry domain entity."""

    id: str
    sub_account_id: int
    date: date
    amount: int
    description: str
    sub_category_id: Optional[int]
    is_transfer: bool
    transfer_id: Optional[str]
    linked_transaction_id: Optional[str]
    imported_at: datetime


@dataclass(frozen=True)
class MainCategory:
    """Top level of the two-level category taxonomy."""

    id: int
    name: str


@dataclass(frozen=True)
class SubCategory:
    """Second level of the category taxonomy."""

    id: int
    main_category_id: int
    name: str


@dataclass(frozen=True)
class CategoryRule:
    """Keyword-to-category classifier entry."""

    id: int
    keyword: str
    sub_category_id: int
    priority: int
    created_at: datetime


@dataclass(frozen=True)
class RawBalance:
    """Balance record as produced by a data source."""

    institution_label: str
    sub_account_name: str
    balance: int
    external_account_key: Optional[str] = None


@dataclass(frozen=True)
class RawTransaction:
    """Transaction record as produced by a data source."""

    date: date
    description: str
    amount: int
    institution_label: str
    sub_account_name: str


@dataclass(frozen=True)
class SourceBatch:
    """Everything one data source fetch produced, including unparseable rows."""

    balances: list[RawBalance] = field(default_factory=list)
    transactions: list[RawTransaction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
