"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so services never see ORM rows
and the schema can change without touching the domain layer.
"""

from ledgersync.domain import entities as domain
from ledgersync.database.models import (
    Provider as ORMProvider,
    MainAccount as ORMMainAccount,
    SubAccount as ORMSubAccount,
    BalanceHistory as ORMBalanceHistory,
    Transaction as ORMTransaction,
    MainCategory as ORMMainCategory,
    SubCategory as ORMSubCategory,
    CategoryRule as ORMCategoryRule,
)


def provider_to_domain(orm_provider: ORMProvider) -> domain.Provider:
    """Convert SQLAlchemy Provider model to domain Provider entity."""
    return domain.Provider(
        id=orm_provider.id,
        name=orm_provider.name,
        kind=orm_provider.kind,
        is_active=orm_provider.is_active,
        scraper_script=orm_provider.scraper_script,
        created_at=orm_provider.created_at,
    )


def main_account_to_domain(orm_account: ORMMainAccount) -> domain.MainAccount:
    """Convert SQLAlchemy MainAccount model to domain MainAccount entity."""
    return domain.MainAccount(
        id=orm_account.id,
        label=orm_account.label,
        provider_id=orm_account.provider_id,
        external_key=orm_account.external_key,
        created_at=orm_account.created_at,
    )


def sub_account_to_domain(orm_account: ORMSubAccount) -> domain.SubAccount:
    """Convert SQLAlchemy SubAccount model to domain SubAccount entity."""
    return domain.SubAccount(
        id=orm_account.id,
        main_account_id=orm_account.main_account_id,
        current_name=orm_account.current_name,
        balance=orm_account.balance,
        asset_type=orm_account.asset_type,
        updated_at=orm_account.updated_at,
    )


def balance_history_to_domain(orm_history: ORMBalanceHistory) -> domain.BalanceHistory:
    """Convert SQLAlchemy BalanceHistory model to domain BalanceHistory entity."""
    return domain.BalanceHistory(
        id=orm_history.id,
        sub_account_id=orm_history.sub_account_id,
        date=orm_history.date,
        balance=orm_history.balance,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        sub_account_id=orm_transaction.sub_account_id,
        date=orm_transaction.date,
        amount=orm_transaction.amount,
        description=orm_transaction.description,
        sub_category_id=orm_transaction.sub_category_id,
        is_transfer=orm_transaction.is_transfer,
        transfer_id=orm_transaction.transfer_id,
        linked_transaction_id=orm_transaction.linked_transaction_id,
        imported_at=orm_transaction.imported_at,
    )


def main_category_to_domain(orm_category: ORMMainCategory) -> domain.MainCategory:
    """Convert SQLAlchemy MainCategory model to domain MainCategory entity."""
    return domain.MainCategory(id=orm_category.id, name=orm_category.name)


def sub_category_to_domain(orm_category: ORMSubCategory) -> domain.SubCategory:
    """Convert SQLAlchemy SubCategory model to domain SubCategory entity."""
    return domain.SubCategory(
        id=orm_category.id,
        main_category_id=orm_category.main_category_id,
        name=orm_category.name,
    )


def category_rule_to_domain(orm_rule: ORMCategoryRule) -> domain.CategoryRule:
    """Convert SQLAlchemy CategoryRule model to domain CategoryRule entity."""
    return domain.CategoryRule(
        id=orm_rule.id,
        keyword=orm_rule.keyword,
        sub_category_id=orm_rule.sub_category_id,
        priority=orm_rule.priority,
        created_at=orm_rule.created_at,
    )
