"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class StoreError(Exception):
    """Base class for failures of the persistent store."""


class RecordPersistenceError(StoreError):
    """A single record could not be persisted; other records are unaffected."""


class StoreUnavailableError(StoreError):
    """The store cannot be reached at all."""


def provider_not_found(provider_id: int) -> str:
    """Return message for missing provider."""
    return f"Provider {provider_id} not found"


def sub_account_not_found(sub_account_id: int) -> str:
    """Return message for missing sub-account."""
    return f"Sub-account {sub_account_id} not found"


def main_account_not_found(main_account_id: int) -> str:
    """Return message for missing main account."""
    return f"Main account {main_account_id} not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def sub_category_not_found(sub_category_id: int) -> str:
    """Return message for missing sub-category by ID."""
    return f"Sub-category {sub_category_id} not found"


def category_path_not_found(path: str) -> str:
    """Return message for missing category by path."""
    return f"Category '{path}' not found"


def rule_not_found(rule_id: int) -> str:
    """Return message for missing category rule."""
    return f"Category rule {rule_id} not found"


def duplicate_rule(keyword: str, sub_category_id: int) -> str:
    """Return message for duplicate (keyword, sub-category) rule."""
    return f"Rule for keyword '{keyword}' and sub-category {sub_category_id} already exists"


def unresolved_sub_account(institution_label: str, sub_account_name: str) -> str:
    """Return message for a transaction whose sub-account is not registered."""
    return f"No sub-account '{sub_account_name}' under '{institution_label}'"


def main_category_delete_blocked(main_category_id: int, sub_category_count: int) -> str:
    """Return message when a main category still has sub-categories."""
    return (
        f"Cannot delete main category {main_category_id}: it has "
        f"{sub_category_count} sub-categor{'ies' if sub_category_count != 1 else 'y'}. "
        "Please delete them first."
    )
