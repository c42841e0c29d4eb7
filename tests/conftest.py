"""Shared pytest fixtures for ledgersync tests."""

import tempfile
import os
from datetime import date
import pytest

from ledgersync.database.factories import create_sqlite_database
from ledgersync.domain.account import AccountService, ProviderService
from ledgersync.domain.categorization import CategorizationService
from ledgersync.domain.category import CategoryService
from ledgersync.domain.entities import RawBalance, RawTransaction
from ledgersync.domain.ingest import LedgerIngestService
from ledgersync.domain.transfers import TransferService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def provider_service(temp_db):
    """Create a ProviderService with a temporary database."""
    return ProviderService(temp_db)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def categorization_service(temp_db):
    """Create a CategorizationService with a temporary database."""
    return CategorizationService(temp_db)


@pytest.fixture
def ingest_service(temp_db):
    """Create a LedgerIngestService with a temporary database."""
    return LedgerIngestService(temp_db)


@pytest.fixture
def transfer_service(temp_db):
    """Create a TransferService with a temporary database."""
    return TransferService(temp_db)


@pytest.fixture
def sample_provider(provider_service):
    """Create a sample aggregator provider."""
    provider_id = provider_service.create_provider(name="MoneyForward", kind="aggregator")
    return provider_service.get_provider(provider_id)


@pytest.fixture
def sample_categories(category_service):
    """Seed the default taxonomy and return sub-category IDs keyed by path."""
    category_service.seed_default_categories()
    paths = ["Food > Cafe", "Food > Groceries", "Entertainment > Subscriptions", "Income > Salary"]
    return {path: category_service.resolve_sub_category(path).id for path in paths}


@pytest.fixture
def bank_accounts(ingest_service, sample_provider):
    """Register 'Bank A / Checking' and 'Bank B / Savings' through a balance-only ingest."""
    ingest_service.ingest(
        sample_provider.id,
        [
            RawBalance("Bank A", "Checking", 100000, external_account_key="A-1"),
            RawBalance("Bank B", "Savings", 500000, external_account_key="B-1"),
        ],
        [],
        as_of=date(2024, 5, 1),
    )
    return sample_provider


@pytest.fixture
def make_txn():
    """Return a builder for raw transactions defaulting to Bank A / Checking."""

    def build(txn_date, description, amount, label="Bank A", name="Checking"):
        return RawTransaction(
            date=txn_date,
            description=description,
            amount=amount,
            institution_label=label,
            sub_account_name=name,
        )

    return build


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
