"""Shared pytest fixtures for fintrack tests."""

import os
import tempfile
from pathlib import Path

import pytest

from fintrack.database.factories import create_sqlite_database
from fintrack.domain.account import AccountService
from fintrack.domain.category import CategoryService
from fintrack.domain.transaction import TransactionService


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
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample UAH account for testing."""
    account_id = account_service.create_account(name="Test Account", bank_name="Monobank")
    return account_service.get_account(account_id)


@pytest.fixture
def default_categories(category_service):
    """Create the default categories and return them by name."""
    category_service.ensure_default_categories()
    return {cat.name: cat for cat in category_service.list_categories()}


@pytest.fixture
def qif_accounts(account_service):
    """Accounts named like the ones in sample.qif."""
    checking = account_service.create_account(name="Checking", bank_name="HomeBank")
    savings = account_service.create_account(name="Savings", bank_name="HomeBank", currency="EUR")
    return account_service.get_account(checking), account_service.get_account(savings)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def offline_rates(monkeypatch):
    """Keep tests off the network: exchange-rate requests fail fast."""
    import requests

    def refuse(*args, **kwargs):
        raise requests.exceptions.ConnectionError("network disabled in tests")

    monkeypatch.setattr(requests, "get", refuse)
