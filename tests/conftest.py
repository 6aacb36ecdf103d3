"""Shared pytest fixtures for ledgerflow tests."""

import tempfile
import os
from datetime import date, datetime, UTC
from decimal import Decimal
import pytest

from ledgerflow.database.factories import create_sqlite_database
from ledgerflow.domain.account import AccountService
from ledgerflow.domain.bank_account import BankAccountService
from ledgerflow.domain.classification import ClassificationService
from ledgerflow.domain.company import CompanyService
from ledgerflow.domain.journal import JournalService
from ledgerflow.domain.period import FiscalPeriodService
from ledgerflow.domain.rules import RuleService
from ledgerflow.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


class FakeClock:
    """Clock returning a fixed, manually advanced time."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 31, 12, 0, tzinfo=UTC))


@pytest.fixture
def company_service(temp_db):
    return CompanyService(temp_db)


@pytest.fixture
def period_service(temp_db):
    return FiscalPeriodService(temp_db)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def bank_account_service(temp_db):
    return BankAccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def rule_service(temp_db, clock):
    return RuleService(temp_db, clock=clock)


@pytest.fixture
def journal_service(temp_db, clock):
    return JournalService(temp_db, clock=clock)


@pytest.fixture
def classification_service(temp_db, clock):
    return ClassificationService(temp_db, clock=clock)


@pytest.fixture
def company_id(company_service):
    """Create a sample company."""
    return company_service.create_company("Acme Trading (Pty) Ltd")


@pytest.fixture
def period(period_service, company_id):
    """Create the open FY2025 tax year period."""
    period_id = period_service.create_period(
        company_id, "FY2025", date(2024, 3, 1), date(2025, 2, 28)
    )
    return period_service.get_period(period_id)


@pytest.fixture
def chart(account_service, company_id):
    """Install the default chart of accounts."""
    account_service.install_default_chart(company_id)
    return {acc.code: acc for acc in account_service.list_accounts(company_id)}


@pytest.fixture
def make_transaction(transaction_service, company_id, period, chart):
    """Factory creating transactions in the sample period.

    Negative amounts are money out, positive amounts money in.
    """

    def _make(description: str, amount, txn_date: date = date(2024, 6, 15), **kwargs):
        amount = Decimal(str(amount))
        txn_id = transaction_service.create_transaction(
            company_id=company_id,
            fiscal_period_id=kwargs.pop("fiscal_period_id", period.id),
            date=txn_date,
            description=description,
            debit_amount=-amount if amount < 0 else Decimal("0"),
            credit_amount=amount if amount > 0 else Decimal("0"),
            **kwargs,
        )
        return transaction_service.get_transaction(txn_id)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
