"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerflow.domain.entities import (
    Company,
    FiscalPeriod,
    Account,
    BankAccount,
    Transaction,
    ClassificationRule,
    JournalEntry,
    JournalEntryLine,
    JournalFilters,
    TransactionClassification,
)

DEFAULT_REFERENCE_FORMAT = "JE-{:06d}"


class Database(ABC):
    """Abstract database interface for ledgerflow."""

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

    # Company operations
    @abstractmethod
    def create_company(self, name: str) -> int:
        """Create a company. Returns company ID."""
        pass

    @abstractmethod
    def get_company(self, company_id: int) -> Optional[Company]:
        """Get company by ID."""
        pass

    @abstractmethod
    def list_companies(self) -> list[Company]:
        """List all companies."""
        pass

    # Fiscal period operations
    @abstractmethod
    def create_fiscal_period(self, company_id: int, name: str, start_date: date, end_date: date) -> int:
        """Create an open fiscal period. Returns fiscal period ID."""
        pass

    @abstractmethod
    def get_fiscal_period(self, fiscal_period_id: int) -> Optional[FiscalPeriod]:
        """Get fiscal period by ID."""
        pass

    @abstractmethod
    def list_fiscal_periods(self, company_id: int) -> list[FiscalPeriod]:
        """List fiscal periods of a company ordered by start date."""
        pass

    @abstractmethod
    def set_fiscal_period_closed(self, fiscal_period_id: int, closed: bool) -> None:
        """Open or close a fiscal period."""
        pass

    # Chart of accounts operations
    @abstractmethod
    def create_account(self, company_id: int, code: str, name: str) -> int:
        """Create a chart-of-accounts entry. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, company_id: int, code: str) -> Optional[Account]:
        """Get account by company and code."""
        pass

    @abstractmethod
    def list_accounts(self, company_id: int, include_inactive: bool = False) -> list[Account]:
        """List accounts of a company ordered by code."""
        pass

    @abstractmethod
    def set_account_active(self, company_id: int, code: str, active: bool) -> None:
        """Activate or deactivate an account."""
        pass

    # Bank account operations
    @abstractmethod
    def create_bank_account(
        self, company_id: int, name: str, bank_name: str, clearing_account_code: str
    ) -> int:
        """Create a bank account. Returns bank account ID."""
        pass

    @abstractmethod
    def get_bank_account(self, bank_account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID."""
        pass

    @abstractmethod
    def list_bank_accounts(self, company_id: int) -> list[BankAccount]:
        """List bank accounts of a company."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        company_id: int,
        fiscal_period_id: int,
        date: date,
        description: str,
        debit_amount: Decimal,
        credit_amount: Decimal,
        bank_account_id: Optional[int] = None,
        running_balance: Optional[Decimal] = None,
    ) -> int:
        """Create an unclassified transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        company_id: int,
        fiscal_period_id: Optional[int] = None,
        classified: Optional[bool] = None,
    ) -> list[Transaction]:
        """List transactions ordered by date then ID.

        Args:
            company_id: Company ID
            fiscal_period_id: Optional fiscal period filter
            classified: If True only classified, if False only unclassified, None for all
        """
        pass

    @abstractmethod
    def count_transactions(
        self,
        company_id: int,
        fiscal_period_id: Optional[int] = None,
        classified: Optional[bool] = None,
    ) -> int:
        """Count transactions with the same filters as list_transactions."""
        pass

    # Classification rule operations
    @abstractmethod
    def create_rule(
        self,
        company_id: int,
        rule_name: str,
        match_type: str,
        match_value: str,
        account_code: str,
        priority: int,
        description: Optional[str] = None,
    ) -> int:
        """Create a classification rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_rule(self, rule_id: int) -> Optional[ClassificationRule]:
        """Get classification rule by ID."""
        pass

    @abstractmethod
    def list_rules(self, company_id: int, active_only: bool = True) -> list[ClassificationRule]:
        """List rules of a company ordered by priority descending, then ID ascending."""
        pass

    @abstractmethod
    def set_rule_active(self, rule_id: int, active: bool, updated_at: datetime) -> None:
        """Change the active flag of a rule."""
        pass

    @abstractmethod
    def count_rule_usage(self, rule_id: int) -> int:
        """Count transactions ever classified by a rule."""
        pass

    @abstractmethod
    def delete_rule(self, rule_id: int) -> None:
        """Physically delete a rule."""
        pass

    # Journal operations
    @abstractmethod
    def reference_exists(self, company_id: int, reference: str) -> bool:
        """Check whether a journal reference is used by the company."""
        pass

    @abstractmethod
    def save_journal_entry(
        self,
        company_id: int,
        fiscal_period_id: int,
        entry_date: date,
        description: str,
        created_by: str,
        created_at: datetime,
        lines: list[JournalEntryLine],
        reference: Optional[str] = None,
        classification: Optional[TransactionClassification] = None,
        reference_format: str = DEFAULT_REFERENCE_FORMAT,
    ) -> int:
        """Persist an entry with its lines in one database transaction.

        When ``reference`` is None the next value of the company's reference
        sequence is allocated and formatted with ``reference_format``. The
        optional ``classification`` is written to its transaction in the same
        commit.

        Returns:
            Journal entry ID

        Raises:
            DuplicateReferenceError: If the reference is already used
        """
        pass

    @abstractmethod
    def replace_journal_entry_lines(
        self,
        entry_id: int,
        lines: list[JournalEntryLine],
        description: Optional[str] = None,
        classification: Optional[TransactionClassification] = None,
    ) -> None:
        """Atomically replace all lines of an entry."""
        pass

    @abstractmethod
    def delete_journal_entry(self, entry_id: int, unclassify_transaction_ids: Optional[set[int]] = None) -> None:
        """Delete an entry and its lines, optionally clearing transaction classifications."""
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry with its lines."""
        pass

    @abstractmethod
    def list_journal_entries(
        self,
        company_id: int,
        fiscal_period_id: Optional[int] = None,
        filters: Optional[JournalFilters] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[list[JournalEntry], int]:
        """List journal entries ordered by entry date then ID.

        Returns:
            Tuple of (entries on the requested page, total matching entries)
        """
        pass

    @abstractmethod
    def find_journal_entries_for_transaction(self, transaction_id: int) -> list[JournalEntry]:
        """Find entries with at least one line referencing the transaction."""
        pass

    @abstractmethod
    def get_account_totals(self, company_id: int, fiscal_period_id: int) -> list[tuple[str, Decimal, Decimal]]:
        """Sum debits and credits per account code for a period.

        Returns:
            List of (account_code, total_debits, total_credits) ordered by code
        """
        pass
