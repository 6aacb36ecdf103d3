"""Transaction domain service."""

from typing import Optional
from datetime import date
from decimal import Decimal
from ledgerflow.database.base import Database
from ledgerflow.domain import errors
from ledgerflow.domain.entities import Transaction as TransactionEntity, to_money


class TransactionService:
    """Service for ingesting and reading bank transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        company_id: int,
        fiscal_period_id: int,
        date: date,
        description: str,
        debit_amount: Decimal = Decimal("0"),
        credit_amount: Decimal = Decimal("0"),
        bank_account_id: Optional[int] = None,
        running_balance: Optional[Decimal] = None,
    ) -> int:
        """Create an unclassified transaction.

        Args:
            company_id: Company ID
            fiscal_period_id: Fiscal period the statement line belongs to
            date: Transaction date
            description: Statement description
            debit_amount: Money out of the bank
            credit_amount: Money into the bank
            bank_account_id: Optional bank account ID
            running_balance: Optional statement running balance

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If company, period or bank account doesn't exist
            ValidationError: If amounts are invalid or the date is outside the period
        """
        if self.db.get_company(company_id) is None:
            raise errors.NotFoundError(errors.company_not_found(company_id))

        period = self.db.get_fiscal_period(fiscal_period_id)
        if period is None or period.company_id != company_id:
            raise errors.NotFoundError(errors.fiscal_period_not_found(fiscal_period_id))
        if not period.contains(date):
            raise errors.ValidationError(
                f"Transaction date {date} is outside fiscal period '{period.name}' "
                f"({period.start_date} to {period.end_date})"
            )

        description = (description or "").strip()
        if not description:
            raise errors.ValidationError("Transaction description is required")

        debit_amount = to_money(debit_amount)
        credit_amount = to_money(credit_amount)
        if debit_amount < 0 or credit_amount < 0:
            raise errors.ValidationError("Transaction amounts cannot be negative")
        if (debit_amount > 0) == (credit_amount > 0):
            raise errors.ValidationError(
                "Exactly one of debit amount or credit amount must be positive"
            )

        if bank_account_id is not None:
            bank_account = self.db.get_bank_account(bank_account_id)
            if bank_account is None or bank_account.company_id != company_id:
                raise errors.NotFoundError(errors.bank_account_not_found(bank_account_id))

        return self.db.create_transaction(
            company_id=company_id,
            fiscal_period_id=fiscal_period_id,
            date=date,
            description=description,
            debit_amount=debit_amount,
            credit_amount=credit_amount,
            bank_account_id=bank_account_id,
            running_balance=to_money(running_balance) if running_balance is not None else None,
        )

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: int) -> TransactionEntity:
        """Get transaction by ID or raise NotFoundError."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise errors.NotFoundError(errors.transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self,
        company_id: int,
        fiscal_period_id: Optional[int] = None,
        classified: Optional[bool] = None,
    ) -> list[TransactionEntity]:
        """List transactions ordered by date then ID.

        Args:
            company_id: Company ID
            fiscal_period_id: Optional fiscal period filter
            classified: True for classified only, False for unclassified only
        """
        return self.db.list_transactions(company_id, fiscal_period_id=fiscal_period_id, classified=classified)
