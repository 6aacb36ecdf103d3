"""Bank account domain service."""

from typing import Optional
from ledgerflow.database.base import Database
from ledgerflow.domain import errors
from ledgerflow.domain.account import AccountService, DEFAULT_BANK_ACCOUNT_CODE
from ledgerflow.domain.entities import AccountCategory, BankAccount as BankAccountEntity, Transaction


class BankAccountService:
    """Service for bank accounts and their clearing ledger accounts."""

    def __init__(self, db: Database):
        """Initialize bank account service.

        Args:
            db: Database instance
        """
        self.db = db
        self.accounts = AccountService(db)

    def create_bank_account(
        self,
        company_id: int,
        name: str,
        bank_name: str,
        clearing_account_code: str = DEFAULT_BANK_ACCOUNT_CODE,
    ) -> int:
        """Create a bank account.

        Args:
            company_id: Company ID
            name: Account name, unique per company
            bank_name: Bank name (e.g., "FNB", "Standard Bank")
            clearing_account_code: Asset account in the chart that mirrors this bank account

        Returns:
            Bank account ID

        Raises:
            ValidationError: If the clearing account is not an active asset account
            ConflictError: If the name is already used
        """
        name = (name or "").strip()
        if not name:
            raise errors.ValidationError("Bank account name is required")

        try:
            clearing = self.accounts.require_active_account(company_id, clearing_account_code)
        except errors.UnknownAccountError as e:
            raise errors.ValidationError(str(e)) from e
        if clearing.category != AccountCategory.ASSET:
            raise errors.ValidationError(
                f"Clearing account '{clearing.code}' must be an asset account"
            )

        for existing in self.db.list_bank_accounts(company_id):
            if existing.name == name:
                raise errors.ConflictError(f"Bank account with name '{name}' already exists")

        return self.db.create_bank_account(
            company_id=company_id,
            name=name,
            bank_name=(bank_name or name).strip(),
            clearing_account_code=clearing.code,
        )

    def get_bank_account(self, bank_account_id: int) -> Optional[BankAccountEntity]:
        return self.db.get_bank_account(bank_account_id)

    def list_bank_accounts(self, company_id: int) -> list[BankAccountEntity]:
        return self.db.list_bank_accounts(company_id)

    def clearing_account_for(self, transaction: Transaction) -> str:
        """Return the ledger account code that offsets a transaction.

        Transactions without a bank account use the company default ``1100``.
        """
        if transaction.bank_account_id is None:
            return DEFAULT_BANK_ACCOUNT_CODE
        bank_account = self.db.get_bank_account(transaction.bank_account_id)
        if bank_account is None:
            raise errors.NotFoundError(errors.bank_account_not_found(transaction.bank_account_id))
        return bank_account.clearing_account_code
