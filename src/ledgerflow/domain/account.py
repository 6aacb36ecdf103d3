"""Chart of accounts domain service."""

from typing import Optional
from ledgerflow.database.base import Database
from ledgerflow.domain import errors
from ledgerflow.domain.entities import Account as AccountEntity, classify_account_code
from ledgerflow.logging_config import get_logger

logger = get_logger("domain.account")

DEFAULT_BANK_ACCOUNT_CODE = "1100"

# Standard chart for a South African SME. Leading digit sets category:
# 1 asset, 2 liability, 3 equity, 4-6 income, 7-9 expense.
DEFAULT_CHART = [
    ("1000", "Petty Cash"),
    ("1100", "Bank - Current Account"),
    ("1101", "Bank - Savings Account"),
    ("1200", "Accounts Receivable"),
    ("1300", "Inventory"),
    ("1400", "Prepaid Expenses"),
    ("1500", "VAT Input"),
    ("1600", "Property, Plant & Equipment"),
    ("1700", "Motor Vehicles"),
    ("2000", "Accounts Payable"),
    ("2100", "VAT Output"),
    ("2200", "PAYE Payable"),
    ("2300", "UIF Payable"),
    ("2400", "SDL Payable"),
    ("2500", "Accrued Expenses"),
    ("2600", "Director Loans"),
    ("2700", "Long-term Loans"),
    ("3000", "Share Capital"),
    ("3100", "Retained Earnings"),
    ("3200", "Opening Balance Equity"),
    ("4000", "Sales Revenue"),
    ("4100", "Service Revenue"),
    ("5000", "Interest Income"),
    ("5100", "Dividend Income"),
    ("6000", "Other Income"),
    ("7000", "Cost of Sales"),
    ("8100", "Employee Costs"),
    ("8200", "Rent Expense"),
    ("8300", "Utilities"),
    ("8400", "Communication"),
    ("8500", "Motor Vehicle Expenses"),
    ("8600", "Fuel"),
    ("8700", "Professional Services"),
    ("8800", "Insurance"),
    ("8900", "Repairs & Maintenance"),
    ("9000", "Office Supplies"),
    ("9100", "Computer Expenses"),
    ("9200", "Marketing & Advertising"),
    ("9500", "Interest Expense"),
    ("9600", "Bank Charges"),
    ("9800", "SARS Payments"),
    ("9900", "Suspense"),
]


class AccountService:
    """Service for managing a company's chart of accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(self, company_id: int, code: str, name: str) -> int:
        """Create a chart-of-accounts entry.

        Args:
            company_id: Company ID
            code: Account code; its leading digit determines category and normal side
            name: Account name

        Returns:
            Account ID

        Raises:
            NotFoundError: If company doesn't exist
            ValidationError: If code or name is blank or the code has no valid leading digit
            ConflictError: If code already exists for the company
        """
        if self.db.get_company(company_id) is None:
            raise errors.NotFoundError(errors.company_not_found(company_id))

        code = (code or "").strip()
        name = (name or "").strip()
        if not code:
            raise errors.ValidationError("Account code is required")
        if not name:
            raise errors.ValidationError("Account name is required")
        try:
            classify_account_code(code)
        except ValueError as e:
            raise errors.ValidationError(str(e)) from e

        if self.db.get_account(company_id, code) is not None:
            raise errors.ConflictError(f"Account '{code}' already exists for company {company_id}")

        return self.db.create_account(company_id=company_id, code=code, name=name)

    def get_account(self, company_id: int, code: str) -> Optional[AccountEntity]:
        """Get account by code.

        Args:
            company_id: Company ID
            code: Account code

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(company_id, code)

    def require_active_account(self, company_id: int, code: str) -> AccountEntity:
        """Get an account that may receive postings.

        Raises:
            UnknownAccountError: If the account doesn't exist or is inactive
        """
        account = self.db.get_account(company_id, (code or "").strip())
        if account is None:
            raise errors.UnknownAccountError(company_id, code)
        if not account.active:
            raise errors.UnknownAccountError(company_id, code, reason="is inactive")
        return account

    def list_accounts(self, company_id: int, include_inactive: bool = False) -> list[AccountEntity]:
        """List accounts ordered by code."""
        return self.db.list_accounts(company_id, include_inactive=include_inactive)

    def deactivate_account(self, company_id: int, code: str) -> None:
        """Deactivate an account so it receives no new postings.

        Existing postings are untouched.
        """
        account = self.db.get_account(company_id, code)
        if account is None:
            raise errors.UnknownAccountError(company_id, code)
        if account.active:
            self.db.set_account_active(company_id, code, False)
            logger.info("Deactivated account %s for company %s", code, company_id)

    def activate_account(self, company_id: int, code: str) -> None:
        """Reactivate an account."""
        account = self.db.get_account(company_id, code)
        if account is None:
            raise errors.UnknownAccountError(company_id, code)
        if not account.active:
            self.db.set_account_active(company_id, code, True)
            logger.info("Activated account %s for company %s", code, company_id)

    def install_default_chart(self, company_id: int) -> int:
        """Create the standard chart of accounts, skipping codes that exist.

        Returns:
            Number of accounts created
        """
        if self.db.get_company(company_id) is None:
            raise errors.NotFoundError(errors.company_not_found(company_id))

        created = 0
        for code, name in DEFAULT_CHART:
            if self.db.get_account(company_id, code) is None:
                self.db.create_account(company_id=company_id, code=code, name=name)
                created += 1
        logger.info("Installed %d default accounts for company %s", created, company_id)
        return created
