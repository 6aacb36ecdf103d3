"""Fiscal period domain service."""

from datetime import date
from typing import Optional
from ledgerflow.database.base import Database
from ledgerflow.domain import errors
from ledgerflow.domain.entities import FiscalPeriod as FiscalPeriodEntity
from ledgerflow.logging_config import get_logger

logger = get_logger("domain.period")


class FiscalPeriodService:
    """Service for managing fiscal periods and their open/closed state."""

    def __init__(self, db: Database):
        """Initialize fiscal period service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_period(self, company_id: int, name: str, start_date: date, end_date: date) -> int:
        """Create an open fiscal period.

        Args:
            company_id: Company ID
            name: Period name (e.g., "FY2025"), unique per company
            start_date: First day of the period
            end_date: Last day of the period

        Returns:
            Fiscal period ID

        Raises:
            NotFoundError: If company doesn't exist
            ValidationError: If dates are inverted or overlap another period
            ConflictError: If the name is already used
        """
        if self.db.get_company(company_id) is None:
            raise errors.NotFoundError(errors.company_not_found(company_id))

        name = (name or "").strip()
        if not name:
            raise errors.ValidationError("Fiscal period name is required")
        if start_date > end_date:
            raise errors.ValidationError(
                f"Fiscal period start date {start_date} is after end date {end_date}"
            )

        for period in self.db.list_fiscal_periods(company_id):
            if period.name == name:
                raise errors.ConflictError(
                    f"Fiscal period '{name}' already exists for company {company_id}"
                )
            if start_date <= period.end_date and period.start_date <= end_date:
                raise errors.ValidationError(
                    f"Fiscal period {start_date} to {end_date} overlaps '{period.name}' "
                    f"({period.start_date} to {period.end_date})"
                )

        period_id = self.db.create_fiscal_period(company_id, name, start_date, end_date)
        logger.info("Created fiscal period %s (%s) for company %s", period_id, name, company_id)
        return period_id

    def get_period(self, fiscal_period_id: int) -> Optional[FiscalPeriodEntity]:
        return self.db.get_fiscal_period(fiscal_period_id)

    def require_period(self, fiscal_period_id: int) -> FiscalPeriodEntity:
        """Get fiscal period or raise NotFoundError."""
        period = self.db.get_fiscal_period(fiscal_period_id)
        if period is None:
            raise errors.NotFoundError(errors.fiscal_period_not_found(fiscal_period_id))
        return period

    def require_open_period(self, fiscal_period_id: int) -> FiscalPeriodEntity:
        """Get fiscal period, raising ClosedPeriodError if it is closed."""
        period = self.require_period(fiscal_period_id)
        if period.closed:
            raise errors.ClosedPeriodError(period.id, period.name)
        return period

    def list_periods(self, company_id: int) -> list[FiscalPeriodEntity]:
        return self.db.list_fiscal_periods(company_id)

    def find_period_for_date(self, company_id: int, day: date) -> Optional[FiscalPeriodEntity]:
        """Return the company's fiscal period containing a date, if any."""
        for period in self.db.list_fiscal_periods(company_id):
            if period.contains(day):
                return period
        return None

    def close_period(self, fiscal_period_id: int) -> None:
        """Close a fiscal period. Closing a closed period is a no-op."""
        period = self.require_period(fiscal_period_id)
        if period.closed:
            return
        self.db.set_fiscal_period_closed(fiscal_period_id, True)
        logger.info("Closed fiscal period %s (%s)", period.id, period.name)

    def reopen_period(self, fiscal_period_id: int) -> None:
        """Reopen a closed fiscal period."""
        period = self.require_period(fiscal_period_id)
        if not period.closed:
            return
        self.db.set_fiscal_period_closed(fiscal_period_id, False)
        logger.warning("Reopened fiscal period %s (%s)", period.id, period.name)
