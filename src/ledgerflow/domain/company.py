"""Company domain service."""

from typing import Optional
from ledgerflow.database.base import Database
from ledgerflow.domain import errors
from ledgerflow.domain.entities import Company as CompanyEntity


class CompanyService:
    """Service for managing companies."""

    def __init__(self, db: Database):
        """Initialize company service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_company(self, name: str) -> int:
        """Create a company.

        Raises:
            ValidationError: If name is blank
            ConflictError: If a company with the same name exists
        """
        name = (name or "").strip()
        if not name:
            raise errors.ValidationError("Company name is required")
        for company in self.db.list_companies():
            if company.name == name:
                raise errors.ConflictError(f"Company with name '{name}' already exists")
        return self.db.create_company(name)

    def get_company(self, company_id: int) -> Optional[CompanyEntity]:
        return self.db.get_company(company_id)

    def require_company(self, company_id: int) -> CompanyEntity:
        """Get company by ID or raise NotFoundError."""
        company = self.db.get_company(company_id)
        if company is None:
            raise errors.NotFoundError(errors.company_not_found(company_id))
        return company

    def list_companies(self) -> list[CompanyEntity]:
        return self.db.list_companies()
