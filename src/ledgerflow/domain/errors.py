"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class UnknownAccountError(DomainError):
    """Account code does not exist or is inactive for the company."""

    def __init__(self, company_id: int, account_code: str, reason: str = "not found"):
        self.company_id = company_id
        self.account_code = account_code
        super().__init__(unknown_account(company_id, account_code, reason))


class BalanceError(DomainError):
    """Journal entry debits and credits differ.

    ``difference`` is ``total_debits - total_credits``.
    """

    def __init__(self, message: str, difference: Decimal):
        self.difference = difference
        super().__init__(message)


class SplitMismatchError(BalanceError):
    """Split lines do not add up to the transaction amount."""


class ClosedPeriodError(DomainError):
    """Attempted mutation against a closed fiscal period."""

    def __init__(self, fiscal_period_id: int, period_name: Optional[str] = None):
        self.fiscal_period_id = fiscal_period_id
        super().__init__(period_closed(fiscal_period_id, period_name))


PeriodClosed = ClosedPeriodError


class DuplicateReferenceError(ConflictError):
    """Journal entry reference already used by the company."""

    def __init__(self, company_id: int, reference: str):
        self.company_id = company_id
        self.reference = reference
        super().__init__(duplicate_reference(company_id, reference))


class LedgerCorruptionError(RuntimeError):
    """A persisted entry violates a ledger invariant.

    Not a DomainError: this signals prior corruption and must never be
    collected and skipped like an expected failure.
    """


def company_not_found(company_id: int) -> str:
    """Return message for missing company."""
    return f"Company {company_id} not found"


def fiscal_period_not_found(fiscal_period_id: int) -> str:
    """Return message for missing fiscal period."""
    return f"Fiscal period {fiscal_period_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def rule_not_found(rule_id: int) -> str:
    """Return message for missing classification rule."""
    return f"Classification rule {rule_id} not found"


def journal_entry_not_found(entry_id: int) -> str:
    """Return message for missing journal entry."""
    return f"Journal entry {entry_id} not found"


def bank_account_not_found(bank_account_id: int) -> str:
    """Return message for missing bank account."""
    return f"Bank account {bank_account_id} not found"


def unknown_account(company_id: int, account_code: str, reason: str = "not found") -> str:
    """Return message for an account code that cannot receive postings."""
    return f"Account '{account_code}' {reason} for company {company_id}"


def period_closed(fiscal_period_id: int, period_name: Optional[str] = None) -> str:
    """Return message for a closed fiscal period."""
    label = f"'{period_name}' (ID: {fiscal_period_id})" if period_name else str(fiscal_period_id)
    return f"Fiscal period {label} is closed"


def duplicate_reference(company_id: int, reference: str) -> str:
    """Return message for a reused journal entry reference."""
    return f"Journal entry reference '{reference}' already exists for company {company_id}"


def entry_unbalanced(total_debits: Decimal, total_credits: Decimal) -> str:
    """Return message for an entry whose sides differ."""
    difference = total_debits - total_credits
    return (
        f"Journal entry does not balance: debits {total_debits:.2f}, "
        f"credits {total_credits:.2f}, difference {difference:.2f}"
    )


def split_mismatch(split_total: Decimal, transaction_amount: Decimal) -> str:
    """Return message when split lines do not cover the transaction amount."""
    return (
        f"Split lines total {split_total:.2f} but transaction amount is "
        f"{transaction_amount:.2f} (difference {transaction_amount - split_total:.2f})"
    )


def rule_in_use(rule_id: int, transaction_count: int) -> str:
    """Return message when a used rule is deleted instead of deactivated."""
    return (
        f"Cannot delete rule {rule_id}: it classified {transaction_count} "
        f"transaction{'s' if transaction_count != 1 else ''}. Deactivate it instead."
    )

