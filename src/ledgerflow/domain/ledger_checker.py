"""Ledger consistency checks.

Every draft passes through ``LedgerChecker.validate`` before it may be
persisted. A draft that fails becomes REJECTED and stays that way.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from ledgerflow.database.base import Database
from ledgerflow.domain import errors
from ledgerflow.domain.entities import CENT, EntryStatus, JournalEntry, JournalEntryDraft, to_cents
from ledgerflow.logging_config import get_logger

logger = get_logger("domain.ledger_checker")


@dataclass(frozen=True)
class CheckResult:
    """Outcome of validating a draft."""

    ok: bool
    error: Optional[errors.DomainError] = None


def check_balance(lines) -> None:
    """Raise BalanceError unless debits equal credits to the cent."""
    debit_cents = sum(to_cents(line.debit_amount) for line in lines)
    credit_cents = sum(to_cents(line.credit_amount) for line in lines)
    if debit_cents != credit_cents:
        total_debits = Decimal(debit_cents) * CENT
        total_credits = Decimal(credit_cents) * CENT
        raise errors.BalanceError(
            errors.entry_unbalanced(total_debits, total_credits),
            difference=total_debits - total_credits,
        )


class LedgerChecker:
    """Validates drafts and verifies persisted entries."""

    def __init__(self, db: Database):
        """Initialize ledger checker.

        Args:
            db: Database used to look up periods, accounts and transactions
        """
        self.db = db

    def validate(self, draft: JournalEntryDraft) -> CheckResult:
        """Validate a draft and move it to VALIDATED or REJECTED.

        A REJECTED draft is terminal and returns its original error.
        """
        if draft.status == EntryStatus.REJECTED:
            return CheckResult(ok=False, error=draft.error)
        if draft.status == EntryStatus.POSTED:
            return CheckResult(
                ok=False, error=errors.ValidationError("Journal entry has already been posted")
            )

        try:
            self._check(draft)
        except errors.DomainError as e:
            draft.status = EntryStatus.REJECTED
            draft.error = e
            logger.info("Rejected journal entry '%s': %s", draft.description, e)
            return CheckResult(ok=False, error=e)

        draft.status = EntryStatus.VALIDATED
        draft.error = None
        return CheckResult(ok=True)

    def ensure_valid(self, draft: JournalEntryDraft) -> None:
        """Validate a draft, raising its error on failure."""
        result = self.validate(draft)
        if not result.ok:
            raise result.error

    def _check(self, draft: JournalEntryDraft) -> None:
        if len(draft.lines) < 2:
            raise errors.ValidationError("Journal entry must have at least two lines")

        check_balance(draft.lines)

        period = self.db.get_fiscal_period(draft.fiscal_period_id)
        if period is None or period.company_id != draft.company_id:
            raise errors.NotFoundError(errors.fiscal_period_not_found(draft.fiscal_period_id))
        if period.closed:
            raise errors.ClosedPeriodError(period.id, period.name)

        for code in dict.fromkeys(line.account_code for line in draft.lines):
            account = self.db.get_account(draft.company_id, code)
            if account is None:
                raise errors.UnknownAccountError(draft.company_id, code)
            if not account.active:
                raise errors.UnknownAccountError(draft.company_id, code, reason="is inactive")

        for transaction_id in sorted(draft.source_transaction_ids):
            txn = self.db.get_transaction(transaction_id)
            if txn is None:
                raise errors.ValidationError(errors.transaction_not_found(transaction_id))
            if txn.company_id != draft.company_id or txn.fiscal_period_id != draft.fiscal_period_id:
                raise errors.ValidationError(
                    f"Transaction {transaction_id} belongs to a different fiscal period than the entry"
                )

        if not period.contains(draft.entry_date):
            raise errors.ValidationError(
                f"Entry date {draft.entry_date} is outside fiscal period '{period.name}' "
                f"({period.start_date} to {period.end_date})"
            )

    def verify_persisted(self, entry: JournalEntry) -> JournalEntry:
        """Check a persisted entry at read time.

        Raises:
            LedgerCorruptionError: If the entry does not balance or has fewer than two lines
        """
        try:
            if len(entry.lines) < 2:
                raise errors.ValidationError("fewer than two lines")
            check_balance(entry.lines)
        except errors.DomainError as e:
            logger.critical(
                "Ledger corruption in journal entry %s (%s): %s", entry.id, entry.reference, e
            )
            raise errors.LedgerCorruptionError(
                f"Persisted journal entry {entry.id} ({entry.reference}) is invalid: {e}"
            ) from e
        return entry
