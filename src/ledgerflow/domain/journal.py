"""Journal persistence service."""

import threading
from datetime import date
from typing import Optional, Sequence
from ledgerflow.database.base import Database, DEFAULT_REFERENCE_FORMAT
from ledgerflow.domain import errors
from ledgerflow.domain.clock import Clock, utc_now
from ledgerflow.domain.entities import (
    EntryStatus,
    JournalEntry,
    JournalEntryDraft,
    JournalFilters,
    LineSpec,
    Page,
    TransactionClassification,
    TrialBalanceRow,
    ZERO,
    to_cents,
)
from ledgerflow.domain.journal_builder import JournalEntryBuilder, opening_balance_reference
from ledgerflow.domain.ledger_checker import LedgerChecker
from ledgerflow.logging_config import get_logger

logger = get_logger("domain.journal")

DEFAULT_PAGE_SIZE = 50


class JournalService:
    """Validates and persists journal entries.

    Writes for one company are serialized so that reference allocation and
    the final period check happen atomically with respect to each other.
    """

    _company_locks: dict[int, threading.Lock] = {}
    _company_locks_guard = threading.Lock()

    def __init__(
        self,
        db: Database,
        clock: Clock = utc_now,
        checker: Optional[LedgerChecker] = None,
        builder: Optional[JournalEntryBuilder] = None,
    ):
        """Initialize journal service.

        Args:
            db: Database instance
            clock: Source of created_at timestamps
            checker: Ledger checker, defaults to one over ``db``
            builder: Entry builder for manual entries
        """
        self.db = db
        self.clock = clock
        self.checker = checker or LedgerChecker(db)
        self.builder = builder or JournalEntryBuilder()

    @classmethod
    def company_lock(cls, company_id: int) -> threading.Lock:
        """Return the write lock for a company."""
        with cls._company_locks_guard:
            lock = cls._company_locks.get(company_id)
            if lock is None:
                lock = threading.Lock()
                cls._company_locks[company_id] = lock
            return lock

    def post(
        self,
        draft: JournalEntryDraft,
        classification: Optional[TransactionClassification] = None,
        reference_format: str = DEFAULT_REFERENCE_FORMAT,
    ) -> JournalEntry:
        """Validate and persist a new entry.

        The draft is re-validated under the company lock. Entry, lines and
        the optional transaction classification are written in one commit.

        Returns:
            The persisted entry

        Raises:
            DomainError: The validation error of a rejected draft
            DuplicateReferenceError: If the reference is already used
        """
        if draft.entry_id is not None:
            raise errors.ValidationError("Draft replaces an existing entry; use replace_lines")

        with self.company_lock(draft.company_id):
            self.checker.ensure_valid(draft)
            try:
                entry_id = self.db.save_journal_entry(
                    company_id=draft.company_id,
                    fiscal_period_id=draft.fiscal_period_id,
                    entry_date=draft.entry_date,
                    description=draft.description,
                    created_by=draft.created_by,
                    created_at=self.clock(),
                    lines=list(draft.lines),
                    reference=draft.reference,
                    classification=classification,
                    reference_format=reference_format,
                )
            except errors.DomainError as e:
                draft.status = EntryStatus.REJECTED
                draft.error = e
                raise

        entry = self.get_journal_entry(entry_id)
        draft.entry_id = entry.id
        draft.reference = entry.reference
        draft.status = EntryStatus.POSTED
        logger.info(
            "Posted journal entry %s (%s) for company %s: %s",
            entry.id,
            entry.reference,
            entry.company_id,
            entry.total_debits,
        )
        return entry

    def replace_lines(
        self,
        draft: JournalEntryDraft,
        classification: Optional[TransactionClassification] = None,
    ) -> JournalEntry:
        """Re-validate a draft and write its lines over an existing entry.

        The stored entry is left untouched unless validation succeeds.
        """
        if draft.entry_id is None:
            raise errors.ValidationError("Draft does not reference an existing entry")

        existing = self.get_journal_entry(draft.entry_id)
        self._ensure_period_open(existing.fiscal_period_id)

        with self.company_lock(draft.company_id):
            self.checker.ensure_valid(draft)
            self.db.replace_journal_entry_lines(
                draft.entry_id,
                list(draft.lines),
                description=draft.description,
                classification=classification,
            )

        entry = self.get_journal_entry(draft.entry_id)
        draft.status = EntryStatus.POSTED
        logger.info("Replaced lines of journal entry %s (%s)", entry.id, entry.reference)
        return entry

    def get_journal_entry(self, entry_id: int) -> JournalEntry:
        """Get a journal entry, verifying it at read time.

        Raises:
            NotFoundError: If the entry doesn't exist
            LedgerCorruptionError: If the stored entry does not balance
        """
        entry = self.db.get_journal_entry(entry_id)
        if entry is None:
            raise errors.NotFoundError(errors.journal_entry_not_found(entry_id))
        return self.checker.verify_persisted(entry)

    def list_journal_entries(
        self,
        company_id: int,
        fiscal_period_id: Optional[int] = None,
        filters: Optional[JournalFilters] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[JournalEntry]:
        """List journal entries one page at a time, ordered by date then ID."""
        if page < 1:
            raise errors.ValidationError("Page must be 1 or greater")
        if page_size < 1:
            raise errors.ValidationError("Page size must be 1 or greater")

        entries, total = self.db.list_journal_entries(
            company_id,
            fiscal_period_id=fiscal_period_id,
            filters=filters,
            offset=(page - 1) * page_size,
            limit=page_size,
        )
        for entry in entries:
            self.checker.verify_persisted(entry)
        return Page(items=entries, total=total, page=page, page_size=page_size)

    def edit_entry_lines(
        self,
        entry_id: int,
        lines: Sequence[LineSpec],
        description: Optional[str] = None,
    ) -> JournalEntry:
        """Replace the lines of an entry in an open period.

        Raises:
            ClosedPeriodError: If the entry's period is closed
            BalanceError: If the new lines do not balance
        """
        existing = self.get_journal_entry(entry_id)
        draft = self.builder.build_manual(
            company_id=existing.company_id,
            fiscal_period_id=existing.fiscal_period_id,
            entry_date=existing.entry_date,
            description=description or existing.description,
            lines=lines,
            reference=existing.reference,
            created_by=existing.created_by,
        )
        draft.entry_id = existing.id
        return self.replace_lines(draft)

    def delete_entry(self, entry_id: int) -> None:
        """Delete an entry in an open period.

        Transactions left without any entry become unclassified.

        Raises:
            ClosedPeriodError: If the entry's period is closed
        """
        entry = self.get_journal_entry(entry_id)
        self._ensure_period_open(entry.fiscal_period_id)

        orphaned = set()
        for line in entry.lines:
            tid = line.source_transaction_id
            if tid is None or tid in orphaned:
                continue
            others = [e for e in self.db.find_journal_entries_for_transaction(tid) if e.id != entry.id]
            if not others:
                orphaned.add(tid)

        with self.company_lock(entry.company_id):
            self.db.delete_journal_entry(entry.id, unclassify_transaction_ids=orphaned)
        logger.info("Deleted journal entry %s (%s)", entry.id, entry.reference)

    def create_opening_balance(
        self,
        company_id: int,
        fiscal_period_id: int,
        lines: Sequence[LineSpec],
        entry_date: Optional[date] = None,
        created_by: str = "SYSTEM",
    ) -> JournalEntry:
        """Post the opening balance entry of a fiscal period.

        The entry uses reference ``OB-{fiscal_period_id}``, so each period
        has at most one.
        """
        period = self.db.get_fiscal_period(fiscal_period_id)
        if period is None or period.company_id != company_id:
            raise errors.NotFoundError(errors.fiscal_period_not_found(fiscal_period_id))

        draft = self.builder.build_manual(
            company_id=company_id,
            fiscal_period_id=fiscal_period_id,
            entry_date=entry_date or period.start_date,
            description=f"Opening balances for {period.name}",
            lines=lines,
            reference=opening_balance_reference(fiscal_period_id),
            created_by=created_by,
        )
        return self.post(draft)

    def trial_balance(self, company_id: int, fiscal_period_id: int) -> list[TrialBalanceRow]:
        """Per-account debit and credit totals for a period.

        Raises:
            LedgerCorruptionError: If total debits and credits differ
        """
        names = {a.code: a.name for a in self.db.list_accounts(company_id, include_inactive=True)}
        rows = [
            TrialBalanceRow(
                account_code=code,
                account_name=names.get(code, ""),
                total_debits=debits,
                total_credits=credits,
            )
            for code, debits, credits in self.db.get_account_totals(company_id, fiscal_period_id)
        ]
        total_debits = sum((row.total_debits for row in rows), ZERO)
        total_credits = sum((row.total_credits for row in rows), ZERO)
        if to_cents(total_debits) != to_cents(total_credits):
            logger.critical(
                "Trial balance for company %s period %s is out of balance: %s != %s",
                company_id,
                fiscal_period_id,
                total_debits,
                total_credits,
            )
            raise errors.LedgerCorruptionError(
                f"Ledger out of balance: debits {total_debits:.2f}, credits {total_credits:.2f}"
            )
        return rows

    def _ensure_period_open(self, fiscal_period_id: int) -> None:
        period = self.db.get_fiscal_period(fiscal_period_id)
        if period is None:
            raise errors.NotFoundError(errors.fiscal_period_not_found(fiscal_period_id))
        if period.closed:
            raise errors.ClosedPeriodError(period.id, period.name)
