"""Classification service: the public entry point to the classification engine."""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence
from ledgerflow.database.base import Database
from ledgerflow.domain import errors
from ledgerflow.domain.bank_account import BankAccountService
from ledgerflow.domain.classifier import Classifier, suggestion_from_matches
from ledgerflow.domain.clock import Clock, utc_now
from ledgerflow.domain.entities import (
    BatchResult,
    ClassificationRule,
    ClassificationStats,
    JournalEntry,
    JournalEntryDraft,
    JournalFilters,
    OutcomeStatus,
    Page,
    RuleSpec,
    SplitLine,
    Suggestion,
    Transaction,
    TransactionClassification,
    TransactionOutcome,
    UnclassifiedTransaction,
)
from ledgerflow.domain.journal import DEFAULT_PAGE_SIZE, JournalService
from ledgerflow.domain.journal_builder import JournalEntryBuilder
from ledgerflow.domain.matcher import match_rules
from ledgerflow.domain.rules import RuleService
from ledgerflow.logging_config import get_logger

logger = get_logger("domain.classification")

DEFAULT_MAX_WORKERS = 4


class ClassificationService:
    """Classifies bank transactions and maintains their journal entries."""

    def __init__(self, db: Database, clock: Clock = utc_now, max_workers: int = DEFAULT_MAX_WORKERS):
        """Initialize classification service.

        Args:
            db: Database instance
            clock: Source of timestamps
            max_workers: Thread count for the matching phase of batch runs
        """
        self.db = db
        self.clock = clock
        self.max_workers = max_workers
        self.builder = JournalEntryBuilder()
        self.journal = JournalService(db, clock=clock, builder=self.builder)
        self.classifier = Classifier(db, clock=clock, journal=self.journal, builder=self.builder)
        self.rules = RuleService(db, clock=clock)
        self.bank_accounts = BankAccountService(db)

    def _require_company(self, company_id: int) -> None:
        if self.db.get_company(company_id) is None:
            raise errors.NotFoundError(errors.company_not_found(company_id))

    def _require_transaction(self, transaction_id: int) -> Transaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise errors.NotFoundError(errors.transaction_not_found(transaction_id))
        return txn

    def _account_names(self, company_id: int) -> dict[str, str]:
        return {a.code: a.name for a in self.db.list_accounts(company_id, include_inactive=True)}

    def get_unclassified_transactions(
        self, company_id: int, fiscal_period_id: Optional[int] = None
    ) -> list[UnclassifiedTransaction]:
        """List unclassified transactions with their suggestion, if any."""
        self._require_company(company_id)
        rules = self.rules.list_active_rules(company_id)
        names = self._account_names(company_id)
        return [
            UnclassifiedTransaction(
                transaction=txn,
                suggestion=self.classifier.suggest(txn, rules=rules, account_names=names),
            )
            for txn in self.db.list_transactions(company_id, fiscal_period_id=fiscal_period_id, classified=False)
        ]

    def suggest(self, transaction_id: int) -> Optional[Suggestion]:
        """Suggest an account for a transaction."""
        return self.classifier.suggest(self._require_transaction(transaction_id))

    def candidates(self, transaction_id: int) -> list[ClassificationRule]:
        """All active rules matching a transaction, in evaluation order."""
        return self.classifier.candidates(self._require_transaction(transaction_id))

    def classify_transaction(
        self,
        transaction_id: int,
        account_code: Optional[str],
        splits: Optional[Sequence[SplitLine]] = None,
        created_by: str = "SYSTEM",
    ) -> JournalEntry:
        """Classify a transaction and post (or rewrite) its journal entry.

        When the account equals the current suggestion, the suggesting rule is
        recorded on the transaction; otherwise the classification is manual.
        """
        txn = self._require_transaction(transaction_id)
        if not splits:
            suggestion = self.classifier.suggest(txn)
            if suggestion is not None and suggestion.account_code == (account_code or "").strip():
                return self.classifier.accept_suggestion(
                    txn, suggestion.account_code, rule_id=suggestion.rule_id, created_by=created_by
                )
        return self.classifier.classify_manually(txn, account_code, splits=splits, created_by=created_by)

    def create_classification_rule(self, company_id: int, rule: RuleSpec) -> ClassificationRule:
        """Create a classification rule from a RuleSpec."""
        return self.rules.create_from_spec(company_id, rule)

    def auto_classify_transactions(
        self, company_id: int, fiscal_period_id: Optional[int] = None
    ) -> BatchResult:
        """Run the active rules over every unclassified transaction.

        Rules and account names are snapshotted at the start, so rule changes
        made while the batch runs do not affect it. Matching and entry
        building run concurrently; validation and persistence run one at a
        time. A failing transaction is recorded and the batch continues.
        """
        self._require_company(company_id)
        rules = tuple(self.rules.list_active_rules(company_id))
        names = self._account_names(company_id)
        active_codes = {a.code for a in self.db.list_accounts(company_id)}
        transactions = self.db.list_transactions(company_id, fiscal_period_id=fiscal_period_id, classified=False)

        logger.info(
            "Auto-classifying %d transaction(s) for company %s with %d rule(s)",
            len(transactions),
            company_id,
            len(rules),
        )

        # Bank clearing accounts need the database, so resolve them up front
        bank_codes: dict[int, object] = {}
        for txn in transactions:
            try:
                bank_codes[txn.id] = self.bank_accounts.clearing_account_for(txn)
            except errors.DomainError as e:
                bank_codes[txn.id] = e

        def prepare(txn: Transaction):
            suggestion = suggestion_from_matches(match_rules(txn.description, rules), names)
            if suggestion is None:
                return None, None
            bank_code = bank_codes[txn.id]
            if isinstance(bank_code, errors.DomainError):
                return suggestion, bank_code
            try:
                return suggestion, self.builder.build_for_transaction(txn, suggestion.account_code, bank_code)
            except errors.DomainError as e:
                return suggestion, e

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            prepared = list(executor.map(prepare, transactions))

        outcomes = []
        for txn, (suggestion, built) in zip(transactions, prepared):
            outcomes.append(self._persist_outcome(txn, suggestion, built, active_codes))

        result = BatchResult(company_id=company_id, outcomes=outcomes)
        logger.info(
            "Auto-classification for company %s finished: %d classified, %d unmatched, %d failed",
            company_id,
            result.classified,
            result.unmatched,
            result.failed,
        )
        return result

    def _persist_outcome(
        self,
        txn: Transaction,
        suggestion: Optional[Suggestion],
        built,
        active_codes: set[str],
    ) -> TransactionOutcome:
        if suggestion is None:
            return TransactionOutcome(transaction_id=txn.id, status=OutcomeStatus.UNMATCHED)

        def failed(error: Exception) -> TransactionOutcome:
            logger.warning("Could not classify transaction %s: %s", txn.id, error)
            return TransactionOutcome(
                transaction_id=txn.id,
                status=OutcomeStatus.FAILED,
                account_code=suggestion.account_code,
                rule_id=suggestion.rule_id,
                confidence=suggestion.confidence,
                error=str(error),
            )

        if isinstance(built, errors.DomainError):
            return failed(built)
        if suggestion.account_code not in active_codes:
            return failed(errors.UnknownAccountError(txn.company_id, suggestion.account_code, "is inactive or missing"))

        draft: JournalEntryDraft = built
        classification = TransactionClassification(
            transaction_id=txn.id,
            account_code=suggestion.account_code,
            rule_id=suggestion.rule_id,
            classified_at=self.clock(),
        )
        try:
            entry = self.journal.post(draft, classification)
        except errors.DomainError as e:
            return failed(e)

        return TransactionOutcome(
            transaction_id=txn.id,
            status=OutcomeStatus.CLASSIFIED,
            account_code=suggestion.account_code,
            rule_id=suggestion.rule_id,
            confidence=suggestion.confidence,
            journal_entry_id=entry.id,
        )

    def get_journal_entry(self, entry_id: int) -> JournalEntry:
        return self.journal.get_journal_entry(entry_id)

    def list_journal_entries(
        self,
        company_id: int,
        fiscal_period_id: Optional[int] = None,
        filters: Optional[JournalFilters] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[JournalEntry]:
        return self.journal.list_journal_entries(
            company_id, fiscal_period_id=fiscal_period_id, filters=filters, page=page, page_size=page_size
        )

    def get_classification_stats(self, company_id: int, fiscal_period_id: Optional[int] = None) -> ClassificationStats:
        """Count classified and unclassified transactions."""
        self._require_company(company_id)
        total = self.db.count_transactions(company_id, fiscal_period_id=fiscal_period_id)
        classified = self.db.count_transactions(company_id, fiscal_period_id=fiscal_period_id, classified=True)
        return ClassificationStats(total=total, classified=classified, unclassified=total - classified)

    def regenerate_journal_entries(self, company_id: int, fiscal_period_id: Optional[int] = None) -> BatchResult:
        """Re-run the rules over rule-classified transactions in open periods.

        Transactions whose winning rule now points at a different account get
        their entry rewritten. Manual classifications are left alone.
        """
        self._require_company(company_id)
        rules = tuple(self.rules.list_active_rules(company_id))
        names = self._account_names(company_id)
        open_periods = {p.id for p in self.db.list_fiscal_periods(company_id) if not p.closed}

        outcomes = []
        for txn in self.db.list_transactions(company_id, fiscal_period_id=fiscal_period_id, classified=True):
            if txn.classification_rule_id is None or txn.fiscal_period_id not in open_periods:
                continue
            suggestion = suggestion_from_matches(match_rules(txn.description, rules), names)
            if suggestion is None or suggestion.account_code == txn.classified_account_code:
                continue
            try:
                entry = self.classifier.accept_suggestion(txn, suggestion.account_code, rule_id=suggestion.rule_id)
            except errors.DomainError as e:
                logger.warning("Could not regenerate entry for transaction %s: %s", txn.id, e)
                outcomes.append(
                    TransactionOutcome(
                        transaction_id=txn.id,
                        status=OutcomeStatus.FAILED,
                        account_code=suggestion.account_code,
                        rule_id=suggestion.rule_id,
                        confidence=suggestion.confidence,
                        error=str(e),
                    )
                )
                continue
            outcomes.append(
                TransactionOutcome(
                    transaction_id=txn.id,
                    status=OutcomeStatus.CLASSIFIED,
                    account_code=suggestion.account_code,
                    rule_id=suggestion.rule_id,
                    confidence=suggestion.confidence,
                    journal_entry_id=entry.id,
                )
            )

        result = BatchResult(company_id=company_id, outcomes=outcomes)
        logger.info("Regenerated %d journal entries for company %s", result.classified, company_id)
        return result
