"""Transaction classification.

The first rule returned by the matcher wins; priority (then lowest ID) is the
only tie-break. Confidence reflects how specific the winning match type is.
"""

from typing import Mapping, Optional, Sequence
from ledgerflow.database.base import Database
from ledgerflow.domain import errors
from ledgerflow.domain.bank_account import BankAccountService
from ledgerflow.domain.clock import Clock, utc_now
from ledgerflow.domain.entities import (
    ClassificationRule,
    JournalEntry,
    MatchType,
    SplitLine,
    Suggestion,
    Transaction,
    TransactionClassification,
)
from ledgerflow.domain.journal import JournalService
from ledgerflow.domain.journal_builder import JournalEntryBuilder
from ledgerflow.domain.matcher import match_rules
from ledgerflow.logging_config import get_logger

logger = get_logger("domain.classifier")

EXACT_CONFIDENCE = 1.0
ANCHORED_CONFIDENCE = 0.85
CONTAINS_CONFIDENCE = 0.7
CONTAINS_FLOOR = 0.4
CONTAINS_STEP = 0.01


def confidence_for(match_type: MatchType, match_count: int) -> float:
    """Confidence of a suggestion from its winning match type.

    Args:
        match_type: Match type of the winning rule
        match_count: Total number of matching rules, winner included
    """
    match_type = MatchType(match_type)
    if match_type in (MatchType.EQUALS, MatchType.REGEX):
        return EXACT_CONFIDENCE
    if match_type in (MatchType.STARTS_WITH, MatchType.ENDS_WITH):
        return ANCHORED_CONFIDENCE
    extra = max(match_count - 1, 0)
    return round(max(CONTAINS_FLOOR, CONTAINS_CONFIDENCE - CONTAINS_STEP * extra), 4)


def suggestion_from_matches(
    matches: Sequence[ClassificationRule],
    account_names: Mapping[str, str],
) -> Optional[Suggestion]:
    """Pick the winning rule from matcher output. Pure function."""
    if not matches:
        return None
    winner = matches[0]
    return Suggestion(
        account_code=winner.account_code,
        account_name=account_names.get(winner.account_code, ""),
        confidence=confidence_for(winner.match_type, len(matches)),
        rule_id=winner.id,
        rule_name=winner.rule_name,
        match_type=MatchType(winner.match_type),
        candidate_count=len(matches),
    )


class Classifier:
    """Suggests and applies account classifications for transactions."""

    def __init__(
        self,
        db: Database,
        clock: Clock = utc_now,
        journal: Optional[JournalService] = None,
        builder: Optional[JournalEntryBuilder] = None,
    ):
        """Initialize classifier.

        Args:
            db: Database providing rules, accounts and transactions
            clock: Source of classification timestamps
            journal: Journal service entries are posted through
            builder: Journal entry builder
        """
        self.db = db
        self.clock = clock
        self.builder = builder or JournalEntryBuilder()
        self.journal = journal or JournalService(db, clock=clock, builder=self.builder)
        self.bank_accounts = BankAccountService(db)

    def _rules(self, company_id: int, rules: Optional[Sequence[ClassificationRule]]):
        if rules is None:
            return self.db.list_rules(company_id, active_only=True)
        return rules

    def candidates(
        self, transaction: Transaction, rules: Optional[Sequence[ClassificationRule]] = None
    ) -> list[ClassificationRule]:
        """All active rules matching the transaction, in evaluation order."""
        return match_rules(transaction.description, self._rules(transaction.company_id, rules))

    def suggest(
        self,
        transaction: Transaction,
        rules: Optional[Sequence[ClassificationRule]] = None,
        account_names: Optional[Mapping[str, str]] = None,
    ) -> Optional[Suggestion]:
        """Suggest an account for a transaction, or None when no rule matches.

        Args:
            transaction: Transaction to classify
            rules: Rule snapshot; defaults to the company's active rules
            account_names: Code to name lookup; defaults to the chart of accounts
        """
        matches = self.candidates(transaction, rules)
        if not matches:
            return None
        if account_names is None:
            account = self.db.get_account(transaction.company_id, matches[0].account_code)
            account_names = {account.code: account.name} if account is not None else {}
        suggestion = suggestion_from_matches(matches, account_names)
        logger.debug(
            "Suggested %s for transaction %s via rule %s (confidence %.2f)",
            suggestion.account_code,
            transaction.id,
            suggestion.rule_id,
            suggestion.confidence,
        )
        return suggestion

    def accept_suggestion(
        self,
        transaction: Transaction,
        account_code: str,
        rule_id: Optional[int] = None,
        created_by: str = "SYSTEM",
    ) -> JournalEntry:
        """Classify a transaction into a suggested or supplied account.

        Raises:
            UnknownAccountError: If the account is blank, missing or inactive
            ClosedPeriodError: If an existing entry for the transaction is in a closed period
            ValidationError: If the transaction already has more than one journal entry
        """
        return self._classify(transaction, account_code, rule_id=rule_id, created_by=created_by)

    def classify_manually(
        self,
        transaction: Transaction,
        account_code: Optional[str],
        splits: Optional[Sequence[SplitLine]] = None,
        created_by: str = "SYSTEM",
    ) -> JournalEntry:
        """Classify a transaction without a rule, optionally split over accounts.

        With splits, ``account_code`` may be None; the first split's account
        is then recorded on the transaction.

        Raises:
            UnknownAccountError: If any account is blank, missing or inactive
            SplitMismatchError: If split amounts don't add up to the transaction amount
            ClosedPeriodError: If an existing entry for the transaction is in a closed period
            ValidationError: If the transaction already has more than one journal entry
        """
        return self._classify(transaction, account_code, splits=splits, created_by=created_by)

    def _classify(
        self,
        transaction: Transaction,
        account_code: Optional[str],
        rule_id: Optional[int] = None,
        splits: Optional[Sequence[SplitLine]] = None,
        created_by: str = "SYSTEM",
    ) -> JournalEntry:
        if splits:
            for split in splits:
                self._require_active_account(transaction.company_id, split.account_code)
            recorded_code = (account_code or splits[0].account_code).strip()
        else:
            recorded_code = (account_code or "").strip()
        self._require_active_account(transaction.company_id, recorded_code)

        existing = self.db.find_journal_entries_for_transaction(transaction.id)
        # Only a single entry can be rewritten in place
        if len(existing) > 1:
            raise errors.ValidationError(
                f"Transaction {transaction.id} has {len(existing)} journal entries; edit them directly"
            )
        for entry in existing:
            period = self.db.get_fiscal_period(entry.fiscal_period_id)
            if period is not None and period.closed:
                raise errors.ClosedPeriodError(period.id, period.name)

        bank_code = self.bank_accounts.clearing_account_for(transaction)
        draft = self.builder.build_for_transaction(
            transaction,
            recorded_code,
            bank_code,
            splits=splits,
            created_by=created_by,
        )
        classification = TransactionClassification(
            transaction_id=transaction.id,
            account_code=recorded_code,
            rule_id=rule_id,
            classified_at=self.clock(),
        )

        if existing:
            draft.entry_id = existing[0].id
            draft.reference = existing[0].reference
            entry = self.journal.replace_lines(draft, classification)
            logger.info(
                "Reclassified transaction %s from %s to %s",
                transaction.id,
                transaction.classified_account_code,
                recorded_code,
            )
        else:
            entry = self.journal.post(draft, classification)
            logger.info("Classified transaction %s as %s", transaction.id, recorded_code)
        return entry

    def _require_active_account(self, company_id: int, code: str) -> None:
        if not code or not code.strip():
            raise errors.UnknownAccountError(company_id, code or "", reason="is required")
        account = self.db.get_account(company_id, code.strip())
        if account is None:
            raise errors.UnknownAccountError(company_id, code)
        if not account.active:
            raise errors.UnknownAccountError(company_id, code, reason="is inactive")
