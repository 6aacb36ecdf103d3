"""Domain model entities for ledgerflow.

These are pure data classes representing business concepts, independent of
database schema. Persisted records are frozen; a journal entry under
construction is a mutable ``JournalEntryDraft`` until it is posted.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Generic, Optional, TypeVar

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Quantize a number to two decimal places."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value) -> int:
    """Convert a money amount to integer cents."""
    return int(to_money(value) * 100)


class NormalSide(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class AccountCategory(str, Enum):
    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class MatchType(str, Enum):
    CONTAINS = "CONTAINS"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    EQUALS = "EQUALS"
    REGEX = "REGEX"


class EntryStatus(str, Enum):
    DRAFT = "DRAFT"
    VALIDATED = "VALIDATED"
    POSTED = "POSTED"
    REJECTED = "REJECTED"


class OutcomeStatus(str, Enum):
    CLASSIFIED = "CLASSIFIED"
    UNMATCHED = "UNMATCHED"
    FAILED = "FAILED"


# Leading digit of an account code -> (category, normal side)
_CODE_CONVENTION = {
    "1": (AccountCategory.ASSET, NormalSide.DEBIT),
    "2": (AccountCategory.LIABILITY, NormalSide.CREDIT),
    "3": (AccountCategory.EQUITY, NormalSide.CREDIT),
    "4": (AccountCategory.INCOME, NormalSide.CREDIT),
    "5": (AccountCategory.INCOME, NormalSide.CREDIT),
    "6": (AccountCategory.INCOME, NormalSide.CREDIT),
    "7": (AccountCategory.EXPENSE, NormalSide.DEBIT),
    "8": (AccountCategory.EXPENSE, NormalSide.DEBIT),
    "9": (AccountCategory.EXPENSE, NormalSide.DEBIT),
}


def classify_account_code(code: str) -> tuple[AccountCategory, NormalSide]:
    """Derive category and normal side from the leading digit of an account code.

    Raises:
        ValueError: If the code does not start with a digit 1-9
    """
    code = (code or "").strip()
    if not code or code[0] not in _CODE_CONVENTION:
        raise ValueError(f"Account code '{code}' must start with a digit 1-9")
    return _CODE_CONVENTION[code[0]]


@dataclass(frozen=True)
class Company:
    """Company domain entity."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class FiscalPeriod:
    """Fiscal period domain entity."""

    id: int
    company_id: int
    name: str
    start_date: date
    end_date: date
    closed: bool
    created_at: datetime

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class Account:
    """Chart-of-accounts entry."""

    id: int
    company_id: int
    code: str
    name: str
    active: bool
    created_at: datetime

    @property
    def category(self) -> AccountCategory:
        return classify_account_code(self.code)[0]

    @property
    def normal_side(self) -> NormalSide:
        return classify_account_code(self.code)[1]


@dataclass(frozen=True)
class BankAccount:
    """Bank account whose statements are imported."""

    id: int
    company_id: int
    name: str
    bank_name: str
    clearing_account_code: str
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Bank statement line."""

    id: int
    company_id: int
    fiscal_period_id: int
    date: date
    description: str
    debit_amount: Decimal
    credit_amount: Decimal
    bank_account_id: Optional[int] = None
    running_balance: Optional[Decimal] = None
    classified_account_code: Optional[str] = None
    classification_rule_id: Optional[int] = None
    classified_at: Optional[datetime] = None
    imported_at: Optional[datetime] = None

    @property
    def amount(self) -> Decimal:
        """Absolute amount of the movement."""
        return self.debit_amount if self.debit_amount > 0 else self.credit_amount

    @property
    def is_money_out(self) -> bool:
        return self.debit_amount > 0

    @property
    def is_classified(self) -> bool:
        return self.classified_account_code is not None


@dataclass(frozen=True)
class ClassificationRule:
    """Pattern-to-account mapping."""

    id: int
    company_id: int
    rule_name: str
    match_type: MatchType
    match_value: str
    account_code: str
    priority: int
    active: bool
    created_at: datetime
    updated_at: datetime
    description: Optional[str] = None


@dataclass(frozen=True)
class RuleSpec:
    """Input for creating a classification rule."""

    rule_name: str
    match_type: MatchType
    match_value: str
    account_code: str
    priority: int = 50
    description: Optional[str] = None


@dataclass(frozen=True)
class Suggestion:
    """Classification suggestion for a transaction."""

    account_code: str
    account_name: str
    confidence: float
    rule_id: int
    rule_name: str
    match_type: MatchType
    candidate_count: int = 1


@dataclass(frozen=True)
class SplitLine:
    """One non-bank portion of a split transaction."""

    account_code: str
    amount: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class LineSpec:
    """One line of a manually composed journal entry."""

    account_code: str
    debit_amount: Decimal = ZERO
    credit_amount: Decimal = ZERO
    description: Optional[str] = None
    source_transaction_id: Optional[int] = None


@dataclass(frozen=True)
class JournalEntryLine:
    """One leg of a journal entry.

    Exactly one of ``debit_amount`` / ``credit_amount`` is positive.
    """

    account_code: str
    debit_amount: Decimal
    credit_amount: Decimal
    description: Optional[str] = None
    source_transaction_id: Optional[int] = None
    line_number: int = 0
    id: Optional[int] = None
    journal_entry_id: Optional[int] = None

    def __post_init__(self):
        debit = to_money(self.debit_amount)
        credit = to_money(self.credit_amount)
        if debit < 0 or credit < 0:
            raise ValueError("Journal line amounts cannot be negative")
        if (debit > 0) == (credit > 0):
            raise ValueError(
                f"Journal line for account '{self.account_code}' must have exactly one "
                "of debit or credit amount"
            )
        object.__setattr__(self, "debit_amount", debit)
        object.__setattr__(self, "credit_amount", credit)

    @property
    def is_debit(self) -> bool:
        return self.debit_amount > 0


def _total(lines, side: str) -> Decimal:
    return sum((getattr(line, side) for line in lines), ZERO)


@dataclass(frozen=True)
class JournalEntry:
    """Persisted, balanced journal entry."""

    id: int
    company_id: int
    fiscal_period_id: int
    reference: str
    entry_date: date
    description: str
    created_by: str
    created_at: datetime
    lines: tuple[JournalEntryLine, ...]
    status: EntryStatus = EntryStatus.POSTED

    @property
    def total_debits(self) -> Decimal:
        return _total(self.lines, "debit_amount")

    @property
    def total_credits(self) -> Decimal:
        return _total(self.lines, "credit_amount")


@dataclass
class JournalEntryDraft:
    """Journal entry under construction.

    Moves DRAFT -> VALIDATED -> POSTED, or DRAFT -> REJECTED. A draft that
    replaces the lines of an existing entry carries ``entry_id``.
    """

    company_id: int
    fiscal_period_id: int
    entry_date: date
    description: str
    lines: list[JournalEntryLine]
    created_by: str = "SYSTEM"
    reference: Optional[str] = None
    entry_id: Optional[int] = None
    status: EntryStatus = EntryStatus.DRAFT
    error: Optional[Exception] = None

    @property
    def total_debits(self) -> Decimal:
        return _total(self.lines, "debit_amount")

    @property
    def total_credits(self) -> Decimal:
        return _total(self.lines, "credit_amount")

    @property
    def source_transaction_ids(self) -> set[int]:
        return {line.source_transaction_id for line in self.lines if line.source_transaction_id is not None}


@dataclass(frozen=True)
class TransactionClassification:
    """Classification written to a transaction together with its journal entry."""

    transaction_id: int
    account_code: str
    rule_id: Optional[int]
    classified_at: datetime


@dataclass(frozen=True)
class JournalFilters:
    """Optional filters for listing journal entries."""

    account_code: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reference_prefix: Optional[str] = None
    source_transaction_id: Optional[int] = None


T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a listing."""

    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        if self.total == 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size


@dataclass(frozen=True)
class UnclassifiedTransaction:
    """Transaction awaiting classification with its optional suggestion."""

    transaction: Transaction
    suggestion: Optional[Suggestion]


@dataclass(frozen=True)
class TransactionOutcome:
    """Result of auto-classifying one transaction."""

    transaction_id: int
    status: OutcomeStatus
    account_code: Optional[str] = None
    rule_id: Optional[int] = None
    confidence: Optional[float] = None
    journal_entry_id: Optional[int] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class BatchResult:
    """Per-transaction results of an auto-classification pass."""

    company_id: int
    outcomes: list[TransactionOutcome] = field(default_factory=list)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def classified(self) -> int:
        return self._count(OutcomeStatus.CLASSIFIED)

    @property
    def unmatched(self) -> int:
        return self._count(OutcomeStatus.UNMATCHED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)


@dataclass(frozen=True)
class ClassificationStats:
    """Classification progress for a fiscal period."""

    total: int
    classified: int
    unclassified: int

    @property
    def rate(self) -> float:
        """Percentage of classified transactions."""
        if self.total == 0:
            return 0.0
        return self.classified / self.total * 100


@dataclass(frozen=True)
class TrialBalanceRow:
    """Per-account totals for a fiscal period."""

    account_code: str
    account_name: str
    total_debits: Decimal
    total_credits: Decimal

    @property
    def balance(self) -> Decimal:
        """Balance on the account's normal side."""
        _, side = classify_account_code(self.account_code)
        if side == NormalSide.DEBIT:
            return self.total_debits - self.total_credits
        return self.total_credits - self.total_debits
