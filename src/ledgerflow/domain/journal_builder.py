"""Journal entry construction.

The builder turns classified transactions (or hand-composed line lists) into
``JournalEntryDraft`` objects. It reads nothing from the database and never
persists, so batches can build drafts concurrently.
"""

from datetime import date
from typing import Optional, Sequence
from ledgerflow.domain import errors
from ledgerflow.domain.entities import (
    JournalEntryDraft,
    JournalEntryLine,
    LineSpec,
    SplitLine,
    Transaction,
    ZERO,
    to_cents,
    to_money,
)

OPENING_BALANCE_REFERENCE = "OB-{}"


def opening_balance_reference(fiscal_period_id: int) -> str:
    return OPENING_BALANCE_REFERENCE.format(fiscal_period_id)


class JournalEntryBuilder:
    """Builds balanced journal entry drafts."""

    def build_for_transaction(
        self,
        transaction: Transaction,
        account_code: Optional[str],
        bank_account_code: str,
        splits: Optional[Sequence[SplitLine]] = None,
        reference: Optional[str] = None,
        created_by: str = "SYSTEM",
    ) -> JournalEntryDraft:
        """Build the draft entry for a classified bank transaction.

        Money out debits the classified account(s) and credits the bank
        clearing account. Money in does the opposite.

        Args:
            transaction: Transaction being classified
            account_code: Account for the non-bank side (ignored when splits are given)
            bank_account_code: Clearing account of the transaction's bank account
            splits: Optional non-bank lines that must sum to the transaction amount
            reference: Optional caller-supplied reference
            created_by: Author recorded on the entry

        Returns:
            Draft entry in DRAFT status

        Raises:
            ValidationError: If the transaction has no movement or inputs are blank
            SplitMismatchError: If split amounts do not add up to the transaction amount
            UnknownAccountError: If no account code is given without splits
        """
        amount = to_money(transaction.amount)
        if amount <= 0:
            raise errors.ValidationError(f"Transaction {transaction.id} has no amount to journal")
        if not bank_account_code:
            raise errors.ValidationError("Bank clearing account code is required")

        if splits:
            portions = self._split_portions(splits, amount)
        else:
            if not account_code:
                raise errors.UnknownAccountError(transaction.company_id, "", reason="is required")
            portions = [(account_code, amount, None)]

        money_out = transaction.is_money_out
        counter_lines = [
            self._line(
                code,
                value,
                debit=money_out,
                description=desc or transaction.description,
                source_transaction_id=transaction.id,
            )
            for code, value, desc in portions
        ]
        bank_line = self._line(
            bank_account_code,
            amount,
            debit=not money_out,
            description=transaction.description,
            source_transaction_id=transaction.id,
        )
        # Debit lines first
        lines = counter_lines + [bank_line] if money_out else [bank_line] + counter_lines

        return JournalEntryDraft(
            company_id=transaction.company_id,
            fiscal_period_id=transaction.fiscal_period_id,
            entry_date=transaction.date,
            description=transaction.description,
            lines=lines,
            created_by=created_by,
            reference=reference,
        )

    def build_manual(
        self,
        company_id: int,
        fiscal_period_id: int,
        entry_date: date,
        description: str,
        lines: Sequence[LineSpec],
        reference: Optional[str] = None,
        created_by: str = "SYSTEM",
    ) -> JournalEntryDraft:
        """Build a draft from explicit debit/credit lines.

        Used for opening balances, corrections and line edits. Balance is
        checked later by the ledger checker.

        Raises:
            ValidationError: If a line is malformed
        """
        description = (description or "").strip()
        if not description:
            raise errors.ValidationError("Journal entry description is required")

        built = []
        for number, spec in enumerate(lines, start=1):
            if not (spec.account_code or "").strip():
                raise errors.ValidationError(f"Line {number}: account code is required")
            try:
                built.append(
                    JournalEntryLine(
                        account_code=spec.account_code.strip(),
                        debit_amount=to_money(spec.debit_amount),
                        credit_amount=to_money(spec.credit_amount),
                        description=spec.description,
                        source_transaction_id=spec.source_transaction_id,
                        line_number=number,
                    )
                )
            except ValueError as e:
                raise errors.ValidationError(f"Line {number}: {e}") from e

        return JournalEntryDraft(
            company_id=company_id,
            fiscal_period_id=fiscal_period_id,
            entry_date=entry_date,
            description=description,
            lines=built,
            created_by=created_by,
            reference=reference,
        )

    def _split_portions(self, splits: Sequence[SplitLine], amount) -> list[tuple]:
        portions = []
        for split in splits:
            value = to_money(split.amount)
            if value <= 0:
                raise errors.ValidationError(
                    f"Split amount for account '{split.account_code}' must be positive"
                )
            if not (split.account_code or "").strip():
                raise errors.ValidationError("Split account code is required")
            portions.append((split.account_code.strip(), value, split.description))

        split_total = sum((value for _, value, _ in portions), ZERO)
        if to_cents(split_total) != to_cents(amount):
            raise errors.SplitMismatchError(
                errors.split_mismatch(split_total, amount), difference=split_total - amount
            )
        return portions

    @staticmethod
    def _line(code, amount, debit: bool, description=None, source_transaction_id=None) -> JournalEntryLine:
        return JournalEntryLine(
            account_code=code,
            debit_amount=amount if debit else ZERO,
            credit_amount=ZERO if debit else amount,
            description=description,
            source_transaction_id=source_transaction_id,
        )
