"""Tests for the journal entry builder."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerflow.domain import errors
from ledgerflow.domain.entities import EntryStatus, LineSpec, SplitLine, Transaction
from ledgerflow.domain.journal_builder import JournalEntryBuilder, opening_balance_reference


def make_txn(debit="0", credit="0", description="MONTHLY SALARY PAYMENT"):
    return Transaction(
        id=7,
        company_id=1,
        fiscal_period_id=2,
        date=date(2024, 6, 25),
        description=description,
        debit_amount=Decimal(debit),
        credit_amount=Decimal(credit),
    )


@pytest.fixture
def builder():
    return JournalEntryBuilder()


def test_money_out_debits_classified_account(builder):
    draft = builder.build_for_transaction(make_txn(debit="15000.00"), "8100", "1100")

    assert draft.status == EntryStatus.DRAFT
    assert [(l.account_code, l.debit_amount, l.credit_amount) for l in draft.lines] == [
        ("8100", Decimal("15000.00"), Decimal("0.00")),
        ("1100", Decimal("0.00"), Decimal("15000.00")),
    ]
    assert draft.entry_date == date(2024, 6, 25)
    assert draft.fiscal_period_id == 2
    assert draft.source_transaction_ids == {7}
    assert draft.reference is None


def test_money_in_credits_classified_account(builder):
    draft = builder.build_for_transaction(make_txn(credit="2500.50", description="PAYMENT FROM CLIENT"), "4000", "1100")

    debit_line, credit_line = draft.lines
    assert debit_line.account_code == "1100" and debit_line.debit_amount == Decimal("2500.50")
    assert credit_line.account_code == "4000" and credit_line.credit_amount == Decimal("2500.50")


def test_split_lines_must_sum_to_transaction_amount(builder):
    splits = [SplitLine("8300", Decimal("60.00")), SplitLine("8400", Decimal("30.00"))]

    with pytest.raises(errors.SplitMismatchError) as excinfo:
        builder.build_for_transaction(make_txn(debit="100.00"), None, "1100", splits=splits)

    assert isinstance(excinfo.value, errors.BalanceError)
    assert excinfo.value.difference == Decimal("-10.00")
    assert "90.00" in str(excinfo.value)


def test_split_adds_single_bank_line(builder):
    splits = [SplitLine("8300", Decimal("60.00"), "Electricity"), SplitLine("8400", Decimal("40.00"))]

    draft = builder.build_for_transaction(make_txn(debit="100.00"), None, "1100", splits=splits)

    assert [l.account_code for l in draft.lines] == ["8300", "8400", "1100"]
    assert draft.lines[0].description == "Electricity"
    assert draft.total_debits == draft.total_credits == Decimal("100.00")


def test_non_positive_split_rejected(builder):
    splits = [SplitLine("8300", Decimal("100.00")), SplitLine("8400", Decimal("0"))]
    with pytest.raises(errors.ValidationError):
        builder.build_for_transaction(make_txn(debit="100.00"), None, "1100", splits=splits)


def test_account_code_required_without_splits(builder):
    with pytest.raises(errors.UnknownAccountError, match="is required"):
        builder.build_for_transaction(make_txn(debit="10.00"), "", "1100")


def test_build_manual_converts_line_specs(builder):
    draft = builder.build_manual(
        company_id=1,
        fiscal_period_id=2,
        entry_date=date(2024, 3, 1),
        description="Opening balances",
        lines=[
            LineSpec("1100", debit_amount=Decimal("5000")),
            LineSpec("3200", credit_amount=Decimal("5000")),
        ],
        reference=opening_balance_reference(2),
    )

    assert draft.reference == "OB-2"
    assert [l.line_number for l in draft.lines] == [1, 2]
    assert draft.lines[0].debit_amount == Decimal("5000.00")


def test_build_manual_rejects_line_with_both_sides(builder):
    with pytest.raises(errors.ValidationError, match="Line 1"):
        builder.build_manual(
            company_id=1,
            fiscal_period_id=2,
            entry_date=date(2024, 3, 1),
            description="Bad",
            lines=[LineSpec("1100", debit_amount=Decimal("5"), credit_amount=Decimal("5"))],
        )
