"""Tests for Database interface returning domain models."""

import pytest
from datetime import date, datetime, UTC
from decimal import Decimal

from ledgerflow.domain import entities, errors
from ledgerflow.domain.entities import JournalEntryLine, TransactionClassification


@pytest.fixture
def seeded(temp_db):
    company_id = temp_db.create_company("Acme")
    period_id = temp_db.create_fiscal_period(company_id, "FY2025", date(2024, 3, 1), date(2025, 2, 28))
    for code, name in [("1100", "Bank"), ("8600", "Fuel"), ("4000", "Sales")]:
        temp_db.create_account(company_id, code, name)
    return company_id, period_id


def _lines(amount, source=None):
    return [
        JournalEntryLine("8600", Decimal(amount), Decimal("0"), source_transaction_id=source),
        JournalEntryLine("1100", Decimal("0"), Decimal(amount), source_transaction_id=source),
    ]


def _save(db, company_id, period_id, amount="10", reference=None, classification=None, source=None):
    return db.save_journal_entry(
        company_id=company_id,
        fiscal_period_id=period_id,
        entry_date=date(2024, 6, 1),
        description="Fuel",
        created_by="SYSTEM",
        created_at=datetime.now(UTC),
        lines=_lines(amount, source),
        reference=reference,
        classification=classification,
    )


class TestDatabaseInterface:
    def test_company_and_period_are_domain_models(self, temp_db, seeded):
        company_id, period_id = seeded

        assert isinstance(temp_db.get_company(company_id), entities.Company)
        period = temp_db.get_fiscal_period(period_id)
        assert isinstance(period, entities.FiscalPeriod)
        assert period.closed is False

        temp_db.set_fiscal_period_closed(period_id, True)
        assert temp_db.get_fiscal_period(period_id).closed is True

    def test_accounts_ordered_by_code(self, temp_db, seeded):
        company_id, _ = seeded
        temp_db.set_account_active(company_id, "4000", False)

        assert [a.code for a in temp_db.list_accounts(company_id)] == ["1100", "8600"]
        accounts = temp_db.list_accounts(company_id, include_inactive=True)
        assert [a.code for a in accounts] == ["1100", "4000", "8600"]
        assert all(isinstance(a, entities.Account) for a in accounts)

    def test_transaction_round_trip(self, temp_db, seeded):
        company_id, period_id = seeded
        txn_id = temp_db.create_transaction(
            company_id=company_id,
            fiscal_period_id=period_id,
            date=date(2024, 6, 15),
            description="ENGEN",
            debit_amount=Decimal("850.50"),
            credit_amount=Decimal("0"),
            running_balance=Decimal("1000.00"),
        )

        txn = temp_db.get_transaction(txn_id)
        assert isinstance(txn, entities.Transaction)
        assert txn.debit_amount == Decimal("850.50")
        assert txn.running_balance == Decimal("1000.00")
        assert temp_db.count_transactions(company_id, classified=False) == 1

    def test_rules_ordered_by_priority_then_id(self, temp_db, seeded):
        company_id, _ = seeded
        low = temp_db.create_rule(company_id, "Low", "CONTAINS", "A", "8600", 10)
        first = temp_db.create_rule(company_id, "First", "CONTAINS", "B", "8600", 70)
        second = temp_db.create_rule(company_id, "Second", "CONTAINS", "C", "8600", 70)
        temp_db.set_rule_active(low, False, datetime.now(UTC))

        assert [r.id for r in temp_db.list_rules(company_id)] == [first, second]
        assert [r.id for r in temp_db.list_rules(company_id, active_only=False)] == [first, second, low]

    def test_save_journal_entry_with_classification(self, temp_db, seeded):
        company_id, period_id = seeded
        txn_id = temp_db.create_transaction(
            company_id, period_id, date(2024, 6, 1), "ENGEN", Decimal("10"), Decimal("0")
        )
        classification = TransactionClassification(
            transaction_id=txn_id, account_code="8600", rule_id=None, classified_at=datetime.now(UTC)
        )

        entry_id = _save(temp_db, company_id, period_id, classification=classification, source=txn_id)

        entry = temp_db.get_journal_entry(entry_id)
        assert isinstance(entry, entities.JournalEntry)
        assert entry.reference == "JE-000001"
        assert [line.line_number for line in entry.lines] == [1, 2]
        assert temp_db.get_transaction(txn_id).classified_account_code == "8600"
        assert [e.id for e in temp_db.find_journal_entries_for_transaction(txn_id)] == [entry_id]

    def test_duplicate_reference(self, temp_db, seeded):
        company_id, period_id = seeded
        _save(temp_db, company_id, period_id, reference="ADJ-1")

        with pytest.raises(errors.DuplicateReferenceError):
            _save(temp_db, company_id, period_id, reference="ADJ-1")
        assert temp_db.reference_exists(company_id, "ADJ-1")

    def test_replace_and_delete(self, temp_db, seeded):
        company_id, period_id = seeded
        entry_id = _save(temp_db, company_id, period_id)

        temp_db.replace_journal_entry_lines(entry_id, _lines("25"))
        assert temp_db.get_journal_entry(entry_id).total_debits == Decimal("25.00")

        temp_db.delete_journal_entry(entry_id)
        assert temp_db.get_journal_entry(entry_id) is None

    def test_account_totals(self, temp_db, seeded):
        company_id, period_id = seeded
        _save(temp_db, company_id, period_id, amount="10")
        _save(temp_db, company_id, period_id, amount="5.25")

        totals = temp_db.get_account_totals(company_id, period_id)
        assert totals == [
            ("1100", Decimal("0.00"), Decimal("15.25")),
            ("8600", Decimal("15.25"), Decimal("0.00")),
        ]
