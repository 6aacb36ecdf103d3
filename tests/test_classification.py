"""Tests for the classification service."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerflow.domain import errors
from ledgerflow.domain.entities import MatchType, OutcomeStatus, RuleSpec, SplitLine


@pytest.fixture
def salary_rule(rule_service, company_id, chart):
    return rule_service.create_rule(company_id, "Salaries", MatchType.CONTAINS, "SALARY", "8100", priority=60)


def test_round_trip_through_persistence(classification_service, salary_rule, make_transaction):
    txn = make_transaction("MONTHLY SALARY PAYMENT", -15000)

    suggestion = classification_service.suggest(txn.id)
    assert suggestion.account_code == "8100"
    assert suggestion.account_name == "Employee Costs"
    assert suggestion.confidence == pytest.approx(0.7)

    posted = classification_service.classify_transaction(txn.id, suggestion.account_code)
    fetched = classification_service.get_journal_entry(posted.id)

    assert fetched.reference == posted.reference
    assert [(l.account_code, l.debit_amount, l.credit_amount) for l in fetched.lines] == [
        ("8100", Decimal("15000.00"), Decimal("0.00")),
        ("1100", Decimal("0.00"), Decimal("15000.00")),
    ]
    assert fetched.total_debits == fetched.total_credits == Decimal("15000.00")
    assert all(l.source_transaction_id == txn.id for l in fetched.lines)

    stored = classification_service.db.get_transaction(txn.id)
    assert stored.classified_account_code == "8100"
    assert stored.classification_rule_id == salary_rule.id


def test_overriding_suggestion_is_manual(classification_service, salary_rule, make_transaction):
    txn = make_transaction("SALARY ADVANCE", -2000)

    classification_service.classify_transaction(txn.id, "1400")

    stored = classification_service.db.get_transaction(txn.id)
    assert stored.classified_account_code == "1400"
    assert stored.classification_rule_id is None


def test_split_classification(classification_service, make_transaction):
    txn = make_transaction("MAKRO PURCHASE", -100)

    entry = classification_service.classify_transaction(
        txn.id,
        None,
        splits=[SplitLine("9000", Decimal("60")), SplitLine("8700", Decimal("40"))],
    )

    assert [l.account_code for l in entry.lines] == ["9000", "8700", "1100"]
    assert classification_service.db.get_transaction(txn.id).classified_account_code == "9000"


def test_bank_account_clearing_code_used(classification_service, bank_account_service, company_id, make_transaction):
    savings = bank_account_service.create_bank_account(company_id, "Savings", "FNB", clearing_account_code="1101")
    txn = make_transaction("CREDIT INTEREST", 12.5, bank_account_id=savings)

    entry = classification_service.classify_transaction(txn.id, "5000")

    assert [(l.account_code, l.is_debit) for l in entry.lines] == [("1101", True), ("5000", False)]


def test_auto_classify_reports_each_transaction(
    classification_service, rule_service, account_service, company_id, chart, make_transaction
):
    rule_service.create_rule(company_id, "Salaries", MatchType.CONTAINS, "SALARY", "8100")
    rule_service.create_rule(company_id, "Fuel", MatchType.STARTS_WITH, "ENGEN", "8600")
    salary = make_transaction("SALARY JUNE", -20000, txn_date=date(2024, 6, 25))
    fuel = make_transaction("ENGEN SANDTON", -850, txn_date=date(2024, 6, 26))
    unknown = make_transaction("SOMETHING ELSE", -10, txn_date=date(2024, 6, 27))
    account_service.deactivate_account(company_id, "8600")

    result = classification_service.auto_classify_transactions(company_id)

    by_txn = {o.transaction_id: o for o in result.outcomes}
    assert by_txn[salary.id].status == OutcomeStatus.CLASSIFIED
    assert by_txn[salary.id].journal_entry_id is not None
    assert by_txn[fuel.id].status == OutcomeStatus.FAILED
    assert "8600" in by_txn[fuel.id].error
    assert by_txn[unknown.id].status == OutcomeStatus.UNMATCHED
    assert (result.classified, result.unmatched, result.failed) == (1, 1, 1)

    entries = classification_service.list_journal_entries(company_id)
    assert entries.total == 1


def test_auto_classify_uses_rules_active_at_start(
    classification_service, rule_service, salary_rule, company_id, make_transaction, monkeypatch
):
    salary = make_transaction("SALARY JUNE", -20000)
    fuel = make_transaction("ENGEN SANDTON", -850)
    list_transactions = classification_service.db.list_transactions

    def list_then_add_rule(*args, **kwargs):
        rule_service.create_rule(company_id, "Fuel", MatchType.CONTAINS, "ENGEN", "8600")
        return list_transactions(*args, **kwargs)

    monkeypatch.setattr(classification_service.db, "list_transactions", list_then_add_rule)
    first = classification_service.auto_classify_transactions(company_id)
    monkeypatch.undo()

    by_txn = {o.transaction_id: o.status for o in first.outcomes}
    assert by_txn == {salary.id: OutcomeStatus.CLASSIFIED, fuel.id: OutcomeStatus.UNMATCHED}

    second = classification_service.auto_classify_transactions(company_id)

    assert [(o.transaction_id, o.status) for o in second.outcomes] == [(fuel.id, OutcomeStatus.CLASSIFIED)]


def test_auto_classify_closed_period_fails_only_that_transaction(
    classification_service, period_service, rule_service, company_id, period, make_transaction
):
    rule_service.create_rule(company_id, "Salaries", MatchType.CONTAINS, "SALARY", "8100")
    fy26 = period_service.create_period(company_id, "FY2026", date(2025, 3, 1), date(2026, 2, 28))
    old = make_transaction("SALARY FEB", -100)
    new = make_transaction("SALARY MARCH", -100, txn_date=date(2025, 3, 25), fiscal_period_id=fy26)
    period_service.close_period(period.id)

    result = classification_service.auto_classify_transactions(company_id)

    by_txn = {o.transaction_id: o.status for o in result.outcomes}
    assert by_txn == {old.id: OutcomeStatus.FAILED, new.id: OutcomeStatus.CLASSIFIED}


def test_auto_classify_limits_to_period(
    classification_service, period_service, rule_service, company_id, make_transaction
):
    rule_service.create_rule(company_id, "Salaries", MatchType.CONTAINS, "SALARY", "8100")
    fy26 = period_service.create_period(company_id, "FY2026", date(2025, 3, 1), date(2026, 2, 28))
    make_transaction("SALARY FEB", -100)
    make_transaction("SALARY MARCH", -100, txn_date=date(2025, 3, 25), fiscal_period_id=fy26)

    result = classification_service.auto_classify_transactions(company_id, fy26)

    assert len(result.outcomes) == 1
    assert classification_service.get_classification_stats(company_id).classified == 1


def test_unclassified_transactions_carry_suggestions(classification_service, salary_rule, company_id, make_transaction):
    salary = make_transaction("SALARY JULY", -100)
    other = make_transaction("UNKNOWN", -5)
    done = make_transaction("SALARY AUG", -100)
    classification_service.classify_transaction(done.id, "8100")

    pending = classification_service.get_unclassified_transactions(company_id)

    by_id = {item.transaction.id: item.suggestion for item in pending}
    assert set(by_id) == {salary.id, other.id}
    assert by_id[salary.id].rule_id == salary_rule.id
    assert by_id[other.id] is None


def test_classification_stats(classification_service, company_id, period, make_transaction):
    first = make_transaction("A", -1)
    make_transaction("B", -2)
    make_transaction("C", 3)
    classification_service.classify_transaction(first.id, "9000")

    stats = classification_service.get_classification_stats(company_id, period.id)

    assert (stats.total, stats.classified, stats.unclassified) == (3, 1, 2)
    assert stats.rate == pytest.approx(100 / 3)


def test_create_rule_for_inactive_account(classification_service, account_service, company_id, chart):
    account_service.deactivate_account(company_id, "8300")

    with pytest.raises(errors.ValidationError):
        classification_service.create_classification_rule(
            company_id, RuleSpec("Electricity", MatchType.CONTAINS, "ESKOM", "8300")
        )


def test_regenerate_follows_rule_changes(classification_service, rule_service, salary_rule, company_id, make_transaction):
    salary = make_transaction("SALARY JUNE", -500)
    manual = make_transaction("SALARY BONUS", -100)
    classification_service.auto_classify_transactions(company_id)
    classification_service.classify_transaction(manual.id, "8900")
    original = classification_service.db.find_journal_entries_for_transaction(salary.id)[0]

    rule_service.replace_rule(salary_rule.id, account_code="8700")
    result = classification_service.regenerate_journal_entries(company_id)

    assert [o.transaction_id for o in result.outcomes] == [salary.id]
    rewritten = classification_service.get_journal_entry(original.id)
    assert rewritten.reference == original.reference
    assert rewritten.lines[0].account_code == "8700"
    assert classification_service.db.get_transaction(manual.id).classified_account_code == "8900"


def test_unknown_transaction(classification_service):
    with pytest.raises(errors.NotFoundError):
        classification_service.suggest(999)
