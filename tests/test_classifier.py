"""Tests for the classifier."""

from decimal import Decimal

import pytest

from ledgerflow.domain import errors
from ledgerflow.domain.classifier import Classifier, confidence_for
from ledgerflow.domain.entities import MatchType


@pytest.fixture
def classifier(temp_db, clock):
    return Classifier(temp_db, clock=clock)


@pytest.mark.parametrize(
    "match_type,count,expected",
    [
        (MatchType.EQUALS, 1, 1.0),
        (MatchType.REGEX, 5, 1.0),
        (MatchType.STARTS_WITH, 1, 0.85),
        (MatchType.ENDS_WITH, 3, 0.85),
        (MatchType.CONTAINS, 1, 0.7),
        (MatchType.CONTAINS, 2, 0.69),
        (MatchType.CONTAINS, 11, 0.6),
        (MatchType.CONTAINS, 100, 0.4),
    ],
)
def test_confidence_for(match_type, count, expected):
    assert confidence_for(match_type, count) == pytest.approx(expected)


def test_salary_contains_rule_suggestion(classifier, rule_service, make_transaction, company_id):
    rule_service.create_rule(company_id, "Salaries", MatchType.CONTAINS, "SALARY", "8100", priority=60)
    txn = make_transaction("MONTHLY SALARY PAYMENT", "-15000.00")

    suggestion = classifier.suggest(txn)

    assert suggestion.account_code == "8100"
    assert suggestion.account_name == "Employee Costs"
    assert suggestion.confidence == pytest.approx(0.7)
    assert suggestion.candidate_count == 1


def test_salary_accept_suggestion_posts_entry(classifier, rule_service, make_transaction, company_id):
    rule = rule_service.create_rule(company_id, "Salaries", MatchType.CONTAINS, "SALARY", "8100", priority=60)
    txn = make_transaction("MONTHLY SALARY PAYMENT", "-15000.00")

    entry = classifier.accept_suggestion(txn, "8100", rule_id=rule.id)

    assert [(l.account_code, l.debit_amount, l.credit_amount) for l in entry.lines] == [
        ("8100", Decimal("15000.00"), Decimal("0.00")),
        ("1100", Decimal("0.00"), Decimal("15000.00")),
    ]
    stored = classifier.db.get_transaction(txn.id)
    assert stored.classified_account_code == "8100"
    assert stored.classification_rule_id == rule.id
    assert stored.classified_at is not None


def test_equal_priority_tie_break_uses_lowest_id(classifier, rule_service, make_transaction, company_id):
    contains = rule_service.create_rule(company_id, "Electricity", MatchType.CONTAINS, "ELECTRICITY", "8300", priority=50)
    equals = rule_service.create_rule(company_id, "Eskom", MatchType.EQUALS, "ESKOM ELECTRICITY", "9900", priority=50)
    txn = make_transaction("ESKOM ELECTRICITY", -800)

    candidates = classifier.candidates(txn)
    suggestion = classifier.suggest(txn)

    assert [r.id for r in candidates] == [contains.id, equals.id]
    assert suggestion.rule_id == contains.id
    assert suggestion.account_code == "8300"
    # One extra matching rule beyond the winner
    assert suggestion.confidence == pytest.approx(0.69)


def test_higher_priority_wins_over_lower_id(classifier, rule_service, make_transaction, company_id):
    rule_service.create_rule(company_id, "Generic", MatchType.CONTAINS, "ELECTRICITY", "8300", priority=10)
    specific = rule_service.create_rule(company_id, "Eskom", MatchType.EQUALS, "ESKOM ELECTRICITY", "9900", priority=90)
    txn = make_transaction("ESKOM ELECTRICITY", -800)

    suggestion = classifier.suggest(txn)

    assert suggestion.rule_id == specific.id
    assert suggestion.confidence == 1.0


def test_no_match_returns_none(classifier, rule_service, make_transaction, company_id):
    rule_service.create_rule(company_id, "Salaries", MatchType.CONTAINS, "SALARY", "8100")
    assert classifier.suggest(make_transaction("CARD PURCHASE", -20)) is None


def test_inactive_rules_are_ignored(classifier, rule_service, make_transaction, company_id):
    rule = rule_service.create_rule(company_id, "Salaries", MatchType.CONTAINS, "SALARY", "8100")
    rule_service.deactivate_rule(rule.id)
    assert classifier.suggest(make_transaction("SALARY", -20)) is None


def test_classify_manually_unknown_account(classifier, make_transaction):
    txn = make_transaction("SOMETHING", -20)

    with pytest.raises(errors.UnknownAccountError):
        classifier.classify_manually(txn, "4999")
    assert classifier.db.find_journal_entries_for_transaction(txn.id) == []


def test_classify_manually_blank_account(classifier, make_transaction):
    txn = make_transaction("SOMETHING", -20)

    for code in (None, "", "   "):
        with pytest.raises(errors.UnknownAccountError, match="is required"):
            classifier.classify_manually(txn, code)
    assert classifier.db.find_journal_entries_for_transaction(txn.id) == []


def test_classify_manually_inactive_account(classifier, account_service, make_transaction, company_id):
    account_service.deactivate_account(company_id, "9000")
    txn = make_transaction("STATIONERY", -20)

    with pytest.raises(errors.UnknownAccountError, match="inactive"):
        classifier.classify_manually(txn, "9000")


def test_classify_manually_with_splits_records_first_account(classifier, make_transaction):
    from ledgerflow.domain.entities import SplitLine

    txn = make_transaction("TELKOM AND ESKOM", "-100.00")

    entry = classifier.classify_manually(
        txn, None, splits=[SplitLine("8300", Decimal("60")), SplitLine("8400", Decimal("40"))]
    )

    assert len(entry.lines) == 3
    assert classifier.db.get_transaction(txn.id).classified_account_code == "8300"


def test_reclassify_replaces_lines_of_same_entry(classifier, make_transaction):
    txn = make_transaction("CARD PURCHASE", -250)
    first = classifier.classify_manually(txn, "9000")

    second = classifier.classify_manually(classifier.db.get_transaction(txn.id), "9100")

    assert second.id == first.id
    assert second.reference == first.reference
    assert second.lines[0].account_code == "9100"
    assert classifier.db.get_transaction(txn.id).classified_account_code == "9100"


def test_reclassify_in_closed_period_fails(classifier, period_service, make_transaction, period):
    txn = make_transaction("CARD PURCHASE", -250)
    entry = classifier.classify_manually(txn, "9000")
    period_service.close_period(period.id)

    with pytest.raises(errors.PeriodClosed):
        classifier.classify_manually(classifier.db.get_transaction(txn.id), "9100")

    assert classifier.db.get_journal_entry(entry.id).lines[0].account_code == "9000"
    assert classifier.db.get_transaction(txn.id).classified_account_code == "9000"


def test_reclassify_rejected_when_transaction_has_several_entries(
    classifier, journal_service, make_transaction, period
):
    from ledgerflow.domain.entities import LineSpec
    from ledgerflow.domain.journal_builder import JournalEntryBuilder

    txn = make_transaction("CARD PURCHASE", -250)
    first = classifier.classify_manually(txn, "9000")
    correction = JournalEntryBuilder().build_manual(
        company_id=txn.company_id,
        fiscal_period_id=period.id,
        entry_date=txn.date,
        description="Move part to repairs",
        lines=[
            LineSpec("8700", debit_amount=Decimal("50"), source_transaction_id=txn.id),
            LineSpec("9000", credit_amount=Decimal("50"), source_transaction_id=txn.id),
        ],
    )
    journal_service.post(correction)

    with pytest.raises(errors.ValidationError, match="2 journal entries"):
        classifier.classify_manually(classifier.db.get_transaction(txn.id), "9100")

    assert classifier.db.get_journal_entry(first.id).lines[0].account_code == "9000"
