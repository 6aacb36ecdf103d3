"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain entities stay stable
when the database schema changes.
"""

from ledgerflow.domain import entities as domain
from ledgerflow.database.models import (
    Company as ORMCompany,
    FiscalPeriod as ORMFiscalPeriod,
    Account as ORMAccount,
    BankAccount as ORMBankAccount,
    Transaction as ORMTransaction,
    ClassificationRule as ORMClassificationRule,
    JournalEntry as ORMJournalEntry,
    JournalEntryLine as ORMJournalEntryLine,
)


def company_to_domain(orm_company: ORMCompany) -> domain.Company:
    """Convert SQLAlchemy Company model to domain Company entity."""
    return domain.Company(
        id=orm_company.id,
        name=orm_company.name,
        created_at=orm_company.created_at,
    )


def fiscal_period_to_domain(orm_period: ORMFiscalPeriod) -> domain.FiscalPeriod:
    """Convert SQLAlchemy FiscalPeriod model to domain FiscalPeriod entity."""
    return domain.FiscalPeriod(
        id=orm_period.id,
        company_id=orm_period.company_id,
        name=orm_period.name,
        start_date=orm_period.start_date,
        end_date=orm_period.end_date,
        closed=bool(orm_period.closed),
        created_at=orm_period.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        company_id=orm_account.company_id,
        code=orm_account.code,
        name=orm_account.name,
        active=bool(orm_account.active),
        created_at=orm_account.created_at,
    )


def bank_account_to_domain(orm_bank: ORMBankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_bank.id,
        company_id=orm_bank.company_id,
        name=orm_bank.name,
        bank_name=orm_bank.bank_name,
        clearing_account_code=orm_bank.clearing_account_code,
        created_at=orm_bank.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    running_balance = orm_transaction.running_balance
    return domain.Transaction(
        id=orm_transaction.id,
        company_id=orm_transaction.company_id,
        fiscal_period_id=orm_transaction.fiscal_period_id,
        bank_account_id=orm_transaction.bank_account_id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        debit_amount=domain.to_money(orm_transaction.debit_amount),
        credit_amount=domain.to_money(orm_transaction.credit_amount),
        running_balance=domain.to_money(running_balance) if running_balance is not None else None,
        classified_account_code=orm_transaction.classified_account_code,
        classification_rule_id=orm_transaction.classification_rule_id,
        classified_at=orm_transaction.classified_at,
        imported_at=orm_transaction.imported_at,
    )


def rule_to_domain(orm_rule: ORMClassificationRule) -> domain.ClassificationRule:
    """Convert SQLAlchemy ClassificationRule model to domain ClassificationRule entity."""
    return domain.ClassificationRule(
        id=orm_rule.id,
        company_id=orm_rule.company_id,
        rule_name=orm_rule.rule_name,
        description=orm_rule.description,
        match_type=domain.MatchType(orm_rule.match_type),
        match_value=orm_rule.match_value,
        account_code=orm_rule.account_code,
        priority=orm_rule.priority,
        active=bool(orm_rule.active),
        created_at=orm_rule.created_at,
        updated_at=orm_rule.updated_at,
    )


def journal_line_to_domain(orm_line: ORMJournalEntryLine) -> domain.JournalEntryLine:
    """Convert SQLAlchemy JournalEntryLine model to domain JournalEntryLine entity."""
    return domain.JournalEntryLine(
        id=orm_line.id,
        journal_entry_id=orm_line.journal_entry_id,
        line_number=orm_line.line_number,
        account_code=orm_line.account_code,
        debit_amount=domain.to_money(orm_line.debit_amount),
        credit_amount=domain.to_money(orm_line.credit_amount),
        description=orm_line.description,
        source_transaction_id=orm_line.source_transaction_id,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model (with lines) to domain JournalEntry entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        company_id=orm_entry.company_id,
        fiscal_period_id=orm_entry.fiscal_period_id,
        reference=orm_entry.reference,
        entry_date=orm_entry.entry_date,
        description=orm_entry.description,
        created_by=orm_entry.created_by,
        created_at=orm_entry.created_at,
        lines=tuple(journal_line_to_domain(line) for line in orm_entry.lines),
        status=domain.EntryStatus.POSTED,
    )


def journal_line_to_orm(line: domain.JournalEntryLine, line_number: int) -> ORMJournalEntryLine:
    """Convert a domain JournalEntryLine to a new SQLAlchemy row."""
    return ORMJournalEntryLine(
        line_number=line_number,
        account_code=line.account_code,
        debit_amount=line.debit_amount,
        credit_amount=line.credit_amount,
        description=line.description,
        source_transaction_id=line.source_transaction_id,
    )
