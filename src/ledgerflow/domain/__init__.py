"""Domain layer for ledgerflow application."""

# Services are imported lazily: the database layer imports domain entities
# and errors, and the services import the database layer.
_SERVICES = {
    "CompanyService": "ledgerflow.domain.company",
    "FiscalPeriodService": "ledgerflow.domain.period",
    "AccountService": "ledgerflow.domain.account",
    "BankAccountService": "ledgerflow.domain.bank_account",
    "TransactionService": "ledgerflow.domain.transaction",
    "RuleService": "ledgerflow.domain.rules",
    "Classifier": "ledgerflow.domain.classifier",
    "JournalEntryBuilder": "ledgerflow.domain.journal_builder",
    "LedgerChecker": "ledgerflow.domain.ledger_checker",
    "JournalService": "ledgerflow.domain.journal",
    "ClassificationService": "ledgerflow.domain.classification",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
