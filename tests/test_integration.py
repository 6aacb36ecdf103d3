"""Integration tests for end-to-end workflows."""

import re

import pytest
from ledgerflow.cli.main import cli


@pytest.fixture
def invoke(cli_runner, temp_db):
    def _invoke(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    return _invoke


def _id_from(output: str, pattern: str = r"ID: (\d+)") -> str:
    match = re.search(pattern, output)
    assert match, output
    return match.group(1)


def test_full_workflow(invoke, monkeypatch):
    """Company, period, chart and rules, then add, classify, review and close."""
    result = invoke("company", "create", "Karoo Farms")
    assert result.exit_code == 0
    company = _id_from(result.output)
    monkeypatch.setenv("LEDGERFLOW_COMPANY", company)

    result = invoke("period", "create", "FY2025", "--tax-year", "2025")
    assert result.exit_code == 0
    assert "from 2024-03-01 to 2025-02-28" in result.output
    period = _id_from(result.output)

    result = invoke("init-accounts", "--with-rules")
    assert result.exit_code == 0
    assert "accounts." in result.output
    assert "classification rules." in result.output

    result = invoke("bank", "create", "FNB Cheque", "--bank", "FNB")
    assert result.exit_code == 0
    bank = _id_from(result.output)

    transactions = [
        ("2024-06-25", "-15000", "MONTHLY SALARY PAYMENT"),
        ("2024-06-26", "-1250.40", "ESKOM ELECTRICITY"),
        ("2024-06-27", "-35", "MONTHLY SERVICE FEE"),
        ("2024-06-28", "8000", "PAYMENT FROM CLIENT"),
    ]
    txn_ids = []
    for day, amount, description in transactions:
        result = invoke(
            "add", "--period", period, "--date", day, "--amount", amount,
            "--description", description, "--bank-account", bank,
        )
        assert result.exit_code == 0, result.output
        txn_ids.append(_id_from(result.output, r"Created transaction (\d+)"))

    result = invoke("suggest", txn_ids[0])
    assert result.exit_code == 0
    assert "8100" in result.output

    result = invoke("auto-classify", "--period", period)
    assert result.exit_code == 0
    assert "Results: 3 classified, 1 unmatched, 0 failed" in result.output

    result = invoke("unclassified")
    assert result.exit_code == 0
    assert "PAYMENT FROM CLIENT" in result.output

    result = invoke("classify", txn_ids[3], "--account", "4000")
    assert result.exit_code == 0
    assert f"Transaction {txn_ids[3]} classified, journal entry JE-000004" in result.output

    result = invoke("stats", "--period", period)
    assert "Classification rate: 100.0%" in result.output

    result = invoke("journal", "opening-balance", "--period", period, "--debit", "1100=25000", "--credit", "3200=25000")
    assert result.exit_code == 0
    assert f"OB-{period}" in result.output

    result = invoke("journal", "list", "--period", period)
    assert result.exit_code == 0
    assert "(5 entries)" in result.output

    result = invoke("journal", "trial-balance", "--period", period)
    assert result.exit_code == 0
    assert "Employee Costs" in result.output
    assert "Opening Balance Equity" in result.output

    result = invoke("period", "close", period)
    assert result.exit_code == 0

    result = invoke("classify", txn_ids[3], "--account", "4100")
    assert result.exit_code == 1
    assert "closed" in result.output.lower()


def test_split_and_rule_from_transaction(invoke, monkeypatch):
    company = _id_from(invoke("company", "create", "Acme").output)
    monkeypatch.setenv("LEDGERFLOW_COMPANY", company)
    period = _id_from(invoke("period", "create", "FY2025", "--start-date", "2024-03-01", "--end-date", "2025-02-28").output)
    invoke("init-accounts")

    result = invoke("add", "--period", period, "--date", "2024-05-01", "--amount", "-100", "--description", "MAKRO SANDTON 1234")
    txn = _id_from(result.output, r"Created transaction (\d+)")

    result = invoke("classify", txn, "--split", "9000=60", "--split", "8700=30")
    assert result.exit_code == 1
    assert "Split" in result.output or "split" in result.output

    result = invoke("classify", txn, "--split", "9000=60", "--split", "8700=40")
    assert result.exit_code == 0

    result = invoke("rule", "from-transaction", txn, "9000")
    assert result.exit_code == 0
    assert "'MAKRO SANDTON'" in result.output

    result = invoke("rule", "list")
    assert "MAKRO SANDTON" in result.output


def test_unknown_transaction_reports_error(invoke):
    result = invoke("suggest", "999")

    assert result.exit_code == 1
    assert "Error:" in result.output
