"""Add transaction command."""

import click
from decimal import Decimal
from ledgerflow.domain.transaction import TransactionService
from ledgerflow.cli.company_resolution import company_option, resolve_company_or_exit
from ledgerflow.cli.date_filters import parse_date_or_exit
from ledgerflow.cli.error_handling import handle_domain_error
from ledgerflow.utils.amount_parser import parse_amount


@click.command("add")
@company_option
@click.option("--period", "period_id", required=True, type=int, help="Fiscal period ID")
@click.option("--date", required=True, help="Transaction date (YYYY-MM-DD, DD/MM/YYYY, 'today', ...)")
@click.option(
    "--amount",
    required=True,
    help="Amount; negative (or in parentheses) for money out, positive for money in",
)
@click.option("--description", required=True, help="Statement description")
@click.option("--bank-account", type=int, help="Bank account ID")
@click.option("--balance", help="Statement running balance")
@click.pass_context
def add_transaction(
    ctx,
    company: str,
    period_id: int,
    date: str,
    amount: str,
    description: str,
    bank_account: int | None,
    balance: str | None,
):
    """Add a bank transaction manually.

    Examples:
        ledgerflow add --company 1 --period 1 --date 2025-03-25 --amount -15000 --description "MONTHLY SALARY PAYMENT"
        ledgerflow add --company 1 --period 1 --date 01/04/2025 --amount "R 2 500,00" --description "PAYMENT FROM CLIENT"
    """
    company_id = resolve_company_or_exit(ctx, company)
    txn_date = parse_date_or_exit(ctx, date)

    try:
        txn_amount = parse_amount(amount)
        running_balance = parse_amount(balance) if balance else None
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    debit_amount = -txn_amount if txn_amount < 0 else Decimal("0")
    credit_amount = txn_amount if txn_amount > 0 else Decimal("0")

    service = TransactionService(ctx.obj["db"])
    try:
        transaction_id = service.create_transaction(
            company_id=company_id,
            fiscal_period_id=period_id,
            date=txn_date,
            description=description,
            debit_amount=debit_amount,
            credit_amount=credit_amount,
            bank_account_id=bank_account,
            running_balance=running_balance,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: R{txn_amount:,.2f}")
    click.echo(f"  Description: {description}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
