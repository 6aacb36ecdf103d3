"""Bank account commands."""

import click
from ledgerflow.domain.account import DEFAULT_BANK_ACCOUNT_CODE
from ledgerflow.domain.bank_account import BankAccountService
from ledgerflow.cli.company_resolution import company_option, resolve_company_or_exit
from ledgerflow.cli.error_handling import handle_domain_error


@click.group("bank")
def bank_group():
    """Manage bank accounts."""
    pass


@bank_group.command("create")
@company_option
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--bank", help="Bank name (defaults to account name if not provided)")
@click.option(
    "--clearing-account",
    default=DEFAULT_BANK_ACCOUNT_CODE,
    show_default=True,
    help="Ledger asset account that mirrors this bank account",
)
@click.pass_context
def create_bank_account(ctx, company: str, name: str, bank: str | None, clearing_account: str):
    """Create a bank account.

    Examples:
        ledgerflow bank create --company 1 "FNB Cheque" --bank FNB
        ledgerflow bank create --company 1 "Savings" --clearing-account 1101
    """
    company_id = resolve_company_or_exit(ctx, company)
    service = BankAccountService(ctx.obj["db"])
    bank_name = bank if bank is not None else name
    try:
        bank_account_id = service.create_bank_account(
            company_id, name=name, bank_name=bank_name, clearing_account_code=clearing_account
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created bank account '{name}' (ID: {bank_account_id}) clearing to {clearing_account}")


@bank_group.command("list")
@company_option
@click.pass_context
def list_bank_accounts(ctx, company: str):
    """List bank accounts."""
    company_id = resolve_company_or_exit(ctx, company)
    bank_accounts = BankAccountService(ctx.obj["db"]).list_bank_accounts(company_id)
    if not bank_accounts:
        click.echo("No bank accounts found.")
        return

    click.echo("\nBank accounts:")
    click.echo("-" * 60)
    for acc in bank_accounts:
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | Bank: {acc.bank_name:15s} | Ledger: {acc.clearing_account_code}")


def register_commands(cli):
    """Register bank commands with main CLI."""
    cli.add_command(bank_group)
