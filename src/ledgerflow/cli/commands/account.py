"""Chart of accounts commands."""

import click
from ledgerflow.domain.account import AccountService
from ledgerflow.cli.company_resolution import company_option, resolve_company_or_exit
from ledgerflow.cli.error_handling import handle_domain_error


@click.group("account")
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@company_option
@click.argument("code", metavar="CODE")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.pass_context
def create_account(ctx, company: str, code: str, name: str):
    """Create a chart-of-accounts entry.

    The leading digit of CODE sets the category: 1 asset, 2 liability,
    3 equity, 4-6 income, 7-9 expense.

    Examples:
        ledgerflow account create --company 1 8250 "Storage Rental"
    """
    company_id = resolve_company_or_exit(ctx, company)
    service = AccountService(ctx.obj["db"])
    try:
        service.create_account(company_id, code, name)
    except ValueError as e:
        handle_domain_error(ctx, e)
    account = service.get_account(company_id, code.strip())
    click.echo(f"Created account {account.code} '{account.name}' ({account.category.value}, {account.normal_side.value})")


@account_group.command("list")
@company_option
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive accounts")
@click.pass_context
def list_accounts(ctx, company: str, include_inactive: bool):
    """List accounts ordered by code."""
    company_id = resolve_company_or_exit(ctx, company)
    accounts = AccountService(ctx.obj["db"]).list_accounts(company_id, include_inactive=include_inactive)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for acc in accounts:
        flag = "" if acc.active else " (inactive)"
        click.echo(f"{acc.code:6s} | {acc.name:32s} | {acc.category.value:9s} | {acc.normal_side.value}{flag}")


@account_group.command("deactivate")
@company_option
@click.argument("code", metavar="CODE")
@click.pass_context
def deactivate_account(ctx, company: str, code: str):
    """Deactivate an account so it receives no new postings."""
    company_id = resolve_company_or_exit(ctx, company)
    try:
        AccountService(ctx.obj["db"]).deactivate_account(company_id, code)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Account {code} deactivated")


@account_group.command("activate")
@company_option
@click.argument("code", metavar="CODE")
@click.pass_context
def activate_account(ctx, company: str, code: str):
    """Reactivate an account."""
    company_id = resolve_company_or_exit(ctx, company)
    try:
        AccountService(ctx.obj["db"]).activate_account(company_id, code)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Account {code} activated")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group)
