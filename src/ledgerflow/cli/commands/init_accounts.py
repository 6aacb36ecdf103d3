"""Initialize the default chart of accounts."""

import click
from ledgerflow.domain.account import AccountService
from ledgerflow.domain.rules import RuleService
from ledgerflow.cli.company_resolution import company_option, resolve_company_or_exit
from ledgerflow.cli.error_handling import handle_domain_error


@click.command("init-accounts")
@company_option
@click.option("--with-rules", is_flag=True, help="Also install the standard classification rules")
@click.pass_context
def init_accounts(ctx, company: str, with_rules: bool):
    """Initialize a company with the default South African SME chart of accounts.

    Existing account codes are left untouched.
    """
    company_id = resolve_company_or_exit(ctx, company)
    db = ctx.obj["db"]

    try:
        created = AccountService(db).install_default_chart(company_id)
        click.echo(f"Created {created} accounts.")
        if with_rules:
            rules_created = RuleService(db).install_standard_rules(company_id)
            click.echo(f"Created {rules_created} classification rules.")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register init-accounts command with main CLI."""
    cli.add_command(init_accounts)
