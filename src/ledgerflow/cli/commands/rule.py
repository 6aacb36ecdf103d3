"""Classification rule commands."""

import click
from ledgerflow.domain.entities import MatchType
from ledgerflow.domain.rules import DEFAULT_PRIORITY, RuleService
from ledgerflow.cli.company_resolution import company_option, resolve_company_or_exit
from ledgerflow.cli.error_handling import handle_domain_error

MATCH_TYPES = [m.value for m in MatchType]


@click.group("rule")
def rule_group():
    """Manage classification rules."""
    pass


@rule_group.command("create")
@company_option
@click.argument("name", metavar="RULE_NAME")
@click.option(
    "--match-type",
    type=click.Choice(MATCH_TYPES, case_sensitive=False),
    default=MatchType.CONTAINS.value,
    show_default=True,
)
@click.option("--match", "match_value", required=True, help="Text or regular expression to match")
@click.option("--account", "account_code", required=True, help="Account code to classify into")
@click.option("--priority", type=int, default=DEFAULT_PRIORITY, show_default=True, help="Higher runs first")
@click.option("--description", help="Rule description")
@click.pass_context
def create_rule(
    ctx,
    company: str,
    name: str,
    match_type: str,
    match_value: str,
    account_code: str,
    priority: int,
    description: str | None,
):
    """Create a classification rule.

    Examples:
        ledgerflow rule create --company 1 "Salaries" --match SALARY --account 8100 --priority 60
        ledgerflow rule create --company 1 "Eskom" --match-type EQUALS --match "ESKOM ELECTRICITY" --account 8300
    """
    company_id = resolve_company_or_exit(ctx, company)
    service = RuleService(ctx.obj["db"])
    try:
        rule = service.create_rule(
            company_id=company_id,
            rule_name=name,
            match_type=match_type,
            match_value=match_value,
            account_code=account_code,
            priority=priority,
            description=description,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created rule '{rule.rule_name}' (ID: {rule.id})")


@rule_group.command("list")
@company_option
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive rules")
@click.pass_context
def list_rules(ctx, company: str, include_inactive: bool):
    """List rules in evaluation order."""
    company_id = resolve_company_or_exit(ctx, company)
    rules = RuleService(ctx.obj["db"]).list_rules(company_id, include_inactive=include_inactive)
    if not rules:
        click.echo("No rules found.")
        return

    click.echo("\nRules (evaluation order):")
    click.echo("-" * 80)
    for rule in rules:
        flag = "" if rule.active else " (inactive)"
        click.echo(
            f"ID: {rule.id:3d} | P{rule.priority:<4d}| {rule.rule_name:20s} | "
            f"{rule.match_type.value:11s} {rule.match_value!r} -> {rule.account_code}{flag}"
        )


@rule_group.command("deactivate")
@click.argument("rule_id", type=int)
@click.pass_context
def deactivate_rule(ctx, rule_id: int):
    """Deactivate a rule."""
    try:
        RuleService(ctx.obj["db"]).deactivate_rule(rule_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Rule {rule_id} deactivated")


@rule_group.command("delete")
@click.argument("rule_id", type=int)
@click.pass_context
def delete_rule(ctx, rule_id: int):
    """Delete a rule that never classified a transaction."""
    try:
        RuleService(ctx.obj["db"]).delete_rule(rule_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Rule {rule_id} deleted")


@rule_group.command("from-transaction")
@click.argument("transaction_id", type=int)
@click.argument("account_code")
@click.option(
    "--match-type",
    type=click.Choice(MATCH_TYPES, case_sensitive=False),
    default=MatchType.CONTAINS.value,
    show_default=True,
)
@click.option("--priority", type=int, default=DEFAULT_PRIORITY, show_default=True)
@click.option("--name", "rule_name", help="Rule name (derived from the description if omitted)")
@click.pass_context
def rule_from_transaction(
    ctx, transaction_id: int, account_code: str, match_type: str, priority: int, rule_name: str | None
):
    """Generate a rule from a transaction's description.

    Examples:
        ledgerflow rule from-transaction 42 8400
    """
    try:
        rule = RuleService(ctx.obj["db"]).generate_rule_from_transaction(
            transaction_id, account_code, match_type=match_type, priority=priority, rule_name=rule_name
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Created rule '{rule.rule_name}' (ID: {rule.id}): {rule.match_type.value} "
        f"{rule.match_value!r} -> {rule.account_code}"
    )


@rule_group.command("init")
@company_option
@click.pass_context
def init_rules(ctx, company: str):
    """Install the standard classification rules."""
    company_id = resolve_company_or_exit(ctx, company)
    try:
        created = RuleService(ctx.obj["db"]).install_standard_rules(company_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created {created} classification rules.")


def register_commands(cli):
    """Register rule commands with main CLI."""
    cli.add_command(rule_group)
