"""Classification commands."""

import click
from ledgerflow.domain.classification import ClassificationService
from ledgerflow.domain.entities import OutcomeStatus, SplitLine
from ledgerflow.cli.company_resolution import company_option, resolve_company_or_exit
from ledgerflow.cli.error_handling import handle_domain_error
from ledgerflow.utils.amount_parser import parse_amount


def parse_split(ctx, value: str) -> SplitLine:
    """Parse a CODE=AMOUNT split option."""
    code, sep, amount = value.partition("=")
    if not sep or not code.strip():
        click.echo(f"Error: Invalid split '{value}'. Use CODE=AMOUNT, e.g. 8300=600.00", err=True)
        ctx.exit(1)
    try:
        return SplitLine(account_code=code.strip(), amount=parse_amount(amount))
    except ValueError as e:
        click.echo(f"Error: Invalid split amount in '{value}': {e}", err=True)
        ctx.exit(1)


@click.command("suggest")
@click.argument("transaction_id", type=int)
@click.option("--all", "show_all", is_flag=True, help="Show every matching rule")
@click.pass_context
def suggest(ctx, transaction_id: int, show_all: bool):
    """Suggest an account for a transaction."""
    service = ClassificationService(ctx.obj["db"])
    try:
        suggestion = service.suggest(transaction_id)
        candidates = service.candidates(transaction_id) if show_all else []
    except ValueError as e:
        handle_domain_error(ctx, e)

    if suggestion is None:
        click.echo(f"No rule matches transaction {transaction_id}.")
        return

    click.echo(
        f"Suggested account: {suggestion.account_code} {suggestion.account_name} "
        f"(confidence {suggestion.confidence:.2f}, rule '{suggestion.rule_name}')"
    )
    if show_all:
        click.echo("\nMatching rules:")
        for rule in candidates:
            click.echo(f"  {rule.id:3d} P{rule.priority:<4d} {rule.match_type.value:11s} {rule.match_value!r} -> {rule.account_code}")


@click.command("classify")
@click.argument("transaction_ids", nargs=-1, required=True, type=int)
@click.option("--account", "account_code", help="Account code (optional with --split)")
@click.option("--split", "splits", multiple=True, help="Split line CODE=AMOUNT (repeatable)")
@click.option("--user", "created_by", default="SYSTEM", show_default=True, help="Recorded as entry author")
@click.pass_context
def classify(ctx, transaction_ids: tuple[int, ...], account_code: str | None, splits: tuple[str, ...], created_by: str):
    """Classify one or more transactions and post their journal entries.

    Examples:
        ledgerflow classify 12 --account 8100
        ledgerflow classify 3 4 5 --account 9600
        ledgerflow classify 7 --split 8300=600 --split 8400=400
    """
    if not account_code and not splits:
        click.echo("Error: Provide --account or at least one --split", err=True)
        ctx.exit(1)
    if splits and len(transaction_ids) > 1:
        click.echo("Error: --split can only be used with a single transaction", err=True)
        ctx.exit(1)

    split_lines = [parse_split(ctx, value) for value in splits]
    service = ClassificationService(ctx.obj["db"])

    unique_ids = list(dict.fromkeys(transaction_ids))
    failures = []
    for txn_id in unique_ids:
        try:
            entry = service.classify_transaction(txn_id, account_code, splits=split_lines or None, created_by=created_by)
            click.echo(f"Transaction {txn_id} classified, journal entry {entry.reference}")
        except ValueError as e:
            failures.append((txn_id, str(e)))
            if len(unique_ids) > 1:
                click.echo(f"✗ Transaction {txn_id}: {e}")

    if len(unique_ids) > 1:
        click.echo(f"\nResults: {len(unique_ids) - len(failures)} succeeded, {len(failures)} failed")
        if failures:
            ctx.exit(1)
    elif failures:
        click.echo(f"Error: {failures[0][1]}", err=True)
        ctx.exit(1)


@click.command("auto-classify")
@company_option
@click.option("--period", "period_id", type=int, help="Limit to one fiscal period")
@click.option("--verbose", "-v", is_flag=True, help="Show the outcome of every transaction")
@click.pass_context
def auto_classify(ctx, company: str, period_id: int | None, verbose: bool):
    """Run the active rules over all unclassified transactions."""
    company_id = resolve_company_or_exit(ctx, company)
    service = ClassificationService(ctx.obj["db"])
    try:
        result = service.auto_classify_transactions(company_id, fiscal_period_id=period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    for outcome in result.outcomes:
        if outcome.status == OutcomeStatus.FAILED:
            click.echo(f"✗ Transaction {outcome.transaction_id}: {outcome.error}")
        elif verbose and outcome.status == OutcomeStatus.CLASSIFIED:
            click.echo(
                f"✓ Transaction {outcome.transaction_id} -> {outcome.account_code} "
                f"(confidence {outcome.confidence:.2f})"
            )
        elif verbose:
            click.echo(f"- Transaction {outcome.transaction_id}: no matching rule")

    click.echo(
        f"\nResults: {result.classified} classified, {result.unmatched} unmatched, {result.failed} failed"
    )


@click.command("unclassified")
@company_option
@click.option("--period", "period_id", type=int, help="Limit to one fiscal period")
@click.pass_context
def list_unclassified(ctx, company: str, period_id: int | None):
    """List unclassified transactions with suggestions."""
    company_id = resolve_company_or_exit(ctx, company)
    service = ClassificationService(ctx.obj["db"])
    try:
        items = service.get_unclassified_transactions(company_id, period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not items:
        click.echo("No unclassified transactions.")
        return

    click.echo(f"{'ID':>5} | {'Date':10} | {'Amount':>12} | {'Description':35} | Suggestion")
    click.echo("-" * 90)
    for item in items:
        txn = item.transaction
        signed = -txn.debit_amount if txn.is_money_out else txn.credit_amount
        suggestion = item.suggestion
        hint = f"{suggestion.account_code} ({suggestion.confidence:.2f})" if suggestion else "-"
        click.echo(f"{txn.id:5d} | {txn.date} | {signed:12,.2f} | {txn.description[:35]:35} | {hint}")


@click.command("stats")
@company_option
@click.option("--period", "period_id", type=int, help="Limit to one fiscal period")
@click.pass_context
def stats(ctx, company: str, period_id: int | None):
    """Show classification progress."""
    company_id = resolve_company_or_exit(ctx, company)
    try:
        result = ClassificationService(ctx.obj["db"]).get_classification_stats(company_id, period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Total transactions: {result.total}")
    click.echo(f"Classified:         {result.classified}")
    click.echo(f"Unclassified:       {result.unclassified}")
    click.echo(f"Classification rate: {result.rate:.1f}%")


@click.command("regenerate")
@company_option
@click.option("--period", "period_id", type=int, help="Limit to one fiscal period")
@click.pass_context
def regenerate(ctx, company: str, period_id: int | None):
    """Rewrite journal entries of rule-classified transactions after rule changes."""
    company_id = resolve_company_or_exit(ctx, company)
    try:
        result = ClassificationService(ctx.obj["db"]).regenerate_journal_entries(company_id, period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    for outcome in result.outcomes:
        if outcome.status == OutcomeStatus.FAILED:
            click.echo(f"✗ Transaction {outcome.transaction_id}: {outcome.error}")
    click.echo(f"Regenerated {result.classified} journal entries, {result.failed} failed")


def register_commands(cli):
    """Register classification commands with main CLI."""
    cli.add_command(suggest)
    cli.add_command(classify)
    cli.add_command(auto_classify)
    cli.add_command(list_unclassified)
    cli.add_command(stats)
    cli.add_command(regenerate)
