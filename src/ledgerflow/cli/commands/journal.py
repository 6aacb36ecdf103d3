"""Journal commands."""

import click
from decimal import Decimal
from ledgerflow.domain.entities import JournalFilters, LineSpec
from ledgerflow.domain.journal import JournalService
from ledgerflow.cli.company_resolution import company_option, resolve_company_or_exit
from ledgerflow.cli.date_filters import resolve_cli_date_range
from ledgerflow.cli.error_handling import handle_domain_error
from ledgerflow.utils.amount_parser import parse_amount


def parse_line(ctx, value: str, debit: bool) -> LineSpec:
    """Parse a CODE=AMOUNT debit or credit option."""
    code, sep, amount = value.partition("=")
    if not sep or not code.strip():
        click.echo(f"Error: Invalid line '{value}'. Use CODE=AMOUNT, e.g. 1100=5000", err=True)
        ctx.exit(1)
    try:
        parsed = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount in '{value}': {e}", err=True)
        ctx.exit(1)
    if debit:
        return LineSpec(account_code=code.strip(), debit_amount=parsed)
    return LineSpec(account_code=code.strip(), credit_amount=parsed)


def echo_entry(entry) -> None:
    click.echo(f"Journal entry {entry.id} | {entry.reference} | {entry.entry_date} | {entry.description}")
    click.echo(f"Created by {entry.created_by} at {entry.created_at:%Y-%m-%d %H:%M}")
    click.echo("-" * 70)
    for line in entry.lines:
        debit = f"{line.debit_amount:,.2f}" if line.debit_amount else ""
        credit = f"{line.credit_amount:,.2f}" if line.credit_amount else ""
        source = f" [txn {line.source_transaction_id}]" if line.source_transaction_id else ""
        click.echo(f"{line.account_code:6s} {debit:>14s} {credit:>14s}  {(line.description or '')[:25]}{source}")
    click.echo("-" * 70)
    click.echo(f"{'Total':6s} {entry.total_debits:>14,.2f} {entry.total_credits:>14,.2f}")


@click.group("journal")
def journal_group():
    """View and maintain journal entries."""
    pass


@journal_group.command("list")
@company_option
@click.option("--period", "period_id", type=int, help="Fiscal period ID")
@click.option("--account", "account_code", help="Only entries touching this account")
@click.option("--start-date", help="Start date")
@click.option("--end-date", help="End date")
@click.option("--reference", "reference_prefix", help="Reference prefix (e.g. OB-)")
@click.option("--transaction", "transaction_id", type=int, help="Only entries for this transaction")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--page-size", type=int, default=50, show_default=True)
@click.pass_context
def list_entries(
    ctx,
    company: str,
    period_id: int | None,
    account_code: str | None,
    start_date: str | None,
    end_date: str | None,
    reference_prefix: str | None,
    transaction_id: int | None,
    page: int,
    page_size: int,
):
    """List journal entries (audit trail)."""
    company_id = resolve_company_or_exit(ctx, company)
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date)
    filters = JournalFilters(
        account_code=account_code,
        start_date=start,
        end_date=end,
        reference_prefix=reference_prefix,
        source_transaction_id=transaction_id,
    )
    try:
        result = JournalService(ctx.obj["db"]).list_journal_entries(
            company_id, fiscal_period_id=period_id, filters=filters, page=page, page_size=page_size
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not result.items:
        click.echo("No journal entries found.")
        return

    click.echo(f"{'ID':>5} | {'Reference':12} | {'Date':10} | {'Amount':>14} | Description")
    click.echo("-" * 80)
    for entry in result.items:
        click.echo(
            f"{entry.id:5d} | {entry.reference:12} | {entry.entry_date} | "
            f"{entry.total_debits:14,.2f} | {entry.description[:35]}"
        )
    click.echo(f"\nPage {result.page} of {result.pages} ({result.total} entries)")


@journal_group.command("show")
@click.argument("entry_id", type=int)
@click.pass_context
def show_entry(ctx, entry_id: int):
    """Show a journal entry with its lines."""
    try:
        entry = JournalService(ctx.obj["db"]).get_journal_entry(entry_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    echo_entry(entry)


@journal_group.command("opening-balance")
@company_option
@click.option("--period", "period_id", required=True, type=int, help="Fiscal period ID")
@click.option("--debit", "debits", multiple=True, help="Debit line CODE=AMOUNT (repeatable)")
@click.option("--credit", "credits", multiple=True, help="Credit line CODE=AMOUNT (repeatable)")
@click.pass_context
def opening_balance(ctx, company: str, period_id: int, debits: tuple[str, ...], credits: tuple[str, ...]):
    """Post the opening balance entry (OB-<period>) of a fiscal period.

    Examples:
        ledgerflow journal opening-balance --company 1 --period 1 --debit 1100=25000 --credit 3200=25000
    """
    company_id = resolve_company_or_exit(ctx, company)
    lines = [parse_line(ctx, v, debit=True) for v in debits] + [parse_line(ctx, v, debit=False) for v in credits]
    try:
        entry = JournalService(ctx.obj["db"]).create_opening_balance(company_id, period_id, lines)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Posted opening balance entry {entry.reference} for R{entry.total_debits:,.2f}")


@journal_group.command("delete")
@click.argument("entry_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_entry(ctx, entry_id: int, yes: bool):
    """Delete a journal entry in an open period.

    Transactions left without an entry become unclassified.
    """
    if not yes and not click.confirm(f"Delete journal entry {entry_id}?"):
        click.echo("Cancelled.")
        return
    try:
        JournalService(ctx.obj["db"]).delete_entry(entry_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Journal entry {entry_id} deleted")


@journal_group.command("trial-balance")
@company_option
@click.option("--period", "period_id", required=True, type=int, help="Fiscal period ID")
@click.pass_context
def trial_balance(ctx, company: str, period_id: int):
    """Show per-account totals for a fiscal period."""
    company_id = resolve_company_or_exit(ctx, company)
    rows = JournalService(ctx.obj["db"]).trial_balance(company_id, period_id)
    if not rows:
        click.echo("No postings in this period.")
        return

    click.echo(f"{'Code':6} | {'Account':30} | {'Debits':>14} | {'Credits':>14}")
    click.echo("-" * 75)
    total_debits = total_credits = Decimal("0")
    for row in rows:
        click.echo(f"{row.account_code:6} | {row.account_name[:30]:30} | {row.total_debits:14,.2f} | {row.total_credits:14,.2f}")
        total_debits += row.total_debits
        total_credits += row.total_credits
    click.echo("-" * 75)
    click.echo(f"{'':6} | {'Total':30} | {total_debits:14,.2f} | {total_credits:14,.2f}")


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group)
