"""Fiscal period commands."""

import click
from ledgerflow.domain.period import FiscalPeriodService
from ledgerflow.cli.company_resolution import company_option, resolve_company_or_exit
from ledgerflow.cli.date_filters import resolve_cli_date_range
from ledgerflow.cli.error_handling import handle_domain_error


@click.group("period")
def period_group():
    """Manage fiscal periods."""
    pass


@period_group.command("create")
@company_option
@click.argument("name", metavar="PERIOD_NAME")
@click.option("--start-date", help="First day of the period")
@click.option("--end-date", help="Last day of the period")
@click.option("--tax-year", type=int, help="SA tax year (1 March of the prior year to end of February)")
@click.pass_context
def create_period(ctx, company: str, name: str, start_date: str | None, end_date: str | None, tax_year: int | None):
    """Create an open fiscal period.

    Examples:
        ledgerflow period create --company 1 FY2025 --tax-year 2025
        ledgerflow period create --company 1 "Q1 2025" --start-date 2025-03-01 --end-date 2025-05-31
    """
    company_id = resolve_company_or_exit(ctx, company)
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, tax_year=tax_year)
    if start is None or end is None:
        click.echo("Error: Provide --tax-year or both --start-date and --end-date.", err=True)
        ctx.exit(1)

    service = FiscalPeriodService(ctx.obj["db"])
    try:
        period_id = service.create_period(company_id, name, start, end)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created fiscal period '{name}' (ID: {period_id}) from {start} to {end}")


@period_group.command("list")
@company_option
@click.pass_context
def list_periods(ctx, company: str):
    """List fiscal periods of a company."""
    company_id = resolve_company_or_exit(ctx, company)
    periods = FiscalPeriodService(ctx.obj["db"]).list_periods(company_id)
    if not periods:
        click.echo("No fiscal periods found.")
        return

    click.echo("\nFiscal periods:")
    click.echo("-" * 70)
    for period in periods:
        state = "closed" if period.closed else "open"
        click.echo(f"ID: {period.id:3d} | {period.name:15s} | {period.start_date} to {period.end_date} | {state}")


@period_group.command("close")
@click.argument("period_id", type=int)
@click.pass_context
def close_period(ctx, period_id: int):
    """Close a fiscal period. Its journal entries become immutable."""
    service = FiscalPeriodService(ctx.obj["db"])
    try:
        service.close_period(period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Fiscal period {period_id} closed")


@period_group.command("reopen")
@click.argument("period_id", type=int)
@click.pass_context
def reopen_period(ctx, period_id: int):
    """Reopen a closed fiscal period."""
    service = FiscalPeriodService(ctx.obj["db"])
    try:
        service.reopen_period(period_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Fiscal period {period_id} reopened")


def register_commands(cli):
    """Register period commands with main CLI."""
    cli.add_command(period_group)
